"""Command-line options of the embedded mode, and the usage printers.

Parsing never exits the process: argparse errors are turned into
:class:`~sql_client.exceptions.InvalidOptionsError` so that the CLI
error boundary reports them like every other client error.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from typing import NoReturn

from sql_client.cli.console import out
from sql_client.core.models import FILE_FLAGS, MODE_EMBEDDED, MODE_GATEWAY, UPDATE_FLAGS, ExecutionOptions
from sql_client.exceptions import InvalidOptionsError

PROG: str = "sql-client"

# Python bridge flags → session configuration keys.
PYTHON_CONFIG_KEYS: dict[str, str] = {
    "py_files": "python.files",
    "py_executable": "python.executable",
    "py_requirements": "python.requirements",
    "py_archives": "python.archives",
}


class _OptionsParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of calling ``sys.exit``."""

    def error(self, message: str) -> NoReturn:
        raise InvalidOptionsError(
            f"Could not read from command line: {message}",
            hint=f"Run '{PROG} {MODE_EMBEDDED} --help' to list the available options.",
        )


def build_embedded_parser() -> argparse.ArgumentParser:
    """Construct the parser for the options following ``embedded``."""
    parser = _OptionsParser(
        prog=f"{PROG} {MODE_EMBEDDED}",
        description="Submit SQL statements from the local machine.",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "-h", "--help",
        dest="is_print_help",
        action="store_true",
        help="Show the help message with descriptions of all options.",
    )
    parser.add_argument(
        "-s", "--session",
        dest="session_id",
        metavar="<session identifier>",
        help="The identifier for a session. 'default' is the default identifier.",
    )
    parser.add_argument(
        "-e", "--environment",
        metavar="<environment file>",
        help="The environment properties to be imported into the session. "
        "It might overwrite default environment properties.",
    )
    parser.add_argument(
        "-d", "--defaults",
        metavar="<environment file>",
        help="The environment properties with which every new session is initialized. "
        "Properties might be overwritten by session properties.",
    )
    parser.add_argument(
        "-j", "--jar",
        dest="jars",
        action="append",
        metavar="<JAR file>",
        help="A JAR file to be imported into the session. Repeat the option for more files.",
    )
    parser.add_argument(
        "-l", "--library",
        dest="library_dirs",
        action="append",
        metavar="<JAR directory>",
        help="A directory with JAR files to be imported into the session. "
        "Repeat the option for more directories.",
    )
    parser.add_argument(
        "-hist", "--history",
        dest="history_file_path",
        metavar="<History file path>",
        help="The file which you want to save the command history into. If not specified, "
        "we will auto-generate one under your user's home directory.",
    )
    parser.add_argument(
        *UPDATE_FLAGS,
        dest="update_statement",
        metavar="<SQL update statement>",
        help="Deprecated. Experimental: SQL update statement that is executed immediately "
        f"after the session has been started. Use {FILE_FLAGS[1]} instead.",
    )
    parser.add_argument(
        *FILE_FLAGS,
        dest="sql_file",
        metavar="<script file>",
        help="Script file that should be executed. In this mode, the client will not "
        "open an interactive terminal.",
    )
    parser.add_argument(
        "-pyfs", "--pyFiles",
        dest="py_files",
        metavar="<pythonFiles>",
        help="Attach custom files for the Python UDF worker, comma separated.",
    )
    parser.add_argument(
        "-pyexec", "--pyExecutable",
        dest="py_executable",
        metavar="<pythonInterpreter>",
        help="Path of the Python interpreter used to execute the Python UDF worker.",
    )
    parser.add_argument(
        "-pyreq", "--pyRequirements",
        dest="py_requirements",
        metavar="<requirementsFile>",
        help="A requirements.txt file that defines the third-party dependencies, "
        "optionally followed by '#' and a directory of cached packages.",
    )
    parser.add_argument(
        "-pyarch", "--pyArchives",
        dest="py_archives",
        metavar="<archiveFile>",
        help="Archive files for the Python UDF worker, comma separated.",
    )
    return parser


def parse_embedded_options(args: Sequence[str]) -> ExecutionOptions:
    """Parse the arguments following the ``embedded`` mode token.

    Raises
    ------
    InvalidOptionsError
        When an option is unknown or lacks its value.
    """
    namespace = build_embedded_parser().parse_args(list(args))

    python_configuration = {
        key: getattr(namespace, attribute)
        for attribute, key in PYTHON_CONFIG_KEYS.items()
        if getattr(namespace, attribute) is not None
    }
    return ExecutionOptions(
        mode=MODE_EMBEDDED,
        is_print_help=namespace.is_print_help,
        session_id=namespace.session_id,
        environment=namespace.environment,
        defaults=namespace.defaults,
        jars=tuple(namespace.jars) if namespace.jars is not None else None,
        library_dirs=tuple(namespace.library_dirs) if namespace.library_dirs is not None else None,
        python_configuration=python_configuration,
        history_file_path=namespace.history_file_path,
        sql_file=namespace.sql_file,
        update_statement=namespace.update_statement,
    )


# ---------------------------------------------------------------------------
# Usage output
# ---------------------------------------------------------------------------

def _embedded_options_help() -> str:
    help_text = build_embedded_parser().format_help()
    return "\n".join(f"    {line}" if line else line for line in help_text.splitlines())


def client_usage() -> str:
    return "\n".join(
        (
            f"{PROG} [MODE] [OPTIONS]",
            "",
            "The following modes are available:",
            "",
            f'Mode "{MODE_EMBEDDED}" submits SQL statements from the local machine.',
            "",
            f"  Syntax: {MODE_EMBEDDED} [OPTIONS]",
            _embedded_options_help(),
            "",
            f'Mode "{MODE_GATEWAY}" is reserved and not supported yet.',
            "",
        )
    )


def print_help_client() -> None:
    """Print the top-level usage, covering every mode."""
    out.notice(client_usage())


def print_help_embedded() -> None:
    """Print the usage of the embedded mode."""
    out.notice(build_embedded_parser().format_help())
