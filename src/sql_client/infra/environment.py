"""Infrastructure: reading locators and parsing environment files.

A *locator* is either a filesystem path or a URL.  ``file:`` URLs and
plain paths are read from disk; any other scheme is fetched with
:mod:`urllib.request`.

Environment files are YAML documents.  The top-level ``configuration``
mapping becomes :attr:`EnvironmentConfig.configuration`; every other
top-level entry is kept in :attr:`EnvironmentConfig.sections`.

Every ``OSError`` / ``yaml.YAMLError`` raised while parsing an
environment is re-raised as
:class:`~sql_client.exceptions.EnvironmentReadError`.
"""

from __future__ import annotations

import os
import urllib.request
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit
from urllib.request import url2pathname

import yaml

from sql_client.core.models import EnvironmentConfig
from sql_client.exceptions import EnvironmentReadError

CONF_DIR_ENV: str = "FLINK_CONF_DIR"
FLINK_CONF_FILE: str = "flink-conf.yaml"
DEFAULTS_ENV_FILE: str = "sql-client-defaults.yaml"
CONFIGURATION_SECTION: str = "configuration"


# ---------------------------------------------------------------------------
# Locators
# ---------------------------------------------------------------------------

def locator_to_path(locator: str) -> Path | None:
    """Return the local path behind *locator*, or ``None`` for remote URLs."""
    parts = urlsplit(locator)
    # A single-letter scheme is a Windows drive (``C:\\...``).
    if parts.scheme == "" or len(parts.scheme) == 1:
        return Path(locator)
    if parts.scheme == "file":
        return Path(url2pathname(parts.path))
    return None


def read_locator(locator: str) -> str:
    """Return the full UTF-8 text behind *locator*.

    Raises
    ------
    OSError
        When the file or URL cannot be read (``URLError`` included).
    UnicodeDecodeError
        When the content is not valid UTF-8.
    """
    path = locator_to_path(locator)
    if path is not None:
        return path.read_text(encoding="utf-8")
    with urllib.request.urlopen(locator) as response:
        return response.read().decode("utf-8")


# ---------------------------------------------------------------------------
# Environment files
# ---------------------------------------------------------------------------

def _load_yaml_mapping(text: str, locator: str) -> dict[str, Any]:
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise EnvironmentReadError(
            f"Could not read session environment file at: {locator}",
            hint="The file must contain a YAML mapping at the top level.",
        )
    return data


def parse_environment(locator: str) -> EnvironmentConfig:
    """Parse the environment file behind *locator*.

    Raises
    ------
    EnvironmentReadError
        When the file cannot be read or is not a YAML mapping.
    """
    try:
        data = _load_yaml_mapping(read_locator(locator), locator)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise EnvironmentReadError(
            f"Could not read session environment file at: {locator}",
        ) from exc

    configuration = data.pop(CONFIGURATION_SECTION, None) or {}
    if not isinstance(configuration, dict):
        raise EnvironmentReadError(
            f"Could not read session environment file at: {locator}",
            hint=f"'{CONFIGURATION_SECTION}' must be a mapping of keys to values.",
        )
    return EnvironmentConfig(configuration=configuration, sections=data)


# ---------------------------------------------------------------------------
# Distribution configuration directory
# ---------------------------------------------------------------------------

def resolve_conf_dir() -> Path | None:
    """Return the directory named by ``FLINK_CONF_DIR``, if set."""
    value = os.environ.get(CONF_DIR_ENV)
    if not value:
        return None
    return Path(value)


def load_flink_conf(conf_dir: Path | None) -> dict[str, Any]:
    """Read the flat ``flink-conf.yaml`` of *conf_dir*; empty when absent."""
    if conf_dir is None:
        return {}
    conf_file = conf_dir / FLINK_CONF_FILE
    if not conf_file.is_file():
        return {}
    try:
        return _load_yaml_mapping(conf_file.read_text(encoding="utf-8"), str(conf_file))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise EnvironmentReadError(
            f"Could not read configuration file at: {conf_file}",
        ) from exc
