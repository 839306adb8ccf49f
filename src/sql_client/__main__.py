"""Allow ``python -m sql_client`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m sql_client`` behaves identically to the ``sql-client``
console script.
"""

from __future__ import annotations

from sql_client.cli.app import cli

if __name__ == "__main__":
    cli()
