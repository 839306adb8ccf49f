"""sql-client — embedded-mode SQL command-line client.

Bootstraps a local execution backend, opens one session and runs a
script, a single update statement, or an interactive shell against it.
"""

from sql_client.version import __version__

__all__: list[str] = ["__version__"]
