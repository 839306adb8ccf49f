"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit — usage printed, or the selected mode completed."""

GENERAL_ERROR: int = 1
"""A known SqlClientError was reported.  The session was closed."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C outside the shell.  POSIX convention (128 + SIGINT=2)."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all typed error paths."""
