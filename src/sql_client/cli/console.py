"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, usage output) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import sys
from typing import Any

from sql_client.exceptions import MissingDependencyError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``MissingDependencyError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise MissingDependencyError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance, targeting stderr unless told otherwise."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr, highlight=False)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool = True) -> None:
		self._stderr = stderr

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain print."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except MissingDependencyError:
			print(*objects, file=sys.stderr if self._stderr else sys.stdout)
			return
		rich_console.print(*objects)

	def notice(self, message: str) -> None:
		"""Print *message* verbatim, without interpreting Rich markup."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except MissingDependencyError:
			print(message, file=sys.stderr if self._stderr else sys.stdout)
			return
		rich_console.print(message, markup=False)


console = _ConsoleProxy()
"""Diagnostics, notices and errors (stderr)."""

out = _ConsoleProxy(stderr=False)
"""Statement results (stdout)."""


def escape_markup(text: str) -> str:
	"""Escape Rich markup in *text*; identity when Rich is unavailable."""
	try:
		from rich.markup import escape
	except ModuleNotFoundError:
		return text
	return escape(text)
