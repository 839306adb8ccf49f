"""Pure helpers for turning script text into SQL statements.

A statement ends on the first line whose code ends with ``;``.  Code is
the line with any ``--`` comment removed; ``--`` and ``;`` inside a
single- or double-quoted literal are part of the literal, and a literal
may span lines.  Lines that are only a comment never end a statement
and are dropped from the output.
"""

from __future__ import annotations

_QUOTES = ("'", '"')

UPDATE_KEYWORDS: frozenset[str] = frozenset({"INSERT", "UPDATE", "DELETE", "REPLACE"})


def _scan(line: str, quote: str | None = None) -> tuple[str, str | None]:
    """Return the code part of *line* and the literal still open after it.

    *quote* is the literal open when the line starts.  A doubled quote
    inside a literal closes and reopens it, which leaves the state as is.
    """
    for index, char in enumerate(line):
        if quote is not None:
            if char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif line.startswith("--", index):
            return line[:index].rstrip(), None
    return line.rstrip(), quote


def is_end_of_statement(line: str) -> bool:
    """Return ``True`` when *line*, read on its own, terminates a statement."""
    code, quote = _scan(line)
    return quote is None and code.endswith(";")


def is_statement_complete(text: str) -> bool:
    """Return ``True`` when the last line of *text* terminates a statement."""
    quote: str | None = None
    complete = False
    for line in text.splitlines():
        code, quote = _scan(line, quote)
        complete = quote is None and code.endswith(";")
    return complete


def _flush(buffer: list[str], statements: list[str]) -> None:
    text = "\n".join(buffer).strip()
    if text.endswith(";"):
        text = text[:-1].rstrip()
    if text:
        statements.append(text)
    buffer.clear()


def split_statements(content: str) -> list[str]:
    """Split *content* into statements, in order.

    A trailing statement without ``;`` is kept.  Empty statements
    (blank lines, comment-only blocks, stray ``;``) are skipped.
    """
    statements: list[str] = []
    buffer: list[str] = []
    quote: str | None = None
    for line in content.splitlines():
        in_literal = quote is not None
        code, quote = _scan(line, quote)
        if not in_literal and line.strip().startswith("--"):
            continue
        if quote is None and code.endswith(";"):
            buffer.append(code)
            _flush(buffer, statements)
        else:
            buffer.append(line)

    _flush(buffer, statements)
    return statements


def leading_keyword(statement: str) -> str:
    """Return the first SQL keyword of *statement*, upper-cased."""
    for line in statement.splitlines():
        text = _scan(line)[0].strip()
        if text:
            return text.split(None, 1)[0].rstrip(";").upper()
    return ""


def is_update_statement(statement: str) -> bool:
    """Return ``True`` for statements that modify table contents."""
    return leading_keyword(statement) in UPDATE_KEYWORDS
