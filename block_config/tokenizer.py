"""Line tokenizer for block configuration files.

Every non-blank, non-comment line is either a block header::

    [ type ]
    [ type: name ]

or a key assignment::

    key = value-expression

Comments start with ``#`` and run to the end of the line. A ``#`` inside a
quoted string is part of the string.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .errors import ConfigSyntaxError

IDENTIFIER = r"\w[\w.\-]*"

HEADER_RE = re.compile(
    rf"""
    ^\[\s*
    (?P<type>{IDENTIFIER})\s*
    (?::\s*(?P<name>{IDENTIFIER})\s*)?
    \]$
    """,
    re.VERBOSE,
)

ASSIGNMENT_RE = re.compile(rf"^(?P<key>{IDENTIFIER})\s*=\s*(?P<expr>.*)$")

LINE_BREAK_RE = re.compile(r"\r?\n")


class TokenKind(Enum):
    HEADER = "header"
    ASSIGNMENT = "assignment"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lineno: int
    # HEADER
    block_type: str | None = None
    block_name: str | None = None
    # ASSIGNMENT
    key: str | None = None
    expr: str | None = None


def strip_comment(line: str) -> str:
    """Drop a trailing ``#`` comment that is not inside a quoted string."""
    quote = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "#":
            return line[:index]
    return line


def classify_line(line: str, lineno: int) -> Token | None:
    """Classify a single line; returns None for blank and comment lines."""
    stripped = strip_comment(line).strip()
    if not stripped:
        return None

    match = HEADER_RE.match(stripped)
    if match:
        return Token(
            TokenKind.HEADER,
            lineno,
            block_type=match.group("type"),
            block_name=match.group("name"),
        )

    match = ASSIGNMENT_RE.match(stripped)
    if match:
        return Token(
            TokenKind.ASSIGNMENT,
            lineno,
            key=match.group("key"),
            expr=match.group("expr").strip(),
        )

    raise ConfigSyntaxError(f"unrecognized line: {stripped!r}", lineno)


def tokenize(text: str) -> Iterator[Token]:
    """
    Yield header and assignment tokens.

    Lines end at LF or CRLF only; other Unicode line separators are ordinary
    characters and may appear inside strings. A leading byte order mark is
    dropped.
    """
    text = text.removeprefix("\ufeff")
    for lineno, line in enumerate(LINE_BREAK_RE.split(text), start=1):
        token = classify_line(line, lineno)
        if token is not None:
            yield token
