"""Evaluation of the right-hand side of an assignment into a typed value.

Supported literals::

    "string"  'string'       no escape processing
    42  -7  3.14  5.          int unless a decimal point is present
    [1, "two", 3.0]           flat list of scalars
    1..5  'a'..'e'            inclusive range, expanded eagerly to a list
"""

import re
from typing import Iterator, NamedTuple

from .base import Scalar, Value
from .errors import ConfigSyntaxError, ConfigTypeError

VALUE_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<string>"[^"]*"|'[^']*')
    |(?P<range>\.\.)
    |(?P<number>[+-]?(?:\d+\.(?!\.)\d*|\d+|\.\d+))
    |(?P<lbracket>\[)
    |(?P<rbracket>\])
    |(?P<comma>,)
    |(?P<quote>["'])
    |(?P<bare>[^\s\[\],"']+)
    """,
    re.VERBOSE,
)


class ValueToken(NamedTuple):
    kind: str
    text: str
    pos: int


def scan(expr: str) -> Iterator[ValueToken]:
    for match in VALUE_TOKEN_RE.finditer(expr):
        kind = match.lastgroup
        if kind == "ws":
            continue
        if kind == "quote":
            raise ConfigSyntaxError(
                f"unterminated string starting at column {match.start() + 1}"
            )
        if kind == "bare":
            raise ConfigSyntaxError(f"bare word {match.group()!r} is not a value")
        yield ValueToken(kind, match.group(), match.start())


def expand_range(start: Scalar, end: Scalar) -> list[Scalar]:
    """
    Expand an inclusive range.

    Integers count up or down depending on which end is larger; single
    characters walk the code points between them the same way.
    """
    if type(start) is int and type(end) is int:
        step = 1 if start <= end else -1
        return list(range(start, end + step, step))

    if (
        isinstance(start, str)
        and isinstance(end, str)
        and len(start) == 1
        and len(end) == 1
    ):
        first, last = ord(start), ord(end)
        step = 1 if first <= last else -1
        return [chr(code) for code in range(first, last + step, step)]

    raise ConfigTypeError(
        f"range operands must both be integers or both single characters, "
        f"got {start!r}..{end!r}"
    )


class _ValueParser:
    def __init__(self, expr: str) -> None:
        self.expr = expr
        self.tokens = list(scan(expr))
        self.index = 0

    def peek(self) -> ValueToken | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def advance(self) -> ValueToken:
        token = self.peek()
        if token is None:
            raise ConfigSyntaxError(f"unexpected end of value in {self.expr!r}")
        self.index += 1
        return token

    def expect(self, kind: str) -> ValueToken:
        token = self.advance()
        if token.kind != kind:
            raise ConfigSyntaxError(
                f"expected {kind} at column {token.pos + 1}, got {token.text!r}"
            )
        return token

    def parse(self) -> Value:
        if self.peek() is None:
            raise ConfigSyntaxError("missing value")

        if self.peek().kind == "lbracket":
            value: Value = self.parse_list()
        else:
            value, _ = self.parse_item()

        trailing = self.peek()
        if trailing is not None:
            raise ConfigSyntaxError(
                f"unexpected {trailing.text!r} at column {trailing.pos + 1}"
            )
        return value

    def parse_list(self) -> list[Scalar]:
        self.expect("lbracket")
        items: list[Scalar] = []

        token = self.peek()
        if token is not None and token.kind == "rbracket":
            self.advance()
            return items

        while True:
            value, is_range = self.parse_item()
            if is_range:
                items.extend(value)
            else:
                items.append(value)

            token = self.advance()
            if token.kind == "rbracket":
                return items
            if token.kind != "comma":
                raise ConfigSyntaxError(
                    f"expected ',' or ']' at column {token.pos + 1}, got {token.text!r}"
                )

    def parse_item(self) -> tuple[Value, bool]:
        start = self.parse_scalar()
        token = self.peek()
        if token is None or token.kind != "range":
            return start, False
        self.advance()
        end = self.parse_scalar()
        return expand_range(start, end), True

    def parse_scalar(self) -> Scalar:
        token = self.advance()
        if token.kind == "string":
            return token.text[1:-1]
        if token.kind == "number":
            if "." in token.text:
                return float(token.text)
            return int(token.text)
        if token.kind == "lbracket":
            raise ConfigSyntaxError("nested lists are not supported")
        raise ConfigSyntaxError(
            f"unexpected {token.text!r} at column {token.pos + 1}"
        )


def evaluate(expr: str) -> Value:
    """Parse a value expression into a string, number or list."""
    return _ValueParser(expr).parse()


def values_equal(left: Value | None, right: Value | None) -> bool:
    """Structural, type-aware equality: ``1`` and ``1.0`` differ."""
    if type(left) is not type(right):
        return False
    if isinstance(left, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    return left == right
