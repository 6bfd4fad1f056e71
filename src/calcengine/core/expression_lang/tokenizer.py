"""
Tokenizer for calcengine expressions.

Converts an expression string into a sequence of typed tokens.
"""

from __future__ import annotations

import re
from enum import StrEnum, auto
from typing import Any

from calcengine.core.errors import UnrecognizedCharacter
from calcengine.core.expression_lang.numbers import FloatNumbers, NumberSystem


class TokenKind(StrEnum):
    """Token types for calcengine expressions."""

    # Literals
    NUMBER = auto()

    # Identifiers and keywords
    IDENT = auto()
    TRUE = auto()
    FALSE = auto()
    AND = auto()
    OR = auto()

    # Arithmetic operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    CARET = auto()
    BANG = auto()  # factorial or logical not
    PIPE = auto()

    # Assignment and comparison
    ASSIGN = auto()  # = (also equality inside comparisons)
    EQ = auto()  # ==
    NE = auto()
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()

    # End of input
    EOF = auto()


class Token:
    """A single token from the expression tokenizer.

    ``text`` is the source lexeme. For NUMBER tokens ``number`` holds the
    value parsed by the number system in use.
    """

    __slots__ = ("kind", "text", "pos", "number")

    def __init__(self, kind: TokenKind, text: str, pos: int, number: Any = None) -> None:
        self.kind = kind
        self.text = text
        self.pos = pos
        self.number = number

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.text == other.text
            and self.pos == other.pos
            and self.number == other.number
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.text, self.pos))

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r}, pos={self.pos})"


_KEYWORDS: dict[str, TokenKind] = {
    "true": TokenKind.TRUE,
    "false": TokenKind.FALSE,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
}

# Number pattern: 12, 12.5, 12. or .5
_NUMBER_RE = re.compile(r"[0-9]+(\.[0-9]*)?|\.[0-9]+")
# Identifier: letter or underscore followed by alphanumerics/underscores
_IDENT_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")

_TWO_CHAR: dict[str, TokenKind] = {
    "==": TokenKind.EQ,
    "!=": TokenKind.NE,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
}

_SINGLE_CHAR: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "^": TokenKind.CARET,
    "!": TokenKind.BANG,
    "|": TokenKind.PIPE,
    "=": TokenKind.ASSIGN,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}


def tokenize(source: str, numbers: NumberSystem | None = None) -> list[Token]:
    """Tokenize an expression string into a list of tokens.

    The list always ends with an EOF token.

    Args:
        source: Expression text, e.g. ``"sqrt(.25) + 2^3!"``.
        numbers: Number system used to parse numeric literals
            (floats by default).

    Raises:
        UnrecognizedCharacter: If a character cannot start any token.
    """
    numbers = numbers or FloatNumbers()
    tokens: list[Token] = []
    i = 0
    n = len(source)

    while i < n:
        c = source[i]

        # Skip whitespace
        if c.isspace():
            i += 1
            continue

        # Numbers, including the leading-dot form
        m = _NUMBER_RE.match(source, i)
        if m:
            num_str = m.group(0)
            tokens.append(Token(TokenKind.NUMBER, num_str, i, numbers.parse(num_str)))
            i = m.end()
            continue

        # Identifiers and keywords
        if c.isascii() and (c.isalpha() or c == "_"):
            m = _IDENT_RE.match(source, i)
            assert m is not None
            word = m.group(0)
            kind = _KEYWORDS.get(word, TokenKind.IDENT)
            tokens.append(Token(kind, word, i))
            i = m.end()
            continue

        # Two-character operators
        two = source[i : i + 2]
        if two in _TWO_CHAR:
            tokens.append(Token(_TWO_CHAR[two], two, i))
            i += 2
            continue

        # Single-character operators and punctuation
        if c in _SINGLE_CHAR:
            tokens.append(Token(_SINGLE_CHAR[c], c, i))
            i += 1
            continue

        raise UnrecognizedCharacter(c, i)

    tokens.append(Token(TokenKind.EOF, "", n))
    return tokens
