"""
Error types for calcengine lexing, parsing, and computation.

Every failure is an ``EvalError``. The three stage bases (``LexError``,
``ParseError``, ``ComputeError``) carry a ``stage`` tag so callers of
``eval`` can tell which step rejected the input without inspecting
concrete subclasses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from calcengine.core.expression_lang.tokenizer import Token
    from calcengine.core.ir.expressions import Expr


class EvalError(Exception):
    """Base exception for all calcengine errors."""

    stage: ClassVar[str] = "eval"

    def __init__(self, message: str, pos: int | None = None) -> None:
        self.message = message
        self.pos = pos
        super().__init__(message)

    def format_context(self, source: str) -> str:
        """Render the message with a caret under the offending position."""
        if self.pos is None:
            return self.message
        return f"{source}\n{' ' * self.pos}^\n{self.message}"


# ---------------------------------------------------------------------------
# Lexing
# ---------------------------------------------------------------------------


class LexError(EvalError):
    """Raised when the input text cannot be split into tokens."""

    stage = "lex"


class UnrecognizedCharacter(LexError):
    def __init__(self, char: str, pos: int) -> None:
        self.char = char
        super().__init__(f"Unrecognized character {char!r} at position {pos}", pos)


class InputTooLong(LexError):
    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Expression is {length} characters long; the limit is {limit}", limit)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParseError(EvalError):
    """
    Raised when a token sequence does not form a valid expression.

    Examples:
    - Missing ')' or closing '|'
    - Operator where a value was expected
    - A number glued to an identifier ("2x")
    - Trailing tokens after a complete expression
    """

    stage = "parse"


class ExpectedClosingParenthesis(ParseError):
    def __init__(self, pos: int | None = None) -> None:
        super().__init__("Expected closing parenthesis ')'", pos)


class ExpectedClosingPipe(ParseError):
    def __init__(self, pos: int | None = None) -> None:
        super().__init__("Expected closing pipe '|' after absolute value", pos)


class ExpectedFactor(ParseError):
    """A number, identifier or bracketed expression was expected.

    ``token`` is what was found instead, or None at end of input.
    """

    def __init__(self, token: Token | None) -> None:
        self.token = token
        if token is None:
            super().__init__("Expected a value but reached end of input")
        else:
            super().__init__(f"Expected a value, found {token.text!r}", token.pos)


class UnexpectedNumber(ParseError):
    """A number is immediately followed by an identifier, as in ``2x``.

    ``token`` is the identifier that follows the number.
    """

    def __init__(self, token: Token) -> None:
        self.token = token
        super().__init__(
            f"Number directly followed by identifier {token.text!r}; "
            f"write an explicit operator or parentheses",
            token.pos,
        )


class UnexpectedToken(ParseError):
    """Tokens remain after a complete expression was parsed."""

    def __init__(self, expr: Expr, tokens: list[Token]) -> None:
        self.expr = expr
        self.tokens = tokens
        trailing = " ".join(t.text for t in tokens)
        super().__init__(
            f"Unexpected trailing input {trailing!r} after {expr}",
            tokens[0].pos if tokens else None,
        )


# ---------------------------------------------------------------------------
# Computation
# ---------------------------------------------------------------------------


class ComputeError(EvalError):
    """Raised when a parsed expression cannot be computed."""

    stage = "compute"


class InvalidFactorial(ComputeError):
    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"Factorial is only defined for non-negative integers, got {value}"
        )


class VariableIsConstant(ComputeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot assign to constant variable {name!r}")


class UnrecognizedIdentifier(ComputeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown variable {name!r}")


class UnrecognizedFunctionIdentifier(ComputeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown function {name!r}")


class UnsupportedOperation(ComputeError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unsupported operation: {kind}")


class NumericError(ComputeError):
    """The number system or a registered function rejected its operands."""
