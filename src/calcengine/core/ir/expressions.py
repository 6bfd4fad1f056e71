"""
Expression tree types for calcengine.

Every node is a frozen pydantic model that exclusively owns its children.
Two trees are structurally identical exactly when they compare equal.

Supports:
- Arithmetic: +, -, *, /, ^, unary minus, factorial, |absolute value|
- Variables: references and assignment (x, x = 2)
- Unary function calls: sqrt(9), sin cos x, log10 100
- Logic: true, false, !, and, or
- Comparison: =, !=, <, >, <=, >=

``str(node)`` renders source text that parses back to an equal tree, for
any tree the parser can produce.
"""

from __future__ import annotations

import math
from decimal import Decimal
from enum import StrEnum
from fractions import Fraction
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class ArithOp(StrEnum):
    """Binary arithmetic operators."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


class CmpOp(StrEnum):
    """Comparison operators."""

    EQ = "="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


class LogicOp(StrEnum):
    """Logical connectives."""

    AND = "and"
    OR = "or"


def _literal(value: Any) -> str:
    """Render a number the way the tokenizer reads it: plain digits, no exponent.

    Fractions whose denominator has no factor other than 2 and 5 are
    written as exact decimals. Other fractions fall back to ``n/d``, which
    reads back as a division of the same value.
    """
    if isinstance(value, Fraction):
        if value.denominator == 1:
            return str(value.numerator)
        for places in range(1, value.denominator.bit_length() + 1):
            scale = 10**places
            if scale % value.denominator == 0:
                digits = str(abs(value.numerator) * (scale // value.denominator))
                digits = digits.rjust(places + 1, "0")
                sign = "-" if value < 0 else ""
                return f"{sign}{digits[:-places]}.{digits[-places:]}"
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        text = repr(value)
        return format(Decimal(text), "f") if "e" in text else text
    if isinstance(value, Decimal) and value.is_finite():
        return format(value, "f")
    return str(value)


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Constant(BaseModel):
    """A numeric literal, in whatever representation the number system uses."""

    value: Any = Field(description="The numeric value")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def __str__(self) -> str:
        return _literal(self.value)


class Identifier(BaseModel):
    """Reference to a variable by name."""

    name: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.name


class Neg(BaseModel):
    """Unary negation: -expr."""

    expr: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        # -(3!) and -3! parse differently
        if isinstance(self.expr, Factorial):
            return f"-({self.expr})"
        return f"-{self.expr}"


class BinOp(BaseModel):
    """Binary arithmetic: left op right."""

    op: ArithOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class Pow(BaseModel):
    """Exponentiation: base ^ exponent."""

    base: Expr
    exponent: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.base} ^ {self.exponent})"


class Abs(BaseModel):
    """Absolute value: |expr|."""

    expr: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        # An identifier directly before "|" would swallow the bar
        if isinstance(self.expr, (Identifier, Neg)):
            return f"|({self.expr})|"
        return f"|{self.expr}|"


class Factorial(BaseModel):
    """Postfix factorial: expr!."""

    expr: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.expr})!"


class Function(BaseModel):
    """
    Call of a registered unary function.

    Examples:
        - sqrt(9) → Function(name="sqrt", arg=Constant(9))
        - sin cos x → Function("sin", Function("cos", Identifier("x")))
    """

    name: str = Field(description="Function name")
    arg: Expr = Field(description="The single argument")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.name}({self.arg})"


class Assignment(BaseModel):
    """Bind a variable: name = expr."""

    name: str
    expr: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.name} = {self.expr})"


class Bool(BaseModel):
    """Boolean literal: true or false."""

    value: bool

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "true" if self.value else "false"


class BoolNot(BaseModel):
    """Logical negation: !expr."""

    expr: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"!{self.expr}"


class BoolOp(BaseModel):
    """Logical connective: left and/or right."""

    op: LogicOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.left} {self.op.value} {self.right}"


class BinCmp(BaseModel):
    """Comparison: left op right."""

    op: CmpOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        # "=" after an identifier would read back as an assignment
        op = "==" if self.op == CmpOp.EQ else self.op.value
        return f"{self.left} {op} {self.right}"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = (
    Constant
    | Identifier
    | Neg
    | BinOp
    | Pow
    | Abs
    | Factorial
    | Function
    | Assignment
    | Bool
    | BoolNot
    | BoolOp
    | BinCmp
)

# Rebuild models for recursive forward references
Neg.model_rebuild()
BinOp.model_rebuild()
Pow.model_rebuild()
Abs.model_rebuild()
Factorial.model_rebuild()
Function.model_rebuild()
Assignment.model_rebuild()
BoolNot.model_rebuild()
BoolOp.model_rebuild()
BinCmp.model_rebuild()
