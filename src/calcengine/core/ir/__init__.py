"""Intermediate representation: the expression tree produced by the parser."""

from calcengine.core.ir.expressions import (
    Abs,
    ArithOp,
    Assignment,
    BinCmp,
    BinOp,
    Bool,
    BoolNot,
    BoolOp,
    CmpOp,
    Constant,
    Expr,
    Factorial,
    Function,
    Identifier,
    LogicOp,
    Neg,
    Pow,
)

__all__ = [
    "Abs",
    "ArithOp",
    "Assignment",
    "BinCmp",
    "BinOp",
    "Bool",
    "BoolNot",
    "BoolOp",
    "CmpOp",
    "Constant",
    "Expr",
    "Factorial",
    "Function",
    "Identifier",
    "LogicOp",
    "Neg",
    "Pow",
]
