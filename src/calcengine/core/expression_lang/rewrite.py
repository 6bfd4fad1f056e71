"""
Tree substitution for parsed expressions.

Expression nodes are immutable, so ``replace`` builds a new tree and
reports how many nodes it swapped out.

Example:
    tree = parse(tokenize("x^2 * 4"))
    tree, count = replace(tree, Identifier(name="x"), Constant(value=20.0))
    # count == 1, Computer.default().compute(tree) == 1600.0
"""

from __future__ import annotations

from calcengine.core.ir.expressions import (
    Abs,
    Assignment,
    BinCmp,
    BinOp,
    BoolNot,
    BoolOp,
    Expr,
    Factorial,
    Function,
    Neg,
    Pow,
)

# Child fields of every composite node
_CHILDREN: dict[type, tuple[str, ...]] = {
    BinOp: ("left", "right"),
    BinCmp: ("left", "right"),
    BoolOp: ("left", "right"),
    Pow: ("base", "exponent"),
    Neg: ("expr",),
    Abs: ("expr",),
    Factorial: ("expr",),
    BoolNot: ("expr",),
    Function: ("arg",),
    Assignment: ("expr",),
}


def _matches(node: Expr, old: Expr, ignore_fields: bool) -> bool:
    if ignore_fields:
        return type(node) is type(old)
    return node == old


def replace(expr: Expr, old: Expr, new: Expr, ignore_fields: bool = False) -> tuple[Expr, int]:
    """Replace every node matching ``old`` with ``new``.

    The walk is top-down: a matching node is swapped whole and its former
    children are not visited.

    Args:
        expr: Tree to rewrite.
        old: Pattern node.
        new: Replacement node.
        ignore_fields: Match any node of the same variant as ``old``
            (``Identifier(name="y")`` matches every identifier) instead of
            requiring exact equality.

    Returns:
        The rewritten tree and the number of replacements made.
    """
    if _matches(expr, old, ignore_fields):
        return new, 1

    fields = _CHILDREN.get(type(expr))
    if not fields:
        return expr, 0

    replaced = 0
    update: dict[str, Expr] = {}
    for field in fields:
        child, count = replace(getattr(expr, field), old, new, ignore_fields)
        update[field] = child
        replaced += count

    if not replaced:
        return expr, 0
    return expr.model_copy(update=update), replaced
