"""
Expression computer for calcengine.

Evaluates expression ASTs against a mutable store of variables and unary
functions. Does NOT use Python's eval(). This is a safe, sandboxed
tree-walking interpreter over the closed set of node types, generic over
the ``NumberSystem`` it is given.

Usage:
    computer = Computer.default()
    computer.eval("a = 2")     # 2.0
    computer.eval("a * 3")     # 6.0
    computer.eval("ans + 1")   # 7.0
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from calcengine.core.errors import (
    InputTooLong,
    InvalidFactorial,
    NumericError,
    UnrecognizedFunctionIdentifier,
    UnrecognizedIdentifier,
    UnsupportedOperation,
    VariableIsConstant,
)
from calcengine.core.expression_lang.numbers import FloatNumbers, NumberSystem
from calcengine.core.expression_lang.parser import parse
from calcengine.core.expression_lang.tokenizer import Token, tokenize
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

logger = logging.getLogger(__name__)

#: Name the computer binds each successful top-level result to.
ANS = "ans"

# Orderings (from NumberSystem.compare) that satisfy each comparison
_ACCEPTS: dict[CmpOp, tuple[int, ...]] = {
    CmpOp.EQ: (0,),
    CmpOp.NE: (-1, 1),
    CmpOp.LT: (-1,),
    CmpOp.GT: (1,),
    CmpOp.LE: (-1, 0),
    CmpOp.GE: (0, 1),
}


@dataclass
class Binding:
    """A variable's value and whether ordinary assignment may change it."""

    value: Any
    constant: bool = False


class Computer:
    """Variables, functions and the number system expressions are computed with.

    An instance is a session: bindings made by assignments persist across
    ``compute``/``eval`` calls. Instances are not thread-safe; use one per
    session or guard a shared one externally.

    Args:
        numbers: Number system for literals and arithmetic.
        logic: Evaluate boolean and comparison nodes as one/zero. When
            False those nodes raise ``UnsupportedOperation``.
        max_input_length: If set, ``tokenize`` and ``eval`` refuse longer input.
    """

    def __init__(
        self,
        numbers: NumberSystem | None = None,
        logic: bool = True,
        max_input_length: int | None = None,
    ) -> None:
        self.numbers = numbers or FloatNumbers()
        self.logic = logic
        self.max_input_length = max_input_length
        self.variables: dict[str, Binding] = {}
        self.functions: dict[str, Callable[[Any], Any]] = {}

    @classmethod
    def new(cls, pi: Any, e: Any, numbers: NumberSystem | None = None, **options: Any) -> Computer:
        """A computer with only the ``pi`` and ``e`` constants bound."""
        computer = cls(numbers, **options)
        computer.set_variable("pi", pi, constant=True)
        computer.set_variable("e", e, constant=True)
        return computer

    @classmethod
    def default(cls, numbers: NumberSystem | None = None, **options: Any) -> Computer:
        """A computer seeded with ``pi``, ``e`` and the number system's built-ins."""
        numbers = numbers or FloatNumbers()
        consts = numbers.constants()
        computer = cls.new(consts["pi"], consts["e"], numbers, **options)
        for name, func in numbers.functions().items():
            computer.set_function(name, func)
        return computer

    # -- State administration (no constant protection) --

    def set_variable(self, name: str, value: Any, constant: bool = False) -> None:
        self.variables[name] = Binding(value, constant)
        logger.debug("Registered variable %s = %r (constant=%s)", name, value, constant)

    def get_variable(self, name: str) -> Any:
        """Value bound to ``name``.

        Raises:
            UnrecognizedIdentifier: If nothing is bound.
        """
        binding = self.variables.get(name)
        if binding is None:
            raise UnrecognizedIdentifier(name)
        return binding.value

    def remove_variable(self, name: str) -> None:
        self.variables.pop(name, None)

    def set_function(self, name: str, func: Callable[[Any], Any]) -> None:
        self.functions[name] = func
        logger.debug("Registered function %s", name)

    # -- Evaluation --

    def tokenize(self, source: str) -> list[Token]:
        """Tokenize ``source`` with this computer's number system and input limit.

        Raises:
            InputTooLong: If ``source`` exceeds ``max_input_length``.
            UnrecognizedCharacter: From the tokenizer.
        """
        if self.max_input_length is not None and len(source) > self.max_input_length:
            raise InputTooLong(len(source), self.max_input_length)
        return tokenize(source, self.numbers)

    def eval(self, source: str) -> Any:
        """Tokenize, parse and compute ``source`` in one step.

        Raises:
            LexError, ParseError, ComputeError: From whichever stage failed
                first; all derive from ``EvalError``.
        """
        return self.compute(parse(self.tokenize(source)))

    def compute(self, expr: Expr) -> Any:
        """Compute an already parsed expression.

        On success the result is bound to ``ans`` as a constant. This
        bypasses the constant check, so ``ans`` can only be changed by the
        computer itself.
        """
        value = self._compute(expr)
        self.variables[ANS] = Binding(value, constant=True)
        logger.debug("%s = %r", ANS, value)
        return value

    def _compute(self, expr: Expr) -> Any:
        """Dispatch evaluation to the appropriate handler."""
        if isinstance(expr, Constant):
            return expr.value

        if isinstance(expr, Identifier):
            return self.get_variable(expr.name)

        if isinstance(expr, Neg):
            return self._numeric(self.numbers.negate, self._compute(expr.expr))

        if isinstance(expr, BinOp):
            return self._compute_binop(expr)

        if isinstance(expr, Abs):
            return self._numeric(self.numbers.abs, self._compute(expr.expr))

        if isinstance(expr, Function):
            return self._compute_function(expr)

        if isinstance(expr, Assignment):
            return self._compute_assignment(expr)

        if isinstance(expr, Pow):
            base = self._compute(expr.base)
            exponent = self._compute(expr.exponent)
            return self._numeric(self.numbers.pow, base, exponent)

        if isinstance(expr, Factorial):
            return self._compute_factorial(expr)

        if isinstance(expr, (Bool, BoolNot, BoolOp, BinCmp)):
            return self._compute_logic(expr)

        raise UnsupportedOperation(type(expr).__name__)

    def _numeric(self, op: Callable[..., Any], *args: Any) -> Any:
        """Apply a number system operation, reporting its failures as compute errors."""
        try:
            return op(*args)
        except (ArithmeticError, ValueError) as e:
            raise NumericError(f"{getattr(op, '__name__', 'operation')} failed: {e}") from e

    def _compute_binop(self, expr: BinOp) -> Any:
        left = self._compute(expr.left)
        right = self._compute(expr.right)
        ops = {
            ArithOp.ADD: self.numbers.add,
            ArithOp.SUB: self.numbers.subtract,
            ArithOp.MUL: self.numbers.multiply,
            ArithOp.DIV: self.numbers.divide,
        }
        return self._numeric(ops[expr.op], left, right)

    def _compute_function(self, expr: Function) -> Any:
        value = self._compute(expr.arg)
        func = self.functions.get(expr.name)
        if func is None:
            raise UnrecognizedFunctionIdentifier(expr.name)
        return self._numeric(func, value)

    def _compute_assignment(self, expr: Assignment) -> Any:
        value = self._compute(expr.expr)
        binding = self.variables.get(expr.name)
        if binding is not None and binding.constant:
            raise VariableIsConstant(expr.name)
        self.variables[expr.name] = Binding(value, constant=False)
        logger.debug("Assigned %s = %r", expr.name, value)
        return value

    def _compute_factorial(self, expr: Factorial) -> Any:
        """n! for non-negative integral n, as a descending product."""
        nums = self.numbers
        value = self._compute(expr.expr)
        one = nums.one()
        if not nums.is_integer(value) or value < nums.zero():
            raise InvalidFactorial(value)
        if value == nums.zero() or value == one:
            return one

        result = value
        factor = nums.subtract(value, one)
        # Stop at overflow: a float factor past 2**53 no longer decreases
        while factor > one and nums.is_finite(result):
            result = self._numeric(nums.multiply, result, factor)
            factor = nums.subtract(factor, one)
        return result

    def _compute_logic(self, expr: Bool | BoolNot | BoolOp | BinCmp) -> Any:
        """Boolean and comparison nodes, encoded as one (true) and zero (false)."""
        if not self.logic:
            raise UnsupportedOperation(type(expr).__name__)

        if isinstance(expr, Bool):
            return self._truth(expr.value)

        if isinstance(expr, BoolNot):
            return self._truth(not self._is_true(self._compute(expr.expr)))

        if isinstance(expr, BoolOp):
            left = self._is_true(self._compute(expr.left))
            right = self._is_true(self._compute(expr.right))
            if expr.op == LogicOp.AND:
                return self._truth(left and right)
            return self._truth(left or right)

        left = self._compute(expr.left)
        right = self._compute(expr.right)
        order = self._numeric(self.numbers.compare, left, right)
        # Unordered (NaN) operands are only ever "not equal"
        if order is None:
            return self._truth(expr.op == CmpOp.NE)
        return self._truth(order in _ACCEPTS[expr.op])

    def _truth(self, flag: bool) -> Any:
        return self.numbers.one() if flag else self.numbers.zero()

    def _is_true(self, value: Any) -> bool:
        return not value == self.numbers.zero()


def compute(expr: Expr, computer: Computer) -> Any:
    """Compute ``expr`` against ``computer``'s state (see ``Computer.compute``)."""
    return computer.compute(expr)


def evaluate(source: str, computer: Computer | None = None) -> Any:
    """Tokenize, parse and compute ``source``.

    Args:
        source: Expression string (e.g., ``"sqrt(9) + 2^3"``).
        computer: State to evaluate against; a fresh default computer
            when omitted.

    Returns:
        The computed value.

    Raises:
        EvalError: The lex, parse or compute error that stopped evaluation.
    """
    if computer is None:
        computer = Computer.default()
    return computer.eval(source)
