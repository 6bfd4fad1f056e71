"""
Number systems the computer can run on.

The computer never touches a concrete numeric type directly. It asks a
``NumberSystem`` for literals, zero and one, integer and finiteness checks,
arithmetic and ordering. The base class defaults fall back to the value
type's own operators.
"""

from __future__ import annotations

import decimal
import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from decimal import Decimal
from fractions import Fraction
from typing import Any


class NumberSystem(ABC):
    """Numeric capability required by the computer."""

    #: Short name used by configuration and the CLI.
    name: str = ""

    @abstractmethod
    def zero(self) -> Any: ...

    @abstractmethod
    def one(self) -> Any: ...

    @abstractmethod
    def parse(self, literal: str) -> Any:
        """Convert a decimal literal such as ``"3"``, ``"2.5"`` or ``".34"``."""

    @abstractmethod
    def is_integer(self, value: Any) -> bool: ...

    def is_finite(self, value: Any) -> bool:
        return True

    def abs(self, value: Any) -> Any:
        return abs(value)

    @abstractmethod
    def pow(self, base: Any, exponent: Any) -> Any: ...

    def negate(self, value: Any) -> Any:
        return -value

    def add(self, left: Any, right: Any) -> Any:
        return left + right

    def subtract(self, left: Any, right: Any) -> Any:
        return left - right

    def multiply(self, left: Any, right: Any) -> Any:
        return left * right

    def divide(self, left: Any, right: Any) -> Any:
        return left / right

    def compare(self, left: Any, right: Any) -> int | None:
        """-1, 0 or 1 as ``left`` is less than, equal to or greater than ``right``.

        None when the two are unordered (either is NaN).
        """
        if left < right:
            return -1
        if left > right:
            return 1
        if left == right:
            return 0
        return None

    def constants(self) -> dict[str, Any]:
        """Values of ``pi`` and ``e`` in this representation."""
        return {"pi": self.parse(repr(math.pi)), "e": self.parse(repr(math.e))}

    def functions(self) -> dict[str, Callable[[Any], Any]]:
        """Built-in unary functions for the default computer."""
        return {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


# ---------------------------------------------------------------------------
# float
# ---------------------------------------------------------------------------


def _ieee(func: Callable[[float], float]) -> Callable[[float], float]:
    """Wrap a math function so domain errors give nan and overflow gives inf."""

    def wrapper(value: float) -> float:
        try:
            return func(value)
        except ValueError:
            return math.nan
        except OverflowError:
            return math.inf

    wrapper.__name__ = func.__name__
    wrapper.__doc__ = func.__doc__
    return wrapper


class FloatNumbers(NumberSystem):
    """64-bit floats with IEEE 754 results instead of Python exceptions."""

    name = "float"

    def zero(self) -> float:
        return 0.0

    def one(self) -> float:
        return 1.0

    def parse(self, literal: str) -> float:
        return float(literal)

    def is_integer(self, value: float) -> bool:
        return float(value).is_integer()

    def is_finite(self, value: float) -> bool:
        return math.isfinite(value)

    def pow(self, base: float, exponent: float) -> float:
        try:
            return math.pow(base, exponent)
        except OverflowError:
            # Odd integral exponents keep the sign of a negative base
            if base < 0 and float(exponent).is_integer() and int(exponent) % 2:
                return -math.inf
            return math.inf
        except ValueError:
            if base == 0 and exponent < 0:
                return math.inf
            return math.nan

    def divide(self, left: float, right: float) -> float:
        if right == 0:
            if left == 0 or math.isnan(left):
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1.0, right)
        return left / right

    def constants(self) -> dict[str, float]:
        return {"pi": math.pi, "e": math.e}

    def functions(self) -> dict[str, Callable[[float], float]]:
        log10 = _ieee(math.log10)
        return {
            "sqrt": _ieee(math.sqrt),
            "sin": _ieee(math.sin),
            "cos": _ieee(math.cos),
            "tan": _ieee(math.tan),
            "log10": log10,
            "log": log10,
        }


# ---------------------------------------------------------------------------
# Decimal
# ---------------------------------------------------------------------------


class DecimalNumbers(NumberSystem):
    """
    Arbitrary precision decimals.

    Arithmetic runs in a private context whose division-by-zero, invalid
    operation and overflow traps are disabled, so the results follow the
    same infinity/NaN conventions as floats.
    """

    name = "decimal"

    def __init__(self, precision: int = 28) -> None:
        self.precision = precision
        self.context = decimal.Context(
            prec=precision,
            traps=[],
        )

    def zero(self) -> Decimal:
        return Decimal(0)

    def one(self) -> Decimal:
        return Decimal(1)

    def parse(self, literal: str) -> Decimal:
        return self.context.create_decimal(literal)

    def is_integer(self, value: Decimal) -> bool:
        return value.is_finite() and value == value.to_integral_value()

    def is_finite(self, value: Decimal) -> bool:
        return value.is_finite()

    def abs(self, value: Decimal) -> Decimal:
        return self.context.abs(value)

    def pow(self, base: Decimal, exponent: Decimal) -> Decimal:
        return self.context.power(base, exponent)

    def negate(self, value: Decimal) -> Decimal:
        return self.context.minus(value)

    def add(self, left: Decimal, right: Decimal) -> Decimal:
        return self.context.add(left, right)

    def subtract(self, left: Decimal, right: Decimal) -> Decimal:
        return self.context.subtract(left, right)

    def multiply(self, left: Decimal, right: Decimal) -> Decimal:
        return self.context.multiply(left, right)

    def divide(self, left: Decimal, right: Decimal) -> Decimal:
        return self.context.divide(left, right)

    def compare(self, left: Decimal, right: Decimal) -> int | None:
        result = self.context.compare(left, right)
        if result.is_nan():
            return None
        return int(result)

    def functions(self) -> dict[str, Callable[[Decimal], Decimal]]:
        def via_float(func: Callable[[float], float]) -> Callable[[Decimal], Decimal]:
            wrapped = _ieee(func)

            def call(value: Decimal) -> Decimal:
                return self.context.create_decimal(repr(wrapped(float(value))))

            call.__name__ = func.__name__
            return call

        def log10(value: Decimal) -> Decimal:
            return self.context.log10(value)

        return {
            "sqrt": self.context.sqrt,
            "sin": via_float(math.sin),
            "cos": via_float(math.cos),
            "tan": via_float(math.tan),
            "log10": log10,
            "log": log10,
        }

    def __repr__(self) -> str:
        return f"DecimalNumbers(precision={self.precision})"


# ---------------------------------------------------------------------------
# Fraction
# ---------------------------------------------------------------------------


class FractionNumbers(NumberSystem):
    """
    Exact rationals.

    Powers with an integral exponent stay exact. Anything else (and every
    transcendental built-in) is computed in floating point and converted
    back, so those results are only as precise as a float.
    """

    name = "fraction"

    def zero(self) -> Fraction:
        return Fraction(0)

    def one(self) -> Fraction:
        return Fraction(1)

    def parse(self, literal: str) -> Fraction:
        return Fraction(literal)

    def is_integer(self, value: Fraction) -> bool:
        return value.denominator == 1

    def pow(self, base: Fraction, exponent: Fraction) -> Fraction:
        if exponent.denominator == 1:
            return base ** exponent.numerator
        result = math.pow(base, exponent)
        return Fraction(result)

    def functions(self) -> dict[str, Callable[[Fraction], Fraction]]:
        def via_float(func: Callable[[float], float]) -> Callable[[Fraction], Fraction]:
            def call(value: Fraction) -> Fraction:
                return Fraction(func(float(value)))

            call.__name__ = func.__name__
            return call

        log10 = via_float(math.log10)
        return {
            "sqrt": via_float(math.sqrt),
            "sin": via_float(math.sin),
            "cos": via_float(math.cos),
            "tan": via_float(math.tan),
            "log10": log10,
            "log": log10,
        }


_SYSTEMS: dict[str, type[NumberSystem]] = {
    FloatNumbers.name: FloatNumbers,
    DecimalNumbers.name: DecimalNumbers,
    FractionNumbers.name: FractionNumbers,
}


def number_system_names() -> list[str]:
    return sorted(_SYSTEMS)


def get_number_system(name: str, **options: Any) -> NumberSystem:
    """Instantiate a number system by name.

    Args:
        name: One of ``float``, ``decimal`` or ``fraction``.
        **options: Passed to the constructor (``precision`` for decimal).

    Raises:
        KeyError: If the name is unknown.
    """
    try:
        cls = _SYSTEMS[name]
    except KeyError:
        raise KeyError(
            f"Unknown number system {name!r}; expected one of {number_system_names()}"
        ) from None
    if cls is DecimalNumbers:
        return cls(**options)
    return cls()
