"""Tests for the float, decimal and fraction number systems."""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction

import pytest

from calcengine.core.errors import InvalidFactorial, NumericError
from calcengine.core.expression_lang.computer import Computer
from calcengine.core.expression_lang.numbers import (
    DecimalNumbers,
    FloatNumbers,
    FractionNumbers,
    NumberSystem,
    get_number_system,
    number_system_names,
)
from calcengine.core.expression_lang.tokenizer import tokenize


class TestFloatNumbers:
    """IEEE behaviour without Python exceptions."""

    def test_divide(self) -> None:
        nums = FloatNumbers()
        assert nums.divide(1.0, 0.0) == math.inf
        assert nums.divide(1.0, -0.0) == -math.inf
        assert math.isnan(nums.divide(0.0, 0.0))
        assert nums.divide(3.0, 2.0) == 1.5

    def test_pow(self) -> None:
        nums = FloatNumbers()
        assert nums.pow(2.0, 10.0) == 1024.0
        assert nums.pow(0.0, -1.0) == math.inf
        assert nums.pow(-10.0, 401.0) == -math.inf
        assert math.isnan(nums.pow(-8.0, 0.5))

    def test_is_integer(self) -> None:
        nums = FloatNumbers()
        assert nums.is_integer(3.0)
        assert not nums.is_integer(3.5)
        assert not nums.is_integer(math.inf)
        assert not nums.is_integer(math.nan)


class TestDecimalNumbers:
    """Decimal computer."""

    def test_literals_are_exact(self) -> None:
        computer = Computer.default(DecimalNumbers())
        assert computer.eval("0.1 + 0.2") == Decimal("0.3")

    def test_precision(self) -> None:
        computer = Computer.default(DecimalNumbers(precision=50))
        result = computer.eval("1/3")
        assert str(result) == "0." + "3" * 50

    def test_division_by_zero_is_infinite(self) -> None:
        computer = Computer.default(DecimalNumbers())
        assert computer.eval("1/0") == Decimal("Infinity")

    def test_builtins(self) -> None:
        computer = Computer.default(DecimalNumbers())
        assert computer.eval("sqrt(16)") == Decimal(4)
        assert computer.eval("log10 1000") == Decimal(3)
        assert computer.eval("5!") == Decimal(120)

    def test_invalid_factorial(self) -> None:
        computer = Computer.default(DecimalNumbers())
        with pytest.raises(InvalidFactorial):
            computer.eval("2.5!")

    def test_huge_factorial_overflows_to_infinity(self) -> None:
        computer = Computer.default(DecimalNumbers())
        assert computer.eval("(10^30)!").is_infinite()


class TestFractionNumbers:
    """Exact rational computer."""

    def test_tokens_parse_as_fractions(self) -> None:
        tokens = tokenize(".5", FractionNumbers())
        assert tokens[0].number == Fraction(1, 2)

    def test_exact_arithmetic(self) -> None:
        computer = Computer.default(FractionNumbers())
        assert computer.eval("1/3 + 1/6") == Fraction(1, 2)

    def test_integral_power_is_exact(self) -> None:
        computer = Computer.default(FractionNumbers())
        assert computer.eval("2^-2") == Fraction(1, 4)

    def test_fractional_power(self) -> None:
        computer = Computer.default(FractionNumbers())
        assert computer.eval("(1/4)^(1/2)") == Fraction(1, 2)

    def test_factorial(self) -> None:
        computer = Computer.default(FractionNumbers())
        assert computer.eval("6!") == Fraction(720)

    def test_division_by_zero(self) -> None:
        computer = Computer.default(FractionNumbers())
        with pytest.raises(NumericError):
            computer.eval("1/0")


class TestComparisons:
    """Ordering is decided by the number system, NaN included."""

    @pytest.mark.parametrize("numbers", [FloatNumbers(), DecimalNumbers()])
    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("0/0 < 1", 0),
            ("0/0 >= 1", 0),
            ("0/0 = 0/0", 0),
            ("0/0 != 0/0", 1),
            ("1/0 > 10^300", 1),
        ],
    )
    def test_nan_is_unordered(self, numbers: NumberSystem, source: str, expected: int) -> None:
        assert Computer.default(numbers).eval(source) == expected

    def test_compare(self) -> None:
        assert FloatNumbers().compare(1.0, 2.0) == -1
        assert FractionNumbers().compare(Fraction(1, 2), Fraction(2, 4)) == 0
        assert DecimalNumbers().compare(Decimal(3), Decimal(2)) == 1
        assert DecimalNumbers().compare(Decimal("NaN"), Decimal(2)) is None
        assert FloatNumbers().compare(math.nan, 2.0) is None


class TestRegistry:
    """Lookup by name."""

    def test_names(self) -> None:
        assert number_system_names() == ["decimal", "float", "fraction"]

    def test_get(self) -> None:
        assert isinstance(get_number_system("float"), FloatNumbers)
        decimal_numbers = get_number_system("decimal", precision=10)
        assert isinstance(decimal_numbers, DecimalNumbers)
        assert decimal_numbers.precision == 10

    def test_unknown(self) -> None:
        with pytest.raises(KeyError, match="Unknown number system"):
            get_number_system("complex")
