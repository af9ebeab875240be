"""Unit tests for the on-chain fixed-point decimal codec."""
from __future__ import annotations

from decimal import Decimal

import pytest

from src.switchboard.decimal import MAX_SCALE, AptosDecimal


class TestToDecimal:
    def test_positive(self) -> None:
        assert AptosDecimal("12345", 2, False).to_decimal() == Decimal("123.45")

    def test_negative(self) -> None:
        assert AptosDecimal("5", 1, True).to_decimal() == Decimal("-0.5")

    def test_zero_scale(self) -> None:
        assert AptosDecimal("100", 0, False).to_decimal() == Decimal(100)

    def test_large_mantissa_is_exact(self) -> None:
        mantissa = "340282366920938463463374607431768211455"  # u128::MAX
        value = AptosDecimal(mantissa, 18, False).to_decimal()
        assert value == Decimal("340282366920938463463.374607431768211455")


class TestFromDecimal:
    def test_fraction(self) -> None:
        assert AptosDecimal.from_decimal(Decimal("123.45")) == AptosDecimal("12345", 2, False)

    def test_negative(self) -> None:
        assert AptosDecimal.from_decimal(Decimal("-0.5")) == AptosDecimal("5", 1, True)

    def test_integer_input(self) -> None:
        assert AptosDecimal.from_decimal(100) == AptosDecimal("100", 0, False)

    def test_positive_exponent_folds_into_mantissa(self) -> None:
        assert AptosDecimal.from_decimal(Decimal("1.5E+3")) == AptosDecimal("1500", 0, False)

    def test_truncates_beyond_max_scale(self) -> None:
        result = AptosDecimal.from_decimal(Decimal("0.12345678901234567891234"))
        assert result.scale == MAX_SCALE
        assert result.mantissa == "123456789012345678"

    def test_truncation_is_toward_zero(self) -> None:
        result = AptosDecimal.from_decimal(Decimal("-1." + "9" * 20))
        assert result == AptosDecimal("1" + "9" * 18, 18, True)

    @pytest.mark.parametrize("zero", [Decimal("0"), Decimal("-0"), Decimal("-0.000")])
    def test_zero_is_never_negative(self, zero: Decimal) -> None:
        assert AptosDecimal.from_decimal(zero).neg is False

    def test_tiny_negative_truncated_to_zero_is_not_negative(self) -> None:
        result = AptosDecimal.from_decimal(Decimal("-1E-30"))
        assert result == AptosDecimal("0", MAX_SCALE, False)

    @pytest.mark.parametrize("bad", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, bad: str) -> None:
        with pytest.raises(ValueError):
            AptosDecimal.from_decimal(Decimal(bad))


class TestRoundTrip:
    @pytest.mark.parametrize(
        "triple",
        [
            ("1", 0, False),
            ("12345", 2, True),
            ("987654321987654321", 18, False),
            ("0", 4, False),
            ("42", 9, True),
        ],
    )
    def test_triple_survives(self, triple: tuple[str, int, bool]) -> None:
        original = AptosDecimal(*triple)
        assert AptosDecimal.from_decimal(original.to_decimal()) == original

    def test_negative_zero_normalised(self) -> None:
        original = AptosDecimal("0", 3, True)
        assert AptosDecimal.from_decimal(original.to_decimal()) == AptosDecimal("0", 3, False)

    def test_move_args_order(self) -> None:
        assert AptosDecimal("100", 0, False).to_move_args() == ["100", 0, False]
