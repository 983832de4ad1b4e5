"""
Tests for the Allocation Engine.

Covers:
- Equal allocation with largest-remainder rounding
- Weighted allocation
- Conservation of the source amount
- Error handling
"""

from decimal import Decimal

import pytest

from estate_engines.allocation import AllocationEngine
from estate_kernel.domain.values import Money


class TestEqualAllocation:
    """Tests for equal splits."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_exact_split(self):
        result = self.engine.allocate_equal(Money.of(900000), ["a", "b", "c"])
        assert result.as_dict() == {
            "a": Money.of(300000),
            "b": Money.of(300000),
            "c": Money.of(300000),
        }
        assert result.rounding_units == 0

    def test_odd_shilling_goes_to_first_target(self):
        """Ties on the fractional part are broken by input order."""
        result = self.engine.allocate_equal(Money.of(533333), ["child-1", "child-2"])
        assert result.amount_for("child-1") == Money.of(266667)
        assert result.amount_for("child-2") == Money.of(266666)
        assert result.rounding_units == 1

    def test_three_way_split_of_100_kes(self):
        result = self.engine.allocate_equal(Money.of(100), ["a", "b", "c"])
        assert [line.allocated for line in result.lines] == [
            Money.of(34), Money.of(33), Money.of(33),
        ]
        assert result.total_allocated == Money.of(100)

    def test_usd_splits_to_cents(self):
        result = self.engine.allocate_equal(Money.of("100.00", "USD"), ["a", "b", "c"])
        assert result.amount_for("a") == Money.of("33.34", "USD")
        assert result.total_allocated == Money.of("100.00", "USD")

    def test_zero_amount(self):
        result = self.engine.allocate_equal(Money.zero(), ["a", "b"])
        assert all(line.allocated.is_zero for line in result.lines)


class TestWeightedAllocation:
    """Tests for weighted splits."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_proportional(self):
        result = self.engine.allocate_weighted(
            Money.of(1000), [("a", Decimal("1")), ("b", Decimal("3"))],
        )
        assert result.amount_for("a") == Money.of(250)
        assert result.amount_for("b") == Money.of(750)

    def test_largest_remainder_wins_the_leftover(self):
        """Leftover units go to the largest fractional parts first."""
        result = self.engine.allocate_weighted(
            Money.of(10), [("a", Decimal("1")), ("b", Decimal("2"))],
        )
        # exact shares are 3.33 and 6.67
        assert result.amount_for("a") == Money.of(3)
        assert result.amount_for("b") == Money.of(7)

    def test_zero_weight_target_gets_nothing(self):
        result = self.engine.allocate_weighted(
            Money.of(100), [("a", Decimal("0")), ("b", Decimal("1"))],
        )
        assert result.amount_for("a").is_zero
        assert result.amount_for("b") == Money.of(100)

    def test_unknown_target_raises_key_error(self):
        result = self.engine.allocate_equal(Money.of(10), ["a"])
        with pytest.raises(KeyError):
            result.amount_for("missing")


class TestAllocationErrors:
    """Tests for rejected allocation requests."""

    def setup_method(self):
        self.engine = AllocationEngine()

    def test_no_targets(self):
        with pytest.raises(ValueError):
            self.engine.allocate_equal(Money.of(10), [])

    def test_duplicate_targets(self):
        with pytest.raises(ValueError):
            self.engine.allocate_equal(Money.of(10), ["a", "a"])

    def test_negative_weight(self):
        with pytest.raises(ValueError):
            self.engine.allocate_weighted(Money.of(10), [("a", Decimal("-1")), ("b", Decimal("2"))])

    def test_zero_total_weight(self):
        with pytest.raises(ValueError):
            self.engine.allocate_weighted(Money.of(10), [("a", Decimal("0"))])
