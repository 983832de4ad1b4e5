"""
Tests for the hotchpot engine.

Covers:
- Gift revaluation strategies
- Per-beneficiary aggregation, exemptions and the minimum threshold
- Adjustment lifecycle transitions
- Division with advancements deducted
"""

from datetime import date
from decimal import Decimal

import pytest

from estate_engines.hotchpot import (
    CourtExemption,
    HotchpotBeneficiary,
    HotchpotCalculationInput,
    HotchpotCalculator,
    HotchpotMethod,
    HotchpotStatus,
    LifetimeGift,
    compound_value,
    deduct_advancements,
    revalue_gift,
)
from estate_kernel.exceptions import HotchpotStateError
from tests.factories import kes

DEATH = date(2024, 6, 1)


def _gift(gift_id="g-1", recipient="child-1", amount=100000, **overrides) -> LifetimeGift:
    kwargs = dict(
        gift_id=gift_id,
        recipient_id=recipient,
        value=kes(amount),
        gift_date=date(2020, 1, 1),
    )
    kwargs.update(overrides)
    return LifetimeGift(**kwargs)


def _input(gifts, **overrides) -> HotchpotCalculationInput:
    kwargs = dict(
        net_estate_value=kes(1000000),
        date_of_death=DEATH,
        beneficiaries=(
            HotchpotBeneficiary("child-1", "Baraka"),
            HotchpotBeneficiary("child-2", "Zawadi"),
        ),
        lifetime_gifts=tuple(gifts),
    )
    kwargs.update(overrides)
    return HotchpotCalculationInput(**kwargs)


class TestRevaluation:
    """Revaluing a gift to the date of death."""

    def test_compound_value(self):
        assert compound_value(kes(1000), Decimal("0.10"), 2) == kes(1210)
        assert compound_value(kes(1000), Decimal("0.10"), 0) == kes(1000)

    def test_nominal(self):
        value = revalue_gift(_gift(), DEATH, method=HotchpotMethod.NOMINAL_VALUE).unwrap()
        assert value == kes(100000)

    def test_inflation_adjusted_uses_calendar_years(self):
        """2020 to 2024 is four years at the default 5%."""
        value = revalue_gift(_gift(), DEATH).unwrap()
        assert value == kes(121551)

    def test_cost_of_living_adds_premium(self):
        value = revalue_gift(
            _gift(), DEATH, method=HotchpotMethod.COST_OF_LIVING_ADJUSTED,
        ).unwrap()
        assert value == kes(131080)

    def test_market_value_preferred_when_known(self):
        gift = _gift(current_market_value=kes(150000))
        value = revalue_gift(gift, DEATH, method=HotchpotMethod.CURRENT_MARKET_VALUE).unwrap()
        assert value == kes(150000)

    def test_market_value_falls_back_to_inflation(self):
        value = revalue_gift(_gift(), DEATH, method=HotchpotMethod.CURRENT_MARKET_VALUE).unwrap()
        assert value == kes(121551)

    def test_gift_not_subject_to_hotchpot(self):
        result = revalue_gift(_gift(is_subject_to_hotchpot=False), DEATH)
        assert "GIFT_NOT_HOTCHPOT_SUBJECT" in result.error_codes

    def test_death_before_gift(self):
        result = revalue_gift(_gift(), date(2019, 1, 1))
        assert "DEATH_BEFORE_GIFT" in result.error_codes

    def test_invalid_rate(self):
        result = revalue_gift(_gift(), DEATH, inflation_rate=Decimal("1.5"))
        assert "INVALID_INFLATION_RATE" in result.error_codes


class TestHotchpotCalculator:
    """Aggregation per beneficiary."""

    def setup_method(self):
        self.calculator = HotchpotCalculator()

    def test_advancements_are_aggregated(self):
        gifts = [_gift("g-1"), _gift("g-2", amount=50000)]
        result = self.calculator.calculate(_input(gifts, adjustment_method=HotchpotMethod.NOMINAL_VALUE))

        assert result.is_success
        adjustment = result.value.adjustments[0]
        assert adjustment.status == HotchpotStatus.CALCULATED
        assert adjustment.advancements_count == 2
        assert adjustment.adjustment_amount == kes(150000)
        assert adjustment.impact_percentage.value == Decimal("15.0000")
        assert adjustment.is_significant
        assert result.value.adjustment_for("child-1") == kes(150000)
        assert result.value.adjustment_for("child-2").is_zero
        assert result.value.hotchpot_estate_value == kes(1150000)

    def test_beneficiary_without_gifts_has_zero_adjustment(self):
        result = self.calculator.calculate(_input([_gift()]))
        adjustment = result.value.adjustments[1]
        assert adjustment.beneficiary_id == "child-2"
        assert adjustment.adjustment_amount.is_zero

    def test_customary_gift_is_exempted(self):
        """Customary gifts contribute nothing, whatever their value."""
        gift = _gift(amount=5000000, customary_law_exemption=True)
        result = self.calculator.calculate(_input([gift]))

        adjustment = result.value.adjustments[0]
        assert adjustment.status == HotchpotStatus.EXEMPTED
        assert adjustment.adjustment_amount.is_zero
        assert adjustment.exempted_gift_ids == ("g-1",)
        assert adjustment.exemption_reason == "customary law gift"
        assert result.value.total_adjustments.is_zero

    def test_court_exemption_covers_listed_gifts_only(self):
        gifts = [_gift("g-1"), _gift("g-2", amount=40000)]
        order = CourtExemption("child-1", "HCSC 12 of 2024", gift_ids=("g-1",))
        result = self.calculator.calculate(_input(
            gifts,
            adjustment_method=HotchpotMethod.NOMINAL_VALUE,
            court_exemptions=(order,),
        ))

        adjustment = result.value.adjustments[0]
        assert adjustment.status == HotchpotStatus.CALCULATED
        assert adjustment.adjustment_amount == kes(40000)
        assert adjustment.exempted_gift_ids == ("g-1",)

    def test_non_advancement_is_ignored(self):
        result = self.calculator.calculate(_input([_gift(is_advancement=False)]))
        adjustment = result.value.adjustments[0]
        assert adjustment.advancements_count == 0
        assert adjustment.adjustment_amount.is_zero

    def test_below_threshold_is_waived(self):
        result = self.calculator.calculate(_input(
            [_gift(amount=5000)],
            adjustment_method=HotchpotMethod.NOMINAL_VALUE,
            minimum_adjustment_threshold=kes(10000),
        ))
        adjustment = result.value.adjustments[0]
        assert adjustment.status == HotchpotStatus.WAIVED
        assert adjustment.net_adjustment.is_zero

    def test_unknown_recipient_warns(self):
        result = self.calculator.calculate(_input([_gift(recipient="stranger")]))
        assert result.is_success
        assert any("not a beneficiary" in w for w in result.warnings)

    def test_large_advancement_warns(self):
        result = self.calculator.calculate(_input(
            [_gift(amount=600000)], adjustment_method=HotchpotMethod.NOMINAL_VALUE,
        ))
        assert any("exceed 30% of the net estate" in w for w in result.warnings)
        assert any("more than 50%" in w for w in result.warnings)

    @pytest.mark.parametrize(
        "overrides, code",
        [
            ({"net_estate_value": kes(0)}, "NON_POSITIVE_ESTATE"),
            ({"inflation_rate": Decimal("-0.01")}, "INVALID_INFLATION_RATE"),
            (
                {"beneficiaries": (HotchpotBeneficiary("c", "A"), HotchpotBeneficiary("c", "B"))},
                "DUPLICATE_BENEFICIARY",
            ),
            ({"date_of_death": date(2019, 12, 31)}, "GIFT_AFTER_DEATH"),
        ],
    )
    def test_validation(self, overrides, code):
        result = self.calculator.calculate(_input([_gift()], **overrides))
        assert result.is_failure
        assert code in result.error_codes


class TestAdjustmentLifecycle:
    """Status transitions on HotchpotAdjustment."""

    def _calculated(self):
        result = HotchpotCalculator().calculate(
            _input([_gift()], adjustment_method=HotchpotMethod.NOMINAL_VALUE)
        )
        return result.value.adjustments[0]

    def _empty(self):
        return HotchpotCalculator().calculate(_input([_gift()])).value.adjustments[1]

    def test_apply(self):
        applied = self._calculated().apply("administrator-1").unwrap()
        assert applied.status == HotchpotStatus.APPLIED

    def test_apply_zero_adjustment_fails(self):
        result = self._empty().apply("administrator-1")
        assert result.error_codes == ("NOTHING_TO_APPLY",)

    def test_dispute_and_resolve(self):
        disputed = self._calculated().dispute("Gift was a loan, since repaid", "child-1").unwrap()
        assert disputed.status == HotchpotStatus.DISPUTED
        assert disputed.requires_court_approval

        resolved = disputed.resolve_dispute("Court confirmed half", kes(50000)).unwrap()
        assert resolved.status == HotchpotStatus.CALCULATED
        assert resolved.adjustment_amount == kes(50000)

    def test_dispute_requires_reason(self):
        assert "REASON_TOO_SHORT" in self._calculated().dispute("no", "child-1").error_codes

    def test_resolution_required(self):
        disputed = self._calculated().dispute("Gift was a loan, since repaid", "child-1").unwrap()
        assert disputed.resolve_dispute("  ").error_codes == ("RESOLUTION_REQUIRED",)

    def test_exempt_zeroes_amount(self):
        exempted = self._calculated().exempt("Family agreement recorded in court").unwrap()
        assert exempted.status == HotchpotStatus.EXEMPTED
        assert exempted.adjustment_amount.is_zero

    def test_exempt_requires_reason(self):
        assert "REASON_TOO_SHORT" in self._calculated().exempt("short").error_codes

    def test_terminal_state_cannot_transition(self):
        applied = self._calculated().apply("administrator-1").unwrap()
        with pytest.raises(HotchpotStateError):
            applied.waive("late waiver")


class TestDeductAdvancements:
    """Division of an amount with each part reduced by its own advancements."""

    def test_equal_targets_with_one_advancement(self):
        split = deduct_advancements(
            kes(600000),
            [("a", Decimal("1")), ("b", Decimal("1"))],
            {"a": kes(100000)},
        )
        assert split["a"].entitlement == kes(300000)
        assert split["a"].deduction == kes(100000)
        assert split["a"].share == kes(200000)
        assert split["b"].share == kes(300000)
        assert split.withheld == kes(100000)
        assert split.total_shares == kes(500000)

    def test_over_advanced_target_takes_nothing(self):
        split = deduct_advancements(
            kes(600000),
            [("a", Decimal("1")), ("b", Decimal("1")), ("c", Decimal("1"))],
            {"a": kes(900000), "b": kes(60000)},
        )
        assert split["a"].exhausted
        assert split["a"].share.is_zero
        assert split["a"].advancement == kes(900000)
        assert split["a"].deduction == kes(200000)
        assert split["b"].share == kes(140000)
        assert split["c"].share == kes(200000)
        assert not split["c"].exhausted

    def test_no_advancements_is_a_plain_split(self):
        split = deduct_advancements(
            kes(101),
            [("a", Decimal("1")), ("b", Decimal("1"))],
            {},
        )
        assert split["a"].share == kes(51)
        assert split["b"].share == kes(50)
        assert split["b"].deduction.is_zero
        assert split.withheld.is_zero

    def test_weighted_targets(self):
        split = deduct_advancements(
            kes(900),
            [("a", Decimal("2")), ("b", Decimal("1"))],
            {"b": kes(100)},
        )
        assert split["a"].share == kes(600)
        assert split["b"].share == kes(200)
