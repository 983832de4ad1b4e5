"""
Tests for the Section 40 (polygamous) distribution calculator.

Covers:
- Equal division among houses and within each house
- Agreed house percentages and court-ordered division
- Customary credits and debits
- Advancements brought into account per house
- Validation of house structure
"""

from datetime import date
from decimal import Decimal

import pytest

from estate_engines.heirs import ChildInfo, SpouseInfo
from estate_engines.hotchpot import LifetimeGift
from estate_engines.section40 import (
    AdjustmentDirection,
    CustomaryAdjustment,
    CustomaryAdjustmentKind,
    HouseDistributionMethod,
    PolygamousHouse,
    S40CalculationInput,
    Section40Calculator,
    Section40Rule,
)
from estate_kernel.domain.values import Percentage
from tests.factories import kes

CALC_DATE = date(2024, 6, 1)


def _house_one(**overrides) -> PolygamousHouse:
    kwargs = dict(
        house_id="h1",
        house_name="House of Wanjiru",
        house_order=1,
        spouse=SpouseInfo("w1", "Wanjiru"),
        children=(ChildInfo("c1a", "Kamau", age=35), ChildInfo("c1b", "Njeri", age=31)),
    )
    kwargs.update(overrides)
    return PolygamousHouse(**kwargs)


def _house_two(**overrides) -> PolygamousHouse:
    kwargs = dict(
        house_id="h2",
        house_name="House of Akinyi",
        house_order=2,
        spouse=SpouseInfo("w2", "Akinyi"),
        children=(ChildInfo("c2a", "Ouma", age=22),),
    )
    kwargs.update(overrides)
    return PolygamousHouse(**kwargs)


def _input(houses=None, **overrides) -> S40CalculationInput:
    kwargs = dict(
        net_estate_value=kes(1000000),
        personal_chattels_value=kes(0),
        calculation_date=CALC_DATE,
        houses=tuple(houses) if houses is not None else (_house_one(), _house_two()),
    )
    kwargs.update(overrides)
    return S40CalculationInput(**kwargs)


class TestEqualHouses:
    """S.40(1): equal division among the houses."""

    def setup_method(self):
        self.calculator = Section40Calculator()

    def test_two_houses(self):
        result = self.calculator.calculate(_input())

        assert result.is_success
        dist = result.value
        assert dist.applied_section == Section40Rule.EQUAL_HOUSES
        assert dist.method == HouseDistributionMethod.EQUAL_HOUSES
        assert dist.per_house_share == kes(500000)
        assert dist.house("h1").total_house_share == kes(500000)
        assert dist.house("h2").total_house_share == kes(500000)
        assert dist.total_distributed == kes(1000000)
        assert dist.complies_with_s40

    def test_within_house_split(self):
        """Wife takes a third of the house share; children share the rest."""
        dist = self.calculator.calculate(_input()).value

        assert dist.share_for("w1").total_share == kes(166667)
        assert dist.share_for("c1a").total_share == kes(166667)
        assert dist.share_for("c1b").total_share == kes(166666)
        assert dist.share_for("w2").total_share == kes(166667)
        assert dist.share_for("c2a").total_share == kes(333333)

    def test_per_house_share_times_houses_matches_estate(self):
        third = PolygamousHouse(
            house_id="h3", house_name="House of Chebet", house_order=3,
            spouse=SpouseInfo("w3", "Chebet"),
        )
        dist = self.calculator.calculate(_input([_house_one(), _house_two(), third])).value

        assert dist.per_house_share == kes(333333)
        shortfall = dist.net_estate_value.amount - dist.per_house_share.amount * 3
        assert abs(shortfall) <= Decimal("1")
        assert [h.total_house_share for h in dist.house_shares] == [
            kes(333334), kes(333333), kes(333333),
        ]
        assert dist.total_distributed == kes(1000000)
        assert dist.per_house_share_reconciles

    def test_rounded_per_house_share_drifts_by_whole_units(self):
        houses = [
            PolygamousHouse(
                house_id=f"h{n}", house_name=f"House {n}", house_order=n,
                spouse=SpouseInfo(f"w{n}", f"Wife {n}"),
            )
            for n in range(1, 7)
        ]
        dist = self.calculator.calculate(_input(houses, net_estate_value=kes(100))).value

        assert dist.per_house_share == kes(17)
        assert dist.per_house_tolerance == Decimal("6")
        assert dist.per_house_share_reconciles
        assert dist.total_distributed == kes(100)

    def test_chattels_follow_the_wife(self):
        dist = self.calculator.calculate(_input(personal_chattels_value=kes(100000))).value

        house = dist.house("h1")
        assert house.share_of_personal_chattels == kes(50000)
        assert dist.share_for("w1").chattels_share == kes(50000)
        assert dist.share_for("w1").residue_share == kes(150000)
        assert dist.share_for("c1a").total_share == kes(150000)

    def test_house_without_surviving_wife(self):
        house = _house_two(spouse=None)
        dist = self.calculator.calculate(_input([_house_one(), house])).value
        assert dist.house("h2").spouse_share is None
        assert dist.share_for("c2a").total_share == kes(500000)

    def test_counts(self):
        dist = self.calculator.calculate(_input()).value
        assert dist.total_houses == 2
        assert dist.total_children == 3
        assert dist.total_minor_children == 0
        assert dist.average_children_per_house == Decimal("1.50")

    def test_separate_property_is_noted_not_divided(self):
        house = _house_one(separate_property_value=kes(2000000))
        dist = self.calculator.calculate(_input([house, _house_two()])).value
        assert dist.house("h1").total_house_share == kes(500000)
        assert any("Separate property" in n for n in dist.house("h1").notes)

    def test_minor_requires_court_approval(self):
        house = _house_two(children=(ChildInfo("c2a", "Ouma", age=9),))
        dist = self.calculator.calculate(_input([_house_one(), house])).value
        assert dist.requires_court_approval
        assert dist.share_for("c2a").is_minor


class TestAdjustedHouses:
    """S.40(2): agreed percentages, court orders and customary adjustments."""

    def setup_method(self):
        self.calculator = Section40Calculator()

    def test_house_percentages(self):
        dist = self.calculator.calculate(_input(house_share_percentages={
            "h1": Percentage.of(60), "h2": Percentage.of(40),
        })).value

        assert dist.applied_section == Section40Rule.ADJUSTED_HOUSES
        assert dist.method == HouseDistributionMethod.HOUSE_PERCENTAGES
        assert dist.house("h1").total_house_share == kes(600000)
        assert dist.house("h2").total_house_share == kes(400000)

    def test_court_order(self):
        result = self.calculator.calculate(_input(
            court_ordered_distribution={"h1": kes(700000), "h2": kes(200000)},
            court_order_reference="Succession Cause 45 of 2023",
            customary_adjustments=(
                CustomaryAdjustment("h2", kes(50000), AdjustmentDirection.CREDIT),
            ),
        ))
        dist = result.value

        assert dist.method == HouseDistributionMethod.COURT_ORDERED
        assert dist.house("h1").total_house_share == kes(700000)
        assert dist.house("h1").court_ordered_amount == kes(700000)
        assert dist.house("h2").total_house_share == kes(200000)
        assert dist.house("h2").customary_credit.is_zero
        assert any("Customary adjustments ignored" in n for n in dist.notes)
        assert any("undistributed" in w for w in result.warnings)

    def test_customary_credit_and_debit(self):
        dist = self.calculator.calculate(_input(customary_adjustments=(
            CustomaryAdjustment("h1", kes(50000), AdjustmentDirection.CREDIT,
                                CustomaryAdjustmentKind.BRIDE_PRICE, "Bride price returned"),
            CustomaryAdjustment("h2", kes(50000), AdjustmentDirection.DEBIT),
        ))).value

        assert dist.applied_section == Section40Rule.ADJUSTED_HOUSES
        assert dist.house("h1").total_house_share == kes(550000)
        assert dist.house("h2").total_house_share == kes(450000)
        assert dist.requires_customary_law_consideration
        assert dist.complies_with_s40

    def test_debit_above_share_is_a_compliance_issue(self):
        dist = self.calculator.calculate(_input(customary_adjustments=(
            CustomaryAdjustment("h2", kes(600000), AdjustmentDirection.DEBIT),
        ))).value

        assert dist.house("h2").total_house_share.is_zero
        assert not dist.complies_with_s40
        assert dist.requires_court_approval

    def test_ethnic_group_without_adjustments_warns(self):
        result = self.calculator.calculate(_input(customary_ethnic_group="Kikuyu"))
        assert any("Kikuyu" in w for w in result.warnings)
        assert result.value.requires_customary_law_consideration

    def test_advancement_to_house_member(self):
        gift = LifetimeGift("g-1", "c1a", kes(100000), date(2019, 3, 1))
        dist = self.calculator.calculate(_input(lifetime_gifts=(gift,))).value

        assert dist.applied_section == Section40Rule.ADJUSTED_HOUSES
        assert dist.house("h1").hotchpot_deduction == kes(100000)
        assert dist.house("h1").total_house_share == kes(400000)
        assert dist.house("h2").total_house_share == kes(500000)
        assert dist.total_distributed == kes(900000)
        assert "Hotchpot deductions of 100000 KES remain undistributed" in dist.notes

    def test_advancement_above_house_share(self):
        gift = LifetimeGift("g-1", "w1", kes(800000), date(2019, 3, 1))
        dist = self.calculator.calculate(_input(lifetime_gifts=(gift,))).value

        assert dist.house("h1").hotchpot_deduction == kes(500000)
        assert dist.house("h1").total_house_share.is_zero
        assert dist.house("h2").total_house_share == kes(500000)
        assert any("house takes nothing further" in n for n in dist.notes)

    def test_credit_absorbs_withheld_advancement_first(self):
        gift = LifetimeGift("g-1", "c1a", kes(100000), date(2019, 3, 1))
        dist = self.calculator.calculate(_input(
            lifetime_gifts=(gift,),
            customary_adjustments=(
                CustomaryAdjustment("h2", kes(60000), AdjustmentDirection.CREDIT),
            ),
        )).value

        assert dist.house("h2").total_house_share == kes(560000)
        assert dist.house("h1").customary_funding.is_zero
        assert dist.total_distributed == kes(960000)

    def test_credit_is_funded_by_other_houses(self):
        third = PolygamousHouse(
            house_id="h3", house_name="House of Chebet", house_order=3,
            spouse=SpouseInfo("w3", "Chebet"),
        )
        dist = self.calculator.calculate(_input(
            [_house_one(), _house_two(), third],
            net_estate_value=kes(900000),
            customary_adjustments=(
                CustomaryAdjustment("h1", kes(100000), AdjustmentDirection.CREDIT),
            ),
        )).value

        assert dist.house("h1").total_house_share == kes(400000)
        assert dist.house("h2").customary_funding == kes(50000)
        assert dist.house("h3").customary_funding == kes(50000)
        assert dist.house("h2").total_house_share == kes(250000)
        assert dist.house("h3").total_house_share == kes(250000)
        assert dist.total_distributed == kes(900000)
        assert dist.complies_with_s40

    def test_unfundable_credit_fails(self):
        result = self.calculator.calculate(_input(customary_adjustments=(
            CustomaryAdjustment("h1", kes(300000), AdjustmentDirection.CREDIT),
            CustomaryAdjustment("h2", kes(300000), AdjustmentDirection.CREDIT),
        )))
        assert result.error_codes == ("CUSTOMARY_CREDITS_EXCEED_ESTATE",)


class TestValidation:
    """Structurally invalid house data is returned as a failed Result."""

    def setup_method(self):
        self.calculator = Section40Calculator()

    def _codes(self, **kwargs):
        result = self.calculator.calculate(_input(**kwargs))
        assert result.is_failure
        return result.error_codes

    def test_single_house(self):
        assert "TOO_FEW_HOUSES" in self._codes(houses=[_house_one()])

    def test_gap_in_house_order(self):
        assert "INVALID_HOUSE_ORDER" in self._codes(houses=[_house_one(), _house_two(house_order=3)])

    def test_duplicate_house(self):
        assert "DUPLICATE_HOUSE" in self._codes(houses=[_house_one(), _house_two(house_id="h1")])

    def test_empty_house(self):
        empty = _house_two(spouse=None, children=())
        assert "EMPTY_HOUSE" in self._codes(houses=[_house_one(), empty])

    def test_percentages_must_total_100(self):
        codes = self._codes(house_share_percentages={
            "h1": Percentage.of(60), "h2": Percentage.of(30),
        })
        assert "PERCENTAGES_NOT_100" in codes

    def test_percentages_must_name_every_house(self):
        codes = self._codes(house_share_percentages={"h1": Percentage.of(100)})
        assert "PERCENTAGE_HOUSES_MISMATCH" in codes

    def test_court_order_exceeding_estate(self):
        codes = self._codes(court_ordered_distribution={"h1": kes(700000), "h2": kes(400000)})
        assert "COURT_ORDER_EXCEEDS_ESTATE" in codes

    def test_adjustment_for_unknown_house(self):
        codes = self._codes(customary_adjustments=(
            CustomaryAdjustment("h9", kes(1000), AdjustmentDirection.CREDIT),
        ))
        assert "UNKNOWN_HOUSE" in codes

    @pytest.mark.parametrize("chattels", [1000001])
    def test_chattels_exceed_estate(self, chattels):
        assert "CHATTELS_EXCEED_ESTATE" in self._codes(personal_chattels_value=kes(chattels))
