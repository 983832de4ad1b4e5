"""
Tests for DebtTerms: validation, S.45 tier mapping and interest accrual.
"""

from datetime import date
from decimal import Decimal

import pytest

from estate_modules.debt import (
    CompoundingFrequency,
    DebtTerms,
    DebtType,
    InterestType,
    LiabilityTier,
)
from tests.factories import kes

START = date(2023, 1, 1)


class TestDebtTermsCreate:

    def test_rate_defaults_to_simple_interest(self):
        terms = DebtTerms.create(kes(100000), interest_rate=Decimal("12")).unwrap()
        assert terms.interest_type is InterestType.SIMPLE

    def test_no_rate_means_no_interest(self):
        terms = DebtTerms.create(kes(100000)).unwrap()
        assert terms.interest_type is InterestType.NONE
        assert terms.interest_rate is None

    def test_security_details_are_trimmed(self):
        terms = DebtTerms.create(
            kes(100000), is_secured=True, security_details="  Title LR 209/1234  ",
        ).unwrap()
        assert terms.security_details == "Title LR 209/1234"

    @pytest.mark.parametrize(
        "kwargs, code",
        [
            ({"principal": kes(0)}, "NON_POSITIVE_PRINCIPAL"),
            ({"interest_rate": Decimal("150")}, "INVALID_INTEREST_RATE"),
            ({"interest_type": InterestType.COMPOUND}, "INTEREST_RATE_REQUIRED"),
            (
                {"interest_rate": Decimal("10"), "interest_type": InterestType.NONE},
                "INTEREST_TYPE_REQUIRED",
            ),
            ({"is_secured": True}, "SECURITY_DETAILS_REQUIRED"),
        ],
    )
    def test_rejected(self, kwargs, code):
        kwargs.setdefault("principal", kes(100000))
        result = DebtTerms.create(**kwargs)
        assert result.is_failure
        assert code in result.error_codes


class TestLiabilityTier:
    """S.45 priority implied by type and security."""

    @pytest.mark.parametrize(
        "debt_type, tier",
        [
            (DebtType.FUNERAL_EXPENSE, LiabilityTier.FUNERAL_EXPENSES),
            (DebtType.TESTAMENTARY_EXPENSE, LiabilityTier.FUNERAL_EXPENSES),
            (DebtType.MORTGAGE, LiabilityTier.SECURED_DEBTS),
            (DebtType.TAX_OBLIGATION, LiabilityTier.TAXES_RATES_WAGES),
            (DebtType.LAND_RATES, LiabilityTier.TAXES_RATES_WAGES),
            (DebtType.EMPLOYEE_WAGES, LiabilityTier.TAXES_RATES_WAGES),
            (DebtType.CREDIT_CARD, LiabilityTier.UNSECURED_GENERAL),
            (DebtType.MEDICAL_BILL, LiabilityTier.UNSECURED_GENERAL),
        ],
    )
    def test_mapping(self, debt_type, tier):
        assert DebtTerms(principal=kes(1000)).liability_tier(debt_type) is tier

    def test_security_outranks_type(self):
        terms = DebtTerms(principal=kes(1000), is_secured=True, security_details="Logbook KCA 123A")
        assert terms.liability_tier(DebtType.PERSONAL_LOAN) is LiabilityTier.SECURED_DEBTS

    def test_funeral_outranks_security(self):
        terms = DebtTerms(principal=kes(1000), is_secured=True, security_details="Lien")
        assert terms.liability_tier(DebtType.FUNERAL_EXPENSE) is LiabilityTier.FUNERAL_EXPENSES

    def test_tier_metadata(self):
        assert LiabilityTier.FUNERAL_EXPENSES.order == 1
        assert LiabilityTier.UNSECURED_GENERAL.section_reference == "S45(d)"
        assert not LiabilityTier.UNSECURED_GENERAL.is_mandatory
        assert LiabilityTier.from_order(3) is LiabilityTier.TAXES_RATES_WAGES
        with pytest.raises(ValueError):
            LiabilityTier.from_order(5)


class TestAccruedInterest:

    def test_simple_interest_per_day(self):
        terms = DebtTerms.create(kes(100000), interest_rate=Decimal("12")).unwrap()
        assert terms.accrued_interest(START, date(2024, 1, 1)) == kes(12000)
        assert terms.accrued_interest(START, date(2023, 7, 2)) == kes(5984)

    def test_compound_over_whole_periods(self):
        terms = DebtTerms.create(
            kes(100000),
            interest_rate=Decimal("12"),
            interest_type=InterestType.COMPOUND,
            compounding_frequency=CompoundingFrequency.MONTHLY,
        ).unwrap()
        # twelve monthly periods at 1%
        assert terms.accrued_interest(START, date(2024, 1, 1)) == kes(12683)

    def test_interest_capped_at_multiple_of_principal(self):
        terms = DebtTerms.create(kes(100000), interest_rate=Decimal("100")).unwrap()
        assert terms.accrued_interest(START, date(2033, 1, 1)) == kes(300000)

    def test_no_interest_before_start(self):
        terms = DebtTerms.create(kes(100000), interest_rate=Decimal("12")).unwrap()
        assert terms.accrued_interest(START, START).is_zero
        assert terms.accrued_interest(START, date(2022, 1, 1)).is_zero

    def test_total_due_and_overdue(self):
        terms = DebtTerms.create(
            kes(100000), interest_rate=Decimal("12"), due_date=date(2023, 12, 31),
        ).unwrap()
        assert terms.total_due(START, date(2024, 1, 1)) == kes(112000)
        assert terms.is_overdue(date(2024, 1, 1))
        assert not terms.is_overdue(date(2023, 12, 31))
