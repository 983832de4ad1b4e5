"""
Debt terms (``estate_modules.debt.terms``).

Immutable contract terms of a liability: principal, interest, due date and
security.  ``DebtTerms.create`` validates and returns a ``Result``; direct
construction is reserved for trusted callers (rehydration, tests).

Interest accrues on the principal only.  Simple interest accrues per
elapsed day over a 365-day year; compound interest compounds over whole
elapsed periods.  Accrued interest is capped at a multiple of principal
(in duplum).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money
from estate_modules.debt.models import DebtType, LiabilityTier

_DAYS_PER_YEAR = Decimal("365")
DEFAULT_INTEREST_CAP_MULTIPLE = Decimal("3")


class InterestType(str, Enum):
    NONE = "NONE"
    SIMPLE = "SIMPLE"
    COMPOUND = "COMPOUND"


class CompoundingFrequency(str, Enum):
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUALLY = "ANNUALLY"

    @property
    def periods_per_year(self) -> int:
        return {"DAILY": 365, "MONTHLY": 12, "QUARTERLY": 4, "ANNUALLY": 1}[self.value]


_FUNERAL_TYPES = frozenset({DebtType.FUNERAL_EXPENSE, DebtType.TESTAMENTARY_EXPENSE})
_PREFERENTIAL_TYPES = frozenset({
    DebtType.TAX_OBLIGATION,
    DebtType.LAND_RATES,
    DebtType.EMPLOYEE_WAGES,
})


@dataclass(frozen=True)
class DebtTerms:
    principal: Money
    interest_rate: Decimal | None = None
    interest_type: InterestType = InterestType.NONE
    compounding_frequency: CompoundingFrequency = CompoundingFrequency.MONTHLY
    due_date: date | None = None
    is_secured: bool = False
    requires_court_approval: bool = False
    security_details: str | None = None

    @classmethod
    def create(
        cls,
        principal: Money,
        interest_rate: Decimal | None = None,
        interest_type: InterestType | None = None,
        compounding_frequency: CompoundingFrequency = CompoundingFrequency.MONTHLY,
        due_date: date | None = None,
        is_secured: bool = False,
        requires_court_approval: bool = False,
        security_details: str | None = None,
    ) -> Result[DebtTerms]:
        """Validate and build terms.

        ``interest_type`` defaults to SIMPLE when a positive rate is given
        and NONE otherwise.
        """
        errors: list[ValidationError] = []
        if not principal.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_PRINCIPAL", "Principal amount must be positive", field="principal",
            ))
        rate = Decimal(str(interest_rate)) if interest_rate is not None else None
        if rate is not None and not Decimal("0") <= rate <= Decimal("100"):
            errors.append(ValidationError(
                "INVALID_INTEREST_RATE", "Interest rate must be between 0 and 100",
                field="interest_rate",
            ))
        if interest_type is None:
            interest_type = InterestType.SIMPLE if rate else InterestType.NONE
        if interest_type is not InterestType.NONE and not rate:
            errors.append(ValidationError(
                "INTEREST_RATE_REQUIRED",
                f"{interest_type.value.lower()} interest requires a positive rate",
                field="interest_rate",
            ))
        if interest_type is InterestType.NONE and rate:
            errors.append(ValidationError(
                "INTEREST_TYPE_REQUIRED", "An interest rate requires an interest type",
                field="interest_type",
            ))
        details = security_details.strip() if security_details else None
        if is_secured and not details:
            errors.append(ValidationError(
                "SECURITY_DETAILS_REQUIRED", "Secured terms require security details",
                field="security_details",
            ))
        if errors:
            return Result.fail(*errors)
        return Result.ok(cls(
            principal=principal,
            interest_rate=rate,
            interest_type=interest_type,
            compounding_frequency=compounding_frequency,
            due_date=due_date,
            is_secured=is_secured,
            requires_court_approval=requires_court_approval,
            security_details=details,
        ))

    def liability_tier(self, debt_type: DebtType) -> LiabilityTier:
        """S.45 tier implied by the debt type and these terms."""
        if debt_type in _FUNERAL_TYPES:
            return LiabilityTier.FUNERAL_EXPENSES
        if self.is_secured or debt_type is DebtType.MORTGAGE:
            return LiabilityTier.SECURED_DEBTS
        if debt_type in _PREFERENTIAL_TYPES:
            return LiabilityTier.TAXES_RATES_WAGES
        return LiabilityTier.UNSECURED_GENERAL

    def accrued_interest(
        self,
        start: date,
        as_of: date,
        cap_multiple: Decimal = DEFAULT_INTEREST_CAP_MULTIPLE,
    ) -> Money:
        zero = Money.zero(self.principal.currency)
        days = (as_of - start).days
        if days <= 0 or self.interest_type is InterestType.NONE or not self.interest_rate:
            return zero
        annual = self.interest_rate / Decimal("100")
        if self.interest_type is InterestType.SIMPLE:
            interest = self.principal * (annual * Decimal(days) / _DAYS_PER_YEAR)
        else:
            n = self.compounding_frequency.periods_per_year
            periods = int(Decimal(days) * n / _DAYS_PER_YEAR)
            growth = (Decimal("1") + annual / n) ** periods - Decimal("1")
            interest = self.principal * growth
        cap = self.principal * cap_multiple
        return cap if interest > cap else interest

    def total_due(self, start: date, as_of: date) -> Money:
        return self.principal + self.accrued_interest(start, as_of)

    def is_overdue(self, as_of: date) -> bool:
        return self.due_date is not None and as_of > self.due_date
