"""
Debt Domain Models (``estate_modules.debt.models``).

Responsibility
--------------
Enumerations and frozen value objects for estate liabilities: debt
classification, Section 45 priority tiers, statuses, payment and dispute
records.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
the ``Debt`` aggregate and by ``EstateDistributionService``.

Invariants enforced
-------------------
* All records are ``frozen=True``; the aggregate appends new records and
  never edits old ones.
* Monetary fields are ``Money``, never ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from estate_kernel.domain.values import Money


class DebtType(str, Enum):
    MORTGAGE = "MORTGAGE"
    PERSONAL_LOAN = "PERSONAL_LOAN"
    CREDIT_CARD = "CREDIT_CARD"
    BUSINESS_DEBT = "BUSINESS_DEBT"
    TAX_OBLIGATION = "TAX_OBLIGATION"
    FUNERAL_EXPENSE = "FUNERAL_EXPENSE"
    TESTAMENTARY_EXPENSE = "TESTAMENTARY_EXPENSE"
    MEDICAL_BILL = "MEDICAL_BILL"
    LAND_RATES = "LAND_RATES"
    UTILITY_BILLS = "UTILITY_BILLS"
    EMPLOYEE_WAGES = "EMPLOYEE_WAGES"
    COURT_FINES = "COURT_FINES"
    OTHER = "OTHER"


class KenyanTaxType(str, Enum):
    INCOME_TAX = "INCOME_TAX"
    CAPITAL_GAINS_TAX = "CAPITAL_GAINS_TAX"
    STAMP_DUTY = "STAMP_DUTY"
    WITHHOLDING_TAX = "WITHHOLDING_TAX"
    VALUE_ADDED_TAX = "VALUE_ADDED_TAX"
    EXCISE_DUTY = "EXCISE_DUTY"
    CUSTOMS_DUTY = "CUSTOMS_DUTY"
    OTHER = "OTHER"


class LiabilityTier(str, Enum):
    """Law of Succession Act S.45 priority ranking."""

    FUNERAL_EXPENSES = "FUNERAL_EXPENSES"
    SECURED_DEBTS = "SECURED_DEBTS"
    TAXES_RATES_WAGES = "TAXES_RATES_WAGES"
    UNSECURED_GENERAL = "UNSECURED_GENERAL"

    @property
    def order(self) -> int:
        return _TIER_ORDER[self]

    @property
    def is_mandatory(self) -> bool:
        """Tiers 1-3 must be paid before any general creditor."""
        return self.order <= 3

    @property
    def section_reference(self) -> str:
        return f"S45({'abcd'[self.order - 1]})"

    @classmethod
    def from_order(cls, order: int) -> LiabilityTier:
        for tier, tier_order in _TIER_ORDER.items():
            if tier_order == order:
                return tier
        raise ValueError(f"No liability tier with order {order}")


_TIER_ORDER = {
    LiabilityTier.FUNERAL_EXPENSES: 1,
    LiabilityTier.SECURED_DEBTS: 2,
    LiabilityTier.TAXES_RATES_WAGES: 3,
    LiabilityTier.UNSECURED_GENERAL: 4,
}


class DebtStatus(str, Enum):
    OUTSTANDING = "OUTSTANDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    SETTLED = "SETTLED"
    WRITTEN_OFF = "WRITTEN_OFF"
    DISPUTED = "DISPUTED"
    STATUTE_BARRED = "STATUTE_BARRED"
    CLAIM_REJECTED = "CLAIM_REJECTED"

    @property
    def is_closed(self) -> bool:
        return self in CLOSED_STATUSES

    @property
    def is_open(self) -> bool:
        return self in (DebtStatus.OUTSTANDING, DebtStatus.PARTIALLY_PAID)


CLOSED_STATUSES = frozenset({
    DebtStatus.SETTLED,
    DebtStatus.WRITTEN_OFF,
    DebtStatus.CLAIM_REJECTED,
})


class VerificationStatus(str, Enum):
    UNVERIFIED = "UNVERIFIED"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class DisputeOutcome(str, Enum):
    UPHELD = "UPHELD"
    DISMISSED = "DISMISSED"
    SETTLED = "SETTLED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    MPESA = "MPESA"
    CHEQUE = "CHEQUE"
    ASSET_TRANSFER = "ASSET_TRANSFER"
    OTHER = "OTHER"


@dataclass(frozen=True)
class PaymentDetails:
    """Caller-supplied facts about a payment."""

    payment_date: date
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    transaction_reference: str | None = None
    paid_by: str | None = None


@dataclass(frozen=True)
class PaymentRecord:
    """An applied payment.  ``applied`` is ``tendered`` clamped to the balance."""

    tendered: Money
    applied: Money
    payment_date: date
    method: PaymentMethod
    balance_after: Money
    recorded_at: datetime
    transaction_reference: str | None = None
    paid_by: str | None = None

    @property
    def was_clamped(self) -> bool:
        return self.applied < self.tendered

    def to_record(self) -> dict:
        return {
            "tendered": self.tendered.to_record(),
            "applied": self.applied.to_record(),
            "payment_date": self.payment_date.isoformat(),
            "method": self.method.value,
            "balance_after": self.balance_after.to_record(),
            "recorded_at": self.recorded_at.isoformat(),
            "transaction_reference": self.transaction_reference,
        }


@dataclass(frozen=True)
class DisputeRecord:
    reason: str
    disputed_by: str
    disputed_at: datetime
    previous_status: DebtStatus
    outcome: DisputeOutcome | None = None
    resolution: str | None = None
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    settled_amount: Money | None = None

    @property
    def is_open(self) -> bool:
        return self.outcome is None


@dataclass(frozen=True)
class CourtApproval:
    order_reference: str
    approved_on: date


@dataclass(frozen=True)
class AuditNote:
    recorded_at: datetime
    actor: str
    note: str


@dataclass(frozen=True)
class Section45Compliance:
    tier: LiabilityTier
    priority: int
    requirements: tuple[str, ...]
    is_compliant: bool


@dataclass(frozen=True)
class PaymentEligibility:
    can_pay: bool
    reason: str | None = None
    blockers: tuple[str, ...] = field(default=())
