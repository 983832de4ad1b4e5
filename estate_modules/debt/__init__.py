"""
Debt Module (``estate_modules.debt``).

Responsibility
--------------
Estate liabilities: classification, contract terms, Section 45 priority,
payments, disputes, write-offs and the limitation period.

Architecture position
---------------------
**Modules layer** -- the ``Debt`` aggregate plus its terms, config,
workflow and events.  Settlement arithmetic across debts lives in
``estate_engines.debt_settlement``; ``Debt.to_claim()`` is the bridge.

Invariants enforced
-------------------
* Outstanding balance never negative; SETTLED exactly at zero.
* Payment history and audit notes are append-only.
* Funeral-tier priority cannot be reassigned.
* Status changes follow ``DEBT_LIFECYCLE_WORKFLOW``.

Failure modes
-------------
* ``Result.is_failure`` for invalid input; caller inspects
  ``result.error_message``.
* ``DebtClosedError``, ``StatuteBarredDebtError`` and
  ``PriorityTierLockedError`` when an operation would corrupt state.
"""

from estate_modules.debt.config import DebtConfig
from estate_modules.debt.debt import KRA_PIN_PATTERN, Debt
from estate_modules.debt.events import DebtEvent, DebtEventType
from estate_modules.debt.models import (
    AuditNote,
    CourtApproval,
    DebtStatus,
    DebtType,
    DisputeOutcome,
    DisputeRecord,
    KenyanTaxType,
    LiabilityTier,
    PaymentDetails,
    PaymentEligibility,
    PaymentMethod,
    PaymentRecord,
    Section45Compliance,
    VerificationStatus,
)
from estate_modules.debt.terms import CompoundingFrequency, DebtTerms, InterestType
from estate_modules.debt.workflows import DEBT_LIFECYCLE_WORKFLOW

__all__ = [
    "AuditNote",
    "CompoundingFrequency",
    "CourtApproval",
    "DEBT_LIFECYCLE_WORKFLOW",
    "Debt",
    "DebtConfig",
    "DebtEvent",
    "DebtEventType",
    "DebtStatus",
    "DebtTerms",
    "DebtType",
    "DisputeOutcome",
    "DisputeRecord",
    "InterestType",
    "KRA_PIN_PATTERN",
    "KenyanTaxType",
    "LiabilityTier",
    "PaymentDetails",
    "PaymentEligibility",
    "PaymentMethod",
    "PaymentRecord",
    "Section45Compliance",
    "VerificationStatus",
]
