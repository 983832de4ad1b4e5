"""
Module: estate_engines.debt_settlement
Responsibility:
    Apply the estate's assets to its debts in Law of Succession Act S.45
    priority order: each tier is paid in full before the next is touched,
    and a tier the estate cannot pay in full abates rateably.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel and sibling engines.

Invariants enforced:
    - No claim receives more than its amount.
    - A lower-priority tier receives nothing while a higher tier is short.
    - paid + residue == gross estate value; shortfall == claims - paid.

Failure modes:
    - Result.fail for tier orders outside 1..4, duplicate claim ids,
      currency mismatches.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from estate_engines.allocation import AllocationEngine
from estate_engines.tracer import CalculationMetadata, compute_input_fingerprint, traced_engine
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.debt_settlement")

ENGINE_NAME = "debt_settlement"
ENGINE_VERSION = "1.0"

TIER_ORDERS = (1, 2, 3, 4)


@dataclass(frozen=True)
class DebtClaim:
    """An outstanding debt as presented for settlement."""

    debt_id: str
    tier_order: int
    amount: Money
    incurred_date: date | None = None
    creditor_name: str = ""


@dataclass(frozen=True)
class ClaimSettlement:
    debt_id: str
    tier_order: int
    claimed: Money
    paid: Money

    @property
    def unpaid(self) -> Money:
        return self.claimed - self.paid

    @property
    def is_paid_in_full(self) -> bool:
        return self.paid == self.claimed


@dataclass(frozen=True)
class TierSettlement:
    tier_order: int
    claimed: Money
    paid: Money

    @property
    def abated(self) -> bool:
        return self.paid < self.claimed


@dataclass(frozen=True)
class SettlementPlan:
    gross_estate_value: Money
    settlements: tuple[ClaimSettlement, ...]
    tiers: tuple[TierSettlement, ...]
    residue: Money
    metadata: CalculationMetadata
    notes: tuple[str, ...] = ()

    @property
    def total_claimed(self) -> Money:
        return Money.sum((s.claimed for s in self.settlements), self.gross_estate_value.currency)

    @property
    def total_paid(self) -> Money:
        return Money.sum((s.paid for s in self.settlements), self.gross_estate_value.currency)

    @property
    def shortfall(self) -> Money:
        return self.total_claimed - self.total_paid

    @property
    def is_solvent(self) -> bool:
        return self.shortfall.is_zero

    def settlement_for(self, debt_id: str) -> ClaimSettlement:
        for settlement in self.settlements:
            if settlement.debt_id == debt_id:
                return settlement
        raise KeyError(debt_id)

    def to_record(self) -> dict:
        return {
            "gross_estate_value": self.gross_estate_value.to_record(),
            "total_claimed": self.total_claimed.to_record(),
            "total_paid": self.total_paid.to_record(),
            "shortfall": self.shortfall.to_record(),
            "residue": self.residue.to_record(),
            "is_solvent": self.is_solvent,
            "tiers": [
                {
                    "tier_order": t.tier_order,
                    "claimed": t.claimed.to_record(),
                    "paid": t.paid.to_record(),
                    "abated": t.abated,
                }
                for t in self.tiers
            ],
            "settlements": [
                {
                    "debt_id": s.debt_id,
                    "tier_order": s.tier_order,
                    "claimed": s.claimed.to_record(),
                    "paid": s.paid.to_record(),
                }
                for s in self.settlements
            ],
            "notes": list(self.notes),
            "metadata": self.metadata.to_record(),
        }


class DebtSettlementEngine:
    """
    S.45 priority settlement.

    Non-goals:
        - Does not decide which debts are enforceable; callers exclude
          statute-barred, rejected and written-off debts first.
    """

    def __init__(self, allocator: AllocationEngine | None = None):
        self.allocator = allocator or AllocationEngine()

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("gross_estate_value", "claims"))
    def settle(
        self,
        gross_estate_value: Money,
        claims: Sequence[DebtClaim],
    ) -> Result[SettlementPlan]:
        currency = gross_estate_value.currency
        errors: list[ValidationError] = []
        ids = [c.debt_id for c in claims]
        if len(set(ids)) != len(ids):
            errors.append(ValidationError("DUPLICATE_CLAIM", "Claim ids must be unique", field="claims"))
        for claim in claims:
            if claim.tier_order not in TIER_ORDERS:
                errors.append(ValidationError(
                    "INVALID_TIER", f"Claim {claim.debt_id} has tier {claim.tier_order}; expected 1-4",
                    field="tier_order",
                ))
            if claim.amount.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", f"Claim {claim.debt_id} currency differs from estate currency",
                    field="amount",
                ))
        if errors:
            return Result.fail(*errors)

        zero = Money.zero(currency)
        remaining = gross_estate_value
        paid: dict[str, Money] = {}
        tiers: list[TierSettlement] = []
        notes: list[str] = []

        for tier in TIER_ORDERS:
            tier_claims = [c for c in claims if c.tier_order == tier and c.amount.is_positive]
            for claim in claims:
                if claim.tier_order == tier and not claim.amount.is_positive:
                    paid[claim.debt_id] = zero
            if not tier_claims:
                continue
            claimed = Money.sum((c.amount for c in tier_claims), currency)
            if claimed <= remaining:
                for claim in tier_claims:
                    paid[claim.debt_id] = claim.amount
                tier_paid = claimed
            else:
                tier_paid = remaining
                if remaining.is_positive:
                    parts = self.allocator.allocate_weighted(
                        remaining, [(c.debt_id, c.amount.amount) for c in tier_claims]
                    ).as_dict()
                else:
                    parts = {c.debt_id: zero for c in tier_claims}
                paid.update(parts)
                notes.append(f"Tier {tier} abated: {tier_paid} paid against {claimed} claimed")
            remaining = remaining - tier_paid
            tiers.append(TierSettlement(tier_order=tier, claimed=claimed, paid=tier_paid))

        settlements = tuple(
            ClaimSettlement(c.debt_id, c.tier_order, c.amount, paid[c.debt_id])
            for c in sorted(claims, key=lambda c: (c.tier_order, c.debt_id))
        )
        # INVARIANT: no claim is overpaid
        assert all(s.paid <= s.claimed for s in settlements)

        fingerprint = compute_input_fingerprint(
            ("gross_estate_value", "claims"),
            {"gross_estate_value": gross_estate_value, "claims": list(claims)},
        )
        plan = SettlementPlan(
            gross_estate_value=gross_estate_value,
            settlements=settlements,
            tiers=tuple(tiers),
            residue=remaining,
            metadata=CalculationMetadata(ENGINE_NAME, ENGINE_VERSION, fingerprint),
            notes=tuple(notes),
        )
        logger.info("debts_settled", extra={
            "claim_count": len(claims),
            "total_claimed": str(plan.total_claimed.amount),
            "total_paid": str(plan.total_paid.amount),
            "residue": str(remaining.amount),
            "is_solvent": plan.is_solvent,
        })
        warnings = () if plan.is_solvent else (f"Estate insolvent: shortfall of {plan.shortfall}",)
        return Result.ok(plan, warnings=warnings)
