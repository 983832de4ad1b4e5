"""
Module: estate_engines.allocation
Responsibility:
    Split a monetary amount across beneficiaries, houses or creditors
    (equal or weighted) with deterministic rounding so that the parts
    always add back to the whole.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel.

Invariants enforced:
    - Conservation: sum(allocated) == source amount, exactly.
    - Largest-remainder rounding: every line is floored to the currency
      unit, then leftover units go to the lines with the largest
      fractional parts (ties broken by input order).  Lines therefore
      differ from their exact share by less than one unit and are never
      negative.
    - Purity: no clock access, no I/O.

Failure modes:
    - ValueError on an empty target list or zero total weight.
    - ValueError on duplicate target ids.

Usage:
    engine = AllocationEngine()
    result = engine.allocate_equal(Money.of(533333), ["child-1", "child-2"])
    result.amount_for("child-1")   # Money(266667 KES)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal

from estate_kernel.domain.values import Money
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")


@dataclass(frozen=True)
class AllocationLine:
    """Amount allocated to a single target."""

    target_id: str
    weight: Decimal
    allocated: Money


@dataclass(frozen=True)
class AllocationResult:
    """
    Complete allocation result.

    Guarantees:
        - ``sum(line.allocated) == source_amount``.
        - ``rounding_units`` records how many smallest-currency units were
          distributed by the largest-remainder step.
    """

    source_amount: Money
    lines: tuple[AllocationLine, ...]
    rounding_units: int

    @property
    def total_allocated(self) -> Money:
        return Money.sum((line.allocated for line in self.lines), self.source_amount.currency)

    def amount_for(self, target_id: str) -> Money:
        for line in self.lines:
            if line.target_id == target_id:
                return line.allocated
        raise KeyError(target_id)

    def as_dict(self) -> dict[str, Money]:
        return {line.target_id: line.allocated for line in self.lines}


class AllocationEngine:
    """
    Allocate amounts across targets.

    Contract:
        Pure functions with deterministic largest-remainder rounding.
    Non-goals:
        - Does not cap lines at an eligible amount; callers that need caps
          (debt abatement) pass weights no larger than the caps and an
          amount no larger than their sum.
    """

    def allocate_equal(self, amount: Money, target_ids: Sequence[str]) -> AllocationResult:
        """Split ``amount`` equally across ``target_ids``."""
        return self.allocate_weighted(amount, [(t, Decimal("1")) for t in target_ids])

    def allocate_weighted(
        self,
        amount: Money,
        weighted_targets: Sequence[tuple[str, Decimal]],
    ) -> AllocationResult:
        """Split ``amount`` in proportion to each target's weight."""
        if not weighted_targets:
            raise ValueError("Allocation requires at least one target")
        ids = [t for t, _ in weighted_targets]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate allocation target ids: {ids}")
        weights = [Decimal(w) for _, w in weighted_targets]
        if any(w < 0 for w in weights):
            raise ValueError("Allocation weights cannot be negative")
        total_weight = sum(weights, Decimal("0"))
        if total_weight == 0:
            raise ValueError("Total allocation weight cannot be zero")

        currency = amount.currency
        unit = Decimal(1).scaleb(-currency.decimal_places)
        exact = [amount.amount * w / total_weight for w in weights]
        floored = [e.quantize(unit, rounding=ROUND_DOWN) for e in exact]

        leftover_units = int((amount.amount - sum(floored, Decimal("0"))) / unit)
        by_remainder = sorted(
            range(len(exact)), key=lambda i: (-(exact[i] - floored[i]), i)
        )
        for i in by_remainder[:leftover_units]:
            floored[i] += unit

        lines = tuple(
            AllocationLine(target_id=ids[i], weight=weights[i], allocated=Money(floored[i], currency))
            for i in range(len(ids))
        )

        # INVARIANT: conservation -- parts add back to the whole
        assert sum(floored, Decimal("0")) == amount.amount, (
            f"Allocation conservation violated: {sum(floored)} != {amount.amount}"
        )

        logger.debug("allocation_completed", extra={
            "source_amount": str(amount.amount),
            "currency": currency.code,
            "target_count": len(lines),
            "rounding_units": leftover_units,
        })

        return AllocationResult(source_amount=amount, lines=lines, rounding_units=leftover_units)
