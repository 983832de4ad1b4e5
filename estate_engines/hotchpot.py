"""
Module: estate_engines.hotchpot
Responsibility:
    Bring lifetime gifts ("advancements") back into account for each
    beneficiary (Law of Succession Act S.35(3)): revalue each gift to the
    date of death, aggregate per beneficiary, apply exemptions and the
    minimum-adjustment threshold, and express the result as an absolute
    amount and as a share of the net estate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel.

Invariants enforced:
    - An exempted or waived adjustment always has a zero amount.
    - A gift with ``customary_law_exemption`` never contributes to an
      adjustment, whatever its value.
    - Division with advancements deducts each target's own advancements
      from its part, never below zero; deductions stay undistributed.
    - Gift revaluation uses the calendar-year difference between gift date
      and date of death, never a fractional year.
    - Adjustment status moves forward only; the single backward edge is
      DISPUTED -> CALCULATED on resolution.
    - Purity: identical inputs produce identical results.

Failure modes:
    - Result.fail for non-positive estate value, gifts dated after death,
      currency mismatches, out-of-range inflation rates.
    - HotchpotStateError on an illegal adjustment transition.

Audit relevance:
    Each adjustment lists the gifts that were exempted and why, and the
    calculation result carries the input fingerprint of the snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol

from estate_engines.allocation import AllocationEngine
from estate_engines.tracer import CalculationMetadata, compute_input_fingerprint, traced_engine
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money, Percentage, calendar_years_between
from estate_kernel.domain.workflow import Transition, Workflow
from estate_kernel.exceptions import HotchpotStateError
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.hotchpot")

ENGINE_NAME = "hotchpot"
ENGINE_VERSION = "1.0"

_MIN_REASON_LENGTH = 10


class HotchpotMethod(str, Enum):
    """How a lifetime gift is revalued to the date of death."""

    NOMINAL_VALUE = "nominal_value"
    INFLATION_ADJUSTED = "inflation_adjusted"
    CURRENT_MARKET_VALUE = "current_market_value"
    COST_OF_LIVING_ADJUSTED = "cost_of_living_adjusted"


class HotchpotStatus(str, Enum):
    PENDING = "pending"
    CALCULATED = "calculated"
    APPLIED = "applied"
    DISPUTED = "disputed"
    EXEMPTED = "exempted"
    WAIVED = "waived"


HOTCHPOT_ADJUSTMENT_WORKFLOW = Workflow(
    name="hotchpot_adjustment",
    description="Per-beneficiary hotchpot adjustment lifecycle",
    initial_state=HotchpotStatus.PENDING.value,
    states=tuple(s.value for s in HotchpotStatus),
    transitions=(
        Transition("pending", "calculated", action="calculate"),
        Transition("pending", "waived", action="waive"),
        Transition("pending", "exempted", action="exempt"),
        Transition("calculated", "applied", action="apply"),
        Transition("calculated", "disputed", action="dispute"),
        Transition("calculated", "exempted", action="exempt"),
        Transition("calculated", "waived", action="waive"),
        Transition("disputed", "calculated", action="resolve_dispute"),
        Transition("disputed", "exempted", action="exempt"),
    ),
    terminal_states=("applied", "exempted", "waived"),
)


@dataclass(frozen=True)
class HotchpotRules:
    """Statutory and policy parameters for hotchpot calculation."""

    default_inflation_rate: Decimal = Decimal("0.05")
    cost_of_living_premium: Decimal = Decimal("0.02")
    significance_threshold: Decimal = Decimal("5")
    recipient_share_warning: Decimal = Decimal("30")
    estate_increase_warning: Decimal = Decimal("50")

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.default_inflation_rate <= Decimal("1"):
            raise ValueError("default_inflation_rate must be between 0 and 1")
        if self.cost_of_living_premium < 0:
            raise ValueError("cost_of_living_premium cannot be negative")


DEFAULT_HOTCHPOT_RULES = HotchpotRules()


@dataclass(frozen=True)
class LifetimeGift:
    """
    Immutable snapshot of a pre-death transfer, as the engine consumes it.

    Non-goals:
        - Carries no lifecycle; see ``estate_modules.gifts.GiftInterVivos``
          for the recorded gift and its status transitions.
    """

    gift_id: str
    recipient_id: str
    value: Money
    gift_date: date
    is_advancement: bool = True
    is_subject_to_hotchpot: bool = True
    customary_law_exemption: bool = False
    current_market_value: Money | None = None
    description: str = ""

    @property
    def is_hotchpot_advancement(self) -> bool:
        return self.is_advancement and self.is_subject_to_hotchpot


# ---------------------------------------------------------------------------
# Valuation strategies
# ---------------------------------------------------------------------------


def compound_value(value: Money, annual_rate: Decimal, years: int) -> Money:
    """``value x (1 + annual_rate) ** years``; years below zero count as zero."""
    if years <= 0:
        return value
    return value * ((Decimal("1") + annual_rate) ** years)


class GiftValuationStrategy(Protocol):
    def __call__(
        self,
        gift: LifetimeGift,
        date_of_death: date,
        inflation_rate: Decimal,
        rules: HotchpotRules,
    ) -> Money: ...


def _nominal(gift, date_of_death, inflation_rate, rules) -> Money:
    return gift.value


def _inflation_adjusted(gift, date_of_death, inflation_rate, rules) -> Money:
    years = calendar_years_between(gift.gift_date, date_of_death)
    return compound_value(gift.value, inflation_rate, years)


def _current_market(gift, date_of_death, inflation_rate, rules) -> Money:
    if gift.current_market_value is not None:
        return gift.current_market_value
    return _inflation_adjusted(gift, date_of_death, inflation_rate, rules)


def _cost_of_living(gift, date_of_death, inflation_rate, rules) -> Money:
    years = calendar_years_between(gift.gift_date, date_of_death)
    return compound_value(gift.value, inflation_rate + rules.cost_of_living_premium, years)


VALUATION_STRATEGIES: Mapping[HotchpotMethod, GiftValuationStrategy] = {
    HotchpotMethod.NOMINAL_VALUE: _nominal,
    HotchpotMethod.INFLATION_ADJUSTED: _inflation_adjusted,
    HotchpotMethod.CURRENT_MARKET_VALUE: _current_market,
    HotchpotMethod.COST_OF_LIVING_ADJUSTED: _cost_of_living,
}


def revalue_gift(
    gift: LifetimeGift,
    date_of_death: date,
    inflation_rate: Decimal | None = None,
    method: HotchpotMethod = HotchpotMethod.INFLATION_ADJUSTED,
    rules: HotchpotRules = DEFAULT_HOTCHPOT_RULES,
) -> Result[Money]:
    """Value a single gift as at the date of death.

    Fails when the gift is not hotchpot-subject or death precedes the gift.
    """
    errors: list[ValidationError] = []
    rate = rules.default_inflation_rate if inflation_rate is None else inflation_rate
    if not gift.is_subject_to_hotchpot:
        errors.append(ValidationError(
            "GIFT_NOT_HOTCHPOT_SUBJECT",
            f"Gift {gift.gift_id} is not subject to hotchpot",
            field="is_subject_to_hotchpot",
        ))
    if date_of_death < gift.gift_date:
        errors.append(ValidationError(
            "DEATH_BEFORE_GIFT",
            f"Date of death {date_of_death} precedes gift date {gift.gift_date}",
            field="date_of_death",
        ))
    if not Decimal("0") <= rate <= Decimal("1"):
        errors.append(ValidationError(
            "INVALID_INFLATION_RATE",
            f"Inflation rate must be between 0 and 1, got {rate}",
            field="inflation_rate",
        ))
    if errors:
        return Result.fail(*errors)
    return Result.ok(VALUATION_STRATEGIES[method](gift, date_of_death, rate, rules))


# ---------------------------------------------------------------------------
# Inputs and results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HotchpotBeneficiary:
    beneficiary_id: str
    name: str
    relationship: str = "CHILD"


@dataclass(frozen=True)
class CourtExemption:
    """Court order exempting a beneficiary's gifts (all, or the listed ids)."""

    beneficiary_id: str
    order_reference: str
    gift_ids: tuple[str, ...] = ()

    def covers(self, gift: LifetimeGift) -> bool:
        return gift.recipient_id == self.beneficiary_id and (
            not self.gift_ids or gift.gift_id in self.gift_ids
        )


@dataclass(frozen=True)
class HotchpotCalculationInput:
    net_estate_value: Money
    date_of_death: date
    beneficiaries: tuple[HotchpotBeneficiary, ...]
    lifetime_gifts: tuple[LifetimeGift, ...] = ()
    adjustment_method: HotchpotMethod = HotchpotMethod.INFLATION_ADJUSTED
    inflation_rate: Decimal | None = None
    minimum_adjustment_threshold: Money | None = None
    exempted_gift_ids: frozenset[str] = frozenset()
    court_exemptions: tuple[CourtExemption, ...] = ()
    calculated_at: datetime | None = None


@dataclass(frozen=True)
class HotchpotAdjustment:
    """
    Per-beneficiary hotchpot result value.

    Contract:
        Immutable; transitions return a new value.  ``adjustment_amount`` is
        zero whenever ``status`` is EXEMPTED or WAIVED.
    """

    beneficiary_id: str
    beneficiary_name: str
    relationship: str
    status: HotchpotStatus
    gifts_count: int
    advancements_count: int
    total_advancements_value: Money
    adjusted_advancements_value: Money
    adjustment_amount: Money
    impact_percentage: Percentage
    exempted_gift_ids: tuple[str, ...] = ()
    exemption_reason: str | None = None
    dispute_reason: str | None = None
    significance_threshold: Decimal = Decimal("5")
    notes: tuple[str, ...] = ()

    @property
    def is_exempted(self) -> bool:
        return self.status == HotchpotStatus.EXEMPTED

    @property
    def net_adjustment(self) -> Money:
        if self.status in (HotchpotStatus.EXEMPTED, HotchpotStatus.WAIVED):
            return Money.zero(self.adjustment_amount.currency)
        return self.adjustment_amount

    @property
    def is_significant(self) -> bool:
        return self.impact_percentage.value > self.significance_threshold

    @property
    def requires_court_approval(self) -> bool:
        return self.is_significant or self.status == HotchpotStatus.DISPUTED

    def _transition(self, action: str, **changes) -> HotchpotAdjustment:
        transition = HOTCHPOT_ADJUSTMENT_WORKFLOW.find_transition(self.status.value, action)
        if transition is None:
            raise HotchpotStateError(self.beneficiary_id, self.status.value, action)
        return replace(self, status=HotchpotStatus(transition.to_state), **changes)

    def apply(self, applied_by: str) -> Result[HotchpotAdjustment]:
        """Mark the adjustment as applied to the distribution."""
        if self.adjustment_amount.is_zero:
            return Result.failure(
                "NOTHING_TO_APPLY",
                f"Hotchpot adjustment for {self.beneficiary_id} is zero",
            )
        return Result.ok(self._transition(
            "apply", notes=self.notes + (f"Applied by {applied_by}",),
        ))

    def dispute(self, reason: str, disputed_by: str) -> Result[HotchpotAdjustment]:
        if len(reason.strip()) < _MIN_REASON_LENGTH:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Dispute reason must be at least {_MIN_REASON_LENGTH} characters",
                field="reason",
            )
        return Result.ok(self._transition(
            "dispute",
            dispute_reason=reason.strip(),
            notes=self.notes + (f"Disputed by {disputed_by}: {reason.strip()}",),
        ))

    def resolve_dispute(
        self, resolution: str, adjusted_amount: Money | None = None,
    ) -> Result[HotchpotAdjustment]:
        """Return a disputed adjustment to CALCULATED, optionally re-stating the amount."""
        if not resolution.strip():
            return Result.failure("RESOLUTION_REQUIRED", "Dispute resolution is required")
        changes: dict = {"notes": self.notes + (f"Dispute resolved: {resolution.strip()}",)}
        if adjusted_amount is not None:
            changes["adjustment_amount"] = adjusted_amount
        return Result.ok(self._transition("resolve_dispute", **changes))

    def exempt(self, reason: str) -> Result[HotchpotAdjustment]:
        if len(reason.strip()) < _MIN_REASON_LENGTH:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Exemption reason must be at least {_MIN_REASON_LENGTH} characters",
                field="reason",
            )
        return Result.ok(self._transition(
            "exempt",
            adjustment_amount=Money.zero(self.adjustment_amount.currency),
            impact_percentage=Percentage.zero(),
            exemption_reason=reason.strip(),
            notes=self.notes + (f"Exempted: {reason.strip()}",),
        ))

    def waive(self, reason: str) -> HotchpotAdjustment:
        return self._transition(
            "waive",
            adjustment_amount=Money.zero(self.adjustment_amount.currency),
            impact_percentage=Percentage.zero(),
            notes=self.notes + (f"Waived: {reason}",),
        )

    def to_record(self) -> dict:
        return {
            "beneficiary_id": self.beneficiary_id,
            "beneficiary_name": self.beneficiary_name,
            "relationship": self.relationship,
            "status": self.status.value,
            "advancements_count": self.advancements_count,
            "total_advancements_value": self.total_advancements_value.to_record(),
            "adjusted_advancements_value": self.adjusted_advancements_value.to_record(),
            "adjustment_amount": self.adjustment_amount.to_record(),
            "impact_percentage": str(self.impact_percentage.value),
            "exempted_gift_ids": list(self.exempted_gift_ids),
            "exemption_reason": self.exemption_reason,
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class HotchpotAdjustmentResult:
    net_estate_value: Money
    method: HotchpotMethod
    inflation_rate: Decimal
    adjustments: tuple[HotchpotAdjustment, ...]
    metadata: CalculationMetadata
    warnings: tuple[str, ...] = field(default=())

    @property
    def total_adjustments(self) -> Money:
        return Money.sum(
            (a.net_adjustment for a in self.adjustments), self.net_estate_value.currency
        )

    @property
    def hotchpot_estate_value(self) -> Money:
        """Net estate with advancements notionally brought back in."""
        return self.net_estate_value + self.total_adjustments

    def adjustment_for(self, beneficiary_id: str) -> Money:
        for adjustment in self.adjustments:
            if adjustment.beneficiary_id == beneficiary_id:
                return adjustment.net_adjustment
        return Money.zero(self.net_estate_value.currency)

    def to_record(self) -> dict:
        return {
            "net_estate_value": self.net_estate_value.to_record(),
            "method": self.method.value,
            "inflation_rate": str(self.inflation_rate),
            "total_adjustments": self.total_adjustments.to_record(),
            "hotchpot_estate_value": self.hotchpot_estate_value.to_record(),
            "adjustments": [a.to_record() for a in self.adjustments],
            "warnings": list(self.warnings),
            "metadata": self.metadata.to_record(),
        }


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class HotchpotCalculator:
    """
    Per-beneficiary hotchpot calculator.

    Contract:
        Pure; no clock, no I/O.  Validation problems are returned as a
        failed Result, never raised.
    """

    def __init__(self, rules: HotchpotRules = DEFAULT_HOTCHPOT_RULES):
        self.rules = rules

    def _validate(self, input_data: HotchpotCalculationInput, rate: Decimal) -> list[ValidationError]:
        errors: list[ValidationError] = []
        currency = input_data.net_estate_value.currency
        if not input_data.net_estate_value.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_ESTATE", "Net estate value must be positive",
                field="net_estate_value",
            ))
        if not Decimal("0") <= rate <= Decimal("1"):
            errors.append(ValidationError(
                "INVALID_INFLATION_RATE",
                f"Inflation rate must be between 0 and 1, got {rate}",
                field="inflation_rate",
            ))
        ids = [b.beneficiary_id for b in input_data.beneficiaries]
        if len(set(ids)) != len(ids):
            errors.append(ValidationError(
                "DUPLICATE_BENEFICIARY", "Beneficiary ids must be unique",
                field="beneficiaries",
            ))
        threshold = input_data.minimum_adjustment_threshold
        if threshold is not None and threshold.currency != currency:
            errors.append(ValidationError(
                "CURRENCY_MISMATCH", "Adjustment threshold currency differs from estate",
                field="minimum_adjustment_threshold",
            ))
        for gift in input_data.lifetime_gifts:
            if gift.value.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH",
                    f"Gift {gift.gift_id} is in {gift.value.currency}, estate is in {currency}",
                    field="lifetime_gifts",
                ))
            if gift.gift_date > input_data.date_of_death:
                errors.append(ValidationError(
                    "GIFT_AFTER_DEATH",
                    f"Gift {gift.gift_id} is dated after the date of death",
                    field="lifetime_gifts",
                ))
        return errors

    def _exemption_reason(
        self, gift: LifetimeGift, input_data: HotchpotCalculationInput,
    ) -> str | None:
        if gift.customary_law_exemption:
            return "customary law gift"
        if gift.gift_id in input_data.exempted_gift_ids:
            return "exempted gift"
        for order in input_data.court_exemptions:
            if order.covers(gift):
                return f"court order {order.order_reference}"
        return None

    def _adjust_beneficiary(
        self,
        beneficiary: HotchpotBeneficiary,
        input_data: HotchpotCalculationInput,
        rate: Decimal,
    ) -> HotchpotAdjustment:
        currency = input_data.net_estate_value.currency
        zero = Money.zero(currency)
        gifts = [g for g in input_data.lifetime_gifts if g.recipient_id == beneficiary.beneficiary_id]
        advancements = [g for g in gifts if g.is_hotchpot_advancement]

        notes: list[str] = []
        exempted: list[str] = []
        reasons: list[str] = []
        counted: list[LifetimeGift] = []
        for gift in advancements:
            reason = self._exemption_reason(gift, input_data)
            if reason is None:
                counted.append(gift)
            else:
                exempted.append(gift.gift_id)
                reasons.append(reason)
                notes.append(f"Gift {gift.gift_id} exempt: {reason}")

        original = Money.sum((g.value for g in advancements), currency)
        adjusted = zero
        for gift in counted:
            value = VALUATION_STRATEGIES[input_data.adjustment_method](
                gift, input_data.date_of_death, rate, self.rules,
            )
            notes.append(f"Gift {gift.gift_id}: {gift.value} revalued to {value}")
            adjusted = adjusted + value

        base = HotchpotAdjustment(
            beneficiary_id=beneficiary.beneficiary_id,
            beneficiary_name=beneficiary.name,
            relationship=beneficiary.relationship,
            status=HotchpotStatus.PENDING,
            gifts_count=len(gifts),
            advancements_count=len(advancements),
            total_advancements_value=original,
            adjusted_advancements_value=adjusted,
            adjustment_amount=adjusted,
            impact_percentage=Percentage.from_ratio(adjusted, input_data.net_estate_value),
            exempted_gift_ids=tuple(exempted),
            significance_threshold=self.rules.significance_threshold,
            notes=tuple(notes),
        )

        if advancements and not counted:
            return base._transition(
                "exempt",
                adjustment_amount=zero,
                impact_percentage=Percentage.zero(),
                exemption_reason="; ".join(sorted(set(reasons))),
            )
        threshold = input_data.minimum_adjustment_threshold
        if threshold is not None and adjusted.is_positive and adjusted < threshold:
            return base.waive(f"below minimum adjustment threshold of {threshold}")
        return base._transition("calculate")

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("input_data",))
    def calculate(self, input_data: HotchpotCalculationInput) -> Result[HotchpotAdjustmentResult]:
        rate = (
            self.rules.default_inflation_rate
            if input_data.inflation_rate is None
            else input_data.inflation_rate
        )
        errors = self._validate(input_data, rate)
        if errors:
            logger.warning("hotchpot_validation_failed", extra={
                "error_count": len(errors),
                "codes": [e.code for e in errors],
            })
            return Result.fail(*errors)

        warnings: list[str] = []
        known = {b.beneficiary_id for b in input_data.beneficiaries}
        for gift in input_data.lifetime_gifts:
            if gift.recipient_id not in known:
                warnings.append(
                    f"Gift {gift.gift_id} names recipient {gift.recipient_id} "
                    "who is not a beneficiary; ignored"
                )

        adjustments = tuple(
            self._adjust_beneficiary(b, input_data, rate) for b in input_data.beneficiaries
        )

        net = input_data.net_estate_value
        total = Money.sum((a.net_adjustment for a in adjustments), net.currency)
        if Percentage.from_ratio(total, net).value > self.rules.estate_increase_warning:
            warnings.append(
                "Hotchpot adjustments raise the distributable estate by more than "
                f"{self.rules.estate_increase_warning}%"
            )
        for a in adjustments:
            if a.impact_percentage.value > self.rules.recipient_share_warning:
                warnings.append(
                    f"Advancements to {a.beneficiary_name} exceed "
                    f"{self.rules.recipient_share_warning}% of the net estate"
                )

        fingerprint = compute_input_fingerprint(("input_data",), {"input_data": input_data})
        result = HotchpotAdjustmentResult(
            net_estate_value=net,
            method=input_data.adjustment_method,
            inflation_rate=rate,
            adjustments=adjustments,
            metadata=CalculationMetadata(
                ENGINE_NAME, ENGINE_VERSION, fingerprint, input_data.calculated_at,
            ),
            warnings=tuple(warnings),
        )

        logger.info("hotchpot_calculated", extra={
            "beneficiary_count": len(adjustments),
            "gift_count": len(input_data.lifetime_gifts),
            "total_adjustments": str(total.amount),
            "method": input_data.adjustment_method.value,
            "warning_count": len(warnings),
        })
        return Result.ok(result, warnings=warnings)


def adjustments_by_recipient(
    gifts: Sequence[LifetimeGift], currency: str,
) -> dict[str, Money]:
    """Nominal advancement totals per recipient, skipping exempt gifts.

    Used by the distribution calculators when no hotchpot result is given.
    """
    totals: dict[str, Money] = {}
    for gift in gifts:
        if not gift.is_hotchpot_advancement or gift.customary_law_exemption:
            continue
        totals[gift.recipient_id] = totals.get(gift.recipient_id, Money.zero(currency)) + gift.value
    return totals


@dataclass(frozen=True)
class HotchpotShare:
    """One target's part of a division after its own advancements are deducted.

    ``deduction`` is the part of ``entitlement`` actually withheld, which is
    ``advancement`` capped at ``entitlement``.
    """

    target_id: str
    entitlement: Money
    advancement: Money
    deduction: Money
    share: Money

    @property
    def exhausted(self) -> bool:
        """Advancements meet or exceed the entitlement; nothing further is taken."""
        return self.advancement.is_positive and self.share.is_zero


@dataclass(frozen=True)
class HotchpotSplit:
    amount: Money
    shares: Mapping[str, HotchpotShare]

    def __getitem__(self, target_id: str) -> HotchpotShare:
        return self.shares[target_id]

    @property
    def total_shares(self) -> Money:
        return Money.sum((s.share for s in self.shares.values()), self.amount.currency)

    @property
    def withheld(self) -> Money:
        """Deductions left undistributed."""
        return Money.sum((s.deduction for s in self.shares.values()), self.amount.currency)


def deduct_advancements(
    amount: Money,
    weighted_targets: Sequence[tuple[str, Decimal]],
    adjustments: Mapping[str, Money],
    allocator: AllocationEngine | None = None,
) -> HotchpotSplit:
    """Divide ``amount`` by weight, then reduce each part by that target's advancements.

    A part is never reduced below zero.  Deductions are not redistributed
    to the other targets; ``shares + withheld`` always equals ``amount``.
    """
    allocator = allocator or AllocationEngine()
    zero = Money.zero(amount.currency)
    parts = allocator.allocate_weighted(amount, weighted_targets).as_dict()

    shares: dict[str, HotchpotShare] = {}
    for target_id, _ in weighted_targets:
        entitlement = parts[target_id]
        advancement = adjustments.get(target_id, zero)
        share = entitlement.subtract_or_zero(advancement)
        shares[target_id] = HotchpotShare(
            target_id=target_id,
            entitlement=entitlement,
            advancement=advancement,
            deduction=entitlement - share,
            share=share,
        )
    return HotchpotSplit(amount=amount, shares=shares)
