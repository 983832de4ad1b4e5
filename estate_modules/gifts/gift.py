"""
Module: estate_modules.gifts.gift
Responsibility:
    ``GiftInterVivos``: a transfer the deceased made while alive, and its
    treatment under S.35(3) (brought into hotchpot, excluded, exempted or
    reclaimed to the estate).

Architecture position:
    Modules layer.  Revaluation is delegated to
    ``estate_engines.hotchpot.revalue_gift``; per-beneficiary aggregation
    happens in ``HotchpotCalculator`` over ``to_lifetime_gift()`` snapshots.

Invariants enforced:
    - Immutable.  Every operation returns a new ``GiftInterVivos`` with a
      bumped identity version; nothing exposes a mutable view.
    - ``hotchpot_adjustment`` is zero unless the gift is CALCULATED or
      INCLUDED, so EXEMPTED and EXCLUDED gifts never reduce a share.
    - A customary-law exemption is recorded as EXEMPTED from the start.
    - Status changes follow ``GIFT_HOTCHPOT_WORKFLOW``.

Failure modes:
    - Result.fail for invalid input and for calculating or including a
      gift that is not hotchpot-subject, exempt or not yet valued.
    - GiftStateError for a transition the workflow does not allow.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from uuid import UUID

from estate_engines.hotchpot import (
    DEFAULT_HOTCHPOT_RULES,
    HotchpotMethod,
    HotchpotRules,
    LifetimeGift,
    revalue_gift,
)
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.identity import Identity
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money
from estate_kernel.exceptions import GiftStateError
from estate_kernel.logging_config import get_logger
from estate_modules.gifts.models import (
    ExemptionBasis,
    GiftHotchpotStatus,
    GiftType,
    RelationshipCategory,
)
from estate_modules.gifts.workflows import GIFT_HOTCHPOT_WORKFLOW

logger = get_logger("modules.gifts")

MIN_DESCRIPTION_LENGTH = 10
MIN_REASON_LENGTH = 10


@dataclass(frozen=True)
class GiftInterVivos:
    """
    A recorded gift inter vivos.

    Contract:
        Build with ``GiftInterVivos.record``.  State changes are the named
        methods; each returns ``Result[GiftInterVivos]`` holding the new
        value and leaves the receiver untouched.
    Non-goals:
        - Gift conditions and contestation proceedings are not tracked.
    """

    identity: Identity
    recipient_id: str
    recipient_name: str
    description: str
    value: Money
    gift_date: date
    gift_type: GiftType = GiftType.CASH_GIFT
    relationship: RelationshipCategory = RelationshipCategory.CHILD
    estate_id: str = ""
    is_advancement: bool = True
    is_subject_to_hotchpot: bool = True
    customary_law_exemption: bool = False
    current_market_value: Money | None = None
    status: GiftHotchpotStatus = GiftHotchpotStatus.PENDING
    adjusted_value: Money | None = None
    inflation_rate_used: Decimal | None = None
    valuation_method: HotchpotMethod | None = None
    valuation_date: date | None = None
    inclusion_reason: str | None = None
    exclusion_reason: str | None = None
    exclusion_contested: bool = False
    court_order_reference: str | None = None
    exemption_basis: ExemptionBasis | None = None
    reclaimed_on: date | None = None
    reclaim_reason: str | None = None
    notes: tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    @classmethod
    def record(
        cls,
        *,
        recipient_id: str,
        recipient_name: str,
        description: str,
        value: Money,
        gift_date: date,
        gift_type: GiftType = GiftType.CASH_GIFT,
        relationship: RelationshipCategory = RelationshipCategory.CHILD,
        estate_id: str = "",
        is_advancement: bool = True,
        is_subject_to_hotchpot: bool = True,
        customary_law_exemption: bool = False,
        current_market_value: Money | None = None,
        gift_id: UUID | None = None,
        clock: Clock | None = None,
    ) -> Result[GiftInterVivos]:
        clock = clock or SystemClock()
        errors: list[ValidationError] = []
        description = (description or "").strip()
        if len(description) < MIN_DESCRIPTION_LENGTH:
            errors.append(ValidationError(
                "DESCRIPTION_TOO_SHORT",
                f"Gift description must be at least {MIN_DESCRIPTION_LENGTH} characters",
                field="description",
            ))
        if not value.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_VALUE", "Gift value must be positive", field="value",
            ))
        if gift_date > clock.today():
            errors.append(ValidationError(
                "FUTURE_GIFT_DATE", "Date of gift cannot be in the future", field="gift_date",
            ))
        if not (recipient_id or "").strip():
            errors.append(ValidationError(
                "RECIPIENT_REQUIRED", "Gift recipient is required", field="recipient_id",
            ))
        if current_market_value is not None and current_market_value.currency != value.currency:
            errors.append(ValidationError(
                "CURRENCY_MISMATCH", "Market value currency differs from gift value currency",
                field="current_market_value",
            ))
        if errors:
            return Result.fail(*errors)

        if not is_subject_to_hotchpot:
            status = GiftHotchpotStatus.NOT_APPLICABLE
        elif customary_law_exemption:
            status = GiftHotchpotStatus.EXEMPTED
        else:
            status = GiftHotchpotStatus.PENDING

        gift = cls(
            identity=Identity.new(gift_id),
            recipient_id=recipient_id.strip(),
            recipient_name=(recipient_name or "").strip(),
            description=description,
            value=value,
            gift_date=gift_date,
            gift_type=gift_type,
            relationship=relationship,
            estate_id=estate_id,
            is_advancement=is_advancement,
            is_subject_to_hotchpot=is_subject_to_hotchpot,
            customary_law_exemption=customary_law_exemption,
            current_market_value=current_market_value,
            status=status,
            exemption_basis=(
                ExemptionBasis.CUSTOMARY_LAW if status is GiftHotchpotStatus.EXEMPTED else None
            ),
            notes=(f"Recorded {gift_type.value} of {value} to {recipient_id.strip()}",),
        )
        logger.info("gift_recorded", extra={
            "gift_id": str(gift.id),
            "recipient_id": gift.recipient_id,
            "gift_type": gift_type.value,
            "value": str(value.amount),
            "currency": value.currency.code,
            "status": status.value,
        })
        return Result.ok(gift)

    @classmethod
    def record_bride_price(
        cls,
        *,
        recipient_id: str,
        recipient_name: str,
        description: str,
        value: Money,
        gift_date: date,
        estate_id: str = "",
        clock: Clock | None = None,
    ) -> Result[GiftInterVivos]:
        """Bride price is a customary payment, never brought into hotchpot."""
        return cls.record(
            recipient_id=recipient_id,
            recipient_name=recipient_name,
            description=description,
            value=value,
            gift_date=gift_date,
            gift_type=GiftType.CUSTOMARY_BRIDE_PRICE,
            relationship=RelationshipCategory.NON_FAMILY,
            estate_id=estate_id,
            is_advancement=False,
            customary_law_exemption=True,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def id(self) -> UUID:
        return self.identity.id

    @property
    def version(self) -> int:
        return self.identity.version

    @property
    def is_exempt(self) -> bool:
        return self.status is GiftHotchpotStatus.EXEMPTED

    @property
    def hotchpot_adjustment(self) -> Money:
        """Amount this gift deducts from the recipient's share."""
        if (
            self.status.carries_adjustment
            and self.adjusted_value is not None
            and self.is_advancement
        ):
            return self.adjusted_value
        return Money.zero(self.value.currency)

    def to_lifetime_gift(self) -> LifetimeGift:
        """Snapshot for the hotchpot and distribution engines."""
        return LifetimeGift(
            gift_id=str(self.id),
            recipient_id=self.recipient_id,
            value=self.value,
            gift_date=self.gift_date,
            is_advancement=self.is_advancement,
            is_subject_to_hotchpot=self.is_subject_to_hotchpot and self.status not in (
                GiftHotchpotStatus.EXCLUDED,
                GiftHotchpotStatus.RECLAIMED,
            ),
            customary_law_exemption=self.status is GiftHotchpotStatus.EXEMPTED,
            current_market_value=self.current_market_value,
            description=self.description,
        )

    def to_record(self) -> dict:
        return {
            "id": str(self.id),
            "version": self.version,
            "recipient_id": self.recipient_id,
            "recipient_name": self.recipient_name,
            "gift_type": self.gift_type.value,
            "description": self.description,
            "value": self.value.to_record(),
            "gift_date": self.gift_date.isoformat(),
            "status": self.status.value,
            "adjusted_value": self.adjusted_value.to_record() if self.adjusted_value else None,
            "hotchpot_adjustment": self.hotchpot_adjustment.to_record(),
            "valuation_method": self.valuation_method.value if self.valuation_method else None,
            "exemption_basis": self.exemption_basis.value if self.exemption_basis else None,
            "court_order_reference": self.court_order_reference,
            "notes": list(self.notes),
        }

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, action: str, note: str, **changes) -> GiftInterVivos:
        transition = GIFT_HOTCHPOT_WORKFLOW.find_transition(self.status.value, action)
        if transition is None:
            raise GiftStateError(str(self.id), self.status.value, action)
        updated = replace(
            self,
            identity=self.identity.bump(),
            status=GiftHotchpotStatus(transition.to_state),
            notes=self.notes + (note,),
            **changes,
        )
        logger.info("gift_status_changed", extra={
            "gift_id": str(self.id),
            "action": action,
            "from_status": self.status.value,
            "to_status": updated.status.value,
        })
        return updated

    def calculate_hotchpot_value(
        self,
        date_of_death: date,
        inflation_rate: Decimal | None = None,
        method: HotchpotMethod = HotchpotMethod.INFLATION_ADJUSTED,
        rules: HotchpotRules = DEFAULT_HOTCHPOT_RULES,
    ) -> Result[GiftInterVivos]:
        """Revalue the gift to the date of death.

        Default: ``value x (1 + rate) ** calendar_years``.  Fails when the
        gift is not hotchpot-subject, is exempt, or death precedes it.
        """
        if self.status is GiftHotchpotStatus.NOT_APPLICABLE:
            return Result.failure(
                "GIFT_NOT_HOTCHPOT_SUBJECT", "Gift is not subject to hotchpot calculation",
                field="is_subject_to_hotchpot",
            )
        if self.status is GiftHotchpotStatus.EXEMPTED:
            return Result.failure(
                "GIFT_EXEMPT", "Gift is exempt from hotchpot", field="status",
            )
        valued = revalue_gift(self.to_lifetime_gift(), date_of_death, inflation_rate, method, rules)
        if valued.is_failure:
            return Result.fail(*valued.errors)

        rate = rules.default_inflation_rate if inflation_rate is None else inflation_rate
        adjusted = valued.unwrap()
        return Result.ok(self._transition(
            "calculate",
            f"Hotchpot value {adjusted} ({method.value}, rate {rate}) as at {date_of_death}",
            adjusted_value=adjusted,
            inflation_rate_used=rate,
            valuation_method=method,
            valuation_date=date_of_death,
        ))

    def include_in_hotchpot(self, included_by: str, reason: str | None = None) -> Result[GiftInterVivos]:
        if self.status is GiftHotchpotStatus.NOT_APPLICABLE:
            return Result.failure(
                "GIFT_NOT_HOTCHPOT_SUBJECT", "Gift is not subject to hotchpot", field="status",
            )
        if self.status is GiftHotchpotStatus.INCLUDED:
            return Result.failure("ALREADY_INCLUDED", "Gift is already in hotchpot", field="status")
        if self.adjusted_value is None:
            return Result.failure(
                "VALUE_NOT_CALCULATED", "Hotchpot value must be calculated before inclusion",
                field="adjusted_value",
            )
        return Result.ok(self._transition(
            "include",
            f"Included in hotchpot by {included_by}" + (f": {reason}" if reason else ""),
            inclusion_reason=reason,
        ))

    def exclude_from_hotchpot(
        self,
        reason: str,
        excluded_by: str,
        contested: bool = False,
        court_order_reference: str | None = None,
    ) -> Result[GiftInterVivos]:
        reason = (reason or "").strip()
        errors: list[ValidationError] = []
        if len(reason) < MIN_REASON_LENGTH:
            errors.append(ValidationError(
                "REASON_TOO_SHORT",
                f"Exclusion reason must be at least {MIN_REASON_LENGTH} characters",
                field="reason",
            ))
        reference = (court_order_reference or "").strip() or None
        if contested and reference is None:
            errors.append(ValidationError(
                "COURT_ORDER_REQUIRED", "A contested exclusion requires a court order reference",
                field="court_order_reference",
            ))
        if errors:
            return Result.fail(*errors)
        note = f"Excluded from hotchpot by {excluded_by}: {reason}"
        if reference:
            note += f" (court order {reference})"
        return Result.ok(self._transition(
            "exclude",
            note,
            exclusion_reason=reason,
            exclusion_contested=contested,
            court_order_reference=reference,
        ))

    def exempt(self, basis: ExemptionBasis, reference: str | None = None) -> Result[GiftInterVivos]:
        """Exempt under customary law or a court order; zeroes the adjustment."""
        reference = (reference or "").strip() or None
        if basis is ExemptionBasis.COURT_ORDER and reference is None:
            return Result.failure(
                "COURT_ORDER_REQUIRED", "A court-order exemption requires the order reference",
                field="reference",
            )
        return Result.ok(self._transition(
            "exempt",
            f"Exempted ({basis.value})" + (f" ref {reference}" if reference else ""),
            exemption_basis=basis,
            customary_law_exemption=basis is ExemptionBasis.CUSTOMARY_LAW,
            court_order_reference=reference or self.court_order_reference,
        ))

    def reopen(self, reason: str) -> Result[GiftInterVivos]:
        """Return an excluded or exempted gift to PENDING for revaluation."""
        reason = (reason or "").strip()
        if len(reason) < MIN_REASON_LENGTH:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Reopen reason must be at least {MIN_REASON_LENGTH} characters",
                field="reason",
            )
        return Result.ok(self._transition(
            "reopen",
            f"Reopened: {reason}",
            adjusted_value=None,
            inflation_rate_used=None,
            valuation_method=None,
            valuation_date=None,
            exclusion_reason=None,
            exclusion_contested=False,
            exemption_basis=None,
            customary_law_exemption=False,
        ))

    def reclaim_to_estate(
        self,
        reason: str,
        reclaimed_by: str,
        reclaimed_on: date,
    ) -> Result[GiftInterVivos]:
        """The asset returns to the estate, so nothing is brought into account."""
        reason = (reason or "").strip()
        if len(reason) < MIN_REASON_LENGTH:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Reclaim reason must be at least {MIN_REASON_LENGTH} characters",
                field="reason",
            )
        if reclaimed_on < self.gift_date:
            return Result.failure(
                "RECLAIM_BEFORE_GIFT", "Reclaim date precedes the gift date", field="reclaimed_on",
            )
        return Result.ok(self._transition(
            "reclaim",
            f"Reclaimed to estate by {reclaimed_by}: {reason}",
            reclaimed_on=reclaimed_on,
            reclaim_reason=reason,
        ))
