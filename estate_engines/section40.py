"""
Module: estate_engines.section40
Responsibility:
    Polygamous intestate distribution under Law of Succession Act S.40:
    the net estate is first divided among the houses (equally, by agreed
    percentages, or per a court order), each house's share is adjusted for
    advancements made to its members and for explicit customary-law
    credits and debits, and the house total is then divided within the
    house between the wife and her children on the Section 35 pattern.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel and sibling engines.

Invariants enforced:
    - Houses are numbered 1..N without gaps or repeats.
    - Equal division: ``per_house_share`` is rounded once per house, so
      ``per_house_share`` x N equals the net estate within N smallest
      currency units; the base house shares add up to the net estate
      exactly.
    - Percentage division requires shares for every house adding up to
      100 within the configured tolerance.
    - Court-ordered division: each house total equals the ordered amount
      exactly and no hotchpot or customary adjustment is applied.
    - A house's advancements are deducted from its own share, never below
      zero, and are not re-divided among the other houses.
    - Customary credits are paid first out of whatever is left
      undistributed, then out of the houses receiving no credit in
      proportion to their shares; ``total_distributed`` never exceeds the
      net estate.
    - Sum of ``total_house_share`` over the houses equals
      ``total_distributed``.

Failure modes:
    - Result.fail for fewer than two houses, bad house numbering,
      duplicate house ids, a house with no surviving member, percentage
      totals outside tolerance, court-ordered totals above the estate,
      adjustments naming an unknown house, customary credits the other
      houses cannot fund, currency mismatches.

Audit relevance:
    Every departure from an equal, unadjusted split is listed as a
    compliance issue or note on the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from estate_engines.allocation import AllocationEngine
from estate_engines.heirs import (
    BeneficiaryRole,
    BeneficiaryShare,
    ChildInfo,
    SpouseInfo,
    represent,
)
from estate_engines.hotchpot import (
    HotchpotAdjustmentResult,
    LifetimeGift,
    adjustments_by_recipient,
)
from estate_engines.tracer import CalculationMetadata, compute_input_fingerprint, traced_engine
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money, Percentage
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.section40")

ENGINE_NAME = "section40"
ENGINE_VERSION = "1.0"


class Section40Rule(str, Enum):
    EQUAL_HOUSES = "S40(1)"
    ADJUSTED_HOUSES = "S40(2)"


class HouseDistributionMethod(str, Enum):
    EQUAL_HOUSES = "equal_houses"
    HOUSE_PERCENTAGES = "house_percentages"
    COURT_ORDERED = "court_ordered"


class CustomaryAdjustmentKind(str, Enum):
    CUSTOMARY_LAW = "customary_law"
    BRIDE_PRICE = "bride_price"


class AdjustmentDirection(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


@dataclass(frozen=True)
class Section40Rules:
    spouse_fraction_within_house: Decimal = Decimal("1") / Decimal("3")
    percentage_tolerance: Decimal = Decimal("0.01")
    minimum_houses: int = 2

    def __post_init__(self) -> None:
        if not Decimal("0") < self.spouse_fraction_within_house < Decimal("1"):
            raise ValueError("spouse_fraction_within_house must be between 0 and 1")
        if self.percentage_tolerance < 0:
            raise ValueError("percentage_tolerance cannot be negative")
        if self.minimum_houses < 2:
            raise ValueError("minimum_houses must be at least 2")


DEFAULT_SECTION40_RULES = Section40Rules()


def _percent(value: Percentage | Decimal | int | str) -> Decimal:
    return value.value if isinstance(value, Percentage) else Percentage.of(value).value


@dataclass(frozen=True)
class PolygamousHouse:
    """
    One house: a wife (surviving or not) and the children of that union.

    ``separate_property_value`` is property already held by the house in
    its own right; it is reported but never added to the divisible estate.
    """

    house_id: str
    house_name: str
    house_order: int
    spouse: SpouseInfo | None = None
    children: tuple[ChildInfo, ...] = ()
    separate_property_value: Money | None = None
    bride_price_paid: bool = False
    bride_price_amount: Money | None = None
    customary_marriage_date: date | None = None

    @property
    def heirs(self) -> list[ChildInfo]:
        return [c for c in self.children if c.takes_share]

    @property
    def member_ids(self) -> list[str]:
        ids = [self.spouse.spouse_id] if self.spouse else []
        return ids + [c.child_id for c in self.heirs]

    @property
    def has_surviving_member(self) -> bool:
        return bool(self.member_ids)

    @property
    def minor_children_count(self) -> int:
        return sum(1 for c in self.heirs if c.is_minor)


@dataclass(frozen=True)
class CustomaryAdjustment:
    """An explicit customary-law credit or debit against a house's share."""

    house_id: str
    amount: Money
    direction: AdjustmentDirection
    kind: CustomaryAdjustmentKind = CustomaryAdjustmentKind.CUSTOMARY_LAW
    basis: str = ""


@dataclass(frozen=True)
class S40CalculationInput:
    net_estate_value: Money
    personal_chattels_value: Money
    calculation_date: date
    houses: tuple[PolygamousHouse, ...]
    lifetime_gifts: tuple[LifetimeGift, ...] = ()
    hotchpot: HotchpotAdjustmentResult | None = None
    house_share_percentages: dict[str, Percentage] | None = None
    court_ordered_distribution: dict[str, Money] | None = None
    court_order_reference: str | None = None
    customary_adjustments: tuple[CustomaryAdjustment, ...] = ()
    customary_ethnic_group: str | None = None
    calculated_at: datetime | None = None


@dataclass(frozen=True)
class HouseShare:
    """
    A house's entitlement and its division among the house members.

    ``total_house_share`` = ``base_share`` - ``hotchpot_deduction``
    + ``customary_credit`` - ``customary_debit`` (never below zero), less
    ``customary_funding`` when the house helps pay another house's credit.
    ``share_of_personal_chattels`` is the part of ``base_share`` that is
    drawn from the personal chattels.
    """

    house_id: str
    house_name: str
    house_order: int
    base_share: Money
    share_of_personal_chattels: Money
    hotchpot_deduction: Money
    customary_credit: Money
    customary_debit: Money
    customary_funding: Money
    total_house_share: Money
    spouse_share: BeneficiaryShare | None
    children_shares: tuple[BeneficiaryShare, ...]
    separate_property_value: Money | None = None
    court_ordered_amount: Money | None = None
    notes: tuple[str, ...] = field(default=())

    @property
    def member_shares(self) -> tuple[BeneficiaryShare, ...]:
        if self.spouse_share is None:
            return self.children_shares
        return (self.spouse_share,) + self.children_shares

    def to_record(self) -> dict:
        return {
            "house_id": self.house_id,
            "house_name": self.house_name,
            "house_order": self.house_order,
            "base_share": self.base_share.to_record(),
            "share_of_personal_chattels": self.share_of_personal_chattels.to_record(),
            "hotchpot_deduction": self.hotchpot_deduction.to_record(),
            "customary_credit": self.customary_credit.to_record(),
            "customary_debit": self.customary_debit.to_record(),
            "customary_funding": self.customary_funding.to_record(),
            "total_house_share": self.total_house_share.to_record(),
            "spouse_share": self.spouse_share.to_record() if self.spouse_share else None,
            "children_shares": [c.to_record() for c in self.children_shares],
            "separate_property_value": (
                self.separate_property_value.to_record() if self.separate_property_value else None
            ),
            "court_ordered_amount": (
                self.court_ordered_amount.to_record() if self.court_ordered_amount else None
            ),
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class S40CalculationResult:
    applied_section: Section40Rule
    method: HouseDistributionMethod
    net_estate_value: Money
    per_house_share: Money
    house_shares: tuple[HouseShare, ...]
    compliance_issues: tuple[str, ...]
    requires_court_approval: bool
    requires_customary_law_consideration: bool
    metadata: CalculationMetadata
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def total_houses(self) -> int:
        return len(self.house_shares)

    @property
    def per_house_tolerance(self) -> Decimal:
        """Drift allowed between ``per_house_share`` x N and the net estate."""
        return self.net_estate_value.currency.rounding_tolerance * self.total_houses

    @property
    def per_house_share_reconciles(self) -> bool:
        drift = abs(self.per_house_share.amount * self.total_houses - self.net_estate_value.amount)
        return drift <= self.per_house_tolerance

    @property
    def total_distributed(self) -> Money:
        return Money.sum(
            (h.total_house_share for h in self.house_shares), self.net_estate_value.currency
        )

    @property
    def unallocated_amount(self) -> Money:
        return self.net_estate_value.subtract_or_zero(self.total_distributed)

    @property
    def complies_with_s40(self) -> bool:
        return not self.compliance_issues

    @property
    def total_children(self) -> int:
        return sum(len(h.children_shares) for h in self.house_shares)

    @property
    def total_minor_children(self) -> int:
        return sum(1 for h in self.house_shares for c in h.children_shares if c.is_minor)

    @property
    def average_children_per_house(self) -> Decimal:
        if not self.house_shares:
            return Decimal("0")
        return (Decimal(self.total_children) / Decimal(self.total_houses)).quantize(Decimal("0.01"))

    def house(self, house_id: str) -> HouseShare | None:
        for share in self.house_shares:
            if share.house_id == house_id:
                return share
        return None

    def share_for(self, beneficiary_id: str) -> BeneficiaryShare | None:
        for house in self.house_shares:
            for share in house.member_shares:
                if share.beneficiary_id == beneficiary_id:
                    return share
        return None

    def to_record(self) -> dict:
        return {
            "applied_section": self.applied_section.value,
            "method": self.method.value,
            "net_estate_value": self.net_estate_value.to_record(),
            "per_house_share": self.per_house_share.to_record(),
            "house_shares": [h.to_record() for h in self.house_shares],
            "total_distributed": self.total_distributed.to_record(),
            "unallocated_amount": self.unallocated_amount.to_record(),
            "compliance_issues": list(self.compliance_issues),
            "requires_court_approval": self.requires_court_approval,
            "requires_customary_law_consideration": self.requires_customary_law_consideration,
            "notes": list(self.notes),
            "warnings": list(self.warnings),
            "metadata": self.metadata.to_record(),
        }


class Section40Calculator:
    """
    Section 40 distribution calculator.

    Contract:
        Pure; returns Result.fail for structurally invalid house data and
        lists softer problems as ``compliance_issues``.
    Non-goals:
        - Does not derive customary adjustments from an ethnic group; they
          must be supplied explicitly.
    """

    def __init__(
        self,
        rules: Section40Rules = DEFAULT_SECTION40_RULES,
        allocator: AllocationEngine | None = None,
    ):
        self.rules = rules
        self.allocator = allocator or AllocationEngine()

    def _validate(self, input_data: S40CalculationInput) -> list[ValidationError]:
        errors: list[ValidationError] = []
        net = input_data.net_estate_value
        currency = net.currency
        houses = input_data.houses

        if not net.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_ESTATE", "Net estate value must be positive",
                field="net_estate_value",
            ))
        chattels = input_data.personal_chattels_value
        if chattels.currency != currency:
            errors.append(ValidationError(
                "CURRENCY_MISMATCH", "Personal chattels currency differs from estate currency",
                field="personal_chattels_value",
            ))
        elif chattels > net:
            errors.append(ValidationError(
                "CHATTELS_EXCEED_ESTATE", "Personal chattels cannot exceed net estate value",
                field="personal_chattels_value",
            ))

        if len(houses) < self.rules.minimum_houses:
            errors.append(ValidationError(
                "TOO_FEW_HOUSES",
                f"Section 40 requires at least {self.rules.minimum_houses} houses; "
                "distribute a single house under Section 35",
                field="houses",
            ))
        ids = [h.house_id for h in houses]
        if len(set(ids)) != len(ids):
            errors.append(ValidationError("DUPLICATE_HOUSE", "House ids must be unique", field="houses"))
        orders = sorted(h.house_order for h in houses)
        if orders != list(range(1, len(houses) + 1)):
            errors.append(ValidationError(
                "INVALID_HOUSE_ORDER",
                f"House orders must run 1..{len(houses)} without gaps; got {orders}",
                field="houses",
            ))
        for house in houses:
            if not house.has_surviving_member:
                errors.append(ValidationError(
                    "EMPTY_HOUSE",
                    f"House {house.house_id} has no surviving wife or children",
                    field="houses",
                ))
            for money in (house.separate_property_value, house.bride_price_amount):
                if money is not None and money.currency != currency:
                    errors.append(ValidationError(
                        "CURRENCY_MISMATCH",
                        f"House {house.house_id} amount currency differs from estate currency",
                        field="houses",
                    ))

        known = set(ids)
        percentages = input_data.house_share_percentages
        if percentages is not None and input_data.court_ordered_distribution is None:
            if set(percentages) != known:
                errors.append(ValidationError(
                    "PERCENTAGE_HOUSES_MISMATCH",
                    "House share percentages must name every house exactly once",
                    field="house_share_percentages",
                ))
            total = sum((_percent(p) for p in percentages.values()), Decimal("0"))
            if abs(total - Decimal("100")) > self.rules.percentage_tolerance:
                errors.append(ValidationError(
                    "PERCENTAGES_NOT_100",
                    f"House share percentages total {total}, expected 100",
                    field="house_share_percentages",
                ))

        ordered = input_data.court_ordered_distribution
        if ordered is not None:
            if set(ordered) != known:
                errors.append(ValidationError(
                    "COURT_ORDER_HOUSES_MISMATCH",
                    "Court-ordered distribution must name every house exactly once",
                    field="court_ordered_distribution",
                ))
            if any(m.currency != currency for m in ordered.values()):
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", "Court-ordered amount currency differs from estate currency",
                    field="court_ordered_distribution",
                ))
            else:
                ordered_total = Money.sum(ordered.values(), currency.code)
                if ordered_total > net:
                    errors.append(ValidationError(
                        "COURT_ORDER_EXCEEDS_ESTATE",
                        f"Court-ordered total {ordered_total} exceeds net estate {net}",
                        field="court_ordered_distribution",
                    ))

        for adjustment in input_data.customary_adjustments:
            if adjustment.house_id not in known:
                errors.append(ValidationError(
                    "UNKNOWN_HOUSE",
                    f"Customary adjustment names unknown house {adjustment.house_id}",
                    field="customary_adjustments",
                ))
            if adjustment.amount.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", "Customary adjustment currency differs from estate currency",
                    field="customary_adjustments",
                ))
        for gift in input_data.lifetime_gifts:
            if gift.value.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", "Lifetime gift currency differs from estate currency",
                    field="lifetime_gifts",
                ))
        return errors

    def _method(self, input_data: S40CalculationInput) -> HouseDistributionMethod:
        if input_data.court_ordered_distribution is not None:
            return HouseDistributionMethod.COURT_ORDERED
        if input_data.house_share_percentages is not None:
            return HouseDistributionMethod.HOUSE_PERCENTAGES
        return HouseDistributionMethod.EQUAL_HOUSES

    def _house_weights(
        self,
        input_data: S40CalculationInput,
        houses: list[PolygamousHouse],
        method: HouseDistributionMethod,
    ) -> list[tuple[str, Decimal]]:
        if method is HouseDistributionMethod.HOUSE_PERCENTAGES:
            pct = input_data.house_share_percentages or {}
            return [(h.house_id, _percent(pct[h.house_id])) for h in houses]
        if method is HouseDistributionMethod.COURT_ORDERED:
            ordered = input_data.court_ordered_distribution or {}
            return [(h.house_id, ordered[h.house_id].amount) for h in houses]
        return [(h.house_id, Decimal("1")) for h in houses]

    def _split_within_house(
        self,
        house: PolygamousHouse,
        total: Money,
        chattels: Money,
    ) -> tuple[BeneficiaryShare | None, tuple[BeneficiaryShare, ...]]:
        """Divide a house total between the wife and the children of the house.

        The wife takes the configured fraction and the children share the
        rest equally.  Without children she takes everything; without a
        surviving wife the children do.  The house's chattels share goes
        with the wife where she survives.
        """
        zero = Money.zero(total.currency)
        heirs = house.heirs
        spouse = house.spouse
        non_chattel = total.subtract_or_zero(chattels)
        house_chattels = total - non_chattel

        spouse_share = None
        children_pool = non_chattel
        child_chattels = {c.child_id: zero for c in heirs}
        if spouse is not None:
            spouse_part = (
                non_chattel * self.rules.spouse_fraction_within_house if heirs else non_chattel
            )
            children_pool = non_chattel - spouse_part
            spouse_share = BeneficiaryShare(
                beneficiary_id=spouse.spouse_id,
                name=spouse.name,
                role=BeneficiaryRole.SPOUSE,
                chattels_share=house_chattels,
                residue_share=spouse_part,
                life_interest_value=zero,
                hotchpot_deduction=zero,
            )
        elif heirs and house_chattels.is_positive:
            child_chattels = self.allocator.allocate_equal(
                house_chattels, [c.child_id for c in heirs]
            ).as_dict()

        children: list[BeneficiaryShare] = []
        if heirs:
            parts = self.allocator.allocate_equal(children_pool, [c.child_id for c in heirs]).as_dict()
            for child in heirs:
                children.append(BeneficiaryShare(
                    beneficiary_id=child.child_id,
                    name=child.name,
                    role=BeneficiaryRole.CHILD,
                    chattels_share=child_chattels[child.child_id],
                    residue_share=parts[child.child_id],
                    life_interest_value=zero,
                    hotchpot_deduction=zero,
                    representation_shares=represent(
                        child, child_chattels[child.child_id], parts[child.child_id], self.allocator,
                    ),
                    is_minor=child.is_minor,
                ))
        return spouse_share, tuple(children)

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("input_data",))
    def calculate(self, input_data: S40CalculationInput) -> Result[S40CalculationResult]:
        errors = self._validate(input_data)
        if errors:
            logger.warning("section40_validation_failed", extra={
                "error_count": len(errors),
                "codes": [e.code for e in errors],
            })
            return Result.fail(*errors)

        net = input_data.net_estate_value
        currency = net.currency
        zero = Money.zero(currency)
        houses = sorted(input_data.houses, key=lambda h: h.house_order)
        method = self._method(input_data)
        court_ordered = method is HouseDistributionMethod.COURT_ORDERED
        notes: list[str] = []
        warnings: list[str] = []
        compliance_issues: list[str] = []

        if court_ordered and input_data.house_share_percentages is not None:
            notes.append("Court-ordered distribution supersedes the agreed house percentages")

        weights = self._house_weights(input_data, houses, method)
        per_house_share = net / len(houses)
        if court_ordered:
            ordered = input_data.court_ordered_distribution or {}
            base_shares = {h.house_id: ordered[h.house_id] for h in houses}
            distributable = Money.sum(base_shares.values(), currency.code)
            ref = input_data.court_order_reference or "unreferenced order"
            notes.append(f"Distributed per court order ({ref}); adjustments not applied")
        else:
            base_shares = self.allocator.allocate_weighted(net, weights).as_dict()
            distributable = net

        chattels = input_data.personal_chattels_value
        chattel_shares = {h.house_id: zero for h in houses}
        if chattels.is_positive and distributable.is_positive:
            chattels_in_play = chattels if chattels <= distributable else distributable
            chattel_weights = [(h, w) for h, w in weights if w > 0] or weights
            chattel_shares.update(self.allocator.allocate_weighted(chattels_in_play, chattel_weights).as_dict())

        # Advancements made to house members, aggregated per house
        if input_data.hotchpot is not None:
            member_adjustments = {
                m: input_data.hotchpot.adjustment_for(m) for h in houses for m in h.member_ids
            }
        else:
            member_adjustments = adjustments_by_recipient(input_data.lifetime_gifts, currency.code)
        house_adjustments = {
            h.house_id: Money.sum(
                (member_adjustments.get(m, zero) for m in h.member_ids), currency.code
            )
            for h in houses
        }

        hotchpot_deductions = {h.house_id: zero for h in houses}
        after_hotchpot = dict(base_shares)
        if not court_ordered:
            for house in houses:
                hid = house.house_id
                advanced = house_adjustments[hid]
                if not advanced.is_positive:
                    continue
                reduced = base_shares[hid].subtract_or_zero(advanced)
                hotchpot_deductions[hid] = base_shares[hid] - reduced
                after_hotchpot[hid] = reduced
                if reduced.is_zero:
                    notes.append(
                        f"House {hid} advancements of {advanced} meet or exceed its share; "
                        "house takes nothing further"
                    )

        credits = {h.house_id: zero for h in houses}
        debits = {h.house_id: zero for h in houses}
        if court_ordered:
            if input_data.customary_adjustments:
                notes.append("Customary adjustments ignored under court-ordered distribution")
        else:
            for adjustment in input_data.customary_adjustments:
                target = credits if adjustment.direction is AdjustmentDirection.CREDIT else debits
                target[adjustment.house_id] = target[adjustment.house_id] + adjustment.amount
                notes.append(
                    f"{adjustment.kind.value} {adjustment.direction.value} of {adjustment.amount} "
                    f"for house {adjustment.house_id}"
                    + (f": {adjustment.basis}" if adjustment.basis else "")
                )
        if input_data.customary_ethnic_group and not input_data.customary_adjustments:
            warnings.append(
                f"Customary law of the {input_data.customary_ethnic_group} community may apply; "
                "no customary adjustments were supplied"
            )
        for house in houses:
            if house.customary_marriage_date is not None and not house.bride_price_paid:
                notes.append(f"House {house.house_id}: bride price not recorded as paid")

        totals: dict[str, Money] = {}
        for house in houses:
            hid = house.house_id
            credited = after_hotchpot[hid] + credits[hid]
            if debits[hid] > credited:
                compliance_issues.append(
                    f"House {hid} customary debits exceed its share; share reduced to zero"
                )
            totals[hid] = credited.subtract_or_zero(debits[hid])

        # Credits beyond the undistributed amount come out of the other houses
        funding = {h.house_id: zero for h in houses}
        excess = Money.sum(totals.values(), currency.code).subtract_or_zero(net)
        if excess.is_positive:
            funders = [
                (hid, totals[hid].amount)
                for hid in totals if credits[hid].is_zero and totals[hid].is_positive
            ]
            capacity = Money.sum((totals[hid] for hid, _ in funders), currency.code)
            if excess > capacity:
                logger.warning("section40_credits_unfunded", extra={
                    "excess": str(excess.amount),
                    "capacity": str(capacity.amount),
                })
                return Result.fail(ValidationError(
                    "CUSTOMARY_CREDITS_EXCEED_ESTATE",
                    f"Customary credits exceed the estate by {excess}; "
                    f"houses without credits can fund only {capacity}",
                    field="customary_adjustments",
                ))
            funding.update(self.allocator.allocate_weighted(excess, funders).as_dict())
            for hid, _ in funders:
                totals[hid] = totals[hid] - funding[hid]
            notes.append(
                f"Customary credits exceed the undistributed amount by {excess}; "
                f"funded from houses {', '.join(hid for hid, _ in funders)}"
            )

        house_shares: list[HouseShare] = []
        for house in houses:
            hid = house.house_id
            total = totals[hid]
            house_notes: list[str] = []
            if house.separate_property_value is not None and house.separate_property_value.is_positive:
                house_notes.append(
                    f"Separate property of {house.separate_property_value} excluded from division"
                )
            if hotchpot_deductions[hid].is_positive:
                house_notes.append(f"Hotchpot deduction of {hotchpot_deductions[hid]}")
            if funding[hid].is_positive:
                house_notes.append(f"Contributed {funding[hid]} towards customary credits")
            chattel_part = chattel_shares[hid] if chattel_shares[hid] <= total else total
            spouse_share, children = self._split_within_house(house, total, chattel_part)
            house_shares.append(HouseShare(
                house_id=hid,
                house_name=house.house_name,
                house_order=house.house_order,
                base_share=base_shares[hid],
                share_of_personal_chattels=chattel_part,
                hotchpot_deduction=hotchpot_deductions[hid],
                customary_credit=credits[hid],
                customary_debit=debits[hid],
                customary_funding=funding[hid],
                total_house_share=total,
                spouse_share=spouse_share,
                children_shares=children,
                separate_property_value=house.separate_property_value,
                court_ordered_amount=base_shares[hid] if court_ordered else None,
                notes=tuple(house_notes),
            ))

        total_distributed = Money.sum((h.total_house_share for h in house_shares), currency.code)
        if court_ordered and distributable < net:
            warnings.append(
                f"Court order leaves {net - distributable} undistributed"
            )
        else:
            withheld = Money.sum(hotchpot_deductions.values(), currency.code)
            if withheld.is_positive:
                notes.append(f"Hotchpot deductions of {withheld} remain undistributed")
            residual = net.subtract_or_zero(total_distributed + withheld)
            if residual.amount > currency.rounding_tolerance:
                warnings.append(f"Unallocated amount of {residual} remains")

        minors = sum(h.minor_children_count for h in houses)
        requires_court_approval = minors > 0 or bool(compliance_issues)
        if minors:
            notes.append(f"{minors} minor children; shares held in trust subject to court approval")
        requires_customary = (
            bool(input_data.customary_ethnic_group)
            or bool(input_data.customary_adjustments)
            or any(h.customary_marriage_date is not None for h in houses)
        )

        is_equal_unadjusted = (
            method is HouseDistributionMethod.EQUAL_HOUSES
            and not any(a.is_positive for a in house_adjustments.values())
            and not input_data.customary_adjustments
        )
        rule = Section40Rule.EQUAL_HOUSES if is_equal_unadjusted else Section40Rule.ADJUSTED_HOUSES
        notes.insert(0, f"Applied {rule.value} across {len(houses)} houses ({method.value})")

        fingerprint = compute_input_fingerprint(("input_data",), {"input_data": input_data})
        result = S40CalculationResult(
            applied_section=rule,
            method=method,
            net_estate_value=net,
            per_house_share=per_house_share,
            house_shares=tuple(house_shares),
            compliance_issues=tuple(compliance_issues),
            requires_court_approval=requires_court_approval,
            requires_customary_law_consideration=requires_customary,
            metadata=CalculationMetadata(
                ENGINE_NAME, ENGINE_VERSION, fingerprint, input_data.calculated_at,
            ),
            notes=tuple(notes),
            warnings=tuple(warnings),
        )

        logger.info("section40_calculated", extra={
            "applied_section": rule.value,
            "method": method.value,
            "house_count": len(houses),
            "net_estate_value": str(net.amount),
            "total_distributed": str(total_distributed.amount),
            "compliance_issue_count": len(compliance_issues),
        })
        return Result.ok(result, warnings=result.warnings)
