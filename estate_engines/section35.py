"""
Module: estate_engines.section35
Responsibility:
    Monogamous intestate distribution under Law of Succession Act S.35:
    personal chattels, a life interest in the matrimonial home, and the
    residue split between the surviving spouse and the children, with
    lifetime advancements brought into hotchpot and deceased children
    represented by their issue.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel and sibling engines.

Invariants enforced:
    - Sum of all shares (plus any dependant reserve) never exceeds the net
      estate; with at least one heir the shortfall is exactly the hotchpot
      deductions withheld from children.
    - A child's residue share is never negative: a child whose advancement
      meets or exceeds an equal share of the residue takes nothing
      further; deductions are not re-divided among the other children.
    - Identical inputs yield identical results; no domain events are
      emitted.

Failure modes:
    - Result.fail for non-positive estate, chattels or matrimonial home
      above the estate, no surviving spouse and no children who take,
      duplicate child ids, currency mismatches.

Audit relevance:
    The applied sub-rule, life-interest term and every hotchpot deduction
    are recorded on the result together with the input fingerprint.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
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
    HotchpotShare,
    LifetimeGift,
    adjustments_by_recipient,
    deduct_advancements,
)
from estate_engines.tracer import CalculationMetadata, compute_input_fingerprint, traced_engine
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import DateRange, Money
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.section35")

ENGINE_NAME = "section35"
ENGINE_VERSION = "1.0"


class Section35Rule(str, Enum):
    SPOUSE_AND_CHILDREN = "S35(1)"
    SPOUSE_ONLY = "S35(1)(a)"
    CHILDREN_ONLY = "S35(1)(b)"
    REPRESENTATION = "S35(5)"


@dataclass(frozen=True)
class Section35Rules:
    """Statutory parameters for monogamous distribution."""

    spousal_residue_fraction: Decimal = Decimal("1") / Decimal("3")
    life_interest_years: int = 30
    life_interest_valuation_fraction: Decimal = Decimal("0.5")
    matrimonial_home_property_id: str = "MATRIMONIAL_HOME"

    def __post_init__(self) -> None:
        if not Decimal("0") < self.spousal_residue_fraction < Decimal("1"):
            raise ValueError("spousal_residue_fraction must be between 0 and 1")
        if not Decimal("0") <= self.life_interest_valuation_fraction <= Decimal("1"):
            raise ValueError("life_interest_valuation_fraction must be between 0 and 1")
        if self.life_interest_years <= 0:
            raise ValueError("life_interest_years must be positive")


DEFAULT_SECTION35_RULES = Section35Rules()


@dataclass(frozen=True)
class LifeInterest:
    """Surviving spouse's life interest, terminating on death or remarriage."""

    property_id: str
    holder_id: str
    property_value: Money
    interest_value: Money
    term: DateRange
    condition: str = "Terminates on the death or remarriage of the surviving spouse"

    def to_record(self) -> dict:
        return {
            "property_id": self.property_id,
            "holder_id": self.holder_id,
            "property_value": self.property_value.to_record(),
            "interest_value": self.interest_value.to_record(),
            "term": self.term.to_record(),
            "condition": self.condition,
        }


@dataclass(frozen=True)
class S35CalculationInput:
    net_estate_value: Money
    personal_chattels_value: Money
    calculation_date: date
    surviving_spouse: SpouseInfo | None = None
    children: tuple[ChildInfo, ...] = ()
    matrimonial_home_value: Money | None = None
    lifetime_gifts: tuple[LifetimeGift, ...] = ()
    hotchpot: HotchpotAdjustmentResult | None = None
    dependant_provision_reserve: Money | None = None
    other_dependant_ids: tuple[str, ...] = ()
    calculated_at: datetime | None = None


@dataclass(frozen=True)
class S35CalculationResult:
    applied_section: Section35Rule
    net_estate_value: Money
    personal_chattels_value: Money
    residuary_estate: Money
    dependant_provision_reserve: Money
    spousal_fraction: Decimal
    spouse_share: BeneficiaryShare | None
    children_shares: tuple[BeneficiaryShare, ...]
    life_interest: LifeInterest | None
    requires_court_approval: bool
    metadata: CalculationMetadata
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def _zero(self) -> Money:
        return Money.zero(self.net_estate_value.currency)

    @property
    def total_spouse_share(self) -> Money:
        return self.spouse_share.total_share if self.spouse_share else self._zero

    @property
    def total_children_share(self) -> Money:
        return Money.sum((c.total_share for c in self.children_shares), self.net_estate_value.currency)

    @property
    def total_distributed(self) -> Money:
        return self.total_spouse_share + self.total_children_share + self.dependant_provision_reserve

    @property
    def unallocated_amount(self) -> Money:
        return self.net_estate_value.subtract_or_zero(self.total_distributed)

    @property
    def hotchpot_withheld(self) -> Money:
        """Advancements deducted from children's residue shares and left undistributed."""
        return Money.sum(
            (c.hotchpot_deduction for c in self.children_shares), self.net_estate_value.currency
        )

    @property
    def is_fully_distributed(self) -> bool:
        """Everything not withheld for hotchpot has been distributed."""
        residual = self.unallocated_amount.subtract_or_zero(self.hotchpot_withheld)
        return residual.amount <= self.net_estate_value.currency.rounding_tolerance

    def share_for(self, beneficiary_id: str) -> BeneficiaryShare | None:
        if self.spouse_share and self.spouse_share.beneficiary_id == beneficiary_id:
            return self.spouse_share
        for share in self.children_shares:
            if share.beneficiary_id == beneficiary_id:
                return share
        return None

    def summary(self) -> dict[str, str]:
        return {
            "applied_section": self.applied_section.value,
            "net_estate_value": str(self.net_estate_value),
            "personal_chattels_value": str(self.personal_chattels_value),
            "residuary_estate": str(self.residuary_estate),
            "total_spouse_share": str(self.total_spouse_share),
            "total_children_share": str(self.total_children_share),
            "total_distributed": str(self.total_distributed),
            "unallocated_amount": str(self.unallocated_amount),
            "hotchpot_withheld": str(self.hotchpot_withheld),
            "children_count": str(len(self.children_shares)),
            "life_interest": "yes" if self.life_interest else "no",
            "requires_court_approval": "yes" if self.requires_court_approval else "no",
        }

    def to_record(self) -> dict:
        return {
            "applied_section": self.applied_section.value,
            "net_estate_value": self.net_estate_value.to_record(),
            "personal_chattels_value": self.personal_chattels_value.to_record(),
            "residuary_estate": self.residuary_estate.to_record(),
            "dependant_provision_reserve": self.dependant_provision_reserve.to_record(),
            "spousal_fraction": str(self.spousal_fraction),
            "spouse_share": self.spouse_share.to_record() if self.spouse_share else None,
            "children_shares": [c.to_record() for c in self.children_shares],
            "life_interest": self.life_interest.to_record() if self.life_interest else None,
            "total_distributed": self.total_distributed.to_record(),
            "unallocated_amount": self.unallocated_amount.to_record(),
            "hotchpot_withheld": self.hotchpot_withheld.to_record(),
            "requires_court_approval": self.requires_court_approval,
            "notes": list(self.notes),
            "warnings": list(self.warnings),
            "metadata": self.metadata.to_record(),
        }


class Section35Calculator:
    """
    Section 35 distribution calculator.

    Contract:
        Pure; returns Result.fail for statutorily invalid input.
    Non-goals:
        - Does not handle estates with no spouse and no children (S.39).
        - Does not handle polygamous estates (see ``Section40Calculator``).
    """

    def __init__(
        self,
        rules: Section35Rules = DEFAULT_SECTION35_RULES,
        allocator: AllocationEngine | None = None,
    ):
        self.rules = rules
        self.allocator = allocator or AllocationEngine()

    def _validate(self, input_data: S35CalculationInput) -> list[ValidationError]:
        errors: list[ValidationError] = []
        net = input_data.net_estate_value
        currency = net.currency

        def _same_currency(money: Money | None, label: str) -> bool:
            if money is not None and money.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", f"{label} currency differs from estate currency",
                    field=label,
                ))
                return False
            return True

        if not net.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_ESTATE", "Net estate value must be positive",
                field="net_estate_value",
            ))
        chattels = input_data.personal_chattels_value
        if _same_currency(chattels, "personal_chattels_value") and chattels > net:
            errors.append(ValidationError(
                "CHATTELS_EXCEED_ESTATE", "Personal chattels cannot exceed net estate value",
                field="personal_chattels_value",
            ))
        home = input_data.matrimonial_home_value
        if _same_currency(home, "matrimonial_home_value") and home is not None and home > net:
            errors.append(ValidationError(
                "HOME_EXCEEDS_ESTATE", "Matrimonial home value cannot exceed net estate value",
                field="matrimonial_home_value",
            ))
        _same_currency(input_data.dependant_provision_reserve, "dependant_provision_reserve")
        for gift in input_data.lifetime_gifts:
            _same_currency(gift.value, "lifetime_gifts")

        ids = [c.child_id for c in input_data.children]
        if len(set(ids)) != len(ids):
            errors.append(ValidationError(
                "DUPLICATE_CHILD", "Child ids must be unique", field="children",
            ))
        if input_data.surviving_spouse is None and not any(c.takes_share for c in input_data.children):
            errors.append(ValidationError(
                "NO_SPOUSE_OR_CHILDREN",
                "Section 35 requires a surviving spouse or children; "
                "distribute under Section 39",
                field="children",
            ))
        return errors

    def _rule(self, spouse: SpouseInfo | None, heirs: list[ChildInfo]) -> Section35Rule:
        if any(c.is_represented for c in heirs):
            return Section35Rule.REPRESENTATION
        if spouse is not None and heirs:
            return Section35Rule.SPOUSE_AND_CHILDREN
        if spouse is not None:
            return Section35Rule.SPOUSE_ONLY
        return Section35Rule.CHILDREN_ONLY

    def _split_children_residue(
        self,
        children_residue: Money,
        heirs: list[ChildInfo],
        adjustments: dict[str, Money],
    ) -> dict[str, tuple[HotchpotShare, str | None]]:
        """Equal division of the residue, each part less that child's own advancements."""
        split = deduct_advancements(
            children_residue,
            [(c.child_id, Decimal("1")) for c in heirs],
            adjustments,
            self.allocator,
        )
        parts: dict[str, tuple[HotchpotShare, str | None]] = {}
        for child in heirs:
            share = split[child.child_id]
            if share.exhausted:
                note = (
                    f"Advancements of {share.advancement} meet or exceed an equal share "
                    f"of {share.entitlement}; takes nothing further from the residue"
                )
            elif share.deduction.is_positive:
                note = f"Hotchpot deduction of {share.deduction}"
            else:
                note = None
            parts[child.child_id] = (share, note)
        return parts

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("input_data",))
    def calculate(self, input_data: S35CalculationInput) -> Result[S35CalculationResult]:
        errors = self._validate(input_data)
        if errors:
            logger.warning("section35_validation_failed", extra={
                "error_count": len(errors),
                "codes": [e.code for e in errors],
            })
            return Result.fail(*errors)

        net = input_data.net_estate_value
        currency = net.currency
        zero = Money.zero(currency)
        spouse = input_data.surviving_spouse
        notes: list[str] = []
        warnings: list[str] = []

        heirs = [c for c in input_data.children if c.takes_share]
        for child in input_data.children:
            if not child.takes_share:
                notes.append(f"{child.name} predeceased without issue and takes no share")
        rule = self._rule(spouse, heirs)
        notes.append(f"Applied {rule.value}")

        # Personal chattels
        chattels = input_data.personal_chattels_value
        child_chattels: dict[str, Money] = {c.child_id: zero for c in heirs}
        spouse_chattels = zero
        if spouse is not None:
            spouse_chattels = chattels
        elif chattels.is_positive:
            child_chattels = self.allocator.allocate_equal(chattels, [c.child_id for c in heirs]).as_dict()

        # Life interest in the matrimonial home
        life_interest: LifeInterest | None = None
        home = input_data.matrimonial_home_value
        if spouse is not None and home is not None and home.is_positive:
            interest_value = home * self.rules.life_interest_valuation_fraction
            if chattels + interest_value > net:
                interest_value = net.subtract_or_zero(chattels)
            life_interest = LifeInterest(
                property_id=self.rules.matrimonial_home_property_id,
                holder_id=spouse.spouse_id,
                property_value=home,
                interest_value=interest_value,
                term=DateRange.for_years(input_data.calculation_date, self.rules.life_interest_years),
            )
            notes.append(
                f"Life interest in matrimonial home valued at {interest_value} "
                f"until {life_interest.term.end}"
            )
        interest_value = life_interest.interest_value if life_interest else zero

        reserve = input_data.dependant_provision_reserve or zero
        available = net.subtract_or_zero(chattels + interest_value)
        if reserve > available:
            warnings.append(
                f"Dependant provision reserve {reserve} exceeds the residue {available}; capped"
            )
            reserve = available
        residue = available - reserve
        if reserve.is_positive:
            notes.append(f"Reserved {reserve} for Section 29 dependant provision")
        elif input_data.other_dependant_ids:
            warnings.append(
                "Other dependants exist; Section 29 claims may alter this distribution"
            )

        # Residue: spouse fraction, remainder to children
        if spouse is not None and heirs:
            spouse_residue = residue * self.rules.spousal_residue_fraction
        elif spouse is not None:
            spouse_residue = residue
        else:
            spouse_residue = zero
        children_residue = residue - spouse_residue
        if spouse is None:
            spousal_fraction = Decimal("0")
        elif heirs:
            spousal_fraction = self.rules.spousal_residue_fraction
        else:
            spousal_fraction = Decimal("1")

        if input_data.hotchpot is not None:
            adjustments = {c.child_id: input_data.hotchpot.adjustment_for(c.child_id) for c in heirs}
        else:
            adjustments = adjustments_by_recipient(input_data.lifetime_gifts, currency.code)
        child_residues = (
            self._split_children_residue(children_residue, heirs, adjustments) if heirs else {}
        )

        spouse_share = None
        if spouse is not None:
            spouse_share = BeneficiaryShare(
                beneficiary_id=spouse.spouse_id,
                name=spouse.name,
                role=BeneficiaryRole.SPOUSE,
                chattels_share=spouse_chattels,
                residue_share=spouse_residue,
                life_interest_value=interest_value,
                hotchpot_deduction=zero,
            )

        children_shares: list[BeneficiaryShare] = []
        for child in heirs:
            part, note = child_residues[child.child_id]
            children_shares.append(BeneficiaryShare(
                beneficiary_id=child.child_id,
                name=child.name,
                role=BeneficiaryRole.CHILD,
                chattels_share=child_chattels[child.child_id],
                residue_share=part.share,
                life_interest_value=zero,
                hotchpot_deduction=part.deduction,
                representation_shares=represent(
                    child, child_chattels[child.child_id], part.share, self.allocator,
                ),
                is_minor=child.is_minor,
                notes=(note,) if note else (),
            ))

        requires_court_approval = any(c.is_minor for c in heirs)
        if requires_court_approval:
            notes.append("Minor children present; shares held in trust subject to court approval")

        fingerprint = compute_input_fingerprint(("input_data",), {"input_data": input_data})
        result = S35CalculationResult(
            applied_section=rule,
            net_estate_value=net,
            personal_chattels_value=chattels,
            residuary_estate=residue,
            dependant_provision_reserve=reserve,
            spousal_fraction=spousal_fraction,
            spouse_share=spouse_share,
            children_shares=tuple(children_shares),
            life_interest=life_interest,
            requires_court_approval=requires_court_approval,
            metadata=CalculationMetadata(
                ENGINE_NAME, ENGINE_VERSION, fingerprint, input_data.calculated_at,
            ),
            notes=tuple(notes),
            warnings=tuple(warnings),
        )

        if result.hotchpot_withheld.is_positive:
            notes.append(
                f"Hotchpot deductions of {result.hotchpot_withheld} remain undistributed"
            )
            result = replace(result, notes=tuple(notes))
        if not result.is_fully_distributed:
            warnings.append(f"Unallocated amount of {result.unallocated_amount} remains")
            result = replace(result, warnings=tuple(warnings))

        logger.info("section35_calculated", extra={
            "applied_section": rule.value,
            "net_estate_value": str(net.amount),
            "children_count": len(heirs),
            "has_spouse": spouse is not None,
            "total_distributed": str(result.total_distributed.amount),
            "unallocated": str(result.unallocated_amount.amount),
        })
        return Result.ok(result, warnings=result.warnings)
