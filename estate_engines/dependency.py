"""
Module: estate_engines.dependency
Responsibility:
    Reasonable provision for dependants (Law of Succession Act S.29/S.26):
    assess each dependant's financial need, weigh the strength of the
    claim, and recommend a provision out of the estate left after debts
    and funeral expenses.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel and sibling engines.

Invariants enforced:
    - 0 <= recommended provision <= amount available for dependants, for
      every dependant and in aggregate.
    - A dependant is reduced by 1 / (1 + n) where n is the number of
      other qualifying dependants with a strictly higher entitlement score.
    - Provision status moves PENDING_ASSESSMENT -> ELIGIBLE | INELIGIBLE;
      an eligible provision is GRANTED or DENIED by the court, and any
      outcome, ineligibility included, may be APPEALED and decided again.
    - Legal entitlement and urgency scores are reported on a 0..100 scale;
      the multipliers applied to the assessed need are kept alongside.

Failure modes:
    - Result.fail for a non-positive estate, percentage bounds outside
      0..100 or inverted, duplicate dependant ids, currency mismatches.
    - ProvisionStateError on an illegal status transition.

Audit relevance:
    Each provision records the need assessment, both scores, the number
    of stronger claims and every reason court approval is required.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from estate_engines.allocation import AllocationEngine
from estate_engines.tracer import CalculationMetadata, compute_input_fingerprint, traced_engine
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money, Percentage, calendar_years_between
from estate_kernel.domain.workflow import Transition, Workflow
from estate_kernel.exceptions import ProvisionStateError
from estate_kernel.logging_config import get_logger

logger = get_logger("engines.dependency")

ENGINE_NAME = "dependency"
ENGINE_VERSION = "1.0"

_HUNDRED = Decimal("100")
_MIN_REASON_LENGTH = 10


class DependantRelationship(str, Enum):
    SPOUSE = "spouse"
    CHILD = "child"
    ADOPTED_CHILD = "adopted_child"
    STEP_CHILD = "step_child"
    COHABITING_PARTNER = "cohabiting_partner"
    EX_SPOUSE = "ex_spouse"
    PARENT = "parent"
    SIBLING = "sibling"
    GRANDCHILD = "grandchild"
    OTHER = "other"

    @property
    def is_automatic_dependant(self) -> bool:
        """S.29(a): spouses and children are dependants without proof of maintenance."""
        return self in (
            DependantRelationship.SPOUSE,
            DependantRelationship.CHILD,
            DependantRelationship.ADOPTED_CHILD,
        )


class DependencyLevel(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class PaymentFrequency(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class ProvisionStatus(str, Enum):
    PENDING_ASSESSMENT = "pending_assessment"
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    GRANTED = "granted"
    DENIED = "denied"
    APPEALED = "appealed"


DEPENDANT_PROVISION_WORKFLOW = Workflow(
    name="dependant_provision",
    description="Assessment and court decision on a dependant provision",
    initial_state=ProvisionStatus.PENDING_ASSESSMENT.value,
    states=tuple(s.value for s in ProvisionStatus),
    transitions=(
        Transition("pending_assessment", "eligible", action="assess"),
        Transition("pending_assessment", "ineligible", action="assess"),
        Transition("eligible", "granted", action="grant"),
        Transition("eligible", "denied", action="deny"),
        Transition("ineligible", "appealed", action="appeal"),
        Transition("granted", "appealed", action="appeal"),
        Transition("denied", "appealed", action="appeal"),
        Transition("appealed", "granted", action="grant"),
        Transition("appealed", "denied", action="deny"),
    ),
)


@dataclass(frozen=True)
class DependencyRules:
    """
    Weights and thresholds for S.29 provision.

    The entitlement factor is
    ``(relationship_weight x level_weight + disability_bonus + age_bonus)
    x evidence_factor`` where ``evidence_factor`` runs linearly from
    ``minimum_evidence_factor`` at zero evidence to 1 at full evidence.
    The legal entitlement score expresses that factor as a percentage of
    ``maximum_entitlement_factor``.
    """

    relationship_weights: dict[DependantRelationship, Decimal] = field(default_factory=lambda: {
        DependantRelationship.SPOUSE: Decimal("1.0"),
        DependantRelationship.CHILD: Decimal("1.0"),
        DependantRelationship.ADOPTED_CHILD: Decimal("1.0"),
        DependantRelationship.STEP_CHILD: Decimal("0.8"),
        DependantRelationship.COHABITING_PARTNER: Decimal("0.8"),
        DependantRelationship.PARENT: Decimal("0.7"),
        DependantRelationship.EX_SPOUSE: Decimal("0.6"),
        DependantRelationship.GRANDCHILD: Decimal("0.6"),
        DependantRelationship.SIBLING: Decimal("0.5"),
        DependantRelationship.OTHER: Decimal("0.4"),
    })
    level_weights: dict[DependencyLevel, Decimal] = field(default_factory=lambda: {
        DependencyLevel.FULL: Decimal("1.0"),
        DependencyLevel.PARTIAL: Decimal("0.7"),
        DependencyLevel.NONE: Decimal("0"),
    })
    disability_bonus: Decimal = Decimal("0.2")
    minor_bonus: Decimal = Decimal("0.1")
    elderly_bonus: Decimal = Decimal("0.1")
    elderly_age: int = 60
    minimum_evidence_factor: Decimal = Decimal("0.5")
    urgency_per_indicator: Decimal = Decimal("0.1")
    majority_age: int = 18
    default_support_years: int = 1
    court_approval_estate_share: Decimal = Decimal("20")
    evidence_confidence_threshold: Decimal = Decimal("60")

    def __post_init__(self) -> None:
        missing = set(DependantRelationship) - set(self.relationship_weights)
        if missing:
            raise ValueError(f"relationship_weights missing {sorted(m.value for m in missing)}")
        if set(DependencyLevel) - set(self.level_weights):
            raise ValueError("level_weights must cover every dependency level")
        if not Decimal("0") <= self.minimum_evidence_factor <= Decimal("1"):
            raise ValueError("minimum_evidence_factor must be between 0 and 1")
        if not Decimal("0") <= self.court_approval_estate_share <= _HUNDRED:
            raise ValueError("court_approval_estate_share must be between 0 and 100")

    @property
    def maximum_entitlement_factor(self) -> Decimal:
        """Factor of the strongest possible claim, with full evidence."""
        return (
            max(self.relationship_weights.values()) * max(self.level_weights.values())
            + self.disability_bonus
            + max(self.minor_bonus, self.elderly_bonus)
        )


DEFAULT_DEPENDENCY_RULES = DependencyRules()


@dataclass(frozen=True)
class UrgencyIndicators:
    """Immediate-need indicators; each one present raises the urgency score."""

    TOTAL = 5

    no_other_income: bool = False
    medical_emergency: bool = False
    facing_eviction: bool = False
    school_fees_due: bool = False
    supporting_minor_children: bool = False

    @property
    def count(self) -> int:
        return sum((
            self.no_other_income,
            self.medical_emergency,
            self.facing_eviction,
            self.school_fees_due,
            self.supporting_minor_children,
        ))


@dataclass(frozen=True)
class DependantProfile:
    dependant_id: str
    name: str
    relationship: DependantRelationship
    monthly_living_expenses: Money
    dependency_level: DependencyLevel = DependencyLevel.FULL
    dependency_percentage: Decimal = _HUNDRED
    other_monthly_income: Money | None = None
    annual_education_costs: Money | None = None
    annual_disability_care_costs: Money | None = None
    age: int | None = None
    is_student: bool = False
    expected_graduation_date: date | None = None
    has_disability: bool = False
    evidence_strength: Decimal = Decimal("50")
    urgency: UrgencyIndicators = field(default_factory=UrgencyIndicators)


def qualifies_for_s29(profile: DependantProfile) -> bool:
    """Spouses and children always qualify; others need shown dependency."""
    if profile.relationship.is_automatic_dependant:
        return True
    return profile.dependency_level is not DependencyLevel.NONE and profile.dependency_percentage > 0


def normalise_to_monthly(amount: Money, frequency: PaymentFrequency) -> Money:
    if frequency is PaymentFrequency.WEEKLY:
        return amount * Decimal("52") / Decimal("12")
    if frequency is PaymentFrequency.QUARTERLY:
        return amount / Decimal("3")
    if frequency is PaymentFrequency.ANNUALLY:
        return amount / Decimal("12")
    return amount


# ---------------------------------------------------------------------------
# Monthly support estimate
# ---------------------------------------------------------------------------

_LOCATION_ADJUSTMENTS: dict[str, tuple[Decimal, str]] = {
    "NAIROBI": (Decimal("1.3"), "Urban area cost adjustment applied"),
    "MOMBASA": (Decimal("1.3"), "Urban area cost adjustment applied"),
    "KISUMU": (Decimal("1.1"), "County capital adjustment applied"),
    "NAKURU": (Decimal("1.1"), "County capital adjustment applied"),
}
_RURAL_ADJUSTMENT = (Decimal("0.9"), "Rural area cost adjustment applied")


@dataclass(frozen=True)
class MonthlySupportEstimate:
    basic_needs: Money
    education: Money
    medical: Money
    housing: Money
    other: Money
    location_adjustment: Decimal
    notes: tuple[str, ...] = ()

    @property
    def total(self) -> Money:
        return self.basic_needs + self.education + self.medical + self.housing + self.other


def estimate_monthly_support(
    location: str,
    age: int | None = None,
    is_student: bool = False,
    has_disability: bool = False,
    requires_ongoing_care: bool = False,
    number_of_dependants: int = 1,
    currency: str = "KES",
    rules: DependencyRules = DEFAULT_DEPENDENCY_RULES,
) -> MonthlySupportEstimate:
    """Indicative monthly cost of supporting a dependant, from Nairobi base rates."""
    notes: list[str] = []
    basic = Decimal("15000")
    education = Decimal("0")
    medical = Decimal("5000")
    housing = Decimal("20000")
    other = Decimal("10000")

    adjustment, note = _LOCATION_ADJUSTMENTS.get(location.strip().upper(), _RURAL_ADJUSTMENT)
    notes.append(note)

    if age is not None and age < rules.majority_age:
        basic *= Decimal("0.8")
        education = Decimal("10000")
        notes.append("Minor adjustment applied")
    elif age is not None and age >= rules.elderly_age:
        medical *= Decimal("1.5")
        notes.append("Elderly adjustment applied")
    if is_student:
        education = Decimal("20000")
        basic *= Decimal("1.2")
        notes.append("Student adjustment applied")
    if has_disability:
        medical *= 2
        if requires_ongoing_care:
            other += Decimal("15000")
            notes.append("Ongoing care costs included")
        notes.append("Disability adjustment applied")
    if number_of_dependants > 1:
        basic *= Decimal("1") + (number_of_dependants - 1) * Decimal("0.5")
        housing *= Decimal("1.2")
        notes.append(f"Multiple dependants adjustment ({number_of_dependants})")

    def _money(value: Decimal) -> Money:
        return Money.of(value * adjustment, currency)

    return MonthlySupportEstimate(
        basic_needs=_money(basic),
        education=_money(education),
        medical=_money(medical),
        housing=_money(housing),
        other=_money(other),
        location_adjustment=adjustment,
        notes=tuple(notes),
    )


# ---------------------------------------------------------------------------
# Provision
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NeedAssessment:
    annual_living_expenses: Money
    annual_other_income: Money
    annual_special_needs: Money
    support_years: int
    dependency_factor: Decimal
    assessed_need: Money


@dataclass(frozen=True)
class DependantProvision:
    """
    Recommended provision for one dependant and its court decision status.

    Guarantees:
        - ``recommended_amount`` is never above the estate available for
          dependants.
        - Decisions return new values; the receiver is unchanged.
    """

    dependant_id: str
    name: str
    relationship: DependantRelationship
    qualifies: bool
    need: NeedAssessment
    legal_entitlement_score: Decimal
    urgency_score: Decimal
    entitlement_factor: Decimal
    urgency_factor: Decimal
    stronger_claims: int
    recommended_amount: Money
    share_of_available: Percentage
    court_approval_reasons: tuple[str, ...] = ()
    status: ProvisionStatus = ProvisionStatus.PENDING_ASSESSMENT
    granted_amount: Money | None = None
    court_order_reference: str | None = None
    decision_reason: str | None = None
    appeal_reason: str | None = None
    notes: tuple[str, ...] = ()

    @property
    def requires_court_approval(self) -> bool:
        return bool(self.court_approval_reasons)

    def _transition(
        self, action: str, to_state: ProvisionStatus | None = None, **changes,
    ) -> DependantProvision:
        transition = DEPENDANT_PROVISION_WORKFLOW.find_transition(
            self.status.value, action, to_state.value if to_state else None,
        )
        if transition is None:
            raise ProvisionStateError(self.dependant_id, self.status.value, action)
        return replace(self, status=ProvisionStatus(transition.to_state), **changes)

    def assess(self) -> DependantProvision:
        """Record the outcome of the S.29 qualification check."""
        outcome = ProvisionStatus.ELIGIBLE if self.qualifies else ProvisionStatus.INELIGIBLE
        return self._transition("assess", outcome)

    def grant(
        self,
        court_order_reference: str,
        amount: Money | None = None,
    ) -> Result[DependantProvision]:
        if not court_order_reference or not court_order_reference.strip():
            return Result.failure(
                "COURT_ORDER_REQUIRED", "A court order reference is required to grant provision",
                field="court_order_reference",
            )
        granted = amount if amount is not None else self.recommended_amount
        if granted.currency != self.recommended_amount.currency:
            return Result.failure(
                "CURRENCY_MISMATCH", "Granted amount currency differs from the recommendation",
                field="amount",
            )
        updated = self._transition(
            "grant", granted_amount=granted, court_order_reference=court_order_reference.strip(),
        )
        logger.info("dependant_provision_granted", extra={
            "dependant_id": self.dependant_id,
            "granted_amount": str(granted.amount),
            "recommended_amount": str(self.recommended_amount.amount),
        })
        return Result.ok(updated)

    def deny(self, reason: str) -> Result[DependantProvision]:
        if len(reason.strip()) < _MIN_REASON_LENGTH:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Denial reason must be at least {_MIN_REASON_LENGTH} characters",
                field="reason",
            )
        updated = self._transition("deny", decision_reason=reason.strip(), granted_amount=None)
        logger.info("dependant_provision_denied", extra={"dependant_id": self.dependant_id})
        return Result.ok(updated)

    def appeal(self, reason: str) -> Result[DependantProvision]:
        if len(reason.strip()) < _MIN_REASON_LENGTH:
            return Result.failure(
                "REASON_TOO_SHORT",
                f"Appeal reason must be at least {_MIN_REASON_LENGTH} characters",
                field="reason",
            )
        updated = self._transition("appeal", appeal_reason=reason.strip())
        logger.info("dependant_provision_appealed", extra={
            "dependant_id": self.dependant_id,
            "previous_status": self.status.value,
        })
        return Result.ok(updated)

    def to_record(self) -> dict:
        return {
            "dependant_id": self.dependant_id,
            "name": self.name,
            "relationship": self.relationship.value,
            "qualifies": self.qualifies,
            "assessed_need": self.need.assessed_need.to_record(),
            "support_years": self.need.support_years,
            "legal_entitlement_score": str(self.legal_entitlement_score),
            "urgency_score": str(self.urgency_score),
            "entitlement_factor": str(self.entitlement_factor),
            "urgency_factor": str(self.urgency_factor),
            "stronger_claims": self.stronger_claims,
            "recommended_amount": self.recommended_amount.to_record(),
            "share_of_available": str(self.share_of_available),
            "court_approval_reasons": list(self.court_approval_reasons),
            "status": self.status.value,
            "granted_amount": self.granted_amount.to_record() if self.granted_amount else None,
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class S29CalculationInput:
    net_estate_value: Money
    total_debts: Money
    funeral_expenses: Money
    dependants: tuple[DependantProfile, ...]
    calculation_date: date
    minimum_provision_percentage: Decimal = Decimal("0")
    maximum_provision_percentage: Decimal = Decimal("50")
    calculated_at: datetime | None = None


@dataclass(frozen=True)
class DependantProvisionCalculation:
    net_estate_value: Money
    available_for_dependants: Money
    provisions: tuple[DependantProvision, ...]
    scaled_to_available: bool
    metadata: CalculationMetadata
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def total_recommended(self) -> Money:
        return Money.sum(
            (p.recommended_amount for p in self.provisions), self.net_estate_value.currency
        )

    @property
    def remaining_after_provisions(self) -> Money:
        return self.available_for_dependants.subtract_or_zero(self.total_recommended)

    @property
    def requires_court_approval(self) -> bool:
        return any(p.requires_court_approval for p in self.provisions)

    def provision_for(self, dependant_id: str) -> DependantProvision | None:
        for provision in self.provisions:
            if provision.dependant_id == dependant_id:
                return provision
        return None

    def to_record(self) -> dict:
        return {
            "net_estate_value": self.net_estate_value.to_record(),
            "available_for_dependants": self.available_for_dependants.to_record(),
            "total_recommended": self.total_recommended.to_record(),
            "remaining_after_provisions": self.remaining_after_provisions.to_record(),
            "scaled_to_available": self.scaled_to_available,
            "provisions": [p.to_record() for p in self.provisions],
            "notes": list(self.notes),
            "warnings": list(self.warnings),
            "metadata": self.metadata.to_record(),
        }


class DependantProvisionCalculator:
    """
    S.29 dependant provision calculator.

    Contract:
        Pure; recommendations only.  Granting is a court decision recorded
        through ``DependantProvision.grant``.
    Non-goals:
        - Does not decide who is a dependant beyond ``qualifies_for_s29``.
    """

    def __init__(
        self,
        rules: DependencyRules = DEFAULT_DEPENDENCY_RULES,
        allocator: AllocationEngine | None = None,
    ):
        self.rules = rules
        self.allocator = allocator or AllocationEngine()

    def _validate(self, input_data: S29CalculationInput) -> list[ValidationError]:
        errors: list[ValidationError] = []
        net = input_data.net_estate_value
        currency = net.currency
        if not net.is_positive:
            errors.append(ValidationError(
                "NON_POSITIVE_ESTATE", "Net estate value must be positive", field="net_estate_value",
            ))
        for label, money in (
            ("total_debts", input_data.total_debts),
            ("funeral_expenses", input_data.funeral_expenses),
        ):
            if money.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", f"{label} currency differs from estate currency", field=label,
                ))
        low = input_data.minimum_provision_percentage
        high = input_data.maximum_provision_percentage
        if not (Decimal("0") <= low <= _HUNDRED and Decimal("0") <= high <= _HUNDRED):
            errors.append(ValidationError(
                "INVALID_PROVISION_BOUNDS", "Provision percentages must be between 0 and 100",
                field="minimum_provision_percentage",
            ))
        elif low > high:
            errors.append(ValidationError(
                "INVALID_PROVISION_BOUNDS",
                "Minimum provision percentage cannot exceed the maximum",
                field="minimum_provision_percentage",
            ))

        ids = [d.dependant_id for d in input_data.dependants]
        if len(set(ids)) != len(ids):
            errors.append(ValidationError(
                "DUPLICATE_DEPENDANT", "Dependant ids must be unique", field="dependants",
            ))
        for dependant in input_data.dependants:
            if not Decimal("0") <= dependant.dependency_percentage <= _HUNDRED:
                errors.append(ValidationError(
                    "INVALID_DEPENDENCY_PERCENTAGE",
                    f"Dependency percentage for {dependant.dependant_id} must be between 0 and 100",
                    field="dependency_percentage",
                ))
            if not Decimal("0") <= dependant.evidence_strength <= _HUNDRED:
                errors.append(ValidationError(
                    "INVALID_EVIDENCE_STRENGTH",
                    f"Evidence strength for {dependant.dependant_id} must be between 0 and 100",
                    field="evidence_strength",
                ))
            amounts = (
                dependant.monthly_living_expenses,
                dependant.other_monthly_income,
                dependant.annual_education_costs,
                dependant.annual_disability_care_costs,
            )
            if any(m is not None and m.currency != currency for m in amounts):
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH",
                    f"Amounts for {dependant.dependant_id} differ from estate currency",
                    field="dependants",
                ))
        return errors

    def support_years(self, dependant: DependantProfile, as_of: date) -> int:
        if self.is_minor(dependant):
            return max(1, self.rules.majority_age - dependant.age)
        if dependant.is_student and dependant.expected_graduation_date is not None:
            return max(1, calendar_years_between(as_of, dependant.expected_graduation_date))
        return self.rules.default_support_years

    def assess_need(self, dependant: DependantProfile, as_of: date) -> NeedAssessment:
        currency = dependant.monthly_living_expenses.currency
        zero = Money.zero(currency)
        annual_expenses = dependant.monthly_living_expenses * 12
        annual_income = (dependant.other_monthly_income or zero) * 12
        special = (dependant.annual_education_costs or zero) + (
            dependant.annual_disability_care_costs or zero
        )
        years = self.support_years(dependant, as_of)
        factor = dependant.dependency_percentage / _HUNDRED
        annual_need = annual_expenses.subtract_or_zero(annual_income) + special
        return NeedAssessment(
            annual_living_expenses=annual_expenses,
            annual_other_income=annual_income,
            annual_special_needs=special,
            support_years=years,
            dependency_factor=factor,
            assessed_need=annual_need * years * factor,
        )

    def is_minor(self, dependant: DependantProfile) -> bool:
        return dependant.age is not None and dependant.age < self.rules.majority_age

    def entitlement_factor(self, dependant: DependantProfile) -> Decimal:
        rules = self.rules
        base = (
            rules.relationship_weights[dependant.relationship]
            * rules.level_weights[dependant.dependency_level]
        )
        if dependant.has_disability:
            base += rules.disability_bonus
        if self.is_minor(dependant):
            base += rules.minor_bonus
        elif dependant.age is not None and dependant.age >= rules.elderly_age:
            base += rules.elderly_bonus
        evidence_factor = rules.minimum_evidence_factor + (
            (Decimal("1") - rules.minimum_evidence_factor) * dependant.evidence_strength / _HUNDRED
        )
        return (base * evidence_factor).quantize(Decimal("0.0001"))

    def legal_entitlement_score(self, dependant: DependantProfile) -> Decimal:
        """Entitlement factor as a percentage of the strongest possible claim."""
        score = self.entitlement_factor(dependant) / self.rules.maximum_entitlement_factor * _HUNDRED
        return min(score, _HUNDRED).quantize(Decimal("0.01"))

    def urgency_factor(self, dependant: DependantProfile) -> Decimal:
        return Decimal("1") + self.rules.urgency_per_indicator * dependant.urgency.count

    def urgency_score(self, dependant: DependantProfile) -> Decimal:
        """Share of the immediate-need indicators present, 0..100."""
        count = Decimal(dependant.urgency.count)
        return (count / UrgencyIndicators.TOTAL * _HUNDRED).quantize(Decimal("0.01"))

    def _court_approval_reasons(
        self,
        dependant: DependantProfile,
        amount: Money,
        net: Money,
    ) -> tuple[str, ...]:
        reasons: list[str] = []
        if amount > net.percentage(self.rules.court_approval_estate_share):
            reasons.append(
                f"Provision exceeds {self.rules.court_approval_estate_share}% of the estate"
            )
        if self.is_minor(dependant):
            reasons.append("Dependant is a minor")
        if dependant.relationship is DependantRelationship.COHABITING_PARTNER:
            reasons.append("Relationship is an unregistered cohabitation")
        if dependant.evidence_strength < self.rules.evidence_confidence_threshold:
            reasons.append("Evidence of dependency is below the confidence threshold")
        return tuple(reasons)

    @traced_engine(ENGINE_NAME, ENGINE_VERSION, fingerprint_fields=("input_data",))
    def calculate(self, input_data: S29CalculationInput) -> Result[DependantProvisionCalculation]:
        errors = self._validate(input_data)
        if errors:
            logger.warning("dependency_validation_failed", extra={
                "error_count": len(errors),
                "codes": [e.code for e in errors],
            })
            return Result.fail(*errors)

        net = input_data.net_estate_value
        currency = net.currency
        zero = Money.zero(currency)
        notes: list[str] = []
        warnings: list[str] = []

        available = net.subtract_or_zero(input_data.total_debts + input_data.funeral_expenses)
        if not available.is_positive:
            warnings.append("Debts and funeral expenses exhaust the estate; no provision possible")
        floor = available.percentage(input_data.minimum_provision_percentage)
        ceiling = available.percentage(input_data.maximum_provision_percentage)

        scores = {
            d.dependant_id: self.entitlement_factor(d)
            for d in input_data.dependants if qualifies_for_s29(d)
        }

        drafts: list[tuple[DependantProfile, NeedAssessment, Decimal, Decimal, int, Money, list[str]]] = []
        for dependant in input_data.dependants:
            need = self.assess_need(dependant, input_data.calculation_date)
            urgency = self.urgency_factor(dependant)
            draft_notes: list[str] = []
            if dependant.dependant_id not in scores:
                draft_notes.append("Does not qualify as a dependant under S.29")
                drafts.append((dependant, need, Decimal("0"), urgency, 0, zero, draft_notes))
                continue
            score = scores[dependant.dependant_id]
            amount = need.assessed_need * score * urgency
            if amount < floor:
                draft_notes.append(f"Raised to minimum provision of {floor}")
                amount = floor
            elif amount > ceiling:
                draft_notes.append(f"Capped at maximum provision of {ceiling}")
                amount = ceiling
            stronger = sum(1 for other, s in scores.items()
                           if other != dependant.dependant_id and s > score)
            if stronger:
                amount = amount / (1 + stronger)
                draft_notes.append(f"Reduced for {stronger} stronger claim(s)")
            drafts.append((dependant, need, score, urgency, stronger, amount, draft_notes))

        total = Money.sum((d[5] for d in drafts), currency)
        scaled = total > available
        if scaled:
            weighted = [(d[0].dependant_id, d[5].amount) for d in drafts]
            scaled_amounts = self.allocator.allocate_weighted(available, weighted).as_dict()
            warnings.append(
                f"Recommended provisions {total} exceed the {available} available; scaled proportionally"
            )
            drafts = [
                (dep, need, score, urgency, stronger, scaled_amounts[dep.dependant_id], n)
                for dep, need, score, urgency, stronger, _, n in drafts
            ]

        provisions: list[DependantProvision] = []
        for dependant, need, score, urgency, stronger, amount, draft_notes in drafts:
            # INVARIANT: 0 <= recommended <= available
            assert amount <= available, f"Provision {amount} exceeds available {available}"
            provisions.append(DependantProvision(
                dependant_id=dependant.dependant_id,
                name=dependant.name,
                relationship=dependant.relationship,
                qualifies=dependant.dependant_id in scores,
                need=need,
                legal_entitlement_score=self.legal_entitlement_score(dependant),
                urgency_score=self.urgency_score(dependant),
                entitlement_factor=score,
                urgency_factor=urgency,
                stronger_claims=stronger,
                recommended_amount=amount,
                share_of_available=Percentage.from_ratio(amount, available),
                court_approval_reasons=(
                    self._court_approval_reasons(dependant, amount, net)
                    if dependant.dependant_id in scores else ()
                ),
                notes=tuple(draft_notes),
            ).assess())

        if not input_data.dependants:
            notes.append("No dependants claimed provision")

        fingerprint = compute_input_fingerprint(("input_data",), {"input_data": input_data})
        result = DependantProvisionCalculation(
            net_estate_value=net,
            available_for_dependants=available,
            provisions=tuple(provisions),
            scaled_to_available=scaled,
            metadata=CalculationMetadata(
                ENGINE_NAME, ENGINE_VERSION, fingerprint, input_data.calculated_at,
            ),
            notes=tuple(notes),
            warnings=tuple(warnings),
        )

        logger.info("dependency_calculated", extra={
            "dependant_count": len(provisions),
            "qualifying_count": len(scores),
            "available": str(available.amount),
            "total_recommended": str(result.total_recommended.amount),
            "scaled": scaled,
        })
        return Result.ok(result, warnings=result.warnings)
