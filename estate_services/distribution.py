"""
estate_services.distribution -- Whole-estate distribution under the Law of Succession Act.

Responsibility:
    Run the statutory pipeline over one estate snapshot: settle debts in
    S.45 priority, reserve S.29 dependant provision out of the residue,
    bring lifetime gifts into hotchpot, then divide what remains under
    S.35 (one household) or S.40 (polygamous houses).

Architecture position:
    Services -- orchestration over engines, modules and config.
    Owns no arithmetic of its own: every amount comes from an engine.
    The only state it touches is the ``Debt`` aggregates it is handed,
    which it asks to re-check their limitation period.

Invariants enforced:
    - Debts are settled before anything reaches a beneficiary.
    - Dependant provision is reserved before intestate shares are computed.
    - distributed + reserved + debts paid never exceed the gross estate.
    - Every calculation runs under one ``calculation_id`` bound into
      ``LogContext``; every engine trace carries it.

Failure modes:
    - Result.fail when the snapshot is unusable (no heirs, currency
      mismatches) or when a downstream engine fails validation; the
      engine's errors are passed through unchanged.

Audit relevance:
    The report carries the settlement plan, provisions, hotchpot result and
    the S.35/S.40 result, each with its own input fingerprint, plus the
    statutory parameter version and checksum in force.

Usage:
    service = EstateDistributionService(clock=SystemClock())
    result = service.distribute(DistributionSnapshot(
        estate_id="EST-001",
        gross_estate_value=Money.of("1200000", "KES"),
        personal_chattels_value=Money.of("100000", "KES"),
        date_of_death=date(2024, 3, 1),
        calculation_date=date(2024, 6, 1),
        debts=(funeral, mortgage),
        surviving_spouse=SpouseInfo("S1", "Achieng"),
        children=(ChildInfo("C1", "Otieno"), ChildInfo("C2", "Akinyi")),
    ))
    report = result.unwrap()
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from estate_config import get_statutory_parameters
from estate_config.schema import StatutoryParameters
from estate_engines.debt_settlement import DebtClaim, DebtSettlementEngine, SettlementPlan
from estate_engines.dependency import (
    DependantProfile,
    DependantProvisionCalculation,
    DependantProvisionCalculator,
    S29CalculationInput,
)
from estate_engines.heirs import ChildInfo, SpouseInfo
from estate_engines.hotchpot import (
    HotchpotAdjustmentResult,
    HotchpotBeneficiary,
    HotchpotCalculationInput,
    HotchpotCalculator,
    HotchpotMethod,
    LifetimeGift,
)
from estate_engines.section35 import S35CalculationInput, S35CalculationResult, Section35Calculator
from estate_engines.section40 import (
    CustomaryAdjustment,
    PolygamousHouse,
    S40CalculationInput,
    S40CalculationResult,
    Section40Calculator,
)
from estate_kernel.domain.clock import Clock, SystemClock
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import Money, Percentage
from estate_kernel.logging_config import LogContext, get_logger
from estate_modules.debt import Debt, LiabilityTier
from estate_modules.gifts import GiftInterVivos

logger = get_logger("services.distribution")


@dataclass(frozen=True)
class DistributionSnapshot:
    """Everything known about the estate at the calculation date."""

    estate_id: str
    gross_estate_value: Money
    personal_chattels_value: Money
    date_of_death: date
    calculation_date: date
    debts: tuple[Debt, ...] = ()
    gifts: tuple[GiftInterVivos, ...] = ()
    dependants: tuple[DependantProfile, ...] = ()
    surviving_spouse: SpouseInfo | None = None
    children: tuple[ChildInfo, ...] = ()
    matrimonial_home_value: Money | None = None
    houses: tuple[PolygamousHouse, ...] = ()
    house_share_percentages: dict[str, Percentage] | None = None
    court_ordered_distribution: dict[str, Money] | None = None
    court_order_reference: str | None = None
    customary_adjustments: tuple[CustomaryAdjustment, ...] = ()
    customary_ethnic_group: str | None = None
    hotchpot_method: HotchpotMethod = HotchpotMethod.INFLATION_ADJUSTED
    inflation_rate: Decimal | None = None

    @property
    def is_polygamous(self) -> bool:
        return len(self.houses) > 1


@dataclass(frozen=True)
class EstateDistributionReport:
    calculation_id: UUID
    estate_id: str
    calculated_at: datetime
    parameters_version: str
    parameters_checksum: str
    settlement: SettlementPlan
    dependant_provisions: DependantProvisionCalculation | None = None
    hotchpot: HotchpotAdjustmentResult | None = None
    section35: S35CalculationResult | None = None
    section40: S40CalculationResult | None = None
    excluded_debt_ids: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def net_estate_value(self) -> Money:
        """Gross estate less the debts actually paid."""
        return self.settlement.residue

    @property
    def dependant_reserve(self) -> Money:
        if self.dependant_provisions is None:
            return Money.zero(self.net_estate_value.currency)
        return self.dependant_provisions.total_recommended

    @property
    def applied_section(self) -> str | None:
        if self.section40 is not None:
            return self.section40.applied_section.value
        if self.section35 is not None:
            return self.section35.applied_section.value
        return None

    @property
    def total_distributed(self) -> Money:
        """Intestate shares only, excluding the dependant reserve."""
        zero = Money.zero(self.net_estate_value.currency)
        if self.section40 is not None:
            return self.section40.total_distributed
        if self.section35 is not None:
            return self.section35.total_spouse_share + self.section35.total_children_share
        return zero

    @property
    def requires_court_approval(self) -> bool:
        return any((
            self.section35 is not None and self.section35.requires_court_approval,
            self.section40 is not None and self.section40.requires_court_approval,
            self.dependant_provisions is not None
            and self.dependant_provisions.requires_court_approval,
        ))

    def to_record(self) -> dict:
        return {
            "calculation_id": str(self.calculation_id),
            "estate_id": self.estate_id,
            "calculated_at": self.calculated_at.isoformat(),
            "parameters_version": self.parameters_version,
            "parameters_checksum": self.parameters_checksum,
            "applied_section": self.applied_section,
            "net_estate_value": self.net_estate_value.to_record(),
            "dependant_reserve": self.dependant_reserve.to_record(),
            "total_distributed": self.total_distributed.to_record(),
            "requires_court_approval": self.requires_court_approval,
            "excluded_debt_ids": list(self.excluded_debt_ids),
            "settlement": self.settlement.to_record(),
            "dependant_provisions": (
                self.dependant_provisions.to_record() if self.dependant_provisions else None
            ),
            "hotchpot": self.hotchpot.to_record() if self.hotchpot else None,
            "section35": self.section35.to_record() if self.section35 else None,
            "section40": self.section40.to_record() if self.section40 else None,
            "notes": list(self.notes),
            "warnings": list(self.warnings),
        }


class EstateDistributionService:
    """
    Runs the full distribution pipeline for one estate.

    Contract:
        Receives statutory parameters and a Clock via constructor
        injection; builds one calculator per stage from the parameters.
    Guarantees:
        - Deterministic for a given snapshot, parameters and clock.
        - A failed stage stops the pipeline and its errors are returned.
    Non-goals:
        - Does not persist the report or publish debt events; callers
          drain ``Debt.pull_events()`` themselves.
        - Does not grant provisions; the court does that through
          ``DependantProvision.grant``.
    """

    def __init__(
        self,
        parameters: StatutoryParameters | None = None,
        clock: Clock | None = None,
    ):
        self.parameters = parameters or get_statutory_parameters()
        self.clock = clock or SystemClock()
        self.settlement_engine = DebtSettlementEngine()
        self.dependency_calculator = DependantProvisionCalculator(self.parameters.dependency)
        self.hotchpot_calculator = HotchpotCalculator(self.parameters.hotchpot)
        self.section35_calculator = Section35Calculator(self.parameters.section35)
        self.section40_calculator = Section40Calculator(self.parameters.section40)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _collect_claims(
        self, snapshot: DistributionSnapshot,
    ) -> tuple[list[DebtClaim], list[str], list[str]]:
        """Claims the estate must meet, plus excluded debt ids and notes."""
        claims: list[DebtClaim] = []
        excluded: list[str] = []
        notes: list[str] = []
        for debt in sorted(snapshot.debts, key=lambda d: d.priority_key):
            debt.check_statute_barred_status(snapshot.calculation_date)
            eligibility = debt.can_be_paid_from_estate()
            if not eligibility.can_pay:
                excluded.append(str(debt.id))
                notes.append(f"Debt {debt.id} ({debt.creditor_name}) excluded: {eligibility.reason}")
                continue
            claims.append(debt.to_claim())
        return claims, excluded, notes

    def _beneficiaries(self, snapshot: DistributionSnapshot) -> tuple[HotchpotBeneficiary, ...]:
        beneficiaries: dict[str, HotchpotBeneficiary] = {}
        spouses = [snapshot.surviving_spouse] if snapshot.surviving_spouse else []
        children = list(snapshot.children)
        for house in snapshot.houses:
            if house.spouse is not None:
                spouses.append(house.spouse)
            children.extend(house.children)
        for spouse in spouses:
            beneficiaries[spouse.spouse_id] = HotchpotBeneficiary(
                spouse.spouse_id, spouse.name, "SPOUSE",
            )
        for child in children:
            if child.takes_share:
                beneficiaries[child.child_id] = HotchpotBeneficiary(
                    child.child_id, child.name, "CHILD",
                )
        return tuple(beneficiaries.values())

    def _validate(self, snapshot: DistributionSnapshot) -> list[ValidationError]:
        errors: list[ValidationError] = []
        currency = snapshot.gross_estate_value.currency
        if currency.code != self.parameters.currency:
            errors.append(ValidationError(
                "CURRENCY_MISMATCH",
                f"Estate currency {currency.code} differs from parameter currency "
                f"{self.parameters.currency}",
                field="gross_estate_value",
            ))
        if snapshot.personal_chattels_value.currency != currency:
            errors.append(ValidationError(
                "CURRENCY_MISMATCH", "Chattels currency differs from estate currency",
                field="personal_chattels_value",
            ))
        for debt in snapshot.debts:
            if debt.principal.currency != currency:
                errors.append(ValidationError(
                    "CURRENCY_MISMATCH", f"Debt {debt.id} currency differs from estate currency",
                    field="debts",
                ))
        if snapshot.calculation_date < snapshot.date_of_death:
            errors.append(ValidationError(
                "CALCULATION_BEFORE_DEATH", "Calculation date precedes the date of death",
                field="calculation_date",
            ))
        if snapshot.houses and (snapshot.surviving_spouse is not None or snapshot.children):
            errors.append(ValidationError(
                "AMBIGUOUS_HOUSEHOLD",
                "Give either houses or a single spouse and children, not both",
                field="houses",
            ))
        return errors

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def distribute(self, snapshot: DistributionSnapshot) -> Result[EstateDistributionReport]:
        errors = self._validate(snapshot)
        if errors:
            return Result.fail(*errors)

        calculation_id = uuid4()
        calculated_at = self.clock.now()
        with LogContext.bind(calculation_id=str(calculation_id), estate_id=snapshot.estate_id):
            logger.info("distribution_started", extra={
                "debt_count": len(snapshot.debts),
                "gift_count": len(snapshot.gifts),
                "dependant_count": len(snapshot.dependants),
                "house_count": len(snapshot.houses),
                "parameters_version": self.parameters.version,
            })
            result = self._run(snapshot, calculation_id, calculated_at)
            if result.is_success:
                report = result.unwrap()
                logger.info("distribution_completed", extra={
                    "applied_section": report.applied_section,
                    "net_estate_value": str(report.net_estate_value.amount),
                    "dependant_reserve": str(report.dependant_reserve.amount),
                    "total_distributed": str(report.total_distributed.amount),
                    "requires_court_approval": report.requires_court_approval,
                })
            else:
                logger.warning("distribution_failed", extra={"codes": list(result.error_codes)})
            return result

    def _run(
        self,
        snapshot: DistributionSnapshot,
        calculation_id: UUID,
        calculated_at: datetime,
    ) -> Result[EstateDistributionReport]:
        currency = snapshot.gross_estate_value.currency
        warnings: list[str] = []

        # 1. S.45 debts
        claims, excluded, notes = self._collect_claims(snapshot)
        settled = self.settlement_engine.settle(snapshot.gross_estate_value, claims)
        if settled.is_failure:
            return Result.fail(*settled.errors)
        plan = settled.unwrap()
        warnings.extend(settled.warnings)
        notes.extend(plan.notes)

        def report(**stages) -> EstateDistributionReport:
            return EstateDistributionReport(
                calculation_id=calculation_id,
                estate_id=snapshot.estate_id,
                calculated_at=calculated_at,
                parameters_version=self.parameters.version,
                parameters_checksum=self.parameters.checksum,
                settlement=plan,
                excluded_debt_ids=tuple(excluded),
                notes=tuple(notes),
                warnings=tuple(warnings),
                **stages,
            )

        net = plan.residue
        if not net.is_positive:
            warnings.append("No residue after debts; nothing to distribute")
            return Result.ok(report(), warnings=warnings)

        # 2. S.29 dependant provision
        provisions: DependantProvisionCalculation | None = None
        reserve = Money.zero(currency)
        if snapshot.dependants:
            funeral = Money.sum(
                (s.paid for s in plan.settlements if s.tier_order == LiabilityTier.FUNERAL_EXPENSES.order),
                currency,
            )
            calculated = self.dependency_calculator.calculate(S29CalculationInput(
                net_estate_value=snapshot.gross_estate_value,
                total_debts=plan.total_paid - funeral,
                funeral_expenses=funeral,
                dependants=snapshot.dependants,
                calculation_date=snapshot.calculation_date,
                calculated_at=calculated_at,
            ))
            if calculated.is_failure:
                return Result.fail(*calculated.errors)
            provisions = calculated.unwrap()
            reserve = provisions.total_recommended
            warnings.extend(calculated.warnings)

        # 3. S.35(3) hotchpot
        lifetime_gifts: tuple[LifetimeGift, ...] = tuple(g.to_lifetime_gift() for g in snapshot.gifts)
        hotchpot: HotchpotAdjustmentResult | None = None
        beneficiaries = self._beneficiaries(snapshot)
        if lifetime_gifts and beneficiaries:
            minimum = self.parameters.minimum_hotchpot_adjustment
            adjusted = self.hotchpot_calculator.calculate(HotchpotCalculationInput(
                net_estate_value=net,
                date_of_death=snapshot.date_of_death,
                beneficiaries=beneficiaries,
                lifetime_gifts=lifetime_gifts,
                adjustment_method=snapshot.hotchpot_method,
                inflation_rate=snapshot.inflation_rate,
                minimum_adjustment_threshold=Money.of(minimum, currency) if minimum > 0 else None,
                calculated_at=calculated_at,
            ))
            if adjusted.is_failure:
                return Result.fail(*adjusted.errors)
            hotchpot = adjusted.unwrap()
            warnings.extend(adjusted.warnings)

        # 4. Intestate shares
        if snapshot.is_polygamous:
            distributable = net.subtract_or_zero(reserve)
            if not distributable.is_positive:
                warnings.append("Dependant provision exhausts the residue; no house shares")
                return Result.ok(
                    report(dependant_provisions=provisions, hotchpot=hotchpot), warnings=warnings,
                )
            if reserve.is_positive:
                notes.append(f"Reserved {reserve} for Section 29 dependant provision")
            chattels = snapshot.personal_chattels_value
            if chattels > distributable:
                notes.append(f"Personal chattels capped at the distributable residue {distributable}")
                chattels = distributable
            divided = self.section40_calculator.calculate(S40CalculationInput(
                net_estate_value=distributable,
                personal_chattels_value=chattels,
                calculation_date=snapshot.calculation_date,
                houses=snapshot.houses,
                lifetime_gifts=lifetime_gifts,
                hotchpot=hotchpot,
                house_share_percentages=snapshot.house_share_percentages,
                court_ordered_distribution=snapshot.court_ordered_distribution,
                court_order_reference=snapshot.court_order_reference,
                customary_adjustments=snapshot.customary_adjustments,
                customary_ethnic_group=snapshot.customary_ethnic_group,
                calculated_at=calculated_at,
            ))
            if divided.is_failure:
                return Result.fail(*divided.errors)
            warnings.extend(divided.warnings)
            return Result.ok(report(
                dependant_provisions=provisions, hotchpot=hotchpot, section40=divided.unwrap(),
            ), warnings=warnings)

        spouse, children = self._single_household(snapshot)
        chattels = snapshot.personal_chattels_value
        if chattels > net:
            notes.append(f"Personal chattels capped at the net estate {net}")
            chattels = net
        divided35 = self.section35_calculator.calculate(S35CalculationInput(
            net_estate_value=net,
            personal_chattels_value=chattels,
            calculation_date=snapshot.calculation_date,
            surviving_spouse=spouse,
            children=children,
            matrimonial_home_value=snapshot.matrimonial_home_value,
            lifetime_gifts=lifetime_gifts,
            hotchpot=hotchpot,
            dependant_provision_reserve=reserve if reserve.is_positive else None,
            other_dependant_ids=tuple(d.dependant_id for d in snapshot.dependants),
            calculated_at=calculated_at,
        ))
        if divided35.is_failure:
            return Result.fail(*divided35.errors)
        warnings.extend(divided35.warnings)
        return Result.ok(report(
            dependant_provisions=provisions, hotchpot=hotchpot, section35=divided35.unwrap(),
        ), warnings=warnings)

    @staticmethod
    def _single_household(
        snapshot: DistributionSnapshot,
    ) -> tuple[SpouseInfo | None, Sequence[ChildInfo]]:
        if len(snapshot.houses) == 1:
            house = snapshot.houses[0]
            return house.spouse, tuple(house.children)
        return snapshot.surviving_spouse, tuple(snapshot.children)
