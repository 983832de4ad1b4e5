"""
Tests for S.29 dependant provision.

Covers:
- Need assessment, entitlement and urgency scores
- Floor, ceiling, stronger-claim reduction and proportional scaling
- Court decision lifecycle on a provision
- Support estimates and frequency normalisation
"""

from datetime import date
from decimal import Decimal

import pytest

from estate_engines.dependency import (
    DependantProfile,
    DependantProvision,
    DependantProvisionCalculator,
    DependantRelationship,
    DependencyLevel,
    DependencyRules,
    PaymentFrequency,
    ProvisionStatus,
    S29CalculationInput,
    UrgencyIndicators,
    estimate_monthly_support,
    normalise_to_monthly,
    qualifies_for_s29,
)
from estate_kernel.exceptions import ProvisionStateError
from tests.factories import kes

CALC_DATE = date(2024, 6, 1)


def _spouse(**overrides) -> DependantProfile:
    kwargs = dict(
        dependant_id="spouse-1",
        name="Achieng",
        relationship=DependantRelationship.SPOUSE,
        monthly_living_expenses=kes(20000),
        evidence_strength=Decimal("100"),
    )
    kwargs.update(overrides)
    return DependantProfile(**kwargs)


def _parent(**overrides) -> DependantProfile:
    kwargs = dict(
        dependant_id="parent-1",
        name="Mama Otieno",
        relationship=DependantRelationship.PARENT,
        monthly_living_expenses=kes(10000),
        dependency_level=DependencyLevel.PARTIAL,
        dependency_percentage=Decimal("50"),
        age=70,
    )
    kwargs.update(overrides)
    return DependantProfile(**kwargs)


def _minor(dependant_id: str, **overrides) -> DependantProfile:
    kwargs = dict(
        dependant_id=dependant_id,
        name=f"Minor {dependant_id}",
        relationship=DependantRelationship.CHILD,
        monthly_living_expenses=kes(10000),
        age=10,
        evidence_strength=Decimal("100"),
        urgency=UrgencyIndicators(school_fees_due=True, no_other_income=True),
    )
    kwargs.update(overrides)
    return DependantProfile(**kwargs)


def _input(dependants, **overrides) -> S29CalculationInput:
    kwargs = dict(
        net_estate_value=kes(1000000),
        total_debts=kes(100000),
        funeral_expenses=kes(100000),
        dependants=tuple(dependants),
        calculation_date=CALC_DATE,
    )
    kwargs.update(overrides)
    return S29CalculationInput(**kwargs)


class TestScoring:
    """Need, entitlement and urgency."""

    def setup_method(self):
        self.calculator = DependantProvisionCalculator()

    def test_need_is_net_annual_shortfall_times_years(self):
        need = self.calculator.assess_need(
            _spouse(other_monthly_income=kes(5000), annual_education_costs=kes(30000)),
            CALC_DATE,
        )
        assert need.annual_living_expenses == kes(240000)
        assert need.annual_other_income == kes(60000)
        assert need.assessed_need == kes(210000)

    def test_income_above_expenses_floors_at_zero(self):
        need = self.calculator.assess_need(_spouse(other_monthly_income=kes(50000)), CALC_DATE)
        assert need.assessed_need.is_zero

    def test_minor_supported_to_majority(self):
        assert self.calculator.support_years(_minor("m1"), CALC_DATE) == 8

    def test_student_supported_to_graduation(self):
        student = _spouse(
            relationship=DependantRelationship.CHILD,
            age=20,
            is_student=True,
            expected_graduation_date=date(2027, 9, 1),
        )
        assert self.calculator.support_years(student, CALC_DATE) == 3

    def test_entitlement_factor(self):
        assert self.calculator.entitlement_factor(_spouse()) == Decimal("1.0000")
        # (0.7 x 0.7 + 0.1 elderly) x 0.75 evidence factor
        assert self.calculator.entitlement_factor(_parent()) == Decimal("0.4425")

    def test_legal_entitlement_score_is_a_percentage_of_the_strongest_claim(self):
        # strongest claim: 1.0 x 1.0 + 0.2 disability + 0.1 age bonus
        assert self.calculator.rules.maximum_entitlement_factor == Decimal("1.3")
        assert self.calculator.legal_entitlement_score(_spouse()) == Decimal("76.92")
        assert self.calculator.legal_entitlement_score(_parent()) == Decimal("34.04")
        assert self.calculator.legal_entitlement_score(_minor("m1")) == Decimal("84.62")
        strongest = _minor("m2", has_disability=True)
        assert self.calculator.legal_entitlement_score(strongest) == Decimal("100.00")

    def test_urgency_factor(self):
        assert self.calculator.urgency_factor(_minor("m1")) == Decimal("1.2")
        assert self.calculator.urgency_factor(_spouse()) == Decimal("1")

    def test_urgency_score(self):
        assert self.calculator.urgency_score(_minor("m1")) == Decimal("40.00")
        assert self.calculator.urgency_score(_spouse()) == Decimal("0.00")
        every_indicator = UrgencyIndicators(
            school_fees_due=True,
            medical_emergency=True,
            facing_eviction=True,
            no_other_income=True,
            supporting_minor_children=True,
        )
        assert self.calculator.urgency_score(_spouse(urgency=every_indicator)) == Decimal("100.00")

    def test_majority_age_follows_configured_rules(self):
        rules = DependencyRules(majority_age=21)
        calculator = DependantProvisionCalculator(rules=rules)
        student = _spouse(relationship=DependantRelationship.CHILD, age=19)

        assert calculator.is_minor(student)
        assert not self.calculator.is_minor(student)
        assert calculator.support_years(student, CALC_DATE) == 2
        assert calculator.entitlement_factor(student) == Decimal("1.1000")

    def test_qualification(self):
        assert qualifies_for_s29(_spouse(dependency_level=DependencyLevel.NONE))
        assert not qualifies_for_s29(_parent(dependency_level=DependencyLevel.NONE))
        assert qualifies_for_s29(_parent())


class TestProvisionCalculation:
    """Recommended amounts."""

    def setup_method(self):
        self.calculator = DependantProvisionCalculator()

    def test_spouse_and_parent(self):
        result = self.calculator.calculate(_input([_spouse(), _parent()]))

        assert result.is_success
        calc = result.value
        assert calc.available_for_dependants == kes(800000)
        assert calc.provision_for("spouse-1").recommended_amount == kes(240000)
        parent = calc.provision_for("parent-1")
        assert parent.stronger_claims == 1
        # 60000 x 0.4425, halved for the one stronger claim
        assert parent.recommended_amount == kes(13275)
        assert calc.total_recommended == kes(253275)
        assert calc.remaining_after_provisions == kes(546725)
        assert not calc.scaled_to_available

    def test_court_approval_reasons(self):
        calc = self.calculator.calculate(_input([_spouse(), _parent()])).value
        assert calc.provision_for("spouse-1").court_approval_reasons == (
            "Provision exceeds 20% of the estate",
        )
        assert "Evidence of dependency is below the confidence threshold" in (
            calc.provision_for("parent-1").court_approval_reasons
        )
        assert calc.requires_court_approval

    def test_ceiling_caps_provision(self):
        calc = self.calculator.calculate(_input([_minor("m1")])).value
        provision = calc.provision_for("m1")
        assert provision.recommended_amount == kes(400000)
        assert any("Capped" in n for n in provision.notes)

    def test_floor_raises_provision(self):
        calc = self.calculator.calculate(_input(
            [_spouse(monthly_living_expenses=kes(100))],
            minimum_provision_percentage=Decimal("1"),
        )).value
        assert calc.provision_for("spouse-1").recommended_amount == kes(8000)

    def test_total_scaled_to_available(self):
        """Three capped claims of 400,000 each share the 800,000 available."""
        result = self.calculator.calculate(_input([_minor("m1"), _minor("m2"), _minor("m3")]))
        calc = result.value

        assert calc.scaled_to_available
        assert [p.recommended_amount for p in calc.provisions] == [
            kes(266667), kes(266667), kes(266666),
        ]
        assert calc.total_recommended == calc.available_for_dependants
        assert any("scaled proportionally" in w for w in result.warnings)

    def test_non_qualifying_dependant_gets_nothing(self):
        sibling = DependantProfile(
            dependant_id="sib-1",
            name="Odhiambo",
            relationship=DependantRelationship.SIBLING,
            monthly_living_expenses=kes(10000),
            dependency_level=DependencyLevel.NONE,
        )
        calc = self.calculator.calculate(_input([sibling])).value
        provision = calc.provision_for("sib-1")
        assert not provision.qualifies
        assert provision.recommended_amount.is_zero
        assert provision.court_approval_reasons == ()
        assert provision.status == ProvisionStatus.INELIGIBLE

    def test_qualifying_dependants_are_assessed_eligible(self):
        calc = self.calculator.calculate(_input([_spouse(), _parent()])).value
        assert all(p.status == ProvisionStatus.ELIGIBLE for p in calc.provisions)
        spouse = calc.provision_for("spouse-1")
        assert spouse.legal_entitlement_score == Decimal("76.92")
        assert spouse.urgency_score == Decimal("0.00")
        assert spouse.entitlement_factor == Decimal("1.0000")
        assert spouse.to_record()["status"] == "eligible"

    def test_minor_under_configured_majority_needs_court_approval(self):
        calculator = DependantProvisionCalculator(rules=DependencyRules(majority_age=21))
        student = _spouse(
            dependant_id="child-1", relationship=DependantRelationship.CHILD, age=19,
        )
        calc = calculator.calculate(_input([student])).value
        assert "Dependant is a minor" in calc.provision_for("child-1").court_approval_reasons

    def test_debts_exhaust_estate(self):
        result = self.calculator.calculate(_input([_spouse()], total_debts=kes(950000)))
        assert result.value.available_for_dependants.is_zero
        assert result.value.total_recommended.is_zero
        assert any("exhaust" in w for w in result.warnings)

    def test_no_dependants(self):
        calc = self.calculator.calculate(_input([])).value
        assert calc.provisions == ()
        assert "No dependants claimed provision" in calc.notes

    @pytest.mark.parametrize(
        "dependants, overrides, code",
        [
            ([_spouse()], {"net_estate_value": kes(0)}, "NON_POSITIVE_ESTATE"),
            (
                [_spouse()],
                {"minimum_provision_percentage": Decimal("60")},
                "INVALID_PROVISION_BOUNDS",
            ),
            ([_spouse(), _spouse()], {}, "DUPLICATE_DEPENDANT"),
            (
                [_spouse(dependency_percentage=Decimal("120"))],
                {},
                "INVALID_DEPENDENCY_PERCENTAGE",
            ),
            ([_spouse(evidence_strength=Decimal("101"))], {}, "INVALID_EVIDENCE_STRENGTH"),
        ],
    )
    def test_validation(self, dependants, overrides, code):
        result = self.calculator.calculate(_input(dependants, **overrides))
        assert result.is_failure
        assert code in result.error_codes


class TestProvisionDecisions:
    """Assessment and court decisions on a provision."""

    def _provision(self):
        calc = DependantProvisionCalculator().calculate(_input([_spouse()])).value
        return calc.provision_for("spouse-1")

    def test_grant_defaults_to_recommended_amount(self):
        granted = self._provision().grant("HCSC E123 of 2024").unwrap()
        assert granted.status == ProvisionStatus.GRANTED
        assert granted.granted_amount == kes(240000)
        assert granted.court_order_reference == "HCSC E123 of 2024"

    def test_grant_requires_court_order(self):
        assert self._provision().grant("  ").error_codes == ("COURT_ORDER_REQUIRED",)

    def test_deny_then_appeal_then_grant(self):
        denied = self._provision().deny("Applicant is self-supporting").unwrap()
        assert denied.status == ProvisionStatus.DENIED

        appealed = denied.appeal("New evidence of medical costs").unwrap()
        assert appealed.status == ProvisionStatus.APPEALED

        granted = appealed.grant("COA 77 of 2025", kes(100000)).unwrap()
        assert granted.status == ProvisionStatus.GRANTED
        assert granted.granted_amount == kes(100000)

    def test_reasons_are_required(self):
        assert self._provision().deny("no").error_codes == ("REASON_TOO_SHORT",)

    def test_illegal_transition_raises(self):
        granted = self._provision().grant("HCSC E123 of 2024").unwrap()
        with pytest.raises(ProvisionStateError):
            granted.grant("HCSC E124 of 2024")

    def test_cannot_appeal_before_a_decision(self):
        with pytest.raises(ProvisionStateError):
            self._provision().appeal("Appealing before any decision")

    def test_provision_starts_pending_assessment(self):
        provision = DependantProvision(
            dependant_id="spouse-1",
            name="Achieng",
            relationship=DependantRelationship.SPOUSE,
            qualifies=True,
            need=self._provision().need,
            legal_entitlement_score=Decimal("76.92"),
            urgency_score=Decimal("0"),
            entitlement_factor=Decimal("1"),
            urgency_factor=Decimal("1"),
            stronger_claims=0,
            recommended_amount=kes(240000),
            share_of_available=self._provision().share_of_available,
            court_approval_reasons=(),
        )
        assert provision.status == ProvisionStatus.PENDING_ASSESSMENT
        with pytest.raises(ProvisionStateError):
            provision.grant("HCSC E123 of 2024")
        assert provision.assess().status == ProvisionStatus.ELIGIBLE
        with pytest.raises(ProvisionStateError):
            provision.assess().assess()

    def _ineligible(self):
        sibling = DependantProfile(
            dependant_id="sib-1",
            name="Odhiambo",
            relationship=DependantRelationship.SIBLING,
            monthly_living_expenses=kes(10000),
            dependency_level=DependencyLevel.NONE,
        )
        calc = DependantProvisionCalculator().calculate(_input([sibling])).value
        return calc.provision_for("sib-1")

    def test_ineligible_provision_cannot_be_granted(self):
        with pytest.raises(ProvisionStateError):
            self._ineligible().grant("HCSC E123 of 2024")

    def test_ineligible_provision_can_be_appealed(self):
        appealed = self._ineligible().appeal("Evidence of partial dependency").unwrap()
        assert appealed.status == ProvisionStatus.APPEALED
        granted = appealed.grant("COA 12 of 2025", kes(50000)).unwrap()
        assert granted.granted_amount == kes(50000)


class TestSupportEstimates:
    """Indicative monthly support and frequency conversion."""

    def test_nairobi_adult(self):
        estimate = estimate_monthly_support("Nairobi")
        assert estimate.location_adjustment == Decimal("1.3")
        assert estimate.total == kes(65000)

    def test_rural_adult(self):
        estimate = estimate_monthly_support("Kitui")
        assert estimate.total == kes(45000)
        assert "Rural area cost adjustment applied" in estimate.notes

    def test_minor_has_education_costs(self):
        estimate = estimate_monthly_support("Kisumu", age=8)
        assert estimate.education == kes(11000)

    def test_minor_threshold_follows_configured_rules(self):
        assert estimate_monthly_support("Kisumu", age=19).education.is_zero
        estimate = estimate_monthly_support(
            "Kisumu", age=19, rules=DependencyRules(majority_age=21),
        )
        assert estimate.education == kes(11000)
        assert "Minor adjustment applied" in estimate.notes

    def test_elderly_threshold_follows_configured_rules(self):
        estimate = estimate_monthly_support(
            "Nairobi", age=55, rules=DependencyRules(elderly_age=55),
        )
        assert "Elderly adjustment applied" in estimate.notes
        assert "Elderly adjustment applied" not in estimate_monthly_support("Nairobi", age=55).notes

    @pytest.mark.parametrize(
        "amount, frequency, expected",
        [
            (1200, PaymentFrequency.WEEKLY, 5200),
            (3000, PaymentFrequency.QUARTERLY, 1000),
            (12000, PaymentFrequency.ANNUALLY, 1000),
            (1000, PaymentFrequency.MONTHLY, 1000),
        ],
    )
    def test_normalise_to_monthly(self, amount, frequency, expected):
        assert normalise_to_monthly(kes(amount), frequency) == kes(expected)
