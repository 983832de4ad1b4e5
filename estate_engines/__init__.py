"""
Module: estate_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    statutory calculation engines.  This is the import surface for the
    higher layers (estate_modules, estate_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import estate_kernel (and sibling engine modules).
    MUST NOT import estate_modules, estate_config or estate_services.

Invariants enforced:
    - Purity: engines never read the clock.  Dates are passed in as
      explicit parameters and ``calculated_at`` is supplied by the caller.
    - Decimal-only arithmetic through ``Money`` and ``Percentage``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every calculator entry point is wrapped by ``@traced_engine`` and emits
    an ESTATE_ENGINE_TRACE record carrying the input fingerprint that also
    appears on the result's ``CalculationMetadata``.

Usage:
    from estate_engines import Section35Calculator, S35CalculationInput
    from estate_engines.hotchpot import HotchpotCalculator
"""

from estate_kernel.logging_config import get_logger

logger = get_logger("engines")

from estate_engines.allocation import (
    AllocationEngine,
    AllocationLine,
    AllocationResult,
)
from estate_engines.debt_settlement import (
    ClaimSettlement,
    DebtClaim,
    DebtSettlementEngine,
    SettlementPlan,
    TierSettlement,
)
from estate_engines.dependency import (
    DependantProfile,
    DependantProvision,
    DependantProvisionCalculation,
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
from estate_engines.heirs import (
    BeneficiaryRole,
    BeneficiaryShare,
    ChildInfo,
    SpouseInfo,
)
from estate_engines.hotchpot import (
    CourtExemption,
    HotchpotAdjustment,
    HotchpotAdjustmentResult,
    HotchpotBeneficiary,
    HotchpotCalculationInput,
    HotchpotCalculator,
    HotchpotMethod,
    HotchpotRules,
    HotchpotStatus,
    LifetimeGift,
    deduct_advancements,
    revalue_gift,
)
from estate_engines.section35 import (
    LifeInterest,
    S35CalculationInput,
    S35CalculationResult,
    Section35Calculator,
    Section35Rule,
    Section35Rules,
)
from estate_engines.section40 import (
    AdjustmentDirection,
    CustomaryAdjustment,
    CustomaryAdjustmentKind,
    HouseDistributionMethod,
    HouseShare,
    PolygamousHouse,
    S40CalculationInput,
    S40CalculationResult,
    Section40Calculator,
    Section40Rule,
    Section40Rules,
)
from estate_engines.tracer import CalculationMetadata, compute_input_fingerprint, traced_engine

__all__ = [
    "AdjustmentDirection",
    "AllocationEngine",
    "AllocationLine",
    "AllocationResult",
    "BeneficiaryRole",
    "BeneficiaryShare",
    "CalculationMetadata",
    "ChildInfo",
    "ClaimSettlement",
    "CourtExemption",
    "CustomaryAdjustment",
    "CustomaryAdjustmentKind",
    "DebtClaim",
    "DebtSettlementEngine",
    "DependantProfile",
    "DependantProvision",
    "DependantProvisionCalculation",
    "DependantProvisionCalculator",
    "DependantRelationship",
    "DependencyLevel",
    "DependencyRules",
    "HotchpotAdjustment",
    "HotchpotAdjustmentResult",
    "HotchpotBeneficiary",
    "HotchpotCalculationInput",
    "HotchpotCalculator",
    "HotchpotMethod",
    "HotchpotRules",
    "HotchpotStatus",
    "HouseDistributionMethod",
    "HouseShare",
    "LifeInterest",
    "LifetimeGift",
    "PaymentFrequency",
    "PolygamousHouse",
    "ProvisionStatus",
    "S29CalculationInput",
    "S35CalculationInput",
    "S35CalculationResult",
    "S40CalculationInput",
    "S40CalculationResult",
    "Section35Calculator",
    "Section35Rule",
    "Section35Rules",
    "Section40Calculator",
    "Section40Rule",
    "Section40Rules",
    "SettlementPlan",
    "SpouseInfo",
    "TierSettlement",
    "UrgencyIndicators",
    "compute_input_fingerprint",
    "deduct_advancements",
    "estimate_monthly_support",
    "normalise_to_monthly",
    "qualifies_for_s29",
    "revalue_gift",
    "traced_engine",
]
