"""
StatutoryParameters schema.

The parsed form of a statutory parameter file: one rule object per
engine or module, each owning its own validation in ``__post_init__``.
The loader builds these from YAML; callers hand the pieces to the
calculators they construct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from estate_engines.dependency import DEFAULT_DEPENDENCY_RULES, DependencyRules
from estate_engines.hotchpot import DEFAULT_HOTCHPOT_RULES, HotchpotRules
from estate_engines.section35 import DEFAULT_SECTION35_RULES, Section35Rules
from estate_engines.section40 import DEFAULT_SECTION40_RULES, Section40Rules
from estate_modules.debt.config import DebtConfig


@dataclass(frozen=True)
class StatutoryParameters:
    """Every tunable statutory parameter, as one versioned artifact."""

    version: str
    jurisdiction: str = "KE"
    currency: str = "KES"
    section35: Section35Rules = DEFAULT_SECTION35_RULES
    section40: Section40Rules = DEFAULT_SECTION40_RULES
    hotchpot: HotchpotRules = DEFAULT_HOTCHPOT_RULES
    # Per-beneficiary adjustments below this amount are waived
    minimum_hotchpot_adjustment: Decimal = Decimal("0")
    dependency: DependencyRules = DEFAULT_DEPENDENCY_RULES
    debt: DebtConfig = field(default_factory=DebtConfig.with_defaults)
    checksum: str = ""
