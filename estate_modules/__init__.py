"""
Estate Modules.

Aggregates with a lifecycle, built over the kernel and the engines.
Each module contains:
- Domain models (the nouns)
- The aggregate or record with its state transitions
- Workflows (state machines)
- Configuration schemas where the module has tunable thresholds

Modules:
- Debt: estate liabilities, S.45 priority, payments, disputes, limitation
- Gifts: gifts inter vivos and their S.35(3) hotchpot treatment

Calculation logic lives in the engines.
"""

from estate_modules import debt, gifts

__all__ = [
    "debt",
    "gifts",
]
