"""
Gifts Module (``estate_modules.gifts``).

Responsibility
--------------
Gifts inter vivos and their S.35(3) hotchpot treatment: recording,
revaluation to the date of death, inclusion, exclusion, exemption and
reclaim to the estate.

Architecture position
---------------------
**Modules layer** -- an immutable record with explicit transitions.
Valuation and aggregation come from ``estate_engines.hotchpot``;
``GiftInterVivos.to_lifetime_gift()`` is the bridge.
"""

from estate_modules.gifts.gift import GiftInterVivos
from estate_modules.gifts.models import (
    ExemptionBasis,
    GiftHotchpotStatus,
    GiftType,
    RelationshipCategory,
)
from estate_modules.gifts.workflows import GIFT_HOTCHPOT_WORKFLOW

__all__ = [
    "ExemptionBasis",
    "GIFT_HOTCHPOT_WORKFLOW",
    "GiftHotchpotStatus",
    "GiftInterVivos",
    "GiftType",
    "RelationshipCategory",
]
