"""
Gift Domain Models (``estate_modules.gifts.models``).

Enumerations for gifts inter vivos: what was given, where the gift stands
in the S.35(3) hotchpot process, and why it may be exempt.
"""

from enum import Enum


class GiftType(str, Enum):
    CUSTOMARY_BRIDE_PRICE = "CUSTOMARY_BRIDE_PRICE"
    EDUCATIONAL_SUPPORT = "EDUCATIONAL_SUPPORT"
    MARRIAGE_GIFT = "MARRIAGE_GIFT"
    BUSINESS_STARTUP = "BUSINESS_STARTUP"
    PROPERTY_TRANSFER = "PROPERTY_TRANSFER"
    CASH_GIFT = "CASH_GIFT"
    VEHICLE_GIFT = "VEHICLE_GIFT"
    LAND_GIFT = "LAND_GIFT"
    LIVESTOCK_GIFT = "LIVESTOCK_GIFT"
    FAMILY_HEIRLOOM = "FAMILY_HEIRLOOM"
    TRADITIONAL_RITE = "TRADITIONAL_RITE"
    OTHER = "OTHER"


class GiftHotchpotStatus(str, Enum):
    NOT_APPLICABLE = "NOT_APPLICABLE"
    PENDING = "PENDING"
    CALCULATED = "CALCULATED"
    INCLUDED = "INCLUDED"
    EXCLUDED = "EXCLUDED"
    EXEMPTED = "EXEMPTED"
    RECLAIMED = "RECLAIMED"

    @property
    def carries_adjustment(self) -> bool:
        """Only a calculated or included gift reduces the recipient's share."""
        return self in (GiftHotchpotStatus.CALCULATED, GiftHotchpotStatus.INCLUDED)


class ExemptionBasis(str, Enum):
    CUSTOMARY_LAW = "CUSTOMARY_LAW"
    COURT_ORDER = "COURT_ORDER"


class RelationshipCategory(str, Enum):
    CHILD = "CHILD"
    SPOUSE = "SPOUSE"
    PARENT = "PARENT"
    SIBLING = "SIBLING"
    EXTENDED_FAMILY = "EXTENDED_FAMILY"
    NON_FAMILY = "NON_FAMILY"
