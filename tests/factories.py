"""Shared constants and value builders for the estate test suite."""

from datetime import date
from decimal import Decimal

from estate_kernel.domain.values import Money

# Every scenario happens on or before this date
TODAY = date(2025, 6, 30)


def kes(amount) -> Money:
    """Shorthand for a Kenyan shilling amount."""
    return Money.of(Decimal(str(amount)), "KES")
