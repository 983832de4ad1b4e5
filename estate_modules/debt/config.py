"""
Debt Module Configuration Schema.

Limitation periods and validation thresholds for estate liabilities.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from estate_kernel.logging_config import get_logger

logger = get_logger("modules.debt.config")


@dataclass
class DebtConfig:
    """Configuration schema for the debt module."""

    # Limitation of Actions Act periods (years from the incurred date)
    unsecured_limitation_years: int = 6
    secured_limitation_years: int = 12

    min_description_length: int = 5
    min_reason_length: int = 10

    # Accrued interest never exceeds this multiple of principal
    max_interest_multiple: Decimal = Decimal("3")

    tax_creditor_name: str = "Kenya Revenue Authority"

    def __post_init__(self):
        if self.unsecured_limitation_years <= 0:
            raise ValueError("unsecured_limitation_years must be positive")
        if self.secured_limitation_years < self.unsecured_limitation_years:
            raise ValueError("secured_limitation_years cannot be shorter than unsecured")
        if self.min_description_length < 1 or self.min_reason_length < 1:
            raise ValueError("minimum lengths must be positive")
        if self.max_interest_multiple <= 0:
            raise ValueError("max_interest_multiple must be positive")

        logger.info(
            "debt_config_initialized",
            extra={
                "unsecured_limitation_years": self.unsecured_limitation_years,
                "secured_limitation_years": self.secured_limitation_years,
                "max_interest_multiple": str(self.max_interest_multiple),
            },
        )

    def limitation_years(self, is_secured: bool) -> int:
        return self.secured_limitation_years if is_secured else self.unsecured_limitation_years

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the Limitation of Actions Act defaults."""
        return cls()
