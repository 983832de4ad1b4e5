"""Currency -- supported currency registry and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single supported currency."""

    code: str
    decimal_places: int
    name: str

    @property
    def rounding_tolerance(self) -> Decimal:
        """Smallest representable unit; the tolerance for distribution checks."""
        if self.decimal_places == 0:
            return Decimal("1")
        return Decimal("0." + "0" * (self.decimal_places - 1) + "1")

    @property
    def quantize_exponent(self) -> Decimal:
        """Exponent for Decimal.quantize() at this currency's precision."""
        return Decimal(1).scaleb(-self.decimal_places)


class CurrencyRegistry:
    """Closed registry of currencies the engine accepts.

    The Kenyan shilling is held in whole units; every other supported
    currency carries two minor-unit digits.
    """

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "KES": CurrencyInfo("KES", 0, "Kenyan Shilling"),
        "USD": CurrencyInfo("USD", 2, "US Dollar"),
        "EUR": CurrencyInfo("EUR", 2, "Euro"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling"),
        "TZS": CurrencyInfo("TZS", 2, "Tanzanian Shilling"),
        "UGX": CurrencyInfo("UGX", 2, "Ugandan Shilling"),
        "ZAR": CurrencyInfo("ZAR", 2, "South African Rand"),
    }

    DEFAULT_CURRENCY: ClassVar[str] = "KES"

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is supported."""
        if not code or not isinstance(code, str):
            return False
        return code.upper().strip() in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        """Get currency information by code."""
        if not code or not isinstance(code, str):
            return None
        return cls._CURRENCIES.get(code.upper().strip())

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        info = cls.get_info(code)
        if info is None:
            raise KeyError(f"Unsupported currency: {code!r}")
        return info.decimal_places

    @classmethod
    def get_rounding_tolerance(cls, code: str) -> Decimal:
        info = cls.get_info(code)
        if info is None:
            raise KeyError(f"Unsupported currency: {code!r}")
        return info.rounding_tolerance

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        """Get all supported currency codes."""
        return frozenset(cls._CURRENCIES.keys())
