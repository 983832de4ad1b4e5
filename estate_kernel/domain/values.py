"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the foundational value types for every estate computation:
    Currency, Money, Percentage and DateRange, plus the two calendar
    helpers (``add_years``, ``calendar_years_between``) that statutory
    rules are expressed in.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other module.  No outward dependencies except
    estate_kernel.domain.currency (CurrencyRegistry) and the exception
    hierarchy.

Invariants enforced:
    - Money amounts are Decimal (never float) and never negative.
    - Money is always held at the currency's native precision, rounded
      half-up; the Kenyan shilling therefore never carries a fractional
      minor unit.
    - Arithmetic and comparison never mix currencies.
    - Percentages lie in the closed interval [0, 100].

Failure modes:
    - NegativeMoneyError on negative construction or subtraction result.
    - CurrencyMismatchError when operands differ in currency.
    - InvalidMoneyOperationError on negative factors or non-positive divisors.
    - InvalidPercentageError / DateRangeError on out-of-range construction.

Audit relevance:
    Every share, provision and debt balance the engine reports is a Money
    produced here, so rounding is applied in exactly one place.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from estate_kernel.domain.currency import CurrencyRegistry
from estate_kernel.exceptions import (
    CurrencyMismatchError,
    DateRangeError,
    InvalidCurrencyError,
    InvalidMoneyOperationError,
    InvalidPercentageError,
    NegativeMoneyError,
)

_HUNDRED = Decimal("100")
_EQUALITY_EPSILON = Decimal("0.001")


def _to_decimal(value: Decimal | int | str | float, label: str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {label}: {value!r}") from e


@dataclass(frozen=True, slots=True)
class Currency:
    """
    Supported currency code value object.

    Contract:
        Wraps a three-letter code from the closed CurrencyRegistry.
        Normalised to upper case on construction.

    Guarantees:
        - Immutable and hashable.
        - ``decimal_places`` is 0 for KES and 2 for every other currency.
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if isinstance(self.code, str) else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise InvalidCurrencyError(str(self.code))
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def rounding_tolerance(self) -> Decimal:
        """Smallest unit of the currency (1 KES, 0.01 otherwise)."""
        return CurrencyRegistry.get_rounding_tolerance(self.code)

    @property
    def name(self) -> str:
        info = CurrencyRegistry.get_info(self.code)
        return info.name if info else self.code

    def quantize(self, amount: Decimal) -> Decimal:
        """Round half-up to this currency's native precision."""
        exponent = Decimal(1).scaleb(-self.decimal_places)
        rounded = amount.quantize(exponent, rounding=ROUND_HALF_UP)
        # Normalise -0 to 0
        return abs(rounded) if rounded.is_zero() else rounded

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Non-negative monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are NEVER separated.
        The amount is rounded to the currency's precision at construction,
        so every operation result is rounded as well.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots).
        - ``amount >= 0`` always.
        - Arithmetic enforces the same-currency constraint.

    Non-goals:
        - Does NOT perform currency conversion.
        - Does NOT represent liabilities as negative amounts; debts carry
          positive balances and subtraction floors are explicit
          (``subtract_or_zero``).
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

        amount = self.currency.quantize(_to_decimal(self.amount, "amount"))
        if amount < 0:
            raise NegativeMoneyError(str(amount), self.currency.code)
        object.__setattr__(self, "amount", amount)

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency = "KES") -> Money:
        """Factory method; defaults to Kenyan shillings."""
        return cls(amount=_to_decimal(amount, "amount"), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency = "KES") -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def sum(cls, items: Iterable[Money], currency: str | Currency) -> Money:
        """Sum an iterable of Money; an empty iterable yields zero."""
        total = cls.zero(currency)
        for item in items:
            total = total + item
        return total

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        return self.amount > Decimal("0")

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        """Subtract; a negative result is an invariant violation."""
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        result = self.amount - other.amount
        if result < 0:
            raise NegativeMoneyError(str(result), self.currency.code, "subtract")
        return Money(amount=result, currency=self.currency)

    def subtract_or_zero(self, other: Money) -> Money:
        """Subtract, flooring the result at zero."""
        self._check_currency(other)
        return Money(amount=max(self.amount - other.amount, Decimal("0")), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, (int, str)) and not isinstance(factor, bool):
            factor = Decimal(str(factor))
        if not isinstance(factor, Decimal):
            return NotImplemented
        if factor < 0:
            raise InvalidMoneyOperationError("multiply", str(factor), "factor is negative")
        return Money(amount=self.amount * factor, currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        if isinstance(divisor, (int, str)) and not isinstance(divisor, bool):
            divisor = Decimal(str(divisor))
        if not isinstance(divisor, Decimal):
            return NotImplemented
        if divisor <= 0:
            raise InvalidMoneyOperationError("divide", str(divisor), "divisor must be positive")
        return Money(amount=self.amount / divisor, currency=self.currency)

    def percentage(self, p: Percentage | Decimal | int | str) -> Money:
        """Return ``p`` percent of this amount (0 <= p <= 100)."""
        value = p.value if isinstance(p, Percentage) else _to_decimal(p, "percentage")
        if value < 0 or value > _HUNDRED:
            raise InvalidPercentageError(str(value))
        return Money(amount=self.amount * value / _HUNDRED, currency=self.currency)

    def equals(self, other: Money) -> bool:
        """Same currency and amounts within a 0.001 epsilon."""
        if not isinstance(other, Money) or self.currency != other.currency:
            return False
        return abs(self.amount - other.amount) < _EQUALITY_EPSILON

    def within_tolerance(self, other: Money) -> bool:
        """Amounts differ by at most one smallest currency unit."""
        self._check_currency(other)
        return abs(self.amount - other.amount) <= self.currency.rounding_tolerance

    def to_record(self) -> dict[str, str]:
        return {"amount": str(self.amount), "currency": self.currency.code}

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


@dataclass(frozen=True, slots=True, order=True)
class Percentage:
    """
    Percentage value in the closed interval [0, 100].

    Guarantees:
        - ``value`` is a Decimal.
        - ``fraction`` is ``value / 100``.
    """

    value: Decimal

    def __post_init__(self) -> None:
        value = _to_decimal(self.value, "percentage")
        if value < 0 or value > _HUNDRED:
            raise InvalidPercentageError(str(value))
        object.__setattr__(self, "value", value)

    @classmethod
    def of(cls, value: Decimal | int | str) -> Percentage:
        return cls(value=_to_decimal(value, "percentage"))

    @classmethod
    def zero(cls) -> Percentage:
        return cls(value=Decimal("0"))

    @classmethod
    def from_fraction(cls, fraction: Decimal | str) -> Percentage:
        """Build from a fraction in [0, 1], e.g. ``Decimal('1') / 3``."""
        return cls(value=_to_decimal(fraction, "fraction") * _HUNDRED)

    @classmethod
    def from_ratio(cls, part: Money, whole: Money) -> Percentage:
        """``part / whole`` as a percentage, capped at 100, 4 dp."""
        if whole.is_zero:
            return cls.zero()
        raw = (part.amount / whole.amount * _HUNDRED).quantize(
            Decimal("0.0001"), rounding=ROUND_HALF_UP
        )
        return cls(value=min(raw, _HUNDRED))

    @property
    def fraction(self) -> Decimal:
        return self.value / _HUNDRED

    def apply_to(self, money: Money) -> Money:
        return money.percentage(self)

    def complement(self) -> Percentage:
        return Percentage(value=_HUNDRED - self.value)

    def __str__(self) -> str:
        return f"{self.value}%"


def add_years(d: date, years: int) -> date:
    """Same calendar day ``years`` later; 29 February maps to 28 February."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def calendar_years_between(start: date, end: date) -> int:
    """Calendar-year difference (``end.year - start.year``), not fractional."""
    return end.year - start.year


@dataclass(frozen=True, slots=True)
class DateRange:
    """
    Inclusive date interval, optionally open-ended.

    Guarantees:
        - ``end`` is None or ``end >= start``.
    """

    start: date
    end: date | None = None

    def __post_init__(self) -> None:
        if self.end is not None and self.end < self.start:
            raise DateRangeError(self.start.isoformat(), self.end.isoformat())

    @classmethod
    def for_years(cls, start: date, years: int) -> DateRange:
        return cls(start=start, end=add_years(start, years))

    @property
    def is_open_ended(self) -> bool:
        return self.end is None

    @property
    def duration_days(self) -> int | None:
        if self.end is None:
            return None
        return (self.end - self.start).days

    def contains(self, d: date) -> bool:
        if d < self.start:
            return False
        return self.end is None or d <= self.end

    def overlaps(self, other: DateRange) -> bool:
        if self.end is not None and other.start > self.end:
            return False
        if other.end is not None and self.start > other.end:
            return False
        return True

    def to_record(self) -> dict[str, str | None]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
        }
