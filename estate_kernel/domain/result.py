"""
Result -- explicit success/failure values for expected validation outcomes.

Responsibility:
    Every operation that can reject its input for statutory or data
    reasons returns a ``Result`` instead of raising.  Callers aggregate
    errors, inspect warnings, and decide what to do; exceptions are kept
    for invariant violations only (see ``estate_kernel.exceptions``).

Architecture position:
    Kernel > Domain -- pure value objects, zero I/O.

Invariants enforced:
    - A failed result always carries at least one ValidationError.
    - A successful result never carries errors.
    - ``error_message`` joins every error message with ``"; "``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from estate_kernel.exceptions import UnwrapFailureError

T = TypeVar("T")


@dataclass(frozen=True)
class ValidationError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, optional
        field name, and optional details dict.

    Non-goals:
        - Does NOT raise -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "details": self.details,
        }


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an operation that may fail validation.

    Contract:
        ``is_success`` is True exactly when ``errors`` is empty.  A
        successful result may still carry soft ``warnings``.

    Guarantees:
        - Immutable; ``errors`` and ``warnings`` are tuples.
        - ``bool(result) == result.is_success``.
    """

    is_success: bool
    value: T | None = None
    errors: tuple[ValidationError, ...] = ()
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.is_success and self.errors:
            raise ValueError("A successful Result cannot carry errors")
        if not self.is_success and not self.errors:
            raise ValueError("A failed Result requires at least one error")

    @classmethod
    def ok(cls, value: T | None = None, warnings: Iterable[str] = ()) -> Result[T]:
        return cls(is_success=True, value=value, warnings=tuple(warnings))

    @classmethod
    def fail(cls, *errors: ValidationError, warnings: Iterable[str] = ()) -> Result[T]:
        return cls(is_success=False, errors=tuple(errors), warnings=tuple(warnings))

    @classmethod
    def failure(cls, code: str, message: str, field: str | None = None) -> Result[T]:
        """Shorthand for a single-error failure."""
        return cls.fail(ValidationError(code=code, message=message, field=field))

    @classmethod
    def from_errors(
        cls,
        errors: Iterable[ValidationError],
        value: T | None = None,
        warnings: Iterable[str] = (),
    ) -> Result[T]:
        """Fail when ``errors`` is non-empty, otherwise succeed with ``value``."""
        errors = tuple(errors)
        if errors:
            return cls.fail(*errors, warnings=warnings)
        return cls.ok(value, warnings=warnings)

    @property
    def is_failure(self) -> bool:
        return not self.is_success

    @property
    def error_message(self) -> str:
        return "; ".join(e.message for e in self.errors)

    @property
    def error_codes(self) -> tuple[str, ...]:
        return tuple(e.code for e in self.errors)

    def unwrap(self) -> T:
        """Return the value or raise UnwrapFailureError."""
        if not self.is_success:
            raise UnwrapFailureError(self.error_message)
        return self.value  # type: ignore[return-value]

    def with_warnings(self, *warnings: str) -> Result[T]:
        return replace(self, warnings=self.warnings + tuple(warnings))

    def __bool__(self) -> bool:
        return self.is_success
