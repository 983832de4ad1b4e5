"""
Identity -- identity and optimistic versioning by composition.

Aggregates (Debt) hold an ``Identity`` instead of inheriting from an
entity base class.  Value objects need nothing from here: frozen
dataclasses already compare by value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import UUID, uuid4

from estate_kernel.exceptions import OptimisticLockError


@dataclass(frozen=True, slots=True)
class Identity:
    """Aggregate id plus a monotonically increasing version counter."""

    id: UUID
    version: int = 0

    @classmethod
    def new(cls, id: UUID | None = None) -> Identity:
        return cls(id=id or uuid4(), version=0)

    def bump(self) -> Identity:
        return Identity(id=self.id, version=self.version + 1)

    def expect_version(self, expected: int, entity_type: str) -> None:
        """Raise OptimisticLockError when the caller holds a stale version."""
        if self.version != expected:
            raise OptimisticLockError(entity_type, str(self.id), expected, self.version)


@runtime_checkable
class Identified(Protocol):
    """Anything carrying an ``Identity``; equality is by ``identity.id``."""

    @property
    def identity(self) -> Identity: ...
