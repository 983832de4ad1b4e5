"""Domain events raised by the Debt aggregate.

Events are collected on the aggregate and handed to the caller through
``Debt.pull_events()``; publishing them is the caller's concern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class DebtEventType(str, Enum):
    RECORDED = "debt.recorded"
    PAYMENT_RECORDED = "debt.payment_recorded"
    SETTLED = "debt.settled"
    STATUS_CHANGED = "debt.status_changed"
    TIER_ASSIGNED = "debt.tier_assigned"
    DISPUTED = "debt.disputed"
    DISPUTE_RESOLVED = "debt.dispute_resolved"
    WRITTEN_OFF = "debt.written_off"
    STATUTE_BARRED = "debt.statute_barred"
    COURT_APPROVAL_OBTAINED = "debt.court_approval_obtained"
    VERIFIED = "debt.verified"


@dataclass(frozen=True)
class DebtEvent:
    event_type: DebtEventType
    debt_id: UUID
    estate_id: str
    occurred_at: datetime
    version: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "debt_id": str(self.debt_id),
            "estate_id": self.estate_id,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "payload": self.payload,
        }
