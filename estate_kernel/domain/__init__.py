"""
Pure domain layer.

Value objects, result types and workflow definitions with NO dependencies
on persistence, transport, or the wall clock (other than SystemClock).

All value objects are immutable and deterministic.
"""

from estate_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from estate_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from estate_kernel.domain.identity import Identified, Identity
from estate_kernel.domain.result import Result, ValidationError
from estate_kernel.domain.values import (
    Currency,
    DateRange,
    Money,
    Percentage,
    add_years,
    calendar_years_between,
)
from estate_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "DateRange",
    "DeterministicClock",
    "Guard",
    "Identified",
    "Identity",
    "Money",
    "Percentage",
    "Result",
    "SystemClock",
    "Transition",
    "ValidationError",
    "Workflow",
    "add_years",
    "calendar_years_between",
]
