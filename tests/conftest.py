"""
Pytest fixtures for the estate kernel test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- ``captured_logs`` for asserting on emitted JSON log records
- A deterministic clock pinned after every date used in the scenarios
- Small builders for Money, debts, gifts and household members
"""

import json
import logging
from datetime import date
from io import StringIO

import pytest

from estate_engines.heirs import ChildInfo, SpouseInfo
from estate_kernel.domain.clock import DeterministicClock
from estate_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from estate_modules.debt import Debt, DebtType
from estate_modules.gifts import GiftInterVivos
from tests.factories import TODAY, kes


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture estate_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            Debt.create(...)
            logs = captured_logs()
            assert any(r["message"] == "debt_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("estate_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock pinned to TODAY."""
    return DeterministicClock(TODAY)


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def spouse() -> SpouseInfo:
    return SpouseInfo(spouse_id="spouse-1", name="Achieng Otieno")


@pytest.fixture
def two_children() -> tuple[ChildInfo, ChildInfo]:
    return (
        ChildInfo(child_id="child-1", name="Baraka Otieno", age=30),
        ChildInfo(child_id="child-2", name="Zawadi Otieno", age=27),
    )


@pytest.fixture
def make_debt(deterministic_clock):
    """Factory for valid unsecured debts; keyword overrides go to ``Debt.create``."""

    def _make(**overrides) -> Debt:
        kwargs = dict(
            estate_id="EST-001",
            debt_type=DebtType.PERSONAL_LOAN,
            description="Personal loan from Equity Bank",
            principal=kes(100000),
            creditor_name="Equity Bank",
            incurred_date=date(2020, 1, 15),
            clock=deterministic_clock,
        )
        kwargs.update(overrides)
        result = Debt.create(**kwargs)
        assert result.is_success, result.error_message
        return result.value

    return _make


@pytest.fixture
def make_gift(deterministic_clock):
    """Factory for valid lifetime gifts; keyword overrides go to ``GiftInterVivos.record``."""

    def _make(**overrides) -> GiftInterVivos:
        kwargs = dict(
            recipient_id="child-1",
            recipient_name="Baraka Otieno",
            description="Cash towards purchase of a matatu",
            value=kes(100000),
            gift_date=date(2020, 5, 1),
            clock=deterministic_clock,
        )
        kwargs.update(overrides)
        result = GiftInterVivos.record(**kwargs)
        assert result.is_success, result.error_message
        return result.value

    return _make
