"""
Typed Exception Hierarchy for the Estate Kernel.

===============================================================================
WHEN THESE ARE RAISED
===============================================================================

The engine separates two classes of failure:

  1. Validation failures -- malformed or statutorily invalid input (short
     descriptions, future dates, a tax debt without a KRA PIN).  These are
     expected and are RETURNED as ``Result`` values, never raised.

  2. Invariant violations -- an attempt to drive an aggregate or value
     into a corrupt state (paying a statute-barred debt, writing off a
     settled debt, negative money).  These are RAISED as the typed
     exceptions below and must not be silently ignored.

Every exception carries a class-level ``code`` (machine-readable) and
stores its context as attributes rather than only in the message.

Example:
    try:
        debt.record_payment(amount, details)
    except StatuteBarredDebtError as e:
        api_response(code=e.code, debt_id=e.debt_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    EstateKernelError (base)
    |
    +-- MoneyError
    |   +-- NegativeMoneyError
    |   +-- InvalidMoneyOperationError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- PercentageError
    |   +-- InvalidPercentageError
    |
    +-- DateRangeError
    |
    +-- DebtError
    |   +-- DebtClosedError
    |   +-- StatuteBarredDebtError
    |   +-- PriorityTierLockedError
    |
    +-- GiftError
    |   +-- GiftStateError
    |
    +-- HotchpotError
    |   +-- HotchpotStateError
    |
    +-- DependencyError
    |   +-- ProvisionStateError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |
    +-- ResultError
    |   +-- UnwrapFailureError
    |
    +-- ConcurrencyError
        +-- OptimisticLockError

===============================================================================
"""


class EstateKernelError(Exception):
    """
    Base exception for all estate kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "ESTATE_KERNEL_ERROR"


# Money-related exceptions


class MoneyError(EstateKernelError):
    """Base exception for monetary arithmetic errors."""

    code: str = "MONEY_ERROR"


class NegativeMoneyError(MoneyError):
    """An operation would produce a negative monetary amount."""

    code: str = "NEGATIVE_MONEY"

    def __init__(self, amount: str, currency: str, operation: str = "construct"):
        self.amount = amount
        self.currency = currency
        self.operation = operation
        super().__init__(
            f"Money cannot be negative: {operation} produced {amount} {currency}"
        )


class InvalidMoneyOperationError(MoneyError):
    """Multiplication or division with a disallowed operand."""

    code: str = "INVALID_MONEY_OPERATION"

    def __init__(self, operation: str, operand: str, reason: str):
        self.operation = operation
        self.operand = operand
        self.reason = reason
        super().__init__(f"Cannot {operation} by {operand}: {reason}")


# Currency-related exceptions


class CurrencyError(EstateKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not in the supported registry."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Unsupported currency code: '{currency}'")


class CurrencyMismatchError(CurrencyError):
    """Attempted operation on mismatched currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, currency1: str, currency2: str):
        self.currency1 = currency1
        self.currency2 = currency2
        super().__init__(f"Currency mismatch: {currency1} vs {currency2}")


# Percentage and date exceptions


class PercentageError(EstateKernelError):
    """Base exception for percentage errors."""

    code: str = "PERCENTAGE_ERROR"


class InvalidPercentageError(PercentageError):
    """Percentage outside the closed interval [0, 100]."""

    code: str = "INVALID_PERCENTAGE"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Percentage must be between 0 and 100, got {value}")


class DateRangeError(EstateKernelError):
    """Date range whose end precedes its start."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"Date range end {end} precedes start {start}")


# Debt-related exceptions


class DebtError(EstateKernelError):
    """Base exception for debt aggregate errors."""

    code: str = "DEBT_ERROR"


class DebtClosedError(DebtError):
    """Operation attempted on a debt in a closed state."""

    code: str = "DEBT_CLOSED"

    def __init__(self, debt_id: str, status: str, operation: str):
        self.debt_id = debt_id
        self.status = status
        self.operation = operation
        super().__init__(f"Cannot {operation} debt {debt_id}: status is {status}")


class StatuteBarredDebtError(DebtError):
    """Payment attempted on a debt whose limitation period has elapsed."""

    code: str = "DEBT_STATUTE_BARRED"

    def __init__(self, debt_id: str, barred_on: str | None = None):
        self.debt_id = debt_id
        self.barred_on = barred_on
        super().__init__(
            f"Debt {debt_id} is statute-barred"
            + (f" since {barred_on}" if barred_on else "")
            + " and can no longer be paid from the estate"
        )


class PriorityTierLockedError(DebtError):
    """Funeral/testamentary tier cannot be reassigned."""

    code: str = "PRIORITY_TIER_LOCKED"

    def __init__(self, debt_id: str, current_tier: str, requested_tier: str):
        self.debt_id = debt_id
        self.current_tier = current_tier
        self.requested_tier = requested_tier
        super().__init__(
            f"Debt {debt_id} holds locked tier {current_tier}; "
            f"cannot reassign to {requested_tier}"
        )


# Gift and hotchpot exceptions


class GiftError(EstateKernelError):
    """Base exception for lifetime gift errors."""

    code: str = "GIFT_ERROR"


class GiftStateError(GiftError):
    """Gift transition not allowed from its current status."""

    code: str = "GIFT_INVALID_STATE"

    def __init__(self, gift_id: str, status: str, operation: str):
        self.gift_id = gift_id
        self.status = status
        self.operation = operation
        super().__init__(f"Cannot {operation} gift {gift_id} in status {status}")


class HotchpotError(EstateKernelError):
    """Base exception for hotchpot adjustment errors."""

    code: str = "HOTCHPOT_ERROR"


class HotchpotStateError(HotchpotError):
    """Hotchpot adjustment transition not allowed from its current status."""

    code: str = "HOTCHPOT_INVALID_STATE"

    def __init__(self, beneficiary_id: str, status: str, operation: str):
        self.beneficiary_id = beneficiary_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} hotchpot adjustment for {beneficiary_id} "
            f"in status {status}"
        )


# Dependency exceptions


class DependencyError(EstateKernelError):
    """Base exception for dependant provision errors."""

    code: str = "DEPENDENCY_ERROR"


class ProvisionStateError(DependencyError):
    """Provision transition not allowed from its current status."""

    code: str = "PROVISION_INVALID_STATE"

    def __init__(self, dependant_id: str, status: str, operation: str):
        self.dependant_id = dependant_id
        self.status = status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} provision for dependant {dependant_id} "
            f"in status {status}"
        )


# Workflow exceptions


class WorkflowError(EstateKernelError):
    """Base exception for workflow definition errors."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """No transition for the action from the current state."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, from_state: str, action: str):
        self.workflow = workflow
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Workflow {workflow} has no '{action}' transition from {from_state}"
        )


# Result exceptions


class ResultError(EstateKernelError):
    """Base exception for result misuse."""

    code: str = "RESULT_ERROR"


class UnwrapFailureError(ResultError):
    """``unwrap()`` called on a failed result."""

    code: str = "UNWRAP_FAILURE"

    def __init__(self, message: str):
        self.failure_message = message
        super().__init__(f"Cannot unwrap failed result: {message}")


# Concurrency-related exceptions


class ConcurrencyError(EstateKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic version check failed."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str, expected: int, actual: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            f"expected version {expected}, found {actual}"
        )
