"""Debt lifecycle workflow.

Legal status transitions for an estate liability.  A payment either
part-pays or settles; a dismissed dispute returns the debt to the status
it held before the dispute.
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.debt.workflows")


BALANCE_ZERO = Guard("balance_zero", "Outstanding balance reaches zero")
WRITE_OFF_PERMITTED = Guard(
    "write_off_permitted",
    "Not a funeral expense; tax debts carry a regulatory approval reference",
)
LIMITATION_ELAPSED = Guard(
    "limitation_elapsed", "Limitation period has elapsed since the incurred date",
)

_OPEN = ("OUTSTANDING", "PARTIALLY_PAID")

DEBT_LIFECYCLE_WORKFLOW = Workflow(
    name="debt_lifecycle",
    description="Estate liability lifecycle under S.45 and the Limitation of Actions Act",
    initial_state="OUTSTANDING",
    states=(
        "OUTSTANDING",
        "PARTIALLY_PAID",
        "SETTLED",
        "WRITTEN_OFF",
        "DISPUTED",
        "STATUTE_BARRED",
        "CLAIM_REJECTED",
    ),
    transitions=(
        *(Transition(s, "PARTIALLY_PAID", action="record_payment") for s in _OPEN),
        *(Transition(s, "SETTLED", action="record_payment", guard=BALANCE_ZERO) for s in _OPEN),
        *(Transition(s, "DISPUTED", action="dispute") for s in _OPEN),
        *(Transition(s, "WRITTEN_OFF", action="write_off", guard=WRITE_OFF_PERMITTED)
          for s in (*_OPEN, "DISPUTED", "STATUTE_BARRED")),
        *(Transition(s, "STATUTE_BARRED", action="bar", guard=LIMITATION_ELAPSED)
          for s in (*_OPEN, "DISPUTED")),
        *(Transition(s, "CLAIM_REJECTED", action="reject_claim") for s in (*_OPEN, "STATUTE_BARRED")),
        Transition("DISPUTED", "CLAIM_REJECTED", action="resolve_dispute"),
        *(Transition("DISPUTED", s, action="resolve_dispute") for s in _OPEN),
        Transition("DISPUTED", "SETTLED", action="resolve_dispute", guard=BALANCE_ZERO),
    ),
    terminal_states=("SETTLED", "WRITTEN_OFF", "CLAIM_REJECTED"),
)

logger.info(
    "debt_lifecycle_workflow_registered",
    extra={
        "workflow_name": DEBT_LIFECYCLE_WORKFLOW.name,
        "state_count": len(DEBT_LIFECYCLE_WORKFLOW.states),
        "transition_count": len(DEBT_LIFECYCLE_WORKFLOW.transitions),
    },
)
