"""Gift hotchpot workflow.

Status transitions for a gift inter vivos.  EXCLUDED and EXEMPTED leave
the hotchpot until explicitly reopened; RECLAIMED is final.
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.gifts.workflows")


VALUE_CALCULATED = Guard("value_calculated", "Hotchpot value has been calculated")
COURT_ORDER_REFERENCED = Guard(
    "court_order_referenced", "Court-order exemptions carry the order reference",
)

_ACTIVE = ("PENDING", "CALCULATED", "INCLUDED")

GIFT_HOTCHPOT_WORKFLOW = Workflow(
    name="gift_hotchpot",
    description="S.35(3) treatment of a gift inter vivos",
    initial_state="PENDING",
    states=(
        "NOT_APPLICABLE",
        "PENDING",
        "CALCULATED",
        "INCLUDED",
        "EXCLUDED",
        "EXEMPTED",
        "RECLAIMED",
    ),
    transitions=(
        Transition("PENDING", "CALCULATED", action="calculate"),
        Transition("CALCULATED", "CALCULATED", action="calculate"),
        Transition("CALCULATED", "INCLUDED", action="include", guard=VALUE_CALCULATED),
        *(Transition(s, "EXCLUDED", action="exclude") for s in _ACTIVE),
        *(Transition(s, "EXEMPTED", action="exempt", guard=COURT_ORDER_REFERENCED)
          for s in _ACTIVE),
        Transition("EXCLUDED", "PENDING", action="reopen"),
        Transition("EXEMPTED", "PENDING", action="reopen"),
        *(Transition(s, "RECLAIMED", action="reclaim")
          for s in ("NOT_APPLICABLE", *_ACTIVE, "EXCLUDED", "EXEMPTED")),
    ),
    terminal_states=("RECLAIMED",),
)

logger.info(
    "gift_hotchpot_workflow_registered",
    extra={
        "workflow_name": GIFT_HOTCHPOT_WORKFLOW.name,
        "state_count": len(GIFT_HOTCHPOT_WORKFLOW.states),
        "transition_count": len(GIFT_HOTCHPOT_WORKFLOW.transitions),
    },
)
