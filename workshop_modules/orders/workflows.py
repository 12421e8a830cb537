"""
Service Order Workflow.

State machine for the service order lifecycle:

    in_progress <-> awaiting_parts
    in_progress  -> finalized
    awaiting_parts -> finalized

``finalized`` is terminal.  The order service looks transitions up here
before changing an order's status.
"""

from workshop_kernel.domain.workflow import Guard, Transition, Workflow
from workshop_kernel.logging_config import get_logger
from workshop_modules.orders.models import OrderStatus

logger = get_logger("modules.orders.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

ORDER_NOT_FINALIZED = Guard(
    name="order_not_finalized",
    description="Finalized orders accept no further content changes",
)

logger.info(
    "order_workflow_guards_defined",
    extra={"guards": [ORDER_NOT_FINALIZED.name]},
)


# -----------------------------------------------------------------------------
# Service Order Workflow
# -----------------------------------------------------------------------------

_IN_PROGRESS = OrderStatus.IN_PROGRESS.value
_AWAITING_PARTS = OrderStatus.AWAITING_PARTS.value
_FINALIZED = OrderStatus.FINALIZED.value

ORDER_WORKFLOW = Workflow(
    name="service_order",
    description="Service order lifecycle",
    initial_state=_IN_PROGRESS,
    states=(_IN_PROGRESS, _AWAITING_PARTS, _FINALIZED),
    transitions=(
        Transition(_IN_PROGRESS, _AWAITING_PARTS, action="wait_for_parts", guard=ORDER_NOT_FINALIZED),
        Transition(_AWAITING_PARTS, _IN_PROGRESS, action="resume", guard=ORDER_NOT_FINALIZED),
        Transition(_IN_PROGRESS, _FINALIZED, action="finalize", guard=ORDER_NOT_FINALIZED),
        Transition(_AWAITING_PARTS, _FINALIZED, action="finalize", guard=ORDER_NOT_FINALIZED),
    ),
    terminal_states=(_FINALIZED,),
)

logger.info(
    "order_workflow_defined",
    extra={
        "workflow": ORDER_WORKFLOW.name,
        "states": list(ORDER_WORKFLOW.states),
        "transition_count": len(ORDER_WORKFLOW.transitions),
    },
)
