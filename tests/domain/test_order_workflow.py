"""
Tests for the workflow value objects and the service order workflow.

Covers:
- Workflow construction invariants
- The declared service order transitions
- OperationContext permission checks
"""

from uuid import uuid4

import pytest

from workshop_kernel.domain.context import INVOICES, SERVICE_ORDERS, STOCK, OperationContext
from workshop_kernel.domain.workflow import Transition, Workflow
from workshop_kernel.exceptions import PermissionDeniedError
from workshop_modules.orders.workflows import ORDER_WORKFLOW


class TestWorkflowDefinition:

    def test_initial_state_must_be_a_state(self):
        with pytest.raises(ValueError):
            Workflow("w", "", initial_state="x", states=("a",), transitions=())

    def test_transitions_reference_known_states(self):
        with pytest.raises(ValueError):
            Workflow("w", "", "a", ("a",), (Transition("a", "b", "go"),))

    def test_terminal_states_have_no_exits(self):
        with pytest.raises(ValueError):
            Workflow("w", "", "a", ("a", "b"), (Transition("b", "a", "back"),), terminal_states=("b",))


class TestOrderWorkflow:

    def test_initial_state(self):
        assert ORDER_WORKFLOW.initial_state == "in_progress"

    @pytest.mark.parametrize(
        "from_state,to_state",
        [
            ("in_progress", "awaiting_parts"),
            ("awaiting_parts", "in_progress"),
            ("in_progress", "finalized"),
            ("awaiting_parts", "finalized"),
        ],
    )
    def test_allowed(self, from_state, to_state):
        assert ORDER_WORKFLOW.find_transition(from_state, to_state) is not None

    def test_finalized_is_terminal(self):
        assert ORDER_WORKFLOW.is_terminal("finalized")
        assert ORDER_WORKFLOW.targets_from("finalized") == ()


class TestOperationContext:

    def test_edit_permission(self):
        context = OperationContext(uuid4(), uuid4(), edit_permissions=frozenset({SERVICE_ORDERS}))

        assert context.can_edit(SERVICE_ORDERS)
        assert not context.can_edit(STOCK)

    def test_require_edit_raises(self):
        actor = uuid4()
        context = OperationContext(actor, uuid4())

        with pytest.raises(PermissionDeniedError) as exc_info:
            context.require_edit(INVOICES)

        assert exc_info.value.actor_id == str(actor)
        assert exc_info.value.module == INVOICES

    def test_admin_can_do_everything(self):
        context = OperationContext(uuid4(), uuid4(), is_admin=True)

        context.require_edit(STOCK)
        assert context.can_view_dashboard_card("financial")

    def test_log_fields(self):
        actor, tenant = uuid4(), uuid4()

        assert OperationContext(actor, tenant).log_fields() == {
            "actor_id": str(actor),
            "tenant_id": str(tenant),
        }
