"""
Canonical workflow types (``workshop_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for document state machines.  The service order lifecycle
is declared with these types; the order service asks the workflow whether a
status change is a legal transition instead of hard-coding the rules.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* ``terminal_states`` have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owning service does.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a document lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"initial_state {self.initial_state!r} is not a state of {self.name}"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Transition {t.action} references unknown state in {self.name}"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Terminal state {t.from_state!r} has an outgoing transition"
                )

    def find_transition(self, from_state: str, to_state: str) -> Transition | None:
        """Return the transition from ``from_state`` to ``to_state``, if any."""
        for t in self.transitions:
            if t.from_state == from_state and t.to_state == to_state:
                return t
        return None

    def targets_from(self, from_state: str) -> tuple[str, ...]:
        """States reachable in one step from ``from_state``."""
        return tuple(
            t.to_state for t in self.transitions if t.from_state == from_state
        )

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states
