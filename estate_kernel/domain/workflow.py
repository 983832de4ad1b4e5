"""
Canonical workflow types (``estate_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for status state machines.  The Debt aggregate,
hotchpot adjustments, lifetime gifts and dependant provisions all declare
their legal transitions as a ``Workflow`` so transitions are defined
once and checked in one place.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass

from estate_kernel.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class Guard:
    """A named precondition documented on a transition.

    Contract: frozen, descriptive only.
    Non-goals: does not evaluate the condition -- the owning aggregate does.
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
    """A state machine definition for a status lifecycle.

    Contract: frozen; ``transitions`` reference only states in ``states``.
    Guarantees: ``initial_state`` is a member of ``states``; no transition
    leaves a state listed in ``terminal_states``.
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
                f"Workflow {self.name}: initial state {self.initial_state} not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"Workflow {self.name}: transition {t.action} "
                    f"references unknown state {t.from_state} -> {t.to_state}"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"Workflow {self.name}: terminal state {t.from_state} has outgoing "
                    f"transition {t.action}"
                )

    def find_transition(
        self,
        from_state: str,
        action: str,
        to_state: str | None = None,
    ) -> Transition | None:
        """First transition for ``action`` out of ``from_state``.

        An action may lead to different states (a payment either settles or
        part-pays a debt); pass ``to_state`` to select one of them.
        """
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                if to_state is None or t.to_state == to_state:
                    return t
        return None

    def require_transition(
        self,
        from_state: str,
        action: str,
        to_state: str | None = None,
    ) -> Transition:
        """Return the transition or raise InvalidTransitionError."""
        transition = self.find_transition(from_state, action, to_state)
        if transition is None:
            raise InvalidTransitionError(self.name, from_state, action)
        return transition

    def allowed_actions(self, from_state: str) -> tuple[str, ...]:
        return tuple(dict.fromkeys(t.action for t in self.transitions if t.from_state == from_state))

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states
