"""Structural validation for workflow definitions.

Checks run in a fixed order and the first failure wins, so callers always
see exactly one reason. Action id uniqueness, empty `from_states` and graph
reachability are deliberately not checked.
"""

from __future__ import annotations

from .errors import RejectionKind, WorkflowRejected
from .models import WorkflowDefinition


def validate(definition: WorkflowDefinition) -> None:
    """Raise :class:`WorkflowRejected` if `definition` is not well-formed."""

    seen: set[str] = set()
    for state in definition.states:
        if state.id in seen:
            raise WorkflowRejected(RejectionKind.DUPLICATE_STATE_ID, "duplicate state ids")
        seen.add(state.id)

    initial_count = sum(1 for s in definition.states if s.is_initial)
    if initial_count != 1:
        raise WorkflowRejected(
            RejectionKind.INVALID_INITIAL_STATE_COUNT, "must have exactly one initial state"
        )

    for action in definition.actions:
        if action.to_state not in seen:
            raise WorkflowRejected(
                RejectionKind.UNKNOWN_STATE_REFERENCE,
                f"action {action.id} tostate invalid",
                action_id=action.id,
            )
        if not all(state_id in seen for state_id in action.from_states):
            raise WorkflowRejected(
                RejectionKind.UNKNOWN_STATE_REFERENCE,
                f"action {action.id} fromstates invalid",
                action_id=action.id,
            )


def is_valid(definition: WorkflowDefinition) -> bool:
    try:
        validate(definition)
    except WorkflowRejected:
        return False
    return True
