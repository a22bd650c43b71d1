"""The instance transition relation.

Both operations are pure: they never touch a registry and never mutate their
inputs. Serializing concurrent transitions on one instance is the caller's job
(see :class:`workflow_engine.engine.service.WorkflowService`).
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from .errors import RejectionKind, WorkflowRejected
from .models import ActionHistoryItem, WorkflowDefinition, WorkflowInstance


def new_instance_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def instantiate(
    definition: WorkflowDefinition,
    *,
    id_factory: Callable[[], str] = new_instance_id,
) -> WorkflowInstance:
    """Create a fresh instance positioned at the definition's enabled initial state."""

    initial = next((s for s in definition.states if s.is_initial and s.enabled), None)
    if initial is None:
        raise WorkflowRejected(RejectionKind.NO_ENABLED_INITIAL_STATE, "no enabled initial state")

    return WorkflowInstance(
        id=id_factory(),
        workflow_definition_id=definition.id,
        current_state=initial.id,
    )


def execute(
    definition: WorkflowDefinition,
    instance: WorkflowInstance,
    action_id: str,
    *,
    clock: Callable[[], datetime] = utc_now,
) -> WorkflowInstance:
    """Fire `action_id` on `instance` and return the advanced instance.

    Preconditions are checked in this order and the first failure is raised:

    1. the current state exists and is enabled
    2. the current state is not final
    3. the action exists
    4. the action is enabled
    5. the current state is one of the action's source states
    6. the action's target state exists and is enabled

    The returned instance carries one extra history entry whose `to_state`
    equals its new `current_state`.
    """

    current = definition.find_state(instance.current_state)
    if current is None or not current.enabled:
        raise WorkflowRejected(
            RejectionKind.INVALID_CURRENT_STATE, "current state is invalid or disabled"
        )

    if current.is_final:
        raise WorkflowRejected(
            RejectionKind.INSTANCE_AT_FINAL_STATE, "instance is at a final state"
        )

    action = definition.find_action(action_id)
    if action is None:
        raise WorkflowRejected(
            RejectionKind.ACTION_NOT_FOUND, "action not found", action_id=action_id
        )

    if not action.enabled:
        raise WorkflowRejected(
            RejectionKind.ACTION_DISABLED, "action is disabled", action_id=action_id
        )

    if instance.current_state not in action.from_states:
        raise WorkflowRejected(
            RejectionKind.ACTION_NOT_APPLICABLE_FROM_CURRENT_STATE,
            "action cannot be executed from current state",
            action_id=action_id,
        )

    target = next(
        (s for s in definition.states if s.id == action.to_state and s.enabled), None
    )
    if target is None:
        raise WorkflowRejected(
            RejectionKind.TARGET_STATE_INVALID_OR_DISABLED,
            "target state is invalid or disabled",
            action_id=action_id,
        )

    entry = ActionHistoryItem(
        action_id=action.id,
        timestamp=clock(),
        from_state=instance.current_state,
        to_state=target.id,
    )
    return instance.model_copy(
        update={"current_state": target.id, "history": (*instance.history, entry)}
    )
