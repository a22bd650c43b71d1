from __future__ import annotations

from enum import Enum


class RejectionKind(str, Enum):
    DUPLICATE_DEFINITION_ID = "duplicate_definition_id"
    DUPLICATE_STATE_ID = "duplicate_state_id"
    INVALID_INITIAL_STATE_COUNT = "invalid_initial_state_count"
    UNKNOWN_STATE_REFERENCE = "unknown_state_reference"
    NO_ENABLED_INITIAL_STATE = "no_enabled_initial_state"
    INVALID_CURRENT_STATE = "invalid_current_state"
    INSTANCE_AT_FINAL_STATE = "instance_at_final_state"
    ACTION_NOT_FOUND = "action_not_found"
    ACTION_DISABLED = "action_disabled"
    ACTION_NOT_APPLICABLE_FROM_CURRENT_STATE = "action_not_applicable_from_current_state"
    TARGET_STATE_INVALID_OR_DISABLED = "target_state_invalid_or_disabled"


class WorkflowRejected(Exception):
    """Raised when a definition, instantiation or transition is refused.

    Rejections are expected outcomes: nothing has been mutated when one is
    raised, and the caller may correct its input and try again.
    """

    def __init__(
        self, kind: RejectionKind, message: str, *, action_id: str | None = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.action_id = action_id

    def __str__(self) -> str:
        return self.message


class NotFound(Exception):
    """Raised when a definition or instance id does not resolve."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(entity, entity_id)
        self.entity = entity
        self.entity_id = entity_id

    def __str__(self) -> str:
        return f"{self.entity} not found"
