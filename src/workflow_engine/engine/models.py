"""Typed workflow definition and instance models.

Python attributes are snake_case; the JSON form uses camelCase aliases
(`isInitial`, `fromStates`, `currentState`, ...). Both are accepted on input.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WorkflowModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class State(_WorkflowModel):
    """A node in a workflow's state graph."""

    id: str
    name: str
    is_initial: bool = False
    is_final: bool = False
    enabled: bool = True
    description: str | None = None


class ActionDef(_WorkflowModel):
    """A directed transition rule with one or more source states."""

    id: str
    name: str
    enabled: bool = True
    from_states: list[str] = Field(default_factory=list)
    to_state: str
    description: str | None = None


class WorkflowDefinition(_WorkflowModel):
    """A named template of states and actions.

    Read-only once admitted to a registry.
    """

    id: str
    name: str
    states: list[State] = Field(default_factory=list)
    actions: list[ActionDef] = Field(default_factory=list)

    def find_state(self, state_id: str) -> State | None:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    def find_action(self, action_id: str) -> ActionDef | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None


class ActionHistoryItem(_WorkflowModel):
    """One committed transition."""

    action_id: str
    timestamp: datetime
    from_state: str
    to_state: str


class WorkflowInstance(_WorkflowModel):
    """A live execution of a definition.

    Instances are values: a transition yields a new instance whose history is
    the previous history plus exactly one entry.
    """

    id: str
    workflow_definition_id: str
    current_state: str
    history: tuple[ActionHistoryItem, ...] = ()
