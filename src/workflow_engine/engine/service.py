"""Workflow operations over a registry.

This is the layer the HTTP app and the CLI call. It resolves ids to entities,
delegates decisions to the validator and state machine, and commits results to
the registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from .errors import NotFound, WorkflowRejected
from .models import WorkflowDefinition, WorkflowInstance
from .registry import WorkflowRegistry
from .state_machine import execute, instantiate, new_instance_id, utc_now

logger = logging.getLogger(__name__)

DEFINITION = "workflowdefinition"
INSTANCE = "instance"


@dataclass
class WorkflowService:
    registry: WorkflowRegistry = field(default_factory=WorkflowRegistry)
    id_factory: Callable[[], str] = new_instance_id
    clock: Callable[[], datetime] = utc_now

    def create_definition(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        try:
            stored = self.registry.put_definition(definition)
        except WorkflowRejected as e:
            logger.info(
                "Workflow definition rejected",
                extra={"definition_id": definition.id, "kind": e.kind.value, "reason": e.message},
            )
            raise
        logger.info(
            "Workflow definition created",
            extra={
                "definition_id": stored.id,
                "states": len(stored.states),
                "actions": len(stored.actions),
            },
        )
        return stored

    def get_definition(self, definition_id: str) -> WorkflowDefinition:
        definition = self.registry.get_definition(definition_id)
        if definition is None:
            raise NotFound(DEFINITION, definition_id)
        return definition

    def list_definitions(self) -> list[WorkflowDefinition]:
        return self.registry.list_definitions()

    def create_instance(self, definition_id: str) -> WorkflowInstance:
        definition = self.get_definition(definition_id)
        instance = instantiate(definition, id_factory=self.id_factory)
        self.registry.put_instance(instance)
        logger.info(
            "Workflow instance created",
            extra={
                "instance_id": instance.id,
                "definition_id": definition.id,
                "state": instance.current_state,
            },
        )
        return instance

    def get_instance(self, instance_id: str) -> WorkflowInstance:
        instance = self.registry.get_instance(instance_id)
        if instance is None:
            raise NotFound(INSTANCE, instance_id)
        return instance

    def list_instances(self) -> list[WorkflowInstance]:
        return self.registry.list_instances()

    def execute_action(self, instance_id: str, action_id: str) -> WorkflowInstance:
        """Fire an action on a stored instance and commit the result.

        The instance is re-read under its lock so that a concurrent transition
        that committed first is the one this call is evaluated against.
        """

        instance = self.get_instance(instance_id)
        definition = self.get_definition(instance.workflow_definition_id)

        with self.registry.instance_lock(instance_id):
            current = self.get_instance(instance_id)
            try:
                updated = execute(definition, current, action_id, clock=self.clock)
            except WorkflowRejected as e:
                logger.info(
                    "Action rejected",
                    extra={
                        "instance_id": instance_id,
                        "action_id": action_id,
                        "state": current.current_state,
                        "kind": e.kind.value,
                    },
                )
                raise
            self.registry.put_instance(updated)

        entry = updated.history[-1]
        logger.info(
            "Action executed",
            extra={
                "instance_id": instance_id,
                "action_id": action_id,
                "from_state": entry.from_state,
                "to_state": entry.to_state,
            },
        )
        return updated
