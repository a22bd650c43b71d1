"""In-memory registry of workflow definitions and instances.

State lives for the lifetime of the process. Each mapping has its own lock,
held only for the dictionary operation itself. Instances additionally get a
lock each, which callers take around a read-execute-swap sequence so that two
transitions on the same instance serialize while different instances proceed
independently.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from .errors import RejectionKind, WorkflowRejected
from .models import WorkflowDefinition, WorkflowInstance
from .validator import validate


@dataclass
class WorkflowRegistry:
    def __post_init__(self) -> None:
        self._definitions: dict[str, WorkflowDefinition] = {}
        self._instances: dict[str, WorkflowInstance] = {}
        self._instance_locks: dict[str, threading.Lock] = {}
        self._definitions_lock = threading.Lock()
        self._instances_lock = threading.Lock()

    def put_definition(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        """Admit a definition if its id is free and it validates."""

        with self._definitions_lock:
            if definition.id in self._definitions:
                raise WorkflowRejected(
                    RejectionKind.DUPLICATE_DEFINITION_ID,
                    "workflowdefinition with same id exists",
                )
            validate(definition)
            self._definitions[definition.id] = definition
            return definition

    def get_definition(self, definition_id: str) -> WorkflowDefinition | None:
        with self._definitions_lock:
            return self._definitions.get(definition_id)

    def list_definitions(self) -> list[WorkflowDefinition]:
        with self._definitions_lock:
            return list(self._definitions.values())

    def put_instance(self, instance: WorkflowInstance) -> WorkflowInstance:
        with self._instances_lock:
            self._instances[instance.id] = instance
            self._instance_locks.setdefault(instance.id, threading.Lock())
            return instance

    def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        with self._instances_lock:
            return self._instances.get(instance_id)

    def list_instances(self) -> list[WorkflowInstance]:
        with self._instances_lock:
            return list(self._instances.values())

    def instance_lock(self, instance_id: str) -> threading.Lock:
        """The lock serializing transitions on `instance_id`; use it in a `with` block."""

        with self._instances_lock:
            return self._instance_locks.setdefault(instance_id, threading.Lock())
