"""Workflow definition model, validation and the instance transition engine."""

from .errors import NotFound, RejectionKind, WorkflowRejected
from .models import ActionDef, ActionHistoryItem, State, WorkflowDefinition, WorkflowInstance
from .registry import WorkflowRegistry
from .service import WorkflowService
from .state_machine import execute, instantiate
from .validator import is_valid, validate

__all__ = [
    "ActionDef",
    "ActionHistoryItem",
    "NotFound",
    "RejectionKind",
    "State",
    "WorkflowDefinition",
    "WorkflowInstance",
    "WorkflowRegistry",
    "WorkflowRejected",
    "WorkflowService",
    "execute",
    "instantiate",
    "is_valid",
    "validate",
]
