"""Read workflow definitions from JSON files."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import TypeAdapter

from .models import WorkflowDefinition

_DEFINITIONS = TypeAdapter(list[WorkflowDefinition])


def parse_definitions(raw: object) -> list[WorkflowDefinition]:
    """Accept a single definition object or a list of them."""

    if isinstance(raw, dict):
        raw = [raw]
    return _DEFINITIONS.validate_python(raw)


def load_definitions(path: Path) -> list[WorkflowDefinition]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return parse_definitions(raw)
