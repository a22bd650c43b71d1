#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the engine components directly:

* load settings from `.env`
* admit a document-approval workflow definition
* drive an instance through it and print its history
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.errors import WorkflowRejected
from workflow_engine.engine.logging import configure_logging
from workflow_engine.engine.models import ActionDef, State, WorkflowDefinition
from workflow_engine.engine.service import WorkflowService

APPROVAL = WorkflowDefinition(
    id="document-approval",
    name="Document approval",
    states=[
        State(id="draft", name="Draft", is_initial=True),
        State(id="review", name="In review"),
        State(id="approved", name="Approved", is_final=True),
        State(id="rejected", name="Rejected", is_final=True),
    ],
    actions=[
        ActionDef(id="submit", name="Submit", from_states=["draft"], to_state="review"),
        ActionDef(id="rework", name="Send back", from_states=["review"], to_state="draft"),
        ActionDef(id="approve", name="Approve", from_states=["review"], to_state="approved"),
        ActionDef(
            id="reject", name="Reject", from_states=["draft", "review"], to_state="rejected"
        ),
    ],
)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Drive a document through approval.")
    parser.add_argument(
        "actions",
        nargs="*",
        default=["submit", "rework", "submit", "approve"],
        help="Action ids to execute in order (default: submit rework submit approve)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = EngineSettings()
    configure_logging(settings.log_level)

    service = WorkflowService()
    service.create_definition(APPROVAL)
    instance = service.create_instance(APPROVAL.id)

    for action_id in args.actions:
        try:
            instance = service.execute_action(instance.id, action_id)
        except WorkflowRejected as e:
            print(f"{action_id}: rejected ({e.kind.name}: {e.message})")
            break

    print(json.dumps(instance.model_dump(mode="json", by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
