"""CLI entrypoint for working with workflow definition files offline."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_engine import __version__
from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.errors import NotFound, WorkflowRejected
from workflow_engine.engine.loader import load_definitions
from workflow_engine.engine.logging import configure_logging
from workflow_engine.engine.service import WorkflowService
from workflow_engine.engine.validator import validate

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-engine",
        description="Validate and run finite-state workflow definitions",
    )
    parser.add_argument("--version", action="version", version=f"workflow-engine {__version__}")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override WORKFLOW_ENGINE_LOG_LEVEL (e.g. DEBUG, WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_cmd = subparsers.add_parser(
        "validate", help="Validate every workflow definition in a JSON file"
    )
    validate_cmd.add_argument("file", type=Path, help="JSON file with one or more definitions")

    run_cmd = subparsers.add_parser(
        "run",
        help="Instantiate a workflow and execute actions against it in order",
    )
    run_cmd.add_argument("file", type=Path, help="JSON file with one or more definitions")
    run_cmd.add_argument(
        "--workflow",
        "--workflow-id",
        dest="workflow_id",
        required=True,
        help="Id of the definition to instantiate",
    )
    run_cmd.add_argument(
        "--action",
        dest="actions",
        action="append",
        default=[],
        help="Action id to execute; repeat to execute several in order",
    )

    return parser


def _cmd_validate(path: Path) -> int:
    definitions = load_definitions(path)
    failures = 0
    for definition in definitions:
        try:
            validate(definition)
        except WorkflowRejected as e:
            failures += 1
            print(f"{definition.id}: {e.kind.name}: {e.message}")
            continue
        print(f"{definition.id}: ok")
    return 1 if failures else 0


def _cmd_run(path: Path, *, workflow_id: str, actions: list[str]) -> int:
    service = WorkflowService()
    for definition in load_definitions(path):
        service.create_definition(definition)

    try:
        instance = service.create_instance(workflow_id)
    except NotFound as e:
        print(f"{e}: {workflow_id}", file=sys.stderr)
        return 2

    for action_id in actions:
        instance = service.execute_action(instance.id, action_id)

    print(json.dumps(instance.model_dump(mode="json", by_alias=True), indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = EngineSettings()
    configure_logging(args.log_level or settings.log_level, stream=sys.stderr)

    try:
        if args.command == "validate":
            return _cmd_validate(args.file)
        if args.command == "run":
            return _cmd_run(args.file, workflow_id=args.workflow_id, actions=args.actions)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("Could not load definitions", extra={"path": str(args.file)})
        print(f"Could not load {args.file}: {e}", file=sys.stderr)
        return 2
    except WorkflowRejected as e:
        print(f"{e.kind.name}: {e.message}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
