"""Test configuration and fixtures."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from workflow_engine.engine.models import ActionDef, State, WorkflowDefinition
from workflow_engine.engine.registry import WorkflowRegistry
from workflow_engine.engine.service import WorkflowService

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's environment and `.env` out of settings under test."""

    for name in (
        "WORKFLOW_ENGINE_LOG_LEVEL",
        "WORKFLOW_ENGINE_DEFINITIONS_FILE",
        "WORKFLOW_ENGINE_CORS_ORIGINS",
        "WORKFLOW_ENGINE_TITLE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """`configure_logging` replaces root handlers; put pytest's back afterwards."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """A deterministic clock advancing one minute per call."""

    ticks = itertools.count()
    return lambda: T0 + timedelta(minutes=next(ticks))


@pytest.fixture
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"inst-{next(counter)}"


@pytest.fixture
def three_step() -> WorkflowDefinition:
    """S1 (initial) -A1-> S2 -A2-> S3 (final)."""

    return WorkflowDefinition(
        id="three-step",
        name="Three step",
        states=[
            State(id="S1", name="Start", is_initial=True),
            State(id="S2", name="Middle"),
            State(id="S3", name="Done", is_final=True),
        ],
        actions=[
            ActionDef(id="A1", name="Advance", from_states=["S1"], to_state="S2"),
            ActionDef(id="A2", name="Finish", from_states=["S2"], to_state="S3"),
        ],
    )


@pytest.fixture
def registry() -> WorkflowRegistry:
    return WorkflowRegistry()


@pytest.fixture
def service(
    registry: WorkflowRegistry,
    clock: Callable[[], datetime],
    id_factory: Callable[[], str],
) -> WorkflowService:
    return WorkflowService(registry=registry, id_factory=id_factory, clock=clock)


@pytest.fixture
def t0() -> datetime:
    """The first timestamp produced by the `clock` fixture."""

    return T0
