"""Unit tests for the workflow service, including concurrent transitions."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from workflow_engine.engine.errors import NotFound, RejectionKind, WorkflowRejected
from workflow_engine.engine.models import (
    ActionDef,
    State,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_engine.engine.service import WorkflowService


def test_three_step_scenario(service: WorkflowService, three_step: WorkflowDefinition) -> None:
    service.create_definition(three_step)

    instance = service.create_instance("three-step")
    assert instance.id == "inst-1"
    assert instance.current_state == "S1"

    instance = service.execute_action(instance.id, "A1")
    assert instance.current_state == "S2"
    assert len(instance.history) == 1

    instance = service.execute_action(instance.id, "A2")
    assert instance.current_state == "S3"
    assert len(instance.history) == 2

    with pytest.raises(WorkflowRejected) as excinfo:
        service.execute_action(instance.id, "A1")
    assert excinfo.value.kind is RejectionKind.INSTANCE_AT_FINAL_STATE

    stored = service.get_instance(instance.id)
    assert stored == instance
    assert [(h.from_state, h.to_state) for h in stored.history] == [("S1", "S2"), ("S2", "S3")]


def test_rejected_action_leaves_stored_instance_unchanged(
    service: WorkflowService, three_step: WorkflowDefinition
) -> None:
    service.create_definition(three_step)
    instance = service.create_instance("three-step")

    with pytest.raises(WorkflowRejected) as excinfo:
        service.execute_action(instance.id, "A2")

    assert excinfo.value.kind is RejectionKind.ACTION_NOT_APPLICABLE_FROM_CURRENT_STATE
    assert service.get_instance(instance.id) == instance


def test_history_is_append_only(service: WorkflowService) -> None:
    definition = WorkflowDefinition(
        id="loop",
        name="Loop",
        states=[State(id="a", name="A", is_initial=True), State(id="b", name="B")],
        actions=[
            ActionDef(id="ab", name="a->b", from_states=["a"], to_state="b"),
            ActionDef(id="ba", name="b->a", from_states=["b"], to_state="a"),
        ],
    )
    service.create_definition(definition)
    instance = service.create_instance("loop")

    previous = instance.history
    for action_id in ["ab", "ba", "ab", "ba", "ab"]:
        instance = service.execute_action(instance.id, action_id)
        assert instance.history[: len(previous)] == previous
        assert len(instance.history) == len(previous) + 1
        assert instance.history[-1].to_state == instance.current_state
        previous = instance.history


def test_not_found_conditions(service: WorkflowService) -> None:
    with pytest.raises(NotFound) as excinfo:
        service.get_definition("missing")
    assert excinfo.value.entity == "workflowdefinition"

    with pytest.raises(NotFound):
        service.create_instance("missing")

    with pytest.raises(NotFound) as excinfo:
        service.get_instance("missing")
    assert str(excinfo.value) == "instance not found"

    with pytest.raises(NotFound):
        service.execute_action("missing", "A1")


def test_execute_reports_missing_definition(service: WorkflowService) -> None:
    orphan = WorkflowInstance(id="orphan", workflow_definition_id="gone", current_state="S1")
    service.registry.put_instance(orphan)

    with pytest.raises(NotFound) as excinfo:
        service.execute_action("orphan", "A1")
    assert excinfo.value.entity == "workflowdefinition"
    assert excinfo.value.entity_id == "gone"


def test_create_instance_without_enabled_initial_state(service: WorkflowService) -> None:
    service.create_definition(
        WorkflowDefinition(
            id="off",
            name="Off",
            states=[State(id="S1", name="a", is_initial=True, enabled=False)],
        )
    )
    with pytest.raises(WorkflowRejected) as excinfo:
        service.create_instance("off")

    assert excinfo.value.kind is RejectionKind.NO_ENABLED_INITIAL_STATE
    assert service.list_instances() == []


def test_lists(service: WorkflowService, three_step: WorkflowDefinition) -> None:
    assert service.list_definitions() == []
    assert service.list_instances() == []

    service.create_definition(three_step)
    first = service.create_instance("three-step")
    second = service.create_instance("three-step")

    assert service.list_definitions() == [three_step]
    assert [i.id for i in service.list_instances()] == [first.id, second.id]


@pytest.fixture
def fork() -> WorkflowDefinition:
    """Two actions leave `start`; only `redo` also applies from `middle`."""

    return WorkflowDefinition(
        id="fork",
        name="Fork",
        states=[
            State(id="start", name="Start", is_initial=True),
            State(id="middle", name="Middle"),
            State(id="end", name="End", is_final=True),
        ],
        actions=[
            ActionDef(id="finish", name="Finish", from_states=["start"], to_state="end"),
            ActionDef(id="step", name="Step", from_states=["start"], to_state="middle"),
            ActionDef(id="redo", name="Redo", from_states=["start", "middle"], to_state="middle"),
        ],
    )


def _race(service: WorkflowService, instance_id: str, actions: list[str]) -> list[object]:
    barrier = threading.Barrier(len(actions))

    def run(action_id: str) -> object:
        barrier.wait()
        try:
            return service.execute_action(instance_id, action_id)
        except WorkflowRejected as e:
            return e

    with ThreadPoolExecutor(max_workers=len(actions)) as pool:
        return list(pool.map(run, actions))


def test_concurrent_conflicting_actions_serialize(
    service: WorkflowService, fork: WorkflowDefinition
) -> None:
    service.create_definition(fork)

    for _ in range(20):
        instance = service.create_instance("fork")
        results = _race(service, instance.id, ["finish", "step"])

        successes = [r for r in results if isinstance(r, WorkflowInstance)]
        rejections = [r for r in results if isinstance(r, WorkflowRejected)]
        assert len(successes) == 1
        assert len(rejections) == 1

        stored = service.get_instance(instance.id)
        assert len(stored.history) == 1
        assert stored.history[0].from_state == "start"
        assert stored.current_state == stored.history[0].to_state


def test_concurrent_actions_both_apply_when_still_valid(
    service: WorkflowService, fork: WorkflowDefinition
) -> None:
    service.create_definition(fork)

    for _ in range(20):
        instance = service.create_instance("fork")
        results = _race(service, instance.id, ["redo", "redo"])

        assert all(isinstance(r, WorkflowInstance) for r in results)
        stored = service.get_instance(instance.id)
        assert [(h.from_state, h.to_state) for h in stored.history] == [
            ("start", "middle"),
            ("middle", "middle"),
        ]


def test_many_instances_progress_concurrently(
    service: WorkflowService, three_step: WorkflowDefinition
) -> None:
    service.create_definition(three_step)
    ids = [service.create_instance("three-step").id for _ in range(16)]

    def drive(instance_id: str) -> WorkflowInstance:
        service.execute_action(instance_id, "A1")
        return service.execute_action(instance_id, "A2")

    with ThreadPoolExecutor(max_workers=8) as pool:
        finished = list(pool.map(drive, ids))

    assert all(i.current_state == "S3" for i in finished)
    assert all(len(service.get_instance(i).history) == 2 for i in ids)


def test_each_rejection_kind_surfaces_through_execute_action(service: WorkflowService) -> None:
    service.create_definition(
        WorkflowDefinition(
            id="kinds",
            name="Kinds",
            states=[
                State(id="S1", name="Start", is_initial=True),
                State(id="S2", name="Next"),
                State(id="off", name="Off", enabled=False),
            ],
            actions=[
                ActionDef(id="go", name="Go", from_states=["S2"], to_state="S1"),
                ActionDef(id="halt", name="Halt", enabled=False, from_states=["S1"], to_state="S2"),
                ActionDef(id="dead", name="Dead", from_states=["S1"], to_state="off"),
            ],
        )
    )
    instance = service.create_instance("kinds")

    expected = {
        "missing": RejectionKind.ACTION_NOT_FOUND,
        "halt": RejectionKind.ACTION_DISABLED,
        "go": RejectionKind.ACTION_NOT_APPLICABLE_FROM_CURRENT_STATE,
        "dead": RejectionKind.TARGET_STATE_INVALID_OR_DISABLED,
    }
    for action_id, kind in expected.items():
        with pytest.raises(WorkflowRejected) as excinfo:
            service.execute_action(instance.id, action_id)
        assert excinfo.value.kind is kind

    assert service.get_instance(instance.id) == instance

    # A rejected action releases the instance lock for the next caller.
    lock = service.registry.instance_lock(instance.id)
    assert lock.acquire(blocking=False)
    lock.release()
