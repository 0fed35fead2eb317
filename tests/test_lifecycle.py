"""Lifecycle API precondition tests."""

import asyncio

import pytest

from stepflow import (
    ExecutionStatus,
    FunctionStepExecutor,
    InvalidLifecycleCall,
    StepDefinition,
    StepStatus,
    WorkflowManager,
    run_workflow,
)


def done(step, context, cancel_signal):
    return f"{step.id}-done"


async def _until_failed(manager, step_id):
    while manager.snapshot().step(step_id).status is not StepStatus.FAILED:
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_calls_in_wrong_state_are_reported_and_change_nothing(
    make_workflow, make_manager
):
    manager = make_manager(make_workflow("a"), FunctionStepExecutor(default=done))

    for call in (manager.pause, manager.resume, manager.cancel):
        with pytest.raises(InvalidLifecycleCall):
            await call()
    assert manager.status is ExecutionStatus.IDLE
    assert manager.snapshot().logs == []

    await manager.start()
    with pytest.raises(InvalidLifecycleCall, match="workflow is running, expected idle"):
        await manager.start()
    with pytest.raises(InvalidLifecycleCall):
        await manager.resume()

    snapshot = await manager.wait(timeout=5)
    log_count = len(snapshot.logs)
    for call in (manager.start, manager.pause, manager.resume, manager.cancel):
        with pytest.raises(InvalidLifecycleCall):
            await call()
    after = manager.snapshot()
    assert after.status is ExecutionStatus.COMPLETED
    assert len(after.logs) == log_count
    assert after.execution.end_time == snapshot.execution.end_time


@pytest.mark.asyncio
async def test_skip_step_preconditions(make_workflow, make_manager):
    gate = asyncio.Event()

    async def blocked(step, context, cancel_signal):
        await gate.wait()
        return "a"

    executor = FunctionStepExecutor({"a": blocked}, default=done)

    strict = make_manager(
        make_workflow("a", StepDefinition(id="b", name="B", optional=True)),
        executor,
    )
    with pytest.raises(InvalidLifecycleCall, match="does not allow skipping"):
        await strict.skip_step("b")

    manager = make_manager(
        make_workflow("a", "b", StepDefinition(id="c", name="C", optional=True), allow_skip=True),
        executor,
    )
    with pytest.raises(InvalidLifecycleCall, match="unknown step nope"):
        await manager.skip_step("nope")
    with pytest.raises(InvalidLifecycleCall, match="not optional"):
        await manager.skip_step("b")

    await manager.start()
    await asyncio.sleep(0)
    with pytest.raises(InvalidLifecycleCall, match="not pending"):
        await manager.skip_step("a")
    gate.set()
    snapshot = await manager.wait(timeout=5)

    with pytest.raises(InvalidLifecycleCall, match="workflow is completed"):
        await manager.skip_step("c")
    assert snapshot.status is ExecutionStatus.COMPLETED


@pytest.mark.asyncio
async def test_retry_step_requires_failed_step(make_workflow, make_manager):
    gate = asyncio.Event()

    async def blocked(step, context, cancel_signal):
        await gate.wait()
        return "a"

    manager = make_manager(make_workflow("a"), FunctionStepExecutor({"a": blocked}))
    with pytest.raises(InvalidLifecycleCall, match="workflow is idle"):
        await manager.retry_step("a")

    await manager.start()
    with pytest.raises(InvalidLifecycleCall, match="not failed"):
        await manager.retry_step("a")
    with pytest.raises(InvalidLifecycleCall, match="unknown step"):
        await manager.retry_step("zzz")

    gate.set()
    await manager.wait(timeout=5)


@pytest.mark.asyncio
async def test_retry_step_requires_allow_retry(make_workflow, make_manager):
    gate = asyncio.Event()

    def broken(step, context, cancel_signal):
        raise RuntimeError("boom")

    async def blocked(step, context, cancel_signal):
        await gate.wait()
        return "b"

    config = make_workflow(
        StepDefinition(id="a", name="A", optional=True),
        "b",
        allow_skip=True,
        allow_retry=False,
    )
    manager = make_manager(config, FunctionStepExecutor({"a": broken, "b": blocked}))
    await manager.start()
    await asyncio.wait_for(_until_failed(manager, "a"), 5)

    with pytest.raises(InvalidLifecycleCall, match="does not allow retries"):
        await manager.retry_step("a")
    assert manager.snapshot().step("a").status is StepStatus.FAILED

    gate.set()
    snapshot = await manager.wait(timeout=5)
    assert snapshot.status is ExecutionStatus.COMPLETED
    assert snapshot.step("a").retry_count == 0


@pytest.mark.asyncio
async def test_retry_step_rejected_after_workflow_failed(make_workflow, make_manager):
    def broken(step, context, cancel_signal):
        raise RuntimeError("boom")

    config = make_workflow(StepDefinition(id="a", name="A", max_retries=0))
    manager = make_manager(config, FunctionStepExecutor({"a": broken}))
    await manager.start()
    snapshot = await manager.wait(timeout=5)
    assert snapshot.status is ExecutionStatus.FAILED

    with pytest.raises(InvalidLifecycleCall, match="workflow is failed"):
        await manager.retry_step("a")


@pytest.mark.asyncio
async def test_cancel_while_paused(make_workflow, make_manager):
    manager = make_manager(make_workflow("a", "b"), FunctionStepExecutor(default=done))
    await manager.start()
    await manager.pause()

    assert await manager.cancel() is True
    snapshot = await manager.wait(timeout=5)
    assert snapshot.status is ExecutionStatus.CANCELLED
    assert snapshot.errors == []
    with pytest.raises(InvalidLifecycleCall):
        await manager.resume()


@pytest.mark.asyncio
async def test_launch_honours_auto_start(make_workflow, settings, sink):
    executor = FunctionStepExecutor(default=done)

    started = await WorkflowManager.launch(
        make_workflow("a", auto_start=True), executor, settings=settings, sink=sink
    )
    assert started.status is not ExecutionStatus.IDLE
    await started.wait(timeout=5)

    idle = await WorkflowManager.launch(
        make_workflow("a", auto_start=True),
        executor,
        auto_start=False,
        settings=settings,
        sink=sink,
    )
    assert idle.status is ExecutionStatus.IDLE


@pytest.mark.asyncio
async def test_run_workflow_returns_final_snapshot(make_workflow, settings, sink):
    snapshot = await run_workflow(
        make_workflow("a", "b"),
        FunctionStepExecutor(default=done),
        settings=settings,
        sink=sink,
        timeout=5,
    )
    assert snapshot.status is ExecutionStatus.COMPLETED
    assert snapshot.results == {"a": "a-done", "b": "b-done"}
