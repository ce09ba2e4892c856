from __future__ import annotations

import asyncio

import pytest

from shinara_sdk.tasks import BackgroundTaskRunner


@pytest.mark.asyncio
async def test_submit_runs_task_and_forgets_it_when_done() -> None:
    runner = BackgroundTaskRunner()
    seen: list[str] = []

    async def _work() -> str:
        seen.append("ran")
        return "done"

    task = runner.submit(_work(), name="work")
    assert runner.pending == 1

    assert await task == "done"
    await asyncio.sleep(0)
    assert runner.pending == 0
    assert seen == ["ran"]


@pytest.mark.asyncio
async def test_failed_task_is_absorbed() -> None:
    runner = BackgroundTaskRunner()

    async def _boom() -> None:
        raise RuntimeError("boom")

    task = runner.submit(_boom(), name="boom")
    await runner.drain()

    assert task.exception() is None
    assert task.result() is None


@pytest.mark.asyncio
async def test_drain_waits_for_tasks_submitted_while_draining() -> None:
    runner = BackgroundTaskRunner()
    finished: list[str] = []

    async def _child() -> None:
        finished.append("child")

    async def _parent() -> None:
        runner.submit(_child(), name="child")
        finished.append("parent")

    runner.submit(_parent(), name="parent")
    await runner.drain()

    assert finished == ["parent", "child"]

