"""Tests for best-effort background side effects."""

import asyncio

import pytest

from relay.background import BestEffortRunner


@pytest.mark.asyncio
async def test_drain_waits_for_spawned_tasks():
    runner = BestEffortRunner()
    done = []

    async def work():
        await asyncio.sleep(0)
        done.append(True)

    runner.spawn(work(), "work")
    assert runner.pending == 1

    await runner.drain()
    assert done == [True]
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_failures_are_contained():
    runner = BestEffortRunner()

    async def fail():
        raise RuntimeError("boom")

    task = runner.spawn(fail(), "fail")
    await runner.drain()

    assert task.done()
    assert isinstance(task.exception(), RuntimeError)
    assert runner.pending == 0
