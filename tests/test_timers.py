"""Tests for RepeatingTimer."""
import asyncio

import pytest

from futureself.orchestrator.timers import RepeatingTimer


@pytest.mark.asyncio
async def test_ticks_until_cancelled():
    ticks = []
    timer = RepeatingTimer(0.005, lambda: ticks.append(1), name="t").start()

    await asyncio.sleep(0.05)
    timer.cancel()
    count = len(ticks)
    await asyncio.sleep(0.03)

    assert count >= 3
    assert len(ticks) == count
    assert timer.active is False
    assert timer.pending is False


@pytest.mark.asyncio
async def test_cancel_is_idempotent():
    timer = RepeatingTimer(0.01, lambda: None).start()
    timer.cancel()
    timer.cancel()
    assert timer.pending is False


@pytest.mark.asyncio
async def test_async_ticks_do_not_overlap():
    running = 0
    overlaps = []

    async def tick():
        nonlocal running
        running += 1
        overlaps.append(running)
        await asyncio.sleep(0.02)
        running -= 1

    timer = RepeatingTimer(0.001, tick).start()
    await asyncio.sleep(0.08)
    timer.cancel()
    await asyncio.sleep(0.03)

    assert overlaps
    assert max(overlaps) == 1


@pytest.mark.asyncio
async def test_tick_may_cancel_its_own_timer():
    calls = []

    async def tick():
        calls.append(1)
        timer.cancel()
        await asyncio.sleep(0)
        calls.append(2)

    timer = RepeatingTimer(0.001, tick)
    timer.start()
    await asyncio.sleep(0.03)

    assert calls == [1, 2]
    assert timer.pending is False


@pytest.mark.asyncio
async def test_failing_tick_keeps_timer_alive():
    ticks = []

    def tick():
        ticks.append(1)
        raise RuntimeError("tick failed")

    timer = RepeatingTimer(0.005, tick).start()
    await asyncio.sleep(0.04)
    timer.cancel()
    assert len(ticks) >= 2


@pytest.mark.asyncio
async def test_start_twice_raises():
    timer = RepeatingTimer(0.01, lambda: None).start()
    with pytest.raises(RuntimeError, match="already running"):
        timer.start()
    timer.cancel()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        RepeatingTimer(0, lambda: None)


@pytest.mark.asyncio
async def test_cancel_lets_running_tick_finish():
    release = asyncio.Event()
    outcome = []

    async def tick():
        try:
            await release.wait()
            outcome.append("completed")
        except asyncio.CancelledError:
            outcome.append("aborted")
            raise

    timer = RepeatingTimer(0.001, tick).start()
    await asyncio.sleep(0.01)
    timer.cancel()
    assert timer.active is False
    assert timer.pending is True

    release.set()
    await asyncio.sleep(0.01)

    assert outcome == ["completed"]
    assert timer.pending is False


@pytest.mark.asyncio
async def test_abort_cancels_running_tick():
    outcome = []

    async def tick():
        try:
            await asyncio.sleep(1)
        except asyncio.CancelledError:
            outcome.append("aborted")
            raise

    timer = RepeatingTimer(0.001, tick).start()
    await asyncio.sleep(0.01)
    timer.abort()
    await asyncio.sleep(0.01)

    assert outcome == ["aborted"]
    assert timer.pending is False
