"""Tests for settled fan-out."""

import asyncio

import pytest

from workspace_gate.utils.fanout import gather_settled


async def succeed(value, delay: float = 0):
    await asyncio.sleep(delay)
    return value


async def fail(message: str):
    raise RuntimeError(message)


def as_placeholder(exc: BaseException) -> dict:
    return {"error": str(exc)}


@pytest.mark.asyncio
async def test_all_succeed_in_order():
    """Test results keep input order regardless of completion order."""
    results = await gather_settled(
        [succeed("slow", 0.05), succeed("fast"), succeed("middle", 0.01)], as_placeholder
    )
    assert results == ["slow", "fast", "middle"]


@pytest.mark.asyncio
async def test_failure_becomes_placeholder():
    """Test a failed branch is replaced inline and siblings still complete."""
    results = await gather_settled(
        [succeed("cal-1"), fail("calendar gone"), succeed("cal-3")], as_placeholder
    )
    assert results == ["cal-1", {"error": "calendar gone"}, "cal-3"]


@pytest.mark.asyncio
async def test_all_fail():
    """Test every slot can be a placeholder."""
    results = await gather_settled([fail("a"), fail("b")], as_placeholder)
    assert results == [{"error": "a"}, {"error": "b"}]


@pytest.mark.asyncio
async def test_empty():
    """Test no awaitables gives no results."""
    assert await gather_settled([], as_placeholder) == []


@pytest.mark.asyncio
async def test_cancellation_propagates():
    """Test a cancelled branch cancels the fan-out instead of becoming a placeholder."""

    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await gather_settled([succeed("ok"), cancelled()], as_placeholder)
