from __future__ import annotations

import asyncio

import pytest

from peopleinspace.live import SnapshotBroadcast


async def _next(subscription, timeout: float = 1.0):  # type: ignore[no-untyped-def]
    return await asyncio.wait_for(anext(subscription), timeout)


@pytest.mark.asyncio
async def test_new_subscriber_gets_initial_value_immediately() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])

    async with broadcast.subscribe() as sub:
        assert await _next(sub) == []


@pytest.mark.asyncio
async def test_late_subscriber_gets_latest_value_not_a_gap() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    broadcast.publish([1])
    broadcast.publish([2])

    async with broadcast.subscribe() as sub:
        assert await _next(sub) == [2]


@pytest.mark.asyncio
async def test_every_subscriber_receives_each_publish() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    first = broadcast.subscribe()
    second = broadcast.subscribe()
    assert await _next(first) == []
    assert await _next(second) == []

    broadcast.publish([1])
    assert await _next(first) == [1]
    assert await _next(second) == [1]

    broadcast.publish([2])
    assert await _next(second) == [2]
    assert await _next(first) == [2]
    first.close()
    second.close()


@pytest.mark.asyncio
async def test_slow_subscriber_coalesces_to_latest() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    async with broadcast.subscribe() as sub:
        assert await _next(sub) == []
        for value in range(5):
            broadcast.publish([value])
        assert await _next(sub) == [4]
        with pytest.raises(TimeoutError):
            await _next(sub, timeout=0.05)


@pytest.mark.asyncio
async def test_waiting_subscriber_is_woken_by_publish() -> None:
    broadcast: SnapshotBroadcast[list[str]] = SnapshotBroadcast([])
    async with broadcast.subscribe() as sub:
        assert await _next(sub) == []
        waiter = asyncio.create_task(_next(sub))
        await asyncio.sleep(0)
        assert not waiter.done()
        broadcast.publish(["Alice"])
        assert await waiter == ["Alice"]


@pytest.mark.asyncio
async def test_close_detaches_and_ends_iteration() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    sub = broadcast.subscribe()
    assert await _next(sub) == []
    assert broadcast.subscriber_count == 1

    sub.close()
    broadcast.publish([1])

    assert broadcast.subscriber_count == 0
    with pytest.raises(StopAsyncIteration):
        await _next(sub)


@pytest.mark.asyncio
async def test_subscription_attaches_lazily() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    sub = broadcast.subscribe()
    assert broadcast.subscriber_count == 0

    broadcast.publish([7])
    assert await _next(sub) == [7]
    assert broadcast.subscriber_count == 1
    sub.close()


@pytest.mark.asyncio
async def test_broadcast_close_ends_all_iterators() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    sub = broadcast.subscribe()
    assert await _next(sub) == []

    received: list[list[int]] = []

    async def consume() -> None:
        async for snapshot in sub:
            received.append(snapshot)

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0)
    broadcast.publish([1])
    broadcast.close()
    await asyncio.wait_for(consumer, 1.0)

    assert received == [[1]]
    with pytest.raises(RuntimeError):
        broadcast.publish([2])


@pytest.mark.asyncio
async def test_snapshots_are_copies() -> None:
    broadcast: SnapshotBroadcast[list[int]] = SnapshotBroadcast([])
    broadcast.publish([1, 2])
    async with broadcast.subscribe() as sub:
        snapshot = await _next(sub)
        snapshot.append(3)
    assert broadcast.latest == [1, 2]
