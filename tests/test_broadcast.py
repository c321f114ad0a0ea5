"""Tests for the latest-only snapshot feed."""

import asyncio
import random

import pytest

from automon.broadcast import SnapshotFeed
from automon.engine import WorldEngine
from automon.schemas import GameConfig, WorldSnapshot
from automon.seed import create_initial_state


def snapshot_at(tick):
    state = create_initial_state(random.Random(1))
    state.tick = tick
    return WorldSnapshot(tick_ms=1000, state=state)


@pytest.mark.asyncio
async def test_slow_subscriber_only_sees_the_newest_snapshot():
    feed = SnapshotFeed()
    subscription = feed.subscribe()

    for tick in (1, 2, 3):
        feed.publish(snapshot_at(tick))

    assert (await subscription.get()).state.tick == 3
    assert subscription.poll() is None


@pytest.mark.asyncio
async def test_late_subscriber_starts_from_latest():
    feed = SnapshotFeed()
    feed.publish(snapshot_at(4))

    subscription = feed.subscribe()

    assert subscription.poll().state.tick == 4
    assert feed.subscriber_count == 1
    subscription.close()
    assert feed.subscriber_count == 0


@pytest.mark.asyncio
async def test_get_waits_for_publish():
    feed = SnapshotFeed()
    subscription = feed.subscribe()

    waiter = asyncio.create_task(subscription.get())
    await asyncio.sleep(0)
    assert not waiter.done()

    feed.publish(snapshot_at(9))
    snapshot = await asyncio.wait_for(waiter, timeout=1)

    assert snapshot.state.tick == 9


@pytest.mark.asyncio
async def test_feed_follows_engine_ticks():
    feed = SnapshotFeed()
    engine = WorldEngine(
        config=GameConfig(tick_ms=1000, base_tick_ms=1000),
        rng=random.Random(2),
        listeners=[feed.publish],
        verbose=False,
    )
    await engine.initialize()
    subscription = feed.subscribe()

    await engine.tick()
    await engine.tick()

    received = []
    async for snapshot in subscription:
        received.append(snapshot.state.tick)
        subscription.close()

    assert received == [2]
    assert feed.latest.state.tick == 2
