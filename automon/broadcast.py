"""Push-style observation feed for world snapshots.

Each subscriber owns a single-slot mailbox. Publishing overwrites the slot,
so a slow consumer skips intermediate snapshots but always reads the newest
one. There is no acknowledgment and no backpressure on the engine.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, List, Optional

from automon.schemas import WorldSnapshot


class Subscription:
    """Latest-only view of the feed for one consumer."""

    def __init__(self, feed: "SnapshotFeed"):
        self._feed = feed
        self._latest: Optional[WorldSnapshot] = None
        self._ready = asyncio.Event()
        self.closed = False

    def offer(self, snapshot: WorldSnapshot) -> None:
        self._latest = snapshot
        self._ready.set()

    def poll(self) -> Optional[WorldSnapshot]:
        """Take the pending snapshot without waiting, or None if nothing new arrived."""
        snapshot, self._latest = self._latest, None
        self._ready.clear()
        return snapshot

    async def get(self) -> WorldSnapshot:
        """Wait for the next snapshot newer than the last one taken."""
        while self._latest is None:
            self._ready.clear()
            await self._ready.wait()
        return self.poll()

    def close(self) -> None:
        self.closed = True
        self._feed.unsubscribe(self)

    def __aiter__(self) -> AsyncIterator[WorldSnapshot]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[WorldSnapshot]:
        while not self.closed:
            yield await self.get()


class SnapshotFeed:
    """Fan-out of engine snapshots. Register ``publish`` as an engine listener."""

    def __init__(self) -> None:
        self._subscribers: List[Subscription] = []
        self.latest: Optional[WorldSnapshot] = None

    def publish(self, snapshot: WorldSnapshot) -> None:
        self.latest = snapshot
        for subscription in list(self._subscribers):
            subscription.offer(snapshot)

    def subscribe(self) -> Subscription:
        """New subscription; it starts with the latest snapshot if one exists."""
        subscription = Subscription(self)
        if self.latest is not None:
            subscription.offer(self.latest)
        self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
