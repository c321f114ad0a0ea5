"""Tests for the snapshot stores."""

import json
import random

import pytest

from automon.persistence import (
    InMemorySnapshotStore,
    JsonSnapshotStore,
    PersistenceError,
    PostgresSnapshotStore,
    load_or_create,
)
from automon.seed import create_initial_state


def make_state(seed=1):
    return create_initial_state(random.Random(seed))


@pytest.mark.asyncio
async def test_in_memory_store_is_isolated_from_live_state():
    store = InMemorySnapshotStore()
    await store.initialize()
    state = make_state()

    assert await store.load() is None
    await store.save(state)
    state.tick = 99
    state.trainers[0].gold = 0

    loaded = await store.load()
    assert loaded.tick == 0
    assert loaded.trainers[0].gold == 120
    assert store.save_count == 1

    await store.delete()
    assert await store.load() is None


@pytest.mark.asyncio
async def test_json_store_round_trip(tmp_path):
    path = tmp_path / "save" / "game-state.json"
    store = JsonSnapshotStore(path)
    await store.initialize()
    state = make_state()

    assert await store.load() is None
    await store.save(state)

    assert path.exists()
    assert json.loads(path.read_text("utf-8"))["tick"] == 0
    assert (await store.load()).model_dump() == state.model_dump()
    assert list(path.parent.glob("*.tmp")) == []

    await store.delete()
    assert not path.exists()
    await store.delete()


@pytest.mark.asyncio
async def test_json_store_keeps_previous_snapshot_when_write_fails(tmp_path, monkeypatch):
    path = tmp_path / "game-state.json"
    store = JsonSnapshotStore(path)
    await store.initialize()
    first = make_state()
    await store.save(first)

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("automon.persistence.os.replace", broken_replace)
    second = first.model_copy(update={"tick": 5})

    with pytest.raises(PersistenceError):
        await store.save(second)

    monkeypatch.undo()
    assert (await store.load()).tick == 0
    assert list(tmp_path.glob("*.tmp")) == []


@pytest.mark.asyncio
async def test_json_store_rejects_corrupt_snapshot(tmp_path):
    path = tmp_path / "game-state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonSnapshotStore(path)

    with pytest.raises(PersistenceError):
        await store.load()

    path.write_text(json.dumps({"tick": -1}), encoding="utf-8")
    with pytest.raises(PersistenceError):
        await store.load()


@pytest.mark.asyncio
async def test_load_or_create_seeds_once():
    store = InMemorySnapshotStore()
    created = []

    def factory():
        state = make_state(seed=len(created) + 1)
        created.append(state)
        return state

    first = await load_or_create(store, factory)
    second = await load_or_create(store, factory)

    assert len(created) == 1
    assert store.save_count == 1
    assert first.model_dump() == second.model_dump()
    assert [event.message for event in first.events] == ["World initialized."]


@pytest.mark.asyncio
async def test_json_store_wraps_delete_failures(tmp_path):
    # A directory at the snapshot path cannot be unlinked
    path = tmp_path / "game-state.json"
    path.mkdir()
    store = JsonSnapshotStore(path)

    with pytest.raises(PersistenceError):
        await store.delete()


class RefusingPool:
    def acquire(self):
        raise ConnectionRefusedError("db down")


@pytest.mark.asyncio
async def test_postgres_store_wraps_connection_failures():
    pytest.importorskip("asyncpg")
    store = PostgresSnapshotStore("postgresql://localhost/automon")
    store.pool = RefusingPool()

    with pytest.raises(PersistenceError, match="db down"):
        await store.save(make_state())
    with pytest.raises(PersistenceError):
        await store.load()
    with pytest.raises(PersistenceError):
        await store.delete()
