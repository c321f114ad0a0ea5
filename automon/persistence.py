"""
Snapshot storage for the AutoMon world.

The world keeps exactly one durable slot: the latest committed ``GameState``.
Every backend implements the same small async interface so the engine never
knows where the slot lives.

Included backends:
1. InMemorySnapshotStore - dict slot, lost on exit (tests, throwaway runs)
2. JsonSnapshotStore - one pretty-printed JSON file, written atomically
3. PostgresSnapshotStore - one JSONB row per named slot (requires asyncpg)

Usage pattern:
    store = JsonSnapshotStore("save/game-state.json")
    await store.initialize()
    state = await load_or_create(store, create_initial_state)
    ...
    await store.save(state)
    await store.close()
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from automon.config import Config
from automon.schemas import GameState

try:  # Optional dependency (only needed for PostgresSnapshotStore)
    import asyncpg
except ImportError:  # pragma: no cover - asyncpg may not be installed for json/memory usage
    asyncpg = None


class PersistenceError(RuntimeError):
    """A snapshot could not be read or written.

    The committed in-memory world is never affected by this error; only the
    durable copy is stale. Check that the save directory is writable (or the
    database reachable) and that the stored snapshot is valid JSON.
    """


class SnapshotStore(ABC):
    """Abstract single-slot store for the committed world state.

    ``load`` returns None when nothing has been saved yet; absence is never an
    error. Backend failures surface as ``PersistenceError``.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open connections / create directories. Called once before use."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections. Called once on shutdown."""

    @abstractmethod
    async def load(self) -> Optional[GameState]:
        """Return the stored world, or None if the slot is empty."""

    @abstractmethod
    async def save(self, state: GameState) -> None:
        """Replace the stored world with ``state``."""

    @abstractmethod
    async def delete(self) -> None:
        """Empty the slot. Deleting an empty slot is a no-op."""


class InMemorySnapshotStore(SnapshotStore):
    """Keeps a serialized copy so later mutation of the live state never leaks in."""

    def __init__(self) -> None:
        self._payload: Optional[dict] = None
        self.save_count = 0

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def load(self) -> Optional[GameState]:
        if self._payload is None:
            return None
        return GameState.model_validate(self._payload)

    async def save(self, state: GameState) -> None:
        self._payload = state.model_dump(mode="json")
        self.save_count += 1

    async def delete(self) -> None:
        self._payload = None


class JsonSnapshotStore(SnapshotStore):
    """Single JSON file slot.

    Writes go to a temporary file in the same directory and are moved over the
    target with ``os.replace``, so a crash mid-write leaves the previous
    snapshot intact. All file I/O runs in a worker thread (``asyncio.to_thread``).
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else Config.SAVE_PATH

    async def initialize(self) -> None:
        await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)

    async def close(self) -> None:
        # Nothing to clean up for JSON persistence
        return None

    async def load(self) -> Optional[GameState]:
        if not self.path.exists():
            return None

        try:
            raw = await asyncio.to_thread(self.path.read_text, "utf-8")
            return GameState.model_validate(json.loads(raw))
        except (OSError, ValueError, ValidationError) as exc:
            raise PersistenceError(f"Could not read snapshot at {self.path}: {exc}") from exc

    async def save(self, state: GameState) -> None:
        payload = json.dumps(state.model_dump(mode="json"), indent=2)
        try:
            await asyncio.to_thread(self._write_atomic, payload)
        except OSError as exc:
            raise PersistenceError(f"Could not write snapshot to {self.path}: {exc}") from exc

    async def delete(self) -> None:
        try:
            await asyncio.to_thread(self.path.unlink, missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Could not delete snapshot at {self.path}: {exc}") from exc

    def _write_atomic(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise


class PostgresSnapshotStore(SnapshotStore):
    """One JSONB row per named slot in ``world_snapshots``.

    The table is created on ``initialize`` if missing. Connection pooling is
    handled by asyncpg.
    """

    CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS world_snapshots (
            slot TEXT PRIMARY KEY,
            tick INTEGER NOT NULL,
            state JSONB NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """

    def __init__(self, database_url: Optional[str] = None, slot: str = "default"):
        if asyncpg is None:  # pragma: no cover - handled during runtime when dependency missing
            raise ImportError(
                "asyncpg is required for PostgresSnapshotStore. "
                "Install with `pip install automon[postgres]`."
            )

        self.database_url = database_url or Config.DATABASE_URL
        self.slot = slot
        self.pool: Optional[asyncpg.Pool] = None

    async def initialize(self) -> None:
        if self.pool is None:
            self.pool = await asyncpg.create_pool(self.database_url)
            async with self.pool.acquire() as conn:
                await conn.execute(self.CREATE_TABLE)

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    @staticmethod
    def _backend_errors() -> tuple:
        # Query errors, dropped or refused connections, and pool acquire timeouts
        return (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

    async def load(self) -> Optional[GameState]:
        assert self.pool is not None, "Persistence not initialized"

        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT state FROM world_snapshots WHERE slot = $1", self.slot
                )
        except self._backend_errors() as exc:
            raise PersistenceError(f"Could not load snapshot '{self.slot}': {exc}") from exc

        if not row:
            return None

        try:
            return GameState.model_validate_json(row["state"])
        except ValidationError as exc:
            raise PersistenceError(f"Stored snapshot '{self.slot}' is invalid: {exc}") from exc

    async def save(self, state: GameState) -> None:
        assert self.pool is not None, "Persistence not initialized"

        query = """
            INSERT INTO world_snapshots (slot, tick, state)
            VALUES ($1, $2, $3::jsonb)
            ON CONFLICT (slot) DO UPDATE SET tick = $2, state = $3::jsonb, updated_at = now()
        """
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(query, self.slot, state.tick, state.model_dump_json())
        except self._backend_errors() as exc:
            raise PersistenceError(f"Could not save snapshot '{self.slot}': {exc}") from exc

    async def delete(self) -> None:
        assert self.pool is not None, "Persistence not initialized"

        try:
            async with self.pool.acquire() as conn:
                await conn.execute("DELETE FROM world_snapshots WHERE slot = $1", self.slot)
        except self._backend_errors() as exc:
            raise PersistenceError(f"Could not delete snapshot '{self.slot}': {exc}") from exc


async def load_or_create(
    store: SnapshotStore, factory: Callable[[], GameState]
) -> GameState:
    """Return the stored world, or build one with ``factory``, save it and return it."""
    state = await store.load()
    if state is not None:
        return state

    state = factory()
    await store.save(state)
    return state
