"""
World engine: the single owner of the AutoMon ``GameState``.

Tick pipeline (strictly one tick at a time):
1. Deep-copy the committed state; all work happens on the copy
2. Deterministic physics: calendar, market drift, survival needs
3. Per trainer, in roster order: finish busy windows, otherwise build the
   context, ask the decision policy and dispatch the action
4. Recompute the leaderboard, commit the copy, persist it, notify listeners

Any unexpected exception in steps 2-4 discards the copy, logs a ``system``
event on the committed state and leaves the scheduler running. The decision
policy call is the only await inside a tick; it carries its own timeout.
"""

from __future__ import annotations

import asyncio
import contextlib
import random
from typing import Callable, List, Optional

from automon.actions import resolve_action
from automon.catalog import ABILITIES, ITEMS, SPECIES, WORLD_MAP
from automon.config import Config
from automon.logging_utils import (
    LOG_TAG_DETERMINISTIC,
    LOG_TAG_LLM,
    Color,
    colored,
    log_deterministic,
    log_error,
    log_info,
)
from automon.persistence import (
    InMemorySnapshotStore,
    PersistenceError,
    SnapshotStore,
    load_or_create,
)
from automon.policy import DecisionPolicy, RuleBasedPolicy
from automon.rng import round_half_up
from automon.schemas import GameConfig, GameState, WorldSnapshot
from automon.seed import create_initial_state
from automon.simulation_rules import WorldRules

MIN_TICK_MS = 200

SnapshotListener = Callable[[WorldSnapshot], None]


class EngineNotInitializedError(RuntimeError):
    """Raised when the world is read before ``initialize()`` has loaded it."""

    def __init__(self) -> None:
        super().__init__(
            "WorldEngine has no state yet.\n\n"
            "Remediation tips:\n"
            "  - await engine.initialize() before ticking or reading state\n"
            "  - Check that the snapshot store is reachable"
        )


class WorldEngine:
    """Owns the world, the tick pipeline and the repeating tick task.

    All dependencies are injected. Without arguments the engine runs
    in memory with the rule-based policy.
    """

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        policy: Optional[DecisionPolicy] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        listeners: Optional[List[SnapshotListener]] = None,
        verbose: bool = True,
    ):
        self.store = store or InMemorySnapshotStore()
        self.rng = rng
        self.policy = policy or RuleBasedPolicy(rng)
        self.config = config or Config.game_config()
        self.verbose = verbose
        self._listeners: List[SnapshotListener] = list(listeners or [])
        self._state: Optional[GameState] = None
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Future] = None

    # ------------------------------------------------------------------
    # Lifecycle and reads
    # ------------------------------------------------------------------

    async def initialize(self) -> GameState:
        """Load the stored world or seed a new one."""
        await self.store.initialize()
        self._state = await load_or_create(self.store, self._fresh_state)
        if self.verbose:
            log_info(f"World loaded at tick {self._state.tick}, day {self._state.day}.")
        return self._state

    async def close(self) -> None:
        await self.stop()
        await self.store.close()

    @property
    def state(self) -> GameState:
        if self._state is None:
            raise EngineNotInitializedError()
        return self._state

    @property
    def tick_ms(self) -> int:
        return self.config.tick_ms

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def snapshot(self) -> WorldSnapshot:
        """Read-only copy of the world plus the static catalogs."""
        return WorldSnapshot(
            tick_ms=self.config.tick_ms,
            running=self.running,
            location_graph=WORLD_MAP.describe(),
            species_dex=[
                species.model_dump(include={"id", "name", "element", "rarity", "habitats"})
                for species in SPECIES
            ],
            item_catalog=[item.model_dump() for item in ITEMS],
            ability_catalog=[ability.model_dump() for ability in ABILITIES],
            state=self.state.model_copy(deep=True),
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def tick(self) -> bool:
        """Run one tick. Returns False if a tick was already in flight (skipped)."""
        if self._lock.locked():
            if self.verbose:
                log_info("Tick skipped: previous tick still running.")
            return False
        async with self._lock:
            await self._run_tick()
        return True

    async def _run_tick(self) -> None:
        committed = self.state
        working = committed.model_copy(deep=True)
        rules = WorldRules(working, self.config, self.rng)
        tag = LOG_TAG_LLM if self.policy.uses_llm() else LOG_TAG_DETERMINISTIC
        lines: List[str] = []

        try:
            rules.apply_tick()

            for trainer in working.trainers:
                if rules.complete_busy_action(trainer):
                    rules.add_event("action", f"{trainer.name} is busy: {trainer.busy_action}.", trainer.id)
                    continue

                context = rules.build_context(trainer)
                decision = await self.policy.decide(context)
                kind = resolve_action(rules, trainer, decision)
                target = f" -> {decision.target}" if decision.target else ""
                lines.append(f"  {tag} {trainer.name}: {kind.value}{target} - {decision.reasoning}")

            rules.recompute_leaderboard()
        except Exception as exc:
            log_error(f"Tick {working.tick} failed: {exc}")
            WorldRules(committed, self.config, self.rng).add_event("system", f"Tick failed: {exc}")
            await self._persist()
            self._notify()
            return

        self._state = working
        await self._persist()

        if self.verbose:
            log_deterministic(rules.format_tick_summary(len(lines)))
            for line in lines:
                print(colored(line, Color.CYAN))

        self._notify()

    async def _persist(self) -> None:
        """Save the committed state. A failed save is logged, never raised."""
        try:
            await self.store.save(self.state)
        except Exception as exc:
            # Custom stores may raise raw backend errors
            if not isinstance(exc, PersistenceError):
                exc = PersistenceError(f"{type(exc).__name__}: {exc}")
            log_error(str(exc))
            WorldRules(self.state, self.config, self.rng).add_event(
                "system", f"Snapshot save failed: {exc}"
            )

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_error(f"Snapshot listener failed: {exc}")

    def _fresh_state(self) -> GameState:
        return create_initial_state(self.rng)

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Begin ticking every ``tick_ms``. Starting a running engine is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run_loop(self.config.tick_ms))
        await self._system_event(f"Engine started @ {self.config.tick_ms}ms/tick.")

    async def stop(self) -> None:
        """Stop ticking. Waits for an in-flight tick to finish rather than cutting it."""
        was_running = await self._cancel_task()
        if was_running:
            await self._system_event("Engine stopped.")

    async def set_speed(self, multiplier: float) -> int:
        """Set the cadence to ``base_tick_ms / multiplier`` (floor 200ms). Returns the new interval."""
        if multiplier <= 0:
            raise ValueError("Speed multiplier must be positive")

        was_running = await self._cancel_task()
        tick_ms = max(MIN_TICK_MS, round_half_up(self.config.base_tick_ms / multiplier))
        self.config = self.config.model_copy(update={"tick_ms": tick_ms})
        if was_running:
            self._task = asyncio.create_task(self._run_loop(tick_ms))

        await self._system_event(f"Speed set to {multiplier:g}x ({tick_ms}ms/tick).")
        return tick_ms

    async def reset(self) -> GameState:
        """Discard the stored world and reseed. The scheduler keeps its running state."""
        async with self._lock:
            try:
                await self.store.delete()
            except PersistenceError as exc:
                # The fresh world overwrites the slot on the save below
                log_error(str(exc))
            self._state = self._fresh_state()
            await self._persist()
        if self.verbose:
            log_info("World reset.")
        self._notify()
        return self.state

    async def _run_loop(self, tick_ms: int) -> None:
        while True:
            await asyncio.sleep(tick_ms / 1000)
            # The tick runs as its own future so cancelling the loop never interrupts it
            self._inflight = asyncio.ensure_future(self.tick())
            try:
                await asyncio.shield(self._inflight)
            except Exception as exc:
                log_error(f"Scheduled tick crashed: {exc}")

    async def _cancel_task(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        if self._inflight is not None and not self._inflight.done():
            await asyncio.wait([self._inflight])
        self._inflight = None
        return True

    async def _system_event(self, message: str) -> None:
        async with self._lock:
            WorldRules(self.state, self.config, self.rng).add_event("system", message)
            await self._persist()
        self._notify()
