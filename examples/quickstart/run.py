"""
Example: Quickstart - A Deterministic AutoMon World
===================================================

WHAT THIS SHOWS:
- Seeding a world and running ticks by hand
- Watching the world through the snapshot feed
- Steering it with control commands
- NO LLM (rule-based policy), nothing written to disk

RUN:
    python -m examples.quickstart.run
"""

import asyncio
import random

from automon import (
    ControlCommand,
    GameConfig,
    InMemorySnapshotStore,
    RuleBasedPolicy,
    SnapshotFeed,
    WorldEngine,
    apply_command,
)


async def main() -> None:
    # One seeded rng drives seeding, physics and the fallback ladder,
    # so the same seed replays the same world
    rng = random.Random(2024)

    feed = SnapshotFeed()
    engine = WorldEngine(
        store=InMemorySnapshotStore(),
        policy=RuleBasedPolicy(rng),
        config=GameConfig(tick_ms=1000, base_tick_ms=1000),
        rng=rng,
        listeners=[feed.publish],
    )
    await engine.initialize()

    watcher = feed.subscribe()

    for _ in range(10):
        await engine.tick()

    # The subscription only holds the newest snapshot
    snapshot = watcher.poll()
    state = snapshot.state
    print(f"\nAfter {state.tick} ticks it is day {state.day}, {state.weather} {state.time_of_day}.")
    for trainer in state.trainers:
        lead = trainer.automons[0] if trainer.automons else None
        lead_text = f"{lead.nickname} L{lead.level} ({lead.status})" if lead else "no AutoMon"
        print(
            f"  {trainer.name:<6} @ {trainer.location_id:<15} "
            f"hp={trainer.health:<3} hunger={trainer.hunger:<3} gold={trainer.gold:<4} {lead_text}"
        )

    print("\nLast events:")
    for event in state.events[-5:]:
        print(f"  [{event.type}] {event.message}")

    snapshot = await apply_command(engine, ControlCommand.SPEED, 5)
    print(f"\nSpeed 5x -> {snapshot.tick_ms}ms per tick")

    snapshot = await apply_command(engine, ControlCommand.RESET)
    print(f"Reset -> tick {snapshot.state.tick}, {len(snapshot.state.events)} event(s)")

    await engine.close()


if __name__ == "__main__":
    asyncio.run(main())
