"""Command line entry point: ``python -m automon``.

Without ``--ticks`` the engine runs on its scheduler until interrupted.
With ``--ticks N`` it runs N ticks back-to-back and exits.
"""

from __future__ import annotations

import argparse
import asyncio
import random
from typing import Optional

from automon.config import Config
from automon.control import ALLOWED_SPEEDS, ControlCommand, apply_command
from automon.engine import WorldEngine
from automon.logging_utils import Color, colored, log_error, log_info, log_success
from automon.persistence import (
    InMemorySnapshotStore,
    JsonSnapshotStore,
    PostgresSnapshotStore,
    SnapshotStore,
)
from automon.policy import DecisionPolicy, LLMDecisionPolicy, RuleBasedPolicy


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="AutoMon autonomous world simulation")
    parser.add_argument("--ticks", type=int, help="Run this many ticks back-to-back and exit")
    parser.add_argument(
        "--speed",
        type=int,
        choices=ALLOWED_SPEEDS,
        default=1,
        help="Scheduler speed multiplier",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducibility")
    parser.add_argument("--save-path", help=f"JSON snapshot path (default: {Config.SAVE_PATH})")
    parser.add_argument(
        "--store",
        choices=("json", "memory", "postgres"),
        default="json",
        help="Snapshot backend",
    )
    parser.add_argument("--reset", action="store_true", help="Discard the saved world and reseed")
    parser.add_argument(
        "--rules-only",
        action="store_true",
        help="Use the deterministic policy only (no reasoning-service calls)",
    )
    return parser.parse_args(argv)


def build_store(args: argparse.Namespace) -> SnapshotStore:
    if args.store == "memory":
        return InMemorySnapshotStore()
    if args.store == "postgres":
        return PostgresSnapshotStore(Config.DATABASE_URL)
    return JsonSnapshotStore(args.save_path or Config.SAVE_PATH)


def build_policy(args: argparse.Namespace, rng: Optional[random.Random]) -> DecisionPolicy:
    if args.rules_only:
        return RuleBasedPolicy(rng)
    policy = LLMDecisionPolicy(rng=rng)
    if policy.requires_credentials and not policy.api_key:
        env_name = Config.api_key_env_name(policy.provider)
        log_info(f"{env_name} is not set; every decision will use the fallback ladder.")
    return policy


def print_leaderboard(engine: WorldEngine) -> None:
    state = engine.state
    print(colored(f"\nLeaderboard after tick {state.tick} (day {state.day})", Color.GREEN, bold=True))
    for rank, entry in enumerate(state.leaderboard, start=1):
        trainer = state.get_trainer(entry.trainer_id)
        name = trainer.name if trainer else entry.trainer_id
        gold = trainer.gold if trainer else 0
        print(f"  {rank}. {name:<8} elo={entry.elo:<5} gold={gold}")


async def main(args: argparse.Namespace) -> None:
    Config.validate()
    print(Config.display())

    rng = random.Random(args.seed) if args.seed is not None else None
    engine = WorldEngine(
        store=build_store(args),
        policy=build_policy(args, rng),
        config=Config.game_config(),
        rng=rng,
    )
    await engine.initialize()

    try:
        if args.reset:
            await apply_command(engine, ControlCommand.RESET)

        if args.speed != 1:
            await apply_command(engine, ControlCommand.SPEED, args.speed)

        if args.ticks is not None:
            for _ in range(args.ticks):
                await engine.tick()
        else:
            await apply_command(engine, ControlCommand.RESUME)
            log_success(f"Running at {engine.tick_ms}ms/tick. Press Ctrl+C to stop.")
            while True:
                await asyncio.sleep(3600)
    finally:
        await engine.close()
        print_leaderboard(engine)


def run() -> None:
    args = parse_args()
    try:
        asyncio.run(main(args))
    except KeyboardInterrupt:
        log_info("Interrupted.")
    except ValueError as exc:
        log_error(str(exc))
        raise SystemExit(2) from exc


if __name__ == "__main__":
    run()
