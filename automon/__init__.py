"""
AutoMon - autonomous creature-trainer world simulation.

Trainers survive, farm, trade, catch and battle creatures on a shared tick
clock. Each tick a decision policy (a reasoning service with a deterministic
fallback ladder) picks one action per trainer; everything else is
deterministic Python.

All dependencies are injected: storage backend, decision policy, rng.
"""

__version__ = "0.1.0"

# Main simulation components
from .engine import WorldEngine, EngineNotInitializedError
from .simulation_rules import WorldRules
from .actions import ActionKind, ACTION_HANDLERS, UNIVERSAL_ACTIONS, resolve_action
from .battle import BattleResult, resolve_battle, elo_delta, heal_automon, apply_potion

# Storage
from .persistence import (
    SnapshotStore,
    InMemorySnapshotStore,
    JsonSnapshotStore,
    PostgresSnapshotStore,
    PersistenceError,
    load_or_create,
)

# Decisions
from .policy import (
    DecisionPolicy,
    RuleBasedPolicy,
    LLMDecisionPolicy,
    PolicyError,
    PolicyErrorKind,
    PolicyResult,
    resolve_policy_result,
    fallback_decision,
)

# Observation and control
from .broadcast import SnapshotFeed, Subscription
from .control import (
    ALLOWED_SPEEDS,
    ControlCommand,
    InvalidSpeedError,
    UnknownCommandError,
    apply_command,
)

# Seeding
from .seed import create_initial_state, create_trainer, create_automon

# Schemas
from .schemas import (
    AgentContext,
    AgentDecision,
    AutoMon,
    CropPlot,
    EventLog,
    GameConfig,
    GameState,
    LeaderboardEntry,
    MarketState,
    NearbyAgent,
    Stats,
    Trainer,
    WorldSnapshot,
)

__all__ = [
    # Core
    "WorldEngine",
    "EngineNotInitializedError",
    "WorldRules",
    "ActionKind",
    "ACTION_HANDLERS",
    "UNIVERSAL_ACTIONS",
    "resolve_action",
    "BattleResult",
    "resolve_battle",
    "elo_delta",
    "heal_automon",
    "apply_potion",
    # Storage
    "SnapshotStore",
    "InMemorySnapshotStore",
    "JsonSnapshotStore",
    "PostgresSnapshotStore",
    "PersistenceError",
    "load_or_create",
    # Decisions
    "DecisionPolicy",
    "RuleBasedPolicy",
    "LLMDecisionPolicy",
    "PolicyError",
    "PolicyErrorKind",
    "PolicyResult",
    "resolve_policy_result",
    "fallback_decision",
    # Observation and control
    "SnapshotFeed",
    "Subscription",
    "ALLOWED_SPEEDS",
    "ControlCommand",
    "InvalidSpeedError",
    "UnknownCommandError",
    "apply_command",
    # Seeding
    "create_initial_state",
    "create_trainer",
    "create_automon",
    # Schemas
    "AgentContext",
    "AgentDecision",
    "AutoMon",
    "CropPlot",
    "EventLog",
    "GameConfig",
    "GameState",
    "LeaderboardEntry",
    "MarketState",
    "NearbyAgent",
    "Stats",
    "Trainer",
    "WorldSnapshot",
]
