"""
Pydantic schemas for the AutoMon world simulation.

All mutable world data is defined here. The root ``GameState`` is owned by a
single ``WorldEngine`` and mutated only inside a tick; everything else reads
it through ``WorldEngine.state`` or an observation snapshot.

Design notes:
- Gauges (health/energy/hunger/loyalty) are validated to [0, 100] on load,
  and every rule clamps after mutating them
- ``AutoMon.status`` is computed from the creature's numbers, never stored
  independently
- Snapshots round-trip through ``model_dump(mode="json")`` / ``model_validate``
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from automon.catalog import LocationDef


Weather = Literal["clear", "rain", "storm", "fog", "heat"]
TimeOfDay = Literal["dawn", "morning", "afternoon", "evening", "night"]
AutoMonStatus = Literal["healthy", "injured", "exhausted", "fainted"]
Trend = Literal["up", "down", "steady"]
BusyAction = Literal["sleep", "travel"]
CropType = Literal["quick_berries", "hearty_roots", "golden_apples"]

# Fraction of max health at or below which a creature counts as injured.
INJURED_HEALTH_FRACTION = 0.4


# ============================================================================
# Creatures
# ============================================================================


class Stats(BaseModel):
    attack: int
    defense: int
    speed: int
    stamina: int


def derive_status(health: int, max_health: int, stamina_current: int) -> AutoMonStatus:
    """Map a creature's numbers to its display status."""
    if health <= 0:
        return "fainted"
    if health <= max_health * INJURED_HEALTH_FRACTION:
        return "injured"
    if stamina_current <= 0:
        return "exhausted"
    return "healthy"


class AutoMon(BaseModel):
    """A creature owned by a trainer (or a transient wild opponent).

    ``nickname`` and ``element`` mirror the current species and change on
    evolution. ``abilities`` only ever grows.
    """

    id: str
    species_id: str
    nickname: str
    element: str
    level: int = Field(..., ge=1)
    xp: int = Field(0, ge=0)
    health: int = Field(..., ge=0)
    max_health: int = Field(..., ge=1)
    hunger: int = Field(80, ge=0, le=100)
    loyalty: int = Field(70, ge=0, le=100)
    stats: Stats
    abilities: List[str] = Field(default_factory=list)
    personality: str = ""
    stamina_current: int = Field(..., ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> AutoMonStatus:
        return derive_status(self.health, self.max_health, self.stamina_current)

    @property
    def health_fraction(self) -> float:
        return self.health / self.max_health if self.max_health else 0.0

    def full_stamina(self) -> int:
        """Stamina pool restored after any battle."""
        return 20 + self.stats.stamina


class CropPlot(BaseModel):
    crop_type: CropType
    planted_at_tick: int
    watered_ticks: int = 0
    growth_ticks: int


# ============================================================================
# Trainers
# ============================================================================


class Trainer(BaseModel):
    """An autonomous agent with survival gauges, inventory and a creature roster.

    Busy state (``busy_action`` + ``busy_until_tick`` and, for travel,
    ``pending_travel_to``) represents the single in-flight timed action.
    """

    id: str
    name: str
    health: int = Field(100, ge=0, le=100)
    energy: int = Field(90, ge=0, le=100)
    hunger: int = Field(90, ge=0, le=100)
    gold: int = Field(120, ge=0)
    location_id: str
    inventory: Dict[str, int] = Field(default_factory=dict)
    stable_capacity: int = Field(3, ge=1)
    automons: List[AutoMon] = Field(default_factory=list)
    crops: List[CropPlot] = Field(default_factory=list)
    elo: int = 1000
    busy_action: Optional[BusyAction] = None
    busy_until_tick: Optional[int] = None
    pending_travel_to: Optional[str] = None

    @property
    def busy(self) -> bool:
        return self.busy_until_tick is not None

    def clear_busy(self) -> None:
        self.busy_action = None
        self.busy_until_tick = None
        self.pending_travel_to = None

    def has_item(self, item_id: str) -> bool:
        return self.inventory.get(item_id, 0) > 0

    def find_automon(self, automon_id: Optional[str]) -> Optional[AutoMon]:
        if not automon_id:
            return None
        return next((mon for mon in self.automons if mon.id == automon_id), None)

    def lead_automon(self) -> Optional[AutoMon]:
        return self.automons[0] if self.automons else None

    def first_living_automon(self) -> Optional[AutoMon]:
        return next((mon for mon in self.automons if mon.health > 0), None)


def inventory_add(inventory: Dict[str, int], item_id: str, amount: int) -> None:
    """Adjust an item count in place, pruning entries that drop to zero or below."""
    inventory[item_id] = inventory.get(item_id, 0) + amount
    if inventory[item_id] <= 0:
        del inventory[item_id]


# ============================================================================
# World
# ============================================================================


class MarketState(BaseModel):
    prices: Dict[str, int] = Field(default_factory=dict)
    trend: Dict[str, Trend] = Field(default_factory=dict)


class EventLog(BaseModel):
    """One entry of the world's bounded event log."""

    tick: int
    day: int
    type: str
    message: str
    trainer_id: Optional[str] = None
    reasoning: Optional[str] = None


class LeaderboardEntry(BaseModel):
    trainer_id: str
    elo: int


class GameState(BaseModel):
    """Root simulation state. ``leaderboard`` is derived and recomputed every tick."""

    tick: int = Field(0, ge=0)
    day: int = Field(1, ge=1)
    weather: Weather = "clear"
    time_of_day: TimeOfDay = "dawn"
    trainers: List[Trainer] = Field(default_factory=list)
    market: MarketState = Field(default_factory=MarketState)
    events: List[EventLog] = Field(default_factory=list)
    leaderboard: List[LeaderboardEntry] = Field(default_factory=list)

    def get_trainer(self, trainer_id: str) -> Optional[Trainer]:
        return next((t for t in self.trainers if t.id == trainer_id), None)


class GameConfig(BaseModel):
    """Engine tunables. ``base_tick_ms`` is the 1x cadence speed multipliers divide."""

    tick_ms: int = Field(10_000, ge=1)
    base_tick_ms: int = Field(10_000, ge=1)
    ticks_per_day: int = Field(24, ge=1)
    max_log_entries: int = Field(250, ge=1)


# ============================================================================
# Decision Policy boundary
# ============================================================================


class NearbyAgent(BaseModel):
    id: str
    name: str
    location_id: str
    gold: int
    elo: int


class AgentContext(BaseModel):
    """Everything a decision policy sees about one trainer for one tick."""

    trainer: Trainer
    nearby_agents: List[NearbyAgent] = Field(default_factory=list)
    available_actions: List[str] = Field(default_factory=list)
    market: MarketState
    location: LocationDef
    recent_events: List[EventLog] = Field(default_factory=list)
    world_tick: int
    day: int
    weather: Weather
    time_of_day: TimeOfDay


class AgentDecision(BaseModel):
    """The action a trainer intends to take this tick.

    This is also the structured response model for the reasoning service,
    so ``action`` and ``reasoning`` are required and must be non-empty.
    """

    action: str = Field(..., min_length=1, description="Action name, e.g. 'fish' or 'travel'")
    target: Optional[str] = Field(
        None,
        description="Optional id: location, item, trainer or automon depending on action",
    )
    reasoning: str = Field(..., min_length=1, description="One sentence explaining the choice")

    @field_validator("target", mode="before")
    @classmethod
    def _coerce_target(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


# ============================================================================
# Observation boundary
# ============================================================================


class WorldSnapshot(BaseModel):
    """Read-only view pushed to observers after every tick."""

    tick_ms: int
    running: bool = False
    location_graph: List[Dict[str, Any]] = Field(default_factory=list)
    species_dex: List[Dict[str, Any]] = Field(default_factory=list)
    item_catalog: List[Dict[str, Any]] = Field(default_factory=list)
    ability_catalog: List[Dict[str, Any]] = Field(default_factory=list)
    state: GameState
