"""
Action handlers: one function per ``ActionKind``.

Every handler has the signature ``handler(rules, trainer, decision) -> None``,
mutates the working state through ``rules`` and logs exactly one outcome
event (plus any level-up announcements). Unmet preconditions are expected
outcomes: the handler logs why nothing happened and returns. Handlers never
raise for game reasons.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from automon.battle import apply_potion, heal_automon, resolve_battle
from automon.catalog import ITEM_BY_ID, LOCATION_BY_ID, SPECIES_BY_ID, WORLD_MAP
from automon.rng import clamp, roll, sample
from automon.schemas import AgentDecision, CropPlot, Trainer, inventory_add
from automon.seed import new_id
from automon.simulation_rules import UNIVERSAL_ACTIONS, WorldRules, catch_chance, fishing_chance

SLEEP_TICKS = 6
PVP_ENTRY_FEE = 20
TRAIN_XP = 14

# seed item -> (crop type, growth ticks)
SEED_CROPS = {
    "quick_berries_seed": ("quick_berries", 3),
    "hearty_roots_seed": ("hearty_roots", 8),
    "golden_apples_seed": ("golden_apples", 20),
}

GATHER_POOLS = {
    "gather": ["fiber", "fiber", "herb", "ore"],
    "mine": ["ore", "ore", "herb"],
}
EXPLORE_FINDS = ["fiber", "herb", "bait", "trail_ration"]


class ActionKind(str, Enum):
    REST = "rest"
    SLEEP = "sleep"
    EAT = "eat"
    FEED_AUTOMON = "feed_automon"
    FISH = "fish"
    PLANT = "plant"
    WATER = "water"
    HARVEST = "harvest"
    GATHER = "gather"
    MINE = "mine"
    BUY = "buy"
    SELL = "sell"
    CRAFT = "craft"
    BATTLE_PVE = "battle_pve"
    BATTLE_PVP = "battle_pvp"
    TRAIN_AUTOMON = "train_automon"
    HEAL_AUTOMON = "heal_automon"
    TRAVEL = "travel"
    EXPLORE = "explore"
    CATCH_AUTOMON = "catch_automon"
    USE_ITEM = "use_item"
    RELEASE_AUTOMON = "release_automon"
    IDLE = "idle"

    @classmethod
    def parse(cls, name: str, legal: Optional[Iterable[str]] = None) -> "ActionKind":
        """Map an action name to its kind. Unknown or illegal names become IDLE."""
        normalized = (name or "").strip().lower()
        try:
            kind = cls(normalized)
        except ValueError:
            return cls.IDLE
        if kind is not cls.IDLE and legal is not None and normalized not in set(legal):
            return cls.IDLE
        return kind


Handler = Callable[[WorldRules, Trainer, AgentDecision], None]


def _log(rules: WorldRules, event_type: str, message: str, trainer: Trainer, decision: AgentDecision) -> None:
    rules.add_event(event_type, message, trainer.id, decision.reasoning)


# ============================================================================
# Survival
# ============================================================================


def handle_rest(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    trainer.energy = int(clamp(trainer.energy + 10, 0, 100))
    trainer.health = int(clamp(trainer.health + 2, 0, 100))
    _log(rules, "action", f"{trainer.name} rests and recovers.", trainer, decision)


def handle_sleep(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    trainer.busy_action = "sleep"
    trainer.busy_until_tick = rules.state.tick + SLEEP_TICKS
    _log(rules, "action", f"{trainer.name} starts sleeping for {SLEEP_TICKS} ticks.", trainer, decision)


def handle_eat(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    target = decision.target
    if target and trainer.has_item(target) and ITEM_BY_ID.get(target) and ITEM_BY_ID[target].type == "food":
        item_id = target
    elif trainer.has_item("trail_ration"):
        item_id = "trail_ration"
    else:
        item_id = "hearty_meal"

    if not trainer.has_item(item_id):
        _log(rules, "action", f"{trainer.name} tried to eat but has no food.", trainer, decision)
        return

    item = ITEM_BY_ID[item_id]
    inventory_add(trainer.inventory, item_id, -1)
    trainer.hunger = int(clamp(trainer.hunger + item.effect("trainer_hunger"), 0, 100))
    trainer.energy = int(clamp(trainer.energy + item.effect("trainer_energy"), 0, 100))
    _log(rules, "action", f"{trainer.name} ate {item.name}.", trainer, decision)


def handle_feed_automon(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if not trainer.has_item("automon_chow") and not trainer.has_item("lux_chow"):
        _log(rules, "action", f"{trainer.name} tried to feed an AutoMon but has no feed.", trainer, decision)
        return

    if decision.target:
        mon = trainer.find_automon(decision.target)
    else:
        mon = min(trainer.automons, key=lambda m: m.hunger) if trainer.automons else None
    if mon is None:
        _log(rules, "action", f"{trainer.name} has no AutoMon to feed.", trainer, decision)
        return

    food_id = "lux_chow" if trainer.has_item("lux_chow") else "automon_chow"
    food = ITEM_BY_ID[food_id]
    inventory_add(trainer.inventory, food_id, -1)
    mon.hunger = int(clamp(mon.hunger + food.effect("automon_hunger", 25), 0, 100))
    mon.loyalty = int(clamp(mon.loyalty + 3 + food.effect("automon_loyalty"), 0, 100))
    _log(rules, "action", f"{trainer.name} fed {mon.nickname}.", trainer, decision)


# ============================================================================
# Economy
# ============================================================================


def handle_fish(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if trainer.energy < 5 or not trainer.has_item("bait"):
        _log(rules, "economy", f"{trainer.name} failed to fish (needs energy and bait).", trainer, decision)
        return

    trainer.energy = int(clamp(trainer.energy - 5, 0, 100))
    inventory_add(trainer.inventory, "bait", -1)

    if roll(rules.rng) <= fishing_chance(trainer.location_id, rules.state.weather):
        reward = "hearty_roots_seed" if roll(rules.rng) > 0.75 else "trail_ration"
        inventory_add(trainer.inventory, reward, 1)
        trainer.gold += 6
        _log(
            rules,
            "economy",
            f"{trainer.name} landed a catch and found {ITEM_BY_ID[reward].name}.",
            trainer,
            decision,
        )
    else:
        _log(rules, "economy", f"{trainer.name} fished with no luck.", trainer, decision)


def handle_gather(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    """Shared by ``gather`` and ``mine``; the decision's action picks the loot pool."""
    if trainer.energy < 8:
        _log(rules, "economy", f"{trainer.name} is too tired to gather materials.", trainer, decision)
        return

    trainer.energy -= 8
    pool = GATHER_POOLS["mine" if decision.action.strip().lower() == "mine" else "gather"]
    reward = sample(pool, rules.rng)
    inventory_add(trainer.inventory, reward, 1)
    _log(rules, "economy", f"{trainer.name} gathered {ITEM_BY_ID[reward].name}.", trainer, decision)


def handle_buy(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    item_id = decision.target if decision.target in ITEM_BY_ID else "trail_ration"
    item = ITEM_BY_ID[item_id]
    price = rules.state.market.prices.get(item_id, item.price)
    if trainer.gold < price:
        _log(rules, "market", f"{trainer.name} couldn't afford {item.name}.", trainer, decision)
        return

    trainer.gold -= price
    inventory_add(trainer.inventory, item_id, 1)
    _log(rules, "market", f"{trainer.name} bought {item.name} for {price}g.", trainer, decision)


def handle_sell(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if decision.target and trainer.has_item(decision.target):
        item_id = decision.target
    else:
        item_id = next(iter(trainer.inventory), None)
    if item_id is None or not trainer.has_item(item_id):
        _log(rules, "market", f"{trainer.name} has nothing to sell.", trainer, decision)
        return

    price = max(1, math.floor(rules.state.market.prices.get(item_id, 5) * 0.8))
    inventory_add(trainer.inventory, item_id, -1)
    trainer.gold += price
    name = ITEM_BY_ID[item_id].name if item_id in ITEM_BY_ID else item_id
    _log(rules, "market", f"{trainer.name} sold {name} for {price}g.", trainer, decision)


def handle_craft(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if not (trainer.has_item("herb") and trainer.has_item("fiber")):
        _log(rules, "craft", f"{trainer.name} failed crafting (needs herb + fiber).", trainer, decision)
        return

    inventory_add(trainer.inventory, "herb", -1)
    inventory_add(trainer.inventory, "fiber", -1)
    inventory_add(trainer.inventory, "minor_potion", 1)
    _log(rules, "craft", f"{trainer.name} crafted a Minor Potion.", trainer, decision)


# ============================================================================
# Farming
# ============================================================================


def handle_plant(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if decision.target in SEED_CROPS and trainer.has_item(decision.target):
        seed = decision.target
    else:
        seed = next((s for s in SEED_CROPS if trainer.has_item(s)), None)
    if seed is None:
        _log(rules, "farm", f"{trainer.name} has no seeds to plant.", trainer, decision)
        return

    crop_type, growth_ticks = SEED_CROPS[seed]
    inventory_add(trainer.inventory, seed, -1)
    trainer.crops.append(
        CropPlot(
            crop_type=crop_type,
            planted_at_tick=rules.state.tick,
            watered_ticks=0,
            growth_ticks=growth_ticks,
        )
    )
    _log(rules, "farm", f"{trainer.name} planted {ITEM_BY_ID[seed].name}.", trainer, decision)


def handle_water(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if not trainer.crops:
        _log(rules, "farm", f"{trainer.name} has no crops to water.", trainer, decision)
        return

    trainer.crops[0].watered_ticks += 1
    _log(rules, "farm", f"{trainer.name} watered their crops.", trainer, decision)


def crop_ready(crop: CropPlot, tick: int) -> bool:
    """Watering shaves up to two ticks off the growth time."""
    return tick - crop.planted_at_tick >= crop.growth_ticks - min(2, crop.watered_ticks)


def handle_harvest(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    tick = rules.state.tick
    ready = [crop for crop in trainer.crops if crop_ready(crop, tick)]
    if not ready:
        _log(rules, "farm", f"{trainer.name} tried to harvest but crops are not ready.", trainer, decision)
        return

    for crop in ready:
        if crop.crop_type == "quick_berries":
            inventory_add(trainer.inventory, "trail_ration", 2)
        elif crop.crop_type == "hearty_roots":
            inventory_add(trainer.inventory, "hearty_meal", 2)
        elif crop.crop_type == "golden_apples":
            trainer.gold += 45
            inventory_add(trainer.inventory, "minor_potion", 1)
    trainer.crops = [crop for crop in trainer.crops if not crop_ready(crop, tick)]
    _log(rules, "farm", f"{trainer.name} harvested {len(ready)} crop(s).", trainer, decision)


# ============================================================================
# Creatures
# ============================================================================


def handle_battle_pve(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    mon = trainer.first_living_automon()
    if trainer.energy < 12 or mon is None:
        _log(rules, "battle", f"{trainer.name} can't start PvE battle right now.", trainer, decision)
        return

    trainer.energy -= 12
    location = LOCATION_BY_ID[trainer.location_id]
    wild = rules.pick_wild_automon(location)
    if wild is None:
        _log(rules, "battle", f"{trainer.name} found no suitable PvE opponent.", trainer, decision)
        return

    # The proxy fights with its first living creature only; its gold and elo changes are discarded
    proxy = trainer.model_copy(update={"automons": [mon]})
    npc = Trainer(
        id=new_id("npc", rules.rng),
        name=f"Wild {wild.nickname}",
        gold=0,
        location_id=trainer.location_id,
        stable_capacity=1,
        automons=[wild],
        elo=trainer.elo,
    )

    result = resolve_battle(proxy, npc)
    if result is None:
        _log(rules, "battle", f"{trainer.name}'s PvE battle failed to resolve.", trainer, decision)
        return

    if result.winner_id != proxy.id:
        _log(rules, "battle", f"{trainer.name} lost a PvE battle vs {wild.nickname}.", trainer, decision)
        return

    trainer.gold += 12 + math.floor(wild.level * 1.5)
    messages = rules.gain_xp(trainer, 24 + wild.level * 2, mon)
    _log(rules, "battle", f"{trainer.name} won a PvE battle vs {wild.nickname}.", trainer, decision)
    for message in messages:
        rules.add_event("battle", message, trainer.id)


def handle_battle_pvp(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if trainer.energy < 15:
        _log(rules, "battle", f"{trainer.name} is too tired for PvP.", trainer, decision)
        return
    if not any(mon.health > 0 for mon in trainer.automons):
        _log(rules, "battle", f"{trainer.name} has no AutoMon able to battle.", trainer, decision)
        return

    rivals = [
        other
        for other in rules.state.trainers
        if other.id != trainer.id
        and other.location_id == trainer.location_id
        and any(mon.health > 0 for mon in other.automons)
    ]
    if not rivals:
        _log(rules, "battle", f"{trainer.name} looked for PvP but found no rivals nearby.", trainer, decision)
        return

    opponent = next((r for r in rivals if r.id == decision.target), None) or sample(rivals, rules.rng)
    if trainer.gold < PVP_ENTRY_FEE or opponent.gold < PVP_ENTRY_FEE:
        _log(
            rules,
            "battle",
            f"{trainer.name} or {opponent.name} lacks gold for PvP entry fee.",
            trainer,
            decision,
        )
        return

    trainer.gold -= PVP_ENTRY_FEE
    opponent.gold -= PVP_ENTRY_FEE
    trainer.energy -= 15
    opponent.energy = int(clamp(opponent.energy - 8, 0, 100))

    result = resolve_battle(trainer, opponent)
    if result is None:
        _log(rules, "battle", f"{trainer.name}'s PvP battle failed to resolve.", trainer, decision)
        return

    winner = trainer if result.winner_id == trainer.id else opponent
    winner.gold += PVP_ENTRY_FEE * 2
    _log(
        rules,
        "battle",
        f"{trainer.name} battled {opponent.name}. Winner: {winner.name} (+{result.elo_delta} elo).",
        trainer,
        decision,
    )

    winner_mon = next((mon for mon in winner.automons if mon.health > 0), None)
    if winner_mon is not None:
        for message in rules.gain_xp(winner, 0, winner_mon):
            rules.add_event("battle", message, winner.id)


def handle_train_automon(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    mon = trainer.lead_automon()
    if mon is None or trainer.energy < 10:
        _log(rules, "training", f"{trainer.name} cannot train right now.", trainer, decision)
        return

    trainer.energy -= 10
    messages = rules.gain_xp(trainer, TRAIN_XP, mon)
    _log(rules, "training", f"{trainer.name} trained {mon.nickname} (+{TRAIN_XP} XP).", trainer, decision)
    for message in messages:
        rules.add_event("training", message, trainer.id)


def handle_heal_automon(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    message = heal_automon(trainer, decision.target)
    _log(rules, "healing", f"{trainer.name}: {message}", trainer, decision)


def handle_catch_automon(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if not trainer.has_item("basic_trap") and not trainer.has_item("pro_trap"):
        _log(rules, "catch", f"{trainer.name} has no traps to catch AutoMon.", trainer, decision)
        return
    if len(trainer.automons) >= trainer.stable_capacity:
        _log(rules, "catch", f"{trainer.name}'s stable is full.", trainer, decision)
        return

    wild = rules.pick_wild_automon(LOCATION_BY_ID[trainer.location_id])
    if wild is None:
        _log(rules, "catch", f"{trainer.name} found no wild AutoMon to catch.", trainer, decision)
        return

    trap = "pro_trap" if trainer.has_item("pro_trap") else "basic_trap"
    inventory_add(trainer.inventory, trap, -1)

    lead = trainer.lead_automon()
    chance = catch_chance(wild, lead.level if lead else 1, trap)
    species_name = SPECIES_BY_ID[wild.species_id].name
    if roll(rules.rng) < chance:
        wild.id = new_id("am", rules.rng)
        wild.loyalty = 55
        wild.hunger = 75
        trainer.automons.append(wild)
        _log(rules, "catch", f"{trainer.name} caught a {species_name}!", trainer, decision)
    else:
        _log(rules, "catch", f"{trainer.name} failed to catch {species_name}.", trainer, decision)


def handle_use_item(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    _log(rules, "item", apply_potion(trainer, decision.target), trainer, decision)


def handle_release_automon(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if decision.target:
        mon = trainer.find_automon(decision.target)
    else:
        mon = trainer.automons[-1] if trainer.automons else None
    if mon is None or len(trainer.automons) <= 1:
        _log(rules, "management", f"{trainer.name} cannot release that AutoMon.", trainer, decision)
        return

    trainer.automons.remove(mon)
    _log(rules, "management", f"{trainer.name} released {mon.nickname}.", trainer, decision)


# ============================================================================
# Movement
# ============================================================================


def handle_travel(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    """Start a travel busy window.

    An adjacent target uses that edge; a distant target takes the first hop
    of the cheapest route; anything else takes the first connection.
    """

    source = trainer.location_id
    target = decision.target
    edge = WORLD_MAP.edge(source, target) if target else None
    if edge is None and target and WORLD_MAP.has_node(target):
        route = WORLD_MAP.shortest_route(source, target)
        if route and len(route) > 1:
            edge = WORLD_MAP.edge(source, route[1])
    if edge is None:
        connections = LOCATION_BY_ID[source].connections
        edge = connections[0] if connections else None
    if edge is None:
        _log(rules, "travel", f"{trainer.name} has nowhere to travel from here.", trainer, decision)
        return

    trainer.busy_action = "travel"
    trainer.pending_travel_to = edge.to
    trainer.busy_until_tick = rules.state.tick + edge.travel_ticks
    _log(
        rules,
        "travel",
        f"{trainer.name} travels to {LOCATION_BY_ID[edge.to].name} ({edge.travel_ticks} ticks).",
        trainer,
        decision,
    )


def handle_explore(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    if trainer.energy < 8:
        _log(rules, "explore", f"{trainer.name} is too tired to explore.", trainer, decision)
        return

    trainer.energy -= 8
    if roll(rules.rng) < 0.35:
        found = sample(EXPLORE_FINDS, rules.rng)
        inventory_add(trainer.inventory, found, 1)
        _log(rules, "explore", f"{trainer.name} explored and found {ITEM_BY_ID[found].name}.", trainer, decision)
    else:
        _log(rules, "explore", f"{trainer.name} explored but found nothing notable.", trainer, decision)


def handle_idle(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> None:
    requested = decision.action.strip().lower()
    if requested and requested != ActionKind.IDLE.value:
        message = f"{trainer.name} idles (cannot {requested} here)."
    else:
        message = f"{trainer.name} idles."
    _log(rules, "action", message, trainer, decision)


ACTION_HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.REST: handle_rest,
    ActionKind.SLEEP: handle_sleep,
    ActionKind.EAT: handle_eat,
    ActionKind.FEED_AUTOMON: handle_feed_automon,
    ActionKind.FISH: handle_fish,
    ActionKind.PLANT: handle_plant,
    ActionKind.WATER: handle_water,
    ActionKind.HARVEST: handle_harvest,
    ActionKind.GATHER: handle_gather,
    ActionKind.MINE: handle_gather,
    ActionKind.BUY: handle_buy,
    ActionKind.SELL: handle_sell,
    ActionKind.CRAFT: handle_craft,
    ActionKind.BATTLE_PVE: handle_battle_pve,
    ActionKind.BATTLE_PVP: handle_battle_pvp,
    ActionKind.TRAIN_AUTOMON: handle_train_automon,
    ActionKind.HEAL_AUTOMON: handle_heal_automon,
    ActionKind.TRAVEL: handle_travel,
    ActionKind.EXPLORE: handle_explore,
    ActionKind.CATCH_AUTOMON: handle_catch_automon,
    ActionKind.USE_ITEM: handle_use_item,
    ActionKind.RELEASE_AUTOMON: handle_release_automon,
    ActionKind.IDLE: handle_idle,
}


def resolve_action(rules: WorldRules, trainer: Trainer, decision: AgentDecision) -> ActionKind:
    """Dispatch ``decision`` for ``trainer``. Returns the kind actually executed."""
    kind = ActionKind.parse(decision.action, rules.legal_actions(trainer))
    ACTION_HANDLERS[kind](rules, trainer, decision)
    return kind


__all__ = [
    "ActionKind",
    "ACTION_HANDLERS",
    "UNIVERSAL_ACTIONS",
    "resolve_action",
    "crop_ready",
]
