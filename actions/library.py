"""
Stock action library for IdleLoops (valid as of v.77).

Each entry is a descriptor: fixed resource deltas are plain data, anything
that depends on the ledger or the host is a named formula. Effects take
(resources, host); loop formulas take a LoopContext.
"""

import math
from typing import Dict, Callable

from .catalog import ActionDescriptor, ActionKind, LoopDescriptor, LoopContext
from .formulas import fibonacci, precision3, floor_eps


# =============================================================================
# EFFECT BUILDERS
# =============================================================================

def gain(**deltas: float) -> Callable:
    """Effect adding fixed amounts to ledger fields (negative to spend)."""
    def effect(resources, host):
        for name, amount in deltas.items():
            resources.add(name, amount)
    effect.deltas = deltas
    return effect


def simple(name: str) -> ActionDescriptor:
    return ActionDescriptor(name=name, kind=ActionKind.SIMPLE)


def resource_effect(name: str, effect: Callable, affected=()) -> ActionDescriptor:
    return ActionDescriptor(
        name=name,
        kind=ActionKind.RESOURCE_EFFECT,
        affected=list(affected),
        effect=effect,
    )


def loop_action(name: str, loop: LoopDescriptor, affected=()) -> ActionDescriptor:
    return ActionDescriptor(
        name=name,
        kind=ActionKind.LOOP,
        affected=list(affected),
        loop=loop,
    )


# =============================================================================
# RESOURCE EFFECTS
# =============================================================================

def pick_locks(r, host):
    r.gold += host.gold_cost_locks()


def buy_glasses(r, host):
    r.gold -= 10
    r.glasses = 1


def buy_mana(r, host):
    r.mana += r.gold * 50
    r.gold = 0


def short_quest(r, host):
    r.gold += host.gold_cost_short_quests()


def long_quest(r, host):
    r.gold += host.gold_cost_long_quests()
    r.rep += 1


def buy_supplies(r, host):
    r.gold -= 300 - max(r.supply_discount * 20, 0)
    r.supplies += 1


def haggle(r, host):
    r.rep -= 1
    r.supply_discount += 1


def sell_potions(r, host):
    r.gold += r.potions * host.skill_level('Alchemy')
    r.potions -= 1


def gather_team(r, host):
    r.gold -= r.team * 200
    r.team += 1


def tournament_round(r, host):
    r.tourney += 1
    r.gold += 40 + floor_eps(r.tourney / 3, 1e-5) * 20


# =============================================================================
# LOOP FORMULAS
# =============================================================================

def self_combat(ctx: LoopContext) -> float:
    """Combat skill boosted by crafted armor."""
    host = ctx.host
    return host.skill_level('Combat') * (
        1 + (ctx.resources.armor * host.craft_guild_rank().bonus) / 5
    )


def team_combat(ctx: LoopContext) -> float:
    host = ctx.host
    return self_combat(ctx) + (
        host.skill_level('Combat') * ctx.resources.team / 2 * host.adventure_guild_rank().bonus
    )


def dungeon_size(action, host) -> int:
    return len(host.dungeon(action.dungeon_num))


def dungeon_floor_bonus(ctx: LoopContext):
    """Familiarity bonus of the current floor, or None past the last floor."""
    floors = ctx.host.dungeon(ctx.action.dungeon_num)
    floor = ctx.floor()
    if floor >= len(floors):
        return None
    return math.sqrt(1 + floors[floor].completed / 200)


def heal_the_sick_cost(ctx, segment):
    p, a = ctx.progression, ctx.action
    return fibonacci(2 + floor_eps((p.completed + segment) / a.segments)) * 5000


def heal_the_sick_tick(ctx, offset):
    return (ctx.host.skill_level('Magic')
            * math.sqrt(1 + ctx.progression.total / 100)
            * ctx.loop_stat_bonus(offset))


def fight_monsters_cost(ctx, segment):
    p, a = ctx.progression, ctx.action
    return fibonacci(floor_eps((p.completed + segment) - p.completed / a.segments)) * 10000


def fight_monsters_tick(ctx, offset):
    return (ctx.host.skill_level('Combat')
            * math.sqrt(1 + ctx.progression.total / 100)
            * ctx.loop_stat_bonus(offset))


def adventure_guild_cost(ctx, segment):
    return precision3(math.pow(1.2, ctx.progression.completed + segment)) * 5e6


def adventure_guild_tick(ctx, offset):
    return ((ctx.host.skill_level('Magic') / 2 + self_combat(ctx))
            * ctx.loop_stat_bonus(offset)
            * math.sqrt(1 + ctx.progression.total / 1000))


def crafting_guild_cost(ctx, segment):
    return precision3(math.pow(1.2, ctx.progression.completed + segment)) * 2e6


def crafting_guild_tick(ctx, offset):
    host = ctx.host
    return ((host.skill_level('Magic') / 2 + host.skill_level('Crafting'))
            * ctx.loop_stat_bonus(offset)
            * math.sqrt(1 + ctx.progression.total / 1000))


def small_dungeon_cost(ctx, segment):
    p, a = ctx.progression, ctx.action
    return precision3(math.pow(2, floor_eps((p.completed + segment) / a.segments)) * 15000)


def small_dungeon_tick(ctx, offset):
    familiarity = dungeon_floor_bonus(ctx)
    if familiarity is None:
        return 0
    host = ctx.host
    return ((host.skill_level('Combat') + host.skill_level('Magic'))
            * ctx.loop_stat_bonus(offset)
            * familiarity)


def large_dungeon_cost(ctx, segment):
    p, a = ctx.progression, ctx.action
    return precision3(math.pow(3, floor_eps((p.completed + segment) / a.segments)) * 5e5)


def large_dungeon_tick(ctx, offset):
    familiarity = dungeon_floor_bonus(ctx)
    if familiarity is None:
        return 0
    return ((team_combat(ctx) + ctx.host.skill_level('Magic'))
            * ctx.loop_stat_bonus(offset)
            * familiarity)


def tournament_cost(ctx, segment):
    return precision3(math.pow(1.1, ctx.progression.completed + segment)) * 5e6


def tournament_tick(ctx, offset):
    return ((ctx.host.skill_level('Magic') + self_combat(ctx))
            * ctx.loop_stat_bonus(offset)
            * math.sqrt(1 + ctx.progression.total / 1000))


TOURNAMENT_ROUNDS = 6


# =============================================================================
# PREDICTION TABLE
# =============================================================================

PREDICTIONS: Dict[str, ActionDescriptor] = {d.name: d for d in [

    # -------------------------------------------------------------------------
    # BEGINNERSVILLE
    # -------------------------------------------------------------------------

    simple('Wander'),
    resource_effect('Smash Pots', gain(mana=100), affected=['mana']),
    resource_effect('Pick Locks', pick_locks, affected=['gold']),
    resource_effect('Buy Glasses', buy_glasses),
    resource_effect('Buy Mana', buy_mana, affected=['mana', 'gold']),
    simple('Meet People'),
    simple('Train Strength'),
    resource_effect('Short Quest', short_quest, affected=['gold']),
    simple('Investigate'),
    resource_effect('Long Quest', long_quest, affected=['gold', 'rep']),
    resource_effect('Throw Party', gain(rep=-2), affected=['rep']),
    simple('Warrior Lessons'),
    simple('Mage Lessons'),
    resource_effect('Buy Supplies', buy_supplies, affected=['gold']),
    resource_effect('Haggle', haggle),
    resource_effect('Start Journey', gain(supplies=-1)),

    # -------------------------------------------------------------------------
    # FOREST PATH
    # -------------------------------------------------------------------------

    simple('Explore Forest'),
    resource_effect('Wild Mana', gain(mana=250), affected=['mana']),
    resource_effect('Gather Herbs', gain(herbs=1), affected=['herbs']),
    resource_effect('Hunt', gain(hide=1), affected=['hide']),
    simple('Sit By Waterfall'),
    simple('Old Shortcut'),
    simple('Talk To Hermit'),
    simple('Practical Magic'),
    resource_effect('Learn Alchemy', gain(herbs=-10), affected=['herbs']),
    resource_effect('Brew Potions', gain(herbs=-10, potions=1), affected=['herbs', 'potions']),
    simple('Train Dex'),
    simple('Train Speed'),
    simple('Continue On'),

    # -------------------------------------------------------------------------
    # MERCHANTON
    # -------------------------------------------------------------------------

    simple('Explore City'),
    resource_effect('Gamble', gain(rep=-1, gold=60 - 20), affected=['gold', 'rep']),
    resource_effect('Get Drunk', gain(rep=-1), affected=['rep']),
    resource_effect('Purchase Mana', buy_mana, affected=['mana', 'gold']),
    resource_effect('Sell Potions', sell_potions, affected=['gold', 'potions']),
    simple('Read Books'),
    resource_effect('Gather Team', gather_team, affected=['gold']),
    resource_effect('Craft Armor', gain(hide=-2, armor=1), affected=['hide']),
    simple('Apprentice'),
    simple('Mason'),
    simple('Architect'),

    # -------------------------------------------------------------------------
    # BASIC LOOPS
    # -------------------------------------------------------------------------

    loop_action('Heal The Sick', LoopDescriptor(
        cost=heal_the_sick_cost,
        tick=heal_the_sick_tick,
        loop_effect=gain(rep=3),
    ), affected=['rep']),

    loop_action('Fight Monsters', LoopDescriptor(
        cost=fight_monsters_cost,
        tick=fight_monsters_tick,
        segment_effect=gain(gold=20),
    ), affected=['gold']),

    loop_action('Adventure Guild', LoopDescriptor(
        cost=adventure_guild_cost,
        tick=adventure_guild_tick,
        segment_effect=gain(mana=200),
    ), affected=['mana']),

    loop_action('Crafting Guild', LoopDescriptor(
        cost=crafting_guild_cost,
        tick=crafting_guild_tick,
        segment_effect=gain(gold=10),
    ), affected=['gold']),

    # -------------------------------------------------------------------------
    # DUNGEON-STYLE LOOPS
    # -------------------------------------------------------------------------

    loop_action('Small Dungeon', LoopDescriptor(
        cost=small_dungeon_cost,
        tick=small_dungeon_tick,
        loop_effect=gain(soul=1),
        max=dungeon_size,
    ), affected=['soul']),

    loop_action('Large Dungeon', LoopDescriptor(
        cost=large_dungeon_cost,
        tick=large_dungeon_tick,
        loop_effect=gain(soul=1),
        max=dungeon_size,
    ), affected=['soul']),

    loop_action('Tournament', LoopDescriptor(
        cost=tournament_cost,
        tick=tournament_tick,
        segment_effect=tournament_round,
        max=lambda action, host: TOURNAMENT_ROUNDS,
    ), affected=['gold']),
]}
