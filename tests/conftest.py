"""
Shared fixtures: a small host snapshot with hand-picked actions whose tick
counts and progress are easy to compute by hand.
"""

import copy

import pytest

from host import SnapshotHost

BASE_SNAPSHOT = {
    'stat_names': ['Dex', 'Str', 'Con', 'Spd', 'Per', 'Cha', 'Int', 'Luck', 'Soul'],
    'actions': {
        # 250 ticks at level 0
        'Wander': {'mana_cost': 250, 'stats': {'Str': 0.5, 'Spd': 0.5}},
        # Zero weights: zero ticks
        'Smash Pots': {'mana_cost': 50, 'stats': {}},
        'Buy Mana': {'mana_cost': 100, 'stats': {}},
        'Train Strength': {'mana_cost': 1000, 'stats': {'Str': 1.0}},
        'Overreach': {'mana_cost': 300, 'stats': {'Str': 1.0}},
        # 100 ticks, one mana per tick
        'Grind': {
            'mana_cost': 100,
            'stats': {'Str': 1.0},
            'segments': 3,
            'loop_stats': ['Str'],
        },
        'Small Dungeon': {
            'mana_cost': 100,
            'stats': {'Str': 1.0},
            'segments': 7,
            'loop_stats': ['Str'],
            'dungeon_num': 0,
        },
    },
    'skills': {'Combat': 10, 'Magic': 10, 'Alchemy': 10, 'Crafting': 5},
    'bonus_xp': {'Str': 1.5},
    'dungeons': [[]],
    'loop_totals': {'Grind': 0},
}


@pytest.fixture
def snapshot():
    return copy.deepcopy(BASE_SNAPSHOT)


@pytest.fixture
def host(snapshot):
    return SnapshotHost(snapshot)
