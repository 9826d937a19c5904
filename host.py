"""
Host Environment - the game the predictions are made for.

Abstracts every query the simulation needs from the running game: action
definitions, stat names, level curve, bonus experience, skill levels,
guild ranks, quest rewards, dungeon floors and historical loop totals.

The engine only reads from the host. Nothing here is mutated during a
simulation pass.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
import json
import logging
import math

from actions.catalog import ActionDefinition

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_STAT_NAMES = ['Dex', 'Str', 'Con', 'Spd', 'Per', 'Cha', 'Int', 'Luck', 'Soul']

SNAPSHOT_DEFAULTS = {
    'stat_names': DEFAULT_STAT_NAMES,
    'actions': {},
    'skills': {},
    'bonus_xp': {},
    'guilds': {
        'crafting': {'name': 'none', 'bonus': 1.0},
        'adventure': {'name': 'none', 'bonus': 1.0},
    },
    'gold_costs': {'locks': 10, 'short_quests': 20, 'long_quests': 30},
    'dungeons': [],
    'loop_totals': {},
}


# =============================================================================
# EXCEPTIONS
# =============================================================================

class HostError(Exception):
    """Base exception for host environment errors."""
    pass


class SnapshotFormatError(HostError):
    """Host snapshot data is missing or malformed."""
    pass


# =============================================================================
# HOST DATA TYPES
# =============================================================================

@dataclass
class GuildRank:
    """Guild rank name and the multiplier it grants."""
    name: str
    bonus: float


@dataclass
class DungeonFloor:
    """One dungeon floor: soulstone chance and times it was cleared."""
    ss_chance: float
    completed: int


def level_from_exp(exp: float) -> int:
    """Convert accumulated experience into a stat level."""
    return math.floor((math.sqrt(8 * exp / 100 + 1) - 1) / 2)


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class HostEnvironment(ABC):
    """
    Read-only interface to the host game.

    Formulas in the action library and the prediction model call these
    methods; they never see where the values come from.
    """

    @property
    @abstractmethod
    def stat_names(self) -> List[str]:
        """Ordered names of every recognised stat."""
        pass

    @abstractmethod
    def action_lookup(self, name: str) -> Optional[ActionDefinition]:
        """Action definition for name, or None if the host has no such action."""
        pass

    @abstractmethod
    def level_from_exp(self, exp: float) -> float:
        pass

    @abstractmethod
    def bonus_xp_multiplier(self, stat: str) -> float:
        """Experience multiplier from talents and soulstones for a stat."""
        pass

    @abstractmethod
    def skill_level(self, name: str) -> float:
        pass

    @abstractmethod
    def craft_guild_rank(self) -> GuildRank:
        pass

    @abstractmethod
    def adventure_guild_rank(self) -> GuildRank:
        pass

    @abstractmethod
    def gold_cost_locks(self) -> float:
        pass

    @abstractmethod
    def gold_cost_short_quests(self) -> float:
        pass

    @abstractmethod
    def gold_cost_long_quests(self) -> float:
        pass

    @abstractmethod
    def dungeon(self, index: int) -> List[DungeonFloor]:
        """Floors of a dungeon, in order."""
        pass

    @abstractmethod
    def loop_historical_total(self, name: str) -> int:
        """Loops of an action ever completed before this simulation."""
        pass


# =============================================================================
# SNAPSHOT IMPLEMENTATION
# =============================================================================

class SnapshotHost(HostEnvironment):
    """
    Host environment backed by a captured snapshot of the game.

    The snapshot is a plain dictionary (usually loaded from JSON); missing
    sections fall back to SNAPSHOT_DEFAULTS.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        data = dict(data or {})
        for key, default in SNAPSHOT_DEFAULTS.items():
            data.setdefault(key, default)
        self.data = data

        try:
            self._stat_names = [str(name) for name in data['stat_names']]
            self._actions = {
                name: ActionDefinition.from_dict(name, entry)
                for name, entry in data['actions'].items()
            }
            self._dungeons = [
                [DungeonFloor(ss_chance=float(floor.get('ss_chance', 0)),
                              completed=int(floor.get('completed', 0)))
                 for floor in dungeon]
                for dungeon in data['dungeons']
            ]
            guilds = data['guilds']
            self._craft_guild = GuildRank(**guilds.get('crafting', SNAPSHOT_DEFAULTS['guilds']['crafting']))
            self._adventure_guild = GuildRank(**guilds.get('adventure', SNAPSHOT_DEFAULTS['guilds']['adventure']))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SnapshotFormatError(f"Malformed host snapshot: {e}") from e

        logger.debug(
            f"Snapshot host loaded: {len(self._actions)} actions, "
            f"{len(self._dungeons)} dungeons"
        )

    @property
    def stat_names(self) -> List[str]:
        return self._stat_names

    def action_lookup(self, name: str) -> Optional[ActionDefinition]:
        return self._actions.get(name)

    def level_from_exp(self, exp: float) -> float:
        return level_from_exp(exp)

    def bonus_xp_multiplier(self, stat: str) -> float:
        return float(self.data['bonus_xp'].get(stat, 1.0))

    def skill_level(self, name: str) -> float:
        return float(self.data['skills'].get(name, 0))

    def craft_guild_rank(self) -> GuildRank:
        return self._craft_guild

    def adventure_guild_rank(self) -> GuildRank:
        return self._adventure_guild

    def gold_cost_locks(self) -> float:
        return self.data['gold_costs']['locks']

    def gold_cost_short_quests(self) -> float:
        return self.data['gold_costs']['short_quests']

    def gold_cost_long_quests(self) -> float:
        return self.data['gold_costs']['long_quests']

    def dungeon(self, index: int) -> List[DungeonFloor]:
        if index is None or not 0 <= index < len(self._dungeons):
            return []
        return self._dungeons[index]

    def loop_historical_total(self, name: str) -> int:
        return int(self.data['loop_totals'].get(name, 0))


# =============================================================================
# LOADING
# =============================================================================

def load_host_snapshot(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a host snapshot document from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise SnapshotFormatError(f"Host snapshot not found: {path}")

    with open(path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise SnapshotFormatError(f"Host snapshot is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotFormatError("Host snapshot must be a JSON object")

    logger.info(f"Loaded host snapshot from {path}")
    return data


# =============================================================================
# FACTORY FUNCTION
# =============================================================================

def create_host(
    source_type: str = 'snapshot',
    **kwargs
) -> HostEnvironment:
    """
    Factory function to create a host environment.

    Args:
        source_type: 'snapshot' (data=dict) or 'file' (path=JSON file)
        **kwargs: Source-specific configuration

    Returns:
        Configured HostEnvironment instance
    """
    if source_type == 'snapshot':
        return SnapshotHost(kwargs.get('data'))
    elif source_type == 'file':
        return SnapshotHost(load_host_snapshot(kwargs['path']))
    else:
        raise ValueError(f"Unknown host source type: {source_type}")
