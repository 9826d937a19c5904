"""
Prediction Model

Wraps one catalog entry and estimates how many ticks the action needs at
the current stat levels and how much stat experience each tick grants.

Tick counts depend on accumulated stats, so they are recomputed at the
start of every run and cached until the next one.
"""

import math
from typing import Optional, Dict, List

TICK_EPSILON = 1e-6


class PredictionNotReadyError(Exception):
    """Raised when ticks are read before they were ever computed."""
    pass


class PredictionModel:
    """
    Tick and experience estimates for a single action.

    The host's action definition supplies stat weights and mana cost; the
    descriptor supplies the action's effect and loop formulas. Level curve
    and bonus experience come from the host passed to each call.
    """

    def __init__(self, descriptor, action):
        self.name = descriptor.name
        self.descriptor = descriptor
        self.action = action
        self._ticks: Optional[int] = None

    @property
    def affected(self) -> List[str]:
        return self.descriptor.affected

    @property
    def effect(self):
        return self.descriptor.effect

    @property
    def loop(self):
        return self.descriptor.loop

    @property
    def is_loop(self) -> bool:
        return self.descriptor.loop is not None

    def update_ticks(self, stats: Dict[str, float], host) -> int:
        """
        Calculate the number of ticks needed to complete the action.

        Each weighted stat is discounted by its level; stats absent from
        either the weights or the accumulated experience contribute nothing.
        """
        cost = 0.0
        for stat in host.stat_names:
            if stat in self.action.stats and stat in stats:
                level = host.level_from_exp(stats[stat])
                cost += self.action.stats[stat] / (1 + level / 100)

        self._ticks = math.ceil(self.action.mana_cost() * cost - TICK_EPSILON)
        return self._ticks

    def ticks(self) -> int:
        """Tick count from the most recent update_ticks call."""
        if self._ticks is None:
            raise PredictionNotReadyError(f"update_ticks was never called for '{self.name}'")
        return self._ticks

    def mana_per_tick(self) -> float:
        """Share of the action's mana cost represented by one tick."""
        return self.action.mana_cost() / self.ticks()

    def exp(self, stats: Dict[str, float], host):
        """Add the experience gained in one tick to the accumulated stats."""
        per_tick = self.mana_per_tick()
        for stat in host.stat_names:
            if stat in self.action.stats and stat in stats:
                stats[stat] += (
                    self.action.stats[stat]
                    * self.action.exp_mult
                    * per_tick
                    * host.bonus_xp_multiplier(stat)
                )
