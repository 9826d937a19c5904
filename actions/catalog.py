"""
Action Catalog

Static and derived data per action: the host's action definition (stat
weights, experience multiplier, segments, mana cost) paired with a tagged
descriptor saying what the action does to the resource ledger.

Descriptors are validated when the catalog is built. A loop action missing
its loop formulas never reaches the tick loop.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Callable, Dict, Any, List, Iterable
import logging

from prediction import PredictionModel
from .formulas import floor_eps

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ConfigurationError(Exception):
    """Raised when an action descriptor or definition is malformed."""
    pass


# =============================================================================
# HOST ACTION DEFINITION
# =============================================================================

@dataclass
class ActionDefinition:
    """
    Action data as the host game knows it.

    loop_stats is the cyclic list of stats whose level scales the progress
    of each segment of a loop action.
    """

    name: str
    stats: Dict[str, float]
    mana_cost: Callable[[], float]
    exp_mult: float = 1.0
    segments: Optional[int] = None
    loop_stats: List[str] = field(default_factory=list)
    dungeon_num: Optional[int] = None

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'ActionDefinition':
        """Build a definition from snapshot data with a constant mana cost."""
        mana_cost = float(data['mana_cost'])
        return cls(
            name=name,
            stats={stat: float(weight) for stat, weight in data.get('stats', {}).items()},
            mana_cost=lambda: mana_cost,
            exp_mult=float(data.get('exp_mult', 1.0)),
            segments=data.get('segments'),
            loop_stats=list(data.get('loop_stats', [])),
            dungeon_num=data.get('dungeon_num'),
        )


# =============================================================================
# DESCRIPTORS
# =============================================================================

class ActionKind(Enum):
    """What an action does beyond granting stat experience."""
    SIMPLE = auto()
    RESOURCE_EFFECT = auto()
    LOOP = auto()


@dataclass
class LoopContext:
    """Everything a loop formula may read while one tick is evaluated."""

    progression: Any
    action: ActionDefinition
    stats: Dict[str, float]
    resources: Any
    host: Any

    def loop_stat_bonus(self, offset: int) -> float:
        """Level multiplier of the stat driving the segment at offset."""
        loop_stats = self.action.loop_stats
        stat = loop_stats[(self.progression.completed + offset) % len(loop_stats)]
        return 1 + self.host.level_from_exp(self.stats.get(stat, 0)) / 100

    def floor(self) -> int:
        """Index of the loop currently being worked on (dungeon floor)."""
        return floor_eps(self.progression.completed / self.action.segments)


@dataclass
class LoopDescriptor:
    """
    Formulas of a multi-segment action.

    cost(ctx, segment) is the progress needed to clear a segment,
    tick(ctx, offset) the nominal progress rate for a segment, and
    max(action, host) the number of loops available, if bounded.
    Effects receive (resources, host).
    """

    cost: Optional[Callable[[LoopContext, int], float]]
    tick: Optional[Callable[[LoopContext, int], float]]
    segment_effect: Optional[Callable[[Any, Any], None]] = None
    loop_effect: Optional[Callable[[Any, Any], None]] = None
    max: Optional[Callable[[ActionDefinition, Any], int]] = None


@dataclass
class ActionDescriptor:
    """Tagged description of an action's effect on the resource ledger."""

    name: str
    kind: ActionKind = ActionKind.SIMPLE
    affected: List[str] = field(default_factory=list)
    effect: Optional[Callable[[Any, Any], None]] = None
    loop: Optional[LoopDescriptor] = None


def validate_descriptor(descriptor: ActionDescriptor, action: ActionDefinition):
    """Reject descriptors that could not be simulated."""
    name = descriptor.name

    if not callable(action.mana_cost):
        raise ConfigurationError(f"{name}: mana_cost must be callable")

    if descriptor.kind is ActionKind.SIMPLE:
        if descriptor.effect is not None or descriptor.loop is not None:
            raise ConfigurationError(f"{name}: simple actions carry no effect or loop")

    elif descriptor.kind is ActionKind.RESOURCE_EFFECT:
        if not callable(descriptor.effect):
            raise ConfigurationError(f"{name}: resource effect action needs an effect")
        if descriptor.loop is not None:
            raise ConfigurationError(f"{name}: resource effect action cannot loop")

    elif descriptor.kind is ActionKind.LOOP:
        loop = descriptor.loop
        if loop is None:
            raise ConfigurationError(f"{name}: loop action needs a loop descriptor")
        if not callable(loop.cost) or not callable(loop.tick):
            raise ConfigurationError(f"{name}: loop action needs cost and tick formulas")
        for label in ('segment_effect', 'loop_effect', 'max'):
            value = getattr(loop, label)
            if value is not None and not callable(value):
                raise ConfigurationError(f"{name}: loop {label} must be callable")
        if descriptor.effect is not None and not callable(descriptor.effect):
            raise ConfigurationError(f"{name}: effect must be callable")
        if not isinstance(action.segments, int) or action.segments <= 0:
            raise ConfigurationError(f"{name}: loop action needs a positive segment count")
        if not action.loop_stats:
            raise ConfigurationError(f"{name}: loop action needs loop stats")

    else:
        raise ConfigurationError(f"{name}: unknown action kind {descriptor.kind!r}")


# =============================================================================
# CATALOG
# =============================================================================

class ActionCatalog:
    """
    Prediction models by action name.

    Names the host cannot resolve are left out with a warning; the engine
    treats them as unknown and skips them.
    """

    def __init__(self, descriptors: Iterable[ActionDescriptor], host):
        self.host = host
        self._models: Dict[str, PredictionModel] = {}

        for descriptor in descriptors:
            action = host.action_lookup(descriptor.name)
            if action is None:
                logger.warning(f"Host has no definition for '{descriptor.name}', skipping")
                continue

            validate_descriptor(descriptor, action)
            self._models[descriptor.name] = PredictionModel(descriptor, action)

        logger.debug(f"Action catalog built with {len(self._models)} actions")

    def get(self, name: str) -> Optional[PredictionModel]:
        return self._models.get(name)

    def names(self) -> List[str]:
        return list(self._models)

    def affected_for(self, names: Iterable[str]) -> List[str]:
        """Ordered union of the resources affected by the given actions."""
        affected: List[str] = []
        for name in names:
            model = self._models.get(name)
            if model is None:
                continue
            for resource in model.affected:
                if resource not in affected:
                    affected.append(resource)
        return affected

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)


def build_catalog(host, descriptors: Optional[Iterable[ActionDescriptor]] = None) -> ActionCatalog:
    """Build a catalog for the host, defaulting to the stock action library."""
    if descriptors is None:
        from .library import PREDICTIONS
        descriptors = PREDICTIONS.values()
    return ActionCatalog(descriptors, host)
