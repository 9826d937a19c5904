"""
IdleLoops Predictor - Simulation Engine

Forward simulation of a planned action list. ALL MATH IS DETERMINISTIC.
Given the host's current stats and progress, predicts for each listed
action the resources left afterwards, whether mana ran out, and the
total mana the list consumes.

This module is the single source of truth for:
- ResourceLedger, Progression and SimulationState
- Run/tick loop (stat experience, loop segments, resource effects)
- Per-entry snapshots and validity
- The pure simulate() entry point
"""

from dataclasses import dataclass, asdict, field, fields
from functools import partial
from typing import Optional, Dict, Any, List, Tuple, Iterable, Mapping
import logging
import math

from actions import ActionCatalog, LoopContext, build_catalog

logger = logging.getLogger(__name__)


# =============================================================================
# SIMULATION CONSTANTS
# =============================================================================

SIMULATION_CONFIG = {
    'starting_mana': 250,
    'debug_repetitions': 100,
}


# =============================================================================
# EXCEPTIONS
# =============================================================================

class SimulationError(Exception):
    """Raised when an action list entry cannot be interpreted."""
    pass


# =============================================================================
# SIMULATION STATE
# =============================================================================

@dataclass
class ResourceLedger:
    """
    Currencies, materials and counters tracked through one simulation pass.

    Every field is declared up front. Unknown names raise KeyError instead
    of springing into existence on first write.
    """

    mana: float = 0
    gold: float = 0
    rep: float = 0
    soul: float = 0
    herbs: float = 0
    hide: float = 0
    potions: float = 0
    glasses: int = 0
    supplies: int = 0
    supply_discount: int = 0
    team: int = 0
    armor: int = 0
    tourney: int = 0

    @classmethod
    def names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_seed(cls, seed: Optional[Mapping[str, float]] = None) -> 'ResourceLedger':
        """Fresh ledger with starting mana, overridden by seed values."""
        ledger = cls(mana=SIMULATION_CONFIG['starting_mana'])
        for name, value in (seed or {}).items():
            ledger.set(name, value)
        return ledger

    def get(self, name: str) -> float:
        if name not in self.names():
            raise KeyError(f"Unknown resource: {name}")
        return getattr(self, name)

    def set(self, name: str, value: float):
        if name not in self.names():
            raise KeyError(f"Unknown resource: {name}")
        setattr(self, name, value)

    def add(self, name: str, amount: float):
        self.set(name, self.get(name) + amount)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class Progression:
    """
    Progress of one loop action.

    progress is the partial progress inside the current loop, completed
    the segments finished (always a multiple of the segment count) and
    total the loops ever finished, seeded from the host's history.
    """

    progress: float = 0.0
    completed: int = 0
    total: int = 0


@dataclass
class SimulationState:
    """Private state of a single simulation pass."""

    stats: Dict[str, float]
    resources: ResourceLedger
    progress: Dict[str, Progression] = field(default_factory=dict)
    mana_ran_out: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'stats': dict(self.stats),
            'resources': self.resources.to_dict(),
            'progress': {name: asdict(p) for name, p in self.progress.items()},
        }


@dataclass
class StepSnapshot:
    """Ledger and validity after one entry of the action list."""

    index: int
    name: str
    repeat_count: int
    ticks: int
    mana_spent: float
    resources: Dict[str, float]
    is_valid: bool


@dataclass
class SimulationResult:
    """Everything a presentation layer needs to show a prediction."""

    snapshots: List[StepSnapshot]
    total_mana: float
    state: SimulationState
    affected: List[str]

    @property
    def is_valid(self) -> bool:
        return all(snapshot.is_valid for snapshot in self.snapshots)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize result to dictionary (for JSON output)."""
        return {
            'snapshots': [asdict(snapshot) for snapshot in self.snapshots],
            'total_mana': self.total_mana,
            'state': self.state.to_dict(),
            'affected': list(self.affected),
            'is_valid': self.is_valid,
        }


# =============================================================================
# ACTION LIST ENTRIES
# =============================================================================

def normalize_entry(entry: Any) -> Tuple[str, int]:
    """
    Accept (name, count) pairs or mappings with 'name' and 'loops'
    (or 'repeat_count') keys.
    """
    if isinstance(entry, Mapping):
        name = entry.get('name')
        count = entry.get('loops', entry.get('repeat_count', 1))
    else:
        try:
            name, count = entry
        except (TypeError, ValueError) as e:
            raise SimulationError(f"Malformed action list entry: {entry!r}") from e

    if not isinstance(name, str) or not name:
        raise SimulationError(f"Action list entry has no name: {entry!r}")

    try:
        count = int(count)
    except (TypeError, ValueError) as e:
        raise SimulationError(f"Invalid repeat count for {name}: {count!r}") from e

    if count < 0:
        raise SimulationError(f"Negative repeat count for {name}: {count}")

    return name, count


# =============================================================================
# SIMULATION ENGINE CLASS
# Drives an action list against a fresh state on every call.
# =============================================================================

class SimulationEngine:
    """
    Predicts resources and mana for an ordered action list.

    Each call to simulate() builds its own state and re-reads the host, so
    repeated calls are independent of each other.
    """

    def __init__(self, catalog: ActionCatalog, host=None,
                 seed: Optional[Mapping[str, float]] = None):
        self.catalog = catalog
        self.host = host or catalog.host
        self.seed = seed

    # -------------------------------------------------------------------------
    # ACTION LIST
    # -------------------------------------------------------------------------

    def new_state(self) -> SimulationState:
        return SimulationState(
            stats={name: 0 for name in self.host.stat_names},
            resources=ResourceLedger.from_seed(self.seed),
        )

    def simulate(self, action_list: Iterable[Any]) -> SimulationResult:
        """
        Predict every entry of the action list in order.

        Unknown actions are skipped without a snapshot. Running out of mana
        marks that entry and every later one invalid; the simulation itself
        carries on unchanged.
        """
        entries = [normalize_entry(entry) for entry in action_list]
        state = self.new_state()
        snapshots: List[StepSnapshot] = []
        total = 0
        is_valid = True

        affected = self.catalog.affected_for(name for name, _ in entries)

        for index, (name, repeat_count) in enumerate(entries):
            prediction = self.catalog.get(name)
            if prediction is None:
                logger.debug(f"Skipping unknown action '{name}'")
                continue

            # Loop history is read once, the first time the action appears
            if prediction.is_loop and name not in state.progress:
                state.progress[name] = Progression(
                    total=self.host.loop_historical_total(name)
                )

            ticks = 0
            mana_spent = 0
            for _ in range(repeat_count):
                current_mana = state.resources.mana

                self.run(prediction, state)
                ticks = prediction.ticks()

                if is_valid and (state.mana_ran_out or state.resources.mana < 0):
                    is_valid = False
                    logger.info(f"Mana runs out during '{name}' (entry {index})")

                mana_spent += current_mana - state.resources.mana

                # Effect only after the mana check is complete
                if prediction.effect:
                    prediction.effect(state.resources, self.host)

            total += mana_spent
            snapshots.append(StepSnapshot(
                index=index,
                name=name,
                repeat_count=repeat_count,
                ticks=ticks,
                mana_spent=mana_spent,
                resources=state.resources.to_dict(),
                is_valid=is_valid,
            ))
            logger.debug(f"{name} x{repeat_count}: {ticks} ticks, {mana_spent} mana")

        return SimulationResult(
            snapshots=snapshots,
            total_mana=total,
            state=state,
            affected=affected,
        )

    def run_all_actions(self, repetitions: Optional[int] = None) -> SimulationResult:
        """Predict every catalog action in turn, so every formula runs at least once."""
        if repetitions is None:
            repetitions = SIMULATION_CONFIG['debug_repetitions']
        result = self.simulate((name, repetitions) for name in self.catalog.names())
        logger.debug(f"Full catalog run: {result.to_dict()}")
        return result

    # -------------------------------------------------------------------------
    # RUN / TICK
    # -------------------------------------------------------------------------

    def run(self, prediction, state: SimulationState) -> int:
        """
        One repetition of an action.

        Tick count is computed once at the start from the current stats.
        Mana dropping below zero on any tick is recorded on the state, even
        if a segment effect later refunds it.
        Returns the number of ticks actually performed.
        """
        ticks = prediction.update_ticks(state.stats, self.host)

        performed = 0
        for _ in range(ticks):
            state.resources.mana -= 1
            if state.resources.mana < 0:
                state.mana_ran_out = True
            performed += 1
            if not self.tick(prediction, state):
                break

        return performed

    def tick(self, prediction, state: SimulationState) -> bool:
        """
        Perform one tick of an action.

        Returns whether another tick can occur.
        """
        prediction.exp(state.stats, self.host)

        loop = prediction.loop
        if loop is None:
            return True

        progression = state.progress[prediction.name]
        action = prediction.action
        context = LoopContext(
            progression=progression,
            action=action,
            stats=state.stats,
            resources=state.resources,
            host=self.host,
        )
        loop_cost = partial(loop.cost, context)
        tick_progress = partial(loop.tick, context)

        total_segments = action.segments
        max_segments = loop.max(action, self.host) * total_segments if loop.max else math.inf

        # Current segment before the tick
        segment = 0
        progress = progression.progress
        while progress >= loop_cost(segment):
            progress -= loop_cost(segment)
            segment += 1

        additional_progress = tick_progress(segment) * prediction.mana_per_tick()

        progress += additional_progress
        progression.progress += additional_progress

        # Segments cleared by the tick
        while progress >= loop_cost(segment) and segment < max_segments:
            if segment >= total_segments - 1:
                progression.progress = 0
                progression.completed += total_segments
                progression.total += 1
                segment -= total_segments

                if loop.loop_effect:
                    loop.loop_effect(state.resources, self.host)

            if loop.segment_effect:
                loop.segment_effect(state.resources, self.host)

            # Cost is taken after the wrap, against the updated progression
            progress -= loop_cost(segment)
            segment += 1

        return bool(additional_progress) and segment < max_segments


# =============================================================================
# ENTRY POINTS
# =============================================================================

def simulate(action_list: Iterable[Any], catalog: ActionCatalog, host=None,
             seed: Optional[Mapping[str, float]] = None) -> SimulationResult:
    """Predict an action list with a fresh engine and state."""
    return SimulationEngine(catalog, host, seed).simulate(action_list)


def new_simulation(host, seed: Optional[Mapping[str, float]] = None) -> SimulationEngine:
    """Create an engine over the stock action library for a host."""
    return SimulationEngine(build_catalog(host), host, seed)


# =============================================================================
# MAIN ENTRY (for testing)
# =============================================================================

if __name__ == "__main__":
    from pathlib import Path
    from host import create_host

    logging.basicConfig(level=logging.INFO)

    snapshot = Path(__file__).parent / 'data' / 'host_snapshot.json'
    engine = new_simulation(create_host('file', path=snapshot))

    plan = [('Wander', 2), ('Smash Pots', 5), ('Buy Glasses', 1), ('Heal The Sick', 1)]
    result = engine.simulate(plan)

    for snapshot_row in result.snapshots:
        print(f"{snapshot_row.name} x{snapshot_row.repeat_count}: "
              f"mana={snapshot_row.resources['mana']:.0f} valid={snapshot_row.is_valid}")
    print(f"Total mana: {result.total_mana:.0f}")
