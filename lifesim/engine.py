"""
lifesim/engine.py - Automaton Engine

Probabilistic Game-of-Life generalization over an irregular topology.

Each tick is a pure function of the pre-tick snapshot:
  1. Count alive neighbors per node (0..degree).
  2. Alive cells survive inside [survival_min, survival_max], optionally gated
     by a fresh uniform draw. Survivors then face sudden death, then age death
     (only at age >= threshold, p = 1 - exp(-rate * (age - threshold))).
  3. Dead cells are born inside [birth_min, birth_max], gated the same way.
  4. Commit flags, age (births start at 1) and stability counters.

Rule ranges are applied without validation; min > max never fires.
"""

from typing import Dict, List, Optional

import numpy as np
from numpy.typing import NDArray

from receipts import emit_receipt

from .constants import TENANT_ID, DEFAULT_TICK_SPEED, DEFAULT_DENSITY, DEFAULT_SEED_PATTERN
from .rules import DeathRule, NeighborRule, default_birth_rule, default_survival_rule
from .seeding import apply_seed, resolve_pattern
from .topology import Topology
from .types_state import CellGrid, CellState


class AutomatonEngine:
    """Owns and advances per-node alive/age/stability state."""

    def __init__(
        self,
        topology: Topology,
        survival: Optional[NeighborRule] = None,
        birth: Optional[NeighborRule] = None,
        death: Optional[DeathRule] = None,
        tick_speed: float = DEFAULT_TICK_SPEED,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.topology = topology
        self.survival = survival if survival is not None else default_survival_rule()
        self.birth = birth if birth is not None else default_birth_rule()
        self.death = death if death is not None else DeathRule()
        self.tick_speed = tick_speed
        self.paused = False
        self.rng = rng if rng is not None else np.random.default_rng()

        self._cells = CellGrid.empty(len(topology))
        self._tick_count = 0
        self._time_since_last_tick = 0.0

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def initialize(self, pattern: str = DEFAULT_SEED_PATTERN, density: float = DEFAULT_DENSITY) -> dict:
        """
        Reset every cell and apply exactly one seeding strategy.

        Args:
            pattern: 'random', 'cluster' or 'ring' (unknown names fall back to random)
            density: Alive probability for the random pattern

        Returns:
            seed receipt
        """
        seed_pattern = resolve_pattern(pattern)
        density = float(density)
        self._cells.reset()
        apply_seed(seed_pattern, self._cells, self.topology, self.rng, density)
        self._tick_count = 0
        self._time_since_last_tick = 0.0

        return emit_receipt("seed", {
            "tenant_id": TENANT_ID,
            "pattern": seed_pattern.value,
            "density": density,
            "alive": self._cells.population,
            "total": len(self._cells),
        })

    def update(self, elapsed: float) -> Optional[dict]:
        """
        Advance wall-clock time; fire at most one tick.

        The accumulator resets to 0 after a tick, so long frames never
        trigger catch-up ticks. Paused engines do not accumulate.

        Returns:
            tick receipt if a tick fired, else None
        """
        if self.paused:
            return None

        self._time_since_last_tick += elapsed
        if self._time_since_last_tick >= self.tick_speed:
            receipt = self.tick()
            self._time_since_last_tick = 0.0
            return receipt
        return None

    def tick(self) -> dict:
        """One synchronous state transition over every node."""
        cells = self._cells
        n_nodes = len(cells)
        alive = cells.alive
        age = cells.age
        counts = self.count_alive_neighbors(alive)

        survive = alive & self.survival.in_range(counts)
        if self.survival.probability_enabled:
            survive &= self.survival.gate(self.rng.random(n_nodes))

        sudden = np.zeros(n_nodes, dtype=bool)
        if self.death.sudden_death_enabled:
            sudden = survive & (self.rng.random(n_nodes) < self.death.sudden_death_probability)
            survive &= ~sudden

        aged = np.zeros(n_nodes, dtype=bool)
        if self.death.age_death_enabled:
            eligible = survive & (age >= self.death.age_death_threshold)
            p_death = self.death.age_death_probability(age)
            aged = eligible & (self.rng.random(n_nodes) < p_death)
            survive &= ~aged

        born = ~alive & self.birth.in_range(counts)
        if self.birth.probability_enabled:
            born &= self.birth.gate(self.rng.random(n_nodes))

        next_alive = survive | born

        # Commit
        previous = alive.copy()
        cells.previous_alive[:] = previous
        cells.alive[:] = next_alive
        unchanged = next_alive & previous
        cells.stability[:] = np.where(unchanged, cells.stability + 1, 0)
        cells.age[:] = np.where(next_alive, age + 1, 0)

        self._tick_count += 1

        return emit_receipt("tick", {
            "tenant_id": TENANT_ID,
            "tick": self._tick_count,
            "births": int(np.count_nonzero(born)),
            "deaths": int(np.count_nonzero(previous & ~next_alive)),
            "sudden_deaths": int(np.count_nonzero(sudden)),
            "age_deaths": int(np.count_nonzero(aged)),
            "population": int(np.count_nonzero(next_alive)),
        })

    def count_alive_neighbors(self, alive: Optional[NDArray[np.bool_]] = None) -> NDArray[np.int64]:
        """Alive neighbor count per node, via the padded adjacency table."""
        if alive is None:
            alive = self._cells.alive
        table = self.topology.neighbor_table
        mask = self.topology.neighbor_mask
        return np.count_nonzero(alive[table] & mask, axis=1).astype(np.int64)

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    def cells(self) -> List[CellState]:
        return [self._cells.cell(i) for i in range(len(self._cells))]

    def cell(self, node_id: int) -> CellState:
        return self._cells.cell(node_id)

    @property
    def grid(self) -> CellGrid:
        """Copy of the raw cell arrays."""
        return self._cells.copy()

    @property
    def alive(self) -> NDArray[np.bool_]:
        view = self._cells.alive.view()
        view.setflags(write=False)
        return view

    @property
    def ages(self) -> NDArray[np.int64]:
        view = self._cells.age.view()
        view.setflags(write=False)
        return view

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def population(self) -> int:
        return self._cells.population

    def load_grid(self, cells: CellGrid, tick_count: int = 0) -> None:
        """
        Replace cell state wholesale (e.g. restoring a saved snapshot in tests).

        Dead cells are forced to age 0 so the invariant always holds.
        """
        if len(cells) != len(self._cells):
            raise ValueError(f"Grid has {len(cells)} cells, topology has {len(self._cells)} nodes")
        restored = cells.copy()
        restored.age[:] = np.where(restored.alive, restored.age, 0)
        restored.stability[:] = np.where(restored.alive, restored.stability, 0)
        self._cells = restored
        self._tick_count = tick_count

    # =========================================================================
    # SETTERS / GETTERS
    # =========================================================================

    def set_paused(self, paused: bool) -> None:
        self.paused = paused

    def set_tick_speed(self, seconds: float) -> None:
        self.tick_speed = seconds

    def set_survival(
        self,
        min_neighbors: Optional[int] = None,
        max_neighbors: Optional[int] = None,
        probability_enabled: Optional[bool] = None,
        probability: Optional[float] = None,
    ) -> None:
        _update_neighbor_rule(self.survival, min_neighbors, max_neighbors, probability_enabled, probability)

    def set_birth(
        self,
        min_neighbors: Optional[int] = None,
        max_neighbors: Optional[int] = None,
        probability_enabled: Optional[bool] = None,
        probability: Optional[float] = None,
    ) -> None:
        _update_neighbor_rule(self.birth, min_neighbors, max_neighbors, probability_enabled, probability)

    def set_age_death(
        self,
        enabled: Optional[bool] = None,
        threshold: Optional[int] = None,
        rate: Optional[float] = None,
    ) -> None:
        if enabled is not None:
            self.death.age_death_enabled = enabled
        if threshold is not None:
            self.death.age_death_threshold = threshold
        if rate is not None:
            self.death.age_death_rate = rate

    def set_sudden_death(self, enabled: Optional[bool] = None, probability: Optional[float] = None) -> None:
        if enabled is not None:
            self.death.sudden_death_enabled = enabled
        if probability is not None:
            self.death.sudden_death_probability = probability

    def get_survival_rules(self) -> Dict[str, object]:
        return _neighbor_rule_dict(self.survival)

    def get_birth_rules(self) -> Dict[str, object]:
        return _neighbor_rule_dict(self.birth)

    def get_death_rules(self) -> Dict[str, object]:
        return {
            "age_death_enabled": self.death.age_death_enabled,
            "age_death_rate": self.death.age_death_rate,
            "age_death_threshold": self.death.age_death_threshold,
            "sudden_death_enabled": self.death.sudden_death_enabled,
            "sudden_death_probability": self.death.sudden_death_probability,
        }


def _update_neighbor_rule(
    rule: NeighborRule,
    min_neighbors: Optional[int],
    max_neighbors: Optional[int],
    probability_enabled: Optional[bool],
    probability: Optional[float],
) -> None:
    if min_neighbors is not None:
        rule.min_neighbors = min_neighbors
    if max_neighbors is not None:
        rule.max_neighbors = max_neighbors
    if probability_enabled is not None:
        rule.probability_enabled = probability_enabled
    if probability is not None:
        rule.probability = probability


def _neighbor_rule_dict(rule: NeighborRule) -> Dict[str, object]:
    return {
        "min_neighbors": rule.min_neighbors,
        "max_neighbors": rule.max_neighbors,
        "probability_enabled": rule.probability_enabled,
        "probability": rule.probability,
    }
