"""
lifesim/types_state.py - Cell, Organism and Pair Dataclasses

Mutable per-node cell arrays owned by the engine, plus the immutable views
published to consumers (CellState, Organism, Pair).
"""

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

Point3 = Tuple[float, float, float]
Color = Tuple[float, float, float]  # RGB in [0, 1]


# =============================================================================
# CELL STATE
# =============================================================================

@dataclass(frozen=True)
class CellState:
    """Read-only view of one node's automaton state."""
    node_id: int
    alive: bool
    age: int
    previous_alive: bool
    stability_counter: int


@dataclass
class CellGrid:
    """Struct-of-arrays cell storage, one slot per topology node.

    Invariant: age[i] == 0 wherever alive[i] is False.
    """
    alive: NDArray[np.bool_]
    age: NDArray[np.int64]
    previous_alive: NDArray[np.bool_]
    stability: NDArray[np.int64]

    @classmethod
    def empty(cls, n_nodes: int) -> "CellGrid":
        return cls(
            alive=np.zeros(n_nodes, dtype=bool),
            age=np.zeros(n_nodes, dtype=np.int64),
            previous_alive=np.zeros(n_nodes, dtype=bool),
            stability=np.zeros(n_nodes, dtype=np.int64),
        )

    def __len__(self) -> int:
        return len(self.alive)

    def reset(self) -> None:
        """Every cell dead, age 0, stability 0."""
        self.alive[:] = False
        self.age[:] = 0
        self.previous_alive[:] = False
        self.stability[:] = 0

    def copy(self) -> "CellGrid":
        return CellGrid(
            alive=self.alive.copy(),
            age=self.age.copy(),
            previous_alive=self.previous_alive.copy(),
            stability=self.stability.copy(),
        )

    def cell(self, node_id: int) -> CellState:
        return CellState(
            node_id=node_id,
            alive=bool(self.alive[node_id]),
            age=int(self.age[node_id]),
            previous_alive=bool(self.previous_alive[node_id]),
            stability_counter=int(self.stability[node_id]),
        )

    @property
    def population(self) -> int:
        return int(np.count_nonzero(self.alive))


# =============================================================================
# ORGANISMS AND PAIRS
# =============================================================================

@dataclass(frozen=True)
class Organism:
    """Maximal connected set of alive nodes from one tracker pass.

    The id is the discovery index within that pass and is NOT stable
    across passes.
    """
    organism_id: int
    members: Tuple[int, ...]
    age: int  # Youngest member's age
    centroid: Point3  # Unweighted mean of member positions, not re-projected
    qualified: bool  # age >= min_age and size >= min_size
    is_stable: bool  # age >= min_age
    color: Color = field(default=(1.0, 1.0, 1.0), compare=False)

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class Pair:
    """Two qualified organisms whose centroids are antipodal within tolerance."""
    pair_id: int
    organism_a: Organism
    organism_b: Organism
    angle: float  # Degrees between centroid directions
    hue: float  # Degrees
    color: Color = field(compare=False)

    @property
    def organism_ids(self) -> Tuple[int, int]:
        return (self.organism_a.organism_id, self.organism_b.organism_id)
