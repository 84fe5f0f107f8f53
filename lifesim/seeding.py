"""
lifesim/seeding.py - Initial Seed Patterns

Each strategy writes alive flags into a freshly reset CellGrid. Geometry
(cluster count, ring band, polar axis) is policy, passed in by the caller.
"""

import warnings

import numpy as np

from .constants import CLUSTER_COUNT, RING_BAND, POLAR_AXIS, SeedPattern
from .topology import Topology
from .types_state import CellGrid


def resolve_pattern(pattern: str) -> SeedPattern:
    """
    Map a pattern name to a SeedPattern.

    Unknown names self-heal to RANDOM with a warning.
    """
    if isinstance(pattern, SeedPattern):
        return pattern
    try:
        return SeedPattern(str(pattern).lower())
    except ValueError:
        warnings.warn(
            f"Unknown seed pattern '{pattern}', using '{SeedPattern.RANDOM.value}'",
            UserWarning,
            stacklevel=3
        )
        return SeedPattern.RANDOM


def seed_random(cells: CellGrid, rng: np.random.Generator, density: float) -> None:
    """Each cell independently alive with probability density."""
    cells.alive[:] = rng.random(len(cells)) < density


def seed_cluster(
    cells: CellGrid,
    topology: Topology,
    rng: np.random.Generator,
    count: int = CLUSTER_COUNT,
) -> None:
    """Pick count random seed nodes; each seed and its direct neighbors become alive.

    Seeds are drawn with replacement, so overlapping clusters merge.
    """
    if len(cells) == 0:
        return
    for center in rng.integers(0, len(cells), size=count):
        cells.alive[center] = True
        cells.alive[list(topology.neighbors(int(center)))] = True


def seed_ring(
    cells: CellGrid,
    topology: Topology,
    band: float = RING_BAND,
    axis: int = POLAR_AXIS,
) -> None:
    """Alive iff the node lies within band * radius of the equatorial plane."""
    height = np.abs(topology.positions[:, axis])
    cells.alive[:] = height < topology.radius * band


def apply_seed(
    pattern: SeedPattern,
    cells: CellGrid,
    topology: Topology,
    rng: np.random.Generator,
    density: float,
) -> None:
    """Dispatch to exactly one seeding strategy."""
    if pattern is SeedPattern.CLUSTER:
        seed_cluster(cells, topology, rng)
    elif pattern is SeedPattern.RING:
        seed_ring(cells, topology)
    else:
        seed_random(cells, rng, density)
