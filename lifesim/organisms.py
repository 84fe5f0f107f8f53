"""
lifesim/organisms.py - Organism Tracker

Partitions the alive node set into maximal connected components.

Passes are throttled by the engine's tick counter (every update_frequency
ticks), never by wall-clock time. Each pass is a fresh snapshot: organisms
are rebuilt wholesale and ids are discovery indices, so they are not stable
across passes. Nodes are scanned in ascending id order, so an organism's
position in the list follows its smallest member id.
"""

import colorsys
from typing import List, Optional

import numpy as np

from receipts import emit_receipt

from .constants import (
    TENANT_ID,
    DEFAULT_MIN_AGE,
    DEFAULT_MIN_SIZE,
    DEFAULT_UPDATE_FREQUENCY,
    GOLDEN_ANGLE,
    ORGANISM_SATURATION,
    ORGANISM_LIGHTNESS,
)
from .engine import AutomatonEngine
from .pairing import PairingResolver
from .topology import Topology
from .types_state import Color, Organism


def organism_color(index: int) -> Color:
    """Golden-angle hue spread, HSL(hue, 0.8, 0.6) as RGB."""
    hue = (index * GOLDEN_ANGLE) % 360
    return colorsys.hls_to_rgb(hue / 360, ORGANISM_LIGHTNESS, ORGANISM_SATURATION)


def find_components(alive: np.ndarray, topology: Topology) -> List[List[int]]:
    """
    Flood-fill the alive subgraph.

    Every node is visited at most once across the whole pass; edges are only
    followed into alive endpoints.

    Args:
        alive: Per-node alive flags
        topology: Adjacency source

    Returns:
        Member lists (ascending ids) in discovery order
    """
    visited = np.zeros(len(alive), dtype=bool)
    components = []

    for start in np.flatnonzero(alive):
        if visited[start]:
            continue
        visited[start] = True
        stack = [int(start)]
        members = []
        while stack:
            node_id = stack.pop()
            members.append(node_id)
            for other in topology.neighbors(node_id):
                if alive[other] and not visited[other]:
                    visited[other] = True
                    stack.append(other)
        members.sort()
        components.append(members)

    return components


class OrganismTracker:
    """Throttled connected-component labelling over the engine's alive set."""

    def __init__(
        self,
        engine: AutomatonEngine,
        resolver: Optional[PairingResolver] = None,
        min_age: int = DEFAULT_MIN_AGE,
        min_size: int = DEFAULT_MIN_SIZE,
        update_frequency: int = DEFAULT_UPDATE_FREQUENCY,
    ) -> None:
        self.engine = engine
        self.resolver = resolver
        self.min_age = min_age
        self.min_size = min_size
        self.update_frequency = update_frequency

        self._organisms: List[Organism] = []
        self.last_update_tick = 0

    def update(self, elapsed: float = 0.0) -> List[dict]:
        """
        Run a detection pass (and the resolver after it) when due.

        elapsed is accepted for the per-frame call signature; cadence is
        decided purely by ticks.

        Returns:
            Receipts from this call, empty when the throttle did not fire
        """
        current_tick = self.engine.tick_count
        if current_tick < self.last_update_tick:
            # Engine was re-initialized underneath us
            self.last_update_tick = 0
        if current_tick - self.last_update_tick < self.update_frequency:
            return []

        receipts = [self.detect()]
        if self.resolver is not None:
            receipts.append(self.resolver.resolve(self._organisms, tick=current_tick))
        self.last_update_tick = current_tick
        return receipts

    def detect(self) -> dict:
        """Rebuild the organism list from the engine's current alive set."""
        topology = self.engine.topology
        alive = self.engine.alive
        ages = self.engine.ages
        positions = topology.positions

        organisms = []
        for members in find_components(alive, topology):
            index = len(organisms)
            age = int(ages[members].min())
            centroid = positions[members].mean(axis=0)
            organisms.append(Organism(
                organism_id=index,
                members=tuple(members),
                age=age,
                centroid=(float(centroid[0]), float(centroid[1]), float(centroid[2])),
                qualified=age >= self.min_age and len(members) >= self.min_size,
                is_stable=age >= self.min_age,
                color=organism_color(index),
            ))
        self._organisms = organisms

        return emit_receipt("organism_scan", {
            "tenant_id": TENANT_ID,
            "tick": self.engine.tick_count,
            "organisms": len(organisms),
            "qualified": sum(1 for o in organisms if o.qualified),
            "largest": max((o.size for o in organisms), default=0),
        })

    def organisms(self) -> List[Organism]:
        return list(self._organisms)

    def qualified(self) -> List[Organism]:
        return [o for o in self._organisms if o.qualified]

    def set_min_age(self, age: int) -> None:
        self.min_age = age

    def set_min_size(self, size: int) -> None:
        self.min_size = size

    def set_update_frequency(self, ticks: int) -> None:
        self.update_frequency = ticks

    def reset(self) -> None:
        """Drop all organisms and restart the cadence (after reseed/regenerate)."""
        self._organisms = []
        self.last_update_tick = 0
        if self.resolver is not None:
            self.resolver.reset()
