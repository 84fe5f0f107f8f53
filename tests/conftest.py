"""
Shared topology fixtures.

  - torus: 6-regular triangular lattice wrapped on a torus (hexagon-like tiles)
  - icosahedron: 12 vertices, 5 neighbors each (pentagon-like tiles), on a sphere
  - wheel: 1 center + 6 spokes connected to the center only (degree check off)
"""

import math

import networkx as nx
import numpy as np
import pytest

from lifesim import CallableTopologyProvider, CellGrid, Topology

PHI = (1 + math.sqrt(5)) / 2


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------

def torus_graph(rows: int, cols: int) -> nx.Graph:
    """Triangular lattice on a torus; node (r, c), every node has degree 6."""
    graph = nx.Graph()
    for r in range(rows):
        for c in range(cols):
            graph.add_node((r, c), position=(
                math.cos(2 * math.pi * c / cols) * (2 + math.cos(2 * math.pi * r / rows)),
                math.sin(2 * math.pi * r / rows),
                math.sin(2 * math.pi * c / cols) * (2 + math.cos(2 * math.pi * r / rows)),
            ))
    for r in range(rows):
        for c in range(cols):
            for dr, dc in ((0, 1), (1, 0), (1, -1)):
                graph.add_edge((r, c), ((r + dr) % rows, (c + dc) % cols))
    return graph


def build_torus(radius: float = 1.0, subdivisions: int = 2) -> Topology:
    rows = 4 + subdivisions
    cols = 6 + subdivisions
    return Topology.from_graph(torus_graph(rows, cols), radius=radius, subdivisions=subdivisions)


def icosahedron_points(radius: float = 1.0) -> np.ndarray:
    points = []
    for a in (-1, 1):
        for b in (-PHI, PHI):
            points.append((0, a, b))
            points.append((a, b, 0))
            points.append((b, 0, a))
    points = np.array(points, dtype=float)
    return points / np.linalg.norm(points, axis=1)[:, None] * radius


def build_icosahedron(radius: float = 1.0, subdivisions: int = 0) -> Topology:
    points = icosahedron_points(radius)
    dists = np.linalg.norm(points[:, None, :] - points[None, :, :], axis=2)
    edge = dists[dists > 1e-9].min()
    neighbors = [
        [j for j in range(len(points)) if j != i and abs(dists[i, j] - edge) < 1e-6]
        for i in range(len(points))
    ]
    return Topology(points, neighbors, radius=radius, subdivisions=subdivisions)


def build_wheel() -> Topology:
    positions = [(0.0, 0.0, 1.0)] + [
        (math.cos(k * math.pi / 3), math.sin(k * math.pi / 3), 0.0) for k in range(6)
    ]
    neighbors = [[1, 2, 3, 4, 5, 6]] + [[0] for _ in range(6)]
    return Topology(positions, neighbors, radius=1.0, degree_bounds=None)


def grid_with(n_nodes: int, alive=(), ages=None) -> CellGrid:
    """CellGrid with the given nodes alive (age 1 unless ages maps node -> age)."""
    grid = CellGrid.empty(n_nodes)
    for node_id in alive:
        grid.alive[node_id] = True
        grid.age[node_id] = 1
    for node_id, age in (ages or {}).items():
        grid.age[node_id] = age
    return grid


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def torus():
    return build_torus()


@pytest.fixture
def icosahedron():
    return build_icosahedron()


@pytest.fixture
def wheel():
    return build_wheel()


@pytest.fixture
def torus_provider():
    return CallableTopologyProvider(build_torus, radius=1.0, subdivisions=2)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
