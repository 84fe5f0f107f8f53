"""
lifesim/topology.py - Fixed Node Topology and Provider Contract

A Topology is the immutable node set the automaton runs on: one 3D position
and a symmetric neighbor list (5 or 6 ids) per node. Mesh generation lives
outside this package; providers hand in finished topologies and rebuild them
on regenerate().

Adjacency is an integer table built once per topology. Contract violations
fail fast with a TopologyError after emitting an anomaly receipt.
"""

from typing import Any, Callable, Dict, Hashable, Mapping, Optional, Protocol, Sequence, Tuple

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from receipts import emit_receipt, StopRule

from .constants import (
    TENANT_ID,
    MIN_DEGREE,
    MAX_DEGREE,
    DEFAULT_RADIUS,
    DEFAULT_SUBDIVISIONS,
)
from .types_state import Point3

DegreeBounds = Optional[Tuple[int, int]]


# =============================================================================
# STOPRULE
# =============================================================================

class TopologyError(StopRule):
    """Topology provider contract violation."""
    pass


def stoprule_topology(classification: str, message: str, **details: Any) -> None:
    """Emit an anomaly receipt and halt on a topology contract violation."""
    emit_receipt("anomaly", {
        "tenant_id": TENANT_ID,
        "metric": "topology",
        "classification": classification,
        "action": "halt",
        **details
    })
    raise TopologyError(message)


def validate_adjacency(
    n_nodes: int,
    neighbors: Sequence[Sequence[int]],
    degree_bounds: DegreeBounds = (MIN_DEGREE, MAX_DEGREE),
) -> None:
    """
    Check the neighbor lists against the provider contract.

    Args:
        n_nodes: Number of nodes (ids are 0..n_nodes-1)
        neighbors: Neighbor id list per node
        degree_bounds: Inclusive (min, max) degree, or None to skip the check

    Raises:
        TopologyError: On the first violation found
    """
    if len(neighbors) != n_nodes:
        stoprule_topology(
            "node_count_mismatch",
            f"Expected {n_nodes} neighbor lists, got {len(neighbors)}",
            expected=n_nodes, actual=len(neighbors)
        )

    neighbor_sets = []
    for node_id, node_neighbors in enumerate(neighbors):
        seen = set()
        for other in node_neighbors:
            if not 0 <= other < n_nodes:
                stoprule_topology(
                    "unknown_neighbor",
                    f"Node {node_id} lists neighbor {other}, outside 0..{n_nodes - 1}",
                    node_id=node_id, neighbor_id=int(other)
                )
            if other == node_id:
                stoprule_topology(
                    "self_loop",
                    f"Node {node_id} lists itself as a neighbor",
                    node_id=node_id
                )
            if other in seen:
                stoprule_topology(
                    "duplicate_neighbor",
                    f"Node {node_id} lists neighbor {other} twice",
                    node_id=node_id, neighbor_id=int(other)
                )
            seen.add(other)

        if degree_bounds is not None:
            lo, hi = degree_bounds
            if not lo <= len(seen) <= hi:
                stoprule_topology(
                    "degree_out_of_bounds",
                    f"Node {node_id} has {len(seen)} neighbors, expected {lo}..{hi}",
                    node_id=node_id, degree=len(seen)
                )
        neighbor_sets.append(seen)

    for node_id, seen in enumerate(neighbor_sets):
        for other in seen:
            if node_id not in neighbor_sets[other]:
                stoprule_topology(
                    "asymmetric_adjacency",
                    f"Node {node_id} neighbors {other} but not the reverse",
                    node_id=node_id, neighbor_id=int(other)
                )


# =============================================================================
# TOPOLOGY
# =============================================================================

class Topology:
    """Immutable node positions plus symmetric integer adjacency."""

    def __init__(
        self,
        positions: Any,
        neighbors: Sequence[Sequence[int]],
        radius: float = DEFAULT_RADIUS,
        subdivisions: int = DEFAULT_SUBDIVISIONS,
        degree_bounds: DegreeBounds = (MIN_DEGREE, MAX_DEGREE),
    ) -> None:
        points = np.array(positions, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            stoprule_topology(
                "bad_positions",
                f"Positions must have shape (N, 3), got {points.shape}",
                shape=list(points.shape)
            )
        n_nodes = points.shape[0]
        adjacency = tuple(tuple(int(i) for i in node_neighbors) for node_neighbors in neighbors)
        validate_adjacency(n_nodes, adjacency, degree_bounds)

        points.setflags(write=False)
        self._positions = points
        self._neighbors = adjacency
        self.radius = float(radius)
        self.subdivisions = int(subdivisions)
        self._table, self._mask = _build_neighbor_table(adjacency)

    def __len__(self) -> int:
        return len(self._neighbors)

    def __repr__(self) -> str:
        return f"Topology(nodes={len(self)}, radius={self.radius}, subdivisions={self.subdivisions})"

    def node_count(self) -> int:
        return len(self._neighbors)

    def position(self, node_id: int) -> Point3:
        x, y, z = self._positions[node_id]
        return (float(x), float(y), float(z))

    def neighbors(self, node_id: int) -> Tuple[int, ...]:
        return self._neighbors[node_id]

    @property
    def positions(self) -> NDArray[np.float64]:
        """(N, 3) read-only position array."""
        return self._positions

    @property
    def neighbor_table(self) -> NDArray[np.int64]:
        """(N, max_degree) neighbor ids, padded with 0 where neighbor_mask is False."""
        return self._table

    @property
    def neighbor_mask(self) -> NDArray[np.bool_]:
        return self._mask

    def to_graph(self) -> nx.Graph:
        """Undirected networkx graph with a 'position' attribute per node."""
        graph = nx.Graph()
        for node_id in range(len(self)):
            graph.add_node(node_id, position=self.position(node_id))
        for node_id, node_neighbors in enumerate(self._neighbors):
            graph.add_edges_from((node_id, other) for other in node_neighbors if other > node_id)
        return graph

    @classmethod
    def from_graph(
        cls,
        graph: nx.Graph,
        positions: Optional[Mapping[Hashable, Sequence[float]]] = None,
        radius: float = DEFAULT_RADIUS,
        subdivisions: int = DEFAULT_SUBDIVISIONS,
        degree_bounds: DegreeBounds = (MIN_DEGREE, MAX_DEGREE),
    ) -> "Topology":
        """
        Build a topology from an undirected networkx graph.

        Node labels are mapped to ids 0..N-1 in sorted label order.

        Args:
            graph: Undirected adjacency
            positions: Label -> (x, y, z); defaults to each node's 'position' attribute
            radius: Sphere radius the positions live on
            subdivisions: Subdivision level the mesh was generated with
            degree_bounds: Inclusive degree bounds, None to skip the check

        Returns:
            Validated Topology
        """
        labels = sorted(graph.nodes)
        index: Dict[Hashable, int] = {label: i for i, label in enumerate(labels)}

        if positions is None:
            missing = [label for label in labels if "position" not in graph.nodes[label]]
            if missing:
                stoprule_topology(
                    "missing_position",
                    f"{len(missing)} graph nodes have no 'position' attribute",
                    missing=len(missing)
                )
            points = [graph.nodes[label]["position"] for label in labels]
        else:
            points = [positions[label] for label in labels]

        neighbors = [sorted(index[other] for other in graph.neighbors(label)) for label in labels]
        return cls(points, neighbors, radius, subdivisions, degree_bounds)


def _build_neighbor_table(
    neighbors: Sequence[Sequence[int]],
) -> Tuple[NDArray[np.int64], NDArray[np.bool_]]:
    n_nodes = len(neighbors)
    width = max((len(n) for n in neighbors), default=0)
    table = np.zeros((n_nodes, width), dtype=np.int64)
    mask = np.zeros((n_nodes, width), dtype=bool)
    for node_id, node_neighbors in enumerate(neighbors):
        table[node_id, :len(node_neighbors)] = node_neighbors
        mask[node_id, :len(node_neighbors)] = True
    table.setflags(write=False)
    mask.setflags(write=False)
    return table, mask


# =============================================================================
# PROVIDERS
# =============================================================================

class TopologyProvider(Protocol):
    """External geometry collaborator."""

    def topology(self) -> Topology:
        ...

    def regenerate(self, radius: float, subdivisions: int) -> Topology:
        ...


class CallableTopologyProvider:
    """Provider backed by a builder callable (radius, subdivisions) -> Topology.

    regenerate() invalidates every node id handed out before; the caller must
    reset engine, tracker and resolver state afterwards.
    """

    def __init__(
        self,
        builder: Callable[[float, int], Topology],
        radius: float = DEFAULT_RADIUS,
        subdivisions: int = DEFAULT_SUBDIVISIONS,
    ) -> None:
        self._builder = builder
        self.radius = radius
        self.subdivisions = subdivisions
        self._topology = builder(radius, subdivisions)

    def topology(self) -> Topology:
        return self._topology

    def regenerate(self, radius: float, subdivisions: int) -> Topology:
        """Build the new mesh; on failure the provider keeps its previous state."""
        topology = self._builder(radius, subdivisions)
        self.radius = radius
        self.subdivisions = subdivisions
        self._topology = topology
        return topology
