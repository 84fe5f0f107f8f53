"""
lifesim - Life Projection Simulation Package

Public API: automaton engine, organism tracker, pairing resolver and the
simulation driver that runs them over a fixed sphere topology.
"""

# =============================================================================
# TYPES (Dataclasses)
# =============================================================================
from .types_config import (
    LifeConfig,
    SCENARIO_BASELINE,
    SCENARIO_CLASSIC,
    SCENARIO_STOCHASTIC,
    SCENARIO_MORTAL,
    SCENARIO_CLUSTER,
    SCENARIO_RING,
    MANDATORY_SCENARIOS,
)
from .types_state import CellGrid, CellState, Organism, Pair
from .types_result import SimResult
from .rules import NeighborRule, DeathRule

# =============================================================================
# CONSTANTS
# =============================================================================
from .constants import (
    SeedPattern,
    RECEIPT_SCHEMA,
    TENANT_ID,
    GOLDEN_ANGLE,
)

# =============================================================================
# TOPOLOGY
# =============================================================================
from .topology import (
    Topology,
    TopologyError,
    TopologyProvider,
    CallableTopologyProvider,
    validate_adjacency,
)

# =============================================================================
# CORE SIMULATION
# =============================================================================
from .engine import AutomatonEngine
from .organisms import OrganismTracker, find_components, organism_color
from .pairing import PairingResolver, angle_between, is_opposite, pair_hue, pair_color
from .cycle import Simulation, run_simulation, run_multiverse

# =============================================================================
# STATISTICS
# =============================================================================
from .stats import (
    population_stats,
    age_tiers,
    describe_neighbor_rule,
    describe_death_rules,
    describe_rules,
)

__all__ = [
    # Types
    "LifeConfig",
    "SCENARIO_BASELINE",
    "SCENARIO_CLASSIC",
    "SCENARIO_STOCHASTIC",
    "SCENARIO_MORTAL",
    "SCENARIO_CLUSTER",
    "SCENARIO_RING",
    "MANDATORY_SCENARIOS",
    "CellGrid",
    "CellState",
    "Organism",
    "Pair",
    "SimResult",
    "NeighborRule",
    "DeathRule",
    # Constants
    "SeedPattern",
    "RECEIPT_SCHEMA",
    "TENANT_ID",
    "GOLDEN_ANGLE",
    # Topology
    "Topology",
    "TopologyError",
    "TopologyProvider",
    "CallableTopologyProvider",
    "validate_adjacency",
    # Core
    "AutomatonEngine",
    "OrganismTracker",
    "find_components",
    "organism_color",
    "PairingResolver",
    "angle_between",
    "is_opposite",
    "pair_hue",
    "pair_color",
    "Simulation",
    "run_simulation",
    "run_multiverse",
    # Statistics
    "population_stats",
    "age_tiers",
    "describe_neighbor_rule",
    "describe_death_rules",
    "describe_rules",
]
