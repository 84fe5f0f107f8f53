"""
lifesim/constants.py - Simulation Constants

Defaults for the automaton, tracker, resolver and seeding policy.
Centralized for tuning. Pure data, no behavior.
"""

from enum import Enum

# =============================================================================
# RECEIPTS
# =============================================================================

TENANT_ID = "life-projection"

RECEIPT_SCHEMA = [
    "seed",
    "tick",
    "organism_scan",
    "pairing",
    "regenerate",
    "anomaly",
    "sim_complete",
]

RECEIPT_LEDGER_LIMIT = 10000  # Bounded in-memory ledger per Simulation


# =============================================================================
# TOPOLOGY CONTRACT
# =============================================================================

MIN_DEGREE = 5  # Pentagon tiles
MAX_DEGREE = 6  # Hexagon tiles
DEFAULT_RADIUS = 100.0
DEFAULT_SUBDIVISIONS = 4


# =============================================================================
# AUTOMATON DEFAULTS
# =============================================================================

DEFAULT_TICK_SPEED = 1.0  # Seconds between ticks

# Hex-adapted rules: survival 2-4, birth 2-3
DEFAULT_SURVIVAL_MIN = 2
DEFAULT_SURVIVAL_MAX = 4
DEFAULT_BIRTH_MIN = 2
DEFAULT_BIRTH_MAX = 3
DEFAULT_RULE_PROBABILITY = 1.0

DEFAULT_AGE_DEATH_THRESHOLD = 100
DEFAULT_AGE_DEATH_RATE = 0.01  # lambda in 1 - exp(-lambda * (age - threshold))
DEFAULT_SUDDEN_DEATH_PROBABILITY = 0.001


# =============================================================================
# SEEDING POLICY
# =============================================================================

class SeedPattern(Enum):
    """Initial seeding strategies."""
    RANDOM = "random"
    CLUSTER = "cluster"
    RING = "ring"


DEFAULT_SEED_PATTERN = SeedPattern.RANDOM.value
DEFAULT_DENSITY = 0.2
CLUSTER_COUNT = 5  # Seed nodes for the cluster pattern
RING_BAND = 0.1  # Fraction of radius on either side of the equator
POLAR_AXIS = 1  # y is up


# =============================================================================
# ORGANISM TRACKING
# =============================================================================

DEFAULT_MIN_AGE = 50
DEFAULT_MIN_SIZE = 10
DEFAULT_UPDATE_FREQUENCY = 5  # Ticks between tracker passes

# Age tiers used by statistics consumers
AGE_TIER_YOUNG = 10  # age < 10
AGE_TIER_MATURE = 50  # 10 <= age < 50, older is "old"


# =============================================================================
# PAIRING
# =============================================================================

DEFAULT_ANGULAR_TOLERANCE = 15.0  # Degrees
GOLDEN_ANGLE = 137.5  # Degrees, hue spacing between consecutive indices

ORGANISM_SATURATION = 0.8
ORGANISM_LIGHTNESS = 0.6

PAIR_HUE_OFFSET = 60.0  # Connections are shifted away from organism hues
PAIR_SATURATION = 0.9
PAIR_LIGHTNESS = 0.5
