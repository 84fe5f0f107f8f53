"""
lifesim/types_config.py - LifeConfig Dataclass and Scenario Presets

Immutable configuration for simulation runs.
Frozen dataclass; the only behavior is building the mutable rule objects.
"""

from dataclasses import dataclass

from .constants import (
    DEFAULT_RADIUS,
    DEFAULT_SUBDIVISIONS,
    DEFAULT_SEED_PATTERN,
    DEFAULT_DENSITY,
    DEFAULT_TICK_SPEED,
    DEFAULT_SURVIVAL_MIN,
    DEFAULT_SURVIVAL_MAX,
    DEFAULT_BIRTH_MIN,
    DEFAULT_BIRTH_MAX,
    DEFAULT_RULE_PROBABILITY,
    DEFAULT_AGE_DEATH_THRESHOLD,
    DEFAULT_AGE_DEATH_RATE,
    DEFAULT_SUDDEN_DEATH_PROBABILITY,
    DEFAULT_MIN_AGE,
    DEFAULT_MIN_SIZE,
    DEFAULT_UPDATE_FREQUENCY,
    DEFAULT_ANGULAR_TOLERANCE,
)
from .rules import DeathRule, NeighborRule


@dataclass(frozen=True)
class LifeConfig:
    """Simulation configuration (immutable)."""
    # Sphere (handed to the topology provider)
    radius: float = DEFAULT_RADIUS
    subdivisions: int = DEFAULT_SUBDIVISIONS

    # Seeding
    seed_pattern: str = DEFAULT_SEED_PATTERN
    density: float = DEFAULT_DENSITY

    # Timing
    tick_speed: float = DEFAULT_TICK_SPEED
    n_ticks: int = 1000  # Headless run length

    # Survival rule (alive cells)
    survival_min: int = DEFAULT_SURVIVAL_MIN
    survival_max: int = DEFAULT_SURVIVAL_MAX
    survival_probability_enabled: bool = False
    survival_probability: float = DEFAULT_RULE_PROBABILITY

    # Birth rule (dead cells)
    birth_min: int = DEFAULT_BIRTH_MIN
    birth_max: int = DEFAULT_BIRTH_MAX
    birth_probability_enabled: bool = False
    birth_probability: float = DEFAULT_RULE_PROBABILITY

    # Death overrides
    age_death_enabled: bool = False
    age_death_threshold: int = DEFAULT_AGE_DEATH_THRESHOLD
    age_death_rate: float = DEFAULT_AGE_DEATH_RATE
    sudden_death_enabled: bool = False
    sudden_death_probability: float = DEFAULT_SUDDEN_DEATH_PROBABILITY

    # Organism tracking and pairing
    min_age: int = DEFAULT_MIN_AGE
    min_size: int = DEFAULT_MIN_SIZE
    update_frequency: int = DEFAULT_UPDATE_FREQUENCY
    angular_tolerance: float = DEFAULT_ANGULAR_TOLERANCE

    random_seed: int = 42
    scenario_name: str = "BASELINE"

    def survival_rule(self) -> NeighborRule:
        return NeighborRule(
            self.survival_min,
            self.survival_max,
            self.survival_probability_enabled,
            self.survival_probability,
        )

    def birth_rule(self) -> NeighborRule:
        return NeighborRule(
            self.birth_min,
            self.birth_max,
            self.birth_probability_enabled,
            self.birth_probability,
        )

    def death_rule(self) -> DeathRule:
        return DeathRule(
            age_death_enabled=self.age_death_enabled,
            age_death_rate=self.age_death_rate,
            age_death_threshold=self.age_death_threshold,
            sudden_death_enabled=self.sudden_death_enabled,
            sudden_death_probability=self.sudden_death_probability,
        )


# =============================================================================
# SCENARIO PRESETS
# =============================================================================

SCENARIO_BASELINE = LifeConfig(
    n_ticks=1000,
    random_seed=42,
    scenario_name="BASELINE"
)

# Conway-style ranges on the hex mesh
SCENARIO_CLASSIC = LifeConfig(
    n_ticks=1000,
    survival_min=2,
    survival_max=3,
    birth_min=2,
    birth_max=2,
    random_seed=43,
    scenario_name="CLASSIC"
)

SCENARIO_STOCHASTIC = LifeConfig(
    n_ticks=1000,
    survival_probability_enabled=True,
    survival_probability=0.9,
    birth_probability_enabled=True,
    birth_probability=0.5,
    random_seed=44,
    scenario_name="STOCHASTIC"
)

SCENARIO_MORTAL = LifeConfig(
    n_ticks=1000,
    age_death_enabled=True,
    age_death_threshold=100,
    age_death_rate=0.01,
    sudden_death_enabled=True,
    sudden_death_probability=0.001,
    random_seed=45,
    scenario_name="MORTAL"
)

SCENARIO_CLUSTER = LifeConfig(
    n_ticks=500,
    seed_pattern="cluster",
    random_seed=46,
    scenario_name="CLUSTER"
)

SCENARIO_RING = LifeConfig(
    n_ticks=500,
    seed_pattern="ring",
    random_seed=47,
    scenario_name="RING"
)

MANDATORY_SCENARIOS = [
    SCENARIO_BASELINE,
    SCENARIO_CLASSIC,
    SCENARIO_STOCHASTIC,
    SCENARIO_MORTAL,
    SCENARIO_CLUSTER,
    SCENARIO_RING,
]
