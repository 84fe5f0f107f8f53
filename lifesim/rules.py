"""
lifesim/rules.py - Automaton Rule Dataclasses

Survival, birth and death rules consumed by the engine on every tick.
Ranges are applied exactly as given: min > max is an always-false range,
not an error.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .constants import (
    DEFAULT_SURVIVAL_MIN,
    DEFAULT_SURVIVAL_MAX,
    DEFAULT_BIRTH_MIN,
    DEFAULT_BIRTH_MAX,
    DEFAULT_RULE_PROBABILITY,
    DEFAULT_AGE_DEATH_THRESHOLD,
    DEFAULT_AGE_DEATH_RATE,
    DEFAULT_SUDDEN_DEATH_PROBABILITY,
)


@dataclass
class NeighborRule:
    """Neighbor-count range with an optional probability gate.

    Used for survival (alive cells) and birth (dead cells).
    """
    min_neighbors: int
    max_neighbors: int
    probability_enabled: bool = False
    probability: float = DEFAULT_RULE_PROBABILITY

    def in_range(self, counts: NDArray[np.int_]) -> NDArray[np.bool_]:
        """Vectorized inclusive range test over neighbor counts."""
        return (counts >= self.min_neighbors) & (counts <= self.max_neighbors)

    def gate(self, draws: NDArray[np.float64]) -> NDArray[np.bool_]:
        """Pass mask for the probability gate given uniform draws in [0, 1)."""
        return draws < self.probability


def default_survival_rule() -> NeighborRule:
    return NeighborRule(DEFAULT_SURVIVAL_MIN, DEFAULT_SURVIVAL_MAX)


def default_birth_rule() -> NeighborRule:
    return NeighborRule(DEFAULT_BIRTH_MIN, DEFAULT_BIRTH_MAX)


@dataclass
class DeathRule:
    """Two independent death overrides applied to would-be survivors.

    Sudden death kills with a flat probability. Age death kills with
    probability 1 - exp(-rate * (age - threshold)) once age >= threshold,
    which is exactly 0 at the threshold itself.
    """
    age_death_enabled: bool = False
    age_death_rate: float = DEFAULT_AGE_DEATH_RATE
    age_death_threshold: int = DEFAULT_AGE_DEATH_THRESHOLD
    sudden_death_enabled: bool = False
    sudden_death_probability: float = DEFAULT_SUDDEN_DEATH_PROBABILITY

    def age_death_probability(self, ages: NDArray[np.int_]) -> NDArray[np.float64]:
        """
        Per-cell age death probability.

        Args:
            ages: Cell ages before the tick

        Returns:
            Probabilities, 0.0 wherever age is below the threshold
        """
        excess = np.maximum(ages - self.age_death_threshold, 0)
        probability = 1.0 - np.exp(-self.age_death_rate * excess)
        return np.where(ages >= self.age_death_threshold, probability, 0.0)
