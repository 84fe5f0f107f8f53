"""
Tests for lifesim/stats.py - Population Statistics and Rule Descriptions
"""

import numpy as np

from lifesim import (
    AutomatonEngine,
    DeathRule,
    NeighborRule,
    age_tiers,
    describe_death_rules,
    describe_neighbor_rule,
    describe_rules,
    population_stats,
)

from conftest import grid_with


class TestPopulationStats:
    """Alive/total/density/tick snapshot."""

    def test_counts_and_density(self, torus):
        engine = AutomatonEngine(torus, rng=np.random.default_rng(0))
        engine.load_grid(grid_with(len(torus), alive=range(12)), tick_count=7)
        stats = population_stats(engine)
        assert stats == {"alive": 12, "total": 48, "density": 25.0, "tick": 7}

    def test_density_rounded(self, icosahedron):
        engine = AutomatonEngine(icosahedron, rng=np.random.default_rng(0))
        engine.load_grid(grid_with(12, alive=[0]))
        assert population_stats(engine)["density"] == 8.3


class TestAgeTiers:
    """young < 10 <= mature < 50 <= old, alive cells only."""

    def test_boundaries(self, torus):
        ages = {0: 1, 1: 9, 2: 10, 3: 49, 4: 50, 5: 300}
        engine = AutomatonEngine(torus, rng=np.random.default_rng(0))
        engine.load_grid(grid_with(len(torus), alive=ages.keys(), ages=ages))
        assert age_tiers(engine) == {"young": 2, "mature": 2, "old": 2}

    def test_empty(self, torus):
        engine = AutomatonEngine(torus, rng=np.random.default_rng(0))
        assert age_tiers(engine) == {"young": 0, "mature": 0, "old": 0}


class TestDescriptions:
    """Human-readable rule summaries."""

    def test_range(self):
        assert describe_neighbor_rule(NeighborRule(2, 3)) == "2-3 neighbors"

    def test_single_value_with_probability(self):
        rule = NeighborRule(2, 2, probability_enabled=True, probability=0.5)
        assert describe_neighbor_rule(rule) == "2 neighbors (p: 50%)"

    def test_death_disabled(self):
        assert describe_death_rules(DeathRule()) == {
            "age_death": "Disabled",
            "sudden_death": "Disabled",
        }

    def test_death_enabled(self):
        rule = DeathRule(age_death_enabled=True, sudden_death_enabled=True)
        described = describe_death_rules(rule)
        assert described["age_death"] == "Enabled (threshold: 100, λ: 0.010)"
        assert described["sudden_death"] == "Enabled (p: 0.10%)"

    def test_describe_engine_rules(self, torus):
        engine = AutomatonEngine(torus)
        assert describe_rules(engine) == {
            "survival": "2-4 neighbors",
            "birth": "2-3 neighbors",
            "age_death": "Disabled",
            "sudden_death": "Disabled",
        }
