"""
Tests for lifesim/cycle.py - Simulation Driver

Tests cover:
  - Construction from LifeConfig (topology regenerated to match the config)
  - Per-frame update cadence: engine tick -> tracker pass -> pairing
  - Headless run_simulation traces, statistics and receipts
  - JSONL receipt sink
  - Regenerate: new topology, cell reset, rules carried over
  - Determinism and every mandatory scenario
"""

import io
import json
from dataclasses import replace

import numpy as np
import pytest

from lifesim import (
    MANDATORY_SCENARIOS,
    CallableTopologyProvider,
    LifeConfig,
    Simulation,
    TopologyError,
    run_multiverse,
    run_simulation,
)

from conftest import build_torus


def small_config(**overrides):
    base = LifeConfig(radius=1.0, subdivisions=2, n_ticks=20, update_frequency=5)
    return replace(base, **overrides)


# =============================================================================
# SIMULATION
# =============================================================================

class TestSimulation:
    """Wiring and per-frame cadence."""

    def test_initial_seed_recorded(self, torus_provider):
        sim = Simulation(torus_provider, small_config(density=1.0))
        assert sim.engine.population == 48
        assert sim.ledger[0]["receipt_type"] == "seed"
        assert sim.tracker.engine is sim.engine
        assert sim.tracker.resolver is sim.resolver

    def test_provider_regenerated_to_config(self, torus_provider):
        sim = Simulation(torus_provider, small_config(radius=3.0, subdivisions=4))
        assert sim.topology.radius == 3.0
        assert len(sim.topology) == 80
        assert torus_provider.topology() is sim.topology

    def test_update_accumulates_to_tick_speed(self, torus_provider):
        sim = Simulation(torus_provider, small_config(tick_speed=1.0))
        assert sim.update(0.5) == []
        receipts = sim.update(0.5)
        assert [r["receipt_type"] for r in receipts] == ["tick"]
        assert sim.engine.tick_count == 1

    def test_tracker_runs_after_fifth_tick(self, torus_provider):
        sim = Simulation(torus_provider, small_config(tick_speed=0.1))
        kinds = []
        for _ in range(5):
            kinds.append([r["receipt_type"] for r in sim.update(0.1)])
        assert kinds[:4] == [["tick"]] * 4
        assert kinds[4] == ["tick", "organism_scan", "pairing"]

    def test_paused_does_nothing(self, torus_provider):
        sim = Simulation(torus_provider, small_config())
        sim.engine.set_paused(True)
        assert sim.update(10.0) == []
        assert sim.engine.tick_count == 0

    def test_step_ignores_pause(self, torus_provider):
        sim = Simulation(torus_provider, small_config())
        sim.engine.set_paused(True)
        sim.step()
        assert sim.engine.tick_count == 1

    def test_reseed_resets_tracking(self, torus_provider):
        sim = Simulation(torus_provider, small_config(update_frequency=1, min_age=0, min_size=1))
        sim.step()
        receipt = sim.reseed(pattern="ring")
        assert receipt["pattern"] == "ring"
        assert sim.engine.tick_count == 0
        assert sim.tracker.organisms() == []
        assert sim.resolver.pairs() == []

    def test_regenerate(self, torus_provider):
        sim = Simulation(torus_provider, small_config())
        sim.engine.set_survival(min_neighbors=1, max_neighbors=5)
        sim.engine.set_tick_speed(0.25)
        sim.tracker.set_min_size(3)
        for _ in range(3):
            sim.step()

        receipt = sim.regenerate(1.0, 4)

        assert receipt["receipt_type"] == "regenerate"
        assert receipt["nodes"] == 80
        assert len(sim.engine.topology) == 80
        assert sim.tracker.engine is sim.engine
        assert sim.engine.tick_count == 0
        assert sim.engine.get_survival_rules()["min_neighbors"] == 1
        assert sim.engine.get_survival_rules()["max_neighbors"] == 5
        assert sim.engine.tick_speed == 0.25
        assert sim.tracker.min_size == 3
        assert sim.ledger[-1]["receipt_type"] == "seed"

    def test_regenerate_accepts_numpy_scalars(self, torus_provider):
        sink = io.StringIO()
        sim = Simulation(torus_provider, small_config(), sink=sink)

        receipt = sim.regenerate(np.float64(1.0), np.int64(4))

        assert type(receipt["radius"]) is float
        assert type(receipt["subdivisions"]) is int
        assert len(sim.engine.topology) == 80
        assert sim.ledger[-1]["receipt_type"] == "seed"
        lines = [json.loads(line) for line in sink.getvalue().splitlines()]
        assert [r["receipt_type"] for r in lines[-2:]] == ["regenerate", "seed"]

    def test_failed_regenerate_leaves_simulation_intact(self):
        calls = []

        def builder(radius, subdivisions):
            calls.append(radius)
            if len(calls) > 1:
                raise TopologyError("mesh rejected")
            return build_torus(radius, subdivisions)

        sim = Simulation(CallableTopologyProvider(builder, 1.0, 2), small_config())
        sim.step()
        topology = sim.topology

        with pytest.raises(TopologyError):
            sim.regenerate(2.0, 3)

        assert sim.topology is topology
        assert sim.engine.topology is topology
        assert sim.engine.tick_count == 1

    def test_ledger_bounded(self, torus_provider):
        sim = Simulation(torus_provider, small_config(), ledger_limit=5)
        for _ in range(10):
            sim.step()
        assert len(sim.ledger) == 5


# =============================================================================
# HEADLESS RUNS
# =============================================================================

class TestRunSimulation:
    """run_simulation traces, statistics and receipts."""

    def test_traces_and_statistics(self, torus_provider):
        result = run_simulation(small_config(), torus_provider)

        traces = result.all_traces
        assert len(traces["population_trace"]) == 21
        assert len(traces["organism_trace"]) == 4
        assert len(traces["pair_trace"]) == 4

        stats = result.statistics
        assert stats["tracker_passes"] == 4
        assert stats["final_population"] == traces["population_trace"][-1]
        assert stats["peak_population"] == max(traces["population_trace"])
        assert stats["final_population"] == result.final_cells.population
        assert stats["final_organisms"] == len(result.final_organisms)

    def test_receipts(self, torus_provider):
        result = run_simulation(small_config(), torus_provider)
        kinds = [r["receipt_type"] for r in result.receipts]
        assert kinds[0] == "seed"
        assert kinds[-1] == "sim_complete"
        assert kinds.count("tick") == 20
        assert kinds.count("organism_scan") == 4
        assert kinds.count("pairing") == 4
        assert result.receipts[-1]["scenario"] == "BASELINE"

    def test_population_accounting(self, torus_provider):
        result = run_simulation(small_config(), torus_provider)
        trace = result.all_traces["population_trace"]
        stats = result.statistics
        assert trace[0] + stats["births"] - stats["deaths"] == trace[-1]

    def test_jsonl_sink(self, torus_provider):
        sink = io.StringIO()
        result = run_simulation(small_config(n_ticks=5), torus_provider, sink=sink)
        lines = [json.loads(line) for line in sink.getvalue().splitlines()]
        assert len(lines) == len(result.receipts)
        assert lines[0]["receipt_type"] == "seed"
        assert lines[-1]["receipt_type"] == "sim_complete"

    def test_deterministic_for_seed(self):
        config = small_config(n_ticks=30, random_seed=7)
        a = run_simulation(config, CallableTopologyProvider(build_torus, 1.0, 2))
        b = run_simulation(config, CallableTopologyProvider(build_torus, 1.0, 2))
        assert a.all_traces == b.all_traces
        assert (a.final_cells.alive == b.final_cells.alive).all()

    def test_run_multiverse(self, torus_provider):
        configs = [
            small_config(n_ticks=5, scenario_name="A"),
            small_config(n_ticks=5, scenario_name="B", seed_pattern="cluster"),
        ]
        results = run_multiverse(configs, torus_provider)
        assert [r.config.scenario_name for r in results] == ["A", "B"]


class TestScenarios:
    """Every preset runs end to end on a small topology."""

    @pytest.mark.parametrize("scenario", MANDATORY_SCENARIOS, ids=lambda s: s.scenario_name)
    def test_scenario_runs(self, torus_provider, scenario):
        config = replace(scenario, radius=1.0, subdivisions=2, n_ticks=10)
        result = run_simulation(config, torus_provider)
        assert len(result.all_traces["population_trace"]) == 11
        assert result.receipts[-1]["scenario"] == scenario.scenario_name
        assert all(0 <= p <= 48 for p in result.all_traces["population_trace"])
