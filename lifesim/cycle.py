"""
lifesim/cycle.py - Simulation Driver

Owns one topology, engine, tracker and resolver and runs them strictly in
order: engine tick -> tracker pass (throttled) -> pairing pass. No module
level instances; every consumer holds its Simulation explicitly.

Entry points: Simulation (per-frame driving), run_simulation (headless),
run_multiverse.
"""

from typing import IO, List, Optional

import numpy as np

from receipts import ReceiptLedger, emit_receipt

from .constants import TENANT_ID, RECEIPT_LEDGER_LIMIT
from .engine import AutomatonEngine
from .organisms import OrganismTracker
from .pairing import PairingResolver
from .topology import Topology, TopologyProvider
from .types_config import LifeConfig
from .types_result import SimResult


class Simulation:
    """Context object wiring provider -> engine -> tracker -> resolver."""

    def __init__(
        self,
        provider: TopologyProvider,
        config: Optional[LifeConfig] = None,
        sink: Optional[IO[str]] = None,
        ledger_limit: int = RECEIPT_LEDGER_LIMIT,
    ) -> None:
        self.provider = provider
        self.config = config if config is not None else LifeConfig()
        self.ledger = ReceiptLedger(ledger_limit, sink)
        self.rng = np.random.default_rng(self.config.random_seed)

        topology = provider.topology()
        if (topology.radius, topology.subdivisions) != (self.config.radius, self.config.subdivisions):
            topology = provider.regenerate(self.config.radius, self.config.subdivisions)

        self.topology = topology
        self.engine = AutomatonEngine(
            topology,
            survival=self.config.survival_rule(),
            birth=self.config.birth_rule(),
            death=self.config.death_rule(),
            tick_speed=self.config.tick_speed,
            rng=self.rng,
        )
        self.resolver = PairingResolver(self.config.angular_tolerance)
        self.tracker = OrganismTracker(
            self.engine,
            self.resolver,
            min_age=self.config.min_age,
            min_size=self.config.min_size,
            update_frequency=self.config.update_frequency,
        )
        self.record(self.engine.initialize(self.config.seed_pattern, self.config.density))

    def record(self, receipt: dict) -> dict:
        """Append to the ledger and stream to the sink, if any."""
        return self.ledger.record(receipt)

    def update(self, elapsed: float) -> List[dict]:
        """
        One animation/update cycle.

        Returns:
            Receipts emitted during this cycle
        """
        receipts = []
        tick_receipt = self.engine.update(elapsed)
        if tick_receipt is not None:
            receipts.append(self.record(tick_receipt))
            for receipt in self.tracker.update(elapsed):
                receipts.append(self.record(receipt))
        return receipts

    def step(self) -> List[dict]:
        """Force one tick (ignores pause and tick speed), then the tracker cadence."""
        receipts = [self.record(self.engine.tick())]
        for receipt in self.tracker.update():
            receipts.append(self.record(receipt))
        return receipts

    def reseed(self, pattern: Optional[str] = None, density: Optional[float] = None) -> dict:
        """Re-initialize cells on the current topology and restart tracking."""
        receipt = self.engine.initialize(
            pattern if pattern is not None else self.config.seed_pattern,
            density if density is not None else self.config.density,
        )
        self.tracker.reset()
        return self.record(receipt)

    def regenerate(self, radius: float, subdivisions: int) -> dict:
        """
        Rebuild the topology and reset engine, tracker and resolver together.

        Rule settings, tick speed, pause state and tracker/resolver
        thresholds carry over; cell state does not.
        """
        radius = float(radius)
        subdivisions = int(subdivisions)
        topology = self.provider.regenerate(radius, subdivisions)
        self._replace_topology(topology)

        receipt = self.record(emit_receipt("regenerate", {
            "tenant_id": TENANT_ID,
            "radius": radius,
            "subdivisions": subdivisions,
            "nodes": len(topology),
        }))
        self.reseed()
        return receipt

    def _replace_topology(self, topology: Topology) -> None:
        old = self.engine
        self.topology = topology
        self.engine = AutomatonEngine(
            topology,
            survival=old.survival,
            birth=old.birth,
            death=old.death,
            tick_speed=old.tick_speed,
            rng=self.rng,
        )
        self.engine.set_paused(old.paused)
        self.tracker.engine = self.engine
        self.tracker.reset()


def run_simulation(
    config: LifeConfig,
    provider: TopologyProvider,
    sink: Optional[IO[str]] = None,
) -> SimResult:
    """
    Run a headless simulation for config.n_ticks ticks.

    Args:
        config: LifeConfig with parameters
        provider: Topology source
        sink: Optional text handle receiving every receipt as JSONL

    Returns:
        SimResult with final state, traces and statistics
    """
    sim = Simulation(provider, config, sink)

    population_trace = [sim.engine.population]
    organism_trace = []
    pair_trace = []
    births = 0
    deaths = 0
    tracker_passes = 0

    for _ in range(config.n_ticks):
        for receipt in sim.step():
            kind = receipt["receipt_type"]
            if kind == "tick":
                births += receipt["births"]
                deaths += receipt["deaths"]
                population_trace.append(receipt["population"])
            elif kind == "organism_scan":
                tracker_passes += 1
                organism_trace.append(receipt["organisms"])
            elif kind == "pairing":
                pair_trace.append(receipt["pairs"])

    statistics = {
        "births": births,
        "deaths": deaths,
        "peak_population": max(population_trace),
        "final_population": sim.engine.population,
        "tracker_passes": tracker_passes,
        "final_organisms": len(sim.tracker.organisms()),
        "max_pairs": max(pair_trace, default=0),
    }

    sim.record(emit_receipt("sim_complete", {
        "tenant_id": TENANT_ID,
        "scenario": config.scenario_name,
        "ticks": sim.engine.tick_count,
        **statistics
    }))

    all_traces = {
        "population_trace": population_trace,
        "organism_trace": organism_trace,
        "pair_trace": pair_trace,
    }

    return SimResult(
        final_cells=sim.engine.grid,
        final_organisms=tuple(sim.tracker.organisms()),
        final_pairs=tuple(sim.resolver.pairs()),
        all_traces=all_traces,
        statistics=statistics,
        receipts=list(sim.ledger),
        config=config
    )


def run_multiverse(configs: List[LifeConfig], provider: TopologyProvider) -> List[SimResult]:
    """
    Run multiple simulations in sequence on one provider.

    Args:
        configs: List of LifeConfig objects

    Returns:
        List of SimResult objects
    """
    results = []
    for config in configs:
        result = run_simulation(config, provider)
        results.append(result)
    return results
