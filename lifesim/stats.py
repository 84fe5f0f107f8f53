"""
lifesim/stats.py - Population Statistics and Rule Descriptions

Read-only summaries for status panels and run reports.
"""

from typing import Dict

import numpy as np

from .constants import AGE_TIER_YOUNG, AGE_TIER_MATURE
from .engine import AutomatonEngine
from .rules import DeathRule, NeighborRule


def population_stats(engine: AutomatonEngine) -> Dict[str, float]:
    """
    Alive/total counts, density percentage and tick.

    Returns:
        dict with alive, total, density (percent, 1 decimal), tick
    """
    alive = engine.population
    total = len(engine.topology)
    density = round(alive / total * 100, 1) if total > 0 else 0.0
    return {
        "alive": alive,
        "total": total,
        "density": density,
        "tick": engine.tick_count,
    }


def age_tiers(engine: AutomatonEngine) -> Dict[str, int]:
    """Count alive cells per age tier: young < 10 <= mature < 50 <= old."""
    ages = engine.ages[engine.alive]
    young = int(np.count_nonzero(ages < AGE_TIER_YOUNG))
    mature = int(np.count_nonzero((ages >= AGE_TIER_YOUNG) & (ages < AGE_TIER_MATURE)))
    old = int(np.count_nonzero(ages >= AGE_TIER_MATURE))
    return {"young": young, "mature": mature, "old": old}


def describe_neighbor_rule(rule: NeighborRule) -> str:
    """e.g. '2-3 neighbors (p: 50%)' or '2 neighbors'."""
    text = f"{rule.min_neighbors}"
    if rule.max_neighbors != rule.min_neighbors:
        text += f"-{rule.max_neighbors}"
    text += " neighbors"
    if rule.probability_enabled:
        text += f" (p: {rule.probability * 100:.0f}%)"
    return text


def describe_death_rules(rule: DeathRule) -> Dict[str, str]:
    if rule.age_death_enabled:
        age_text = f"Enabled (threshold: {rule.age_death_threshold}, λ: {rule.age_death_rate:.3f})"
    else:
        age_text = "Disabled"
    if rule.sudden_death_enabled:
        sudden_text = f"Enabled (p: {rule.sudden_death_probability * 100:.2f}%)"
    else:
        sudden_text = "Disabled"
    return {"age_death": age_text, "sudden_death": sudden_text}


def describe_rules(engine: AutomatonEngine) -> Dict[str, str]:
    """All rule descriptions keyed by survival, birth, age_death, sudden_death."""
    return {
        "survival": describe_neighbor_rule(engine.survival),
        "birth": describe_neighbor_rule(engine.birth),
        **describe_death_rules(engine.death),
    }
