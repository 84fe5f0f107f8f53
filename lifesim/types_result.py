"""
lifesim/types_result.py - SimResult Dataclass

Immutable headless-run result container.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .types_config import LifeConfig
from .types_state import CellGrid, Organism, Pair


@dataclass(frozen=True)
class SimResult:
    """Immutable simulation result."""
    final_cells: CellGrid
    final_organisms: Tuple[Organism, ...]
    final_pairs: Tuple[Pair, ...]
    all_traces: dict
    statistics: dict
    receipts: List[dict]
    config: LifeConfig
