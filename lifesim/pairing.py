"""
lifesim/pairing.py - Opposite-Point Pairing Resolver

Matches qualified organisms whose centroid directions are antipodal.

Opposition test: normalize both centroids from the sphere center, take the
angle via arccos of the clamped dot product, accept iff
|angle - 180| <= angular_tolerance.

Exclusivity is greedy and order dependent: candidates are scanned i ascending
then j ascending (organism discovery order) and a pair is committed only when
neither side is already paired in this pass. First found wins.
"""

import colorsys
import math
from typing import Dict, List, Optional, Sequence

import numpy as np

from receipts import emit_receipt

from .constants import (
    TENANT_ID,
    DEFAULT_ANGULAR_TOLERANCE,
    GOLDEN_ANGLE,
    PAIR_HUE_OFFSET,
    PAIR_SATURATION,
    PAIR_LIGHTNESS,
)
from .types_state import Color, Organism, Pair, Point3


def angle_between(a: Point3, b: Point3) -> float:
    """
    Angle in degrees between two directions from the origin.

    A zero-length vector normalizes to the zero vector, so its dot product
    with anything is 0 and the angle is 90 degrees.

    Returns:
        Degrees in [0, 180]
    """
    va = _unit(a)
    vb = _unit(b)
    dot = float(np.dot(va, vb))
    return math.degrees(math.acos(max(-1.0, min(1.0, dot))))


def _unit(v: Point3) -> np.ndarray:
    vec = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(vec)
    if norm == 0.0:
        return np.zeros_like(vec)
    return vec / norm


def is_opposite(a: Point3, b: Point3, angular_tolerance: float) -> bool:
    """True iff the two centroids are 180 degrees apart within tolerance."""
    return abs(angle_between(a, b) - 180.0) <= angular_tolerance


def pair_hue(index: int) -> float:
    """Deterministic connection hue in degrees for the index-th pair of a pass."""
    return (index * GOLDEN_ANGLE + PAIR_HUE_OFFSET) % 360


def pair_color(index: int) -> Color:
    return colorsys.hls_to_rgb(pair_hue(index) / 360, PAIR_LIGHTNESS, PAIR_SATURATION)


class PairingResolver:
    """Recomputes mutually exclusive opposite pairs after every tracker pass."""

    def __init__(self, angular_tolerance: float = DEFAULT_ANGULAR_TOLERANCE) -> None:
        self.angular_tolerance = angular_tolerance
        self._pairs: List[Pair] = []
        self._partners: Dict[int, int] = {}

    def resolve(self, organisms: Sequence[Organism], tick: int = 0) -> dict:
        """
        Rebuild the pair list from one tracker pass.

        Args:
            organisms: That pass's organisms, in discovery order
            tick: Engine tick the pass observed (for the receipt)

        Returns:
            pairing receipt
        """
        qualified = [o for o in organisms if o.qualified]
        pairs: List[Pair] = []
        partners: Dict[int, int] = {}

        for i, org_a in enumerate(qualified):
            if org_a.organism_id in partners:
                continue
            for org_b in qualified[i + 1:]:
                if org_b.organism_id in partners:
                    continue
                angle = angle_between(org_a.centroid, org_b.centroid)
                if abs(angle - 180.0) > self.angular_tolerance:
                    continue
                index = len(pairs)
                pairs.append(Pair(
                    pair_id=index,
                    organism_a=org_a,
                    organism_b=org_b,
                    angle=angle,
                    hue=pair_hue(index),
                    color=pair_color(index),
                ))
                partners[org_a.organism_id] = org_b.organism_id
                partners[org_b.organism_id] = org_a.organism_id
                break

        self._pairs = pairs
        self._partners = partners

        return emit_receipt("pairing", {
            "tenant_id": TENANT_ID,
            "tick": tick,
            "qualified": len(qualified),
            "pairs": len(pairs),
            "pair_ids": [list(p.organism_ids) for p in pairs],
        })

    def pairs(self) -> List[Pair]:
        return list(self._pairs)

    def partner_of(self, organism_id: int) -> Optional[int]:
        return self._partners.get(organism_id)

    def set_angular_tolerance(self, degrees: float) -> None:
        self.angular_tolerance = degrees

    def reset(self) -> None:
        self._pairs = []
        self._partners = {}
