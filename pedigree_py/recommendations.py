"""Genetic diversity score and breeding-risk guidance.

Bands (inclusive lower bound) on the unrounded coefficient:

    F < 0.03            low genetic risk
    0.03 <= F < 0.0625  low-moderate risk
    0.0625 <= F < 0.125 moderate risk
    F >= 0.125          high risk

A "narrow founder base" note is appended when the mating has more distinct
common ancestors than `density_threshold`, whatever the band.
"""
from __future__ import annotations
from typing import Dict, List, Tuple, Any

LOW = "low genetic risk, pairing acceptable"
LOW_MODERATE = "low-moderate risk, monitor offspring health screening"
MODERATE = "moderate risk, consider outcrossing for future pairings"
HIGH = "high risk, alternative pairing strongly recommended"

# (lower bound, recommendation), highest first
BANDS: List[Tuple[float, str]] = [
    (0.125, HIGH),
    (0.0625, MODERATE),
    (0.03, LOW_MODERATE),
    (0.0, LOW),
]

DEFAULT_DENSITY_THRESHOLD = 3


def risk_band(coefficient: float) -> str:
    for lower, text in BANDS:
        if coefficient >= lower:
            return text
    return LOW


def narrow_base_note(common_ancestor_count: int) -> str:
    return f"narrow founder base: {common_ancestor_count} distinct common ancestors, consider broadening the breeding pool"


def genetic_diversity(coefficient: float) -> float:
    return 1.0 - coefficient


def summarize(coefficient: float, common_ancestor_count: int, density_threshold: int = DEFAULT_DENSITY_THRESHOLD) -> Dict[str, Any]:
    recs = [risk_band(coefficient)]
    if common_ancestor_count > density_threshold:
        recs.append(narrow_base_note(common_ancestor_count))
    return {"geneticDiversity": genetic_diversity(coefficient), "recommendations": recs}
