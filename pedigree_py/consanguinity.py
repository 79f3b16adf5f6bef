"""Coefficient of inbreeding by path counting (Wright).

Each contribution pairs one path from the sire and one path from the dam to
a common ancestor A, of lengths n1 and n2:

    F = sum_contributions (1/2)^(n1 + n2 + 1) * (1 + F_A)

F_A is supplied by the caller through `ancestor_coefficient(ancestor_id)`;
the recursive, memoized evaluation of F_A lives in analysis.py.

The result must lie in [0, 1]. Floating point noise within EPSILON of the
bounds is clamped; anything further out is a ComputationError.
"""
from __future__ import annotations
from collections import defaultdict
from typing import Callable, Dict, Iterable

from .errors import ComputationError
from .models import CommonAncestorContribution

EPSILON = 1e-9


def path_value(contribution: CommonAncestorContribution, ancestor_f: float) -> float:
    return 0.5 ** (contribution.sire_generations + contribution.dam_generations + 1) * (1.0 + ancestor_f)


def contributions_by_ancestor(
    contributions: Iterable[CommonAncestorContribution],
    ancestor_coefficient: Callable[[str], float],
) -> Dict[str, float]:
    """Sum path values per common ancestor. F_A is looked up once per ancestor."""
    f_cache: Dict[str, float] = {}
    totals: Dict[str, float] = defaultdict(float)
    for c in contributions:
        if c.ancestor_id not in f_cache:
            f_cache[c.ancestor_id] = ancestor_coefficient(c.ancestor_id)
        totals[c.ancestor_id] += path_value(c, f_cache[c.ancestor_id])
    return dict(totals)


def check_range(value: float) -> float:
    if value != value or value < -EPSILON or value > 1.0 + EPSILON:
        raise ComputationError(f"inbreeding coefficient {value!r} outside [0, 1]; ancestry data is inconsistent")
    return min(1.0, max(0.0, value))


def coefficient(
    contributions: Iterable[CommonAncestorContribution],
    ancestor_coefficient: Callable[[str], float],
) -> float:
    return check_range(sum(contributions_by_ancestor(contributions, ancestor_coefficient).values()))
