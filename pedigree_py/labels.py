"""Pedigree position labels.

Positions are named relative to the offspring of the analysed mating:
the sire and dam are generation 1, their parents generation 2 (grandsire,
granddam), then great grandsire, 2nd great grandsire and so on.
"""
from typing import List

from .models import AncestorPath, CommonAncestorContribution, SIRE, DAM


def _ordinal(n: int) -> str:
    if 10 <= (n % 100) <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def position_label(generation: int, relation: str) -> str:
    """Label for the ancestor at `generation` reached through a `relation` edge."""
    if generation < 1:
        raise ValueError("generation must be >= 1")
    base = "sire" if relation == SIRE else "dam"
    if generation == 1:
        return base.capitalize()
    if generation == 2:
        return f"Grand{base}"
    if generation == 3:
        return f"Great Grand{base}"
    return f"{_ordinal(generation - 2)} Great Grand{base}"


def path_labels(path: AncestorPath, side: str) -> List[str]:
    """Labels for every dog on a path rooted at the sire (side='sire') or dam."""
    labels = [position_label(1, side)]
    for i, relation in enumerate(path.relations):
        labels.append(position_label(i + 2, relation))
    return labels


def pathway(contribution: CommonAncestorContribution) -> str:
    sire_side = " > ".join(path_labels(contribution.sire_path, SIRE))
    dam_side = " > ".join(path_labels(contribution.dam_path, DAM))
    return f"{sire_side} & {dam_side}"
