"""Pedigree chart of a single dog.

Positions use Ahnentafel numbering: the dog is 1, the sire of position n is
2n and its dam 2n + 1. Every position of the chart is filled separately, so a
dog that appears several times (linebreeding) shows up at each position, with
`repeated` set on all but the lowest-numbered one.

API:
    pedigree_chart(store, root_id, max_depth=3) -> List[dict]

Each entry has:
    - dog_id: str
    - name: str
    - position: int
    - generation: int (0 for the root, 1 for its parents, ...)
    - sire_position / dam_position: Optional[int]
    - recorded: bool (False when the id is referenced but not on record)
    - repeated: bool
"""
from __future__ import annotations
from collections import deque
from typing import Dict, List, Set

from .enumerator import check_generations, lookup_dog


def pedigree_chart(store, root_id: str, max_depth: int = 3) -> List[Dict]:
    check_generations(max_depth)
    if lookup_dog(store, root_id) is None:
        return []

    result: List[Dict] = []
    seen: Set[str] = set()
    q = deque([(root_id, 1, 0, frozenset())])
    while q:
        dog_id, position, generation, below = q.popleft()
        dog = lookup_dog(store, dog_id)
        sire_id = dog.sire_id if dog else None
        dam_id = dog.dam_id if dog else None
        expand = dog is not None and generation < max_depth
        entry = {
            "dog_id": dog_id,
            "name": dog.name if dog else "",
            "position": position,
            "generation": generation,
            "sire_position": 2 * position if sire_id and expand else None,
            "dam_position": 2 * position + 1 if dam_id and expand else None,
            "recorded": dog is not None,
            "repeated": dog_id in seen,
        }
        seen.add(dog_id)
        result.append(entry)
        if not expand:
            continue
        # a parent already below this position means corrupted, cyclic records
        line = below | {dog_id}
        if sire_id and sire_id not in line:
            q.append((sire_id, 2 * position, generation + 1, line))
        else:
            entry["sire_position"] = None
        if dam_id and dam_id not in line:
            q.append((dam_id, 2 * position + 1, generation + 1, line))
        else:
            entry["dam_position"] = None

    result.sort(key=lambda x: x["position"])
    return result
