"""Ancestor path enumeration.

API:
    enumerate_paths(store, root_id, max_generations, warnings=None)
        -> Dict[ancestor_id, List[AncestorPath]]

Breadth-first, one generation per level. Unlike a plain ancestor-set walk,
every distinct route is kept: an ancestor reached through both the sire and
the dam of some dog (implex) gets one path per route. The root itself is
recorded at generation 0 so that a mating where one partner is an ancestor
of the other is matched like any other common ancestor.

A branch stops at a founder, at the generation bound, at a parent id the
store cannot resolve, or at a dog already on the current path (corrupted,
cyclic data). The last two are reported through `warnings`.
"""
from __future__ import annotations
from collections import defaultdict
from typing import Dict, List, Optional
import logging

from .errors import InvalidArgument
from .models import AncestorPath, DataIntegrityWarning, Dog, SIRE, DAM

MAX_GENERATIONS = 10


def check_generations(max_generations) -> int:
    if isinstance(max_generations, bool) or not isinstance(max_generations, int):
        raise InvalidArgument(f"generations must be an integer, got {max_generations!r}", field="generations")
    if max_generations < 1 or max_generations > MAX_GENERATIONS:
        raise InvalidArgument(f"generations must be between 1 and {MAX_GENERATIONS}, got {max_generations}", field="generations")
    return max_generations


def lookup_dog(store, dog_id: Optional[str]) -> Optional[Dog]:
    """Resolve dog_id through the store; None when unknown."""
    if not dog_id:
        return None
    try:
        return store.get_dog(dog_id)
    except KeyError:
        return None


def add_warning(warnings: Optional[List[DataIntegrityWarning]], warning: DataIntegrityWarning) -> None:
    if warnings is None or warning in warnings:
        return
    logging.warning("pedigree data integrity: %s", warning.message)
    warnings.append(warning)


def enumerate_paths(store, root_id: str, max_generations: int, warnings: Optional[List[DataIntegrityWarning]] = None) -> Dict[str, List[AncestorPath]]:
    check_generations(max_generations)

    paths: Dict[str, List[AncestorPath]] = defaultdict(list)
    start = AncestorPath((root_id,))
    paths[root_id].append(start)

    # dogs resolved during this walk; each id hits the store once
    resolved: Dict[str, Optional[Dog]] = {}

    def resolve(dog_id: str) -> Optional[Dog]:
        if dog_id not in resolved:
            resolved[dog_id] = lookup_dog(store, dog_id)
        return resolved[dog_id]

    frontier: List[AncestorPath] = [start]
    for generation in range(1, max_generations + 1):
        next_frontier: List[AncestorPath] = []
        for path in frontier:
            dog = resolve(path.ancestor)
            if dog is None:
                continue
            for relation in (SIRE, DAM):
                parent_id = dog.parent_id(relation)
                if not parent_id:
                    continue
                if path.passes_through(parent_id):
                    add_warning(warnings, DataIntegrityWarning(
                        dog_id=dog.id,
                        relation=relation,
                        missing_id=parent_id,
                        message=f"{relation} {parent_id} of {dog.id} is already among its descendants; branch ignored",
                    ))
                    continue
                if resolve(parent_id) is None:
                    add_warning(warnings, DataIntegrityWarning(
                        dog_id=dog.id,
                        relation=relation,
                        missing_id=parent_id,
                        message=f"{relation} {parent_id} of {dog.id} is not on record; branch treated as founder",
                    ))
                    continue
                new_path = path.extend(parent_id, relation)
                paths[parent_id].append(new_path)
                next_frontier.append(new_path)
        frontier = next_frontier
        if not frontier:
            break

    return dict(paths)
