"""Common ancestor matching.

For every ancestor present in both path maps, pair each sire-side path with
each dam-side path. An ancestor reached by 2 sire-side and 3 dam-side paths
yields 6 contributions.

Only pairs whose two routes meet at the ancestor itself are kept: if they
already share a dog further down (sire -> X -> A and dam -> X -> A), the
pair is not an independent line of descent from A, and its share is
carried by the contribution made through X.
"""
from __future__ import annotations
from typing import Dict, List

from .models import AncestorPath, CommonAncestorContribution


def common_ancestor_ids(sire_paths: Dict[str, List[AncestorPath]], dam_paths: Dict[str, List[AncestorPath]]) -> List[str]:
    return sorted(set(sire_paths) & set(dam_paths))


def independent(sire_path: AncestorPath, dam_path: AncestorPath) -> bool:
    return set(sire_path.dogs[:-1]).isdisjoint(dam_path.dogs[:-1])


def match(sire_paths: Dict[str, List[AncestorPath]], dam_paths: Dict[str, List[AncestorPath]]) -> List[CommonAncestorContribution]:
    contributions: List[CommonAncestorContribution] = []
    for anc in common_ancestor_ids(sire_paths, dam_paths):
        for sp in sire_paths[anc]:
            for dp in dam_paths[anc]:
                if independent(sp, dp):
                    contributions.append(CommonAncestorContribution(ancestor_id=anc, sire_path=sp, dam_path=dp))
    return contributions
