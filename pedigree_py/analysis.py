"""Linebreeding analysis of a proposed or recorded mating.

API:
    analyze(store, sire_id, dam_id, max_generations=6) -> PedigreeAnalysisResult
    coefficient_profile(store, sire_id, dam_id, max_generations=6) -> [(generation, coefficient)]
    dog_coefficient(store, dog_id, max_generations=6) -> float

`store` is anything with `get_dog(dog_id) -> Optional[Dog]` (see storage.py).

An analysis runs Validating -> Enumerating -> Matching -> Computing -> Done,
or ends in Failed. The coefficient of each common ancestor A is obtained by
analysing A's own parents with the bound that is left once the shortest route
to A is consumed; results are memoized per top-level call on (A, remaining depth)
and never shared between calls.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple
import logging

from .consanguinity import coefficient, contributions_by_ancestor
from .enumerator import enumerate_paths, check_generations, lookup_dog, add_warning
from .errors import InvalidArgument, ComputationError
from .labels import pathway
from .matcher import match
from .models import (
    AncestorPath,
    CommonAncestor,
    CommonAncestorContribution,
    DataIntegrityWarning,
    PedigreeAnalysisResult,
    SIRE,
    DAM,
)
from .recommendations import summarize, DEFAULT_DENSITY_THRESHOLD

DEFAULT_GENERATIONS = 6
DISPLAY_DECIMALS = 4


class AnalysisState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ENUMERATING = "enumerating"
    MATCHING = "matching"
    COMPUTING = "computing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class _PairOutcome:
    # ancestor -> (sire-side paths, dam-side paths) taking part in a contribution
    routes: Dict[str, Tuple[List[AncestorPath], List[AncestorPath]]]
    contributions: List[CommonAncestorContribution]
    by_ancestor: Dict[str, float]
    ancestor_f: Dict[str, float]
    raw: float


def _routes(contributions: List[CommonAncestorContribution]) -> Dict[str, Tuple[List[AncestorPath], List[AncestorPath]]]:
    out: Dict[str, Tuple[List[AncestorPath], List[AncestorPath]]] = {}
    for c in contributions:
        sp, dp = out.setdefault(c.ancestor_id, ([], []))
        if c.sire_path not in sp:
            sp.append(c.sire_path)
        if c.dam_path not in dp:
            dp.append(c.dam_path)
    return out


class AnalysisRun:
    """State of one top-level analysis: phase, memo, warnings, recursion stack."""

    def __init__(self, store) -> None:
        self.store = store
        self.state = AnalysisState.IDLE
        self.history: List[AnalysisState] = [AnalysisState.IDLE]
        self.warnings: List[DataIntegrityWarning] = []
        self.memo: Dict[Tuple[str, int], float] = {}
        self._in_progress: Set[str] = set()

    def enter(self, state: AnalysisState) -> None:
        self.state = state
        self.history.append(state)

    def pair(self, sire_id: str, dam_id: str, generations: int, top_level: bool = False) -> _PairOutcome:
        if top_level:
            self.enter(AnalysisState.ENUMERATING)
        sire_paths = enumerate_paths(self.store, sire_id, generations, self.warnings)
        dam_paths = enumerate_paths(self.store, dam_id, generations, self.warnings)

        if top_level:
            self.enter(AnalysisState.MATCHING)
        contributions = match(sire_paths, dam_paths)

        if top_level:
            self.enter(AnalysisState.COMPUTING)
        routes = _routes(contributions)
        ancestor_f: Dict[str, float] = {}
        for anc, (sp, dp) in routes.items():
            closest = min(p.length for p in sp + dp)
            # the bound left once the shallowest route to A is consumed
            ancestor_f[anc] = self.ancestor_coefficient(anc, generations - closest)
        raw = coefficient(contributions, ancestor_f.__getitem__)
        by_ancestor = contributions_by_ancestor(contributions, ancestor_f.__getitem__)
        return _PairOutcome(routes, contributions, by_ancestor, ancestor_f, raw)

    def ancestor_coefficient(self, ancestor_id: str, remaining: int) -> float:
        """F of a common ancestor; 0 for founders, unknown parentage or no depth left."""
        if remaining < 1:
            return 0.0
        key = (ancestor_id, remaining)
        if key in self.memo:
            return self.memo[key]
        if ancestor_id in self._in_progress:
            raise ComputationError(f"dog {ancestor_id} is recorded as its own ancestor")

        f = 0.0
        dog = lookup_dog(self.store, ancestor_id)
        if dog is not None and dog.sire_id and dog.dam_id:
            if dog.sire_id == dog.dam_id:
                add_warning(self.warnings, DataIntegrityWarning(
                    dog_id=dog.id,
                    relation=SIRE,
                    missing_id=dog.sire_id,
                    message=f"{dog.id} has the same sire and dam ({dog.sire_id}); its inbreeding is taken as 0",
                ))
            elif self._parents_resolve(dog.id, dog.sire_id, dog.dam_id):
                self._in_progress.add(ancestor_id)
                try:
                    f = self.pair(dog.sire_id, dog.dam_id, remaining).raw
                finally:
                    self._in_progress.discard(ancestor_id)
        self.memo[key] = f
        return f

    def _parents_resolve(self, dog_id: str, sire_id: str, dam_id: str) -> bool:
        ok = True
        for relation, pid in ((SIRE, sire_id), (DAM, dam_id)):
            if lookup_dog(self.store, pid) is None:
                add_warning(self.warnings, DataIntegrityWarning(
                    dog_id=dog_id,
                    relation=relation,
                    missing_id=pid,
                    message=f"{relation} {pid} of {dog_id} is not on record; branch treated as founder",
                ))
                ok = False
        return ok


class PedigreeAnalyzer:
    def __init__(self, store, density_threshold: int = DEFAULT_DENSITY_THRESHOLD) -> None:
        self.store = store
        self.density_threshold = density_threshold

    def _validate(self, sire_id: str, dam_id: str, max_generations: int) -> None:
        if not sire_id:
            raise InvalidArgument("sireId is required", field="sireId")
        if not dam_id:
            raise InvalidArgument("damId is required", field="damId")
        if sire_id == dam_id:
            raise InvalidArgument("a dog cannot be paired with itself", field="damId")
        check_generations(max_generations)
        if lookup_dog(self.store, sire_id) is None:
            raise InvalidArgument(f"sire {sire_id} not found", field="sireId")
        if lookup_dog(self.store, dam_id) is None:
            raise InvalidArgument(f"dam {dam_id} not found", field="damId")

    def analyze(self, sire_id: str, dam_id: str, max_generations: int = DEFAULT_GENERATIONS, run: Optional[AnalysisRun] = None) -> PedigreeAnalysisResult:
        run = run or AnalysisRun(self.store)
        try:
            run.enter(AnalysisState.VALIDATING)
            self._validate(sire_id, dam_id, max_generations)
            outcome = run.pair(sire_id, dam_id, max_generations, top_level=True)
            result = self._assemble(sire_id, dam_id, max_generations, outcome, run.warnings)
        except InvalidArgument:
            run.enter(AnalysisState.FAILED)
            raise
        except ComputationError:
            run.enter(AnalysisState.FAILED)
            logging.exception("linebreeding analysis failed for sire=%s dam=%s", sire_id, dam_id)
            raise
        run.enter(AnalysisState.DONE)
        logging.info(
            "linebreeding analysis sire=%s dam=%s generations=%d: F=%.4f common=%d warnings=%d",
            sire_id,
            dam_id,
            max_generations,
            result.inbreeding_coefficient,
            len(result.common_ancestors),
            len(result.warnings),
        )
        return result

    def _assemble(self, sire_id, dam_id, generations, outcome: _PairOutcome, warnings) -> PedigreeAnalysisResult:
        ancestors: List[CommonAncestor] = []
        for anc, contrib in outcome.by_ancestor.items():
            sp, dp = outcome.routes[anc]
            dog = lookup_dog(self.store, anc)
            ancestors.append(CommonAncestor(
                ancestor_id=anc,
                occurrences=len(sp) + len(dp),
                min_generation_distance=min(p.length for p in sp + dp),
                contribution=contrib,
                ancestor_inbreeding=outcome.ancestor_f[anc],
                name=dog.name if dog else "",
                registration_number=dog.registration_number if dog else None,
                pathways=tuple(pathway(c) for c in outcome.contributions if c.ancestor_id == anc),
            ))
        ancestors.sort(key=lambda a: (-a.contribution, a.ancestor_id))

        summary = summarize(outcome.raw, len(ancestors), self.density_threshold)
        return PedigreeAnalysisResult(
            sire_id=sire_id,
            dam_id=dam_id,
            generations=generations,
            inbreeding_coefficient=round(outcome.raw, DISPLAY_DECIMALS),
            raw_coefficient=outcome.raw,
            common_ancestors=tuple(ancestors),
            genetic_diversity=round(summary["geneticDiversity"], DISPLAY_DECIMALS),
            recommendations=tuple(summary["recommendations"]),
            warnings=tuple(warnings),
            contributions=tuple(outcome.contributions),
        )


def analyze(store, sire_id: str, dam_id: str, max_generations: int = DEFAULT_GENERATIONS, density_threshold: int = DEFAULT_DENSITY_THRESHOLD) -> PedigreeAnalysisResult:
    return PedigreeAnalyzer(store, density_threshold).analyze(sire_id, dam_id, max_generations)


def coefficient_profile(store, sire_id: str, dam_id: str, max_generations: int = DEFAULT_GENERATIONS) -> List[Tuple[int, float]]:
    """Coefficient of the mating for every generation bound from 1 to max_generations."""
    check_generations(max_generations)
    analyzer = PedigreeAnalyzer(store)
    return [(g, analyzer.analyze(sire_id, dam_id, g).inbreeding_coefficient) for g in range(1, max_generations + 1)]


def dog_coefficient(store, dog_id: str, max_generations: int = DEFAULT_GENERATIONS) -> float:
    """Inbreeding coefficient of a recorded dog, from its recorded sire and dam.

    0.0 when either parent is unknown or not on record.
    """
    dog = lookup_dog(store, dog_id)
    if dog is None:
        raise InvalidArgument(f"dog {dog_id} not found", field="dogId")
    if lookup_dog(store, dog.sire_id) is None or lookup_dog(store, dog.dam_id) is None:
        return 0.0
    return analyze(store, dog.sire_id, dog.dam_id, max_generations).inbreeding_coefficient
