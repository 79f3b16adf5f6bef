from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any, Tuple
import uuid


SIRE = "sire"
DAM = "dam"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Dog:
    id: str = field(default_factory=_new_id)
    name: str = ""
    registration_number: Optional[str] = None
    # sex stored as 'M', 'F' or None
    sex: Optional[str] = None
    breed: Optional[str] = None
    sire_id: Optional[str] = None
    dam_id: Optional[str] = None

    @property
    def is_founder(self) -> bool:
        return not self.sire_id and not self.dam_id

    def parent_id(self, relation: str) -> Optional[str]:
        return self.sire_id if relation == SIRE else self.dam_id

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Dog":
        return Dog(
            id=d.get("id") or _new_id(),
            name=d.get("name") or "",
            registration_number=d.get("registration_number") or None,
            sex=d.get("sex") or None,
            breed=d.get("breed") or None,
            sire_id=d.get("sire_id") or None,
            dam_id=d.get("dam_id") or None,
        )


@dataclass(frozen=True)
class AncestorPath:
    """A route from a root dog up to one of its ancestors.

    `dogs[0]` is the root and `dogs[-1]` the ancestor reached; `relations[i]`
    is the parent edge ('sire' or 'dam') taken from `dogs[i]` to `dogs[i + 1]`.
    The zero-length path (root only) stands for the root itself.
    """
    dogs: Tuple[str, ...]
    relations: Tuple[str, ...] = ()

    @property
    def length(self) -> int:
        return len(self.relations)

    @property
    def root(self) -> str:
        return self.dogs[0]

    @property
    def ancestor(self) -> str:
        return self.dogs[-1]

    def passes_through(self, dog_id: str) -> bool:
        return dog_id in self.dogs

    def extend(self, parent_id: str, relation: str) -> "AncestorPath":
        return AncestorPath(self.dogs + (parent_id,), self.relations + (relation,))


@dataclass(frozen=True)
class CommonAncestorContribution:
    """One pairing of a sire-side path and a dam-side path to the same ancestor."""
    ancestor_id: str
    sire_path: AncestorPath
    dam_path: AncestorPath

    @property
    def sire_generations(self) -> int:
        return self.sire_path.length

    @property
    def dam_generations(self) -> int:
        return self.dam_path.length


@dataclass(frozen=True)
class DataIntegrityWarning:
    dog_id: str
    relation: str
    missing_id: Optional[str]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"dogId": self.dog_id, "relation": self.relation, "missingId": self.missing_id, "message": self.message}


@dataclass(frozen=True)
class CommonAncestor:
    ancestor_id: str
    occurrences: int
    min_generation_distance: int
    contribution: float
    ancestor_inbreeding: float
    name: str = ""
    registration_number: Optional[str] = None
    pathways: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ancestorId": self.ancestor_id,
            "name": self.name,
            "registrationNumber": self.registration_number,
            "occurrences": self.occurrences,
            "minGenerationDistance": self.min_generation_distance,
            "contribution": round(self.contribution, 4),
            "ancestorInbreeding": round(self.ancestor_inbreeding, 4),
            "pathways": list(self.pathways),
        }


@dataclass(frozen=True)
class PedigreeAnalysisResult:
    sire_id: str
    dam_id: str
    generations: int
    inbreeding_coefficient: float
    raw_coefficient: float
    common_ancestors: Tuple[CommonAncestor, ...]
    genetic_diversity: float
    recommendations: Tuple[str, ...]
    warnings: Tuple[DataIntegrityWarning, ...] = ()
    contributions: Tuple[CommonAncestorContribution, ...] = ()

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sireId": self.sire_id,
            "damId": self.dam_id,
            "generations": self.generations,
            "inbreedingCoefficient": self.inbreeding_coefficient,
            "commonAncestors": [a.to_dict() for a in self.common_ancestors],
            "geneticDiversity": self.genetic_diversity,
            "recommendations": list(self.recommendations),
            "dataIntegrityWarnings": [w.to_dict() for w in self.warnings],
        }
