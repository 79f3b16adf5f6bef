"""CSV pedigree import.

Expected columns (header names are case-insensitive, spaces become
underscores): id, name, registration_number, sex, breed, sire_id, dam_id.
Only `id` is mandatory; empty parent cells mean "unknown".

`validate_rows` returns (errors, warnings). Errors block the import:
missing or duplicated ids, a dog that is its own parent, the same sire and
dam, or a loop in the file. Parent ids that are neither in the file nor in
the store are warnings only; they are kept as dangling references, which
the analysis reports and treats as founders.
"""
from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Tuple, Optional
import csv
import logging

from .models import Dog


def _norm_header(h: str) -> str:
    return (h or "").strip().lower().replace(" ", "_")


def read_pedigree_csv(path: Path) -> List[Dict[str, str]]:
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        rows = []
        for raw in reader:
            rows.append({_norm_header(k): (v or "").strip() for k, v in raw.items() if k is not None})
    return rows


def _loop_members(dogs: Dict[str, Dog]) -> List[str]:
    """Ids of dogs that take part in (or descend from) a parentage loop inside the file."""
    order = parent_first_order(dogs.values())
    placed = {d.id for d in order}
    return sorted(i for i in dogs if i not in placed)


def validate_rows(rows: List[Dict[str, str]], known_ids: Optional[set] = None) -> Tuple[List[str], List[str]]:
    errors: List[str] = []
    warnings: List[str] = []
    known_ids = known_ids or set()
    dogs: Dict[str, Dog] = {}

    for line, row in enumerate(rows, start=2):
        did = row.get("id", "")
        if not did:
            errors.append(f"Row {line}: 'id' is required.")
            continue
        if did in dogs:
            errors.append(f"Row {line}: id '{did}' is duplicated.")
            continue
        sire, dam = row.get("sire_id") or None, row.get("dam_id") or None
        if sire == did:
            errors.append(f"Row {line}: dog '{did}' cannot be its own sire.")
        if dam == did:
            errors.append(f"Row {line}: dog '{did}' cannot be its own dam.")
        if sire and sire == dam:
            errors.append(f"Row {line}: dog '{did}' has the same sire and dam.")
        dogs[did] = Dog.from_dict(row)

    for d in dogs.values():
        for relation, pid in (("sire", d.sire_id), ("dam", d.dam_id)):
            if pid and pid not in dogs and pid not in known_ids:
                warnings.append(f"{relation}_id '{pid}' of '{d.id}' is not a known dog.")

    if not errors:
        looped = _loop_members(dogs)
        if looped:
            errors.append(f"Parentage loop involving: {', '.join(looped)}.")
    return errors, warnings


def parent_first_order(dogs) -> List[Dog]:
    """Order dogs so that in-file parents come before their offspring.

    Dogs caught in a parentage loop are left out.
    """
    by_id = {d.id: d for d in dogs}
    pending = {d.id: {p for p in (d.sire_id, d.dam_id) if p and p in by_id} for d in by_id.values()}
    children: Dict[str, List[str]] = {}
    for did, parents in pending.items():
        for p in parents:
            children.setdefault(p, []).append(did)

    ready = [did for did, parents in pending.items() if not parents]
    out: List[Dog] = []
    while ready:
        did = ready.pop(0)
        out.append(by_id[did])
        for c in children.get(did, []):
            pending[c].discard(did)
            if not pending[c]:
                ready.append(c)
    return out


def import_csv(path: Path, storage) -> Tuple[int, List[str], List[str]]:
    """Validate and load a pedigree CSV into storage.

    Returns (imported_count, errors, warnings). Nothing is written when there
    are errors.
    """
    rows = read_pedigree_csv(path)
    known = set(getattr(storage, "dogs", {}).keys())
    errors, warnings = validate_rows(rows, known)
    if errors:
        logging.warning("pedigree import of %s rejected: %d errors", path, len(errors))
        return 0, errors, warnings
    dogs = parent_first_order(Dog.from_dict(r) for r in rows)
    try:
        n = storage.add_dogs(dogs)
    except ValueError as exc:
        return 0, [str(exc)], warnings
    logging.info("imported %d dogs from %s (%d warnings)", n, path, len(warnings))
    return n, [], warnings
