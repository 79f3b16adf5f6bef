"""Dog record storage backed by SQLite.

Dogs are stored one row per dog in ``<root>/storage.db`` and mirrored in the
in-memory ``self.dogs`` dict, which is what the analysis engine reads. Reads
never take the lock; writes are serialized with an RLock and go straight to
the database.

Any object exposing ``get_dog(dog_id) -> Optional[Dog]`` can be handed to the
analysis engine. ``Storage`` is the persistent one; ``MemoryAncestryStore``
holds records that already live in memory and performs no validation, so it
can also represent the partial or corrupted pedigrees seen in imports.
"""
from __future__ import annotations
from typing import Dict, Optional, List, Set, Iterable
from pathlib import Path
import threading
import sqlite3
import logging

from .models import Dog


class Storage:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        # guards DB writes from multiple threads
        self._lock = threading.RLock()
        self._db_file = self.root / "storage.db"
        self._conn: Optional[sqlite3.Connection] = None
        self._connect()
        self._ensure_tables()
        self._load()

    def _connect(self) -> None:
        if self._conn is None:
            # FastAPI runs sync handlers in worker threads; writes are guarded by self._lock.
            self._conn = sqlite3.connect(str(self._db_file), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row

    def _ensure_tables(self) -> None:
        cur = self._conn.cursor()
        cur.executescript(
            """
            CREATE TABLE IF NOT EXISTS dogs(
                id TEXT PRIMARY KEY,
                name TEXT,
                registration_number TEXT,
                sex TEXT,
                breed TEXT,
                sire_id TEXT,
                dam_id TEXT
            );
            CREATE INDEX IF NOT EXISTS dogs_sire ON dogs(sire_id);
            CREATE INDEX IF NOT EXISTS dogs_dam ON dogs(dam_id);
            """
        )
        self._conn.commit()

    def _load(self) -> None:
        self.dogs: Dict[str, Dog] = {}
        cur = self._conn.cursor()
        cur.execute("SELECT id, name, registration_number, sex, breed, sire_id, dam_id FROM dogs")
        for row in cur.fetchall():
            d = Dog.from_dict(dict(row))
            self.dogs[d.id] = d
        logging.info("Loaded %d dogs from %s", len(self.dogs), self._db_file)

    def _write(self, dog: Dog) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO dogs(id, name, registration_number, sex, breed, sire_id, dam_id) VALUES(?, ?, ?, ?, ?, ?, ?)",
            (dog.id, dog.name, dog.registration_number, dog.sex, dog.breed, dog.sire_id, dog.dam_id),
        )

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # Read side (ancestry store contract)
    def get_dog(self, dog_id: str) -> Optional[Dog]:
        return self.dogs.get(dog_id)

    def list_dogs(self) -> List[Dog]:
        return list(self.dogs.values())

    def children_of(self, dog_id: str) -> List[Dog]:
        return [d for d in self.dogs.values() if d.sire_id == dog_id or d.dam_id == dog_id]

    def ancestor_ids(self, dog_id: Optional[str]) -> Set[str]:
        """Return every recorded ancestor of dog_id, dog_id itself included."""
        seen: Set[str] = set()
        stack = [dog_id] if dog_id else []
        while stack:
            cur = stack.pop()
            if cur in seen:
                continue
            seen.add(cur)
            d = self.dogs.get(cur)
            if d is None:
                continue
            for p in (d.sire_id, d.dam_id):
                if p and p not in seen:
                    stack.append(p)
        return seen

    def _check_parentage(self, dog: Dog) -> None:
        if dog.sire_id and dog.sire_id == dog.id:
            raise ValueError(f"Dog {dog.id} cannot be its own sire")
        if dog.dam_id and dog.dam_id == dog.id:
            raise ValueError(f"Dog {dog.id} cannot be its own dam")
        if dog.sire_id and dog.sire_id == dog.dam_id:
            raise ValueError(f"Dog {dog.id} has the same sire and dam ({dog.sire_id})")
        for parent in (dog.sire_id, dog.dam_id):
            if parent and dog.id in self.ancestor_ids(parent):
                raise ValueError(f"Dog {dog.id} would become its own ancestor through {parent}")

    # Write side
    def add_dog(self, dog: Dog) -> None:
        with self._lock:
            self._check_parentage(dog)
            self.dogs[dog.id] = dog
            self._write(dog)
            self._conn.commit()

    def add_dogs(self, dogs: Iterable[Dog]) -> int:
        """Insert several dogs in one transaction. Parents must come first."""
        n = 0
        with self._lock:
            try:
                for dog in dogs:
                    self._check_parentage(dog)
                    self.dogs[dog.id] = dog
                    self._write(dog)
                    n += 1
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                self._load()
                raise
        return n

    def update_dog(self, dog: Dog) -> None:
        with self._lock:
            if dog.id not in self.dogs:
                raise KeyError(f"Dog {dog.id} not found")
            self._check_parentage(dog)
            self.dogs[dog.id] = dog
            self._write(dog)
            self._conn.commit()

    def delete_dog(self, dog_id: str) -> bool:
        with self._lock:
            if dog_id not in self.dogs:
                return False
            # clear references held by offspring
            for child in self.children_of(dog_id):
                if child.sire_id == dog_id:
                    child.sire_id = None
                if child.dam_id == dog_id:
                    child.dam_id = None
                self._write(child)
            del self.dogs[dog_id]
            self._conn.execute("DELETE FROM dogs WHERE id = ?", (dog_id,))
            self._conn.commit()
            return True


class MemoryAncestryStore:
    """Read-only-by-convention view over dogs already held in memory."""

    def __init__(self, dogs: Iterable[Dog] = ()) -> None:
        self.dogs: Dict[str, Dog] = {d.id: d for d in dogs}

    def get_dog(self, dog_id: str) -> Optional[Dog]:
        return self.dogs.get(dog_id)

    def add_dog(self, dog: Dog) -> None:
        self.dogs[dog.id] = dog

    def list_dogs(self) -> List[Dog]:
        return list(self.dogs.values())
