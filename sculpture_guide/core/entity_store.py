# sculpture_guide/core/entity_store.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Entity Store
------------------------------
Read-only, in-memory lookups over the sculpture dataset.

Responsibility
--------------
This module does ONE job:

    name / id / criteria  --->  sculptures (+ the related entity that matched)

Examples:
    store.find_by_name("sculptures", "david")        -> [David, Statue of David]
    store.sculptures_by_related("artists", "rodin")  -> [(The Thinker, Rodin), ...]
    store.search(material="bronze", period="modern") -> [...]

State
-----
A store is either *unloaded* (no snapshot) or *loaded* (one immutable
SculptureData snapshot). Every lookup on an unloaded store returns an empty
result / None; absence of data is a normal condition, never an error. Asking
for an unknown entity kind is a KeyError in both states.

Loading reads the whole document in one go. A failed load (missing file,
bad JSON, schema errors, duplicate ids) leaves the previous state untouched
and returns False.

Parsed snapshots are cached per path for the lifetime of the process, so
opening a store per WebSocket session does not re-read the file.

Public API
----------
- EntityStore(path).load(force_reload=False) -> bool
- EntityStore.load_async(force_reload=False) -> bool
- find_by_name / get_by_id / sculptures_by_related / search
- get_entity_store(force_reload=False) -> EntityStore  (process-wide store)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError

from sculpture_guide.core.config import settings
from sculpture_guide.models.sculpture_model import (
    ENTITY_KINDS,
    Artist,
    EntityKind,
    Location,
    Material,
    Period,
    Sculpture,
    SculptureData,
)
from sculpture_guide.utils import Stopwatch, read_json_safely

logger = logging.getLogger(__name__)

# Related kind -> Sculpture attribute holding the reference.
REFERENCE_FIELDS: Dict[str, str] = {
    "artists": "artist",
    "materials": "material",
    "periods": "period",
    "locations": "location",
}

# ---------------------------------------------------------------------------
# Internal cache
# ---------------------------------------------------------------------------

_snapshot_cache: Dict[Path, SculptureData] = {}
_default_store: "EntityStore | None" = None


def _read_snapshot(path: Path) -> Optional[SculptureData]:
    """Parse the dataset file. Returns None (and logs) on any failure."""
    raw = read_json_safely(path, default=None, log_missing=True)
    if raw is None:
        return None
    if not isinstance(raw, dict):
        logger.warning("Expected a JSON object in %s, got %s", path, type(raw).__name__)
        return None
    try:
        return SculptureData.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Invalid sculpture dataset in %s: %s", path, exc)
        return None


class EntityStore:
    """
    Lookup service over one sculpture dataset file.

    Parameters
    ----------
    path:
        Dataset location. Defaults to settings.sculpture_data_path
        (relative paths resolve against the working directory).
    """

    def __init__(self, path: Optional[Path | str] = None) -> None:
        if path is None:
            self.path = settings.resolved_data_path()
        else:
            self.path = Path(path).resolve()
        self._data: Optional[SculptureData] = None
        self._index: Dict[str, Dict[str, object]] = {}

    # ----------------------------------------------------------------------
    # Loading
    # ----------------------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self._data is not None

    def load(self, force_reload: bool = False) -> bool:
        """
        Load the dataset snapshot.

        Returns True on success. On failure the store keeps whatever it had
        before (nothing, if it was never loaded) and returns False.
        """
        data = None if force_reload else _snapshot_cache.get(self.path)
        if data is None:
            with Stopwatch(f"Loading sculpture data from {self.path}", logger, logging.DEBUG):
                data = _read_snapshot(self.path)
            if data is None:
                logger.error("Failed to load sculpture data from %s", self.path)
                return False
            _snapshot_cache[self.path] = data

        # Index first: lookups treat _data as the "loaded" switch.
        self._index = data.index()
        self._data = data
        logger.info(
            "Sculpture data ready from %s (%s)",
            self.path,
            ", ".join(f"{kind}={n}" for kind, n in self.counts().items()),
        )
        return True

    async def load_async(self, force_reload: bool = False) -> bool:
        """Same as load(), with the file read done in a worker thread."""
        return await asyncio.to_thread(self.load, force_reload)

    def counts(self) -> Dict[str, int]:
        """Number of entities per kind ({} when unloaded)."""
        if self._data is None:
            return {}
        return {kind: len(self._data.collection(kind)) for kind in ENTITY_KINDS}

    # ----------------------------------------------------------------------
    # Generic lookups
    # ----------------------------------------------------------------------
    def find_by_name(self, kind: EntityKind, query: str) -> List:
        """Entities of `kind` whose name contains `query` (case-insensitive), in load order."""
        if kind not in ENTITY_KINDS:
            raise KeyError(f"Unknown entity kind: {kind!r}")
        if self._data is None:
            return []
        needle = query.lower()
        return [e for e in self._data.collection(kind) if needle in e.name.lower()]

    def get_by_id(self, kind: EntityKind, entity_id: str):
        """Exact id match, or None. Unknown kinds raise KeyError, loaded or not."""
        if kind not in ENTITY_KINDS:
            raise KeyError(f"Unknown entity kind: {kind!r}")
        if self._data is None:
            return None
        return self._index[kind].get(entity_id)

    def resolve_reference(self, kind: EntityKind, reference: Optional[str]):
        """
        Resolve a sculpture's reference field to the related entity.

        Matches the collection's id first, then its name (exact, case-sensitive).
        """
        if self._data is None or not reference:
            return None
        found = self.get_by_id(kind, reference)
        if found is not None:
            return found
        for entity in self._data.collection(kind):
            if entity.name == reference:
                return entity
        return None

    def sculptures_by_related(self, kind: EntityKind, query: str) -> List[Tuple[Sculpture, object]]:
        """
        (sculpture, related entity) pairs for every related entity whose name
        contains `query`. A sculpture matches an entity when its reference
        field equals the entity's id or its name.
        """
        field = REFERENCE_FIELDS.get(kind)
        if field is None:
            raise KeyError(f"Sculptures do not reference {kind!r}")
        if self._data is None:
            return []

        results: List[Tuple[Sculpture, object]] = []
        for entity in self.find_by_name(kind, query):
            for sculpture in self._data.sculptures:
                ref = getattr(sculpture, field)
                if ref == entity.id or ref == entity.name:
                    results.append((sculpture, entity))
        return results

    def search(
        self,
        *,
        name: Optional[str] = None,
        artist: Optional[str] = None,
        material: Optional[str] = None,
        period: Optional[str] = None,
        location: Optional[str] = None,
    ) -> List[Sculpture]:
        """
        Conjunctive filter over sculptures. Empty criteria are ignored.

        `name` matches the sculpture's own name; every other criterion must
        match the name of the entity the sculpture's reference resolves to.
        An unresolvable reference fails the criterion.
        """
        if self._data is None:
            return []

        related = {
            "artists": artist,
            "materials": material,
            "periods": period,
            "locations": location,
        }

        results: List[Sculpture] = []
        for sculpture in self._data.sculptures:
            if name and name.lower() not in sculpture.name.lower():
                continue
            ok = True
            for kind, wanted in related.items():
                if not wanted:
                    continue
                entity = self.resolve_reference(kind, getattr(sculpture, REFERENCE_FIELDS[kind]))
                if entity is None or wanted.lower() not in entity.name.lower():
                    ok = False
                    break
            if ok:
                results.append(sculpture)
        return results

    # ----------------------------------------------------------------------
    # Named helpers
    # ----------------------------------------------------------------------
    def find_sculpture_by_name(self, name: str) -> List[Sculpture]:
        return self.find_by_name("sculptures", name)

    def get_sculpture_by_id(self, sculpture_id: str) -> Optional[Sculpture]:
        return self.get_by_id("sculptures", sculpture_id)

    def get_artist_by_id(self, artist_id: str) -> Optional[Artist]:
        return self.get_by_id("artists", artist_id)

    def get_material_by_id(self, material_id: str) -> Optional[Material]:
        return self.get_by_id("materials", material_id)

    def get_period_by_id(self, period_id: str) -> Optional[Period]:
        return self.get_by_id("periods", period_id)

    def get_location_by_id(self, location_id: str) -> Optional[Location]:
        return self.get_by_id("locations", location_id)

    def get_sculptures_by_artist(self, artist_name: str) -> List[Tuple[Sculpture, Artist]]:
        return self.sculptures_by_related("artists", artist_name)

    def get_sculptures_by_material(self, material_name: str) -> List[Tuple[Sculpture, Material]]:
        return self.sculptures_by_related("materials", material_name)

    def get_sculptures_by_period(self, period_name: str) -> List[Tuple[Sculpture, Period]]:
        return self.sculptures_by_related("periods", period_name)

    def get_sculptures_by_location(self, location_name: str) -> List[Tuple[Sculpture, Location]]:
        return self.sculptures_by_related("locations", location_name)


# ---------------------------------------------------------------------------
# Process-wide store
# ---------------------------------------------------------------------------


def get_entity_store(force_reload: bool = False) -> EntityStore:
    """
    Return the process-wide store for settings.sculpture_data_path.

    - Loads on first use; set force_reload=True to re-read the file.
    - Never raises on load failure: the returned store is simply unloaded.
    """
    global _default_store

    if _default_store is None:
        _default_store = EntityStore()
    if force_reload or not _default_store.loaded:
        _default_store.load(force_reload=force_reload)
    return _default_store


def clear_cache() -> None:
    """Forget cached snapshots and the process-wide store."""
    global _default_store

    _snapshot_cache.clear()
    _default_store = None
