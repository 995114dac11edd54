# sculpture_guide/models/sculpture_model.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Dataset Models
--------------------------------
Defines Pydantic models for the sculpture dataset the guide talks about.

Data is stored in JSON at:
    settings.sculpture_data_path  (data/sculptures.json)

File format (JSON)
------------------
One object with five named collections. Sculptures reference their artist,
material, period and location either by id or by display name:

{
  "sculptures": [
    {
      "id": "s1",
      "name": "David",
      "artist": "a1",
      "year": "1501-1504",
      "material": "Marble",
      "period": "p1",
      "location": "l1",
      "description": "...",
      "imageUrl": "https://...",
      "visualDescription": "..."
    }
  ],
  "artists":   [{"id": "a1", "name": "Michelangelo", "birthYear": "1475", ...}],
  "materials": [{"id": "m1", "name": "Marble", "properties": "...", "uses": "..."}],
  "periods":   [{"id": "p1", "name": "Renaissance", "startYear": "1400", ...}],
  "locations": [{"id": "l1", "name": "Galleria dell'Accademia", "city": "Florence"}]
}
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------

EntityKind = Literal["sculptures", "artists", "materials", "periods", "locations"]

ENTITY_KINDS: tuple[EntityKind, ...] = (
    "sculptures",
    "artists",
    "materials",
    "periods",
    "locations",
)


class _Entity(BaseModel):
    """Common base: immutable, keyed by a stable id, has a display name."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    id: str = Field(..., description="Stable identifier, unique within its collection.")
    name: str = Field(..., description="Display name.")


# ---------------------------------------------------------------------------
# Core models
# ---------------------------------------------------------------------------


class Artist(_Entity):
    birth_year: Optional[str] = Field(default=None, alias="birthYear")
    death_year: Optional[str] = Field(default=None, alias="deathYear")
    nationality: Optional[str] = None
    bio: Optional[str] = None


class Material(_Entity):
    properties: Optional[str] = None
    uses: Optional[str] = Field(default=None, description="Common uses.")


class Period(_Entity):
    start_year: Optional[str] = Field(default=None, alias="startYear")
    end_year: Optional[str] = Field(default=None, alias="endYear")
    characteristics: Optional[str] = None


class Location(_Entity):
    city: Optional[str] = None
    country: Optional[str] = None


class Sculpture(_Entity):
    """
    A single sculpture.

    - artist / material / period / location: references to the related
      collections, by id or by display name.
    - image_url: openly available image of the work.
    - visual_description: detailed description for visually impaired users.
    """

    artist: str = Field(..., description="Artist id or name.")
    year: Optional[str] = None
    material: Optional[str] = Field(default=None, description="Material id or name.")
    period: Optional[str] = Field(default=None, description="Period id or name.")
    location: Optional[str] = Field(default=None, description="Location id or name.")
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    visual_description: Optional[str] = Field(default=None, alias="visualDescription")


# ---------------------------------------------------------------------------
# Snapshot container
# ---------------------------------------------------------------------------


class SculptureData(BaseModel):
    """
    The whole dataset document. Validation fails if any collection
    contains the same id twice.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    sculptures: List[Sculpture] = Field(default_factory=list)
    artists: List[Artist] = Field(default_factory=list)
    materials: List[Material] = Field(default_factory=list)
    periods: List[Period] = Field(default_factory=list)
    locations: List[Location] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "SculptureData":
        for kind in ENTITY_KINDS:
            seen: set[str] = set()
            for entity in getattr(self, kind):
                if entity.id in seen:
                    raise ValueError(f"duplicate id {entity.id!r} in {kind}")
                seen.add(entity.id)
        return self

    def collection(self, kind: EntityKind) -> Sequence[_Entity]:
        """Return the entities of one kind, in document order."""
        if kind not in ENTITY_KINDS:
            raise KeyError(f"Unknown entity kind: {kind!r}")
        return getattr(self, kind)

    def index(self) -> Dict[str, Dict[str, _Entity]]:
        """Build {kind: {id: entity}} mappings (insertion order = document order)."""
        return {
            kind: {entity.id: entity for entity in self.collection(kind)}
            for kind in ENTITY_KINDS
        }
