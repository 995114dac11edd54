# sculpture_guide/core/context_format.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Context formatting
------------------------------------
Render Entity Store results as plain text blocks for the model.

Each formatter returns one block: a fixed section header, then one
paragraph per result. Optional fields that are missing (or empty) are
left out entirely. No escaping or markup, just "Label: value" lines.

    SCULPTURE INFORMATION:
    Name: David
    Artist: Michelangelo
    Year: 1501-1504
    ...
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from sculpture_guide.models.sculpture_model import (
    Artist,
    Material,
    Period,
    Sculpture,
)

SCULPTURE_HEADER = "SCULPTURE INFORMATION:"
ARTIST_HEADER = "ARTIST AND SCULPTURE INFORMATION:"
MATERIAL_HEADER = "MATERIAL AND SCULPTURE INFORMATION:"
PERIOD_HEADER = "PERIOD AND SCULPTURE INFORMATION:"


def _field_lines(fields: Iterable[Tuple[str, Optional[str]]]) -> List[str]:
    return [f"{label}: {value}\n" for label, value in fields if value]


def _sculpture_tail(sculpture: Sculpture) -> List[Tuple[str, Optional[str]]]:
    # Shared trailing fields, identical in every block.
    return [
        ("Description", sculpture.description),
        ("Image URL", sculpture.image_url),
        ("Visual Description", sculpture.visual_description),
    ]


def _block(header: str, paragraphs: Iterable[str]) -> str:
    return f"\n\n{header}\n" + "".join(paragraphs)


def format_sculptures(sculptures: Sequence[Sculpture]) -> str:
    paragraphs = []
    for s in sculptures:
        lines = [f"Name: {s.name}\n"]
        lines += _field_lines(
            [
                ("Artist", s.artist),
                ("Year", s.year),
                ("Material", s.material),
                ("Location", s.location),
                *_sculpture_tail(s),
            ]
        )
        paragraphs.append("".join(lines) + "\n")
    return _block(SCULPTURE_HEADER, paragraphs)


def format_artist_sculptures(results: Sequence[Tuple[Sculpture, Artist]]) -> str:
    paragraphs = []
    for s, artist in results:
        lines = [f"Artist: {artist.name}\n"]
        lines += _field_lines(
            [
                ("Born", artist.birth_year),
                ("Died", artist.death_year),
                ("Nationality", artist.nationality),
                ("Biography", artist.bio),
            ]
        )
        lines.append(f"\nSculpture: {s.name}\n")
        lines += _field_lines(
            [
                ("Year", s.year),
                ("Material", s.material),
                ("Location", s.location),
                *_sculpture_tail(s),
            ]
        )
        paragraphs.append("".join(lines) + "\n")
    return _block(ARTIST_HEADER, paragraphs)


def format_material_sculptures(results: Sequence[Tuple[Sculpture, Material]]) -> str:
    paragraphs = []
    for s, material in results:
        lines = [f"Material: {material.name}\n"]
        lines += _field_lines(
            [
                ("Properties", material.properties),
                ("Common Uses", material.uses),
            ]
        )
        lines.append(f"\nSculpture: {s.name}\n")
        lines += _field_lines(
            [
                ("Artist", s.artist),
                ("Year", s.year),
                ("Location", s.location),
                *_sculpture_tail(s),
            ]
        )
        paragraphs.append("".join(lines) + "\n")
    return _block(MATERIAL_HEADER, paragraphs)


def format_period_sculptures(results: Sequence[Tuple[Sculpture, Period]]) -> str:
    paragraphs = []
    for s, period in results:
        lines = [f"Period: {period.name}\n"]
        lines += _field_lines(
            [
                ("Started", period.start_year),
                ("Ended", period.end_year),
                ("Characteristics", period.characteristics),
            ]
        )
        lines.append(f"\nSculpture: {s.name}\n")
        lines += _field_lines(
            [
                ("Artist", s.artist),
                ("Year", s.year),
                ("Material", s.material),
                ("Location", s.location),
                *_sculpture_tail(s),
            ]
        )
        paragraphs.append("".join(lines) + "\n")
    return _block(PERIOD_HEADER, paragraphs)
