# sculpture_guide/core/enrichment.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide — Enrichment
----------------------------
Turn a user message into database context for the model:

    user text -> terms.py -> EntityStore lookups -> context_format.py -> text

Categories are tried in priority order (settings.enrichment_order, default
sculpture > artist > material > period). Inside a category, the extracted
terms are tried in catalog order and the first term with results wins.
The first category that yields anything ends the search; later categories
are not consulted.

The order is a tunable heuristic, not a relevance ranking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from sculpture_guide.core import context_format, terms
from sculpture_guide.core.entity_store import EntityStore

logger = logging.getLogger(__name__)

CONTEXT_PREFIX = "Here is relevant information about the sculptures from the database: "


@dataclass(frozen=True)
class Category:
    """One enrichment category: how to find terms, look them up, render hits."""

    name: str
    extract: Callable[[str], List[str]]
    lookup: Callable[[EntityStore, str], list]
    render: Callable[[list], str]


CATEGORIES: Dict[str, Category] = {
    "sculpture": Category(
        name="sculpture",
        extract=terms.extract_sculpture_terms,
        lookup=lambda store, term: store.find_by_name("sculptures", term),
        render=context_format.format_sculptures,
    ),
    "artist": Category(
        name="artist",
        extract=terms.extract_artist_terms,
        lookup=lambda store, term: store.sculptures_by_related("artists", term),
        render=context_format.format_artist_sculptures,
    ),
    "material": Category(
        name="material",
        extract=terms.extract_material_terms,
        lookup=lambda store, term: store.sculptures_by_related("materials", term),
        render=context_format.format_material_sculptures,
    ),
    "period": Category(
        name="period",
        extract=terms.extract_period_terms,
        lookup=lambda store, term: store.sculptures_by_related("periods", term),
        render=context_format.format_period_sculptures,
    ),
}

DEFAULT_ORDER = ("sculpture", "artist", "material", "period")


def find_context(
    store: Optional[EntityStore],
    text: str,
    order: Sequence[str] = DEFAULT_ORDER,
) -> Optional[str]:
    """
    Return the formatted context block for `text`, or None when nothing matched.

    Lookup errors propagate; the caller decides how to degrade.
    """
    if store is None or not store.loaded or not text:
        return None

    for name in order:
        category = CATEGORIES[name]
        for term in category.extract(text):
            results = category.lookup(store, term)
            if results:
                logger.debug(
                    "Enrichment hit: category=%s term=%r results=%d",
                    name,
                    term,
                    len(results),
                )
                return category.render(results)
    return None


def build_context_message(
    store: Optional[EntityStore],
    text: str,
    order: Sequence[str] = DEFAULT_ORDER,
) -> Optional[str]:
    """Full system-item text (prefix + block), or None."""
    block = find_context(store, text, order)
    if not block:
        return None
    return CONTEXT_PREFIX + block
