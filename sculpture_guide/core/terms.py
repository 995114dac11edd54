"""
terms.py
--------
This module finds which well-known sculptures, artists, materials and
periods a user mentions in free-form text.

The result drives enrichment: every term found here becomes a lookup
against the Entity Store.

This is not NLP. A term is "mentioned" when it appears as a
case-insensitive substring anywhere in the text. No tokenizing, no
stemming, no word boundaries ("stone" matches "milestone").
"""

from typing import List, Sequence

# -------------------------------------------------------------------------
# Vocabulary catalogs
# Keep them grouped so they are easy to edit.
# Order matters: results keep catalog order, and enrichment tries the
# terms in that order.
# -------------------------------------------------------------------------

SCULPTURE_TERMS = [
    "David",
    "Pieta",
    "Venus de Milo",
    "The Thinker",
    "Ecstasy of Saint Teresa",
    "Bust of Nefertiti",
    "Terracotta Army",
    "Winged Victory",
    "Perseus with the Head of Medusa",
    "Statue of Liberty",
    "Christ the Redeemer",
    "Burghers of Calais",
]

ARTIST_TERMS = [
    "Michelangelo",
    "Bernini",
    "Rodin",
    "Donatello",
    "Alexandros",
    "Antioch",
    "Gian Lorenzo Bernini",
    "Auguste Rodin",
]

MATERIAL_TERMS = [
    "marble",
    "bronze",
    "stone",
    "wood",
    "clay",
    "terracotta",
    "steel",
]

PERIOD_TERMS = [
    "Renaissance",
    "Baroque",
    "Classical",
    "Hellenistic",
    "Modern",
]


# -------------------------------------------------------------------------
# Matcher
# -------------------------------------------------------------------------

def extract_terms(text: str, vocabulary: Sequence[str]) -> List[str]:
    """
    Return the vocabulary terms that occur in `text`, in vocabulary order.

    Examples:
        extract_terms("I love MICHELANGELO's work", ["Michelangelo"])
            -> ["Michelangelo"]
        extract_terms("what's for lunch?", MATERIAL_TERMS)
            -> []
    """
    if not text:
        return []
    lowered = text.lower()
    return [term for term in vocabulary if term.lower() in lowered]


def extract_sculpture_terms(text: str) -> List[str]:
    return extract_terms(text, SCULPTURE_TERMS)


def extract_artist_terms(text: str) -> List[str]:
    return extract_terms(text, ARTIST_TERMS)


def extract_material_terms(text: str) -> List[str]:
    return extract_terms(text, MATERIAL_TERMS)


def extract_period_terms(text: str) -> List[str]:
    return extract_terms(text, PERIOD_TERMS)
