"""Enrichment priority chain: first category with results wins."""
from sculpture_guide.core import enrichment
from sculpture_guide.core.entity_store import EntityStore


def test_sculpture_category_wins_over_artist(store):
    block = enrichment.find_context(store, "Tell me about David by Michelangelo")
    assert block.startswith("\n\nSCULPTURE INFORMATION:\n")
    assert "Name: David\n" in block
    assert "Name: Statue of David\n" in block


def test_falls_through_to_artist(store):
    block = enrichment.find_context(store, "Anything by Rodin?")
    assert block.startswith("\n\nARTIST AND SCULPTURE INFORMATION:\n")
    assert "Sculpture: The Thinker\n" in block


def test_first_term_with_results_wins_within_category(store):
    # "Bernini" is tried first (catalog order) but has no data; "Rodin" does.
    block = enrichment.find_context(store, "Bernini or Rodin")
    assert "Artist: Auguste Rodin\n" in block
    assert "Bernini" not in block


def test_material_then_period(store):
    assert enrichment.find_context(store, "Show me bronze works").startswith(
        "\n\nMATERIAL AND SCULPTURE INFORMATION:\n"
    )
    assert enrichment.find_context(store, "Modern art please").startswith(
        "\n\nPERIOD AND SCULPTURE INFORMATION:\n"
    )


def test_custom_order(store):
    block = enrichment.find_context(
        store, "Michelangelo in marble", order=["material", "artist"]
    )
    assert block.startswith("\n\nMATERIAL AND SCULPTURE INFORMATION:\n")


def test_no_hits_returns_none(store):
    assert enrichment.find_context(store, "What's for lunch?") is None
    assert enrichment.build_context_message(store, "What's for lunch?") is None


def test_unloaded_or_missing_store_returns_none(tmp_path):
    assert enrichment.find_context(None, "David") is None
    assert enrichment.find_context(EntityStore(tmp_path / "none.json"), "David") is None


def test_context_message_prefix(store):
    message = enrichment.build_context_message(store, "David")
    assert message.startswith(enrichment.CONTEXT_PREFIX + "\n\nSCULPTURE INFORMATION:")
