"""Context blocks: fixed headers, fixed field order, absent fields omitted."""
from sculpture_guide.core import context_format
from sculpture_guide.models.sculpture_model import Artist, Material, Period, Sculpture


def test_sculpture_block_lists_present_fields_in_order():
    s = Sculpture(
        id="s1",
        name="David",
        artist="Michelangelo",
        year="1504",
        location="Florence",
        imageUrl="https://example.org/david.jpg",
    )
    text = context_format.format_sculptures([s])
    assert text == (
        "\n\nSCULPTURE INFORMATION:\n"
        "Name: David\n"
        "Artist: Michelangelo\n"
        "Year: 1504\n"
        "Location: Florence\n"
        "Image URL: https://example.org/david.jpg\n"
        "\n"
    )
    assert "Material" not in text
    assert "Description" not in text


def test_artist_block_order():
    artist = Artist(id="a1", name="Michelangelo", birthYear="1475", bio="Sculptor.")
    s = Sculpture(id="s1", name="David", artist="a1", material="Marble", description="Tall.")
    text = context_format.format_artist_sculptures([(s, artist)])
    assert text == (
        "\n\nARTIST AND SCULPTURE INFORMATION:\n"
        "Artist: Michelangelo\n"
        "Born: 1475\n"
        "Biography: Sculptor.\n"
        "\n"
        "Sculpture: David\n"
        "Material: Marble\n"
        "Description: Tall.\n"
        "\n"
    )


def test_material_block_uses_common_uses_label():
    material = Material(id="m1", name="Bronze", properties="Alloy", uses="Casting")
    s = Sculpture(id="s3", name="The Thinker", artist="Rodin", year="1904")
    text = context_format.format_material_sculptures([(s, material)])
    assert text.startswith("\n\nMATERIAL AND SCULPTURE INFORMATION:\nMaterial: Bronze\n")
    assert "Properties: Alloy\nCommon Uses: Casting\n\nSculpture: The Thinker\nArtist: Rodin\nYear: 1904\n" in text


def test_period_block_one_paragraph_per_result():
    period = Period(id="p1", name="Renaissance", startYear="1400", endYear="1600")
    a = Sculpture(id="s1", name="David", artist="a1")
    b = Sculpture(id="s2", name="Pieta", artist="a1", visualDescription="Mary holds Christ.")
    text = context_format.format_period_sculptures([(a, period), (b, period)])
    assert text.count("Period: Renaissance\nStarted: 1400\nEnded: 1600\n") == 2
    assert text.index("Sculpture: David") < text.index("Sculpture: Pieta")
    assert text.endswith("Visual Description: Mary holds Christ.\n\n")


def test_empty_strings_are_omitted():
    s = Sculpture(id="s1", name="X", artist="", year="")
    assert context_format.format_sculptures([s]) == "\n\nSCULPTURE INFORMATION:\nName: X\n\n"
