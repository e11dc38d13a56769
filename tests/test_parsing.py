"""Tests for vision reply parsing and cleanup."""

import pytest

from coffee_scan.parsing import (
    UNPARSEABLE,
    clean_extraction,
    extract_fallback_data,
    extraction_confidence,
    parse_altitude,
    parse_vision_response,
    standardize_processing_method,
    standardize_roast_level,
    strip_markdown_fences,
)
from coffee_scan.schema import CoffeeExtraction


def test_strip_markdown_fences():
    raw = '```json\n{"roaster": "Onyx"}\n```'
    assert strip_markdown_fences(raw) == '{"roaster": "Onyx"}'


def test_parse_fenced_json_reply():
    raw = """```json
{
  "roaster": "Roasted by Onyx Coffee Lab",
  "productName": "  Southern   Weather ",
  "origin": "Colombia",
  "roastLevel": "Medium Roast",
  "flavorNotes": ["milk chocolate, honey", "nuts", "nuts"],
  "processingMethod": "Fully Washed"
}
```"""

    extraction, confidence, parser = parse_vision_response(raw)

    assert parser == "json"
    assert extraction.roaster == "Onyx Coffee Lab"
    assert extraction.product_name == "Southern Weather"
    assert extraction.roast_level == "medium"
    assert extraction.processing_method == "washed"
    assert extraction.flavor_notes == ["milk chocolate", "honey", "nuts"]
    # roaster .3 + product .2 + origin .2 + roast .1 + flavor .1 + process .05
    assert confidence == pytest.approx(0.95)


def test_parse_uses_regex_fallback_for_prose():
    raw = "Sure! Here is what I found.\nRoaster: Stumptown\nOrigin: Ethiopia\nRoast: light"

    extraction, confidence, parser = parse_vision_response(raw)

    assert parser == "regex_fallback"
    assert extraction.roaster == "Stumptown"
    assert extraction.origin == "Ethiopia"
    assert extraction.roast_level == "light"
    assert confidence > 0


def test_parse_unparseable_reply():
    extraction, confidence, parser = parse_vision_response("I cannot read this label.")

    assert parser == "unparseable"
    assert confidence == 0.0
    assert extraction.roaster == UNPARSEABLE
    assert extraction.product_name == UNPARSEABLE
    assert extraction.flavor_notes == []


def test_parse_json_array_is_not_an_extraction():
    _, _, parser = parse_vision_response('["roaster", "origin"]')
    assert parser == "unparseable"


def test_extract_fallback_data_none_when_nothing_matches():
    assert extract_fallback_data("just a photo of beans") is None


def test_confidence_ignores_unparseable_placeholders():
    extraction = CoffeeExtraction(roaster=UNPARSEABLE, origin="Kenya")
    assert extraction_confidence(extraction) == pytest.approx(0.2)


def test_confidence_full_extraction_is_one():
    extraction = CoffeeExtraction(
        roaster="Verve",
        product_name="Colombia Huila",
        origin="Colombia",
        roast_level="medium-light",
        flavor_notes=["red apple"],
        processing_method="washed",
        varietal=["Caturra"],
    )
    assert extraction_confidence(extraction) == pytest.approx(1.0)


def test_clean_extraction_drops_null_strings_and_long_notes():
    cleaned = clean_extraction(
        {
            "roaster": "null",
            "origin": "N/A",
            "flavorNotes": ["cherry", "x" * 60, ""],
            "varietal": "Bourbon",
        }
    )
    assert cleaned.roaster is None
    assert cleaned.origin is None
    assert cleaned.flavor_notes == ["cherry"]
    assert cleaned.varietal == ["Bourbon"]


def test_clean_extraction_limits_list_length():
    cleaned = clean_extraction({"flavor_notes": [f"note {i}" for i in range(15)]})
    assert len(cleaned.flavor_notes) == 10


def test_clean_extraction_numeric_fields():
    cleaned = clean_extraction({"altitude": "1,800-2,000 masl", "harvestYear": "2023 harvest"})
    assert cleaned.altitude == 1900
    assert cleaned.harvest_year == 2023


def test_clean_extraction_rejects_implausible_harvest_year():
    assert clean_extraction({"harvestYear": 1850}).harvest_year is None
    assert clean_extraction({"harvestYear": 3000}).harvest_year is None


def test_clean_extraction_stringifies_numbers():
    cleaned = clean_extraction({"price": 18.5, "weight": 340})
    assert cleaned.price == "18.5"
    assert cleaned.weight == "340"


@pytest.mark.parametrize(
    "value, expected",
    [
        (1850, 1850),
        ("1900-2100m", 2000),
        ("6000 ft", 1829),
        ("unknown", None),
        (0, None),
        (12000, None),
        (True, None),
    ],
)
def test_parse_altitude(value, expected):
    assert parse_altitude(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Light Roast", "light"),
        ("Medium-Light", "medium-light"),
        ("MEDIUM", "medium"),
        ("Medium Dark", "medium-dark"),
        ("Dark", "dark"),
        ("Espresso", "Espresso"),
    ],
)
def test_standardize_roast_level(value, expected):
    assert standardize_roast_level(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Fully Washed", "washed"),
        ("Wet Hulled", "wet-hulled"),
        ("Giling Basah", "wet-hulled"),
        ("Pulped Natural", "honey"),
        ("Red Honey", "honey"),
        ("Dry Process", "natural"),
        ("Anaerobic", "experimental"),
        ("Koji", "Koji"),
    ],
)
def test_standardize_processing_method(value, expected):
    assert standardize_processing_method(value) == expected


def test_parse_keeps_string_entries_when_a_list_holds_numbers():
    raw = '{"roaster":"Onyx","productName":"Southern Weather","flavorNotes":["cherry",5],"varietal":["Bourbon"]}'

    extraction, _, parser = parse_vision_response(raw)

    assert parser == "json"
    assert extraction.roaster == "Onyx"
    assert extraction.flavor_notes == ["cherry"]
    assert extraction.varietal == ["Bourbon"]


def test_clean_extraction_keeps_lists_when_another_field_is_invalid():
    cleaned = clean_extraction({"roaster": {"name": "Onyx"}, "origin": "Kenya", "varietal": ["SL28", None]})

    assert cleaned.roaster is None
    assert cleaned.origin == "Kenya"
    assert cleaned.varietal == ["SL28"]
