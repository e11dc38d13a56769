"""Tests for shared text helpers."""

from coffee_scan.text_utils import (
    extract_domain,
    extract_processing_method,
    extract_roast_level,
    normalize_text,
    parse_flavor_notes,
    similarity,
    slugify,
)


def test_normalize_text():
    assert normalize_text("  Peet's   Coffee! ") == "peet s coffee"


def test_slugify():
    assert slugify("Major Dickason's Blend") == "major-dickasons-blend"


def test_similarity_exact_and_empty():
    assert similarity("Onyx Coffee Lab", "onyx coffee lab") == 1.0
    assert similarity("", "Onyx") == 0.0


def test_extract_domain():
    assert extract_domain("https://www.onyxcoffeelab.com/products/geometry") == "onyxcoffeelab.com"
    assert extract_domain("shop.heartroasters.com") == "shop.heartroasters.com"
    assert extract_domain("   ") is None


def test_parse_flavor_notes():
    assert parse_flavor_notes("Notes: cherry, cocoa and brown sugar") == ["cherry", "cocoa", "brown sugar"]


def test_extract_roast_level_prefers_compound_levels():
    assert extract_roast_level("A lovely MEDIUM-LIGHT roast") == "medium-light"
    assert extract_roast_level("no roast info") is None


def test_extract_processing_method():
    assert extract_processing_method("Process: Washed") == "washed"
    assert extract_processing_method("Sumatra wet hulled lot") == "wet-hulled"
