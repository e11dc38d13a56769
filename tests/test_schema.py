"""Tests for schema models."""

from coffee_scan import CoffeeExtraction, VisionExtractionResult


def test_extraction_all_none():
    """CoffeeExtraction with no data should work."""
    info = CoffeeExtraction()
    assert info.roaster is None
    assert info.product_name is None
    assert info.flavor_notes is None
    assert info.altitude is None


def test_extraction_accepts_camel_case_keys():
    info = CoffeeExtraction.model_validate(
        {"roaster": "Onyx Coffee Lab", "productName": "Southern Weather", "flavorNotes": ["Honey"]}
    )
    assert info.product_name == "Southern Weather"
    assert info.flavor_notes == ["Honey"]


def test_extraction_dumps_camel_case_keys():
    info = CoffeeExtraction(product_name="Hair Bender", roast_level="medium", harvest_year=2023)
    data = info.model_dump(by_alias=True, exclude_none=True)
    assert data == {"productName": "Hair Bender", "roastLevel": "medium", "harvestYear": 2023}


def test_vision_result_defaults():
    result = VisionExtractionResult(raw_response="{}", structured_data=CoffeeExtraction())
    assert result.confidence == 0.0
    assert result.tokens_used is None
    assert "rawResponse" in result.model_dump(by_alias=True)
