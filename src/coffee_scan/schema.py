"""Data models for coffee-scan."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ProcessingMethod = Literal["vision", "ocr"]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoffeeExtraction(CamelModel):
    """Structured information extracted from a coffee bag label."""

    roaster: str | None = None
    product_name: str | None = None
    origin: str | None = None
    region: str | None = None
    farm: str | None = None
    varietal: list[str] | None = None
    processing_method: str | None = None
    roast_level: str | None = None
    flavor_notes: list[str] | None = None
    altitude: int | None = None
    harvest_year: int | None = None
    price: str | None = None
    weight: str | None = None
    brew_recommendations: list[str] | None = None


class VisionExtractionResult(CamelModel):
    """Extraction plus the raw model reply it was parsed from."""

    raw_response: str
    structured_data: CoffeeExtraction
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    tokens_used: int | None = None
