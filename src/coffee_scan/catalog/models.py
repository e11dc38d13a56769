"""Catalog and recommendation models."""

from typing import Literal

from pydantic import Field

from coffee_scan.schema import CamelModel


class RoasterMatch(CamelModel):
    """A roaster resolved from label text or a web domain."""

    id: int | None = None
    name: str
    domain: str | None = None
    website: str | None = None
    location: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    verified: bool = False


class RoasterRef(CamelModel):
    name: str
    location: str | None = None


class RecommendedCoffee(CamelModel):
    id: int
    name: str
    roaster: RoasterRef
    origin: str | None = None
    roast_level: str | None = None
    processing_method: str | None = None
    flavor_notes: list[str] = Field(default_factory=list)
    price: float | None = None
    image_url: str | None = None


class CoffeeRecommendation(CamelModel):
    id: int
    coffee: RecommendedCoffee
    similarity_score: float = Field(ge=0.0, le=1.0)
    reason: str
    type: Literal["content"] = "content"
