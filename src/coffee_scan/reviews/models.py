"""Review lookup models."""

from typing import Any, Literal

from pydantic import Field

from coffee_scan.schema import CamelModel

SourceName = Literal["amazon", "reddit", "product_page"]
Sentiment = Literal["positive", "neutral", "negative"]


class ProductReview(CamelModel):
    id: str
    author: str
    rating: int = Field(ge=1, le=5)
    title: str | None = None
    comment: str
    date: str
    verified: bool | None = None
    helpful: int | None = None
    source: Literal["website", "amazon", "third-party"]


class ProductPage(CamelModel):
    url: str
    title: str
    description: str | None = None
    price: str | None = None
    availability: str | None = None
    source: str


class ProductInfo(CamelModel):
    """What a regex pass over a product page found."""

    url: str
    title: str
    price: str | None = None
    total_reviews: int = 0
    average_rating: float = 0.0
    source: str


class RatingDistribution(CamelModel):
    five: int = Field(default=0, ge=0, alias="5")
    four: int = Field(default=0, ge=0, alias="4")
    three: int = Field(default=0, ge=0, alias="3")
    two: int = Field(default=0, ge=0, alias="2")
    one: int = Field(default=0, ge=0, alias="1")

    def total(self) -> int:
        return self.five + self.four + self.three + self.two + self.one


class ReviewSummary(CamelModel):
    total_reviews: int = Field(ge=0)
    average_rating: float = Field(ge=0.0, le=5.0)
    rating_distribution: RatingDistribution
    recent_reviews: list[ProductReview] = Field(default_factory=list)
    product_page: ProductPage | None = None
    estimated: bool = True
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    consensus: str | None = None


class SourceReview(CamelModel):
    source: SourceName
    rating: float | None = None
    review_count: int | None = None
    sentiment: Sentiment | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    raw_data: dict[str, Any] | None = None


class AggregatedReview(CamelModel):
    overall_rating: float
    total_reviews: int
    confidence: float = Field(ge=0.0, le=1.0)
    consensus: str
    sources: list[SourceReview] = Field(default_factory=list)
    breakdown: dict[str, SourceReview] = Field(default_factory=dict)


class ReviewLookupDebug(CamelModel):
    found_product_info: bool = False
    searched_urls: list[str] = Field(default_factory=list)
    product_url: str | None = None
    sources: list[str] = Field(default_factory=list)


class ReviewLookup(CamelModel):
    summary: ReviewSummary
    search_query: str
    search_time: int
    debug: ReviewLookupDebug
