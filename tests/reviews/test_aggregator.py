"""Tests for source collection and consensus."""

import asyncio
import math
import random

import pytest

from coffee_scan.reviews.aggregator import (
    aggregate_reviews,
    calculate_consensus,
    collect_sources,
    generate_fallback_review,
    rating_band,
    source_weight,
)
from coffee_scan.reviews.models import SourceReview

AMAZON = SourceReview(source="amazon", rating=4.6, review_count=1234, confidence=0.9)
REDDIT = SourceReview(source="reddit", rating=4.2, review_count=4, sentiment="positive", confidence=0.4)


class StaticSource:
    def __init__(self, name, result=None, error=None):
        self.name = name
        self.result = result
        self.error = error

    async def fetch(self, roaster, product_name):
        if self.error is not None:
            raise self.error
        return self.result


def test_source_weight_uses_log_review_count():
    assert source_weight(AMAZON) == pytest.approx(0.9 * math.log(1235))


@pytest.mark.parametrize(
    "rating, band",
    [(4.7, "excellent"), (4.0, "very good"), (3.6, "good"), (3.0, "average"), (2.2, "below average")],
)
def test_rating_band(rating, band):
    assert rating_band(rating) == band


def test_consensus_is_weighted_by_confidence_and_volume():
    result = calculate_consensus([AMAZON, REDDIT])

    w_amazon = 0.9 * math.log(1235)
    w_reddit = 0.4 * math.log(5)
    expected = (4.6 * w_amazon + 4.2 * w_reddit) / (w_amazon + w_reddit)
    assert result.overall_rating == round(expected, 1)
    assert result.total_reviews == 1238
    assert result.confidence == 0.95
    assert set(result.breakdown) == {"amazon", "reddit"}
    assert result.consensus == (
        "Based on amazon, reddit, this coffee has excellent reviews. "
        "1234 Amazon reviews averaging 4.6/5, 4 Reddit mentions with positive sentiment."
    )


def test_single_source_confidence():
    result = calculate_consensus([REDDIT])

    assert result.confidence == pytest.approx(0.7)
    assert result.overall_rating == 4.2


def test_sources_without_ratings_give_neutral_rating():
    result = calculate_consensus([SourceReview(source="reddit", review_count=3, confidence=0.3)])

    assert result.overall_rating == 3.5
    assert result.total_reviews == 0


def test_fallback_review_is_estimated():
    for seed in range(20):
        result = generate_fallback_review(random.Random(seed))
        assert 15 <= result.total_reviews <= 64
        assert 3.5 <= result.overall_rating <= 5.0
        assert result.confidence == 0.3
        assert result.sources == []
        assert result.consensus.startswith("Limited review data available. Estimated ")


def test_no_sources_uses_fallback():
    result = calculate_consensus([], random.Random(7))

    assert result.sources == []
    assert result.consensus.startswith("Limited review data available.")


def test_collect_sources_skips_failures():
    sources = [
        StaticSource("amazon", error=RuntimeError("browser crashed")),
        StaticSource("reddit", result=REDDIT),
        StaticSource("product_page"),
    ]

    found = asyncio.run(collect_sources(sources, "Onyx", "Geometry"))

    assert found == [REDDIT]


def test_aggregate_reviews_all_sources_fail():
    sources = [StaticSource("amazon"), StaticSource("reddit", error=ValueError("bad json"))]

    result = asyncio.run(aggregate_reviews(sources, "Onyx", "Geometry", random.Random(1)))

    assert result.sources == []
    assert result.confidence == 0.3
