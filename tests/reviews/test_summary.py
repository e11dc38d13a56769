"""Tests for review summary generation."""

import random

import pytest

from coffee_scan.reviews.aggregator import calculate_consensus
from coffee_scan.reviews.models import AggregatedReview, ProductInfo, SourceReview
from coffee_scan.reviews.summary import (
    DEFAULT_PRICE_RANGE,
    build_review_summary,
    rating_distribution,
    sample_reviews,
)


def test_distribution_for_high_rating():
    dist = rating_distribution(100, 4.7)
    assert (dist.five, dist.four, dist.three, dist.two, dist.one) == (60, 30, 8, 2, 0)


def test_distribution_remainder_goes_to_largest_bucket():
    dist = rating_distribution(37, 4.2)
    assert (dist.five, dist.four, dist.three, dist.two, dist.one) == (17, 14, 5, 1, 0)


def test_distribution_for_mixed_rating():
    dist = rating_distribution(10, 3.2)
    assert (dist.five, dist.four, dist.three, dist.two, dist.one) == (2, 4, 3, 1, 0)


@pytest.mark.parametrize("total", [0, 1, 7, 15, 64, 999, 12345])
@pytest.mark.parametrize("rating", [1.0, 3.9, 4.0, 4.5, 5.0])
def test_distribution_always_sums_to_total(total, rating):
    assert rating_distribution(total, rating).total() == total


def test_distribution_serializes_with_star_keys():
    data = rating_distribution(10, 4.6).model_dump(by_alias=True)
    assert set(data) == {"5", "4", "3", "2", "1"}


def test_sample_reviews_fill_templates():
    reviews = sample_reviews("Onyx Coffee Lab", "Southern Weather", random.Random(3))

    assert 3 <= len(reviews) <= 5
    assert len({review.author for review in reviews}) == len(reviews)
    for review in reviews:
        assert len(review.id) == 9
        assert "Onyx Coffee Lab" in review.comment
        assert "{" not in review.comment


def test_summary_from_scraped_sources():
    aggregated = calculate_consensus(
        [SourceReview(source="amazon", rating=4.4, review_count=250, confidence=0.9)]
    )

    summary = build_review_summary("Onyx Coffee Lab", "Geometry", aggregated, rng=random.Random(1))

    assert summary.estimated is False
    assert summary.total_reviews == 250
    assert summary.average_rating == 4.4
    assert summary.rating_distribution.total() == 250
    assert summary.product_page is None
    assert summary.confidence == 0.95


def test_summary_uses_product_page_numbers_when_no_source():
    aggregated = calculate_consensus([], random.Random(2))
    info = ProductInfo(
        url="https://onyxcoffeelab.com/products/geometry",
        title="Geometry",
        total_reviews=12,
        average_rating=4.1,
        source="onyxcoffeelab.com",
    )

    summary = build_review_summary("Onyx Coffee Lab", "Geometry", aggregated, info, random.Random(2))

    assert summary.estimated is True
    assert summary.total_reviews == 12
    assert summary.average_rating == 4.1
    assert summary.product_page.price == DEFAULT_PRICE_RANGE
    assert summary.product_page.availability == "In Stock"
    assert summary.product_page.description == "Premium Geometry coffee from Onyx Coffee Lab"


def test_summary_fallback_numbers():
    aggregated = calculate_consensus([], random.Random(4))

    summary = build_review_summary("Verve", "Streetlevel", aggregated, rng=random.Random(4))

    assert summary.estimated is True
    assert summary.total_reviews == aggregated.total_reviews
    assert summary.average_rating == aggregated.overall_rating
    assert summary.rating_distribution.total() == summary.total_reviews
    assert summary.consensus == aggregated.consensus


def test_summary_clamps_rating():
    aggregated = AggregatedReview(
        overall_rating=0.4,
        total_reviews=3,
        confidence=0.6,
        consensus="x",
        sources=[SourceReview(source="reddit", rating=0.4, review_count=3, confidence=0.3)],
    )

    summary = build_review_summary("A", "B", aggregated, rng=random.Random(0))

    assert summary.average_rating == 1.0


def test_summary_serializes_camel_case():
    aggregated = calculate_consensus([], random.Random(5))
    data = build_review_summary("A", "B", aggregated, rng=random.Random(5)).model_dump(by_alias=True)

    assert {"totalReviews", "averageRating", "ratingDistribution", "recentReviews", "estimated"} <= set(data)
