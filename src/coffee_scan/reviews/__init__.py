"""Review lookup: scraping, aggregation and summary generation."""

from coffee_scan.reviews.models import AggregatedReview, ReviewLookup, ReviewSummary, SourceReview
from coffee_scan.reviews.service import lookup_reviews

__all__ = ["AggregatedReview", "ReviewLookup", "ReviewSummary", "SourceReview", "lookup_reviews"]
