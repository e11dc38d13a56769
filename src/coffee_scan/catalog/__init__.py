"""Roaster matching and recommendations backed by a packaged catalog."""

from coffee_scan.catalog.models import CoffeeRecommendation, RoasterMatch
from coffee_scan.catalog.recommender import generate_recommendations
from coffee_scan.catalog.roasters import match_roaster, search_roasters_by_domain, search_roasters_by_name

__all__ = [
    "CoffeeRecommendation",
    "RoasterMatch",
    "generate_recommendations",
    "match_roaster",
    "search_roasters_by_domain",
    "search_roasters_by_name",
]
