"""Content-based coffee recommendations from the packaged catalog."""

from __future__ import annotations

from coffee_scan.catalog.models import CoffeeRecommendation, RecommendedCoffee, RoasterMatch, RoasterRef
from coffee_scan.catalog.repository import CatalogRepository, Coffee, default_repository
from coffee_scan.schema import CoffeeExtraction
from coffee_scan.text_utils import normalize_text, similarity

ORIGIN_WEIGHT = 0.35
ROAST_WEIGHT = 0.25
ADJACENT_ROAST_WEIGHT = 0.12
FLAVOR_WEIGHT = 0.3
PROCESS_WEIGHT = 0.1

ROAST_SCALE = ("light", "medium-light", "medium", "medium-dark", "dark")

_REASONS = {
    "origin": "Same origin",
    "roast": "Similar roast level",
    "flavor": "Overlapping flavor notes",
    "process": "Same processing method",
}


def _roast_score(scanned: str | None, candidate: str | None) -> float:
    if not scanned or not candidate:
        return 0.0
    if scanned == candidate:
        return ROAST_WEIGHT
    if scanned in ROAST_SCALE and candidate in ROAST_SCALE:
        if abs(ROAST_SCALE.index(scanned) - ROAST_SCALE.index(candidate)) == 1:
            return ADJACENT_ROAST_WEIGHT
    return 0.0


def _origin_score(scanned: str | None, candidate: str | None) -> float:
    if not scanned or not candidate:
        return 0.0
    left = normalize_text(scanned)
    right = normalize_text(candidate)
    if left == right or right in left.split() or left in right.split():
        return ORIGIN_WEIGHT
    return 0.0


def _flavor_score(scanned: list[str] | None, candidate: tuple[str, ...]) -> float:
    left = {normalize_text(note) for note in scanned or [] if note.strip()}
    right = {normalize_text(note) for note in candidate}
    if not left or not right:
        return 0.0
    return FLAVOR_WEIGHT * len(left & right) / len(left | right)


def _process_score(scanned: str | None, candidate: str | None) -> float:
    if scanned and candidate and normalize_text(scanned) == normalize_text(candidate):
        return PROCESS_WEIGHT
    return 0.0


def score_coffee(extraction: CoffeeExtraction, coffee: Coffee) -> tuple[float, str]:
    """Similarity in [0, 1] and the name of the strongest contributing factor."""
    parts = {
        "origin": _origin_score(extraction.origin, coffee.origin),
        "roast": _roast_score(extraction.roast_level, coffee.roast_level),
        "flavor": _flavor_score(extraction.flavor_notes, coffee.flavor_notes),
        "process": _process_score(extraction.processing_method, coffee.processing_method),
    }
    total = min(1.0, sum(parts.values()))
    strongest = max(parts, key=lambda key: parts[key])
    return round(total, 4), strongest


def _is_scanned_product(
    extraction: CoffeeExtraction,
    coffee: Coffee,
    roaster_name: str | None,
) -> bool:
    if not extraction.product_name or not roaster_name:
        return False
    same_roaster = bool(extraction.roaster) and similarity(extraction.roaster, roaster_name) >= 0.8
    return same_roaster and similarity(extraction.product_name, coffee.name) >= 0.8


def generate_recommendations(
    extraction: CoffeeExtraction,
    roaster_match: RoasterMatch | None = None,
    max_results: int = 6,
    min_similarity: float = 0.2,
    repo: CatalogRepository | None = None,
) -> list[CoffeeRecommendation]:
    repo = repo or default_repository()
    scored: list[tuple[float, str, Coffee]] = []
    for coffee in repo.coffees:
        roaster = repo.roaster(coffee.roaster_id)
        roaster_name = roaster.name if roaster else None
        if roaster_match and roaster_match.id is not None and roaster_match.id == coffee.roaster_id:
            if extraction.product_name and similarity(extraction.product_name, coffee.name) >= 0.8:
                continue
        elif _is_scanned_product(extraction, coffee, roaster_name):
            continue
        score, factor = score_coffee(extraction, coffee)
        if score >= min_similarity and score > 0:
            scored.append((score, factor, coffee))

    scored.sort(key=lambda item: (-item[0], item[2].name))
    recommendations: list[CoffeeRecommendation] = []
    for score, factor, coffee in scored[: max(0, max_results)]:
        roaster = repo.roaster(coffee.roaster_id)
        recommendations.append(
            CoffeeRecommendation(
                id=coffee.id,
                coffee=RecommendedCoffee(
                    id=coffee.id,
                    name=coffee.name,
                    roaster=RoasterRef(
                        name=roaster.name if roaster else "Unknown roaster",
                        location=roaster.location if roaster else None,
                    ),
                    origin=coffee.origin,
                    roast_level=coffee.roast_level,
                    processing_method=coffee.processing_method,
                    flavor_notes=list(coffee.flavor_notes),
                    price=coffee.price,
                ),
                similarity_score=score,
                reason=_REASONS[factor],
            )
        )
    return recommendations
