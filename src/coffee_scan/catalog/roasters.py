"""Resolve extracted brand text or a web domain to a known roaster."""

from __future__ import annotations

import logging

from coffee_scan.catalog.models import RoasterMatch
from coffee_scan.catalog.repository import CatalogRepository, Roaster, default_repository
from coffee_scan.text_utils import extract_domain, normalize_text, similarity

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.8
UNVERIFIED_CONFIDENCE = 0.5
SEARCH_MIN_SCORE = 0.5

# Words that carry no identity in a roaster name.
_GENERIC_WORDS = {"coffee", "roasters", "roaster", "roasting", "co", "company", "lab"}


def _core_name(text: str) -> str:
    words = [word for word in normalize_text(text).split() if word not in _GENERIC_WORDS]
    return " ".join(words)


def _name_score(query: str, roaster: Roaster) -> float:
    best = 0.0
    query_core = _core_name(query)
    for candidate in (roaster.name, *roaster.aliases):
        score = similarity(query, candidate)
        if query_core:
            score = max(score, similarity(query_core, _core_name(candidate)))
        best = max(best, score)
    return round(best, 4)


def _to_match(roaster: Roaster, confidence: float) -> RoasterMatch:
    return RoasterMatch(
        id=roaster.id,
        name=roaster.name,
        domain=roaster.domain,
        website=roaster.website,
        location=roaster.location,
        confidence=min(1.0, max(0.0, confidence)),
        verified=roaster.verified and confidence >= MATCH_THRESHOLD,
    )


def search_roasters_by_name(name: str, repo: CatalogRepository | None = None) -> list[RoasterMatch]:
    repo = repo or default_repository()
    if not name or not name.strip():
        return []
    scored = [(_name_score(name, roaster), roaster) for roaster in repo.roasters]
    scored = [item for item in scored if item[0] >= SEARCH_MIN_SCORE]
    scored.sort(key=lambda item: (-item[0], item[1].name))
    return [_to_match(roaster, score) for score, roaster in scored]


def search_roasters_by_domain(domain: str, repo: CatalogRepository | None = None) -> list[RoasterMatch]:
    repo = repo or default_repository()
    host = extract_domain(domain) if domain else None
    if not host:
        return []
    return [
        _to_match(roaster, 1.0)
        for roaster in repo.roasters
        if roaster.domain and (host == roaster.domain or host.endswith(f".{roaster.domain}"))
    ]


def match_roaster(
    brand_text: str | None = None,
    domain: str | None = None,
    repo: CatalogRepository | None = None,
) -> RoasterMatch | None:
    """Best catalog match for the brand text and/or domain.

    Unknown brands come back unverified, without an id.
    """
    if not (brand_text and brand_text.strip()) and not (domain and domain.strip()):
        return None

    if domain:
        by_domain = search_roasters_by_domain(domain, repo)
        if by_domain:
            return by_domain[0]

    if brand_text and brand_text.strip():
        by_name = search_roasters_by_name(brand_text, repo)
        if by_name and by_name[0].confidence >= MATCH_THRESHOLD:
            return by_name[0]

        logger.info("no catalog roaster for %r", brand_text)
        host = extract_domain(domain) if domain else None
        return RoasterMatch(
            name=brand_text.strip(),
            domain=host,
            website=f"https://{host}" if host else None,
            confidence=UNVERIFIED_CONFIDENCE,
            verified=False,
        )

    return None
