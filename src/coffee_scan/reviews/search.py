"""Locating candidate product pages for a roaster and product."""

from __future__ import annotations

import logging
import re
from urllib.parse import quote_plus

import httpx

from coffee_scan.config import Settings
from coffee_scan.reviews.http import timed_get

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MAX_SEARCH_RESULTS = 5
GENERATED_AFTER_SEARCH = 3
RELEVANT_URL_WORDS = ("coffee", "roast", "bean")


def _roaster_slug(roaster: str) -> str:
    value = roaster.lower()
    value = re.sub(r"coffee", "", value)
    value = re.sub(r"roasters?", "", value)
    value = re.sub(r"roasting", "", value)
    value = re.sub(r"\s+", "-", value.strip())
    return re.sub(r"[^a-z0-9-]", "", value)


def _product_slug(product_name: str) -> str:
    value = re.sub(r"\s+", "-", product_name.lower().strip())
    return re.sub(r"[^a-z0-9-]", "", value)


def generate_likely_urls(roaster: str, product_name: str) -> list[str]:
    """Guess product URLs from common shop layouts, then a couple of retailer searches."""
    r = _roaster_slug(roaster)
    p = _product_slug(product_name)
    patterns = [
        f"https://{r}.com/products/{p}",
        f"https://{r}.com/coffee/{p}",
        f"https://{r}.com/shop/{p}",
        f"https://{r}coffee.com/products/{p}",
        f"https://www.{r}.com/products/{p}",
        f"https://www.{r}coffee.com/products/{p}",
    ]
    retailers = [
        f"https://www.amazon.com/s?k={quote_plus(f'{roaster} {product_name} coffee')}",
        f"https://www.williams-sonoma.com/search/results.html?words={quote_plus(f'{roaster} {product_name}')}",
    ]
    logger.debug("generated urls: %s", patterns[:3])
    return patterns + retailers


def _is_relevant(url: str, roaster: str) -> bool:
    lowered = url.lower()
    compact_roaster = re.sub(r"\s+", "", roaster.lower())
    return any(word in lowered for word in RELEVANT_URL_WORDS) or (
        bool(compact_roaster) and compact_roaster in lowered
    )


async def search_with_google(
    client: httpx.AsyncClient,
    roaster: str,
    product_name: str,
    settings: Settings,
) -> list[str]:
    query = f'"{roaster}" "{product_name}" coffee reviews OR buy OR shop'
    logger.info("Google Search query: %s", query)
    response = await timed_get(
        client,
        GOOGLE_SEARCH_URL,
        params={
            "key": settings.google_search_api_key,
            "cx": settings.google_search_engine_id,
            "q": query,
            "num": 10,
        },
    )
    if response is None:
        return []
    if response.status_code >= 400:
        logger.warning("Google Search API error: %s", response.status_code)
        return []
    try:
        items = response.json().get("items") or []
    except ValueError:
        logger.warning("Google Search API returned invalid JSON")
        return []

    urls = [item.get("link") for item in items if isinstance(item, dict) and item.get("link")]
    relevant = [url for url in urls if _is_relevant(url, roaster)][:MAX_SEARCH_RESULTS]
    logger.info("Found %d relevant URLs from Google Search", len(relevant))
    return relevant


async def find_product_urls(
    client: httpx.AsyncClient,
    roaster: str,
    product_name: str,
    settings: Settings,
) -> list[str]:
    """Search results first (when configured), then generated guesses."""
    generated = generate_likely_urls(roaster, product_name)
    if settings.google_search_enabled:
        results = await search_with_google(client, roaster, product_name, settings)
        if results:
            return results + generated[:GENERATED_AFTER_SEARCH]
        logger.info("Google Search found nothing, using generated URLs")
    return generated
