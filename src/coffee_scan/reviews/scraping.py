"""Pattern-matching rating and review counts out of product pages."""

from __future__ import annotations

import html as html_lib
import logging
import re
from urllib.parse import urlsplit

import httpx

from coffee_scan.config import Settings
from coffee_scan.reviews.http import BROWSER_HEADERS, timed_get
from coffee_scan.reviews.models import ProductInfo

logger = logging.getLogger(__name__)

MAX_PAGE_ATTEMPTS = 2
PRODUCT_INDICATORS = ("price", "add to cart", "reviews", "rating")

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)<", re.IGNORECASE)
_PRICE_RE = re.compile(r"\$\d+(?:\.\d+)?")
_REVIEWS_RE = re.compile(r"(\d[\d,]*)\s*reviews?\b", re.IGNORECASE)
_RATING_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:out of|/)\s*5\b", re.IGNORECASE)


def has_product_indicators(html: str) -> bool:
    lowered = html.lower()
    return any(indicator in lowered for indicator in PRODUCT_INDICATORS)


def extract_basic_product_info(html: str, url: str) -> ProductInfo:
    title = _TITLE_RE.search(html)
    price = _PRICE_RE.search(html)
    reviews = _REVIEWS_RE.search(html)

    average_rating = 0.0
    for match in _RATING_RE.finditer(html):
        value = float(match.group(1))
        if 0 < value <= 5:
            average_rating = value
            break

    return ProductInfo(
        url=url,
        title=html_lib.unescape(title.group(1)).strip() if title else "Product Found",
        price=price.group(0) if price else None,
        total_reviews=int(reviews.group(1).replace(",", "")) if reviews else 0,
        average_rating=average_rating,
        source=urlsplit(url).hostname or url,
    )


async def fetch_product_info(
    client: httpx.AsyncClient,
    url: str,
    settings: Settings,
) -> ProductInfo | None:
    logger.info("Attempting to fetch: %s", url)
    response = await timed_get(client, url, headers=BROWSER_HEADERS, timeout=settings.page_timeout_sec)
    if response is None:
        return None
    if not response.is_success:
        logger.info("HTTP %s for %s", response.status_code, url)
        return None

    html = response.text
    if not has_product_indicators(html):
        logger.info("No product indicators found for %s", url)
        return None
    return extract_basic_product_info(html, str(response.url))


async def find_product_info(
    client: httpx.AsyncClient,
    urls: list[str],
    settings: Settings,
    max_attempts: int = MAX_PAGE_ATTEMPTS,
) -> tuple[ProductInfo | None, list[str]]:
    """Try the first few candidate URLs in order; the first product page wins."""
    tried: list[str] = []
    for url in urls[:max_attempts]:
        tried.append(url)
        info = await fetch_product_info(client, url, settings)
        if info is not None:
            logger.info("Successfully extracted info from: %s", url)
            return info, tried
    return None, tried
