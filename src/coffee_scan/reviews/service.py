"""Review lookup for a roaster and product name."""

from __future__ import annotations

import logging
import random
import time

import httpx

from coffee_scan.config import Settings
from coffee_scan.reviews.aggregator import ReviewSource, aggregate_reviews
from coffee_scan.reviews.http import build_client
from coffee_scan.reviews.models import ReviewLookup, ReviewLookupDebug
from coffee_scan.reviews.sources import (
    AmazonSource,
    PageFetcher,
    PlaywrightPageFetcher,
    ProductPageSource,
    RedditSource,
)
from coffee_scan.reviews.summary import build_review_summary

logger = logging.getLogger(__name__)


async def lookup_reviews(
    roaster: str,
    product_name: str,
    *,
    search_query: str | None = None,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
    page_fetcher: PageFetcher | None = None,
    rng: random.Random | None = None,
) -> ReviewLookup:
    """Scrape what is available and build a summary, generated where nothing was found.

    Args:
        roaster: Roaster name as extracted from the label.
        product_name: Product name as extracted from the label.
        search_query: Echoed back to the caller; defaults to "<roaster> <product>".
        settings: Defaults to Settings.from_env().
        client: Shared HTTP client. A short-lived one is created when omitted.
        page_fetcher: Renders Amazon search pages. Defaults to headless Chromium.
        rng: Randomness for generated content.
    """
    settings = settings or Settings.from_env()
    started = time.monotonic()
    logger.info("Starting review search for: %s - %s", roaster, product_name)

    if client is None:
        async with build_client(settings) as owned_client:
            return await _lookup(
                roaster, product_name, search_query, settings, owned_client, page_fetcher, rng, started
            )
    return await _lookup(roaster, product_name, search_query, settings, client, page_fetcher, rng, started)


async def _lookup(
    roaster: str,
    product_name: str,
    search_query: str | None,
    settings: Settings,
    client: httpx.AsyncClient,
    page_fetcher: PageFetcher | None,
    rng: random.Random | None,
    started: float,
) -> ReviewLookup:
    product_page = ProductPageSource(client, settings)
    sources: list[ReviewSource] = [RedditSource(client, settings.reddit_user_agent), product_page]
    if settings.amazon_scrape_enabled:
        fetcher = page_fetcher or PlaywrightPageFetcher(settings.browser_timeout_sec)
        sources.insert(0, AmazonSource(fetcher))

    aggregated = await aggregate_reviews(sources, roaster, product_name, rng)
    summary = build_review_summary(roaster, product_name, aggregated, product_page.product_info, rng)

    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Review search completed in %dms (total=%d rating=%.1f estimated=%s)",
        elapsed_ms,
        summary.total_reviews,
        summary.average_rating,
        summary.estimated,
    )
    info = product_page.product_info
    return ReviewLookup(
        summary=summary,
        search_query=search_query or f"{roaster} {product_name}",
        search_time=elapsed_ms,
        debug=ReviewLookupDebug(
            found_product_info=info is not None,
            searched_urls=product_page.searched_urls,
            product_url=info.url if info else None,
            sources=[source.source for source in aggregated.sources],
        ),
    )
