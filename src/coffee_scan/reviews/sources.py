"""Review sources: Amazon search results, Reddit r/Coffee, and the roaster's product page."""

from __future__ import annotations

import logging
import re
from typing import Awaitable, Callable
from urllib.parse import quote_plus

import httpx
from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from coffee_scan.config import Settings
from coffee_scan.reviews.http import BROWSER_USER_AGENT, timed_get
from coffee_scan.reviews.models import ProductInfo, SourceReview
from coffee_scan.reviews.scraping import find_product_info
from coffee_scan.reviews.search import find_product_urls

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str], Awaitable[str]]

AMAZON_SEARCH_URL = "https://www.amazon.com/s?k={query}"
REDDIT_SEARCH_URL = "https://www.reddit.com/r/Coffee/search.json"

AMAZON_CONFIDENCE = 0.9
PRODUCT_PAGE_CONFIDENCE = 0.8
REDDIT_MAX_CONFIDENCE = 0.7
REDDIT_POST_LIMIT = 10

POSITIVE_WORDS = ("love", "amazing", "excellent", "perfect", "best", "great", "wonderful", "fantastic")
NEGATIVE_WORDS = ("hate", "terrible", "awful", "worst", "bad", "disappointing", "overrated")
SENTIMENT_RATINGS = {"positive": 4.2, "negative": 2.8, "neutral": 3.5}

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-gpu", "--blink-settings=imagesEnabled=false"]

_STARS_RE = re.compile(r"(\d+(?:\.\d+)?) out of 5")
_COUNT_RE = re.compile(r"(\d[\d,]*)")


class PlaywrightPageFetcher:
    """Renders a page in headless Chromium and returns its HTML."""

    def __init__(self, timeout_sec: float = 8.0):
        self.timeout_ms = int(timeout_sec * 1000)

    async def __call__(self, url: str) -> str:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=True, args=BROWSER_ARGS)
            try:
                page = await browser.new_page(user_agent=BROWSER_USER_AGENT)
                await page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
                return await page.content()
            finally:
                await browser.close()


def parse_amazon_search_html(html: str) -> dict | None:
    """Rating, review count and URL of the first search result, if it shows both numbers."""
    soup = BeautifulSoup(html, "html.parser")
    for result in soup.select('[data-component-type="s-search-result"]'):
        link = result.select_one("h2 a") or result.find("a", href=True)
        if link is None:
            continue

        rating = None
        rating_el = result.select_one('[aria-label*="out of 5 stars"]')
        if rating_el is not None:
            match = _STARS_RE.search(rating_el.get("aria-label", ""))
            if match:
                rating = float(match.group(1))

        review_count = None
        for el in result.select("[aria-label]"):
            label = el.get("aria-label", "")
            if "out of" in label:
                continue
            if re.search(r"ratings?|reviews?|stars", label, re.IGNORECASE):
                match = _COUNT_RE.search(label) or _COUNT_RE.search(el.get_text(" ", strip=True))
                if match:
                    review_count = int(match.group(1).replace(",", ""))
                    break

        href = link.get("href") or ""
        if href.startswith("/"):
            href = f"https://www.amazon.com{href}"
        return {"rating": rating, "reviewCount": review_count, "productUrl": href or None}
    return None


class AmazonSource:
    name = "amazon"

    def __init__(self, fetch_page: PageFetcher):
        self.fetch_page = fetch_page

    async def fetch(self, roaster: str, product_name: str) -> SourceReview | None:
        url = AMAZON_SEARCH_URL.format(query=quote_plus(f"{roaster} {product_name} coffee"))
        try:
            html = await self.fetch_page(url)
        except Exception as exc:
            logger.warning("Amazon scraping failed: %s", exc)
            return None

        data = parse_amazon_search_html(html)
        if not data or not data.get("rating") or not data.get("reviewCount"):
            return None
        return SourceReview(
            source="amazon",
            rating=data["rating"],
            review_count=data["reviewCount"],
            confidence=AMAZON_CONFIDENCE,
            raw_data=data,
        )


def classify_titles(titles: list[str]) -> dict[str, int]:
    counts = {"positive": 0, "neutral": 0, "negative": 0}
    for title in titles:
        lowered = title.lower()
        has_positive = any(word in lowered for word in POSITIVE_WORDS)
        has_negative = any(word in lowered for word in NEGATIVE_WORDS)
        if has_positive and not has_negative:
            counts["positive"] += 1
        elif has_negative and not has_positive:
            counts["negative"] += 1
        else:
            counts["neutral"] += 1
    return counts


class RedditSource:
    name = "reddit"

    def __init__(self, client: httpx.AsyncClient, user_agent: str = "CoffeeScanBot/1.0"):
        self.client = client
        self.user_agent = user_agent

    async def fetch(self, roaster: str, product_name: str) -> SourceReview | None:
        response = await timed_get(
            self.client,
            REDDIT_SEARCH_URL,
            params={"q": f"{roaster} {product_name}", "restrict_sr": 1, "limit": REDDIT_POST_LIMIT},
            headers={"User-Agent": self.user_agent},
        )
        if response is None or not response.is_success:
            return None
        try:
            posts = (response.json().get("data") or {}).get("children") or []
        except ValueError:
            logger.warning("Reddit returned invalid JSON")
            return None
        if not posts:
            return None

        titles = [str((post.get("data") or {}).get("title") or "") for post in posts]
        total_score = sum(int((post.get("data") or {}).get("score") or 0) for post in posts)
        counts = classify_titles(titles)
        if counts["positive"] > counts["negative"]:
            sentiment = "positive"
        elif counts["negative"] > counts["positive"]:
            sentiment = "negative"
        else:
            sentiment = "neutral"

        return SourceReview(
            source="reddit",
            rating=SENTIMENT_RATINGS[sentiment],
            review_count=len(posts),
            sentiment=sentiment,
            confidence=min(REDDIT_MAX_CONFIDENCE, len(posts) / REDDIT_POST_LIMIT),
            raw_data={
                "positiveCount": counts["positive"],
                "negativeCount": counts["negative"],
                "neutralCount": counts["neutral"],
                "totalScore": total_score,
            },
        )


class ProductPageSource:
    """Searches for the roaster's product page; keeps what it found for the summary."""

    name = "product_page"

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.settings = settings
        self.product_info: ProductInfo | None = None
        self.searched_urls: list[str] = []

    async def fetch(self, roaster: str, product_name: str) -> SourceReview | None:
        urls = await find_product_urls(self.client, roaster, product_name, self.settings)
        self.product_info, self.searched_urls = await find_product_info(self.client, urls, self.settings)
        info = self.product_info
        if info is None or info.total_reviews <= 0 or info.average_rating <= 0:
            return None
        return SourceReview(
            source="product_page",
            rating=info.average_rating,
            review_count=info.total_reviews,
            confidence=PRODUCT_PAGE_CONFIDENCE,
            raw_data=info.model_dump(by_alias=True),
        )
