"""Tests for product page scraping."""

import asyncio

import httpx

from coffee_scan.config import Settings
from coffee_scan.reviews.http import timed_get
from coffee_scan.reviews.scraping import (
    extract_basic_product_info,
    fetch_product_info,
    find_product_info,
    has_product_indicators,
)

PRODUCT_HTML = """
<html><head><title>Southern Weather &amp; Friends | Onyx Coffee Lab</title></head>
<body>
  <span class="price">$18.50</span>
  <button>Add to cart</button>
  <div class="stars">4.8 out of 5</div>
  <a href="#reviews">1,234 reviews</a>
</body></html>
"""


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_has_product_indicators():
    assert has_product_indicators("<button>Add to Cart</button>")
    assert not has_product_indicators("<h1>About us</h1>")


def test_extract_basic_product_info():
    info = extract_basic_product_info(PRODUCT_HTML, "https://onyxcoffeelab.com/products/southern-weather")

    assert info.title == "Southern Weather & Friends | Onyx Coffee Lab"
    assert info.price == "$18.50"
    assert info.total_reviews == 1234
    assert info.average_rating == 4.8
    assert info.source == "onyxcoffeelab.com"


def test_extract_skips_out_of_range_ratings():
    info = extract_basic_product_info("<p>7 out of 5 baristas agree</p><p>4.5/5</p>", "https://a.com/x")

    assert info.average_rating == 4.5
    assert info.title == "Product Found"
    assert info.total_reviews == 0
    assert info.price is None


def test_fetch_product_info_requires_success_and_indicators():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/missing":
            return httpx.Response(404)
        if request.url.path == "/about":
            return httpx.Response(200, text="<h1>Our story</h1>")
        return httpx.Response(200, text=PRODUCT_HTML)

    async def run():
        async with _client(handler) as client:
            settings = Settings()
            return (
                await fetch_product_info(client, "https://a.com/missing", settings),
                await fetch_product_info(client, "https://a.com/about", settings),
                await fetch_product_info(client, "https://a.com/products/sw", settings),
            )

    missing, about, product = asyncio.run(run())

    assert missing is None
    assert about is None
    assert product is not None
    assert product.url == "https://a.com/products/sw"


def test_find_product_info_stops_at_first_hit():
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        if request.url.host == "first.com":
            return httpx.Response(404)
        return httpx.Response(200, text=PRODUCT_HTML)

    urls = ["https://first.com/p", "https://second.com/p", "https://third.com/p"]

    async def run():
        async with _client(handler) as client:
            return await find_product_info(client, urls, Settings())

    info, tried = asyncio.run(run())

    assert info is not None
    assert info.source == "second.com"
    assert tried == urls[:2]
    assert requested == urls[:2]


def test_find_product_info_limits_attempts():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    urls = ["https://a.com/1", "https://a.com/2", "https://a.com/3"]

    async def run():
        async with _client(handler) as client:
            return await find_product_info(client, urls, Settings())

    info, tried = asyncio.run(run())

    assert info is None
    assert tried == urls[:2]


def test_timed_get_returns_none_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def run():
        async with _client(handler) as client:
            return await timed_get(client, "https://down.example.com")

    assert asyncio.run(run()) is None
