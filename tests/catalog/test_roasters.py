"""Tests for roaster matching against the packaged catalog."""

import pytest

from coffee_scan.catalog import match_roaster, search_roasters_by_domain, search_roasters_by_name
from coffee_scan.catalog.repository import CatalogRepository, Roaster


def test_match_by_alias():
    match = match_roaster("Onyx")

    assert match is not None
    assert match.id == 7
    assert match.name == "Onyx Coffee Lab"
    assert match.confidence == 1.0
    assert match.verified is True
    assert match.website == "https://onyxcoffeelab.com"


def test_match_ignores_generic_words():
    match = match_roaster("STUMPTOWN COFFEE")

    assert match is not None
    assert match.id == 2


def test_match_by_domain_wins_over_brand_text():
    match = match_roaster("Something Else", domain="https://www.vervecoffee.com/products/streetlevel")

    assert match is not None
    assert match.id == 6
    assert match.confidence == 1.0


def test_unknown_brand_is_unverified():
    match = match_roaster("Sey Coffee", domain="seycoffee.com")

    assert match is not None
    assert match.id is None
    assert match.name == "Sey Coffee"
    assert match.domain == "seycoffee.com"
    assert match.website == "https://seycoffee.com"
    assert match.confidence == 0.5
    assert match.verified is False


@pytest.mark.parametrize("brand, domain", [(None, None), ("   ", None), (None, "example.org")])
def test_no_match(brand, domain):
    assert match_roaster(brand, domain) is None


def test_search_by_name_orders_by_score():
    results = search_roasters_by_name("Blue Bottle")

    assert results[0].name == "Blue Bottle Coffee"
    assert all(r.confidence >= 0.5 for r in results)


def test_search_by_domain_accepts_subdomains():
    results = search_roasters_by_domain("shop.heartroasters.com")

    assert [r.id for r in results] == [11]


def test_unverified_catalog_entry_is_not_marked_verified():
    repo = CatalogRepository(roasters=[Roaster(id=1, name="Tiny Roastery", verified=False)], coffees=[])

    match = match_roaster("Tiny Roastery", repo=repo)

    assert match is not None
    assert match.id == 1
    assert match.verified is False
