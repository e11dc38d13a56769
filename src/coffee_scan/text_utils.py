"""Small text helpers shared by parsing, OCR and catalog matching."""

from __future__ import annotations

import re
from difflib import SequenceMatcher
from urllib.parse import urlsplit

ROAST_LEVEL_KEYWORDS = (
    "medium-light",
    "medium-dark",
    "very-dark",
    "full city",
    "light",
    "medium",
    "dark",
    "blonde",
    "city",
    "vienna",
    "french",
    "italian",
)

PROCESSING_KEYWORDS = (
    "wet-hulled",
    "semi-washed",
    "carbonic maceration",
    "washed",
    "natural",
    "honey",
    "experimental",
    "anaerobic",
)


def normalize_text(text: str) -> str:
    lowered = re.sub(r"[^\w\s]", " ", text.lower())
    return re.sub(r"\s+", " ", lowered).strip()


def slugify(text: str) -> str:
    value = re.sub(r"[^\w\s-]", "", text.lower())
    value = re.sub(r"[\s_-]+", "-", value)
    return value.strip("-")


def similarity(a: str, b: str) -> float:
    left = normalize_text(a)
    right = normalize_text(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return SequenceMatcher(None, left, right).ratio()


def extract_domain(url: str) -> str | None:
    value = url.strip()
    if not value:
        return None
    if "://" not in value:
        value = f"https://{value}"
    host = urlsplit(value).hostname
    if not host:
        return None
    return host.removeprefix("www.")


def parse_flavor_notes(text: str) -> list[str]:
    """Split a free-text tasting line into individual notes."""
    notes: list[str] = []
    for part in re.split(r"[,;•·&]|\band\b", text):
        note = re.sub(r"^(notes?|flavou?rs?)\s*:?\s*", "", part.strip(), flags=re.IGNORECASE)
        if 0 < len(note) < 50 and note not in notes:
            notes.append(note)
    return notes[:10]


def extract_roast_level(text: str) -> str | None:
    normalized = f" {normalize_text(text)} "
    for level in ROAST_LEVEL_KEYWORDS:
        needle = normalize_text(level.replace("-", " "))
        if f" {needle} " in normalized:
            return level
    return None


def extract_processing_method(text: str) -> str | None:
    normalized = f" {normalize_text(text)} "
    for method in PROCESSING_KEYWORDS:
        needle = normalize_text(method.replace("-", " "))
        if f" {needle} " in normalized:
            return method
    return None
