"""Turning raw vision-model replies into a clean CoffeeExtraction."""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any

from pydantic import ValidationError

from coffee_scan.schema import CoffeeExtraction

logger = logging.getLogger(__name__)

UNPARSEABLE = "Could not parse response"

FIELD_WEIGHTS = {
    "roaster": 0.3,
    "product_name": 0.2,
    "origin": 0.2,
    "roast_level": 0.1,
    "flavor_notes": 0.1,
    "processing_method": 0.05,
    "varietal": 0.05,
}

STRING_FIELDS = (
    "roaster",
    "product_name",
    "origin",
    "region",
    "farm",
    "processing_method",
    "roast_level",
    "price",
    "weight",
)
LIST_FIELDS = ("flavor_notes", "varietal", "brew_recommendations")
_LIST_KEYS = ("varietal", "flavorNotes", "flavor_notes", "brewRecommendations", "brew_recommendations")

MAX_LIST_ITEMS = 10
MAX_ITEM_LENGTH = 50
FEET_PER_METRE = 3.28084

_FENCE_RE = re.compile(r"```(?:json)?\n?", re.IGNORECASE)
_ROASTER_RE = re.compile(r"(?:roaster|brand)[:\s]+([^\n,]+)", re.IGNORECASE)
_ORIGIN_RE = re.compile(r"(?:origin|from)[:\s]+([^\n,]+)", re.IGNORECASE)
_ROAST_RE = re.compile(r"(?:roast|roasted)[:\s]+(light|medium|dark)", re.IGNORECASE)
_ROASTER_PREFIX_RE = re.compile(r"^(roasted by|by|from)\s+", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")


def unparseable_extraction() -> CoffeeExtraction:
    return CoffeeExtraction(
        roaster=UNPARSEABLE,
        product_name=UNPARSEABLE,
        origin=UNPARSEABLE,
        roast_level=UNPARSEABLE,
        flavor_notes=[],
    )


def strip_markdown_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_vision_response(raw: str) -> tuple[CoffeeExtraction, float, str]:
    """Parse a model reply into (cleaned extraction, confidence, parser name).

    The parser name is ``json`` when the reply was valid JSON, ``regex_fallback``
    when only the fallback patterns matched, and ``unparseable`` otherwise.
    """
    payload = _load_json_object(strip_markdown_fences(raw or ""))
    if payload is not None:
        cleaned = clean_extraction(payload)
        return cleaned, extraction_confidence(cleaned), "json"

    logger.warning("vision reply is not a JSON object, using regex fallback")
    fallback = extract_fallback_data(raw or "")
    if fallback is None:
        return unparseable_extraction(), 0.0, "unparseable"
    cleaned = clean_extraction(fallback)
    return cleaned, extraction_confidence(cleaned), "regex_fallback"


def _load_json_object(text: str) -> dict[str, Any] | None:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def extract_fallback_data(text: str) -> dict[str, Any] | None:
    roaster = _ROASTER_RE.search(text)
    origin = _ORIGIN_RE.search(text)
    roast = _ROAST_RE.search(text)
    if not (roaster or origin or roast):
        return None
    return {
        "roaster": roaster.group(1).strip() if roaster else None,
        "origin": origin.group(1).strip() if origin else None,
        "roastLevel": roast.group(1).strip() if roast else None,
        "flavorNotes": [],
    }


def extraction_confidence(extraction: CoffeeExtraction) -> float:
    score = 0.0
    max_score = 0.0
    for field, weight in FIELD_WEIGHTS.items():
        max_score += weight
        value = getattr(extraction, field)
        if field in LIST_FIELDS:
            if value:
                score += weight
        elif isinstance(value, str) and value.strip() and value != UNPARSEABLE:
            score += weight
    if max_score <= 0:
        return 0.0
    return max(0.0, min(score / max_score, 1.0))


def clean_extraction(data: dict[str, Any]) -> CoffeeExtraction:
    """Normalise a loosely-typed dict (camelCase or snake_case keys)."""
    try:
        model = CoffeeExtraction.model_validate(_coerce_types(data))
    except ValidationError:
        logger.warning("vision reply failed validation, keeping string and list fields only")
        model = CoffeeExtraction.model_validate(
            {
                k: v
                for k, v in _coerce_types(data).items()
                if isinstance(v, str) or (k in _LIST_KEYS and isinstance(v, list))
            }
        )
    raw = model.model_dump()
    cleaned: dict[str, Any] = {}

    for field in STRING_FIELDS:
        value = _clean_string(raw.get(field))
        if value and field == "roaster":
            value = _ROASTER_PREFIX_RE.sub("", value)
        if value:
            cleaned[field] = value

    for field in LIST_FIELDS:
        items = _clean_list(raw.get(field))
        if items:
            cleaned[field] = items

    altitude = data.get("altitude", raw.get("altitude"))
    parsed_altitude = parse_altitude(altitude)
    if parsed_altitude is not None:
        cleaned["altitude"] = parsed_altitude

    harvest_year = _parse_int(data.get("harvestYear", data.get("harvest_year")))
    if harvest_year is not None and 1900 < harvest_year <= date.today().year:
        cleaned["harvest_year"] = harvest_year

    if "roast_level" in cleaned:
        cleaned["roast_level"] = standardize_roast_level(cleaned["roast_level"])
    if "processing_method" in cleaned:
        cleaned["processing_method"] = standardize_processing_method(cleaned["processing_method"])

    return CoffeeExtraction(**cleaned)


def _coerce_types(data: dict[str, Any]) -> dict[str, Any]:
    # numeric fields are handled separately, keep pydantic from rejecting "1,800 m"
    coerced = {k: v for k, v in data.items() if k not in {"altitude", "harvestYear", "harvest_year"}}
    for key in _LIST_KEYS:
        value = coerced.get(key)
        if isinstance(value, str):
            coerced[key] = [value]
        elif isinstance(value, list):
            coerced[key] = [entry for entry in value if isinstance(entry, str)]
        elif value is not None:
            coerced[key] = None
    for key, value in list(coerced.items()):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            coerced[key] = str(value)
    return coerced


def _clean_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    cleaned = re.sub(r"[“”]", '"', cleaned)
    cleaned = re.sub(r"[‘’]", "'", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    if not cleaned or cleaned.lower() in {"null", "none", "n/a"}:
        return None
    return cleaned


def _clean_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items: list[str] = []
    for entry in value:
        if not isinstance(entry, str):
            continue
        for part in entry.split(","):
            item = re.sub(r"\s+", " ", part.strip())
            if 0 < len(item) < MAX_ITEM_LENGTH and item not in items:
                items.append(item)
    return items[:MAX_LIST_ITEMS]


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if match:
            try:
                return int(float(match.group(0).replace(",", "")))
            except ValueError:
                return None
    return None


def parse_altitude(value: Any) -> int | None:
    """Altitude in metres, from a number or a string such as ``1,800-2,000 masl``."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        metres = float(value)
    elif isinstance(value, str):
        numbers = []
        for match in _NUMBER_RE.findall(value):
            try:
                numbers.append(float(match.replace(",", "")))
            except ValueError:
                continue
        if not numbers:
            return None
        metres = (min(numbers) + max(numbers)) / 2
        if re.search(r"\b(ft|feet)\b", value, re.IGNORECASE):
            metres = metres / FEET_PER_METRE
    else:
        return None
    if not 0 < metres < 10000:
        return None
    return int(round(metres))


def standardize_roast_level(value: str) -> str:
    lowered = value.lower()
    if "light" in lowered:
        return "medium-light" if "medium" in lowered else "light"
    if "dark" in lowered:
        return "medium-dark" if "medium" in lowered else "dark"
    if "medium" in lowered:
        return "medium"
    return value


def standardize_processing_method(value: str) -> str:
    lowered = value.lower()
    if "wet hulled" in lowered or "wet-hulled" in lowered or "giling basah" in lowered:
        return "wet-hulled"
    if "washed" in lowered or "wet" in lowered:
        return "washed"
    if "honey" in lowered or "pulped natural" in lowered:
        return "honey"
    if "natural" in lowered or "dry" in lowered:
        return "natural"
    if "experimental" in lowered or "anaerobic" in lowered:
        return "experimental"
    return value
