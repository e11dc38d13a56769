"""Google Vision OCR provider implementation."""

from __future__ import annotations

import json
import logging
import os
import re
from io import BytesIO
from typing import Any

from coffee_scan.exceptions import AuthenticationError, CoffeeScanError, ImageError, RateLimitError
from coffee_scan.images import ImageInput, load_image, preprocess_for_ocr
from coffee_scan.parsing import clean_extraction, extraction_confidence
from coffee_scan.providers.base import BaseProvider
from coffee_scan.schema import CoffeeExtraction, VisionExtractionResult
from coffee_scan.text_utils import extract_processing_method, extract_roast_level, parse_flavor_notes

_COUNTRY_ALIASES = {
    "ethiopia": "Ethiopia",
    "etiopia": "Ethiopia",
    "colombia": "Colombia",
    "brazil": "Brazil",
    "brasil": "Brazil",
    "costa rica": "Costa Rica",
    "guatemala": "Guatemala",
    "kenya": "Kenya",
    "honduras": "Honduras",
    "indonesia": "Indonesia",
    "sumatra": "Indonesia",
    "rwanda": "Rwanda",
    "burundi": "Burundi",
    "panama": "Panama",
    "peru": "Peru",
    "perú": "Peru",
    "mexico": "Mexico",
    "nicaragua": "Nicaragua",
    "el salvador": "El Salvador",
    "yemen": "Yemen",
    "papua new guinea": "Papua New Guinea",
    "tanzania": "Tanzania",
    "uganda": "Uganda",
    "india": "India",
    "vietnam": "Vietnam",
}

_LABELS: dict[str, list[str]] = {
    "roaster": ["roasted by", "roaster", "roastery", "brand"],
    "product_name": ["product", "name", "coffee"],
    "origin": ["origin", "country"],
    "region": ["region"],
    "farm": ["farm", "producer", "estate", "washing station"],
    "varietal": ["varietals", "varietal", "variety", "cultivar"],
    "processing_method": ["processing", "process"],
    "roast_level": ["roast level", "roast"],
    "flavor_notes": ["tasting notes", "flavor notes", "flavour notes", "notes", "flavor", "flavour"],
    "altitude": ["altitude", "elevation"],
    "harvest_year": ["harvest", "crop"],
    "weight": ["net wt", "net weight", "weight"],
    "price": ["price"],
}


class GoogleVisionOCRProvider(BaseProvider):
    """Google Vision OCR provider with a heuristic label parser."""

    name = "ocr"
    processing_method = "ocr"

    def __init__(self, client=None):
        self.logger = logging.getLogger(__name__)

        if client is not None:
            self.client = client
            self._vision = None
            return

        try:
            from google.cloud import vision  # type: ignore
        except Exception as exc:
            raise CoffeeScanError(
                "google-cloud-vision is required for OCR mode. "
                "Install dependencies and set GOOGLE_APPLICATION_CREDENTIALS."
            ) from exc

        self._vision = vision
        try:
            credentials_json = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
            if credentials_json:
                from google.oauth2 import service_account  # type: ignore

                info = json.loads(credentials_json)
                credentials = service_account.Credentials.from_service_account_info(info)
                self.client = vision.ImageAnnotatorClient(credentials=credentials)
            else:
                self.client = vision.ImageAnnotatorClient()
        except Exception as exc:
            raise AuthenticationError(
                "Failed to initialize Google Vision client. "
                "Check GOOGLE_APPLICATION_CREDENTIALS(_JSON) and GCP IAM permissions."
            ) from exc

    def _extract_text(self, content: bytes) -> str:
        try:
            if self._vision is not None:
                image = self._vision.Image(content=content)
            else:
                image = {"content": content}
            response = self.client.text_detection(image=image)
        except Exception as exc:
            message = str(exc).lower()
            if "quota" in message or "rate" in message:
                raise RateLimitError(f"OCR quota exceeded: {exc}") from exc
            if "credential" in message or "permission" in message or "auth" in message:
                raise AuthenticationError(f"OCR authentication failed: {exc}") from exc
            raise CoffeeScanError(f"OCR request failed: {exc}") from exc

        error_obj = getattr(response, "error", None)
        error_message = getattr(error_obj, "message", "") if error_obj else ""
        if error_message:
            lowered = error_message.lower()
            if "quota" in lowered or "rate" in lowered:
                raise RateLimitError(f"OCR quota exceeded: {error_message}")
            if "permission" in lowered or "auth" in lowered:
                raise AuthenticationError(f"OCR authentication failed: {error_message}")
            raise CoffeeScanError(f"OCR request failed: {error_message}")

        annotations = getattr(response, "text_annotations", None) or []
        if not annotations:
            return ""
        return (getattr(annotations[0], "description", "") or "").strip()

    def extract(self, image: ImageInput) -> VisionExtractionResult:
        pil_image = preprocess_for_ocr(load_image(image))

        try:
            with BytesIO() as buffer:
                pil_image.save(buffer, format="PNG")
                content = buffer.getvalue()
            raw_text = self._extract_text(content)
            structured = self._parse_text(raw_text)
        except CoffeeScanError:
            raise
        except Exception as exc:
            raise ImageError(f"Failed to extract info with OCR: {exc}") from exc

        return VisionExtractionResult(
            raw_response=raw_text,
            structured_data=structured,
            confidence=extraction_confidence(structured),
        )

    def get_extraction_metadata(self) -> dict[str, str]:
        return {"provider": self.name, "parser": "ocr_heuristic", "processing_method": self.processing_method}

    @staticmethod
    def _parse_text(raw_text: str) -> CoffeeExtraction:
        lines = [line.strip() for line in raw_text.splitlines() if line.strip()]
        if not lines:
            return CoffeeExtraction()
        joined = "\n".join(lines)

        data: dict[str, Any] = {
            field: _extract_labeled_value(lines, labels) for field, labels in _LABELS.items()
        }
        data["origin"] = _normalize_country(data["origin"] or _guess_country(lines))
        data["roast_level"] = data["roast_level"] or extract_roast_level(joined)
        data["processing_method"] = data["processing_method"] or extract_processing_method(joined)
        data["varietal"] = _split_values(data["varietal"])
        data["flavor_notes"] = parse_flavor_notes(data["flavor_notes"]) if data["flavor_notes"] else None

        if data["roaster"] is None:
            data["roaster"] = lines[0][:80]

        return clean_extraction(data)


def _extract_labeled_value(lines: list[str], labels: list[str]) -> str | None:
    patterns = [re.compile(rf"^\s*{re.escape(label)}\s*[:：]\s*(.+)$", re.IGNORECASE) for label in labels]
    for line in lines:
        for pattern in patterns:
            match = pattern.search(line)
            if match:
                value = match.group(1).strip()
                if value:
                    return value
    return None


def _split_values(raw: str | None) -> list[str] | None:
    if not raw:
        return None
    values = [item.strip() for item in re.split(r"[,/|·•&]", raw) if item.strip()]
    return values or None


def _normalize_country(raw: str | None) -> str | None:
    if not raw:
        return None
    lowered = raw.lower()
    for alias, canonical in _COUNTRY_ALIASES.items():
        if alias in lowered:
            return canonical
    return raw.strip() or None


def _guess_country(lines: list[str]) -> str | None:
    joined = "\n".join(lines).lower()
    for alias, canonical in _COUNTRY_ALIASES.items():
        if re.search(rf"\b{re.escape(alias)}\b", joined):
            return canonical
    return None
