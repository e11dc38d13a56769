"""Gemini provider implementation."""

import os

from google import genai
from google.genai import types

from coffee_scan.exceptions import AuthenticationError, ExtractionError, RateLimitError
from coffee_scan.images import ImageInput, downscale, load_image
from coffee_scan.parsing import parse_vision_response
from coffee_scan.prompts import prompt_for_depth
from coffee_scan.providers.base import BaseProvider
from coffee_scan.schema import VisionExtractionResult


class GeminiProvider(BaseProvider):
    """Gemini Vision API provider."""

    name = "gemini"
    processing_method = "vision"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.0-flash",
        *,
        temperature: float = 0.1,
        depth: str = "detailed",
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
            model: Model name to use.

        Raises:
            AuthenticationError: If no API key is provided or found.
        """
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise AuthenticationError(
                "No API key provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.model = model
        self.temperature = temperature
        self.depth = depth
        self._last_parser = "json"
        self.client = genai.Client(api_key=self.api_key)

    def extract(self, image: ImageInput) -> VisionExtractionResult:
        """Extract coffee info from an image using Gemini Vision.

        Raises:
            ImageError: If image cannot be loaded
            RateLimitError: If API rate limit is exceeded
            AuthenticationError: If API key is invalid
            ExtractionError: If the call fails
        """
        pil_image = downscale(load_image(image))

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=[pil_image, prompt_for_depth(self.depth)],
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=self.temperature,
                ),
            )
        except genai.errors.ClientError as e:
            if "rate" in str(e).lower() or "quota" in str(e).lower():
                raise RateLimitError(f"API rate limit exceeded: {e}") from e
            if "auth" in str(e).lower() or "key" in str(e).lower():
                raise AuthenticationError(f"Invalid API key: {e}") from e
            raise ExtractionError(f"Vision API failed: {e}") from e
        except Exception as e:
            raise ExtractionError(f"Failed to extract info: {e}") from e

        raw = response.text
        if not raw:
            raise ExtractionError("No response from vision API")

        structured, confidence, parser = parse_vision_response(raw)
        self._last_parser = parser
        usage = getattr(response, "usage_metadata", None)
        return VisionExtractionResult(
            raw_response=raw,
            structured_data=structured,
            confidence=confidence,
            tokens_used=getattr(usage, "total_token_count", None),
        )

    def get_extraction_metadata(self) -> dict[str, str]:
        return {"provider": self.name, "parser": self._last_parser, "processing_method": self.processing_method}
