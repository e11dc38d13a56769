"""OpenAI vision provider implementation."""

import logging
import os

import openai
from openai import OpenAI

from coffee_scan.exceptions import AuthenticationError, ExtractionError, RateLimitError
from coffee_scan.images import ImageInput, to_data_url
from coffee_scan.parsing import parse_vision_response
from coffee_scan.prompts import prompt_for_depth
from coffee_scan.providers.base import BaseProvider
from coffee_scan.schema import VisionExtractionResult

logger = logging.getLogger(__name__)


class OpenAIVisionProvider(BaseProvider):
    """OpenAI chat completions with an image data URL."""

    name = "openai"
    processing_method = "vision"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        *,
        max_tokens: int = 1000,
        temperature: float = 0.1,
        depth: str = "detailed",
        client=None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
            model: Vision-capable chat model.
            max_tokens: Completion token limit.
            temperature: Sampling temperature, kept low for consistent extraction.
            depth: ``basic`` or ``detailed`` prompt.
            client: Preconfigured client, mainly for tests.

        Raises:
            AuthenticationError: If no API key is provided or found.
        """
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.depth = depth
        self._last_parser = "json"
        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise AuthenticationError(
                "No API key provided. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.client = OpenAI(api_key=self.api_key)

    def extract(self, image: ImageInput) -> VisionExtractionResult:
        """Extract coffee info from an image using OpenAI vision.

        Raises:
            ImageError: If image cannot be loaded
            RateLimitError: If API rate limit is exceeded
            AuthenticationError: If API key is invalid
            ExtractionError: If the call fails or the model returns nothing
        """
        image_url = to_data_url(image)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt_for_depth(self.depth)},
                            {"type": "image_url", "image_url": {"url": image_url, "detail": "high"}},
                        ],
                    }
                ],
            )
        except openai.AuthenticationError as e:
            raise AuthenticationError(f"Invalid API key: {e}") from e
        except openai.RateLimitError as e:
            raise RateLimitError(f"API rate limit exceeded: {e}") from e
        except openai.OpenAIError as e:
            raise ExtractionError(f"Vision API failed: {e}") from e

        raw = response.choices[0].message.content if response.choices else None
        if not raw:
            raise ExtractionError("No response from vision API")
        logger.debug("vision raw response: %s", raw)

        structured, confidence, parser = parse_vision_response(raw)
        self._last_parser = parser
        usage = getattr(response, "usage", None)
        return VisionExtractionResult(
            raw_response=raw,
            structured_data=structured,
            confidence=confidence,
            tokens_used=getattr(usage, "total_tokens", None),
        )

    def get_extraction_metadata(self) -> dict[str, str]:
        return {"provider": self.name, "parser": self._last_parser, "processing_method": self.processing_method}
