"""Providers for coffee-scan."""

from coffee_scan.providers.base import BaseProvider
from coffee_scan.providers.gemini import GeminiProvider
from coffee_scan.providers.google_vision_ocr import GoogleVisionOCRProvider
from coffee_scan.providers.openai_vision import OpenAIVisionProvider

__all__ = ["BaseProvider", "GeminiProvider", "GoogleVisionOCRProvider", "OpenAIVisionProvider"]
