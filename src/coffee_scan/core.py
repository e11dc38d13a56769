"""Core extraction functions."""

from coffee_scan.config import Settings
from coffee_scan.images import ImageInput
from coffee_scan.providers.base import BaseProvider
from coffee_scan.schema import CoffeeExtraction, VisionExtractionResult

PROVIDER_ALIASES = {
    "openai": "openai",
    "vision": "openai",
    "gpt": "openai",
    "gemini": "gemini",
    "ocr": "ocr",
    "google_vision_ocr": "ocr",
    "google-vision-ocr": "ocr",
}


def _build_openai_provider(api_key: str | None, depth: str, settings: Settings) -> BaseProvider:
    from coffee_scan.providers.openai_vision import OpenAIVisionProvider

    return OpenAIVisionProvider(
        api_key=api_key or settings.openai_api_key,
        model=settings.openai_vision_model,
        max_tokens=settings.vision_max_tokens,
        temperature=settings.vision_temperature,
        depth=depth,
    )


def _build_gemini_provider(api_key: str | None, depth: str, settings: Settings) -> BaseProvider:
    from coffee_scan.providers.gemini import GeminiProvider

    return GeminiProvider(
        api_key=api_key or settings.gemini_api_key,
        model=settings.gemini_model,
        temperature=settings.vision_temperature,
        depth=depth,
    )


def _build_ocr_provider() -> BaseProvider:
    from coffee_scan.providers.google_vision_ocr import GoogleVisionOCRProvider

    return GoogleVisionOCRProvider()


def _select_provider(
    provider: str | None,
    api_key: str | None,
    depth: str | None,
    settings: Settings | None = None,
) -> BaseProvider:
    settings = settings or Settings.from_env()
    provider_name = (provider or settings.provider).strip().lower()
    resolved = PROVIDER_ALIASES.get(provider_name)
    effective_depth = depth or settings.extraction_depth
    if resolved == "openai":
        return _build_openai_provider(api_key, effective_depth, settings)
    if resolved == "gemini":
        return _build_gemini_provider(api_key, effective_depth, settings)
    if resolved == "ocr":
        return _build_ocr_provider()
    raise ValueError(f"Unsupported provider: {provider_name}")


def extract(
    image: ImageInput,
    *,
    api_key: str | None = None,
    provider: str | None = None,
    depth: str | None = None,
) -> CoffeeExtraction:
    """Extract coffee information from a photo of a coffee bag.

    Args:
        image: Image input - file path (str), Path object, raw bytes or PIL Image.
        api_key: API key for the selected provider. Falls back to
            OPENAI_API_KEY / GEMINI_API_KEY env vars.
        provider: Provider name (`openai`, `gemini` or `ocr`). Defaults to
            `COFFEE_SCAN_PROVIDER` env var, then `openai`.
        depth: Prompt depth, `basic` or `detailed`. Defaults to
            `EXTRACTION_DEPTH` env var, then `detailed`.

    Returns:
        CoffeeExtraction with extracted information. Fields will be None if not found.
    """
    result, _ = extract_with_metadata(image, api_key=api_key, provider=provider, depth=depth)
    return result.structured_data


def extract_with_metadata(
    image: ImageInput,
    *,
    api_key: str | None = None,
    provider: str | None = None,
    depth: str | None = None,
    settings: Settings | None = None,
) -> tuple[VisionExtractionResult, dict[str, str]]:
    """Extract coffee info and return the full result plus provider metadata."""

    engine = _select_provider(provider, api_key, depth, settings)
    result = engine.extract(image)
    metadata = engine.get_extraction_metadata() or {}
    return result, metadata
