"""Environment-driven settings for coffee-scan."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAX_IMAGE_BYTES = 8 * 1024 * 1024


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _safe_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _safe_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _split_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = None
    openai_vision_model: str = "gpt-4o"
    vision_max_tokens: int = 1000
    vision_temperature: float = 0.1
    extraction_depth: str = "detailed"  # basic|detailed
    provider: str = "openai"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"

    google_search_api_key: str | None = None
    google_search_engine_id: str | None = None
    http_timeout_sec: float = 8.0
    page_timeout_sec: float = 10.0
    browser_timeout_sec: float = 8.0
    amazon_scrape_enabled: bool = True
    reddit_user_agent: str = "CoffeeScanBot/1.0"

    public_base_url: str | None = None
    frontend_origins: tuple[str, ...] = ("*",)
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    log_level: str = "INFO"

    @property
    def google_search_enabled(self) -> bool:
        return bool(self.google_search_api_key and self.google_search_engine_id)

    @property
    def allow_origins(self) -> list[str]:
        origins = list(self.frontend_origins) or ["*"]
        if self.public_base_url and "*" not in origins:
            base = self.public_base_url.rstrip("/")
            if base not in origins:
                origins.append(base)
        return origins

    @classmethod
    def from_env(cls) -> "Settings":
        depth = os.getenv("EXTRACTION_DEPTH", "detailed").strip().lower()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_vision_model=os.getenv("OPENAI_VISION_MODEL", "gpt-4o"),
            vision_max_tokens=_safe_int(os.getenv("VISION_MAX_TOKENS"), 1000),
            vision_temperature=_safe_float(os.getenv("VISION_TEMPERATURE"), 0.1),
            extraction_depth=depth if depth in {"basic", "detailed"} else "detailed",
            provider=(os.getenv("COFFEE_SCAN_PROVIDER", "openai").strip().lower() or "openai"),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
            google_search_api_key=os.getenv("GOOGLE_SEARCH_API_KEY") or None,
            google_search_engine_id=os.getenv("GOOGLE_SEARCH_ENGINE_ID") or None,
            http_timeout_sec=_safe_float(os.getenv("HTTP_TIMEOUT_SEC"), 8.0),
            page_timeout_sec=_safe_float(os.getenv("PAGE_TIMEOUT_SEC"), 10.0),
            browser_timeout_sec=_safe_float(os.getenv("BROWSER_TIMEOUT_SEC"), 8.0),
            amazon_scrape_enabled=parse_bool(os.getenv("AMAZON_SCRAPE_ENABLED"), True),
            reddit_user_agent=os.getenv("REDDIT_USER_AGENT", "CoffeeScanBot/1.0"),
            public_base_url=os.getenv("PUBLIC_BASE_URL") or os.getenv("NEXT_PUBLIC_BASE_URL") or None,
            frontend_origins=_split_csv(os.getenv("FRONTEND_ORIGINS", "*")) or ("*",),
            max_image_bytes=_safe_int(os.getenv("MAX_IMAGE_BYTES"), DEFAULT_MAX_IMAGE_BYTES),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
