"""Custom exceptions for coffee-scan."""


class CoffeeScanError(Exception):
    """Base exception for coffee-scan."""

    pass


class AuthenticationError(CoffeeScanError):
    """Raised when API key is invalid or missing."""

    pass


class RateLimitError(CoffeeScanError):
    """Raised when API rate limit is exceeded."""

    pass


class ImageError(CoffeeScanError):
    """Raised when image cannot be read or is invalid."""

    pass


class ExtractionError(CoffeeScanError):
    """Raised when the vision model call fails or returns nothing usable."""

    pass
