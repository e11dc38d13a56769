"""Base provider interface."""

from abc import ABC, abstractmethod

from coffee_scan.images import ImageInput
from coffee_scan.schema import ProcessingMethod, VisionExtractionResult


class BaseProvider(ABC):
    """Abstract base class for extraction providers."""

    name: str = "base"
    processing_method: ProcessingMethod = "vision"

    @abstractmethod
    def extract(self, image: ImageInput) -> VisionExtractionResult:
        """Extract coffee info from an image.

        Args:
            image: Image input (file path, Path object, raw bytes or PIL Image)

        Returns:
            VisionExtractionResult with the parsed extraction and confidence
        """
        pass

    def get_extraction_metadata(self) -> dict[str, str]:
        """Return provider-specific extraction metadata."""
        return {"provider": self.name, "processing_method": self.processing_method}
