"""coffee-scan: Extract coffee product info from a photo of the bag and look up reviews."""

from coffee_scan.core import extract, extract_with_metadata
from coffee_scan.schema import CoffeeExtraction, VisionExtractionResult

__version__ = "0.1.0"

__all__ = [
    "extract",
    "extract_with_metadata",
    "CoffeeExtraction",
    "VisionExtractionResult",
    "__version__",
]
