"""Image loading and preparation before upload."""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps

from coffee_scan.exceptions import ImageError

ImageInput = str | Path | bytes | Image.Image

MAX_DIMENSION = 1200
OCR_MIN_DIMENSION = 1000
JPEG_QUALITY = 85

_MIME_TYPES = {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}


def load_image(image: ImageInput) -> Image.Image:
    """Load image from various input types."""
    if isinstance(image, Image.Image):
        return image

    if isinstance(image, bytes):
        try:
            loaded = Image.open(BytesIO(image))
            loaded.load()
        except OSError as e:
            raise ImageError("invalid image format") from e
        return loaded

    path = Path(image) if isinstance(image, str) else image
    if not path.exists():
        raise ImageError(f"Image file not found: {path}")

    try:
        loaded = Image.open(path)
        # Image.open only reads the header; decode now so truncated files fail here
        loaded.load()
    except Exception as e:
        raise ImageError(f"Failed to open image: {e}") from e
    return loaded


def downscale(image: Image.Image, max_dimension: int = MAX_DIMENSION) -> Image.Image:
    """Fit the image inside a max_dimension square, keeping the aspect ratio."""
    if max(image.size) <= max_dimension:
        return image
    resized = image.copy()
    resized.thumbnail((max_dimension, max_dimension))
    return resized


def encode_image(image: Image.Image) -> tuple[bytes, str]:
    """Encode as JPEG, or PNG when the image carries transparency."""
    fmt = "PNG" if image.mode in {"RGBA", "LA", "P"} else "JPEG"
    prepared = image if fmt == "PNG" or image.mode == "RGB" else image.convert("RGB")
    with BytesIO() as buffer:
        if fmt == "JPEG":
            prepared.save(buffer, format=fmt, quality=JPEG_QUALITY)
        else:
            prepared.save(buffer, format=fmt)
        return buffer.getvalue(), _MIME_TYPES[fmt]


def to_data_url(image: ImageInput) -> str:
    content, mime_type = encode_image(downscale(load_image(image)))
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def preprocess_for_ocr(image: Image.Image) -> Image.Image:
    """Grayscale and stretch contrast; upscale small images so text detection sees more pixels."""
    prepared = ImageOps.exif_transpose(image) or image
    prepared = ImageOps.autocontrast(ImageOps.grayscale(prepared))
    if max(prepared.size) < OCR_MIN_DIMENSION:
        width, height = prepared.size
        prepared = prepared.resize((width * 2, height * 2), Image.Resampling.LANCZOS)
    return prepared
