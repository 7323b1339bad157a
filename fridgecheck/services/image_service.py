"""
Image preprocessing for model requests.

Captured photos are bounded to a maximum edge length and re-encoded as
JPEG so the base64 payload sent to Claude stays small.
"""

import base64
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from fridgecheck.config import settings
from fridgecheck.services.exceptions import InvalidImageError

logger = logging.getLogger(__name__)

ImageSource = Union[Image.Image, bytes, str, Path]

JPEG_MEDIA_TYPE = "image/jpeg"


@dataclass(frozen=True)
class PreparedImage:
    """JPEG payload ready for an image content block."""

    data: bytes
    width: int
    height: int
    media_type: str = JPEG_MEDIA_TYPE

    @property
    def base64_data(self) -> str:
        return to_base64(self.data)


def load_image(source: ImageSource) -> Image.Image:
    """
    Open an image from a PIL image, raw bytes or a file path.

    Raises:
        InvalidImageError: If the source cannot be decoded as an image
    """
    if isinstance(source, Image.Image):
        return source

    try:
        if isinstance(source, bytes):
            img = Image.open(BytesIO(source))
        else:
            img = Image.open(Path(source))
        img.load()
        return img
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise InvalidImageError() from e


def resize(image: Image.Image, max_dimension: int) -> Image.Image:
    """
    Scale an image down so its longer edge is at most max_dimension.

    Images already within bounds are returned unchanged (never upscaled).
    """
    width, height = image.size
    longest_side = max(width, height)
    if longest_side <= max_dimension:
        return image

    scale = max_dimension / longest_side
    if width >= height:
        new_size = (max_dimension, max(1, round(height * scale)))
    else:
        new_size = (max(1, round(width * scale)), max_dimension)

    return image.resize(new_size, Image.Resampling.LANCZOS)


def encode(image: Image.Image, quality: float) -> bytes:
    """
    Lossy JPEG encode at a 0.0-1.0 quality factor.

    Raises:
        InvalidImageError: If the image cannot be encoded
    """
    try:
        # Convert RGBA/palette to RGB (JPEG has no alpha)
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            rgb_img = Image.new("RGB", rgba.size, (255, 255, 255))
            rgb_img.paste(rgba, mask=rgba.split()[3])
            image = rgb_img
        elif image.mode != "RGB":
            image = image.convert("RGB")

        buffer = BytesIO()
        image.save(buffer, format="JPEG", quality=int(round(quality * 100)))
        return buffer.getvalue()
    except (OSError, ValueError) as e:
        raise InvalidImageError() from e


def to_base64(data: bytes) -> str:
    """Standard base64 encoding for transport."""
    return base64.standard_b64encode(data).decode("utf-8")


def prepare(
    source: ImageSource,
    max_dimension: Optional[int] = None,
    quality: Optional[float] = None,
) -> PreparedImage:
    """
    Resize and encode an image for a model request.

    Args:
        source: PIL image, raw bytes or file path
        max_dimension: Longest allowed edge (default from settings)
        quality: JPEG quality 0.0-1.0 (default from settings)

    Returns:
        PreparedImage with the JPEG bytes and final dimensions
    """
    if max_dimension is None:
        max_dimension = settings.max_image_dimension
    if quality is None:
        quality = settings.jpeg_quality

    original = load_image(source)
    resized = resize(original, max_dimension)
    data = encode(resized, quality)

    logger.debug(
        "Image size: %d bytes (resized from %dx%d to %dx%d)",
        len(data),
        original.width,
        original.height,
        resized.width,
        resized.height,
    )
    return PreparedImage(data=data, width=resized.width, height=resized.height)
