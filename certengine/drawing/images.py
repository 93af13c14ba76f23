"""Image source loading and decoding."""

import base64
import binascii
import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError


class ImageDecodeError(Exception):
    """Exception raised when an image source cannot be read or decoded."""
    pass


def load_image_bytes(source: str) -> bytes:
    """
    Read the raw bytes behind an image source.

    Args:
        source: ``data:`` URL (base64) or a file path

    Returns:
        Raw image bytes
    """
    if not source:
        raise ImageDecodeError("Image source is empty")

    if source.startswith("data:"):
        header, _, payload = source.partition(",")
        if ";base64" not in header:
            raise ImageDecodeError("Only base64 data URLs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(f"Invalid base64 image data: {e}")

    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise ImageDecodeError(f"Cannot read image {source}: {e}")


def decode_image(source: str) -> Image.Image:
    """
    Decode an image source into an RGBA Pillow image.

    Raises:
        ImageDecodeError: If the source cannot be read or decoded
    """
    data = load_image_bytes(source)
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Cannot decode image: {e}")
    return image.convert("RGBA")


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Encode bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
