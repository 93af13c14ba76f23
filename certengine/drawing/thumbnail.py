"""JPEG thumbnails for template galleries."""

import io
from typing import Mapping, Optional

from PIL import Image

from ..models import Template
from ..settings import EngineSettings, get_settings
from .raster import Rasterizer

DEFAULT_MAX_WIDTH = 400
DEFAULT_MAX_HEIGHT = 300


def thumbnail_scale(template: Template, max_width: int, max_height: int) -> float:
    """Pixels per mm that fit the page inside max_width x max_height."""
    if max_width <= 0 or max_height <= 0:
        raise ValueError("Thumbnail bounds must be greater than zero")
    return min(max_width / template.width_mm, max_height / template.height_mm)


def generate_thumbnail_image(
    template: Template,
    row: Optional[Mapping[str, str]] = None,
    max_width: int = DEFAULT_MAX_WIDTH,
    max_height: int = DEFAULT_MAX_HEIGHT,
    settings: Optional[EngineSettings] = None,
) -> Image.Image:
    settings = settings or get_settings()
    rasterizer = Rasterizer(
        scale=thumbnail_scale(template, max_width, max_height),
        baseline_factor=settings.baseline_factor,
        line_height=settings.line_height,
    )
    image = rasterizer.render(template, row)
    # Guard against rounding up past the bounds
    image.thumbnail((max_width, max_height))
    return image


def generate_thumbnail(
    template: Template,
    row: Optional[Mapping[str, str]] = None,
    max_width: int = DEFAULT_MAX_WIDTH,
    max_height: int = DEFAULT_MAX_HEIGHT,
    quality: int = 70,
    settings: Optional[EngineSettings] = None,
) -> bytes:
    """
    Render a JPEG thumbnail of a template.

    Args:
        template: Template to render
        row: Optional data row for dynamic text
        max_width: Maximum width in pixels
        max_height: Maximum height in pixels
        quality: JPEG quality

    Returns:
        JPEG bytes
    """
    image = generate_thumbnail_image(template, row, max_width, max_height, settings)
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
