"""Unit conversion between document millimetres and surface pixels."""

import math
from dataclasses import dataclass, replace

# Points per millimetre (PDF user space)
PT_PER_MM = 72.0 / 25.4


def _check_scale(scale: float):
    if not scale > 0:
        raise ValueError(f"scale must be greater than zero, got {scale!r}")


def mm_to_px(value_mm: float, scale: float) -> float:
    """Convert millimetres to pixels at ``scale`` px per mm."""
    _check_scale(scale)
    return value_mm * scale


def px_to_mm(value_px: float, scale: float) -> float:
    """Convert pixels to millimetres at ``scale`` px per mm."""
    _check_scale(scale)
    return value_px / scale


def mm_to_pt(value_mm: float) -> float:
    """Convert millimetres to PDF points."""
    return value_mm * PT_PER_MM


def round_mm(value: float) -> int:
    """Round half-up to a whole millimetre."""
    return int(math.floor(value + 0.5))


def round_tenth_mm(value: float) -> float:
    """Round half-up to 0.1 mm (stroke widths, font sizes)."""
    return round(math.floor(value * 10 + 0.5) / 10, 1)


@dataclass(frozen=True)
class RenderContext:
    """
    Scale factors for one surface.

    ``raster_multiplier`` sets the pixel-buffer resolution (and so export
    quality); ``zoom`` only changes how large the surface is displayed.
    """

    raster_multiplier: float = 2.0
    zoom: float = 1.0
    min_zoom: float = 0.1

    def __post_init__(self):
        _check_scale(self.raster_multiplier)
        _check_scale(self.min_zoom)
        if self.zoom < self.min_zoom:
            object.__setattr__(self, "zoom", self.min_zoom)

    @property
    def canvas_scale(self) -> float:
        """Pixels per mm in the surface's pixel buffer."""
        return self.raster_multiplier

    @property
    def display_scale(self) -> float:
        """Pixels per mm on screen."""
        return self.raster_multiplier * self.zoom

    def with_zoom(self, zoom: float) -> "RenderContext":
        """Return a context with a new zoom, clamped to ``min_zoom``."""
        return replace(self, zoom=max(zoom, self.min_zoom))

    def display_to_canvas(self, value_px: float) -> float:
        """Convert a screen-pixel distance into buffer pixels."""
        return mm_to_px(px_to_mm(value_px, self.display_scale), self.canvas_scale)

    def canvas_size(self, width_mm: float, height_mm: float):
        """Pixel-buffer size (width, height) for a page."""
        return (
            int(round(mm_to_px(width_mm, self.canvas_scale))),
            int(round(mm_to_px(height_mm, self.canvas_scale))),
        )

    @classmethod
    def from_settings(cls, settings, zoom: float = 1.0) -> "RenderContext":
        return cls(
            raster_multiplier=settings.raster_multiplier,
            zoom=max(zoom, settings.min_zoom),
            min_zoom=settings.min_zoom,
        )
