"""Pillow rasterizer for templates.

Draws a template, with dynamic text resolved for one data row, into an RGB
image at a given pixels-per-mm scale.
"""

import logging
from typing import Callable, Dict, Mapping, Optional

from PIL import Image, ImageColor, ImageDraw

from ..engine.substitution import resolve_text
from ..models import (
    CircleElement,
    Element,
    ImageElement,
    LineElement,
    RectangleElement,
    Template,
    TextElement,
)
from .fonts import raster_font
from .images import ImageDecodeError, decode_image
from .layout import BASELINE_FACTOR, LINE_HEIGHT, layout_text
from .units import mm_to_px

logger = logging.getLogger(__name__)


ImageLoader = Callable[[str], Image.Image]


def parse_color(value: Optional[str], default: str = "#000000"):
    """Parse a CSS colour to an RGBA tuple, falling back to ``default``."""
    try:
        return ImageColor.getcolor(value or default, "RGBA")
    except ValueError:
        logger.debug("Invalid colour %r, using %s", value, default)
        return ImageColor.getcolor(default, "RGBA")


class CachingImageLoader:
    """Decode image sources once and remember failures."""

    def __init__(self, decoder: ImageLoader = decode_image):
        self._decoder = decoder
        self._images: Dict[str, Image.Image] = {}
        self._failed: Dict[str, str] = {}

    def __call__(self, source: str) -> Image.Image:
        if source in self._images:
            return self._images[source]
        if source in self._failed:
            raise ImageDecodeError(self._failed[source])
        try:
            image = self._decoder(source)
        except ImageDecodeError as e:
            self._failed[source] = str(e)
            raise
        self._images[source] = image
        return image

    def clear(self):
        self._images.clear()
        self._failed.clear()


class Rasterizer:
    """Renders templates to Pillow images."""

    def __init__(
        self,
        scale: float = 2.0,
        image_loader: Optional[ImageLoader] = None,
        baseline_factor: float = BASELINE_FACTOR,
        line_height: float = LINE_HEIGHT,
    ):
        """
        Initialize the rasterizer.

        Args:
            scale: Pixels per mm
            image_loader: Callable turning an image source into a PIL image
            baseline_factor: Baseline offset as a fraction of font size
            line_height: Line advance as a multiple of font size
        """
        if scale <= 0:
            raise ValueError(f"scale must be greater than zero, got {scale!r}")
        self.scale = scale
        self.image_loader = image_loader or CachingImageLoader()
        self.baseline_factor = baseline_factor
        self.line_height = line_height

    def px(self, value_mm: float) -> float:
        return mm_to_px(value_mm, self.scale)

    def render(self, template: Template, row: Optional[Mapping[str, str]] = None) -> Image.Image:
        """
        Rasterize a template.

        Args:
            template: Template to draw
            row: Data row for dynamic text (literal content when None)

        Returns:
            RGB image of the full page
        """
        row = row or {}
        size = (
            max(1, int(round(self.px(template.width_mm)))),
            max(1, int(round(self.px(template.height_mm)))),
        )
        page = Image.new("RGBA", size, parse_color(template.background_color, "#ffffff"))

        if template.background_image:
            self._draw_background_image(page, template.background_image)

        for element in template.elements:
            self.draw_element(page, element, template.width_mm, row)

        if template.border is not None:
            self._draw_border(page, template)

        return page.convert("RGB")

    def draw_element(
        self,
        page: Image.Image,
        element: Element,
        page_width: float,
        row: Mapping[str, str],
    ):
        """Draw one element, honouring its rotation."""
        layer = Image.new("RGBA", page.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)

        if isinstance(element, TextElement):
            self._draw_text(draw, element, resolve_text(element, row), page_width)
        elif isinstance(element, ImageElement):
            self._draw_image(layer, element)
        elif isinstance(element, RectangleElement):
            self._draw_rectangle(draw, element)
        elif isinstance(element, CircleElement):
            self._draw_circle(draw, element)
        elif isinstance(element, LineElement):
            self._draw_line(draw, element)

        if element.rotation:
            # Clockwise about the element's top-left corner
            pivot = (self.px(element.x), self.px(element.y))
            layer = layer.rotate(-element.rotation, resample=Image.Resampling.BICUBIC, center=pivot)

        page.alpha_composite(layer)

    def _draw_background_image(self, page: Image.Image, source: str):
        try:
            image = self.image_loader(source)
        except ImageDecodeError as e:
            logger.warning("Skipping background image: %s", e)
            return
        page.alpha_composite(image.resize(page.size, Image.Resampling.LANCZOS))

    def _draw_text(self, draw: ImageDraw.ImageDraw, element: TextElement, text: str, page_width: float):
        font = raster_font(
            element.font_family,
            element.bold,
            element.italic,
            int(round(self.px(element.font_size_mm))),
        )
        fill = parse_color(element.color)
        for line in layout_text(element, text, page_width, self.baseline_factor, self.line_height):
            if not line.text:
                continue
            draw.text(
                (self.px(line.x), self.px(line.baseline)),
                line.text,
                font=font,
                fill=fill,
                anchor="ls",
            )

    def _draw_image(self, layer: Image.Image, element: ImageElement):
        try:
            image = self.image_loader(element.source)
        except ImageDecodeError as e:
            logger.warning("Skipping image %s: %s", element.id, e)
            return
        size = (
            max(1, int(round(self.px(element.width_mm)))),
            max(1, int(round(self.px(element.height_mm)))),
        )
        origin = (int(round(self.px(element.x))), int(round(self.px(element.y))))
        resized = image.resize(size, Image.Resampling.LANCZOS)
        layer.paste(resized, origin, resized)

    @staticmethod
    def _box(x0: float, y0: float, x1: float, y1: float):
        return [min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)]

    def _stroke_px(self, width_mm: float) -> int:
        return max(1, int(round(self.px(width_mm)))) if width_mm > 0 else 0

    def _draw_rectangle(self, draw: ImageDraw.ImageDraw, element: RectangleElement):
        box = self._box(
            self.px(element.x),
            self.px(element.y),
            self.px(element.x + element.width_mm),
            self.px(element.y + element.height_mm),
        )
        draw.rectangle(
            box,
            fill=parse_color(element.fill_color) if element.filled else None,
            outline=parse_color(element.stroke_color),
            width=self._stroke_px(element.stroke_width_mm),
        )

    def _draw_circle(self, draw: ImageDraw.ImageDraw, element: CircleElement):
        box = self._box(
            self.px(element.x),
            self.px(element.y),
            self.px(element.x + 2 * element.radius_mm),
            self.px(element.y + 2 * element.radius_mm),
        )
        draw.ellipse(
            box,
            fill=parse_color(element.fill_color) if element.filled else None,
            outline=parse_color(element.stroke_color),
            width=self._stroke_px(element.stroke_width_mm),
        )

    def _draw_line(self, draw: ImageDraw.ImageDraw, element: LineElement):
        draw.line(
            [
                (self.px(element.x), self.px(element.y)),
                (self.px(element.x + element.width_mm), self.px(element.y)),
            ],
            fill=parse_color(element.color),
            width=self._stroke_px(element.stroke_width_mm),
        )

    def _draw_border(self, page: Image.Image, template: Template):
        border = template.border
        margin = border.margin_mm
        draw = ImageDraw.Draw(page)
        draw.rectangle(
            self._box(
                self.px(margin),
                self.px(margin),
                self.px(template.width_mm - margin),
                self.px(template.height_mm - margin),
            ),
            outline=parse_color(border.color),
            width=self._stroke_px(border.width_mm),
        )
