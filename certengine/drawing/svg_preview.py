"""Vector (SVG) preview of a template for one data row."""

from pathlib import Path
from typing import Mapping, Optional

import svgwrite

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
from ..settings import EngineSettings, get_settings
from .fonts import font_family_key
from .layout import layout_text


CSS_FONT_FAMILIES = {
    "helvetica": "Helvetica, Arial, sans-serif",
    "times": "'Times New Roman', Times, serif",
    "courier": "'Courier New', Courier, monospace",
}


class SVGPreview:
    """SVG canvas in millimetre user units, mirroring the PDF layout."""

    def __init__(self, template: Template, settings: Optional[EngineSettings] = None):
        """
        Initialize the SVG preview.

        Args:
            template: Template to draw
            settings: Engine settings (baseline factor, line height)
        """
        self.template = template
        self.settings = settings or get_settings()
        self.width_mm = template.width_mm
        self.height_mm = template.height_mm

        self.dwg = svgwrite.Drawing(
            size=(f"{self.width_mm}mm", f"{self.height_mm}mm"),
            viewBox=f"0 0 {self.width_mm} {self.height_mm}",
        )

    def render(self, row: Optional[Mapping[str, str]] = None) -> str:
        """Draw the template for ``row`` and return the SVG document."""
        row = row or {}
        template = self.template

        self.dwg.add(self.dwg.rect(
            insert=(0, 0),
            size=(self.width_mm, self.height_mm),
            fill=template.background_color or "#ffffff",
        ))
        if template.background_image:
            self.dwg.add(self.dwg.image(
                href=template.background_image,
                insert=(0, 0),
                size=(self.width_mm, self.height_mm),
                preserveAspectRatio="none",
            ))

        for element in template.elements:
            self.dwg.add(self._draw_element(element, row))

        if template.border is not None:
            border = template.border
            self.dwg.add(self.dwg.rect(
                insert=(border.margin_mm, border.margin_mm),
                size=(self.width_mm - 2 * border.margin_mm, self.height_mm - 2 * border.margin_mm),
                stroke=border.color,
                stroke_width=border.width_mm,
                fill="none",
            ))

        return self.dwg.tostring()

    def _draw_element(self, element: Element, row: Mapping[str, str]):
        group = self.dwg.g(id=element.id) if element.id else self.dwg.g()
        if element.rotation:
            group.rotate(element.rotation, center=(element.x, element.y))

        if isinstance(element, TextElement):
            self._draw_text(group, element, resolve_text(element, row))
        elif isinstance(element, ImageElement):
            group.add(self.dwg.image(
                href=element.source,
                insert=(element.x, element.y),
                size=(element.width_mm, element.height_mm),
                preserveAspectRatio="none",
            ))
        elif isinstance(element, RectangleElement):
            group.add(self.dwg.rect(
                insert=(element.x, element.y),
                size=(element.width_mm, element.height_mm),
                stroke=element.stroke_color,
                stroke_width=element.stroke_width_mm,
                fill=element.fill_color if element.filled else "none",
            ))
        elif isinstance(element, CircleElement):
            r = element.radius_mm
            group.add(self.dwg.circle(
                center=(element.x + r, element.y + r),
                r=r,
                stroke=element.stroke_color,
                stroke_width=element.stroke_width_mm,
                fill=element.fill_color if element.filled else "none",
            ))
        elif isinstance(element, LineElement):
            group.add(self.dwg.line(
                start=(element.x, element.y),
                end=(element.x + element.width_mm, element.y),
                stroke=element.color,
                stroke_width=element.stroke_width_mm,
            ))
        return group

    def _draw_text(self, group, element: TextElement, text: str):
        lines = layout_text(
            element, text, self.width_mm, self.settings.baseline_factor, self.settings.line_height
        )
        for line in lines:
            if not line.text:
                continue
            group.add(self.dwg.text(
                line.text,
                insert=(line.x, line.baseline),
                font_family=CSS_FONT_FAMILIES[font_family_key(element.font_family)],
                font_size=element.font_size_mm,
                font_weight="bold" if element.bold else "normal",
                font_style="italic" if element.italic else "normal",
                fill=element.color,
            ))


def render_svg_preview(
    template: Template,
    row: Optional[Mapping[str, str]] = None,
    settings: Optional[EngineSettings] = None,
) -> str:
    """Render a template to an SVG string."""
    return SVGPreview(template, settings).render(row)


def save_svg_preview(
    template: Template,
    output_path: str,
    row: Optional[Mapping[str, str]] = None,
    settings: Optional[EngineSettings] = None,
) -> Path:
    """Render a template to an SVG file."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_svg_preview(template, row, settings), encoding="utf-8")
    return path
