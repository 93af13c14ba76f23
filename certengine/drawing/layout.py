"""Text layout shared by the PDF, raster and SVG backends.

All positions are in millimetres with a top-left page origin. Every backend
measures text with the same base-14 metrics so anchors agree across outputs.
"""

from dataclasses import dataclass
from typing import List

from ..models import TextAlign, TextElement
from .fonts import pdf_font_name, text_width_mm


# Baseline offset below the element's y, as a fraction of the font size
BASELINE_FACTOR = 0.35
LINE_HEIGHT = 1.2


@dataclass
class TextLine:
    """One laid-out line of text."""
    text: str
    x: float               # left edge of the line, mm
    baseline: float        # baseline, mm from page top
    width: float           # measured width, mm


def text_anchor(align, x: float, page_width: float, text_width: float) -> float:
    """
    Compute the left edge of a line of text.

    ``center`` always centres on the page, ignoring ``x``. ``right`` keeps
    the line ``x`` mm away from the right page edge.

    Args:
        align: TextAlign or its string value
        x: Element x in mm
        page_width: Page width in mm
        text_width: Measured text width in mm

    Returns:
        Left edge of the text in mm
    """
    align = TextAlign(align)
    if align == TextAlign.CENTER:
        return (page_width - text_width) / 2
    if align == TextAlign.RIGHT:
        return page_width - text_width - x
    return x


def layout_text(
    element: TextElement,
    text: str,
    page_width: float,
    baseline_factor: float = BASELINE_FACTOR,
    line_height: float = LINE_HEIGHT,
) -> List[TextLine]:
    """
    Lay out resolved text for a text element.

    Args:
        element: Text element (font, alignment, position)
        text: Resolved text to draw
        page_width: Page width in mm

    Returns:
        One TextLine per newline-separated line
    """
    font_name = pdf_font_name(element.font_family, element.bold, element.italic)
    first_baseline = element.y + element.font_size_mm * baseline_factor
    advance = element.font_size_mm * line_height

    lines = []
    for i, line in enumerate(text.split("\n")):
        width = text_width_mm(line, font_name, element.font_size_mm)
        lines.append(TextLine(
            text=line,
            x=text_anchor(element.align, element.x, page_width, width),
            baseline=first_baseline + i * advance,
            width=width,
        ))
    return lines
