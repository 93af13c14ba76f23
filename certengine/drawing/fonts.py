"""Font resolution for PDF (base-14) and raster (TrueType) output."""

import logging
from functools import lru_cache
from typing import Optional

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics

logger = logging.getLogger(__name__)


_BASE14_FAMILIES = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}

# TrueType candidates per family, in the same regular/bold/italic/bold-italic order
_TRUETYPE_FAMILIES = {
    "helvetica": (
        ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "arial.ttf"),
        ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf"),
        ("DejaVuSans-Oblique.ttf", "LiberationSans-Italic.ttf", "Arial Italic.ttf", "ariali.ttf"),
        ("DejaVuSans-BoldOblique.ttf", "LiberationSans-BoldItalic.ttf", "arialbi.ttf"),
    ),
    "times": (
        ("DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "Times New Roman.ttf", "times.ttf"),
        ("DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf", "timesbd.ttf"),
        ("DejaVuSerif-Italic.ttf", "LiberationSerif-Italic.ttf", "timesi.ttf"),
        ("DejaVuSerif-BoldItalic.ttf", "LiberationSerif-BoldItalic.ttf", "timesbi.ttf"),
    ),
    "courier": (
        ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "cour.ttf"),
        ("DejaVuSansMono-Bold.ttf", "LiberationMono-Bold.ttf", "courbd.ttf"),
        ("DejaVuSansMono-Oblique.ttf", "LiberationMono-Italic.ttf", "couri.ttf"),
        ("DejaVuSansMono-BoldOblique.ttf", "LiberationMono-BoldItalic.ttf", "courbi.ttf"),
    ),
}


def font_family_key(font_family: Optional[str]) -> str:
    """
    Map a free-form family name to one of helvetica/times/courier.

    Serif families (Times, Georgia, ...) map to times, monospace families to
    courier, everything else (Arial, sans-serif, ...) to helvetica.
    """
    name = (font_family or "").lower()
    if "courier" in name or "mono" in name:
        return "courier"
    if "times" in name or "georgia" in name or ("serif" in name and "sans" not in name):
        return "times"
    return "helvetica"


def _variant_index(bold: bool, italic: bool) -> int:
    return (1 if bold else 0) + (2 if italic else 0)


def pdf_font_name(font_family: Optional[str], bold: bool = False, italic: bool = False) -> str:
    """Base-14 PDF font name for a family and style."""
    return _BASE14_FAMILIES[font_family_key(font_family)][_variant_index(bold, italic)]


def text_width_mm(text: str, font_name: str, font_size_mm: float) -> float:
    """Width of a single line of text in mm for a PDF font."""
    # stringWidth scales linearly with size, so measuring in mm units is exact
    return pdfmetrics.stringWidth(text, font_name, font_size_mm)


@lru_cache(maxsize=256)
def raster_font(font_family: Optional[str], bold: bool, italic: bool, size_px: int):
    """
    Load a TrueType font for raster output.

    Falls back to Pillow's bundled default font (scalable since Pillow 10.1)
    when no candidate file is installed.
    """
    size_px = max(1, int(size_px))
    candidates = _TRUETYPE_FAMILIES[font_family_key(font_family)][_variant_index(bold, italic)]
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size_px)
        except OSError:
            continue

    logger.debug("No TrueType font for %s; using Pillow default", font_family)
    return ImageFont.load_default(size=size_px)
