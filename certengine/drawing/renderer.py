"""PDF export for certificate templates using ReportLab.

Two strategies are provided:

- ``PDFRenderer`` draws every element as native PDF content
- ``SnapshotRenderer`` rasterizes a surface and stretches the image over
  the page
"""

import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas

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
from .fonts import pdf_font_name
from .images import ImageDecodeError, image_to_png_bytes
from .layout import layout_text
from .raster import CachingImageLoader, Rasterizer
from .surface import RasterSurface, Surface
from .units import RenderContext

logger = logging.getLogger(__name__)


Row = Mapping[str, str]


@dataclass
class PageRecord:
    """Strings drawn on one page, in drawing order."""
    texts: List[str] = field(default_factory=list)


@dataclass
class RenderedDocument:
    """A rendered, paginated PDF document."""
    data: bytes
    page_count: int
    pages: List[PageRecord] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.data)

    def save(self, output_path: str) -> Path:
        """Write the document to disk, creating parent directories."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.data)
        return path


def pdf_color(value: Optional[str], default: str = "#000000"):
    try:
        return colors.toColor(value or default)
    except ValueError:
        logger.debug("Invalid colour %r, using %s", value, default)
        return colors.toColor(default)


class _PageRenderer(ABC):
    """Shared page loop: one PDF page per data row."""

    def __init__(self, settings: Optional[EngineSettings] = None, compress: Optional[bool] = None):
        self.settings = settings or get_settings()
        self.compress = self.settings.compress_pages if compress is None else compress

    def render(self, template: Template, rows: Sequence[Row]) -> RenderedDocument:
        """
        Render one page per row into a single document.

        Args:
            template: Template to render
            rows: Data rows, in page order

        Returns:
            RenderedDocument
        """
        buffer = io.BytesIO()
        c = pdf_canvas.Canvas(
            buffer,
            pagesize=(template.width_mm * mm, template.height_mm * mm),
            pageCompression=1 if self.compress else 0,
        )
        c.setTitle(template.name)

        pages = []
        for row in rows:
            pages.append(self.draw_page(c, template, row))
            c.showPage()

        c.save()
        return RenderedDocument(data=buffer.getvalue(), page_count=len(pages), pages=pages)

    def render_row(self, template: Template, row: Row) -> RenderedDocument:
        """Render a single-page document for one row."""
        return self.render(template, [row])

    @abstractmethod
    def draw_page(self, c: pdf_canvas.Canvas, template: Template, row: Row) -> PageRecord:
        """Draw one row onto the current page."""


class PDFRenderer(_PageRenderer):
    """Element-based renderer drawing native PDF text and shapes."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        compress: Optional[bool] = None,
        image_loader: Optional[Callable[[str], Image.Image]] = None,
    ):
        """
        Initialize the PDF renderer.

        Args:
            settings: Engine settings (defaults to packaged settings)
            compress: Override ``settings.compress_pages``
            image_loader: Callable turning an image source into a PIL image
        """
        super().__init__(settings, compress)
        self.image_loader = image_loader or CachingImageLoader()

    def draw_page(self, c: pdf_canvas.Canvas, template: Template, row: Row) -> PageRecord:
        """Draw background, elements and border for one row."""
        record = PageRecord()
        page_width = template.width_mm * mm
        page_height = template.height_mm * mm

        c.setFillColor(pdf_color(template.background_color, "#ffffff"))
        c.rect(0, 0, page_width, page_height, stroke=0, fill=1)

        if template.background_image:
            image = self._load(template.background_image, "background")
            if image is not None:
                c.drawImage(ImageReader(image), 0, 0, page_width, page_height, mask="auto")

        for element in template.elements:
            self._draw_element_pdf(c, element, template, row, record)

        if template.border is not None:
            self._draw_border_pdf(c, template)

        return record

    def _load(self, source: str, label: str) -> Optional[Image.Image]:
        try:
            return self.image_loader(source)
        except ImageDecodeError as e:
            logger.warning("Skipping image %s: %s", label, e)
            return None

    def _draw_element_pdf(
        self,
        c: pdf_canvas.Canvas,
        element: Element,
        template: Template,
        row: Row,
        record: PageRecord,
    ):
        """Draw one element in a local frame pinned to its top-left corner."""
        c.saveState()
        c.translate(element.x * mm, (template.height_mm - element.y) * mm)
        if element.rotation:
            c.rotate(-element.rotation)

        if isinstance(element, TextElement):
            self._draw_text_pdf(c, element, resolve_text(element, row), template.width_mm, record)
        elif isinstance(element, ImageElement):
            self._draw_image_pdf(c, element)
        elif isinstance(element, RectangleElement):
            self._draw_rectangle_pdf(c, element)
        elif isinstance(element, CircleElement):
            self._draw_circle_pdf(c, element)
        elif isinstance(element, LineElement):
            self._draw_line_pdf(c, element)

        c.restoreState()

    def _draw_text_pdf(
        self,
        c: pdf_canvas.Canvas,
        element: TextElement,
        text: str,
        page_width: float,
        record: PageRecord,
    ):
        c.setFont(pdf_font_name(element.font_family, element.bold, element.italic), element.font_size_mm * mm)
        c.setFillColor(pdf_color(element.color))

        lines = layout_text(
            element, text, page_width, self.settings.baseline_factor, self.settings.line_height
        )
        for line in lines:
            if not line.text:
                continue
            c.drawString((line.x - element.x) * mm, (element.y - line.baseline) * mm, line.text)
            record.texts.append(line.text)

    def _draw_image_pdf(self, c: pdf_canvas.Canvas, element: ImageElement):
        image = self._load(element.source, element.id)
        if image is None:
            return
        c.drawImage(
            ImageReader(image),
            0,
            -element.height_mm * mm,
            element.width_mm * mm,
            element.height_mm * mm,
            mask="auto",
        )

    def _apply_stroke(self, c: pdf_canvas.Canvas, color: str, width_mm: float, filled: bool, fill_color: str):
        c.setStrokeColor(pdf_color(color))
        c.setLineWidth(width_mm * mm)
        if filled:
            c.setFillColor(pdf_color(fill_color))
        return (1 if width_mm > 0 else 0), (1 if filled else 0)

    def _draw_rectangle_pdf(self, c: pdf_canvas.Canvas, element: RectangleElement):
        stroke, fill = self._apply_stroke(
            c, element.stroke_color, element.stroke_width_mm, element.filled, element.fill_color
        )
        c.rect(
            0,
            -element.height_mm * mm,
            element.width_mm * mm,
            element.height_mm * mm,
            stroke=stroke,
            fill=fill,
        )

    def _draw_circle_pdf(self, c: pdf_canvas.Canvas, element: CircleElement):
        stroke, fill = self._apply_stroke(
            c, element.stroke_color, element.stroke_width_mm, element.filled, element.fill_color
        )
        r = element.radius_mm * mm
        c.circle(r, -r, r, stroke=stroke, fill=fill)

    def _draw_line_pdf(self, c: pdf_canvas.Canvas, element: LineElement):
        c.setStrokeColor(pdf_color(element.color))
        c.setLineWidth(element.stroke_width_mm * mm)
        c.line(0, 0, element.width_mm * mm, 0)

    def _draw_border_pdf(self, c: pdf_canvas.Canvas, template: Template):
        border = template.border
        margin = border.margin_mm
        c.setStrokeColor(pdf_color(border.color))
        c.setLineWidth(border.width_mm * mm)
        c.rect(
            margin * mm,
            margin * mm,
            (template.width_mm - 2 * margin) * mm,
            (template.height_mm - 2 * margin) * mm,
            stroke=1,
            fill=0,
        )


class SnapshotRenderer(_PageRenderer):
    """Renderer that stretches a surface snapshot over each page."""

    def __init__(
        self,
        surface: Surface,
        settings: Optional[EngineSettings] = None,
        compress: Optional[bool] = None,
        pixel_ratio: float = 2.0,
    ):
        """
        Initialize the snapshot renderer.

        Args:
            surface: Surface already showing the template
            settings: Engine settings
            compress: Override ``settings.compress_pages``
            pixel_ratio: Oversampling factor for the snapshot
        """
        super().__init__(settings, compress)
        self.surface = surface
        self.pixel_ratio = pixel_ratio

    def draw_page(self, c: pdf_canvas.Canvas, template: Template, row: Row) -> PageRecord:
        image = self.surface.snapshot(row, self.pixel_ratio)
        c.drawImage(ImageReader(image), 0, 0, template.width_mm * mm, template.height_mm * mm)

        record = PageRecord()
        for element in template.text_elements():
            record.texts.extend(line for line in resolve_text(element, row).split("\n") if line)
        return record


def create_renderer(
    template: Template,
    surface: Optional[Surface] = None,
    settings: Optional[EngineSettings] = None,
    compress: Optional[bool] = None,
) -> _PageRenderer:
    """
    Pick the renderer matching ``template.use_snapshot_generation``.

    A RasterSurface is created and loaded when the snapshot strategy is
    selected and no surface is given.
    """
    if not template.use_snapshot_generation:
        return PDFRenderer(settings=settings, compress=compress)

    if surface is None:
        surface = RasterSurface(settings=settings)
        surface.load_template(template)
    return SnapshotRenderer(surface, settings=settings, compress=compress)


def render_preview(
    template: Template,
    row: Optional[Row] = None,
    context: Optional[RenderContext] = None,
    settings: Optional[EngineSettings] = None,
) -> Image.Image:
    """Rasterize a preview image at the context's canvas scale."""
    settings = settings or get_settings()
    context = context or RenderContext.from_settings(settings)
    rasterizer = Rasterizer(
        scale=context.canvas_scale,
        baseline_factor=settings.baseline_factor,
        line_height=settings.line_height,
    )
    return rasterizer.render(template, row)


def render_preview_png(
    template: Template,
    row: Optional[Row] = None,
    context: Optional[RenderContext] = None,
    settings: Optional[EngineSettings] = None,
) -> bytes:
    """Rasterize a preview and encode it as PNG."""
    return image_to_png_bytes(render_preview(template, row, context, settings))
