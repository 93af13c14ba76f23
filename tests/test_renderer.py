"""Tests for PDF, raster, SVG and thumbnail output."""

import io
import logging

import pytest
from PIL import Image
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as pdf_canvas

from certengine.drawing import (
    PDFRenderer,
    SnapshotRenderer,
    create_renderer,
    generate_thumbnail,
    layout_text,
    pdf_font_name,
    render_preview,
    render_preview_png,
    render_svg_preview,
    text_anchor,
    text_width_mm,
)
from certengine.drawing.renderer import _PageRenderer
from certengine.models import ImageElement, Orientation, Template, TextAlign, TextElement


ROWS = [{"name": "Ana"}, {"name": "Bo"}]


class TestLayout:
    """Tests for shared text layout."""

    def test_center_ignores_x(self):
        """Test centred text is placed by page width only."""
        assert text_anchor("center", 0, 297, 100) == text_anchor("center", 999, 297, 100) == 98.5

    def test_right_anchor(self):
        """Test right-aligned text keeps x from the right edge."""
        assert text_anchor(TextAlign.RIGHT, 10, 297, 50) == 237

    def test_left_anchor(self):
        """Test left-aligned text starts at x."""
        assert text_anchor("left", 12, 297, 50) == 12

    def test_layout_center_ignores_x(self):
        """Test centred lines land at the same x whatever the element x."""
        expected = (297 - text_width_mm("Ana", "Helvetica", 10)) / 2
        for x in (0, 999):
            element = TextElement(x=x, font_size_mm=10, align=TextAlign.CENTER)
            (line,) = layout_text(element, "Ana", 297)
            assert line.x == pytest.approx(expected)

    def test_multiline_baselines(self):
        """Test baselines advance by the line height."""
        element = TextElement(x=5, y=20, font_size_mm=10)
        lines = layout_text(element, "one\ntwo", 297)
        assert [line.text for line in lines] == ["one", "two"]
        assert lines[0].baseline == pytest.approx(23.5)
        assert lines[1].baseline == pytest.approx(35.5)

    def test_font_names(self):
        """Test base-14 font selection."""
        assert pdf_font_name("Helvetica", False, False) == "Helvetica"
        assert pdf_font_name("Arial", True, False) == "Helvetica-Bold"
        assert pdf_font_name("Times New Roman", True, True) == "Times-BoldItalic"
        assert pdf_font_name("Courier", False, True) == "Courier-Oblique"


class TestPDFRenderer:
    """Tests for element-based PDF export."""

    def test_page_renderer_is_abstract(self):
        """Test the shared page loop cannot be used without a page drawer."""
        with pytest.raises(TypeError):
            _PageRenderer()

    def test_centred_text_position(self, settings, monkeypatch):
        """Test centred text is drawn at the page centre for any element x."""
        drawn = []
        translate = pdf_canvas.Canvas.translate
        draw_string = pdf_canvas.Canvas.drawString

        def recording_translate(self, dx, dy):
            self.test_origin_x = dx
            return translate(self, dx, dy)

        def recording_draw_string(self, x, y, text, *args, **kwargs):
            drawn.append((self.test_origin_x + x) / mm)
            return draw_string(self, x, y, text, *args, **kwargs)

        monkeypatch.setattr(pdf_canvas.Canvas, "translate", recording_translate)
        monkeypatch.setattr(pdf_canvas.Canvas, "drawString", recording_draw_string)

        template = Template(orientation=Orientation.LANDSCAPE)
        for x in (0, 999):
            template.add_element("text", {"content": "Ana", "x": x, "font_size_mm": 10, "align": "center"})
        PDFRenderer(settings, compress=False).render(template, [{}])

        expected = (297 - text_width_mm("Ana", "Helvetica", 10)) / 2
        assert drawn == [pytest.approx(expected), pytest.approx(expected)]

    def test_combined_pages(self, name_template, settings):
        """Test one page per row in row order."""
        document = PDFRenderer(settings, compress=False).render(name_template, ROWS)

        assert document.page_count == 2
        assert [page.texts for page in document.pages] == [["Ana"], ["Bo"]]
        assert document.data.startswith(b"%PDF")
        assert b"(Ana)" in document.data
        assert b"(Bo)" in document.data

    def test_literal_text_and_shapes(self, name_template, settings):
        """Test literal text with placeholders and every shape kind."""
        name_template.add_element("text", {"content": "Course: {{course}}", "x": 20, "y": 150})
        name_template.add_element("rectangle", {"x": 10, "y": 10, "filled": True, "rotation": 15})
        name_template.add_element("circle", {"x": 200, "y": 10})
        name_template.add_element("line", {"x": 10, "y": 180})

        document = PDFRenderer(settings, compress=False).render_row(
            name_template, {"name": "Ana", "course": "Python"}
        )
        assert document.page_count == 1
        assert document.pages[0].texts == ["Ana", "Course: Python"]

    def test_broken_image_is_skipped(self, name_template, settings, caplog):
        """Test an undecodable image logs a warning and rendering continues."""
        name_template.append_element(ImageElement(id="logo", source="data:image/png;base64,AAAA"))
        with caplog.at_level(logging.WARNING):
            document = PDFRenderer(settings, compress=False).render(name_template, ROWS)

        assert document.page_count == 2
        assert "Skipping image logo" in caplog.text

    def test_image_element(self, name_template, settings, png_data_url):
        """Test a valid image renders."""
        name_template.append_element(ImageElement(source=png_data_url, x=10, y=10, width_mm=20, height_mm=10))
        name_template.background_image = png_data_url
        document = PDFRenderer(settings).render(name_template, ROWS[:1])
        assert document.page_count == 1

    def test_save(self, name_template, settings, tmp_path):
        """Test writing to disk."""
        document = PDFRenderer(settings).render(name_template, ROWS)
        path = document.save(str(tmp_path / "out" / "all.pdf"))
        assert path.read_bytes() == document.data
        assert document.size == len(document.data)


class TestSnapshotRenderer:
    """Tests for snapshot-based PDF export."""

    def test_strategy_selection(self, name_template, settings):
        """Test create_renderer honours use_snapshot_generation."""
        assert isinstance(create_renderer(name_template, settings=settings), PDFRenderer)
        name_template.use_snapshot_generation = True
        assert isinstance(create_renderer(name_template, settings=settings), SnapshotRenderer)

    def test_snapshot_pages(self, name_template, settings):
        """Test one snapshot page per row."""
        name_template.use_snapshot_generation = True
        document = create_renderer(name_template, settings=settings, compress=False).render(name_template, ROWS)

        assert document.page_count == 2
        assert [page.texts for page in document.pages] == [["Ana"], ["Bo"]]
        assert document.data.startswith(b"%PDF")


class TestPreviews:
    """Tests for raster, SVG and thumbnail previews."""

    def test_render_preview_size(self, name_template, settings):
        """Test raster preview at the default multiplier."""
        assert render_preview(name_template, ROWS[0], settings=settings).size == (594, 420)

    def test_png_signature(self, name_template, settings):
        """Test PNG encoding."""
        assert render_preview_png(name_template, ROWS[0], settings=settings).startswith(b"\x89PNG\r\n\x1a\n")

    def test_svg_contains_text(self, name_template, settings):
        """Test SVG preview text and viewBox."""
        svg = render_svg_preview(name_template, ROWS[0], settings=settings)
        assert "Ana" in svg
        assert 'viewBox="0 0 297.0 210.0"' in svg

    def test_thumbnail_fits_bounds(self, name_template, settings):
        """Test JPEG thumbnail size."""
        data = generate_thumbnail(name_template, ROWS[0], settings=settings)
        image = Image.open(io.BytesIO(data))
        assert image.format == "JPEG"
        assert image.width <= 400 and image.height <= 300
        assert image.width == 400

    def test_thumbnail_bounds_must_be_positive(self, name_template):
        """Test invalid thumbnail bounds."""
        with pytest.raises(ValueError):
            generate_thumbnail(name_template, max_width=0)
