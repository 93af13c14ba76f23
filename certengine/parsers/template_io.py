"""Template import/export (JSON) and template creation from PDF, Word and image files."""

import json
import logging
import zipfile
from pathlib import Path
from typing import Optional

import docx
from docx.opc.exceptions import PackageNotFoundError
from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..drawing.images import to_data_url
from ..models import ElementType, Orientation, PageFormat, Template, TextAlign, page_size_mm

logger = logging.getLogger(__name__)


class TemplateFormatError(Exception):
    """Exception raised for unreadable or malformed template files."""
    pass


def template_to_json(template: Template, indent: int = 2) -> str:
    """Serialize a template to JSON (camelCase keys)."""
    return json.dumps(template.to_dict(), indent=indent, ensure_ascii=False)


def template_from_json(text: str) -> Template:
    """
    Build a template from JSON text.

    Raises:
        TemplateFormatError: If the JSON is invalid or has the wrong shape
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TemplateFormatError(f"Invalid template JSON: {e}")

    if not isinstance(data, dict):
        raise TemplateFormatError("Template JSON must be an object")
    if not isinstance(data.get("elements", []), list):
        raise TemplateFormatError("Template 'elements' must be a list")

    try:
        return Template.from_dict(data)
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise TemplateFormatError(f"Invalid template: {e}")


def save_template_file(template: Template, output_path: str) -> Path:
    """Write a template as a JSON file."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template_to_json(template), encoding="utf-8")
    logger.info("Saved template %s to %s", template.name, path)
    return path


def load_template_file(file_path: str) -> Template:
    """Read a template from a JSON file."""
    path = Path(file_path)
    if not path.exists():
        raise TemplateFormatError(f"File not found: {file_path}")
    return template_from_json(path.read_text(encoding="utf-8"))


def template_from_image(file_path: str, name: Optional[str] = None) -> Template:
    """
    Create an empty A4 template using an image as its background.

    Orientation follows the image's aspect ratio.

    Raises:
        TemplateFormatError: If the image cannot be read
    """
    path = Path(file_path)
    try:
        data = path.read_bytes()
        with Image.open(path) as image:
            width, height = image.size
            mime_type = Image.MIME.get(image.format, "image/png")
    except FileNotFoundError:
        raise TemplateFormatError(f"File not found: {file_path}")
    except (UnidentifiedImageError, OSError) as e:
        raise TemplateFormatError(f"Failed to parse image: {e}")

    return Template(
        name=name or path.stem,
        orientation=Orientation.LANDSCAPE if width > height else Orientation.PORTRAIT,
        page_format=PageFormat.A4,
        background_color="#ffffff",
        background_image=to_data_url(data, mime_type),
    )


JSON_EXTENSIONS = {".json"}
PDF_EXTENSIONS = {".pdf"}
WORD_EXTENSIONS = {".docx"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

POINTS_TO_MM = 25.4 / 72

# Starter text placed on templates created from a PDF: (content, y mm, font mm)
PDF_STARTER_TEXT = [
    ("Certificate of Completion", 50, 6.4),
    ("This is to certify that", 100, 4.2),
    ("{{name}}", 130, 5.6),
]

WORD_LINE_START_MM = 30
WORD_LINE_GAP_MM = 25
WORD_FONT_MM = 4.2


def _page_format_for(width_mm: float, height_mm: float) -> PageFormat:
    short, long = sorted((width_mm, height_mm))
    letter = page_size_mm(PageFormat.LETTER, Orientation.PORTRAIT)
    if abs(short - letter[0]) < 1 and abs(long - letter[1]) < 1:
        return PageFormat.LETTER
    return PageFormat.A4


def template_from_pdf(file_path: str, name: Optional[str] = None) -> Template:
    """
    Create a template shaped like the first page of a PDF.

    Orientation and page format follow the page size (Letter when the page
    matches it, A4 otherwise). The template gets centred starter text with a
    ``{{name}}`` field bound to the ``name`` column.

    Raises:
        TemplateFormatError: If the PDF cannot be read or has no pages
    """
    path = Path(file_path)
    if not path.exists():
        raise TemplateFormatError(f"File not found: {file_path}")

    try:
        reader = PdfReader(str(path))
        if len(reader.pages) == 0:
            raise TemplateFormatError(f"PDF has no pages: {file_path}")
        page = reader.pages[0]
        width_pt = float(page.mediabox.width)
        height_pt = float(page.mediabox.height)
        if (page.rotation or 0) % 180 == 90:
            width_pt, height_pt = height_pt, width_pt
    except (PdfReadError, OSError, ValueError) as e:
        raise TemplateFormatError(f"Failed to parse PDF: {e}")

    width_mm = width_pt * POINTS_TO_MM
    height_mm = height_pt * POINTS_TO_MM
    template = Template(
        name=name or path.stem,
        orientation=Orientation.LANDSCAPE if width_mm > height_mm else Orientation.PORTRAIT,
        page_format=_page_format_for(width_mm, height_mm),
        background_color="#ffffff",
    )

    for content, y, font_mm in PDF_STARTER_TEXT:
        is_field = content == "{{name}}"
        template.add_element(ElementType.TEXT, {
            "content": content,
            "x": 0,
            "y": y,
            "width": template.width_mm,
            "font_size_mm": font_mm,
            "align": TextAlign.CENTER,
            "is_dynamic": is_field,
            "data_field": "name" if is_field else None,
        })

    logger.info("Created template %s from PDF page %.0fx%.0f mm", template.name, width_mm, height_mm)
    return template


def template_from_docx(file_path: str, name: Optional[str] = None) -> Template:
    """
    Create a portrait A4 template from the text of a Word document.

    Each non-blank paragraph becomes a left-aligned text element, stacked
    from the top of the page.

    Raises:
        TemplateFormatError: If the document cannot be read
    """
    path = Path(file_path)
    if not path.exists():
        raise TemplateFormatError(f"File not found: {file_path}")

    try:
        document = docx.Document(str(path))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise TemplateFormatError(f"Failed to parse Word document: {e}")

    template = Template(
        name=name or path.stem,
        orientation=Orientation.PORTRAIT,
        page_format=PageFormat.A4,
        background_color="#ffffff",
    )

    lines = [p.text.strip() for p in document.paragraphs if p.text.strip()]
    for index, line in enumerate(lines):
        template.add_element(ElementType.TEXT, {
            "content": line,
            "x": 20,
            "y": WORD_LINE_START_MM + index * WORD_LINE_GAP_MM,
            "width": 170,
            "font_size_mm": WORD_FONT_MM,
            "align": TextAlign.LEFT,
        })

    logger.info("Created template %s with %d lines from Word document", template.name, len(lines))
    return template


def parse_template_file(file_path: str, name: Optional[str] = None) -> Template:
    """
    Create a template from a file, dispatching on its extension.

    JSON files are loaded as saved templates. PDF, Word (.docx) and image
    files become new templates shaped by their content.

    Args:
        file_path: Path to the source file
        name: Optional template name (ignored for JSON)

    Returns:
        Template

    Raises:
        TemplateFormatError: If the file type is unsupported or unreadable
    """
    extension = Path(file_path).suffix.lower()

    if extension in JSON_EXTENSIONS:
        return load_template_file(file_path)
    if extension in PDF_EXTENSIONS:
        return template_from_pdf(file_path, name=name)
    if extension in WORD_EXTENSIONS:
        return template_from_docx(file_path, name=name)
    if extension in IMAGE_EXTENSIONS:
        return template_from_image(file_path, name=name)

    raise TemplateFormatError(f"Unsupported template file type: {extension or file_path}")
