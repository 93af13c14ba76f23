"""Template data model for certificate documents."""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .element import (
    Element,
    TextElement,
    TextAlign,
    ElementType,
    new_element,
    element_from_dict,
)
from .identifiers import ElementIdGenerator

logger = logging.getLogger(__name__)


class Orientation(Enum):
    """Page orientation."""
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class PageFormat(Enum):
    """Supported paper formats."""
    A4 = "a4"
    LETTER = "letter"


# Portrait page sizes (width, height) in mm
PAGE_SIZES_MM: Dict[PageFormat, Tuple[float, float]] = {
    PageFormat.A4: (210.0, 297.0),
    PageFormat.LETTER: (215.9, 279.4),
}


def page_size_mm(page_format: PageFormat, orientation: Orientation) -> Tuple[float, float]:
    """
    Get page dimensions for a format and orientation.

    Returns:
        Tuple of (width_mm, height_mm)
    """
    width, height = PAGE_SIZES_MM[page_format]
    if orientation == Orientation.LANDSCAPE:
        return height, width
    return width, height


@dataclass
class BorderSpec:
    """Inset page border."""
    width_mm: float = 1.0
    color: str = "#000000"
    margin_mm: float = 10.0

    def to_dict(self) -> Dict[str, Any]:
        return {"widthMm": self.width_mm, "color": self.color, "marginMm": self.margin_mm}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BorderSpec":
        return cls(
            width_mm=data.get("widthMm", 1.0),
            color=data.get("color", "#000000"),
            margin_mm=data.get("marginMm", 10.0),
        )


# Template-level fields accepted by update_settings
SETTINGS_FIELDS = (
    "name",
    "orientation",
    "page_format",
    "background_color",
    "background_image",
    "border",
    "use_snapshot_generation",
)


@dataclass
class Template:
    """A certificate document template."""

    name: str = "Untitled Template"
    orientation: Orientation = Orientation.LANDSCAPE
    page_format: PageFormat = PageFormat.A4
    background_color: str = "#ffffff"
    background_image: Optional[str] = None   # data URL or file path
    border: Optional[BorderSpec] = None
    use_snapshot_generation: bool = False
    elements: List[Element] = field(default_factory=list)

    _ids: ElementIdGenerator = field(
        default_factory=ElementIdGenerator, repr=False, compare=False
    )

    def __post_init__(self):
        self.orientation = Orientation(self.orientation)
        self.page_format = PageFormat(self.page_format)

    # -- geometry ---------------------------------------------------------

    @property
    def page_size(self) -> Tuple[float, float]:
        return page_size_mm(self.page_format, self.orientation)

    @property
    def width_mm(self) -> float:
        return self.page_size[0]

    @property
    def height_mm(self) -> float:
        return self.page_size[1]

    @property
    def element_count(self) -> int:
        return len(self.elements)

    # -- queries ----------------------------------------------------------

    def get_element(self, element_id: str) -> Optional[Element]:
        """Get element by id."""
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def text_elements(self) -> List[TextElement]:
        """All text elements in drawing order."""
        return [e for e in self.elements if isinstance(e, TextElement)]

    def dynamic_fields(self) -> List[str]:
        """Data fields bound by dynamic text elements, in element order."""
        result = []
        for element in self.text_elements():
            if element.is_bound and element.data_field not in result:
                result.append(element.data_field)
        return result

    # -- mutations (all total) --------------------------------------------

    def new_element_id(self) -> str:
        return self._ids.next_id(e.id for e in self.elements)

    def add_element(self, kind, defaults: Optional[Dict[str, Any]] = None) -> str:
        """
        Add an element of the given kind.

        An unknown kind adds a text element and an invalid alignment keeps
        the default.

        Args:
            kind: ElementType or its string value
            defaults: Optional field values for the new element

        Returns:
            Id of the new element
        """
        element = new_element(kind, defaults)
        element.id = self.new_element_id()
        self.elements.append(element)
        return element.id

    def append_element(self, element: Element) -> str:
        """Append an existing element, assigning a fresh id if needed."""
        if not element.id or self.get_element(element.id) is not None:
            element.id = self.new_element_id()
        self.elements.append(element)
        return element.id

    def update_element(self, element_id: str, changes: Dict[str, Any]):
        """Apply a partial update to an element; unknown ids/fields are ignored."""
        element = self.get_element(element_id)
        if element is None:
            logger.debug("update_element: no element with id %s", element_id)
            return

        known = set(element.field_names()) - {"id"}
        for key, value in changes.items():
            if key not in known:
                logger.debug("update_element: ignoring unknown field %s", key)
                continue
            if key == "align" and not isinstance(value, TextAlign):
                try:
                    value = TextAlign(value)
                except ValueError:
                    logger.debug("update_element: invalid align %r", value)
                    continue
            setattr(element, key, value)

    def remove_element(self, element_id: str):
        """Remove an element; unknown ids are a no-op."""
        before = len(self.elements)
        self.elements = [e for e in self.elements if e.id != element_id]
        if len(self.elements) == before:
            logger.debug("remove_element: no element with id %s", element_id)

    def update_settings(self, changes: Dict[str, Any]):
        """Apply a partial update to template-level settings."""
        for key, value in changes.items():
            if key not in SETTINGS_FIELDS:
                logger.debug("update_settings: ignoring unknown field %s", key)
                continue
            try:
                if key == "orientation":
                    value = Orientation(value)
                elif key == "page_format":
                    value = PageFormat(value)
                elif key == "border" and isinstance(value, dict):
                    value = BorderSpec(**value)
            except (TypeError, ValueError):
                logger.debug("update_settings: invalid value for %s: %r", key, value)
                continue
            setattr(self, key, value)

    def clone(self) -> "Template":
        """Deep copy, sharing nothing with the original."""
        return copy.deepcopy(self)

    # -- serialization ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "orientation": self.orientation.value,
            "pageFormat": self.page_format.value,
            "backgroundColor": self.background_color,
            "backgroundImage": self.background_image,
            "border": self.border.to_dict() if self.border else None,
            "useSnapshotGeneration": self.use_snapshot_generation,
            "elements": [e.to_dict() for e in self.elements],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Template":
        border = data.get("border")
        template = cls(
            name=data.get("name", "Untitled Template"),
            orientation=str(data.get("orientation", "landscape")).lower(),
            page_format=str(data.get("pageFormat", "a4")).lower(),
            background_color=data.get("backgroundColor") or "#ffffff",
            background_image=data.get("backgroundImage"),
            border=BorderSpec.from_dict(border) if border else None,
            use_snapshot_generation=bool(data.get("useSnapshotGeneration", False)),
        )
        for item in data.get("elements", []):
            template.append_element(element_from_dict(item))
        return template


def create_default_template() -> Template:
    """Create the stock certificate layout."""
    template = Template(
        name="Default Certificate",
        orientation=Orientation.LANDSCAPE,
        page_format=PageFormat.A4,
        background_color="#ffffff",
        border=BorderSpec(width_mm=1.0, color="#1e40af", margin_mm=15),
    )

    template.add_element(ElementType.TEXT, {
        "content": "Certificate of Achievement",
        "x": 0, "y": 40, "width": 297, "font_size_mm": 11,
        "bold": True, "color": "#1e40af", "align": TextAlign.CENTER,
    })
    template.add_element(ElementType.TEXT, {
        "content": "This is to certify that",
        "x": 0, "y": 70, "width": 297, "font_size_mm": 6,
        "align": TextAlign.CENTER,
    })
    template.add_element(ElementType.TEXT, {
        "content": "{{name}}",
        "x": 0, "y": 95, "width": 297, "font_size_mm": 10,
        "bold": True, "align": TextAlign.CENTER,
        "is_dynamic": True, "data_field": "name",
    })
    template.add_element(ElementType.TEXT, {
        "content": "has successfully completed {{course}}",
        "x": 0, "y": 120, "width": 297, "font_size_mm": 5,
        "align": TextAlign.CENTER,
    })
    template.add_element(ElementType.TEXT, {
        "content": "Date: {{date}}",
        "x": 40, "y": 170, "width": 100, "font_size_mm": 4.5,
        "align": TextAlign.LEFT,
    })

    return template
