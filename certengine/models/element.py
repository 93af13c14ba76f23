"""Template element data models."""

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

logger = logging.getLogger(__name__)


class ElementType(Enum):
    """Element kind, used as the ``type`` discriminator in JSON."""
    TEXT = "text"
    IMAGE = "image"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    LINE = "line"


class TextAlign(Enum):
    """Horizontal text alignment."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# Default line height as a multiple of the font size
DEFAULT_LINE_HEIGHT = 1.2


@dataclass
class Element:
    """Common geometry shared by every element (all lengths in mm)."""

    id: str = ""
    x: float = 0
    y: float = 0
    rotation: float = 0          # degrees, clockwise

    element_type: ClassVar[ElementType]

    # Python attribute -> JSON key
    JSON_KEYS: ClassVar[Dict[str, str]] = {
        "id": "id",
        "x": "x",
        "y": "y",
        "rotation": "rotation",
    }
    # Attributes that may be serialized as JSON null
    NULLABLE: ClassVar[tuple] = ()

    @property
    def type(self) -> ElementType:
        return self.element_type

    @property
    def bottom(self) -> float:
        """Bottom edge of the element in mm."""
        return self.y

    def copy(self, **changes) -> "Element":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def field_names(self):
        return [f.name for f in fields(self)]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.element_type.value}
        for attr, key in self.JSON_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, Enum):
                value = value.value
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Element":
        kwargs = {}
        for attr, key in cls.JSON_KEYS.items():
            if key in data and data[key] is not None:
                kwargs[attr] = data[key]
            elif key in data and attr in cls.NULLABLE:
                kwargs[attr] = None
        return cls(**kwargs)


@dataclass
class TextElement(Element):
    """Text element; either literal content or bound to a data column."""

    content: str = "Text"
    width: float = 100           # wrap/align box
    font_size_mm: float = 6
    font_family: str = "Helvetica"
    bold: bool = False
    italic: bool = False
    color: str = "#000000"
    align: TextAlign = TextAlign.LEFT
    is_dynamic: bool = False
    data_field: Optional[str] = None

    element_type: ClassVar[ElementType] = ElementType.TEXT
    JSON_KEYS: ClassVar[Dict[str, str]] = {
        **Element.JSON_KEYS,
        "content": "content",
        "width": "width",
        "font_size_mm": "fontSizeMm",
        "font_family": "fontFamily",
        "bold": "bold",
        "italic": "italic",
        "color": "color",
        "align": "align",
        "is_dynamic": "isDynamic",
        "data_field": "dataField",
    }
    NULLABLE: ClassVar[tuple] = ("data_field",)

    def __post_init__(self):
        if isinstance(self.align, str):
            self.align = TextAlign(self.align)

    @property
    def is_bound(self) -> bool:
        """True when the data field, not the literal content, drives the text."""
        return bool(self.is_dynamic and self.data_field)

    @property
    def line_count(self) -> int:
        return max(1, len(self.content.split("\n")))

    @property
    def bottom(self) -> float:
        return self.y + self.line_count * self.font_size_mm * DEFAULT_LINE_HEIGHT


@dataclass
class ImageElement(Element):
    """Raster image; ``source`` is a data URL or a file path."""

    source: str = ""
    width_mm: float = 50
    height_mm: float = 50

    element_type: ClassVar[ElementType] = ElementType.IMAGE
    JSON_KEYS: ClassVar[Dict[str, str]] = {
        **Element.JSON_KEYS,
        "source": "source",
        "width_mm": "widthMm",
        "height_mm": "heightMm",
    }

    @property
    def bottom(self) -> float:
        return self.y + self.height_mm


@dataclass
class RectangleElement(Element):
    """Axis-aligned rectangle (before rotation)."""

    width_mm: float = 50
    height_mm: float = 30
    stroke_color: str = "#000000"
    stroke_width_mm: float = 0.5
    filled: bool = False
    fill_color: str = "#cccccc"

    element_type: ClassVar[ElementType] = ElementType.RECTANGLE
    JSON_KEYS: ClassVar[Dict[str, str]] = {
        **Element.JSON_KEYS,
        "width_mm": "widthMm",
        "height_mm": "heightMm",
        "stroke_color": "strokeColor",
        "stroke_width_mm": "strokeWidthMm",
        "filled": "filled",
        "fill_color": "fillColor",
    }

    @property
    def bottom(self) -> float:
        return self.y + self.height_mm


@dataclass
class CircleElement(Element):
    """Circle; ``x``/``y`` is the top-left of its bounding square."""

    radius_mm: float = 15
    stroke_color: str = "#000000"
    stroke_width_mm: float = 0.5
    filled: bool = False
    fill_color: str = "#cccccc"

    element_type: ClassVar[ElementType] = ElementType.CIRCLE
    JSON_KEYS: ClassVar[Dict[str, str]] = {
        **Element.JSON_KEYS,
        "radius_mm": "radiusMm",
        "stroke_color": "strokeColor",
        "stroke_width_mm": "strokeWidthMm",
        "filled": "filled",
        "fill_color": "fillColor",
    }

    @property
    def bottom(self) -> float:
        return self.y + 2 * self.radius_mm


@dataclass
class LineElement(Element):
    """Horizontal line from (x, y) to (x + width_mm, y)."""

    width_mm: float = 100
    stroke_width_mm: float = 0.5
    color: str = "#000000"

    element_type: ClassVar[ElementType] = ElementType.LINE
    JSON_KEYS: ClassVar[Dict[str, str]] = {
        **Element.JSON_KEYS,
        "width_mm": "widthMm",
        "stroke_width_mm": "strokeWidthMm",
        "color": "color",
    }

    @property
    def bottom(self) -> float:
        return self.y + self.stroke_width_mm


ELEMENT_CLASSES = {
    ElementType.TEXT: TextElement,
    ElementType.IMAGE: ImageElement,
    ElementType.RECTANGLE: RectangleElement,
    ElementType.CIRCLE: CircleElement,
    ElementType.LINE: LineElement,
}


def element_class_for(kind) -> type:
    """
    Get the element class for a kind.

    Args:
        kind: ElementType or its string value (e.g. "text")

    Returns:
        Element subclass

    Raises:
        ValueError: If the kind is unknown
    """
    if not isinstance(kind, ElementType):
        kind = ElementType(str(kind).lower())
    return ELEMENT_CLASSES[kind]


def element_from_dict(data: Dict[str, Any]) -> Element:
    """Build an element from its JSON dictionary."""
    return element_class_for(data.get("type", "")).from_dict(data)


def new_element(kind, defaults: Optional[Dict[str, Any]] = None) -> Element:
    """
    Create a fresh element for an editing gesture.

    Never raises: an unknown kind gives a text element, and unknown fields
    or an invalid alignment are dropped. The id is left for the caller.
    """
    try:
        cls = element_class_for(kind)
    except ValueError:
        logger.debug("Unknown element kind %r, using text", kind)
        cls = TextElement

    known = {f.name for f in fields(cls)} - {"id"}
    values = {k: v for k, v in (defaults or {}).items() if k in known}
    if "align" in values and not isinstance(values["align"], TextAlign):
        try:
            values["align"] = TextAlign(values["align"])
        except ValueError:
            logger.debug("Invalid align %r, using default", values["align"])
            del values["align"]
    return cls(**values)
