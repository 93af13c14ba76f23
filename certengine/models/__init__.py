"""Data models for the certificate template engine."""

from .element import (
    Element,
    ElementType,
    TextAlign,
    TextElement,
    ImageElement,
    RectangleElement,
    CircleElement,
    LineElement,
    ELEMENT_CLASSES,
    DEFAULT_LINE_HEIGHT,
    element_class_for,
    element_from_dict,
    new_element,
)

from .identifiers import (
    IdConfig,
    ElementIdGenerator,
)

from .template import (
    Template,
    BorderSpec,
    Orientation,
    PageFormat,
    PAGE_SIZES_MM,
    page_size_mm,
    create_default_template,
)

from .data_source import DataSource

from .binding import (
    BindingProposal,
    MatchConfidence,
)

__all__ = [
    # Elements
    "Element",
    "ElementType",
    "TextAlign",
    "TextElement",
    "ImageElement",
    "RectangleElement",
    "CircleElement",
    "LineElement",
    "ELEMENT_CLASSES",
    "DEFAULT_LINE_HEIGHT",
    "element_class_for",
    "element_from_dict",
    "new_element",
    # Ids
    "IdConfig",
    "ElementIdGenerator",
    # Template
    "Template",
    "BorderSpec",
    "Orientation",
    "PageFormat",
    "PAGE_SIZES_MM",
    "page_size_mm",
    "create_default_template",
    # Data source
    "DataSource",
    # Bindings
    "BindingProposal",
    "MatchConfidence",
]
