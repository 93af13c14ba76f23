"""Certificate Template Engine.

Design certificate templates, bind their text to columns of a CSV/Excel
data source and render one certificate per row as PDF.
"""

__version__ = "1.0.0"
__author__ = "Nayyer"

from .models import (
    Element,
    ElementType,
    TextAlign,
    TextElement,
    ImageElement,
    RectangleElement,
    CircleElement,
    LineElement,
    Template,
    BorderSpec,
    Orientation,
    PageFormat,
    DataSource,
    BindingProposal,
    MatchConfidence,
    create_default_template,
)

from .settings import (
    EngineSettings,
    load_settings,
    get_settings,
)

from .engine import (
    resolve_text,
    render_filename,
    detect_fields,
    match_headers,
    propose_bindings,
    place_unmatched,
    apply_bindings,
    BatchController,
    BatchInputError,
    GenerationError,
    GeneratedDocument,
    EditingSession,
)

from .drawing import (
    RenderContext,
    mm_to_px,
    px_to_mm,
    RasterSurface,
    PDFRenderer,
    SnapshotRenderer,
    RenderedDocument,
    render_preview_png,
    render_svg_preview,
    generate_thumbnail,
)

from .parsers import (
    load_data_source,
    DataSourceParseError,
    load_template_file,
    save_template_file,
    TemplateFormatError,
    validate_columns,
)

__all__ = [
    # Version
    "__version__",
    "__author__",
    # Models
    "Element",
    "ElementType",
    "TextAlign",
    "TextElement",
    "ImageElement",
    "RectangleElement",
    "CircleElement",
    "LineElement",
    "Template",
    "BorderSpec",
    "Orientation",
    "PageFormat",
    "DataSource",
    "BindingProposal",
    "MatchConfidence",
    "create_default_template",
    # Settings
    "EngineSettings",
    "load_settings",
    "get_settings",
    # Engine
    "resolve_text",
    "render_filename",
    "detect_fields",
    "match_headers",
    "propose_bindings",
    "place_unmatched",
    "apply_bindings",
    "BatchController",
    "BatchInputError",
    "GenerationError",
    "GeneratedDocument",
    "EditingSession",
    # Drawing
    "RenderContext",
    "mm_to_px",
    "px_to_mm",
    "RasterSurface",
    "PDFRenderer",
    "SnapshotRenderer",
    "RenderedDocument",
    "render_preview_png",
    "render_svg_preview",
    "generate_thumbnail",
    # Parsers
    "load_data_source",
    "DataSourceParseError",
    "load_template_file",
    "save_template_file",
    "TemplateFormatError",
    "validate_columns",
]
