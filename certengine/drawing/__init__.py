"""Drawing module: units, rasterizing, surfaces and PDF/SVG output."""

from .units import (
    PT_PER_MM,
    RenderContext,
    mm_to_px,
    px_to_mm,
    mm_to_pt,
    round_mm,
    round_tenth_mm,
)

from .fonts import (
    font_family_key,
    pdf_font_name,
    raster_font,
    text_width_mm,
)

from .images import (
    ImageDecodeError,
    decode_image,
    load_image_bytes,
    to_data_url,
    image_to_png_bytes,
)

from .layout import (
    TextLine,
    text_anchor,
    layout_text,
)

from .raster import (
    CachingImageLoader,
    Rasterizer,
    parse_color,
)

from .surface import (
    Surface,
    SurfaceNode,
    RasterSurface,
)

from .renderer import (
    PageRecord,
    RenderedDocument,
    PDFRenderer,
    SnapshotRenderer,
    create_renderer,
    render_preview,
    render_preview_png,
)

from .svg_preview import (
    SVGPreview,
    render_svg_preview,
    save_svg_preview,
)

from .thumbnail import (
    generate_thumbnail,
    generate_thumbnail_image,
)

__all__ = [
    # Units
    "PT_PER_MM",
    "RenderContext",
    "mm_to_px",
    "px_to_mm",
    "mm_to_pt",
    "round_mm",
    "round_tenth_mm",
    # Fonts
    "font_family_key",
    "pdf_font_name",
    "raster_font",
    "text_width_mm",
    # Images
    "ImageDecodeError",
    "decode_image",
    "load_image_bytes",
    "to_data_url",
    "image_to_png_bytes",
    # Layout
    "TextLine",
    "text_anchor",
    "layout_text",
    # Raster
    "CachingImageLoader",
    "Rasterizer",
    "parse_color",
    # Surface
    "Surface",
    "SurfaceNode",
    "RasterSurface",
    # Renderer
    "PageRecord",
    "RenderedDocument",
    "PDFRenderer",
    "SnapshotRenderer",
    "create_renderer",
    "render_preview",
    "render_preview_png",
    # SVG / thumbnails
    "SVGPreview",
    "render_svg_preview",
    "save_svg_preview",
    "generate_thumbnail",
    "generate_thumbnail_image",
]
