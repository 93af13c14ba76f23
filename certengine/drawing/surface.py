"""Interactive surface abstraction and its Pillow-backed implementation.

A surface holds a live, pixel-unit copy of a template that user gestures
edit. It reports edits to listeners and converts back into a millimetre
Template on demand.
"""

import functools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Mapping, Optional

from PIL import Image

from ..engine.preview import Debouncer, TimerFactory
from ..models import (
    Element,
    ElementIdGenerator,
    ElementType,
    Template,
    element_class_for,
    new_element,
)
from ..settings import EngineSettings, get_settings
from .images import ImageDecodeError
from .raster import CachingImageLoader, Rasterizer
from .units import RenderContext, mm_to_px, px_to_mm, round_mm, round_tenth_mm

logger = logging.getLogger(__name__)


# Element attributes measured in mm; rounded to whole mm on save
POSITION_FIELDS = ("x", "y", "width", "width_mm", "height_mm", "radius_mm")
# Finer-grained lengths; rounded to 0.1 mm on save
FINE_FIELDS = ("font_size_mm", "stroke_width_mm")
LENGTH_FIELDS = POSITION_FIELDS + FINE_FIELDS

EditListener = Callable[[], None]
LoadErrorListener = Callable[[str, str], None]


def synchronized(method):
    """Run a surface method while holding the surface lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            return method(self, *args, **kwargs)
    return wrapper


class Surface(ABC):
    """
    Drawable, editable surface capability.

    ``lock`` is a reentrant lock serializing gestures, edit notifications
    and reads. Debounced notifications fire on timer threads unless the host
    passes its own event-loop scheduler as the timer factory, so listeners
    run with the lock held and code sharing state with the surface must
    take the same lock.
    """

    def __init__(self):
        self.lock = threading.RLock()

    @abstractmethod
    def load_template(self, template: Template):
        """Rebuild the live object graph from a template."""

    @abstractmethod
    def on_edit(self, callback: EditListener):
        """Register a listener fired after user edits."""

    @abstractmethod
    def serialize_to_template(self) -> Template:
        """Convert the live objects back into a Template."""

    @abstractmethod
    def snapshot(self, row: Optional[Mapping[str, str]] = None, pixel_ratio: float = 1.0) -> Image.Image:
        """Rasterize the surface, with dynamic text resolved for ``row``."""


@dataclass
class SurfaceNode:
    """A live object on the surface; lengths are in canvas pixels."""
    id: str
    kind: ElementType
    geometry: Dict[str, float] = field(default_factory=dict)
    props: Dict[str, Any] = field(default_factory=dict)
    load_error: Optional[str] = None

    @classmethod
    def from_element(cls, element: Element, scale: float) -> "SurfaceNode":
        geometry = {}
        props = {}
        for f in fields(element):
            if f.name == "id":
                continue
            value = getattr(element, f.name)
            if f.name in LENGTH_FIELDS:
                geometry[f.name] = mm_to_px(value, scale)
            else:
                props[f.name] = value
        return cls(id=element.id, kind=element.type, geometry=geometry, props=props)

    def to_element(self, scale: float, rounded: bool = True) -> Element:
        values = dict(self.props)
        for name, value_px in self.geometry.items():
            value = px_to_mm(value_px, scale)
            if rounded:
                value = round_tenth_mm(value) if name in FINE_FIELDS else round_mm(value)
            values[name] = value
        return element_class_for(self.kind)(id=self.id, **values)


class RasterSurface(Surface):
    """Pillow-backed surface owning its own pixel-unit nodes."""

    def __init__(
        self,
        context: Optional[RenderContext] = None,
        settings: Optional[EngineSettings] = None,
        timer_factory: TimerFactory = threading.Timer,
        image_loader: Optional[Callable[[str], Image.Image]] = None,
    ):
        """
        Initialize the surface.

        Args:
            context: Scale factors (defaults from settings)
            settings: Engine settings
            timer_factory: Timer constructor used for drag debouncing
            image_loader: Callable turning an image source into a PIL image
        """
        super().__init__()
        self.settings = settings or get_settings()
        self.context = context or RenderContext.from_settings(self.settings)
        self.nodes: List[SurfaceNode] = []
        self.load_errors: Dict[str, str] = {}

        self._page = Template()
        self._ids = ElementIdGenerator()
        self._images = image_loader or CachingImageLoader()
        self._edit_listeners: List[EditListener] = []
        self._error_listeners: List[LoadErrorListener] = []
        self._drag_debouncer = Debouncer(
            self.settings.debounce_seconds, self._notify_edit, timer_factory
        )
        self._dragging: Optional[str] = None

    # -- capability -------------------------------------------------------

    @property
    def scale(self) -> float:
        return self.context.canvas_scale

    @synchronized
    def load_template(self, template: Template):
        """Replace all nodes with fresh copies of ``template``'s elements."""
        self._drag_debouncer.cancel()
        self._dragging = None
        self._page = template.clone()
        self._page.elements = []
        self.nodes = [SurfaceNode.from_element(e, self.scale) for e in template.elements]
        self.load_errors = {}
        if isinstance(self._images, CachingImageLoader):
            self._images.clear()

        if self._page.background_image:
            self._check_image("background", self._page.background_image)
        for node in self.nodes:
            if node.kind == ElementType.IMAGE:
                node.load_error = self._check_image(node.id, node.props.get("source", ""))

    def on_edit(self, callback: EditListener):
        self._edit_listeners.append(callback)

    def on_load_error(self, callback: LoadErrorListener):
        """Register a listener called with (node_id, message) on decode failure."""
        self._error_listeners.append(callback)

    @synchronized
    def serialize_to_template(self) -> Template:
        """Template with geometry rounded to whole mm (0.1 mm for strokes and font sizes)."""
        return self._to_template(rounded=True)

    @synchronized
    def snapshot(self, row: Optional[Mapping[str, str]] = None, pixel_ratio: float = 1.0) -> Image.Image:
        rasterizer = Rasterizer(
            scale=self.scale * pixel_ratio,
            image_loader=self._images,
            baseline_factor=self.settings.baseline_factor,
            line_height=self.settings.line_height,
        )
        return rasterizer.render(self._to_template(rounded=False), row)

    # -- gestures ---------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[SurfaceNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        logger.debug("No surface node with id %s", node_id)
        return None

    @synchronized
    def add_element(self, kind, defaults: Optional[Dict[str, Any]] = None) -> str:
        """
        Add a new element at its default (or given) position.

        Unknown kinds add a text element.
        """
        element = new_element(kind, defaults)
        element.id = self._ids.next_id(n.id for n in self.nodes)
        node = SurfaceNode.from_element(element, self.scale)
        if node.kind == ElementType.IMAGE:
            node.load_error = self._check_image(node.id, node.props.get("source", ""))
        self.nodes.append(node)
        self._emit_now()
        return element.id

    @synchronized
    def begin_drag(self, node_id: str) -> bool:
        if self.get_node(node_id) is None:
            return False
        self._dragging = node_id
        return True

    @synchronized
    def drag(self, node_id: str, dx: float, dy: float) -> bool:
        """Move by a pointer delta in display pixels; notifies debounced."""
        node = self.get_node(node_id)
        if node is None:
            return False
        node.geometry["x"] += self.context.display_to_canvas(dx)
        node.geometry["y"] += self.context.display_to_canvas(dy)
        self._drag_debouncer.call()
        return True

    @synchronized
    def end_drag(self, node_id: str) -> bool:
        self._dragging = None
        if self.get_node(node_id) is None:
            return False
        self._emit_now()
        return True

    @synchronized
    def move(self, node_id: str, dx: float, dy: float) -> bool:
        """A complete drag gesture in one call."""
        if not self.begin_drag(node_id):
            return False
        self.drag(node_id, dx, dy)
        return self.end_drag(node_id)

    @synchronized
    def resize(self, node_id: str, width: Optional[float] = None, height: Optional[float] = None) -> bool:
        """
        Resize a node to a display-pixel width and/or height.

        Circles take ``width`` as their diameter; lines and text ignore
        ``height``.
        """
        node = self.get_node(node_id)
        if node is None:
            return False
        minimum = mm_to_px(1, self.scale)

        if width is not None:
            width_px = max(self.context.display_to_canvas(width), minimum)
            if node.kind == ElementType.CIRCLE:
                node.geometry["radius_mm"] = width_px / 2
            elif node.kind == ElementType.TEXT:
                node.geometry["width"] = width_px
            else:
                node.geometry["width_mm"] = width_px
        if height is not None and "height_mm" in node.geometry:
            node.geometry["height_mm"] = max(self.context.display_to_canvas(height), minimum)

        self._emit_now()
        return True

    @synchronized
    def rotate(self, node_id: str, degrees: float) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.props["rotation"] = degrees % 360
        self._emit_now()
        return True

    @synchronized
    def recolor(self, node_id: str, color: str, fill: bool = False) -> bool:
        """Change a node's stroke/text colour, or its fill colour."""
        node = self.get_node(node_id)
        if node is None:
            return False
        if fill and "fill_color" in node.props:
            node.props["fill_color"] = color
            node.props["filled"] = True
        elif "stroke_color" in node.props:
            node.props["stroke_color"] = color
        elif "color" in node.props:
            node.props["color"] = color
        else:
            return False
        self._emit_now()
        return True

    @synchronized
    def set_text(self, node_id: str, content: str) -> bool:
        node = self.get_node(node_id)
        if node is None or node.kind != ElementType.TEXT:
            return False
        node.props["content"] = content
        self._emit_now()
        return True

    @synchronized
    def delete(self, node_id: str) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        self.nodes.remove(node)
        self.load_errors.pop(node_id, None)
        self._emit_now()
        return True

    @synchronized
    def set_zoom(self, zoom: float):
        """Change the display zoom; the pixel buffer and the model are untouched."""
        self.context = self.context.with_zoom(zoom)

    @property
    def display_size(self):
        """On-screen size (width, height) in pixels."""
        return (
            mm_to_px(self._page.width_mm, self.context.display_scale),
            mm_to_px(self._page.height_mm, self.context.display_scale),
        )

    # -- internals --------------------------------------------------------

    def _to_template(self, rounded: bool) -> Template:
        template = self._page.clone()
        template.elements = [n.to_element(self.scale, rounded) for n in self.nodes]
        return template

    def _check_image(self, node_id: str, source: str) -> Optional[str]:
        try:
            self._images(source)
        except ImageDecodeError as e:
            message = str(e)
            logger.warning("Image %s failed to load: %s", node_id, message)
            self.load_errors[node_id] = message
            for listener in self._error_listeners:
                listener(node_id, message)
            return message
        return None

    def _emit_now(self):
        # A terminal gesture replaces any debounced drag notification
        self._drag_debouncer.cancel()
        self._notify_edit()

    @synchronized
    def _notify_edit(self):
        for listener in list(self._edit_listeners):
            listener()
