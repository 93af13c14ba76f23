"""Editing session wiring a template, its surface and the live preview."""

import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..models import Template, create_default_template
from ..settings import EngineSettings, get_settings
from .matcher import apply_bindings, place_unmatched
from .preview import PreviewScheduler, PreviewSlots, TimerFactory

if TYPE_CHECKING:
    from ..drawing.surface import Surface

logger = logging.getLogger(__name__)


PREVIEW_SLOT = "preview"


class EditingSession:
    """
    Keeps a Template, a Surface and a preview in agreement.

    Surface edits flow back into the template and schedule a debounced
    preview. Model-side operations reload the surface. Session state is
    guarded by the surface lock, so edits arriving from a timer thread and
    calls from the host thread never interleave.
    """

    def __init__(
        self,
        template: Optional[Template] = None,
        surface: Optional["Surface"] = None,
        settings: Optional[EngineSettings] = None,
        preview_row: Optional[Mapping[str, str]] = None,
        timer_factory: TimerFactory = threading.Timer,
        slots: Optional[PreviewSlots] = None,
    ):
        from ..drawing.surface import RasterSurface

        self.settings = settings or get_settings()
        self.template = template if template is not None else create_default_template()
        self.surface = surface or RasterSurface(settings=self.settings, timer_factory=timer_factory)
        self.slots = slots or PreviewSlots()
        self.preview_row: Optional[Dict[str, str]] = dict(preview_row) if preview_row else None

        self.scheduler = PreviewScheduler(
            render=self._render_preview,
            publish=self._publish_preview,
            delay=self.settings.debounce_seconds,
            timer_factory=timer_factory,
        )
        self.surface.on_edit(self._on_surface_edit)
        self.surface.load_template(self.template)

    @property
    def preview_url(self) -> Optional[str]:
        return self.slots.get(PREVIEW_SLOT)

    # -- model-side operations --------------------------------------------

    def load_template(self, template: Template):
        """Replace the session's template wholesale."""
        with self.surface.lock:
            self.template = template
            self._reload()

    def add_element(self, kind, defaults: Optional[Dict[str, Any]] = None) -> str:
        with self.surface.lock:
            element_id = self.template.add_element(kind, defaults)
            self._reload()
        return element_id

    def update_element(self, element_id: str, changes: Dict[str, Any]):
        with self.surface.lock:
            self.template.update_element(element_id, changes)
            self._reload()

    def remove_element(self, element_id: str):
        with self.surface.lock:
            self.template.remove_element(element_id)
            self._reload()

    def update_settings(self, changes: Dict[str, Any]):
        with self.surface.lock:
            self.template.update_settings(changes)
            self._reload()

    def apply_bindings(self, mapping: Dict[str, str]):
        """Accept binding proposals (template field -> data header)."""
        with self.surface.lock:
            self.template = apply_bindings(self.template, mapping)
            self._reload()

    def place_unmatched(self, headers: List[str]):
        """Add dynamic text elements for unmatched data headers."""
        with self.surface.lock:
            self.template = place_unmatched(self.template, headers, self.settings.placement)
            self._reload()

    # -- preview ----------------------------------------------------------

    def set_preview_row(self, row: Optional[Mapping[str, str]]):
        with self.surface.lock:
            self.preview_row = dict(row) if row else None
            self.scheduler.schedule(self.template, self.preview_row)

    def refresh_preview(self):
        """Render the preview now, superseding any pending one."""
        with self.surface.lock:
            template = self.template.clone()
            row = self.preview_row
        self.scheduler.render_now(template, row)

    def close(self):
        """Cancel pending work and release preview artifacts."""
        self.scheduler.cancel()
        self.slots.release_all()

    # -- internals --------------------------------------------------------

    def _reload(self):
        self.surface.load_template(self.template)
        self.scheduler.schedule(self.template, self.preview_row)

    def _on_surface_edit(self):
        # Called with the surface lock held
        self.template = self.surface.serialize_to_template()
        self.scheduler.schedule(self.template, self.preview_row)

    def _render_preview(self, template: Template, row: Optional[Mapping[str, str]]) -> str:
        from ..drawing.images import to_data_url
        from ..drawing.renderer import render_preview_png

        return to_data_url(render_preview_png(template, row, settings=self.settings))

    def _publish_preview(self, url: str):
        self.slots.publish(PREVIEW_SLOT, url)
        logger.debug("Published preview (%d bytes)", len(url))
