"""Batch generation of certificate documents from data rows."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Optional, Sequence, Set, Union

from ..models import Template
from ..settings import EngineSettings, get_settings
from .substitution import render_filename, unique_filename

if TYPE_CHECKING:
    from ..drawing.renderer import RenderedDocument
    from ..drawing.surface import Surface

logger = logging.getLogger(__name__)


class BatchInputError(Exception):
    """Exception raised when a batch cannot start (e.g. no rows)."""
    pass


class GenerationError(Exception):
    """Exception raised when rendering a document fails."""

    def __init__(self, message: str, row_index: Optional[int] = None):
        super().__init__(message)
        self.row_index = row_index


class OutputMode(Enum):
    """Batch output mode."""
    COMBINED = "combined"       # one multi-page document
    SEPARATE = "separate"       # one document per row


ProgressCallback = Callable[[int, int], None]


@dataclass
class GeneratedDocument:
    """One row's output in separate mode."""
    row: Dict[str, str]
    index: int                               # 1-based row position
    suggested_filename: str
    document: Optional["RenderedDocument"] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None

    @property
    def data(self) -> bytes:
        return self.document.data if self.document is not None else b""


class BatchController:
    """Renders a template once per data row."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        surface: Optional["Surface"] = None,
        compress: Optional[bool] = None,
    ):
        """
        Initialize the batch controller.

        Args:
            settings: Engine settings (defaults to packaged settings)
            surface: Surface used by the snapshot strategy; when omitted a
                RasterSurface is created and loaded on demand
            compress: Override ``settings.compress_pages``
        """
        self.settings = settings or get_settings()
        self.surface = surface
        self.compress = compress
        self._owns_surface = surface is None

    def generate(
        self,
        template: Template,
        rows: Sequence[Mapping[str, str]],
        mode: Union[OutputMode, str] = OutputMode.COMBINED,
        filename_pattern: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> Union["RenderedDocument", List[GeneratedDocument]]:
        """
        Generate documents for every row.

        Args:
            template: Template to render
            rows: Data rows, in output order
            mode: "combined" or "separate"
            filename_pattern: Filename pattern for separate mode
            progress: Called with (done, total) after each row

        Returns:
            RenderedDocument in combined mode, list of GeneratedDocument in
            separate mode

        Raises:
            BatchInputError: If there are no rows
            GenerationError: If any page fails in combined mode
        """
        mode = OutputMode(mode)
        if not rows:
            raise BatchInputError("No data rows to generate")

        if mode == OutputMode.COMBINED:
            return self.generate_combined(template, rows, progress)
        return self.generate_separate(template, rows, filename_pattern, progress)

    def generate_combined(
        self,
        template: Template,
        rows: Sequence[Mapping[str, str]],
        progress: Optional[ProgressCallback] = None,
    ) -> "RenderedDocument":
        """Render all rows as successive pages of one document."""
        if not rows:
            raise BatchInputError("No data rows to generate")

        renderer = self._renderer(template)
        total = len(rows)

        def _counted():
            for i, row in enumerate(rows, start=1):
                yield row
                if progress:
                    progress(i, total)

        try:
            document = renderer.render(template, _counted())
        except Exception as e:
            logger.exception("Combined generation failed")
            raise GenerationError(f"Failed to generate combined document: {e}") from e

        logger.info("Generated combined document with %d pages", document.page_count)
        return document

    def generate_separate(
        self,
        template: Template,
        rows: Sequence[Mapping[str, str]],
        filename_pattern: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> List[GeneratedDocument]:
        """
        Render one document per row.

        A failing row gets ``error`` set and an empty document; remaining
        rows are still generated.
        """
        if not rows:
            raise BatchInputError("No data rows to generate")

        pattern = filename_pattern or self.settings.filename_pattern
        renderer = self._renderer(template)
        results = []
        taken: Set[str] = set()
        total = len(rows)

        for index, row in enumerate(rows, start=1):
            filename = render_filename(pattern, row, index, extension=self.settings.file_extension)
            entry = GeneratedDocument(
                row=dict(row),
                index=index,
                suggested_filename=unique_filename(filename, taken),
            )
            try:
                entry.document = renderer.render_row(template, row)
            except Exception as e:
                logger.exception("Row %d failed", index)
                entry.error = str(e) or e.__class__.__name__
            results.append(entry)

            if progress:
                progress(index, total)

        failed = sum(1 for r in results if not r.ok)
        if failed:
            logger.warning("%d of %d rows failed", failed, total)
        logger.info("Generated %d separate documents", total - failed)
        return results

    def _renderer(self, template: Template):
        from ..drawing.renderer import create_renderer
        from ..drawing.surface import RasterSurface

        surface = None
        if template.use_snapshot_generation:
            if self.surface is None:
                self.surface = RasterSurface(settings=self.settings)
            if self._owns_surface:
                self.surface.load_template(template)
            surface = self.surface

        return create_renderer(template, surface=surface, settings=self.settings, compress=self.compress)


def failed_documents(results: List[GeneratedDocument]) -> List[GeneratedDocument]:
    """Entries whose generation failed."""
    return [r for r in results if not r.ok]
