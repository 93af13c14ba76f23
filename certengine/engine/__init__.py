"""Engine module: substitution, matching, preview scheduling and batch generation."""

from .substitution import (
    PLACEHOLDER_PATTERN,
    INDEX_TOKEN,
    substitute_placeholders,
    resolve_text,
    sanitize_filename_value,
    render_filename,
    unique_filename,
)

from .matcher import (
    FIELD_PATTERNS,
    DEFAULT_SYNONYMS,
    detect_fields,
    match_headers,
    propose_bindings,
    unmatched_headers,
    place_unmatched,
    apply_bindings,
    suggest_fields,
)

from .preview import (
    Debouncer,
    PreviewSlots,
    PreviewScheduler,
)

from .batch import (
    BatchController,
    BatchInputError,
    GenerationError,
    GeneratedDocument,
    OutputMode,
    failed_documents,
)

from .session import (
    EditingSession,
    PREVIEW_SLOT,
)

__all__ = [
    # Substitution
    "PLACEHOLDER_PATTERN",
    "INDEX_TOKEN",
    "substitute_placeholders",
    "resolve_text",
    "sanitize_filename_value",
    "render_filename",
    "unique_filename",
    # Matcher
    "FIELD_PATTERNS",
    "DEFAULT_SYNONYMS",
    "detect_fields",
    "match_headers",
    "propose_bindings",
    "unmatched_headers",
    "place_unmatched",
    "apply_bindings",
    "suggest_fields",
    # Preview
    "Debouncer",
    "PreviewSlots",
    "PreviewScheduler",
    # Batch
    "BatchController",
    "BatchInputError",
    "GenerationError",
    "GeneratedDocument",
    "OutputMode",
    "failed_documents",
    # Session
    "EditingSession",
    "PREVIEW_SLOT",
]
