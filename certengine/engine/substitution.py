"""Dynamic field substitution for text elements and filenames."""

import re
from typing import Dict, Mapping, Optional, Set

from ..models import TextElement


# {{identifier}}; identifiers may contain anything but braces
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")

INDEX_TOKEN = "index"
MAX_FILENAME_VALUE_LENGTH = 50


def substitute_placeholders(
    text: str,
    row: Mapping[str, str],
    extra: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Replace ``{{field}}`` tokens with row values.

    Tokens without a matching key are left unchanged so missing data stays
    visible. An empty string is a valid value and is substituted.

    Args:
        text: Text containing placeholders
        row: Data row
        extra: Optional reserved values checked before the row

    Returns:
        Text with known placeholders replaced
    """
    def _replace(match: "re.Match") -> str:
        key = match.group(1)
        if extra is not None and key in extra:
            return str(extra[key])
        if key in row and row[key] is not None:
            return str(row[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def resolve_text(element: TextElement, row: Mapping[str, str]) -> str:
    """
    Resolve the text a text element renders for a data row.

    A dynamic element bound to a field present in the row renders the raw
    value (no further placeholder expansion); otherwise the literal content
    is expanded with ``substitute_placeholders``.
    """
    if element.is_bound and element.data_field in row:
        value = row[element.data_field]
        return "" if value is None else str(value)
    return substitute_placeholders(element.content, row)


def sanitize_filename_value(value: str) -> str:
    """Make a substituted value safe for use in a filename."""
    value = re.sub(r"\s+", "_", str(value).strip())
    value = re.sub(r"[^\w.-]", "", value)
    return value[:MAX_FILENAME_VALUE_LENGTH]


def render_filename(
    pattern: str,
    row: Mapping[str, str],
    index: int,
    extension: str = ".pdf",
    sanitize: bool = True,
) -> str:
    """
    Build an output filename from a pattern.

    Args:
        pattern: Filename pattern, e.g. "certificate_{{name}}_{{index}}"
        row: Data row
        index: 1-based row position, bound to the reserved {{index}} token
        extension: Appended when the result does not already end with it
        sanitize: Clean substituted values for file systems

    Returns:
        Filename; the row index when the pattern expands to nothing
    """
    values: Dict[str, str] = {k: ("" if v is None else str(v)) for k, v in row.items()}
    if sanitize:
        values = {k: sanitize_filename_value(v) for k, v in values.items()}

    filename = substitute_placeholders(pattern, values, extra={INDEX_TOKEN: str(index)})
    if not filename.strip():
        filename = str(index)

    if extension and not filename.lower().endswith(extension.lower()):
        filename += extension
    return filename


def unique_filename(filename: str, taken: Set[str]) -> str:
    """
    Make a filename distinct from those already produced.

    A clash gets ``_2``, ``_3``, ... inserted before the extension. The
    comparison ignores case so the result is safe on case-insensitive file
    systems. The chosen name is added to ``taken``.
    """
    stem, dot, extension = filename.rpartition(".")
    if not dot or not stem:
        stem, extension = filename, ""
    suffix = f".{extension}" if extension else ""

    candidate = filename
    counter = 2
    while candidate.lower() in taken:
        candidate = f"{stem}_{counter}{suffix}"
        counter += 1
    taken.add(candidate.lower())
    return candidate
