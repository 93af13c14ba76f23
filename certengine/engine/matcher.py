"""Smart positioning matcher.

Detects placeholder fields in template text, matches data-source headers to
them (exact, then synonym based), and places text elements for headers the
template does not mention yet.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..models import (
    BindingProposal,
    Element,
    MatchConfidence,
    Template,
    TextElement,
    TextAlign,
)
from ..settings import PlacementSettings, get_settings
from .substitution import PLACEHOLDER_PATTERN

logger = logging.getLogger(__name__)


# {{field}}, {field}, [field], <field>
FIELD_PATTERNS = [
    re.compile(r"\{\{(\w+)\}\}"),
    re.compile(r"\{(\w+)\}"),
    re.compile(r"\[(\w+)\]"),
    re.compile(r"<(\w+)>"),
]

DEFAULT_SYNONYMS: Dict[str, List[str]] = {
    "name": ["name", "fullname", "full_name", "student_name", "studentname"],
    "email": ["email", "e_mail", "email_address", "identityemail"],
    "date": ["date", "issued_date", "issue_date", "date_issued"],
    "course": ["course", "course_name", "coursename"],
    "grade": ["grade", "score", "marks"],
}


def _normalize(value: str) -> str:
    return str(value).strip().lower()


def _synonym_table() -> Dict[str, List[str]]:
    return get_settings().synonyms or DEFAULT_SYNONYMS


def detect_fields(elements: Iterable[Element]) -> Set[str]:
    """
    Detect placeholder field names in text elements.

    Args:
        elements: Template elements

    Returns:
        Lower-cased field names
    """
    detected: Set[str] = set()
    for element in elements:
        if not isinstance(element, TextElement) or not element.content:
            continue
        for pattern in FIELD_PATTERNS:
            for match in pattern.finditer(element.content):
                detected.add(match.group(1).lower())
    return detected


def match_headers(
    data_headers: List[str],
    template_fields: Iterable[str],
    synonyms: Optional[Dict[str, List[str]]] = None,
) -> Dict[str, str]:
    """
    Match data-source headers to template fields.

    The first pass is exact, case-insensitive equality. The second pass uses
    the synonym table for fields still unmatched: a header equal to a synonym
    wins over a header merely containing one. Headers keep their original
    case in the result.

    Args:
        data_headers: Headers in data-source order
        template_fields: Field names detected in the template
        synonyms: Optional synonym table (defaults to settings)

    Returns:
        Mapping of template field -> data header
    """
    synonyms = synonyms if synonyms is not None else _synonym_table()
    normalized = [_normalize(h) for h in data_headers]
    fields = []
    for f in template_fields:
        f = _normalize(f)
        if f not in fields:
            fields.append(f)

    mapping: Dict[str, str] = {}

    for field_name in fields:
        if field_name in normalized:
            mapping[field_name] = data_headers[normalized.index(field_name)]

    for field_name in fields:
        if field_name in mapping or field_name not in synonyms:
            continue
        variations = [_normalize(v) for v in synonyms[field_name]]
        found = _find_synonym(normalized, variations)
        if found is not None:
            mapping[field_name] = data_headers[found]

    return mapping


def _find_synonym(normalized_headers: List[str], variations: List[str]) -> Optional[int]:
    for i, header in enumerate(normalized_headers):
        if header in variations:
            return i
    for i, header in enumerate(normalized_headers):
        if any(v in header for v in variations):
            return i
    return None


def propose_bindings(
    data_headers: List[str],
    template_fields: Iterable[str],
    synonyms: Optional[Dict[str, List[str]]] = None,
) -> List[BindingProposal]:
    """
    Build binding proposals for every template field.

    Args:
        data_headers: Headers in data-source order
        template_fields: Field names detected in the template
        synonyms: Optional synonym table, passed to ``match_headers``

    Returns:
        One BindingProposal per field, sorted by field name
    """
    fields = sorted({_normalize(f) for f in template_fields})
    mapping = match_headers(data_headers, fields, synonyms)
    proposals = []
    for field_name in fields:
        header = mapping.get(field_name)
        if header is None:
            confidence = MatchConfidence.NONE
        elif _normalize(header) == field_name:
            confidence = MatchConfidence.EXACT
        else:
            confidence = MatchConfidence.FUZZY
        proposals.append(BindingProposal(field_name, header, confidence))
    return proposals


def unmatched_headers(data_headers: List[str], mapping: Dict[str, str]) -> List[str]:
    """Headers not used by a mapping, in data-source order."""
    used = {_normalize(h) for h in mapping.values()}
    return [h for h in data_headers if _normalize(h) not in used]


def _slot_key(x: float, y: float) -> Tuple[int, int]:
    return (int(round(x)), int(round(y)))


def _find_slot(
    lowest_bottom: float,
    page_height: float,
    used: Set[Tuple[int, int]],
    placement: PlacementSettings,
) -> Tuple[float, float]:
    limit = page_height - placement.bottom_margin
    y = max(lowest_bottom, placement.min_bottom) + placement.row_gap
    if y > limit:
        y = placement.top_mm

    # Bounded walk down the page (wrapping once) looking for a free slot
    rows = int(max(limit - placement.top_mm, 0) // placement.row_gap) + 2
    for _ in range(rows * 2):
        for x in placement.columns:
            if _slot_key(x, y) not in used:
                return x, y
        y += placement.row_gap
        if y > limit:
            y = placement.top_mm

    # Page full: stack on the first column
    return placement.columns[0], y


def place_unmatched(
    template: Template,
    headers: List[str],
    placement: Optional[PlacementSettings] = None,
) -> Template:
    """
    Add a dynamic text element for each unmatched header.

    Existing elements are never moved or removed. Placement is deterministic
    for a given header order and set of existing elements.

    Args:
        template: Source template (left untouched)
        headers: Unmatched headers, in data-source order
        placement: Optional placement settings

    Returns:
        New template with the added elements
    """
    placement = placement or get_settings().placement
    result = template.clone()

    used = {_slot_key(e.x, e.y) for e in result.elements}

    for header in headers:
        lowest = max((e.bottom for e in result.elements), default=0)
        x, y = _find_slot(lowest, result.height_mm, used, placement)

        element = TextElement(
            content=f"{{{{{header}}}}}",
            x=x,
            y=y,
            width=placement.field_width,
            font_size_mm=placement.field_font_size,
            align=TextAlign.LEFT,
            is_dynamic=True,
            data_field=header,
        )
        result.append_element(element)
        used.add(_slot_key(x, y))
        logger.debug("Placed field %s at (%s, %s)", header, x, y)

    return result


def _placeholder_regex(field_name: str) -> "re.Pattern":
    name = re.escape(field_name)
    return re.compile(
        rf"\{{\{{{name}\}}\}}|\{{{name}\}}|\[{name}\]|<{name}>",
        re.IGNORECASE,
    )


def apply_bindings(template: Template, mapping: Dict[str, str]) -> Template:
    """
    Accept binding proposals by writing them onto text elements.

    A text element whose whole content is one placeholder of a bound field
    becomes dynamic and bound to the header. Placeholders of bound fields
    inside longer content are rewritten to ``{{header}}``. Elements already
    bound to a mapped field name are re-bound to its header.

    Args:
        template: Source template (left untouched)
        mapping: Template field -> data header

    Returns:
        New template with bindings applied
    """
    result = template.clone()
    mapping = {_normalize(k): v for k, v in mapping.items()}

    for element in result.text_elements():
        if element.is_bound:
            # Re-point an existing binding from the field name to the header
            header = mapping.get(_normalize(element.data_field))
            if header is not None:
                element.data_field = header
            continue
        for field_name, header in mapping.items():
            regex = _placeholder_regex(field_name)
            if regex.fullmatch(element.content.strip()):
                element.is_dynamic = True
                element.data_field = header
                element.content = f"{{{{{header}}}}}"
                break
            if regex.search(element.content):
                replacement = f"{{{{{header}}}}}"
                element.content = regex.sub(lambda _m: replacement, element.content)

    return result


def suggest_fields(template: Template, data_headers: List[str]) -> Dict[str, str]:
    """
    Suggest headers for literal text elements that mention a header name.

    Returns:
        Mapping of element id -> suggested header
    """
    suggestions = {}
    for element in template.text_elements():
        if element.is_dynamic or PLACEHOLDER_PATTERN.search(element.content):
            continue
        text = _normalize(element.content)
        if not text:
            continue
        for header in data_headers:
            norm = _normalize(header)
            if norm and (norm in text or text in norm):
                suggestions[element.id] = header
                break
    return suggestions
