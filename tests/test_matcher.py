"""Tests for column matching and automatic field placement."""

import pytest

from certengine.engine import (
    DEFAULT_SYNONYMS,
    apply_bindings,
    detect_fields,
    match_headers,
    place_unmatched,
    propose_bindings,
    suggest_fields,
    unmatched_headers,
)
from certengine.models import (
    MatchConfidence,
    Orientation,
    RectangleElement,
    Template,
    TextElement,
    create_default_template,
)
from certengine.settings import PlacementSettings


@pytest.fixture
def portrait_template():
    template = Template(orientation=Orientation.PORTRAIT)
    template.append_element(TextElement(content="Title", x=20, y=10, font_size_mm=6))
    return template


class TestDetectFields:
    """Tests for placeholder detection."""

    def test_all_bracket_styles(self):
        """Test {{x}}, {x}, [x] and <x> forms."""
        elements = [
            TextElement(content="Hello {{name}}, your grade is {grade}"),
            TextElement(content="Issued [Date] by <issuer>"),
        ]
        assert detect_fields(elements) == {"name", "grade", "date", "issuer"}

    def test_non_text_elements_are_ignored(self):
        """Test shapes contribute no fields."""
        assert detect_fields([RectangleElement(), TextElement(content="plain")]) == set()

    def test_default_template(self):
        """Test fields of the stock template."""
        assert detect_fields(create_default_template().elements) == {"name", "course", "date"}


class TestMatchHeaders:
    """Tests for header matching."""

    def test_synonym_matching(self):
        """Test fuzzy matching through the synonym table."""
        mapping = match_headers(["Full Name", "email_address"], ["name", "email"], DEFAULT_SYNONYMS)
        assert mapping == {"name": "Full Name", "email": "email_address"}

    def test_exact_match_is_case_insensitive(self):
        """Test exact matching ignores case and keeps the header's case."""
        assert match_headers(["NAME"], ["name"], DEFAULT_SYNONYMS) == {"name": "NAME"}

    def test_exact_match_wins(self):
        """Test an exact header is preferred over a synonym."""
        mapping = match_headers(["full_name", "name"], ["name"], DEFAULT_SYNONYMS)
        assert mapping == {"name": "name"}

    def test_synonym_equality_before_substring(self):
        """Test a header equal to a synonym beats one containing it."""
        mapping = match_headers(["student name x", "fullname"], ["name"], DEFAULT_SYNONYMS)
        assert mapping == {"name": "fullname"}

    def test_unmatched_field_is_absent(self):
        """Test fields without a match are not in the mapping."""
        assert match_headers(["Score"], ["name"], DEFAULT_SYNONYMS) == {}

    def test_custom_synonyms(self):
        """Test a caller-supplied synonym table."""
        mapping = match_headers(["Recipient"], ["name"], {"name": ["recipient"]})
        assert mapping == {"name": "Recipient"}


class TestProposeBindings:
    """Tests for binding proposals."""

    def test_confidence_levels(self):
        """Test exact, fuzzy and unmatched proposals."""
        proposals = propose_bindings(["Name", "Full Course Name"], ["name", "course", "grade"])
        by_field = {p.template_field: p for p in proposals}

        assert [p.template_field for p in proposals] == ["course", "grade", "name"]
        assert by_field["name"].confidence == MatchConfidence.EXACT
        assert by_field["name"].matched_header == "Name"
        assert by_field["course"].confidence == MatchConfidence.FUZZY
        assert by_field["course"].matched_header == "Full Course Name"
        assert by_field["grade"].confidence == MatchConfidence.NONE
        assert not by_field["grade"].is_matched

    def test_custom_synonyms(self):
        """Test proposals use a caller-supplied synonym table."""
        proposals = propose_bindings(["Recipient"], ["name"], {"name": ["recipient"]})
        assert proposals[0].matched_header == "Recipient"
        assert proposals[0].confidence == MatchConfidence.FUZZY

    def test_unmatched_headers_keep_order(self):
        """Test leftover headers in data-source order."""
        headers = ["Full Name", "Score", "email_address", "Notes"]
        mapping = {"name": "Full Name", "email": "email_address"}
        assert unmatched_headers(headers, mapping) == ["Score", "Notes"]


class TestPlaceUnmatched:
    """Tests for automatic field placement."""

    def test_first_slots(self, portrait_template):
        """Test slots below the lowest element."""
        result = place_unmatched(portrait_template, ["Score", "Notes"], PlacementSettings())
        added = result.elements[1:]

        assert (added[0].x, added[0].y) == (20, 80)
        assert added[1].x == 20
        assert added[1].y == pytest.approx(114.8)

    def test_added_elements_are_bound(self, portrait_template):
        """Test placed elements are dynamic text bound to the header."""
        result = place_unmatched(portrait_template, ["Score"], PlacementSettings())
        element = result.elements[-1]

        assert element.is_bound
        assert element.data_field == "Score"
        assert element.content == "{{Score}}"
        assert element.font_size_mm == 4
        assert element.width == 75

    def test_source_template_untouched(self, portrait_template):
        """Test the input template is not modified."""
        before = portrait_template.to_dict()
        place_unmatched(portrait_template, ["Score"], PlacementSettings())
        assert portrait_template.to_dict() == before

    def test_deterministic(self, portrait_template):
        """Test identical inputs give identical layouts."""
        first = place_unmatched(portrait_template, ["A", "B", "C"], PlacementSettings())
        second = place_unmatched(portrait_template, ["A", "B", "C"], PlacementSettings())
        assert first.to_dict() == second.to_dict()

    def test_existing_elements_not_moved(self, portrait_template):
        """Test placement only appends."""
        result = place_unmatched(portrait_template, ["A", "B"], PlacementSettings())
        assert result.elements[0] == portrait_template.elements[0]
        assert result.element_count == 3

    def test_wraps_to_top_and_next_column(self):
        """Test wrapping when the page bottom is reached."""
        template = Template(orientation=Orientation.PORTRAIT)
        template.append_element(TextElement(content="x", x=20, y=50))
        template.append_element(TextElement(content="y", x=0, y=250))

        result = place_unmatched(template, ["Score"], PlacementSettings())
        element = result.elements[-1]
        assert (element.x, element.y) == (110, 50)


class TestApplyBindings:
    """Tests for accepting binding proposals."""

    def test_whole_placeholder_becomes_bound(self):
        """Test an element holding only a placeholder is bound."""
        template = Template()
        template.append_element(TextElement(content="{name}"))
        result = apply_bindings(template, {"name": "Full Name"})
        element = result.elements[0]

        assert element.is_bound
        assert element.data_field == "Full Name"
        assert element.content == "{{Full Name}}"

    def test_inline_placeholder_is_rewritten(self):
        """Test inline placeholders point at the header."""
        template = Template()
        template.append_element(TextElement(content="Completed [Course] on <date>"))
        result = apply_bindings(template, {"course": "Course Name", "date": "Issue Date"})
        element = result.elements[0]

        assert element.content == "Completed {{Course Name}} on {{Issue Date}}"
        assert not element.is_dynamic

    def test_bound_element_is_repointed(self):
        """Test an element bound to a field name moves to the header."""
        result = apply_bindings(create_default_template(), {"name": "Full Name"})
        assert result.dynamic_fields() == ["Full Name"]

    def test_source_template_untouched(self):
        """Test the input template is not modified."""
        template = create_default_template()
        apply_bindings(template, {"name": "Full Name", "course": "Course Name"})
        assert template.dynamic_fields() == ["name"]


class TestSuggestFields:
    """Tests for literal text suggestions."""

    def test_suggests_header_for_literal(self):
        """Test a literal mentioning a header."""
        template = Template()
        element_id = template.append_element(TextElement(content="Course"))
        template.append_element(TextElement(content="{{name}}"))
        assert suggest_fields(template, ["Course Name", "Score"]) == {element_id: "Course Name"}
