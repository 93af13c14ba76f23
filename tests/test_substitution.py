"""Tests for placeholder substitution and filename patterns."""

import pytest

from certengine.engine import (
    render_filename,
    resolve_text,
    sanitize_filename_value,
    substitute_placeholders,
    unique_filename,
)
from certengine.models import TextElement


class TestSubstitutePlaceholders:
    """Tests for {{field}} substitution."""

    def test_known_field(self):
        """Test a placeholder with a row value."""
        assert substitute_placeholders("Hello {{name}}!", {"name": "Ana"}) == "Hello Ana!"

    def test_unknown_field_stays_visible(self):
        """Test missing keys leave the token untouched."""
        assert substitute_placeholders("Hi {{nickname}}", {"name": "Ana"}) == "Hi {{nickname}}"

    def test_empty_value_is_substituted(self):
        """Test an empty string is a valid value."""
        assert substitute_placeholders("[{{name}}]", {"name": ""}) == "[]"

    def test_header_with_spaces(self):
        """Test identifiers may contain spaces."""
        assert substitute_placeholders("{{Full Name}}", {"Full Name": "Bo"}) == "Bo"

    def test_literal_text_is_unchanged(self):
        """Test text without placeholders is returned as is."""
        text = "Certificate of Achievement"
        assert substitute_placeholders(text, {"name": "Ana"}) == text

    def test_multiple_occurrences(self):
        """Test every occurrence is replaced."""
        assert substitute_placeholders("{{a}}-{{a}}-{{b}}", {"a": "1", "b": "2"}) == "1-1-2"


class TestResolveText:
    """Tests for text element resolution."""

    def test_bound_element_renders_raw_value(self):
        """Test bound element uses the row value without expansion."""
        element = TextElement(content="{{name}}", is_dynamic=True, data_field="name")
        assert resolve_text(element, {"name": "{{course}}", "course": "X"}) == "{{course}}"

    def test_bound_element_missing_field_falls_back(self):
        """Test a bound field absent from the row falls back to the content."""
        element = TextElement(content="Dear {{name}}", is_dynamic=True, data_field="name")
        assert resolve_text(element, {"course": "X"}) == "Dear {{name}}"

    def test_literal_element_is_expanded(self):
        """Test inline placeholders in literal text."""
        element = TextElement(content="Completed {{course}}")
        assert resolve_text(element, {"course": "Python"}) == "Completed Python"


class TestRenderFilename:
    """Tests for output filename patterns."""

    def test_index_token(self):
        """Test the reserved index token."""
        assert render_filename("certificate_{{index}}", {}, 3) == "certificate_3.pdf"

    def test_row_values_are_sanitized(self):
        """Test row values are cleaned for file systems."""
        filename = render_filename("cert_{{name}}_{{index}}", {"name": "Ana Reyes/Admin:1"}, 1)
        assert filename == "cert_Ana_ReyesAdmin1_1.pdf"

    def test_no_double_extension(self):
        """Test the extension is not appended twice."""
        assert render_filename("{{name}}.PDF", {"name": "Bo"}, 1) == "Bo.PDF"

    def test_custom_extension(self):
        """Test a different extension."""
        assert render_filename("{{name}}", {"name": "Bo"}, 1, extension=".png") == "Bo.png"

    def test_unknown_token_kept(self):
        """Test unknown tokens stay in the filename."""
        assert render_filename("{{missing}}", {}, 1) == "{{missing}}.pdf"

    def test_empty_result_uses_index(self):
        """Test a pattern that expands to nothing falls back to the row index."""
        assert render_filename("{{name}}", {"name": "!?"}, 4) == "4.pdf"

    @pytest.mark.parametrize("value,expected", [
        ("  Ana  ", "Ana"),
        ("a  b", "a_b"),
        ("x" * 80, "x" * 50),
        ("é/ü", "éü"),
        ("张 三", "张_三"),
        ("!?", ""),
    ])
    def test_sanitize_filename_value(self, value, expected):
        """Test value sanitizing."""
        assert sanitize_filename_value(value) == expected


class TestUniqueFilename:
    """Tests for filename de-duplication."""

    def test_clashes_get_counter(self):
        """Test repeated names get a numeric suffix before the extension."""
        taken = set()
        names = [unique_filename(n, taken) for n in ["Zo.pdf", "Zo.pdf", "Bo.pdf", "Zo.pdf"]]
        assert names == ["Zo.pdf", "Zo_2.pdf", "Bo.pdf", "Zo_3.pdf"]

    def test_case_insensitive(self):
        """Test names differing only in case are treated as clashes."""
        taken = set()
        assert unique_filename("ana.pdf", taken) == "ana.pdf"
        assert unique_filename("ANA.pdf", taken) == "ANA_2.pdf"

    def test_counter_skips_taken_suffix(self):
        """Test a generated suffix that already exists is skipped."""
        taken = {"zo.pdf", "zo_2.pdf"}
        assert unique_filename("Zo.pdf", taken) == "Zo_3.pdf"

    def test_without_extension(self):
        """Test names with no extension."""
        taken = {"report"}
        assert unique_filename("report", taken) == "report_2"
