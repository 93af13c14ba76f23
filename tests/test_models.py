"""Tests for data models."""

import pytest

from certengine.models import (
    BorderSpec,
    CircleElement,
    DataSource,
    ElementIdGenerator,
    ElementType,
    IdConfig,
    ImageElement,
    LineElement,
    Orientation,
    PageFormat,
    RectangleElement,
    Template,
    TextAlign,
    TextElement,
    create_default_template,
    element_class_for,
    element_from_dict,
    page_size_mm,
)
from certengine.settings import EngineSettings, load_settings


class TestElements:
    """Tests for element models."""

    def test_text_element_defaults(self):
        """Test text element default values."""
        element = TextElement()
        assert element.type == ElementType.TEXT
        assert element.align == TextAlign.LEFT
        assert element.data_field is None
        assert not element.is_bound

    def test_align_string_is_converted(self):
        """Test alignment given as a string."""
        element = TextElement(align="center")
        assert element.align == TextAlign.CENTER

    def test_data_field_ignored_unless_dynamic(self):
        """Test binding requires both flags."""
        assert not TextElement(data_field="name").is_bound
        assert not TextElement(is_dynamic=True).is_bound
        assert TextElement(is_dynamic=True, data_field="name").is_bound

    def test_bottom_edges(self):
        """Test bottom edge per element kind."""
        assert TextElement(y=10, font_size_mm=5, content="a\nb").bottom == pytest.approx(22)
        assert ImageElement(y=10, height_mm=20).bottom == 30
        assert RectangleElement(y=10, height_mm=5).bottom == 15
        assert CircleElement(y=10, radius_mm=7).bottom == 24
        assert LineElement(y=10, stroke_width_mm=0.5).bottom == 10.5

    def test_to_dict_uses_camel_case(self):
        """Test JSON keys."""
        data = TextElement(id="element-0001", font_size_mm=8, is_dynamic=True, data_field="name").to_dict()
        assert data["type"] == "text"
        assert data["fontSizeMm"] == 8
        assert data["isDynamic"] is True
        assert data["dataField"] == "name"
        assert data["align"] == "left"

    def test_element_from_dict(self):
        """Test element construction from JSON."""
        element = element_from_dict({
            "type": "rectangle",
            "id": "r1",
            "x": 5,
            "y": 6,
            "widthMm": 40,
            "heightMm": 20,
            "filled": True,
            "fillColor": "#ff0000",
        })
        assert isinstance(element, RectangleElement)
        assert element.width_mm == 40
        assert element.filled
        assert element.fill_color == "#ff0000"

    def test_unknown_kind_raises(self):
        """Test unknown element kind."""
        with pytest.raises(ValueError):
            element_class_for("hexagon")


class TestIdGenerator:
    """Tests for element id generation."""

    def test_sequence(self):
        """Test monotonically increasing ids."""
        generator = ElementIdGenerator()
        assert generator.next_id() == "element-0001"
        assert generator.next_id() == "element-0002"

    def test_skips_taken_ids(self):
        """Test ids already in use are skipped."""
        generator = ElementIdGenerator()
        assert generator.next_id(["element-0001", "element-0002"]) == "element-0003"

    def test_custom_config_and_reset(self):
        """Test custom prefix and counter reset."""
        generator = ElementIdGenerator(IdConfig(prefix="el", sequence_start=7, width=2))
        assert generator.next_id() == "el-07"
        generator.reset_counter()
        assert generator.next_id() == "el-07"


class TestTemplate:
    """Tests for the template model."""

    def test_page_sizes(self):
        """Test page dimensions per format and orientation."""
        assert page_size_mm(PageFormat.A4, Orientation.PORTRAIT) == (210.0, 297.0)
        assert page_size_mm(PageFormat.A4, Orientation.LANDSCAPE) == (297.0, 210.0)
        assert page_size_mm(PageFormat.LETTER, Orientation.PORTRAIT) == (215.9, 279.4)

    def test_add_element_returns_unique_ids(self):
        """Test add_element id assignment."""
        template = Template()
        first = template.add_element("text", {"content": "Hello", "x": 10})
        second = template.add_element(ElementType.LINE)
        assert first != second
        assert template.get_element(first).content == "Hello"
        assert template.get_element(first).x == 10
        assert isinstance(template.get_element(second), LineElement)

    def test_add_element_ignores_unknown_defaults(self):
        """Test unknown default fields are dropped."""
        template = Template()
        element_id = template.add_element("circle", {"radius_mm": 9, "bogus": 1})
        assert template.get_element(element_id).radius_mm == 9

    def test_add_unknown_kind_adds_text(self):
        """Test an unknown kind falls back to a text element."""
        template = Template()
        element_id = template.add_element("star", {"content": "Hi"})
        element = template.get_element(element_id)
        assert isinstance(element, TextElement)
        assert element.content == "Hi"

    def test_add_invalid_align_keeps_default(self):
        """Test an invalid alignment is ignored."""
        template = Template()
        element_id = template.add_element("text", {"align": "middle", "x": 4})
        element = template.get_element(element_id)
        assert element.align == TextAlign.LEFT
        assert element.x == 4

    def test_update_element(self):
        """Test partial element update."""
        template = Template()
        element_id = template.add_element("text")
        template.update_element(element_id, {"content": "New", "align": "right"})
        element = template.get_element(element_id)
        assert element.content == "New"
        assert element.align == TextAlign.RIGHT

    def test_update_unknown_id_is_noop(self):
        """Test update with an unknown id does not raise."""
        template = Template()
        template.add_element("text")
        before = template.to_dict()
        template.update_element("missing", {"content": "x"})
        assert template.to_dict() == before

    def test_update_ignores_unknown_fields(self):
        """Test update with unknown field names."""
        template = Template()
        element_id = template.add_element("text")
        template.update_element(element_id, {"nonsense": 1, "id": "hijack", "x": 3})
        element = template.get_element(element_id)
        assert element.id == element_id
        assert element.x == 3

    def test_remove_element(self):
        """Test element removal and unknown-id no-op."""
        template = Template()
        element_id = template.add_element("text")
        template.remove_element("missing")
        assert template.element_count == 1
        template.remove_element(element_id)
        assert template.element_count == 0

    def test_update_settings(self):
        """Test template-level updates."""
        template = Template()
        template.update_settings({
            "orientation": "portrait",
            "background_color": "#eeeeee",
            "border": {"width_mm": 2, "color": "#000", "margin_mm": 5},
            "unknown": True,
        })
        assert template.orientation == Orientation.PORTRAIT
        assert template.width_mm == 210
        assert template.background_color == "#eeeeee"
        assert template.border == BorderSpec(2, "#000", 5)

    def test_update_settings_invalid_value_is_ignored(self):
        """Test invalid setting values are skipped."""
        template = Template()
        template.update_settings({"page_format": "a0"})
        assert template.page_format == PageFormat.A4

    def test_dynamic_fields(self):
        """Test bound field listing."""
        template = create_default_template()
        assert template.dynamic_fields() == ["name"]

    def test_dict_round_trip(self):
        """Test to_dict/from_dict round trip."""
        template = create_default_template()
        template.add_element("image", {"source": "logo.png", "width_mm": 30, "height_mm": 20})
        restored = Template.from_dict(template.to_dict())
        assert restored == template
        assert restored.to_dict() == template.to_dict()

    def test_from_dict_defaults(self):
        """Test missing keys get engine defaults."""
        template = Template.from_dict({"elements": [{"type": "text", "content": "Hi"}]})
        assert template.orientation == Orientation.LANDSCAPE
        assert template.page_format == PageFormat.A4
        assert template.elements[0].id == "element-0001"

    def test_clone_is_independent(self):
        """Test clone shares no elements."""
        template = create_default_template()
        clone = template.clone()
        clone.elements[0].content = "Changed"
        assert template.elements[0].content != "Changed"


class TestDataSource:
    """Tests for the data source model."""

    def test_properties(self):
        """Test row counts and column access."""
        source = DataSource(headers=["name"], rows=[{"name": "Ana"}, {"name": "Bo"}])
        assert source.total_rows == 2
        assert source.column("name") == ["Ana", "Bo"]
        assert source.first_row() == {"name": "Ana"}
        assert not source.is_empty

    def test_empty(self):
        """Test empty data source."""
        source = DataSource(headers=["name"])
        assert source.is_empty
        assert source.first_row() == {}


class TestSettings:
    """Tests for engine settings."""

    def test_packaged_defaults(self):
        """Test the bundled YAML defaults."""
        settings = load_settings()
        assert settings.raster_multiplier == 2.0
        assert settings.debounce_seconds == 0.3
        assert settings.placement.columns == [20, 110]
        assert "fullname" in settings.synonyms["name"]

    def test_override_merges_placement(self, tmp_path):
        """Test a user file overrides keys without dropping the rest."""
        path = tmp_path / "settings.yaml"
        path.write_text("debounce_ms: 100\nplacement:\n  row_gap: 20\n", encoding="utf-8")
        settings = load_settings(str(path))
        assert settings.debounce_ms == 100
        assert settings.placement.row_gap == 20
        assert settings.placement.columns == [20, 110]

    def test_invalid_multiplier(self):
        """Test non-positive scale settings are rejected."""
        with pytest.raises(ValueError):
            EngineSettings(raster_multiplier=0)
