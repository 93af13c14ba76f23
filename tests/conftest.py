"""Shared fixtures for the test suite."""

import io

import pytest
from PIL import Image

from certengine.drawing import to_data_url
from certengine.models import ElementType, Orientation, Template, TextAlign
from certengine.settings import EngineSettings


class FakeTimer:
    """Manually fired stand-in for threading.Timer."""

    def __init__(self, delay, function):
        self.delay = delay
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.cancelled = True
            self.function()


class FakeTimerFactory:
    """Records every timer it creates."""

    def __init__(self):
        self.timers = []

    def __call__(self, delay, function):
        timer = FakeTimer(delay, function)
        self.timers.append(timer)
        return timer

    @property
    def active(self):
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_all(self):
        for timer in list(self.timers):
            timer.fire()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def settings():
    """Default settings with uncompressed PDF streams (text is searchable)."""
    return EngineSettings(compress_pages=False)


@pytest.fixture
def png_data_url():
    buffer = io.BytesIO()
    Image.new("RGB", (8, 4), "red").save(buffer, format="PNG")
    return to_data_url(buffer.getvalue())


@pytest.fixture
def name_template():
    """Landscape A4 template with one dynamic text element bound to ``name``."""
    template = Template(name="Names", orientation=Orientation.LANDSCAPE)
    template.add_element(ElementType.TEXT, {
        "content": "{{name}}",
        "x": 20,
        "y": 90,
        "width": 200,
        "font_size_mm": 10,
        "align": TextAlign.CENTER,
        "is_dynamic": True,
        "data_field": "name",
    })
    return template
