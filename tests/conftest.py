"""Shared fixtures and element builders for the check engine tests."""

import itertools
from typing import Dict, Optional

import pytest

from accessibility_check import ColorSample
from errors import DataUnavailableError
from models import DisplayInfo, Element, Hierarchy, Rect, Window

DEFAULT_DISPLAY = DisplayInfo(density=1.0, width_px=1080, height_px=1920)


class FakeColorSource:
    """Color source answering from a table keyed by element bounds"""

    def __init__(self, samples: Optional[Dict[Rect, ColorSample]] = None,
                 unavailable=()):
        self.samples = dict(samples or {})
        self.unavailable = set(unavailable)
        self.calls = []

    def sample(self, bounds: Rect) -> ColorSample:
        self.calls.append(bounds)
        if bounds in self.unavailable or bounds not in self.samples:
            raise DataUnavailableError(f"No pixels for {bounds.to_short_string()}")
        return self.samples[bounds]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep developer A11Y_* variables and .env files out of the tests"""
    import os
    for name in list(os.environ):
        if name.startswith("A11Y_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def element_factory():
    """Build elements with unique ids; keyword arguments override defaults"""
    ids = itertools.count(1)

    def make(**kwargs) -> Element:
        kwargs.setdefault('element_id', next(ids))
        kwargs.setdefault('class_name', "android.view.View")
        kwargs.setdefault('bounds', Rect(100, 100, 300, 300))
        return Element(**kwargs)

    return make


@pytest.fixture
def hierarchy_factory():
    """Wrap a root element in a single active window"""

    def build(root: Element, display: DisplayInfo = DEFAULT_DISPLAY, locale: str = "en",
              window_type: str = "application") -> Hierarchy:
        window = Window(window_id=0, root=root, active=True, window_type=window_type)
        return Hierarchy.build([window], display, locale)

    return build


@pytest.fixture
def screen(element_factory):
    """Root frame covering the default display, with the given children"""

    def make(*children: Element, **kwargs) -> Element:
        return element_factory(class_name="android.widget.FrameLayout",
                               bounds=Rect(0, 0, 1080, 1920), children=children, **kwargs)

    return make
