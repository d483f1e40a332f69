"""
Shared fixtures for the label setup tests.

Core tests need no QGuiApplication: signals use direct connections and the
font system is replaced with an in-memory probe and factory. test_dialog.py
starts its own offscreen QApplication.
"""

import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from label_setup.core.labeling.categories import CategoryList, LabelCategory
from label_setup.core.labeling.font_styles import FontStyleResolver
from label_setup.core.labeling.layer import LabelLayer
from label_setup.core.labeling.projector import ActiveFieldProjector, EditorFields
from label_setup.core.labeling.session import EditSession
from label_setup.core.labeling.symbolizer import FontStyle

FIELDS = ["NAME", "STATE_NAME", "POP2000", "ROTATION"]

# family -> styles the fake font system can produce
FONT_FACES = {
    "Arial": {FontStyle.REGULAR, FontStyle.BOLD, FontStyle.ITALIC, FontStyle.BOLD | FontStyle.ITALIC},
    "Slanted": {FontStyle.ITALIC, FontStyle.BOLD | FontStyle.ITALIC},
    "Nothing": set(),
}


class FakeFont:
    def __init__(self, family, size, style):
        self.family = family
        self.size = size
        self.style = style


def fake_probe(family, style):
    # Underline/strikeout are synthesized, only bold/italic need a face
    base = style & (FontStyle.BOLD | FontStyle.ITALIC)
    return base in FONT_FACES.get(family, set())


def fake_factory(family, size, style):
    return FakeFont(family, size, style)


class FakeMapFrame:
    def __init__(self):
        self.invalidated = 0

    def invalidate(self):
        self.invalidated += 1


@pytest.fixture
def resolver():
    return FontStyleResolver(style_probe=fake_probe, font_factory=fake_factory)


@pytest.fixture
def map_frame():
    return FakeMapFrame()


@pytest.fixture
def make_layer(map_frame):
    """Factory fixture: layer with the given filter expressions, first = highest priority."""
    def _make(*filters, fields=FIELDS, is_line_layer=False):
        categories = None
        if filters:
            categories = CategoryList([
                LabelCategory(name=f"Category {i + 1}", expression="[NAME]", filter_expression=f)
                for i, f in enumerate(filters)
            ])
        return LabelLayer(categories, fields=fields, is_line_layer=is_line_layer, map_frame=map_frame)
    return _make


@pytest.fixture
def layer(make_layer):
    return make_layer("[POP2000] > 10000", "[STATE_NAME] = 'Texas'")


@pytest.fixture
def session(layer):
    return EditSession(layer)


@pytest.fixture
def make_projector(resolver):
    def _make(session):
        projector = ActiveFieldProjector(session, EditorFields(), resolver)
        projector.push_to_fields()
        return projector
    return _make


@pytest.fixture
def projector(session, make_projector):
    return make_projector(session)
