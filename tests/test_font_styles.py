"""
Font style resolution and preview fallback.
"""

import pytest

from label_setup.core.labeling.exceptions import NoStyleAvailable, StyleMaterializationFailure
from label_setup.core.labeling.font_styles import FontStyleResolver, PROBE_LIMIT
from label_setup.core.labeling.symbolizer import FontStyle, LabelSymbolizer


class TestAvailableStyles:

    def test_italic_only_family_defaults_to_italic(self, resolver):
        styles = resolver.available_styles("Slanted")
        assert FontStyle.REGULAR not in styles
        assert resolver.default_style(styles) == FontStyle.ITALIC

    def test_regular_preferred_when_present(self, resolver):
        styles = resolver.available_styles("Arial")
        assert styles[0] == FontStyle.REGULAR
        assert resolver.default_style(styles) == FontStyle.REGULAR

    def test_probe_order_and_limit(self):
        probed = []

        def probe(family, style):
            probed.append(style)
            return True

        styles = FontStyleResolver(style_probe=probe).available_styles("Any")
        assert [int(s) for s in probed] == list(range(PROBE_LIMIT))
        assert styles == probed

    def test_no_styles_raises(self, resolver):
        with pytest.raises(NoStyleAvailable):
            resolver.default_style(resolver.available_styles("Nothing"))


class TestBuildPreview:

    def test_supported_font(self, resolver):
        preview = resolver.build_preview(LabelSymbolizer(font_size=12.0))
        assert preview.supported
        assert preview.text == "Preview"
        assert preview.font.family == "Arial"
        assert preview.font.size == 12.0
        assert preview.back_color is None

    def test_background_only_when_enabled(self, resolver):
        preview = resolver.build_preview(LabelSymbolizer(back_color_enabled=True))
        assert preview.back_color is not None
        assert preview.back_color.green() == 248

    def test_missing_style_falls_back(self, resolver):
        preview = resolver.build_preview(LabelSymbolizer(font_family="Slanted"))
        assert not preview.supported
        assert preview.text == "Unsupported"
        assert (preview.font_family, preview.font_size, preview.font_style) == \
            ("Arial", 20.0, FontStyle.BOLD)

    def test_factory_failure_falls_back(self):
        def factory(family, size, style):
            raise StyleMaterializationFailure("no such font")

        resolver = FontStyleResolver(style_probe=lambda f, s: True, font_factory=factory)
        preview = resolver.build_preview(LabelSymbolizer())
        assert not preview.supported
        assert preview.font is None

    def test_negative_size_falls_back(self, resolver):
        assert not resolver.build_preview(LabelSymbolizer(font_size=-3.0)).supported

    def test_underline_is_synthesized(self, resolver):
        preview = resolver.build_preview(LabelSymbolizer(font_style=FontStyle.BOLD | FontStyle.UNDERLINE))
        assert preview.supported
