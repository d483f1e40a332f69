"""
Label Setup: Font styles and preview
フォントファミリーが対応するスタイルを調べ、プレビュー用フォントを生成する。

The default probe and font factory go through QFontDatabase/QFont and need a
running QGuiApplication. Both are injectable.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from PyQt6.QtGui import QColor, QFont, QFontDatabase

from label_setup.core.lang_manager import _
from label_setup.core.labeling.exceptions import NoStyleAvailable, StyleMaterializationFailure
from label_setup.core.labeling.symbolizer import FontStyle, LabelSymbolizer

# Regular .. Bold|Italic|Underline|Strikeout without the last combination
PROBE_LIMIT = 15

FALLBACK_FAMILY = "Arial"
FALLBACK_SIZE = 20.0
FALLBACK_STYLE = FontStyle.BOLD


def qt_style_probe(family: str, style: FontStyle) -> bool:
    """Does `family` ship a face for the bold/italic part of `style`? Underline and strikeout are synthesized."""
    wants_bold = bool(style & FontStyle.BOLD)
    wants_italic = bool(style & FontStyle.ITALIC)
    for face in QFontDatabase.styles(family):
        if QFontDatabase.bold(family, face) == wants_bold and QFontDatabase.italic(family, face) == wants_italic:
            return True
    return False


def qt_font_factory(family: str, size: float, style: FontStyle) -> QFont:
    if size <= 0:
        raise StyleMaterializationFailure(f"Invalid font size: {size}")
    if not QFontDatabase.hasFamily(family):
        raise StyleMaterializationFailure(f"Unknown font family: {family}")
    font = QFont(family)
    font.setPointSizeF(size)
    font.setBold(bool(style & FontStyle.BOLD))
    font.setItalic(bool(style & FontStyle.ITALIC))
    font.setUnderline(bool(style & FontStyle.UNDERLINE))
    font.setStrikeOut(bool(style & FontStyle.STRIKEOUT))
    return font


@dataclass
class PreviewState:
    text: str
    tooltip: str
    font_family: str
    font_size: float
    font_style: FontStyle
    font_color: QColor
    back_color: Optional[QColor] = None  # None = default window background
    supported: bool = True
    font: Any = None


class FontStyleResolver:
    def __init__(self, style_probe=None, font_factory=None):
        self.logger = logging.getLogger("FontStyleResolver")
        self.style_probe = style_probe or qt_style_probe
        self.font_factory = font_factory or qt_font_factory

    def available_styles(self, family: str) -> list:
        """Supported style flags of `family`, in probe order."""
        return [FontStyle(i) for i in range(PROBE_LIMIT) if self.style_probe(family, FontStyle(i))]

    def default_style(self, available: list) -> FontStyle:
        if not available:
            raise NoStyleAvailable()
        if FontStyle.REGULAR in available:
            return FontStyle.REGULAR
        return available[0]

    def build_preview(self, symbolizer: LabelSymbolizer) -> PreviewState:
        """
        Try to realize the symbolizer's font. A combination the font system
        can't produce degrades to a fixed fallback marked unsupported.
        """
        family = symbolizer.font_family
        size = symbolizer.font_size
        style = symbolizer.font_style
        back = QColor(symbolizer.back_color) if symbolizer.back_color_enabled else None
        try:
            if not size or float(size) <= 0:
                raise StyleMaterializationFailure(f"Invalid font size: {size}")
            if style not in self.available_styles(family):
                raise StyleMaterializationFailure(f"{family} has no {style!r} face")
            font = self.font_factory(family, float(size), style)
        except (StyleMaterializationFailure, ValueError) as e:
            self.logger.debug(f"Preview unsupported for {family} {size} {style!r}: {e}")
            return PreviewState(
                text=_("Unsupported"),
                tooltip=_("The specified combination of font family, style or size is unsupported."),
                font_family=FALLBACK_FAMILY,
                font_size=FALLBACK_SIZE,
                font_style=FALLBACK_STYLE,
                font_color=QColor(symbolizer.font_color),
                back_color=back,
                supported=False,
            )
        return PreviewState(
            text=_("Preview"),
            tooltip=_("This shows a preview of the font."),
            font_family=family,
            font_size=float(size),
            font_style=style,
            font_color=QColor(symbolizer.font_color),
            back_color=back,
            supported=True,
            font=font,
        )
