from PyQt6.QtWidgets import QPushButton, QColorDialog
from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QColor

from label_setup.core.lang_manager import _
from label_setup.ui.styles import ButtonStyles


class ColorButton(QPushButton):
    """
    Swatch button that opens a colour picker.
    Opacity is edited with a separate slider, so the picker hides the alpha channel
    and the picked colour keeps the current alpha.
    """
    color_changed = pyqtSignal(QColor)

    def __init__(self, color=QColor("#000000"), parent=None):
        super().__init__(parent)
        self._color = QColor(color)
        self.clicked.connect(self._pick_color)
        self._update_swatch()

    def color(self) -> QColor:
        return QColor(self._color)

    def set_color(self, color: QColor):
        """Programmatic update; emits color_changed unless signals are blocked."""
        color = QColor(color)
        if color == self._color:
            return
        self._color = color
        self._update_swatch()
        self.color_changed.emit(QColor(color))

    def setEnabled(self, enabled: bool):
        super().setEnabled(enabled)
        self._update_swatch()

    def _update_swatch(self):
        self.setStyleSheet(ButtonStyles.swatch(self._color.name(QColor.NameFormat.HexArgb), self.isEnabled()))
        self.setToolTip(self._color.name())

    def _pick_color(self):
        picked = QColorDialog.getColor(self._color, self, _("Select Color"))
        if not picked.isValid():
            return
        picked.setAlpha(self._color.alpha())
        self.set_color(picked)
