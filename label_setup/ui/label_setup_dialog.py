"""
Label Setup dialog.

Widgets only mirror EditorFields; every rule about what an edit means lives in
the ActiveFieldProjector and the EditSession.
"""
import logging

from PyQt6.QtWidgets import (
    QDialog, QWidget, QVBoxLayout, QHBoxLayout, QFormLayout, QGridLayout, QLabel, QLineEdit,
    QPushButton, QListWidget, QTabWidget, QComboBox, QCheckBox, QDoubleSpinBox, QSlider,
    QRadioButton, QButtonGroup, QGroupBox, QMessageBox,
)
from PyQt6.QtCore import Qt, QSettings, pyqtSignal
from PyQt6.QtGui import QFont, QFontDatabase

from label_setup.core.lang_manager import _, get_lang_manager
from label_setup.core.labeling.categories import EditorTab
from label_setup.core.labeling.exceptions import ExpressionInvalid, InvariantViolation
from label_setup.core.labeling.projector import ActiveFieldProjector, EditorField, EditorFields
from label_setup.core.labeling.session import EditSession
from label_setup.core.labeling.symbolizer import (
    ContentAlignment, FontStyle, LineOrientation, PartLabelingMethod, RotationMode, TextAlignment,
)
from label_setup.ui.color_button import ColorButton
from label_setup.ui.styles import ButtonStyles, DialogStyles, LabelStyles

FONT_SIZES = ["6", "7", "8", "9", "10", "11", "12", "14", "16", "18", "20", "24", "28", "36", "48", "72"]


def _enum_label(value) -> str:
    if value is None:
        return ""
    if isinstance(value, FontStyle):
        if value == FontStyle.REGULAR:
            return _("Regular")
        parts = [f for f in (FontStyle.BOLD, FontStyle.ITALIC, FontStyle.UNDERLINE, FontStyle.STRIKEOUT)
                 if f & value]
        return ", ".join(_(p.name.title()) for p in parts)
    if hasattr(value, "name"):
        return _(value.name.replace("_", " ").title())
    return str(value)


def _combo_index(combo: QComboBox, value) -> int:
    for i in range(combo.count()):
        if combo.itemData(i) == value:
            return i
    return -1


class RotationSelector(QWidget):
    """Three mutually exclusive radio buttons for the label rotation mode."""
    mode_changed = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._group = QButtonGroup(self)
        self._buttons = {}
        labels = {
            RotationMode.COMMON_ANGLE: _("Common angle"),
            RotationMode.ANGLE_FIELD: _("Angle from field"),
            RotationMode.LINE_ORIENTATION: _("Follow line"),
        }
        for mode, text in labels.items():
            btn = QRadioButton(text)
            self._group.addButton(btn)
            self._buttons[mode] = btn
            layout.addWidget(btn)
            btn.toggled.connect(lambda checked, m=mode: checked and self.mode_changed.emit(m))

    def button(self, mode: RotationMode) -> QRadioButton:
        return self._buttons[mode]

    def set_mode(self, mode: RotationMode):
        btn = self._buttons.get(mode)
        if btn is not None and not btn.isChecked():
            btn.setChecked(True)

    def set_modes(self, modes):
        for mode, btn in self._buttons.items():
            btn.setVisible(mode in modes)


class LabelSetupDialog(QDialog):
    """Edit the label categories of a layer. Apply/OK write back, Cancel discards."""

    changes_applied = pyqtSignal()

    def __init__(self, layer, parent=None, resolver=None):
        super().__init__(parent)
        self.logger = logging.getLogger("LabelSetupDialog")
        self.setWindowTitle(_("Label Setup"))
        self.resize(820, 560)

        self.session = EditSession(layer, parent=self)
        self.fields = EditorFields(self)
        self.projector = ActiveFieldProjector(self.session, self.fields, resolver, parent=self)
        self._widgets = {}

        # Widgets fire change signals while being filled
        with self.session.suppress_updates():
            self._init_ui()
        self._connect_fields()

        self.session.changes_applied.connect(self.changes_applied)
        self.projector.preview_changed.connect(self._show_preview)

        self._load_categories()
        self.projector.push_to_fields()
        self._on_tab_changed(self.tabs.currentIndex())

        self._restore_geometry()
        self.finished.connect(lambda _result: self._save_geometry())

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------

    def _init_ui(self):
        root = QHBoxLayout(self)

        # Left: category list
        left = QVBoxLayout()
        self.category_list = QListWidget()
        self.category_list.currentRowChanged.connect(self._on_category_row_changed)
        left.addWidget(QLabel(_("Categories (top = highest priority)")))
        left.addWidget(self.category_list)

        btn_row = QHBoxLayout()
        self.add_btn = QPushButton("➕")
        self.add_btn.setToolTip(_("Add category"))
        self.add_btn.clicked.connect(self._add_category)
        self.remove_btn = QPushButton("➖")
        self.remove_btn.setToolTip(_("Remove category"))
        self.remove_btn.setStyleSheet(ButtonStyles.DANGER)
        self.remove_btn.clicked.connect(self._remove_category)
        self.up_btn = QPushButton("⬆")
        self.up_btn.setToolTip(_("Raise priority"))
        self.up_btn.clicked.connect(self._promote_category)
        self.down_btn = QPushButton("⬇")
        self.down_btn.setToolTip(_("Lower priority"))
        self.down_btn.clicked.connect(self._demote_category)
        for btn in (self.add_btn, self.remove_btn, self.up_btn, self.down_btn):
            if btn is not self.remove_btn:
                btn.setStyleSheet(ButtonStyles.DEFAULT)
            btn_row.addWidget(btn)
        left.addLayout(btn_row)
        root.addLayout(left, 1)

        # Right: tabs + help + buttons
        right = QVBoxLayout()
        self.tabs = QTabWidget()
        self._tab_pages = {
            EditorTab.MEMBERS: self._build_members_tab(),
            EditorTab.EXPRESSION: self._build_expression_tab(),
            EditorTab.BASIC: self._build_basic_tab(),
            EditorTab.ADVANCED: self._build_advanced_tab(),
        }
        titles = {
            EditorTab.MEMBERS: _("Members"),
            EditorTab.EXPRESSION: _("Expression"),
            EditorTab.BASIC: _("Basic"),
            EditorTab.ADVANCED: _("Advanced"),
        }
        for tab, page in self._tab_pages.items():
            self.tabs.addTab(page, titles[tab])
        self.tabs.currentChanged.connect(self._on_tab_changed)
        right.addWidget(self.tabs, 1)

        self.help_label = QLabel()
        self.help_label.setWordWrap(True)
        self.help_label.setStyleSheet(LabelStyles.HELP)
        right.addWidget(self.help_label)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self.ok_btn = QPushButton(_("OK"))
        self.ok_btn.setStyleSheet(ButtonStyles.PRIMARY)
        self.ok_btn.clicked.connect(self._ok)
        self.apply_btn = QPushButton(_("Apply"))
        self.apply_btn.setStyleSheet(ButtonStyles.DEFAULT)
        self.apply_btn.clicked.connect(self._apply)
        self.cancel_btn = QPushButton(_("Cancel"))
        self.cancel_btn.setStyleSheet(ButtonStyles.DEFAULT)
        self.cancel_btn.clicked.connect(self.reject)
        for btn in (self.ok_btn, self.apply_btn, self.cancel_btn):
            buttons.addWidget(btn)
        right.addLayout(buttons)
        root.addLayout(right, 3)

    def _line_edit(self, field: EditorField, placeholder: str = "") -> QLineEdit:
        edit = QLineEdit()
        edit.setPlaceholderText(placeholder)
        edit.textChanged.connect(lambda text: self.fields.set_value(field, text))
        self._widgets[field] = edit
        return edit

    def _check(self, field: EditorField, text: str) -> QCheckBox:
        check = QCheckBox(text)
        check.toggled.connect(lambda v: self.fields.set_value(field, v))
        self._widgets[field] = check
        return check

    def _combo(self, field: EditorField, choices=None) -> QComboBox:
        combo = QComboBox()
        for value in choices or []:
            combo.addItem(_enum_label(value), value)
        combo.currentIndexChanged.connect(
            lambda i: i >= 0 and self.fields.set_value(field, combo.itemData(i)))
        self._widgets[field] = combo
        return combo

    def _spin(self, field: EditorField, minimum: float, maximum: float, decimals: int = 1) -> QDoubleSpinBox:
        spin = QDoubleSpinBox()
        spin.setRange(minimum, maximum)
        spin.setDecimals(decimals)
        spin.valueChanged.connect(lambda v: self.fields.set_value(field, float(v)))
        self._widgets[field] = spin
        return spin

    def _opacity_slider(self, field: EditorField) -> QSlider:
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(0, 100)
        slider.valueChanged.connect(lambda v: self.fields.set_value(field, v / 100.0))
        self._widgets[field] = slider
        return slider

    def _color_button(self, field: EditorField) -> ColorButton:
        btn = ColorButton()
        btn.color_changed.connect(lambda c: self.fields.set_value(field, c))
        self._widgets[field] = btn
        return btn

    def _build_members_tab(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)
        form.addRow(_("Filter:"), self._line_edit(EditorField.FILTER_EXPRESSION, "[POP2000] > 10000"))
        return page

    def _build_expression_tab(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)
        form.addRow(_("Label text:"), self._line_edit(EditorField.LABEL_EXPRESSION, "[NAME]"))
        form.addRow(_("Number format:"), self._line_edit(EditorField.FLOATING_FORMAT, "N2"))
        return page

    def _build_basic_tab(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        font_box = QGroupBox(_("Font"))
        grid = QGridLayout(font_box)
        family = self._combo(EditorField.FONT_FAMILY, QFontDatabase.families())
        size = QComboBox()
        size.setEditable(True)
        size.addItems(FONT_SIZES)
        size.currentTextChanged.connect(lambda text: self.fields.set_value(EditorField.FONT_SIZE, text))
        self._widgets[EditorField.FONT_SIZE] = size
        grid.addWidget(QLabel(_("Family:")), 0, 0)
        grid.addWidget(family, 0, 1, 1, 2)
        grid.addWidget(QLabel(_("Size:")), 1, 0)
        grid.addWidget(size, 1, 1)
        grid.addWidget(self._combo(EditorField.FONT_STYLE), 1, 2)
        grid.addWidget(QLabel(_("Color:")), 2, 0)
        grid.addWidget(self._color_button(EditorField.FONT_COLOR), 2, 1)
        grid.addWidget(self._opacity_slider(EditorField.FONT_OPACITY), 2, 2)
        grid.addWidget(QLabel(_("Alignment:")), 3, 0)
        grid.addWidget(self._combo(EditorField.ALIGNMENT, list(TextAlignment)), 3, 1)
        layout.addWidget(font_box)

        frame_box = QGroupBox(_("Background"))
        grid = QGridLayout(frame_box)
        grid.addWidget(self._check(EditorField.BACKGROUND_ENABLED, _("Fill background")), 0, 0)
        grid.addWidget(self._color_button(EditorField.BACKGROUND_COLOR), 0, 1)
        grid.addWidget(self._opacity_slider(EditorField.BACKGROUND_OPACITY), 0, 2)
        grid.addWidget(self._check(EditorField.BORDER_VISIBLE, _("Border")), 1, 0)
        grid.addWidget(self._color_button(EditorField.BORDER_COLOR), 1, 1)
        grid.addWidget(self._opacity_slider(EditorField.BORDER_OPACITY), 1, 2)
        layout.addWidget(frame_box)

        self.preview_label = QLabel(_("Preview"))
        self.preview_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.preview_label.setMinimumHeight(60)
        layout.addWidget(self.preview_label)
        layout.addStretch()
        return page

    def _build_advanced_tab(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)

        placement_box = QGroupBox(_("Placement"))
        form = QFormLayout(placement_box)
        form.addRow(_("Position:"), self._combo(EditorField.ORIENTATION, list(ContentAlignment)))
        form.addRow(_("X offset:"), self._spin(EditorField.OFFSET_X, -1000, 1000))
        form.addRow(_("Y offset:"), self._spin(EditorField.OFFSET_Y, -1000, 1000))
        form.addRow(_("Method:"), self._combo(EditorField.PLACEMENT_METHOD))
        form.addRow(_("Parts:"), self._combo(EditorField.PARTS_METHOD, list(PartLabelingMethod)))
        form.addRow(_("Priority field:"), self._combo(EditorField.PRIORITY_FIELD))
        form.addRow(self._check(EditorField.PRIORITIZE_LOW, _("Prioritize low values")))
        form.addRow(self._check(EditorField.PREVENT_COLLISIONS, _("Prevent collisions")))
        layout.addWidget(placement_box)

        rotation_box = QGroupBox(_("Rotation"))
        grid = QGridLayout(rotation_box)
        self.rotation = RotationSelector()
        self.rotation.mode_changed.connect(lambda m: self.fields.set_value(EditorField.ROTATION_MODE, m))
        self._widgets[EditorField.ROTATION_MODE] = self.rotation
        grid.addWidget(self.rotation, 0, 0, 3, 1)
        grid.addWidget(self._spin(EditorField.ANGLE, -360, 360), 0, 1)
        grid.addWidget(self._combo(EditorField.ANGLE_FIELD), 1, 1)
        grid.addWidget(self._combo(EditorField.LINE_ORIENTATION, list(LineOrientation)), 2, 1)
        layout.addWidget(rotation_box)

        effects_box = QGroupBox(_("Halo and shadow"))
        grid = QGridLayout(effects_box)
        grid.addWidget(self._check(EditorField.HALO_ENABLED, _("Halo")), 0, 0)
        grid.addWidget(self._color_button(EditorField.HALO_COLOR), 0, 1)
        grid.addWidget(self._check(EditorField.SHADOW_ENABLED, _("Shadow")), 1, 0)
        grid.addWidget(self._color_button(EditorField.SHADOW_COLOR), 1, 1)
        grid.addWidget(self._opacity_slider(EditorField.SHADOW_OPACITY), 1, 2)
        grid.addWidget(self._spin(EditorField.SHADOW_OFFSET_X, -50, 50), 2, 1)
        grid.addWidget(self._spin(EditorField.SHADOW_OFFSET_Y, -50, 50), 2, 2)
        layout.addWidget(effects_box)
        layout.addStretch()
        return page

    # ------------------------------------------------------------------
    # EditorFields -> widgets
    # ------------------------------------------------------------------

    def _connect_fields(self):
        self.fields.field_changed.connect(self._on_field_changed)
        self.fields.enabled_changed.connect(self._on_enabled_changed)
        self.fields.visible_changed.connect(self._on_visible_changed)
        self.fields.choices_changed.connect(self._on_choices_changed)

    def _on_field_changed(self, field: EditorField, value):
        widget = self._widgets.get(field)
        if widget is None:
            return
        widget.blockSignals(True)
        try:
            self._write_widget(field, widget, value)
        finally:
            widget.blockSignals(False)
        if field in (EditorField.FILTER_EXPRESSION, EditorField.LABEL_EXPRESSION):
            self._refresh_category_text()

    def _write_widget(self, field, widget, value):
        if isinstance(widget, RotationSelector):
            widget.set_mode(value)
        elif isinstance(widget, ColorButton):
            if value is not None:
                widget.set_color(value)
        elif isinstance(widget, QSlider):
            widget.setValue(int(round((value or 0.0) * 100)))
        elif isinstance(widget, QDoubleSpinBox):
            widget.setValue(float(value or 0.0))
        elif isinstance(widget, QCheckBox):
            widget.setChecked(bool(value))
        elif isinstance(widget, QComboBox) and widget.isEditable():
            widget.setCurrentText(str(value or ""))
        elif isinstance(widget, QComboBox):
            index = _combo_index(widget, value)
            if index < 0 and value is not None:
                widget.addItem(_enum_label(value), value)
                index = widget.count() - 1
            widget.setCurrentIndex(index)
        elif isinstance(widget, QLineEdit):
            if widget.text() != (value or ""):
                widget.setText(value or "")

    def _on_enabled_changed(self, field: EditorField, enabled: bool):
        widget = self._widgets.get(field)
        if widget is not None:
            widget.setEnabled(enabled)

    def _on_visible_changed(self, field: EditorField, visible: bool):
        widget = self._widgets.get(field)
        if widget is not None:
            widget.setVisible(visible)

    def _on_choices_changed(self, field: EditorField, choices: list):
        widget = self._widgets.get(field)
        if isinstance(widget, RotationSelector):
            widget.set_modes(choices)
            return
        if not isinstance(widget, QComboBox):
            return
        widget.blockSignals(True)
        try:
            widget.clear()
            for value in choices:
                widget.addItem(_enum_label(value), value)
            index = _combo_index(widget, self.fields.value(field))
            widget.setCurrentIndex(index)
        finally:
            widget.blockSignals(False)

    def _show_preview(self, preview):
        font = preview.font
        if not isinstance(font, QFont):
            font = QFont(preview.font_family)
            font.setPointSizeF(preview.font_size)
            font.setBold(bool(preview.font_style & FontStyle.BOLD))
            font.setItalic(bool(preview.font_style & FontStyle.ITALIC))
        self.preview_label.setFont(font)
        self.preview_label.setText(preview.text)
        self.preview_label.setToolTip(preview.tooltip)
        back = preview.back_color.name() if preview.back_color is not None else None
        self.preview_label.setStyleSheet(LabelStyles.preview(preview.font_color.name(), back))

    # ------------------------------------------------------------------
    # Category list
    # ------------------------------------------------------------------

    def _load_categories(self):
        self.category_list.blockSignals(True)
        try:
            self.category_list.clear()
            for category in self.session.working:
                self.category_list.addItem(str(category))
            row = self.session.working.index_of(self.session.active)
            self.category_list.setCurrentRow(row)
        finally:
            self.category_list.blockSignals(False)

    def _refresh_category_text(self):
        for row, category in enumerate(self.session.working):
            item = self.category_list.item(row)
            if item is not None:
                item.setText(str(category))

    def _on_category_row_changed(self, row: int):
        working = self.session.working
        self.session.select_active(working[row] if 0 <= row < len(working) else None)

    def _select(self, category):
        self.session.select_active(category)
        self._load_categories()

    def _add_category(self):
        category = self.session.add_category()
        self._select(category)

    def _remove_category(self):
        if self.session.is_placeholder_active:
            return
        try:
            self.session.remove_category(self.session.active)
        except InvariantViolation as e:
            self.logger.warning(f"Remove refused: {e}")
            box = QMessageBox(QMessageBox.Icon.Critical, _("One category needed"), str(e),
                              QMessageBox.StandardButton.Ok, self)
            box.setStyleSheet(DialogStyles.ENHANCED_MSG_BOX)
            box.exec()
            return
        self._load_categories()

    def _promote_category(self):
        self.session.promote(self.session.active)
        self._load_categories()

    def _demote_category(self):
        self.session.demote(self.session.active)
        self._load_categories()

    # ------------------------------------------------------------------
    # Apply / OK / Cancel
    # ------------------------------------------------------------------

    def _show_invalid(self, error: ExpressionInvalid):
        if error.category in self.session.working:
            self._select(error.category)
        self.tabs.setCurrentWidget(self._tab_pages[error.tab])
        box = QMessageBox(QMessageBox.Icon.Warning, _("Invalid expression"), str(error),
                          QMessageBox.StandardButton.Ok, self)
        box.setStyleSheet(DialogStyles.ENHANCED_MSG_BOX)
        box.exec()

    def _apply(self) -> bool:
        try:
            self.session.apply()
        except ExpressionInvalid as e:
            self._show_invalid(e)
            return False
        return True

    def _ok(self):
        try:
            self.session.commit_and_close()
        except ExpressionInvalid as e:
            self._show_invalid(e)
            return
        self.accept()

    def reject(self):
        if self.session.is_open:
            self.session.cancel()
        super().reject()

    # ------------------------------------------------------------------
    # Help / geometry
    # ------------------------------------------------------------------

    def _on_tab_changed(self, index: int):
        page = self.tabs.widget(index)
        tab = next((t for t, p in self._tab_pages.items() if p is page), None)
        text = get_lang_manager().get_tab_help(tab.value) if tab is not None else None
        self.help_label.setVisible(bool(text))
        self.help_label.setText(text or "")

    def _restore_geometry(self):
        settings = QSettings("LabelSetup", "LabelSetupDialog")
        geometry = settings.value("geometry")
        if geometry:
            self.restoreGeometry(geometry)

    def _save_geometry(self):
        settings = QSettings("LabelSetup", "LabelSetupDialog")
        settings.setValue("geometry", self.saveGeometry())
