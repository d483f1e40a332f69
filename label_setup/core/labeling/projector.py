"""
Label Setup: Active-field projector
アクティブなカテゴリのシンボライザーとエディタ項目を双方向に同期する。

push_to_fields() writes every editor field from the active category while the
session's suppress_updates() guard is held. Field handlers see the guard and do
nothing, so a programmatic push is never mistaken for a user edit.
"""
import logging
from enum import Enum, auto

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QColor

from label_setup.core.labeling.exceptions import NoStyleAvailable
from label_setup.core.labeling.font_styles import FontStyleResolver
from label_setup.core.labeling.symbolizer import (
    DEFAULT_PRIORITY_FIELD, LabelPlacementMethod, LineLabelPlacementMethod, RotationMode,
    opacity_of, to_transparent,
)


class EditorField(Enum):
    FILTER_EXPRESSION = auto()
    LABEL_EXPRESSION = auto()

    FONT_FAMILY = auto()
    FONT_SIZE = auto()
    FONT_STYLE = auto()
    FONT_COLOR = auto()
    FONT_OPACITY = auto()
    ALIGNMENT = auto()

    BACKGROUND_ENABLED = auto()
    BACKGROUND_COLOR = auto()
    BACKGROUND_OPACITY = auto()
    BORDER_VISIBLE = auto()
    BORDER_COLOR = auto()
    BORDER_OPACITY = auto()
    HALO_ENABLED = auto()
    HALO_COLOR = auto()
    SHADOW_ENABLED = auto()
    SHADOW_COLOR = auto()
    SHADOW_OPACITY = auto()
    SHADOW_OFFSET_X = auto()
    SHADOW_OFFSET_Y = auto()

    ORIENTATION = auto()
    OFFSET_X = auto()
    OFFSET_Y = auto()
    ROTATION_MODE = auto()
    ANGLE = auto()
    ANGLE_FIELD = auto()
    LINE_ORIENTATION = auto()
    PLACEMENT_METHOD = auto()
    PARTS_METHOD = auto()
    PRIORITY_FIELD = auto()
    PREVENT_COLLISIONS = auto()
    PRIORITIZE_LOW = auto()
    FLOATING_FORMAT = auto()


SHADOW_GROUP = (
    EditorField.SHADOW_COLOR, EditorField.SHADOW_OPACITY,
    EditorField.SHADOW_OFFSET_X, EditorField.SHADOW_OFFSET_Y,
)

# Fields that map 1:1 onto a symbolizer attribute
_SYMBOLIZER_ATTRS = {
    EditorField.ALIGNMENT: "alignment",
    EditorField.BACKGROUND_ENABLED: "back_color_enabled",
    EditorField.BORDER_VISIBLE: "border_visible",
    EditorField.ORIENTATION: "orientation",
    EditorField.OFFSET_X: "offset_x",
    EditorField.OFFSET_Y: "offset_y",
    EditorField.ANGLE: "angle",
    EditorField.ANGLE_FIELD: "label_angle_field",
    EditorField.LINE_ORIENTATION: "line_orientation",
    EditorField.PARTS_METHOD: "parts_labeling_method",
    EditorField.PRIORITY_FIELD: "priority_field",
    EditorField.PREVENT_COLLISIONS: "prevent_collisions",
    EditorField.PRIORITIZE_LOW: "prioritize_low_values",
    EditorField.FLOATING_FORMAT: "floating_format",
}

# colour field -> (opacity field, symbolizer attribute)
_COLOR_FIELDS = {
    EditorField.FONT_COLOR: (EditorField.FONT_OPACITY, "font_color"),
    EditorField.BACKGROUND_COLOR: (EditorField.BACKGROUND_OPACITY, "back_color"),
    EditorField.BORDER_COLOR: (EditorField.BORDER_OPACITY, "border_color"),
    EditorField.SHADOW_COLOR: (EditorField.SHADOW_OPACITY, "drop_shadow_color"),
}
_OPACITY_FIELDS = {opacity: color for color, (opacity, _attr) in _COLOR_FIELDS.items()}

# Editing a colour implicitly switches its feature on
_COLOR_COMPANIONS = {
    EditorField.BACKGROUND_COLOR: EditorField.BACKGROUND_ENABLED,
    EditorField.BORDER_COLOR: EditorField.BORDER_VISIBLE,
}


def _same(a, b) -> bool:
    return type(a) is type(b) and a == b


def format_font_size(size: float) -> str:
    return f"{size:g}"


class EditorFields(QObject):
    """
    State of every editor control: value, enabled, visible and (for pickers) choices.
    Signals fire only on actual change, the way widget change signals do.
    """

    field_changed = pyqtSignal(object, object)  # EditorField, value
    enabled_changed = pyqtSignal(object, bool)
    visible_changed = pyqtSignal(object, bool)
    choices_changed = pyqtSignal(object, list)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._values = {f: None for f in EditorField}
        self._enabled = {f: True for f in EditorField}
        self._visible = {f: True for f in EditorField}
        self._choices = {}

    def value(self, field: EditorField):
        return self._values[field]

    def set_value(self, field: EditorField, value) -> bool:
        if _same(self._values[field], value):
            return False
        self._values[field] = value
        self.field_changed.emit(field, value)
        return True

    def is_enabled(self, field: EditorField) -> bool:
        return self._enabled[field]

    def set_enabled(self, field: EditorField, enabled: bool):
        enabled = bool(enabled)
        if self._enabled[field] != enabled:
            self._enabled[field] = enabled
            self.enabled_changed.emit(field, enabled)

    def is_visible(self, field: EditorField) -> bool:
        return self._visible[field]

    def set_visible(self, field: EditorField, visible: bool):
        visible = bool(visible)
        if self._visible[field] != visible:
            self._visible[field] = visible
            self.visible_changed.emit(field, visible)

    def choices(self, field: EditorField) -> list:
        return list(self._choices.get(field, []))

    def set_choices(self, field: EditorField, choices):
        choices = list(choices)
        if self._choices.get(field) != choices:
            self._choices[field] = choices
            self.choices_changed.emit(field, choices)


class ActiveFieldProjector(QObject):
    preview_changed = pyqtSignal(object)  # PreviewState

    def __init__(self, session, fields: EditorFields = None, resolver: FontStyleResolver = None, parent=None):
        super().__init__(parent)
        self.logger = logging.getLogger("FieldProjector")
        self.session = session
        self.fields = fields if fields is not None else EditorFields()
        self.resolver = resolver if resolver is not None else FontStyleResolver()
        self.preview = None

        self.fields.field_changed.connect(self._on_field_changed)
        self.session.active_changed.connect(lambda _category: self.push_to_fields())

    @property
    def symbolizer(self):
        return self.session.active.symbolizer

    # ------------------------------------------------------------------
    # Model -> fields
    # ------------------------------------------------------------------

    def push_to_fields(self):
        category = self.session.active
        symb = category.symbolizer
        f = self.fields
        set_ = f.set_value

        with self.session.suppress_updates():
            self._push_choices()

            set_(EditorField.PRIORITY_FIELD, symb.priority_field)
            set_(EditorField.PREVENT_COLLISIONS, symb.prevent_collisions)
            set_(EditorField.PRIORITIZE_LOW, symb.prioritize_low_values)

            # Colours: opacity first, the swatch alone would not re-derive it
            set_(EditorField.FONT_OPACITY, opacity_of(symb.font_color))
            set_(EditorField.FONT_COLOR, QColor(symb.font_color))
            set_(EditorField.BACKGROUND_OPACITY, opacity_of(symb.back_color))
            set_(EditorField.BACKGROUND_COLOR, QColor(symb.back_color))
            set_(EditorField.BACKGROUND_ENABLED, symb.back_color_enabled)
            set_(EditorField.BORDER_VISIBLE, symb.border_visible)
            set_(EditorField.BORDER_OPACITY, opacity_of(symb.border_color))
            set_(EditorField.BORDER_COLOR, QColor(symb.border_color))

            set_(EditorField.FONT_SIZE, format_font_size(symb.font_size))
            set_(EditorField.ALIGNMENT, symb.alignment)
            set_(EditorField.FONT_FAMILY, symb.font_family)
            f.set_choices(EditorField.FONT_STYLE, self.resolver.available_styles(symb.font_family))
            set_(EditorField.FONT_STYLE, symb.font_style)
            set_(EditorField.LABEL_EXPRESSION, category.expression)
            set_(EditorField.FILTER_EXPRESSION, category.filter_expression)
            set_(EditorField.ORIENTATION, symb.orientation)

            set_(EditorField.SHADOW_ENABLED, symb.drop_shadow_enabled)
            set_(EditorField.SHADOW_OPACITY, opacity_of(symb.drop_shadow_color))
            set_(EditorField.SHADOW_COLOR, QColor(symb.drop_shadow_color))
            set_(EditorField.SHADOW_OFFSET_X, float(symb.drop_shadow_pixel_offset[0]))
            set_(EditorField.SHADOW_OFFSET_Y, float(symb.drop_shadow_pixel_offset[1]))
            for member in SHADOW_GROUP:
                f.set_enabled(member, symb.drop_shadow_enabled)

            set_(EditorField.OFFSET_Y, float(symb.offset_y))
            set_(EditorField.OFFSET_X, float(symb.offset_x))
            set_(EditorField.HALO_COLOR, QColor(symb.halo_color))
            set_(EditorField.HALO_ENABLED, symb.halo_enabled)
            f.set_enabled(EditorField.HALO_COLOR, symb.halo_enabled)

            if self.session.is_line_layer:
                set_(EditorField.PLACEMENT_METHOD, symb.line_placement_method)
            else:
                set_(EditorField.PLACEMENT_METHOD, symb.placement_method)
            set_(EditorField.PARTS_METHOD, symb.parts_labeling_method)

            # Label rotation
            set_(EditorField.ROTATION_MODE, symb.rotation_mode)
            set_(EditorField.ANGLE, float(symb.angle))
            set_(EditorField.ANGLE_FIELD, symb.label_angle_field)
            set_(EditorField.LINE_ORIENTATION, symb.line_orientation)
            self._update_rotation_inputs(symb.rotation_mode)

            set_(EditorField.FLOATING_FORMAT, symb.floating_format)

            self.update_preview()

    def _push_choices(self):
        f = self.fields
        field_set = self.session.field_set
        has_table = bool(field_set)
        is_line = self.session.is_line_layer

        f.set_choices(EditorField.PRIORITY_FIELD, [DEFAULT_PRIORITY_FIELD] + field_set)
        f.set_choices(EditorField.ANGLE_FIELD, field_set)
        f.set_enabled(EditorField.PRIORITY_FIELD, has_table)
        f.set_enabled(EditorField.PRIORITIZE_LOW, has_table)

        modes = [RotationMode.COMMON_ANGLE, RotationMode.ANGLE_FIELD]
        if is_line:
            modes.append(RotationMode.LINE_ORIENTATION)
        f.set_choices(EditorField.ROTATION_MODE, modes)
        f.set_visible(EditorField.LINE_ORIENTATION, is_line)

        placement = LineLabelPlacementMethod if is_line else LabelPlacementMethod
        f.set_choices(EditorField.PLACEMENT_METHOD, list(placement))

    def _update_rotation_inputs(self, mode: RotationMode):
        f = self.fields
        f.set_enabled(EditorField.ANGLE, mode == RotationMode.COMMON_ANGLE)
        f.set_enabled(EditorField.ANGLE_FIELD,
                      mode == RotationMode.ANGLE_FIELD and bool(self.session.field_set))
        f.set_enabled(EditorField.LINE_ORIENTATION, mode == RotationMode.LINE_ORIENTATION)

    # ------------------------------------------------------------------
    # Fields -> model
    # ------------------------------------------------------------------

    def _on_field_changed(self, field: EditorField, value):
        if self.session.suppressed:
            return

        category = self.session.active
        symb = category.symbolizer

        if field in _SYMBOLIZER_ATTRS:
            setattr(symb, _SYMBOLIZER_ATTRS[field], value)
            if field == EditorField.BACKGROUND_ENABLED:
                self.update_preview()

        elif field == EditorField.FILTER_EXPRESSION:
            category.filter_expression = value or ""
        elif field == EditorField.LABEL_EXPRESSION:
            category.expression = value or ""

        elif field in _COLOR_FIELDS:
            self._color_edited(field, value)
        elif field in _OPACITY_FIELDS:
            color_field = _OPACITY_FIELDS[field]
            current = self.fields.value(color_field)
            if current is not None:
                self.fields.set_value(color_field, to_transparent(current, value))

        elif field == EditorField.HALO_COLOR:
            symb.halo_color = QColor(value)
        elif field == EditorField.HALO_ENABLED:
            symb.halo_enabled = bool(value)
            self.fields.set_enabled(EditorField.HALO_COLOR, value)
        elif field == EditorField.SHADOW_ENABLED:
            symb.drop_shadow_enabled = bool(value)
            for member in SHADOW_GROUP:
                self.fields.set_enabled(member, value)
        elif field in (EditorField.SHADOW_OFFSET_X, EditorField.SHADOW_OFFSET_Y):
            symb.drop_shadow_pixel_offset = (
                float(self.fields.value(EditorField.SHADOW_OFFSET_X) or 0.0),
                float(self.fields.value(EditorField.SHADOW_OFFSET_Y) or 0.0),
            )

        elif field == EditorField.ROTATION_MODE:
            symb.rotation_mode = value
            self._update_rotation_inputs(value)
        elif field == EditorField.PLACEMENT_METHOD:
            if self.session.is_line_layer:
                symb.line_placement_method = value
            else:
                symb.placement_method = value

        elif field == EditorField.FONT_FAMILY:
            self._family_changed(value)
        elif field in (EditorField.FONT_SIZE, EditorField.FONT_STYLE):
            self.update_preview()

    def _color_edited(self, field: EditorField, color):
        opacity_field, attr = _COLOR_FIELDS[field]
        opacity = self.fields.value(opacity_field)
        if opacity is not None:
            adjusted = to_transparent(color, opacity)
            if adjusted != color:
                # Re-enters this handler with the adjusted colour
                self.fields.set_value(field, adjusted)
                return

        setattr(self.symbolizer, attr, QColor(color))
        companion = _COLOR_COMPANIONS.get(field)
        if companion is not None:
            self.fields.set_value(companion, True)
        if field in (EditorField.FONT_COLOR, EditorField.BACKGROUND_COLOR):
            self.update_preview()

    def _family_changed(self, family: str):
        styles = self.resolver.available_styles(family)
        self.fields.set_choices(EditorField.FONT_STYLE, styles)
        try:
            self.fields.set_value(EditorField.FONT_STYLE, self.resolver.default_style(styles))
        except NoStyleAvailable:
            self.logger.warning(f"Font family {family!r} reports no usable style")
        self.update_preview()

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def update_preview(self):
        """
        Build the preview from the font fields. When the font can be realized
        and this is a user edit, the font settings are stored on the active category.
        """
        try:
            size = float(self.fields.value(EditorField.FONT_SIZE))
        except (TypeError, ValueError):
            return None

        candidate = self.symbolizer.copy()
        family = self.fields.value(EditorField.FONT_FAMILY)
        style = self.fields.value(EditorField.FONT_STYLE)
        color = self.fields.value(EditorField.FONT_COLOR)
        if family is not None:
            candidate.font_family = family
        if style is not None:
            candidate.font_style = style
        if color is not None:
            candidate.font_color = QColor(color)
        candidate.font_size = size

        preview = self.resolver.build_preview(candidate)
        if preview.supported and not self.session.suppressed:
            symb = self.symbolizer
            symb.font_family = candidate.font_family
            symb.font_size = candidate.font_size
            symb.font_style = candidate.font_style
            symb.font_color = candidate.font_color

        self.preview = preview
        self.preview_changed.emit(preview)
        return preview
