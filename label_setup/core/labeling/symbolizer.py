"""
Label Setup: Style descriptor
One LabelSymbolizer holds every rendering parameter of a single label category.
"""
from dataclasses import dataclass, field, fields, replace
from enum import Enum, IntEnum, IntFlag
from typing import Optional, Tuple

from PyQt6.QtGui import QColor

DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_SIZE = 10.0
DEFAULT_PRIORITY_FIELD = "FID"


class FontStyle(IntFlag):
    REGULAR = 0
    BOLD = 1
    ITALIC = 2
    UNDERLINE = 4
    STRIKEOUT = 8


class TextAlignment(IntEnum):
    """Alignment of multi-line label text."""
    LEFT = 0
    CENTER = 1
    RIGHT = 2


class ContentAlignment(Enum):
    """Position of the label relative to its anchor point."""
    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    TOP_RIGHT = "top_right"
    MIDDLE_LEFT = "middle_left"
    MIDDLE_CENTER = "middle_center"
    MIDDLE_RIGHT = "middle_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_CENTER = "bottom_center"
    BOTTOM_RIGHT = "bottom_right"


class RotationMode(Enum):
    COMMON_ANGLE = "common_angle"
    ANGLE_FIELD = "angle_field"
    LINE_ORIENTATION = "line_orientation"


class LineOrientation(Enum):
    PARALLEL = "parallel"
    PERPENDICULAR = "perpendicular"


class LabelPlacementMethod(Enum):
    """Placement for point and polygon features."""
    CENTROID = "centroid"
    INTERIOR_POINT = "interior_point"
    CLOSEST = "closest"


class LineLabelPlacementMethod(Enum):
    FIRST_SEGMENT = "first_segment"
    LAST_SEGMENT = "last_segment"
    MIDDLE_SEGMENT = "middle_segment"
    LONGEST_SEGMENT = "longest_segment"


class PartLabelingMethod(Enum):
    LABEL_LARGEST_PART = "label_largest_part"
    LABEL_ALL_PARTS = "label_all_parts"


def opacity_of(color: QColor) -> float:
    """Opacity (0.0 - 1.0) stored in the alpha channel."""
    return color.alphaF()


def to_transparent(color: QColor, opacity: float) -> QColor:
    """Copy of `color` with its alpha replaced by `opacity`."""
    result = QColor(color)
    result.setAlphaF(max(0.0, min(1.0, float(opacity))))
    return result


def _color_to_str(color: QColor) -> str:
    return color.name(QColor.NameFormat.HexArgb)


@dataclass
class LabelSymbolizer:
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: float = DEFAULT_FONT_SIZE
    font_style: FontStyle = FontStyle.REGULAR
    font_color: QColor = field(default_factory=lambda: QColor(0, 0, 0))

    back_color: QColor = field(default_factory=lambda: QColor(240, 248, 255))
    back_color_enabled: bool = False
    border_color: QColor = field(default_factory=lambda: QColor(0, 0, 0))
    border_visible: bool = False
    halo_color: QColor = field(default_factory=lambda: QColor(255, 255, 255))
    halo_enabled: bool = False
    drop_shadow_color: QColor = field(default_factory=lambda: QColor(0, 0, 0, 51))
    drop_shadow_enabled: bool = False
    drop_shadow_pixel_offset: Tuple[float, float] = (2.0, 2.0)

    alignment: TextAlignment = TextAlignment.CENTER
    orientation: ContentAlignment = ContentAlignment.MIDDLE_RIGHT
    offset_x: float = 0.0
    offset_y: float = 0.0

    rotation_mode: RotationMode = RotationMode.COMMON_ANGLE
    angle: float = 0.0
    label_angle_field: Optional[str] = None
    line_orientation: LineOrientation = LineOrientation.PARALLEL

    placement_method: LabelPlacementMethod = LabelPlacementMethod.CENTROID
    line_placement_method: LineLabelPlacementMethod = LineLabelPlacementMethod.LONGEST_SEGMENT
    parts_labeling_method: PartLabelingMethod = PartLabelingMethod.LABEL_LARGEST_PART

    prevent_collisions: bool = True
    prioritize_low_values: bool = False
    priority_field: str = DEFAULT_PRIORITY_FIELD
    floating_format: str = ""

    def copy(self) -> "LabelSymbolizer":
        """Independent copy. QColor is mutable, so colours are duplicated."""
        colors = {f.name: QColor(getattr(self, f.name)) for f in fields(self)
                  if isinstance(getattr(self, f.name), QColor)}
        return replace(self, **colors)

    def copy_properties_from(self, other: "LabelSymbolizer"):
        source = other.copy()
        for f in fields(self):
            setattr(self, f.name, getattr(source, f.name))

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, QColor):
                value = _color_to_str(value)
            elif isinstance(value, IntFlag):
                value = int(value)
            elif isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data
