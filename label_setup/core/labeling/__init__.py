"""
Label Setup core: category list, edit session and the editor field projector.
"""

from label_setup.core.labeling.exceptions import (
    LabelSetupError,
    InvariantViolation,
    ExpressionInvalid,
    NullSource,
    SessionClosed,
    NoStyleAvailable,
    StyleMaterializationFailure,
)
from label_setup.core.labeling.symbolizer import LabelSymbolizer, FontStyle, RotationMode
from label_setup.core.labeling.categories import LabelCategory, CategoryList, EditorTab
from label_setup.core.labeling.layer import LabelLayer
from label_setup.core.labeling.session import EditSession
from label_setup.core.labeling.font_styles import FontStyleResolver, PreviewState
from label_setup.core.labeling.projector import ActiveFieldProjector, EditorFields, EditorField

__all__ = [
    'LabelSetupError',
    'InvariantViolation',
    'ExpressionInvalid',
    'NullSource',
    'SessionClosed',
    'NoStyleAvailable',
    'StyleMaterializationFailure',
    'LabelSymbolizer',
    'FontStyle',
    'RotationMode',
    'LabelCategory',
    'CategoryList',
    'EditorTab',
    'LabelLayer',
    'EditSession',
    'FontStyleResolver',
    'PreviewState',
    'ActiveFieldProjector',
    'EditorFields',
    'EditorField',
]
