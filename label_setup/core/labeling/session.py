"""
Label Setup: Edit Session
作業用コピーを編集し、Apply/OK で元レイヤーへ書き戻す。Cancel なら破棄する。

依存するコンポーネント:
- original: copy() / copy_properties_from() / create_labels() / fields / is_line_layer
  を持つレイヤー (LabelLayer など)
"""
import logging
from contextlib import contextmanager

from PyQt6.QtCore import QObject, pyqtSignal

from label_setup.core.labeling.categories import LabelCategory
from label_setup.core.labeling.exceptions import ExpressionInvalid, NullSource, SessionClosed
from label_setup.core.labeling.expressions import validate_expression, validate_label_expression


class EditSession(QObject):
    """
    Transactional edit of a layer's label categories.

    The working list is a private deep copy; `original` is only touched by
    apply()/commit_and_close(), and then only after every category validated.
    """

    changes_applied = pyqtSignal()
    active_changed = pyqtSignal(object)  # LabelCategory (possibly the placeholder)
    closed = pyqtSignal(bool)  # True = committed (OK), False = cancelled

    def __init__(self, original, validator=validate_expression,
                 label_validator=validate_label_expression, parent=None):
        if original is None:
            raise NullSource()
        super().__init__(parent)
        self.logger = logging.getLogger("EditSession")

        self.original = original
        self.working = original.copy()
        self.validator = validator
        self.label_validator = label_validator
        self.suppressed = False
        self.is_open = True

        self._active = self.working[0] if len(self.working) else LabelCategory()
        self.logger.info(f"Session opened: {len(self.working)} categories")

    @classmethod
    def open(cls, original, **kwargs) -> "EditSession":
        return cls(original, **kwargs)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def active(self) -> LabelCategory:
        return self._active

    @property
    def is_placeholder_active(self) -> bool:
        return self._active not in self.working

    @property
    def field_set(self) -> list:
        return list(getattr(self.original, "fields", None) or [])

    @property
    def is_line_layer(self) -> bool:
        return bool(getattr(self.original, "is_line_layer", False))

    @contextmanager
    def suppress_updates(self):
        """Mark a programmatic bulk update; field handlers must not treat it as a user edit."""
        previous = self.suppressed
        self.suppressed = True
        try:
            yield
        finally:
            self.suppressed = previous

    def _ensure_open(self):
        if not self.is_open:
            raise SessionClosed()

    # ------------------------------------------------------------------
    # Category list editing
    # ------------------------------------------------------------------

    def select_active(self, category):
        """Bind `category` to the editor. None selects a throwaway placeholder."""
        self._ensure_open()
        if category is None:
            category = LabelCategory()
        elif category not in self.working:
            raise ValueError(f"{category!r} does not belong to this session")
        self._active = category
        self.active_changed.emit(category)

    def add_category(self) -> LabelCategory:
        self._ensure_open()
        return self.working.add()

    def remove_category(self, category):
        """Raises InvariantViolation when `category` is the last one; nothing changes then."""
        self._ensure_open()
        was_active = category is self._active
        self.working.remove(category)
        if was_active:
            self.select_active(self.working[0] if len(self.working) else None)

    def promote(self, category):
        self._ensure_open()
        self.working.promote(category)

    def demote(self, category):
        self._ensure_open()
        self.working.demote(category)

    # ------------------------------------------------------------------
    # Commit / discard
    # ------------------------------------------------------------------

    def validate(self):
        """Raise ExpressionInvalid for the first category that does not validate."""
        self.working.validate_all(self.field_set, self.validator, self.label_validator)

    def apply(self):
        """
        Validate everything, then copy the working list onto the original,
        rebuild its labels and notify listeners. The session stays open.
        """
        self._ensure_open()
        try:
            self.validate()
        except ExpressionInvalid as e:
            self.logger.warning(f"Apply refused: {e}")
            raise

        self.original.copy_properties_from(self.working)
        self.original.create_labels()

        # The map frame is optional, but the map must be redrawn when it exists
        map_frame = getattr(self.original, "map_frame", None)
        if map_frame is not None:
            map_frame.invalidate()

        self.logger.info(f"Changes applied: {len(self.working)} categories")
        self.changes_applied.emit()

    def commit_and_close(self):
        self.apply()
        self._close(True)

    def cancel(self):
        self._ensure_open()
        self.logger.info("Session cancelled, working copy discarded")
        self._close(False)

    def _close(self, committed: bool):
        self.is_open = False
        self.closed.emit(committed)
