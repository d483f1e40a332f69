"""
Label Setup: Categories
An ordered list of label categories. Position 0 has the highest placement priority.

Invariants:
- the list is never empty once initialized
- an empty filter expression is only allowed while the list holds a single category
"""
import logging
from enum import Enum

from label_setup.core.labeling.exceptions import InvariantViolation, ExpressionInvalid
from label_setup.core.labeling.expressions import validate_expression, validate_label_expression
from label_setup.core.labeling.symbolizer import LabelSymbolizer

logger = logging.getLogger("Categories")


class EditorTab(Enum):
    MEMBERS = "members"
    EXPRESSION = "expression"
    BASIC = "basic"
    ADVANCED = "advanced"


class LabelCategory:
    """One labeling rule: which features (filter), what text (expression), how it looks (symbolizer)."""

    def __init__(self, name: str = "", expression: str = "", filter_expression: str = "",
                 symbolizer: LabelSymbolizer = None):
        self.name = name
        self.expression = expression
        self.filter_expression = filter_expression
        self.symbolizer = symbolizer if symbolizer is not None else LabelSymbolizer()
        self.is_empty_allowed = True

    def copy(self) -> "LabelCategory":
        clone = LabelCategory(self.name, self.expression, self.filter_expression, self.symbolizer.copy())
        clone.is_empty_allowed = self.is_empty_allowed
        return clone

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "expression": self.expression,
            "filter_expression": self.filter_expression,
            "symbolizer": self.symbolizer.to_dict(),
        }

    def __str__(self):
        return self.name or self.filter_expression or "(all)"

    def __repr__(self):
        return f"LabelCategory(name={self.name!r}, filter_expression={self.filter_expression!r})"


class CategoryList:
    def __init__(self, categories=None):
        self._items = list(categories) if categories else []
        self._created = len(self._items)
        self._refresh_allowance()

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __contains__(self, category):
        return self.index_of(category) >= 0

    def index_of(self, category) -> int:
        """Position of `category` by identity, or -1."""
        for i, item in enumerate(self._items):
            if item is category:
                return i
        return -1

    @property
    def allow_empty_expression(self) -> bool:
        return len(self._items) == 1

    def _refresh_allowance(self):
        allowed = self.allow_empty_expression
        for item in self._items:
            item.is_empty_allowed = allowed

    def add(self) -> LabelCategory:
        """Create a category with default style at the highest priority (position 0)."""
        self._created += 1
        category = LabelCategory(name=f"Category {self._created}")
        self._items.insert(0, category)
        self._refresh_allowance()
        logger.debug(f"Added {category!r}, count={len(self._items)}")
        return category

    def remove(self, category):
        index = self.index_of(category)
        if index < 0:
            raise ValueError(f"{category!r} is not in this list")
        if len(self._items) == 1:
            raise InvariantViolation()
        del self._items[index]
        self._refresh_allowance()
        logger.debug(f"Removed {category!r}, count={len(self._items)}")

    def promote(self, category):
        """Swap with the neighbour toward the front. No-op at position 0."""
        index = self.index_of(category)
        if index <= 0:
            return
        self._items[index - 1], self._items[index] = self._items[index], self._items[index - 1]

    def demote(self, category):
        """Swap with the neighbour toward the back. No-op at the last position."""
        index = self.index_of(category)
        if index < 0 or index == len(self._items) - 1:
            return
        self._items[index + 1], self._items[index] = self._items[index], self._items[index + 1]

    def validate_all(self, field_set=(), validator=validate_expression,
                     label_validator=validate_label_expression):
        """
        Raise ExpressionInvalid for the first category (in priority order) whose
        label expression or filter expression does not validate.
        """
        self._refresh_allowance()
        for category in self._items:
            if not label_validator(category.expression or "", field_set):
                raise ExpressionInvalid(category, category.expression, EditorTab.EXPRESSION)

            text = category.filter_expression or ""
            if not text.strip():
                if category.is_empty_allowed:
                    continue
                raise ExpressionInvalid(category, text, EditorTab.MEMBERS)
            if not validator(text, field_set):
                raise ExpressionInvalid(category, text, EditorTab.MEMBERS)

    def copy(self) -> "CategoryList":
        clone = CategoryList([item.copy() for item in self._items])
        clone._created = self._created
        return clone

    def copy_properties_from(self, other: "CategoryList"):
        """Replace content and order with copies of `other`'s categories."""
        self._items = [item.copy() for item in other]
        self._created = max(self._created, getattr(other, "_created", len(self._items)))
        self._refresh_allowance()

    def to_dict(self) -> list:
        return [item.to_dict() for item in self._items]
