"""
Label Setup: error types raised by the category edit model.
"""
from label_setup.core.lang_manager import _


class LabelSetupError(Exception):
    """Base class for every error raised by the labeling core."""


class InvariantViolation(LabelSetupError):
    """A list operation would break a category-list invariant (e.g. removing the last category)."""

    def __init__(self, message: str = None):
        super().__init__(message or _("At least one category is needed."))


class ExpressionInvalid(LabelSetupError):
    """
    A category expression did not validate.

    `tab` names the editor tab that shows the offending expression so the
    dialog can focus it.
    """

    def __init__(self, category, expression: str, tab):
        self.category = category
        self.expression = expression
        self.tab = tab
        super().__init__(
            _("Invalid expression in category '{name}': {expression!r}").format(
                name=category.name, expression=expression)
        )


class NullSource(LabelSetupError):
    def __init__(self):
        super().__init__(_("An edit session needs a layer to edit."))


class SessionClosed(LabelSetupError):
    def __init__(self):
        super().__init__(_("The edit session has already been closed."))


class NoStyleAvailable(LabelSetupError):
    def __init__(self, family: str = None):
        self.family = family
        super().__init__(_("No font style is available for '{family}'.").format(family=family or "?"))


class StyleMaterializationFailure(LabelSetupError):
    """Raised by font factories when a family/size/style combination cannot be realized."""
