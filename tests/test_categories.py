"""
Category list tests: ordering, removal, and the empty-filter rule.
"""

import pytest

from label_setup.core.labeling.categories import CategoryList, EditorTab, LabelCategory
from label_setup.core.labeling.exceptions import ExpressionInvalid, InvariantViolation


def names(categories):
    return [c.name for c in categories]


class TestAddRemove:

    def test_add_inserts_at_front(self):
        categories = CategoryList([LabelCategory("A")])
        new = categories.add()
        assert categories[0] is new
        assert names(categories) == ["Category 2", "A"]

    def test_add_repeatedly_keeps_newest_first(self):
        categories = CategoryList([LabelCategory("A")])
        first = categories.add()
        second = categories.add()
        assert list(categories) == [second, first, categories[2]]
        assert second.name != first.name

    def test_new_category_has_default_style(self):
        categories = CategoryList([LabelCategory("A")])
        new = categories.add()
        assert new.filter_expression == ""
        assert new.symbolizer.font_family == "Arial"

    def test_remove_last_category_raises_and_keeps_list(self):
        only = LabelCategory("A", filter_expression="[NAME] = 'x'")
        categories = CategoryList([only])
        with pytest.raises(InvariantViolation):
            categories.remove(only)
        assert len(categories) == 1
        assert categories[0] is only

    def test_remove_non_member_raises_value_error(self):
        categories = CategoryList([LabelCategory("A"), LabelCategory("B")])
        with pytest.raises(ValueError):
            categories.remove(LabelCategory("A"))
        assert len(categories) == 2

    def test_membership_is_by_identity(self):
        a = LabelCategory("A")
        categories = CategoryList([a])
        assert a in categories
        assert a.copy() not in categories

    def test_empty_allowance_follows_length(self):
        a = LabelCategory("A")
        categories = CategoryList([a])
        assert a.is_empty_allowed
        b = categories.add()
        assert not a.is_empty_allowed and not b.is_empty_allowed
        categories.remove(b)
        assert a.is_empty_allowed


class TestPromoteDemote:

    @pytest.fixture
    def categories(self):
        return CategoryList([LabelCategory("A"), LabelCategory("B"), LabelCategory("C")])

    def test_promote_first_is_noop(self, categories):
        categories.promote(categories[0])
        assert names(categories) == ["A", "B", "C"]

    def test_demote_last_is_noop(self, categories):
        categories.demote(categories[2])
        assert names(categories) == ["A", "B", "C"]

    def test_promote_swaps_with_previous(self, categories):
        categories.promote(categories[2])
        assert names(categories) == ["A", "C", "B"]

    def test_demote_swaps_with_next(self, categories):
        categories.demote(categories[0])
        assert names(categories) == ["B", "A", "C"]

    def test_unknown_category_is_ignored(self, categories):
        categories.promote(LabelCategory("X"))
        categories.demote(LabelCategory("X"))
        assert names(categories) == ["A", "B", "C"]


class TestValidateAll:

    def test_single_empty_filter_is_valid(self):
        CategoryList([LabelCategory("A")]).validate_all(["NAME"])

    def test_empty_filter_invalid_with_two_categories(self):
        a = LabelCategory("A", filter_expression="[NAME] = 'x'")
        b = LabelCategory("B")
        with pytest.raises(ExpressionInvalid) as info:
            CategoryList([a, b]).validate_all(["NAME"])
        assert info.value.category is b
        assert info.value.tab == EditorTab.MEMBERS

    def test_whitespace_filter_counts_as_empty(self):
        a = LabelCategory("A", filter_expression="[NAME] = 'x'")
        b = LabelCategory("B", filter_expression="   ")
        with pytest.raises(ExpressionInvalid):
            CategoryList([a, b]).validate_all(["NAME"])

    def test_first_failure_in_priority_order(self):
        a = LabelCategory("A", filter_expression="[NOPE] = 1")
        b = LabelCategory("B", filter_expression="")
        with pytest.raises(ExpressionInvalid) as info:
            CategoryList([a, b]).validate_all(["NAME"])
        assert info.value.category is a

    def test_label_expression_checked_before_filter(self):
        a = LabelCategory("A", expression="[NAME", filter_expression="")
        with pytest.raises(ExpressionInvalid) as info:
            CategoryList([a]).validate_all(["NAME"])
        assert info.value.tab == EditorTab.EXPRESSION

    def test_stale_empty_allowance_is_refreshed(self):
        a = LabelCategory("A", filter_expression="[NAME] = 'x'")
        b = LabelCategory("B")
        categories = CategoryList([a, b])
        b.is_empty_allowed = True
        with pytest.raises(ExpressionInvalid) as info:
            categories.validate_all(["NAME"])
        assert info.value.category is b
        assert not b.is_empty_allowed

    def test_allowance_restored_after_removal(self):
        a = LabelCategory("A")
        b = LabelCategory("B", filter_expression="[NAME] = 'x'")
        categories = CategoryList([a, b])
        categories.remove(b)
        assert a.is_empty_allowed
        categories.validate_all(["NAME"])

    def test_custom_validator_is_used(self):
        a = LabelCategory("A", filter_expression="anything")
        b = LabelCategory("B", filter_expression="goes")
        CategoryList([a, b]).validate_all((), validator=lambda text, fields: True)


class TestCopy:

    def test_copy_is_deep(self):
        a = LabelCategory("A", filter_expression="[NAME] = 'x'")
        categories = CategoryList([a])
        clone = categories.copy()
        clone[0].name = "changed"
        clone[0].symbolizer.font_color.setRed(200)
        assert a.name == "A"
        assert a.symbolizer.font_color.red() == 0

    def test_copy_properties_from_replaces_content_and_order(self):
        target = CategoryList([LabelCategory("A")])
        source = CategoryList([LabelCategory("X"), LabelCategory("Y")])
        target.copy_properties_from(source)
        assert names(target) == ["X", "Y"]
        assert target[0] is not source[0]
        assert not target[0].is_empty_allowed

    def test_str_falls_back_to_filter(self):
        assert str(LabelCategory(filter_expression="[NAME] = 'x'")) == "[NAME] = 'x'"
        assert str(LabelCategory()) == "(all)"
