"""
Filter and label-text expression validation.
"""

import pytest

from label_setup.core.labeling.expressions import validate_expression, validate_label_expression

FIELDS = ["NAME", "STATE_NAME", "POP2000"]


class TestFilterExpression:

    @pytest.mark.parametrize("text", [
        "[POP2000] > 10000",
        "[STATE_NAME] = 'Texas'",
        "[POP2000] > 10000 AND [STATE_NAME] <> 'Texas'",
        "NOT ([POP2000] < 5 OR [NAME] = 'O''Hare')",
        "[NAME] LIKE 'A%'",
        "[NAME] NOT LIKE 'A%'",
        "[STATE_NAME] IN ('Texas', 'Ohio')",
        "[NAME] IS NULL",
        "[pop2000] * 2 >= 1.5",
    ])
    def test_valid(self, text):
        assert validate_expression(text, FIELDS)

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "[POP2000] >",
        "[UNKNOWN] = 1",
        "[NAME] = 'open",
        "[NAME] = 1; DROP",
        "__import__('os')",
        "[NAME] = \"double\"",
    ])
    def test_invalid(self, text):
        assert not validate_expression(text, FIELDS)

    def test_any_field_accepted_without_table(self):
        assert validate_expression("[WHATEVER] = 1", ())

    def test_bare_word_is_a_field_reference(self):
        assert validate_expression("POP2000 > 1", FIELDS)
        assert not validate_expression("MISSING > 1", FIELDS)


class TestLabelExpression:

    def test_empty_is_valid(self):
        assert validate_label_expression("", FIELDS)

    def test_plain_text_is_valid(self):
        assert validate_label_expression("Capital", FIELDS)

    def test_field_placeholders(self):
        assert validate_label_expression("[NAME] ([POP2000])", FIELDS)

    @pytest.mark.parametrize("text", ["[NAME", "NAME]", "[[NAME]]", "[]", "[OTHER]"])
    def test_invalid(self, text):
        assert not validate_label_expression(text, FIELDS)


class TestFilterMustBeCondition:

    @pytest.mark.parametrize("text", [
        "[NAME]",
        "1",
        "()",
        "'abc'",
        "[POP2000] + 1",
        "(1, 2)",
        "NULL",
    ])
    def test_non_boolean_rejected(self, text):
        assert not validate_expression(text, FIELDS)

    @pytest.mark.parametrize("text", ["TRUE", "FALSE", "NOT [NAME] = 'x'", "([POP2000] > 1)"])
    def test_boolean_accepted(self, text):
        assert validate_expression(text, FIELDS)
