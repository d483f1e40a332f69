"""
Label setup dialog wiring: remove refusal, invalid-expression focus,
tab help and change notification. Runs on the offscreen Qt platform.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QSettings
from PyQt6.QtWidgets import QApplication, QDialog, QMessageBox

from label_setup.core.lang_manager import get_lang_manager
from label_setup.core.labeling.categories import EditorTab
from label_setup.core.labeling.projector import EditorField
from label_setup.ui.label_setup_dialog import LabelSetupDialog


@pytest.fixture(scope="module")
def qapp(tmp_path_factory):
    settings_dir = tmp_path_factory.mktemp("settings")
    QSettings.setPath(QSettings.Format.NativeFormat, QSettings.Scope.UserScope, str(settings_dir))
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def message_boxes(monkeypatch):
    """Texts of message boxes the dialog tried to show."""
    shown = []

    def fake_exec(box):
        shown.append((box.icon(), box.text()))
        return QMessageBox.StandardButton.Ok

    monkeypatch.setattr(QMessageBox, "exec", fake_exec)
    return shown


@pytest.fixture
def make_dialog(qapp, resolver):
    def _make(layer):
        return LabelSetupDialog(layer, resolver=resolver)
    return _make


class TestConstruction:

    def test_building_does_not_touch_working_copy(self, make_dialog, layer):
        dialog = make_dialog(layer)
        assert dialog.session.working.to_dict() == layer.categories.to_dict()
        assert dialog.category_list.count() == 2
        assert dialog.category_list.currentRow() == 0

    def test_widgets_show_active_category(self, make_dialog, layer):
        dialog = make_dialog(layer)
        assert dialog._widgets[EditorField.FILTER_EXPRESSION].text() == "[POP2000] > 10000"
        assert dialog._widgets[EditorField.FONT_SIZE].currentText() == "10"

    def test_widget_edit_reaches_working_copy(self, make_dialog, layer):
        dialog = make_dialog(layer)
        dialog._widgets[EditorField.FILTER_EXPRESSION].setText("[NAME] = 'Austin'")
        assert dialog.session.active.filter_expression == "[NAME] = 'Austin'"
        assert layer.categories[0].filter_expression == "[POP2000] > 10000"


class TestRemove:

    def test_removing_last_category_shows_error(self, make_dialog, make_layer, message_boxes):
        layer = make_layer("[NAME] = 'a'")
        dialog = make_dialog(layer)
        dialog.remove_btn.click()
        assert len(message_boxes) == 1
        icon, text = message_boxes[0]
        assert icon == QMessageBox.Icon.Critical
        assert text == "At least one category is needed."
        assert len(dialog.session.working) == 1
        assert dialog.category_list.count() == 1

    def test_remove_selected_category(self, make_dialog, layer, message_boxes):
        dialog = make_dialog(layer)
        dialog.remove_btn.click()
        assert message_boxes == []
        assert dialog.category_list.count() == 1
        assert dialog.session.working[0].filter_expression == "[STATE_NAME] = 'Texas'"

    def test_add_selects_new_category(self, make_dialog, layer):
        dialog = make_dialog(layer)
        dialog.add_btn.click()
        assert dialog.category_list.count() == 3
        assert dialog.category_list.currentRow() == 0
        assert dialog.session.active is dialog.session.working[0]


class TestInvalidExpression:

    def test_apply_focuses_failing_filter(self, make_dialog, make_layer, message_boxes):
        layer = make_layer("[NAME] = 'a'", "[NOPE] = 1")
        dialog = make_dialog(layer)
        dialog.tabs.setCurrentWidget(dialog._tab_pages[EditorTab.BASIC])

        dialog.apply_btn.click()

        assert [icon for icon, _text in message_boxes] == [QMessageBox.Icon.Warning]
        assert dialog.session.active is dialog.session.working[1]
        assert dialog.category_list.currentRow() == 1
        assert dialog.tabs.currentWidget() is dialog._tab_pages[EditorTab.MEMBERS]
        assert layer.rebuild_count == 0

    def test_ok_focuses_failing_label_text(self, make_dialog, make_layer, message_boxes):
        layer = make_layer("[NAME] = 'a'", "[NAME] = 'b'")
        layer.categories[1].expression = "[NAME"
        dialog = make_dialog(layer)

        dialog.ok_btn.click()

        assert len(message_boxes) == 1
        assert dialog.session.is_open
        assert dialog.session.active is dialog.session.working[1]
        assert dialog.tabs.currentWidget() is dialog._tab_pages[EditorTab.EXPRESSION]


class TestHelp:

    @pytest.mark.parametrize("tab", list(EditorTab))
    def test_each_tab_shows_its_help(self, make_dialog, layer, tab):
        dialog = make_dialog(layer)
        dialog.tabs.setCurrentWidget(dialog._tab_pages[tab])
        expected = get_lang_manager().get_tab_help(tab.value)
        assert expected
        assert dialog.help_label.text() == expected
        assert not dialog.help_label.isHidden()


class TestCommit:

    def test_apply_reemits_changes_applied(self, make_dialog, layer, message_boxes):
        dialog = make_dialog(layer)
        applied = []
        dialog.changes_applied.connect(lambda: applied.append(layer.rebuild_count))
        dialog._widgets[EditorField.FLOATING_FORMAT].setText("N1")

        dialog.apply_btn.click()

        assert applied == [1]
        assert layer.categories[0].symbolizer.floating_format == "N1"
        assert dialog.session.is_open
        assert message_boxes == []

    def test_ok_commits_and_accepts(self, make_dialog, layer):
        dialog = make_dialog(layer)
        dialog.ok_btn.click()
        assert not dialog.session.is_open
        assert dialog.result() == QDialog.DialogCode.Accepted.value
        assert layer.rebuild_count == 1

    def test_cancel_discards(self, make_dialog, layer):
        before = layer.categories.to_dict()
        dialog = make_dialog(layer)
        dialog._widgets[EditorField.FILTER_EXPRESSION].setText("[NAME] = 'x'")
        dialog.cancel_btn.click()
        assert not dialog.session.is_open
        assert dialog.result() == QDialog.DialogCode.Rejected.value
        assert layer.categories.to_dict() == before
