"""
Shared UI Styles for the label setup dialog.

Usage:
    from label_setup.ui.styles import ButtonStyles
    btn.setStyleSheet(ButtonStyles.PRIMARY)
"""


class Colors:
    BG_DARK = "#2b2b2b"
    BG_MEDIUM = "#3b3b3b"
    PRIMARY = "#3498db"
    DANGER = "#e74c3c"
    TEXT_PRIMARY = "#ffffff"
    TEXT_SECONDARY = "#aaaaaa"
    BORDER_DEFAULT = "#555555"


class ButtonStyles:
    DEFAULT = """
        QPushButton {
            background-color: #3b3b3b;
            color: #fff;
            border: 1px solid #555;
            border-radius: 4px;
            padding: 2px 10px;
        }
        QPushButton:hover { background-color: #4a4a4a; border-color: #777; }
        QPushButton:disabled { background-color: #222; color: #555; border-color: #333; }
    """

    # Apply / OK
    PRIMARY = """
        QPushButton {
            background-color: #2980b9;
            color: #fff;
            border: 1px solid #3498db;
            border-radius: 4px;
            padding: 2px 10px;
        }
        QPushButton:hover { background-color: #3498db; border-color: #fff; }
        QPushButton:pressed { background-color: #1a5276; }
    """

    # Remove category
    DANGER = """
        QPushButton {
            background-color: #c0392b;
            color: #fff;
            border: 1px solid #e74c3c;
            border-radius: 4px;
            padding: 2px 10px;
        }
        QPushButton:hover { background-color: #e74c3c; }
    """

    @staticmethod
    def swatch(color_name: str, enabled: bool = True) -> str:
        """Colour button filled with the picked colour (#AARRGGBB is fine for Qt)."""
        border = Colors.BORDER_DEFAULT if enabled else "#333"
        return f"""
            QPushButton {{
                background-color: {color_name};
                border: 1px solid {border};
                border-radius: 3px;
                min-width: 40px;
                min-height: 18px;
            }}
            QPushButton:hover {{ border-color: {Colors.PRIMARY}; }}
        """


class LabelStyles:
    HELP = "QLabel { color: #aaaaaa; font-size: 11px; padding: 4px; }"

    @staticmethod
    def preview(text_color: str, back_color: str = None) -> str:
        back = f"background-color: {back_color};" if back_color else ""
        return f"QLabel {{ color: {text_color}; {back} border: 1px solid #555; padding: 6px; }}"


class DialogStyles:
    ENHANCED_MSG_BOX = """
        QMessageBox { background-color: #1e1e1e; border: 1px solid #444; color: white; }
        QLabel { color: white; font-size: 13px; background: transparent; }
        QPushButton {
            background-color: #3b3b3b; color: white; border: 1px solid #555;
            padding: 6px 16px; min-width: 100px; border-radius: 4px; font-weight: bold;
        }
        QPushButton:hover { background-color: #4a4a4a; border-color: #3498db; }
    """
