# NOTE: setup_error_handling must be called BEFORE other label_setup imports
# so rich traceback handling is installed globally first.
from label_setup.main_setup import setup_error_handling
setup_error_handling()

import sys
import logging

from PyQt6.QtWidgets import QApplication
from rich.console import Console

from label_setup.core.labeling.layer import LabelLayer
from label_setup.core.version import VERSION_STRING
from label_setup.ui.label_setup_dialog import LabelSetupDialog

SAMPLE_FIELDS = ["NAME", "STATE_NAME", "POP2000", "ROTATION"]


def main():
    try:
        app = QApplication(sys.argv)
        app.setApplicationName(VERSION_STRING)

        layer = LabelLayer(fields=SAMPLE_FIELDS)
        layer.categories[0].expression = "[NAME]"

        dialog = LabelSetupDialog(layer)
        dialog.changes_applied.connect(
            lambda: logging.info(f"Layer now has {len(layer.categories)} categories"))
        dialog.show()
        logging.info(f"Launched {VERSION_STRING}.")

        sys.exit(app.exec())
    except Exception:
        logging.error("Fatal error in main loop", exc_info=True)
        Console().print_exception(show_locals=True)


if __name__ == "__main__":
    main()
