"""
Application entry point.

``pdflyer [file.pdf]`` opens the editor; ``pdflyer merge ...`` and
``pdflyer split ...`` run the command line tools.
"""
import logging
import sys

from PyQt5.QtWidgets import QApplication

from pdflyer.cli import COMMANDS, run, setup_logging
from pdflyer.config import load_config
from pdflyer.controllers import EditorController
from pdflyer.core.editor import EditorSession
from pdflyer.core.signatures import JsonFileStorage, SignatureStore
from pdflyer.ui import MainWindow

logger = logging.getLogger(__name__)


def launch_editor(file_path=None, config=None) -> int:
    """Start the Qt event loop with the editor window."""
    config = config or load_config()
    app = QApplication(sys.argv)

    store = SignatureStore(JsonFileStorage(), config.signature_storage_key)
    session = EditorSession(store, config)
    controller = EditorController(session)

    window = MainWindow(controller, file_path)
    window.show()
    exit_code = app.exec_()
    session.close_document()
    return exit_code


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()
    config = load_config()

    if argv and argv[0] in COMMANDS + ("-h", "--help", "--log-level"):
        sys.exit(run(argv, config))

    file_path = argv[0] if argv else None
    logger.info("Starting editor%s", f" with {file_path}" if file_path else "")
    sys.exit(launch_editor(file_path, config))


if __name__ == '__main__':
    main()
