# main.py

from PyQt5.QtWidgets import QApplication
from mainwindow import MainWindow
import logging
import os
import sys

def main():
    logging.basicConfig(
        level=os.environ.get("FOODWEB_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = QApplication(sys.argv)
    app.setApplicationName("Food Web Builder")
    window = MainWindow()
    window.resize(1280, 860)
    window.show()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()
