#!/usr/bin/env python3
from __future__ import annotations
import argparse, logging, os, sys

from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication, QDockWidget, QLabel, QLineEdit, QMainWindow, QMessageBox,
    QSplitter, QStatusBar, QStyle, QToolBar, QWidget, QVBoxLayout
)

from roomplanner import DesignStore, EditorSession, default_store_path
from roomplanner.properties import PropertyPanel
from roomplanner.scene import PlanScene, PlanView
from roomplanner.viewport import PerspectiveView

LOG_LEVEL_ENV = "ROOMPLANNER_LOG_LEVEL"

log = logging.getLogger("roomplanner")


def _titled(title: str, body: QWidget) -> QWidget:
    box = QWidget()
    lay = QVBoxLayout(box)
    lay.setContentsMargins(0, 0, 0, 0); lay.setSpacing(2)
    lbl = QLabel(f"  {title}")
    lbl.setStyleSheet("color:#667085; font-weight:600;")
    lay.addWidget(lbl); lay.addWidget(body, 1)
    return box


class MainWindow(QMainWindow):
    def __init__(self, session: EditorSession):
        super().__init__()
        self.session = session
        self.resize(1380, 860)
        self.setStatusBar(QStatusBar(self))

        # 1) views: perspective on the left, plan on the right
        self.view3d = PerspectiveView(session.state)
        self.scene = PlanScene(session.state)
        self.view2d = PlanView(self.scene)
        split = QSplitter(Qt.Horizontal, self)
        split.addWidget(_titled("3D View (right-drag to orbit)", self.view3d))
        split.addWidget(_titled("2D Floor Plan", self.view2d))
        split.setSizes([760, 520])
        self.setCentralWidget(split)

        # 2) properties
        self.props_panel = PropertyPanel(session, self)
        self.props_dock = QDockWidget("Properties", self)
        self.props_dock.setWidget(self.props_panel)
        self.props_dock.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.props_dock.setMinimumWidth(280)
        self.props_dock.setMaximumWidth(420)
        self.addDockWidget(Qt.RightDockWidgetArea, self.props_dock)

        # 3) toolbar
        self._build_toolbar()
        self.view2d.scaleChanged.connect(lambda s: self._status(f"Plan zoom: {int(s * 100)}%"))
        self._update_title()

    def _build_toolbar(self):
        tb = QToolBar("Design", self)
        tb.setMovable(False)
        tb.setToolButtonStyle(Qt.ToolButtonTextBesideIcon)
        self.addToolBar(Qt.TopToolBarArea, tb)
        style = self.style()

        self.ed_name = QLineEdit(self.session.name)
        self.ed_name.setMaximumWidth(260)
        self.ed_name.setPlaceholderText("Design name")
        self.ed_name.editingFinished.connect(self._apply_name)
        tb.addWidget(QLabel(" Name: "))
        tb.addWidget(self.ed_name)
        tb.addSeparator()

        self.act_save = QAction(style.standardIcon(QStyle.SP_DialogSaveButton), "Save Design", self)
        self.act_save.setShortcut(QKeySequence("Ctrl+S"))
        self.act_save.triggered.connect(self._save)
        tb.addAction(self.act_save)

        self.act_delete = QAction(style.standardIcon(QStyle.SP_TrashIcon), "Delete", self)
        self.act_delete.triggered.connect(self.session.delete_selected)
        tb.addAction(self.act_delete)

        self.act_toggle_props = self.props_dock.toggleViewAction()
        self.act_toggle_props.setText("Properties")
        tb.addSeparator()
        tb.addAction(self.act_toggle_props)

    def _apply_name(self):
        self.session.rename(self.ed_name.text())
        self.ed_name.setText(self.session.name)
        self._update_title()

    def _save(self):
        self._apply_name()
        if not self.session.save():
            QMessageBox.warning(self, "Error saving design",
                                f"There was a problem saving your design. Please try again.\n\n{self.session.last_error}")

    def _update_title(self):
        self.setWindowTitle(f"Room Planner: {self.session.name}")

    def _status(self, text: str):
        self.statusBar().showMessage(text, 3000)

    def closeEvent(self, event):
        self.view3d.stop()
        self.scene.detach()
        self.props_panel.detach()
        super().closeEvent(event)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Furniture layout editor with linked 3D and plan views.")
    parser.add_argument("design_id", nargs="?", default="default", help="design to open (created if missing)")
    parser.add_argument("--store", help="path of the designs JSON file")
    args, qt_args = parser.parse_known_args(argv)

    logging.basicConfig(
        level=os.getenv(LOG_LEVEL_ENV, "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication([sys.argv[0]] + qt_args)
    settings = QSettings("RoomPlanner", "Editor")
    if args.store:
        settings.setValue("store_path", args.store)
    path = args.store or default_store_path(settings.value("store_path", None, type=str))
    log.info("design store: %s", path)

    win = None

    def status(text: str):
        if win is not None:
            win._status(text)

    session = EditorSession(DesignStore(path), args.design_id, status_cb=status)
    session.load()
    win = MainWindow(session)
    win.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
