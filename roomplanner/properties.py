from __future__ import annotations
import math
from typing import Callable, List

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QColorDialog, QDoubleSpinBox, QFormLayout, QGroupBox, QHBoxLayout, QLabel,
    QPushButton, QSlider, QVBoxLayout, QWidget
)

from .models import FurnitureKind
from .session import EditorSession
from .utils import (LIGHT_RANGE, ROOM_DEPTH_RANGE, ROOM_HEIGHT_RANGE, ROOM_WIDTH_RANGE,
                    ROTATION_DEG_RANGE, ROTATION_DEG_STEP, SLIDER_STEP, TABLE_SIZE_RANGE, snap)

LIGHT_TICKS = 100   # light slider works in hundredths


def _spin(lo: float, hi: float, step: float = SLIDER_STEP, suffix: str = " m") -> QDoubleSpinBox:
    s = QDoubleSpinBox()
    s.setRange(lo, hi); s.setDecimals(2); s.setSingleStep(step); s.setSuffix(suffix)
    s.setKeyboardTracking(False)
    return s


class ColorButton(QPushButton):
    """Swatch that opens a colour dialog and hands back "#rrggbb"."""

    def __init__(self, on_pick: Callable[[str], None], title: str, parent=None):
        super().__init__(parent)
        self._on_pick = on_pick
        self._title = title
        self._value = "#ffffff"
        self.setFixedHeight(24)
        self.clicked.connect(self._pick)

    def set_value(self, value: str):
        self._value = value
        self.setText(value)
        self.setStyleSheet(f"background:{value}; border:1px solid #666;")

    def _pick(self):
        col = QColorDialog.getColor(QColor(self._value), self, self._title)
        if col.isValid():
            self._on_pick(col.name())


class PropertyPanel(QWidget):
    """Room settings, add buttons and the selected item's editor.

    Reads everything back from the model on each change notification; while
    refreshing, widget signals are blocked so nothing is written back.
    """

    def __init__(self, session: EditorSession, parent=None):
        super().__init__(parent)
        self.session = session
        self.state = session.state

        self.setMinimumWidth(280)
        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(10)

        # ------- Room -------
        self.grp_room = QGroupBox("Room Settings")
        fr = QFormLayout(self.grp_room)
        fr.setLabelAlignment(Qt.AlignRight)
        self.sp_room_w = _spin(*ROOM_WIDTH_RANGE)
        self.sp_room_h = _spin(*ROOM_HEIGHT_RANGE)
        self.sp_room_d = _spin(*ROOM_DEPTH_RANGE)
        self.btn_wall = ColorButton(self.session.set_wall_color, "Wall color")
        self.btn_floor = ColorButton(self.session.set_floor_color, "Floor color")
        self.sl_light = QSlider(Qt.Horizontal)
        self.sl_light.setRange(int(LIGHT_RANGE[0] * LIGHT_TICKS), int(LIGHT_RANGE[1] * LIGHT_TICKS))
        self.sl_light.setSingleStep(int(SLIDER_STEP * LIGHT_TICKS))
        self.lbl_light = QLabel()
        fr.addRow("Width:", self.sp_room_w)
        fr.addRow("Height:", self.sp_room_h)
        fr.addRow("Depth:", self.sp_room_d)
        fr.addRow("Wall color:", self.btn_wall)
        fr.addRow("Floor color:", self.btn_floor)
        light_row = QHBoxLayout(); light_row.addWidget(self.sl_light, 1); light_row.addWidget(self.lbl_light)
        fr.addRow("Light:", light_row)

        self.sp_room_w.valueChanged.connect(lambda v: self.session.set_room_dimension("width", v))
        self.sp_room_h.valueChanged.connect(lambda v: self.session.set_room_dimension("height", v))
        self.sp_room_d.valueChanged.connect(lambda v: self.session.set_room_dimension("depth", v))
        self.sl_light.valueChanged.connect(lambda v: self.session.set_light_intensity(v / LIGHT_TICKS))
        root.addWidget(self.grp_room)

        # ------- Add -------
        self.grp_add = QGroupBox("Add Furniture")
        fa = QHBoxLayout(self.grp_add)
        self.btn_add_chair = QPushButton("Add Chair")
        self.btn_add_table = QPushButton("Add Table")
        self.btn_add_chair.clicked.connect(lambda: self.session.add_furniture(FurnitureKind.CHAIR))
        self.btn_add_table.clicked.connect(lambda: self.session.add_furniture(FurnitureKind.TABLE))
        fa.addWidget(self.btn_add_chair); fa.addWidget(self.btn_add_table)
        root.addWidget(self.grp_add)

        # ------- Selected item -------
        self.grp_item = QGroupBox("Edit Furniture")
        fi = QFormLayout(self.grp_item)
        fi.setLabelAlignment(Qt.AlignRight)
        self.lbl_kind = QLabel("-")
        self.lbl_kind.setStyleSheet("font-weight: 600;")
        self.sp_x = _spin(-ROOM_WIDTH_RANGE[1] / 2, ROOM_WIDTH_RANGE[1] / 2)
        self.sp_z = _spin(-ROOM_DEPTH_RANGE[1] / 2, ROOM_DEPTH_RANGE[1] / 2)
        self.btn_color = ColorButton(self._apply_color, "Furniture color")
        self.sl_rot = QSlider(Qt.Horizontal)
        self.sl_rot.setRange(int(ROTATION_DEG_RANGE[0]), int(ROTATION_DEG_RANGE[1]))
        self.sl_rot.setSingleStep(int(ROTATION_DEG_STEP)); self.sl_rot.setPageStep(int(ROTATION_DEG_STEP))
        self.sl_rot.setTickInterval(int(ROTATION_DEG_STEP) * 3); self.sl_rot.setTickPosition(QSlider.TicksBelow)
        self.lbl_rot = QLabel("0°")
        self.sp_tw = _spin(*TABLE_SIZE_RANGE)
        self.sp_td = _spin(*TABLE_SIZE_RANGE)
        self.btn_delete = QPushButton("Delete")
        self.btn_delete.setStyleSheet("color:#b42318;")

        fi.addRow("Type:", self.lbl_kind)
        fi.addRow("X:", self.sp_x)
        fi.addRow("Z:", self.sp_z)
        fi.addRow("Color:", self.btn_color)
        rot_row = QHBoxLayout(); rot_row.addWidget(self.sl_rot, 1); rot_row.addWidget(self.lbl_rot)
        fi.addRow("Rotation:", rot_row)
        self.lbl_tw = QLabel("Width:"); self.lbl_td = QLabel("Depth:")
        fi.addRow(self.lbl_tw, self.sp_tw)
        fi.addRow(self.lbl_td, self.sp_td)
        fi.addRow(self.btn_delete)

        self.sp_x.valueChanged.connect(lambda v: self._with_selection(lambda i: self.session.set_position(i, x=v)))
        self.sp_z.valueChanged.connect(lambda v: self._with_selection(lambda i: self.session.set_position(i, z=v)))
        self.sl_rot.valueChanged.connect(self._apply_rotation)
        self.sp_tw.valueChanged.connect(lambda v: self._with_selection(lambda i: self.session.set_table_size(i, width=v)))
        self.sp_td.valueChanged.connect(lambda v: self._with_selection(lambda i: self.session.set_table_size(i, depth=v)))
        self.btn_delete.clicked.connect(self.session.delete_selected)
        root.addWidget(self.grp_item)

        self.lbl_hint = QLabel("Select an item in either view to edit it.")
        self.lbl_hint.setWordWrap(True)
        self.lbl_hint.setStyleSheet("color:#667085;")
        root.addWidget(self.lbl_hint)
        root.addStretch(1)

        self.state.subscribe(self.refresh)
        self.refresh()

    def _controls(self) -> List[QWidget]:
        return [self.sp_room_w, self.sp_room_h, self.sp_room_d, self.sl_light,
                self.sp_x, self.sp_z, self.sl_rot, self.sp_tw, self.sp_td]

    # ---------- model -> widgets ----------
    def refresh(self):
        for w in self._controls():
            w.blockSignals(True)
        try:
            room = self.state.room
            self.sp_room_w.setValue(room.width)
            self.sp_room_h.setValue(room.height)
            self.sp_room_d.setValue(room.depth)
            self.btn_wall.set_value(self.state.wall_color)
            self.btn_floor.set_value(self.state.floor_color)
            self.sl_light.setValue(int(round(self.state.light_intensity * LIGHT_TICKS)))
            self.lbl_light.setText(f"{self.state.light_intensity:.1f}")

            item = self.state.selected_item()
            self.grp_item.setVisible(item is not None)
            self.lbl_hint.setVisible(item is None)
            if item is None:
                return
            self.lbl_kind.setText(item.kind.capitalize())
            bx, bz = self.state.bounds_for(item)
            self.sp_x.setRange(-bx, bx); self.sp_z.setRange(-bz, bz)
            self.sp_x.setValue(item.position[0])
            self.sp_z.setValue(item.position[2])
            self.btn_color.set_value(item.color)
            deg = int(round(math.degrees(item.rotation)))
            self.sl_rot.setValue(deg)
            self.lbl_rot.setText(f"{deg}°")
            is_table = item.size is not None
            for w in (self.lbl_tw, self.sp_tw, self.lbl_td, self.sp_td):
                w.setVisible(is_table)
            if is_table:
                self.sp_tw.setMaximum(min(TABLE_SIZE_RANGE[1], room.width))
                self.sp_td.setMaximum(min(TABLE_SIZE_RANGE[1], room.depth))
                self.sp_tw.setValue(item.size[0])
                self.sp_td.setValue(item.size[2])
        finally:
            for w in self._controls():
                w.blockSignals(False)

    # ---------- widgets -> session ----------
    def _with_selection(self, fn: Callable[[int], None]):
        sel = self.state.selection
        if sel is not None:
            fn(sel)

    def _apply_color(self, value: str):
        self._with_selection(lambda i: self.session.set_color(i, value))

    def _apply_rotation(self, deg: int):
        snapped = snap(deg, ROTATION_DEG_STEP)
        self._with_selection(lambda i: self.session.set_rotation_degrees(i, snapped))

    def detach(self):
        self.state.unsubscribe(self.refresh)
