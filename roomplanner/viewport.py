from __future__ import annotations
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PySide6.QtCore import Qt, QPointF, QTimer
from PySide6.QtGui import QColor, QFont, QPainter, QPen, QPolygonF, QWheelEvent
from PySide6.QtWidgets import QWidget

from .drag import DragController
from .models import FurnitureItem, FurnitureKind
from .state import LayoutState
from .transform import PerspectiveCamera, Ray
from .utils import (BG_COLOR, FRAME_INTERVAL_MS, ITEM_BORDER, ORBIT_SPEED,
                    SELECT_BORDER, ZOOM_STEP, clamp)

# (local cx, local cz, width, depth, y0, y1) boxes that make up each kind
TABLE_TOP_Y = 0.5
LEG = 0.1


def parts_for(item: FurnitureItem) -> List[Tuple[float, float, float, float, float, float]]:
    if item.kind == FurnitureKind.CHAIR:
        return [
            (0.0, 0.0, 0.5, 0.5, 0.0, 0.275),          # seat + legs
            (0.0, -0.225, 0.5, 0.05, 0.275, 0.85),      # back rest
        ]
    w, t, d = item.size
    parts = [(0.0, 0.0, w, d, TABLE_TOP_Y - t / 2.0, TABLE_TOP_Y + t / 2.0)]
    for sx in (-1, 1):
        for sz in (-1, 1):
            parts.append((sx * (w / 2 - LEG / 2), sz * (d / 2 - LEG / 2), LEG, LEG, 0.0, TABLE_TOP_Y - t / 2.0))
    return parts


def box_corners(item: FurnitureItem, part) -> np.ndarray:
    """8 world-space corners; rotation turns local +x toward +z, as on the plan."""
    cx, cz, w, d, y0, y1 = part
    c, s = math.cos(item.rotation), math.sin(item.rotation)
    x0, z0 = item.position[0], item.position[2]
    by = item.position[1]
    out = []
    for y in (y0, y1):
        for lx, lz in ((-w / 2, -d / 2), (w / 2, -d / 2), (w / 2, d / 2), (-w / 2, d / 2)):
            px, pz = cx + lx, cz + lz
            out.append((x0 + px * c - pz * s, by + y, z0 + px * s + pz * c))
    return np.array(out)


# faces as corner indices with a relative brightness
BOX_FACES = (
    ((4, 5, 6, 7), 1.00),   # top
    ((0, 1, 5, 4), 0.70),
    ((1, 2, 6, 5), 0.80),
    ((2, 3, 7, 6), 0.70),
    ((3, 0, 4, 7), 0.80),
)


def shade(color: QColor, factor: float) -> QColor:
    return QColor.fromRgbF(clamp(color.redF() * factor, 0.0, 1.0),
                           clamp(color.greenF() * factor, 0.0, 1.0),
                           clamp(color.blueF() * factor, 0.0, 1.0))


class PerspectiveView(QWidget):
    """3D view drawn with QPainter through ``PerspectiveCamera``.

    A frame timer drives both rendering and the drag: while the controller is
    dragging, every frame re-casts the ray under the last known pointer, so the
    item follows even when no new mouse event arrives.
    """

    def __init__(self, state: LayoutState, parent=None):
        super().__init__(parent)
        self.state = state
        self.camera = PerspectiveCamera()
        self.controller = DragController(state, self._locate, name="3d")
        self._pointer: Optional[QPointF] = None
        self._orbit_last: Optional[QPointF] = None
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setMinimumSize(320, 240)
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_frame)
        self._timer.start(FRAME_INTERVAL_MS)

    @staticmethod
    def _locate(ray: Ray, plane_y: float):
        return ray.intersect_plane_y(plane_y)

    def ray_at(self, pos: QPointF) -> Ray:
        nx, ny = self.camera.screen_to_ndc(pos.x(), pos.y(), max(1, self.width()), max(1, self.height()))
        return self.camera.ray_from_ndc(nx, ny)

    def _on_frame(self):
        if self.controller.dragging and self._pointer is not None:
            self.controller.tick(self.ray_at(self._pointer))
        self.update()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.camera.aspect = max(1, self.width()) / float(max(1, self.height()))

    # ---- input ----
    def mousePressEvent(self, event):
        pos = event.position()
        self._pointer = pos
        if event.button() == Qt.LeftButton:
            self.controller.press(self.ray_at(pos))
        elif event.button() == Qt.RightButton:
            self._orbit_last = pos

    def mouseMoveEvent(self, event):
        pos = event.position()
        # no drag update here; the frame tick picks the pointer up
        self._pointer = pos
        if self._orbit_last is not None:
            d = pos - self._orbit_last
            self.camera.orbit(-d.x() * ORBIT_SPEED, d.y() * ORBIT_SPEED)
            self._orbit_last = pos

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.controller.release()
        elif event.button() == Qt.RightButton:
            self._orbit_last = None

    def leaveEvent(self, event):
        self.controller.leave()
        self._pointer = None
        self._orbit_last = None
        super().leaveEvent(event)

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.controller.cancel()
            return
        super().keyPressEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        self.camera.zoom(1.0 / ZOOM_STEP if event.angleDelta().y() > 0 else ZOOM_STEP)
        event.accept()

    # ---- rendering ----
    def _polygon(self, pts: Sequence[Sequence[float]]) -> Optional[QPolygonF]:
        """Screen polygon, or None when any corner is behind the camera.

        Faces are not clipped against the near plane, so with the camera
        inside the room a wall or floor face that crosses it is skipped.
        """
        w, h = self.width(), self.height()
        out = []
        for p in pts:
            s = self.camera.to_screen(p, w, h)
            if s is None:
                return None
            out.append(QPointF(*s))
        return QPolygonF(out)

    def _light(self) -> float:
        # ambient plus one directional light, both scaled by intensity
        return clamp(0.45 + 0.35 * self.state.light_intensity, 0.2, 1.3)

    def paintEvent(self, event):
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing, True)
        p.fillRect(self.rect(), QColor(BG_COLOR))
        light = self._light()
        room = self.state.room
        hw, hd, H = room.width / 2.0, room.depth / 2.0, room.height
        floor = QColor(self.state.floor_color)
        wall = QColor(self.state.wall_color)

        faces = [
            ([(-hw, 0, -hd), (hw, 0, -hd), (hw, 0, hd), (-hw, 0, hd)], shade(floor, light)),
            ([(-hw, 0, -hd), (hw, 0, -hd), (hw, H, -hd), (-hw, H, -hd)], shade(wall, light * 0.95)),
            ([(-hw, 0, -hd), (-hw, 0, hd), (-hw, H, hd), (-hw, H, -hd)], shade(wall, light * 0.85)),
            ([(hw, 0, -hd), (hw, 0, hd), (hw, H, hd), (hw, H, -hd)], shade(wall, light * 0.85)),
        ]
        p.setPen(QPen(QColor(ITEM_BORDER), 0.5))
        for pts, col in faces:
            poly = self._polygon(pts)
            if poly is not None:
                p.setBrush(col); p.drawPolygon(poly)

        # furniture faces, far to near
        cam = self.camera.position
        selected = self.state.selection
        polys = []
        for item in self.state.furniture:
            base = QColor(item.color)
            for part in parts_for(item):
                corners = box_corners(item, part)
                for idx, k in BOX_FACES:
                    quad = corners[list(idx)]
                    depth = float(np.linalg.norm(quad.mean(axis=0) - cam))
                    polys.append((depth, quad, shade(base, light * k), item.id == selected))
        polys.sort(key=lambda t: -t[0])
        sel_pen = QPen(QColor(SELECT_BORDER), 2)
        pen = QPen(QColor(ITEM_BORDER), 0.5)
        for _, quad, col, is_sel in polys:
            poly = self._polygon(quad)
            if poly is None:
                continue
            p.setPen(sel_pen if is_sel else pen); p.setBrush(col)
            p.drawPolygon(poly)

        item = self.state.selected_item()
        if item is not None:
            anchor = self.camera.to_screen((item.position[0], item.spec.height + 0.15, item.position[2]),
                                           self.width(), self.height())
            if anchor is not None:
                text = "Dragging..." if self.controller.dragging else "Click and drag to move"
                p.setFont(QFont("", 8, QFont.DemiBold))
                fm = p.fontMetrics()
                tw = fm.horizontalAdvance(text) + 12
                th = fm.height() + 6
                x, y = anchor[0] - tw / 2, anchor[1] - th
                p.setPen(Qt.NoPen); p.setBrush(QColor(SELECT_BORDER))
                p.drawRoundedRect(x, y, tw, th, 4, 4)
                p.setPen(QColor(255, 255, 255))
                p.drawText(int(x), int(y), int(tw), int(th), Qt.AlignCenter, text)
        p.end()

    def stop(self):
        self._timer.stop()
