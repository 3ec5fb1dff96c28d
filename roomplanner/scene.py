from __future__ import annotations
import math
from typing import Dict

from PySide6.QtCore import Qt, QLineF, QRectF, Signal
from PySide6.QtGui import QColor, QPainter, QPen, QWheelEvent
from PySide6.QtWidgets import QApplication, QGraphicsScene, QGraphicsView

from .drag import DragController
from .items import FurniturePlanItem
from .state import LayoutState
from .transform import PlanMapping
from .utils import BG_COLOR, GRID_COLOR, GRID_STEP_M, PLAN_MARGIN_PX, PX_PER_METER, ROOM_BORDER


class PlanScene(QGraphicsScene):
    """Orthographic floor plan. Scene units are plan pixels, so
    ``event.scenePos()`` is exactly what ``PlanMapping`` expects."""

    def __init__(self, state: LayoutState, scale: float = PX_PER_METER, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.state = state
        self.mapping = PlanMapping(state.room.width, state.room.depth, scale)
        self.controller = DragController(state, self._locate, name="plan")
        self._items: Dict[int, FurniturePlanItem] = {}
        self.setItemIndexMethod(QGraphicsScene.NoIndex)
        state.subscribe(self.sync)
        self.sync()

    def _locate(self, sample, _plane_y: float):
        # the plan has no depth: every pixel maps straight onto the floor
        return self.mapping.screen_to_world(sample[0], sample[1])

    # ---- model -> graphics ----
    def sync(self):
        room = self.state.room
        if (room.width, room.depth) != (self.mapping.width, self.mapping.depth):
            self.mapping = PlanMapping(room.width, room.depth, self.mapping.scale)
        w, h = self.mapping.size_px()
        m = PLAN_MARGIN_PX
        self.setSceneRect(-m, -m, w + 2 * m, h + 2 * m)

        alive = set()
        for z, item in enumerate(self.state.furniture):
            alive.add(item.id)
            gi = self._items.get(item.id)
            if gi is None:
                gi = FurniturePlanItem(item.id)
                self._items[item.id] = gi
                self.addItem(gi)
            gi.sync(item, self.mapping, item.id == self.state.selection, float(z))
        for item_id in [i for i in self._items if i not in alive]:
            self.removeItem(self._items.pop(item_id))
        self.update()

    def drawBackground(self, painter: QPainter, rect: QRectF):
        painter.fillRect(rect, QColor(BG_COLOR))
        w, h = self.mapping.size_px()
        room = QRectF(0, 0, w, h)
        painter.fillRect(room, QColor(self.state.floor_color))
        painter.setPen(QPen(QColor(GRID_COLOR), 1))
        step = GRID_STEP_M * self.mapping.scale
        for i in range(int(math.floor(w / step)) + 1):
            painter.drawLine(QLineF(i * step, 0, i * step, h))
        for j in range(int(math.floor(h / step)) + 1):
            painter.drawLine(QLineF(0, j * step, w, j * step))
        painter.setPen(QPen(QColor(ROOM_BORDER), 2)); painter.setBrush(Qt.NoBrush); painter.drawRect(room)

    # ---- pointer -> controller ----
    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            event.ignore(); return
        p = event.scenePos()
        self.controller.press((p.x(), p.y()))
        event.accept()

    def mouseMoveEvent(self, event):
        p = event.scenePos()
        self.controller.move((p.x(), p.y()))
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.controller.release()
        event.accept()

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.controller.cancel()
            event.accept(); return
        super().keyPressEvent(event)

    def pointer_left(self):
        self.controller.leave()

    def detach(self):
        self.state.unsubscribe(self.sync)


class PlanView(QGraphicsView):
    scaleChanged = Signal(float)  # current m11()

    def __init__(self, scene: PlanScene):
        super().__init__(scene)
        self.setRenderHint(QPainter.Antialiasing, True)
        self.setViewportUpdateMode(QGraphicsView.FullViewportUpdate)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.AnchorViewCenter)

    def leaveEvent(self, event):
        scene = self.scene()
        if isinstance(scene, PlanScene):
            scene.pointer_left()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        if QApplication.keyboardModifiers() & Qt.ControlModifier:
            factor = 1.15 if event.angleDelta().y() > 0 else 1.0 / 1.15
            self.scale(factor, factor)
            self.scaleChanged.emit(self.transform().m11())
            event.accept()
            return
        super().wheelEvent(event)
