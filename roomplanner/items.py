from __future__ import annotations
import math
from PySide6.QtCore import Qt, QRectF
from PySide6.QtGui import QBrush, QColor, QPainter, QPen
from PySide6.QtWidgets import QGraphicsRectItem

from .hittest import footprint
from .models import FurnitureItem, FurnitureKind
from .transform import PlanMapping
from .utils import ITEM_BORDER, SELECT_BORDER

CHAIR_BACK_M = 0.15   # depth of the back-rest marker drawn behind a chair


class FurniturePlanItem(QGraphicsRectItem):
    """Top-down footprint of one furniture item.

    Purely visual: selection and dragging go through the scene's controller,
    so the item takes no mouse buttons and carries no movable/selectable flags.
    """

    def __init__(self, item_id: int):
        super().__init__()
        self.item_id = item_id
        self.kind = FurnitureKind.CHAIR
        self.selected = False
        self._back = QRectF()
        self.setAcceptedMouseButtons(Qt.NoButton)
        self.setAcceptHoverEvents(False)

    def sync(self, item: FurnitureItem, mapping: PlanMapping, selected: bool, z: float):
        hx, hz = footprint(item)
        s = mapping.scale
        self.kind = item.kind
        self.selected = selected
        self.prepareGeometryChange()
        self.setRect(QRectF(-hx * s, -hz * s, 2 * hx * s, 2 * hz * s))
        self._back = QRectF(-hx * s, -hz * s - CHAIR_BACK_M * s, 2 * hx * s, CHAIR_BACK_M * s)
        px, py = mapping.world_to_screen(item.position[0], item.position[2])
        self.setPos(px, py)
        self.setRotation(math.degrees(item.rotation))
        self.setBrush(QBrush(QColor(item.color)))
        self.setPen(QPen(QColor(SELECT_BORDER), 2) if selected else QPen(QColor(ITEM_BORDER), 1))
        self.setZValue(z)
        self.setToolTip(f"{item.kind.capitalize()} #{item.id}")
        self.update()

    def boundingRect(self) -> QRectF:
        r = super().boundingRect()
        return r.united(self._back.adjusted(-2, -2, 2, 2)) if self.kind == FurnitureKind.CHAIR else r

    def paint(self, painter: QPainter, option, widget=None):
        painter.setRenderHint(QPainter.Antialiasing, True)
        painter.setPen(self.pen())
        painter.setBrush(self.brush())
        painter.drawRect(self.rect())
        if self.kind == FurnitureKind.CHAIR:
            painter.drawRect(self._back)
