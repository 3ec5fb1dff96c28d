from __future__ import annotations
import logging, math
from dataclasses import replace
from typing import Callable, Optional

from .models import DesignRecord, FurnitureItem
from .state import LayoutState
from .store import DesignStore, PersistenceError, new_record, now_iso
from .utils import (DEFAULT_DESIGN_NAME, LIGHT_RANGE, ROOM_DEPTH_RANGE,
                    ROOM_HEIGHT_RANGE, ROOM_WIDTH_RANGE, ROTATION_DEG_RANGE,
                    TABLE_SIZE_RANGE, clamp, parse_hex_color)

log = logging.getLogger("roomplanner.session")


class EditorSession:
    """Owns one design's model and maps panel/slider edits onto it.

    Edits outside a control's range are clamped to the nearest bound. Save
    failures are reported through ``status_cb`` and never touch the model.
    """

    def __init__(self, store: DesignStore, design_id: str,
                 status_cb: Optional[Callable[[str], None]] = None):
        self.store = store
        self.design_id = design_id
        self.state = LayoutState()
        self.record: DesignRecord = new_record(design_id)
        self._status_cb = status_cb
        self.last_error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.record.name

    def _status(self, text: str):
        if self._status_cb:
            self._status_cb(text)

    # ---- persistence ----
    def load(self):
        self.record = self.store.open_design(self.design_id)
        self.state.load_data(self.record.data)
        log.info("opened design %r (%s)", self.design_id, self.record.name)
        self._status(f"Opened: {self.record.name}")

    def save(self) -> bool:
        rec = replace(self.record, updated_at=now_iso(), data=self.state.to_data())
        try:
            self.store.upsert(rec)
        except PersistenceError as e:
            self.last_error = str(e)
            log.error("save failed for %r: %s", self.design_id, e)
            self._status("Error saving design. There was a problem saving your design. Please try again.")
            return False
        self.record = rec
        self.last_error = None
        self._status(f'Design saved: "{rec.name}" has been saved successfully.')
        return True

    def rename(self, name: str):
        self.record = replace(self.record, name=name.strip() or DEFAULT_DESIGN_NAME)

    # ---- furniture lifecycle ----
    def add_furniture(self, kind: str) -> FurnitureItem:
        item = self.state.add_furniture(kind)
        self.state.set_selection(item.id)
        return item

    def delete_furniture(self, item_id: Optional[int]):
        if item_id is not None:
            self.state.delete_furniture(item_id)

    def delete_selected(self):
        self.delete_furniture(self.state.selection)

    # ---- room edits ----
    def set_room_dimension(self, axis: str, value: float):
        r = self.state.room
        if axis == "width":
            self.state.set_room_size(clamp(value, *ROOM_WIDTH_RANGE), r.height, r.depth)
        elif axis == "height":
            self.state.set_room_size(r.width, clamp(value, *ROOM_HEIGHT_RANGE), r.depth)
        elif axis == "depth":
            self.state.set_room_size(r.width, r.height, clamp(value, *ROOM_DEPTH_RANGE))
        else:
            raise ValueError(f"unknown room axis: {axis!r}")

    def set_light_intensity(self, value: float):
        self.state.set_light_intensity(clamp(value, *LIGHT_RANGE))

    def set_wall_color(self, value: str):
        color = self._checked_color(value)
        if color:
            self.state.set_wall_color(color)

    def set_floor_color(self, value: str):
        color = self._checked_color(value)
        if color:
            self.state.set_floor_color(color)

    # ---- furniture property edits ----
    def set_color(self, item_id: int, value: str):
        color = self._checked_color(value)
        if color:
            self.state.update_furniture(item_id, color=color)

    def set_rotation_degrees(self, item_id: int, degrees: float):
        deg = clamp(degrees, *ROTATION_DEG_RANGE)
        self.state.update_furniture(item_id, rotation=math.radians(deg))

    def set_position(self, item_id: int, x: Optional[float] = None, z: Optional[float] = None):
        item = self.state.get(item_id)
        if item is None:
            return
        nx = item.position[0] if x is None else x
        nz = item.position[2] if z is None else z
        self.state.update_furniture(item_id, position=[nx, item.position[1], nz])

    def set_table_size(self, item_id: int, width: Optional[float] = None, depth: Optional[float] = None):
        item = self.state.get(item_id)
        if item is None or item.size is None:
            return
        room = self.state.room
        w = item.size[0] if width is None else width
        d = item.size[2] if depth is None else depth
        lo, hi = TABLE_SIZE_RANGE
        # a table never outgrows the room it stands in
        w = clamp(w, lo, min(hi, room.width))
        d = clamp(d, lo, min(hi, room.depth))
        self.state.update_furniture(item_id, size=[w, item.size[1], d])

    def _checked_color(self, value: str) -> Optional[str]:
        color = parse_hex_color(value)
        if color is None:
            self._status(f"Not a color: {value!r}")
        return color
