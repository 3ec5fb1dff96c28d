from __future__ import annotations
import copy, logging
from typing import Callable, List, Optional, Tuple

from .models import KINDS, DesignData, FurnitureItem, Room, UnknownKindError
from .hittest import footprint
from .utils import (DEFAULT_FLOOR_COLOR, DEFAULT_LIGHT, DEFAULT_ROOM_SIZE,
                    DEFAULT_WALL_COLOR, clamp, normalize_angle)

log = logging.getLogger("roomplanner.state")


class LayoutState:
    """Room + furniture + selection shared by both views.

    Every mutation goes through a method here and is followed by a synchronous
    change notification. Positions are clamped on every write, so the bounds
    invariant holds after each call.
    """

    def __init__(self, data: Optional[DesignData] = None):
        self._room = Room(*DEFAULT_ROOM_SIZE)
        self._furniture: List[FurnitureItem] = []
        self._selection: Optional[int] = None
        self._next_id = 1
        self._drag: Optional[Tuple[object, int]] = None   # (owner, item id)
        self._listeners: List[Callable[[], None]] = []
        self.wall_color = DEFAULT_WALL_COLOR
        self.floor_color = DEFAULT_FLOOR_COLOR
        self.light_intensity = DEFAULT_LIGHT
        if data is not None:
            self.load_data(data)

    # ---- read access ----
    @property
    def room(self) -> Room:
        return self._room

    @property
    def furniture(self) -> Tuple[FurnitureItem, ...]:
        return tuple(self._furniture)

    @property
    def selection(self) -> Optional[int]:
        return self._selection

    def get(self, item_id: Optional[int]) -> Optional[FurnitureItem]:
        for it in self._furniture:
            if it.id == item_id:
                return it
        return None

    def selected_item(self) -> Optional[FurnitureItem]:
        return self.get(self._selection)

    def bounds_for(self, item: FurnitureItem) -> Tuple[float, float]:
        """Max |x| and |z| the item's centre may reach inside the room."""
        hx, hz = footprint(item)
        return (max(0.0, self._room.width / 2.0 - hx),
                max(0.0, self._room.depth / 2.0 - hz))

    # ---- listeners ----
    def subscribe(self, cb: Callable[[], None]):
        if cb not in self._listeners:
            self._listeners.append(cb)

    def unsubscribe(self, cb: Callable[[], None]):
        if cb in self._listeners:
            self._listeners.remove(cb)

    def _changed(self):
        for cb in list(self._listeners):
            cb()

    # ---- mutators ----
    def set_room_size(self, width: float, height: float, depth: float):
        if min(width, height, depth) <= 0:
            raise ValueError("room dimensions must be positive")
        self._room = Room(float(width), float(height), float(depth))
        for it in self._furniture:
            self._clamp_into_room(it)
        self._changed()

    def add_furniture(self, kind: str) -> FurnitureItem:
        spec = KINDS.get(kind)
        if spec is None:
            raise UnknownKindError(f"unknown furniture type: {kind!r}")
        item = FurnitureItem(
            id=self._next_id, kind=kind,
            position=[0.0, spec.resting_y, 0.0],
            rotation=0.0, color=spec.color,
            size=list(spec.size) if spec.size is not None else None,
        )
        self._next_id += 1
        self._clamp_into_room(item)
        self._furniture.append(item)
        self._changed()
        return item

    def update_furniture(self, item_id: int, **fields) -> Optional[FurnitureItem]:
        item = self.get(item_id)
        if item is None:
            return None
        if "color" in fields:
            item.color = str(fields["color"])
        if "rotation" in fields:
            item.rotation = normalize_angle(float(fields["rotation"]))
        if "size" in fields and item.size is not None:
            size = [float(v) for v in fields["size"]]
            item.size = [max(1e-3, v) for v in size]
        if "position" in fields:
            pos = fields["position"]
            item.position = [float(pos[0]), item.position[1], float(pos[2])]
        self._clamp_into_room(item)
        self._changed()
        return item

    def attempt_move(self, item_id: int, x: float, z: float) -> bool:
        """Single entry point for drag updates from either view."""
        item = self.get(item_id)
        if item is None:
            return False
        bx, bz = self.bounds_for(item)
        item.position = [clamp(float(x), -bx, bx), item.position[1], clamp(float(z), -bz, bz)]
        self._changed()
        return True

    def delete_furniture(self, item_id: int):
        item = self.get(item_id)
        if item is None:
            return
        self._furniture.remove(item)
        if self._selection == item_id:
            self._selection = None
        if self._drag and self._drag[1] == item_id:
            self._drag = None
        self._changed()

    def set_selection(self, item_id: Optional[int]):
        if item_id is not None and self.get(item_id) is None:
            item_id = None
        if item_id == self._selection:
            return
        self._selection = item_id
        self._changed()

    def set_light_intensity(self, value: float):
        self.light_intensity = float(value)
        self._changed()

    def set_wall_color(self, value: str):
        self.wall_color = value
        self._changed()

    def set_floor_color(self, value: str):
        self.floor_color = value
        self._changed()

    def _clamp_into_room(self, item: FurnitureItem):
        bx, bz = self.bounds_for(item)
        x, y, z = item.position
        item.position = [clamp(x, -bx, bx), y, clamp(z, -bz, bz)]

    # ---- drag exclusivity ----
    @property
    def drag_owner(self) -> Optional[object]:
        return self._drag[0] if self._drag else None

    @property
    def dragged_id(self) -> Optional[int]:
        return self._drag[1] if self._drag else None

    def begin_drag(self, owner: object, item_id: int) -> bool:
        if self._drag is not None or self.get(item_id) is None:
            return False
        self._drag = (owner, item_id)
        return True

    def end_drag(self, owner: object):
        if self._drag and self._drag[0] is owner:
            self._drag = None

    # ---- snapshots ----
    def to_data(self) -> DesignData:
        return DesignData(
            room_size=self._room.as_list(),
            wall_color=self.wall_color,
            floor_color=self.floor_color,
            furniture=copy.deepcopy(self._furniture),
            light_intensity=self.light_intensity,
        )

    def load_data(self, data: DesignData):
        w, h, d = data.room_size
        self._room = Room(float(w), float(h), float(d))
        self._furniture = copy.deepcopy(list(data.furniture))
        self._next_id = max([it.id for it in self._furniture], default=0) + 1
        seen = set()
        for it in self._furniture:
            if it.id in seen:
                log.warning("duplicate furniture id %d, renumbered to %d", it.id, self._next_id)
                it.id = self._next_id
                self._next_id += 1
            seen.add(it.id)
            it.rotation = normalize_angle(it.rotation)
            it.position = [it.position[0], it.spec.resting_y, it.position[2]]
            self._clamp_into_room(it)
        self.wall_color = data.wall_color
        self.floor_color = data.floor_color
        self.light_intensity = data.light_intensity
        self._selection = None
        self._drag = None
        log.debug("loaded %d furniture items into %sx%sx%s room", len(self._furniture), w, h, d)
        self._changed()
