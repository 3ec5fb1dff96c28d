from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .utils import DEFAULT_FLOOR_COLOR, DEFAULT_LIGHT, DEFAULT_ROOM_SIZE, DEFAULT_WALL_COLOR

log = logging.getLogger("roomplanner.models")


class UnknownKindError(ValueError):
    pass


@dataclass(frozen=True)
class KindSpec:
    color: str
    resting_y: float = 0.0
    footprint: Optional[Tuple[float, float]] = None   # fixed (w, d); None -> taken from size
    size: Optional[Tuple[float, float, float]] = None  # default (width, thickness, depth)
    height: float = 0.9                                 # render height in 3D


class FurnitureKind:
    CHAIR = "chair"
    TABLE = "table"


KINDS: Dict[str, KindSpec] = {
    FurnitureKind.CHAIR: KindSpec(color="#8B4513", footprint=(0.5, 0.5), height=0.85),
    FurnitureKind.TABLE: KindSpec(color="#A0522D", size=(1.5, 0.05, 1.0), height=0.525),
}


class DragState:
    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Room:
    width: float = 5.0
    height: float = 3.0
    depth: float = 5.0

    def as_list(self) -> List[float]:
        return [self.width, self.height, self.depth]


@dataclass
class FurnitureItem:
    id: int
    kind: str
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    rotation: float = 0.0
    color: str = "#8B4513"
    size: Optional[List[float]] = None

    @property
    def spec(self) -> KindSpec:
        return KINDS[self.kind]

    def to_dict(self) -> Dict:
        d = {
            "id": self.id,
            "type": self.kind,
            "position": list(self.position),
            "rotation": self.rotation,
            "color": self.color,
        }
        if self.size is not None:
            d["size"] = list(self.size)
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> "FurnitureItem":
        kind = d.get("type", d.get("kind"))
        if kind not in KINDS:
            raise UnknownKindError(f"unknown furniture type: {kind!r}")
        spec = KINDS[kind]
        pos = [float(v) for v in d.get("position", [0.0, spec.resting_y, 0.0])]
        if len(pos) != 3:
            raise ValueError("position must have 3 components")
        rot = d.get("rotation", 0.0)
        # older records keep rotation as an [x, y, z] euler triple
        if isinstance(rot, (list, tuple)):
            rot = rot[1] if len(rot) > 1 else 0.0
        size = d.get("size")
        if size is None and spec.size is not None:
            size = list(spec.size)
        if size is not None:
            size = [float(v) for v in size]
            if len(size) != 3:
                raise ValueError("size must have 3 components")
        item_id = int(d["id"])
        if item_id <= 0:
            raise ValueError("furniture id must be positive")
        return cls(id=item_id, kind=kind, position=pos, rotation=float(rot),
                   color=str(d.get("color", spec.color)), size=size)


@dataclass
class DesignData:
    room_size: List[float] = field(default_factory=lambda: list(DEFAULT_ROOM_SIZE))
    wall_color: str = DEFAULT_WALL_COLOR
    floor_color: str = DEFAULT_FLOOR_COLOR
    furniture: List[FurnitureItem] = field(default_factory=list)
    light_intensity: float = DEFAULT_LIGHT

    def to_dict(self) -> Dict:
        return {
            "roomSize": list(self.room_size),
            "wallColor": self.wall_color,
            "floorColor": self.floor_color,
            "furniture": [f.to_dict() for f in self.furniture],
            "lightIntensity": self.light_intensity,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "DesignData":
        """Missing keys take their defaults; wrongly typed values raise."""
        if not isinstance(d, dict):
            raise ValueError("design data must be an object")
        default = cls()
        size = [float(v) for v in (d.get("roomSize") or default.room_size)]
        if len(size) != 3 or min(size) <= 0:
            raise ValueError(f"bad roomSize: {size}")
        furniture: List[FurnitureItem] = []
        for raw in d.get("furniture") or []:
            if not isinstance(raw, dict):
                log.warning("skipping furniture entry that is not an object: %r", raw)
                continue
            try:
                furniture.append(FurnitureItem.from_dict(raw))
            except (UnknownKindError, KeyError, TypeError) as e:
                log.warning("skipping furniture entry: %s", e)
        return cls(
            room_size=size,
            wall_color=str(d.get("wallColor") or default.wall_color),
            floor_color=str(d.get("floorColor") or default.floor_color),
            furniture=furniture,
            light_intensity=float(d.get("lightIntensity") or default.light_intensity),
        )


@dataclass
class DesignRecord:
    id: str
    name: str
    created_at: str
    updated_at: str
    thumbnail: str
    data: DesignData = field(default_factory=DesignData)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "thumbnail": self.thumbnail,
            "data": self.data.to_dict(),
        }
