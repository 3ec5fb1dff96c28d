from __future__ import annotations
from typing import Optional, Sequence, Tuple
from .models import FurnitureItem


def footprint(item: FurnitureItem) -> Tuple[float, float]:
    """Half-extents (hx, hz) of the item's floor footprint. Rotation is ignored."""
    spec = item.spec
    if spec.footprint is not None:
        w, d = spec.footprint
    else:
        w, d = item.size[0], item.size[2]
    return w / 2.0, d / 2.0


def footprint_contains(item: FurnitureItem, x: float, z: float) -> bool:
    hx, hz = footprint(item)
    ix, iz = item.position[0], item.position[2]
    return (ix - hx <= x <= ix + hx) and (iz - hz <= z <= iz + hz)


def hit_test(x: float, z: float, furniture: Sequence[FurnitureItem]) -> Optional[FurnitureItem]:
    # last added is drawn on top, so it wins overlaps
    for item in reversed(furniture):
        if footprint_contains(item, x, z):
            return item
    return None
