from .models import (KINDS, DesignData, DesignRecord, DragState, FurnitureItem,
                     FurnitureKind, KindSpec, Room, UnknownKindError)
from .state import LayoutState
from .hittest import footprint, footprint_contains, hit_test
from .transform import PerspectiveCamera, PlanMapping, Ray
from .drag import DragController
from .store import DesignStore, PersistenceError, default_store_path
from .session import EditorSession

# Qt adapters (scene, items, viewport, properties) are imported explicitly by the launcher
__all__ = [
    "KINDS", "DesignData", "DesignRecord", "DragState", "FurnitureItem",
    "FurnitureKind", "KindSpec", "Room", "UnknownKindError",
    "LayoutState", "footprint", "footprint_contains", "hit_test",
    "PerspectiveCamera", "PlanMapping", "Ray", "DragController",
    "DesignStore", "PersistenceError", "default_store_path", "EditorSession",
]
