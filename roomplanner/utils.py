from __future__ import annotations
import math, re
from typing import Optional

# ===== Room / sliders =====
ROOM_WIDTH_RANGE = (2.0, 10.0)
ROOM_HEIGHT_RANGE = (2.0, 5.0)
ROOM_DEPTH_RANGE = (2.0, 10.0)
LIGHT_RANGE = (0.1, 2.0)
ROTATION_DEG_RANGE = (0.0, 360.0)
ROTATION_DEG_STEP = 15.0
TABLE_SIZE_RANGE = (0.5, 3.0)
SLIDER_STEP = 0.1

# ===== Defaults =====
DEFAULT_ROOM_SIZE = (5.0, 3.0, 5.0)
DEFAULT_WALL_COLOR = "#f5f5f5"
DEFAULT_FLOOR_COLOR = "#e0e0e0"
DEFAULT_LIGHT = 1.0
DEFAULT_DESIGN_NAME = "New Room Design"
DEFAULT_THUMBNAIL = "/placeholder.svg?height=100&width=200"
FLOOR_Y = 0.0

# ===== Floor plan =====
PX_PER_METER = 50.0
GRID_STEP_M = 1.0
PLAN_MARGIN_PX = 24

# ===== Perspective view =====
CAMERA_POSITION = (0.0, 2.0, 5.0)
CAMERA_TARGET = (0.0, 0.0, 0.0)
CAMERA_FOV = 50.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 1000.0
FRAME_INTERVAL_MS = 16
ORBIT_SPEED = 0.01      # rad per px
ZOOM_STEP = 1.1

# ===== Colors =====
BG_COLOR = "#F2F4F7"
GRID_COLOR = "#D0D6E0"
ROOM_BORDER = "#111827"
ITEM_BORDER = "#666666"
SELECT_BORDER = "#4F46E5"

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
TWO_PI = 2.0 * math.pi


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def normalize_angle(rad: float) -> float:
    """Wrap an angle into [0, 2π)."""
    a = math.fmod(rad, TWO_PI)
    if a < 0:
        a += TWO_PI
    # fmod of a value just below 0 can land exactly on 2π after the add
    return 0.0 if a >= TWO_PI else a


def parse_hex_color(value: str) -> Optional[str]:
    value = (value or "").strip()
    return value if HEX_COLOR.match(value) else None


def snap(v: float, step: float) -> float:
    return round(v / step) * step
