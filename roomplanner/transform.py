from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .utils import (CAMERA_FAR, CAMERA_FOV, CAMERA_NEAR, CAMERA_POSITION,
                    CAMERA_TARGET, PX_PER_METER, clamp)

EPS = 1e-9


# ============================================================
# Floor plan: world (x, z) <-> pixel (px, py)
# ============================================================
@dataclass
class PlanMapping:
    width: float
    depth: float
    scale: float = PX_PER_METER

    def world_to_screen(self, x: float, z: float) -> Tuple[float, float]:
        return (x + self.width / 2.0) * self.scale, (z + self.depth / 2.0) * self.scale

    def screen_to_world(self, px: float, py: float) -> Tuple[float, float]:
        return px / self.scale - self.width / 2.0, py / self.scale - self.depth / 2.0

    def size_px(self) -> Tuple[float, float]:
        return self.width * self.scale, self.depth * self.scale


# ============================================================
# Perspective: ray casting against horizontal planes
# ============================================================
@dataclass
class Ray:
    origin: np.ndarray
    direction: np.ndarray

    def intersect_plane_y(self, y: float) -> Optional[Tuple[float, float]]:
        """(x, z) where the ray crosses the plane at height y, or None when the
        ray runs parallel to it or the crossing lies behind the origin."""
        dy = float(self.direction[1])
        if abs(dy) < EPS:
            return None
        t = (y - float(self.origin[1])) / dy
        if t <= 0.0:
            return None
        p = self.origin + t * self.direction
        if not np.all(np.isfinite(p)):
            return None
        return float(p[0]), float(p[2])


class PerspectiveCamera:
    """Look-at pinhole camera, y up, OpenGL clip conventions."""

    MIN_PITCH = math.radians(-85.0)
    MAX_PITCH = math.radians(85.0)
    MIN_DISTANCE = 0.5
    MAX_DISTANCE = 50.0

    def __init__(self, position: Sequence[float] = CAMERA_POSITION,
                 target: Sequence[float] = CAMERA_TARGET, fov: float = CAMERA_FOV,
                 aspect: float = 1.0, near: float = CAMERA_NEAR, far: float = CAMERA_FAR):
        self.position = np.array(position, dtype=np.float64)
        self.target = np.array(target, dtype=np.float64)
        self.up = np.array([0.0, 1.0, 0.0])
        self.fov = float(fov)
        self.aspect = float(aspect)
        self.near = float(near)
        self.far = float(far)

    # ---- matrices ----
    def view_matrix(self) -> np.ndarray:
        f = self.target - self.position
        f = f / np.linalg.norm(f)
        s = np.cross(f, self.up)
        s = s / np.linalg.norm(s)
        u = np.cross(s, f)
        M = np.eye(4)
        M[0, :3] = s
        M[1, :3] = u
        M[2, :3] = -f
        M[:3, 3] = -M[:3, :3] @ self.position
        return M

    def projection_matrix(self) -> np.ndarray:
        t = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        n, f = self.near, self.far
        P = np.zeros((4, 4))
        P[0, 0] = t / self.aspect
        P[1, 1] = t
        P[2, 2] = (f + n) / (n - f)
        P[2, 3] = 2.0 * f * n / (n - f)
        P[3, 2] = -1.0
        return P

    def view_projection(self) -> np.ndarray:
        return self.projection_matrix() @ self.view_matrix()

    # ---- world -> screen ----
    def project(self, point: Sequence[float]) -> Optional[Tuple[float, float]]:
        clip = self.view_projection() @ np.array([point[0], point[1], point[2], 1.0])
        if clip[3] <= EPS:
            return None
        return float(clip[0] / clip[3]), float(clip[1] / clip[3])

    def to_screen(self, point: Sequence[float], width: float, height: float) -> Optional[Tuple[float, float]]:
        ndc = self.project(point)
        if ndc is None:
            return None
        return (ndc[0] * 0.5 + 0.5) * width, (1.0 - (ndc[1] * 0.5 + 0.5)) * height

    @staticmethod
    def screen_to_ndc(px: float, py: float, width: float, height: float) -> Tuple[float, float]:
        return (px / width - 0.5) * 2.0, ((height - py) / height - 0.5) * 2.0

    # ---- screen -> world ----
    def ray_from_ndc(self, nx: float, ny: float) -> Ray:
        inv = np.linalg.inv(self.view_projection())
        far = inv @ np.array([nx, ny, 1.0, 1.0])
        far = far[:3] / far[3]
        d = far - self.position
        return Ray(self.position.copy(), d / np.linalg.norm(d))

    # ---- orbit controls ----
    def _spherical(self) -> Tuple[float, float, float]:
        rel = self.position - self.target
        dist = float(np.linalg.norm(rel))
        yaw = math.atan2(rel[0], rel[2])
        pitch = math.asin(clamp(rel[1] / dist, -1.0, 1.0))
        return yaw, pitch, dist

    def _place(self, yaw: float, pitch: float, dist: float):
        cp = math.cos(pitch)
        self.position = self.target + dist * np.array(
            [math.sin(yaw) * cp, math.sin(pitch), math.cos(yaw) * cp])

    def orbit(self, dyaw: float, dpitch: float):
        yaw, pitch, dist = self._spherical()
        self._place(yaw + dyaw, clamp(pitch + dpitch, self.MIN_PITCH, self.MAX_PITCH), dist)

    def zoom(self, factor: float):
        yaw, pitch, dist = self._spherical()
        self._place(yaw, pitch, clamp(dist * factor, self.MIN_DISTANCE, self.MAX_DISTANCE))
