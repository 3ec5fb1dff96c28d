from __future__ import annotations
import logging
from typing import Any, Callable, Optional, Tuple

from .hittest import hit_test
from .models import DragState
from .state import LayoutState
from .utils import FLOOR_Y

log = logging.getLogger("roomplanner.drag")

# locate(sample, plane_y) -> world (x, z) or None when the sample cannot be mapped
Locator = Callable[[Any, float], Optional[Tuple[float, float]]]


class DragController:
    """Select/drag state machine for one view.

    The view feeds it raw samples (pixels for the floor plan, rays for the
    perspective view) and ``locate`` turns them into world coordinates. Idle
    and selected come from the shared selection; dragging means this
    controller owns the model's single drag session.
    """

    def __init__(self, state: LayoutState, locate: Locator, name: str = "view"):
        self.state = state
        self.locate = locate
        self.name = name

    def __repr__(self):
        return f"DragController({self.name!r}, {self.mode})"

    @property
    def mode(self) -> str:
        if self.state.drag_owner is self:
            return DragState.DRAGGING
        if self.state.selection is not None:
            return DragState.SELECTED
        return DragState.IDLE

    @property
    def dragging(self) -> bool:
        return self.state.drag_owner is self

    # ---- events ----
    def press(self, sample) -> None:
        # one drag session at a time, whichever view started it
        if self.state.drag_owner is not None:
            return
        point = self.locate(sample, FLOOR_Y) if sample is not None else None
        hit = hit_test(point[0], point[1], self.state.furniture) if point else None

        if hit is None:
            if self.state.selection is not None:
                self.state.set_selection(None)
            return

        if hit.id == self.state.selection:
            if self.state.begin_drag(self, hit.id):
                log.debug("%s: drag start on #%d", self.name, hit.id)
        else:
            self.state.set_selection(hit.id)

    def move(self, sample) -> None:
        """Event-driven update (one per pointer-move)."""
        if self.dragging:
            self._update(sample)

    def tick(self, sample) -> None:
        """Per-frame update; a no-op unless this controller is dragging."""
        if self.dragging:
            self._update(sample)

    def release(self) -> None:
        self._end("release")

    def cancel(self) -> None:
        self._end("cancel")

    def leave(self) -> None:
        self._end("leave")

    # ---- internals ----
    def _update(self, sample):
        # deleting the dragged item ends the session in the model, so it exists here
        item = self.state.get(self.state.dragged_id)
        if sample is None:
            return
        point = self.locate(sample, item.position[1])
        if point is None:
            return
        self.state.attempt_move(item.id, point[0], point[1])

    def _end(self, reason: str):
        if not self.dragging:
            return
        log.debug("%s: drag end (%s) on #%s", self.name, reason, self.state.dragged_id)
        self.state.end_drag(self)
