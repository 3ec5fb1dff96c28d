"""
Tests for the select/drag state machine shared by both views.
"""

import pytest

from roomplanner import (DragController, DragState, FurnitureKind, LayoutState,
                         PerspectiveCamera, PlanMapping)


def world(sample, _plane_y):
    return sample


def plan_controller(state):
    mapping = PlanMapping(state.room.width, state.room.depth)
    return DragController(state, lambda s, _y: mapping.screen_to_world(*s), name="plan")


def perspective_controller(state):
    return DragController(state, lambda ray, y: ray.intersect_plane_y(y), name="3d")


@pytest.fixture
def state():
    return LayoutState()


class TestSelection:

    def test_press_on_item_selects_without_dragging(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = DragController(state, world)
        ctl.press((0.0, 0.0))
        assert state.selection == chair.id
        assert ctl.mode == DragState.SELECTED
        assert not ctl.dragging

    def test_press_on_empty_space_deselects(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        state.set_selection(chair.id)
        ctl = DragController(state, world)
        ctl.press((2.0, 2.0))
        assert state.selection is None
        assert ctl.mode == DragState.IDLE

    def test_unmappable_press_counts_as_empty(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        state.set_selection(chair.id)
        ctl = DragController(state, lambda s, y: None)
        ctl.press("anything")
        assert state.selection is None

    def test_press_on_other_item_switches_selection(self, state):
        a = state.add_furniture(FurnitureKind.CHAIR)
        b = state.add_furniture(FurnitureKind.CHAIR)
        state.attempt_move(b.id, 1.0, 1.0)
        state.set_selection(a.id)
        ctl = DragController(state, world)
        ctl.press((1.0, 1.0))
        assert state.selection == b.id
        assert not ctl.dragging

    def test_selection_is_shared_between_views(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        plan = DragController(state, world, name="plan")
        other = DragController(state, world, name="3d")
        plan.press((0.0, 0.0))
        assert other.mode == DragState.SELECTED
        state.delete_furniture(chair.id)
        assert plan.mode == DragState.IDLE
        assert other.mode == DragState.IDLE


class TestDragging:

    def test_press_on_selected_starts_drag(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = DragController(state, world)
        ctl.press((0.0, 0.0))
        ctl.press((0.0, 0.0))
        assert ctl.mode == DragState.DRAGGING
        assert state.dragged_id == chair.id

    def test_plan_drag_is_clamped_to_room(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = plan_controller(state)
        ctl.press((125.0, 125.0))
        ctl.press((125.0, 125.0))
        ctl.move((625.0, 625.0))   # world (10, 10)
        assert chair.position == [pytest.approx(2.25), 0.0, pytest.approx(2.25)]
        ctl.release()
        assert ctl.mode == DragState.SELECTED
        assert state.drag_owner is None

    def test_move_without_drag_does_nothing(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = DragController(state, world)
        ctl.press((0.0, 0.0))
        ctl.move((1.0, 1.0))
        ctl.tick((1.0, 1.0))
        assert chair.position == [0.0, 0.0, 0.0]

    def test_release_cancel_and_leave_end_drag(self, state):
        state.add_furniture(FurnitureKind.CHAIR)
        ctl = DragController(state, world)
        ctl.press((0.0, 0.0))
        for end in (ctl.release, ctl.cancel, ctl.leave):
            ctl.press((0.0, 0.0))
            assert ctl.dragging
            end()
            assert ctl.mode == DragState.SELECTED

    def test_deleting_dragged_item_ends_session(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = DragController(state, world)
        ctl.press((0.0, 0.0))
        ctl.press((0.0, 0.0))
        state.delete_furniture(chair.id)
        assert ctl.mode == DragState.IDLE
        ctl.move((1.0, 1.0))
        ctl.release()


class TestPerspectiveDrag:

    def test_tick_follows_the_pointer(self, state):
        cam = PerspectiveCamera()
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = perspective_controller(state)
        centre = cam.ray_from_ndc(0.0, 0.0)
        ctl.press(centre)
        ctl.press(centre)
        assert ctl.dragging
        nx, ny = cam.project((1.0, 0.0, 0.5))
        ctl.tick(cam.ray_from_ndc(nx, ny))
        assert chair.position[0] == pytest.approx(1.0, abs=1e-6)
        assert chair.position[2] == pytest.approx(0.5, abs=1e-6)

    def test_tick_without_floor_hit_keeps_dragging(self, state):
        cam = PerspectiveCamera()
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = perspective_controller(state)
        centre = cam.ray_from_ndc(0.0, 0.0)
        ctl.press(centre)
        ctl.press(centre)
        ctl.tick(cam.ray_from_ndc(0.0, 1.0))   # over the horizon
        ctl.tick(None)                         # pointer unknown
        assert ctl.mode == DragState.DRAGGING
        assert chair.position == [0.0, 0.0, 0.0]

    def test_perspective_drag_is_clamped(self, state):
        cam = PerspectiveCamera()
        chair = state.add_furniture(FurnitureKind.CHAIR)
        ctl = perspective_controller(state)
        centre = cam.ray_from_ndc(0.0, 0.0)
        ctl.press(centre)
        ctl.press(centre)
        ctl.tick(cam.ray_from_ndc(-0.95, -0.95))
        bx, bz = state.bounds_for(chair)
        assert abs(chair.position[0]) <= bx
        assert abs(chair.position[2]) <= bz


class TestExclusivity:

    def test_second_view_cannot_start_a_drag(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        plan = DragController(state, world, name="plan")
        other = DragController(state, world, name="3d")
        plan.press((0.0, 0.0))
        plan.press((0.0, 0.0))
        other.press((0.0, 0.0))
        other.press((2.0, 2.0))
        assert plan.mode == DragState.DRAGGING
        assert other.mode == DragState.SELECTED
        assert state.selection == chair.id

    def test_other_view_ticks_are_ignored(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        plan = DragController(state, world, name="plan")
        other = DragController(state, world, name="3d")
        plan.press((0.0, 0.0))
        plan.press((0.0, 0.0))
        other.tick((1.0, 1.0))
        other.release()
        assert plan.dragging
        assert chair.position == [0.0, 0.0, 0.0]

    def test_other_view_can_drag_after_release(self, state):
        chair = state.add_furniture(FurnitureKind.CHAIR)
        plan = DragController(state, world, name="plan")
        other = DragController(state, world, name="3d")
        plan.press((0.0, 0.0))
        plan.press((0.0, 0.0))
        plan.release()
        other.press((0.0, 0.0))
        other.move((1.0, -1.0))
        assert other.dragging
        assert chair.position == [1.0, 0.0, -1.0]
