"""
Tests for the ToolSystem interaction engine.

These tests drive the engine the way a UI would, without any UI.
"""

import pytest
from unittest.mock import Mock

from crop_annotation.core.annotation import (
    Annotation,
    AnnotationEvent,
    EventType,
    Point,
    Viewport,
)
from crop_annotation.core.tools import (
    AssociatorTool,
    PanTool,
    RectangleTool,
    SelectorTool,
    ToolSystem,
)
from crop_annotation.tests.conftest import draw_rectangle, received_events


def make_rect(x0, y0, x1, y1, name="car"):
    return Annotation.rectangle(Point(x0, y0), Point(x1, y1), name=name)


class TestToolSystemSetup:
    """Engine construction and configuration."""

    def test_initialization(self, cfg):
        ts = ToolSystem(cfg)
        assert [type(t) for t in ts.tools] == [
            RectangleTool,
            PanTool,
            SelectorTool,
            AssociatorTool,
        ]
        assert isinstance(ts.current_tool, RectangleTool)
        assert ts.current_image is None
        assert ts.viewport == Viewport(0, 0, 1)
        assert ts.keybinds["r"] == "Rectangle"

    def test_default_config(self):
        ts = ToolSystem()
        assert ts.current_annotation_class == "Default"
        assert ts.viewport_config.max_scale == 10.0

    def test_get_tool(self, tool_system):
        assert tool_system.get_tool("Pan").name == "Pan"
        assert tool_system.get_tool("Lasso") is None


class TestImages:
    """Current image switching."""

    def test_sub_map_created_lazily(self, tool_system):
        assert "other.jpg" not in tool_system.store
        tool_system.set_current_image("other.jpg")
        assert "other.jpg" in tool_system.store
        assert tool_system.get_annotations() == []

    def test_annotations_persist_across_switches(self, tool_system):
        a = make_rect(0, 0, 10, 10)
        tool_system.add_annotation(a)
        tool_system.set_current_image("other.jpg")
        assert tool_system.get_annotations() == []
        tool_system.set_current_image("image_1.jpg")
        assert tool_system.get_annotations() == [a]

    def test_switch_clears_selection_and_notifies(self, tool_system, event_recorder):
        a = make_rect(0, 0, 10, 10)
        tool_system.add_annotation(a)
        tool_system.select_annotations([a.id])

        tool_system.set_current_image("other.jpg")

        assert tool_system.selected_ids == []
        events = received_events(event_recorder, EventType.SELECTION_CHANGED)
        assert events[-1].data == {"selected_ids": []}


class TestAnnotations:
    """Adding, removing and associating annotations."""

    def test_add_without_image_is_ignored(self, cfg):
        ts = ToolSystem(cfg)
        ts.add_annotation(make_rect(0, 0, 1, 1))
        assert len(ts.store) == 0
        assert ts.get_annotations() == []

    def test_add_emits_event(self, tool_system, event_recorder):
        a = make_rect(0, 0, 1, 1)
        tool_system.add_annotation(a)
        events = received_events(event_recorder, EventType.ANNOTATION_ADDED)
        assert events[0].data == {"annotation_id": a.id}
        assert received_events(event_recorder, EventType.STATE_CHANGED)

    def test_remove_scrubs_associations(self, tool_system):
        a, b = make_rect(0, 0, 1, 1), make_rect(0, 0, 2, 2)
        tool_system.add_annotation(a)
        tool_system.add_annotation(b)
        a.add_association(b)

        tool_system.remove_annotation(b)

        assert a.associations == []
        assert tool_system.get_annotation(b.id) is None

    def test_remove_updates_selection(self, tool_system, event_recorder):
        a, b = make_rect(0, 0, 1, 1), make_rect(0, 0, 2, 2)
        tool_system.add_annotation(a)
        tool_system.add_annotation(b)
        tool_system.select_annotations([a.id, b.id])

        tool_system.remove_annotation(a)

        assert tool_system.selected_ids == [b.id]
        events = received_events(event_recorder, EventType.SELECTION_CHANGED)
        assert events[-1].data == {"selected_ids": [b.id]}

    def test_remove_unknown_is_noop(self, tool_system, event_recorder):
        tool_system.remove_annotation(make_rect(0, 0, 1, 1))
        assert received_events(event_recorder, EventType.ANNOTATION_REMOVED) == []

    def test_associate_is_bidirectional(self, tool_system):
        a, b = make_rect(0, 0, 1, 1), make_rect(0, 0, 2, 2)
        tool_system.add_annotation(a)
        tool_system.add_annotation(b)

        tool_system.associate(a, b)
        tool_system.associate(b, a)

        assert a.associations == [b.id]
        assert b.associations == [a.id]

        tool_system.dissociate(a, b)
        assert a.associations == [] and b.associations == []

    def test_associate_requires_stored_annotations(self, tool_system):
        a, stray = make_rect(0, 0, 1, 1), make_rect(0, 0, 2, 2)
        tool_system.add_annotation(a)
        tool_system.associate(a, stray)
        assert a.associations == []

    def test_annotations_at(self, tool_system):
        a, b = make_rect(0, 0, 100, 100), make_rect(50, 50, 150, 150)
        tool_system.add_annotation(a)
        tool_system.add_annotation(b)
        assert tool_system.annotations_at(Point(75, 75)) == [a, b]
        assert tool_system.annotations_at(Point(125, 125)) == [b]
        assert tool_system.annotations_at(Point(500, 500)) == []


class TestSelection:
    """Selection bookkeeping."""

    def test_select_replaces_and_notifies(self, tool_system, event_recorder):
        a, b = make_rect(0, 0, 1, 1), make_rect(0, 0, 2, 2)
        tool_system.add_annotation(a)
        tool_system.add_annotation(b)

        tool_system.select_annotations([a.id])
        tool_system.select_annotations([b.id])

        assert tool_system.selected_ids == [b.id]
        assert tool_system.get_selected_annotations() == [b]
        assert len(received_events(event_recorder, EventType.SELECTION_CHANGED)) == 2

    def test_selection_is_subset_of_current_image(self, tool_system):
        a = make_rect(0, 0, 1, 1)
        tool_system.add_annotation(a)
        tool_system.select_annotations([a.id, a.id, "ann_unknown"])
        assert tool_system.selected_ids == [a.id]


class TestToolSwitching:
    """Tool activation and keybinds."""

    def test_set_current_tool_by_name(self, tool_system, event_recorder):
        tool_system.set_current_tool("Pan")
        assert isinstance(tool_system.current_tool, PanTool)
        events = received_events(event_recorder, EventType.TOOL_CHANGED)
        assert events[-1].data == {"tool": "Pan"}

    def test_unknown_tool_name_is_ignored(self, tool_system):
        current = tool_system.current_tool
        tool_system.set_current_tool("Lasso")
        assert tool_system.current_tool is current

    def test_switch_runs_lifecycle_hooks(self, tool_system):
        outgoing = tool_system.current_tool
        incoming = tool_system.get_tool("Selector")
        outgoing.on_tool_deselected = Mock()
        incoming.on_tool_selected = Mock()

        tool_system.set_current_tool(incoming)

        outgoing.on_tool_deselected.assert_called_once()
        incoming.on_tool_selected.assert_called_once()

    def test_keybind_switches_then_forwards(self, tool_system):
        tool_system.set_current_tool("Pan")
        rectangle = tool_system.get_tool("Rectangle")
        rectangle.on_key_down = Mock()

        tool_system.handle_key_down("R")

        assert tool_system.current_tool is rectangle
        rectangle.on_key_down.assert_called_once_with("R")

    def test_active_tool_key_reactivates(self, tool_system, event_recorder):
        rectangle = tool_system.current_tool
        rectangle.on_tool_selected = Mock()

        tool_system.handle_key_down("r")

        assert tool_system.current_tool is rectangle
        rectangle.on_tool_selected.assert_called_once()
        events = received_events(event_recorder, EventType.TOOL_CHANGED)
        assert events[-1].data == {"tool": "Rectangle"}

    def test_unbound_key_goes_to_active_tool(self, tool_system):
        tool_system.set_current_tool("Pan")
        pan = tool_system.current_tool
        pan.on_key_down = Mock()

        tool_system.handle_key_down("q")

        assert tool_system.current_tool is pan
        pan.on_key_down.assert_called_once_with("q")

    def test_update_keybinds(self, tool_system, event_recorder):
        tool_system.update_keybinds({"P": "Pan", "X": "Selector"})
        assert tool_system.keybinds == {"p": "Pan", "x": "Selector"}

        tool_system.handle_key_down("r")
        assert isinstance(tool_system.current_tool, RectangleTool)
        tool_system.handle_key_down("x")
        assert isinstance(tool_system.current_tool, SelectorTool)
        assert received_events(event_recorder, EventType.KEYBINDS_UPDATED)

    def test_key_up_forwarded(self, tool_system):
        tool_system.current_tool.on_key_up = Mock()
        tool_system.handle_key_up("r")
        tool_system.current_tool.on_key_up.assert_called_once_with("r")

    def test_configured_keybinds_replace_defaults(self, cfg):
        cfg.keybinds = {"b": "Selector"}
        ts = ToolSystem(cfg)
        ts.set_current_image("image_1.jpg")

        ts.handle_key_down("v")
        assert isinstance(ts.current_tool, RectangleTool)
        ts.handle_key_down("b")
        assert isinstance(ts.current_tool, SelectorTool)

    def test_empty_keybinds_unbind_everything(self, cfg):
        cfg.keybinds = {}
        ts = ToolSystem(cfg)
        assert ts.keybinds == {}
        ts.handle_key_down("h")
        assert isinstance(ts.current_tool, RectangleTool)


class TestViewportAndClasses:
    """Viewport and annotation class state."""

    def test_set_viewport_clamps_scale(self, tool_system, event_recorder):
        tool_system.set_viewport(Viewport(1, 2, 100))
        assert tool_system.viewport == Viewport(1, 2, 10.0)
        tool_system.set_viewport(Viewport(1, 2, 0))
        assert tool_system.viewport.scale == pytest.approx(0.05)
        assert len(received_events(event_recorder, EventType.VIEWPORT_CHANGED)) == 2

    def test_current_annotation_class(self, tool_system, event_recorder):
        assert tool_system.current_annotation_class == "car"
        assert tool_system.set_current_annotation_class("person")
        assert tool_system.current_annotation_class == "person"
        assert not tool_system.set_current_annotation_class("truck")
        assert tool_system.current_annotation_class == "person"
        events = received_events(event_recorder, EventType.ANNOTATION_CLASS_CHANGED)
        assert [e.data["class_name"] for e in events] == ["person"]


class TestRenderSnapshot:
    """Read-only state for renderers."""

    def test_snapshot(self, tool_system, canvas_rect):
        a = draw_rectangle(tool_system, (10, 10), (50, 40), canvas_rect)
        tool_system.select_annotations([a.id])

        snapshot = tool_system.get_render_snapshot()

        assert snapshot.image_key == "image_1.jpg"
        assert snapshot.viewport == tool_system.viewport
        assert snapshot.selection == (a.id,)
        assert snapshot.tool_name == "Rectangle"
        assert snapshot.annotations[0]["bounds"] == [
            {"x": 10, "y": 10},
            {"x": 50, "y": 40},
        ]

    def test_snapshot_is_detached(self, tool_system, canvas_rect):
        a = draw_rectangle(tool_system, (10, 10), (50, 40), canvas_rect)
        snapshot = tool_system.get_render_snapshot()
        a.set_corner(1, Point(99, 99))
        assert snapshot.annotations[0]["bounds"][1] == {"x": 50, "y": 40}

    def test_broken_listener_does_not_break_dispatch(self, tool_system, canvas_rect):
        def broken(event: AnnotationEvent):
            raise RuntimeError("boom")

        tool_system.events.on(EventType.ANNOTATION_ADDED, broken)
        draw_rectangle(tool_system, (10, 10), (50, 40), canvas_rect)
        assert len(tool_system.get_annotations()) == 1
