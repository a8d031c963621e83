"""
Test fixtures and utilities for crop_annotation tests.

Provides reusable fixtures for the engine, canvases and test images.
"""

import pytest
import numpy as np
from unittest.mock import Mock

from crop_annotation.core.annotation import CanvasRect, EventType, Point


@pytest.fixture
def cfg():
    """Default configuration with a couple of classes."""
    from crop_annotation.utils.config import default_config

    cfg = default_config()
    cfg.classes = {"car": "#FF0000", "person": "#00FF00"}
    return cfg


@pytest.fixture
def tool_system(cfg):
    """Engine with an image already loaded."""
    from crop_annotation.core.tools import ToolSystem

    ts = ToolSystem(cfg)
    ts.set_current_image("image_1.jpg")
    return ts


@pytest.fixture
def canvas_rect():
    """Canvas at the screen origin, so screen == world at scale 1."""
    return CanvasRect(left=0, top=0, width=800, height=600)


@pytest.fixture
def offset_canvas_rect():
    """Canvas placed somewhere inside the window."""
    return CanvasRect(left=120, top=45, width=640, height=480)


@pytest.fixture
def test_image():
    """Create a test RGB image."""
    return np.random.randint(0, 255, (100, 100, 3), dtype=np.uint8)


@pytest.fixture
def event_recorder(tool_system):
    """Mock subscribed to every event type of the engine."""
    recorder = Mock()
    for event_type in EventType:
        tool_system.events.on(event_type, recorder)
    return recorder


def click(tool_system, x, y, canvas_rect, button=0):
    """Press and release a button at a screen position."""
    tool_system.handle_mouse_down(button, Point(x, y), canvas_rect)
    tool_system.handle_mouse_up(button, Point(x, y), canvas_rect)


def draw_rectangle(tool_system, p0, p1, canvas_rect):
    """Draw a rectangle with the Rectangle tool between two screen points."""
    tool_system.set_current_tool("Rectangle")
    click(tool_system, p0[0], p0[1], canvas_rect)
    tool_system.handle_mouse_move(Point(*p1), canvas_rect)
    click(tool_system, p1[0], p1[1], canvas_rect)
    return tool_system.get_annotations()[-1]


def received_events(recorder, event_type):
    """Events of one type seen by an event_recorder."""
    return [
        call.args[0]
        for call in recorder.call_args_list
        if call.args[0].event_type == event_type
    ]
