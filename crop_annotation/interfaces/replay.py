"""
Replay recorded input events through the engine.

An event log is a list of dicts with a ``type`` key:

    {"type": "image", "key": "page1.jpg"}
    {"type": "tool", "name": "Rectangle"}
    {"type": "class", "name": "car"}
    {"type": "mouse_down", "button": 0, "x": 10, "y": 10}
    {"type": "mouse_up", "button": 0, "x": 10, "y": 10}
    {"type": "mouse_move", "x": 50, "y": 40}
    {"type": "scroll", "delta_y": -1, "x": 50, "y": 40}
    {"type": "key_down", "key": "r"}
    {"type": "key_up", "key": "r"}
    {"type": "mouse_leave"}
    {"type": "detections", "items": [{"bbox": [x, y, w, h], "class": "car"}]}

Pointer positions are in screen space.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ..core.annotation import CanvasRect, Point
from ..core.tools import ToolSystem
from .detector_adapter import add_detections

logger = logging.getLogger(__name__)


def _position(event: Dict[str, Any]) -> Point:
    return Point(float(event.get("x", 0)), float(event.get("y", 0)))


def apply_event(tool_system: ToolSystem, event: Dict[str, Any], canvas_rect: CanvasRect) -> bool:
    """
    Apply one recorded event.

    Returns:
        False if the event type is unknown
    """
    kind = event.get("type")

    if kind == "image":
        tool_system.set_current_image(event["key"])
    elif kind == "tool":
        tool_system.set_current_tool(event["name"])
    elif kind == "class":
        tool_system.set_current_annotation_class(event["name"])
    elif kind == "mouse_down":
        tool_system.handle_mouse_down(int(event.get("button", 0)), _position(event), canvas_rect)
    elif kind == "mouse_up":
        tool_system.handle_mouse_up(int(event.get("button", 0)), _position(event), canvas_rect)
    elif kind == "mouse_move":
        tool_system.handle_mouse_move(_position(event), canvas_rect)
    elif kind == "scroll":
        tool_system.handle_scroll(float(event["delta_y"]), _position(event), canvas_rect)
    elif kind == "key_down":
        tool_system.handle_key_down(event["key"])
    elif kind == "key_up":
        tool_system.handle_key_up(event["key"])
    elif kind == "mouse_leave":
        tool_system.handle_mouse_leave()
    elif kind == "detections":
        add_detections(tool_system, event.get("items", []))
    else:
        logger.warning("Skipping unknown event type %r", kind)
        return False
    return True


def replay_events(
    tool_system: ToolSystem,
    events: Iterable[Dict[str, Any]],
    canvas_rect: Optional[CanvasRect] = None,
) -> int:
    """
    Apply events in order.

    Returns:
        Number of events applied
    """
    if canvas_rect is None:
        canvas_rect = CanvasRect()

    applied = 0
    for event in events:
        if apply_event(tool_system, event, canvas_rect):
            applied += 1
    logger.debug("Replayed %d events", applied)
    return applied
