"""
Base class for interaction tools.

A tool owns the interpretation of pointer and keyboard events while it is
active. Tools never keep their own copy of engine state; they read and
mutate the store, selection and viewport through the ToolSystem.
"""

from enum import IntEnum
from typing import TYPE_CHECKING, Optional

from ..annotation.state import CanvasRect, Point
from ..annotation.utils import screen_to_world

if TYPE_CHECKING:
    from .system import ToolSystem


class MouseButton(IntEnum):
    PRIMARY = 0
    MIDDLE = 1
    SECONDARY = 2


class ToolBase:
    """
    Common interface for all tools.

    Subclasses override the hooks they care about; everything else is a
    no-op. ``cancel`` must leave the engine as if the current gesture
    never started, it is called on deactivation, pointer-leave and image
    change.
    """

    name: str = ""
    keybind: Optional[str] = None

    def __init__(self, tool_system: "ToolSystem"):
        self.tool_system = tool_system

    def __repr__(self):
        return f"<{type(self).__name__} {self.name!r}>"

    def to_world(self, position: Point, canvas_rect: CanvasRect) -> Point:
        return screen_to_world(position, self.tool_system.viewport, canvas_rect)

    # Lifecycle

    def on_tool_selected(self):
        self.cancel()

    def on_tool_deselected(self):
        self.cancel()

    def cancel(self):
        pass

    # Pointer events

    def on_mouse_down(self, button: int, position: Point, canvas_rect: CanvasRect):
        if button == MouseButton.PRIMARY:
            self.on_primary_down(position, canvas_rect)
        elif button == MouseButton.MIDDLE:
            self.on_middle_down(position, canvas_rect)
        elif button == MouseButton.SECONDARY:
            self.on_secondary_down(position, canvas_rect)

    def on_primary_down(self, position: Point, canvas_rect: CanvasRect):
        pass

    def on_middle_down(self, position: Point, canvas_rect: CanvasRect):
        pass

    def on_secondary_down(self, position: Point, canvas_rect: CanvasRect):
        pass

    def on_mouse_up(self, button: int, position: Point, canvas_rect: CanvasRect):
        pass

    def on_mouse_move(self, position: Point, canvas_rect: CanvasRect):
        pass

    def on_scroll(self, delta_y: float, position: Point, canvas_rect: CanvasRect):
        pass

    def on_mouse_leave(self):
        self.cancel()

    # Keyboard events

    def on_key_down(self, key: str):
        pass

    def on_key_up(self, key: str):
        pass
