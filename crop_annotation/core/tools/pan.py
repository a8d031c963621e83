"""Viewport navigation tool."""

from typing import Optional

from ..annotation.state import CanvasRect, Point
from ..annotation.utils import pan_viewport, zoom_viewport
from .base import MouseButton, ToolBase


class PanTool(ToolBase):
    """
    Drag to pan, scroll to zoom around the cursor.
    """

    name = "Pan"
    keybind = "h"

    def __init__(self, tool_system):
        super().__init__(tool_system)
        self.is_panning = False
        self.last_position: Optional[Point] = None

    def cancel(self):
        self.is_panning = False
        self.last_position = None

    def on_primary_down(self, position: Point, canvas_rect: CanvasRect):
        self.is_panning = True
        self.last_position = position

    def on_mouse_move(self, position: Point, canvas_rect: CanvasRect):
        if not self.is_panning or self.last_position is None:
            return

        dx = position.x - self.last_position.x
        dy = position.y - self.last_position.y
        self.tool_system.set_viewport(pan_viewport(self.tool_system.viewport, dx, dy))
        self.last_position = position

    def on_mouse_up(self, button: int, position: Point, canvas_rect: CanvasRect):
        if button == MouseButton.PRIMARY:
            self.cancel()

    def on_scroll(self, delta_y: float, position: Point, canvas_rect: CanvasRect):
        cfg = self.tool_system.viewport_config
        new_viewport = zoom_viewport(
            self.tool_system.viewport,
            delta_y,
            position,
            canvas_rect,
            factor=cfg.zoom_factor,
            min_scale=cfg.min_scale,
            max_scale=cfg.max_scale,
        )
        if new_viewport != self.tool_system.viewport:
            self.tool_system.set_viewport(new_viewport)
