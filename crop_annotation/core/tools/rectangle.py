"""Rectangle creation tool."""

import logging
from enum import Enum, auto
from typing import Optional

from ..annotation.state import Annotation, CanvasRect, Point
from ..annotation.utils import is_degenerate
from .base import ToolBase

logger = logging.getLogger(__name__)


class RectangleMode(Enum):
    IDLE = auto()  # No rectangle in progress
    ANCHORED = auto()  # First corner placed, waiting for the second click


class RectangleTool(ToolBase):
    """
    Draws rectangles with two clicks.

    The first primary click anchors a preview annotation that is inserted
    into the store right away; mouse moves drag its second corner and a
    second primary click commits it. Zero-area results are retracted.
    """

    name = "Rectangle"
    keybind = "r"

    def __init__(self, tool_system):
        super().__init__(tool_system)
        self.mode = RectangleMode.IDLE
        self.current: Optional[Annotation] = None

    def cancel(self):
        if self.current is not None:
            self.tool_system.remove_annotation(self.current)
            logger.debug("Retracted in-progress rectangle %s", self.current.id)
        self.current = None
        self.mode = RectangleMode.IDLE

    def on_primary_down(self, position: Point, canvas_rect: CanvasRect):
        if self.tool_system.current_image is None:
            return

        world = self.to_world(position, canvas_rect)

        if self.mode is RectangleMode.IDLE:
            self.current = Annotation.rectangle(
                world, world, name=self.tool_system.current_annotation_class
            )
            self.tool_system.add_annotation(self.current)
            self.mode = RectangleMode.ANCHORED
            return

        self.tool_system.update_annotation_corner(self.current, 1, world)
        if is_degenerate(self.current.bounds):
            self.cancel()
            return

        logger.debug("Committed rectangle %s", self.current.id)
        self.current = None
        self.mode = RectangleMode.IDLE

    def on_mouse_move(self, position: Point, canvas_rect: CanvasRect):
        if self.mode is not RectangleMode.ANCHORED:
            return
        self.tool_system.update_annotation_corner(
            self.current, 1, self.to_world(position, canvas_rect)
        )

    def on_key_down(self, key: str):
        if key.lower() == "escape":
            self.cancel()
