"""Selection tool."""

from ..annotation.state import CanvasRect, Point
from .base import ToolBase

DELETE_KEYS = ("delete", "backspace")


class SelectorTool(ToolBase):
    """
    Selects every annotation under the cursor.

    Overlapping annotations are all selected, not only the topmost one.
    """

    name = "Selector"
    keybind = "v"

    def on_primary_down(self, position: Point, canvas_rect: CanvasRect):
        hits = self.tool_system.annotations_at(self.to_world(position, canvas_rect))
        self.tool_system.select_annotations([a.id for a in hits])

    def on_key_down(self, key: str):
        key = key.lower()
        if key in DELETE_KEYS:
            for annotation in self.tool_system.get_selected_annotations():
                self.tool_system.remove_annotation(annotation)
        elif key == "escape":
            self.tool_system.select_annotations([])
