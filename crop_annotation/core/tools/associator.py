"""Association tool."""

import logging
from typing import List

from ..annotation.state import CanvasRect, Point
from .base import ToolBase

logger = logging.getLogger(__name__)


class AssociatorTool(ToolBase):
    """
    Links annotations in two clicks.

    The first primary click marks the annotations under the cursor as
    pending sources; the second click associates every source with every
    annotation under the cursor. Clicking empty space drops the pending
    sources. Pending sources are kept apart from the shared selection.
    """

    name = "Associator"
    keybind = "a"

    def __init__(self, tool_system):
        super().__init__(tool_system)
        self.pending_ids: List[str] = []

    def cancel(self):
        self.pending_ids = []

    def on_primary_down(self, position: Point, canvas_rect: CanvasRect):
        hits = self.tool_system.annotations_at(self.to_world(position, canvas_rect))

        if not hits:
            self.cancel()
            return

        if not self.pending_ids:
            self.pending_ids = [a.id for a in hits]
            return

        for source in self.tool_system.resolve_annotations(self.pending_ids):
            for target in hits:
                if target is not source:
                    self.tool_system.associate(source, target)
                    logger.debug("Associated %s with %s", source.id, target.id)
        self.cancel()

    def on_key_down(self, key: str):
        if key.lower() == "escape":
            self.cancel()
