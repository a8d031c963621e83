"""
Renderer adapter for the interaction engine.

Bridges the ToolSystem with whatever paints the canvas.
"""

from typing import Callable, Dict, Optional, Tuple

import cv2
import numpy as np

from ..core.annotation import AnnotationEvent, EventType, Point
from ..core.annotation.utils import normalize_bounds, world_to_screen
from ..core.annotation.state import CanvasRect
from ..core.tools import RenderSnapshot, ToolSystem
from ..utils.misc import parse_hex_color


class RendererAdapter:
    """
    Adapter connecting the ToolSystem to a renderer.

    Provides a layer that:
    - Keeps the latest read-only snapshot of engine state
    - Translates engine events to a redraw callback
    - Draws a reference overlay with OpenCV
    """

    def __init__(
        self,
        tool_system: ToolSystem,
        redraw_callback: Optional[Callable[[RenderSnapshot], None]] = None,
        line_width: int = 2,
        fill_alpha: float = 0.25,
        colormap: str = "tab20",
    ):
        """
        Initialize adapter.

        Args:
            tool_system: Interaction engine
            redraw_callback: Called with a fresh snapshot after every change
            line_width: Outline width in screen pixels
            fill_alpha: Opacity of the rectangle fill
            colormap: Matplotlib colormap for classes without a configured color
        """
        self.tool_system = tool_system
        self.redraw_callback = redraw_callback
        self.line_width = line_width
        self.fill_alpha = fill_alpha
        self.colormap = colormap

        self.snapshot = tool_system.get_render_snapshot()
        self._fallback_colors: Dict[str, Tuple[int, int, int]] = {}

        self.tool_system.events.on(EventType.STATE_CHANGED, self._on_state_changed)

    def close(self):
        self.tool_system.events.off(EventType.STATE_CHANGED, self._on_state_changed)

    def _on_state_changed(self, event: AnnotationEvent):
        self.snapshot = self.tool_system.get_render_snapshot()
        if self.redraw_callback:
            self.redraw_callback(self.snapshot)

    def class_color(self, class_name: str) -> Tuple[int, int, int]:
        """RGB color of a class, from config or a stable colormap entry."""
        configured = self.tool_system.class_names.get(class_name)
        if configured:
            return parse_hex_color(configured)

        if class_name not in self._fallback_colors:
            import matplotlib.pyplot as plt

            cmap = plt.get_cmap(self.colormap)
            idx = len(self._fallback_colors) % cmap.N
            color = np.array(cmap(idx)[:3]) * 255
            self._fallback_colors[class_name] = tuple(int(c) for c in color)
        return self._fallback_colors[class_name]

    def render(
        self,
        image: np.ndarray,
        canvas_size: Optional[Tuple[int, int]] = None,
    ) -> np.ndarray:
        """
        Draw the current image with its annotations as seen through the viewport.

        Args:
            image: RGB image in world space (H, W, 3)
            canvas_size: (width, height) of the output; defaults to image size

        Returns:
            RGB canvas
        """
        snapshot = self.snapshot
        viewport = snapshot.viewport
        if canvas_size is None:
            canvas_size = (image.shape[1], image.shape[0])
        rect = CanvasRect(0, 0, canvas_size[0], canvas_size[1])

        # world -> screen as an affine warp
        matrix = np.array(
            [
                [viewport.scale, 0, viewport.x * viewport.scale],
                [0, viewport.scale, viewport.y * viewport.scale],
            ],
            dtype=np.float32,
        )
        canvas = cv2.warpAffine(image, matrix, canvas_size, flags=cv2.INTER_NEAREST)

        overlay = canvas.copy()
        selected = set(snapshot.selection)
        outlines = []
        for annotation in snapshot.annotations:
            corners = [Point.from_dict(p) for p in annotation["bounds"]]
            min_x, min_y, max_x, max_y = normalize_bounds(corners)
            p0 = world_to_screen(Point(min_x, min_y), viewport, rect)
            p1 = world_to_screen(Point(max_x, max_y), viewport, rect)
            pt0 = (int(round(p0.x)), int(round(p0.y)))
            pt1 = (int(round(p1.x)), int(round(p1.y)))
            color = self.class_color(annotation["name"])
            cv2.rectangle(overlay, pt0, pt1, color, -1)
            width = self.line_width * 2 if annotation["id"] in selected else self.line_width
            outlines.append((pt0, pt1, color, width))

        canvas = cv2.addWeighted(overlay, self.fill_alpha, canvas, 1 - self.fill_alpha, 0)
        for pt0, pt1, color, width in outlines:
            cv2.rectangle(canvas, pt0, pt1, color, width)

        return canvas
