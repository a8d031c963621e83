"""
Pure coordinate functions for the interaction engine.

These functions have no side effects and can be tested in isolation.
"""

from typing import Sequence, Tuple

from .state import CanvasRect, Point, Viewport


def screen_to_world(position: Point, viewport: Viewport, rect: CanvasRect) -> Point:
    """
    Convert a pointer position to world coordinates.

    Args:
        position: Pointer position in screen space
        viewport: Current pan/zoom
        rect: On-screen bounds of the canvas

    Returns:
        Point in world space
    """
    return Point(
        (position.x - rect.left) / viewport.scale - viewport.x,
        (position.y - rect.top) / viewport.scale - viewport.y,
    )


def world_to_screen(point: Point, viewport: Viewport, rect: CanvasRect) -> Point:
    """
    Convert a world point to screen coordinates (inverse of screen_to_world).

    Args:
        point: Point in world space
        viewport: Current pan/zoom
        rect: On-screen bounds of the canvas

    Returns:
        Point in screen space
    """
    return Point(
        (point.x + viewport.x) * viewport.scale + rect.left,
        (point.y + viewport.y) * viewport.scale + rect.top,
    )


def normalize_bounds(bounds: Sequence[Point]) -> Tuple[float, float, float, float]:
    """
    Normalize two opposite corners.

    Returns:
        (min_x, min_y, max_x, max_y)
    """
    p0, p1 = bounds
    return (min(p0.x, p1.x), min(p0.y, p1.y), max(p0.x, p1.x), max(p0.y, p1.y))


def point_in_bounds(point: Point, bounds: Sequence[Point]) -> bool:
    """Closed-rectangle hit test, independent of corner order."""
    min_x, min_y, max_x, max_y = normalize_bounds(bounds)
    return min_x <= point.x <= max_x and min_y <= point.y <= max_y


def is_degenerate(bounds: Sequence[Point]) -> bool:
    """True if the rectangle has zero area."""
    min_x, min_y, max_x, max_y = normalize_bounds(bounds)
    return max_x - min_x == 0 or max_y - min_y == 0


def bbox_to_bounds(x: float, y: float, width: float, height: float) -> Tuple[Point, Point]:
    """Convert an (x, y, w, h) box to a pair of corners."""
    return Point(x, y), Point(x + width, y + height)


def clamp_scale(scale: float, min_scale: float, max_scale: float) -> float:
    return max(min_scale, min(max_scale, scale))


def pan_viewport(viewport: Viewport, dx: float, dy: float) -> Viewport:
    """
    Integrate a screen-space drag delta into the pan offset.

    The delta is divided by the current scale so drag speed does not
    depend on zoom.
    """
    return viewport.with_changes(
        x=viewport.x + dx / viewport.scale,
        y=viewport.y + dy / viewport.scale,
    )


def zoom_viewport(
    viewport: Viewport,
    delta_y: float,
    position: Point,
    rect: CanvasRect,
    factor: float = 1.1,
    min_scale: float = 0.05,
    max_scale: float = 10.0,
) -> Viewport:
    """
    Apply one zoom step anchored at the cursor.

    Negative ``delta_y`` (wheel up) zooms in. The world point under
    ``position`` stays under it after the zoom.

    Args:
        viewport: Current pan/zoom
        delta_y: Scroll amount, only the sign is used
        position: Cursor position in screen space
        rect: On-screen bounds of the canvas
        factor: Geometric zoom step per tick
        min_scale: Lower scale bound
        max_scale: Upper scale bound

    Returns:
        New viewport
    """
    if delta_y == 0:
        return viewport

    if delta_y < 0:
        new_scale = viewport.scale * factor
    else:
        new_scale = viewport.scale / factor
    new_scale = clamp_scale(new_scale, min_scale, max_scale)

    anchor = screen_to_world(position, viewport, rect)
    return Viewport(
        x=(position.x - rect.left) / new_scale - anchor.x,
        y=(position.y - rect.top) / new_scale - anchor.y,
        scale=new_scale,
    )
