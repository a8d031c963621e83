"""
Interaction tools and the engine that dispatches input to them.
"""

from .base import MouseButton, ToolBase
from .rectangle import RectangleMode, RectangleTool
from .selector import SelectorTool
from .pan import PanTool
from .associator import AssociatorTool
from .system import RenderSnapshot, ToolSystem

__all__ = [
    "AssociatorTool",
    "MouseButton",
    "PanTool",
    "RectangleMode",
    "RectangleTool",
    "RenderSnapshot",
    "SelectorTool",
    "ToolBase",
    "ToolSystem",
]
