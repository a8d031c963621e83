"""
Interaction engine.

Owns the viewport, the annotation store, the selection and the keybind
table, and routes every input event to exactly one active tool.
UI-agnostic - renderers subscribe to the emitted events.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from easydict import EasyDict as edict

from ...utils.config import default_config
from ..annotation.events import AnnotationEvent, EventEmitter, EventType
from ..annotation.state import Annotation, CanvasRect, Point, Viewport
from ..annotation.store import AnnotationStore
from ..annotation.utils import clamp_scale, point_in_bounds
from .associator import AssociatorTool
from .base import ToolBase
from .pan import PanTool
from .rectangle import RectangleTool
from .selector import SelectorTool

logger = logging.getLogger(__name__)

TOOL_CLASSES = (RectangleTool, PanTool, SelectorTool, AssociatorTool)

DEFAULT_CLASS_NAME = "Default"


@dataclass(frozen=True)
class RenderSnapshot:
    """Read-only view of what a renderer needs to draw a frame."""

    image_key: Optional[str]
    viewport: Viewport
    annotations: Tuple[Dict[str, Any], ...]
    selection: Tuple[str, ...]
    tool_name: Optional[str]


class ToolSystem:
    """
    Manages tools and the annotation state they act on.

    This class handles:
    - Tool registration and switching (by call or keybind)
    - Event dispatch to the active tool
    - Per-image annotation storage and the association graph
    - Selection and viewport bookkeeping
    - Event emission for renderers

    Every public call is total: input arriving without a current image or
    hitting nothing is ignored.
    """

    def __init__(self, cfg: Optional[edict] = None):
        """
        Initialize the engine.

        Args:
            cfg: Configuration tree (see utils.config); defaults are used
                for anything missing
        """
        self.cfg = cfg if cfg is not None else default_config()

        self.events = EventEmitter()
        self.store = AnnotationStore()

        self.current_image: Optional[str] = None
        self.selected_ids: List[str] = []
        self.viewport = Viewport()
        self.keybinds: Dict[str, str] = {}

        self._current_annotation_class: Optional[str] = None

        # Tools live for the whole process
        self.tools: List[ToolBase] = [cls(self) for cls in TOOL_CLASSES]
        self.current_tool: Optional[ToolBase] = None

        keybinds = self.cfg.get("keybinds")
        self.update_keybinds(self._default_keybinds() if keybinds is None else keybinds)
        if self.tools:
            self.set_current_tool(self.tools[0])

    # Configuration

    @property
    def viewport_config(self) -> edict:
        vp = self.cfg.get("viewport") or {}
        return edict(
            min_scale=float(vp.get("min_scale", 0.05)),
            max_scale=float(vp.get("max_scale", 10.0)),
            zoom_factor=float(vp.get("zoom_factor", 1.1)),
        )

    @property
    def class_names(self) -> Dict[str, str]:
        """Configured class name -> color."""
        return dict(self.cfg.get("classes") or {})

    def _default_keybinds(self) -> Dict[str, str]:
        return {tool.keybind: tool.name for tool in self.tools if tool.keybind}

    def update_keybinds(self, keybinds: Mapping[str, str]):
        """Replace the key -> tool name table."""
        self.keybinds = {str(k).lower(): v for k, v in keybinds.items()}
        self._emit(EventType.KEYBINDS_UPDATED, {"keybinds": dict(self.keybinds)})

    # Annotation class

    @property
    def current_annotation_class(self) -> str:
        """Class given to new annotations; defaults to the first configured one."""
        if not self._current_annotation_class:
            names = list(self.class_names)
            self._current_annotation_class = names[0] if names else DEFAULT_CLASS_NAME
        return self._current_annotation_class

    def set_current_annotation_class(self, class_name: str) -> bool:
        """Switch the class for new annotations; unknown classes are ignored."""
        if class_name not in self.class_names:
            logger.debug("Ignoring unknown annotation class %r", class_name)
            return False
        self._current_annotation_class = class_name
        self._emit(EventType.ANNOTATION_CLASS_CHANGED, {"class_name": class_name})
        return True

    # Tools

    def get_tool(self, name: str) -> Optional[ToolBase]:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def set_current_tool(self, tool: Union[ToolBase, str]):
        """
        Activate a tool.

        The outgoing tool cleans up its transient state first, so switching
        mid-gesture is always safe.
        """
        if isinstance(tool, str):
            found = self.get_tool(tool)
            if found is None:
                logger.debug("Ignoring unknown tool %r", tool)
                return
            tool = found

        if self.current_tool is not None:
            self.current_tool.on_tool_deselected()

        self.current_tool = tool
        tool.on_tool_selected()
        logger.debug("Current tool: %s", tool.name)
        self._emit(EventType.TOOL_CHANGED, {"tool": tool.name})

    # Images

    def set_current_image(self, image_key: str):
        """
        Switch the active image.

        Annotations of the previous image are kept; the selection and any
        in-progress gesture are dropped.
        """
        if self.current_tool is not None:
            self.current_tool.cancel()

        self.current_image = image_key
        self.store.ensure_image(image_key)
        self.selected_ids = []

        self._emit(EventType.IMAGE_CHANGED, {"image_key": image_key})
        self._emit(EventType.SELECTION_CHANGED, {"selected_ids": []})

    # Annotations

    def get_annotations(self) -> List[Annotation]:
        """Annotations of the current image."""
        return self.store.annotations_for(self.current_image)

    def get_annotation(self, annotation_id: str) -> Optional[Annotation]:
        if self.current_image is None:
            return None
        return self.store.get(self.current_image, annotation_id)

    def resolve_annotations(self, annotation_ids: Iterable[str]) -> List[Annotation]:
        if self.current_image is None:
            return []
        return self.store.resolve(self.current_image, annotation_ids)

    def annotations_at(self, point: Point) -> List[Annotation]:
        """All annotations of the current image containing a world point."""
        return [a for a in self.get_annotations() if point_in_bounds(point, a.bounds)]

    def add_annotation(self, annotation: Annotation):
        """Add an annotation to the current image; ignored without one."""
        if self.current_image is None:
            logger.debug("No current image, dropping annotation %s", annotation.id)
            return
        self.store.add(self.current_image, annotation)
        self._emit(EventType.ANNOTATION_ADDED, {"annotation_id": annotation.id})

    def remove_annotation(self, annotation: Annotation):
        """
        Remove an annotation from the current image.

        Association edges pointing at it and its selection entry go too.
        """
        if self.current_image is None:
            return
        removed = self.store.remove(self.current_image, annotation.id)
        if removed is None:
            return

        self._emit(EventType.ANNOTATION_REMOVED, {"annotation_id": annotation.id})
        if annotation.id in self.selected_ids:
            self.select_annotations(
                [i for i in self.selected_ids if i != annotation.id]
            )

    def update_annotation_corner(self, annotation: Annotation, index: int, point: Point):
        """Move one corner of a stored annotation."""
        if self.get_annotation(annotation.id) is not annotation:
            return
        annotation.set_corner(index, point)
        self._emit(EventType.ANNOTATION_UPDATED, {"annotation_id": annotation.id})

    def associate(self, a: Annotation, b: Annotation):
        """Create an undirected edge between two annotations of the current image."""
        if a is b or self.get_annotation(a.id) is None or self.get_annotation(b.id) is None:
            return
        a.add_association(b)
        b.add_association(a)
        self._emit(EventType.ASSOCIATION_CHANGED, {"annotation_ids": [a.id, b.id]})

    def dissociate(self, a: Annotation, b: Annotation):
        a.remove_association(b)
        b.remove_association(a)
        self._emit(EventType.ASSOCIATION_CHANGED, {"annotation_ids": [a.id, b.id]})

    # Selection

    def select_annotations(self, annotation_ids: Iterable[str]):
        """Replace the selection; ids not in the current image are dropped."""
        existing = set(self.store.ids_for(self.current_image))
        selected = []
        for annotation_id in annotation_ids:
            if annotation_id in existing and annotation_id not in selected:
                selected.append(annotation_id)
        self.selected_ids = selected
        self._emit(EventType.SELECTION_CHANGED, {"selected_ids": list(selected)})

    def get_selected_annotations(self) -> List[Annotation]:
        return self.resolve_annotations(self.selected_ids)

    # Viewport

    def set_viewport(self, viewport: Viewport):
        """Replace the viewport, clamping its scale to the configured range."""
        cfg = self.viewport_config
        scale = clamp_scale(viewport.scale, cfg.min_scale, cfg.max_scale)
        if scale != viewport.scale:
            viewport = viewport.with_changes(scale=scale)
        self.viewport = viewport
        self._emit(EventType.VIEWPORT_CHANGED, viewport.to_dict())

    # Renderer

    def get_render_snapshot(self) -> RenderSnapshot:
        return RenderSnapshot(
            image_key=self.current_image,
            viewport=self.viewport,
            annotations=tuple(a.save() for a in self.get_annotations()),
            selection=tuple(self.selected_ids),
            tool_name=self.current_tool.name if self.current_tool else None,
        )

    # Event dispatch

    def handle_mouse_down(self, button: int, position: Point, canvas_rect: CanvasRect):
        if self.current_tool is not None:
            self.current_tool.on_mouse_down(button, position, canvas_rect)

    def handle_mouse_up(self, button: int, position: Point, canvas_rect: CanvasRect):
        if self.current_tool is not None:
            self.current_tool.on_mouse_up(button, position, canvas_rect)

    def handle_mouse_move(self, position: Point, canvas_rect: CanvasRect):
        if self.current_tool is not None:
            self.current_tool.on_mouse_move(position, canvas_rect)

    def handle_scroll(self, delta_y: float, position: Point, canvas_rect: CanvasRect):
        if self.current_tool is not None:
            self.current_tool.on_scroll(delta_y, position, canvas_rect)

    def handle_mouse_leave(self):
        if self.current_tool is not None:
            self.current_tool.on_mouse_leave()

    def handle_key_down(self, key: str):
        """
        Activate the bound tool, if any, then forward the key.

        A bound key always re-activates its tool, so pressing the active
        tool's own key resets its transient state.
        """
        tool_name = self.keybinds.get(key.lower())
        if tool_name is not None:
            tool = self.get_tool(tool_name)
            if tool is not None:
                self.set_current_tool(tool)

        if self.current_tool is not None:
            self.current_tool.on_key_down(key)

    def handle_key_up(self, key: str):
        if self.current_tool is not None:
            self.current_tool.on_key_up(key)

    def _emit(self, event_type: EventType, data: Optional[Dict[str, Any]] = None):
        self.events.emit(AnnotationEvent(event_type, data))
        self.events.emit(AnnotationEvent(EventType.STATE_CHANGED, {"cause": event_type}))
