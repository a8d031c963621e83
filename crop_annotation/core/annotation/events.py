"""
Event system for the interaction engine.

Provides a decoupled way for the engine to notify renderers and UI
components about state changes without depending on specific UI frameworks.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # Image events
    IMAGE_CHANGED = "image_changed"

    # Annotation events
    ANNOTATION_ADDED = "annotation_added"
    ANNOTATION_REMOVED = "annotation_removed"
    ANNOTATION_UPDATED = "annotation_updated"
    ASSOCIATION_CHANGED = "association_changed"
    ANNOTATION_CLASS_CHANGED = "annotation_class_changed"

    # Interaction events
    SELECTION_CHANGED = "selection_changed"
    TOOL_CHANGED = "tool_changed"
    VIEWPORT_CHANGED = "viewport_changed"
    KEYBINDS_UPDATED = "keybinds_updated"

    # Emitted after every other event, for renderers that only redraw
    STATE_CHANGED = "state_changed"


@dataclass
class AnnotationEvent:
    """Event that occurs during annotation."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners and callback in self._listeners[event_type]:
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # A broken listener must not break input dispatch
                logger.exception("Error in %s listener", event.event_type.value)

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
