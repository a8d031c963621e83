"""
Core annotation module - UI-agnostic annotation data and geometry.

This module provides the annotation model, the per-image store, the event
system and the coordinate transform used by the tools.
"""

from .events import AnnotationEvent, EventType, EventEmitter
from .state import Annotation, CanvasRect, Point, Viewport
from .store import AnnotationStore, DuplicateAnnotationIdError

__all__ = [
    "Annotation",
    "AnnotationEvent",
    "AnnotationStore",
    "CanvasRect",
    "DuplicateAnnotationIdError",
    "EventType",
    "EventEmitter",
    "Point",
    "Viewport",
]
