"""
Interfaces module - adapters for the interaction engine's collaborators.

Provides adapters to connect the engine with a renderer, an object
detector, the crop exporter and recorded input logs.
"""

from .renderer_adapter import RendererAdapter
from .detector_adapter import Detection, add_detections, detections_to_annotations, run_detector
from .exporter import AnnotationExporter, crop_annotation
from .replay import apply_event, replay_events

__all__ = [
    'AnnotationExporter',
    'Detection',
    'RendererAdapter',
    'add_detections',
    'apply_event',
    'crop_annotation',
    'detections_to_annotations',
    'replay_events',
    'run_detector',
]
