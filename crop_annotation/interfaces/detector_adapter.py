"""
Detector adapter.

Turns detector output into annotations and feeds them to the engine
through its ordinary mutation API.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Sequence, Union

import numpy as np

from ..core.annotation import Annotation
from ..core.annotation.utils import bbox_to_bounds, is_degenerate
from ..core.tools import ToolSystem

logger = logging.getLogger(__name__)


@dataclass
class Detection:
    """One detector result: ``bbox`` is (x, y, width, height) in image pixels."""

    bbox: Sequence[float]
    class_name: str
    score: float = 1.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Detection":
        return cls(
            bbox=[float(v) for v in data["bbox"]],
            class_name=data["class"],
            score=float(data.get("score", 1.0)),
        )


DetectionLike = Union[Detection, Dict[str, Any]]
Detector = Callable[[np.ndarray], Iterable[DetectionLike]]


def _as_detection(item: DetectionLike) -> Detection:
    return item if isinstance(item, Detection) else Detection.from_dict(item)


def detections_to_annotations(
    detections: Iterable[DetectionLike], min_score: float = 0.0
) -> List[Annotation]:
    """
    Convert detector results to rectangle annotations.

    Zero-area boxes and boxes below ``min_score`` are skipped.
    """
    annotations = []
    for item in detections:
        detection = _as_detection(item)
        if detection.score < min_score:
            continue
        bounds = bbox_to_bounds(*detection.bbox)
        if is_degenerate(bounds):
            logger.debug("Skipping zero-area detection %s", detection.bbox)
            continue
        annotations.append(Annotation.rectangle(*bounds, name=detection.class_name))
    return annotations


def add_detections(
    tool_system: ToolSystem,
    detections: Iterable[DetectionLike],
    min_score: float = 0.0,
) -> List[Annotation]:
    """Add detections to the current image of the engine."""
    if tool_system.current_image is None:
        logger.debug("No current image, dropping detections")
        return []

    annotations = detections_to_annotations(detections, min_score=min_score)
    for annotation in annotations:
        tool_system.add_annotation(annotation)
    logger.info(
        "Added %d detections to %s", len(annotations), tool_system.current_image
    )
    return annotations


def run_detector(
    tool_system: ToolSystem,
    detector: Detector,
    image: np.ndarray,
    min_score: float = 0.0,
) -> List[Annotation]:
    """Run a detector on an image and add its results to the current image."""
    return add_detections(tool_system, detector(image), min_score=min_score)
