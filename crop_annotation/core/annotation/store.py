"""
Per-image annotation storage.

Two-level mapping: image key -> annotation id -> Annotation.
"""

import logging
from typing import Any, Dict, List, Optional

from .state import Annotation

logger = logging.getLogger(__name__)


class DuplicateAnnotationIdError(RuntimeError):
    """Raised when two different annotations share an id in one image."""


class AnnotationStore:
    """
    Storage for annotations of every image seen in this process.

    Sub-maps are created lazily and never dropped, so switching back to an
    image keeps its annotations. Insertion order is preserved.
    """

    def __init__(self):
        self._images: Dict[str, Dict[str, Annotation]] = {}

    def ensure_image(self, image_key: str) -> Dict[str, Annotation]:
        """Get or create the sub-map for an image."""
        if image_key not in self._images:
            self._images[image_key] = {}
        return self._images[image_key]

    def image_keys(self) -> List[str]:
        return list(self._images.keys())

    def add(self, image_key: str, annotation: Annotation):
        """
        Insert an annotation into an image.

        Re-adding the same object is a no-op. A different object with an
        existing id is a programming error.
        """
        annotations = self.ensure_image(image_key)
        existing = annotations.get(annotation.id)
        if existing is not None and existing is not annotation:
            raise DuplicateAnnotationIdError(
                f"Annotation id {annotation.id} already used in image {image_key}"
            )
        annotations[annotation.id] = annotation

    def remove(self, image_key: str, annotation_id: str) -> Optional[Annotation]:
        """
        Remove an annotation and scrub every edge pointing at it.

        Returns:
            The removed annotation, or None if it was not stored
        """
        annotations = self._images.get(image_key)
        if annotations is None:
            return None

        removed = annotations.pop(annotation_id, None)
        if removed is None:
            return None

        for other in annotations.values():
            other.remove_association(annotation_id)

        logger.debug("Removed annotation %s from %s", annotation_id, image_key)
        return removed

    def get(self, image_key: str, annotation_id: str) -> Optional[Annotation]:
        return self._images.get(image_key, {}).get(annotation_id)

    def annotations_for(self, image_key: Optional[str]) -> List[Annotation]:
        """All annotations of an image in insertion order (empty if unknown)."""
        if image_key is None:
            return []
        return list(self._images.get(image_key, {}).values())

    def ids_for(self, image_key: Optional[str]) -> List[str]:
        if image_key is None:
            return []
        return list(self._images.get(image_key, {}).keys())

    def resolve(self, image_key: str, annotation_ids) -> List[Annotation]:
        """Map ids to annotations, skipping ids that no longer exist."""
        annotations = self._images.get(image_key, {})
        return [annotations[i] for i in annotation_ids if i in annotations]

    def __contains__(self, image_key: str) -> bool:
        return image_key in self._images

    def __len__(self) -> int:
        """Total number of annotations across all images."""
        return sum(len(a) for a in self._images.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "images": {
                key: [a.save() for a in annotations.values()]
                for key, annotations in self._images.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationStore":
        store = cls()
        for key, annotations in data.get("images", {}).items():
            store.ensure_image(key)
            for item in annotations:
                store.add(key, Annotation.from_dict(item))
        return store
