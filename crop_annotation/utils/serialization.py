import json
import logging
from pathlib import Path

from crop_annotation.core.annotation import AnnotationStore

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


def save_store(store: AnnotationStore, path: Path) -> Path:
    """Write an annotation store as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = {"version": FORMAT_VERSION, **store.to_dict()}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.debug(f"Saved {len(store)} annotations to {path}")
    return path


def load_store(path: Path) -> AnnotationStore:
    """Read an annotation store written by save_store."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported annotations format version: {version}")
    return AnnotationStore.from_dict(data)
