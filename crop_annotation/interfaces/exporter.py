"""
Annotation Exporter

Export labeled crops as a zip archive containing:
- annotations.json with every exported annotation
- metadata.json with export statistics
- crops/<image>/<class>/<annotation id>.png
"""
import io
import json
import logging
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional

import cv2
import numpy as np

from ..core.annotation import Annotation, AnnotationStore
from ..core.annotation.utils import normalize_bounds
from ..utils.misc import try_tqdm

logger = logging.getLogger(__name__)


def crop_annotation(image: np.ndarray, annotation: Annotation) -> Optional[np.ndarray]:
    """
    Crop an annotation's normalized bounds out of an image.

    Bounds are clamped to the image; returns None when nothing is left.
    """
    height, width = image.shape[:2]
    min_x, min_y, max_x, max_y = normalize_bounds(annotation.bounds)
    x0 = int(np.clip(np.floor(min_x), 0, width))
    y0 = int(np.clip(np.floor(min_y), 0, height))
    x1 = int(np.clip(np.ceil(max_x), 0, width))
    y1 = int(np.clip(np.ceil(max_y), 0, height))
    if x1 <= x0 or y1 <= y0:
        return None
    return image[y0:y1, x0:x1]


def _safe_name(name: str) -> str:
    return "".join(c if c.isalnum() or c in "-_." else "_" for c in name) or "_"


class AnnotationExporter:
    """
    Export annotation stores as downloadable zip archives
    """

    def __init__(self, output_dir: Path = None):
        """
        Initialize exporter

        Args:
            output_dir: Output directory for exports (default: data/exports)
        """
        if output_dir is None:
            output_dir = Path("data/exports")
        self.output_dir = Path(output_dir)

    def export_archive(
        self,
        store: AnnotationStore,
        images: Mapping[str, np.ndarray],
        output_name: str = "annotations",
        image_keys: Optional[Iterable[str]] = None,
    ) -> Path:
        """
        Export crops as a zip archive to disk

        Args:
            store: Annotation store to read
            images: Image key -> RGB image
            output_name: Output filename without extension
            image_keys: Images to export (default: all in the store)

        Returns:
            Path to exported zip file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        zip_path = self.output_dir / f"{output_name}.zip"

        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            self._write_to_zip(zf, store, images, image_keys)

        logger.info("Exported annotations to %s", zip_path)
        return zip_path

    def export_bytes(
        self,
        store: AnnotationStore,
        images: Mapping[str, np.ndarray],
        image_keys: Optional[Iterable[str]] = None,
    ) -> bytes:
        """
        Export crops as a zip archive in memory (for browser download)
        """
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            self._write_to_zip(zf, store, images, image_keys)

        buffer.seek(0)
        return buffer.getvalue()

    def _write_to_zip(
        self,
        zf: zipfile.ZipFile,
        store: AnnotationStore,
        images: Mapping[str, np.ndarray],
        image_keys: Optional[Iterable[str]],
    ) -> None:
        keys = list(image_keys) if image_keys is not None else store.image_keys()

        exported = {}
        skipped_images = []
        num_crops = 0
        for key in try_tqdm(keys, desc="Exporting crops"):
            annotations = store.annotations_for(key)
            exported[key] = [a.save() for a in annotations]

            image = images.get(key)
            if image is None:
                logger.warning("No pixels for image %s, skipping its crops", key)
                skipped_images.append(key)
                continue

            for annotation in annotations:
                crop = crop_annotation(image, annotation)
                if crop is None:
                    logger.warning(
                        "Annotation %s lies outside image %s", annotation.id, key
                    )
                    continue
                if crop.ndim == 3 and crop.shape[2] == 3:
                    crop = cv2.cvtColor(crop, cv2.COLOR_RGB2BGR)
                ok, encoded = cv2.imencode(".png", crop)
                if not ok:
                    logger.warning("Could not encode crop %s", annotation.id)
                    continue
                arcname = "crops/{}/{}/{}.png".format(
                    _safe_name(Path(key).stem),
                    _safe_name(annotation.name),
                    annotation.id,
                )
                zf.writestr(arcname, encoded.tobytes())
                num_crops += 1

        zf.writestr(
            "annotations.json", json.dumps({"images": exported}, indent=2)
        )

        metadata = {
            "num_images": len(keys),
            "num_images_cropped": len(keys) - len(skipped_images),
            "skipped_images": skipped_images,
            "num_annotations": sum(len(v) for v in exported.values()),
            "num_crops": num_crops,
            "exported_at": datetime.now().isoformat(),
        }
        zf.writestr("metadata.json", json.dumps(metadata, indent=2))
