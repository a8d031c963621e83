"""
Example headless annotation session.

Drives the interaction engine with synthetic pointer input, renders the
result with OpenCV and exports labeled crops, without any GUI toolkit.

Usage:
    python examples/headless_session.py path/to/image.jpg
"""

import logging
import sys
from pathlib import Path

import cv2

from crop_annotation.core.annotation import CanvasRect, Point
from crop_annotation.core.tools import ToolSystem
from crop_annotation.interfaces import AnnotationExporter, RendererAdapter
from crop_annotation.utils.config import load_config

logging.basicConfig(level=logging.INFO)


def click(ts, rect, x, y):
    ts.handle_mouse_down(0, Point(x, y), rect)
    ts.handle_mouse_up(0, Point(x, y), rect)


def main(image_path: Path):
    image = cv2.imread(str(image_path))
    if image is None:
        raise SystemExit(f"Could not read {image_path}")
    image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    height, width = image.shape[:2]
    rect = CanvasRect(0, 0, width, height)

    ts = ToolSystem(load_config())
    renderer = RendererAdapter(ts)
    ts.set_current_image(image_path.name)

    # two rectangles, then link them
    ts.handle_key_down("r")
    click(ts, rect, width * 0.1, height * 0.1)
    click(ts, rect, width * 0.4, height * 0.4)
    click(ts, rect, width * 0.5, height * 0.5)
    click(ts, rect, width * 0.9, height * 0.9)

    ts.handle_key_down("a")
    click(ts, rect, width * 0.2, height * 0.2)
    click(ts, rect, width * 0.6, height * 0.6)

    canvas = renderer.render(image)
    preview = image_path.with_name(image_path.stem + "_annotated.png")
    cv2.imwrite(str(preview), cv2.cvtColor(canvas, cv2.COLOR_RGB2BGR))
    print(f"Preview written to {preview}")

    zip_path = AnnotationExporter().export_archive(
        ts.store, {image_path.name: image}, output_name=image_path.stem
    )
    print(f"Crops exported to {zip_path}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    main(Path(sys.argv[1]))
