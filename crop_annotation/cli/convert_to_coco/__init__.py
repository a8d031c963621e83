import logging
import time
from gettext import gettext as _
from pathlib import Path

from crop_annotation.utils.misc import incrf, try_tqdm

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Convert an annotations JSON to a COCO detection dataset")


def build_coco(store, description: str, image_sizes=None) -> dict:
    """
    Build a COCO dict (bbox only) from an annotation store.

    Args:
        store: AnnotationStore to convert
        description: Dataset description
        image_sizes: Optional image key -> (width, height)
    """
    from crop_annotation.core.annotation.utils import is_degenerate, normalize_bounds

    image_sizes = image_sizes or {}
    images_idx = incrf()
    annotations_idx = incrf()
    data = dict(
        info=dict(
            contributor="Created with crop_annotation",
            description=description,
            date_created=time.strftime("%Y/%m/%d"),
            version="1.0",
            year=time.strftime("%Y"),
        ),
        images=[],
        annotations=[],
        categories=[],
    )

    classes = set()
    for key in store.image_keys():
        for annotation in store.annotations_for(key):
            classes.add(annotation.name)
    classes = sorted(classes)
    classes = {cls: i + 1 for i, cls in enumerate(classes)}
    for cls, i in classes.items():
        data["categories"].append(dict(id=i, name=cls, supercategory=None))

    for key in try_tqdm(store.image_keys(), desc=_("Ingesting images...")):
        annotations = store.annotations_for(key)
        if not annotations:
            continue
        image_id = next(images_idx)
        image_to_append = dict(file_name=key, id=image_id)
        if key in image_sizes:
            image_to_append["width"], image_to_append["height"] = image_sizes[key]
        for annotation in annotations:
            if is_degenerate(annotation.bounds):
                continue
            xmin, ymin, xmax, ymax = normalize_bounds(annotation.bounds)
            w, h = xmax - xmin, ymax - ymin
            data["annotations"].append(
                dict(
                    area=w * h,
                    iscrowd=0,
                    image_id=image_id,
                    bbox=[xmin, ymin, w, h],
                    category_id=classes[annotation.name],
                    id=next(annotations_idx),
                    attributes=dict(
                        source_id=annotation.id,
                        associations=list(annotation.associations),
                    ),
                )
            )
        data["images"].append(image_to_append)
    return data


def command(subparser):
    subparser.add_argument(
        "input", type=Path, help=_("Annotations JSON (see the replay command)")
    )
    subparser.add_argument(
        "output", type=Path, help=_("Where to save the COCO dataset JSON")
    )
    subparser.add_argument(
        "--images",
        type=Path,
        default=None,
        help=_("Folder with the source images, used to fill in image sizes"),
    )
    subparser.add_argument(
        "--overwrite",
        action="store_true",
        help=_("Overwrite JSON file if it exists"),
    )
    subparser.add_argument(
        "--description",
        type=str,
        help=_("Description for the COCO dataset"),
        default=_("Created with crop_annotation"),
    )

    def handle(args):
        from crop_annotation.utils.serialization import load_store

        assert args.input.exists() and args.input.is_file(), _(
            "Annotations file must exist"
        )
        if not args.overwrite:
            assert not args.output.exists(), _(
                "COCO dataset exists, use --overwrite to ignore this"
            )
        store = load_store(args.input)

        image_sizes = {}
        if args.images is not None:
            import cv2

            for key in store.image_keys():
                image = cv2.imread(str(args.images / key))
                if image is None:
                    logger.warning(_("Could not read image {key}").format(key=key))
                    continue
                (h, w) = image.shape[:2]
                image_sizes[key] = (w, h)

        data = build_coco(store, args.description, image_sizes)
        args.output.parent.mkdir(exist_ok=True, parents=True)
        with args.output.open("w") as f:
            from json import dump

            dump(data, f)

    return handle
