import logging
from gettext import gettext as _
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_DESCRIPTION = _("Export annotated crops as a zip archive")

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff", ".webp")


def command(subparser):
    subparser.add_argument(
        "annotations", type=Path, help=_("Annotations JSON (see the replay command)")
    )
    subparser.add_argument("images", type=Path, help=_("Folder with the source images"))
    subparser.add_argument("output", type=Path, help=_("Folder to write the archive to"))
    subparser.add_argument(
        "-n", "--name", dest="name", default="annotations", help=_("Archive name")
    )
    subparser.add_argument(
        "-i",
        "--image",
        dest="image_keys",
        nargs="+",
        default=None,
        help=_("Only export these images (default: all)"),
    )

    def handle(args):
        import cv2

        from crop_annotation.interfaces.exporter import AnnotationExporter
        from crop_annotation.utils.misc import try_tqdm
        from crop_annotation.utils.serialization import load_store

        assert args.images.exists() and args.images.is_dir(), _(
            "Image folder must exist and be a folder"
        )
        store = load_store(args.annotations)
        keys = args.image_keys or store.image_keys()

        images = {}
        for key in try_tqdm(keys, desc=_("Loading images...")):
            path = args.images / key
            if path.suffix.lower() not in IMAGE_SUFFIXES or not path.exists():
                logger.warning(_("Image not found: {path}").format(path=path))
                continue
            image = cv2.imread(str(path))
            if image is None:
                logger.warning(_("Could not decode image: {path}").format(path=path))
                continue
            images[key] = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

        exporter = AnnotationExporter(args.output)
        zip_path = exporter.export_archive(
            store, images, output_name=args.name, image_keys=keys
        )
        print(zip_path)

    return handle
