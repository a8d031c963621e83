import json
import logging
from gettext import gettext as _

from crop_annotation.core.annotation import CanvasRect
from crop_annotation.core.tools import ToolSystem
from crop_annotation.interfaces.replay import replay_events
from crop_annotation.utils.config import load_config
from crop_annotation.utils.serialization import save_store

logger = logging.getLogger(__name__)


def handle(args):
    assert args.events.exists(), _("Event log must exist")
    if not args.overwrite:
        assert not args.output.exists(), _(
            "Output exists, use --overwrite to ignore this"
        )

    with args.events.open("r", encoding="utf-8") as f:
        log = json.load(f)

    # a bare list is accepted as well as {"canvas": ..., "events": [...]}
    if isinstance(log, list):
        log = {"events": log}

    canvas = log.get("canvas") or {}
    canvas_rect = CanvasRect(
        left=float(canvas.get("left", 0)),
        top=float(canvas.get("top", 0)),
        width=float(canvas.get("width", 0)),
        height=float(canvas.get("height", 0)),
    )

    tool_system = ToolSystem(load_config(args.config))
    applied = replay_events(tool_system, log.get("events", []), canvas_rect)
    save_store(tool_system.store, args.output)
    logger.info(
        _("Replayed {applied} events, saved {count} annotations to {output}").format(
            applied=applied, count=len(tool_system.store), output=args.output
        )
    )
