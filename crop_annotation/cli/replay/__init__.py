from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Replay a recorded input event log and save the annotations")


def command(subparser):
    subparser.add_argument("events", type=Path, help=_("JSON file with recorded events"))
    subparser.add_argument(
        "output", type=Path, help=_("Where to save the annotations JSON")
    )
    subparser.add_argument(
        "--overwrite",
        action="store_true",
        help=_("Overwrite JSON file if it exists"),
    )

    def handle(args):
        from .replay import handle as replay_handle

        replay_handle(args)

    return handle
