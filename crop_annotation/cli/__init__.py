import crop_annotation.utils.i18n  # noqa: F401

"""CLI interface for crop_annotation.

Subcommands are discovered from the packages next to this file; each one
exposes ``COMMAND_DESCRIPTION`` and ``command(subparser)``.
"""

import logging
import sys
from argparse import SUPPRESS, ArgumentDefaultsHelpFormatter, ArgumentParser
from gettext import gettext as _
from pathlib import Path

from crop_annotation.utils.misc import load_module

logger = logging.getLogger(__name__)


def add_subcommand(subparsers, name: str, submodule):
    subparser = subparsers.add_parser(name, help=submodule.COMMAND_DESCRIPTION)
    common_flags(subparser, subcommand=True)
    handler = submodule.command(subparser)
    subparser.set_defaults(fn=handler)


def common_flags(parser, subcommand: bool = False):
    # subcommand copies carry no defaults, flags given before the
    # subcommand name are kept
    default = SUPPRESS if subcommand else None
    flag_default = SUPPRESS if subcommand else False
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbose",
        action="store_true",
        default=flag_default,
        help=_("Give more details about what is happening"),
    )  # noqa: E501
    parser.add_argument(
        "-V",
        "--version",
        dest="is_show_version",
        action="store_true",
        default=flag_default,
        help=_("Print version and exit"),
    )  # noqa: E501
    parser.add_argument(
        "-c",
        "--config",
        dest="config",
        type=Path,
        default=default,
        help=_("JSON file with classes, keybinds and viewport settings"),
    )


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="crop_annotation", formatter_class=ArgumentDefaultsHelpFormatter
    )
    common_flags(parser)
    subparsers = parser.add_subparsers()

    for module in sorted(Path(__file__).parent.glob("*/__init__.py")):
        if str(module).find("pycache") > 0:
            continue
        module_name = module.parent.name
        subcommand_module = load_module(
            module, module_name=f"crop_annotation.cli.{module_name}"
        )
        add_subcommand(subparsers, module_name, subcommand_module)

    return parser


def main(argv=None):  # pragma: no cover
    """
    The main function executes on commands:
    `python -m crop_annotation` and `$ crop_annotation `.
    """
    logging.basicConfig()
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv
    args = parser.parse_args(argv)

    if args.verbose:
        logging.root.setLevel(logging.DEBUG)

    version = (Path(__file__).parent.parent / "VERSION").read_text().strip()
    if args.is_show_version:
        print(version)
        sys.exit(0)
    logger.debug(f"{_('Starting')} crop_annotation v{version}")

    fn = args.__dict__.get("fn")
    args.__dict__["fn"] = None
    if fn is not None:
        fn(args)
    else:
        parser.parse_args([*argv, "--help"])
