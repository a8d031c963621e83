import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

logger = logging.getLogger(__name__)

ENV_PREFIX = "CROP_ANNOTATION_"


def default_config() -> edict:
    return edict(
        classes={"Default": "#FF0000"},
        keybinds={
            "r": "Rectangle",
            "h": "Pan",
            "v": "Selector",
            "a": "Associator",
        },
        viewport=dict(
            min_scale=0.05,
            max_scale=10.0,
            zoom_factor=1.1,
        ),
    )


def merge_cfg(base: edict, override: Mapping) -> edict:
    """Recursively merge ``override`` into ``base`` (in place)."""
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), Mapping):
            merge_cfg(base[k], v)
        else:
            base[k] = v
    return base


def apply_config_file(cfg: edict, data: Mapping) -> edict:
    """
    Apply a parsed config file on top of ``cfg``.

    ``keybinds`` replaces the whole table; ``classes`` and ``viewport``
    are merged entry by entry.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Config must be a JSON object, got {type(data).__name__}")
    data = dict(data)
    keybinds = data.pop("keybinds", None)
    viewport = data.pop("viewport", None)
    merge_cfg(cfg, data)

    if isinstance(keybinds, Mapping):
        cfg.keybinds = edict(keybinds)
    elif keybinds is not None:
        logger.warning(f"Ignoring keybinds, expected a mapping: {keybinds!r}")

    if isinstance(viewport, Mapping):
        merge_cfg(cfg.viewport, viewport)
    elif viewport is not None:
        logger.warning(f"Ignoring viewport, expected a mapping: {viewport!r}")
    return cfg


def load_config(
    path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None
) -> edict:
    """
    Build the configuration tree.

    Defaults, then the JSON file at ``path`` (if given), then
    ``CROP_ANNOTATION_*`` environment variables.
    """
    cfg = default_config()
    if path is not None:
        path = Path(path)
        logger.debug(f"Loading config from {path}")
        with path.open("r", encoding="utf-8") as f:
            apply_config_file(cfg, json.load(f))
    cfg = load_cfg_from_env(cfg, os.environ if env is None else env, prefix=ENV_PREFIX)
    # env values arrive as strings
    for key in ("min_scale", "max_scale", "zoom_factor"):
        cfg.viewport[key] = float(cfg.viewport[key])
    return edict(cfg)


def save_config(cfg: edict, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
    return path
