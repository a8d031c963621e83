import importlib.util
import itertools
import sys
from pathlib import Path

from tqdm import tqdm


def load_module(script_path: Path, module_name: str = "module"):
    script_path = Path(script_path)
    search_locations = None
    if script_path.name == "__init__.py":
        # keep relative imports inside the package working
        search_locations = [str(script_path.parent)]
    spec = importlib.util.spec_from_file_location(
        module_name, str(script_path), submodule_search_locations=search_locations
    )
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def incrf(start: int = 1):
    """Infinite counter, used to hand out sequential ids."""
    return itertools.count(start)


def try_tqdm(iterable, **kwargs):
    """Wrap with a progress bar only when stderr is a terminal."""
    kwargs.setdefault("disable", not sys.stderr.isatty())
    return tqdm(iterable, **kwargs)


def parse_hex_color(color: str):
    """'#RRGGBB' -> (r, g, b)"""
    color = color.lstrip("#")
    if len(color) != 6:
        raise ValueError(f"Invalid color: #{color}")
    return tuple(int(color[i:i + 2], 16) for i in (0, 2, 4))
