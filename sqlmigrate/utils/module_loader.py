"""Dotted path imports for loading user supplied configuration objects."""

import importlib
from types import ModuleType
from typing import Any

__all__ = ("import_string",)


def _import_deepest_module(parts: "list[str]") -> "tuple[ModuleType, list[str]]":
    """Import the longest importable prefix of ``parts``.

    Returns the module and the remaining attribute names. A module that exists
    but fails on a missing dependency of its own is not skipped over.
    """
    for split in range(len(parts), 0, -1):
        candidate = ".".join(parts[:split])
        try:
            return importlib.import_module(candidate), parts[split:]
        except ModuleNotFoundError as e:
            if e.name is None or not (candidate == e.name or candidate.startswith(f"{e.name}.")):
                raise
    msg = "no importable module prefix"
    raise ImportError(msg)


def import_string(dotted_path: str) -> "Any":
    """Return the object named by ``dotted_path``.

    ``"myapp.settings.migration_config"`` imports ``myapp.settings`` and
    returns its ``migration_config`` attribute. A path naming a module returns
    the module itself.

    Raises:
        ImportError: If no module in the path can be imported, importing it
            fails, or an attribute along the path is missing.
    """
    try:
        module, attributes = _import_deepest_module(dotted_path.split("."))
    except Exception as e:
        msg = f"Could not import '{dotted_path}': {e}"
        raise ImportError(msg) from e

    obj: Any = module
    for attribute in attributes:
        try:
            obj = getattr(obj, attribute)
        except AttributeError as e:
            msg = f"Could not import '{dotted_path}': module '{module.__name__}' has no attribute '{attribute}'"
            raise ImportError(msg) from e
    return obj
