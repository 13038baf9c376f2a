"""Route configuration loading.

Route definitions live in JSON or TOML files. A single file holds a
mapping ``route id -> definition``; a directory is read recursively,
files in sorted order, each one merged over the previous with
recursive-replace semantics, so later files can refine earlier routes
key by key.

Usage::

    routes = load_routes("config/routes")
    registry = RouteRegistry(capabilities, routes=routes)
"""

import json
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from switchyard.errors import ConfigurationError

SUFFIXES = (".json", ".toml")


def merge_recursive(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* over *base*. Nested mappings merge; everything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_recursive(current, value)
        else:
            merged[key] = value
    return merged


def traverse(data: Any, path: Iterable[Any]) -> Any:
    """Follow *path* into nested mappings/sequences. Returns ``{}`` on a miss."""
    for key in path:
        try:
            data = data[key]
        except (KeyError, IndexError, TypeError):
            return {}
    return data


def read_file(path: Path) -> dict[str, Any]:
    """Parse one JSON or TOML file into a mapping."""
    try:
        if path.suffix == ".toml":
            with path.open("rb") as f:
                data = tomllib.load(f)
        elif path.suffix == ".json":
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        else:
            msg = f"Unsupported route file {str(path)!r} (expected {', '.join(SUFFIXES)})"
            raise ConfigurationError(msg)
    except (OSError, ValueError) as exc:
        msg = f"Cannot read route file {str(path)!r}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Route file {str(path)!r} must contain a mapping of route ids"
        raise ConfigurationError(msg)
    return data


def load_routes(source: str | Path) -> dict[str, Any]:
    """Load route definitions from a file or a directory tree.

    A directory and a same-named file may coexist (``routes/`` and
    ``routes.toml``): the directory is read first, the file merged last.
    A missing source raises ``ConfigurationError``.
    """
    source = Path(source)
    files: list[Path] = []
    if source.is_dir():
        files.extend(
            sorted(p for p in source.rglob("*") if p.is_file() and p.suffix in SUFFIXES)
        )
        files.extend(source.with_suffix(s) for s in SUFFIXES if source.with_suffix(s).is_file())
    elif source.is_file():
        files.append(source)
    else:
        msg = f"Route source {str(source)!r} does not exist"
        raise ConfigurationError(msg)

    routes: dict[str, Any] = {}
    for path in files:
        routes = merge_recursive(routes, read_file(path))
    return routes
