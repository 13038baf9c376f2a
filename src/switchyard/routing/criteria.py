"""Criteria — the options one ``RouteRegistry.select`` call runs with.

Every pipeline stage receives the same Criteria, so stages stay
independent of each other.
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

Order = Literal["priority", "path_score"]
Direction = Literal["ASC", "DESC"]

# Older option names from the host's vocabulary
_ALIASES: dict[str, str] = {
    "url_path": "path",
    "has_url_path": "has_pattern",
    "order_by": "direction",
    "url_path_score": "path_score",
}


@dataclass(frozen=True, slots=True)
class Criteria:
    """Filter and ordering options for route selection.

    ``method``: keep routes answering this method (``ANY`` skips the stage).
    ``path``: keep routes whose pattern matches (``None`` skips the stage).
    ``has_pattern``: keep only path-bound (True) or path-less (False) routes.
    A truthy ``no_path`` key in a mapping means ``has_pattern=False``.
    ``validate_middleware``: drop routes whose middleware rejects them.
    ``order``: ``"priority"`` or ``"path_score"``; ``direction`` ASC/DESC.
    """

    method: str = "ANY"
    path: str | None = None
    has_pattern: bool | None = None
    validate_middleware: bool = False
    order: Order | None = None
    direction: Direction = "DESC"

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "Criteria":
        """Build criteria from a plain mapping. Unknown keys are ignored."""
        known = {f.name for f in dataclasses.fields(cls)}
        values: dict[str, Any] = {}
        for key, value in options.items():
            key = _ALIASES.get(key, key)
            if key in known:
                values[key] = value
        if options.get("no_path"):
            values["has_pattern"] = False
        if values.get("has_pattern") is not None:
            values["has_pattern"] = bool(values["has_pattern"])
        if "validate_middleware" in values:
            values["validate_middleware"] = bool(values["validate_middleware"])
        if values.get("order") in _ALIASES:
            values["order"] = _ALIASES[values["order"]]
        if isinstance(values.get("method"), str):
            values["method"] = values["method"].upper()
        if isinstance(values.get("direction"), str):
            values["direction"] = values["direction"].upper()
        return cls(**values)

    @classmethod
    def coerce(cls, criteria: "Criteria | Mapping[str, Any] | None" = None, **options: Any) -> "Criteria":
        """Accept a Criteria, a mapping, keyword options, or nothing."""
        if isinstance(criteria, Criteria):
            if not options:
                return criteria
            return cls.from_mapping({**dataclasses.asdict(criteria), **options})
        return cls.from_mapping({**(criteria or {}), **options})

    @property
    def descending(self) -> bool:
        return self.direction != "ASC"
