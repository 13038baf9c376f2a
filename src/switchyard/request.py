"""HostRequest — the in-flight request the host hands to the dispatcher.

The host supplies ``method`` and ``path``. When a path-bound route wins,
the dispatcher writes three values back: the matched pattern, the
extracted parameters, and the rewrite string for the host's own front
controller.
"""

from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class HostRequest:
    """A single request as seen by the routing core.

    Mutable on purpose: the dispatcher records its result on it.
    """

    method: str = "ANY"
    path: str | None = None

    # Written back by the dispatcher for a matched path-bound route
    matched_pattern: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    rewrite: str | None = None

    def __post_init__(self) -> None:
        self.method = (self.method or "ANY").upper()

    @property
    def matched(self) -> bool:
        return self.matched_pattern is not None

    def record_match(self, pattern: str | None, parameters: Mapping[str, Any], rewrite: str) -> None:
        self.matched_pattern = pattern
        self.parameters = dict(parameters)
        self.rewrite = rewrite

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "HostRequest":
        """Build from a WSGI environ. ``REQUEST_URI`` wins over ``PATH_INFO``."""
        path = environ.get("REQUEST_URI")
        if path is None:
            path = environ.get("PATH_INFO")
        return cls(method=environ.get("REQUEST_METHOD") or "ANY", path=path)

    @classmethod
    def from_scope(cls, scope: MutableMapping[str, Any]) -> "HostRequest":
        """Build from an ASGI ``http`` scope. Non-HTTP scopes carry no path."""
        if scope.get("type") != "http":
            return cls()
        return cls(method=scope.get("method") or "ANY", path=scope.get("path"))
