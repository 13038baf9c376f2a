"""RouteRegistry — owns the route set and runs the selection pipeline.

A registry is an ordinary value: build one from configuration at startup,
hand it to a ``Dispatcher``, and build as many as you like side by side.
It does no locking; a threaded host serializes access or gives each
worker its own registry.
"""

import functools
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from switchyard._internal.types import RouteDefinition
from switchyard.config import DEFAULT_CONFIG, RouterConfig
from switchyard.references import Capabilities
from switchyard.routing.criteria import Criteria
from switchyard.routing.route import Route
from switchyard.routing.stages import DEFAULT_STAGES, Stage, filter_by_method

logger = logging.getLogger("switchyard.routing")


class RouteRegistry:
    """Registered routes keyed by unique id.

    Usage::

        registry = RouteRegistry(capabilities)
        registry.add("post", {"pattern": r"^/posts/([0-9]+)$", "target": "show_post"})
        route = registry.best(method="GET", path="/posts/42", order="path_score")
    """

    __slots__ = ("_capabilities", "_config", "_routes", "_stages")

    def __init__(
        self,
        capabilities: Capabilities | None = None,
        *,
        config: RouterConfig = DEFAULT_CONFIG,
        stages: Iterable[Stage] | None = None,
        routes: Mapping[str, Route | RouteDefinition] | None = None,
    ) -> None:
        self._capabilities = capabilities if capabilities is not None else Capabilities()
        self._config = config
        self._routes: dict[str, Route] = {}
        self._stages: list[Stage] = list(stages if stages is not None else self._default_stages())
        if routes:
            self.add_all(routes)

    def _default_stages(self) -> list[Stage]:
        stages = list(DEFAULT_STAGES)
        if self._config.wildcard_method != "ANY":
            index = stages.index(filter_by_method)
            stages[index] = functools.partial(filter_by_method, wildcard=self._config.wildcard_method)
        return stages

    @property
    def capabilities(self) -> Capabilities:
        return self._capabilities

    @property
    def config(self) -> RouterConfig:
        return self._config

    # -- Registration --

    def add(self, route_id: str, route: Route | RouteDefinition) -> Route:
        """Store *route* under *route_id*, replacing any previous entry.

        Raw definitions are turned into Routes. Patterns are compiled
        here so an invalid one fails at registration with
        ``ConfigurationError``.
        """
        if not isinstance(route, Route):
            route = Route(
                route, name=route_id, capabilities=self._capabilities, config=self._config
            )
        elif route.name is None:
            route.name = route_id
        route.get_pattern()
        if route_id in self._routes:
            logger.debug("Replacing route %s", route_id)
        self._routes[route_id] = route
        return route

    def add_all(self, routes: Mapping[str, Route | RouteDefinition]) -> None:
        for route_id, route in routes.items():
            self.add(route_id, route)

    def remove(self, route_id: str) -> Route | None:
        """Remove and return the route, or ``None`` if the id is unknown."""
        return self._routes.pop(route_id, None)

    def get(self, route_id: str) -> Route | None:
        return self._routes.get(route_id)

    def clear(self) -> None:
        self._routes.clear()

    @property
    def routes(self) -> dict[str, Route]:
        """Snapshot of ``id -> Route`` in registration order."""
        return dict(self._routes)

    # -- Pipeline --

    @property
    def stages(self) -> tuple[Stage, ...]:
        return tuple(self._stages)

    def add_stage(self, stage: Stage, *, before: Stage | None = None) -> None:
        """Append *stage*, or insert it ahead of *before*."""
        if before is None:
            self._stages.append(stage)
        else:
            self._stages.insert(self._stages.index(before), stage)

    def select(self, criteria: Criteria | Mapping[str, Any] | None = None, **options: Any) -> list[Route]:
        """Run every stage over the registered routes and return the survivors.

        An empty list means nothing matched. It is not an error.
        """
        criteria = Criteria.coerce(criteria, **options)
        candidates = list(self._routes.values())
        for stage in self._stages:
            candidates = stage(candidates, criteria)
        logger.debug("Selected %d of %d routes for %s", len(candidates), len(self._routes), criteria)
        return candidates

    def best(self, criteria: Criteria | Mapping[str, Any] | None = None, **options: Any) -> Route | None:
        """Return the first route ``select`` yields, or ``None``."""
        candidates = self.select(criteria, **options)
        return candidates[0] if candidates else None

    # -- Container protocol --

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._routes

    def __iter__(self) -> Iterator[Route]:
        return iter(list(self._routes.values()))

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"<RouteRegistry ({len(self._routes)} routes)>"
