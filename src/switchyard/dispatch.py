"""Per-request dispatch.

Two independent flows run once per request:

- **Path flow**: the single best path-bound route for the request's
  method and path is dispatched, after its pattern, parameters, and
  rewrite string are recorded on the ``HostRequest``.
- **Session flow**: every path-less route answering the request's method
  is dispatched, highest priority first. One failing target is logged
  and recorded; the rest still run.
"""

import logging
from dataclasses import dataclass
from typing import Any

from switchyard.context import bind_request
from switchyard.request import HostRequest
from switchyard.routing.criteria import Criteria
from switchyard.routing.registry import RouteRegistry
from switchyard.routing.route import Route

logger = logging.getLogger("switchyard.dispatch")


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a dispatched path-bound route."""

    route: Route
    parameters: dict[str, Any]
    rewrite: str
    result: Any = None


@dataclass(frozen=True, slots=True)
class SessionResult:
    """Outcome of one path-less route. ``error`` is set when the target raised."""

    route: Route
    result: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class DispatchReport:
    """Everything one ``Dispatcher.handle`` call did."""

    match: RouteMatch | None
    session: tuple[SessionResult, ...] = ()

    @property
    def failures(self) -> tuple[SessionResult, ...]:
        return tuple(outcome for outcome in self.session if not outcome.ok)


class Dispatcher:
    """Runs the path and session flows against one registry.

    Usage::

        dispatcher = Dispatcher(registry)
        report = dispatcher.handle(HostRequest.from_environ(environ))
        if report.match is None:
            ...  # host falls back to its own handling
    """

    __slots__ = ("_registry", "validate_middleware")

    def __init__(self, registry: RouteRegistry, *, validate_middleware: bool = True) -> None:
        self._registry = registry
        self.validate_middleware = validate_middleware

    @property
    def registry(self) -> RouteRegistry:
        return self._registry

    def path_criteria(self, request: HostRequest) -> Criteria:
        return Criteria(
            method=request.method,
            path=request.path,
            validate_middleware=self.validate_middleware,
            order="path_score",
        )

    def session_criteria(self, request: HostRequest) -> Criteria:
        return Criteria(
            method=request.method,
            has_pattern=False,
            validate_middleware=self.validate_middleware,
            order="priority",
        )

    def route_path(self, request: HostRequest) -> RouteMatch | None:
        """Dispatch the best path-bound route, if any.

        ``InstantiationError`` and errors raised by the target propagate:
        there is exactly one target and the host decides what a failure
        means.
        """
        if request.path is None:
            return None
        route = self._registry.best(self.path_criteria(request))
        if route is None:
            logger.debug("No route for %s %s", request.method, request.path)
            return None

        parameters = route.extract_parameters(request.path)
        rewrite = route.build_rewrite_target(request.path)
        request.record_match(route.pattern, parameters, rewrite)
        logger.debug("%s %s -> %s", request.method, request.path, route.name)
        result = route.dispatch(request.path)
        return RouteMatch(route=route, parameters=parameters, rewrite=rewrite, result=result)

    def route_session(self, request: HostRequest) -> tuple[SessionResult, ...]:
        """Dispatch every path-less route for the request's method, in priority order."""
        outcomes: list[SessionResult] = []
        for route in self._registry.select(self.session_criteria(request)):
            try:
                outcomes.append(SessionResult(route=route, result=route.dispatch()))
            except Exception as exc:
                logger.exception("Session route %s failed", route.name)
                outcomes.append(SessionResult(route=route, error=exc))
        return tuple(outcomes)

    def handle(self, request: HostRequest) -> DispatchReport:
        """Run the path flow, then the session flow, with *request* bound as current."""
        with bind_request(request):
            match = self.route_path(request)
            session = self.route_session(request)
        return DispatchReport(match=match, session=session)
