"""Switchyard — declarative request routing with late-bound dispatch.

Matches a method and URL path against registered route definitions,
picks the most specific one, and dispatches it to a function, a static
method, or a method on a freshly built controller. Path-less "session"
routes run on every request in priority order.

Basic usage::

    from switchyard import Capabilities, Dispatcher, HostRequest, RouteRegistry

    capabilities = Capabilities()

    @capabilities.function
    def show_post(route, parameters):
        return f"post {parameters['id']}"

    registry = RouteRegistry(capabilities)
    registry.add("post", {
        "pattern": r"^/posts/([0-9]+)$",
        "method": "GET",
        "parameters": {"id": "$matches[1]"},
        "target": "show_post",
    })

    report = Dispatcher(registry).handle(HostRequest("GET", "/posts/42"))
    report.match.result  # "post 42"
"""

__version__ = "0.1.0"
__all__ = [
    "BaseController",
    "BaseModel",
    "CallableReference",
    "Capabilities",
    "ConfigurationError",
    "Criteria",
    "DispatchReport",
    "Dispatcher",
    "HostRequest",
    "InstantiationError",
    "Route",
    "RouteMatch",
    "RouteRegistry",
    "RouterConfig",
    "SessionResult",
    "SwitchyardError",
    "View",
    "get_request",
    "load_routes",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast and defers the kida import until a
    view is actually needed.
    """
    if name in ("CallableReference", "Capabilities"):
        from switchyard import references as _refs

        return getattr(_refs, name)

    if name in ("Criteria", "Route", "RouteRegistry"):
        from switchyard import routing as _routing

        return getattr(_routing, name)

    if name in ("Dispatcher", "DispatchReport", "RouteMatch", "SessionResult"):
        from switchyard import dispatch as _dispatch

        return getattr(_dispatch, name)

    if name == "HostRequest":
        from switchyard.request import HostRequest

        return HostRequest

    if name == "RouterConfig":
        from switchyard.config import RouterConfig

        return RouterConfig

    if name == "get_request":
        from switchyard.context import get_request

        return get_request

    if name == "load_routes":
        from switchyard.loader import load_routes

        return load_routes

    if name == "View":
        from switchyard.views import View

        return View

    if name in ("BaseController", "BaseModel"):
        from switchyard import controllers as _controllers

        return getattr(_controllers, name)

    if name in ("ConfigurationError", "InstantiationError", "SwitchyardError"):
        from switchyard import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
