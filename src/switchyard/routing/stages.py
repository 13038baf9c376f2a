"""Built-in selection stages.

Every stage has the same shape, ``(candidates, criteria) -> candidates``,
and returns its input untouched when the criterion it handles is unset.
The registry runs them in the order of ``DEFAULT_STAGES``; extra stages
can be appended or inserted when a registry is built.

Ordering stages rely on ``sorted`` being stable (``reverse=True``
included), so registration order breaks ties.
"""

from collections.abc import Callable

from switchyard.routing.criteria import Criteria
from switchyard.routing.route import Route

Stage = Callable[[list[Route], Criteria], list[Route]]


def filter_by_method(routes: list[Route], criteria: Criteria, *, wildcard: str = "ANY") -> list[Route]:
    if criteria.method == wildcard:
        return routes
    return [route for route in routes if route.matches_method(criteria.method)]


def filter_by_pattern_presence(routes: list[Route], criteria: Criteria) -> list[Route]:
    if criteria.has_pattern is None:
        return routes
    return [route for route in routes if route.has_pattern() == criteria.has_pattern]


def filter_by_path(routes: list[Route], criteria: Criteria) -> list[Route]:
    if criteria.path is None:
        return routes
    return [route for route in routes if route.is_path_match(criteria.path)]


def filter_by_middleware(routes: list[Route], criteria: Criteria) -> list[Route]:
    if not criteria.validate_middleware:
        return routes
    return [
        route for route in routes if not route.has_middleware() or route.validate_middleware()
    ]


def order_by_priority(routes: list[Route], criteria: Criteria) -> list[Route]:
    if criteria.order != "priority":
        return routes
    return sorted(routes, key=lambda route: route.priority, reverse=criteria.descending)


def order_by_path_score(routes: list[Route], criteria: Criteria) -> list[Route]:
    if criteria.order != "path_score" or criteria.path is None:
        return routes
    path = criteria.path
    scores = {id(route): route.score(path) for route in routes}
    return sorted(routes, key=lambda route: scores[id(route)], reverse=criteria.descending)


DEFAULT_STAGES: tuple[Stage, ...] = (
    filter_by_method,
    filter_by_pattern_presence,
    filter_by_path,
    filter_by_middleware,
    order_by_priority,
    order_by_path_score,
)
