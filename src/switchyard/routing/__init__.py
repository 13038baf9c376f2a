"""Routing — route definitions, matching, and the selection pipeline.

Routes are registered once from configuration; each request runs the
registry's filter/order stages to pick what gets dispatched.
"""

from switchyard.routing.criteria import Criteria
from switchyard.routing.registry import RouteRegistry
from switchyard.routing.route import ParameterSpec, Route

__all__ = ["Criteria", "ParameterSpec", "Route", "RouteRegistry"]
