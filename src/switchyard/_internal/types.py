"""Shared type aliases used across switchyard modules."""

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

# Raw callable descriptor: "func", "Class@method", "Class::method", ("Class", "method"),
# a Python callable, or a class
RawReference: TypeAlias = Any

# Route target or middleware, a user-defined callable with variable signature
Handler: TypeAlias = Callable[..., Any]

# Raw route definition as read from configuration
RouteDefinition: TypeAlias = Mapping[str, Any]
