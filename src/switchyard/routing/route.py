"""Route and ParameterSpec.

A Route is one declarative rule: an optional URL pattern, the methods it
answers, middleware predicates, named parameters pulled from the pattern's
captures, a dispatch target, and a priority.

Every derived field (compiled pattern, upper-cased methods, wrapped
middleware, prepared parameters, target reference) is prepared lazily on
first read and cached. Each setter resets only its own field.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from switchyard._internal.lazy import Lazy
from switchyard._internal.types import RawReference, RouteDefinition
from switchyard.config import DEFAULT_CONFIG, RouterConfig
from switchyard.errors import ConfigurationError
from switchyard.references import CallableReference, Capabilities
from switchyard.routing.matching import (
    compile_pattern,
    drop_empty,
    match_path,
    path_score,
    replace_matches,
    validate_items,
)
from switchyard.routing.query import build_query

logger = logging.getLogger("switchyard.routing")

# Older definitions used the host's vocabulary; both spellings are accepted
_ALIASES: dict[str, str] = {
    "regex": "pattern",
    "methods": "method",
    "query_vars": "parameters",
    "callback": "target",
}

COLLABORATORS = ("model", "view")


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """A named route parameter.

    ``value`` is a template; strings of the form ``$matches[N]`` (at any
    depth) are replaced by capture group N of the route pattern.
    ``middleware`` optionally validates the extracted value.
    """

    name: str
    value: Any
    middleware: CallableReference

    @classmethod
    def from_raw(
        cls,
        name: str,
        raw: Any,
        capabilities: Capabilities,
        config: RouterConfig = DEFAULT_CONFIG,
    ) -> "ParameterSpec":
        """Build a spec from configuration.

        A mapping with ``value`` and/or ``middleware`` keys is a full spec;
        anything else is taken as the value template itself.
        """
        if isinstance(raw, Mapping) and ("value" in raw or "middleware" in raw):
            value = raw.get("value")
            middleware = raw.get("middleware")
        else:
            value, middleware = raw, None
        return cls(
            name=name,
            value=value,
            middleware=CallableReference(middleware, capabilities, config=config),
        )


def normalize_definition(definition: RouteDefinition | None, **options: Any) -> dict[str, Any]:
    """Merge *definition* and *options*, mapping legacy key names."""
    merged: dict[str, Any] = {}
    for key, value in {**(definition or {}), **options}.items():
        merged[_ALIASES.get(key, key)] = value
    return merged


def _as_reference_list(raw: Any) -> list[RawReference]:
    # A list is a sequence of descriptors; a tuple is one ("Class", "method") pair
    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    return [raw]


class Route:
    """One routing rule.

    Usage::

        route = Route(
            {
                "pattern": r"^/posts/([0-9]+)$",
                "method": "GET",
                "parameters": {"id": "$matches[1]"},
                "target": "show_post",
            },
            capabilities=capabilities,
        )
        route.is_path_match("/posts/42")      # True
        route.extract_parameters("/posts/42") # {"id": "42"}
        route.dispatch("/posts/42")           # show_post(route, {"id": "42"})
    """

    __slots__ = (
        "_capabilities",
        "_config",
        "_methods",
        "_middleware",
        "_parameters",
        "_pattern",
        "_raw_collaborators",
        "_raw_methods",
        "_raw_middleware",
        "_raw_parameters",
        "_raw_pattern",
        "_raw_target",
        "_target",
        "name",
        "priority",
    )

    def __init__(
        self,
        definition: RouteDefinition | None = None,
        /,
        *,
        name: str | None = None,
        capabilities: Capabilities | None = None,
        config: RouterConfig = DEFAULT_CONFIG,
        **options: Any,
    ) -> None:
        self.name = name
        self._capabilities = capabilities if capabilities is not None else Capabilities()
        self._config = config

        self._pattern: Lazy[re.Pattern[str] | None] = Lazy(self._prepare_pattern)
        self._methods: Lazy[tuple[str, ...]] = Lazy(self._prepare_methods)
        self._middleware: Lazy[tuple[CallableReference, ...]] = Lazy(self._prepare_middleware)
        self._parameters: Lazy[dict[str, ParameterSpec]] = Lazy(self._prepare_parameters)
        self._target: Lazy[CallableReference] = Lazy(self._prepare_target)

        self._raw_pattern: str | None = None
        self._raw_methods: Any = config.wildcard_method
        self._raw_middleware: Any = None
        self._raw_parameters: Mapping[str, Any] = {}
        self._raw_target: RawReference = None
        self._raw_collaborators: dict[str, RawReference] = {}
        self.priority: int = config.default_priority

        self.set_options(normalize_definition(definition, **options))

    def set_options(self, options: Mapping[str, Any]) -> None:
        """Apply every recognized key of a (normalized) definition."""
        if options.get("pattern") is not None:
            self.set_pattern(options["pattern"])
        if options.get("method") is not None:
            self.set_methods(options["method"])
        if options.get("middleware") is not None:
            self.set_middleware(options["middleware"])
        if options.get("parameters") is not None:
            self.set_parameters(options["parameters"])
        if options.get("target") is not None:
            self.set_target(options["target"])
        if options.get("priority") is not None:
            self.set_priority(options["priority"])
        collaborators = {key: options[key] for key in COLLABORATORS if options.get(key) is not None}
        if collaborators:
            self.set_collaborators(**collaborators)
        if self._raw_parameters and not self.has_pattern():
            msg = f"Route {self.name or '(unnamed)'} declares parameters but has no pattern"
            raise ConfigurationError(msg)

    # -- Pattern --

    def set_pattern(self, pattern: str | None) -> None:
        self._raw_pattern = pattern or None
        self._pattern.reset()

    def _prepare_pattern(self) -> re.Pattern[str] | None:
        if self._raw_pattern is None:
            return None
        return compile_pattern(self._raw_pattern)

    def has_pattern(self) -> bool:
        return self._raw_pattern is not None

    def get_pattern(self) -> re.Pattern[str] | None:
        """Return the compiled pattern, or ``None`` for a path-less route."""
        return self._pattern.get()

    @property
    def pattern(self) -> str | None:
        return self._raw_pattern

    def match(self, path: str | None) -> re.Match[str] | None:
        pattern = self.get_pattern()
        if pattern is None:
            return None
        return match_path(pattern, path)

    # -- Methods --

    def set_methods(self, methods: str | Iterable[str]) -> None:
        self._raw_methods = methods
        self._methods.reset()

    def _prepare_methods(self) -> tuple[str, ...]:
        raw = self._raw_methods
        if isinstance(raw, str):
            raw = [raw]
        return tuple(method.upper() for method in raw)

    def get_methods(self) -> tuple[str, ...]:
        return self._methods.get()

    def has_methods(self) -> bool:
        return bool(self.get_methods())

    def matches_method(self, method: str) -> bool:
        """True if this route answers *method* or the wildcard."""
        methods = self.get_methods()
        return self._config.wildcard_method in methods or method.upper() in methods

    # -- Middleware --

    def set_middleware(self, middleware: Any) -> None:
        self._raw_middleware = middleware
        self._middleware.reset()

    def _prepare_middleware(self) -> tuple[CallableReference, ...]:
        return tuple(
            CallableReference(raw, self._capabilities, config=self._config)
            for raw in _as_reference_list(self._raw_middleware)
        )

    def get_middleware(self) -> tuple[CallableReference, ...]:
        return self._middleware.get()

    def has_middleware(self) -> bool:
        return bool(self.get_middleware())

    def _passes(self, reference: CallableReference, *args: Any) -> bool:
        predicate = reference.get_callable()
        if predicate is None or not callable(predicate):
            # Permissive: a middleware nobody can resolve does not block the route
            logger.warning("Unresolvable middleware %r on route %s", reference.raw, self.name)
            return True
        return bool(predicate(*args))

    def validate_middleware(self) -> bool:
        """True when every route-level middleware passes for this route."""
        return validate_items(lambda reference: self._passes(reference, self), self.get_middleware())

    # -- Parameters --

    def set_parameters(self, parameters: Mapping[str, Any]) -> None:
        self._raw_parameters = parameters
        self._parameters.reset()

    def _prepare_parameters(self) -> dict[str, ParameterSpec]:
        return {
            name: ParameterSpec.from_raw(name, raw, self._capabilities, self._config)
            for name, raw in self._raw_parameters.items()
        }

    def get_parameters(self) -> dict[str, ParameterSpec]:
        return self._parameters.get()

    def has_parameters(self) -> bool:
        return bool(self.get_parameters())

    def populate_parameters(self, path: str | None) -> dict[str, ParameterSpec]:
        """Return the parameter specs with capture placeholders filled from *path*."""
        match = self.match(path)
        placeholder = self._config.match_placeholder
        return {
            name: replace(spec, value=replace_matches(spec.value, match, placeholder))
            for name, spec in self.get_parameters().items()
        }

    def check_parameter_middleware(self, path: str | None) -> bool:
        """True when every parameter's middleware accepts its extracted value.

        Parameters without middleware are vacuously valid.
        """

        def passes(spec: ParameterSpec) -> bool:
            if not spec.middleware.has_callable_reference():
                return True
            return self._passes(spec.middleware, self, spec.value)

        return validate_items(passes, self.populate_parameters(path).values())

    def extract_parameters(self, path: str | None) -> dict[str, Any]:
        """Return ``name -> value`` for *path*, dropping empty values."""
        return drop_empty(
            {name: spec.value for name, spec in self.populate_parameters(path).items()}
        )

    # -- Matching --

    def is_path_match(self, path: str | None) -> bool:
        """True when the pattern matches *path* and all parameter middleware passes."""
        if not self.has_pattern() or self.match(path) is None:
            return False
        return self.check_parameter_middleware(path)

    def score(self, path: str | None) -> int:
        """Specificity of this route for *path*; 0 without a pattern or a match."""
        return path_score(self.match(path))

    def build_rewrite_target(self, path: str | None) -> str:
        """Serialize the extracted parameters behind the host entry point.

        ``"index.php?id=42&slug=hello"`` for the host's own front controller.
        Nested values use bracketed keys (``filter[id]=7``).
        """
        query = build_query(self.extract_parameters(path))
        return f"{self._config.entry_point}?{query}"

    # -- Target --

    def set_target(self, target: RawReference) -> None:
        self._raw_target = target
        self._target.reset()

    def set_collaborators(self, **collaborators: RawReference) -> None:
        """Set the ``model`` / ``view`` injected into a class-backed target."""
        self._raw_collaborators = {key: value for key, value in collaborators.items() if value}
        self._target.reset()

    def _prepare_target(self) -> CallableReference:
        bindings = {
            key: CallableReference(raw, self._capabilities, config=self._config)
            for key, raw in self._raw_collaborators.items()
        }
        return CallableReference(
            self._raw_target, self._capabilities, bindings=bindings, config=self._config
        )

    def get_target(self) -> CallableReference:
        return self._target.get()

    def has_target(self) -> bool:
        return self.get_target().has_callable_reference()

    # -- Priority --

    def set_priority(self, priority: int) -> None:
        self.priority = int(priority)

    # -- Dispatch --

    def dispatch(self, path: str | None = None) -> Any:
        """Invoke the target.

        Path-bound routes call ``target(route, parameters)``, path-less
        routes ``target(route)``. Every call builds its own target instance.
        An unresolvable target is a no-op and returns ``None``.
        ``InstantiationError`` propagates.
        """
        target = self.get_target().build_callable()
        if target is None or not callable(target):
            if self.has_target():
                logger.warning("Unresolvable target %r on route %s", self._raw_target, self.name)
            return None
        if self.has_pattern():
            return target(self, self.extract_parameters(path))
        return target(self)

    def __repr__(self) -> str:
        methods = "|".join(self.get_methods())
        name = f" {self.name}" if self.name else ""
        return f"<Route{name} [{methods}] {self._raw_pattern or '(session)'} p={self.priority}>"
