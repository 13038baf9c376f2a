"""CallableReference — late-bound resolution of a serializable target.

A reference is whatever a route definition author wrote down for a
target or middleware:

- ``"show_post"``              a registered free function
- ``"PostController@show"``    an instance method (fresh instance)
- ``"PostController::feed"``   a static method (no instance)
- ``("PostController", "show")`` the same pair, pre-split
- ``"PostView"``               a class only; the instance itself is called
- a Python function or class  used directly, no registration needed

Every derived fact is computed lazily and cached. Malformed or unknown
descriptors never raise: predicates answer ``False`` and ``get_callable()``
answers ``None``. Only constructing an instance can fail, with
``InstantiationError``.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from switchyard._internal.lazy import Lazy
from switchyard._internal.types import RawReference
from switchyard.config import DEFAULT_CONFIG, RouterConfig
from switchyard.errors import InstantiationError
from switchyard.references.capabilities import Capabilities, ClassEntry, class_entry

logger = logging.getLogger("switchyard.references")


def resolve(raw: RawReference, config: RouterConfig = DEFAULT_CONFIG) -> RawReference:
    """Normalize a raw descriptor.

    Strings holding the instance separator (``@``) or, failing that, the
    static separator (``::``) after their first character are split into
    a tuple. Lists become tuples. Anything else is returned unchanged.
    Total: never raises, may yield a shape nothing can resolve.
    """
    if isinstance(raw, str):
        if raw.find(config.instance_separator) > 0:
            return tuple(raw.split(config.instance_separator))
        if raw.find(config.static_separator) > 0:
            return tuple(raw.split(config.static_separator))
        return raw
    if isinstance(raw, list):
        return tuple(raw)
    return raw


class CallableReference:
    """Resolve a loosely-typed descriptor into an invokable target.

    *bindings* maps constructor keyword names to other references; their
    instances are constructed and passed in whenever this reference
    builds an instance for ``get_callable()``. That is how a controller
    receives its model and view.
    """

    __slots__ = (
        "_callable",
        "_capabilities",
        "_class",
        "_config",
        "_function",
        "_method",
        "_reference",
        "bindings",
        "raw",
    )

    def __init__(
        self,
        raw: RawReference,
        capabilities: Capabilities | None = None,
        *,
        bindings: Mapping[str, "CallableReference"] | None = None,
        config: RouterConfig = DEFAULT_CONFIG,
    ) -> None:
        self.raw = raw
        self.bindings: dict[str, CallableReference] = dict(bindings or {})
        self._capabilities = capabilities if capabilities is not None else Capabilities()
        self._config = config
        self._reference: Lazy[RawReference] = Lazy(lambda: resolve(self.raw, self._config))
        self._class: Lazy[ClassEntry | None] = Lazy(self._prepare_class)
        self._method: Lazy[str | None] = Lazy(self._prepare_method)
        self._function: Lazy[Callable[..., Any] | None] = Lazy(self._prepare_function)
        self._callable: Lazy[Callable[..., Any] | Any | None] = Lazy(self.build_callable)

    # -- Reference --

    def get_reference(self) -> RawReference:
        """Return the normalized descriptor."""
        return self._reference.get()

    def has_callable_reference(self) -> bool:
        """True when a descriptor was configured at all (even a bad one)."""
        reference = self.get_reference()
        return reference is not None and reference != "" and reference != ()

    # -- Class --

    def _lookup_class(self, candidate: Any) -> ClassEntry | None:
        if isinstance(candidate, type):
            return class_entry(candidate.__name__, candidate)
        if isinstance(candidate, str):
            return self._capabilities.get_class(candidate)
        return None

    def _prepare_class(self) -> ClassEntry | None:
        reference = self.get_reference()
        if isinstance(reference, tuple):
            return self._lookup_class(reference[0]) if reference else None
        return self._lookup_class(reference)

    def get_class(self) -> ClassEntry | None:
        return self._class.get()

    def is_class_reference(self) -> bool:
        return self.get_class() is not None

    def get_class_instance(self, *args: Any, **kwargs: Any) -> Any:
        """Construct a new instance of the referenced class.

        Not memoized: every call allocates. Returns ``None`` when this is
        not a class reference. Raises ``InstantiationError`` when the
        factory rejects the arguments or fails.
        """
        entry = self.get_class()
        if entry is None:
            return None
        try:
            return entry.factory(*args, **kwargs)
        except Exception as exc:
            raise InstantiationError(self.raw, str(exc)) from exc

    # -- Method --

    def _prepare_method(self) -> str | None:
        reference = self.get_reference()
        if not isinstance(reference, tuple) or len(reference) != 2:
            return None
        method = reference[1]
        entry = self.get_class()
        if entry is None or not isinstance(method, str) or not entry.has_method(method):
            return None
        return method

    def get_class_method(self) -> str | None:
        return self._method.get()

    def has_class_method(self) -> bool:
        return self.get_class_method() is not None

    # -- Function --

    def _prepare_function(self) -> Callable[..., Any] | None:
        reference = self.get_reference()
        if isinstance(reference, str):
            return self._capabilities.get_function(reference)
        if callable(reference) and not inspect.isclass(reference):
            return reference
        return None

    def get_function(self) -> Callable[..., Any] | None:
        return self._function.get()

    def is_function_reference(self) -> bool:
        return self.get_function() is not None

    # -- Callable --

    def _bound_arguments(self) -> dict[str, Any]:
        arguments: dict[str, Any] = {}
        for name, reference in self.bindings.items():
            if reference.is_class_reference():
                arguments[name] = reference.get_class_instance()
            elif reference.has_callable_reference():
                logger.warning("Unresolvable %s binding %r for %r", name, reference.raw, self.raw)
        return arguments

    def build_callable(self) -> Callable[..., Any] | Any | None:
        """Derive the invokable afresh, building a new instance when one is needed.

        Uncached: each call allocates its own instance and collaborators.
        ``Route.dispatch`` uses this so no state is shared across requests.
        """
        entry = self.get_class()
        if entry is not None:
            method = self.get_class_method()
            if method is not None and entry.is_static(method):
                return entry.static_methods[method]
            instance = self.get_class_instance(**self._bound_arguments())
            if method is not None:
                return entry.bind(instance, method)
            return instance
        return self.get_function()

    def get_callable(self) -> Callable[..., Any] | Any | None:
        """Return the final invokable, or ``None``.

        One of: a free function; a static method; a method bound to a new
        instance; or, for a class-only reference, the new instance itself.
        Derived once and cached, so repeated calls return the same object.
        Use ``build_callable()`` for a fresh instance.
        """
        return self._callable.get()

    def __repr__(self) -> str:
        return f"CallableReference({self.raw!r})"
