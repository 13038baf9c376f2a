"""Capability table — string identifiers mapped to factories and functions.

Callable references name their targets by string (``"PostController@show"``,
``"is_logged_in"``). Rather than importing or reflecting on arbitrary
names at request time, every class and function a route may reference is
registered here once at startup. Resolving a reference is then a plain
dictionary lookup, and an unknown name is a lookup miss, not an error.

Usage::

    capabilities = Capabilities()

    @capabilities.function
    def is_logged_in(route):
        return True

    @capabilities.register
    class PostController(BaseController):
        def show(self, route, parameters): ...

    capabilities.add_class("PostView", lambda: View("post.html"))
"""

import inspect
import types
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, overload

from switchyard._internal.types import Handler


@dataclass(frozen=True, slots=True)
class ClassEntry:
    """A registered class: how to build it and which methods it exposes.

    ``static_methods`` hold callables that need no instance.
    ``instance_methods`` hold plain functions, bound to a fresh instance
    at resolution time.
    """

    name: str
    factory: Callable[..., Any]
    static_methods: Mapping[str, Callable[..., Any]] = field(default_factory=dict)
    instance_methods: Mapping[str, Callable[..., Any]] = field(default_factory=dict)

    def has_method(self, method: str) -> bool:
        return method in self.static_methods or method in self.instance_methods

    def is_static(self, method: str) -> bool:
        return method in self.static_methods

    def bind(self, instance: Any, method: str) -> Callable[..., Any]:
        """Bind an instance method thunk to *instance*."""
        return types.MethodType(self.instance_methods[method], instance)


def class_entry(name: str, cls: type, factory: Callable[..., Any] | None = None) -> ClassEntry:
    """Build a ``ClassEntry`` from a class body.

    Walks the MRO once, at registration, sorting public callables into
    static methods (``@staticmethod`` and ``@classmethod``) and instance
    methods. Names starting with an underscore are not exposed.
    """
    static_methods: dict[str, Callable[..., Any]] = {}
    instance_methods: dict[str, Callable[..., Any]] = {}

    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for attr, value in vars(klass).items():
            if attr.startswith("_"):
                continue
            if isinstance(value, staticmethod | classmethod):
                instance_methods.pop(attr, None)
                static_methods[attr] = getattr(cls, attr)
            elif inspect.isfunction(value):
                static_methods.pop(attr, None)
                instance_methods[attr] = value

    return ClassEntry(
        name=name,
        factory=factory or cls,
        static_methods=static_methods,
        instance_methods=instance_methods,
    )


class Capabilities:
    """Registry of referenceable classes and free functions.

    Class and function names share no namespace: a name registered as a
    class never resolves as a function, matching the rule that a function
    reference must not name a class.
    """

    __slots__ = ("_classes", "_functions")

    def __init__(self) -> None:
        self._classes: dict[str, ClassEntry] = {}
        self._functions: dict[str, Handler] = {}

    # -- Registration --

    def add_function(self, name: str, function: Handler) -> None:
        self._functions[name] = function

    def add_class(
        self,
        name: str,
        cls_or_factory: type | Callable[..., Any],
        *,
        methods: type | None = None,
    ) -> ClassEntry:
        """Register a class under *name*.

        *cls_or_factory* is either the class itself or a factory callable.
        With a factory, pass the class whose methods should be exposed as
        *methods*; a factory without *methods* exposes no methods and is
        used for class-only (callable instance) references.
        """
        if isinstance(cls_or_factory, type):
            entry = class_entry(name, methods or cls_or_factory, factory=cls_or_factory)
        elif methods is not None:
            entry = class_entry(name, methods, factory=cls_or_factory)
        else:
            entry = ClassEntry(name=name, factory=cls_or_factory)
        self._classes[name] = entry
        return entry

    @overload
    def function[F: Callable[..., Any]](self, fn: F, /) -> F: ...

    @overload
    def function[F: Callable[..., Any]](self, *, name: str) -> Callable[[F], F]: ...

    def function(self, fn: Any = None, /, *, name: str | None = None) -> Any:
        """Decorator form of ``add_function``."""

        def decorator(f: Any) -> Any:
            self.add_function(name or f.__name__, f)
            return f

        if fn is not None:
            return decorator(fn)
        return decorator

    @overload
    def register[C: type](self, cls: C, /) -> C: ...

    @overload
    def register[C: type](self, *, name: str) -> Callable[[C], C]: ...

    def register(self, cls: Any = None, /, *, name: str | None = None) -> Any:
        """Decorator form of ``add_class``."""

        def decorator(c: Any) -> Any:
            self.add_class(name or c.__name__, c)
            return c

        if cls is not None:
            return decorator(cls)
        return decorator

    def add_module(self, module: types.ModuleType, *, prefix: str = "") -> None:
        """Register every public class and function defined in *module*.

        Names imported into the module from elsewhere are skipped.
        """
        for attr, value in vars(module).items():
            if attr.startswith("_") or getattr(value, "__module__", None) != module.__name__:
                continue
            if isinstance(value, type):
                self.add_class(prefix + attr, value)
            elif inspect.isfunction(value):
                self.add_function(prefix + attr, value)

    def update(self, other: "Capabilities") -> None:
        """Copy every entry from *other*, overriding duplicates."""
        self._classes.update(other._classes)
        self._functions.update(other._functions)

    # -- Lookup --

    def get_class(self, name: str) -> ClassEntry | None:
        return self._classes.get(name)

    def get_function(self, name: str) -> Handler | None:
        if name in self._classes:
            return None
        return self._functions.get(name)

    def has_class(self, name: str) -> bool:
        return name in self._classes

    def has_function(self, name: str) -> bool:
        return name in self._functions and name not in self._classes

    @property
    def class_names(self) -> Iterable[str]:
        return tuple(self._classes)

    @property
    def function_names(self) -> Iterable[str]:
        return tuple(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._classes or name in self._functions

    def __repr__(self) -> str:
        return f"<Capabilities ({len(self._classes)} classes, {len(self._functions)} functions)>"
