"""Lazy — a memoized computation with explicit invalidation.

Routes and callable references derive several facts from their raw
configuration (compiled pattern, upper-cased methods, wrapped
middleware...). Each fact gets its own ``Lazy`` so a setter can reset
exactly the field it changed and nothing else.

Usage::

    self._methods = Lazy(self._prepare_methods)
    self._methods.get()    # computes once
    self._methods.get()    # cached
    self._methods.reset()  # next get() recomputes
"""

from collections.abc import Callable


class Lazy[T]:
    """A lazily computed, cached value guarded by a prepared flag."""

    __slots__ = ("_factory", "_prepared", "_value")

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._prepared = False
        self._value: T | None = None

    @property
    def prepared(self) -> bool:
        return self._prepared

    def get(self) -> T:
        if not self._prepared:
            self._value = self._factory()
            self._prepared = True
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        """Drop the cached value. The next ``get()`` recomputes it."""
        self._prepared = False
        self._value = None

    def __repr__(self) -> str:
        if self._prepared:
            return f"Lazy({self._value!r})"
        return "Lazy(<unprepared>)"
