"""Switchyard exception hierarchy.

Shared across the registry, routes, references, and the dispatcher so
every module raises and catches the same types.

Unresolvable references, empty selections, and middleware rejections
are *not* errors. They are ordinary outcomes and never surface here.
"""

from typing import Any


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when a route definition or configuration file is invalid.

    Typically raised while loading route files or compiling a route
    pattern that is not a valid regular expression.
    """


class InstantiationError(SwitchyardError):
    """Raised when a class-backed reference cannot be constructed.

    Indicates a configuration defect (wrong constructor arguments, a
    factory that raises) rather than an expected absence, so it is
    never swallowed by the reference itself.
    """

    def __init__(self, reference: Any, detail: str = "") -> None:
        self.reference = reference
        self.detail = detail
        message = f"Cannot instantiate {reference!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
