"""Callable references — resolve route targets and middleware by name."""

from switchyard.references.callable import CallableReference, resolve
from switchyard.references.capabilities import Capabilities, ClassEntry, class_entry

__all__ = ["CallableReference", "Capabilities", "ClassEntry", "class_entry", "resolve"]
