"""Pattern matching, scoring, and capture substitution.

Pure functions shared by Route and the registry stages. Nothing here
raises on a non-matching path; a missing match is simply ``None``.
"""

import math
import re
from collections.abc import Callable, Iterable, Mapping
from functools import lru_cache
from typing import Any

from switchyard.errors import ConfigurationError

MAX_SCORE = 100


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a route pattern.

    Raises ``ConfigurationError`` for an invalid regular expression so a
    broken route surfaces at load time instead of as a silent miss.
    """
    try:
        return re.compile(pattern)
    except re.error as exc:
        msg = f"Invalid route pattern {pattern!r}: {exc}"
        raise ConfigurationError(msg) from exc


def match_path(pattern: re.Pattern[str], path: str | None) -> re.Match[str] | None:
    """Search *path* with *pattern*. Unanchored; anchor in the pattern itself."""
    if path is None:
        return None
    return pattern.search(path)


def count_matches(match: re.Match[str] | None) -> int:
    """Count the whole match plus every capture group that participated.

    Optional groups that did not take part in the match are not counted,
    so ``^/posts(/[0-9]+)?$`` scores the same as ``^/posts$`` on ``/posts``.
    """
    if match is None:
        return 0
    return 1 + sum(1 for group in match.groups() if group is not None)


def path_score(match: re.Match[str] | None) -> int:
    """Specificity score out of 100: ``ceil(100 / n)``, or 0 without a match.

    A literal pattern (no captures) scores 100; one capture 50; three 25.
    """
    total = count_matches(match)
    return math.ceil(MAX_SCORE / total) if total > 0 else 0


@lru_cache(maxsize=8)
def _placeholder_regex(placeholder: str) -> re.Pattern[str]:
    return re.compile(placeholder)


def replace_matches(value: Any, match: re.Match[str] | None, placeholder: str) -> Any:
    """Substitute ``$matches[N]`` placeholders inside *value*.

    Walks nested lists, tuples, and mappings. A string that is exactly a
    placeholder becomes capture group N. A placeholder that cannot be
    filled (no match, no such group, group did not participate) becomes
    ``None``. Every other value passes through untouched.
    """
    if isinstance(value, str):
        found = _placeholder_regex(placeholder).match(value)
        if found is None:
            return value
        if match is None:
            return None
        index = int(found.group(1))
        if index > (match.re.groups or 0):
            return None
        return match.group(index)
    if isinstance(value, Mapping):
        return {key: replace_matches(item, match, placeholder) for key, item in value.items()}
    if isinstance(value, list):
        return [replace_matches(item, match, placeholder) for item in value]
    if isinstance(value, tuple):
        return tuple(replace_matches(item, match, placeholder) for item in value)
    return value


def validate_items[T](predicate: Callable[[T], Any], items: Iterable[T]) -> bool:
    """True when *predicate* is truthy for every item. Stops at the first failure."""
    return all(predicate(item) for item in items)


def _prune(value: Any) -> Any:
    if isinstance(value, Mapping):
        return drop_empty(value)
    if isinstance(value, list):
        return [item for item in map(_prune, value) if item]
    if isinstance(value, tuple):
        return tuple(item for item in map(_prune, value) if item)
    return value


def drop_empty(values: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the entries with a truthy value, preserving order.

    Nested lists, tuples, and mappings are pruned the same way first, so a
    container left empty is dropped too. Pruned lists close up their gaps.
    """
    pruned = ((key, _prune(value)) for key, value in values.items())
    return {key: value for key, value in pruned if value}
