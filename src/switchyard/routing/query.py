"""Query strings for rewrite targets, with bracketed keys for nested values.

``build_query`` writes the shape a PHP-style front controller reads back
into nested arrays::

    build_query({"p": "42", "filter": {"id": "7"}, "tags": ["a", "b"]})
    # "p=42&filter%5Bid%5D=7&tags%5B0%5D=a&tags%5B1%5D=b"

``parse_query`` is its inverse for string values.
"""

import re
from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode

_KEY = re.compile(r"^([^\[]+)((?:\[[^\]]*\])*)$")
_SEGMENT = re.compile(r"\[([^\]]*)\]")


def _pairs(key: str, value: Any) -> Iterator[tuple[str, str]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub, item in value.items():
            yield from _pairs(f"{key}[{sub}]", item)
    elif isinstance(value, list | tuple):
        for index, item in enumerate(value):
            yield from _pairs(f"{key}[{index}]", item)
    elif isinstance(value, bool):
        yield key, "1" if value else "0"
    else:
        yield key, str(value)


def build_query(parameters: Mapping[str, Any]) -> str:
    """Serialize *parameters*. ``None`` values, nested or not, are skipped."""
    pairs: list[tuple[str, str]] = []
    for key, value in parameters.items():
        pairs.extend(_pairs(str(key), value))
    return urlencode(pairs)


def _listify(node: Any) -> Any:
    if not isinstance(node, dict):
        return node
    items = {key: _listify(value) for key, value in node.items()}
    if items and list(items) == [str(index) for index in range(len(items))]:
        return list(items.values())
    return items


def parse_query(query: str) -> dict[str, Any]:
    """Parse a query string, rebuilding nested mappings and lists from bracketed keys.

    Mappings whose keys are exactly ``0..n-1`` in order become lists.
    """
    result: dict[str, Any] = {}
    for raw_key, value in parse_qsl(query, keep_blank_values=True):
        found = _KEY.match(raw_key)
        if found is None:
            result[raw_key] = value
            continue
        path = [found.group(1), *_SEGMENT.findall(found.group(2))]
        node = result
        for depth, segment in enumerate(path):
            if segment == "" and depth > 0:
                segment = str(len(node))
            if depth == len(path) - 1:
                node[segment] = value
            else:
                child = node.get(segment)
                if not isinstance(child, dict):
                    child = node[segment] = {}
                node = child
    return {key: _listify(value) for key, value in result.items()}
