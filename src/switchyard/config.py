"""Router configuration.

RouterConfig is a frozen dataclass, immutable after creation, no
string-key dict lookups for the knobs the routing core depends on.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Routing configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(entry_point="app.php", default_priority=0)
    """

    # Callable references: "Class@method" binds an instance, "Class::method" a static
    instance_separator: str = "@"
    static_separator: str = "::"

    # Routes
    wildcard_method: str = "ANY"
    default_priority: int = 10

    # Parameter templates: "$matches[1]" is replaced by capture group 1
    match_placeholder: str = r"^\$matches\[([0-9]+)\]$"

    # Rewrite target handed back to the host's front controller
    entry_point: str = "index.php"

    # Views
    template_dir: str | Path = "templates"
    autoescape: bool = True


DEFAULT_CONFIG = RouterConfig()
