"""View — a kida template plus the variables it renders with.

Views are the ``view`` collaborator handed to controllers, and can also
be a route target on their own: a class-only reference to a View
subclass builds an instance and calls it with ``(route, parameters)``,
rendering the template with the route parameters merged in.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from kida import Environment, FileSystemLoader

from switchyard.config import DEFAULT_CONFIG, RouterConfig

if TYPE_CHECKING:
    from switchyard.routing.route import Route


def create_environment(config: RouterConfig = DEFAULT_CONFIG) -> Environment:
    """Create a kida Environment loading from ``config.template_dir``."""
    return Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
    )


class View:
    """Render a template with accumulated variables.

    Usage::

        view = View("post.html", environment=env, title="Hello")
        view.set("author", "ada")
        html = view.render(body="...")

    Subclasses may set ``template`` as a class attribute and take no
    arguments, which is what a registered view collaborator needs.
    """

    template: str = ""
    environment: Environment | None = None

    def __init__(
        self,
        template: str | None = None,
        *,
        environment: Environment | None = None,
        **variables: Any,
    ) -> None:
        if template is not None:
            self.template = template
        if environment is not None:
            self.environment = environment
        self.variables: dict[str, Any] = dict(variables)

    def set(self, key: str, value: Any) -> None:
        self.variables[key] = value

    def update(self, variables: Mapping[str, Any]) -> None:
        self.variables.update(variables)

    def has_template(self) -> bool:
        return bool(self.template)

    def get_environment(self) -> Environment:
        if self.environment is None:
            self.environment = create_environment()
        return self.environment

    def render(self, **extra: Any) -> str:
        """Render the template. Raises kida's own error for a missing template."""
        template = self.get_environment().get_template(self.template)
        return template.render({**self.variables, **extra})

    def __call__(self, route: "Route", parameters: Mapping[str, Any] | None = None) -> str:
        return self.render(route=route, **(parameters or {}))

    def __repr__(self) -> str:
        return f"<View {self.template!r}>"
