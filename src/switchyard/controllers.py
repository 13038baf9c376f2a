"""Base classes for class-backed route targets.

A route whose target is ``"PostController@show"`` and which declares
``model`` and ``view`` gets a fresh ``PostController(model=..., view=...)``
with both collaborators constructed from their own references.
"""

from typing import Any

from switchyard.views import View


class BaseModel:
    """Data access for a controller. Optionally holds a view."""

    def __init__(self, view: View | None = None) -> None:
        self.view = view

    def has_view(self) -> bool:
        return self.view is not None


class BaseController:
    """A route target holding its model and view collaborators.

    Usage::

        class PostController(BaseController):
            def show(self, route, parameters):
                post = self.model.find(parameters["id"])
                return self.view.render(post=post)
    """

    def __init__(self, model: Any = None, view: View | None = None) -> None:
        self.model = model
        self.view = view

    def has_model(self) -> bool:
        return self.model is not None

    def has_view(self) -> bool:
        return self.view is not None

    def render(self, **variables: Any) -> str:
        """Render this controller's view. Returns ``""`` without one."""
        if self.view is None:
            return ""
        return self.view.render(**variables)
