"""Request-scoped context via ContextVar.

Provides ``request_var``: the ``HostRequest`` currently being dispatched.
The dispatcher sets it around each request so targets and middleware can
reach the request without it being threaded through every signature.

Accessing it outside a dispatch raises ``LookupError``.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from switchyard.request import HostRequest

request_var: ContextVar[HostRequest] = ContextVar("switchyard_request")
"""The current request. Set by ``Dispatcher.handle`` before dispatch."""


def get_request() -> HostRequest:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


@contextmanager
def bind_request(request: HostRequest) -> Iterator[HostRequest]:
    """Make *request* current for the duration of the block."""
    token = request_var.set(request)
    try:
        yield request
    finally:
        request_var.reset(token)
