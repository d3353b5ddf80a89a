import abc
import inspect
import logging
from typing import Any, Callable, NamedTuple, Optional

from switchboard.req import Request
from switchboard.resp import Response

VERBS = ('get', 'post', 'put', 'delete')


class RequestMeta(NamedTuple):
    """Request details handed to server-side handler operations."""
    original_url: str
    base_url: str


class AbstractDispatcher(metaclass=abc.ABCMeta):
    """
    Definition of a dispatcher, effectively the translation
    from an inbound HTTP request to the endpoint that serves it.
    """
    @abc.abstractmethod
    async def dispatch(self, request: Request) -> Response:
        raise NotImplementedError


class Endpoint:
    """
    Convenience base for local endpoint handlers.

    Subclasses implement any of ``get``, ``post``, ``put`` or ``delete``
    taking ``(params, meta=None)``. Inheriting from this class is optional,
    any class with a compatible constructor can be registered.
    """
    def __init__(self, *, api_client=None, **config):
        self.api_client = api_client
        self.config = config
        self.log = logging.getLogger('%s.%s' % (type(self).__module__,
                                                type(self).__name__))


def operation(handler: Any, verb: str) -> Optional[Callable]:
    """
    Look up the operation ``handler`` exposes for ``verb``.

    :return: the bound operation, or None when the handler does not
             implement the verb
    """
    if verb not in VERBS:
        return None
    op = getattr(handler, verb, None)
    return op if callable(op) else None


async def invoke(op: Callable, *args) -> Any:
    """Call an operation, awaiting the result when it is awaitable."""
    result = op(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
