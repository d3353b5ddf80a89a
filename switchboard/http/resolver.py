import abc

from switchboard.exc import HTTPNotFoundException
from switchboard.registry import EndpointRegistry
from switchboard.req import Request


def _normalize_prefix(prefix: str) -> str:
    return '/' + prefix.strip('/') + '/' if prefix.strip('/') else '/'


class AbstractEndpointResolver(metaclass=abc.ABCMeta):
    """
    Interface to resolve the endpoint key serving a request. This is the
    routing portion of the server, it never suspends.
    """
    @abc.abstractmethod
    def resolve(self, request: Request) -> str:
        """
        Resolve an endpoint key.
        :param request: Request object
        :response str: Key of a registered endpoint
        :raises HTTPNotFoundException: no endpoint serves the request
        """

    @property
    @abc.abstractmethod
    def base_url(self) -> str:
        """Path the endpoints are mounted under, as handed to handlers."""


class PrefixResolver(AbstractEndpointResolver):
    """
    Resolve the path below ``mount_prefix`` to the registered key that is
    its longest ``/``-segment prefix, so ``/api/a/b/c`` is served by ``a/b``
    before ``a``.
    """
    __slots__ = ('_registry', '_mount_prefix')

    def __init__(self, registry: EndpointRegistry, mount_prefix: str='/api/'):
        self._registry = registry
        self._mount_prefix = _normalize_prefix(mount_prefix)

    @property
    def base_url(self) -> str:
        return self._mount_prefix.rstrip('/')

    def resolve(self, request: Request) -> str:
        path = request.path
        if not path.startswith(self._mount_prefix):
            raise HTTPNotFoundException('api endpoint not found')

        key = self._registry.match(path[len(self._mount_prefix):])
        if key is None:
            raise HTTPNotFoundException('api endpoint not found')
        return key
