import logging
from typing import Any, Iterable, NamedTuple, Optional

from switchboard.abc import (VERBS, AbstractDispatcher, RequestMeta, invoke,
                             operation)
from switchboard.client import ApiClient, CallRequest
from switchboard.exc import (HTTPException, HTTPInternalServerErrorException,
                             HTTPMethodNotAllowedException)
from switchboard.params import extract_params
from switchboard.registry import (EndpointRegistry, InstanceCache, Local,
                                  Remote)
from switchboard.req import Request
from switchboard.resp import Response

from .resolver import AbstractEndpointResolver, PrefixResolver

log = logging.getLogger(__name__)


class ServerOptions(NamedTuple):
    """
    :param mount_prefix: path under which endpoint keys are resolved
    :param use_raw_body: parse any body as JSON and pass its text as ``_body``
    :param include_request_id: pass ``X-Request-ID`` as ``_request_id``
    :param header_params: header names copied into params verbatim
    :param instance_config: extra keyword arguments for handler constructors
                            that are not shared with the api client
    """
    mount_prefix: str = '/api/'
    use_raw_body: bool = False
    include_request_id: bool = False
    header_params: Iterable[str] = ()
    instance_config: Optional[dict] = None


class HttpDispatcher(AbstractDispatcher):
    """
    Dispatcher that serves HTTP requests from the endpoint registry:
    GET, POST, PUT and DELETE go to the handler operation of the same name
    and the outcome comes back in the ``data``/``error`` envelope.
    """
    __slots__ = ('_registry', '_api_client', '_options', '_resolver',
                 '_instances')

    def __init__(self, registry, *, api_client: Optional[ApiClient]=None,
                 options: ServerOptions=ServerOptions(),
                 resolver: Optional[AbstractEndpointResolver]=None):
        if not isinstance(registry, EndpointRegistry):
            registry = EndpointRegistry(registry)
        self._registry = registry
        self._api_client = api_client
        self._options = options._replace(
            header_params=tuple(options.header_params))
        self._resolver = resolver or PrefixResolver(registry,
                                                    options.mount_prefix)
        self._instances = InstanceCache()

    def endpoint(self, key: str) -> Any:
        """
        Get (creating on first use) the handler for a local endpoint.

        When the injected api client registers the same handler under
        ``key``, its instance is used so there is one per key per process.
        """
        desc = self._registry[key]
        if not isinstance(desc, Local):
            raise TypeError('%s is not a local endpoint' % key)
        if self._api_client is not None\
                and self._api_client.registry.get(key) == desc:
            return self._api_client.instance(key)
        config = dict(self._options.instance_config or {})
        config['api_client'] = self._api_client
        return self._instances.get_or_create(key, desc.factory, **config)

    async def dispatch(self, request: Request) -> Response:
        try:
            result = await self._process(request)
            return Response.success(result)
        except HTTPException as exc:
            log.warning('%s %s: %d %s', request.method, request.url,
                        exc.status, exc.message)
            return Response.failure(exc)
        except Exception:
            log.exception('%s %s: unhandled error', request.method,
                          request.url)
            return Response.failure(
                HTTPInternalServerErrorException('internal server error'))

    async def _process(self, request: Request) -> Any:
        verb = request.method.lower()
        if verb not in VERBS:
            raise HTTPMethodNotAllowedException('method not supported')

        key = self._resolver.resolve(request)
        params = extract_params(
            request,
            use_raw_body=self._options.use_raw_body,
            include_request_id=self._options.include_request_id,
            header_params=self._options.header_params)

        if isinstance(self._registry[key], Remote):
            return await self._forward(key, verb, params)

        handler = self.endpoint(key)
        op = operation(handler, verb)
        if op is None:
            raise HTTPMethodNotAllowedException('method not available')

        meta = RequestMeta(original_url=request.url,
                           base_url=self._resolver.base_url)
        return await invoke(op, params, meta)

    async def _forward(self, key: str, verb: str, params: dict) -> Any:
        if self._api_client is None:
            raise HTTPInternalServerErrorException(
                'no api client to reach remote endpoint ' + key)
        return await self._api_client.call(
            CallRequest(key, params=params, verb=verb))
