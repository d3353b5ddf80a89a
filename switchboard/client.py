import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, NamedTuple, Optional

from aiohttp import (ClientError, ClientResponse, ClientSession,
                     ClientTimeout, FormData)
from multidict import CIMultiDict

from .abc import invoke, operation
from .exc import (HTTPException, HTTPInternalServerErrorException,
                  HTTPMethodNotAllowedException, HTTPNotFoundException)
from .params import FORM_CONTENT_TYPE, is_json
from .registry import EndpointRegistry, InstanceCache, Local, Remote

log = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'application/json'

QUERY_VERBS = ('get', 'delete')
BODY_VERBS = ('post', 'put')


def identity(value: Any) -> Any:
    return value


class CallRequest(NamedTuple):
    """
    One call to a named endpoint.

    :param endpoint: endpoint key in the registry
    :param params: parameters object handed to the endpoint
    :param verb: get, post, put or delete
    :param content_type: Content-Type for remote calls
    :param transform: applied to a successful result
    """
    endpoint: str
    params: Optional[Mapping] = None
    verb: str = 'get'
    content_type: Optional[str] = None
    transform: Callable[[Any], Any] = identity


def _query_value(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return json.dumps(value)
    return value


def _query(params: Mapping) -> list:
    out = []
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            out.extend((key, _query_value(v)) for v in value)
        else:
            out.append((key, _query_value(value)))
    return out


def _body(params: Any, content_type: str) -> Any:
    if isinstance(params, (str, bytes)):
        return params
    media_type = content_type.split(';', 1)[0].strip().lower()
    if media_type == FORM_CONTENT_TYPE and isinstance(params, Mapping):
        form = FormData()
        for key, value in params.items():
            form.add_field(key, str(value))
        return form
    return json.dumps(params)


async def _read(resp: ClientResponse) -> Any:
    if is_json(resp.content_type):
        text = await resp.text(errors='replace')
        try:
            return json.loads(text) if text else None
        except ValueError:
            return text
    return await resp.text(errors='replace')


def _remote_failure(status: int, body: Any, reason: str) -> HTTPException:
    """Rebuild the remote error envelope as a local failure."""
    if isinstance(body, Mapping) and isinstance(body.get('error'), Mapping):
        error = body['error']
        try:
            status = int(error.get('code', status))
        except (TypeError, ValueError):
            pass
        return HTTPException.from_status(status,
                                         str(error.get('message', reason)))
    message = body if isinstance(body, str) and body else reason
    return HTTPException.from_status(status, message or '')


class ApiClient:
    """
    Calls endpoints by name, wherever they live.

    Remote endpoints are reached over HTTP and their ``data`` envelope is
    unwrapped; local endpoints are instantiated once and called directly.
    Either way ``call`` returns the result, or raises HTTPException.
    """
    __slots__ = ('_registry', '_instance_config', '_instances', '_session',
                 '_owns_session')

    def __init__(self, registry, *, instance_config: Optional[Dict]=None,
                 session: Optional[ClientSession]=None):
        if not isinstance(registry, EndpointRegistry):
            registry = EndpointRegistry(registry)
        self._registry = registry
        self._instance_config = dict(instance_config or {})
        self._instances = InstanceCache()
        self._session = session
        self._owns_session = session is None

    @property
    def registry(self) -> EndpointRegistry:
        return self._registry

    async def __aenter__(self) -> 'ApiClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None\
                and not self._session.closed:
            await self._session.close()

    def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            # no timeout, callers add their own
            self._session = ClientSession(timeout=ClientTimeout(total=None))
            self._owns_session = True
        return self._session

    def instance(self, endpoint: str) -> Any:
        """Get (creating on first use) the handler behind a local endpoint."""
        desc = self._registry[endpoint]
        if not isinstance(desc, Local):
            raise TypeError('%s is not a local endpoint' % endpoint)
        return self._instances.get_or_create(endpoint, desc.factory,
                                             api_client=self,
                                             **self._instance_config)

    async def call(self, request: CallRequest) -> Any:
        try:
            desc = self._registry[request.endpoint]
        except KeyError:
            raise HTTPNotFoundException('api endpoint not found')

        verb = (request.verb or 'get').lower()
        transform = request.transform or identity

        if isinstance(desc, Remote):
            raw = await self._call_remote(desc.url, verb, request)
        else:
            raw = await self._call_local(verb, request)
        return transform(raw)

    async def _call_remote(self, url: str, verb: str,
                           request: CallRequest) -> Any:
        if verb not in QUERY_VERBS + BODY_VERBS:
            raise HTTPMethodNotAllowedException('method not supported')

        content_type = request.content_type or DEFAULT_CONTENT_TYPE
        headers = CIMultiDict({'Content-Type': content_type})
        params = request.params if request.params is not None else {}

        kwargs = {'headers': headers}
        if verb in QUERY_VERBS:
            kwargs['params'] = _query(params)
        else:
            kwargs['data'] = _body(params, content_type)

        log.debug('%s %s (%s)', verb.upper(), url, request.endpoint)
        try:
            async with self._get_session().request(verb.upper(), url,
                                                   **kwargs) as resp:
                body = await _read(resp)
                status, reason = resp.status, resp.reason or ''
        except ClientError as exc:
            raise HTTPInternalServerErrorException(str(exc) or
                                                   type(exc).__name__)

        if status >= 400:
            raise _remote_failure(status, body, reason)
        if isinstance(body, Mapping) and 'data' in body:
            return body['data']
        return body

    async def _call_local(self, verb: str, request: CallRequest) -> Any:
        handler = self.instance(request.endpoint)
        op = operation(handler, verb)
        if op is None:
            raise HTTPMethodNotAllowedException('method not available')
        params = dict(request.params) if request.params is not None else {}
        return await invoke(op, params)
