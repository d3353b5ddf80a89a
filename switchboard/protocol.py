import asyncio
import functools
import logging
from typing import Optional

import httptools

from .abc import AbstractDispatcher
from .exc import HTTPBadRequestException, HTTPInternalServerErrorException
from .req import Request
from .resp import Response

log = logging.getLogger(__name__)


class SwitchboardProtocol(asyncio.Protocol):
    """
    HTTP/1.1 protocol feeding fully buffered requests to a dispatcher.
    One request is served per connection, the transport is closed once the
    response has been written.

    :param loop: event loop
    :param dispatcher: dispatcher strategy
    :param request_timeout: Max secs to receive a complete request (def: 15s)
    """
    __slots__ = ('dispatcher', 'loop', 'parser', 'transport',
                 'request_timeout', 'timeout', 'url', 'headers', 'body')

    def __init__(self, loop: asyncio.AbstractEventLoop,
                 dispatcher: AbstractDispatcher, *, request_timeout: int=15):
        assert isinstance(dispatcher, AbstractDispatcher), dispatcher

        self.dispatcher = dispatcher
        self.loop = loop

        self.parser = None
        self.transport = None
        self.request_timeout = request_timeout
        self.timeout = None  # read deadline

        # request info
        self.url = None
        self.headers = None
        self.body = None

    # ===========================
    # asyncio.Protocol callbacks
    # ===========================
    def connection_made(self, transport: asyncio.Transport) -> None:
        self.transport = transport
        self.parser = httptools.HttpRequestParser(self)

        self.start_timeout()

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self.cancel_timeout()

    def data_received(self, data: bytes) -> None:
        if self.transport.is_closing():
            return
        try:
            self.parser.feed_data(data)
        except httptools.HttpParserError as exc:
            log.debug('bad request: %s', exc)
            response = Response.failure(HTTPBadRequestException('bad request'))
            self.write(response, '1.1')
            self.transport.close()

    # ===========================
    # httptools parser callbacks
    # ===========================
    def on_message_begin(self) -> None:
        self.url = None
        self.headers = []
        self.body = bytearray()

    def on_header(self, name: bytes, value: bytes) -> None:
        self.headers.append((name.decode('latin-1'), value.decode('latin-1')))

    def on_url(self, url: bytes) -> None:
        self.url = (self.url or '') + url.decode()

    def on_body(self, body: bytes) -> None:
        self.body.extend(body)

    def on_message_complete(self) -> None:
        # the request is in, the handler runs to completion from here
        self.cancel_timeout()
        request = Request(self.parser.get_method(),
                          self.parser.get_http_version(),
                          self.headers, bytes(self.body),
                          self.url, self.transport)
        task = self.loop.create_task(self.dispatcher.dispatch(request))
        task.add_done_callback(functools.partial(self.handle_task_complete,
                                                 request=request))

    # ================================
    # ours
    # ================================
    def start_timeout(self) -> None:
        """
        Start the request timeout task, triggering on_timeout_elapsed if the
        request has not been fully received in the time set.
        """
        self.timeout = self.loop.call_later(self.request_timeout,
                                            self.on_timeout_elapsed)

    def cancel_timeout(self) -> None:
        if self.timeout:
            self.timeout.cancel()

    def on_timeout_elapsed(self) -> None:
        log.warning('request read timeout, closing connection')
        self.transport.close()

    def write(self, response: Response, version: str) -> None:
        self.transport.write(response.encode(version))

    def handle_task_complete(self, task: asyncio.Task,
                             request: Request) -> None:
        """
        Write the dispatcher's response, or a 500 envelope if it failed,
        then close the connection.
        """
        # Nothing to write to once the transport is shut or shutting down.
        if self.transport.is_closing():
            return

        if task.cancelled():
            self.transport.close()
            return

        exc = task.exception()
        if exc is not None:
            log.error('dispatcher failed on %r', request, exc_info=exc)
            response = Response.failure(
                HTTPInternalServerErrorException('internal server error'))
        else:
            response = task.result()

        self.write(response, request.version)
        self.transport.close()
