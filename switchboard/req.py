import asyncio
from typing import Optional
from urllib.parse import unquote

import httptools
from multidict import CIMultiDict


class Request:
    __slots__ = ('_method', '_version', '_headers', '_body', '_url',
                 '_transport', '_parsed_url')

    def __init__(self, method, version, headers, body, url, transport=None):
        """
        Model of a fully buffered HTTP Request.

        :param method: Request METHOD, bytes or str
        :param version: HTTP Version
        :param headers: CIMultiDict, mapping or list of (name, value) tuples
        :param body: Request content
        :param url: Target URL, as sent on the request line
        :param transport: asyncio transport, not to be used directly
        """
        if isinstance(method, bytes):
            method = method.decode()
        self._method = method.upper()
        self._version = version
        self._headers = headers if isinstance(headers, CIMultiDict)\
            else CIMultiDict(headers or ())
        self._body = body or b''
        self._url = url
        self._transport = transport
        self._parsed_url = None

    @property
    def method(self) -> str:
        return self._method

    @property
    def version(self) -> str:
        return self._version

    @property
    def headers(self) -> CIMultiDict:
        return self._headers

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def url(self) -> str:
        return self._url

    @property
    def transport(self) -> Optional[asyncio.Transport]:
        return self._transport

    @property
    def content_type(self) -> str:
        """Media type without parameters, lower-cased."""
        value = self._headers.get('Content-Type', '')
        return value.split(';', 1)[0].strip().lower()

    @property
    def charset(self) -> str:
        value = self._headers.get('Content-Type', '')
        for part in value.split(';')[1:]:
            name, _, charset = part.partition('=')
            if name.strip().lower() == 'charset' and charset.strip():
                return charset.strip().strip('"')
        return 'utf-8'

    def _parse_url(self):
        if self._parsed_url is None:
            self._parsed_url = httptools.parse_url(self._url.encode())
        return self._parsed_url

    @property
    def path(self) -> str:
        """Percent-decoded path component of the URL."""
        path = self._parse_url().path
        return unquote(path.decode()) if path else '/'

    @property
    def query_string(self) -> str:
        query = self._parse_url().query
        return query.decode() if query else ''

    def __repr__(self):
        return '<Request %s %s>' % (self._method, self._url)
