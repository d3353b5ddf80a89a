import json
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Optional

from multidict import CIMultiDict

from .exc import HTTPException

JSON_CONTENT_TYPE = 'application/json; charset=utf-8'


class Response:
    __slots__ = ('_status', '_headers', '_body')

    def __init__(self, status: int=HTTPStatus.OK, headers=None,
                 body: bytes=b''):
        """
        Model of a fully buffered HTTP Response.

        :param status: HTTP status code
        :param headers: CIMultiDict, mapping or list of (name, value) tuples
        :param body: Response content
        """
        self._status = int(status)
        self._headers = CIMultiDict(headers or ())
        self._body = body

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> CIMultiDict:
        return self._headers

    @property
    def body(self) -> bytes:
        return self._body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self._body.decode())

    # ==============================
    # constructors
    # ==============================
    @classmethod
    def from_json(cls, obj: Any, *, status: int=HTTPStatus.OK) -> 'Response':
        body = json.dumps(obj, ensure_ascii=False).encode()
        return cls(status, {'Content-Type': JSON_CONTENT_TYPE}, body)

    @classmethod
    def redirect(cls, location: str, *,
                 status: int=HTTPStatus.FOUND) -> 'Response':
        return cls(status, {'Location': str(location)})

    @classmethod
    def success(cls, result: Any) -> 'Response':
        """
        Encode a handler's result:

        * ``_redirect`` redirects to its value, no body
        * ``_raw`` sends its value without the envelope
        * a result that already has ``data`` is sent as is
        * anything else is wrapped as ``{"data": result}``
        """
        if isinstance(result, Mapping):
            if '_redirect' in result:
                return cls.redirect(result['_redirect'])
            if '_raw' in result:
                raw = result['_raw']
                if isinstance(raw, (bytes, bytearray)):
                    return cls(HTTPStatus.OK,
                               {'Content-Type': 'application/octet-stream'},
                               bytes(raw))
                return cls.from_json(raw)
            if 'data' in result:
                return cls.from_json(dict(result))
        return cls.from_json({'data': result})

    @classmethod
    def failure(cls, exc: HTTPException) -> 'Response':
        return cls.from_json({'error': exc.to_dict()}, status=exc.status)

    # ==============================
    # wire format
    # ==============================
    def encode(self, version: Optional[str]='1.1') -> bytes:
        try:
            reason = HTTPStatus(self._status).phrase
        except ValueError:
            reason = ''

        headers = CIMultiDict(self._headers)
        headers['Content-Length'] = str(len(self._body))
        headers['Connection'] = 'close'

        head = bytearray(b'HTTP/%b %d %b\r\n' % (
            (version or '1.1').encode(), self._status, reason.encode()))
        for k, v in headers.items():
            head.extend(b'%b: %b\r\n' % (k.encode(), v.encode('latin-1')))
        head.extend(b'\r\n')
        return bytes(head) + self._body

    def __repr__(self):
        return '<Response %d>' % self._status
