from http import HTTPStatus
from typing import Optional


class HTTPException(Exception):
    """
    Failure outcome of a call. Raised by handlers and by the client, turned
    into the ``{"error": {"code": ..., "message": ...}}`` envelope by the
    dispatcher.
    """
    __status__ = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str='', *, status: Optional[int]=None):
        super().__init__(message)
        self._status = status

    @property
    def status(self) -> int:
        if self._status is not None:
            return int(self._status)
        return self.__status__.value

    @property
    def message(self) -> str:
        message = str(self)
        if message:
            return message
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ''

    def to_dict(self) -> dict:
        return {'code': self.status, 'message': self.message}

    @staticmethod
    def from_status(status: int, message: str='') -> 'HTTPException':
        """
        Rebuild a failure from a bare status code, e.g. one reported by a
        remote endpoint.
        """
        status = int(status)
        for cls in _BY_STATUS:
            if cls.__status__.value == status:
                return cls(message)
        if 400 <= status < 500:
            return ClientError(message, status=status)
        return ServerError(message, status=status)

    def __repr__(self):
        return '<%s %d %r>' % (type(self).__name__, self.status, self.message)


class ClientError(HTTPException):
    __status__ = HTTPStatus.BAD_REQUEST


class ServerError(HTTPException):
    __status__ = HTTPStatus.INTERNAL_SERVER_ERROR


# ==============================
# 4xx
# ==============================
class HTTPBadRequestException(ClientError):
    __status__ = HTTPStatus.BAD_REQUEST


class HTTPNotFoundException(ClientError):
    __status__ = HTTPStatus.NOT_FOUND


class HTTPMethodNotAllowedException(ClientError):
    __status__ = HTTPStatus.METHOD_NOT_ALLOWED


# ==============================
# 5xx
# ==============================
class HTTPInternalServerErrorException(ServerError):
    __status__ = HTTPStatus.INTERNAL_SERVER_ERROR


_BY_STATUS = (
    HTTPBadRequestException,
    HTTPNotFoundException,
    HTTPMethodNotAllowedException,
    HTTPInternalServerErrorException,
)
