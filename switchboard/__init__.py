from .abc import VERBS, Endpoint, RequestMeta
from .client import ApiClient, CallRequest
from .exc import (ClientError, HTTPBadRequestException, HTTPException,
                  HTTPInternalServerErrorException,
                  HTTPMethodNotAllowedException, HTTPNotFoundException,
                  ServerError)
from .registry import EndpointRegistry, Local, Remote

__version__ = '0.1.0'

__all__ = ('ApiClient', 'CallRequest', 'Endpoint', 'EndpointRegistry',
           'Local', 'Remote', 'RequestMeta', 'VERBS',
           'HTTPException', 'ClientError', 'ServerError',
           'HTTPBadRequestException', 'HTTPNotFoundException',
           'HTTPMethodNotAllowedException',
           'HTTPInternalServerErrorException')
