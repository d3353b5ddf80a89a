"""
Extraction of the single params object handed to endpoint operations.

Sources are merged in order, later ones overwriting earlier ones:

1. the parsed body (JSON object or url-encoded form)
2. the query string
3. ``_body``: the raw body text, when raw body capture is enabled
4. ``_auth_token``: the token of an ``Authorization: Bearer`` header
5. ``_request_id``: the ``X-Request-ID`` header, when enabled
6. every configured extra header, under its own name
"""
import json
from typing import Any, Dict, Iterable
from urllib.parse import parse_qsl

from multidict import MultiDict

from .exc import HTTPBadRequestException
from .req import Request

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


def is_json(content_type: str) -> bool:
    return content_type == 'application/json' or content_type.endswith('+json')


def decode_pairs(qs: str) -> Dict[str, Any]:
    """
    Decode a query string or form body. Repeated keys become a list of
    values, single keys a plain string.
    """
    pairs = MultiDict(parse_qsl(qs, keep_blank_values=True))
    out = {}
    for key in pairs.keys():
        if key in out:
            continue
        values = pairs.getall(key)
        out[key] = values if len(values) > 1 else values[0]
    return out


def body_text(request: Request, errors: str='strict') -> str:
    """
    Decode the request body in its declared charset.

    :raises HTTPBadRequestException: unknown charset, or the body is not
                                     valid in it
    """
    charset = request.charset
    try:
        return request.body.decode(charset, errors)
    except LookupError:
        raise HTTPBadRequestException('unsupported charset: ' + charset)
    except UnicodeDecodeError:
        raise HTTPBadRequestException('body is not valid ' + charset)


def parse_body(request: Request, *,
               any_type_as_json: bool=False) -> Dict[str, Any]:
    """
    Parse the request body into a dict.

    :param request: Request
    :param any_type_as_json: parse every non-form body as JSON, regardless
                             of its Content-Type
    :raises HTTPBadRequestException: the body cannot be decoded, or a
                                     declared JSON body is not valid JSON
    """
    if not request.body:
        return {}

    content_type = request.content_type
    if content_type == FORM_CONTENT_TYPE:
        return decode_pairs(body_text(request))

    if is_json(content_type):
        try:
            parsed = json.loads(body_text(request))
        except ValueError:
            raise HTTPBadRequestException('invalid JSON body')
    elif any_type_as_json:
        try:
            parsed = json.loads(body_text(request, errors='replace'))
        except ValueError:
            # raw capture still gets the text under _body
            return {}
    else:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def bearer_token(authorization: str):
    parts = authorization.split()
    if len(parts) >= 2 and parts[0].lower() == 'bearer':
        return parts[1]
    return None


def extract_params(request: Request, *, use_raw_body: bool=False,
                   include_request_id: bool=False,
                   header_params: Iterable[str]=()) -> Dict[str, Any]:
    params = parse_body(request, any_type_as_json=use_raw_body)
    params.update(decode_pairs(request.query_string))

    if use_raw_body and request.body:
        params['_body'] = body_text(request, errors='replace')

    authorization = request.headers.get('Authorization')
    if authorization:
        token = bearer_token(authorization)
        if token is not None:
            params['_auth_token'] = token

    if include_request_id and 'X-Request-ID' in request.headers:
        params['_request_id'] = request.headers['X-Request-ID']

    for header in header_params:
        if header in request.headers:
            params[header] = request.headers[header]

    return params
