"""Request builders and endpoint handlers shared by the tests."""
import json

from switchboard import Endpoint, HTTPNotFoundException
from switchboard.req import Request


def make_request(method='GET', url='/api/', *, headers=None, body=b'',
                 json_body=None):
    headers = list((headers or {}).items())
    if json_body is not None:
        body = json.dumps(json_body).encode()
        headers.append(('Content-Type', 'application/json'))
    return Request(method, '1.1', headers, body, url)


class Messages(Endpoint):
    """Records every call, returns what it was given."""
    created = 0

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        type(self).created += 1
        self.calls = []

    async def get(self, params, meta=None):
        self.calls.append(('get', params, meta))
        return {'messages': [params.get('id')]}

    async def post(self, params, meta=None):
        self.calls.append(('post', params, meta))
        if 'text' not in params:
            raise HTTPNotFoundException('no text')
        return {'id': 1, 'text': params['text']}


class Orders(Endpoint):
    async def get(self, params, meta=None):
        return {'endpoint': 'orders'}


class OrdersSub(Endpoint):
    async def get(self, params, meta=None):
        return {'endpoint': 'orders/sub'}

    def delete(self, params, meta=None):
        return {'deleted': True}
