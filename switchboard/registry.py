from collections.abc import Mapping
from typing import Any, Dict, Iterator, NamedTuple, Optional, Union


class Remote(NamedTuple):
    """Endpoint reached over HTTP at ``url``."""
    url: str


class Local(NamedTuple):
    """Endpoint implemented in-process by instances of ``factory``."""
    factory: type


Descriptor = Union[Remote, Local]


def descriptor(value: Any) -> Descriptor:
    """
    Classify a configured endpoint value: a URL string is remote, a class
    is a local handler type.
    """
    if isinstance(value, (Remote, Local)):
        return value
    if isinstance(value, str):
        return Remote(value)
    if isinstance(value, type):
        return Local(value)
    raise TypeError('endpoint must be a URL or a handler class, got %r'
                    % (value,))


def _normalize_key(key: str) -> str:
    if not isinstance(key, str):
        raise TypeError('endpoint key must be a string, got %r' % (key,))
    normalized = key.strip('/')
    if not normalized:
        raise ValueError('endpoint key must not be empty')
    return normalized


class EndpointRegistry(Mapping):
    """
    Read-only mapping of endpoint key to descriptor, built once at startup.

    Keys are path-like (``"orders/sub"``); leading and trailing slashes are
    ignored.
    """
    __slots__ = ('_endpoints',)

    def __init__(self, endpoints: Optional[Mapping]=None, **kwargs):
        self._endpoints = {}  # type: Dict[str, Descriptor]
        merged = dict(endpoints or {}, **kwargs)
        for key, value in merged.items():
            key = _normalize_key(key)
            if key in self._endpoints:
                raise ValueError('duplicate endpoint key: ' + key)
            self._endpoints[key] = descriptor(value)

    def __getitem__(self, key: str) -> Descriptor:
        if isinstance(key, str):
            key = key.strip('/')
        return self._endpoints[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __repr__(self):
        return '<EndpointRegistry %r>' % (self._endpoints,)

    def match(self, path: str) -> Optional[str]:
        """
        Longest-prefix lookup: try the whole ``/``-separated path, then drop
        trailing segments one at a time.

        :param path: path relative to the mount prefix, e.g. ``a/b/c``
        :return: the matching key or None
        """
        segments = path.strip('/').split('/')
        while segments:
            candidate = '/'.join(segments)
            if candidate in self._endpoints:
                return candidate
            segments.pop()
        return None


class InstanceCache:
    """
    One handler instance per endpoint key, created on first use and kept
    for the life of the process.

    ``get_or_create`` never suspends, so on a single event loop the
    check-and-set cannot interleave with another task. Handler
    constructors must therefore stay synchronous.
    """
    __slots__ = ('_instances',)

    def __init__(self):
        self._instances = {}  # type: Dict[str, Any]

    def get_or_create(self, key: str, factory: type, **kwargs) -> Any:
        try:
            return self._instances[key]
        except KeyError:
            instance = self._instances[key] = factory(**kwargs)
            return instance

    def __contains__(self, key: str) -> bool:
        return key in self._instances

    def __len__(self) -> int:
        return len(self._instances)
