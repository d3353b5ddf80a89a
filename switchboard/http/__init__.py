from .dispatcher import HttpDispatcher, ServerOptions
from .resolver import AbstractEndpointResolver, PrefixResolver


__all__ = ('HttpDispatcher', 'ServerOptions', 'PrefixResolver',
           'AbstractEndpointResolver')
