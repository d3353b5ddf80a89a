import asyncio
import contextlib
import importlib
import logging
import multiprocessing
import time
from signal import SIGINT, SIGTERM, signal

import click
import uvloop

from switchboard import log as switchboard_log
from switchboard.client import ApiClient
from switchboard.http import HttpDispatcher, ServerOptions
from switchboard.protocol import SwitchboardProtocol
from switchboard.registry import EndpointRegistry

log = logging.getLogger('switchboard')


def load_endpoints(target: str):
    """
    Import the endpoint mapping named by ``module:attribute``.
    """
    module_name, _, attr = target.partition(':')
    module = importlib.import_module(module_name)
    endpoints = getattr(module, attr or 'ENDPOINTS')
    if callable(endpoints):
        endpoints = endpoints()
    return EndpointRegistry(endpoints)


def serve(target: str, host: str='0.0.0.0', port: int=8080, *,
          options: ServerOptions=ServerOptions(), reuse_port=False,
          log_level=None):
    switchboard_log.configure(log_level)
    registry = load_endpoints(target)

    loop = uvloop.new_event_loop()
    asyncio.set_event_loop(loop)

    api_client = ApiClient(registry,
                           instance_config=options.instance_config)
    dispatcher = HttpDispatcher(registry, api_client=api_client,
                                options=options)

    def proto_factory():
        return SwitchboardProtocol(loop, dispatcher=dispatcher)

    srv_coro = loop.create_server(proto_factory, host, port,
                                  reuse_port=reuse_port)
    srv = loop.run_until_complete(srv_coro)
    log.info('listening on %s, %d endpoints under %s',
             srv.sockets[0].getsockname(), len(registry),
             options.mount_prefix)
    loop.add_signal_handler(SIGINT, loop.stop)
    loop.add_signal_handler(SIGTERM, loop.stop)

    try:
        loop.run_forever()
    except KeyboardInterrupt:
        pass
    finally:
        srv.close()
        loop.run_until_complete(srv.wait_closed())
        loop.run_until_complete(api_client.close())
        loop.close()


def serve_many(target: str, workers=1, **kwargs):
    workers = min(workers, multiprocessing.cpu_count())
    event = multiprocessing.Event()
    signal(SIGINT, lambda *_: event.set())
    signal(SIGTERM, lambda *_: event.set())

    processes = []
    kwargs = dict(kwargs, reuse_port=True)
    for _ in range(workers):
        process = multiprocessing.Process(target=serve, args=(target,),
                                          kwargs=kwargs, daemon=True)
        process.start()
        log.info('started subprocess %s (%d)', process.name, process.pid)
        processes.append(process)

    with contextlib.suppress(Exception):
        while not event.is_set():
            time.sleep(0.5)

    for process in processes:
        process.terminate()
    for process in processes:
        process.join()


@click.command()
@click.argument('endpoints')
@click.option('--host', envvar='SWITCHBOARD_HOST', default='0.0.0.0',
              show_default=True)
@click.option('--port', envvar='SWITCHBOARD_PORT', type=int, default=8080,
              show_default=True)
@click.option('--workers', type=click.IntRange(min=1), default=1,
              show_default=True)
@click.option('--mount', default='/api/', show_default=True,
              help='Path prefix endpoints are served under.')
@click.option('--raw-body', is_flag=True,
              help='Pass the raw request body as _body.')
@click.option('--request-id', is_flag=True,
              help='Pass X-Request-ID as _request_id.')
@click.option('--header', 'headers', multiple=True,
              help='Header copied into params, repeatable.')
@click.option('--log-level', envvar='LOG_LEVEL', default=None,
              help='Defaults to $LOG_LEVEL, then info.')
def main(endpoints, host, port, workers, mount, raw_body, request_id,
         headers, log_level):
    """
    Serve the endpoint mapping ENDPOINTS, given as module:attribute.
    """
    options = ServerOptions(mount_prefix=mount,
                            use_raw_body=raw_body,
                            include_request_id=request_id,
                            header_params=tuple(headers))
    kwargs = dict(options=options, log_level=log_level)
    if workers > 1:
        switchboard_log.configure(log_level)
        serve_many(endpoints, workers, host=host, port=port, **kwargs)
    else:
        serve(endpoints, host, port, **kwargs)


if __name__ == '__main__':
    main()
