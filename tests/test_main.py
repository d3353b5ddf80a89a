"""Tests for the launcher: endpoint loading, the command line, log levels."""
import logging
import sys
import types

import pytest
from click.testing import CliRunner

from switchboard import __main__ as launcher
from switchboard import log
from switchboard.__main__ import load_endpoints, main
from switchboard.http import ServerOptions
from switchboard.registry import Local, Remote

from .helpers import Orders


@pytest.fixture
def endpoints_module(monkeypatch):
    module = types.ModuleType('fake_endpoints')
    module.ENDPOINTS = {'orders': Orders, 'users': 'http://users/api'}
    module.build = lambda: {'orders': Orders}
    monkeypatch.setitem(sys.modules, 'fake_endpoints', module)
    return module


@pytest.fixture
def served(monkeypatch):
    """Record serve/serve_many calls instead of binding a port."""
    calls = []
    monkeypatch.setattr(launcher, 'serve',
                        lambda *args, **kwargs: calls.append(
                            ('serve', args, kwargs)))
    monkeypatch.setattr(launcher, 'serve_many',
                        lambda *args, **kwargs: calls.append(
                            ('serve_many', args, kwargs)))
    monkeypatch.delenv('SWITCHBOARD_HOST', raising=False)
    monkeypatch.delenv('SWITCHBOARD_PORT', raising=False)
    monkeypatch.delenv('LOG_LEVEL', raising=False)
    return calls


def test_load_endpoints_default_attribute(endpoints_module):
    registry = load_endpoints('fake_endpoints')

    assert registry['orders'] == Local(Orders)
    assert registry['users'] == Remote('http://users/api')


def test_load_endpoints_from_factory(endpoints_module):
    assert list(load_endpoints('fake_endpoints:build')) == ['orders']


def test_cli_defaults(served):
    result = CliRunner().invoke(main, ['app:ENDPOINTS'])

    assert result.exit_code == 0, result.output
    assert served == [('serve', ('app:ENDPOINTS', '0.0.0.0', 8080), {
        'options': ServerOptions(),
        'log_level': None,
    })]


def test_cli_options(served):
    result = CliRunner().invoke(main, [
        'app:ENDPOINTS', '--port', '9000', '--mount', '/v1/', '--raw-body',
        '--request-id', '--header', 'X-Tenant', '--header', 'X-Region',
        '--log-level', 'debug'])

    assert result.exit_code == 0, result.output
    (name, args, kwargs), = served
    assert name == 'serve'
    assert args == ('app:ENDPOINTS', '0.0.0.0', 9000)
    assert kwargs['options'] == ServerOptions(
        mount_prefix='/v1/', use_raw_body=True, include_request_id=True,
        header_params=('X-Tenant', 'X-Region'))
    assert kwargs['log_level'] == 'debug'


def test_cli_environment_defaults(served):
    env = {'SWITCHBOARD_HOST': '127.0.0.1', 'SWITCHBOARD_PORT': '9100',
           'LOG_LEVEL': 'warn'}

    result = CliRunner().invoke(main, ['app'], env=env)

    assert result.exit_code == 0, result.output
    (name, args, kwargs), = served
    assert args == ('app', '127.0.0.1', 9100)
    assert kwargs['log_level'] == 'warn'


def test_cli_many_workers(served):
    result = CliRunner().invoke(main, ['app', '--workers', '3'])

    assert result.exit_code == 0, result.output
    (name, args, kwargs), = served
    assert name == 'serve_many'
    assert args == ('app', 3)
    assert kwargs['host'] == '0.0.0.0'
    assert kwargs['port'] == 8080


def test_cli_requires_endpoints(served):
    result = CliRunner().invoke(main, [])

    assert result.exit_code != 0
    assert served == []


@pytest.mark.parametrize('given, expected', [
    ('debug', 'DEBUG'),
    ('warn', 'WARNING'),
    ('crit', 'CRITICAL'),
    (' Info ', 'INFO'),
])
def test_level_name(given, expected):
    assert log.level_name(given) == expected


def test_level_name_from_environment(monkeypatch):
    monkeypatch.setenv('LOG_LEVEL', 'error')
    assert log.level_name() == 'ERROR'

    monkeypatch.delenv('LOG_LEVEL')
    assert log.level_name() == 'INFO'
    assert logging.getLevelName(log.level_name()) == logging.INFO
