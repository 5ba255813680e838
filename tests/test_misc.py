"""
test_misc.py ~ Testing of Misc. Functions

Designed for those simple functions that don't need their own dedicated test files
But we want to hit them anyways
"""
import asyncio
import logging
import pytest

import ircmill
from ircmill import events
from ircmill.models import ConnectionStatus, Context, Motd
from ircmill.utils import _args
from ircmill.utils.run import LoggingHandler
from ircmill.connection import Connection
from ircmill.events import EventHandler
from ircmill.protocol import Record
from .mocks import Mock


def test_error_hierarchy():
    for error in (ircmill.NoMatch, ircmill.NoCommand, ircmill.Invalid, ircmill.PromotionError,
                  ircmill.OrderingViolation):
        assert issubclass(error, ircmill.ProtocolViolation)
    assert issubclass(ircmill.ProtocolViolation, ircmill.Error)
    assert issubclass(ircmill.NotConnected, ircmill.Error)


def test_record_equality():
    class Point(Record):
        FIELDS = ('x', 'y')

        def __init__(self, x, y):
            self.x = x
            self.y = y

    assert Point(1, 2) == Point(1, 2)
    assert Point(1, 2) != Point(2, 1)
    assert repr(Point(1, 'a')) == "Point(x=1, y='a')"
    with pytest.raises(TypeError):
        hash(Point(1, 2))


def test_event_handler_default():
    assert EventHandler().on_event(None, None) is None


@pytest.mark.asyncio
async def test_connection_not_connected():
    connection = Connection('irc.example.org', 6667)
    assert not connection.connected
    assert await connection.recv() == b''
    with pytest.raises(ConnectionResetError):
        await connection.send(b'PING :x\r\n')
    # Nothing to do.
    await connection.disconnect()


@pytest.mark.asyncio
async def test_connection_recv_line_beyond_buffer():
    connection = Connection('irc.example.org', 6667)
    connection.reader = asyncio.StreamReader(limit=16)
    connection.writer = Mock()
    connection.reader.feed_data(b'NOTICE * :' + b'a' * 32 + b'\r\nPING :after\r\n')

    with pytest.raises(ircmill.NoMatch):
        await connection.recv()
    assert await connection.recv() == b'PING :after\r\n'


@pytest.mark.asyncio
async def test_connection_send_disconnected_while_waiting():
    connection = Connection('irc.example.org', 6667)
    connection.reader = Mock()
    connection.writer = Mock()

    await connection._send_lock.acquire()
    sending = asyncio.ensure_future(connection.send(b'PING :x\r\n'))
    await asyncio.sleep(0)
    connection.reader = connection.writer = None
    connection._send_lock.release()

    with pytest.raises(ConnectionResetError):
        await sending


def test_connection_tls_context_unverified():
    connection = Connection('irc.example.org', 6697, tls=True, tls_verify=False)
    context = connection.create_tls_context()
    assert not context.check_hostname


def test_argument_parser():
    args = _args.argument_parser('test', 'Test.').parse_args(['irc.example.org', '-p', '6697', '--tls', '-n', 'Nick'])
    assert args.server == 'irc.example.org'
    assert args.port == 6697
    assert args.tls
    assert not args.verify_tls
    assert args.nickname == 'Nick'
    assert args.encoding == 'utf-8'


def test_client_from_args():
    client, connect = _args.client_from_args('test', 'Test.', default_nick='Tester',
                                             argv=['irc.example.org', '-u', 'user', '-P', 'secret'])
    assert client.nickname == 'Tester'
    assert client.username == 'user'
    assert client.password == 'secret'
    assert connect.keywords['hostname'] == 'irc.example.org'
    assert connect.keywords['port'] is None


def test_logging_handler(caplog):
    context = Context(ConnectionStatus.CONNECTED, Motd(Motd.DONE, 'hello'))
    with caplog.at_level(logging.INFO, logger='ircmill.run'):
        LoggingHandler().on_event(context, events.StatusChange())
        LoggingHandler().on_event(context, events.Motd())
    assert 'Status: connected' in caplog.text
    assert 'hello' in caplog.text
