## client.py
# IRC client: connection registration, the read loop and event dispatch.
import asyncio
import inspect
import logging

from . import commands, connection, events, parsing, protocol
from .models import ConnectionStatus
from .protocol import Error, ProtocolViolation, OrderingViolation
from .state import ConnectionState

__all__ = ['Error', 'NotConnected', 'Client', 'ClientBuilder']


class NotConnected(Error):
    def __init__(self):
        super().__init__('Not connected.')


class Client:
    """
    IRC client.
    After connecting it registers, then runs a read loop that parses every line, keeps the connection state up
    to date, answers keepalives and delivers events to the registered event handlers in registration order.

    Event handlers are called sequentially from the read loop: a handler that does not return stalls all
    further processing, keepalive replies included.
    """
    READ_TIMEOUT = None
    DEFAULT_QUIT_MESSAGE = 'Quitting'

    def __init__(self, nickname, username=None, realname=None, password=None, handlers=(),
                 encoding=protocol.DEFAULT_ENCODING, **kwargs):
        """ Create a client. """
        self.nickname = nickname
        self.username = username or nickname.lower()
        self.realname = realname or nickname
        self.password = password
        self.encoding = encoding
        self.handlers = list(handlers)

        self.state = ConnectionState()
        self.logger = logging.getLogger(__name__)
        self._reset_connection_attributes()

        if kwargs:
            self.logger.warning('Unused arguments: %s', ', '.join(kwargs.keys()))

    def _reset_connection_attributes(self):
        """ Reset connection attributes. """
        self.connection = None
        self._connect_options = {}
        self._read_task = None

    @classmethod
    def builder(cls, hostname, port, nickname, username=None, realname=None, **kwargs):
        """ Return a ClientBuilder for this client class. """
        return ClientBuilder(hostname, port, nickname, username=username, realname=realname, cls=cls, **kwargs)

    def add_handler(self, handler):
        """ Register an event handler. It will receive events after all previously registered handlers. """
        self.handlers.append(handler)

    ## Connection.

    def run(self, *args, **kwargs):
        """ Connect and handle messages until the connection ends. """
        async def runner():
            await self.connect(*args, **kwargs)
            await self.wait_closed()

        asyncio.run(runner())

    async def connect(self, hostname=None, port=None, tls=False, tls_verify=True, source_address=None):
        """ Connect to IRC server and register. """
        if not hostname:
            if not self._connect_options:
                raise ValueError('Have to specify hostname if not reconnecting.')
            options = dict(self._connect_options)
            if port:
                options['port'] = port
        else:
            if not port:
                port = protocol.DEFAULT_TLS_PORT if tls else protocol.DEFAULT_PORT
            options = dict(hostname=hostname, port=port, tls=tls, tls_verify=tls_verify,
                           source_address=source_address)

        # Disconnect from current connection.
        if self.connected:
            await self.disconnect(expected=True)

        self.state.reset()
        self._connect_options = options
        await self._connect(**options)

        # Set logger name.
        if self.server_tag:
            self.logger = logging.getLogger(self.__class__.__name__ + ':' + self.server_tag)

        await self._dispatch(self.state.snapshot(), [events.StatusChange()])

        # Registration goes out before the read loop starts consuming replies.
        try:
            await self._register()
        except (ConnectionError, OSError):
            await self.disconnect(expected=False)
            raise

        self._read_task = asyncio.get_running_loop().create_task(self.handle_forever())
        await self.on_connect()

    async def _connect(self, hostname, port, tls=False, tls_verify=True, source_address=None):
        """ Connect to IRC host. """
        self.connection = connection.Connection(hostname, port, tls=tls, tls_verify=tls_verify,
                                                source_address=source_address)
        await self.connection.connect()

    async def _register(self):
        """ Perform IRC connection registration. """
        # Password first.
        if self.password:
            await self.send(commands.Pass(self.password))

        # Then nickname...
        await self.send(commands.Nick(self.nickname))
        # And now for the rest of the user information.
        await self.send(commands.User(self.username, self.realname))

    async def disconnect(self, expected=True):
        """ Disconnect from server. """
        if self.connected:
            await self._disconnect(expected)

    async def _disconnect(self, expected):
        # Shutdown connection.
        await self.connection.disconnect()

        # Stop the read loop, unless that is what is disconnecting us.
        task, self._read_task = self._read_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

        if self.state.set_status(ConnectionStatus.DISCONNECTED):
            await self._dispatch(self.state.snapshot(), [events.StatusChange()])

        # Callback.
        await self.on_disconnect(expected)

    async def wait_closed(self):
        """ Wait until the read loop has ended. Re-raises the exception the read loop failed with, if any. """
        task = self._read_task
        if task is None:
            return

        await asyncio.wait([task])
        if not task.cancelled() and task.exception() is not None:
            raise task.exception()

    ## IRC attributes.

    @property
    def connected(self):
        """ Whether or not we are connected. """
        return self.connection is not None and self.connection.connected

    @property
    def status(self):
        return self.state.status

    @property
    def motd(self):
        return self.state.motd

    @property
    def server(self):
        return self.state.server

    @property
    def server_tag(self):
        if self.connected and self.connection.hostname:
            network = self.state.server.isupport.get('NETWORK')
            if isinstance(network, str):
                tag = network.lower()
            else:
                tag = self.connection.hostname.lower()

                # Remove hostname prefix.
                if tag.startswith('irc.'):
                    tag = tag[4:]

                # Check if host is either an FQDN or IPv4.
                if '.' in tag:
                    # Attempt to cut off TLD.
                    host, suffix = tag.rsplit('.', 1)

                    # Make sure we aren't cutting off the last octet of an IPv4.
                    try:
                        int(suffix)
                    except ValueError:
                        tag = host

            return tag
        else:
            return None

    ## IRC helpers.

    def is_same_nick(self, left, right):
        """ Check if given nicknames are equal under the server's case mapping. """
        return parsing.normalize(left, self.state.case_mapping) == parsing.normalize(right, self.state.case_mapping)

    def is_own_target(self, target):
        """ Whether a reply or notice addressed to target is meant for us. """
        return target == protocol.WILDCARD_TARGET or self.is_same_nick(self.nickname, target)

    ## IRC API.

    async def send(self, command, tags=None, prefix=None):
        """
        Send a command, or a complete Message.
        Raises Invalid, without sending anything, if the message can not be represented on the wire unambiguously.
        """
        if isinstance(command, parsing.Message):
            message = command
        else:
            message = parsing.Message(command, tags=tags, prefix=prefix)
        await self._send(message.construct())

    async def rawmsg(self, command, *params):
        """ Send raw message. The last parameter is sent as trailing parameter if it needs to be. """
        if isinstance(command, str):
            command = command.upper()
        await self.send(commands.Generic(command, params))

    async def raw(self, message):
        """ Send raw command. """
        await self._send(message)

    async def quit(self, message=None):
        """ Quit network. """
        if message is None:
            message = self.DEFAULT_QUIT_MESSAGE

        await self.rawmsg('QUIT', message)
        await self.disconnect(expected=True)

    async def _send(self, input):
        if not self.connected:
            raise NotConnected()
        if isinstance(input, str):
            input = input.encode(self.encoding)

        self.logger.debug('>> %s', input.decode(self.encoding).rstrip(protocol.LINE_SEPARATOR))
        await self.connection.send(input)

    ## Overloadable callbacks.

    async def on_connect(self):
        """ Callback called when the client has connected and sent its registration. """
        pass

    async def on_disconnect(self, expected):
        """ Callback called when the connection has ended. """
        if not expected:
            self.logger.error('Unexpected disconnect.')

    def on_event(self, context, event):
        """ Callback called for every event, before any registered handler. """
        pass

    ## Message dispatch.

    async def handle_forever(self):
        """ Handle data until the connection ends. """
        try:
            while self.connected:
                try:
                    data = await self.connection.recv(timeout=self.READ_TIMEOUT)
                except asyncio.TimeoutError:
                    self.logger.error('Receive timeout reached (%s seconds).', self.READ_TIMEOUT)
                    data = None
                except ProtocolViolation as e:
                    # Unreadable line: report it and carry on with the next one.
                    self.logger.warning('Encountered strictly invalid IRC message from server: %s', e)
                    await self._dispatch(self.state.snapshot(), [events.ProtocolError(e)])
                    continue
                except (ConnectionError, OSError) as e:
                    await self.on_data_error(e)
                    break

                if not data:
                    if self.connected:
                        await self.disconnect(expected=False)
                    break

                try:
                    await self.on_data(data)
                except (ConnectionError, OSError, NotConnected) as e:
                    await self.on_data_error(e)
                    break
        except Exception:
            self.logger.exception('Read loop failed.')
            raise
        finally:
            # Nothing reads from the connection any more.
            if self.connected:
                await self.disconnect(expected=False)

    async def on_data(self, data):
        """ Handle a single received line. """
        try:
            message = parsing.Message.parse(data, encoding=self.encoding, promote=False)
        except ProtocolViolation as e:
            self.logger.warning('Encountered strictly invalid IRC message from server: %s', e)
            await self._dispatch(self.state.snapshot(), [events.ProtocolError(e)])
            return

        limit = protocol.MESSAGE_LENGTH_LIMIT
        if message.tags:
            limit += protocol.TAGS_LENGTH_LIMIT
        if len(message._raw) + len(protocol.LINE_SEPARATOR) > limit:
            self.logger.warning('Received message exceeds the length limit (%d): %s', limit, message._raw)

        try:
            message = message.promote()
        except ProtocolViolation as e:
            # Known command with parameters we can't make sense of: deliver it as-is.
            self.logger.warning('Failed to interpret %s message: %s', message.command.name, e)
            self.logger.debug('<< %s', message._raw)
            await self._dispatch(self.state.snapshot(), [
                events.RawMessage(message), events.ProtocolError(e), events.UnhandledMessage(message)
            ])
            return

        await self.on_raw(message)

    async def on_data_error(self, exception):
        """ Handle error. """
        self.logger.error('Encountered error on socket.',
                          exc_info=(type(exception), exception, exception.__traceback__))
        await self.disconnect(expected=False)

    async def on_raw(self, message):
        """ Handle a single parsed message. """
        self.logger.debug('<< %s', message._raw)

        # Invoke dispatcher, if we have one.
        method = 'on_raw_' + message.command.name.lower()
        handler = getattr(self, method, self.on_unknown)
        try:
            derived = await handler(message)
        except OrderingViolation as e:
            self.logger.warning('Received %s out of order: %s', message.command.name, e)
            derived = [events.ProtocolError(e)]

        # Keepalives are answered before anyone else gets to see the message.
        if isinstance(message.command, commands.Ping):
            await self.send(commands.Pong(message.command.token))

        await self._dispatch(self.state.snapshot(), [events.RawMessage(message)] + derived)

    async def _dispatch(self, context, raised):
        """ Deliver events, in order, to ourselves and then to every handler in registration order. """
        for event in raised:
            for handler in [self] + self.handlers:
                try:
                    result = handler.on_event(context, event)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    self.logger.exception('Failed to execute %s handler for %s.',
                                          handler.__class__.__name__, event.__class__.__name__)

    async def on_unknown(self, message):
        """ Command without a handler. """
        self.logger.debug('Unhandled command: [%s] %s', message.prefix, message.command)
        return [events.UnhandledMessage(message)]

    ## Command handlers.

    async def on_raw_ping(self, message):
        """ PING command. Answered by on_raw(). """
        return []

    async def on_raw_notice(self, message):
        """ NOTICE command. """
        notice = message.command
        if not self.is_own_target(notice.target):
            return []
        return [events.Notice(notice.text)]

    async def on_raw_error(self, message):
        """ ERROR command. """
        return [events.ErrorMsg(message.command.text)]

    ## Numeric responses.

    async def on_raw_001(self, message):
        """ Welcome message: we're registered. """
        reply = message.command
        if not self.is_own_target(reply.client):
            return []

        result = []
        if self.is_same_nick(self.nickname, reply.client) and self.state.set_status(ConnectionStatus.CONNECTED):
            result.append(events.StatusChange())
        result.append(events.WelcomeMsg(reply.text))
        return result

    async def _welcome_message(self, message):
        """ Informational reply sent on registration. """
        reply = message.command
        if not self.is_own_target(reply.client):
            return []
        return [events.WelcomeMsg(reply.text)]

    on_raw_002 = _welcome_message  # Server host.
    on_raw_003 = _welcome_message  # Server creation time.
    on_raw_251 = _welcome_message  # Amount of users online.
    on_raw_255 = _welcome_message  # Amount of local users and servers.
    on_raw_265 = _welcome_message  # Amount of local users.
    on_raw_266 = _welcome_message  # Amount of global users.

    async def on_raw_004(self, message):
        """ Basic server information. """
        reply = message.command
        if self.is_same_nick(self.nickname, reply.client):
            self.state.update_server_info(reply)
        return []

    async def on_raw_005(self, message):
        """ ISUPPORT indication. """
        reply = message.command
        if not self.is_own_target(reply.client):
            return []

        self.state.update_isupport(reply.tokens)
        text = ', '.join(reply.tokens)
        if reply.text is not None:
            text += ' ' + reply.text
        return [events.WelcomeMsg(text)]

    async def on_raw_252(self, message):
        """ Amount of operators, unknown connections or channels. """
        reply = message.command
        if not self.is_own_target(reply.client):
            return []
        return [events.WelcomeMsg('{} {}'.format(reply.count, reply.text))]

    on_raw_253 = on_raw_252  # Amount of unknown connections.
    on_raw_254 = on_raw_252  # Amount of channels.

    async def on_raw_375(self, message):
        """ Start message of the day. """
        reply = message.command
        if self.is_own_target(reply.client):
            self.state.start_motd(reply.text)
        return []

    async def on_raw_372(self, message):
        """ Append message of the day. """
        reply = message.command
        if self.is_own_target(reply.client):
            self.state.append_motd(reply.text)
        return []

    async def on_raw_376(self, message):
        """ End of message of the day. """
        reply = message.command
        if not self.is_own_target(reply.client):
            return []

        self.state.finish_motd(reply.text)
        return [events.Motd()]

    async def on_raw_396(self, message):
        """ Displayed host changed. """
        reply = message.command
        if not self.is_own_target(reply.client):
            return []
        return [events.WelcomeMsg('{} {}'.format(reply.host, reply.text))]


class ClientBuilder:
    """ Collects client settings and event handlers, then builds and optionally connects a client. """

    def __init__(self, hostname, port, nickname, username=None, realname=None, password=None, cls=Client,
                 tls=False, tls_verify=True, source_address=None, **kwargs):
        if not hostname:
            raise ValueError('Have to specify a hostname.')

        self.cls = cls
        self.hostname = hostname
        self.port = port
        self.nickname = nickname
        self.username = username
        self.realname = realname
        self.password = password
        self.connect_options = dict(tls=tls, tls_verify=tls_verify, source_address=source_address)
        self.options = kwargs
        self.event_handlers = []

    def with_event_handler(self, handler):
        """ Add an event handler. Returns the builder, so calls can be chained. """
        self.event_handlers.append(handler)
        return self

    def build(self):
        """ Create the client. """
        return self.cls(self.nickname, username=self.username, realname=self.realname, password=self.password,
                        handlers=self.event_handlers, **self.options)

    async def connect(self):
        """ Create the client and connect it. """
        client = self.build()
        await client.connect(self.hostname, self.port, **self.connect_options)
        return client
