# Connection state model classes.
import copy
import enum

from .protocol import Record, OrderingViolation

__all__ = ['ConnectionStatus', 'Motd', 'ServerInfo', 'Context']

MOTD_LINE_SEPARATOR = '\n'


class ConnectionStatus(enum.Enum):
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    DISCONNECTED = 'disconnected'


class Motd(Record):
    """
    Message of the day, accumulated from 375/372/376 replies.
    Motd values are immutable: every transition returns a new value.
    """
    EMPTY = 'empty'
    BUILDING = 'building'
    DONE = 'done'

    FIELDS = ('state', 'text')

    def __init__(self, state=EMPTY, text=None):
        self.state = state
        self.text = text

    @property
    def empty(self):
        return self.state == self.EMPTY

    @property
    def building(self):
        return self.state == self.BUILDING

    @property
    def done(self):
        return self.state == self.DONE

    def start(self, line):
        """ Start a new MOTD with its first line. """
        if not self.empty:
            raise OrderingViolation('MOTD already started.', message=line)
        return Motd(self.BUILDING, line + MOTD_LINE_SEPARATOR)

    def append(self, line):
        """ Add a body line to the MOTD being built. """
        if not self.building:
            raise OrderingViolation('MOTD not started.', message=line)
        return Motd(self.BUILDING, self.text + line + MOTD_LINE_SEPARATOR)

    def finish(self, line):
        """ Add the final line and complete the MOTD. """
        if not self.building:
            raise OrderingViolation('MOTD not started.', message=line)
        return Motd(self.DONE, self.text + line)


class ServerInfo(Record):
    FIELDS = ('name', 'version', 'user_modes', 'channel_modes', 'channel_mode_params', 'isupport')

    def __init__(self, name=None, version=None, user_modes=None, channel_modes=None, channel_mode_params=None,
                 isupport=None):
        self.name = name
        self.version = version
        self.user_modes = user_modes
        self.channel_modes = channel_modes
        self.channel_mode_params = channel_mode_params
        self.isupport = dict(isupport or {})

    def copy(self):
        return copy.deepcopy(self)


class Context(Record):
    """ Snapshot of the connection state at the moment an event was raised. """
    FIELDS = ('status', 'motd', 'server')

    def __init__(self, status, motd, server=None):
        self._status = status
        self._motd = motd
        self._server = server if server is not None else ServerInfo()

    @property
    def status(self):
        return self._status

    @property
    def motd(self):
        return self._motd

    @property
    def server(self):
        return self._server
