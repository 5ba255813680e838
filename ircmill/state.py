## state.py
# Per-connection state derived from the message stream.
import threading

from . import protocol
from .models import ConnectionStatus, Context, Motd, ServerInfo

__all__ = ['ConnectionState']

FEATURE_DISABLED_PREFIX = '-'
FEATURE_VALUE_SEPARATOR = '='


class ConnectionState:
    """
    Connection status, message of the day and server information of a single connection.
    Only the client's read loop mutates it; every read-modify-write happens under a lock that is never
    held across an await, so snapshots can be taken from any thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self):
        """ Reset to the state of a fresh connection. """
        with self._lock:
            self._status = ConnectionStatus.CONNECTING
            self._motd = Motd()
            self._server = ServerInfo()
            self.case_mapping = protocol.DEFAULT_CASE_MAPPING

    def snapshot(self):
        """ Return an immutable Context of the current state. """
        with self._lock:
            return Context(self._status, self._motd, self._server.copy())

    @property
    def status(self):
        return self._status

    @property
    def motd(self):
        return self._motd

    @property
    def server(self):
        return self._server

    ## Status.

    def set_status(self, status):
        """ Set connection status. Returns whether it changed. """
        with self._lock:
            changed = self._status != status
            self._status = status
        return changed

    ## MOTD.

    def start_motd(self, line):
        with self._lock:
            self._motd = self._motd.start(line)

    def append_motd(self, line):
        with self._lock:
            self._motd = self._motd.append(line)

    def finish_motd(self, line):
        with self._lock:
            self._motd = self._motd.finish(line)

    ## Server information.

    def update_server_info(self, myinfo):
        """ Store server name, version and modes from a 004 reply. """
        with self._lock:
            self._server.name = myinfo.server_name
            self._server.version = myinfo.server_version
            self._server.user_modes = myinfo.user_modes
            self._server.channel_modes = myinfo.channel_modes
            if myinfo.channel_mode_params is not None:
                self._server.channel_mode_params = myinfo.channel_mode_params

    def update_isupport(self, tokens):
        """ Merge 005 feature tokens into the server information. """
        with self._lock:
            for token in tokens:
                if token.startswith(FEATURE_DISABLED_PREFIX):
                    self._server.isupport.pop(token[len(FEATURE_DISABLED_PREFIX):].upper(), None)
                    continue

                if FEATURE_VALUE_SEPARATOR in token:
                    feature, value = token.split(FEATURE_VALUE_SEPARATOR, 1)
                else:
                    feature, value = token, True
                self._server.isupport[feature.upper()] = value

            case_mapping = self._server.isupport.get('CASEMAPPING')
            if case_mapping in protocol.CASE_MAPPINGS:
                self.case_mapping = case_mapping
