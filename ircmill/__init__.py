from . import protocol, parsing, commands, models, state, events, connection, client

from .protocol import Error, ProtocolViolation, NoMatch, NoCommand, Invalid, PromotionError, OrderingViolation
from .parsing import Message
from .models import ConnectionStatus, Motd, ServerInfo, Context
from .events import EventHandler
from .client import NotConnected, Client, ClientBuilder

__name__ = 'ircmill'
__version__ = '0.3.0'
__version_info__ = (0, 3, 0)
__license__ = 'BSD'
