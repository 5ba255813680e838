## protocol.py
# IRC protocol constants, errors and helpers shared by the codec, taxonomy and client.
import re

DEFAULT_ENCODING = 'utf-8'
FALLBACK_ENCODING = 'iso-8859-1'

DEFAULT_PORT = 6667
DEFAULT_TLS_PORT = 6697


## Errors.

class Error(Exception):
    """ Base class for all ircmill errors. """
    pass


class ProtocolViolation(Error):
    """ An error that occurred while parsing or constructing an IRC message that violates the IRC protocol. """
    def __init__(self, msg, message=None):
        super().__init__(msg)
        self.irc_message = message


class NoMatch(ProtocolViolation):
    """ The line does not follow the IRC message grammar. """
    pass


class NoCommand(ProtocolViolation):
    """ The line has no command token. """
    pass


class Invalid(ProtocolViolation):
    """ A command token, parameter or parameter count is malformed. """
    pass


class PromotionError(ProtocolViolation):
    """ A known command lacks a parameter its typed form requires. """
    pass


class OrderingViolation(ProtocolViolation):
    """ A numeric reply arrived out of the order the protocol prescribes. """
    pass


## Limits.

MESSAGE_LENGTH_LIMIT = 512
TAGS_LENGTH_LIMIT = 8191


## Message parsing.

LINE_SEPARATOR = '\r\n'
MINIMAL_LINE_SEPARATOR = '\n'

FORBIDDEN_CHARACTERS = { '\r', '\n', '\0' }
ARGUMENT_SEPARATOR = ' '
TRAILING_PREFIX = ':'
SOURCE_PREFIX = ':'
USER_SEPARATOR = '!'
HOST_SEPARATOR = '@'

TAG_INDICATOR = '@'
TAG_SEPARATOR = ';'
TAG_VALUE_SEPARATOR = '='

TEXT_COMMAND_PATTERN = re.compile('^[A-Z]+$')
NUMERIC_COMMAND_PATTERN = re.compile('^[0-9]{3}$')
NUMERIC_MAX = 999

# Wildcard target servers use before the client has a nickname.
WILDCARD_TARGET = '*'


## Case mapping.

CASE_MAPPINGS = { 'ascii', 'rfc1459', 'strict-rfc1459' }
DEFAULT_CASE_MAPPING = 'rfc1459'


class Record:
    """
    Small value object base.
    Subclasses list their attribute names in FIELDS; equality and representation are derived from them.
    """
    FIELDS = ()

    def _values(self):
        return tuple(getattr(self, field) for field in self.FIELDS)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._values() == other._values()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __repr__(self):
        return '{cls}({fields})'.format(
            cls=self.__class__.__name__,
            fields=', '.join('{}={!r}'.format(field, getattr(self, field)) for field in self.FIELDS))
