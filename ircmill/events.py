## events.py
# Events delivered to registered event handlers.
from .protocol import Record

__all__ = [
    'Event', 'RawMessage', 'StatusChange', 'WelcomeMsg', 'ErrorMsg', 'Notice', 'Motd',
    'UnhandledMessage', 'ProtocolError', 'EventHandler'
]


class Event(Record):
    """ Base class for events. """
    pass


class RawMessage(Event):
    """ Every successfully parsed message, delivered before any event derived from it. """
    FIELDS = ('message',)

    def __init__(self, message):
        self.message = message


class StatusChange(Event):
    """ The connection status changed. The new status is in the accompanying context. """
    pass


class WelcomeMsg(Event):
    """ Informational text sent by the server during registration. """
    FIELDS = ('text',)

    def __init__(self, text):
        self.text = text


class ErrorMsg(Event):
    """ The server sent an ERROR. """
    FIELDS = ('text',)

    def __init__(self, text):
        self.text = text


class Notice(Event):
    """ A notice addressed to us. """
    FIELDS = ('text',)

    def __init__(self, text):
        self.text = text


class Motd(Event):
    """ The message of the day is complete. The text is in the accompanying context. """
    pass


class UnhandledMessage(Event):
    FIELDS = ('message',)

    def __init__(self, message):
        self.message = message


class ProtocolError(Event):
    """ A line could not be parsed or promoted, or a reply arrived out of order. Processing continues. """
    FIELDS = ('error',)

    def __init__(self, error):
        self.error = error


class EventHandler:
    """
    Optional base class for event handlers.
    Any object with an on_event(context, event) method, either a plain function or a coroutine function,
    can be registered with a client.
    """

    def on_event(self, context, event):
        pass
