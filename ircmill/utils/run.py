## run.py
# Connect and log what happens.
import asyncio
import logging

from ircmill import events
from . import _args

logger = logging.getLogger('ircmill.run')


class LoggingHandler(events.EventHandler):
    """ Log semantic events as they arrive. """

    def on_event(self, context, event):
        if isinstance(event, events.StatusChange):
            logger.info('Status: %s', context.status.value)
        elif isinstance(event, events.Motd):
            logger.info('Message of the day:\n%s', context.motd.text)
        elif isinstance(event, (events.WelcomeMsg, events.Notice, events.ErrorMsg)):
            logger.info('%s: %s', event.__class__.__name__, event.text)
        elif isinstance(event, events.ProtocolError):
            logger.warning('Protocol error: %s', event.error)


async def _main():
    client, connect = _args.client_from_args('ircmill', description='ircmill IRC library.')
    client.add_handler(LoggingHandler())
    await connect()
    await client.wait_closed()


def main():
    asyncio.run(_main())


if __name__ == '__main__':
    main()
