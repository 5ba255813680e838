#!/usr/bin/env python3
## irccat.py
# Simple irccat implementation, using ircmill.
import sys
import logging
import asyncio

from .. import Client, events
from . import _args


class IRCCat(Client):
    """ irccat. Takes raw messages on stdin, dumps raw messages to stdout. Life has never been easier. """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.async_stdin = None

    async def process_stdin(self):
        """ Yes. """
        loop = asyncio.get_running_loop()

        self.async_stdin = asyncio.StreamReader()
        reader_protocol = asyncio.StreamReaderProtocol(self.async_stdin)
        await loop.connect_read_pipe(lambda: reader_protocol, sys.stdin)

        while self.connected:
            line = await self.async_stdin.readline()
            if not line:
                break
            await self.raw(line.decode(self.encoding).rstrip('\r\n') + '\r\n')

        if self.connected:
            await self.quit('EOF')

    def on_event(self, context, event):
        if isinstance(event, events.RawMessage):
            print(event.message._raw)
        elif isinstance(event, events.ProtocolError):
            print('!! {}'.format(event.error), file=sys.stderr)


async def _main():
    # Create client.
    irccat, connect = _args.client_from_args('irccat', default_nick='irccat',
                                             description='Process raw IRC messages from stdin, dump received IRC messages to stdout.',
                                             cls=IRCCat)
    await connect()
    await irccat.process_stdin()


def main():
    # Setup logging.
    logging.basicConfig(format='!! %(levelname)s: %(message)s')
    asyncio.run(_main())


if __name__ == '__main__':
    main()
