import asyncio
import os.path as path
import ssl
import sys

from .protocol import NoMatch

__all__ = ['Connection']

DEFAULT_CA_PATHS = {
    'linux': '/etc/ssl/certs',
    'freebsd': '/etc/ssl/certs'
}


class Connection:
    """
    A TCP connection over the IRC protocol.
    The stream is split into an independent reader and writer so that the read loop and senders never block
    each other; writes are serialized by a lock scoped to a single send.
    """
    CONNECT_TIMEOUT = 10

    def __init__(self, hostname, port, tls=False, tls_verify=True, tls_certificate_file=None,
                 tls_certificate_keyfile=None, source_address=None):
        self.hostname = hostname
        self.port = port
        self.source_address = source_address

        self.tls = tls
        self.tls_context = None
        self.tls_verify = tls_verify
        self.tls_certificate_file = tls_certificate_file
        self.tls_certificate_keyfile = tls_certificate_keyfile

        self.reader = None
        self.writer = None
        self._send_lock = asyncio.Lock()

    async def connect(self):
        """ Connect to target. """
        self.tls_context = None

        if self.tls:
            self.tls_context = self.create_tls_context()

        (self.reader, self.writer) = await asyncio.wait_for(asyncio.open_connection(
            host=self.hostname,
            port=self.port,
            local_addr=self.source_address,
            ssl=self.tls_context
        ), timeout=self.CONNECT_TIMEOUT)

    def create_tls_context(self):
        """ Create the TLS context for our connection. """
        tls_context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

        # Load client certificate.
        if self.tls_certificate_file:
            tls_context.load_cert_chain(self.tls_certificate_file, self.tls_certificate_keyfile)

        if self.tls_verify:
            if sys.platform in DEFAULT_CA_PATHS and path.isdir(DEFAULT_CA_PATHS[sys.platform]):
                tls_context.load_verify_locations(capath=DEFAULT_CA_PATHS[sys.platform])
        else:
            tls_context.check_hostname = False
            tls_context.verify_mode = ssl.CERT_NONE

        return tls_context

    async def disconnect(self):
        """ Disconnect from target. """
        if not self.connected:
            return

        writer = self.writer
        self.reader = None
        self.writer = None

        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            # Already gone.
            pass

    @property
    def connected(self):
        """ Whether this connection is... connected to something. """
        return self.reader is not None and self.writer is not None

    async def send(self, data):
        """ Write data and wait until the transport accepted it. """
        if not self.connected:
            raise ConnectionResetError('Not connected.')

        async with self._send_lock:
            # A disconnect may have happened while we waited for the lock.
            if not self.connected:
                raise ConnectionResetError('Not connected.')
            self.writer.write(data)
            await self.writer.drain()

    async def recv(self, *, timeout=None):
        """
        Read a single line. Returns an empty bytestring when the connection was closed.
        Raises NoMatch for a line longer than the stream buffer; the buffered part of that line is discarded and the
        next call continues with the following line.
        """
        if not self.connected:
            return b''
        try:
            return await asyncio.wait_for(self.reader.readline(), timeout=timeout)
        except ValueError as e:
            raise NoMatch('Received line exceeds the read buffer limit.', message=str(e)) from e
