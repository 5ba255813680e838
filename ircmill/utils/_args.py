## _args.py
# Common argument parsing code.
import argparse
import functools
import logging
import ircmill
from ircmill import protocol


def argument_parser(name, description, default_nick='Bot'):
    """ Build the command line parser shared by the ircmill scripts. """
    parser = argparse.ArgumentParser(name, description=description, add_help=False,
        epilog='This program is part of {package}.'.format(package=ircmill.__name__))

    meta = parser.add_argument_group('Meta')
    meta.add_argument('-h', '--help', action='help', help='What you are reading right now.')
    meta.add_argument('-v', '--version', action='version', version='{package}/%(prog)s {ver}'.format(package=ircmill.__name__, ver=ircmill.__version__), help='Dump version number.')
    meta.add_argument('-V', '--verbose', help='Be verbose in warnings and errors.', action='store_true', default=False)
    meta.add_argument('-d', '--debug', help='Show debug output.', action='store_true', default=False)

    conn = parser.add_argument_group('Connection')
    conn.add_argument('server', help='The server to connect to.', metavar='SERVER')
    conn.add_argument('-p', '--port', help='The port to use. (default: 6667, 6697 (TLS))', type=int)
    conn.add_argument('-P', '--password', help='Server password.', metavar='PASS')
    conn.add_argument('--tls', help='Use TLS. (default: no)', action='store_true', default=False)
    conn.add_argument('--verify-tls', help='Verify TLS certificate sent by server. (default: no)', action='store_true', default=False)
    conn.add_argument('-e', '--encoding', help='Connection encoding. (default: UTF-8)', default=protocol.DEFAULT_ENCODING, metavar='ENCODING')

    init = parser.add_argument_group('Initialization')
    init.add_argument('-n', '--nickname', help='Nickname. (default: {})'.format(default_nick), default=default_nick, metavar='NICK')
    init.add_argument('-u', '--username', help='Username. (default: derived from nickname)', metavar='USER')
    init.add_argument('-r', '--realname', help='Realname (GECOS). (default: derived from nickname)', metavar='REAL')

    return parser


def client_from_args(name, description, default_nick='Bot', cls=ircmill.Client, argv=None):
    """ Parse command line arguments, configure logging and create a client. Returns the client and its connect coroutine function. """
    args = argument_parser(name, description, default_nick).parse_args(argv)

    # Set log level.
    if args.debug:
        log_level = logging.DEBUG
    elif args.verbose:
        log_level = logging.INFO
    else:
        log_level = logging.ERROR

    logging.basicConfig(level=log_level)

    # Setup client and connect.
    client = cls(nickname=args.nickname, username=args.username, realname=args.realname,
        password=args.password, encoding=args.encoding)

    connect = functools.partial(client.connect,
        hostname=args.server, port=args.port, tls=args.tls, tls_verify=args.verify_tls
    )

    return client, connect
