## commands.py
# Typed IRC commands and their conversion to and from the generic command form.
from . import protocol
from .protocol import Invalid, PromotionError

__all__ = [
    'Command', 'Generic', 'promote', 'demote',
    'Pass', 'Nick', 'User', 'Ping', 'Pong', 'Notice', 'ErrorMsg',
    'RplWelcome', 'RplYourHost', 'RplCreated', 'RplMyInfo', 'RplISupport',
    'RplLUserClient', 'RplLUserOp', 'RplLUserUnknown', 'RplLUserChannels', 'RplLUserMe',
    'RplLocalUsers', 'RplGlobalUsers', 'RplMotd', 'RplMotdStart', 'RplEndOfMotd', 'RplHostHidden'
]


class Command(protocol.Record):
    """
    Abstract command class.
    Typed commands set CODE to their wire command (a string for text commands, an integer for numerics)
    and implement from_generic() and to_generic().
    """
    CODE = None

    @property
    def name(self):
        """ The command token as it appears on the wire. """
        return format_code(self.CODE)

    @classmethod
    def from_generic(cls, generic):
        raise NotImplementedError()

    def to_generic(self):
        raise NotImplementedError()


class Generic(Command):
    """ Any command, represented by its code, middle parameters and optional trailing parameter. """
    FIELDS = ('code', 'params', 'trailing')

    def __init__(self, code, params=(), trailing=None):
        self.code = code
        self.params = list(params)
        self.trailing = trailing

    @property
    def name(self):
        return format_code(self.code)

    @property
    def arguments(self):
        """ All parameters, the trailing one included. """
        if self.trailing is None:
            return list(self.params)
        return self.params + [self.trailing]

    @classmethod
    def from_generic(cls, generic):
        return generic

    def to_generic(self):
        return self


## Conversion helpers.

def format_code(code):
    if isinstance(code, int):
        return str(code).zfill(3)
    return code


def _arguments(generic, minimum, maximum=None):
    """ Return the arguments of a generic command, checking their count. """
    args = generic.arguments
    if len(args) < minimum:
        raise PromotionError('{cmd} requires at least {n} parameters, got {got}.'.format(
            cmd=generic.name, n=minimum, got=len(args)), message=generic)
    if maximum is not None and len(args) > maximum:
        raise Invalid('{cmd} takes at most {n} parameters, got {got}.'.format(
            cmd=generic.name, n=maximum, got=len(args)), message=generic)
    return args


def _number(generic, value):
    if not value.isdigit() or not value.isascii():
        raise Invalid('{cmd}: expected a number, got {!r}.'.format(value, cmd=generic.name), message=generic)
    return int(value)


## Connection control.

class Pass(Command):
    CODE = 'PASS'
    FIELDS = ('password',)

    def __init__(self, password):
        self.password = password

    @classmethod
    def from_generic(cls, generic):
        password, = _arguments(generic, 1, 1)
        return cls(password)

    def to_generic(self):
        return Generic(self.CODE, [self.password])


class Nick(Command):
    CODE = 'NICK'
    FIELDS = ('nickname',)

    def __init__(self, nickname):
        self.nickname = nickname

    @classmethod
    def from_generic(cls, generic):
        nickname, = _arguments(generic, 1, 1)
        return cls(nickname)

    def to_generic(self):
        return Generic(self.CODE, [self.nickname])


class User(Command):
    """
    User registration.
    The registration form is `USER <username> <mode> <unused> :<realname>`. The short form
    `USER <username> :<realname>` is kept as is, with mode and unused set to None.
    """
    CODE = 'USER'
    FIELDS = ('username', 'realname', 'mode', 'unused')

    def __init__(self, username, realname, mode='0', unused='*'):
        if (mode is None) != (unused is None):
            raise Invalid('USER needs both mode and unused, or neither.', message=username)
        self.username = username
        self.realname = realname
        self.mode = mode
        self.unused = unused

    @classmethod
    def from_generic(cls, generic):
        args = _arguments(generic, 2, 4)
        if len(args) == 2:
            return cls(args[0], args[1], mode=None, unused=None)
        if len(args) == 4:
            username, mode, unused, realname = args
            return cls(username, realname, mode=mode, unused=unused)
        raise Invalid('USER takes either 2 or 4 parameters, got 3.', message=generic)

    def to_generic(self):
        if self.mode is None and self.unused is None:
            return Generic(self.CODE, [self.username], self.realname)
        return Generic(self.CODE, [self.username, self.mode, self.unused], self.realname)


class Keepalive(Command):
    """ Keepalive command: `<code> [<server>] :<token>`. """
    FIELDS = ('token', 'server')

    def __init__(self, token, server=None):
        self.token = token
        self.server = server

    @classmethod
    def from_generic(cls, generic):
        args = _arguments(generic, 1, 2)
        if len(args) == 2:
            server, token = args
            return cls(token, server=server)
        return cls(args[0])

    def to_generic(self):
        return Generic(self.CODE, [self.server] if self.server is not None else [], self.token)


class Ping(Keepalive):
    """ Keepalive request. """
    CODE = 'PING'


class Pong(Keepalive):
    """ Keepalive reply. """
    CODE = 'PONG'


## Messaging.

class Notice(Command):
    CODE = 'NOTICE'
    FIELDS = ('target', 'text')

    def __init__(self, target, text):
        self.target = target
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        target, text = _arguments(generic, 2, 2)
        return cls(target, text)

    def to_generic(self):
        return Generic(self.CODE, [self.target], self.text)


class ErrorMsg(Command):
    """ Fatal error sent by the server before it closes the link. """
    CODE = 'ERROR'
    FIELDS = ('text',)

    def __init__(self, text):
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        text, = _arguments(generic, 1, 1)
        return cls(text)

    def to_generic(self):
        return Generic(self.CODE, [], self.text)


## Numeric replies.

class Reply(Command):
    """ A numeric reply of the form `<code> <client> :<text>`. """
    FIELDS = ('client', 'text')

    def __init__(self, client, text):
        self.client = client
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        client, text = _arguments(generic, 2, 2)
        return cls(client, text)

    def to_generic(self):
        return Generic(self.CODE, [self.client], self.text)


class RplWelcome(Reply):
    CODE = 1


class RplYourHost(Reply):
    CODE = 2


class RplCreated(Reply):
    CODE = 3


class RplMyInfo(Command):
    """ Server name, version and supported modes: `004 <client> <server> <version> <umodes> <cmodes> [<cmodes with params>]`. """
    CODE = 4
    FIELDS = ('client', 'server_name', 'server_version', 'user_modes', 'channel_modes', 'channel_mode_params')

    def __init__(self, client, server_name, server_version, user_modes, channel_modes, channel_mode_params=None):
        self.client = client
        self.server_name = server_name
        self.server_version = server_version
        self.user_modes = user_modes
        self.channel_modes = channel_modes
        self.channel_mode_params = channel_mode_params

    @classmethod
    def from_generic(cls, generic):
        return cls(*_arguments(generic, 5, 6))

    def to_generic(self):
        params = [self.client, self.server_name, self.server_version, self.user_modes, self.channel_modes]
        if self.channel_mode_params is not None:
            params.append(self.channel_mode_params)
        return Generic(self.CODE, params)


class RplISupport(Command):
    """ Server feature advertisement: `005 <client> <token>* [:<text>]`. text is None when the server sent none. """
    CODE = 5
    FIELDS = ('client', 'tokens', 'text')

    def __init__(self, client, tokens, text):
        self.client = client
        self.tokens = list(tokens)
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        args = _arguments(generic, 2)
        if generic.trailing is None:
            return cls(args[0], args[1:], None)
        return cls(args[0], args[1:-1], args[-1])

    def to_generic(self):
        return Generic(self.CODE, [self.client] + self.tokens, self.text)


class RplLUserClient(Reply):
    CODE = 251


class CountReply(Command):
    """ A numeric reply carrying a single count: `<code> <client> <count> :<text>`. """
    FIELDS = ('client', 'count', 'text')

    def __init__(self, client, count, text):
        self.client = client
        self.count = count
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        client, count, text = _arguments(generic, 3, 3)
        return cls(client, _number(generic, count), text)

    def to_generic(self):
        return Generic(self.CODE, [self.client, str(self.count)], self.text)


class RplLUserOp(CountReply):
    """ Amount of operators online. """
    CODE = 252

    @property
    def ops(self):
        return self.count


class RplLUserUnknown(CountReply):
    """ Amount of unknown connections. """
    CODE = 253

    @property
    def connections(self):
        return self.count


class RplLUserChannels(CountReply):
    """ Amount of channels formed. """
    CODE = 254

    @property
    def channels(self):
        return self.count


class RplLUserMe(Reply):
    CODE = 255


class UsersReply(Command):
    """
    Local or global user statistics: `<code> <client> [<current> <max>] :<text>`.
    `users` is a (current, max) tuple, or None if the server left the counts out.
    """
    FIELDS = ('client', 'users', 'text')

    def __init__(self, client, users, text):
        self.client = client
        self.users = tuple(users) if users is not None else None
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        args = _arguments(generic, 2)
        rest, text = args[:-1], args[-1]

        if len(rest) == 1:
            return cls(rest[0], None, text)
        if len(rest) == 3:
            client, current, maximum = rest
            return cls(client, (_number(generic, current), _number(generic, maximum)), text)
        raise Invalid('{cmd} takes either 1 or 3 parameters before its text, got {got}.'.format(
            cmd=generic.name, got=len(rest)), message=generic)

    def to_generic(self):
        params = [self.client]
        if self.users is not None:
            params.extend(str(count) for count in self.users)
        return Generic(self.CODE, params, self.text)


class RplLocalUsers(UsersReply):
    CODE = 265


class RplGlobalUsers(UsersReply):
    CODE = 266


class RplMotd(Reply):
    CODE = 372


class RplMotdStart(Reply):
    CODE = 375


class RplEndOfMotd(Reply):
    CODE = 376


class RplHostHidden(Command):
    """ Displayed host changed: `396 <client> <host> :<text>`. """
    CODE = 396
    FIELDS = ('client', 'host', 'text')

    def __init__(self, client, host, text):
        self.client = client
        self.host = host
        self.text = text

    @classmethod
    def from_generic(cls, generic):
        client, host, text = _arguments(generic, 3, 3)
        return cls(client, host, text)

    def to_generic(self):
        return Generic(self.CODE, [self.client, self.host], self.text)


## Lookup.

COMMANDS = {
    cls.CODE: cls for cls in (
        Pass, Nick, User, Ping, Pong, Notice, ErrorMsg,
        RplWelcome, RplYourHost, RplCreated, RplMyInfo, RplISupport,
        RplLUserClient, RplLUserOp, RplLUserUnknown, RplLUserChannels, RplLUserMe,
        RplLocalUsers, RplGlobalUsers, RplMotd, RplMotdStart, RplEndOfMotd, RplHostHidden
    )
}


def promote(generic):
    """
    Convert a generic command into its typed form.
    Commands without a typed form are returned unchanged; known commands with missing or malformed
    parameters raise PromotionError or Invalid.
    """
    if not isinstance(generic, Generic):
        return generic

    cls = COMMANDS.get(generic.code)
    if cls is None:
        return generic
    return cls.from_generic(generic)


def demote(command):
    """ Convert a typed command into its generic form. """
    return command.to_generic()
