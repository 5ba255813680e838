## parsing.py
# IRC message parsing and construction.
from . import commands, protocol
from .protocol import NoMatch, NoCommand, Invalid


class Message(protocol.Record):
    """
    A single IRC message: optional tags, optional source prefix and a command.
    Tags are kept as an ordered list of (key, value) tuples, where value is None for tags without one.
    """
    FIELDS = ('tags', 'prefix', 'command')

    def __init__(self, command, tags=None, prefix=None, _raw=None):
        self.command = command
        self.tags = list(tags or [])
        self.prefix = prefix
        self._raw = _raw

    @classmethod
    def parse(cls, line, encoding=protocol.DEFAULT_ENCODING, promote=True):
        """
        Parse given line into IRC message structure.
        Returns a Message. If `promote` is False, the command is left as a Generic command.
        """
        # Decode message.
        if isinstance(line, bytes):
            try:
                message = line.decode(encoding)
            except UnicodeDecodeError:
                # Try our fallback encoding.
                message = line.decode(protocol.FALLBACK_ENCODING)
        else:
            message = line

        # Strip message separator.
        if message.endswith(protocol.LINE_SEPARATOR):
            message = message[:-len(protocol.LINE_SEPARATOR)]
        elif message.endswith(protocol.MINIMAL_LINE_SEPARATOR):
            message = message[:-len(protocol.MINIMAL_LINE_SEPARATOR)]
        raw = message

        # Sanity check for forbidden characters.
        if any(ch in message for ch in protocol.FORBIDDEN_CHARACTERS):
            raise NoMatch('Message contains forbidden characters.', message=raw)

        # Extract message sections.
        # Format: (@tags )?(:source )?command( middle)*( :trailing)?
        tags = []
        if message.startswith(protocol.TAG_INDICATOR):
            raw_tags, sep, message = message[len(protocol.TAG_INDICATOR):].partition(protocol.ARGUMENT_SEPARATOR)
            if not sep:
                raise NoCommand('Message "{}" is missing command.'.format(raw), message=raw)
            tags = parse_tags(raw_tags, raw)

        prefix = None
        if message.startswith(protocol.SOURCE_PREFIX):
            prefix, sep, message = message[len(protocol.SOURCE_PREFIX):].partition(protocol.ARGUMENT_SEPARATOR)
            if not prefix:
                raise NoMatch('Message "{}" has an empty source.'.format(raw), message=raw)
            if not sep:
                raise NoCommand('Message "{}" is missing command.'.format(raw), message=raw)

        command, _, raw_params = message.partition(protocol.ARGUMENT_SEPARATOR)
        if not command:
            raise NoCommand('Message "{}" is missing command.'.format(raw), message=raw)
        code = parse_command(command)
        params, trailing = parse_params(raw_params, message, raw)

        generic = commands.Generic(code, params, trailing)
        return cls(commands.promote(generic) if promote else generic, tags=tags, prefix=prefix, _raw=raw)

    def construct(self):
        """ Construct a raw IRC message. """
        message = ''

        # Add tags.
        if self.tags:
            message += protocol.TAG_INDICATOR + construct_tags(self.tags) + protocol.ARGUMENT_SEPARATOR

        # Add source.
        if self.prefix is not None:
            if not self.prefix or protocol.ARGUMENT_SEPARATOR in self.prefix:
                raise Invalid('Message source must be a single non-empty word.', message=self.prefix)
            message += protocol.SOURCE_PREFIX + self.prefix + protocol.ARGUMENT_SEPARATOR

        message += construct_command(commands.demote(self.command))

        # Sanity check for characters.
        if any(ch in message for ch in protocol.FORBIDDEN_CHARACTERS):
            raise Invalid('The constructed message contains forbidden characters ({chs}).'.format(
                chs=', '.join(repr(ch) for ch in sorted(protocol.FORBIDDEN_CHARACTERS))), message=message)

        return message + protocol.LINE_SEPARATOR

    def promote(self):
        """ Return this message with its command promoted to a typed command, where known. """
        return self.__class__(commands.promote(self.command), tags=self.tags, prefix=self.prefix, _raw=self._raw)

    def __str__(self):
        return self.construct()


## Sections.

def parse_tags(raw_tags, raw=None):
    """ Parse `key[=value](;key[=value])*` into an ordered list of (key, value) tuples. """
    tags = []
    for raw_tag in raw_tags.split(protocol.TAG_SEPARATOR):
        if protocol.TAG_VALUE_SEPARATOR in raw_tag:
            tag, value = raw_tag.split(protocol.TAG_VALUE_SEPARATOR, 1)
        else:
            tag, value = raw_tag, None
        if not tag:
            raise NoMatch('Message "{}" has an empty tag key.'.format(raw), message=raw)
        tags.append((tag, value))
    return tags


def construct_tags(tags):
    raw_tags = []
    for tag, value in tags:
        if not tag or any(ch in tag for ch in (protocol.TAG_SEPARATOR, protocol.TAG_VALUE_SEPARATOR, protocol.ARGUMENT_SEPARATOR)):
            raise Invalid('Malformed tag key: {!r}'.format(tag), message=tag)
        if value is None:
            raw_tags.append(tag)
        else:
            if protocol.TAG_SEPARATOR in value or protocol.ARGUMENT_SEPARATOR in value:
                raise Invalid('Tag values cannot contain spaces or semicolons: {!r}'.format(value), message=value)
            raw_tags.append(tag + protocol.TAG_VALUE_SEPARATOR + value)
    return protocol.TAG_SEPARATOR.join(raw_tags)


def parse_command(command):
    """ Parse a command token into its text (str) or numeric (int) code. """
    if protocol.NUMERIC_COMMAND_PATTERN.match(command):
        return int(command)
    if protocol.TEXT_COMMAND_PATTERN.match(command):
        return command
    raise Invalid('Malformed command: {}'.format(command), message=command)


def construct_code(code):
    """ Wire representation of a command code: numerics are zero-padded to three digits. """
    if isinstance(code, int) and not isinstance(code, bool):
        if not 0 <= code <= protocol.NUMERIC_MAX:
            raise Invalid('Numeric command out of range: {}'.format(code), message=code)
        return str(code).zfill(3)
    if isinstance(code, str) and protocol.TEXT_COMMAND_PATTERN.match(code):
        return code
    raise Invalid('The command does not follow the command pattern: {!r}'.format(code), message=code)


def parse_params(raw_params, message, raw=None):
    """ Split the parameter section into middle parameters and the optional trailing parameter. """
    if not raw_params:
        # Either no parameter section at all, or a dangling space after the command.
        if message.endswith(protocol.ARGUMENT_SEPARATOR):
            raise NoMatch('Message "{}" has an empty parameter.'.format(raw), message=raw)
        return [], None

    # Only parameter is a 'trailing' sentence.
    if raw_params.startswith(protocol.TRAILING_PREFIX):
        return [], raw_params[len(protocol.TRAILING_PREFIX):]

    trailing = None
    separator = protocol.ARGUMENT_SEPARATOR + protocol.TRAILING_PREFIX
    if separator in raw_params:
        raw_params, trailing = raw_params.split(separator, 1)

    params = raw_params.split(protocol.ARGUMENT_SEPARATOR)
    if not all(params):
        raise NoMatch('Message "{}" has an empty parameter.'.format(raw), message=raw)
    return params, trailing


def construct_command(generic):
    """ Construct the command section (command, middle parameters, trailing parameter) of a raw message. """
    message = construct_code(generic.code)
    params = list(generic.params)
    trailing = generic.trailing
    if not all(isinstance(param, str) for param in params) or not isinstance(trailing, (str, type(None))):
        raise Invalid('Parameters must be strings.', message=generic)

    # A final middle parameter that can only be represented as trailing becomes trailing.
    if trailing is None and params and not is_middle(params[-1]):
        trailing = params.pop()

    for param in params:
        if not is_middle(param):
            raise Invalid('Only the final parameter of an IRC message can be trailing and thus contain spaces, '
                          'start with a colon or be empty.', message=param)
        message += protocol.ARGUMENT_SEPARATOR + param

    if trailing is not None:
        message += protocol.ARGUMENT_SEPARATOR + protocol.TRAILING_PREFIX + trailing
    return message


def is_middle(param):
    """ Whether the given parameter can be sent as a middle parameter. """
    return bool(param) and protocol.ARGUMENT_SEPARATOR not in param and not param.startswith(protocol.TRAILING_PREFIX)


## Sources and names.

def parse_user(raw):
    """ Parse nick(!user(@host)?)? structure. """
    nick = raw
    user = None
    host = None

    # Attempt to extract host.
    if protocol.HOST_SEPARATOR in raw:
        raw, host = raw.split(protocol.HOST_SEPARATOR, 1)
        nick = raw
    # Attempt to extract user.
    if protocol.USER_SEPARATOR in raw:
        nick, user = raw.split(protocol.USER_SEPARATOR, 1)

    return nick, user, host


def normalize(input, case_mapping=protocol.DEFAULT_CASE_MAPPING):
    """ Normalize input according to case mapping. """
    if case_mapping not in protocol.CASE_MAPPINGS:
        raise protocol.ProtocolViolation('Unknown case mapping ({})'.format(case_mapping))

    input = input.lower()

    if case_mapping in ('rfc1459', 'strict-rfc1459'):
        input = input.replace('{', '[').replace('}', ']').replace('|', '\\')
    if case_mapping == 'rfc1459':
        input = input.replace('~', '^')

    return input
