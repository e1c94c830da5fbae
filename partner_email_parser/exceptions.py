"""Exception types raised by the partner email parser."""


class EmailParserError(Exception):
    """Base class for parser errors."""


class ConfigError(EmailParserError):
    """The parsing configuration is malformed; the batch cannot start."""


class MessageDecodeError(EmailParserError):
    """A single message could not be decoded."""


class ChatError(EmailParserError):
    """The chat capability failed to return a response."""
