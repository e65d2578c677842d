# ewsplumbing/exceptions.py
"""
Exception types raised by the SOAP transport plumbing.

Every error derives from EwsPlumbingError so callers can catch the whole
family at once, while the concrete subclasses let them tell a misconfigured
request apart from a failed transfer or an unreadable response.
"""


class EwsPlumbingError(RuntimeError):
    """Base class for all errors raised by this package."""


class TransportInitError(EwsPlumbingError):
    """Raised when the underlying HTTP session cannot be acquired."""


class TransportOptionError(EwsPlumbingError):
    """
    Raised when a transport option could not be set.

    Attributes:
        option: The name of the option that was being set.
        reason: The transport's diagnostic text.
    """

    def __init__(self, option: str, reason: str, context: str = 'failed setting option') -> None:
        self.option: str = option
        self.reason: str = reason
        super().__init__(f'set_option: {context} {option!r}: {reason!r}')


class UnsupportedOptionError(TransportOptionError):
    """Raised when the transport does not know the requested option at all."""

    def __init__(self, option: str, reason: str = 'unknown option') -> None:
        super().__init__(option, reason, context='unsupported option')


class TransportError(EwsPlumbingError):
    """
    Raised when the blocking transfer itself fails.

    Covers connection failures, timeouts, TLS errors and local failures while
    buffering the response body. The message embeds the diagnostic text of
    the HTTP library.

    Attributes:
        context: The operation that failed ('perform', 'send').
        reason: The diagnostic text.
        status_code: The HTTP status when the server did answer, else None.
    """

    def __init__(self, context: str, reason: str, status_code: int | None = None) -> None:
        self.context: str = context
        self.reason: str = reason
        self.status_code: int | None = status_code
        super().__init__(f'{context}: {reason!r}')


class ProtocolParseError(EwsPlumbingError):
    """Raised when a response body is not well-formed XML."""
