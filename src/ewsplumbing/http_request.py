# ewsplumbing/http_request.py
"""
HTTP request builder for SOAP calls.

HttpRequest binds one destination URL to one TransportHandle, collects the
method, headers, credentials and any extra transfer options, and then sends
a single body with send(). The response body is accumulated into a
bytearray that is handed over to the returned HttpResponse without copying.
"""

import logging
from enum import Enum
from types import TracebackType
from typing import Any

from ewsplumbing.credentials import Credentials
from ewsplumbing.exceptions import TransportError
from ewsplumbing.headers import HeaderList
from ewsplumbing.http_response import HttpResponse
from ewsplumbing.transport import TransportHandle, TransportOption
from ewsplumbing.utils.scope_guard import OnScopeExit

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)

# Some servers refuse requests without a User-Agent, so one is always sent
DEFAULT_USER_AGENT: str = 'ewsplumbing-agent/1.0'


class HttpMethod(Enum):
    """HTTP methods supported by HttpRequest (SOAP only ever POSTs)."""

    POST = 'POST'


def _accumulate(chunk: bytes, buffer: bytearray) -> int:
    """Write callback: append a received chunk, or report 0 bytes when out of memory."""
    try:
        buffer.extend(chunk)
    except MemoryError:
        return 0
    return len(chunk)


class HttpRequest:
    """
    One pending HTTP request to a fixed URL.

    Configure the request completely before calling send(); a request is
    sent at most once. The builder owns its TransportHandle and releases it
    in close() (or at the end of a with block).

    Usage:
        >>> with HttpRequest('https://mail.example.com/EWS/Exchange.asmx') as request:
        ...     request.set_method(HttpMethod.POST)
        ...     request.set_content_type('text/xml; charset=utf-8')
        ...     request.set_credentials(credentials)
        ...     response = request.send(envelope)
    """

    def __init__(
        self,
        url: str,
        *,
        handle: TransportHandle | None = None,
        verbose_logging: bool = False,
        insecure_skip_verify: bool = False,
    ) -> None:
        """
        Create a request bound to one destination.

        Args:
            url: The endpoint URL. Cannot be changed later.
            handle: Transport handle to take ownership of. A new one is
                    created when omitted.
            verbose_logging: Log request and response headers at DEBUG level.
            insecure_skip_verify: Skip TLS certificate verification. Meant for
                                  test servers with self-signed certificates only.

        Raises:
            TransportInitError: If a new transport handle cannot be created.
            TransportOptionError: If the URL is rejected.
        """
        self._url: str = url
        self._handle: TransportHandle = handle if handle is not None else TransportHandle()
        self._headers: HeaderList = HeaderList()
        self._sent: bool = False

        # A handle created here has no other owner if configuration fails
        with OnScopeExit(self._handle.close) as close_on_error:
            if handle is not None:
                close_on_error.release()

            self.set_option(TransportOption.URL, url)

            if verbose_logging:
                self.set_option(TransportOption.VERBOSE, True)

            if insecure_skip_verify:
                self.set_option(TransportOption.SSL_VERIFYPEER, False)

            close_on_error.release()

    @property
    def url(self) -> str:
        return self._url

    @property
    def headers(self) -> tuple[str, ...]:
        """Snapshot of the header lines added so far, in order."""
        return tuple(self._headers)

    def set_method(self, method: HttpMethod) -> None:
        """Select the HTTP method. Only POST is supported."""
        if method is not HttpMethod.POST:
            raise ValueError(f'Unsupported HTTP method: {method!r}')
        self.set_option(TransportOption.POST, True)

    def set_content_type(self, content_type: str) -> None:
        """Append a Content-Type header line."""
        self._headers.append(f'Content-Type: {content_type}')

    def set_credentials(self, credentials: Credentials) -> None:
        """Let the credentials authenticate this request."""
        credentials.certify(self)

    def set_timeout(self, connect: float, read: float) -> None:
        """Set the connect and read timeouts, in seconds."""
        self.set_option(TransportOption.CONNECTTIMEOUT, connect)
        self.set_option(TransportOption.TIMEOUT, read)

    def set_option(self, option: TransportOption | str, value: Any) -> None:
        """
        Pass a transfer option straight through to the transport handle.

        Raises:
            UnsupportedOptionError: If the transport does not know the option.
            TransportOptionError: If the transport rejects the value.
        """
        self._handle.set_option(option, value)

    def send(self, body: str | bytes) -> HttpResponse:
        """
        Send the request and block until the whole response has arrived.

        Args:
            body: The complete request body. A str is encoded as UTF-8;
                  bytes are sent unchanged.

        Returns:
            The response, wrapping the status code and the raw body.

        Raises:
            RuntimeError: If this request was already sent.
            TransportOptionError: If the transport rejects part of the request.
            TransportError: If the transfer fails (network, timeout, TLS,
                            out of memory while buffering the body), or if
                            the server answered without a body.
        """
        if self._sent:
            raise RuntimeError('HttpRequest has already been sent')
        self._sent = True

        payload: bytes = body.encode('utf-8') if isinstance(body, str) else bytes(body)
        response_data: bytearray = bytearray()

        self.set_option(TransportOption.USERAGENT, DEFAULT_USER_AGENT)
        self.set_option(TransportOption.POSTFIELDS, payload)
        self.set_option(TransportOption.POSTFIELDSIZE, len(payload))
        self.set_option(TransportOption.HTTPHEADER, self._headers)
        self.set_option(TransportOption.WRITEFUNCTION, _accumulate)
        self.set_option(TransportOption.WRITEDATA, response_data)

        logger.debug('Sending %d byte request to %r', len(payload), self._url)

        try:
            status_code: int = self._handle.perform()
        except TransportError as transport_error:
            logger.error('Request to %r failed: %s', self._url, transport_error)
            raise

        logger.debug(
            'Received response from %r: HTTP %r, %d bytes',
            self._url,
            status_code,
            len(response_data),
        )

        if not response_data:
            logger.error('Response from %r carried no body (HTTP %r)', self._url, status_code)
            raise TransportError(
                'send', f'empty response body with HTTP {status_code}', status_code=status_code
            )

        return HttpResponse(status_code, response_data)

    def close(self) -> None:
        """Release the transport handle."""
        self._handle.close()

    def __enter__(self) -> 'HttpRequest':
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f'HttpRequest(url={self._url!r}, headers={len(self._headers)}, sent={self._sent})'
