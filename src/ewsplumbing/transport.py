# ewsplumbing/transport.py
"""
Transport handle: one HTTP session for one request/response cycle.

TransportHandle owns a single requests.Session and exposes the two things
the request layer needs from it: setting named transfer options and
performing the blocking transfer. Options are validated when they are set,
so a misconfigured request fails at configuration time with a
TransportOptionError rather than halfway through a transfer.

Response bytes are never buffered here. Each received chunk is handed to the
installed write callback, which reports how many bytes it consumed; a short
count aborts the transfer.
"""

import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from types import TracebackType
from typing import Any, NoReturn

import requests
from requests.auth import AuthBase, HTTPBasicAuth
from requests.structures import CaseInsensitiveDict
from requests_ntlm import HttpNtlmAuth

from ewsplumbing.exceptions import (
    TransportError,
    TransportInitError,
    TransportOptionError,
    UnsupportedOptionError,
)
from ewsplumbing.headers import HeaderList
from ewsplumbing.utils.scope_guard import OnScopeExit

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)

# Size of the pieces handed to the write callback
CHUNK_SIZE: int = 16 * 1024

# Header values that must never reach the logs
_REDACTED_HEADERS: frozenset[str] = frozenset({'authorization', 'proxy-authorization'})

# callback(chunk, target) -> number of bytes consumed
WriteCallback = Callable[[bytes, Any], int]


class TransportOption(StrEnum):
    """Named options understood by TransportHandle.set_option()."""

    URL = 'url'
    POST = 'post'
    USERAGENT = 'useragent'
    POSTFIELDS = 'postfields'
    POSTFIELDSIZE = 'postfieldsize'
    HTTPHEADER = 'httpheader'
    WRITEFUNCTION = 'writefunction'
    WRITEDATA = 'writedata'
    HTTPAUTH = 'httpauth'
    USERPWD = 'userpwd'
    TIMEOUT = 'timeout'
    CONNECTTIMEOUT = 'connecttimeout'
    SSL_VERIFYPEER = 'ssl_verifypeer'
    VERBOSE = 'verbose'


class AuthMode(StrEnum):
    """HTTP authentication schemes the transport can negotiate."""

    BASIC = 'basic'
    NTLM = 'ntlm'


# =============================================================================
# Option Validators
# =============================================================================
# Each validator returns the normalized value to store, or raises TypeError /
# ValueError with a reason that ends up in the TransportOptionError.


def _as_text(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f'expected str, got {type(value).__name__}')
    return value


def _as_url(value: Any) -> str:
    url: str = _as_text(value)
    if not url.strip():
        raise ValueError('URL must not be empty')
    return url


def _as_flag(value: Any) -> bool:
    if not isinstance(value, (bool, int)):
        raise TypeError(f'expected bool, got {type(value).__name__}')
    return bool(value)


def _as_body(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f'expected str or bytes, got {type(value).__name__}')


def _as_size(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f'expected int, got {type(value).__name__}')
    if value < 0:
        raise ValueError(f'size must not be negative, got {value}')
    return value


def _as_header_fields(value: Any) -> list[tuple[str, str]]:
    if isinstance(value, HeaderList):
        return value.as_fields()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise TypeError(f'expected HeaderList or iterable of str, got {type(value).__name__}')

    headers = HeaderList()
    for line in value:
        headers.append(_as_text(line))
    return headers.as_fields()


def _as_callback(value: Any) -> WriteCallback:
    if not callable(value):
        raise TypeError(f'expected a callable, got {type(value).__name__}')
    return value


def _as_auth_mode(value: Any) -> AuthMode:
    return AuthMode(value)


def _as_seconds(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f'expected seconds as a number, got {type(value).__name__}')
    if value <= 0:
        raise ValueError(f'timeout must be positive, got {value}')
    return float(value)


def _as_anything(value: Any) -> Any:
    return value


_VALIDATORS: dict[TransportOption, Callable[[Any], Any]] = {
    TransportOption.URL: _as_url,
    TransportOption.POST: _as_flag,
    TransportOption.USERAGENT: _as_text,
    TransportOption.POSTFIELDS: _as_body,
    TransportOption.POSTFIELDSIZE: _as_size,
    TransportOption.HTTPHEADER: _as_header_fields,
    TransportOption.WRITEFUNCTION: _as_callback,
    TransportOption.WRITEDATA: _as_anything,
    TransportOption.HTTPAUTH: _as_auth_mode,
    TransportOption.USERPWD: _as_text,
    TransportOption.TIMEOUT: _as_seconds,
    TransportOption.CONNECTTIMEOUT: _as_seconds,
    TransportOption.SSL_VERIFYPEER: _as_flag,
    TransportOption.VERBOSE: _as_flag,
}


def _discard(chunk: bytes, _target: Any) -> int:
    return len(chunk)


# =============================================================================
# Transport Handle
# =============================================================================


class TransportHandle:
    """
    Exclusive owner of one requests.Session.

    Attributes:
        response_code: HTTP status of the last completed transfer, 0 before
                       the first one.

    Usage:
        >>> with TransportHandle() as handle:
        ...     handle.set_option(TransportOption.URL, 'https://example.test/ews')
        ...     handle.set_option(TransportOption.WRITEFUNCTION, sink)
        ...     status = handle.perform()
    """

    def __init__(
        self, session_factory: Callable[[], requests.Session] = requests.Session
    ) -> None:
        """
        Acquire the HTTP session.

        Args:
            session_factory: Zero-argument callable returning the session to own.

        Raises:
            TransportInitError: If no session could be created.
        """
        try:
            session: requests.Session | None = session_factory()
        except Exception as init_error:
            raise TransportInitError(
                f'Could not start HTTP session: {init_error}'
            ) from init_error

        if session is None:
            raise TransportInitError('Could not start HTTP session')

        self._session: requests.Session | None = session
        self._options: dict[TransportOption, Any] = {}
        self.response_code: int = 0

    @property
    def closed(self) -> bool:
        return self._session is None

    def set_option(self, option: TransportOption | str, value: Any) -> None:
        """
        Validate and store one transfer option.

        Args:
            option: A TransportOption member or its string value.
            value: The option value; its accepted type depends on the option.

        Raises:
            UnsupportedOptionError: If the option name is unknown.
            TransportOptionError: If the value is rejected or the handle is closed.
        """
        try:
            key = TransportOption(str(option).lower())
        except ValueError:
            raise UnsupportedOptionError(str(option)) from None

        if self._session is None:
            raise TransportOptionError(key.value, 'transport handle is closed')

        try:
            self._options[key] = _VALIDATORS[key](value)
        except (TypeError, ValueError) as option_error:
            raise TransportOptionError(key.value, str(option_error)) from option_error

    def get_option(self, option: TransportOption, default: Any = None) -> Any:
        """Return the stored (normalized) value of an option."""
        return self._options.get(option, default)

    def perform(self) -> int:
        """
        Run the transfer and block until it completes.

        Every response body chunk is passed to the WRITEFUNCTION callback
        together with the WRITEDATA target.

        Returns:
            The HTTP status code of the response.

        Raises:
            TransportError: If the transfer fails for any reason, including a
                            write callback that did not consume its chunk.
        """
        if self._session is None:
            raise TransportError('perform', 'transport handle is closed')

        url: str | None = self._options.get(TransportOption.URL)
        if url is None:
            raise TransportError('perform', 'no URL set')

        method: str = 'POST' if self._options.get(TransportOption.POST) else 'GET'
        headers: CaseInsensitiveDict[str] = self._build_headers()
        verbose: bool = self._options.get(TransportOption.VERBOSE, False)
        verify: bool = self._options.get(TransportOption.SSL_VERIFYPEER, True)

        if not verify:
            logger.warning('TLS peer verification is disabled for %r', url)

        if verbose:
            self._log_request(method, url, headers)

        try:
            response: requests.Response = self._session.request(
                method,
                url,
                data=self._build_body(),
                headers=headers,
                auth=self._build_auth(),
                timeout=self._build_timeout(),
                verify=verify,
                stream=True,
            )
        except requests.exceptions.RequestException as request_error:
            raise TransportError('perform', str(request_error)) from request_error

        callback: WriteCallback = self._options.get(TransportOption.WRITEFUNCTION, _discard)
        target: Any = self._options.get(TransportOption.WRITEDATA)

        with OnScopeExit(response.close):
            self.response_code = response.status_code

            if verbose:
                self._log_response(response)

            try:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    if callback(chunk, target) != len(chunk):
                        raise TransportError('perform', 'failed writing received data')
            except requests.exceptions.RequestException as read_error:
                raise TransportError('perform', str(read_error)) from read_error

        return self.response_code

    def close(self) -> None:
        """Release the session. Safe to call more than once."""
        if self._session is not None:
            self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Request assembly
    # ------------------------------------------------------------------

    def _build_body(self) -> bytes | None:
        body: bytes | None = self._options.get(TransportOption.POSTFIELDS)
        size: int | None = self._options.get(TransportOption.POSTFIELDSIZE)
        if body is not None and size is not None:
            return body[:size]
        return body

    def _build_headers(self) -> CaseInsensitiveDict[str]:
        # Repeated names are folded into one comma-separated field
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        for name, value in self._options.get(TransportOption.HTTPHEADER, []):
            if name in headers:
                headers[name] = f'{headers[name]}, {value}'
            else:
                headers[name] = value

        user_agent: str | None = self._options.get(TransportOption.USERAGENT)
        if user_agent is not None and 'User-Agent' not in headers:
            headers['User-Agent'] = user_agent
        return headers

    def _build_auth(self) -> AuthBase | None:
        login: str | None = self._options.get(TransportOption.USERPWD)
        if login is None:
            return None

        username, _, password = login.partition(':')
        mode: AuthMode = self._options.get(TransportOption.HTTPAUTH, AuthMode.BASIC)
        if mode is AuthMode.NTLM:
            return HttpNtlmAuth(username, password)
        return HTTPBasicAuth(username, password)

    def _build_timeout(self) -> tuple[float | None, float | None] | None:
        connect: float | None = self._options.get(TransportOption.CONNECTTIMEOUT)
        read: float | None = self._options.get(TransportOption.TIMEOUT)
        if connect is None and read is None:
            return None
        return (connect, read)

    # ------------------------------------------------------------------
    # Verbose wire logging
    # ------------------------------------------------------------------

    def _log_request(
        self, method: str, url: str, headers: CaseInsensitiveDict[str]
    ) -> None:
        logger.debug('> %s %s', method, url)
        for name, value in headers.items():
            logger.debug('> %s: %s', name, _loggable(name, value))
        if TransportOption.USERPWD in self._options:
            mode: AuthMode = self._options.get(TransportOption.HTTPAUTH, AuthMode.BASIC)
            logger.debug('> (%s authentication, credentials redacted)', mode.value)

    @staticmethod
    def _log_response(response: requests.Response) -> None:
        logger.debug('< HTTP %r %s', response.status_code, response.reason)
        for name, value in response.headers.items():
            logger.debug('< %s: %s', name, _loggable(name, value))

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def __enter__(self) -> 'TransportHandle':
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __copy__(self) -> NoReturn:
        raise TypeError('TransportHandle owns its session and cannot be copied')

    def __deepcopy__(self, _memo: dict[int, object]) -> NoReturn:
        raise TypeError('TransportHandle owns its session and cannot be copied')

    def __repr__(self) -> str:
        return (
            f'TransportHandle('
            f'url={self._options.get(TransportOption.URL)!r}, '
            f'closed={self.closed}'
            f')'
        )


def _loggable(name: str, value: str) -> str:
    return '<redacted>' if name.lower() in _REDACTED_HEADERS else value
