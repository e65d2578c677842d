# ewsplumbing/http_response.py
"""
HTTP response wrapper with lazy, one-shot XML parsing.

An HttpResponse owns the raw body bytes of one response. The first call to
payload() parses them and consumes the buffer; the parsed document then
replaces the bytes for the rest of the response's life. A response is
therefore always in exactly one of three states: unparsed, parsed, or
failed to parse, and the parser can run at most once.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import NoReturn

from lxml import etree

from ewsplumbing.exceptions import ProtocolParseError
from ewsplumbing.utils.scope_guard import OnScopeExit
from ewsplumbing.utils.xml_parser import parse_soap_response

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Unparsed:
    data: bytes | bytearray


@dataclass(frozen=True, slots=True)
class _Parsed:
    document: etree._Element


@dataclass(frozen=True, slots=True)
class _Failed:
    reason: str


def _spend(data: bytes | bytearray) -> None:
    if isinstance(data, bytearray):
        data.clear()


class HttpResponse:
    """
    Status code plus owned response body, parsed on first access.

    Example:
        >>> response = request.send(envelope)
        >>> response.code()
        200
        >>> root = response.payload()  # parses now
        >>> root is response.payload()  # no second parse
        True
    """

    __slots__ = ('_code', '_state')

    def __init__(self, code: int, data: bytes | bytearray) -> None:
        """
        Take ownership of a response body.

        bytes and bytearray are adopted as-is without copying. Any other
        bytes-like value is copied once.

        Args:
            code: The HTTP status code.
            data: The raw response body. Must not be empty.

        Raises:
            ValueError: If data is empty.
        """
        if not data:
            raise ValueError('HttpResponse requires a non-empty response body')

        self._code: int = code
        self._state: _Unparsed | _Parsed | _Failed = _Unparsed(
            data if isinstance(data, (bytes, bytearray)) else bytes(data)
        )

    def payload(self) -> etree._Element:
        """
        Return the root element of the parsed response body.

        The first call parses the raw bytes and releases them; later calls
        return the very same element object.

        Raises:
            ProtocolParseError: If the body is not well-formed XML. The same
                                error is raised again on every later call.
        """
        state = self._state
        if isinstance(state, _Parsed):
            return state.document
        if isinstance(state, _Failed):
            raise ProtocolParseError(state.reason)

        logger.debug('Parsing %d byte response body (HTTP %r)', len(state.data), self._code)

        # lxml only parses immutable bytes, so a bytearray is copied here once
        raw: bytes = state.data if isinstance(state.data, bytes) else bytes(state.data)

        # The buffer is spent once the parser has seen it, whatever the outcome
        with OnScopeExit(partial(_spend, state.data)):
            try:
                document: etree._Element = parse_soap_response(raw)
            except ProtocolParseError as parse_error:
                self._state = _Failed(str(parse_error))
                raise

        self._state = _Parsed(document)
        return document

    def code(self) -> int:
        """Return the HTTP status code of the response."""
        return self._code

    @property
    def is_parsed(self) -> bool:
        return isinstance(self._state, _Parsed)

    def __copy__(self) -> NoReturn:
        raise TypeError('HttpResponse owns its body and cannot be copied')

    def __deepcopy__(self, _memo: dict[int, object]) -> NoReturn:
        raise TypeError('HttpResponse owns its body and cannot be copied')

    def __repr__(self) -> str:
        state_name: str = type(self._state).__name__.lstrip('_').lower()
        return f'HttpResponse(code={self._code}, state={state_name})'
