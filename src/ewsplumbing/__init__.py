# ewsplumbing/__init__.py

from .credentials import Credentials, NtlmCredentials
from .ews_client import EwsClient
from .exceptions import (
    EwsPlumbingError,
    ProtocolParseError,
    TransportError,
    TransportInitError,
    TransportOptionError,
    UnsupportedOptionError,
)
from .headers import HeaderList
from .http_request import HttpMethod, HttpRequest
from .http_response import HttpResponse
from .soap import build_soap_envelope, make_raw_soap_request
from .transport import AuthMode, TransportHandle, TransportOption

__all__: list[str] = [
    # transport.py
    'AuthMode',
    # credentials.py
    'Credentials',
    # ews_client.py
    'EwsClient',
    # exceptions.py
    'EwsPlumbingError',
    # headers.py
    'HeaderList',
    # http_request.py
    'HttpMethod',
    'HttpRequest',
    # http_response.py
    'HttpResponse',
    'NtlmCredentials',
    'ProtocolParseError',
    'TransportError',
    'TransportHandle',
    'TransportInitError',
    'TransportOption',
    'TransportOptionError',
    'UnsupportedOptionError',
    # soap.py
    'build_soap_envelope',
    'make_raw_soap_request',
]
