# ewsplumbing/ews_client.py
"""
Exchange Web Services client

A thin, configuration-driven front end over make_raw_soap_request(). It
loads the endpoint, account and transport settings once and then sends any
number of SOAP bodies with them. Each call uses its own HttpRequest and
therefore its own HTTP session.

The client does NOT interpret responses. Callers parse the payload, look
for SOAP faults and decide what an HTTP status means for them.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from types import TracebackType

from ewsplumbing.http_response import HttpResponse
from ewsplumbing.soap import make_raw_soap_request
from ewsplumbing.utils import EwsPlumbingConfig, load_config, setup_logger

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)


class EwsClient:
    """
    Client for sending raw SOAP requests to an EWS endpoint.

    Attributes:
        config: The validated configuration (endpoint, account, transport).

    Usage:
        >>> client = EwsClient(Path('/etc/ews/config.yaml'))
        >>> response = client.execute('<m:GetFolder>...</m:GetFolder>')
        >>> response.code()
        200
        >>> root = response.payload()
    """

    def __init__(
        self, config_path: Path | None = None, config: EwsPlumbingConfig | None = None
    ) -> None:
        """
        Initialize the client from a config object or a config file.

        Args:
            config_path: Optional path to a YAML configuration file. Ignored
                         when config is given.
            config: Optional pre-loaded configuration.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            pydantic.ValidationError: If the config file is invalid.
        """
        if config is not None:
            self.config: EwsPlumbingConfig = config
            logger.debug('Initializing EwsClient with injected configuration')
        elif config_path is not None:
            logger.info('Loading EWS configuration from: %r', config_path)
            self.config = load_config(config_path)
        else:
            logger.info('Loading EWS configuration from default location')
            self.config = load_config()

        # Configure the package-level logger (all module loggers inherit from it)
        logging_config = self.config.logging
        if logging_config.file_path is not None:
            file_level: int = logging_config.get_file_level_int() or logging.DEBUG
            setup_logger(file_level, logging_config.file_path)
        else:
            setup_logger(logging_config.get_console_level_int())

    def execute(self, soap_body: str, soap_headers: Sequence[str] = ()) -> HttpResponse:
        """
        Send one SOAP request built from the given fragments.

        Args:
            soap_body: The contents of the soap:Body element.
            soap_headers: Optional soap:Header fragments, in order.

        Returns:
            The raw HttpResponse. The payload is parsed on first access.

        Raises:
            TransportInitError: If no HTTP session could be created.
            TransportOptionError: If the request could not be configured.
            TransportError: If the transfer failed.
        """
        ews = self.config.ews
        logger.info('Sending EWS request to %r', str(ews.endpoint_url))

        response: HttpResponse = make_raw_soap_request(
            str(ews.endpoint_url),
            ews.username,
            ews.password.get_secret_value(),
            ews.domain,
            soap_body,
            soap_headers,
            settings=self.config.client,
        )

        logger.info('EWS request completed (HTTP %r)', response.code())
        return response

    def __enter__(self) -> 'EwsClient':
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_value: BaseException | None,
        _traceback: TracebackType | None,
    ) -> None:
        # Every execute() closes its own session, so there is nothing left to release
        logger.debug('Leaving EwsClient context for %r', str(self.config.ews.endpoint_url))

    def __repr__(self) -> str:
        return (
            f'EwsClient('
            f'endpoint={self.config.ews.endpoint_url}, '
            f'user={self.config.ews.domain}\\{self.config.ews.username}'
            f')'
        )
