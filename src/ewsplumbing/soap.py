# ewsplumbing/soap.py
"""
SOAP envelope composition and the raw SOAP call.

The envelope layout is fixed and lives in templates/envelope.xml: XML
declaration, a soap:Envelope root with the Exchange Web Services namespace
bindings, an optional soap:Header and one soap:Body. Callers supply only the
header and body fragments, which are inserted verbatim.
"""

import logging
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template

from ewsplumbing.credentials import NtlmCredentials
from ewsplumbing.http_request import HttpMethod, HttpRequest
from ewsplumbing.http_response import HttpResponse
from ewsplumbing.utils.config_loader import ClientSection

# Set up module-level logger
logger: logging.Logger = logging.getLogger(__name__)

ENVELOPE_TEMPLATE: str = 'envelope.xml'
SOAP_CONTENT_TYPE: str = 'text/xml; charset=utf-8'


@lru_cache(maxsize=1)
def _get_template_environment() -> Environment:
    """
    Build the Jinja2 environment for the envelope template once.

    Raises:
        FileNotFoundError: If the templates directory is missing.
    """
    templates_dir: Path = Path(__file__).parent / 'templates'

    if not templates_dir.exists():
        error_message: str = f'Templates directory not found at: {templates_dir}'
        logger.error(error_message)
        raise FileNotFoundError(error_message)

    logger.debug('Jinja2 environment initialized with templates from: %r', templates_dir)
    return Environment(
        loader=FileSystemLoader(str(templates_dir)),
        # Fragments are already XML and must reach the wire untouched
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def build_soap_envelope(soap_body: str, soap_headers: Sequence[str] = ()) -> str:
    """
    Wrap a body fragment and optional header fragments in a SOAP envelope.

    Args:
        soap_body: The contents of the soap:Body element (the actual EWS
                   request), without the Body element itself.
        soap_headers: Header fragments, placed inside soap:Header in the
                      given order. No soap:Header is emitted when empty.

    Returns:
        The complete envelope as a string.
    """
    template: Template = _get_template_environment().get_template(ENVELOPE_TEMPLATE)
    return template.render(soap_body=soap_body, soap_headers=list(soap_headers))


def make_raw_soap_request(
    url: str,
    username: str,
    password: str,
    domain: str,
    soap_body: str,
    soap_headers: Sequence[str] = (),
    *,
    settings: ClientSection | None = None,
) -> HttpResponse:
    """
    Send one SOAP request with NTLM authentication and return the response.

    Args:
        url: The URL of the server to talk to.
        username: The user's account name.
        password: The user's password, plain-text.
        domain: The user's Windows domain.
        soap_body: The contents of the SOAP body (minus the Body element).
        soap_headers: Any SOAP header fragments to add.
        settings: Optional client settings (timeouts, TLS verification,
                  verbose wire logging).

    Returns:
        The HttpResponse; its payload is parsed lazily by the caller.

    Raises:
        TransportInitError: If no HTTP session could be created.
        TransportOptionError: If the request could not be configured.
        TransportError: If the transfer failed.
    """
    envelope: str = build_soap_envelope(soap_body, soap_headers)
    credentials = NtlmCredentials(username=username, password=password, domain=domain)

    verbose_logging: bool = settings.verbose_logging if settings is not None else False
    insecure_skip_verify: bool = not settings.verify_ssl if settings is not None else False

    with HttpRequest(
        url,
        verbose_logging=verbose_logging,
        insecure_skip_verify=insecure_skip_verify,
    ) as request:
        request.set_method(HttpMethod.POST)
        request.set_content_type(SOAP_CONTENT_TYPE)
        request.set_credentials(credentials)

        if settings is not None:
            request.set_timeout(*settings.request_timeout)

        logger.debug(
            'Sending SOAP request to %r (%d header fragment(s))', url, len(soap_headers)
        )
        return request.send(envelope)
