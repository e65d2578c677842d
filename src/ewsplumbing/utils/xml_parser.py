# ewsplumbing/utils/xml_parser.py
"""
XML parsing utilities for SOAP responses.

Provides helper functions for parsing SOAP XML responses with proper
namespace handling. Parser errors are re-raised as ProtocolParseError so no
lxml exception type escapes this module.
"""

from lxml import etree
from pydantic import BaseModel

from ewsplumbing.exceptions import ProtocolParseError

SOAP_NAMESPACES: dict[str, str] = {
    'soap': 'http://schemas.xmlsoap.org/soap/envelope/',
}


class SoapFault(BaseModel):
    """The code and message of a <soap:Fault> element."""

    faultcode: str
    faultstring: str


def _make_parser() -> etree.XMLParser:
    # Responses come from the network: no DTD entities, no external fetches
    return etree.XMLParser(resolve_entities=False, no_network=True)


def parse_soap_response(data: bytes) -> etree._Element:
    """
    Parse raw SOAP response bytes into an lxml Element.

    Args:
        data: The raw response body as received from the server.

    Returns:
        The root element of the parsed XML tree.

    Raises:
        ProtocolParseError: If the XML is malformed.
    """
    try:
        return etree.fromstring(data, parser=_make_parser())
    except (etree.XMLSyntaxError, ValueError) as parse_error:
        reason: str = str(parse_error) or 'document is empty'
    # Raised outside the except block so the lxml error is not chained
    raise ProtocolParseError(reason)


def extract_soap_body(root: etree._Element) -> etree._Element:
    """
    Extract the Body element from a SOAP envelope.

    Args:
        root: The root element of the SOAP envelope.

    Returns:
        The Body element containing the actual response data.

    Raises:
        ValueError: If no Body element is found.
    """
    body: etree._Element | None = root.find('.//soap:Body', namespaces=SOAP_NAMESPACES)

    if body is None:
        raise ValueError('No SOAP Body element found in response')

    return body


def find_soap_fault(root: etree._Element) -> SoapFault | None:
    """
    Look for a SOAP Fault in a response envelope.

    Args:
        root: The root element of the SOAP envelope.

    Returns:
        The fault code and message, or None if the response has no Fault.
    """
    fault: etree._Element | None = root.find('.//soap:Fault', namespaces=SOAP_NAMESPACES)

    if fault is None:
        return None

    return SoapFault(
        faultcode=fault.findtext('faultcode', default='Unknown'),
        faultstring=fault.findtext('faultstring', default='Unknown error'),
    )
