"""Tests for XML parsing utilities."""

import pytest
from lxml import etree

from ewsplumbing.exceptions import ProtocolParseError
from ewsplumbing.utils.xml_parser import (
    SoapFault,
    extract_soap_body,
    find_soap_fault,
    parse_soap_response,
)

SUCCESS_RESPONSE = b"""<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
    <soap:Body>
        <response>Success</response>
    </soap:Body>
</soap:Envelope>"""


def _fault_response(inner: str) -> bytes:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
    <soap:Body>
        <soap:Fault>{inner}</soap:Fault>
    </soap:Body>
</soap:Envelope>""".encode()


class TestParseSoapResponse:
    """Tests for parse_soap_response function."""

    def test_parse_valid_soap_response(self) -> None:
        """Test parsing a valid SOAP response."""
        root = parse_soap_response(SUCCESS_RESPONSE)

        assert etree.QName(root).localname == 'Envelope'

    def test_parse_malformed_xml_raises_error(self) -> None:
        """Test that malformed XML raises ProtocolParseError."""
        with pytest.raises(ProtocolParseError):
            parse_soap_response(b'<invalid><xml>')

    def test_parse_empty_input_raises_error(self) -> None:
        """Test that empty input raises ProtocolParseError."""
        with pytest.raises(ProtocolParseError):
            parse_soap_response(b'')

    def test_external_entities_are_not_resolved(self) -> None:
        """Test that a local file entity is never expanded."""
        xml = b"""<?xml version="1.0"?>
<!DOCTYPE r [<!ENTITY xxe SYSTEM "file:///etc/passwd">]>
<r>&xxe;</r>"""

        root = parse_soap_response(xml)

        assert 'root:' not in (root.text or '')


class TestExtractSoapBody:
    """Tests for extract_soap_body function."""

    def test_extract_body_from_valid_envelope(self) -> None:
        """Test extracting body from a valid SOAP envelope."""
        body = extract_soap_body(parse_soap_response(SUCCESS_RESPONSE))

        assert etree.QName(body).localname == 'Body'

    def test_extract_body_raises_error_when_missing(self) -> None:
        """Test that missing Body element raises ValueError."""
        xml = b"""<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
    <soap:Header/>
</soap:Envelope>"""

        with pytest.raises(ValueError, match='No SOAP Body element found'):
            extract_soap_body(parse_soap_response(xml))


class TestFindSoapFault:
    """Tests for find_soap_fault function."""

    def test_no_fault_returns_none(self) -> None:
        """Test that a response without fault yields None."""
        assert find_soap_fault(parse_soap_response(SUCCESS_RESPONSE)) is None

    def test_fault_is_reported(self) -> None:
        """Test that a SOAP fault's code and message are extracted."""
        root = parse_soap_response(
            _fault_response(
                '<faultcode>soap:Client</faultcode>'
                '<faultstring>The request failed schema validation</faultstring>'
            )
        )

        assert find_soap_fault(root) == SoapFault(
            faultcode='soap:Client',
            faultstring='The request failed schema validation',
        )

    def test_fault_with_missing_faultcode(self) -> None:
        """Test handling SOAP fault with missing faultcode."""
        root = parse_soap_response(
            _fault_response('<faultstring>Something went wrong</faultstring>')
        )

        fault = find_soap_fault(root)

        assert fault is not None
        assert fault.faultcode == 'Unknown'
        assert fault.faultstring == 'Something went wrong'

    def test_fault_with_missing_faultstring(self) -> None:
        """Test handling SOAP fault with missing faultstring."""
        root = parse_soap_response(_fault_response('<faultcode>soap:Server</faultcode>'))

        fault = find_soap_fault(root)

        assert fault is not None
        assert fault.faultcode == 'soap:Server'
        assert fault.faultstring == 'Unknown error'
