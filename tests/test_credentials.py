"""Tests for request credentials."""

from typing import Any

import pytest
from pydantic import ValidationError

from ewsplumbing.credentials import Credentials, NtlmCredentials
from ewsplumbing.http_request import HttpRequest
from ewsplumbing.transport import AuthMode, TransportOption

URL = 'https://example.test/ews'


class TestNtlmCredentials:
    """Tests for NtlmCredentials."""

    def test_certify_sets_domain_login_and_ntlm(self, recording_handle: Any) -> None:
        """Test the login string and auth mode written to the transport."""
        credentials = NtlmCredentials(username='alice', password='secret', domain='CORP')
        request = HttpRequest(URL, handle=recording_handle)

        credentials.certify(request)

        assert recording_handle.recorded[1:] == [
            ('userpwd', 'CORP\\alice:secret'),
            ('httpauth', AuthMode.NTLM),
        ]
        assert recording_handle.get_option(TransportOption.HTTPAUTH) is AuthMode.NTLM

    def test_empty_domain_keeps_backslash(self, recording_handle: Any) -> None:
        """Test the login format when no domain is configured."""
        credentials = NtlmCredentials(username='alice', password='secret')
        request = HttpRequest(URL, handle=recording_handle)

        credentials.certify(request)

        assert recording_handle.get_option(TransportOption.USERPWD) == '\\alice:secret'

    def test_certify_requires_request(self) -> None:
        """Test that a missing request is a programming error."""
        credentials = NtlmCredentials(username='alice', password='secret', domain='CORP')

        with pytest.raises(ValueError, match='needs a request'):
            credentials.certify(None)  # type: ignore[arg-type]

    def test_credentials_are_immutable(self) -> None:
        """Test that credentials cannot be changed after construction."""
        credentials = NtlmCredentials(username='alice', password='secret', domain='CORP')

        with pytest.raises(ValidationError):
            credentials.username = 'mallory'  # type: ignore[misc]

    def test_password_is_not_shown(self) -> None:
        """Test that repr and str never reveal the password."""
        credentials = NtlmCredentials(username='alice', password='secret', domain='CORP')

        assert 'secret' not in repr(credentials)
        assert 'secret' not in str(credentials)

    def test_username_is_required(self) -> None:
        """Test that an empty username is rejected."""
        with pytest.raises(ValidationError):
            NtlmCredentials(username='', password='secret', domain='CORP')

    def test_is_a_credentials_variant(self) -> None:
        """Test that NTLM credentials implement the Credentials capability."""
        credentials = NtlmCredentials(username='alice', password='secret', domain='CORP')

        assert isinstance(credentials, Credentials)
