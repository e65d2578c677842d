"""Tests for HeaderList."""

import copy

import pytest

from ewsplumbing.headers import HeaderList


class TestHeaderList:
    """Tests for the append-only header list."""

    def test_preserves_insertion_order(self) -> None:
        """Test that headers come back in the order they were appended."""
        headers = HeaderList()
        headers.append('Content-Type: text/xml; charset=utf-8')
        headers.append('Accept: text/xml')

        assert list(headers) == ['Content-Type: text/xml; charset=utf-8', 'Accept: text/xml']
        assert len(headers) == 2  # noqa: PLR2004

    def test_keeps_duplicates(self) -> None:
        """Test that identical headers are not de-duplicated."""
        headers = HeaderList()
        headers.append('Accept: text/xml')
        headers.append('Accept: text/xml')

        assert list(headers) == ['Accept: text/xml', 'Accept: text/xml']

    def test_empty_list_is_falsy(self) -> None:
        """Test truthiness of an empty list."""
        assert not HeaderList()

    def test_as_fields_splits_at_first_colon(self) -> None:
        """Test that values containing colons survive the split."""
        headers = HeaderList()
        headers.append('SOAPAction: http://schemas.example.com/Op')

        assert headers.as_fields() == [('SOAPAction', 'http://schemas.example.com/Op')]

    def test_as_fields_rejects_line_without_colon(self) -> None:
        """Test that a malformed header line is reported."""
        headers = HeaderList()
        headers.append('NoColonHere')

        with pytest.raises(ValueError, match='Malformed header'):
            headers.as_fields()

    def test_cannot_be_copied(self) -> None:
        """Test that the list is single-owner."""
        with pytest.raises(TypeError):
            copy.copy(HeaderList())
