# ewsplumbing/headers.py
"""
Ordered list of raw outgoing HTTP header lines.

Headers are kept exactly as they will go on the wire ("Name: value"), in the
order they were appended. Nothing is ever removed, replaced or de-duplicated.
"""

from collections.abc import Iterator
from typing import NoReturn


class HeaderList:
    """Append-only sequence of raw header strings owned by one request."""

    __slots__ = ('_lines',)

    def __init__(self) -> None:
        self._lines: list[str] = []

    def append(self, header: str) -> None:
        """Append a raw header line such as 'Content-Type: text/xml'."""
        self._lines.append(header)

    def as_fields(self) -> list[tuple[str, str]]:
        """
        Split every header line into a (name, value) pair.

        The split happens at the first colon and surrounding whitespace is
        stripped from both parts.

        Raises:
            ValueError: If a line has no colon or an empty name.
        """
        fields: list[tuple[str, str]] = []
        for line in self._lines:
            name, separator, value = line.partition(':')
            if not separator or not name.strip():
                raise ValueError(f'Malformed header line: {line!r}')
            fields.append((name.strip(), value.strip()))
        return fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __repr__(self) -> str:
        return f'HeaderList({self._lines!r})'

    def __copy__(self) -> NoReturn:
        raise TypeError('HeaderList is owned by a single request and cannot be copied')

    def __deepcopy__(self, _memo: dict[int, object]) -> NoReturn:
        raise TypeError('HeaderList is owned by a single request and cannot be copied')
