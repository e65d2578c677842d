"""Pytest configuration and shared fixtures for ewsplumbing tests."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import requests
import yaml

from ewsplumbing.transport import TransportHandle, TransportOption
from ewsplumbing.utils import EwsPlumbingConfig
from ewsplumbing.utils.logger import PACKAGE_LOGGER_NAME

CREATE_ITEM_RESPONSE: bytes = b"""<?xml version="1.0" encoding="utf-8"?>
<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">
    <s:Header>
        <h:ServerVersionInfo MajorVersion="15" MinorVersion="0" MajorBuildNumber="847" MinorBuildNumber="31" Version="V2_8" xmlns:h="http://schemas.microsoft.com/exchange/services/2006/types"/>
    </s:Header>
    <s:Body>
        <m:CreateItemResponse xmlns:m="http://schemas.microsoft.com/exchange/services/2006/messages" xmlns:t="http://schemas.microsoft.com/exchange/services/2006/types">
            <m:ResponseMessages>
                <m:CreateItemResponseMessage ResponseClass="Success">
                    <m:ResponseCode>NoError</m:ResponseCode>
                    <m:Items>
                        <t:Message>
                            <t:ItemId Id="AAMkAGRhYmQ5Njg0" ChangeKey="CQAAABYAAADKOL2x"/>
                        </t:Message>
                    </m:Items>
                </m:CreateItemResponseMessage>
            </m:ResponseMessages>
        </m:CreateItemResponse>
    </s:Body>
</s:Envelope>
"""


class RecordingHandle(TransportHandle):
    """TransportHandle that remembers every option set on it, in order."""

    def __init__(self, session_factory: Callable[[], requests.Session]) -> None:
        super().__init__(session_factory)
        self.recorded: list[tuple[str, Any]] = []

    def set_option(self, option: TransportOption | str, value: Any) -> None:
        self.recorded.append((str(option), value))
        super().set_option(option, value)

    def recorded_names(self) -> list[str]:
        return [name for name, _ in self.recorded]

    def last_value(self, option: TransportOption) -> Any:
        for name, value in reversed(self.recorded):
            if name == option.value:
                return value
        raise KeyError(option)


def build_fake_response(
    status_code: int = 200, body: bytes = CREATE_ITEM_RESPONSE, chunk_size: int = 64
) -> Mock:
    """Create a streamed requests.Response stand-in that yields body in chunks."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.reason = 'OK'
    response.headers = {'Content-Type': 'text/xml; charset=utf-8'}
    response.iter_content.return_value = iter(
        [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)]
    )
    return response


@pytest.fixture
def fake_response_factory() -> Callable[..., Mock]:
    """Expose build_fake_response to tests that need custom responses."""
    return build_fake_response


@pytest.fixture
def fake_session() -> Mock:
    """Create a requests.Session stand-in returning a 200 EWS response."""
    session = Mock(spec=requests.Session)
    session.request.return_value = build_fake_response()
    return session


@pytest.fixture
def recording_handle(fake_session: Mock) -> RecordingHandle:
    """Create a recording transport handle backed by the fake session."""
    return RecordingHandle(session_factory=lambda: fake_session)


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """Raw configuration as it would appear in config.yaml."""
    return {
        'ews': {
            'endpoint_url': 'https://example.test/ews',
            'username': 'alice',
            'password': 'secret',
            'domain': 'CORP',
        },
        'client': {
            'request_timeout': [10, 30],
            'verify_ssl': True,
            'verbose_logging': False,
        },
        'logging': {
            'console_level': 'INFO',
        },
    }


@pytest.fixture
def sample_config(sample_config_dict: dict[str, Any]) -> EwsPlumbingConfig:
    """Create a sample EwsPlumbingConfig for testing."""
    return EwsPlumbingConfig.model_validate(sample_config_dict)


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config_dict: dict[str, Any]) -> Path:
    """Write the sample configuration to a temporary YAML file."""
    config_path: Path = tmp_path / 'config.yaml'
    config_path.write_text(yaml.safe_dump(sample_config_dict, sort_keys=False))
    return config_path


@pytest.fixture
def create_item_response() -> bytes:
    """Raw body of a successful EWS CreateItem response."""
    return CREATE_ITEM_RESPONSE


@pytest.fixture
def clean_package_logger() -> Iterator[logging.Logger]:
    """Remove handlers added to the package logger during a test."""
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    saved_level = package_logger.level
    saved_handlers = list(package_logger.handlers)
    package_logger.handlers.clear()
    yield package_logger
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers[:] = saved_handlers
    package_logger.setLevel(saved_level)
