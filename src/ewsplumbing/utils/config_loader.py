# ewsplumbing/utils/config_loader.py
"""
Configuration loader with Pydantic validation.

Reads a YAML file describing the Exchange Web Services endpoint, the account
to authenticate with, transport behaviour and logging, and validates it into
typed models before any request is made.

- Models mirror the layout of config.yaml one-to-one
- Validation happens at load time so a bad file fails before the first request
- The password is a SecretStr and never shows up in reprs or logs
- Log levels accept either names ("DEBUG") or numbers (10)
"""

import logging
from pathlib import Path
from typing import Any, Literal, cast

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

# Set up a logger for this module
logger: logging.Logger = logging.getLogger(__name__)

LogLevelName = Literal['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

_NUMERIC_LOG_LEVELS: frozenset[int] = frozenset({10, 20, 30, 40, 50})


class EwsSection(BaseModel):
    """
    Schema for the 'ews' section of config.yaml.

    Endpoint and NTLM account used for every request.
    """

    model_config = ConfigDict(extra='forbid')
    endpoint_url: HttpUrl = Field(
        ...,
        description='Full URL of the EWS endpoint, e.g. https://mail.example.com/EWS/Exchange.asmx',
    )

    username: str = Field(..., min_length=1, description='Account name, without domain.')

    password: SecretStr = Field(..., description='Account password.')

    domain: str = Field(default='', description='Windows domain of the account.')

    @field_validator('password')
    @classmethod
    def password_not_empty(cls, v: SecretStr) -> SecretStr:
        """Reject an empty password; SecretStr hides the value, so unwrap it to check."""
        if not v.get_secret_value():
            raise ValueError('Password cannot be empty')
        return v


class ClientSection(BaseModel):
    """
    Schema for the 'client' section of config.yaml.

    Transport settings applied to every request. There is deliberately no
    retry setting: failed requests are reported, never repeated.
    """

    model_config = ConfigDict(extra='forbid')
    request_timeout: tuple[float, float] = Field(
        default=(10.0, 30.0),
        description='HTTP timeouts in seconds: [connect_timeout, read_timeout].',
    )

    verify_ssl: bool = Field(
        default=True,
        description='Verify the server certificate. Only disable against test '
        'servers with self-signed certificates.',
    )

    verbose_logging: bool = Field(
        default=False,
        description='Log request and response headers at DEBUG level. '
        'Authorization values are always redacted.',
    )

    @field_validator('request_timeout')
    @classmethod
    def validate_timeout_values(cls, v: tuple[float, float]) -> tuple[float, float]:
        """Both timeouts must be positive and connect must not exceed read."""
        connect_timeout: float
        read_timeout: float
        connect_timeout, read_timeout = v

        if connect_timeout <= 0:
            raise ValueError(f'Connect timeout must be positive, got {connect_timeout}')

        if read_timeout <= 0:
            raise ValueError(f'Read timeout must be positive, got {read_timeout}')

        if connect_timeout > read_timeout:
            raise ValueError(
                f'Connect timeout ({connect_timeout}s) should not exceed '
                f'read timeout ({read_timeout}s)'
            )

        return v


class LoggingSection(BaseModel):
    """
    Schema for the 'logging' section of config.yaml.

    Console logging is always on; file logging is enabled by giving a path.
    """

    model_config = ConfigDict(extra='forbid')
    console_level: LogLevelName | int = Field(default='INFO')

    file_path: Path | None = Field(default=None)

    file_level: LogLevelName | int | None = Field(default=None)

    @field_validator('console_level', 'file_level')
    @classmethod
    def validate_log_level(
        cls, v: LogLevelName | int | None
    ) -> LogLevelName | int | None:
        """Numeric levels must be one of the standard logging levels."""
        if v is None or isinstance(v, str):
            return v

        if v not in _NUMERIC_LOG_LEVELS:
            raise ValueError(
                f'Numeric log level must be one of {sorted(_NUMERIC_LOG_LEVELS)}, got {v}'
            )
        return v

    @model_validator(mode='after')
    def validate_file_logging_consistency(self) -> 'LoggingSection':
        """A file level needs a file path; a file path without a level logs at DEBUG."""
        if self.file_path is not None and self.file_level is None:
            self.file_level = 'DEBUG'
            logger.warning(
                'file_path provided without file_level. Defaulting to DEBUG for file logging.'
            )

        if self.file_level is not None and self.file_path is None:
            raise ValueError(
                'file_level is specified but file_path is missing. '
                'Both must be provided to enable file logging.'
            )

        return self

    def get_console_level_int(self) -> int:
        """Return console_level as the integer used by the logging module."""
        if isinstance(self.console_level, int):
            return self.console_level
        return cast(int, getattr(logging, self.console_level))

    def get_file_level_int(self) -> int | None:
        """Return file_level as an integer, or None when file logging is off."""
        if self.file_level is None:
            return None
        if isinstance(self.file_level, int):
            return self.file_level
        return cast(int, getattr(logging, self.file_level))


class EwsPlumbingConfig(BaseModel):
    """
    Root configuration model.

    Usage:
        config = load_config()
        endpoint = config.ews.endpoint_url
        timeout = config.client.request_timeout
    """

    model_config = ConfigDict(extra='forbid')
    ews: EwsSection
    client: ClientSection = Field(default_factory=ClientSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)


def _get_default_config_path() -> Path:
    """Return ewsplumbing/config/config.yaml, resolved from this file's location."""
    return Path(__file__).resolve().parent.parent / 'config' / 'config.yaml'


def load_config(config_path: Path | str | None = None) -> EwsPlumbingConfig:
    """
    Load, parse, and validate a configuration file.

    Args:
        config_path: Path to the YAML file. Defaults to the config.yaml
                     shipped inside the package.

    Returns:
        The validated configuration.

    Raises:
        FileNotFoundError: The config file does not exist.
        yaml.YAMLError: The file is not valid YAML.
        ValidationError: The YAML is valid but the configuration is not.
    """
    path_obj: Path = Path(config_path) if config_path else _get_default_config_path()

    logger.debug('Resolving configuration from: %s', path_obj)

    if not path_obj.exists():
        error_msg: str = f'Configuration file not found at: {path_obj}'
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    try:
        with open(path_obj, encoding='utf-8') as f:
            raw_config: dict[str, Any] = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error('Failed to parse YAML config file: %s', e)
        raise

    try:
        config = EwsPlumbingConfig(**raw_config)
        logger.debug('Configuration validated successfully.')
        return config
    except ValidationError as e:
        logger.error('Configuration validation failed: %s', e)
        raise
