# ewsplumbing/utils/logger.py
"""
Logging configuration for the ewsplumbing package.

Every module logs through logging.getLogger(__name__), so configuring the
'ewsplumbing' package logger once is enough to control all of them.
"""

import logging
from pathlib import Path
from sys import stdout

PACKAGE_LOGGER_NAME: str = 'ewsplumbing'

LOG_FORMAT: str = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'
DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    logging_level: int = logging.INFO,
    log_file_path: Path | None = None,
) -> logging.Logger:
    """
    Set up logging for the ewsplumbing package.

    Idempotent: a second call only updates the level of the handler that is
    already installed.

    Args:
        logging_level: The logging level to use. Defaults to INFO.
        log_file_path: Optional log file. Logs go to stdout when None.

    Returns:
        The package-level logger.

    Example:
        >>> setup_logger(logging.DEBUG)  # shows verbose wire logging too
    """
    package_logger: logging.Logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(logging_level)

    if package_logger.handlers:
        for existing_handler in package_logger.handlers:
            existing_handler.setLevel(logging_level)
        return package_logger

    if log_file_path is not None:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(
            filename=str(log_file_path),
            mode='a',
            encoding='utf-8',
        )
    else:
        handler = logging.StreamHandler(stdout)

    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(logging_level)
    package_logger.addHandler(handler)

    if log_file_path is not None:
        package_logger.info('Logging to file: %s', log_file_path)

    return package_logger
