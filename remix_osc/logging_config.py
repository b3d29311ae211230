"""
Centralized Logging Configuration for remix-osc

Every module logs through ``logging.getLogger(__name__)``, which places it
under the ``remix_osc`` logger configured here.

Usage:
    from remix_osc.logging_config import setup_logging
    setup_logging()

    # Then in any module:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Your message here")
"""

import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "remix_osc"


def setup_logging(log_file="logs/remix_osc.log", console_level=logging.INFO, file_level=logging.DEBUG):
    """
    Configure logging for the remix_osc package.

    Args:
        log_file: Path to the log file (default: logs/remix_osc.log); None disables file output
        console_level: Log level for console output (default: INFO)
        file_level: Log level for file output (default: DEBUG, includes every datagram)

    Returns:
        logging.Logger: The package root logger
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers to avoid duplicates
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    log_format = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        # File Handler: rotates at 10MB, keeps 5 backups
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(log_format)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(log_format)
    root_logger.addHandler(console_handler)

    root_logger.debug(
        f"Logging initialized (console={logging.getLevelName(console_level)}, "
        f"file={os.path.abspath(log_file) if log_file else 'disabled'})"
    )
    return root_logger


def get_logger(name):
    """
    Get a logger instance under the remix_osc hierarchy.

    Args:
        name: Module name (typically __name__)

    Returns:
        logging.Logger: Logger instance for the module
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
