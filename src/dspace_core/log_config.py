# --- src/dspace_core/log_config.py ---
import logging
import os
import sys
from typing import Optional, TextIO, Union

PACKAGE_LOGGER_NAME = "dspace_core"
LOG_LEVEL_ENV_VAR = "DSPACE_CORE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] [%(name)s] %(message)s"


def _coerce_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING")
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'.")
        return resolved
    return level


def setup_logging(level: Union[int, str, None] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configures the package logger to write to stdout (or the given stream).

    Only the `dspace_core` logger is touched; an embedding application keeps
    control of the root logger. When `level` is omitted it is read from the
    DSPACE_CORE_LOG_LEVEL environment variable, defaulting to WARNING.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    # Clear handlers installed by a previous call
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.setLevel(_coerce_level(level))
    package_logger.addHandler(console_handler)
    package_logger.debug("Logging configured.")
    return package_logger
