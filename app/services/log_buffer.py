"""
In-memory log capture for the `debug logs` shell command.

A LogBuffer is a regular logging handler attached to the "app" logger, so
every module logging through logging.getLogger(__name__) ends up in it.
"""

import logging
from collections import deque
from typing import Deque, List, Optional

from app.config import LOG_BUFFER_SIZE, LOG_LEVEL

BUFFER_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class LogBuffer(logging.Handler):
    """Keeps the most recent log records, oldest dropped first"""

    def __init__(self, capacity: int = LOG_BUFFER_SIZE, level: int = logging.DEBUG):
        super().__init__(level)
        self.records: Deque[logging.LogRecord] = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter(BUFFER_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def entries(self, level: Optional[int] = None) -> List[str]:
        """
        Formatted buffered records.

        Args:
            level: Only include records at or above this level

        Returns:
            List of formatted lines, oldest first
        """
        return [
            self.format(record)
            for record in self.records
            if level is None or record.levelno >= level
        ]

    def clear(self) -> None:
        self.records.clear()


def install_log_buffer(logger_name: str = "app", capacity: int = LOG_BUFFER_SIZE) -> LogBuffer:
    """
    Attach a LogBuffer to a logger, reusing an existing one.

    Args:
        logger_name: Logger to capture (default: the whole app package)
        capacity: Maximum number of records kept

    Returns:
        The installed LogBuffer
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers:
        if isinstance(handler, LogBuffer):
            return handler

    if logger.level == logging.NOTSET:
        logger.setLevel(LOG_LEVEL)

    buffer = LogBuffer(capacity)
    logger.addHandler(buffer)
    return buffer
