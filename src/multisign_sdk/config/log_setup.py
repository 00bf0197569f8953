"""
Logging setup for applications built on the SDK
"""

import json
import logging
from typing import Optional

from .settings import LoggingConfig

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonLineFormatter(logging.Formatter):
    """Formats records as one JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'time': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(config: Optional[LoggingConfig] = None,
                      logger_name: str = 'multisign_sdk') -> logging.Logger:
    """
    Configure the SDK logger hierarchy.

    Args:
        config: Level and formatter choice; INFO plain text when omitted
        logger_name: Root of the hierarchy to configure

    Returns:
        logging.Logger: The configured logger
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(logger_name)
    logger.setLevel(config.level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, '_multisign_handler', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonLineFormatter() if config.structured else logging.Formatter(PLAIN_FORMAT))
    handler._multisign_handler = True
    logger.addHandler(handler)
    return logger
