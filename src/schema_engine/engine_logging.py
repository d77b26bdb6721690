import logging
import os
import sys
import traceback
from typing import Optional

from .config import LOGGER_LEVEL

# Convert the string to a logging level
env_log_level = getattr(logging, LOGGER_LEVEL, logging.INFO)


class CustomFormatter(logging.Formatter):
    LEVELNAME_MAP = {
        'WARNING': 'WARN',
        'INFO': 'INFO',
        'DEBUG': 'DEBUG',
        'ERROR': 'ERROR',
        'CRITICAL': 'CRIT',
    }

    def format(self, record):
        if record.levelname in self.LEVELNAME_MAP:
            record.levelname = self.LEVELNAME_MAP[record.levelname]
        return super().format(record)


# Generic logger creation function to be used by all modules
def create_logger(name: str, level: Optional[int] = None, propagate: bool = False) -> logging.Logger:
    _level = level if level is not None else env_log_level
    # check if there is a specific log level for the module
    module_log_level = os.getenv(f'LOGGER_LEVEL.{name}')
    if module_log_level:
        _level = getattr(logging, module_log_level.upper(), _level)

    logger = logging.getLogger(name)
    logger.setLevel(_level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = CustomFormatter('%(asctime)s - %(levelname)-5s: %(name)s - %(message)s (file: %(filename)s, line: %(lineno)d)')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = propagate
    return logger


def log_exception(logger: logging.Logger, message: str, exception: Exception) -> None:
    logger.error(f"{message}: {exception}")
    logger.debug(traceback.format_exc())
