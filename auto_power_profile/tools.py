import logging
from logging.handlers import RotatingFileHandler
import os
import sys

from auto_power_profile.globals import APP_NAME, LOG_DIR

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(module)s] %(message)s"
ERROR_LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(filename)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ConditionalFormatter(logging.Formatter):
    """
    Shows file name and line number only for ERROR and CRITICAL records.
    """

    def __init__(self) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        self._error_formatter = logging.Formatter(fmt=ERROR_LOG_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.ERROR:
            return self._error_formatter.format(record)
        return super().format(record)


def create_log_dir(log_dir: str = LOG_DIR) -> bool:
    try:
        os.makedirs(log_dir, exist_ok=True)
        return True
    except OSError as e:
        print(f"Unable to create log directory {log_dir}: {e}", file=sys.stderr)
        return False


def setup_logger(debug: bool = False, log_dir: str = LOG_DIR) -> None:
    """Set up logging globally: rotating log file plus stdout."""
    handlers: list[logging.Handler] = []

    if create_log_dir(log_dir):
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"),
            maxBytes=10*1024*1024, # 10MB
            backupCount=1,
            encoding="utf-8"
        )
        file_handler.setFormatter(ConditionalFormatter())
        handlers.append(file_handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(f"[{APP_NAME}] [%(levelname)s] [%(module)s] %(message)s"))
    handlers.append(stream_handler)

    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, handlers=handlers, force=True)
