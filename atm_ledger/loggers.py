"""
Logging for the ATM ledger.

Every module logs through ``logger``. Records go to a colored console,
to a rotating file (unless ``ATM_LEDGER_LOG_FILE`` is empty) and, when
``LOKI_URL`` is set, to a Loki push endpoint labelled with the app and
logger name.
"""

import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Final, Optional, Union

import colorlog
import httpx

from configs import LOG_FILE, LOG_LEVEL, LOKI_URL


# =============================================================================
# Formats
# =============================================================================

PLAIN_FORMAT: Final[str] = (
    "%(name)s | %(asctime)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s"
)
COLOR_FORMAT: Final[str] = (
    "%(name)s | %(log_color)s%(asctime)s | %(levelname)s | "
    "%(funcName)s:%(lineno)d | %(message)s"
)
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
MAX_LOG_FILE_SIZE: Final[int] = 5 * 1024 * 1024  # 5 MB
LOG_BACKUP_COUNT: Final[int] = 3
LOKI_TIMEOUT: Final[float] = 2.0

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


# =============================================================================
# Loki
# =============================================================================


def build_loki_payload(line: str, labels: dict[str, str]) -> dict[str, Any]:
    """Wrap one formatted line in a Loki push body stamped with the current time."""
    return {
        "streams": [
            {
                "stream": labels,
                "values": [[str(time.time_ns()), line]],
            }
        ]
    }


class LokiHandler(logging.Handler):
    """
    Pushes each record to Loki over one shared HTTP client.

    Records are labelled with ``app``, ``logger`` and ``level``.
    """

    def __init__(self, url: str, app: str) -> None:
        super().__init__()
        self.url = url
        self.app = app
        self._client = httpx.Client(timeout=LOKI_TIMEOUT)

    def emit(self, record: logging.LogRecord) -> None:
        labels = {"app": self.app, "logger": record.name, "level": record.levelname}
        try:
            payload = build_loki_payload(self.format(record), labels)
            self._client.post(self.url, json=payload)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        self._client.close()
        super().close()


# =============================================================================
# Logger Factory
# =============================================================================


def _file_handler(log_file: str) -> RotatingFileHandler:
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_FILE_SIZE,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


def get_logger(
    name: str,
    app: str = "atm_ledger",
    log_file: Optional[str] = LOG_FILE,
    level: Union[int, str] = LOG_LEVEL,
    loki_url: Optional[str] = LOKI_URL,
) -> logging.Logger:
    """
    Return the named logger, attaching handlers on first use.

    Args:
        name: Logger name.
        app: ``app`` label for Loki streams.
        log_file: Rotating log file, or None/empty for console only.
        level: Level name or number.
        loki_url: Loki push URL, or None to keep logs local.
    """
    logger_instance = logging.getLogger(name)
    logger_instance.setLevel(level)

    if logger_instance.handlers:
        return logger_instance

    plain = logging.Formatter(fmt=PLAIN_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(
        colorlog.ColoredFormatter(COLOR_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS)
    )
    handlers: list[logging.Handler] = [console]

    if log_file:
        handlers.append(_file_handler(log_file))
    if loki_url:
        handlers.append(LokiHandler(loki_url, app))

    for handler in handlers:
        handler.setLevel(level)
        if handler is not console:
            handler.setFormatter(plain)
        logger_instance.addHandler(handler)

    return logger_instance


logger = get_logger(name="ATM_LEDGER")
