"""
filestore/core/logger.py

Process-wide logging for the upload service.

Records go to stdout as one line each:

    2024-05-01 12:00:00 | INFO     | filestore.services.upload_service | Upload committed ...

The level comes from LOG_LEVEL when it is set, otherwise DEBUG when
DEBUG=true and INFO in every other case. Modules obtain their logger via:

    from filestore.core.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional, TextIO

from filestore.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that log every request or multipart part at INFO/DEBUG.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "multipart", "python_multipart")

_HANDLER_NAME = "filestore"


def resolve_level(name: Optional[str] = None, debug: Optional[bool] = None) -> int:
    """
    Turn a level name such as "warning" into a logging constant.

    An empty or unknown name falls back to the DEBUG flag.
    """
    name = settings.log_level if name is None else name
    debug = settings.debug if debug is None else debug

    level = logging.getLevelName((name or "").strip().upper())
    if isinstance(level, int):
        return level
    return logging.DEBUG if debug else logging.INFO


def configure_logging(level: Optional[int] = None, stream: Optional[TextIO] = None) -> int:
    """
    Install the stdout handler on the root logger and return the level used.

    Calling it again only adjusts the level. If another handler is already
    attached (pytest's log capture, for instance) no handler is added.
    """
    level = resolve_level() if level is None else level
    root = logging.getLogger()

    ours = [h for h in root.handlers if h.get_name() == _HANDLER_NAME]
    if not root.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root.addHandler(handler)
        ours.append(handler)

    for handler in ours:
        handler.setLevel(level)
    if ours:
        root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return level


configure_logging()


def get_logger(name: str) -> logging.Logger:
    """Return the named logger; configuration lives on the root."""
    return logging.getLogger(name)
