"""
Logging configuration for the Contact Book API.

``setup_logging`` attaches a console handler and, when a log file is
configured, a size-rotated file handler to the root logger.  The
handlers are named so that a second call (``create_app`` runs once per
test module, uvicorn may configure logging too) replaces neither its own
handlers nor anybody else's.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_HANDLER_NAME = "contact_book.console"
FILE_HANDLER_NAME = "contact_book.file"


def resolve_level(level: Union[str, int, None]) -> int:
    """Turn ``"debug"``, ``"10"`` or ``10`` into a logging level number.

    Unknown names fall back to ``INFO``.
    """
    if isinstance(level, int):
        return level
    text = (level or "").strip()
    if text.isdigit():
        return int(text)
    resolved = logging.getLevelName(text.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def build_handlers(
    logfile: Optional[str] = None,
    max_bytes: int = 0,
    backup_count: int = 0,
) -> List[logging.Handler]:
    """Create the console handler and, for a non-empty ``logfile``, a file handler.

    The file handler rotates once the file reaches ``max_bytes`` and keeps
    ``backup_count`` old files; ``max_bytes == 0`` disables rotation.
    Missing parent directories of ``logfile`` are created.
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    handlers: List[logging.Handler] = [console_handler]

    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
            delay=True,
        )
        file_handler.set_name(FILE_HANDLER_NAME)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    return handlers


def setup_logging(
    level: Union[str, int] = "INFO",
    logfile: Optional[str] = None,
    max_bytes: int = 0,
    backup_count: int = 0,
) -> logging.Logger:
    """Configure the root logger and return it.

    The level is always applied.  Handlers are added only if the root
    logger does not carry ours yet.
    """
    root = logging.getLogger()
    root.setLevel(resolve_level(level))

    installed = {handler.get_name() for handler in root.handlers}
    for handler in build_handlers(logfile, max_bytes, backup_count):
        if handler.get_name() in installed:
            handler.close()
            continue
        root.addHandler(handler)
    return root
