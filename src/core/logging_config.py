"""Logging setup: operator console + persistent log files."""

import logging
from pathlib import Path

from src.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
COMBINED_LOG = "combined.log"
ERROR_LOG = "error.log"

# Handler names owned by this module. Other handlers (pytest, uvicorn) are left alone.
_HANDLER_NAMES = ("lobby-console", "lobby-combined", "lobby-error")


def configure_logging(settings: Settings) -> None:
    """
    Attach console, combined and error handlers to the root logger.

    Calling it again (e.g. app created twice in one process) replaces the handlers instead of duplicating them.
    """
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    combined = logging.FileHandler(log_dir / COMBINED_LOG, encoding="utf-8")
    errors = logging.FileHandler(log_dir / ERROR_LOG, encoding="utf-8")
    errors.setLevel(logging.ERROR)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() in _HANDLER_NAMES:
            root.removeHandler(handler)
            handler.close()
    for name, handler in zip(_HANDLER_NAMES, (console, combined, errors)):
        handler.set_name(name)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(settings.LOG_LEVEL.upper())
