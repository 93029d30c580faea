from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, List, Optional

LOGGER_NAME = "otpbundle"
FILE_HANDLER_NAME = "otpbundle.file"
CONSOLE_HANDLER_NAME = "otpbundle.console"


def owned_handlers(logger: logging.Logger) -> List[logging.Handler]:
    """Handlers attached by setup_logging(); anything else on the logger is foreign."""
    return [h for h in logger.handlers if h.get_name() in (FILE_HANDLER_NAME, CONSOLE_HANDLER_NAME)]


def setup_logging(log_dir: Optional[str] = None, *, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    names = {h.get_name() for h in owned_handlers(logger)}

    if log_dir and FILE_HANDLER_NAME not in names:
        os.makedirs(log_dir, exist_ok=True)
        text_path = os.path.join(log_dir, "otpbundle.log")
        h = RotatingFileHandler(text_path, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
        h.set_name(FILE_HANDLER_NAME)
        h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        logger.addHandler(h)

    if CONSOLE_HANDLER_NAME not in names:
        sh = logging.StreamHandler()
        sh.set_name(CONSOLE_HANDLER_NAME)
        sh.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(sh)

    return logger


def get_logger(logger: Any = None) -> Any:
    """Return the caller-supplied logger, or the package logger."""
    return logger if logger is not None else logging.getLogger(LOGGER_NAME)
