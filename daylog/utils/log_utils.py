# daylog/utils/log_utils.py

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Optional, Union


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(level: Union[int, str] = logging.INFO, log_dir: Optional[Path] = None):
    """
    Configure root logger with:
     - RotatingFileHandler writing to ~/.daylog/logs/daylog.log
     - StreamHandler to console (warnings and above unless level is lower)
    Idempotent: calling multiple times won't add duplicate handlers.
    `level` can be numeric or a name such as "DEBUG".
    """
    level = _resolve_level(level)
    log_dir = log_dir or Path.home() / ".daylog" / "logs"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"WARNING: Could not create log directory {log_dir}: {e}")
        _configure_console_logging(level)
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    existing_handlers = list(root_logger.handlers)

    # 1) RotatingFileHandler: only add if not already present for our log file
    file_log_path = log_dir / "daylog.log"
    add_file = True
    for h in existing_handlers:
        if isinstance(h, RotatingFileHandler):
            base = getattr(h, 'baseFilename', None)
            if base and os.path.abspath(base) == os.path.abspath(file_log_path):
                h.setLevel(level)
                add_file = False
                break
    if add_file:
        try:
            file_handler = RotatingFileHandler(
                file_log_path,
                maxBytes=5 * 1024 * 1024,
                backupCount=3
            )
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}")

    # 2) Console handler: only add if not already present
    _configure_console_logging(level)


def _configure_console_logging(level: Union[int, str] = logging.INFO):
    """
    Console logging only; used on its own when the file handler cannot be created.
    """
    level = _resolve_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for h in root_logger.handlers:
        if type(h) is logging.StreamHandler:
            return

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
    console_handler.setLevel(max(level, logging.WARNING))
    root_logger.addHandler(console_handler)
