# cnf_normalizer/logger.py

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional, Union

import colorlog


def setup_logger(
    log_level: Union[int, str] = logging.WARNING,
    log_file: Optional[str] = None,
    use_color: bool = True,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    logger = logging.getLogger("cnf_normalizer")
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.WARNING
    logger.setLevel(log_level)

    # Clear existing handlers if rerun
    if logger.hasHandlers():
        logger.handlers.clear()

    # stdout carries the step transcript, so log records go to stderr
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(log_level)
    if use_color:
        ch.setFormatter(colorlog.ColoredFormatter(
            fmt="%(log_color)s[%(levelname)s]%(reset)s %(name)s - %(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        ))
    else:
        ch.setFormatter(logging.Formatter("[%(levelname)s] %(name)s - %(message)s"))
    logger.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        fh.setLevel(log_level)
        fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s"))
        logger.addHandler(fh)

    logger.propagate = False
    return logger
