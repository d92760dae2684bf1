# todo_api/logging_setup.py

from __future__ import annotations

import logging
import sys

_NOISY_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "passlib")


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure the root logger with a single console handler.

    Safe to call more than once: handlers installed by a previous call are
    replaced rather than duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    for h in list(root.handlers):
        if getattr(h, "_todo_api_handler", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler._todo_api_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # Third-party clients are chatty at INFO/DEBUG.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
