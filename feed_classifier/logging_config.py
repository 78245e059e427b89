"""
logging_config.py — logging setup for the feed_classifier package.

The CLI calls setup_logging() once at startup.  After that, every module uses
logging.getLogger(__name__) normally.

Log format
----------
  2026-02-20 14:32:01 | INFO     | classification | Classifying 12 item(s) with batches of 5...

A StreamHandler (stdout, INFO) is always attached to the root logger.  When a
log path is given (--log-file) a FileHandler (DEBUG) is attached as well, so
retry details and raw classifier errors end up in the file.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_path: str | Path | None = None) -> None:
    """
    Configure the root logger to write to stdout and optionally to *log_path*.

    Calling it again (e.g. in tests) replaces the existing handlers.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any handlers added by a previous call or by basicConfig
    root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_path is not None:
        log_path = Path(log_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
