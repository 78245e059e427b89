"""
data.py — Feed file loading and JSON writing helpers.

Functions
---------
load_feed(path)
    Load the feed file and return its records, which must be a JSON array of
    objects.

write_json(path, data)
    Write *data* as 2-space indented JSON, creating parent directories.

write_json_files(outputs)
    Write several (path, data) pairs.  Everything is serialized and every
    parent directory created before the first file is opened.
"""

import json
import logging
import os

from feed_classifier.errors import InputFormatError, OutputWriteError

logger = logging.getLogger(__name__)


def load_feed(path):
    logger.info("Loading %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            feed = json.load(f)
    except OSError as e:
        raise InputFormatError(f"Unable to read feed file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputFormatError(f"Feed file {path} is not valid JSON: {e}") from e

    if not isinstance(feed, list):
        raise InputFormatError("Feed file must contain an array")
    for i, record in enumerate(feed):
        if not isinstance(record, dict):
            raise InputFormatError(f"Feed entry {i} is not an object")
    logger.info("  %d records loaded", len(feed))
    return feed


def write_json(path, data) -> None:
    write_json_files([(path, data)])


def write_json_files(outputs) -> None:
    prepared = [(path, json.dumps(data, indent=2, ensure_ascii=False)) for path, data in outputs]
    try:
        for path, _ in prepared:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        for path, text in prepared:
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
            logger.debug("Wrote %s", path)
    except OSError as e:
        raise OutputWriteError(f"Unable to write {e.filename or 'output'}: {e.strerror or e}") from e
