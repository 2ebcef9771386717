"""Shared helpers: logging setup and id generation."""

# Dropzone
# Copyright (C) 2025  Dropzone developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional

from dateutil.parser import isoparse

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ROOT_LOGGER_NAME = "dropzone"


def setup_logger(name: str) -> logging.Logger:
    """Get a module logger under the ``dropzone`` hierarchy.

    Handlers live on the package root logger only, so module loggers just
    propagate to it.
    """
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", stream=None) -> None:
    """Attach a console handler to the package root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        stream: Output stream, stdout by default
    """
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    root.addHandler(handler)


def generate_id(prefix: Optional[str] = None) -> str:
    """Generate a unique id, optionally prefixed (``lobby_3f2a...``)."""
    value = uuid.uuid4().hex
    if prefix:
        return f"{prefix.lower()}_{value}"
    return value


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a stored timestamp into an aware datetime.

    Accepts ``None``, ``datetime`` objects and ISO 8601 strings. Naive values
    are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = isoparse(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for JSON storage."""
    if value is None:
        return None
    return value.isoformat()
