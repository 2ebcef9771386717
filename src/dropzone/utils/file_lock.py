"""Advisory file locks for tournament files shared between processes.

All access to a data directory goes through these locks; a process that
writes tournament files by other means is not protected.
"""

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

import fcntl
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from dropzone.utils import setup_logger

logger = setup_logger(__name__)

LOCK_SUFFIX = ".lock"


def lock_path_for(file_path: Union[str, Path]) -> Path:
    """Sidecar lock file guarding ``file_path``."""
    file_path = Path(file_path)
    return file_path.with_name(file_path.name + LOCK_SUFFIX)


@contextmanager
def file_lock(file_path: Union[str, Path], exclusive: bool = True) -> Iterator[None]:
    """Hold an advisory lock on ``file_path`` for the duration of the block.

    The lock is taken on a sidecar ``.lock`` file so the tournament file can
    be swapped out with ``os.replace`` while the lock is held. Writers take
    the exclusive lock; readers take the shared one and only wait for
    writers.

    Args:
        file_path: Tournament file to guard
        exclusive: Exclusive (write) lock if True, shared (read) lock otherwise

    Usage:
        with file_lock(path):
            save(path, data)
    """
    lock_path = lock_path_for(file_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    mode = "exclusive" if exclusive else "shared"

    with open(lock_path, "a") as handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        logger.debug(f"Holding {mode} lock on {file_path}")
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
            logger.debug(f"Released {mode} lock on {file_path}")
