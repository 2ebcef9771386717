"""JSON file tournament repository.

One ``<tournament_id>.json`` file per tournament. Writers serialize through an
exclusive fcntl lock on a sidecar ``.lock`` file and readers take the shared
one, so several processes can share a data directory. Files are replaced
atomically.
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

import json
import os
import tempfile
from pathlib import Path
from typing import ContextManager, List, Optional, Union

from dropzone.constants import SAVE_FILE_EXTENSION
from dropzone.exceptions import InvalidConfigurationException
from dropzone.models.tournament import Tournament
from dropzone.utils import setup_logger
from dropzone.utils.file_lock import file_lock

from .repository import TournamentRepository

logger = setup_logger(__name__)


class JsonFileTournamentRepository(TournamentRepository):
    """Repository storing each tournament as a JSON document on disk."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, tournament_id: str) -> Path:
        """File holding a tournament.

        Raises:
            InvalidConfigurationException: If the id is not a plain file name
        """
        if not tournament_id or Path(tournament_id).name != tournament_id:
            raise InvalidConfigurationException(
                field="tournament_id", value=tournament_id
            )
        return self.data_dir / f"{tournament_id}{SAVE_FILE_EXTENSION}"

    def _locked(self, tournament_id: str) -> ContextManager[None]:
        return file_lock(self.path_for(tournament_id))

    def _shared(self, tournament_id: str) -> ContextManager[None]:
        return file_lock(self.path_for(tournament_id), exclusive=False)

    def _read(self, tournament_id: str) -> Optional[Tournament]:
        path = self.path_for(tournament_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return Tournament.from_dict(data)

    def _write(self, tournament: Tournament) -> None:
        path = self.path_for(tournament.id)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=f".{tournament.id}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(tournament.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug(f"Wrote {path}")

    def list_ids(self) -> List[str]:
        return sorted(
            path.stem for path in self.data_dir.glob(f"*{SAVE_FILE_EXTENSION}")
        )
