"""Tournament repositories.

A repository hands out private copies of a Tournament aggregate and stores
them back with an optimistic version check. Engine operations use
:meth:`TournamentRepository.transaction`, which holds the tournament's lock
for the whole read-modify-write and writes nothing when the block raises.
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

import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, List, Optional

from dropzone.exceptions import (
    ConcurrentModificationException,
    DuplicateTournamentException,
    TournamentNotFoundException,
)
from dropzone.models.tournament import Tournament
from dropzone.utils import setup_logger

logger = setup_logger(__name__)


class TournamentRepository(ABC):
    """Base class for tournament storage.

    Subclasses provide locking and raw read/write; this class builds the
    version check and the transaction on top of them. ``_read`` and
    ``_write`` are only called while the tournament's lock is held.
    """

    @abstractmethod
    def _locked(self, tournament_id: str) -> ContextManager[None]:
        """Exclusive lock for one tournament id."""

    def _shared(self, tournament_id: str) -> ContextManager[None]:
        """Lock for a plain read; stores with reader locks override this."""
        return self._locked(tournament_id)

    @abstractmethod
    def _read(self, tournament_id: str) -> Optional[Tournament]:
        """Load a private copy, or None if the id is unknown."""

    @abstractmethod
    def _write(self, tournament: Tournament) -> None:
        """Persist a tournament as is."""

    @abstractmethod
    def list_ids(self) -> List[str]:
        """Ids of every stored tournament."""

    def get(self, tournament_id: str) -> Tournament:
        """Load a private copy of a tournament.

        Raises:
            TournamentNotFoundException: If the id is unknown
        """
        with self._shared(tournament_id):
            return self._require(tournament_id)

    def add(self, tournament: Tournament) -> Tournament:
        """Store a new tournament at version 1.

        Raises:
            DuplicateTournamentException: If the id is taken
        """
        with self._locked(tournament.id):
            if self._read(tournament.id) is not None:
                raise DuplicateTournamentException(tournament_id=tournament.id)
            tournament.version = 1
            self._write(tournament)
        logger.debug(f"Added tournament {tournament.id}")
        return tournament

    def save(
        self, tournament: Tournament, expected_version: Optional[int] = None
    ) -> Tournament:
        """Store a modified tournament and bump its version.

        Args:
            tournament: The modified copy
            expected_version: Version the copy was read at; defaults to
                ``tournament.version``

        Raises:
            TournamentNotFoundException: If the id is unknown
            ConcurrentModificationException: If somebody saved in between
        """
        with self._locked(tournament.id):
            return self._save_unlocked(tournament, expected_version)

    @contextmanager
    def transaction(self, tournament_id: str) -> Iterator[Tournament]:
        """Read, yield and write back one tournament under its lock.

        Nothing is written if the block raises.

        Usage:
            with repository.transaction(tournament_id) as tournament:
                tournament.status = "locked"
        """
        with self._locked(tournament_id):
            tournament = self._require(tournament_id)
            expected_version = tournament.version
            yield tournament
            self._save_unlocked(tournament, expected_version)

    def _require(self, tournament_id: str) -> Tournament:
        tournament = self._read(tournament_id)
        if tournament is None:
            raise TournamentNotFoundException(tournament_id=tournament_id)
        return tournament

    def _save_unlocked(
        self, tournament: Tournament, expected_version: Optional[int]
    ) -> Tournament:
        stored = self._require(tournament.id)
        if expected_version is None:
            expected_version = tournament.version
        if stored.version != expected_version:
            raise ConcurrentModificationException(
                tournament_id=tournament.id,
                expected_version=expected_version,
                stored_version=stored.version,
            )
        tournament.version = stored.version + 1
        self._write(tournament)
        logger.debug(f"Saved tournament {tournament.id} at version {tournament.version}")
        return tournament


class InMemoryTournamentRepository(TournamentRepository):
    """Process-local repository keeping deep copies in a dict.

    One re-entrant lock per tournament id serializes writers; different
    tournaments never contend.
    """

    def __init__(self):
        self._tournaments: Dict[str, Tournament] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _locked(self, tournament_id: str) -> ContextManager[None]:
        with self._registry_lock:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = self._locks[tournament_id] = threading.RLock()
        return lock

    def _read(self, tournament_id: str) -> Optional[Tournament]:
        stored = self._tournaments.get(tournament_id)
        return copy.deepcopy(stored) if stored is not None else None

    def _write(self, tournament: Tournament) -> None:
        self._tournaments[tournament.id] = copy.deepcopy(tournament)

    def list_ids(self) -> List[str]:
        return sorted(self._tournaments)
