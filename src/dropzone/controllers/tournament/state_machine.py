"""Tournament lifecycle.

Statuses move ``registration -> locked -> ongoing -> completed``; a locked
tournament may be reopened for registration. Every engine operation asks this
module whether it is legal in the current status before touching anything.
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

from datetime import datetime
from typing import Iterable, Optional

from dropzone.constants import (
    STATUS_COMPLETED,
    STATUS_LOCKED,
    STATUS_ONGOING,
    STATUS_REGISTRATION,
    STATUS_TRANSITIONS,
)
from dropzone.exceptions import (
    CheckInClosedException,
    CheckInDisabledException,
    CheckInNotOpenException,
    InsufficientTeamsException,
    InvalidPhaseException,
    InvalidStateTransitionException,
    LobbiesNotGeneratedException,
)
from dropzone.models.tournament import CheckInSettings, Tournament
from dropzone.utils import parse_timestamp, setup_logger, utcnow

logger = setup_logger(__name__)

CHECK_IN_STATUSES = (STATUS_REGISTRATION, STATUS_LOCKED)


class TournamentStateMachine:
    """Guards and performs tournament status changes.

    The machine holds no state of its own; the status lives on the
    Tournament it is handed.
    """

    def transition(self, tournament: Tournament, requested: str) -> None:
        """Move a tournament to ``requested``.

        Raises:
            InvalidStateTransitionException: If the move is not in the table
        """
        current = tournament.status
        if requested not in STATUS_TRANSITIONS.get(current, ()):
            raise InvalidStateTransitionException(
                tournament_id=tournament.id, current=current, requested=requested
            )
        tournament.status = requested
        logger.info(f"{tournament.name}: {current} -> {requested}")

    def require(
        self, tournament: Tournament, allowed: Iterable[str], operation: str
    ) -> None:
        """Fail unless the tournament is in one of the ``allowed`` statuses.

        Raises:
            InvalidPhaseException: Naming the current and allowed statuses
        """
        allowed = tuple(allowed)
        if tournament.status not in allowed:
            raise InvalidPhaseException(
                tournament_id=tournament.id,
                operation=operation,
                current=tournament.status,
                allowed=list(allowed),
            )

    def lock(self, tournament: Tournament) -> None:
        """Close registration.

        Raises:
            InvalidStateTransitionException: Unless in registration
            InsufficientTeamsException: With no registered team
            LobbiesNotGeneratedException: With qualifiers but no lobbies
        """
        if tournament.status != STATUS_REGISTRATION:
            raise InvalidStateTransitionException(
                tournament_id=tournament.id,
                current=tournament.status,
                requested=STATUS_LOCKED,
            )
        if not tournament.registrations:
            raise InsufficientTeamsException(
                tournament_id=tournament.id, total_teams=0, required=1
            )
        if tournament.config.has_qualifiers and not tournament.lobbies_generated:
            raise LobbiesNotGeneratedException(tournament_id=tournament.id)
        self.transition(tournament, STATUS_LOCKED)

    def unlock(self, tournament: Tournament) -> None:
        """Reopen registration.

        Raises:
            InvalidStateTransitionException: Unless locked
        """
        if tournament.status != STATUS_LOCKED:
            raise InvalidStateTransitionException(
                tournament_id=tournament.id,
                current=tournament.status,
                requested=STATUS_REGISTRATION,
            )
        self.transition(tournament, STATUS_REGISTRATION)

    def start(self, tournament: Tournament) -> None:
        """Mark the finals as under way; no-op once ongoing."""
        if tournament.status == STATUS_LOCKED:
            self.transition(tournament, STATUS_ONGOING)

    def complete_if_finished(self, tournament: Tournament) -> bool:
        """Complete an ongoing tournament once all finals games are in.

        Returns:
            True if the tournament moved to completed
        """
        if (
            tournament.status == STATUS_ONGOING
            and tournament.completed_games_count >= tournament.config.number_of_games
        ):
            self.transition(tournament, STATUS_COMPLETED)
            return True
        return False

    def require_check_in_open(
        self,
        tournament: Tournament,
        window: Optional[CheckInSettings] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Check that a team may check in right now.

        Args:
            tournament: The tournament
            window: Window to test; defaults to the tournament-wide one
            now: Current instant; defaults to the wall clock

        Raises:
            InvalidPhaseException: Outside registration and locked
            CheckInDisabledException: If check-in is turned off
            CheckInNotOpenException: Before the window opens
            CheckInClosedException: After the window closes
        """
        self.require(tournament, CHECK_IN_STATUSES, "check_in")

        window = window or tournament.config.check_in
        if not window.enabled:
            raise CheckInDisabledException(tournament_id=tournament.id)

        now = parse_timestamp(now) if now is not None else utcnow()
        if window.opens_at is not None and now < window.opens_at:
            raise CheckInNotOpenException(
                tournament_id=tournament.id,
                opens_at=window.opens_at.isoformat(),
                now=now.isoformat(),
            )
        if window.closes_at is not None and now > window.closes_at:
            raise CheckInClosedException(
                tournament_id=tournament.id,
                closes_at=window.closes_at.isoformat(),
                now=now.isoformat(),
            )
