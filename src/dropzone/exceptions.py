"""Exceptions for use in Dropzone.

Every exception carries a stable ``code`` and a ``details`` mapping so callers
can explain a failure (current phase, required phase, counts, ids) without the
engine producing prose.
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

from typing import Any, Dict


# ========== Base Application Exception ==========


class DropzoneException(Exception):
    """Base exception for all Dropzone errors.

    All custom exceptions in the application inherit from this class, so a
    single ``except DropzoneException`` catches every engine failure.
    """

    code = "error"

    def __init__(self, **details: Any) -> None:
        self.details: Dict[str, Any] = details
        super().__init__(self.code, details)

    def __str__(self) -> str:
        if not self.details:
            return self.code
        parts = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.code}({parts})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for transport."""
        return {"code": self.code, "category": self.category, "details": self.details}

    @property
    def category(self) -> str:
        for base in type(self).__mro__:
            if base in _CATEGORIES:
                return _CATEGORIES[base]
        return "error"


# ========== Categories ==========


class ValidationException(DropzoneException):
    """Raised when input has the wrong shape. Nothing has been changed."""

    code = "validation_failed"


class PreconditionFailedException(DropzoneException):
    """Raised when the tournament is not in a state that allows the operation."""

    code = "precondition_failed"


class ConflictException(DropzoneException):
    """Raised when the operation collides with state that already exists.

    The caller should re-fetch the tournament before retrying.
    """

    code = "conflict"


class NotFoundException(DropzoneException):
    """Raised when an id cannot be resolved."""

    code = "not_found"


_CATEGORIES = {
    ValidationException: "validation",
    PreconditionFailedException: "precondition_failed",
    ConflictException: "conflict",
    NotFoundException: "not_found",
}


# ========== Validation ==========


class InvalidResultException(ValidationException):
    """Raised when a game result entry is invalid (placement, kills, team)."""

    code = "invalid_result"


class InvalidRosterException(ValidationException):
    """Raised when a roster selection does not match the game mode."""

    code = "invalid_roster"


class InvalidConfigurationException(ValidationException):
    """Raised when tournament configuration data is invalid."""

    code = "invalid_configuration"


# ========== Preconditions ==========


class InvalidStateTransitionException(PreconditionFailedException):
    """Raised when a status transition is not allowed from the current state."""

    code = "invalid_state_transition"


class InvalidPhaseException(PreconditionFailedException):
    """Raised when an operation is called in a phase that does not allow it."""

    code = "invalid_phase"


class NotInRegistrationPhaseException(PreconditionFailedException):
    code = "not_in_registration_phase"


class LobbyFullException(PreconditionFailedException):
    code = "lobby_full"


class InsufficientTeamsException(PreconditionFailedException):
    code = "insufficient_teams"


class QualifiersDisabledException(PreconditionFailedException):
    code = "qualifiers_disabled"


class LobbiesNotGeneratedException(PreconditionFailedException):
    code = "lobbies_not_generated"


class IncompleteGamesException(PreconditionFailedException):
    code = "incomplete_games"


class LobbyAlreadyProcessedException(PreconditionFailedException):
    """Raised when scores are entered for a lobby whose cut has been made."""

    code = "lobby_already_processed"


class NothingToPublishException(PreconditionFailedException):
    code = "nothing_to_publish"


class CheckInDisabledException(PreconditionFailedException):
    code = "check_in_disabled"


class CheckInNotOpenException(PreconditionFailedException):
    code = "check_in_not_open"


class CheckInClosedException(PreconditionFailedException):
    code = "check_in_closed"


class NotAuthorizedException(PreconditionFailedException):
    """Raised when the actor may not act for the team."""

    code = "not_authorized"


# ========== Conflicts ==========


class ConcurrentModificationException(ConflictException):
    """Raised when the stored tournament changed since it was read."""

    code = "concurrent_modification"


class AlreadyRegisteredException(ConflictException):
    code = "already_registered"


class AlreadyOnWaitlistException(ConflictException):
    code = "already_on_waitlist"


class AlreadyCheckedInException(ConflictException):
    code = "already_checked_in"


class AlreadyGeneratedException(ConflictException):
    code = "already_generated"


class AlreadyProcessedException(ConflictException):
    code = "already_processed"


class GameAlreadyPublishedException(ConflictException):
    code = "game_already_published"


class DuplicateTournamentException(ConflictException):
    code = "duplicate_tournament"


# ========== Not found ==========


class TournamentNotFoundException(NotFoundException):
    code = "tournament_not_found"


class GroupNotFoundException(NotFoundException):
    code = "group_not_found"


class GameNotFoundException(NotFoundException):
    code = "game_not_found"


class NotRegisteredException(NotFoundException):
    code = "not_registered"
