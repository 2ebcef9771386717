"""TournamentEngine - the organizer-facing operations.

This is the primary interface for running a tournament. Every operation loads
the tournament aggregate inside one repository transaction, validates fully,
mutates the private copy through the controllers and writes it back. A
failing operation raises a :class:`~dropzone.exceptions.DropzoneException`
and leaves the stored tournament untouched.
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

import random
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

from dropzone.config import EngineSettings, get_settings
from dropzone.constants import (
    DEFAULT_MODE,
    STATUS_COMPLETED,
    STATUS_LOCKED,
    STATUS_ONGOING,
    STATUS_REGISTRATION,
)
from dropzone.controllers.tournament import (
    CHECK_IN_STATUSES,
    LobbyPlan,
    ProcessResult,
    ResultRecorder,
    TournamentStateMachine,
    aggregate_standings,
    apply_publish,
    assign_teams,
    group_name,
    live_standings,
    plan_lobbies,
    process_lobby,
    publish,
    reset,
)
from dropzone.exceptions import (
    AlreadyCheckedInException,
    AlreadyGeneratedException,
    AlreadyOnWaitlistException,
    AlreadyRegisteredException,
    LobbiesNotGeneratedException,
    LobbyFullException,
    NotAuthorizedException,
    NotInRegistrationPhaseException,
    NotRegisteredException,
    QualifiersDisabledException,
)
from dropzone.models.tournament import (
    CheckInSettings,
    Game,
    Lobby,
    Registration,
    RosterEntry,
    Standing,
    Tournament,
    TournamentConfig,
    WaitlistEntry,
)
from dropzone.storage import InMemoryTournamentRepository, TournamentRepository
from dropzone.type_hints import ResultEntries
from dropzone.utils import generate_id, parse_timestamp, setup_logger, utcnow
from dropzone.utils.validation import validate_roster_strict

logger = setup_logger(__name__)

SCORE_ENTRY_STATUSES = (STATUS_LOCKED, STATUS_ONGOING)
PUBLISH_STATUSES = (STATUS_LOCKED, STATUS_ONGOING, STATUS_COMPLETED)


class TournamentEngine:
    """Qualification and standings engine.

    The engine coordinates specialized components:
    - TournamentStateMachine: lifecycle and phase guards
    - ResultRecorder: score entry and validation
    - lobby partitioner and qualification processor: the qualifier phase
    - scoreboard: publishing finals games

    Args:
        repository: Where tournaments live; defaults to an in-memory store
        settings: Process settings; defaults to :func:`get_settings`
    """

    def __init__(
        self,
        repository: Optional[TournamentRepository] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.repository = repository or InMemoryTournamentRepository()
        self.settings = settings or get_settings()
        self.state_machine = TournamentStateMachine()
        self.recorder = ResultRecorder()

    # ========== Tournament ==========

    def create_tournament(
        self,
        config: Union[TournamentConfig, Mapping[str, Any]],
        tournament_id: Optional[str] = None,
        starts_at: Optional[datetime] = None,
    ) -> Tournament:
        """Create a tournament in the registration phase.

        Args:
            config: A TournamentConfig, or a mapping in its ``to_dict`` shape;
                fields missing from a mapping take the engine settings
            tournament_id: Id to use; generated when omitted
            starts_at: Start time; when given and the config has no explicit
                check-in window, one is derived from the settings

        Raises:
            InvalidConfigurationException: On an invalid configuration
            DuplicateTournamentException: If the id is taken
        """
        if not isinstance(config, TournamentConfig):
            config = self._config_from_mapping(config)

        window = config.check_in
        if starts_at is not None and window.opens_at is None and window.closes_at is None:
            config.check_in = CheckInSettings.before_start(
                starts_at,
                opens_before=relativedelta(
                    minutes=self.settings.check_in_opens_before_minutes
                ),
                closes_before=relativedelta(
                    minutes=self.settings.check_in_closes_before_minutes
                ),
            )
            config.check_in.enabled = window.enabled

        tournament = Tournament(
            id=tournament_id or generate_id("tournament"), config=config
        )
        self.repository.add(tournament)
        logger.info(
            f"Created tournament {tournament.name} ({tournament.id}): "
            f"{config.game_mode}, {config.max_teams_per_lobby} teams per lobby, "
            f"qualifiers {'on' if config.has_qualifiers else 'off'}"
        )
        return tournament

    def get_tournament(self, tournament_id: str) -> Tournament:
        """Load a tournament.

        Raises:
            TournamentNotFoundException: If the id is unknown
        """
        return self.repository.get(tournament_id)

    def list_tournaments(self) -> List[str]:
        return self.repository.list_ids()

    # ========== Registration ==========

    def register_team(
        self,
        tournament_id: str,
        team_id: str,
        roster: Optional[Sequence[Any]] = None,
        now: Optional[datetime] = None,
    ) -> Registration:
        """Register a team while registration is open.

        Raises:
            NotInRegistrationPhaseException: Outside registration, or once
                qualifier lobbies exist
            AlreadyRegisteredException: If the team is registered
            LobbyFullException: If the registration cap is reached
            InvalidRosterException: If the roster does not fit the game mode
        """
        with self.repository.transaction(tournament_id) as tournament:
            self._require_registration_open(tournament)
            if tournament.is_registered(team_id):
                raise AlreadyRegisteredException(
                    tournament_id=tournament.id, team_id=team_id
                )
            self._require_free_slot(tournament)
            entries = self._roster_entries(roster, tournament.config.game_mode)

            registration = Registration(
                team_id=team_id,
                registered_at=parse_timestamp(now) or utcnow(),
                roster=entries,
            )
            tournament.registrations.append(registration)
            tournament.waitlist = [w for w in tournament.waitlist if w.team_id != team_id]

        logger.info(
            f"{tournament.name}: registered {team_id} "
            f"({len(tournament.registrations)} teams)"
        )
        return registration

    def update_roster(
        self, tournament_id: str, team_id: str, roster: Sequence[Any]
    ) -> Registration:
        """Replace a registered team's roster while registration is open.

        Raises:
            NotInRegistrationPhaseException: Outside registration
            NotRegisteredException: If the team is not registered
            InvalidRosterException: If the roster does not fit the game mode
        """
        with self.repository.transaction(tournament_id) as tournament:
            self._require_registration_open(tournament)
            registration = tournament.require_registration(team_id)
            registration.roster = self._roster_entries(
                roster, tournament.config.game_mode
            )
        logger.info(f"{tournament.name}: updated roster of {team_id}")
        return registration

    def join_waitlist(
        self, tournament_id: str, team_id: str, now: Optional[datetime] = None
    ) -> int:
        """Put a team on the waitlist.

        Returns:
            The team's 1-based waitlist position

        Raises:
            NotInRegistrationPhaseException: Outside registration
            AlreadyRegisteredException: If the team is registered
            AlreadyOnWaitlistException: If the team is already waiting
        """
        with self.repository.transaction(tournament_id) as tournament:
            self._require_registration_open(tournament)
            if tournament.is_registered(team_id):
                raise AlreadyRegisteredException(
                    tournament_id=tournament.id, team_id=team_id
                )
            if tournament.is_waitlisted(team_id):
                raise AlreadyOnWaitlistException(
                    tournament_id=tournament.id, team_id=team_id
                )
            tournament.waitlist.append(
                WaitlistEntry(team_id=team_id, joined_at=parse_timestamp(now) or utcnow())
            )
            position = len(tournament.waitlist)

        logger.info(f"{tournament.name}: {team_id} joined the waitlist at {position}")
        return position

    def withdraw_team(self, tournament_id: str, team_id: str) -> Optional[str]:
        """Withdraw a team and promote the first waitlisted team.

        A team that is only on the waitlist just leaves the waitlist.

        Returns:
            The promoted team id, or None

        Raises:
            NotInRegistrationPhaseException: Outside registration
            NotRegisteredException: If the team is neither registered nor
                waitlisted
        """
        with self.repository.transaction(tournament_id) as tournament:
            self._require_registration_open(tournament)
            promoted = None

            if tournament.is_registered(team_id):
                tournament.registrations = [
                    r for r in tournament.registrations if r.team_id != team_id
                ]
                cap = tournament.config.registration_cap
                if tournament.waitlist and (
                    cap is None or len(tournament.registrations) < cap
                ):
                    entry = tournament.waitlist.pop(0)
                    tournament.registrations.append(
                        Registration(team_id=entry.team_id, registered_at=utcnow())
                    )
                    promoted = entry.team_id
            elif tournament.is_waitlisted(team_id):
                tournament.waitlist = [
                    w for w in tournament.waitlist if w.team_id != team_id
                ]
            else:
                raise NotRegisteredException(
                    tournament_id=tournament.id, team_id=team_id
                )

        logger.info(f"{tournament.name}: {team_id} withdrew")
        if promoted:
            logger.info(f"{tournament.name}: promoted {promoted} from the waitlist")
        return promoted

    # ========== Check-in ==========

    def check_in(
        self,
        tournament_id: str,
        team_id: str,
        actor_id: str,
        actor_may_act: bool,
        now: Optional[datetime] = None,
        lobby_order: Optional[int] = None,
    ) -> Registration:
        """Check a team in on behalf of its captain.

        Args:
            tournament_id: The tournament
            team_id: The team checking in
            actor_id: Who performs the check-in
            actor_may_act: Whether the actor is allowed to act for the team
            now: Current instant; defaults to the wall clock
            lobby_order: Use this lobby's check-in window instead of the
                tournament-wide one

        Raises:
            NotAuthorizedException: If the actor may not act for the team
            InvalidPhaseException: Outside registration and locked
            CheckInDisabledException: If check-in is turned off
            CheckInNotOpenException: Before the window opens
            CheckInClosedException: After the window closes
            NotRegisteredException: If the team is not registered (or not in
                the given lobby)
            AlreadyCheckedInException: If the team already checked in
        """
        if not actor_may_act:
            raise NotAuthorizedException(
                tournament_id=tournament_id, team_id=team_id, actor_id=actor_id
            )

        now = parse_timestamp(now) or utcnow()
        with self.repository.transaction(tournament_id) as tournament:
            window = None
            if lobby_order is not None:
                lobby = tournament.get_lobby_by_order(lobby_order)
                if team_id not in lobby.teams:
                    raise NotRegisteredException(
                        tournament_id=tournament.id,
                        team_id=team_id,
                        lobby_order=lobby_order,
                    )
                window = lobby.check_in
            self.state_machine.require_check_in_open(tournament, window, now)

            registration = tournament.require_registration(team_id)
            if registration.checked_in:
                raise AlreadyCheckedInException(
                    tournament_id=tournament.id, team_id=team_id
                )
            self._mark_checked_in(registration, actor_id, now)

        logger.info(f"{tournament.name}: {team_id} checked in")
        return registration

    def force_check_in(
        self, tournament_id: str, team_id: str, actor_id: str
    ) -> Registration:
        """Organizer check-in, regardless of the window.

        Raises:
            InvalidPhaseException: Outside registration and locked
            NotRegisteredException: If the team is not registered
        """
        with self.repository.transaction(tournament_id) as tournament:
            self.state_machine.require(tournament, CHECK_IN_STATUSES, "force_check_in")
            registration = tournament.require_registration(team_id)
            self._mark_checked_in(registration, actor_id, utcnow())
        logger.info(f"{tournament.name}: {actor_id} checked in {team_id}")
        return registration

    def configure_lobby_check_in(
        self, tournament_id: str, lobby_order: int, check_in: CheckInSettings
    ) -> Lobby:
        """Give a qualifier lobby its own check-in window.

        Raises:
            LobbiesNotGeneratedException: If no lobby exists
            GroupNotFoundException: If no lobby has this order
        """
        with self.repository.transaction(tournament_id) as tournament:
            if not tournament.lobbies_generated:
                raise LobbiesNotGeneratedException(tournament_id=tournament.id)
            lobby = tournament.get_lobby_by_order(lobby_order)
            lobby.check_in = check_in
        logger.info(f"{tournament.name}: {lobby.name} has its own check-in window")
        return lobby

    # ========== Qualifiers ==========

    def generate_qualifier_lobbies(
        self, tournament_id: str, rng: Optional[random.Random] = None
    ) -> LobbyPlan:
        """Split the registered teams into qualifier lobbies.

        Args:
            tournament_id: The tournament
            rng: Random source for the draw; seed it for reproducible lobbies

        Raises:
            QualifiersDisabledException: Without qualifiers
            InvalidPhaseException: Outside registration
            AlreadyGeneratedException: If lobbies exist
            InsufficientTeamsException: With fewer than two teams
            LobbyFullException: If the requested group count is too small
        """
        with self.repository.transaction(tournament_id) as tournament:
            config = tournament.config
            if not config.has_qualifiers:
                raise QualifiersDisabledException(tournament_id=tournament.id)
            self.state_machine.require(
                tournament, (STATUS_REGISTRATION,), "generate_qualifier_lobbies"
            )
            if tournament.lobbies_generated:
                raise AlreadyGeneratedException(
                    tournament_id=tournament.id, lobbies=len(tournament.lobbies)
                )

            settings = config.qualifier_settings
            plan = plan_lobbies(
                total_teams=len(tournament.registrations),
                capacity=tournament.capacity,
                requested_groups=settings.number_of_groups,
                requested_qualifiers_per_group=settings.qualifiers_per_group,
                transfer_requested=settings.transfer_non_qualified,
            )
            groups = assign_teams(tournament.registered_team_ids, plan, rng)

            for order, team_ids in enumerate(groups, start=1):
                tournament.lobbies.append(
                    Lobby(
                        id=generate_id("lobby"),
                        name=group_name(order),
                        order=order,
                        teams=team_ids,
                        games=[
                            Game(game_number=n)
                            for n in range(1, settings.games_per_group + 1)
                        ],
                        standings=aggregate_standings(
                            [], team_ids, tournament.empty_avg_placement
                        ),
                    )
                )

            settings.number_of_groups = plan.number_of_groups
            settings.qualifiers_per_group = plan.qualifiers_per_group
            settings.transfer_non_qualified = plan.transfer_non_qualified

        logger.info(
            f"{tournament.name}: generated {plan.number_of_groups} lobbies "
            f"{plan.lobby_sizes}, top {plan.qualifiers_per_group} qualify"
        )
        return plan

    def record_lobby_game_result(
        self,
        tournament_id: str,
        lobby_id: str,
        game_number: int,
        results: ResultEntries,
        **game_details,
    ) -> List[Standing]:
        """Enter the results of a qualifier game.

        Returns:
            The lobby's standings over its completed games

        Raises:
            InvalidPhaseException: Outside locked and ongoing
            GroupNotFoundException: If the lobby is unknown
            GameNotFoundException: If the lobby has no such game
            LobbyAlreadyProcessedException: If the cut was already made
            InvalidResultException: If any entry is invalid
        """
        with self.repository.transaction(tournament_id) as tournament:
            self.state_machine.require(
                tournament, SCORE_ENTRY_STATUSES, "record_lobby_game_result"
            )
            lobby = tournament.get_lobby(lobby_id)
            standings = self.recorder.record_lobby_game(
                lobby,
                game_number,
                results,
                tournament.config.points_system,
                tournament.capacity,
                tournament.empty_avg_placement,
                **game_details,
            )
        return standings

    def process_qualifications(
        self, tournament_id: str, lobby_order: int
    ) -> ProcessResult:
        """Make the qualification cut for the lobby at ``lobby_order``.

        Raises:
            QualifiersDisabledException: Without qualifiers
            InvalidPhaseException: Outside locked and ongoing
            LobbiesNotGeneratedException: If no lobby exists
            GroupNotFoundException: If no lobby has this order
            IncompleteGamesException: If a game of the lobby is not completed
            AlreadyProcessedException: If the lobby was processed
        """
        with self.repository.transaction(tournament_id) as tournament:
            config = tournament.config
            if not config.has_qualifiers:
                raise QualifiersDisabledException(tournament_id=tournament.id)
            self.state_machine.require(
                tournament, SCORE_ENTRY_STATUSES, "process_qualifications"
            )
            if not tournament.lobbies_generated:
                raise LobbiesNotGeneratedException(tournament_id=tournament.id)

            lobby = tournament.get_lobby_by_order(lobby_order)
            settings = config.qualifier_settings
            result = process_lobby(
                lobby,
                qualifiers_per_group=settings.qualifiers_per_group
                or max(1, tournament.capacity // 2),
                transfer_enabled=settings.transfer_non_qualified,
                capacity=tournament.capacity,
                next_lobby=tournament.next_lobby(lobby),
                qualified_teams=tournament.qualified_teams,
                empty_avg_placement=tournament.empty_avg_placement,
            )

        logger.info(
            f"{tournament.name}: {len(tournament.qualified_teams)} teams qualified "
            "for the finals so far"
        )
        return result

    # ========== Finals ==========

    def record_finals_game_result(
        self,
        tournament_id: str,
        game_number: int,
        results: ResultEntries,
        **game_details,
    ) -> List[Standing]:
        """Enter the results of a finals game.

        The first finals game starts the tournament; the last one completes
        it. The published scoreboard is not affected until the next publish.

        Args:
            tournament_id: The tournament
            game_number: 1-based finals game number
            results: Raw result mappings
            **game_details: ``played_at``, ``map_name``, ``vod_link``

        Returns:
            Live standings over every completed finals game

        Raises:
            InvalidPhaseException: Outside locked and ongoing
            InvalidResultException: For an invalid game number or entry
            GameAlreadyPublishedException: If the game is published
        """
        with self.repository.transaction(tournament_id) as tournament:
            self.state_machine.require(
                tournament, SCORE_ENTRY_STATUSES, "record_finals_game_result"
            )
            self.recorder.record_finals_game(
                tournament, game_number, results, **game_details
            )
            self.state_machine.start(tournament)
            self.state_machine.complete_if_finished(tournament)
            standings = live_standings(tournament)
        return standings

    def publish_scores(self, tournament_id: str) -> List[int]:
        """Publish every completed, unpublished finals game.

        Returns:
            The newly published game numbers

        Raises:
            InvalidPhaseException: In registration
            NothingToPublishException: If no game can be published
        """
        with self.repository.transaction(tournament_id) as tournament:
            self.state_machine.require(tournament, PUBLISH_STATUSES, "publish_scores")
            newly_published = publish(tournament.games, tournament.published_games)
            apply_publish(tournament, newly_published)
        return newly_published

    def reset_scores(self, tournament_id: str) -> Tournament:
        """Clear the published games and the public standings."""
        with self.repository.transaction(tournament_id) as tournament:
            reset(tournament)
        return tournament

    # ========== Lifecycle ==========

    def lock(self, tournament_id: str) -> Tournament:
        """Close registration.

        Raises:
            InvalidStateTransitionException: Unless in registration
            InsufficientTeamsException: With no registered team
            LobbiesNotGeneratedException: With qualifiers but no lobbies
        """
        with self.repository.transaction(tournament_id) as tournament:
            self.state_machine.lock(tournament)
        return tournament

    def unlock(self, tournament_id: str) -> Tournament:
        """Reopen registration.

        Raises:
            InvalidStateTransitionException: Unless locked
        """
        with self.repository.transaction(tournament_id) as tournament:
            self.state_machine.unlock(tournament)
        return tournament

    # ========== Helper Methods ==========

    def _config_from_mapping(self, data: Mapping[str, Any]) -> TournamentConfig:
        data = dict(data)
        mode = data.get("game_mode", DEFAULT_MODE)
        if data.get("max_teams_per_lobby") is None:
            data["max_teams_per_lobby"] = self.settings.lobby_capacity(mode)
        data.setdefault("number_of_games", self.settings.default_number_of_games)
        qualifier_settings = dict(data.get("qualifier_settings") or {})
        qualifier_settings.setdefault(
            "games_per_group", self.settings.default_games_per_group
        )
        data["qualifier_settings"] = qualifier_settings
        return TournamentConfig.from_dict(data)

    def _require_registration_open(self, tournament: Tournament) -> None:
        if tournament.status != STATUS_REGISTRATION or tournament.lobbies_generated:
            raise NotInRegistrationPhaseException(
                tournament_id=tournament.id,
                current=tournament.status,
                lobbies_generated=tournament.lobbies_generated,
            )

    def _require_free_slot(self, tournament: Tournament) -> None:
        cap = tournament.config.registration_cap
        if cap is not None and len(tournament.registrations) >= cap:
            raise LobbyFullException(
                tournament_id=tournament.id,
                capacity=cap,
                registered=len(tournament.registrations),
            )

    def _roster_entries(
        self, roster: Optional[Sequence[Any]], game_mode: str
    ) -> List[RosterEntry]:
        entries = []
        for item in validate_roster_strict(roster, game_mode):
            if hasattr(item, "get"):
                entries.append(RosterEntry.from_dict(item))
            else:
                entries.append(RosterEntry(player_id=str(item)))
        return entries

    def _mark_checked_in(
        self, registration: Registration, actor_id: str, when: datetime
    ) -> None:
        registration.checked_in = True
        registration.checked_in_at = when
        registration.checked_in_by = actor_id
