"""Random Tournament Generator (RTG) - simulation harness for the engine.

This module drives a whole tournament through :class:`TournamentEngine`:
registration, qualifier lobbies, lobby games, qualification cuts, finals
games and scoreboard publishing. Results are drawn from a seeded random
source, so a seed always reproduces the same tournament.
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
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from dropzone.constants import (
    DEFAULT_GAMES_PER_GROUP,
    DEFAULT_MODE,
    DEFAULT_NUMBER_OF_GAMES,
    DEFAULT_ROLES,
    ROSTER_SIZE,
)
from dropzone.engine import TournamentEngine
from dropzone.exceptions import InvalidConfigurationException
from dropzone.models.tournament import (
    QualifierSettings,
    Tournament,
    TournamentConfig,
)
from dropzone.utils import setup_logger

logger = setup_logger(__name__)


class SkillDistribution(Enum):
    """Team strength patterns."""

    UNIFORM = "uniform"
    NORMAL = "normal"
    TOP_HEAVY = "top_heavy"


class ResultPattern(Enum):
    """How placements follow team strength."""

    REALISTIC = "realistic"
    PREDICTABLE = "predictable"
    RANDOM = "random"


@dataclass
class RTGConfig:
    """Configuration for Random Tournament Generator."""

    num_teams: int
    game_mode: str = DEFAULT_MODE
    has_qualifiers: bool = True
    max_teams_per_lobby: Optional[int] = None
    number_of_games: int = DEFAULT_NUMBER_OF_GAMES
    games_per_group: int = DEFAULT_GAMES_PER_GROUP
    number_of_groups: Optional[int] = None
    qualifiers_per_group: Optional[int] = None
    transfer_non_qualified: bool = False
    skill_distribution: SkillDistribution = SkillDistribution.NORMAL
    result_pattern: ResultPattern = ResultPattern.REALISTIC
    seed: Optional[int] = None
    average_kills: float = 3.0
    publish_every: int = 1
    prize_pool: float = 0.0
    prize_distribution: Dict[int, float] = field(default_factory=dict)
    with_rosters: bool = True


@dataclass
class SimulatedTeam:
    """A generated team and its hidden strength."""

    team_id: str
    name: str
    skill: float
    roster: List[Dict[str, Any]] = field(default_factory=list)


class TeamFactory:
    """Factory for creating tournament teams."""

    def __init__(self, config: RTGConfig):
        self.config = config
        self.random = (
            random.Random(config.seed) if config.seed is not None else random.Random()
        )

    def create_teams(self) -> List[SimulatedTeam]:
        """Create teams based on configuration."""
        teams = []
        roster_size = ROSTER_SIZE[self.config.game_mode]
        for i in range(self.config.num_teams):
            team_id = f"team-{i + 1:03d}"
            roster = []
            if self.config.with_rosters:
                roster = [
                    {
                        "player_id": f"{team_id}-p{slot + 1}",
                        "role": DEFAULT_ROLES[slot % len(DEFAULT_ROLES)],
                    }
                    for slot in range(roster_size)
                ]
            teams.append(
                SimulatedTeam(
                    team_id=team_id,
                    name=f"Team {i + 1:03d}",
                    skill=self._generate_skill(),
                    roster=roster,
                )
            )

        logger.info(
            "Created %s teams with %s skill distribution",
            len(teams),
            self.config.skill_distribution.value,
        )
        return teams

    def _generate_skill(self) -> float:
        if self.config.skill_distribution == SkillDistribution.UNIFORM:
            return self.random.uniform(1.0, 10.0)
        if self.config.skill_distribution == SkillDistribution.TOP_HEAVY:
            if self.random.random() < 0.15:
                return self.random.uniform(8.0, 10.0)
            return self.random.uniform(1.0, 6.0)
        return max(1.0, min(10.0, self.random.gauss(5.5, 1.5)))


class ResultSimulator:
    """Simulates battle-royale game results."""

    def __init__(self, config: RTGConfig):
        self.config = config
        self.random = (
            random.Random(config.seed + 1)
            if config.seed is not None
            else random.Random()
        )

    def simulate_game(
        self, team_ids: Sequence[str], skills: Dict[str, float]
    ) -> List[Dict[str, Any]]:
        """Return raw result entries for one game, best placement first."""
        order = self._finishing_order(list(team_ids), skills)
        results = []
        for placement, team_id in enumerate(order, start=1):
            results.append(
                {
                    "team_id": team_id,
                    "placement": placement,
                    "kills": self._kills(placement, len(order)),
                }
            )
        return results

    def _finishing_order(
        self, team_ids: List[str], skills: Dict[str, float]
    ) -> List[str]:
        if self.config.result_pattern == ResultPattern.RANDOM:
            self.random.shuffle(team_ids)
            return team_ids
        if self.config.result_pattern == ResultPattern.PREDICTABLE:
            return sorted(team_ids, key=lambda t: (-skills.get(t, 1.0), t))
        # Weighted draw without replacement: stronger teams tend to last longer
        return sorted(
            team_ids,
            key=lambda t: -(self.random.random() ** (1.0 / skills.get(t, 1.0))),
        )

    def _kills(self, placement: int, lobby_size: int) -> int:
        # Teams that survive longer tend to take more fights
        survival = (lobby_size - placement + 1) / max(lobby_size, 1)
        mean = self.config.average_kills * (0.5 + survival)
        return max(0, int(round(self.random.gauss(mean, 1.5))))


class RandomTournamentGenerator:
    """Main tournament generator driving the engine from start to finish."""

    def __init__(self, config: RTGConfig, engine: Optional[TournamentEngine] = None):
        self.config = config
        self.engine = engine or TournamentEngine()
        self.team_factory = TeamFactory(config)
        self.result_simulator = ResultSimulator(config)
        self.random = (
            random.Random(config.seed + 2)
            if config.seed is not None
            else random.Random()
        )

    def build_config(self) -> TournamentConfig:
        """Tournament configuration for this run."""
        return TournamentConfig(
            name=f"RTG {self.config.num_teams} teams (seed {self.config.seed})",
            game_mode=self.config.game_mode,
            max_teams_per_lobby=self.config.max_teams_per_lobby,
            number_of_games=self.config.number_of_games,
            has_qualifiers=self.config.has_qualifiers,
            qualifier_settings=QualifierSettings(
                number_of_groups=self.config.number_of_groups,
                qualifiers_per_group=self.config.qualifiers_per_group,
                games_per_group=self.config.games_per_group,
                transfer_non_qualified=self.config.transfer_non_qualified,
            ),
            prize_pool=self.config.prize_pool,
            prize_distribution=dict(self.config.prize_distribution),
        )

    def generate_complete_tournament(self) -> Dict[str, Any]:
        """Run a full tournament and return what happened.

        Returns:
            Dictionary with the final ``tournament``, the lobby ``plan`` (or
            None), the per-lobby ``qualification`` results and the
            ``publish_history``

        Raises:
            InvalidConfigurationException: If the teams cannot fit a
                tournament without qualifiers
        """
        tournament_config = self.build_config()
        if (
            not tournament_config.has_qualifiers
            and self.config.num_teams > tournament_config.max_teams_per_lobby
        ):
            raise InvalidConfigurationException(
                field="num_teams",
                value=self.config.num_teams,
                max_teams_per_lobby=tournament_config.max_teams_per_lobby,
            )

        logger.info(
            "Generating tournament: %s teams, %s finals games",
            self.config.num_teams,
            self.config.number_of_games,
        )

        teams = self.team_factory.create_teams()
        skills = {team.team_id: team.skill for team in teams}

        tournament = self.engine.create_tournament(tournament_config)
        tid = tournament.id
        for team in teams:
            self.engine.register_team(tid, team.team_id, roster=team.roster or None)
            self.engine.force_check_in(tid, team.team_id, actor_id="rtg")

        plan = None
        if tournament_config.has_qualifiers:
            plan = self.engine.generate_qualifier_lobbies(tid, rng=self.random)
        self.engine.lock(tid)

        qualification = []
        if plan is not None:
            for order in range(1, plan.number_of_groups + 1):
                qualification.append(self._play_lobby(tid, order, skills))

        publish_history = []
        for game_number in range(1, self.config.number_of_games + 1):
            finals_teams = self.engine.get_tournament(tid).finals_teams
            results = self.result_simulator.simulate_game(finals_teams, skills)
            self.engine.record_finals_game_result(tid, game_number, results)
            if game_number % max(1, self.config.publish_every) == 0:
                publish_history.append(self.engine.publish_scores(tid))

        tournament = self.engine.get_tournament(tid)
        completed = {g.game_number for g in tournament.games if g.is_completed}
        if completed - set(tournament.published_games):
            publish_history.append(self.engine.publish_scores(tid))
            tournament = self.engine.get_tournament(tid)

        logger.info("Tournament generation complete")
        return {
            "config": self.config,
            "teams": teams,
            "tournament": tournament,
            "plan": plan,
            "qualification": qualification,
            "publish_history": publish_history,
        }

    def _play_lobby(self, tid: str, order: int, skills: Dict[str, float]):
        tournament = self.engine.get_tournament(tid)
        lobby = tournament.get_lobby_by_order(order)
        for game in lobby.games:
            results = self.result_simulator.simulate_game(lobby.teams, skills)
            self.engine.record_lobby_game_result(
                tid, lobby.id, game.game_number, results
            )
        return self.engine.process_qualifications(tid, order)

    def export_json_format(self, tournament_data: Dict[str, Any]) -> str:
        """Serialize a generated tournament for offline inspection."""
        tournament: Tournament = tournament_data["tournament"]
        plan = tournament_data.get("plan")
        export_data = {
            "rtg_config": {
                "num_teams": self.config.num_teams,
                "game_mode": self.config.game_mode,
                "has_qualifiers": self.config.has_qualifiers,
                "skill_distribution": self.config.skill_distribution.value,
                "result_pattern": self.config.result_pattern.value,
                "seed": self.config.seed,
            },
            "teams": [
                {"team_id": team.team_id, "name": team.name, "skill": team.skill}
                for team in tournament_data["teams"]
            ],
            "plan": plan.to_dict() if plan is not None else None,
            "qualification": [r.to_dict() for r in tournament_data["qualification"]],
            "publish_history": tournament_data["publish_history"],
            "tournament": tournament.to_dict(),
        }
        return json.dumps(export_data, indent=2)


def create_rtg_generator(
    config: RTGConfig, engine: Optional[TournamentEngine] = None
) -> RandomTournamentGenerator:
    """Create RTG tournament generator with given configuration."""
    return RandomTournamentGenerator(config, engine)


def create_small_tournament(
    num_teams: int = 8, seed: Optional[int] = None
) -> RandomTournamentGenerator:
    """Single-lobby tournament without qualifiers."""
    config = RTGConfig(
        num_teams=num_teams,
        has_qualifiers=False,
        number_of_games=3,
        seed=seed,
    )
    return create_rtg_generator(config)


def create_qualifier_tournament(
    num_teams: int = 25, seed: Optional[int] = None
) -> RandomTournamentGenerator:
    """Trio tournament with qualifier lobbies and a partial last lobby."""
    config = RTGConfig(
        num_teams=num_teams,
        game_mode="Trio",
        has_qualifiers=True,
        seed=seed,
    )
    return create_rtg_generator(config)


def create_large_tournament(
    num_teams: int = 60, seed: Optional[int] = None
) -> RandomTournamentGenerator:
    """Many full qualifier lobbies; the finals seat one lobby."""
    config = RTGConfig(
        num_teams=num_teams,
        game_mode="Trio",
        has_qualifiers=True,
        seed=seed,
        publish_every=2,
    )
    return create_rtg_generator(config)
