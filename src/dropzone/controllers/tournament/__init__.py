"""Qualification and standings engine components.

Each module covers one step of a tournament: scoring games, aggregating
standings, splitting teams into qualifier lobbies, making the qualification
cut, publishing the scoreboard and guarding the tournament lifecycle.
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

from dropzone.controllers.tournament.lobby_partitioner import (
    LobbyPlan,
    assign_teams,
    group_name,
    plan_lobbies,
)
from dropzone.controllers.tournament.points import build_result, compute_points
from dropzone.controllers.tournament.qualification import ProcessResult, process_lobby
from dropzone.controllers.tournament.result_recorder import ResultRecorder
from dropzone.controllers.tournament.scoreboard import (
    apply_publish,
    live_standings,
    publish,
    published_standings,
    reset,
)
from dropzone.controllers.tournament.standings import (
    aggregate_standings,
    calculate_earnings,
    rank_standings,
    sort_standings,
    standing_sort_key,
)
from dropzone.controllers.tournament.state_machine import (
    CHECK_IN_STATUSES,
    TournamentStateMachine,
)

__all__ = [
    "CHECK_IN_STATUSES",
    "LobbyPlan",
    "ProcessResult",
    "ResultRecorder",
    "TournamentStateMachine",
    "aggregate_standings",
    "apply_publish",
    "assign_teams",
    "build_result",
    "calculate_earnings",
    "compute_points",
    "group_name",
    "live_standings",
    "plan_lobbies",
    "process_lobby",
    "publish",
    "published_standings",
    "rank_standings",
    "reset",
    "sort_standings",
    "standing_sort_key",
]
