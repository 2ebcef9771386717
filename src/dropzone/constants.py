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

# --- Constants ---
SAVE_FILE_EXTENSION = ".json"

# Tournament lifecycle
STATUS_REGISTRATION = "registration"
STATUS_LOCKED = "locked"
STATUS_ONGOING = "ongoing"
STATUS_COMPLETED = "completed"

# Legal transitions (current -> allowed next states)
STATUS_TRANSITIONS = {
    STATUS_REGISTRATION: (STATUS_LOCKED,),
    STATUS_LOCKED: (STATUS_REGISTRATION, STATUS_ONGOING),
    STATUS_ONGOING: (STATUS_COMPLETED,),
    STATUS_COMPLETED: (),
}

# Game lifecycle
GAME_SCHEDULED = "scheduled"
GAME_COMPLETED = "completed"

# Game modes and their lobby capacity / roster size
MODE_TRIO = "Trio"
MODE_SQUAD = "Squad"
DEFAULT_MODE = MODE_SQUAD

LOBBY_CAPACITY = {
    MODE_TRIO: 12,
    MODE_SQUAD: 10,
}

ROSTER_SIZE = {
    MODE_TRIO: 3,
    MODE_SQUAD: 4,
}

# Points
DEFAULT_PLACEMENT_POINTS = {
    1: 20,
    2: 15,
    3: 12,
    4: 10,
    5: 8,
    6: 6,
    7: 4,
    8: 3,
    9: 2,
    10: 1,
    11: 0,
    12: 0,
}
DEFAULT_KILL_POINTS = 1

# Average placement given to a team with no games in scope: last place of a
# full lobby, so no-shows sort below every team that played.
NO_GAMES_AVG_PLACEMENT = 12.0

# Scheduling defaults
DEFAULT_NUMBER_OF_GAMES = 6
DEFAULT_GAMES_PER_GROUP = 3
MIN_TEAMS_FOR_QUALIFIERS = 2

GROUP_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Roster roles, assigned by position when the captain gives none
DEFAULT_ROLES = ["DPS", "Tank", "Support", "Flex"]
