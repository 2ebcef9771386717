"""
Process-level settings for Dropzone.

Environment Variables (all prefixed with ``DROPZONE_``):
- DATA_DIR: Directory for JSON tournament files (default: data/tournaments)
- LOG_LEVEL: Log level for the CLI (default: INFO)
- TRIO_LOBBY_CAPACITY / SQUAD_LOBBY_CAPACITY: Teams per lobby by game mode
- DEFAULT_NUMBER_OF_GAMES: Finals games when a tournament does not say
- DEFAULT_GAMES_PER_GROUP: Qualifier games per lobby when not configured
- CHECK_IN_OPENS_BEFORE_MINUTES / CHECK_IN_CLOSES_BEFORE_MINUTES: Default
  check-in window relative to the start time
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

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from dropzone.constants import (
    DEFAULT_GAMES_PER_GROUP,
    DEFAULT_NUMBER_OF_GAMES,
    LOBBY_CAPACITY,
    MODE_SQUAD,
    MODE_TRIO,
)


class EngineSettings(BaseSettings):
    """Engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="DROPZONE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Persistence
    data_dir: str = "data/tournaments"

    # Logging
    log_level: str = "INFO"

    # Lobby capacity per game mode
    trio_lobby_capacity: int = LOBBY_CAPACITY[MODE_TRIO]
    squad_lobby_capacity: int = LOBBY_CAPACITY[MODE_SQUAD]

    # Scheduling defaults
    default_number_of_games: int = DEFAULT_NUMBER_OF_GAMES
    default_games_per_group: int = DEFAULT_GAMES_PER_GROUP

    # Check-in window relative to the start time
    check_in_opens_before_minutes: int = 120
    check_in_closes_before_minutes: int = 30

    def lobby_capacity(self, game_mode: str) -> int:
        """Get the lobby capacity for a game mode."""
        if game_mode == MODE_TRIO:
            return self.trio_lobby_capacity
        return self.squad_lobby_capacity


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Load settings once per process."""
    return EngineSettings()
