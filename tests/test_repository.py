import json
import threading
from datetime import datetime, timezone

import pytest

from dropzone.exceptions import (
    ConcurrentModificationException,
    DuplicateTournamentException,
    InvalidConfigurationException,
    TournamentNotFoundException,
)
from dropzone.engine import TournamentEngine
from dropzone.models.tournament import (
    CheckInSettings,
    Registration,
    RosterEntry,
    Tournament,
    TournamentConfig,
)
from dropzone.storage import InMemoryTournamentRepository, JsonFileTournamentRepository


def _tournament(tournament_id="cup"):
    return Tournament(
        id=tournament_id,
        config=TournamentConfig(
            name="Cup",
            game_mode="Trio",
            prize_pool=500,
            prize_distribution={1: 60, 2: 40},
            check_in=CheckInSettings(
                opens_at=datetime(2026, 5, 1, 16, 0, tzinfo=timezone.utc)
            ),
        ),
    )


def test_get_returns_private_copies():
    repository = InMemoryTournamentRepository()
    repository.add(_tournament())

    copy = repository.get("cup")
    copy.registrations.append(Registration(team_id="a"))

    assert repository.get("cup").registrations == []


def test_add_sets_version_and_rejects_duplicates():
    repository = InMemoryTournamentRepository()

    assert repository.add(_tournament()).version == 1
    with pytest.raises(DuplicateTournamentException):
        repository.add(_tournament())


def test_unknown_tournament():
    with pytest.raises(TournamentNotFoundException):
        InMemoryTournamentRepository().get("missing")


def test_transaction_writes_on_success():
    repository = InMemoryTournamentRepository()
    repository.add(_tournament())

    with repository.transaction("cup") as tournament:
        tournament.registrations.append(Registration(team_id="a"))

    stored = repository.get("cup")
    assert stored.registered_team_ids == ["a"]
    assert stored.version == 2


def test_transaction_rolls_back_on_error():
    repository = InMemoryTournamentRepository()
    repository.add(_tournament())

    with pytest.raises(RuntimeError):
        with repository.transaction("cup") as tournament:
            tournament.registrations.append(Registration(team_id="a"))
            raise RuntimeError("validation failed late")

    stored = repository.get("cup")
    assert stored.registrations == []
    assert stored.version == 1


def test_stale_copy_is_refused():
    repository = InMemoryTournamentRepository()
    repository.add(_tournament())

    first = repository.get("cup")
    second = repository.get("cup")
    repository.save(first)

    with pytest.raises(ConcurrentModificationException) as exc_info:
        repository.save(second)

    assert exc_info.value.details["expected_version"] == 1
    assert exc_info.value.details["stored_version"] == 2
    assert exc_info.value.category == "conflict"


def test_json_round_trip(tmp_path):
    repository = JsonFileTournamentRepository(tmp_path)
    tournament = _tournament()
    tournament.registrations.append(
        Registration(
            team_id="a",
            checked_in=True,
            checked_in_at=datetime(2026, 5, 1, 16, 5, tzinfo=timezone.utc),
            roster=[RosterEntry(player_id="p1", role="Tank")],
        )
    )
    repository.add(tournament)

    loaded = repository.get("cup")

    assert loaded.to_dict() == tournament.to_dict()
    assert loaded.config.prize_distribution == {1: 60.0, 2: 40.0}
    assert loaded.config.check_in.opens_at == datetime(
        2026, 5, 1, 16, 0, tzinfo=timezone.utc
    )
    assert json.loads((tmp_path / "cup.json").read_text())["version"] == 1


def test_json_transaction_and_listing(tmp_path):
    repository = JsonFileTournamentRepository(tmp_path)
    repository.add(_tournament("spring"))
    repository.add(_tournament("autumn"))

    with repository.transaction("spring") as tournament:
        tournament.status = "locked"

    assert repository.list_ids() == ["autumn", "spring"]
    assert repository.get("spring").status == "locked"
    assert repository.get("spring").version == 2
    assert not list(tmp_path.glob("*.tmp"))


def test_json_rejects_path_like_ids(tmp_path):
    repository = JsonFileTournamentRepository(tmp_path)

    with pytest.raises(InvalidConfigurationException):
        repository.get("../escape")


# ========== Concurrent writers ==========


def _open_cup(engine, tournament_id):
    engine.create_tournament(
        {"name": "Open Cup", "game_mode": "Trio", "has_qualifiers": True},
        tournament_id=tournament_id,
    )


def _register_concurrently(engine, tournament_id, team_ids):
    barrier = threading.Barrier(len(team_ids))
    errors = []

    def register(team_id):
        barrier.wait()
        try:
            engine.register_team(tournament_id, team_id)
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=register, args=(t,)) for t in team_ids]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return errors


@pytest.mark.parametrize("store", ["memory", "json"])
def test_concurrent_registrations_are_all_kept(store, tmp_path, settings):
    if store == "memory":
        repository = InMemoryTournamentRepository()
    else:
        repository = JsonFileTournamentRepository(tmp_path)
    engine = TournamentEngine(repository, settings)
    _open_cup(engine, "cup")
    team_ids = [f"team-{i:02d}" for i in range(16)]

    errors = _register_concurrently(engine, "cup", team_ids)

    assert errors == []
    stored = engine.get_tournament("cup")
    assert sorted(stored.registered_team_ids) == team_ids
    assert stored.version == 1 + len(team_ids)


def test_tournaments_do_not_block_each_other(settings):
    engine = TournamentEngine(InMemoryTournamentRepository(), settings)
    _open_cup(engine, "spring")
    _open_cup(engine, "autumn")

    other = threading.Thread(target=engine.register_team, args=("autumn", "a"))
    same = threading.Thread(target=engine.register_team, args=("spring", "b"))

    with engine.repository.transaction("spring"):
        other.start()
        other.join(timeout=5)
        same.start()
        same.join(timeout=0.2)

        assert not other.is_alive()
        assert same.is_alive()
        assert engine.get_tournament("autumn").registered_team_ids == ["a"]

    same.join(timeout=5)
    assert not same.is_alive()
    assert engine.get_tournament("spring").registered_team_ids == ["b"]
