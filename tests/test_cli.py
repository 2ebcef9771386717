import json
import logging

import pytest

from dropzone.testing.__main__ import create_main_parser, main


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger("dropzone")
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_plan_command(capsys):
    assert main(["--log-level", "ERROR", "plan", "--teams", "25", "--capacity", "12"]) == 0

    out = capsys.readouterr().out
    assert "lobby_sizes" in out
    assert "[12, 12, 1]" in out


def test_plan_command_reports_engine_errors(capsys):
    assert main(["--log-level", "ERROR", "plan", "--teams", "1"]) == 1
    assert "insufficient_teams" in capsys.readouterr().out


def test_simulate_then_show_standings(tmp_path, capsys):
    data_dir = tmp_path / "tournaments"
    output = tmp_path / "run.json"

    code = main(
        [
            "--log-level",
            "ERROR",
            "simulate",
            "--teams",
            "8",
            "--mode",
            "Squad",
            "--no-qualifiers",
            "--games",
            "2",
            "--seed",
            "4",
            "--data-dir",
            str(data_dir),
            "--output",
            str(output),
        ]
    )
    assert code == 0

    exported = json.loads(output.read_text())
    tournament_id = exported["tournament"]["id"]
    capsys.readouterr()

    assert main(
        ["--log-level", "ERROR", "standings", "--data-dir", str(data_dir), "--id", tournament_id]
    ) == 0
    out = capsys.readouterr().out
    assert "published games [1, 2]" in out


def test_parser_knows_every_command():
    parser = create_main_parser()

    assert parser.parse_args(["plan", "--teams", "3"]).teams == 3
    assert parser.parse_args(["standings", "--id", "cup"]).lobby is None
    assert parser.parse_args(["simulate"]).teams == 25
