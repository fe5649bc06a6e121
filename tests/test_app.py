import json

from conftest import make_game
from hockey_admin.app import format_schedule, format_standings, main
from hockey_admin.models import Team
from hockey_admin.store import DocumentStore


def test_standings_table_lists_teams_in_order() -> None:
    table = format_standings([Team(name="Cobras", wins=2, points=4, goals_for=7), Team(name="Penguins", losses=2)])
    lines = table.splitlines()
    assert lines[0].startswith("Pos Team")
    assert "Cobras" in lines[1]
    assert "Penguins" in lines[2]


def test_schedule_shows_result_or_status() -> None:
    table = format_schedule([make_game(3, 2, shootout=True), make_game()])
    lines = table.splitlines()
    assert lines[1].endswith("2-3 SO")
    assert lines[2].endswith("scheduled")


def test_cli_prints_standings(tmp_path, capsys) -> None:
    path = tmp_path / "league_data.json"
    DocumentStore(str(path)).add_team(Team(name="Cobras", points=6))
    assert main(["standings", "--data", str(path)]) == 0
    assert "Cobras" in capsys.readouterr().out


def test_cli_fails_on_unreadable_data(tmp_path) -> None:
    path = tmp_path / "league_data.json"
    path.write_text(json.dumps({"save_version": 999}), encoding="utf-8")
    assert main(["goalies", "--data", str(path)]) == 1
