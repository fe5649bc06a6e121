from datetime import datetime

import pytest

from hockey_admin.models import Game, Goal, Goalie, Penalty, Player, Team
from hockey_admin.store import DocumentStore


class CountingStore(DocumentStore):
    """Records every partial write so tests can check write counts."""

    def __init__(self, path: str | None = None) -> None:
        super().__init__(path)
        self.writes: list[tuple[str, str, dict]] = []

    def update_team(self, team_id, partial):
        self.writes.append(("team", team_id, dict(partial)))
        super().update_team(team_id, partial)

    def update_player(self, player_id, partial):
        self.writes.append(("player", player_id, dict(partial)))
        super().update_player(player_id, partial)

    def update_goalie(self, goalie_id, partial):
        self.writes.append(("goalie", goalie_id, dict(partial)))
        super().update_goalie(goalie_id, partial)


@pytest.fixture
def store() -> CountingStore:
    league = CountingStore()
    cobras = league.add_team(Team(name="Cobras", division="A"))
    penguins = league.add_team(Team(name="Penguins", division="A"))
    league.add_team(Team(name="Spitfires", division="B"))
    for name, number in [("Ava Stone", 9), ("Ben Ortiz", 14), ("Cal Reyes", 4)]:
        league.add_player(Player(name=name, team_id=cobras.team_id, jersey_number=number))
    for name, number in [("Dee Park", 19), ("Eli Frost", 2)]:
        league.add_player(Player(name=name, team_id=penguins.team_id, jersey_number=number))
    league.add_goalie(Goalie(name="Gus Hale", team_id=cobras.team_id))
    league.add_goalie(Goalie(name="Hal Moss", team_id=penguins.team_id))
    league.add_goalie(Goalie(name="Ike Lund"))
    league.writes.clear()
    return league


def make_game(home_score=None, away_score=None, **overrides) -> Game:
    fields = {
        "home_team": "Cobras",
        "away_team": "Penguins",
        "date": datetime(2025, 1, 10, 20, 0),
        "division": "A",
        "home_score": home_score,
        "away_score": away_score,
    }
    fields.update(overrides)
    game = Game(**fields)
    game.normalize_status()
    return game


def goal(scorer, assist1="", assist2="", time="") -> Goal:
    return Goal(scorer=scorer, assist1=assist1, assist2=assist2, time=time)


def penalty(player, minutes, infraction="Tripping") -> Penalty:
    return Penalty(player=player, infraction=infraction, minutes=minutes)
