from collections import Counter
from datetime import date, datetime

from hockey_admin.schedule import build_division_schedule, build_round_robin_rounds


def test_round_robin_count() -> None:
    rounds = build_round_robin_rounds(["A", "B", "C", "D"], games_per_matchup=2)
    games = [game for round_games in rounds for game in round_games]
    assert len(games) == 12


def test_each_team_plays_at_most_once_per_round() -> None:
    for names in (["A", "B", "C", "D", "E"], ["A", "B", "C", "D", "E", "F"]):
        for round_games in build_round_robin_rounds(names):
            teams = [team for game in round_games for team in game]
            assert len(teams) == len(set(teams))


def test_odd_team_count_gives_every_pair_once() -> None:
    rounds = build_round_robin_rounds(["A", "B", "C", "D", "E"])
    pairs = Counter(frozenset(game) for round_games in rounds for game in round_games)
    assert len(pairs) == 10
    assert set(pairs.values()) == {1}


def test_second_matchup_flips_home_and_away() -> None:
    rounds = build_round_robin_rounds(["A", "B"], games_per_matchup=2)
    assert rounds == [[("A", "B")], [("B", "A")]]


def test_too_few_teams_gives_no_games() -> None:
    assert build_round_robin_rounds(["A"]) == []
    assert build_round_robin_rounds(["A", "B"], games_per_matchup=0) == []


def test_division_schedule_spaces_rounds_a_week_apart() -> None:
    games = build_division_schedule(["A", "B", "C", "D"], "B", date(2025, 3, 1))
    assert len(games) == 6
    assert sorted({game.date for game in games}) == [
        datetime(2025, 3, 1, 20, 0),
        datetime(2025, 3, 8, 20, 0),
        datetime(2025, 3, 15, 20, 0),
    ]
    assert all(game.division == "B" and game.status == "scheduled" for game in games)
    assert all(game.home_score is None for game in games)
