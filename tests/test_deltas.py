import itertools
import random

import pytest

from hockey_admin.deltas import (
    TeamDelta,
    compute_goalie_delta,
    compute_player_deltas,
    compute_standings_delta,
    parse_minutes,
    save_percentage,
)
from hockey_admin.errors import MalformedNumeric
from hockey_admin.models import Goal, Penalty, Team


def test_decided_game_gives_one_win_and_one_regulation_loss() -> None:
    for hs, aws in itertools.product(range(8), repeat=2):
        if hs == aws:
            continue
        delta = compute_standings_delta(hs, aws, False)
        winner, loser = (delta.home, delta.away) if hs > aws else (delta.away, delta.home)
        assert (winner.wins, winner.losses, winner.ties, winner.points) == (1, 0, 0, 2)
        assert (loser.wins, loser.losses, loser.ties, loser.points) == (0, 1, 0, 0)


def test_shootout_loser_gets_a_point() -> None:
    for hs, aws in itertools.product(range(6), repeat=2):
        if hs == aws:
            continue
        delta = compute_standings_delta(hs, aws, True)
        loser = delta.away if hs > aws else delta.home
        assert loser.losses == 1
        assert loser.points == 1


def test_equal_scores_are_a_tie() -> None:
    for score in range(6):
        delta = compute_standings_delta(score, score, False)
        for side in (delta.home, delta.away):
            assert (side.ties, side.points, side.wins, side.losses) == (1, 1, 0, 0)


def test_four_two_home_win() -> None:
    delta = compute_standings_delta(4, 2, False)
    assert delta.home == TeamDelta(wins=1, points=2, goals_for=4, goals_against=2)
    assert delta.away == TeamDelta(losses=1, points=0, goals_for=2, goals_against=4)


@pytest.mark.regression
def test_equal_scores_with_shootout_flag_still_tie() -> None:
    delta = compute_standings_delta(3, 3, True)
    assert delta.home == TeamDelta(ties=1, points=1, goals_for=3, goals_against=3)
    assert delta.away == TeamDelta(ties=1, points=1, goals_for=3, goals_against=3)


def test_applying_then_subtracting_restores_team() -> None:
    team = Team(name="Cobras", wins=5, losses=3, ties=1, goals_for=30, goals_against=22, points=11)
    for hs, aws, so in [(4, 2, False), (1, 5, True), (2, 2, False), (0, 0, True)]:
        delta = compute_standings_delta(hs, aws, so).home
        after = Team.from_document({**team.to_document(), **delta.apply_to(team)})
        restored = Team.from_document({**after.to_document(), **(-delta).apply_to(after)})
        assert restored == team


def test_player_deltas_credit_goals_assists_and_penalties() -> None:
    goals = [
        Goal(scorer="Ava", assist1="Ben", assist2="", time="03:10"),
        Goal(scorer="Ava", assist1="", assist2="", time="11:42"),
        Goal(scorer="Ben", assist1="Ava", assist2="Cal", time="18:00"),
    ]
    penalties = [
        Penalty(player="Cal", infraction="Tripping", minutes="2"),
        Penalty(player="Cal", infraction="Roughing", minutes="5"),
        Penalty(player="", infraction="Bench minor", minutes="2"),
        Penalty(player="Ben", infraction="Hooking", minutes=""),
    ]
    deltas = compute_player_deltas(goals, penalties)
    assert (deltas["Ava"].goals, deltas["Ava"].assists, deltas["Ava"].points) == (2, 1, 3)
    assert (deltas["Ben"].goals, deltas["Ben"].assists) == (1, 1)
    assert (deltas["Cal"].assists, deltas["Cal"].penalty_minutes) == (1, 7)
    assert "" not in deltas
    assert deltas["Ben"].penalty_minutes == 0


def test_player_deltas_do_not_depend_on_order() -> None:
    goals = [Goal(scorer=s, assist1=a1, assist2=a2) for s, a1, a2 in [
        ("Ava", "Ben", ""), ("Cal", "", ""), ("Ben", "Ava", "Cal"), ("Ava", "Dee", "Ben"),
    ]]
    penalties = [Penalty(player=p, minutes=m) for p, m in [("Dee", "2"), ("Ava", "4"), ("Dee", "10")]]
    expected = compute_player_deltas(goals, penalties)
    rng = random.Random(5)
    for _ in range(10):
        shuffled_goals = goals[:]
        shuffled_penalties = penalties[:]
        rng.shuffle(shuffled_goals)
        rng.shuffle(shuffled_penalties)
        assert compute_player_deltas(shuffled_goals, shuffled_penalties) == expected


def test_malformed_minutes_raise_without_collector() -> None:
    with pytest.raises(MalformedNumeric):
        compute_player_deltas([], [Penalty(player="Ava", minutes="two")])


def test_malformed_minutes_are_collected_per_player() -> None:
    malformed: dict[str, MalformedNumeric] = {}
    deltas = compute_player_deltas(
        [Goal(scorer="Ava")],
        [Penalty(player="Ben", minutes="2x"), Penalty(player="Ava", minutes="2")],
        malformed=malformed,
    )
    assert set(malformed) == {"Ben"}
    assert deltas["Ava"].penalty_minutes == 2
    assert "Ben" not in deltas


def test_parse_minutes() -> None:
    assert parse_minutes(" 5 ") == 5
    with pytest.raises(MalformedNumeric):
        parse_minutes("-2")


def test_goalie_delta_excludes_empty_net_goals() -> None:
    delta = compute_goalie_delta(30, 3, 1)
    assert (delta.shots, delta.goals_allowed, delta.saves) == (30, 2, 28)
    assert save_percentage(delta.saves, delta.shots) == 93.33


def test_save_percentage_without_shots_is_zero() -> None:
    assert save_percentage(0, 0) == 0.0
