from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable

from .config import DEFAULT_DAYS_BETWEEN_ROUNDS, DEFAULT_GAME_TIME, DEFAULT_VENUE
from .models import Game

BYE = "BYE"


def _single_round(team_names: list[str]) -> list[list[tuple[str, str]]]:
    """Build one full round-robin split into rounds."""
    if len(team_names) < 2:
        return []

    # Circle method: each team plays at most once per round.
    rotating = list(team_names)
    if len(rotating) % 2 == 1:
        rotating.append(BYE)

    rounds = len(rotating) - 1
    half = len(rotating) // 2
    out: list[list[tuple[str, str]]] = []

    for round_idx in range(rounds):
        round_games: list[tuple[str, str]] = []
        for idx in range(half):
            home = rotating[idx]
            away = rotating[-(idx + 1)]
            if BYE in (home, away):
                continue
            # Alternate site orientation by round to avoid long home/away streaks.
            if round_idx % 2 == 1:
                home, away = away, home
            round_games.append((home, away))
        out.append(round_games)

        # Keep first fixed, rotate the rest.
        rotating = [rotating[0], rotating[-1], *rotating[1:-1]]

    return out


def build_round_robin_rounds(team_names: Iterable[str], games_per_matchup: int = 1) -> list[list[tuple[str, str]]]:
    names = list(team_names)
    if len(names) < 2 or games_per_matchup < 1:
        return []
    base = _single_round(names)
    rounds: list[list[tuple[str, str]]] = []
    for matchup_index in range(games_per_matchup):
        flip_home_away = matchup_index % 2 == 1
        for round_games in base:
            rounds.append([(away, home) for home, away in round_games] if flip_home_away else list(round_games))
    return rounds


def build_division_schedule(
    team_names: Iterable[str],
    division: str,
    start: date,
    games_per_matchup: int = 1,
    days_between_rounds: int = DEFAULT_DAYS_BETWEEN_ROUNDS,
    game_time: str = DEFAULT_GAME_TIME,
    venue: str = DEFAULT_VENUE,
) -> list[Game]:
    """Scheduled (scoreless) games for one division, one round per game day."""
    kickoff = time.fromisoformat(game_time)
    games: list[Game] = []
    for round_idx, round_games in enumerate(build_round_robin_rounds(team_names, games_per_matchup)):
        day = start + timedelta(days=round_idx * days_between_rounds)
        for home, away in round_games:
            games.append(
                Game(
                    home_team=home,
                    away_team=away,
                    date=datetime.combine(day, kickoff),
                    division=division,
                    venue=venue,
                )
            )
    return games
