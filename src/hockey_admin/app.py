from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .config import DEFAULT_WINDOW_DAYS, DIVISIONS, LOG_FORMAT, data_file_path
from .models import Game, Goalie, Player, Team
from .store import DocumentStore


def format_standings(teams: Iterable[Team]) -> str:
    lines = ["Pos Team             Div GP  W  L  T Pts  GF  GA  GD"]
    for idx, team in enumerate(teams, start=1):
        lines.append(
            f"{idx:>3} {team.name:<16} {team.division:<3} {team.games_played:>2} {team.wins:>2} {team.losses:>2}"
            f" {team.ties:>2} {team.points:>3} {team.goals_for:>3} {team.goals_against:>3} {team.goal_diff:>3}"
        )
    return "\n".join(lines)


def format_player_stats(players: Iterable[Player], title: str, limit: int = 20) -> str:
    lines = [title, "Player                 #  Pos GP  G  A  P PIM"]
    for player in list(players)[:limit]:
        lines.append(
            f"{player.name:<20} {player.jersey_number:>3} {player.position:<3} {player.games_played:>2}"
            f" {player.goals:>2} {player.assists:>2} {player.points:>2} {player.penalty_minutes:>3}"
        )
    return "\n".join(lines)


def format_goalie_stats(goalies: Iterable[Goalie], limit: int = 12) -> str:
    lines = ["Goalie               GP Shots  GA  SV   SV%"]
    for goalie in list(goalies)[:limit]:
        lines.append(
            f"{goalie.name:<20} {goalie.games_played:>2} {goalie.total_shots:>5} {goalie.goals_allowed:>3}"
            f" {goalie.saves:>3} {goalie.save_percentage:>6.2f}"
        )
    return "\n".join(lines)


def format_schedule(games: Iterable[Game]) -> str:
    lines = ["  #  Date              Div Away             Home             Result"]
    for game in games:
        if game.is_completed:
            result = f"{game.away_score}-{game.home_score}" + (" SO" if game.shootout else "")
        else:
            result = game.status
        lines.append(
            f"{game.game_number:>3}  {game.date:%Y-%m-%d %H:%M}  {game.division:<3} {game.away_team:<16}"
            f" {game.home_team:<16} {result}"
        )
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print league standings, stats and schedule.")
    parser.add_argument("view", choices=["standings", "players", "goalies", "upcoming", "recent"])
    parser.add_argument("--division", choices=list(DIVISIONS))
    parser.add_argument("--data", default=None, help="league data file (defaults to $HOCKEY_ADMIN_DATA)")
    parser.add_argument("--days", type=int, default=DEFAULT_WINDOW_DAYS)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    store = DocumentStore(args.data or data_file_path())
    if store.last_load_error:
        logging.getLogger(__name__).error("%s", store.last_load_error)
        return 1

    if args.view == "standings":
        print(format_standings(store.list_teams(args.division)))
    elif args.view == "players":
        print(format_player_stats(store.list_players(args.division), "Scoring leaders"))
    elif args.view == "goalies":
        print(format_goalie_stats(store.list_goalies()))
    elif args.view == "upcoming":
        print(format_schedule(store.upcoming_games(args.days, args.division)))
    else:
        print(format_schedule(store.recent_games(args.days, args.division)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
