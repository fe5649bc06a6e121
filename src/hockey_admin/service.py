from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from threading import Lock
from typing import Any
from uuid import uuid4

from .config import DEFAULT_WINDOW_DAYS
from .errors import ReconcileReport
from .models import Game, Goalie, Player, Team
from .recalc import rebuild_goalie_stats, reset_goalie_stats, reset_team_standings
from .reconcile import reconcile_goalie_stats, reconcile_player_stats, reconcile_standings
from .schedule import build_division_schedule
from .store import DocumentStore

logger = logging.getLogger(__name__)

PLAYER_ROSTER_FIELDS = ("name", "teamId", "jerseyNumber", "position")


class LeagueService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._lock = Lock()

    def _build_game(self, payload: dict[str, Any], game_id: str | None = None, game_number: int = 0) -> Game:
        raw = dict(payload)
        raw["id"] = game_id or uuid4().hex
        raw["gameNumber"] = game_number
        game = Game.from_document(raw)
        game.home_goals = [g for g in game.home_goals if not g.is_blank()]
        game.away_goals = [g for g in game.away_goals if not g.is_blank()]
        game.home_penalties = [p for p in game.home_penalties if not p.is_blank()]
        game.away_penalties = [p for p in game.away_penalties if not p.is_blank()]
        game.normalize_status()
        return game

    def _unplayed(self, game: Game) -> Game:
        return replace(game, status="scheduled", home_score=None, away_score=None)

    def _reconcile(self, new: Game | None, previous: Game | None, report: ReconcileReport) -> None:
        was_final = previous is not None and previous.is_completed
        now_final = new is not None and new.is_completed
        if not (was_final or now_final):
            return

        if was_final and (new is None or (new.home_team, new.away_team) != (previous.home_team, previous.away_team)):
            # Teams changed (or the game is gone): take the old result off the old teams.
            reconcile_standings(self.store, self._unplayed(previous), previous.score_snapshot(), report)
            if new is not None:
                reconcile_standings(self.store, new, None, report)
        else:
            reconcile_standings(self.store, new, previous.score_snapshot() if was_final else None, report)

        reconcile_player_stats(
            self.store,
            new.box_score() if now_final else None,
            previous.box_score() if was_final else None,
            report,
        )

        old_goalies = previous.goalie_data() if was_final else None
        new_goalies = new.goalie_data() if now_final else None
        if any(data is not None and data.has_goalies for data in (old_goalies, new_goalies)):
            reconcile_goalie_stats(self.store, new_goalies, old_goalies, report)

    def _save_result(self, game: Game, report: ReconcileReport) -> dict[str, Any]:
        if not report.ok:
            logger.warning("Game %s saved with %d stats issue(s)", game.game_id, len(report.issues))
        return {"ok": True, "game": game.to_document(), "stats": report.to_dict()}

    def create_game(self, payload: dict[str, Any]) -> dict[str, Any]:
        game = self.store.add_game(self._build_game(payload))
        report = ReconcileReport()
        self._reconcile(game, None, report)
        return self._save_result(game, report)

    def edit_game(self, game_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        previous = self.store.get_game_by_id(game_id)
        if previous is None:
            raise KeyError(f"Game not found: {game_id}")
        game = self._build_game(payload, game_id=game_id, game_number=previous.game_number)
        self.store.replace_game(game)
        report = ReconcileReport()
        self._reconcile(game, previous, report)
        return self._save_result(game, report)

    def delete_game(self, game_id: str) -> dict[str, Any]:
        previous = self.store.get_game_by_id(game_id)
        if previous is None:
            raise KeyError(f"Game not found: {game_id}")
        report = ReconcileReport()
        self._reconcile(None, previous, report)
        self.store.delete_game(game_id)
        return {"ok": True, "deleted": game_id, "stats": report.to_dict()}

    def get_game(self, game_id: str) -> dict[str, Any] | None:
        game = self.store.get_game_by_id(game_id)
        return game.to_document() if game else None

    def add_team(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self.store.add_team(Team.from_document({**payload, "id": uuid4().hex})).to_document()

    def add_player(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self.store.add_player(Player.from_document({**payload, "id": uuid4().hex})).to_document()

    def add_goalie(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self.store.add_goalie(Goalie.from_document({**payload, "id": uuid4().hex})).to_document()

    def update_player(self, player_id: str, partial: dict[str, Any]) -> dict[str, Any]:
        """Edit roster fields of a player; stat totals are only changed by game results."""
        if self.store.get_player(player_id) is None:
            raise KeyError(f"Player not found: {player_id}")
        fields = {key: value for key, value in partial.items() if key in PLAYER_ROSTER_FIELDS}
        self.store.update_player(player_id, fields)
        return self.store.get_player(player_id).to_document()

    def delete_player(self, player_id: str) -> dict[str, Any]:
        self.store.delete_player(player_id)
        return {"ok": True, "deleted": player_id}

    def delete_goalie(self, goalie_id: str) -> dict[str, Any]:
        self.store.delete_goalie(goalie_id)
        return {"ok": True, "deleted": goalie_id}

    def standings(self, division: str | None = None) -> list[dict[str, Any]]:
        out: list[dict[str, Any]] = []
        for rank, team in enumerate(self.store.list_teams(division), start=1):
            out.append(
                {
                    "rank": rank,
                    "team": team.name,
                    "division": team.division,
                    "gp": team.games_played,
                    "wins": team.wins,
                    "losses": team.losses,
                    "ties": team.ties,
                    "points": team.points,
                    "gf": team.goals_for,
                    "ga": team.goals_against,
                    "gd": team.goal_diff,
                }
            )
        return out

    def player_stats(self, division: str | None = None) -> list[dict[str, Any]]:
        team_names = {team.team_id: team.name for team in self.store.list_teams()}
        players = sorted(
            self.store.list_players(division),
            key=lambda p: (-p.points, -p.goals, -p.assists, p.name),
        )
        return [
            {
                "player": p.name,
                "team": team_names.get(p.team_id, ""),
                "number": p.jersey_number,
                "pos": p.position,
                "gp": p.games_played,
                "g": p.goals,
                "a": p.assists,
                "p": p.points,
                "pim": p.penalty_minutes,
            }
            for p in players
        ]

    def goalie_stats(self) -> list[dict[str, Any]]:
        team_names = {team.team_id: team.name for team in self.store.list_teams()}
        return [
            {
                "goalie": g.name,
                "team": team_names.get(g.team_id or "", ""),
                "gp": g.games_played,
                "shots": g.total_shots,
                "ga": g.goals_allowed,
                "saves": g.saves,
                "sv_pct": g.save_percentage,
                "gaa": g.gaa,
            }
            for g in self.store.list_goalies()
        ]

    def schedule(self, division: str | None = None) -> list[dict[str, Any]]:
        return [game.to_document() for game in self.store.list_games(division)]

    def upcoming(self, days: int = DEFAULT_WINDOW_DAYS, division: str | None = None, now: datetime | None = None) -> list[dict[str, Any]]:
        return [game.to_document() for game in self.store.upcoming_games(days, division, now)]

    def recent(self, days: int = DEFAULT_WINDOW_DAYS, division: str | None = None, now: datetime | None = None) -> list[dict[str, Any]]:
        return [game.to_document() for game in self.store.recent_games(days, division, now)]

    def populate_schedule(
        self,
        division: str,
        start: date,
        games_per_matchup: int = 1,
        replace_existing: bool = False,
    ) -> dict[str, Any]:
        teams = self.store.list_teams(division)
        if replace_existing:
            for game in self.store.list_games(division):
                self.store.delete_game(game.game_id)
            reset_team_standings(self.store, division)
        # Stable order so the same division always yields the same pairings.
        names = sorted(team.name for team in teams)
        games = build_division_schedule(names, division, start, games_per_matchup=games_per_matchup)
        for game in games:
            self.store.add_game(game)
        logger.info("Populated %d games for division %s", len(games), division)
        return {"ok": True, "division": division, "games": len(games)}

    def reset_goalie_stats(self) -> dict[str, Any]:
        return {"ok": True, "reset": reset_goalie_stats(self.store)}

    def rebuild_goalie_stats(self) -> dict[str, Any]:
        report = rebuild_goalie_stats(self.store)
        return {"ok": True, "stats": report.to_dict()}
