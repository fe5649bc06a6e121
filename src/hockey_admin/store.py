from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Protocol

from .config import SAVE_VERSION
from .models import Game, Goalie, Player, Team

logger = logging.getLogger(__name__)


class EntityStore(Protocol):
    """The narrow read/write surface the reconcilers depend on."""

    def find_team_by_name(self, name: str) -> Team | None: ...

    def update_team(self, team_id: str, partial: dict[str, Any]) -> None: ...

    def find_player_by_name(self, name: str, team_id: str) -> Player | None: ...

    def update_player(self, player_id: str, partial: dict[str, Any]) -> None: ...

    def find_goalie_by_name(self, name: str) -> Goalie | None: ...

    def update_goalie(self, goalie_id: str, partial: dict[str, Any]) -> None: ...

    def get_game_by_id(self, game_id: str) -> Game | None: ...


class DocumentStore:
    """Collections of camelCase documents, optionally saved to one JSON file.

    Writes are unconditional read-then-write updates with no version check.
    """

    SAVE_VERSION = SAVE_VERSION
    COLLECTIONS = ("teams", "players", "goalies", "games")

    def __init__(self, path: str | None = None) -> None:
        self.path = Path(path) if path else None
        self.last_load_error: str = ""
        self._last_game_number = 0
        self._collections: dict[str, dict[str, dict[str, Any]]] = self._load()

    def _empty(self) -> dict[str, dict[str, dict[str, Any]]]:
        return {name: {} for name in self.COLLECTIONS}

    def _load(self) -> dict[str, dict[str, dict[str, Any]]]:
        collections = self._empty()
        if self.path is None or not self.path.exists():
            return collections
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                self.last_load_error = "League data file has invalid format; starting empty."
                return collections
            version = int(raw.get("save_version", 1) or 1)
            if version > self.SAVE_VERSION:
                self.last_load_error = (
                    f"Unsupported league data version {version}; app supports up to {self.SAVE_VERSION}."
                )
                return collections
        except (json.JSONDecodeError, OSError, TypeError, ValueError) as exc:
            self.last_load_error = f"Failed to load league data ({exc}); starting empty."
            return collections
        self._last_game_number = int(raw.get("last_game_number", 0) or 0)
        for name in self.COLLECTIONS:
            rows = raw.get(name, [])
            if not isinstance(rows, list):
                continue
            for row in rows:
                if isinstance(row, dict) and row.get("id"):
                    collections[name][str(row["id"])] = dict(row)
        return collections

    def save(self) -> None:
        if self.path is None:
            return
        payload: dict[str, Any] = {"save_version": self.SAVE_VERSION, "last_game_number": self._last_game_number}
        payload.update({name: list(docs.values()) for name, docs in self._collections.items()})
        self._write_json_with_backup(self.path, payload)

    def _write_json_with_backup(self, path: Path, payload: Any, *, with_backup: bool = True) -> None:
        if with_backup and path.exists():
            backup = path.with_suffix(path.suffix + ".bak")
            try:
                shutil.copy2(path, backup)
            except OSError as exc:
                logger.warning("Could not refresh backup %s: %s", backup, exc)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _insert(self, collection: str, doc: dict[str, Any]) -> None:
        self._collections[collection][str(doc["id"])] = doc
        self.save()

    def _update(self, collection: str, doc_id: str, partial: dict[str, Any]) -> None:
        docs = self._collections[collection]
        if doc_id not in docs:
            raise KeyError(f"No {collection} document with id {doc_id!r}")
        docs[doc_id].update(partial)
        logger.debug("Updated %s/%s: %s", collection, doc_id, partial)
        self.save()

    def _delete(self, collection: str, doc_id: str) -> None:
        if self._collections[collection].pop(doc_id, None) is None:
            raise KeyError(f"No {collection} document with id {doc_id!r}")
        self.save()

    # Teams

    def add_team(self, team: Team) -> Team:
        self._insert("teams", team.to_document())
        return team

    def get_team(self, team_id: str) -> Team | None:
        raw = self._collections["teams"].get(team_id)
        return Team.from_document(raw) if raw else None

    def find_team_by_name(self, name: str) -> Team | None:
        for raw in self._collections["teams"].values():
            if raw.get("name") == name:
                return Team.from_document(raw)
        return None

    def update_team(self, team_id: str, partial: dict[str, Any]) -> None:
        self._update("teams", team_id, partial)

    def list_teams(self, division: str | None = None) -> list[Team]:
        teams = [Team.from_document(raw) for raw in self._collections["teams"].values()]
        if division:
            teams = [team for team in teams if team.division == division]
        return sorted(teams, key=lambda t: (t.points, t.goal_diff, t.goals_for), reverse=True)

    # Players

    def add_player(self, player: Player) -> Player:
        self._insert("players", player.to_document())
        return player

    def get_player(self, player_id: str) -> Player | None:
        raw = self._collections["players"].get(player_id)
        return Player.from_document(raw) if raw else None

    def find_player_by_name(self, name: str, team_id: str) -> Player | None:
        for raw in self._collections["players"].values():
            if raw.get("name") == name and raw.get("teamId") == team_id:
                return Player.from_document(raw)
        return None

    def update_player(self, player_id: str, partial: dict[str, Any]) -> None:
        self._update("players", player_id, partial)

    def delete_player(self, player_id: str) -> None:
        self._delete("players", player_id)

    def list_players_by_team(self, team_id: str) -> list[Player]:
        return [Player.from_document(raw) for raw in self._collections["players"].values() if raw.get("teamId") == team_id]

    def list_players(self, division: str | None = None) -> list[Player]:
        players = [Player.from_document(raw) for raw in self._collections["players"].values()]
        if division:
            team_ids = {team.team_id for team in self.list_teams(division)}
            players = [p for p in players if p.team_id in team_ids]
        return sorted(players, key=lambda p: p.points, reverse=True)

    # Goalies

    def add_goalie(self, goalie: Goalie) -> Goalie:
        self._insert("goalies", goalie.to_document())
        return goalie

    def find_goalie_by_name(self, name: str) -> Goalie | None:
        for raw in self._collections["goalies"].values():
            if raw.get("name") == name:
                return Goalie.from_document(raw)
        return None

    def update_goalie(self, goalie_id: str, partial: dict[str, Any]) -> None:
        self._update("goalies", goalie_id, partial)

    def delete_goalie(self, goalie_id: str) -> None:
        self._delete("goalies", goalie_id)

    def list_goalies(self, team_id: str | None = None) -> list[Goalie]:
        goalies = [Goalie.from_document(raw) for raw in self._collections["goalies"].values()]
        if team_id:
            goalies = [g for g in goalies if g.team_id == team_id]
        return sorted(goalies, key=lambda g: g.save_percentage, reverse=True)

    # Games

    def add_game(self, game: Game) -> Game:
        numbers = [int(raw.get("gameNumber", 0) or 0) for raw in self._collections["games"].values()]
        # Numbers of deleted games are never handed out again.
        game.game_number = max(max(numbers, default=0), self._last_game_number) + 1
        self._last_game_number = game.game_number
        self._insert("games", game.to_document())
        return game

    def get_game_by_id(self, game_id: str) -> Game | None:
        raw = self._collections["games"].get(game_id)
        return Game.from_document(raw) if raw else None

    def replace_game(self, game: Game) -> None:
        """Store ``game`` over its previous version, dropping fields it no longer carries."""
        if game.game_id not in self._collections["games"]:
            raise KeyError(f"No games document with id {game.game_id!r}")
        self._collections["games"][game.game_id] = game.to_document()
        self.save()

    def delete_game(self, game_id: str) -> None:
        self._delete("games", game_id)

    def list_games(self, division: str | None = None) -> list[Game]:
        games = [Game.from_document(raw) for raw in self._collections["games"].values()]
        if division:
            games = [g for g in games if g.division == division]
        return sorted(games, key=lambda g: (g.date, g.game_number))

    def upcoming_games(self, days: int, division: str | None = None, now: datetime | None = None) -> list[Game]:
        start = now or datetime.now()
        end = start + timedelta(days=days)
        return [g for g in self.list_games(division) if start <= g.date <= end]

    def recent_games(self, days: int, division: str | None = None, now: datetime | None = None) -> list[Game]:
        end = now or datetime.now()
        start = end - timedelta(days=days)
        games = [g for g in self.list_games(division) if start <= g.date <= end]
        return list(reversed(games))
