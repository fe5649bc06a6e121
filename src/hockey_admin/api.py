from __future__ import annotations

from datetime import date, datetime
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import DEFAULT_WINDOW_DAYS, DIVISIONS, data_file_path
from .service import LeagueService
from .store import DocumentStore


class GoalEntry(BaseModel):
    scorer: str = ""
    assist1: str = ""
    assist2: str = ""
    time: str = ""


class PenaltyEntry(BaseModel):
    player: str = ""
    infraction: str = ""
    minutes: str = ""


class GamePayload(BaseModel):
    date: datetime
    homeTeamId: str
    awayTeamId: str
    division: str = "A"
    status: str = "scheduled"
    homeGoalie: str = ""
    awayGoalie: str = ""
    referee: str = ""
    venue: str = ""
    homeScore: int | None = None
    awayScore: int | None = None
    homeEmptyNetGoals: int | None = None
    awayEmptyNetGoals: int | None = None
    shootout: bool = False
    homeShots: int = 0
    awayShots: int = 0
    homeGoals: list[GoalEntry] = []
    awayGoals: list[GoalEntry] = []
    homePenalties: list[PenaltyEntry] = []
    awayPenalties: list[PenaltyEntry] = []


class TeamPayload(BaseModel):
    name: str
    division: str = "A"
    logo: str | None = None


class PlayerPayload(BaseModel):
    name: str
    teamId: str
    jerseyNumber: int = 0
    position: str = "C"


class PlayerUpdate(BaseModel):
    name: str | None = None
    teamId: str | None = None
    jerseyNumber: int | None = None
    position: str | None = None


class GoaliePayload(BaseModel):
    name: str
    teamId: str | None = None


class PopulateScheduleSelection(BaseModel):
    division: str
    start: date
    games_per_matchup: int = 1
    replace_existing: bool = False


def _check_division(division: str | None) -> str | None:
    if division is None:
        return None
    value = division.upper()
    if value not in DIVISIONS:
        raise HTTPException(status_code=400, detail=f"Unknown division '{division}'")
    return value


def create_app(service: LeagueService) -> FastAPI:
    app = FastAPI(title="Hockey League Admin API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.service = service

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/standings")
    def standings(division: str | None = None) -> list[dict[str, Any]]:
        with service._lock:
            return service.standings(division=_check_division(division))

    @app.get("/api/players")
    def players(division: str | None = None) -> list[dict[str, Any]]:
        with service._lock:
            return service.player_stats(division=_check_division(division))

    @app.get("/api/goalies")
    def goalies() -> list[dict[str, Any]]:
        with service._lock:
            return service.goalie_stats()

    @app.get("/api/schedule")
    def schedule(division: str | None = None, window: str = "all", days: int = DEFAULT_WINDOW_DAYS) -> list[dict[str, Any]]:
        div = _check_division(division)
        with service._lock:
            if window == "upcoming":
                return service.upcoming(days=days, division=div)
            if window == "recent":
                return service.recent(days=days, division=div)
            if window != "all":
                raise HTTPException(status_code=400, detail=f"Unknown window '{window}'")
            return service.schedule(division=div)

    @app.get("/api/games/{game_id}")
    def get_game(game_id: str) -> dict[str, Any]:
        with service._lock:
            game = service.get_game(game_id)
        if game is None:
            raise HTTPException(status_code=404, detail="Game not found")
        return game

    @app.post("/api/games")
    def create_game(payload: GamePayload) -> dict[str, Any]:
        payload = payload.model_copy(update={"division": _check_division(payload.division)})
        with service._lock:
            return service.create_game(payload.model_dump())

    @app.put("/api/games/{game_id}")
    def edit_game(game_id: str, payload: GamePayload) -> dict[str, Any]:
        payload = payload.model_copy(update={"division": _check_division(payload.division)})
        with service._lock:
            try:
                return service.edit_game(game_id, payload.model_dump())
            except KeyError:
                raise HTTPException(status_code=404, detail="Game not found") from None

    @app.delete("/api/games/{game_id}")
    def delete_game(game_id: str) -> dict[str, Any]:
        with service._lock:
            try:
                return service.delete_game(game_id)
            except KeyError:
                raise HTTPException(status_code=404, detail="Game not found") from None

    @app.post("/api/teams")
    def add_team(payload: TeamPayload) -> dict[str, Any]:
        payload = payload.model_copy(update={"division": _check_division(payload.division)})
        with service._lock:
            if service.store.find_team_by_name(payload.name) is not None:
                raise HTTPException(status_code=400, detail=f"Team '{payload.name}' already exists")
            return service.add_team(payload.model_dump(exclude_none=True))

    @app.post("/api/players")
    def add_player(payload: PlayerPayload) -> dict[str, Any]:
        with service._lock:
            if service.store.get_team(payload.teamId) is None:
                raise HTTPException(status_code=404, detail="Team not found")
            return service.add_player(payload.model_dump())

    @app.post("/api/goalies")
    def add_goalie(payload: GoaliePayload) -> dict[str, Any]:
        with service._lock:
            return service.add_goalie(payload.model_dump(exclude_none=True))

    @app.put("/api/players/{player_id}")
    def update_player(player_id: str, payload: PlayerUpdate) -> dict[str, Any]:
        with service._lock:
            if payload.teamId is not None and service.store.get_team(payload.teamId) is None:
                raise HTTPException(status_code=404, detail="Team not found")
            try:
                return service.update_player(player_id, payload.model_dump(exclude_none=True))
            except KeyError:
                raise HTTPException(status_code=404, detail="Player not found") from None

    @app.delete("/api/players/{player_id}")
    def delete_player(player_id: str) -> dict[str, Any]:
        with service._lock:
            try:
                return service.delete_player(player_id)
            except KeyError:
                raise HTTPException(status_code=404, detail="Player not found") from None

    @app.delete("/api/goalies/{goalie_id}")
    def delete_goalie(goalie_id: str) -> dict[str, Any]:
        with service._lock:
            try:
                return service.delete_goalie(goalie_id)
            except KeyError:
                raise HTTPException(status_code=404, detail="Goalie not found") from None

    @app.post("/api/admin/reset-goalie-stats")
    def reset_goalie_stats() -> dict[str, Any]:
        with service._lock:
            return service.reset_goalie_stats()

    @app.post("/api/admin/rebuild-goalie-stats")
    def rebuild_goalie_stats() -> dict[str, Any]:
        with service._lock:
            return service.rebuild_goalie_stats()

    @app.post("/api/admin/populate-schedule")
    def populate_schedule(payload: PopulateScheduleSelection) -> dict[str, Any]:
        division = _check_division(payload.division)
        with service._lock:
            return service.populate_schedule(
                division=division,
                start=payload.start,
                games_per_matchup=payload.games_per_matchup,
                replace_existing=payload.replace_existing,
            )

    return app


service = LeagueService(DocumentStore(data_file_path()))
app = create_app(service)
