from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union
from uuid import uuid4

from .config import GAME_STATUSES, SAVE_PCT_DECIMALS


def _new_id() -> str:
    return uuid4().hex


def _int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _optional_int(raw: Any) -> int | None:
    if raw is None or raw == "":
        return None
    return int(raw)


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


@dataclass(slots=True)
class Team:
    name: str
    division: str = "A"
    team_id: str = field(default_factory=_new_id)
    logo: str | None = None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def goal_diff(self) -> int:
        return self.goals_for - self.goals_against

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.team_id,
            "name": self.name,
            "division": self.division,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "goalsFor": self.goals_for,
            "goalsAgainst": self.goals_against,
            "points": self.points,
        }
        if self.logo is not None:
            doc["logo"] = self.logo
        return doc

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Team:
        return cls(
            team_id=str(raw["id"]),
            name=_text(raw.get("name")),
            division=_text(raw.get("division")).upper() or "A",
            logo=raw.get("logo"),
            wins=_int(raw.get("wins")),
            losses=_int(raw.get("losses")),
            ties=_int(raw.get("ties")),
            goals_for=_int(raw.get("goalsFor")),
            goals_against=_int(raw.get("goalsAgainst")),
            points=_int(raw.get("points")),
        )


@dataclass(slots=True)
class Player:
    name: str
    team_id: str
    position: str = "C"
    jersey_number: int = 0
    player_id: str = field(default_factory=_new_id)
    goals: int = 0
    assists: int = 0
    points: int = 0
    penalty_minutes: int = 0
    games_played: int = 0

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.player_id,
            "name": self.name,
            "teamId": self.team_id,
            "jerseyNumber": self.jersey_number,
            "position": self.position,
            "goals": self.goals,
            "assists": self.assists,
            "points": self.points,
            "penaltyMinutes": self.penalty_minutes,
            "gamesPlayed": self.games_played,
        }

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Player:
        return cls(
            player_id=str(raw["id"]),
            name=_text(raw.get("name")),
            team_id=_text(raw.get("teamId")),
            jersey_number=_int(raw.get("jerseyNumber")),
            position=_text(raw.get("position")) or "C",
            goals=_int(raw.get("goals")),
            assists=_int(raw.get("assists")),
            points=_int(raw.get("points")),
            penalty_minutes=_int(raw.get("penaltyMinutes")),
            games_played=_int(raw.get("gamesPlayed")),
        )


@dataclass(slots=True)
class Goalie:
    name: str
    team_id: str | None = None
    goalie_id: str = field(default_factory=_new_id)
    games_played: int = 0
    total_shots: int = 0
    goals_allowed: int = 0
    saves: int = 0
    save_percentage: float = 0.0

    @property
    def gaa(self) -> float:
        if self.games_played <= 0:
            return 0.0
        return round(self.goals_allowed / self.games_played, SAVE_PCT_DECIMALS)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.goalie_id,
            "name": self.name,
            "gamesPlayed": self.games_played,
            "totalShots": self.total_shots,
            "goalsAllowed": self.goals_allowed,
            "saves": self.saves,
            "savePercentage": self.save_percentage,
        }
        if self.team_id is not None:
            doc["teamId"] = self.team_id
        return doc

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Goalie:
        try:
            save_pct = float(raw.get("savePercentage", 0) or 0)
        except (TypeError, ValueError):
            save_pct = 0.0
        return cls(
            goalie_id=str(raw["id"]),
            name=_text(raw.get("name")),
            team_id=raw.get("teamId"),
            games_played=_int(raw.get("gamesPlayed")),
            total_shots=_int(raw.get("totalShots")),
            goals_allowed=_int(raw.get("goalsAllowed")),
            saves=_int(raw.get("saves")),
            save_percentage=save_pct,
        )


@dataclass(slots=True)
class Goal:
    scorer: str = ""
    assist1: str = ""
    assist2: str = ""
    time: str = ""

    def to_document(self) -> dict[str, str]:
        return {"scorer": self.scorer, "assist1": self.assist1, "assist2": self.assist2, "time": self.time}

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Goal:
        return cls(
            scorer=_text(raw.get("scorer")),
            assist1=_text(raw.get("assist1")),
            assist2=_text(raw.get("assist2")),
            time=_text(raw.get("time")),
        )

    def is_blank(self) -> bool:
        return not (self.scorer or self.assist1 or self.assist2 or self.time)


@dataclass(slots=True)
class Penalty:
    player: str = ""
    infraction: str = ""
    minutes: str = ""

    def to_document(self) -> dict[str, str]:
        return {"player": self.player, "infraction": self.infraction, "minutes": self.minutes}

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Penalty:
        return cls(
            player=_text(raw.get("player")),
            infraction=_text(raw.get("infraction")),
            minutes=_text(raw.get("minutes")),
        )

    def is_blank(self) -> bool:
        return not (self.player or self.infraction or self.minutes)


@dataclass(frozen=True, slots=True)
class Scheduled:
    pass


@dataclass(frozen=True, slots=True)
class InProgress:
    pass


@dataclass(frozen=True, slots=True)
class Completed:
    home_score: int
    away_score: int
    shootout: bool = False


GameState = Union[Scheduled, InProgress, Completed]


@dataclass(frozen=True, slots=True)
class ScoreSnapshot:
    """Scores of a game version, used to reverse its standings delta."""

    home_score: int | None = None
    away_score: int | None = None
    shootout: bool = False

    @property
    def is_final(self) -> bool:
        return self.home_score is not None and self.away_score is not None


@dataclass(slots=True)
class BoxScore:
    home_team: str
    away_team: str
    home_goals: list[Goal] = field(default_factory=list)
    away_goals: list[Goal] = field(default_factory=list)
    home_penalties: list[Penalty] = field(default_factory=list)
    away_penalties: list[Penalty] = field(default_factory=list)


@dataclass(slots=True)
class GoalieGameData:
    home_goalie: str = ""
    away_goalie: str = ""
    home_score: int = 0
    away_score: int = 0
    home_shots: int = 0
    away_shots: int = 0
    home_empty_net_goals: int = 0
    away_empty_net_goals: int = 0

    @property
    def has_goalies(self) -> bool:
        return bool(self.home_goalie or self.away_goalie)


@dataclass(slots=True)
class Game:
    home_team: str
    away_team: str
    date: datetime
    division: str = "A"
    game_id: str = field(default_factory=_new_id)
    game_number: int = 0
    status: str = "scheduled"
    home_goalie: str = ""
    away_goalie: str = ""
    referee: str = ""
    venue: str = ""
    home_score: int | None = None
    away_score: int | None = None
    home_empty_net_goals: int | None = None
    away_empty_net_goals: int | None = None
    shootout: bool = False
    home_shots: int = 0
    away_shots: int = 0
    home_goals: list[Goal] = field(default_factory=list)
    away_goals: list[Goal] = field(default_factory=list)
    home_penalties: list[Penalty] = field(default_factory=list)
    away_penalties: list[Penalty] = field(default_factory=list)

    @property
    def has_final_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    @property
    def state(self) -> GameState:
        if self.status == "completed" and self.has_final_score:
            return Completed(self.home_score, self.away_score, bool(self.shootout))
        if self.status == "in_progress":
            return InProgress()
        return Scheduled()

    @property
    def is_completed(self) -> bool:
        return isinstance(self.state, Completed)

    def normalize_status(self) -> None:
        # Status is denormalized from the scores; an in-progress game keeps its flag until both are entered.
        if self.has_final_score:
            self.status = "completed"
        elif self.status not in GAME_STATUSES or self.status == "completed":
            self.status = "scheduled"

    def score_snapshot(self) -> ScoreSnapshot:
        if not self.is_completed:
            return ScoreSnapshot(shootout=bool(self.shootout))
        return ScoreSnapshot(self.home_score, self.away_score, bool(self.shootout))

    def box_score(self) -> BoxScore:
        return BoxScore(
            home_team=self.home_team,
            away_team=self.away_team,
            home_goals=list(self.home_goals),
            away_goals=list(self.away_goals),
            home_penalties=list(self.home_penalties),
            away_penalties=list(self.away_penalties),
        )

    def goalie_data(self) -> GoalieGameData:
        return GoalieGameData(
            home_goalie=self.home_goalie,
            away_goalie=self.away_goalie,
            home_score=self.home_score or 0,
            away_score=self.away_score or 0,
            home_shots=self.home_shots,
            away_shots=self.away_shots,
            home_empty_net_goals=self.home_empty_net_goals or 0,
            away_empty_net_goals=self.away_empty_net_goals or 0,
        )

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.game_id,
            "gameNumber": self.game_number,
            "date": self.date.isoformat(),
            "homeTeamId": self.home_team,
            "awayTeamId": self.away_team,
            "division": self.division,
            "homeGoalie": self.home_goalie,
            "awayGoalie": self.away_goalie,
            "referee": self.referee,
            "venue": self.venue,
            "shootout": self.shootout,
            "status": self.status,
            "homeShots": self.home_shots,
            "awayShots": self.away_shots,
            "homeGoals": [g.to_document() for g in self.home_goals],
            "awayGoals": [g.to_document() for g in self.away_goals],
            "homePenalties": [p.to_document() for p in self.home_penalties],
            "awayPenalties": [p.to_document() for p in self.away_penalties],
        }
        # Absent optional numbers are omitted rather than stored as null.
        optional = {
            "homeScore": self.home_score,
            "awayScore": self.away_score,
            "homeEmptyNetGoals": self.home_empty_net_goals,
            "awayEmptyNetGoals": self.away_empty_net_goals,
        }
        doc.update({key: value for key, value in optional.items() if value is not None})
        return doc

    @classmethod
    def from_document(cls, raw: dict[str, Any]) -> Game:
        raw_date = raw.get("date")
        if isinstance(raw_date, datetime):
            date = raw_date
        elif raw_date:
            date = datetime.fromisoformat(str(raw_date))
        else:
            date = datetime.now()
        if date.tzinfo is not None:
            # Stored dates are naive local time.
            date = date.astimezone().replace(tzinfo=None)

        def _rows(key: str) -> list[dict[str, Any]]:
            rows = raw.get(key) or []
            return [row for row in rows if isinstance(row, dict)] if isinstance(rows, list) else []

        return cls(
            game_id=str(raw["id"]),
            game_number=_int(raw.get("gameNumber")),
            date=date,
            home_team=_text(raw.get("homeTeamId")),
            away_team=_text(raw.get("awayTeamId")),
            division=_text(raw.get("division")).upper() or "A",
            status=_text(raw.get("status")) or "scheduled",
            home_goalie=_text(raw.get("homeGoalie")),
            away_goalie=_text(raw.get("awayGoalie")),
            referee=_text(raw.get("referee")),
            venue=_text(raw.get("venue")),
            home_score=_optional_int(raw.get("homeScore")),
            away_score=_optional_int(raw.get("awayScore")),
            home_empty_net_goals=_optional_int(raw.get("homeEmptyNetGoals")),
            away_empty_net_goals=_optional_int(raw.get("awayEmptyNetGoals")),
            shootout=bool(raw.get("shootout", False)),
            home_shots=_int(raw.get("homeShots")),
            away_shots=_int(raw.get("awayShots")),
            home_goals=[Goal.from_document(row) for row in _rows("homeGoals")],
            away_goals=[Goal.from_document(row) for row in _rows("awayGoals")],
            home_penalties=[Penalty.from_document(row) for row in _rows("homePenalties")],
            away_penalties=[Penalty.from_document(row) for row in _rows("awayPenalties")],
        )
