"""Pure stat delta calculations for one game result.

Nothing here touches the store: callers compute the delta for the previous
version of a game and for the new one, combine them, and persist the net
change once per record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .config import SAVE_PCT_DECIMALS, SHOOTOUT_LOSS_POINTS, TIE_POINTS, WIN_POINTS
from .errors import MalformedNumeric
from .models import BoxScore, Goal, Goalie, GoalieGameData, Penalty, Player, Team


@dataclass(frozen=True, slots=True)
class TeamDelta:
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0

    def __add__(self, other: TeamDelta) -> TeamDelta:
        return TeamDelta(
            wins=self.wins + other.wins,
            losses=self.losses + other.losses,
            ties=self.ties + other.ties,
            points=self.points + other.points,
            goals_for=self.goals_for + other.goals_for,
            goals_against=self.goals_against + other.goals_against,
        )

    def __neg__(self) -> TeamDelta:
        return TeamDelta(
            wins=-self.wins,
            losses=-self.losses,
            ties=-self.ties,
            points=-self.points,
            goals_for=-self.goals_for,
            goals_against=-self.goals_against,
        )

    def __sub__(self, other: TeamDelta) -> TeamDelta:
        return self + (-other)

    @property
    def is_zero(self) -> bool:
        return self == TeamDelta()

    def apply_to(self, team: Team) -> dict[str, int]:
        return {
            "wins": team.wins + self.wins,
            "losses": team.losses + self.losses,
            "ties": team.ties + self.ties,
            "goalsFor": team.goals_for + self.goals_for,
            "goalsAgainst": team.goals_against + self.goals_against,
            "points": team.points + self.points,
        }


@dataclass(frozen=True, slots=True)
class StandingsDelta:
    home: TeamDelta
    away: TeamDelta

    def __add__(self, other: StandingsDelta) -> StandingsDelta:
        return StandingsDelta(home=self.home + other.home, away=self.away + other.away)

    def __neg__(self) -> StandingsDelta:
        return StandingsDelta(home=-self.home, away=-self.away)

    def __sub__(self, other: StandingsDelta) -> StandingsDelta:
        return self + (-other)


EMPTY_STANDINGS_DELTA = StandingsDelta(home=TeamDelta(), away=TeamDelta())


def compute_standings_delta(home_score: int, away_score: int, shootout: bool = False) -> StandingsDelta:
    """Standings change for one final score.

    Equal scores are always a tie, even with the shootout flag set; the flag
    only gives the loser a point when one side outscored the other.
    """
    loser_points = SHOOTOUT_LOSS_POINTS if shootout else 0
    if home_score > away_score:
        home = TeamDelta(wins=1, points=WIN_POINTS)
        away = TeamDelta(losses=1, points=loser_points)
    elif away_score > home_score:
        home = TeamDelta(losses=1, points=loser_points)
        away = TeamDelta(wins=1, points=WIN_POINTS)
    else:
        home = TeamDelta(ties=1, points=TIE_POINTS)
        away = TeamDelta(ties=1, points=TIE_POINTS)
    return StandingsDelta(
        home=home + TeamDelta(goals_for=home_score, goals_against=away_score),
        away=away + TeamDelta(goals_for=away_score, goals_against=home_score),
    )


@dataclass(frozen=True, slots=True)
class PlayerDelta:
    goals: int = 0
    assists: int = 0
    penalty_minutes: int = 0
    games_played: int = 0

    def __add__(self, other: PlayerDelta) -> PlayerDelta:
        return PlayerDelta(
            goals=self.goals + other.goals,
            assists=self.assists + other.assists,
            penalty_minutes=self.penalty_minutes + other.penalty_minutes,
            games_played=self.games_played + other.games_played,
        )

    def __neg__(self) -> PlayerDelta:
        return PlayerDelta(
            goals=-self.goals,
            assists=-self.assists,
            penalty_minutes=-self.penalty_minutes,
            games_played=-self.games_played,
        )

    def __sub__(self, other: PlayerDelta) -> PlayerDelta:
        return self + (-other)

    @property
    def points(self) -> int:
        return self.goals + self.assists

    def apply_to(self, player: Player) -> dict[str, int]:
        goals = player.goals + self.goals
        assists = player.assists + self.assists
        update = {
            "goals": goals,
            "assists": assists,
            "points": goals + assists,
            "penaltyMinutes": player.penalty_minutes + self.penalty_minutes,
        }
        if self.games_played:
            update["gamesPlayed"] = player.games_played + self.games_played
        return update


def parse_minutes(raw: Any, owner: str = "") -> int:
    text = str(raw).strip()
    try:
        minutes = int(text)
    except ValueError:
        raise MalformedNumeric("minutes", raw, owner) from None
    if minutes < 0:
        raise MalformedNumeric("minutes", raw, owner)
    return minutes


def compute_player_deltas(
    goals: Iterable[Goal],
    penalties: Iterable[Penalty],
    malformed: dict[str, MalformedNumeric] | None = None,
) -> dict[str, PlayerDelta]:
    """Per-player goals, assists and penalty minutes keyed by player name.

    A penalty with unparseable minutes raises ``MalformedNumeric`` unless a
    ``malformed`` dict is given, in which case the error is stored there under
    the player's name and the penalty is skipped.
    """
    deltas: dict[str, PlayerDelta] = {}

    def _credit(name: str, delta: PlayerDelta) -> None:
        deltas[name] = deltas.get(name, PlayerDelta()) + delta

    for goal in goals:
        if goal.scorer:
            _credit(goal.scorer, PlayerDelta(goals=1))
        for assister in (goal.assist1, goal.assist2):
            if assister:
                _credit(assister, PlayerDelta(assists=1))

    for penalty in penalties:
        if not (penalty.player and penalty.minutes):
            continue
        try:
            minutes = parse_minutes(penalty.minutes, owner=penalty.player)
        except MalformedNumeric as exc:
            if malformed is None:
                raise
            malformed[penalty.player] = exc
            continue
        _credit(penalty.player, PlayerDelta(penalty_minutes=minutes))
    return deltas


def box_score_deltas(
    box: BoxScore,
    malformed: dict[str, MalformedNumeric] | None = None,
) -> dict[str, PlayerDelta]:
    return compute_player_deltas(
        [*box.home_goals, *box.away_goals],
        [*box.home_penalties, *box.away_penalties],
        malformed=malformed,
    )


@dataclass(frozen=True, slots=True)
class GoalieDelta:
    shots: int = 0
    goals_allowed: int = 0
    saves: int = 0
    games_played: int = 0

    def __add__(self, other: GoalieDelta) -> GoalieDelta:
        return GoalieDelta(
            shots=self.shots + other.shots,
            goals_allowed=self.goals_allowed + other.goals_allowed,
            saves=self.saves + other.saves,
            games_played=self.games_played + other.games_played,
        )

    def __neg__(self) -> GoalieDelta:
        return GoalieDelta(
            shots=-self.shots,
            goals_allowed=-self.goals_allowed,
            saves=-self.saves,
            games_played=-self.games_played,
        )

    def __sub__(self, other: GoalieDelta) -> GoalieDelta:
        return self + (-other)

    def apply_to(self, goalie: Goalie) -> dict[str, Any]:
        total_shots = goalie.total_shots + self.shots
        saves = goalie.saves + self.saves
        update: dict[str, Any] = {
            "totalShots": total_shots,
            "goalsAllowed": goalie.goals_allowed + self.goals_allowed,
            "saves": saves,
            "savePercentage": save_percentage(saves, total_shots),
        }
        if self.games_played:
            update["gamesPlayed"] = goalie.games_played + self.games_played
        return update


def compute_goalie_delta(shots_against: int, goals_against: int, empty_net_goals: int = 0) -> GoalieDelta:
    # Empty-net goals count against the team, not the goalie.
    goals_allowed = goals_against - empty_net_goals
    return GoalieDelta(shots=shots_against, goals_allowed=goals_allowed, saves=shots_against - goals_allowed)


def home_goalie_delta(data: GoalieGameData) -> GoalieDelta:
    return compute_goalie_delta(data.away_shots, data.away_score, data.away_empty_net_goals)


def away_goalie_delta(data: GoalieGameData) -> GoalieDelta:
    return compute_goalie_delta(data.home_shots, data.home_score, data.home_empty_net_goals)


def save_percentage(saves: int, total_shots: int) -> float:
    if total_shots <= 0:
        return 0.0
    return round(saves / total_shots * 100, SAVE_PCT_DECIMALS)
