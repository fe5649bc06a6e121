"""Bulk maintenance over the whole league: resets and rebuilds from games."""

from __future__ import annotations

import logging

from .deltas import GoalieDelta, away_goalie_delta, home_goalie_delta
from .errors import ReconcileReport, ReferenceNotFound
from .models import Goalie
from .store import DocumentStore

logger = logging.getLogger(__name__)

STANDINGS_FIELDS = ("wins", "losses", "ties", "points", "goalsFor", "goalsAgainst")
GOALIE_FIELDS = ("gamesPlayed", "totalShots", "goalsAllowed", "saves", "savePercentage")


def reset_team_standings(store: DocumentStore, division: str | None = None) -> int:
    teams = store.list_teams(division)
    for team in teams:
        store.update_team(team.team_id, {key: 0 for key in STANDINGS_FIELDS})
    logger.info("Reset standings for %d teams", len(teams))
    return len(teams)


def reset_goalie_stats(store: DocumentStore) -> int:
    goalies = store.list_goalies()
    for goalie in goalies:
        store.update_goalie(goalie.goalie_id, {key: 0 for key in GOALIE_FIELDS})
    logger.info("Reset stats for %d goalies", len(goalies))
    return len(goalies)


def rebuild_goalie_stats(store: DocumentStore) -> ReconcileReport:
    """Recompute every credited goalie's totals from the completed games.

    Goalies that appear in no completed game keep their stored totals; run
    ``reset_goalie_stats`` first for a clean slate.
    """
    report = ReconcileReport()
    games = [g for g in store.list_games() if g.is_completed and (g.home_goalie or g.away_goalie)]

    totals: dict[str, GoalieDelta] = {}
    for game in games:
        data = game.goalie_data()
        for name, delta in ((data.home_goalie, home_goalie_delta(data)), (data.away_goalie, away_goalie_delta(data))):
            if name:
                totals[name] = totals.get(name, GoalieDelta()) + delta + GoalieDelta(games_played=1)

    for name, delta in totals.items():
        goalie = store.find_goalie_by_name(name)
        if goalie is None:
            error = ReferenceNotFound("Goalie", name)
            logger.warning("%s", error)
            report.record_error("goalie", error)
            continue
        # Applied to a zeroed record so the result is the full-season total.
        store.update_goalie(goalie.goalie_id, delta.apply_to(Goalie(name=goalie.name)))
        report.record_update("goalie", name)
    logger.info("Recalculated stats for %d goalies from %d games", len(report.updated), len(games))
    return report
