"""Apply game results to team standings and player/goalie career totals.

Each reconciler takes the new version of a game and, when an already
completed game is edited, the previous version. Old and new deltas are
combined in memory and each affected record gets one partial write with the
net change. Records are independent: a lookup or parse failure for one is
logged and reported while the others are still written.
"""

from __future__ import annotations

import logging

from .deltas import (
    EMPTY_STANDINGS_DELTA,
    GoalieDelta,
    PlayerDelta,
    TeamDelta,
    away_goalie_delta,
    box_score_deltas,
    compute_standings_delta,
    home_goalie_delta,
)
from .errors import MalformedNumeric, ReconcileReport, ReferenceNotFound
from .models import BoxScore, Completed, Game, Goalie, GoalieGameData, Player, ScoreSnapshot, Team
from .store import EntityStore

logger = logging.getLogger(__name__)


def _missing(report: ReconcileReport, entity: str, error: ReferenceNotFound) -> None:
    logger.warning("%s", error)
    report.record_error(entity, error)


def reconcile_standings(
    store: EntityStore,
    game: Game,
    old_game: ScoreSnapshot | None = None,
    report: ReconcileReport | None = None,
) -> ReconcileReport:
    if report is None:
        report = ReconcileReport()

    home_team = store.find_team_by_name(game.home_team)
    away_team = store.find_team_by_name(game.away_team)
    if home_team is None or away_team is None:
        for name, team in ((game.home_team, home_team), (game.away_team, away_team)):
            if team is None:
                _missing(report, "team", ReferenceNotFound("Team", name))
        return report

    net = EMPTY_STANDINGS_DELTA
    if old_game is not None and old_game.is_final:
        net = net - compute_standings_delta(old_game.home_score, old_game.away_score, old_game.shootout)
    state = game.state
    if isinstance(state, Completed):
        net = net + compute_standings_delta(state.home_score, state.away_score, state.shootout)

    if home_team.team_id == away_team.team_id:
        writes: list[tuple[Team, TeamDelta]] = [(home_team, net.home + net.away)]
    else:
        writes = [(home_team, net.home), (away_team, net.away)]

    for team, delta in writes:
        if delta.is_zero:
            continue
        try:
            store.update_team(team.team_id, delta.apply_to(team))
        except KeyError:
            _missing(report, "team", ReferenceNotFound("Team", team.name))
            continue
        report.record_update("team", team.name)
    logger.info("Team standings updated for game %s", game.game_id)
    return report


def _resolve_teams(store: EntityStore, box: BoxScore) -> list[Team]:
    # Missing teams are reported by the standings reconciler; here that side's lookups are just skipped.
    teams: list[Team] = []
    for name in (box.home_team, box.away_team):
        team = store.find_team_by_name(name)
        if team is None:
            logger.debug("No team %r for player lookups", name)
            continue
        teams.append(team)
    return teams


def _find_player(store: EntityStore, name: str, teams: list[Team]) -> Player | None:
    # First match wins: a name shared across the two teams resolves to the home player.
    for team in teams:
        player = store.find_player_by_name(name, team.team_id)
        if player is not None:
            return player
    return None


def _credited_players(
    store: EntityStore,
    box: BoxScore,
    report: ReconcileReport,
    report_malformed: bool,
) -> dict[str, tuple[Player, PlayerDelta | None]]:
    """Resolve a box score's credits to players; the delta is None for a malformed record."""
    malformed: dict[str, MalformedNumeric] = {}
    deltas = box_score_deltas(box, malformed=malformed)
    teams = _resolve_teams(store, box)
    scope = " / ".join(team.name for team in teams) or None

    credited: dict[str, tuple[Player, PlayerDelta | None]] = {}
    for name in [*deltas, *(n for n in malformed if n not in deltas)]:
        player = _find_player(store, name, teams)
        if player is None:
            _missing(report, "player", ReferenceNotFound("Player", name, scope))
            continue
        if name in malformed:
            if report_malformed:
                logger.warning("Skipping stats for %s: %s", name, malformed[name])
                report.record_error("player", malformed[name])
            credited[player.player_id] = (player, None)
            continue
        credited[player.player_id] = (player, deltas[name])
    return credited


def reconcile_player_stats(
    store: EntityStore,
    new_box_score: BoxScore | None,
    old_box_score: BoxScore | None = None,
    report: ReconcileReport | None = None,
) -> ReconcileReport:
    """Move player totals from ``old_box_score`` to ``new_box_score``.

    ``new_box_score`` is None when a completed game went back to scheduled:
    only the reversal happens, and the game is taken off the players'
    games played. A game is counted in games played only the first time it
    is applied to a player.

    A player whose penalty minutes do not parse carries nothing from that
    version of the game: nothing of theirs is applied from a malformed new
    box score (their old credits are taken back), and nothing is reversed
    for a malformed old one.
    """
    if report is None:
        report = ReconcileReport()

    old = _credited_players(store, old_box_score, report, False) if old_box_score is not None else {}
    new = _credited_players(store, new_box_score, report, True) if new_box_score is not None else {}

    for player_id in {**old, **new}:
        player = (new.get(player_id) or old[player_id])[0]
        old_delta = old[player_id][1] if player_id in old else None
        new_delta = new[player_id][1] if player_id in new else None

        net = PlayerDelta()
        if old_delta is not None:
            net = net - old_delta
            if new_box_score is None or (player_id in new and new_delta is None):
                net = net - PlayerDelta(games_played=1)
        if new_delta is not None:
            net = net + new_delta
            if old_box_score is None or (player_id in old and old_delta is None):
                net = net + PlayerDelta(games_played=1)

        if net == PlayerDelta():
            continue
        try:
            store.update_player(player_id, net.apply_to(player))
        except KeyError:
            _missing(report, "player", ReferenceNotFound("Player", player.name))
            continue
        logger.debug("Updated stats for %s: %s", player.name, net)
        report.record_update("player", player.name)
    return report


def reconcile_goalie_stats(
    store: EntityStore,
    new_data: GoalieGameData | None,
    old_data: GoalieGameData | None = None,
    report: ReconcileReport | None = None,
) -> ReconcileReport:
    """Move goalie totals from ``old_data`` to ``new_data``, side by side.

    Each side is handled on its own, so a goalie added, removed or swapped in
    an edit loses the old game's numbers while the new goalie gains the new
    ones. Games played follows the same rule as for players.
    """
    if report is None:
        report = ReconcileReport()

    pending: dict[str, tuple[Goalie, GoalieDelta]] = {}
    for data, sign in ((old_data, -1), (new_data, 1)):
        if data is None:
            continue
        counts_game = (sign > 0 and old_data is None) or (sign < 0 and new_data is None)
        for name, side_delta in ((data.home_goalie, home_goalie_delta), (data.away_goalie, away_goalie_delta)):
            if not name:
                continue
            goalie = store.find_goalie_by_name(name)
            if goalie is None:
                _missing(report, "goalie", ReferenceNotFound("Goalie", name))
                continue
            delta = side_delta(data)
            if counts_game:
                delta = delta + GoalieDelta(games_played=1)
            signed = delta if sign > 0 else -delta
            _, running = pending.get(goalie.goalie_id, (goalie, GoalieDelta()))
            pending[goalie.goalie_id] = (goalie, running + signed)

    for goalie_id, (goalie, delta) in pending.items():
        if delta == GoalieDelta():
            continue
        update = delta.apply_to(goalie)
        try:
            store.update_goalie(goalie_id, update)
        except KeyError:
            _missing(report, "goalie", ReferenceNotFound("Goalie", goalie.name))
            continue
        logger.debug("Updated goalie %s: %s saves, %s%% save percentage", goalie.name, update["saves"], update["savePercentage"])
        report.record_update("goalie", goalie.name)
    return report
