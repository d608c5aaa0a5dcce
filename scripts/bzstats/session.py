"""Dashboard session — current filter state over one immutable dataset.

Each setter validates its input, then recomputes everything from the full
snapshot and hands the chart payloads to the attached rendering surface.
A rendering surface is any object with ``draw(chart_id, chart)``; it may
raise MissingElementError for a target it does not have.
"""

import logging

from bzstats import aggregation, charts
from bzstats.constants import (
    DEFAULT_DIMENSION, DEFAULT_FILTER_VALUE, DEFAULT_MIN_GAMES, DEFAULT_RANKING_METHOD,
    DEFAULT_TIME_PERIOD, DIMENSIONS, TOP_N,
)
from bzstats.errors import MissingElementError
from bzstats.filtering import available_periods, filter_games, filter_options
from bzstats.ranking import normalize_ranking_method, rank_commanders, resolve_min_games
from bzstats.roles import classify_player_games

logger = logging.getLogger(__name__)


# ─── Chart Sets ─────────────────────────────────────────────────

def overview_charts(games, ranking_method=DEFAULT_RANKING_METHOD, min_games=DEFAULT_MIN_GAMES,
                    limit=TOP_N):
    """The general overview: popularity, rankings, factions, durations, activity."""
    method = normalize_ranking_method(ranking_method)
    return {
        "faction_distribution": charts.faction_distribution_chart(
            aggregation.aggregate_faction_distribution(games)),
        "commander_games": charts.commander_games_chart(
            aggregation.aggregate_commander_games(games), limit),
        "commander_ranking": charts.commander_ranking_chart(
            rank_commanders(games, method, min_games), method, limit),
        "map_popularity": charts.map_popularity_chart(
            aggregation.aggregate_map_popularity(games), limit),
        "commander_factions": charts.commander_faction_chart(
            aggregation.aggregate_commander_primary_factions(games), limit),
        "faction_performance": charts.faction_performance_chart(
            aggregation.aggregate_faction_performance(games)),
        "game_duration": charts.duration_chart(
            aggregation.aggregate_duration_histogram(games)),
        "monthly_activity": charts.monthly_activity_chart(
            aggregation.aggregate_monthly_activity(games)),
    }


def player_charts(games, player, limit=TOP_N):
    """Per-player breakdown, built from one pass of role classification."""
    views = classify_player_games(games, player)
    return {
        "player_roles": charts.player_roles_chart(aggregation.aggregate_player_roles(views)),
        "player_map_winrate": charts.player_performance_chart(
            aggregation.aggregate_player_performance(views, "map"), "map", "Win Rate by Map"),
        "player_faction_winrate": charts.player_performance_chart(
            aggregation.aggregate_player_performance(views, "faction"), "faction",
            "Win Rate by Faction"),
        "player_team_size": charts.player_performance_chart(
            aggregation.aggregate_player_performance(views, "team_size"), "team_size",
            "Win Rate by Team Size"),
        "player_duration": charts.duration_chart(
            aggregation.aggregate_duration_histogram(views), "Game Duration"),
        "player_monthly": charts.monthly_performance_chart(
            aggregation.aggregate_monthly_performance(views)),
        "player_teammates": charts.teammate_chart(
            aggregation.aggregate_teammate_frequency(views, limit)),
        "player_teammates_all": charts.teammate_chart(
            aggregation.aggregate_teammate_frequency(views), "All Teammates"),
    }


def map_charts(games, map_name):
    """Faction results and durations on one map."""
    return {
        "map_faction_performance": charts.faction_performance_chart(
            aggregation.aggregate_side_faction_performance(games),
            f"Faction Performance on {map_name}"),
        "map_duration": charts.duration_chart(
            aggregation.aggregate_duration_histogram(games), f"Game Duration on {map_name}"),
    }


def faction_charts(games, faction):
    """Map results and durations for one faction."""
    return {
        "faction_map_performance": charts.player_performance_chart(
            aggregation.aggregate_faction_map_performance(games, faction), "map",
            f"{faction} Performance by Map"),
        "faction_duration": charts.duration_chart(
            aggregation.aggregate_duration_histogram(games), f"{faction} Game Duration"),
    }


# ─── Session ────────────────────────────────────────────────────

class DashboardSession:
    """Query surface for one loaded dataset."""

    def __init__(self, dataset, surface=None):
        self.dataset = dataset
        self.surface = surface
        self.analysis_dimension = DEFAULT_DIMENSION
        self.filter_value = DEFAULT_FILTER_VALUE
        self.time_period = DEFAULT_TIME_PERIOD
        self.ranking_method = DEFAULT_RANKING_METHOD
        self.min_game_requirement = DEFAULT_MIN_GAMES

    # Setters: each one triggers a full recompute

    def set_analysis_dimension(self, dimension):
        if dimension not in DIMENSIONS:
            raise ValueError(f"Unknown analysis dimension: {dimension!r}")
        self.analysis_dimension = dimension
        self.filter_value = DEFAULT_FILTER_VALUE
        return self.refresh()

    def set_filter_value(self, value):
        self.filter_value = value or DEFAULT_FILTER_VALUE
        return self.refresh()

    def set_time_period(self, period):
        period = str(period) if period not in (None, "") else DEFAULT_TIME_PERIOD
        if period != DEFAULT_TIME_PERIOD:
            try:
                int(period)
            except ValueError:
                raise ValueError(f"Unknown time period: {period!r}") from None
        self.time_period = period
        return self.refresh()

    def set_ranking_method(self, method):
        self.ranking_method = normalize_ranking_method(method)
        return self.refresh()

    def set_min_game_requirement(self, requirement):
        resolve_min_games(requirement, len(self.dataset))
        self.min_game_requirement = requirement
        return self.refresh()

    def reset_filters(self):
        self.analysis_dimension = DEFAULT_DIMENSION
        self.filter_value = DEFAULT_FILTER_VALUE
        self.time_period = DEFAULT_TIME_PERIOD
        self.ranking_method = DEFAULT_RANKING_METHOD
        self.min_game_requirement = DEFAULT_MIN_GAMES
        return self.refresh()

    # Queries

    def filtered_games(self):
        """Games matching the current period, dimension and value (a fresh list)."""
        return filter_games(self.dataset.games, self.time_period,
                            self.analysis_dimension, self.filter_value)

    def filter_options(self):
        """Values selectable for the current dimension."""
        return filter_options(self.dataset.games, self.analysis_dimension)

    def available_periods(self):
        return ["all"] + [str(year) for year in available_periods(self.dataset.games)]

    def summary(self, games=None):
        """Header cards for the current selection."""
        if games is None:
            games = self.filtered_games()
        if self.analysis_dimension == "player" and self.filter_value:
            views = classify_player_games(games, self.filter_value)
            return aggregation.aggregate_player_summary(views)
        return aggregation.aggregate_summary(games)

    def build_charts(self, games=None):
        """Chart payloads for the current selection, keyed by chart id.

        A non-general dimension without a selected value has no charts.
        """
        if games is None:
            games = self.filtered_games()
        dimension, value = self.analysis_dimension, self.filter_value
        if dimension == "general":
            return overview_charts(games, self.ranking_method, self.min_game_requirement)
        if not value:
            return {}
        if dimension == "player":
            return player_charts(games, value)
        if dimension == "map":
            return map_charts(games, value)
        return faction_charts(games, value)

    def refresh(self):
        """Recompute everything for the current state and render it."""
        games = self.filtered_games()
        view = {
            "summary": self.summary(games),
            "charts": self.build_charts(games),
            "last_updated": self.dataset.last_updated,
        }
        self.render(view["charts"])
        return view

    def render(self, chart_payloads):
        """Hand payloads to the surface. Missing targets are logged and skipped."""
        if self.surface is None:
            logger.debug("No rendering surface attached, skipping %d charts", len(chart_payloads))
            return
        for chart_id, payload in chart_payloads.items():
            try:
                self.surface.draw(chart_id, payload)
            except MissingElementError as e:
                logger.warning("Rendering target %r missing: %s", chart_id, e)
