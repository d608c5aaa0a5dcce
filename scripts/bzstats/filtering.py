"""Game filtering — time period and analysis dimension selection."""

from bzstats.constants import (
    DEFAULT_DIMENSION, DEFAULT_FILTER_VALUE, DEFAULT_TIME_PERIOD, DIMENSIONS,
)


def game_participants(game):
    """Every player name in a game: both commanders, both teams, both straggler lists."""
    names = [game["commander1"], game["commander2"]]
    names.extend(game["team_one"])
    names.extend(game["team_two"])
    names.extend(game["team_one_stragglers"])
    names.extend(game["team_two_stragglers"])
    return names


def played_in(game, player):
    """True if the player took part in the game in any capacity."""
    return player in game_participants(game)


def filter_games_by_period(games, time_period):
    """Filter games to one year. 'all' (or empty) returns every game."""
    if time_period in (None, "", DEFAULT_TIME_PERIOD):
        return list(games)
    year = int(time_period)
    return [g for g in games if g["year"] == year]


def filter_games_by_dimension(games, dimension, value):
    """Filter games on the selected player, map or faction.

    No filtering happens for the general dimension or an empty value.
    """
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown analysis dimension: {dimension!r}")
    if dimension == "general" or not value:
        return list(games)
    if dimension == "player":
        return [g for g in games if played_in(g, value)]
    if dimension == "map":
        return [g for g in games if g["map"] == value]
    return [g for g in games if value in (g["faction1"], g["faction2"])]


def filter_games(games, time_period=DEFAULT_TIME_PERIOD, dimension=DEFAULT_DIMENSION,
                 value=DEFAULT_FILTER_VALUE):
    """Apply the year filter, then the dimension filter. Order is preserved."""
    return filter_games_by_dimension(filter_games_by_period(games, time_period), dimension, value)


def available_periods(games):
    """Years present in the data, ascending."""
    return sorted({g["year"] for g in games})


def filter_options(games, dimension):
    """Selectable values for a dimension, sorted. The general dimension has none."""
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown analysis dimension: {dimension!r}")
    if dimension == "player":
        return sorted({name for g in games for name in game_participants(g)})
    if dimension == "map":
        return sorted({g["map"] for g in games})
    if dimension == "faction":
        return sorted({f for g in games for f in (g["faction1"], g["faction2"]) if f})
    return []
