"""Record normalization — flatten the nested export into canonical game dicts.

The export is keyed year → raw_<year> → month → month name → day → map name,
with one game object per leaf. Every leaf becomes one flat game dict; leaves
that cannot be interpreted are skipped with a warning instead of aborting
the whole document.
"""

import json
import logging
import math

from bzstats.constants import (
    BARE_TIME_UNIT, BARE_TIME_UNITS, COMMANDER_SEPARATOR, LAST_UPDATED_KEY,
)
from bzstats.errors import MalformedRecordError

logger = logging.getLogger(__name__)

ROSTER_FIELDS = {
    "team_one": "teamOne",
    "team_two": "teamTwo",
    "team_one_stragglers": "teamOneStraggler",
    "team_two_stragglers": "teamTwoStraggler",
}


class GameDataset:
    """Immutable snapshot of one load: the canonical games plus the export marker."""

    __slots__ = ("_games", "_last_updated")

    def __init__(self, games, last_updated=None):
        self._games = tuple(games)
        self._last_updated = last_updated

    @property
    def games(self):
        return self._games

    @property
    def last_updated(self):
        return self._last_updated

    def __len__(self):
        return len(self._games)

    def __iter__(self):
        return iter(self._games)

    def __repr__(self):
        return f"GameDataset({len(self._games)} games, last_updated={self._last_updated!r})"


# ─── Field Parsers ──────────────────────────────────────────────

def parse_commanders(raw):
    """Split 'A vs B' into (A, B).

    Surrounding whitespace on each name is trimmed, so 'A  vs B' and
    'A vs B' name the same commanders.
    """
    if not isinstance(raw, str) or COMMANDER_SEPARATOR not in raw:
        raise MalformedRecordError("missing_separator", repr(raw))
    parts = raw.split(COMMANDER_SEPARATOR)
    if len(parts) != 2:
        raise MalformedRecordError("bad_commanders", repr(raw))
    first, second = parts[0].strip(), parts[1].strip()
    if not first or not second:
        raise MalformedRecordError("bad_commanders", repr(raw))
    return first, second


def _split_loose_list(raw):
    """Fallback for '[I.S.D.F, Hadean]' style strings that are not valid JSON."""
    stripped = raw.replace("[", "").replace("]", "")
    return [part.strip().strip("'\"").strip() for part in stripped.split(",")]


def parse_name_list(raw):
    """Parse a list of names that may arrive as a list, a JSON string or a loose string."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(name).strip() for name in raw]
    if not isinstance(raw, str):
        raise MalformedRecordError("bad_list", repr(raw))
    if not raw.strip():
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return _split_loose_list(raw)
    if isinstance(parsed, list):
        return [str(name).strip() for name in parsed]
    raise MalformedRecordError("bad_list", repr(raw))


def parse_factions(raw):
    """Parse the two-element faction field, preserving commander order."""
    try:
        factions = parse_name_list(raw)
    except MalformedRecordError:
        raise MalformedRecordError("bad_factions", repr(raw)) from None
    if len(factions) != 2 or not all(factions):
        raise MalformedRecordError("bad_factions", repr(raw))
    return factions[0], factions[1]


def parse_roster(raw):
    """Parse an optional team or straggler array. Absent → empty tuple."""
    try:
        names = parse_name_list(raw)
    except MalformedRecordError:
        raise MalformedRecordError("bad_roster", repr(raw)) from None
    return tuple(name for name in names if name)


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def parse_duration_minutes(time_str, bare_unit=BARE_TIME_UNIT):
    """Parse a game time into whole minutes. Returns None if missing or unreadable.

    Accepted shapes:
        "H:MM:SS" → hours, minutes, seconds
        "MM:SS"   → minutes, seconds
        "45"      → bare number, read as ``bare_unit`` ("minutes" or "seconds")

    The result is rounded to the nearest minute, halves rounding up.
    """
    if bare_unit not in BARE_TIME_UNITS:
        raise ValueError(f"bare_unit must be one of {BARE_TIME_UNITS}, got {bare_unit!r}")
    if time_str is None:
        return None
    text = str(time_str).strip()
    if not text:
        return None

    parts = text.split(":")
    try:
        numbers = [int(p.strip()) for p in parts]
    except ValueError:
        return None
    if any(n < 0 for n in numbers):
        return None

    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        total = hours * 60 + minutes + seconds / 60
    elif len(numbers) == 2:
        minutes, seconds = numbers
        total = minutes + seconds / 60
    elif len(numbers) == 1:
        total = numbers[0] / 60 if bare_unit == "seconds" else numbers[0]
    else:
        return None
    return _round_half_up(total)


# ─── Record Cleaning ────────────────────────────────────────────

def clean_game(leaf, year, month, day, map_name, bare_time_unit=BARE_TIME_UNIT):
    """Turn one raw leaf into a canonical game dict.

    Raises MalformedRecordError when the commanders, factions or winner
    cannot be resolved.

    The untouched leaf is kept under ``raw`` rather than merged into the
    top level, so export keys like "winning faction" or "teamOne" never
    collide with the derived snake_case fields.
    """
    commander1, commander2 = parse_commanders(leaf.get("commanders"))
    faction1, faction2 = parse_factions(leaf.get("factions"))

    winner = leaf.get("winner")
    if isinstance(winner, str):
        winner = winner.strip()
    if winner == commander1:
        winner_index = 0
    elif winner == commander2:
        winner_index = 1
    else:
        raise MalformedRecordError(
            "winner_not_found",
            f"{winner!r} not in ({commander1!r}, {commander2!r})",
        )

    commanders = (commander1, commander2)
    factions = (faction1, faction2)

    rosters = {key: parse_roster(leaf.get(field)) for key, field in ROSTER_FIELDS.items()}
    straggler_count = len(rosters["team_one_stragglers"]) + len(rosters["team_two_stragglers"])

    winning_faction = leaf.get("winning faction")
    if not isinstance(winning_faction, str) or not winning_faction.strip():
        winning_faction = factions[winner_index]
    else:
        winning_faction = winning_faction.strip()

    time_str = leaf.get("time")
    if time_str is not None:
        time_str = str(time_str).strip() or None

    game = {
        "year": year,
        "month": month,
        "day": day,
        "map": str(leaf.get("map") or map_name),
        "commander1": commander1,
        "commander2": commander2,
        "faction1": faction1,
        "faction2": faction2,
        "winner": winner,
        "winner_index": winner_index,
        "loser": commanders[1 - winner_index],
        "winning_faction": winning_faction,
        "losing_faction": factions[1 - winner_index],
        "team_one_size": len(rosters["team_one"]) + 1,
        "team_two_size": len(rosters["team_two"]) + 1,
        "total_players": len(rosters["team_one"]) + len(rosters["team_two"]) + 2,
        "has_straggler": straggler_count > 0,
        "straggler_count": straggler_count,
        "time": time_str,
        "duration_minutes": parse_duration_minutes(time_str, bare_time_unit),
        "raw": dict(leaf),
    }
    game.update(rosters)
    return game


# ─── Document Traversal ─────────────────────────────────────────

def _year_partition(year_key, year_data):
    """Return the month mapping for one year, or None if the partition is unusable."""
    if not isinstance(year_data, dict):
        return None
    raw_data = year_data.get(f"raw_{year_key}")
    if not isinstance(raw_data, dict):
        return None
    months = raw_data.get("month")
    if not isinstance(months, dict):
        return None
    return months


def normalize_document(document, skip_log=None, bare_time_unit=BARE_TIME_UNIT):
    """Flatten the whole export into a GameDataset.

    Years without a matching raw_<year> block and empty placeholders are
    omitted silently. Malformed leaves are logged, recorded in ``skip_log``
    (if given) and skipped.
    """
    if not isinstance(document, dict):
        raise TypeError(f"expected a JSON object, got {type(document).__name__}")

    games = []
    for year_key, year_data in document.items():
        if year_key == LAST_UPDATED_KEY:
            continue
        try:
            year = int(year_key)
        except (TypeError, ValueError):
            logger.warning("Skipping non-year key %r", year_key)
            continue

        months = _year_partition(year_key, year_data)
        if months is None:
            continue

        for month, days in months.items():
            if not isinstance(days, dict):
                continue
            for day, maps in days.items():
                if not isinstance(maps, dict):
                    continue
                for map_name, leaf in maps.items():
                    if not isinstance(leaf, dict) or not leaf:
                        continue
                    try:
                        games.append(clean_game(leaf, year, month, str(day), map_name, bare_time_unit))
                    except MalformedRecordError as e:
                        logger.warning("Skipping %s/%s/%s/%s: %s", year, month, day, map_name, e)
                        if skip_log is not None:
                            skip_log.append(e.reason)

    return GameDataset(games, document.get(LAST_UPDATED_KEY))
