"""Shared test factories for pipeline tests.

Provides factory functions for building raw export leaves, whole export
documents and canonical game dicts with sensible defaults and easy overrides.
"""

import sys
from pathlib import Path

# Add scripts/ to path so we can import bzstats
SCRIPTS_DIR = Path(__file__).resolve().parent.parent
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from bzstats.cleaning import clean_game  # noqa: E402


# ─── Raw Leaf Factory ────────────────────────────────────────────

def make_raw_record(drop=(), **overrides):
    """Build a valid raw game leaf. Override any field via kwargs.

    The default leaf is a 2v2 game (one teammate per side) that
    clean_game() accepts. Fields listed in ``drop`` are removed, to
    simulate optional fields missing from the export. Use
    ``winning_faction`` for the space-separated "winning faction" key.
    """
    if "winning_faction" in overrides:
        overrides["winning faction"] = overrides.pop("winning_faction")

    leaf = {
        "commanders": "Alice vs Bob",
        "factions": '["I.S.D.F", "Hadean"]',
        "winner": "Alice",
        "winning faction": "I.S.D.F",
        "map": "Cobalt",
        "time": "0:45:00",
        "teamOne": ["Carol"],
        "teamTwo": ["Dave"],
    }
    leaf.update(overrides)
    for field in drop:
        leaf.pop(field, None)
    return leaf


# ─── Document Factory ────────────────────────────────────────────

def make_document(entries, last_updated="2025-01-31 12:00:00"):
    """Build a nested export from (year, month, day, map_name, leaf) tuples.

    Entries are inserted in order, so traversal order matches list order
    as long as each (year, month, day) group is contiguous.
    """
    doc = {"last_updated": last_updated}
    for year, month, day, map_name, leaf in entries:
        year_key = str(year)
        year_block = doc.setdefault(year_key, {}).setdefault(f"raw_{year_key}", {"month": {}})
        year_block["month"].setdefault(month, {}).setdefault(str(day), {})[map_name] = leaf
    return doc


# ─── Canonical Game Factory ──────────────────────────────────────

def make_clean_game(year=2024, month="January", day="1", drop=(), **overrides):
    """Build a canonical game by running a raw leaf through clean_game()."""
    leaf = make_raw_record(drop=drop, **overrides)
    return clean_game(leaf, year, month, str(day), leaf.get("map", "Cobalt"))


def make_games(n, commander1="Alice", commander2="Bob", p1_wins=None,
               factions=("I.S.D.F", "Hadean"), map_name="Cobalt", year=2024,
               month="January", **overrides):
    """Generate N canonical games between two commanders.

    Args:
        n: Number of games
        commander1: Commander on side 1
        commander2: Commander on side 2
        p1_wins: Number of times side 1 wins (default: n//2). Rest go to side 2.
        factions: (faction1, faction2) for every game
        map_name: Map for all games
        year / month: Partition for all games
    """
    if p1_wins is None:
        p1_wins = n // 2

    games = []
    for i in range(n):
        p1_won = i < p1_wins
        games.append(make_clean_game(
            year=year,
            month=month,
            day=str((i % 28) + 1),
            commanders=f"{commander1} vs {commander2}",
            factions=f'["{factions[0]}", "{factions[1]}"]',
            winner=commander1 if p1_won else commander2,
            winning_faction=factions[0] if p1_won else factions[1],
            map=map_name,
            **overrides,
        ))
    return games
