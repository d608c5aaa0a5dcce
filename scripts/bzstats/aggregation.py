"""Aggregation functions — turn canonical games into stats.

All functions take a list of canonical game dicts (or player views from
bzstats.roles) and return aggregated data. No I/O, no side effects.
Win rates are fractions rounded to 4 places; None where nothing was played.
"""

from collections import Counter, defaultdict

from bzstats.constants import DURATION_BOUNDARIES, MONTH_NUMBERS
from bzstats.roles import is_thug, on_roster, player_faction, side_roster


def _winrate(wins, games):
    return round(wins / games, 4) if games > 0 else None


def _winrate_rows(stats, key_name):
    return [
        {
            key_name: key,
            "games": s["games"],
            "wins": s["wins"],
            "losses": s["games"] - s["wins"],
            "winrate": _winrate(s["wins"], s["games"]),
        }
        for key, s in stats.items()
    ]


def _by_winrate(rows):
    return sorted(rows, key=lambda x: x["winrate"] or 0, reverse=True)


# ─── Popularity ─────────────────────────────────────────────────

def aggregate_commander_games(games):
    """Games played per commander, most active first."""
    counts = Counter()
    for game in games:
        counts[game["commander1"]] += 1
        counts[game["commander2"]] += 1
    return counts.most_common()


def aggregate_map_popularity(games):
    """Games played per map, most played first."""
    return Counter(game["map"] for game in games).most_common()


def aggregate_faction_distribution(games):
    """Faction selections across both sides of every game."""
    counts = Counter()
    for game in games:
        for faction in (game["faction1"], game["faction2"]):
            if faction:
                counts[faction] += 1
    return {"factions": counts.most_common(), "total": sum(counts.values())}


def aggregate_commander_factions(games):
    """Nested counts: commander → faction → games."""
    choices = defaultdict(lambda: defaultdict(int))
    for game in games:
        choices[game["commander1"]][game["faction1"]] += 1
        choices[game["commander2"]][game["faction2"]] += 1
    return {cmd: dict(factions) for cmd, factions in choices.items()}


def aggregate_commander_primary_factions(games):
    """Each commander's most used faction and its share, busiest commanders first."""
    result = []
    for cmd, factions in aggregate_commander_factions(games).items():
        total = sum(factions.values())
        primary, count = max(factions.items(), key=lambda x: x[1])
        result.append({
            "commander": cmd,
            "total": total,
            "primary_faction": primary,
            "primary_count": count,
            "share": round(count / total, 4),
        })
    result.sort(key=lambda x: x["total"], reverse=True)
    return result


# ─── Faction Performance ────────────────────────────────────────

def aggregate_faction_performance(games):
    """Per faction: games it appeared in, wins (it was the winning faction), losses.

    A mirror match counts once for the faction, as a single win.
    """
    stats = defaultdict(lambda: {"games": 0, "wins": 0})
    for game in games:
        for faction in dict.fromkeys((game["faction1"], game["faction2"])):
            stats[faction]["games"] += 1
            if game["winning_faction"] == faction:
                stats[faction]["wins"] += 1
    return _by_winrate(_winrate_rows(stats, "faction"))


def aggregate_side_faction_performance(games):
    """Per faction win rate counted per side, so a mirror match adds a win and a loss."""
    stats = defaultdict(lambda: {"games": 0, "wins": 0})
    for game in games:
        for idx, faction in enumerate((game["faction1"], game["faction2"])):
            if not faction:
                continue
            stats[faction]["games"] += 1
            if game["winner_index"] == idx:
                stats[faction]["wins"] += 1
    return _by_winrate(_winrate_rows(stats, "faction"))


def aggregate_faction_map_performance(games, faction):
    """Per map win rate of one faction, over the games it appeared in."""
    stats = defaultdict(lambda: {"games": 0, "wins": 0})
    for game in games:
        if faction not in (game["faction1"], game["faction2"]):
            continue
        stats[game["map"]]["games"] += 1
        if game["winning_faction"] == faction:
            stats[game["map"]]["wins"] += 1
    return _by_winrate(_winrate_rows(stats, "map"))


# ─── Durations ──────────────────────────────────────────────────

def duration_labels(boundaries=DURATION_BOUNDARIES):
    """Bucket labels like '0-15', ..., '180+'."""
    labels = [f"{lo}-{hi}" for lo, hi in zip(boundaries, boundaries[1:])]
    labels.append(f"{boundaries[-1]}+")
    return labels


def duration_bucket(minutes, boundaries=DURATION_BOUNDARIES):
    """Index of the bucket holding ``minutes``; the last bucket is open-ended."""
    bucket = 0
    for i, lower in enumerate(boundaries):
        if minutes >= lower:
            bucket = i
    return bucket


def aggregate_duration_histogram(games, boundaries=DURATION_BOUNDARIES):
    """Histogram of game length in minutes. Games without a usable time are left out."""
    labels = duration_labels(boundaries)
    counts = [0] * len(labels)
    total = 0
    for game in games:
        minutes = game.get("duration_minutes")
        if minutes is None:
            continue
        counts[duration_bucket(minutes, boundaries)] += 1
        total += 1
    return {"labels": labels, "counts": counts, "total": total}


def average_duration(games):
    """Mean game length in minutes over games with a time, or None."""
    durations = [g["duration_minutes"] for g in games if g.get("duration_minutes") is not None]
    if not durations:
        return None
    return sum(durations) / len(durations)


def format_minutes(minutes):
    """112.4 → '1:52'. None → '--'."""
    if minutes is None:
        return "--"
    whole = int(minutes)
    return f"{whole // 60}:{whole % 60:02d}"


# ─── Monthly ────────────────────────────────────────────────────

def month_key(game):
    """'{year}-{month}' with month names turned into zero-padded numbers."""
    month = str(game["month"]).strip()
    number = MONTH_NUMBERS.get(month.lower())
    if number is None and month.isdigit():
        number = int(month)
    if number is not None:
        month = f"{number:02d}"
    return f"{game['year']}-{month}"


def aggregate_monthly_activity(games):
    """Games per month, in key order."""
    counts = Counter(month_key(g) for g in games)
    months = sorted(counts)
    return {"months": months, "games": [counts[m] for m in months]}


def aggregate_monthly_performance(views):
    """Per month player results: games, wins, win rate and games per role."""
    buckets = defaultdict(lambda: {"games": 0, "wins": 0, "commander": 0, "thug": 0, "straggler": 0})
    for view in views:
        b = buckets[month_key(view)]
        b["games"] += 1
        if view["team_won"]:
            b["wins"] += 1
        if view["role"] == "commander":
            b["commander"] += 1
        elif view["is_straggler"]:
            b["straggler"] += 1
        else:
            b["thug"] += 1

    months = sorted(buckets)
    return {
        "months": months,
        "games": [buckets[m]["games"] for m in months],
        "wins": [buckets[m]["wins"] for m in months],
        "winrate": [_winrate(buckets[m]["wins"], buckets[m]["games"]) for m in months],
        "commander": [buckets[m]["commander"] for m in months],
        "thug": [buckets[m]["thug"] for m in months],
        "straggler": [buckets[m]["straggler"] for m in months],
    }


# ─── Player ─────────────────────────────────────────────────────

def aggregate_teammate_frequency(views, limit=None):
    """Who the player shared a side with, most frequent first.

    ``limit`` truncates to the top N for compact charts.
    """
    counts = Counter()
    for view in views:
        counts.update(side_roster(view))
    ranked = counts.most_common()
    return ranked[:limit] if limit is not None else ranked


def aggregate_player_roles(views):
    """Role counts and win rates for one player.

    Commander games are counted as commander even when the player is also
    listed as a straggler; other straggler games are kept apart from thug games.
    """
    roles = {"commander": 0, "thug": 0, "straggler": 0}
    wins = {"commander": 0, "thug": 0, "straggler": 0}
    for view in views:
        if view["role"] == "commander":
            role = "commander"
        elif is_thug(view):
            role = "thug"
        else:
            role = "straggler"
        roles[role] += 1
        if view["team_won"]:
            wins[role] += 1

    total = len(views)
    total_wins = sum(wins.values())
    return {
        "games": total,
        "wins": total_wins,
        "winrate": _winrate(total_wins, total),
        "roles": roles,
        "role_wins": wins,
        "role_winrates": {r: _winrate(wins[r], roles[r]) for r in roles},
    }


def _view_key(view, key):
    if key == "map":
        return view["map"]
    if key == "faction":
        # Straggler-only games have no faction of record
        return player_faction(view) if on_roster(view) else None
    if key == "team_size":
        return view["total_players"]
    raise ValueError(f"Unknown grouping key: {key!r}")


def aggregate_player_performance(views, key):
    """Player win rate grouped by map, faction (of their side) or team_size.

    Maps and factions come most played first; team sizes ascend.
    """
    stats = defaultdict(lambda: {"games": 0, "wins": 0})
    for view in views:
        group = _view_key(view, key)
        if group is None:
            continue
        stats[group]["games"] += 1
        if view["team_won"]:
            stats[group]["wins"] += 1

    rows = _winrate_rows(stats, key)
    if key == "team_size":
        return sorted(rows, key=lambda x: x[key])
    return sorted(rows, key=lambda x: x["games"], reverse=True)


# ─── Summary Cards ──────────────────────────────────────────────

def aggregate_summary(games):
    """Header numbers for the overview: games, commanders, maps, average time."""
    commanders = {c for g in games for c in (g["commander1"], g["commander2"])}
    return {
        "total_games": len(games),
        "total_commanders": len(commanders),
        "total_maps": len({g["map"] for g in games}),
        "avg_game_time": format_minutes(average_duration(games)),
    }


def aggregate_player_summary(views):
    """Header numbers for one player: games, maps played, average time, win rate."""
    wins = sum(1 for v in views if v["team_won"])
    return {
        "total_games": len(views),
        "maps_played": len({v["map"] for v in views}),
        "avg_game_time": format_minutes(average_duration(views)),
        "winrate": _winrate(wins, len(views)),
    }
