"""Commander rankings — win rate estimators over qualifying commanders.

Every game counts once for each of its two commanders. A commander
qualifies when their game count reaches the minimum requirement, and
only qualifying commanders feed the volume and composite terms.
"""

import math
from collections import defaultdict

from bzstats.constants import (
    BAYES_PRIOR_GAMES, BAYES_PRIOR_WINS, COMPOSITE_SKILL_WEIGHT, COMPOSITE_VOLUME_WEIGHT,
    DEFAULT_MIN_GAMES, DEFAULT_RANKING_METHOD, MIN_QUALIFYING_GAMES, RANKING_METHOD_ALIASES,
    RANKING_METHODS, WILSON_Z,
)


def normalize_ranking_method(method):
    """Map dashboard aliases (winRate, volumeWeighted) to method keys and validate."""
    method = RANKING_METHOD_ALIASES.get(method, method)
    if method not in RANKING_METHODS:
        raise ValueError(f"Unknown ranking method: {method!r}")
    return method


def resolve_min_games(requirement, total_games):
    """Turn a minimum game requirement into a game count.

    "3%" → max(5, ceil(total_games * 3 / 100)); "12" or 12 → 12.
    """
    if isinstance(requirement, bool):
        raise ValueError(f"Invalid minimum game requirement: {requirement!r}")
    if isinstance(requirement, int):
        count = requirement
    else:
        text = str(requirement).strip()
        if text.endswith("%"):
            try:
                pct = float(text[:-1])
            except ValueError:
                raise ValueError(f"Invalid minimum game requirement: {requirement!r}") from None
            if pct < 0 or math.isnan(pct):
                raise ValueError(f"Invalid minimum game requirement: {requirement!r}")
            return max(MIN_QUALIFYING_GAMES, math.ceil(total_games * pct / 100))
        try:
            count = int(text)
        except ValueError:
            raise ValueError(f"Invalid minimum game requirement: {requirement!r}") from None
    if count < 0:
        raise ValueError(f"Invalid minimum game requirement: {requirement!r}")
    return count


# ─── Estimators ─────────────────────────────────────────────────

def wilson_lower_bound(wins, total, z=WILSON_Z):
    """Lower bound of the Wilson score interval, as a proportion."""
    if total <= 0:
        return None
    p = wins / total
    denom = 1 + z * z / total
    centre = p + z * z / (2 * total)
    spread = z * math.sqrt((p * (1 - p) + z * z / (4 * total)) / total)
    return (centre - spread) / denom


def bayesian_average(wins, total, prior_wins=BAYES_PRIOR_WINS, prior_games=BAYES_PRIOR_GAMES):
    """Win rate shrunk toward 50% by a prior of pseudo-games."""
    if total <= 0:
        return None
    return (wins + prior_wins) / (total + prior_games)


def composite_score(win_rate, total, max_games):
    """Blend of win rate and log-scaled volume relative to the busiest commander."""
    volume = math.log(total + 1) / math.log(max_games + 1)
    return COMPOSITE_SKILL_WEIGHT * win_rate + COMPOSITE_VOLUME_WEIGHT * volume


# ─── Aggregation ────────────────────────────────────────────────

def aggregate_commander_stats(games):
    """Tally wins, games and faction usage per commander, in first-appearance order."""
    stats = defaultdict(lambda: {"wins": 0, "total": 0, "factions": defaultdict(int)})

    for game in games:
        for cmd, faction in ((game["commander1"], game["faction1"]),
                             (game["commander2"], game["faction2"])):
            stats[cmd]["total"] += 1
            stats[cmd]["factions"][faction] += 1
            if game["winner"] == cmd:
                stats[cmd]["wins"] += 1

    return stats


def rank_commanders(games, method=DEFAULT_RANKING_METHOD, min_games=DEFAULT_MIN_GAMES):
    """Rank qualifying commanders by the chosen estimator, best first.

    Returns a list of commander stat dicts. Scores on a percentage scale
    (win rate, Wilson, Bayesian, composite, volume share) are reported
    ×100; the volume-weighted score is win_rate × volume share × 100 and
    has no fixed upper bound. Ties keep first-appearance order.
    """
    method = normalize_ranking_method(method)
    games = list(games)
    if not games:
        return []

    threshold = resolve_min_games(min_games, len(games))
    raw = aggregate_commander_stats(games)
    qualified = [(name, s) for name, s in raw.items() if s["total"] >= threshold and s["total"] > 0]
    if not qualified:
        return []

    volume_total = sum(s["total"] for _, s in qualified)
    max_games = max(s["total"] for _, s in qualified)

    ranked = []
    for name, s in qualified:
        wins, total = s["wins"], s["total"]
        win_rate = wins / total
        volume_share = total / volume_total
        primary = max(s["factions"].items(), key=lambda x: x[1])[0]
        ranked.append({
            "name": name,
            "wins": wins,
            "total": total,
            "primary_faction": primary,
            "win_rate": win_rate * 100,
            "wilson_score": wilson_lower_bound(wins, total) * 100,
            "bayesian_score": bayesian_average(wins, total) * 100,
            "volume_weighted_score": win_rate * volume_share * 100,
            "composite_score": composite_score(win_rate, total, max_games) * 100,
            "volume_percentage": volume_share * 100,
        })

    score_key = "win_rate" if method == "win_rate" else f"{method}_score"
    for entry in ranked:
        entry["score"] = entry[score_key]
    ranked.sort(key=lambda x: x["score"], reverse=True)
    return ranked
