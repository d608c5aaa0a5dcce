"""Chart payloads — labeled numeric series for the rendering surface.

Payloads are plain dicts and carry no chart library configuration:

    {"kind": "bar" | "line" | "doughnut",
     "orientation": "vertical" | "horizontal",
     "stacked": bool,
     "labels": [...],
     "datasets": [{"label", "data", "axis", "styling"}, ...],
     "scales": {axis: {"min": 0, "max": 100 | None, "title": str}},
     "no_data": bool}

An empty aggregate becomes a payload with ``no_data`` set and no series.
"""

from bzstats.constants import DEFAULT_COLOR, FACTION_COLORS, RANKING_LABELS, TOP_N


def _pct(fraction):
    return round(fraction * 100, 1) if fraction is not None else None


def dataset(label, data, axis="y", color=DEFAULT_COLOR, kind=None):
    """One labeled series."""
    ds = {"label": label, "data": list(data), "axis": axis, "styling": {"color": color}}
    if kind:
        ds["kind"] = kind
    return ds


def axis(title="", max_value=None):
    """Axis hint: always starts at zero, optionally capped."""
    return {"min": 0, "max": max_value, "title": title}


def chart(title, labels, datasets, kind="bar", horizontal=False, stacked=False, scales=None):
    """Assemble a payload. Returns a no-data payload when there is nothing to plot."""
    labels = list(labels)
    if not labels or not datasets:
        return no_data(title, kind)
    return {
        "title": title,
        "kind": kind,
        "orientation": "horizontal" if horizontal else "vertical",
        "stacked": stacked,
        "labels": labels,
        "datasets": datasets,
        "scales": scales or {},
        "no_data": False,
    }


def no_data(title, kind="bar"):
    """Explicit empty state for charts over zero qualifying entries."""
    return {
        "title": title,
        "kind": kind,
        "orientation": "vertical",
        "stacked": False,
        "labels": [],
        "datasets": [],
        "scales": {},
        "no_data": True,
    }


def _winrate_and_games(title, rows, key, label_fn=str, games_label="Games Played"):
    """Two-axis chart: win rate (%) on the left capped at 100, game counts on the right."""
    return chart(
        title,
        [label_fn(r[key]) for r in rows],
        [
            dataset("Win Rate (%)", [_pct(r["winrate"]) for r in rows], axis="y",
                    color="rgba(25, 135, 84, 0.8)"),
            dataset(games_label, [r["games"] for r in rows], axis="y1"),
        ],
        scales={"y": axis("Win Rate (%)", 100), "y1": axis(games_label)},
    )


# ─── Overview ───────────────────────────────────────────────────

def faction_distribution_chart(distribution):
    """Single stacked bar split by faction."""
    factions = distribution["factions"]
    return chart(
        f"Faction Choice Distribution ({distribution['total']} total)",
        [""] if factions else [],
        [dataset(f, [count], axis="x", color=FACTION_COLORS.get(f, DEFAULT_COLOR))
         for f, count in factions],
        horizontal=True,
        stacked=True,
        scales={"x": axis("Selections", distribution["total"])},
    )


def commander_games_chart(counts, limit=TOP_N):
    """Most active commanders."""
    top = counts[:limit] if limit is not None else counts
    return chart(
        "Commander Games Played",
        [name for name, _ in top],
        [dataset("Games Played", [n for _, n in top], axis="x")],
        horizontal=True,
        scales={"x": axis("Games")},
    )


def commander_ranking_chart(ranked, method, limit=TOP_N):
    """Commander ranking by the selected estimator.

    The volume-weighted score has no fixed ceiling, so its axis is left uncapped.
    """
    top = ranked[:limit] if limit is not None else ranked
    label = RANKING_LABELS[method]
    cap = None if method == "volume_weighted" else 100
    result = chart(
        f"Commander Ranking: {label}",
        [c["name"] for c in top],
        [dataset(label, [round(c["score"], 3) for c in top], axis="x",
                 color="rgba(255, 193, 7, 0.8)")],
        horizontal=True,
        scales={"x": axis(label, cap)},
    )
    if not result["no_data"]:
        result["details"] = [
            {"name": c["name"], "wins": c["wins"], "games": c["total"],
             "win_rate": round(c["win_rate"], 1)}
            for c in top
        ]
    return result


def map_popularity_chart(counts, limit=TOP_N):
    """Most played maps."""
    top = counts[:limit] if limit is not None else counts
    return chart(
        "Map Popularity",
        [name for name, _ in top],
        [dataset("Games Played", [n for _, n in top], axis="x")],
        horizontal=True,
        scales={"x": axis("Games")},
    )


def commander_faction_chart(primary, limit=TOP_N):
    """Primary faction usage for the most active commanders."""
    top = primary[:limit] if limit is not None else primary
    return chart(
        "Commander Faction Preferences",
        [f"{c['commander']} ({c['primary_faction']})" for c in top],
        [dataset("Primary Faction Usage", [c["primary_count"] for c in top], axis="x",
                 color="rgba(255, 193, 7, 0.8)")],
        horizontal=True,
        scales={"x": axis("Games")},
    )


def faction_performance_chart(rows, title="Faction Performance"):
    """Faction win rate next to games played."""
    return _winrate_and_games(title, rows, "faction", games_label="Total Games")


def duration_chart(histogram, title="Game Duration"):
    """Game length histogram. Empty when no game had a usable time."""
    if histogram["total"] == 0:
        return no_data(title)
    return chart(
        title,
        [f"{label} min" for label in histogram["labels"]],
        [dataset("Number of Games", histogram["counts"])],
        scales={"y": axis("Games")},
    )


def monthly_activity_chart(monthly):
    """Games per month."""
    return chart(
        "Monthly Activity",
        monthly["months"],
        [dataset("Games", monthly["games"], color="rgba(13, 202, 240, 0.8)")],
        kind="line",
        scales={"y": axis("Games")},
    )


# ─── Player ─────────────────────────────────────────────────────

def player_roles_chart(roles):
    """Split of the player's games by role."""
    counts = roles["roles"]
    if roles["games"] == 0:
        return no_data("Player Roles", "doughnut")
    return chart(
        "Player Roles",
        ["Commander", "Thug", "Straggler"],
        [dataset("Games", [counts["commander"], counts["thug"], counts["straggler"]])],
        kind="doughnut",
    )


def player_performance_chart(rows, key, title):
    """Player win rate grouped by map, faction or team size."""
    label_fn = (lambda size: f"{size} Players") if key == "team_size" else str
    return _winrate_and_games(title, rows, key, label_fn=label_fn)


def monthly_performance_chart(monthly):
    """Games per role stacked by month, with the monthly win rate on a second axis."""
    return chart(
        "Monthly Performance",
        monthly["months"],
        [
            dataset("Commander", monthly["commander"], color="rgba(255, 193, 7, 0.8)"),
            dataset("Thug", monthly["thug"], color="rgba(13, 110, 253, 0.8)"),
            dataset("Straggler", monthly["straggler"]),
            dataset("Win Rate (%)", [_pct(w) for w in monthly["winrate"]], axis="y1",
                    color="rgba(25, 135, 84, 0.8)", kind="line"),
        ],
        stacked=True,
        scales={"y": axis("Games"), "y1": axis("Win Rate (%)", 100)},
    )


def teammate_chart(frequency, title="Most Frequent Teammates"):
    """Co-participants on the player's side."""
    return chart(
        title,
        [name for name, _ in frequency],
        [dataset("Games Together", [n for _, n in frequency], axis="x",
                 color="rgba(111, 66, 193, 0.8)")],
        horizontal=True,
        scales={"x": axis("Games")},
    )
