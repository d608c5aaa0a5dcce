"""Pipeline constants — paths, data source, thresholds, ranking and bucket config."""

import os
from pathlib import Path

# ─── Paths ──────────────────────────────────────────────────────

SCRIPT_DIR = Path(__file__).resolve().parent.parent  # scripts/
PROJECT_DIR = SCRIPT_DIR.parent
DATA_DIR = Path(os.environ.get("BZSTATS_OUTPUT_DIR", PROJECT_DIR / "site" / "data"))

# ─── Data Source ────────────────────────────────────────────────

# Published export of strategy games (http(s)://, s3://bucket/key or a local path)
DATA_URL = os.environ.get(
    "BZSTATS_DATA_URL",
    "https://raw.githubusercontent.com/HerndonE/battlezone-combat-commander-strategy-statistics"
    "/refs/heads/main/data/data.json",
)
S3_REGION = os.environ.get("AWS_DEFAULT_REGION", "us-east-2")

# Top-level key holding the export timestamp rather than a year partition
LAST_UPDATED_KEY = "last_updated"

# Literal separator between the two commander names
COMMANDER_SEPARATOR = " vs "

# ─── Durations ──────────────────────────────────────────────────

# How a bare "45" in the time field is read: "minutes" or "seconds"
BARE_TIME_UNIT = os.environ.get("BZSTATS_BARE_TIME_UNIT", "minutes")
BARE_TIME_UNITS = ("minutes", "seconds")

# Histogram lower bounds in minutes; the last bucket is open-ended
DURATION_BOUNDARIES = [0, 15, 30, 45, 60, 90, 120, 180]

MONTH_NUMBERS = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
}

# ─── Filters ────────────────────────────────────────────────────

DIMENSIONS = ("general", "player", "map", "faction")

DEFAULT_TIME_PERIOD = "all"
DEFAULT_DIMENSION = "general"
DEFAULT_FILTER_VALUE = ""

# ─── Ranking ────────────────────────────────────────────────────

RANKING_METHODS = ("win_rate", "wilson", "bayesian", "volume_weighted", "composite")

# Names used by the dashboard's method selector
RANKING_METHOD_ALIASES = {
    "winRate": "win_rate",
    "volumeWeighted": "volume_weighted",
}

DEFAULT_RANKING_METHOD = "wilson"
DEFAULT_MIN_GAMES = "3%"

# Floor applied to percentage-based minimum game requirements
MIN_QUALIFYING_GAMES = 5

# 95% confidence
WILSON_Z = 1.96

# Prior of 10 pseudo-games at a 50% win rate
BAYES_PRIOR_WINS = 5
BAYES_PRIOR_GAMES = 10

COMPOSITE_SKILL_WEIGHT = 0.7
COMPOSITE_VOLUME_WEIGHT = 0.3

# ─── Display ────────────────────────────────────────────────────

# Bars shown on compact charts (expanded views show everything)
TOP_N = 10

FACTION_COLORS = {
    "I.S.D.F": "rgba(13, 110, 253, 0.9)",
    "Scion": "rgba(255, 193, 7, 0.9)",
    "Hadean": "rgba(220, 53, 69, 0.9)",
}
DEFAULT_COLOR = "rgba(108, 117, 125, 0.9)"

RANKING_LABELS = {
    "win_rate": "Win Rate (%)",
    "wilson": "Wilson Score",
    "bayesian": "Bayesian Average",
    "volume_weighted": "Volume-Weighted Score",
    "composite": "Composite Score",
}
