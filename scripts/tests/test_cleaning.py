"""Category A: Record Normalization Tests

Tests for clean_game() and normalize_document() — the gatekeepers that turn
the nested export into flat canonical games.
"""

import logging

import pytest
from helpers import make_clean_game, make_document, make_raw_record

from bzstats.cleaning import (
    GameDataset,
    normalize_document,
    parse_commanders,
    parse_duration_minutes,
    parse_factions,
    parse_roster,
)
from bzstats.errors import MalformedRecordError


# ─── A1: Winner index and loser ──────────────────────────────────

class TestA1_WinnerResolution:
    """'A vs B' with winner A gives index 0 and loser B."""

    def test_first_commander_wins(self):
        game = make_clean_game(commanders="A vs B", winner="A")
        assert game["commander1"] == "A"
        assert game["commander2"] == "B"
        assert game["winner_index"] == 0
        assert game["loser"] == "B"
        assert game["losing_faction"] == "Hadean"

    def test_second_commander_wins(self):
        game = make_clean_game(commanders="A vs B", winner="B", winning_faction="Hadean")
        assert game["winner_index"] == 1
        assert game["loser"] == "A"
        assert game["losing_faction"] == "I.S.D.F"

    def test_winner_not_found_rejected(self):
        with pytest.raises(MalformedRecordError) as exc:
            make_clean_game(commanders="A vs B", winner="C")
        assert exc.value.reason == "winner_not_found"


# ─── A2: Faction parsing ─────────────────────────────────────────

class TestA2_FactionParsing:
    """JSON first, bracket-stripped fallback second, order always preserved."""

    def test_valid_json(self):
        assert parse_factions('["I.S.D.F", "Hadean"]') == ("I.S.D.F", "Hadean")

    def test_fallback_unquoted(self):
        assert parse_factions("[I.S.D.F, Hadean]") == ("I.S.D.F", "Hadean")

    def test_fallback_keeps_order(self):
        assert parse_factions("[Hadean,Scion]") == ("Hadean", "Scion")

    def test_already_a_list(self):
        assert parse_factions(["Scion", "I.S.D.F"]) == ("Scion", "I.S.D.F")

    def test_one_faction_rejected(self):
        with pytest.raises(MalformedRecordError):
            parse_factions('["I.S.D.F"]')

    def test_three_factions_rejected(self):
        with pytest.raises(MalformedRecordError):
            parse_factions('["I.S.D.F", "Hadean", "Scion"]')

    def test_json_object_rejected(self):
        with pytest.raises(MalformedRecordError):
            parse_factions('{"a": 1}')

    def test_missing_rejected(self):
        with pytest.raises(MalformedRecordError):
            parse_factions(None)

    def test_factions_pair_with_commanders(self):
        game = make_clean_game(factions="[Scion, Hadean]", winning_faction="Scion")
        assert game["faction1"] == "Scion"
        assert game["faction2"] == "Hadean"


# ─── A3: Commander parsing ───────────────────────────────────────

class TestA3_CommanderParsing:
    """Commanders must split into exactly two names on ' vs '."""

    def test_split(self):
        assert parse_commanders("Alice vs Bob") == ("Alice", "Bob")

    def test_missing_separator(self):
        with pytest.raises(MalformedRecordError) as exc:
            parse_commanders("Alice and Bob")
        assert exc.value.reason == "missing_separator"

    def test_empty_side(self):
        with pytest.raises(MalformedRecordError) as exc:
            parse_commanders("Alice vs ")
        assert exc.value.reason == "bad_commanders"

    def test_three_names(self):
        with pytest.raises(MalformedRecordError):
            parse_commanders("A vs B vs C")

    def test_not_a_string(self):
        with pytest.raises(MalformedRecordError):
            parse_commanders(None)


# ─── A4: Team sizes ──────────────────────────────────────────────

class TestA4_TeamSizes:
    """Sizes count team arrays plus one commander per side."""

    def test_sizes_with_teams(self):
        game = make_clean_game(teamOne=["Carol"], teamTwo=["Dave", "Eve"])
        assert game["team_one_size"] == 2
        assert game["team_two_size"] == 3
        assert game["total_players"] == 5

    def test_absent_teams_count_zero(self):
        game = make_clean_game(drop=("teamOne", "teamTwo"))
        assert game["team_one"] == ()
        assert game["team_two"] == ()
        assert game["team_one_size"] == 1
        assert game["team_two_size"] == 1
        assert game["total_players"] == 2

    def test_roster_from_json_string(self):
        assert parse_roster('["Carol", "Dave"]') == ("Carol", "Dave")

    def test_roster_none(self):
        assert parse_roster(None) == ()


# ─── A5: Stragglers ──────────────────────────────────────────────

class TestA5_Stragglers:
    """Straggler flags come from both straggler arrays."""

    def test_stragglers_counted(self):
        game = make_clean_game(teamOneStraggler=["Xavier"], teamTwoStraggler=["Yuri", "Zed"])
        assert game["has_straggler"] is True
        assert game["straggler_count"] == 3

    def test_no_stragglers(self):
        game = make_clean_game()
        assert game["has_straggler"] is False
        assert game["straggler_count"] == 0

    def test_stragglers_do_not_change_sizes(self):
        game = make_clean_game(teamOneStraggler=["Xavier"])
        assert game["team_one_size"] == 2
        assert game["total_players"] == 4


# ─── A6: Duration parsing ────────────────────────────────────────

class TestA6_Durations:
    """Times parse to whole minutes; bare numbers are minutes unless configured."""

    def test_hours_minutes_seconds(self):
        assert parse_duration_minutes("1:30:00") == 90

    def test_minutes_seconds(self):
        assert parse_duration_minutes("45:29") == 45

    def test_half_minute_rounds_up(self):
        assert parse_duration_minutes("45:30") == 46

    def test_bare_number_is_minutes_by_default(self):
        assert parse_duration_minutes("45") == 45

    def test_bare_number_as_seconds(self):
        assert parse_duration_minutes("2700", bare_unit="seconds") == 45

    def test_bare_seconds_round(self):
        assert parse_duration_minutes("45", bare_unit="seconds") == 1

    @pytest.mark.parametrize("value", ["", "   ", None, "abc", "1:2:3:4", "-5"])
    def test_unusable_is_none(self, value):
        assert parse_duration_minutes(value) is None

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValueError):
            parse_duration_minutes("45", bare_unit="hours")

    def test_game_carries_minutes(self):
        game = make_clean_game(time="1:05:00")
        assert game["time"] == "1:05:00"
        assert game["duration_minutes"] == 65

    def test_missing_time(self):
        game = make_clean_game(drop=("time",))
        assert game["time"] is None
        assert game["duration_minutes"] is None


# ─── A7: Document traversal ──────────────────────────────────────

class TestA7_DocumentTraversal:
    """Depth-first year → month → day → map, in document order."""

    def test_flattens_in_order(self):
        doc = make_document([
            (2024, "January", "1", "Cobalt", make_raw_record(commanders="A vs B", winner="A")),
            (2024, "January", "1", "Dustbowl", make_raw_record(commanders="C vs D", winner="C")),
            (2024, "February", "3", "Cobalt", make_raw_record(commanders="E vs F", winner="E")),
        ])
        dataset = normalize_document(doc)
        assert [g["commander1"] for g in dataset] == ["A", "C", "E"]
        assert [g["month"] for g in dataset] == ["January", "January", "February"]
        assert dataset.games[1]["day"] == "1"
        assert dataset.games[0]["year"] == 2024

    def test_last_updated_surfaced(self):
        doc = make_document([(2024, "January", "1", "Cobalt", make_raw_record())],
                            last_updated="2025-02-01")
        dataset = normalize_document(doc)
        assert dataset.last_updated == "2025-02-01"
        assert len(dataset) == 1

    def test_year_without_raw_block_skipped(self):
        doc = make_document([(2024, "January", "1", "Cobalt", make_raw_record())])
        doc["2025"] = {"raw_2024": {"month": {"January": {"1": {"Cobalt": make_raw_record()}}}}}
        dataset = normalize_document(doc)
        assert len(dataset) == 1
        assert dataset.games[0]["year"] == 2024

    def test_empty_placeholders_skipped(self):
        doc = make_document([(2024, "January", "1", "Cobalt", make_raw_record())])
        months = doc["2024"]["raw_2024"]["month"]
        months["February"] = {}
        months["March"] = {"4": {}}
        months["April"] = {"5": {"Cobalt": {}}}
        months["May"] = None
        dataset = normalize_document(doc)
        assert len(dataset) == 1

    def test_malformed_leaf_skipped_others_kept(self, caplog):
        doc = make_document([
            (2024, "January", "1", "Cobalt", make_raw_record()),
            (2024, "January", "2", "Cobalt", make_raw_record(commanders="Alice Bob")),
            (2024, "January", "3", "Cobalt", make_raw_record(factions="nonsense")),
            (2024, "January", "4", "Cobalt", make_raw_record(winner="Nobody")),
            (2024, "January", "5", "Cobalt", make_raw_record()),
        ])
        skip_log = []
        with caplog.at_level(logging.WARNING, logger="bzstats.cleaning"):
            dataset = normalize_document(doc, skip_log=skip_log)
        assert len(dataset) == 2
        assert skip_log == ["missing_separator", "bad_factions", "winner_not_found"]
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3

    def test_bare_time_unit_passed_through(self):
        doc = make_document([(2024, "January", "1", "Cobalt", make_raw_record(time="5400"))])
        assert normalize_document(doc, bare_time_unit="seconds").games[0]["duration_minutes"] == 90

    def test_not_an_object_rejected(self):
        with pytest.raises(TypeError):
            normalize_document([])


# ─── A8: Canonical record shape ──────────────────────────────────

class TestA8_CanonicalShape:
    """Original fields are preserved and the snapshot is read-only."""

    def test_raw_fields_preserved(self):
        game = make_clean_game(extra_note="rematch")
        assert game["raw"]["commanders"] == "Alice vs Bob"
        assert game["raw"]["extra_note"] == "rematch"
        assert "winning faction" not in game
        assert game["raw"]["winning faction"] == "I.S.D.F"

    def test_winning_faction_from_record(self):
        game = make_clean_game(winning_faction=" I.S.D.F ")
        assert game["winning_faction"] == "I.S.D.F"

    def test_winning_faction_derived_when_absent(self):
        game = make_clean_game(winner="Bob", drop=("winning faction",))
        assert game["winning_faction"] == "Hadean"

    def test_dataset_is_immutable(self):
        dataset = GameDataset([make_clean_game()], "now")
        assert isinstance(dataset.games, tuple)
        with pytest.raises(AttributeError):
            dataset.games = ()
