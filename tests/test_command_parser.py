"""Tests for team resolution and full utterance parsing."""

from datetime import datetime

from voice.entities import match_team, resolve_team
from voice.models import Team
from voice.nlp import derive_event_name, parse_voice_command

NOW = datetime(2026, 1, 14, 10, 0, 0)
TEAMS = [Team("t1", "Marketing"), Team("t2", "Design"), Team("t3", "Design Ops")]


def test_team_match_is_case_insensitive_substring():
    assert resolve_team(["book MARKETING sync"], TEAMS) == "t1"


def test_first_team_in_roster_order_wins():
    # "design ops" also contains "design", the earlier roster entry
    assert resolve_team(["design ops review"], TEAMS) == "t2"


def test_any_variant_can_match():
    assert match_team(["nothing here", "marketing"], TEAMS) == TEAMS[0]


def test_unmatched_and_blank_names():
    assert resolve_team(["sales review"], TEAMS) is None
    assert resolve_team(["anything"], [Team("x", "  ")]) is None
    assert resolve_team(["anything"], []) is None


def test_team_from_record():
    assert Team.from_record({"id": 7, "name": "Ops"}) == Team("7", "Ops")


def test_end_to_end_marketing_meeting():
    cmd = parse_voice_command(
        "book marketing team meeting tomorrow at 3pm for 2 hours",
        "en-US",
        TEAMS,
        NOW,
    )
    assert cmd.team_id == "t1"
    assert cmd.start == datetime(2026, 1, 15, 15, 0)
    assert cmd.end == datetime(2026, 1, 15, 17, 0)
    assert cmd.is_all_day is False
    assert cmd.event_name == "team meeting tomorrow at 3pm for 2 hours"
    assert cmd.original_transcript == "book marketing team meeting tomorrow at 3pm for 2 hours"


def test_gujarati_utterance():
    cmd = parse_voice_command("કાલે બપોરે ૩ વાગ્યે ૨ કલાક માટે marketing મીટિંગ", "gu-IN", TEAMS, NOW)
    assert cmd.normalized_transcript.startswith("tomorrow PM 3 at for 2 hours")
    assert cmd.start == datetime(2026, 1, 15, 15, 0)
    assert cmd.end == datetime(2026, 1, 15, 17, 0)
    assert cmd.team_id == "t1"


def test_multi_day_booking_is_all_day():
    cmd = parse_voice_command("offsite tomorrow for 3 days", "en-US", [], NOW)
    assert cmd.is_all_day is True
    assert cmd.start == datetime(2026, 1, 15, 0, 0)
    assert cmd.end == datetime(2026, 1, 17, 23, 59, 59)
    assert cmd.team_id is None


def test_blank_transcript_yields_nothing():
    assert parse_voice_command("", "en-US", TEAMS, NOW) is None
    assert parse_voice_command("   ", "en-US", TEAMS, NOW) is None


def test_command_without_time_still_parses():
    cmd = parse_voice_command("design sync", "en-US", TEAMS, NOW)
    assert cmd.start is None
    assert cmd.end is None
    assert cmd.team_id == "t2"


def test_derive_event_name_strips_filler_and_team():
    assert derive_event_name("Schedule a Design review", "design") == "review"
    assert derive_event_name("create an offsite") == "offsite"
    assert derive_event_name("  weekly   sync ") == "weekly sync"


def test_draft_fields():
    cmd = parse_voice_command("book marketing launch tomorrow at 3pm", "en-US", TEAMS, NOW)
    draft = cmd.to_draft()
    assert draft == {
        "teamId": "t1",
        "eventName": "launch tomorrow at 3pm",
        "date": "2026-01-15",
        "startTime": "15:00",
        "endTime": "16:00",
        "isWholeDay": False,
        "startDateTime": "2026-01-15T15:00:00",
        "endDateTime": "2026-01-15T16:00:00",
    }


def test_with_team_keeps_other_fields():
    cmd = parse_voice_command("launch tomorrow at 3pm", "en-US", [], NOW)
    updated = cmd.with_team("t2")
    assert updated.team_id == "t2"
    assert updated.start == cmd.start
    assert cmd.team_id is None
