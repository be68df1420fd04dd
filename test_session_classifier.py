"""Tests for session classification and SessionRecord parsing."""

from datetime import datetime

import pytest

from session_classifier import (
    ActivityCategory, SessionRecord, SetEntry, classify_hint, classify_session, normalize_hint,
)


class TestClassifyHint:

    @pytest.mark.parametrize("hint", ["upper", "lower", "full", "push", "pull", "legs", "Strength", " CORE "])
    def test_strength_hints(self, hint):
        assert classify_hint(hint) == ActivityCategory.STRENGTH

    @pytest.mark.parametrize("hint,expected", [
        ("cardio", ActivityCategory.CARDIO),
        ("HIIT", ActivityCategory.CARDIO),
        ("running", ActivityCategory.CARDIO),
        ("yoga", ActivityCategory.YOGA),
        ("Mobility", ActivityCategory.YOGA),
        ("active-recovery", ActivityCategory.RECOVERY),
        ("foam rolling", ActivityCategory.RECOVERY),
        ("rest_day", ActivityCategory.REST),
    ])
    def test_other_categories(self, hint, expected):
        assert classify_hint(hint) == expected

    @pytest.mark.parametrize("hint", [None, "", "   ", "underwater basket weaving", 42])
    def test_unmapped_is_unknown(self, hint):
        assert classify_hint(hint) == ActivityCategory.UNKNOWN

    def test_normalize_hint(self):
        assert normalize_hint("  Active-Recovery ") == "active_recovery"
        assert normalize_hint(None) == ""


class TestClassifySession:

    def test_typed_session(self, make_session):
        assert classify_session(make_session("2024-01-01T10:00", "yoga")) == ActivityCategory.YOGA

    def test_untyped_session_with_exercises_is_strength(self, make_session):
        record = make_session("2024-01-01T10:00", None, exercises={"Squat": [(100, 5)]})
        assert classify_session(record) == ActivityCategory.STRENGTH

    def test_untyped_session_without_exercises_is_unknown(self, make_session):
        assert classify_session(make_session("2024-01-01T10:00", None)) == ActivityCategory.UNKNOWN

    def test_hint_wins_over_exercises(self, make_session):
        record = make_session("2024-01-01T10:00", "cardio", exercises={"Rower": [(0, 1)]})
        assert classify_session(record) == ActivityCategory.CARDIO


class TestFromDict:

    def test_legacy_shape(self):
        record = SessionRecord.from_dict({
            "date": "2024-02-03T18:30:00Z",
            "type": "push",
            "duration": 45,
            "exercises": {"Bench": {"sets": [{"weight": 80, "reps": 5}]}},
        })
        assert record.date == datetime(2024, 2, 3, 18, 30)
        assert record.category_hint == "push"
        assert record.duration_seconds == 45
        assert record.exercises == {"Bench": (SetEntry(weight=80, reps=5),)}

    def test_current_shape(self):
        record = SessionRecord.from_dict({
            "date": datetime(2024, 2, 3, 7, 0),
            "category_hint": "yoga",
            "duration_seconds": 1800,
        })
        assert record.category_hint == "yoga"
        assert record.duration_seconds == 1800
        assert record.exercises == {}

    def test_missing_date_raises(self):
        with pytest.raises(ValueError):
            SessionRecord.from_dict({"type": "upper"})
