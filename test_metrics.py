"""Tests for aggregate metrics."""

from datetime import date, datetime

import pytest

from metrics import (
    compute_day_streaks, compute_metrics, compute_weekly_consistency_streak,
    count_personal_records, count_strength_sessions_in_week, has_weekly_consistency_bonus,
    normalize_duration_seconds, session_volume, snapshot, week_start,
)
from session_classifier import ActivityCategory, SessionRecord, SetEntry


class TestVolume:

    def test_cumulative_volume(self, make_session):
        history = [
            make_session("2024-01-01T10:00", exercises={"Squat": [(100, 10)], "Lunge": [(50, 5)]}),
            make_session("2024-01-02T10:00", exercises={"Bench": [(80, 8)]}),
        ]
        metrics = compute_metrics(history)
        assert metrics.total_volume == 1890
        assert metrics.max_session_volume == 1250

    def test_malformed_sets_contribute_zero(self):
        record = SessionRecord(
            date=datetime(2024, 1, 1, 10),
            category_hint="upper",
            exercises={
                "Bench": (SetEntry(weight=None, reps=5), SetEntry(weight=-20, reps=5), SetEntry(weight=60, reps=5)),
                "Row": (SetEntry(weight=float("nan"), reps=10),),
            },
        )
        assert session_volume(record) == 300

    def test_only_strength_sessions_add_volume(self, make_session):
        history = [
            make_session("2024-01-01T10:00", "cardio", exercises={"Rower": [(50, 10)]}),
            make_session("2024-01-02T10:00", "upper", exercises={"Bench": [(50, 10)]}),
        ]
        assert compute_metrics(history).total_volume == 500


class TestDuration:

    @pytest.mark.parametrize("raw,expected", [
        (None, 0),
        (-10, 0),
        ("abc", 0),
        (0, 0),
        (45, 2700),         # minutes
        (299, 17940),       # still read as minutes
        (300, 300),         # seconds from here on
        (3600, 3600),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_duration_seconds(raw) == expected

    def test_category_time(self, make_session):
        history = [
            make_session("2024-01-01T10:00", "yoga", duration=30),
            make_session("2024-01-02T10:00", "cardio", duration=1800),
            make_session("2024-01-03T10:00", "rest", duration=600),
        ]
        metrics = compute_metrics(history)
        assert metrics.total_time_seconds == 3600
        assert metrics.time_for(ActivityCategory.YOGA) == 1800
        assert metrics.time_for(ActivityCategory.REST) == 0


class TestDayStreak:

    def test_consecutive_days(self):
        days = [date(2024, 1, d) for d in (1, 2, 3, 4)]
        assert compute_day_streaks(days, date(2024, 1, 4)) == (4, 4)

    def test_yesterday_keeps_streak_alive(self):
        days = [date(2024, 1, d) for d in (1, 2, 3)]
        assert compute_day_streaks(days, date(2024, 1, 4)) == (3, 3)

    def test_two_day_gap_breaks_streak(self):
        days = [date(2024, 1, d) for d in (1, 2, 3)]
        assert compute_day_streaks(days, date(2024, 1, 5)) == (0, 3)

    def test_longest_is_kept_after_break(self):
        days = [date(2024, 1, d) for d in (1, 2, 3, 4, 5, 8, 9)]
        assert compute_day_streaks(days, date(2024, 1, 9)) == (2, 5)

    def test_empty(self):
        assert compute_day_streaks([], date(2024, 1, 1)) == (0, 0)

    def test_rest_days_count_toward_streak(self, make_session):
        history = [
            make_session("2024-01-01T10:00", "upper"),
            make_session("2024-01-02T10:00", "rest"),
            make_session("2024-01-03T10:00", "lower"),
        ]
        metrics = compute_metrics(history)
        assert metrics.current_streak_days == 3
        assert metrics.total_sessions == 2
        assert metrics.count_for(ActivityCategory.REST) == 1

    def test_multiple_sessions_same_day_count_once(self, make_session):
        history = [
            make_session("2024-01-01T08:00", "upper"),
            make_session("2024-01-01T18:00", "cardio"),
            make_session("2024-01-02T10:00", "lower"),
        ]
        assert compute_metrics(history).current_streak_days == 2


class TestWeeklyConsistency:

    def test_week_starts_on_sunday(self):
        # 2024-01-07 is a Sunday
        assert week_start(date(2024, 1, 7)) == date(2024, 1, 7)
        assert week_start(date(2024, 1, 13)) == date(2024, 1, 7)
        assert week_start(date(2024, 1, 14)) == date(2024, 1, 14)

    def test_gap_week_resets_to_most_recent_run(self):
        week_n = [date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 10)]
        week_n2 = [date(2024, 1, 22), date(2024, 1, 23), date(2024, 1, 24)]
        assert compute_weekly_consistency_streak(week_n + week_n2) == 1

    def test_consecutive_weeks(self):
        days = [date(2024, 1, d) for d in (8, 9, 10, 15, 16, 17, 22, 23, 24)]
        assert compute_weekly_consistency_streak(days) == 3

    def test_two_sessions_do_not_qualify(self):
        assert compute_weekly_consistency_streak([date(2024, 1, 8), date(2024, 1, 9)]) == 0

    def test_bonus_counts_only_strength_in_current_week(self, make_session):
        history = [
            make_session("2024-01-08T10:00", "upper"),
            make_session("2024-01-09T10:00", "cardio"),
            make_session("2024-01-10T10:00", "lower"),
        ]
        assert not has_weekly_consistency_bonus(history)
        history.append(make_session("2024-01-11T10:00", "push"))
        assert has_weekly_consistency_bonus(history)
        assert count_strength_sessions_in_week(history, date(2024, 1, 7)) == 3


class TestPersonalRecords:

    def test_first_appearance_is_baseline(self, make_session):
        history = [make_session("2024-01-01T10:00", exercises={"Bench": [(100, 5)]})]
        assert count_personal_records(history) == 0

    def test_heavier_top_set_counts_once_per_session(self, make_session):
        history = [
            make_session("2024-01-01T10:00", exercises={"Bench": [(100, 5)]}),
            make_session("2024-01-03T10:00", exercises={"Bench": [(102.5, 5), (105, 3)]}),
            make_session("2024-01-05T10:00", exercises={"bench": [(105, 5)]}),
            make_session("2024-01-07T10:00", exercises={"Bench": [(110, 1)], "Squat": [(140, 5)]}),
        ]
        assert count_personal_records(history) == 2

    def test_non_strength_sessions_never_set_records(self, make_session):
        history = [
            make_session("2024-01-01T10:00", "cardio", exercises={"Rower": [(50, 10)]}),
            make_session("2024-01-03T10:00", "cardio", exercises={"Rower": [(60, 10)]}),
        ]
        metrics = compute_metrics(history)
        assert metrics.total_volume == 0
        assert metrics.pr_count == 0

    def test_cardio_weight_is_not_a_strength_baseline(self, make_session):
        history = [
            make_session("2024-01-01T10:00", "cardio", exercises={"Sled": [(200, 1)]}),
            make_session("2024-01-03T10:00", "lower", exercises={"Sled": [(100, 5)]}),
            make_session("2024-01-05T10:00", "lower", exercises={"Sled": [(120, 5)]}),
        ]
        assert compute_metrics(history).pr_count == 1


class TestAsOf:

    def test_sessions_after_as_of_are_ignored(self, daily_sessions):
        history = daily_sessions(10)
        metrics = compute_metrics(history, as_of=date(2024, 1, 5))
        assert metrics.total_sessions == 5
        assert metrics.current_streak_days == 5

    def test_snapshot_is_sorted(self, make_session):
        late = make_session("2024-01-05T10:00")
        early = make_session("2024-01-01T10:00")
        assert snapshot([late, early]) == [early, late]

    def test_deterministic(self, daily_sessions):
        history = daily_sessions(12)
        assert compute_metrics(history, date(2024, 1, 12)) == compute_metrics(history, date(2024, 1, 12))

    def test_empty_history(self):
        metrics = compute_metrics([])
        assert metrics.total_sessions == 0
        assert metrics.current_streak_days == 0
