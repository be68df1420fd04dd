"""
Aggregate metrics over a session history
Every function here is a pure reducer: same history + same as_of → same output.
Nothing reads the wall clock; "today" is always the explicit as_of.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Iterable, Sequence

from config import DURATION_MINUTES_THRESHOLD, WEEKLY_CONSISTENCY_MIN_SESSIONS
from session_classifier import ActivityCategory, SessionRecord, classify_session


@dataclass(frozen=True)
class AggregateMetrics:
    total_sessions: int = 0
    category_counts: dict[ActivityCategory, int] = field(default_factory=dict)
    total_volume: float = 0.0
    total_time_seconds: int = 0
    category_time_seconds: dict[ActivityCategory, int] = field(default_factory=dict)
    max_session_volume: float = 0.0
    current_streak_days: int = 0
    longest_streak_days: int = 0
    weekly_consistency_streak: int = 0
    pr_count: int = 0
    strength_sessions_this_week: int = 0

    def count_for(self, category: ActivityCategory) -> int:
        return self.category_counts.get(category, 0)

    def time_for(self, category: ActivityCategory) -> int:
        return self.category_time_seconds.get(category, 0)


# ============================================================================
# Malformed-Input Tolerant Numbers
# ============================================================================

def _non_negative(value) -> float:
    """Coerce to a finite number ≥ 0. Anything else contributes zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def normalize_duration_seconds(raw) -> int:
    """
    Durations below DURATION_MINUTES_THRESHOLD are assumed to be minutes.
    Known precision gap: a genuine 4m59s session (299s) reads as 299 minutes.
    """
    value = _non_negative(raw)
    if value == 0:
        return 0
    if value < DURATION_MINUTES_THRESHOLD:
        value *= 60
    return int(round(value))


def session_volume(record: SessionRecord) -> float:
    """Σ(weight × reps) over every set of every exercise."""
    total = 0.0
    for sets in (record.exercises or {}).values():
        for s in sets or ():
            total += _non_negative(getattr(s, "weight", None)) * _non_negative(getattr(s, "reps", None))
    return total


# ============================================================================
# Dates
# ============================================================================

def week_start(day: date) -> date:
    """Sunday that starts the week containing `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _cutoff(as_of) -> datetime | None:
    if as_of is None or isinstance(as_of, datetime):
        return as_of
    return datetime.combine(as_of, time.max)


def snapshot(history: Iterable[SessionRecord], as_of=None) -> list[SessionRecord]:
    """
    Sessions at or before as_of, oldest first.
    With no as_of the whole history is the snapshot.
    """
    records = sorted((r for r in history if r is not None and r.date is not None), key=lambda r: r.date)
    cutoff = _cutoff(as_of)
    if cutoff is None:
        return records
    return [r for r in records if r.date <= cutoff]


def resolve_as_of(history: Sequence[SessionRecord], as_of=None) -> datetime | None:
    """Explicit as_of wins; otherwise the latest session date."""
    if as_of is not None:
        return _cutoff(as_of)
    dates = [r.date for r in history if r is not None and r.date is not None]
    return max(dates) if dates else None


# ============================================================================
# Streaks
# ============================================================================

def compute_day_streaks(active_days: Iterable[date], today: date | None) -> tuple[int, int]:
    """
    Returns (current, longest) runs of consecutive active calendar days.
    The current run may end today or yesterday; older runs count as 0.
    """
    days = sorted(set(active_days))
    if not days:
        return 0, 0

    longest = 1
    run = 1
    for prev, curr in zip(days, days[1:]):
        if (curr - prev).days == 1:
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    if today is None:
        return 0, longest

    day_set = set(days)
    anchor = today
    if anchor not in day_set:
        anchor = today - timedelta(days=1)
        if anchor not in day_set:
            return 0, longest

    current = 0
    while anchor in day_set:
        current += 1
        anchor -= timedelta(days=1)
    return current, longest


def compute_weekly_consistency_streak(strength_dates: Iterable[date]) -> int:
    """
    Consecutive qualifying weeks (Sunday start, 3+ strength sessions),
    counted back from the most recent qualifying week. A non-qualifying
    week ends the count.
    """
    per_week: dict[date, int] = {}
    for d in strength_dates:
        key = week_start(d)
        per_week[key] = per_week.get(key, 0) + 1

    qualifying = {w for w, n in per_week.items() if n >= WEEKLY_CONSISTENCY_MIN_SESSIONS}
    if not qualifying:
        return 0

    week = max(qualifying)
    streak = 0
    while week in qualifying:
        streak += 1
        week -= timedelta(days=7)
    return streak


# ============================================================================
# Personal Records
# ============================================================================

def count_personal_records(records: Sequence[SessionRecord]) -> int:
    """
    A session sets a PR for an exercise when its heaviest set beats every
    earlier session's heaviest set. The first time an exercise is logged
    is the baseline, not a PR. `records` must be oldest first.
    """
    best: dict[str, float] = {}
    prs = 0
    for record in records:
        for name, sets in (record.exercises or {}).items():
            top = max((_non_negative(getattr(s, "weight", None)) for s in sets or ()), default=0.0)
            if top <= 0:
                continue
            key = name.strip().lower()
            if key not in best:
                best[key] = top
            elif top > best[key]:
                prs += 1
                best[key] = top
    return prs


# ============================================================================
# Aggregation
# ============================================================================

def compute_metrics(history: Iterable[SessionRecord], as_of=None) -> AggregateMetrics:
    """
    Compute every numeric signal the badge conditions read.
    as_of defaults to the latest session date. Sessions after as_of are ignored.
    """
    history = list(history)
    as_of = resolve_as_of(history, as_of)
    records = snapshot(history, as_of)
    if not records:
        return AggregateMetrics()

    category_counts = {c: 0 for c in ActivityCategory}
    category_time = {c: 0 for c in ActivityCategory}
    total_sessions = 0
    total_time = 0
    total_volume = 0.0
    max_volume = 0.0
    active_days = set()
    strength_days = []
    strength_records = []

    for record in records:
        category = classify_session(record)
        active_days.add(record.date.date())
        category_counts[category] += 1
        if category == ActivityCategory.REST:
            continue

        total_sessions += 1
        seconds = normalize_duration_seconds(record.duration_seconds)
        category_time[category] += seconds
        total_time += seconds

        if category == ActivityCategory.STRENGTH:
            volume = session_volume(record)
            total_volume += volume
            max_volume = max(max_volume, volume)
            strength_days.append(record.date.date())
            strength_records.append(record)

    today = as_of.date()
    current_streak, longest_streak = compute_day_streaks(active_days, today)
    this_week = week_start(today)

    return AggregateMetrics(
        total_sessions=total_sessions,
        category_counts=category_counts,
        total_volume=total_volume,
        total_time_seconds=total_time,
        category_time_seconds=category_time,
        max_session_volume=max_volume,
        current_streak_days=current_streak,
        longest_streak_days=longest_streak,
        weekly_consistency_streak=compute_weekly_consistency_streak(strength_days),
        pr_count=count_personal_records(strength_records),
        strength_sessions_this_week=sum(1 for d in strength_days if week_start(d) == this_week),
    )


def count_strength_sessions_in_week(history: Iterable[SessionRecord], week: date) -> int:
    """Strength sessions logged in the Sunday-start week beginning `week`."""
    start = week_start(week)
    return sum(
        1 for r in history
        if r is not None and r.date is not None
        and week_start(r.date.date()) == start
        and classify_session(r) == ActivityCategory.STRENGTH
    )


def has_weekly_consistency_bonus(history: Iterable[SessionRecord], as_of=None) -> bool:
    """True once 3+ strength sessions are logged in as_of's week."""
    metrics = compute_metrics(history, as_of)
    return metrics.strength_sessions_this_week >= WEEKLY_CONSISTENCY_MIN_SESSIONS
