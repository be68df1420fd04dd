"""
Condition evaluator
Decides whether a badge condition is met for a set of aggregate metrics.
Dispatch is an exhaustive table keyed by condition class: a condition type
without an entry is a programming error, never a silent "locked".
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Iterable, Sequence

import structlog

import config
from badges import (
    BadgeDefinition, CategoryCount, CategoryTimeSeconds, Condition, PrCount, SessionCount,
    SingleSessionVolume, Special, SpecialKind, StreakDays, TotalTimeSeconds, TotalVolume,
    WeeklyConsistencyStreak,
)
from errors import UnknownConditionError
from metrics import AggregateMetrics, snapshot
from session_classifier import ActivityCategory, SessionRecord, normalize_hint, classify_session

logger = structlog.get_logger(__name__)

VARIETY_SPLITS = frozenset({"full", "upper", "lower", "push", "pull", "legs"})
CONSECUTIVE_WINDOW = timedelta(hours=1)


# ============================================================================
# Special Conditions (scan history directly)
# ============================================================================

def _workouts(history: Iterable[SessionRecord], as_of=None) -> list:
    """Non-rest sessions at or before as_of, oldest first."""
    return [r for r in snapshot(history, as_of) if classify_session(r) != ActivityCategory.REST]


def _count_hours(sessions: Sequence[SessionRecord], start: int, end: int) -> int:
    return sum(1 for s in sessions if start <= s.date.hour < end)


def _count_weekend(sessions: Sequence[SessionRecord]) -> int:
    # weekday(): Saturday = 5, Sunday = 6
    return sum(1 for s in sessions if s.date.weekday() >= 5)


def _count_splits(sessions: Sequence[SessionRecord]) -> int:
    seen = {normalize_hint(s.category_hint) for s in sessions}
    return len(VARIETY_SPLITS & seen)


def _longest_consecutive_run(sessions: Sequence[SessionRecord]) -> int:
    """Longest chain of sessions each finished within an hour of the previous one."""
    if not sessions:
        return 0
    longest = run = 1
    for prev, curr in zip(sessions, sessions[1:]):
        if curr.date - prev.date <= CONSECUTIVE_WINDOW:
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


_SPECIAL_COUNTERS: dict[SpecialKind, Callable[[Sequence[SessionRecord]], int]] = {
    SpecialKind.EARLY_BIRD: lambda s: _count_hours(s, 0, 7),
    SpecialKind.MORNING: lambda s: _count_hours(s, 7, 12),
    SpecialKind.AFTERNOON: lambda s: _count_hours(s, 12, 17),
    SpecialKind.EVENING: lambda s: _count_hours(s, 17, 22),
    SpecialKind.LATE_NIGHT: lambda s: _count_hours(s, 22, 24),
    SpecialKind.WEEKEND: _count_weekend,
    SpecialKind.VARIETY: _count_splits,
    SpecialKind.CONSECUTIVE_WITHIN_HOUR: _longest_consecutive_run,
}


def _special_value(condition: Special, history: Sequence[SessionRecord], as_of=None) -> float:
    counter = _SPECIAL_COUNTERS.get(condition.kind)
    if counter is None:
        raise UnknownConditionError(condition)
    return counter(_workouts(history, as_of))


# ============================================================================
# Dispatch
# ============================================================================

_METRIC_READERS: dict[type, Callable[[Condition, AggregateMetrics], float]] = {
    SessionCount: lambda c, m: m.total_sessions,
    StreakDays: lambda c, m: m.current_streak_days,
    PrCount: lambda c, m: m.pr_count,
    TotalVolume: lambda c, m: m.total_volume,
    TotalTimeSeconds: lambda c, m: m.total_time_seconds,
    CategoryCount: lambda c, m: m.count_for(c.category),
    CategoryTimeSeconds: lambda c, m: m.time_for(c.category),
    SingleSessionVolume: lambda c, m: m.max_session_volume,
    WeeklyConsistencyStreak: lambda c, m: m.weekly_consistency_streak,
}

HANDLED_CONDITIONS = frozenset(_METRIC_READERS) | {Special}


def condition_value(condition: Condition, metrics: AggregateMetrics,
                    history: Sequence[SessionRecord] = (), as_of=None) -> float:
    """Current value of whatever the condition measures. Raises UnknownConditionError."""
    if type(condition) is Special:
        return _special_value(condition, history, as_of)
    reader = _METRIC_READERS.get(type(condition))
    if reader is None:
        raise UnknownConditionError(condition)
    return reader(condition, metrics)


def evaluate(condition: Condition, metrics: AggregateMetrics,
             history: Sequence[SessionRecord] = (), as_of=None) -> bool:
    """
    True when the condition is met.
    An unregistered condition raises when REWARDS_STRICT_CONDITIONS is on
    and evaluates as locked (with a warning) otherwise, so one bad catalog
    entry cannot take down every other badge.
    """
    try:
        return condition_value(condition, metrics, history, as_of) >= condition.threshold
    except UnknownConditionError:
        if config.REWARDS_STRICT_CONDITIONS:
            raise
        logger.warning("unknown_condition", condition=repr(condition))
        return False


# ============================================================================
# Progress
# ============================================================================

@dataclass(frozen=True)
class BadgeProgress:
    badge: BadgeDefinition
    current: float
    target: float
    percent: float
    unlocked: bool


def badge_progress(badge: BadgeDefinition, metrics: AggregateMetrics,
                   history: Sequence[SessionRecord] = (), as_of=None) -> BadgeProgress:
    target = badge.condition.threshold
    try:
        current = condition_value(badge.condition, metrics, history, as_of)
    except UnknownConditionError:
        if config.REWARDS_STRICT_CONDITIONS:
            raise
        current = 0
    percent = 100.0 if target <= 0 else min(current / target * 100, 100.0)
    return BadgeProgress(badge=badge, current=current, target=target,
                         percent=round(percent, 1), unlocked=current >= target)


def next_badge_in_family(badges: Iterable[BadgeDefinition], metrics: AggregateMetrics,
                         history: Sequence[SessionRecord] = (), as_of=None) -> BadgeProgress | None:
    """Progress toward the lowest-threshold badge still locked. None when all are earned."""
    for badge in sorted(badges, key=lambda b: b.condition.threshold):
        progress = badge_progress(badge, metrics, history, as_of)
        if not progress.unlocked:
            return progress
    return None
