"""
Points & level calculator
Per-session scoring, badge bonuses, penalties and the points → level table.
Level is always derived from the points total; it is never stored.
"""

import math
from dataclasses import dataclass

from config import (
    BASE_SESSION_POINTS, LEVEL_EXTRAPOLATION_STEP, LEVEL_THRESHOLDS, STREAK_BREAK_PENALTY,
    STREAK_MULTIPLIERS, WEEKLY_CONSISTENCY_MIN_SESSIONS, WEEKLY_CONSISTENCY_MULTIPLIER,
    WEEKLY_SHORTFALL_PENALTY,
)
from session_classifier import ActivityCategory, classify_hint


@dataclass(frozen=True)
class LevelInfo:
    level: int
    current_level_points: int
    points_to_next_level: int


@dataclass(frozen=True)
class PointsBreakdown:
    base_points: int
    weekly_multiplier: float
    streak_multiplier: float
    total: int


# ============================================================================
# Session Points
# ============================================================================

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _category(category) -> ActivityCategory:
    if isinstance(category, ActivityCategory):
        return category
    return classify_hint(category)


def base_session_points(category) -> int:
    return BASE_SESSION_POINTS.get(_category(category).value, 0)


def streak_multiplier(current_streak_days: int) -> float:
    """Step function of the day streak: 1.0 below 7 days, up to 1.40 at 365+."""
    days = current_streak_days or 0
    for min_days, multiplier in STREAK_MULTIPLIERS:
        if days >= min_days:
            return multiplier
    return 1.0


def session_points_breakdown(category, current_streak_days: int, weekly_bonus_active: bool) -> PointsBreakdown:
    base = base_session_points(category)
    weekly = WEEKLY_CONSISTENCY_MULTIPLIER if weekly_bonus_active else 1.0
    streak = streak_multiplier(current_streak_days)
    # Round once, after every multiplier has been applied
    return PointsBreakdown(
        base_points=base,
        weekly_multiplier=weekly,
        streak_multiplier=streak,
        total=round_half_up(base * weekly * streak),
    )


def compute_session_points(category, current_streak_days: int, weekly_bonus_active: bool) -> int:
    """base(category) × weekly bonus × streak multiplier, rounded half-up at the end."""
    return session_points_breakdown(category, current_streak_days, weekly_bonus_active).total


# ============================================================================
# Penalties
# ============================================================================

def streak_break_penalty(previous_streak_days: int, current_streak_days: int) -> int:
    """Negative when a positive streak dropped since the last check."""
    if previous_streak_days > 0 and current_streak_days < previous_streak_days:
        return STREAK_BREAK_PENALTY
    return 0


def weekly_shortfall_penalty(strength_sessions_last_week: int) -> int:
    if strength_sessions_last_week < WEEKLY_CONSISTENCY_MIN_SESSIONS:
        return WEEKLY_SHORTFALL_PENALTY
    return 0


def apply_points_delta(total_points: int, delta: int) -> int:
    """Totals never go below zero."""
    return max(0, total_points + delta)


# ============================================================================
# Levels
# ============================================================================

def level_threshold(level: int) -> int:
    """Total points needed to reach `level`. Level 1 starts at 0."""
    if level <= 1:
        return 0
    index = level - 1
    if index < len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[index]
    extra_levels = index - (len(LEVEL_THRESHOLDS) - 1)
    return LEVEL_THRESHOLDS[-1] + extra_levels * LEVEL_EXTRAPOLATION_STEP


def compute_level(total_points) -> LevelInfo:
    """
    The unique level L with threshold(L) <= points < threshold(L + 1).
    Negative or missing totals count as 0.
    """
    points = max(0, int(total_points or 0))

    if points >= LEVEL_THRESHOLDS[-1]:
        level = len(LEVEL_THRESHOLDS) + (points - LEVEL_THRESHOLDS[-1]) // LEVEL_EXTRAPOLATION_STEP
    else:
        level = 1
        while points >= LEVEL_THRESHOLDS[level]:
            level += 1

    floor = level_threshold(level)
    return LevelInfo(
        level=level,
        current_level_points=points - floor,
        points_to_next_level=level_threshold(level + 1) - points,
    )
