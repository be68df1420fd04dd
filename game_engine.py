"""
Rewards Game Engine: reward state transitions
Bundles the classifier, metrics, unlock resolver and points calculator into
the calls the service makes: score a logged session, reconcile history,
and apply penalties. Pure: nothing here touches the database or the clock.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Sequence

import structlog

from badge_migration import migrate_badge_ids
from badges import BADGE_CATALOG, BadgeDefinition
from conditions import BadgeProgress, next_badge_in_family
from config import WEEKLY_CONSISTENCY_MIN_SESSIONS
from metrics import (
    AggregateMetrics, compute_metrics, count_strength_sessions_in_week, resolve_as_of, snapshot, week_start,
)
from points import (
    LevelInfo, PointsBreakdown, apply_points_delta, compute_level, session_points_breakdown,
    streak_break_penalty, weekly_shortfall_penalty,
)
from session_classifier import ActivityCategory, SessionRecord, classify_session
from unlocks import UnlockMode, resolve_unlocks

logger = structlog.get_logger(__name__)


# ============================================================================
# State
# ============================================================================

@dataclass(frozen=True)
class RewardState:
    unlocked_badge_ids: tuple[str, ...] = ()
    total_points: int = 0

    @property
    def level(self) -> LevelInfo:
        return compute_level(self.total_points)


@dataclass(frozen=True)
class RewardUpdate:
    state: RewardState
    previous_state: RewardState
    new_badges: list[BadgeDefinition] = field(default_factory=list)
    badge_points: int = 0
    session_category: ActivityCategory | None = None
    session_points: int = 0
    breakdown: PointsBreakdown | None = None
    metrics: AggregateMetrics = field(default_factory=AggregateMetrics)

    @property
    def level(self) -> LevelInfo:
        return self.state.level

    @property
    def level_up(self) -> bool:
        return self.state.level.level > self.previous_state.level.level


@dataclass(frozen=True)
class PenaltyResult:
    state: RewardState
    streak_penalty: int = 0
    weekly_penalty: int = 0
    current_streak_days: int = 0
    evaluated_week: date | None = None


def _merge_ids(existing: Iterable[str], new_badges: Iterable[BadgeDefinition]) -> tuple[str, ...]:
    ids = list(existing)
    for badge in new_badges:
        if badge.id not in ids:
            ids.append(badge.id)
    return tuple(ids)


# ============================================================================
# Session Logged
# ============================================================================

def process_session(history: Sequence[SessionRecord], prior_state: RewardState, as_of=None) -> RewardUpdate:
    """
    Score the latest session in `history` and award any badge it unlocks.
    `history` must already include the just-logged session.
    """
    history = list(history)
    as_of = resolve_as_of(history, as_of)
    records = snapshot(history, as_of)
    if not records:
        return RewardUpdate(state=prior_state, previous_state=prior_state)

    latest = records[-1]
    category = classify_session(latest)
    metrics = compute_metrics(records, as_of)

    weekly_bonus = metrics.strength_sessions_this_week >= WEEKLY_CONSISTENCY_MIN_SESSIONS
    breakdown = session_points_breakdown(category, metrics.current_streak_days, weekly_bonus)

    new_badges = resolve_unlocks(records, prior_state.unlocked_badge_ids, UnlockMode.INCREMENTAL, as_of)
    badge_points = sum(b.points_on_unlock for b in new_badges)

    state = RewardState(
        unlocked_badge_ids=_merge_ids(prior_state.unlocked_badge_ids, new_badges),
        total_points=apply_points_delta(prior_state.total_points, breakdown.total + badge_points),
    )

    logger.info(
        "session_rewarded",
        category=category.value,
        session_points=breakdown.total,
        new_badges=[b.id for b in new_badges],
        total_points=state.total_points,
    )

    return RewardUpdate(
        state=state,
        previous_state=prior_state,
        new_badges=new_badges,
        badge_points=badge_points,
        session_category=category,
        session_points=breakdown.total,
        breakdown=breakdown,
        metrics=metrics,
    )


# ============================================================================
# Retroactive Reconcile
# ============================================================================

def reconcile_rewards(history: Sequence[SessionRecord], prior_state: RewardState, as_of=None) -> RewardUpdate:
    """
    Migrate stored ids to the current catalog, then grant every badge the
    history has earned exactly once. Used for first-run backfill, after a
    reinstall, and after a catalog change.
    """
    history = list(history)
    as_of = resolve_as_of(history, as_of)

    migrated = migrate_badge_ids(prior_state.unlocked_badge_ids)
    new_badges = resolve_unlocks(history, migrated, UnlockMode.RETROACTIVE, as_of)
    badge_points = sum(b.points_on_unlock for b in new_badges)

    granted = set(migrated) | {b.id for b in new_badges}
    state = RewardState(
        unlocked_badge_ids=tuple(b.id for b in BADGE_CATALOG if b.id in granted),
        total_points=apply_points_delta(prior_state.total_points, badge_points),
    )

    if new_badges or len(migrated) != len(prior_state.unlocked_badge_ids):
        logger.info(
            "rewards_reconciled",
            migrated=len(migrated),
            dropped=len(set(prior_state.unlocked_badge_ids)) - len(migrated),
            new_badges=[b.id for b in new_badges],
            total_points=state.total_points,
        )

    return RewardUpdate(
        state=state,
        previous_state=prior_state,
        new_badges=new_badges,
        badge_points=badge_points,
        metrics=compute_metrics(history, as_of),
    )


# ============================================================================
# Penalties
# ============================================================================

def evaluate_penalties(history: Sequence[SessionRecord], prior_state: RewardState,
                       previous_streak_days: int, last_evaluated_week: date | None,
                       as_of) -> PenaltyResult:
    """
    Streak-break and weekly-shortfall penalties as of `as_of`.
    The weekly check looks at the last finished week and runs at most once
    per week: pass back the returned evaluated_week next time.
    """
    history = list(history)
    metrics = compute_metrics(history, as_of)
    as_of = resolve_as_of(history, as_of)

    streak_penalty = streak_break_penalty(previous_streak_days, metrics.current_streak_days)

    weekly_penalty = 0
    evaluated_week = last_evaluated_week
    if as_of is not None:
        last_week = week_start(as_of.date()) - timedelta(days=7)
        if last_evaluated_week is None or last_evaluated_week < last_week:
            strength_sessions = count_strength_sessions_in_week(snapshot(history, as_of), last_week)
            weekly_penalty = weekly_shortfall_penalty(strength_sessions)
            evaluated_week = last_week

    total = apply_points_delta(prior_state.total_points, streak_penalty + weekly_penalty)
    if streak_penalty or weekly_penalty:
        logger.info(
            "penalties_applied",
            streak_penalty=streak_penalty,
            weekly_penalty=weekly_penalty,
            total_points=total,
        )

    return PenaltyResult(
        state=RewardState(unlocked_badge_ids=prior_state.unlocked_badge_ids, total_points=total),
        streak_penalty=streak_penalty,
        weekly_penalty=weekly_penalty,
        current_streak_days=metrics.current_streak_days,
        evaluated_week=evaluated_week,
    )


# ============================================================================
# Progress Summary
# ============================================================================

def _family_key(badge: BadgeDefinition) -> str:
    condition = badge.condition
    suffix = getattr(condition, "category", None) or getattr(condition, "kind", None)
    return f"{condition.tag}:{suffix.value}" if suffix is not None else condition.tag


def compute_badge_progress(history: Sequence[SessionRecord], as_of=None) -> dict[str, BadgeProgress]:
    """Next locked badge per condition family, keyed by family."""
    history = list(history)
    as_of = resolve_as_of(history, as_of)
    metrics = compute_metrics(history, as_of)

    families: dict[str, list[BadgeDefinition]] = {}
    for badge in BADGE_CATALOG:
        families.setdefault(_family_key(badge), []).append(badge)

    progress = {}
    for key, badges in families.items():
        nxt = next_badge_in_family(badges, metrics, history, as_of)
        if nxt is not None:
            progress[key] = nxt
    return progress
