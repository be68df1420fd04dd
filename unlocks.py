"""
Unlock set resolver
Works out which badges are newly earned, either just now (incremental) or
at any point in history (retroactive backfill / post-migration reconcile).
"""

from enum import Enum
from typing import Iterable, Sequence

from badges import BADGE_CATALOG, BadgeDefinition
from conditions import evaluate
from metrics import AggregateMetrics, compute_metrics, resolve_as_of, snapshot
from session_classifier import SessionRecord


class UnlockMode(str, Enum):
    INCREMENTAL = "incremental"
    RETROACTIVE = "retroactive"


def unlocked_badges(history: Sequence[SessionRecord], as_of=None,
                    catalog: Sequence[BadgeDefinition] = BADGE_CATALOG,
                    metrics: AggregateMetrics | None = None) -> list[BadgeDefinition]:
    """Every badge whose condition currently holds, in catalog order."""
    history = list(history)
    as_of = resolve_as_of(history, as_of)
    if metrics is None:
        metrics = compute_metrics(history, as_of)
    return [b for b in catalog if evaluate(b.condition, metrics, history, as_of)]


def history_before_latest(history: Sequence[SessionRecord], as_of=None) -> list[SessionRecord]:
    """
    The snapshot minus its most recent session.
    Ties on date drop only one record, the last one in input order.
    """
    records = snapshot(history, as_of)
    return records[:-1]


def resolve_unlocks(history: Iterable[SessionRecord],
                    previously_unlocked: Iterable[str] = (),
                    mode: UnlockMode = UnlockMode.INCREMENTAL,
                    as_of=None,
                    catalog: Sequence[BadgeDefinition] = BADGE_CATALOG) -> list[BadgeDefinition]:
    """
    Newly unlocked badges, in catalog order.

    INCREMENTAL: `history` includes the just-logged session. A badge is new
    when it holds now, is not in `previously_unlocked`, and (progressive
    conditions only) did not already hold before the latest session. The
    last check keeps a stale `previously_unlocked` from replaying old
    milestones as if they were just crossed.

    RETROACTIVE: every badge that holds now and has not been granted.
    """
    history = list(history)
    granted = set(previously_unlocked or ())
    as_of = resolve_as_of(history, as_of)

    current = [b for b in unlocked_badges(history, as_of, catalog) if b.id not in granted]
    if mode == UnlockMode.RETROACTIVE or not current:
        return current

    before = history_before_latest(history, as_of)
    before_metrics = compute_metrics(before, as_of)

    newly = []
    for badge in current:
        if badge.condition.progressive and evaluate(badge.condition, before_metrics, before, as_of):
            continue
        newly.append(badge)
    return newly
