"""
One-time backfill script: migrate stored badge ids to the current catalog
and retroactively grant every badge each user's history has earned.

Run once after deploying a new badge catalog.
Safe to run multiple times: users already on CURRENT_BADGE_SCHEMA_VERSION are skipped.
"""

from datetime import datetime

import structlog

from config import CURRENT_BADGE_SCHEMA_VERSION
from database import SessionLocal, SessionLog, UserRewards, engine, Base, load_history
from game_engine import RewardState, reconcile_rewards
from logging_config import configure_logging
from metrics import compute_metrics, week_start

logger = structlog.get_logger(__name__)


def backfill(db, force: bool = False) -> dict:
    """Reconcile every user with logged sessions. Returns created/migrated/skipped counts."""
    user_ids = [uid for (uid,) in db.query(SessionLog.user_id).distinct().all()]
    logger.info("backfill_started", users=len(user_ids))

    created = 0
    migrated = 0
    skipped = 0

    for user_id in user_ids:
        rewards = db.query(UserRewards).filter(UserRewards.user_id == user_id).first()
        if rewards and not force and (rewards.badge_schema_version or 0) >= CURRENT_BADGE_SCHEMA_VERSION:
            skipped += 1
            continue

        history = load_history(db, user_id)
        if not history:
            continue

        if not rewards:
            today = datetime.utcnow()
            metrics = compute_metrics(history, today)
            rewards = UserRewards(
                user_id=user_id, unlocked_badge_ids=[], total_points=0,
                last_streak_days=metrics.current_streak_days,
                last_evaluated_week=week_start(history[0].date.date()),
                badge_schema_version=CURRENT_BADGE_SCHEMA_VERSION
            )
            db.add(rewards)
            created += 1
        else:
            migrated += 1

        prior = RewardState(
            unlocked_badge_ids=tuple(rewards.unlocked_badge_ids or ()),
            total_points=rewards.total_points or 0
        )
        update = reconcile_rewards(history, prior)
        rewards.unlocked_badge_ids = list(update.state.unlocked_badge_ids)
        rewards.total_points = update.state.total_points
        rewards.badge_schema_version = CURRENT_BADGE_SCHEMA_VERSION
        rewards.last_updated = datetime.utcnow()

    db.commit()
    logger.info("backfill_complete", created=created, migrated=migrated, skipped=skipped)
    return {"created": created, "migrated": migrated, "skipped": skipped}


if __name__ == "__main__":
    configure_logging()
    # Create new tables: additive, won't touch existing tables
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        backfill(session)
    finally:
        session.close()
