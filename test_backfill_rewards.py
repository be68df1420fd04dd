"""Tests for the reward backfill script."""

from datetime import date, datetime, timedelta

from backfill_rewards import backfill
from config import CURRENT_BADGE_SCHEMA_VERSION
from database import SessionLog, UserRewards


def _add_sessions(db, user_id, n, start=datetime(2024, 1, 1, 10)):
    for i in range(n):
        db.add(SessionLog(user_id=user_id, date=start + timedelta(days=i), category_hint="upper", exercises={}))
    db.commit()


def test_creates_rewards_for_new_users(db):
    _add_sessions(db, "u1", 5)
    counts = backfill(db)
    assert counts == {"created": 1, "migrated": 0, "skipped": 0}

    rewards = db.query(UserRewards).filter(UserRewards.user_id == "u1").first()
    assert rewards.unlocked_badge_ids == ["first-session", "dedicated-5", "streak-3", "weekly-consistency-1"]
    assert rewards.total_points == 2000
    assert rewards.badge_schema_version == CURRENT_BADGE_SCHEMA_VERSION
    assert rewards.last_evaluated_week == date(2023, 12, 31)


def test_migrates_legacy_users(db):
    _add_sessions(db, "u2", 1)
    db.add(UserRewards(user_id="u2", unlocked_badge_ids=["first-workout", "wellness-10"], total_points=900,
                       last_streak_days=0, badge_schema_version=1))
    db.commit()

    counts = backfill(db)
    assert counts["migrated"] == 1

    rewards = db.query(UserRewards).filter(UserRewards.user_id == "u2").first()
    assert rewards.unlocked_badge_ids == ["first-session"]
    assert rewards.total_points == 900


def test_second_run_skips_everyone(db):
    _add_sessions(db, "u3", 3)
    backfill(db)
    assert backfill(db) == {"created": 0, "migrated": 0, "skipped": 1}
