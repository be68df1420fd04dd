"""
Rewards API - FastAPI application
Logs activity sessions and keeps each user's badges, points and level in sync
"""

from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date, datetime

import structlog

from database import get_db, init_db, load_history, SessionLog, UserRewards
from schemas import (
    SessionCreate, SessionResponse,
    BadgeResponse, BadgeProgressResponse, BadgeMigrationRequest, BadgeMigrationResponse,
    LevelResponse, SessionPointsRequest, SessionPointsResponse,
    MetricsResponse, RewardStateResponse, RewardUpdateResponse, ReconcileRequest,
)
from badge_migration import migrate_badge_ids
from badges import BADGE_CATALOG, BadgeDefinition
from config import CURRENT_BADGE_SCHEMA_VERSION
from game_engine import RewardState, compute_badge_progress, evaluate_penalties, process_session, reconcile_rewards
from logging_config import configure_logging
from metrics import AggregateMetrics, compute_metrics, week_start
from points import LevelInfo, compute_level, session_points_breakdown
from session_classifier import classify_hint

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Rewards API",
    description="Session logging, achievement badges, points and levels",
    version="2.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event():
    configure_logging()
    init_db()


@app.get("/")
def root():
    return {"status": "healthy", "service": "Rewards API", "version": "2.0.0"}


# ============================================================================
# Response Helpers
# ============================================================================

def _badge_response(badge: BadgeDefinition) -> BadgeResponse:
    return BadgeResponse(
        id=badge.id, name=badge.name, description=badge.description,
        tier=badge.tier.value, condition=badge.condition.tag,
        threshold=badge.condition.threshold, points_on_unlock=badge.points_on_unlock
    )


def _level_response(info: LevelInfo) -> LevelResponse:
    return LevelResponse(
        level=info.level, current_level_points=info.current_level_points,
        points_to_next_level=info.points_to_next_level
    )


def _metrics_response(metrics: AggregateMetrics) -> MetricsResponse:
    return MetricsResponse(
        total_sessions=metrics.total_sessions,
        category_counts={c.value: n for c, n in metrics.category_counts.items()},
        total_volume=metrics.total_volume,
        total_time_seconds=metrics.total_time_seconds,
        max_session_volume=metrics.max_session_volume,
        current_streak_days=metrics.current_streak_days,
        longest_streak_days=metrics.longest_streak_days,
        weekly_consistency_streak=metrics.weekly_consistency_streak,
        pr_count=metrics.pr_count,
        strength_sessions_this_week=metrics.strength_sessions_this_week,
    )


# ============================================================================
# Reward State Helpers
# ============================================================================

def _get_or_create_rewards(db: Session, user_id: str, first_session: datetime) -> UserRewards:
    rewards = db.query(UserRewards).filter(UserRewards.user_id == user_id).first()
    if not rewards:
        # The week a user joins is partial: shortfall checks start with the next one
        rewards = UserRewards(
            user_id=user_id, unlocked_badge_ids=[], total_points=0, last_streak_days=0,
            last_evaluated_week=week_start(first_session.date()),
            badge_schema_version=CURRENT_BADGE_SCHEMA_VERSION
        )
        db.add(rewards)
    return rewards


def _state_of(rewards: UserRewards) -> RewardState:
    return RewardState(
        unlocked_badge_ids=tuple(rewards.unlocked_badge_ids or ()),
        total_points=rewards.total_points or 0
    )


def _store_state(rewards: UserRewards, state: RewardState):
    rewards.unlocked_badge_ids = list(state.unlocked_badge_ids)
    rewards.total_points = state.total_points
    rewards.last_updated = datetime.utcnow()


def _ensure_current_schema(rewards: UserRewards, history) -> RewardState:
    """Run the one-time id migration + retroactive reconcile for users on an old catalog."""
    state = _state_of(rewards)
    if (rewards.badge_schema_version or 0) >= CURRENT_BADGE_SCHEMA_VERSION:
        return state
    update = reconcile_rewards(history, state)
    _store_state(rewards, update.state)
    rewards.badge_schema_version = CURRENT_BADGE_SCHEMA_VERSION
    logger.info("badge_schema_migrated", user_id=rewards.user_id,
                badge_ids=list(update.state.unlocked_badge_ids))
    return update.state


# ============================================================================
# Session Endpoints
# ============================================================================

@app.post("/api/sessions", response_model=RewardUpdateResponse, tags=["Sessions"])
def log_session(session_data: SessionCreate, db: Session = Depends(get_db)):
    session_date = session_data.date.replace(tzinfo=None)
    new_session = SessionLog(
        user_id=session_data.user_id, date=session_date,
        category_hint=session_data.category_hint,
        duration_seconds=session_data.duration_seconds,
        exercises={name: [s.model_dump() for s in sets] for name, sets in session_data.exercises.items()},
        created_at=datetime.utcnow()
    )
    db.add(new_session)
    db.flush()

    rewards = _get_or_create_rewards(db, session_data.user_id, session_date)
    history = load_history(db, session_data.user_id)
    state = _ensure_current_schema(rewards, history)

    latest = max(r.date for r in history)
    penalties = evaluate_penalties(
        history, state, rewards.last_streak_days or 0, rewards.last_evaluated_week, as_of=latest
    )
    update = process_session(history, penalties.state, as_of=session_date)
    final_state = update.state

    if session_date < latest:
        # Back-dated entry: badges it completes together with later sessions
        final_state = reconcile_rewards(history, final_state).state

    _store_state(rewards, final_state)
    rewards.last_streak_days = penalties.current_streak_days
    rewards.last_evaluated_week = penalties.evaluated_week
    db.commit()
    db.refresh(new_session)

    new_ids = set(final_state.unlocked_badge_ids) - set(state.unlocked_badge_ids)
    new_badges = [b for b in BADGE_CATALOG if b.id in new_ids]
    logger.info(
        "session_logged", user_id=session_data.user_id, session_id=new_session.id,
        points=update.session_points, badge_ids=[b.id for b in new_badges],
        total_points=final_state.total_points
    )

    previous_level = compute_level(state.total_points)
    level = compute_level(final_state.total_points)
    return RewardUpdateResponse(
        user_id=session_data.user_id,
        session_id=new_session.id,
        session_category=update.session_category.value if update.session_category else None,
        session_points=update.session_points,
        new_badges=[_badge_response(b) for b in new_badges],
        badge_points=sum(b.points_on_unlock for b in new_badges),
        penalty_points=penalties.streak_penalty + penalties.weekly_penalty,
        total_points=final_state.total_points,
        level=_level_response(level),
        level_up=level.level > previous_level.level
    )


@app.get("/api/sessions/{user_id}", response_model=List[SessionResponse], tags=["Sessions"])
def get_user_sessions(user_id: str, limit: int = 100, db: Session = Depends(get_db)):
    sessions = db.query(SessionLog).filter(SessionLog.user_id == user_id).order_by(
        SessionLog.date.desc()
    ).limit(limit).all()
    return [SessionResponse.model_validate(s) for s in sessions]


@app.delete("/api/sessions/{session_id}", tags=["Sessions"])
def delete_session(session_id: int, db: Session = Depends(get_db)):
    """Remove a logged session. Badges already granted stay granted."""
    session = db.query(SessionLog).filter(SessionLog.id == session_id).first()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    user_id = session.user_id
    db.delete(session)
    db.commit()
    logger.info("session_deleted", user_id=user_id, session_id=session_id)
    return {"deleted": True, "session_id": session_id}


# ============================================================================
# Reward Endpoints
# ============================================================================

@app.get("/api/rewards/{user_id}", response_model=RewardStateResponse, tags=["Rewards"])
def get_user_rewards(user_id: str, as_of: Optional[date] = None, db: Session = Depends(get_db)):
    rewards = db.query(UserRewards).filter(UserRewards.user_id == user_id).first()
    if not rewards:
        raise HTTPException(status_code=404, detail="User not found")
    history = load_history(db, user_id)
    state = _ensure_current_schema(rewards, history)
    db.commit()

    as_of = as_of or datetime.utcnow().date()
    progress = compute_badge_progress(history, as_of)
    return RewardStateResponse(
        user_id=user_id,
        unlocked_badge_ids=list(state.unlocked_badge_ids),
        total_points=state.total_points,
        level=_level_response(state.level),
        metrics=_metrics_response(compute_metrics(history, as_of)),
        next_badges=[
            BadgeProgressResponse(badge_id=p.badge.id, name=p.badge.name, current=p.current,
                                  target=p.target, percent=p.percent)
            for p in progress.values()
        ]
    )


@app.post("/api/rewards/{user_id}/reconcile", response_model=RewardUpdateResponse, tags=["Rewards"])
def reconcile_user_rewards(user_id: str, body: Optional[ReconcileRequest] = None, db: Session = Depends(get_db)):
    """Grant every badge the stored history has earned. Safe to call repeatedly."""
    rewards = db.query(UserRewards).filter(UserRewards.user_id == user_id).first()
    if not rewards:
        raise HTTPException(status_code=404, detail="User not found")
    history = load_history(db, user_id)
    as_of = body.as_of if body else None

    update = reconcile_rewards(history, _state_of(rewards), as_of)
    _store_state(rewards, update.state)
    rewards.badge_schema_version = CURRENT_BADGE_SCHEMA_VERSION
    db.commit()

    return RewardUpdateResponse(
        user_id=user_id,
        new_badges=[_badge_response(b) for b in update.new_badges],
        badge_points=update.badge_points,
        total_points=update.state.total_points,
        level=_level_response(update.level),
        level_up=update.level_up
    )


# ============================================================================
# Badge Endpoints
# ============================================================================

@app.get("/api/badges", response_model=List[BadgeResponse], tags=["Badges"])
def list_badges():
    return [_badge_response(b) for b in BADGE_CATALOG]


@app.post("/api/badges/migrate", response_model=BadgeMigrationResponse, tags=["Badges"])
def migrate_badges(body: BadgeMigrationRequest):
    migrated = migrate_badge_ids(body.badge_ids)
    dropped = [old_id for old_id in body.badge_ids if not migrate_badge_ids([old_id])]
    return BadgeMigrationResponse(badge_ids=migrated, dropped=dropped)


# ============================================================================
# Points & Level Endpoints
# ============================================================================

@app.get("/api/levels/{points}", response_model=LevelResponse, tags=["Points"])
def get_level(points: int):
    return _level_response(compute_level(points))


@app.post("/api/points/session", response_model=SessionPointsResponse, tags=["Points"])
def calculate_session_points(body: SessionPointsRequest):
    category = classify_hint(body.category)
    breakdown = session_points_breakdown(category, body.current_streak_days, body.weekly_bonus_active)
    return SessionPointsResponse(
        category=category.value, base_points=breakdown.base_points,
        weekly_multiplier=breakdown.weekly_multiplier,
        streak_multiplier=breakdown.streak_multiplier, points=breakdown.total
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
