"""
Pydantic schemas for request/response validation
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import date, datetime


# ============================================================================
# Session Schemas
# ============================================================================

class SetIn(BaseModel):
    weight: Optional[float] = None
    reps: Optional[int] = None


class SessionCreate(BaseModel):
    user_id: str
    date: datetime
    category_hint: Optional[str] = None
    duration_seconds: Optional[float] = None
    exercises: Dict[str, List[SetIn]] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    date: datetime
    category_hint: Optional[str]
    duration_seconds: Optional[float]
    exercises: dict


# ============================================================================
# Badge Schemas
# ============================================================================

class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    tier: str
    condition: str
    threshold: float
    points_on_unlock: int


class BadgeProgressResponse(BaseModel):
    badge_id: str
    name: str
    current: float
    target: float
    percent: float


class BadgeMigrationRequest(BaseModel):
    badge_ids: List[str]


class BadgeMigrationResponse(BaseModel):
    badge_ids: List[str]
    dropped: List[str]


# ============================================================================
# Points & Level Schemas
# ============================================================================

class LevelResponse(BaseModel):
    level: int
    current_level_points: int
    points_to_next_level: int


class SessionPointsRequest(BaseModel):
    category: str
    current_streak_days: int = Field(default=0, ge=0)
    weekly_bonus_active: bool = False


class SessionPointsResponse(BaseModel):
    category: str
    base_points: int
    weekly_multiplier: float
    streak_multiplier: float
    points: int


# ============================================================================
# Reward Schemas
# ============================================================================

class MetricsResponse(BaseModel):
    total_sessions: int
    category_counts: Dict[str, int]
    total_volume: float
    total_time_seconds: int
    max_session_volume: float
    current_streak_days: int
    longest_streak_days: int
    weekly_consistency_streak: int
    pr_count: int
    strength_sessions_this_week: int


class RewardStateResponse(BaseModel):
    user_id: str
    unlocked_badge_ids: List[str]
    total_points: int
    level: LevelResponse
    metrics: MetricsResponse
    next_badges: List[BadgeProgressResponse] = Field(default_factory=list)


class RewardUpdateResponse(BaseModel):
    user_id: str
    session_id: Optional[int] = None
    session_category: Optional[str] = None
    session_points: int = 0
    new_badges: List[BadgeResponse] = Field(default_factory=list)
    badge_points: int = 0
    penalty_points: int = 0
    total_points: int
    level: LevelResponse
    level_up: bool = False


class ReconcileRequest(BaseModel):
    as_of: Optional[date] = None
