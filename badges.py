"""
Badge catalog
The one current catalog of achievement badges and their unlock conditions.
Catalog order is display order. Removing or renaming an id needs an entry
in badge_migration.LEGACY_BADGE_ID_MAP.
"""

from dataclasses import dataclass
from enum import Enum

from config import BADGE_UNLOCK_POINTS
from session_classifier import ActivityCategory


class Tier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class SpecialKind(str, Enum):
    EARLY_BIRD = "early_bird"                # a session before 7 AM
    MORNING = "morning"                      # sessions 7 AM - 12 PM
    AFTERNOON = "afternoon"                  # sessions 12 PM - 5 PM
    EVENING = "evening"                      # sessions 5 PM - 10 PM
    LATE_NIGHT = "late_night"                # a session at/after 10 PM
    WEEKEND = "weekend"                      # Saturday/Sunday sessions
    VARIETY = "variety"                      # every strength split logged
    CONSECUTIVE_WITHIN_HOUR = "consecutive_within_hour"


# ============================================================================
# Conditions
# ============================================================================

@dataclass(frozen=True)
class Condition:
    threshold: float

    # Progressive conditions have a numeric "before" value the unlock
    # resolver can compare against
    progressive = True

    @property
    def tag(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class SessionCount(Condition):
    pass


@dataclass(frozen=True)
class StreakDays(Condition):
    pass


@dataclass(frozen=True)
class PrCount(Condition):
    pass


@dataclass(frozen=True)
class TotalVolume(Condition):
    pass


@dataclass(frozen=True)
class TotalTimeSeconds(Condition):
    pass


@dataclass(frozen=True)
class CategoryCount(Condition):
    category: ActivityCategory = ActivityCategory.STRENGTH


@dataclass(frozen=True)
class CategoryTimeSeconds(Condition):
    category: ActivityCategory = ActivityCategory.STRENGTH


@dataclass(frozen=True)
class SingleSessionVolume(Condition):
    pass


@dataclass(frozen=True)
class WeeklyConsistencyStreak(Condition):
    """threshold is the number of consecutive qualifying weeks."""

    @property
    def weeks(self) -> int:
        return int(self.threshold)


@dataclass(frozen=True)
class Special(Condition):
    kind: SpecialKind = SpecialKind.EARLY_BIRD
    progressive = False


def special(kind: SpecialKind, threshold: float = 1) -> Special:
    return Special(threshold=threshold, kind=kind)


# ============================================================================
# Badge Definitions
# ============================================================================

@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    tier: Tier
    condition: Condition
    points_on_unlock: int = BADGE_UNLOCK_POINTS


def _badge(badge_id: str, name: str, description: str, tier: Tier, condition: Condition) -> BadgeDefinition:
    return BadgeDefinition(id=badge_id, name=name, description=description, tier=tier, condition=condition)


B, S, G, P = Tier.BRONZE, Tier.SILVER, Tier.GOLD, Tier.PLATINUM
STRENGTH, CARDIO, YOGA, RECOVERY = (
    ActivityCategory.STRENGTH, ActivityCategory.CARDIO, ActivityCategory.YOGA, ActivityCategory.RECOVERY,
)

BADGE_CATALOG = (
    # Session count
    _badge("first-session", "First Steps", "Complete your first session", B, SessionCount(1)),
    _badge("dedicated-5", "Getting Started", "Complete 5 sessions", B, SessionCount(5)),
    _badge("dedicated-10", "Committed", "Complete 10 sessions", S, SessionCount(10)),
    _badge("dedicated-25", "Athlete", "Complete 25 sessions", S, SessionCount(25)),
    _badge("dedicated-50", "Beast Mode", "Complete 50 sessions", G, SessionCount(50)),
    _badge("dedicated-100", "Centurion", "Complete 100 sessions", G, SessionCount(100)),
    _badge("dedicated-150", "Elite Athlete", "Complete 150 sessions", G, SessionCount(150)),
    _badge("dedicated-200", "Relentless", "Complete 200 sessions", P, SessionCount(200)),
    _badge("dedicated-250", "Iron Legend", "Complete 250 sessions", P, SessionCount(250)),
    _badge("dedicated-500", "Hall of Fame", "Complete 500 sessions", P, SessionCount(500)),

    # Day streaks
    _badge("streak-3", "Consistency", "Keep a 3-day streak", B, StreakDays(3)),
    _badge("streak-7", "Week Warrior", "Keep a 7-day streak", S, StreakDays(7)),
    _badge("streak-14", "Fortnight Fighter", "Keep a 14-day streak", S, StreakDays(14)),
    _badge("streak-30", "Monthly Master", "Keep a 30-day streak", G, StreakDays(30)),
    _badge("streak-60", "Unbreakable", "Keep a 60-day streak", G, StreakDays(60)),
    _badge("streak-100", "Iron Will", "Keep a 100-day streak", P, StreakDays(100)),

    # Personal records
    _badge("pr-1", "New Heights", "Set your first personal record", B, PrCount(1)),
    _badge("pr-5", "Record Breaker", "Set 5 personal records", S, PrCount(5)),
    _badge("pr-10", "Powerhouse", "Set 10 personal records", G, PrCount(10)),
    _badge("pr-25", "Peak Performance", "Set 25 personal records", P, PrCount(25)),

    # Lifted volume
    _badge("volume-10k", "Moving Iron", "Lift 10,000 lbs total volume", B, TotalVolume(10_000)),
    _badge("volume-50k", "Heavy Lifter", "Lift 50,000 lbs total volume", S, TotalVolume(50_000)),
    _badge("volume-100k", "Tonnage Master", "Lift 100,000 lbs total volume", G, TotalVolume(100_000)),
    _badge("volume-250k", "Moving Mountains", "Lift 250,000 lbs total volume", P, TotalVolume(250_000)),
    _badge("session-volume-5k", "Big Day", "Lift 5,000 lbs in one session", S, SingleSessionVolume(5_000)),
    _badge("session-volume-10k", "Monster Session", "Lift 10,000 lbs in one session", G, SingleSessionVolume(10_000)),

    # Total time
    _badge("time-1h", "First Hour", "Log 1 hour of total training", B, TotalTimeSeconds(3_600)),
    _badge("time-10h", "Time Investment", "Log 10 hours of total training", S, TotalTimeSeconds(36_000)),
    _badge("time-50h", "Dedicated", "Log 50 hours of total training", G, TotalTimeSeconds(180_000)),
    _badge("time-100h", "Time Master", "Log 100 hours of total training", P, TotalTimeSeconds(360_000)),

    # Category counts
    _badge("strength-10", "Iron Initiate", "Complete 10 strength sessions", B, CategoryCount(10, STRENGTH)),
    _badge("strength-50", "Iron Regular", "Complete 50 strength sessions", S, CategoryCount(50, STRENGTH)),
    _badge("strength-100", "Iron Veteran", "Complete 100 strength sessions", G, CategoryCount(100, STRENGTH)),
    _badge("cardio-10", "Cardio Starter", "Complete 10 cardio sessions", B, CategoryCount(10, CARDIO)),
    _badge("cardio-50", "Endurance Engine", "Complete 50 cardio sessions", S, CategoryCount(50, CARDIO)),
    _badge("yoga-10", "Flow Finder", "Complete 10 yoga or mobility sessions", B, CategoryCount(10, YOGA)),
    _badge("yoga-50", "Zen Master", "Complete 50 yoga or mobility sessions", S, CategoryCount(50, YOGA)),
    _badge("recovery-10", "Recovery Pro", "Complete 10 recovery sessions", B, CategoryCount(10, RECOVERY)),

    # Category time
    _badge("cardio-time-10h", "Long Hauler", "Log 10 hours of cardio", S, CategoryTimeSeconds(36_000, CARDIO)),
    _badge("yoga-time-10h", "Mat Time", "Log 10 hours of yoga or mobility", S, CategoryTimeSeconds(36_000, YOGA)),

    # Weekly consistency
    _badge("weekly-consistency-1", "Solid Week", "Log 3 strength sessions in a week", B, WeeklyConsistencyStreak(1)),
    _badge("weekly-consistency-4", "Solid Month", "Hit 3 strength sessions a week for 4 weeks running", S, WeeklyConsistencyStreak(4)),
    _badge("weekly-consistency-12", "Solid Quarter", "Hit 3 strength sessions a week for 12 weeks running", G, WeeklyConsistencyStreak(12)),
    _badge("weekly-consistency-52", "Solid Year", "Hit 3 strength sessions a week for 52 weeks running", P, WeeklyConsistencyStreak(52)),

    # Special
    _badge("early-bird", "Early Bird", "Finish a session before 7 AM", B, special(SpecialKind.EARLY_BIRD)),
    _badge("morning-person", "Morning Person", "Finish 10 sessions between 7 AM and 12 PM", S, special(SpecialKind.MORNING, 10)),
    _badge("afternoon-warrior", "Afternoon Warrior", "Finish 10 sessions between 12 PM and 5 PM", S, special(SpecialKind.AFTERNOON, 10)),
    _badge("evening-grinder", "Evening Grinder", "Finish 10 sessions between 5 PM and 10 PM", S, special(SpecialKind.EVENING, 10)),
    _badge("night-owl", "Night Owl", "Finish a session after 10 PM", B, special(SpecialKind.LATE_NIGHT)),
    _badge("weekend-warrior", "Weekend Warrior", "Finish 10 weekend sessions", S, special(SpecialKind.WEEKEND, 10)),
    _badge("variety-seeker", "Variety Seeker", "Log every split: full, upper, lower, push, pull and legs", G, special(SpecialKind.VARIETY, 6)),
    _badge("consecutive-3", "Back to Back", "Finish 3 sessions, each within an hour of the last", B, special(SpecialKind.CONSECUTIVE_WITHIN_HOUR, 3)),
    _badge("consecutive-5", "Chain Reaction", "Finish 5 sessions, each within an hour of the last", S, special(SpecialKind.CONSECUTIVE_WITHIN_HOUR, 5)),
    _badge("consecutive-10", "Unstoppable", "Finish 10 sessions, each within an hour of the last", G, special(SpecialKind.CONSECUTIVE_WITHIN_HOUR, 10)),
)

BADGES_BY_ID = {badge.id: badge for badge in BADGE_CATALOG}


def get_badge(badge_id: str) -> BadgeDefinition | None:
    return BADGES_BY_ID.get(badge_id)
