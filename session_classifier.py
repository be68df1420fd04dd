"""
Session classification and the SessionRecord data model
Maps free-form session type strings onto a closed set of activity categories.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping


class ActivityCategory(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    YOGA = "yoga"
    RECOVERY = "recovery"
    REST = "rest"
    UNKNOWN = "unknown"


# ============================================================================
# Known Hints
# ============================================================================

STRENGTH_HINTS = frozenset({"strength", "full", "upper", "lower", "push", "pull", "legs", "core"})
CARDIO_HINTS = frozenset({"cardio", "hiit", "running", "cycling", "swimming", "walking", "rowing"})
YOGA_HINTS = frozenset({"yoga", "stretch", "mobility", "flexibility", "pilates"})
RECOVERY_HINTS = frozenset({"recovery", "active_recovery", "foam_rolling", "sick_day"})
REST_HINTS = frozenset({"rest", "rest_day"})

_HINT_TABLE = (
    (STRENGTH_HINTS, ActivityCategory.STRENGTH),
    (CARDIO_HINTS, ActivityCategory.CARDIO),
    (YOGA_HINTS, ActivityCategory.YOGA),
    (RECOVERY_HINTS, ActivityCategory.RECOVERY),
    (REST_HINTS, ActivityCategory.REST),
)


# ============================================================================
# Session Records
# ============================================================================

@dataclass(frozen=True)
class SetEntry:
    weight: float | None = None
    reps: int | None = None


@dataclass(frozen=True)
class SessionRecord:
    """One completed activity. Never mutated once logged."""
    date: datetime
    category_hint: str | None = None
    duration_seconds: int | None = None
    exercises: Mapping[str, tuple[SetEntry, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "SessionRecord":
        """
        Build a record from a stored session dict.
        Accepts the older shapes too: "type"/"sessionType" for the hint,
        "duration" for the duration, ISO date strings, and exercises stored
        as {"sets": [...]} instead of a bare list of sets.
        """
        raw_date = data.get("date")
        if isinstance(raw_date, str):
            raw_date = datetime.fromisoformat(raw_date.replace("Z", "+00:00")).replace(tzinfo=None)
        if raw_date is None:
            raise ValueError("session is missing a date")

        hint = data.get("category_hint")
        if hint is None:
            hint = data.get("sessionType") or data.get("type")

        duration = data.get("duration_seconds")
        if duration is None:
            duration = data.get("duration")

        exercises = {}
        for name, sets in (data.get("exercises") or {}).items():
            if isinstance(sets, dict):
                sets = sets.get("sets") or []
            entries = []
            for s in sets or []:
                if isinstance(s, SetEntry):
                    entries.append(s)
                elif isinstance(s, dict):
                    entries.append(SetEntry(weight=s.get("weight"), reps=s.get("reps")))
            exercises[name] = tuple(entries)

        return cls(date=raw_date, category_hint=hint, duration_seconds=duration, exercises=exercises)


# ============================================================================
# Classification
# ============================================================================

def normalize_hint(hint) -> str:
    if not isinstance(hint, str):
        return ""
    return hint.strip().lower().replace("-", "_").replace(" ", "_")


def classify_hint(hint: str | None) -> ActivityCategory:
    """Case-insensitive lookup of a type string. Unmapped or empty → UNKNOWN."""
    key = normalize_hint(hint)
    if not key:
        return ActivityCategory.UNKNOWN
    for hints, category in _HINT_TABLE:
        if key in hints:
            return category
    return ActivityCategory.UNKNOWN


def classify_session(record: SessionRecord) -> ActivityCategory:
    # Legacy records were saved without a type; anything with logged
    # exercises was a lifting session
    if not normalize_hint(record.category_hint):
        if record.exercises:
            return ActivityCategory.STRENGTH
        return ActivityCategory.UNKNOWN
    return classify_hint(record.category_hint)
