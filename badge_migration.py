"""
Badge schema migration
Maps stored badge ids from older catalog versions onto the current catalog.
Run once per user (see CURRENT_BADGE_SCHEMA_VERSION) before a retroactive
reconcile so earned progress carries over without re-granting anything.
"""

from typing import Iterable

from badges import BADGE_CATALOG, BADGES_BY_ID

# old id → current id, or None when the badge has no equivalent any more
LEGACY_BADGE_ID_MAP = {
    # v1 counted "workouts"; v2 counts sessions of any kind
    "first-workout": "first-session",
    "first-pr": "pr-1",

    # v1 strength milestones used the workout wording
    "strength-workouts-10": "strength-10",
    "strength-workouts-50": "strength-50",
    "strength-workouts-100": "strength-100",

    # Wellness tasks are not sessions; those badges were retired
    "wellness-first": None,
    "wellness-10": None,
    "wellness-25": None,
    "wellness-50": None,
    "wellness-100": None,
}


def migrate_badge_ids(old_ids: Iterable[str]) -> list[str]:
    """
    Translate stored ids into current catalog ids.

    Legacy ids follow LEGACY_BADGE_ID_MAP (None drops them). Ids already in
    the current catalog pass through. Anything else is dropped. The result
    is deduplicated and in catalog order, so migrating twice is a no-op.
    """
    kept = set()
    for old_id in old_ids or ():
        if old_id in LEGACY_BADGE_ID_MAP:
            new_id = LEGACY_BADGE_ID_MAP[old_id]
            if new_id is not None:
                kept.add(new_id)
        elif old_id in BADGES_BY_ID:
            kept.add(old_id)
    return [badge.id for badge in BADGE_CATALOG if badge.id in kept]
