"""Tests for badge id migration."""

from badge_migration import LEGACY_BADGE_ID_MAP, migrate_badge_ids
from badges import BADGE_CATALOG, BADGES_BY_ID


class TestMigrateBadgeIds:

    def test_maps_legacy_ids(self):
        assert migrate_badge_ids(["first-workout", "first-pr"]) == ["first-session", "pr-1"]

    def test_retired_ids_are_dropped(self):
        assert migrate_badge_ids(["wellness-first", "wellness-10"]) == []

    def test_unknown_ids_are_dropped(self):
        assert migrate_badge_ids(["never-existed", "streak-7"]) == ["streak-7"]

    def test_legacy_and_current_id_are_deduplicated(self):
        assert migrate_badge_ids(["first-workout", "first-session"]) == ["first-session"]

    def test_long_session_milestones_survive(self):
        assert migrate_badge_ids(["dedicated-150", "dedicated-200"]) == ["dedicated-150", "dedicated-200"]

    def test_output_is_in_catalog_order(self):
        result = migrate_badge_ids(["night-owl", "strength-workouts-10", "first-workout"])
        assert result == ["first-session", "strength-10", "night-owl"]

    def test_idempotent(self):
        once = migrate_badge_ids(list(LEGACY_BADGE_ID_MAP) + ["streak-3", "bogus"])
        assert migrate_badge_ids(once) == once

    def test_current_catalog_passes_through(self):
        ids = [b.id for b in BADGE_CATALOG]
        assert migrate_badge_ids(ids) == ids

    def test_empty(self):
        assert migrate_badge_ids([]) == []
        assert migrate_badge_ids(None) == []


class TestLegacyTable:

    def test_no_legacy_key_is_a_current_id(self):
        assert not set(LEGACY_BADGE_ID_MAP) & set(BADGES_BY_ID)

    def test_every_target_exists(self):
        for old_id, new_id in LEGACY_BADGE_ID_MAP.items():
            assert new_id is None or new_id in BADGES_BY_ID, old_id
