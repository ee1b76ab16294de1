"""Tests for GoalTracker and goal status derivation."""

from __future__ import annotations

from datetime import date

import pytest


@pytest.fixture
def tracker(sample_answers):
    from ecocoach.profile.goals import GoalTracker
    from ecocoach.profile.store import ProfileStore

    store = ProfileStore()
    store.create("u1", sample_answers)
    return GoalTracker(store)


class TestDeriveStatus:
    """Test the pure status rule."""

    def test_full_progress_completes(self):
        from ecocoach.profile.goals import derive_status
        from ecocoach.profile.models import GoalStatus

        assert derive_status(GoalStatus.ACTIVE, 100) is GoalStatus.COMPLETED
        assert derive_status(GoalStatus.IN_PROGRESS, 100) is GoalStatus.COMPLETED

    @pytest.mark.parametrize("progress", [1, 50, 99])
    def test_partial_progress_is_in_progress(self, progress):
        from ecocoach.profile.goals import derive_status
        from ecocoach.profile.models import GoalStatus

        assert derive_status(GoalStatus.ACTIVE, progress) is GoalStatus.IN_PROGRESS

    def test_zero_progress_keeps_current_status(self):
        from ecocoach.profile.goals import derive_status
        from ecocoach.profile.models import GoalStatus

        assert derive_status(GoalStatus.ACTIVE, 0) is GoalStatus.ACTIVE
        assert derive_status(GoalStatus.IN_PROGRESS, 0) is GoalStatus.IN_PROGRESS


class TestAddGoal:
    """Test GoalTracker.add_goal."""

    def test_add_goal_creates_active_goal(self, tracker):
        from ecocoach.profile.models import GoalStatus

        goal = tracker.add_goal("u1", "transportation", "Cycle to work twice a week", date(2030, 1, 1))

        assert goal.status is GoalStatus.ACTIVE
        assert goal.progress == 0
        assert goal.check_ins == []
        assert goal.target_date == date(2030, 1, 1)
        assert tracker.store.get("u1").goals[0].id == goal.id

    def test_goal_ids_are_unique(self, tracker):
        first = tracker.add_goal("u1", "water_usage", "Shorter showers")
        second = tracker.add_goal("u1", "water_usage", "Fix the leaky tap")

        assert first.id != second.id
        assert [g.id for g in tracker.store.get("u1").goals] == [first.id, second.id]

    def test_add_goal_unknown_category_raises(self, tracker):
        from ecocoach.errors import CategoryNotFoundError

        with pytest.raises(CategoryNotFoundError):
            tracker.add_goal("u1", "space_travel", "Fewer rockets")

        assert tracker.store.get("u1").goals == []


class TestRecordProgress:
    """Test GoalTracker.record_progress."""

    def test_progress_100_completes_goal(self, tracker):
        from ecocoach.profile.models import GoalStatus

        goal = tracker.add_goal("u1", "food_consumption", "Meat-free Mondays")

        updated = tracker.record_progress("u1", goal.id, 100, "Done!")

        assert updated.status is GoalStatus.COMPLETED
        assert updated.progress == 100
        assert updated.check_ins[-1].progress_value == 100
        assert updated.check_ins[-1].notes == "Done!"

    @pytest.mark.parametrize("progress", [1, 42, 99])
    def test_partial_progress_marks_in_progress(self, tracker, progress):
        from ecocoach.profile.models import GoalStatus

        goal = tracker.add_goal("u1", "food_consumption", "Meat-free Mondays")

        updated = tracker.record_progress("u1", goal.id, progress)

        assert updated.status is GoalStatus.IN_PROGRESS
        assert updated.check_ins[-1].notes == ""

    def test_lower_progress_after_completion_moves_back_to_in_progress(self, tracker):
        from ecocoach.profile.models import GoalStatus

        goal = tracker.add_goal("u1", "waste_management", "Start composting")
        tracker.record_progress("u1", goal.id, 100)

        updated = tracker.record_progress("u1", goal.id, 60)

        assert updated.status is GoalStatus.IN_PROGRESS
        assert len(updated.check_ins) == 2

    def test_progress_is_clamped(self, tracker):
        from ecocoach.profile.models import GoalStatus

        goal = tracker.add_goal("u1", "waste_management", "Start composting")

        updated = tracker.record_progress("u1", goal.id, 150)

        assert updated.progress == 100
        assert updated.status is GoalStatus.COMPLETED

    def test_unknown_goal_raises_and_leaves_goals_untouched(self, tracker):
        from ecocoach.errors import GoalNotFoundError

        goal = tracker.add_goal("u1", "water_usage", "Shorter showers")
        tracker.record_progress("u1", goal.id, 30)
        before = tracker.store.get("u1")

        with pytest.raises(GoalNotFoundError):
            tracker.record_progress("u1", "does-not-exist", 80)

        after = tracker.store.get("u1")
        assert after.goals == before.goals
        assert after.last_updated == before.last_updated


class TestActiveGoals:
    """Test active_goals filtering."""

    def test_excludes_completed_goals(self, tracker):
        from ecocoach.profile.goals import active_goals

        open_goal = tracker.add_goal("u1", "water_usage", "Shorter showers")
        done_goal = tracker.add_goal("u1", "water_usage", "Install aerators")
        tracker.record_progress("u1", done_goal.id, 100)

        remaining = active_goals(tracker.store.get("u1"))

        assert [g.id for g in remaining] == [open_goal.id]
