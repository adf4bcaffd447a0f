"""Tests for context-aware recommendations."""

from datetime import datetime, timedelta

import pytest

from checkmate.core.context import UserContext
from checkmate.core.recommend import headline, is_eligible, recommend
from checkmate.core.tasks import Location, MentalLoad, TimeEstimate


@pytest.fixture
def relaxed():
    """Plenty of time and energy, at home."""
    return UserContext(TimeEstimate.LONG, MentalLoad.HIGH, Location.HOME)


class TestUserContext:
    def test_anywhere_is_not_a_place(self):
        with pytest.raises(ValueError, match="actual place"):
            UserContext(TimeEstimate.QUICK, MentalLoad.LOW, Location.ANYWHERE)

    def test_parse_labels(self):
        ctx = UserContext.parse("quick", "high", "work")
        assert ctx == UserContext(TimeEstimate.QUICK, MentalLoad.HIGH, Location.WORK)

    def test_describe(self):
        ctx = UserContext(TimeEstimate.QUICK, MentalLoad.LOW, Location.ERRANDS)
        assert ctx.describe() == "<15m available, low energy, at errands"


class TestEligibility:
    def test_completed_never_eligible(self, make_task, relaxed, now):
        task = make_task(completed_at=now)
        assert is_eligible(task, relaxed) is False

    @pytest.mark.parametrize("place", [loc for loc in Location if loc != Location.ANYWHERE])
    def test_anywhere_matches_every_location(self, make_task, place):
        task = make_task(location="anywhere")
        ctx = UserContext(TimeEstimate.LONG, MentalLoad.HIGH, place)
        assert is_eligible(task, ctx) is True

    def test_other_location_excluded(self, make_task, relaxed):
        assert is_eligible(make_task(location="work"), relaxed) is False
        assert is_eligible(make_task(location="home"), relaxed) is True

    def test_long_task_needs_long_time(self, make_task):
        task = make_task(time="long")
        short = UserContext(TimeEstimate.QUICK, MentalLoad.HIGH, Location.HOME)
        long = UserContext(TimeEstimate.LONG, MentalLoad.HIGH, Location.HOME)
        assert is_eligible(task, short) is False
        assert is_eligible(task, long) is True

    def test_more_time_than_needed_is_fine(self, make_task):
        task = make_task(time="quick")
        ctx = UserContext(TimeEstimate.MEDIUM, MentalLoad.HIGH, Location.HOME)
        assert is_eligible(task, ctx) is True

    def test_energy_at_most(self, make_task):
        ctx = UserContext(TimeEstimate.LONG, MentalLoad.MEDIUM, Location.HOME)
        assert is_eligible(make_task(load="low"), ctx) is True
        assert is_eligible(make_task(load="medium"), ctx) is True
        assert is_eligible(make_task(load="high"), ctx) is False


class TestRecommend:
    def test_empty_collection(self, relaxed):
        assert recommend([], relaxed) == []

    def test_all_ineligible(self, make_task, relaxed):
        tasks = [make_task(location="work"), make_task(location="online")]
        assert recommend(tasks, relaxed) == []

    def test_completed_tasks_excluded(self, make_task, relaxed, now):
        tasks = [make_task("done", priority="high", completed_at=now), make_task("open")]
        assert [t.title for t in recommend(tasks, relaxed)] == ["open"]

    def test_high_priority_first_regardless_of_age(self, make_task, relaxed):
        tasks = [
            make_task("low", priority="low", created_at=datetime(2025, 1, 1)),
            make_task("high", priority="high", created_at=datetime(2025, 1, 9)),
        ]
        assert [t.title for t in recommend(tasks, relaxed)] == ["high", "low"]

    def test_oldest_first_on_equal_priority(self, make_task, relaxed):
        tasks = [
            make_task("newer", created_at=datetime(2025, 1, 5)),
            make_task("older", created_at=datetime(2025, 1, 2)),
        ]
        assert [t.title for t in recommend(tasks, relaxed)] == ["older", "newer"]

    def test_insertion_order_breaks_full_ties(self, make_task, relaxed):
        same = datetime(2025, 1, 3)
        tasks = [make_task("first", created_at=same), make_task("second", created_at=same)]
        assert [t.title for t in recommend(tasks, relaxed)] == ["first", "second"]

    def test_truncates_to_five(self, make_task, relaxed):
        tasks = [make_task(f"task {i}", created_at=datetime(2025, 1, 1) + timedelta(hours=i)) for i in range(8)]
        result = recommend(tasks, relaxed)
        assert len(result) == 5
        assert [t.title for t in result] == [f"task {i}" for i in range(5)]

    def test_custom_limit(self, make_task, relaxed):
        tasks = [make_task() for _ in range(4)]
        assert len(recommend(tasks, relaxed, limit=2)) == 2

    def test_larger_limit_still_capped_at_five(self, make_task, relaxed):
        tasks = [make_task() for _ in range(8)]
        assert len(recommend(tasks, relaxed, limit=10)) == 5

    def test_negative_limit_is_empty(self, make_task, relaxed):
        assert recommend([make_task()], relaxed, limit=-1) == []

    def test_idempotent(self, make_task, relaxed):
        tasks = [
            make_task("a", priority="low"),
            make_task("b", priority="high"),
            make_task("c", priority="medium"),
        ]
        assert recommend(tasks, relaxed) == recommend(tasks, relaxed)

    def test_does_not_mutate_input(self, make_task, relaxed):
        tasks = [make_task("a", priority="low"), make_task("b", priority="high")]
        snapshot = list(tasks)
        recommend(tasks, relaxed)
        assert tasks == snapshot

    def test_returns_input_objects(self, make_task, relaxed):
        task = make_task()
        assert recommend([task], relaxed)[0] is task

    def test_scenario_low_energy_at_home(self, make_task, now):
        t0 = datetime(2025, 1, 10, 9, 0)
        a = make_task("A", priority="high", time="quick", load="low", location="home", created_at=t0)
        b = make_task(
            "B", priority="high", time="long", load="high", location="anywhere",
            created_at=t0 + timedelta(hours=1),
        )
        c = make_task(
            "C", priority="low", time="quick", load="low", location="anywhere",
            completed_at=now,
        )
        ctx = UserContext(TimeEstimate.QUICK, MentalLoad.LOW, Location.HOME)

        assert recommend([a, b, c], ctx) == [a]


class TestHeadline:
    def test_prefix_without_reranking(self, make_task, relaxed):
        tasks = [make_task(f"t{i}", priority=p) for i, p in enumerate(["low", "high", "medium", "high"])]
        ranked = recommend(tasks, relaxed)
        assert headline(ranked) == ranked[:3]

    def test_shorter_than_count(self, make_task):
        tasks = [make_task()]
        assert headline(tasks, 3) == tasks
