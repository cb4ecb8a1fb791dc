"""Tests for the WeekPlanner facade and drop handling."""

import random

import pytest
from pydantic import ValidationError

from timeblocks.engine.grid import GridConfig
from timeblocks.engine.overlap import find_invariant_violations
from timeblocks.engine.planner import DropEvent, WeekPlanner
from timeblocks.engine.results import Rejected, RejectionReason, is_rejected
from timeblocks.models.scheduled_block import ScheduledBlock, WEEKDAYS


@pytest.fixture
def planner(arena, templates):
    return WeekPlanner(arena, templates)


class TestWeekPlanner:
    """Test the planner's entry points over a shared arena."""

    def test_place_then_resize_then_reorder(self, planner, arena):
        first = planner.place("work", "Monday", 9)
        second = planner.place("eat", "Monday", 12)
        assert isinstance(first, ScheduledBlock)
        assert isinstance(second, ScheduledBlock)
        assert len(arena) == 2

        assert planner.resize(first.id, 3).duration == 3.0
        assert is_rejected(planner.resize(first.id, 4))

        ordered = planner.reorder("Monday", [second.id, first.id])
        assert [b.id for b in ordered] == [second.id, first.id]
        assert (second.start_time, first.start_time) == (0.0, 1.0)

    def test_place_unknown_template(self, planner):
        outcome = planner.place("missing", "Monday", 9)
        assert isinstance(outcome, Rejected)
        assert outcome.reason == RejectionReason.NOT_FOUND

    def test_remove(self, planner, arena):
        block = planner.place("work", "Monday", 9)
        planner.remove(block.id)
        assert arena == {}

    def test_remove_unknown_is_noop(self, planner, arena, add_block):
        add_block(start_time=9.0)
        planner.remove("missing")
        assert len(arena) == 1

    def test_delete_template_cascades(self, planner, arena, templates):
        work_a = planner.place("work", "Monday", 9)
        work_b = planner.place("work", "Friday", 9)
        eat = planner.place("eat", "Monday", 12)

        removed = planner.delete_template("work")

        assert sorted(removed) == sorted([work_a.id, work_b.id])
        assert "work" not in templates
        assert list(arena) == [eat.id]

    def test_renderable_blocks_skip_dangling(self, planner, add_block):
        kept = add_block(start_time=9.0)
        add_block(template_id="deleted-template", start_time=11.0)
        assert [b.id for b in planner.renderable_blocks("Monday")] == [kept.id]
        assert len(planner.day_schedule("Monday")) == 2

    def test_week_layout_has_every_day(self, planner):
        planner.place("sleep", "Sunday", 22)
        week = planner.week_layout()
        assert list(week) == WEEKDAYS
        assert len(week["Sunday"]) == 1
        assert week["Sunday"][0].label == "22:00 - 23:00"
        assert week["Monday"] == []

    def test_move_within_day(self, planner):
        a = planner.place("work", "Monday", 9)
        b = planner.place("eat", "Monday", 13)
        ordered = planner.move_within_day("Monday", b.id, a.id)
        assert [x.id for x in ordered] == [b.id, a.id]

    def test_uses_configured_grid(self, arena, templates):
        planner = WeekPlanner(arena, templates, grid=GridConfig(unit_minutes=45))
        block = planner.place("work", "Monday", 9.2)
        assert block.start_time == 9.0
        assert block.duration == 0.75


class TestHandleDrop:
    """Test handle_drop() for palette drops and block drags."""

    def test_palette_drop_places(self, planner, arena):
        outcome = planner.handle_drop(DropEvent(template_id="work", day="Tuesday", target_start=8.0))
        assert isinstance(outcome, ScheduledBlock)
        assert outcome.day == "Tuesday"
        assert arena[outcome.id] is outcome

    def test_block_drop_moves(self, planner):
        block = planner.place("work", "Monday", 9)
        outcome = planner.handle_drop(DropEvent(block_id=block.id, day="Thursday", target_start=15.0))
        assert outcome is block
        assert (block.day, block.start_time) == ("Thursday", 15.0)

    def test_rejected_drop(self, planner):
        planner.place("work", "Monday", 9)
        outcome = planner.handle_drop(DropEvent(template_id="eat", day="Monday", target_start=9.5))
        assert isinstance(outcome, Rejected)
        assert outcome.reason == RejectionReason.OVERLAP

    def test_requires_exactly_one_source(self):
        with pytest.raises(ValidationError):
            DropEvent(day="Monday", target_start=9.0)
        with pytest.raises(ValidationError):
            DropEvent(template_id="work", block_id="b", day="Monday", target_start=9.0)

    def test_rejects_unknown_day(self):
        with pytest.raises(ValidationError):
            DropEvent(template_id="work", day="Someday", target_start=9.0)


def test_random_operations_keep_schedule_valid(arena, templates):
    """Any sequence of accepted operations leaves no overlaps and aligned values."""
    grid = GridConfig()
    planner = WeekPlanner(arena, templates, grid=grid)
    rng = random.Random(20240601)
    template_ids = list(templates)

    for _ in range(300):
        op = rng.choice(["place", "place", "move", "resize", "reorder", "remove"])
        day = rng.choice(WEEKDAYS)
        if op == "place":
            planner.place(rng.choice(template_ids), day, rng.uniform(-1, 25))
        elif not arena:
            continue
        elif op == "move":
            planner.move(rng.choice(list(arena)), day, rng.uniform(0, 24))
        elif op == "resize":
            planner.resize(rng.choice(list(arena)), rng.uniform(-0.5, 6))
        elif op == "reorder":
            order = [b.id for b in planner.day_schedule(day)]
            rng.shuffle(order)
            planner.reorder(day, order)
        else:
            planner.remove(rng.choice(list(arena)))

        assert find_invariant_violations(arena.values(), grid=grid) == []
        for block in arena.values():
            start, end = grid.span(block)
            assert block.start_time == grid.from_grid_index(start)
            assert block.duration == grid.steps_to_hours(end - start)
            assert 0 <= start < end <= grid.total_steps
