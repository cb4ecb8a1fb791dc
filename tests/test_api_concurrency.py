"""Tests for per-day serialization of schedule mutations in the API."""

import threading

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from timeblocks.api import app as api
from timeblocks.api.app import MoveRequest, PlaceRequest, move_block, place_block
from timeblocks.database.database import Base, seed_default_templates
from timeblocks.database import models  # noqa: F401
from timeblocks.database.scheduled_block_repository import ScheduledBlockRepository
from timeblocks.engine.grid import DEFAULT_GRID
from timeblocks.engine.overlap import find_invariant_violations
from timeblocks.engine.planner import WeekPlanner
from timeblocks.models.scheduled_block import ScheduledBlock


@pytest.fixture
def session_factory(tmp_path):
    """Sessions on a file database, one connection each (like separate requests)."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_default_templates(db)
    finally:
        db.close()
    yield factory
    engine.dispose()


def _call_in_thread(factory, results, name, endpoint, *args):
    db = factory()
    try:
        results[name] = endpoint(*args, db=db, grid=DEFAULT_GRID)
    except HTTPException as e:
        results[name] = e.status_code
    finally:
        db.close()


class TestDaySerialization:
    """Two requests for the same day never both pass the overlap check."""

    def _pause_first_decision(self, monkeypatch, method):
        first_decided = threading.Event()
        second_finished = threading.Event()
        original = getattr(WeekPlanner, method)

        def decide_then_wait(self, *args):
            outcome = original(self, *args)
            if threading.current_thread().name == "first":
                first_decided.set()
                second_finished.wait(0.5)
            return outcome

        monkeypatch.setattr(WeekPlanner, method, decide_then_wait)
        return first_decided, second_finished

    def _run_interleaved(self, factory, first_decided, second_finished, first_call, second_call):
        results = {}

        def second_target():
            try:
                _call_in_thread(factory, results, "second", *second_call)
            finally:
                second_finished.set()

        first = threading.Thread(
            target=_call_in_thread, args=(factory, results, "first", *first_call), name="first"
        )
        first.start()
        assert first_decided.wait(5)
        second = threading.Thread(target=second_target, name="second")
        second.start()
        first.join(5)
        second.join(5)
        return results

    def _stored_blocks(self, factory):
        db = factory()
        try:
            return ScheduledBlockRepository(db).get_all()
        finally:
            db.close()

    def test_overlapping_places_are_serialized(self, session_factory, monkeypatch):
        first_decided, second_finished = self._pause_first_decision(monkeypatch, "place")

        results = self._run_interleaved(
            session_factory,
            first_decided,
            second_finished,
            (place_block, PlaceRequest(template_id="work", day="Monday", start_time=9)),
            (place_block, PlaceRequest(template_id="eat", day="Monday", start_time=9.5)),
        )

        assert isinstance(results["first"], ScheduledBlock)
        assert results["second"] == 409
        stored = self._stored_blocks(session_factory)
        assert [(b.start_time, b.duration) for b in stored] == [(9.0, 1.0)]
        assert find_invariant_violations(stored) == []

    def test_move_and_place_into_same_slot_are_serialized(self, session_factory, monkeypatch):
        db = session_factory()
        try:
            tuesday = place_block(
                PlaceRequest(template_id="work", day="Tuesday", start_time=9), db=db, grid=DEFAULT_GRID
            )
        finally:
            db.close()
        first_decided, second_finished = self._pause_first_decision(monkeypatch, "move")

        results = self._run_interleaved(
            session_factory,
            first_decided,
            second_finished,
            (move_block, tuesday.id, MoveRequest(day="Monday", start_time=9)),
            (place_block, PlaceRequest(template_id="eat", day="Monday", start_time=9.5)),
        )

        assert results["first"].day == "Monday"
        assert results["second"] == 409
        assert find_invariant_violations(self._stored_blocks(session_factory)) == []


def test_day_locks_taken_in_week_order_and_released():
    with api._days_locked("Sunday", "Monday", "Sunday"):
        assert api._DAY_LOCKS["Monday"].locked()
        assert api._DAY_LOCKS["Sunday"].locked()
        assert not api._DAY_LOCKS["Tuesday"].locked()
    assert not any(lock.locked() for lock in api._DAY_LOCKS.values())
