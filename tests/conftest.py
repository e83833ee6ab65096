"""
Shared fixtures: an in-memory store, a fixed clock and worker/event factories.
"""

import sys
from datetime import datetime
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import ClockMethod, Direction, Slot, Worker
from infrastructure.attendance_store import AttendanceStore

FIXED_NOW = datetime(2024, 3, 20, 10, 0)

WEEKDAYS = (1, 2, 3, 4, 5)


@pytest.fixture
def store():
    """Empty in-memory store."""
    return AttendanceStore()


@pytest.fixture
def now():
    """Clock callable pinned to FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_worker(store):
    """Factory adding a worker with the same slots on the given days of week."""
    counter = {"n": 0}

    def _make(
        name="Ana",
        created_at=datetime(2024, 1, 1),
        days=WEEKDAYS,
        slots=(("08:00", "16:00"),),
        **tags
    ):
        counter["n"] += 1
        worker = store.add_worker(Worker(
            id=f"w{counter['n']}",
            name=name,
            created_at=created_at,
            **tags
        ))
        for dow in days:
            store.set_schedule(worker.id, dow, [Slot(s, e) for s, e in slots])
        return worker

    return _make


@pytest.fixture
def punch(store):
    """Factory adding alternating IN/OUT events ("HH:MM" strings) for a worker's day."""

    def _punch(worker, day, *times):
        events = []
        for index, hhmm in enumerate(times):
            hour, minute = (int(p) for p in hhmm.split(":"))
            events.append(store.add_clock_event(
                worker_id=worker.id,
                direction=Direction.IN if index % 2 == 0 else Direction.OUT,
                method=ClockMethod.MANUAL,
                timestamp=datetime(day.year, day.month, day.day, hour, minute),
            ))
        return events

    return _punch
