"""
Unit tests for clock event pairing and the direction toggle.
"""

from datetime import datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.clock_pairing import next_direction, pair_events
from domain.entities import ClockEvent, ClockMethod, Direction, WorkInterval


def _event(direction, hour, minute=0, second=0):
    return ClockEvent(
        id=f"{direction.value}-{hour}-{minute}",
        worker_id="w1",
        direction=direction,
        method=ClockMethod.NFC,
        timestamp=datetime(2024, 3, 4, hour, minute, second),
    )


IN, OUT = Direction.IN, Direction.OUT


class TestPairEvents:
    """Tests for pair_events."""

    def test_two_pairs(self):
        """Test a split shift of two IN/OUT pairs."""
        events = [_event(IN, 9), _event(OUT, 13), _event(IN, 14), _event(OUT, 17)]
        result = pair_events(events)

        assert result.worked_minutes == 420
        assert result.intervals == [
            WorkInterval("09:00", "13:00"),
            WorkInterval("14:00", "17:00"),
        ]

    def test_trailing_in_contributes_nothing(self):
        """Test that a worker still clocked in adds no minutes."""
        events = [_event(IN, 9), _event(OUT, 13), _event(IN, 14)]
        result = pair_events(events)

        assert result.worked_minutes == 240
        assert len(result.intervals) == 1

    def test_empty(self):
        """Test a day without events."""
        result = pair_events([])
        assert result.worked_minutes == 0
        assert result.intervals == []

    def test_out_in_pair_is_dropped(self):
        """Test that an OUT followed by IN is not counted."""
        events = [_event(OUT, 9), _event(IN, 13)]
        assert pair_events(events).worked_minutes == 0

    def test_misaligned_pairs_are_not_resynchronized(self):
        """Test that pairing stays two-at-a-time after a bad pair."""
        # OUT, IN, OUT: pair (OUT, IN) is dropped, trailing OUT is unpaired
        events = [_event(OUT, 7), _event(IN, 9), _event(OUT, 13)]
        assert pair_events(events).worked_minutes == 0

    def test_seconds_are_truncated(self):
        """Test that partial minutes are truncated."""
        events = [_event(IN, 8, 0, 0), _event(OUT, 8, 59, 59)]
        assert pair_events(events).worked_minutes == 59

    def test_interval_to_dict(self):
        """Test the HH:MM interval payload."""
        events = [_event(IN, 8, 5), _event(OUT, 12, 30)]
        interval = pair_events(events).intervals[0]
        assert interval.to_dict() == {"start": "08:05", "end": "12:30"}


class TestNextDirection:

    def test_no_history_is_in(self):
        """Test that the first clock of a worker is IN."""
        assert next_direction(None) == IN

    def test_after_in_is_out(self):
        """Test the toggle after an IN."""
        assert next_direction(_event(IN, 9)) == OUT

    def test_after_out_is_in(self):
        """Test the toggle after an OUT."""
        assert next_direction(_event(OUT, 13)) == IN
