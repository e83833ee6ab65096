"""
Clock Pairing Module

Reconstructs worked intervals from a worker's clock events for one day.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .entities import ClockEvent, Direction, WorkInterval


@dataclass
class PairingResult:
    """Worked minutes and intervals for a day."""
    worked_minutes: int = 0
    intervals: List[WorkInterval] = field(default_factory=list)


def pair_events(events: Sequence[ClockEvent]) -> PairingResult:
    """
    Pair events two at a time (0&1, 2&3, ...).

    Only IN followed by OUT counts. Any other pair, or a trailing unpaired
    event, contributes nothing. A dangling IN (still clocked in) is 0.

    Args:
        events: One worker's events for one day, sorted by timestamp

    Returns:
        PairingResult with the total and the "HH:MM" intervals
    """
    result = PairingResult()
    for i in range(0, len(events) - 1, 2):
        start = events[i]
        end = events[i + 1]
        if start.direction != Direction.IN or end.direction != Direction.OUT:
            continue
        # truncated toward zero, like a wall-clock minute difference
        minutes = int((end.timestamp - start.timestamp).total_seconds() / 60)
        result.worked_minutes += minutes
        result.intervals.append(WorkInterval(
            start=start.timestamp.strftime('%H:%M'),
            end=end.timestamp.strftime('%H:%M')
        ))
    return result


def next_direction(last_event: Optional[ClockEvent]) -> Direction:
    """Toggle rule: opposite of the latest event, IN when there is no history."""
    if last_event is not None and last_event.direction == Direction.IN:
        return Direction.OUT
    return Direction.IN
