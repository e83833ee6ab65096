"""
Schedule Resolver Module

Resolves a worker's expected work intervals for a calendar day from the
weekly schedule template.
"""

import re
from datetime import date
from typing import Iterable, List, Tuple

from infrastructure.logger import get_logger

from .entities import Slot, Worker
from .errors import InvalidSlotError

logger = get_logger("ScheduleResolver")

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def day_of_week(day: date) -> int:
    """Day-of-week with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7


def is_valid_hhmm(time_str: str) -> bool:
    """Check for a wall-clock "HH:MM" between 00:00 and 23:59."""
    match = _HHMM.match(time_str or "")
    return bool(match) and int(match.group(1)) < 24 and int(match.group(2)) < 60


def parse_hhmm(time_str: str) -> int:
    """Parse "HH:MM" into minutes since midnight (0, with a warning, when unparsable)."""
    if not time_str:
        return 0
    try:
        hours, minutes = time_str.split(':')
        return int(hours) * 60 + int(minutes)
    except ValueError:
        logger.warning(f"Hora no válida tratada como 00:00: {time_str!r}")
        return 0


def slot_minutes(slot: Slot) -> int:
    """Duration of a slot; negative when the slot ends before it starts."""
    return parse_hhmm(slot.end_time) - parse_hhmm(slot.start_time)


def validate_slots(slots: Iterable[Slot]) -> None:
    """
    Reject malformed times and slots that end before they start.

    Only used by writers that opt into strict validation; reconciliation
    itself propagates negative durations unchanged.

    Raises:
        InvalidSlotError: On the first offending slot
    """
    for slot in slots:
        for value in (slot.start_time, slot.end_time):
            if not is_valid_hhmm(value):
                raise InvalidSlotError(f"Hora no válida en la franja: {value!r}")
        if slot_minutes(slot) < 0:
            raise InvalidSlotError(
                f"Franja inválida {slot.start_time}-{slot.end_time}: termina antes de empezar"
            )


class ScheduleResolver:
    """
    Looks up expected work for a worker on a given day.

    A day is "not scheduled" when the worker has no schedule for that
    day-of-week or the schedule holds zero slots.
    """

    def resolve_day(self, worker: Worker, day: date) -> List[Tuple[int, int]]:
        """
        Get the expected (start_minute, end_minute) intervals for a day.

        Args:
            worker: The worker
            day: Calendar day

        Returns:
            List of intervals, empty when not scheduled
        """
        schedule = worker.schedule_for(day_of_week(day))
        if schedule is None:
            return []
        return [
            (parse_hhmm(slot.start_time), parse_hhmm(slot.end_time))
            for slot in schedule.slots
        ]

    def expected_minutes(self, worker: Worker, day: date) -> int:
        """Sum of slot durations for the day (no overlap deduplication)."""
        return sum(end - start for start, end in self.resolve_day(worker, day))

    def is_scheduled(self, worker: Worker, day: date) -> bool:
        return len(self.resolve_day(worker, day)) > 0
