"""
Daily Reconciliation Module

Composes the schedule resolver, leave classifier, clock pairing and phase
policy into one classified DailyRecord per worker per day.
"""

from datetime import date
from typing import Optional, Sequence

from .clock_pairing import pair_events
from .entities import DAY_NAMES, ClockEvent, DailyRecord, DayStatus, Worker
from .leave_classifier import DayClassification, LeaveClassifier, SuppressionKind
from .phase_policy import PhasePolicy
from .schedule_resolver import ScheduleResolver, day_of_week


def derive_status(
    classification: DayClassification,
    expected_minutes: int,
    worked_minutes: int
) -> DayStatus:
    """
    Derive the display status of a day.

    Priority: incident > holiday (holiday or closure) > off > missing > extra > ok.
    Equality is exact, no tolerance band.
    """
    if classification.kind == SuppressionKind.INCIDENT:
        return DayStatus.INCIDENT
    if classification.kind in (SuppressionKind.HOLIDAY, SuppressionKind.CLOSURE):
        return DayStatus.HOLIDAY
    if expected_minutes == 0 and worked_minutes == 0:
        return DayStatus.OFF
    if worked_minutes < expected_minutes:
        return DayStatus.MISSING
    if worked_minutes > expected_minutes:
        return DayStatus.EXTRA
    return DayStatus.OK


class DailyReconciler:
    """
    Reconciles one worker's day.

    Suppressed days (incident, holiday, closure) expect 0 minutes; the
    schedule is only consulted for unsuppressed days.
    """

    def __init__(
        self,
        classifier: LeaveClassifier,
        policy: PhasePolicy,
        resolver: Optional[ScheduleResolver] = None
    ):
        self.classifier = classifier
        self.policy = policy
        self.resolver = resolver or ScheduleResolver()

    def reconcile(
        self,
        worker: Worker,
        day: date,
        events: Sequence[ClockEvent]
    ) -> Optional[DailyRecord]:
        """
        Build the DailyRecord for a worker's day.

        Args:
            worker: The worker
            day: Calendar day
            events: The worker's events on that day, sorted by timestamp

        Returns:
            DailyRecord, or None when the day precedes the worker's creation
        """
        if day < worker.created_at.date():
            return None

        classification = self.classifier.classify(worker, day)
        if classification.suppressed:
            expected = 0
        else:
            expected = self.resolver.expected_minutes(worker, day)

        pairing = pair_events(events)
        status = derive_status(classification, expected, pairing.worked_minutes)

        is_incident = classification.kind == SuppressionKind.INCIDENT
        return DailyRecord(
            date=day,
            day_name=DAY_NAMES[day_of_week(day)],
            worked_minutes=pairing.worked_minutes,
            expected_minutes=expected,
            status=status,
            intervals=pairing.intervals,
            incident_type=classification.label if is_incident else None,
            incident_kind=classification.incident_kind,
            holiday_name=None if is_incident else classification.label,
            is_production=self.policy.is_production(day),
        )
