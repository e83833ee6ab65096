"""
Leave/Holiday Classifier Module

Decides whether a worker's day is suppressed by an incident, a holiday or a
company closure.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum, auto
from typing import Dict, Iterable, List, Optional

from .entities import CompanyClosure, Holiday, Incident, IncidentKind, Worker


class SuppressionKind(Enum):
    """What suppressed the expected time of a day."""
    NONE = auto()
    INCIDENT = auto()
    HOLIDAY = auto()
    CLOSURE = auto()


@dataclass
class DayClassification:
    """
    Result of classifying a worker's day.

    Attributes:
        kind: Winning suppression (incident > holiday > closure)
        incident: The covering incident, when kind is INCIDENT
        label: Incident type label, or holiday/closure name
    """
    kind: SuppressionKind = SuppressionKind.NONE
    incident: Optional[Incident] = None
    label: Optional[str] = None

    @property
    def suppressed(self) -> bool:
        return self.kind != SuppressionKind.NONE

    @property
    def incident_kind(self) -> Optional[IncidentKind]:
        return self.incident.kind if self.incident else None


class LeaveClassifier:
    """
    Classifies days against incidents, holidays and closures.

    Built once per invocation from already-loaded records.
    """

    def __init__(
        self,
        incidents: Iterable[Incident] = (),
        holidays: Iterable[Holiday] = (),
        closures: Iterable[CompanyClosure] = ()
    ):
        self._incidents_by_worker: Dict[str, List[Incident]] = {}
        for incident in incidents:
            self._incidents_by_worker.setdefault(incident.worker_id, []).append(incident)
        self._holidays: Dict[date, Holiday] = {}
        for holiday in holidays:
            self._holidays.setdefault(holiday.date, holiday)
        self._closures: List[CompanyClosure] = list(closures)

    def incident_for(self, worker: Worker, day: date) -> Optional[Incident]:
        """First incident of the worker covering the day."""
        for incident in self._incidents_by_worker.get(worker.id, []):
            if incident.covers(day):
                return incident
        return None

    def holiday_for(self, day: date) -> Optional[Holiday]:
        return self._holidays.get(day)

    def closure_for(self, day: date) -> Optional[CompanyClosure]:
        for closure in self._closures:
            if closure.contains(day):
                return closure
        return None

    def classify(self, worker: Worker, day: date) -> DayClassification:
        """
        Classify a worker's day. First match wins: incident, holiday, closure.

        Args:
            worker: The worker
            day: Calendar day

        Returns:
            DayClassification (kind NONE when the day is not suppressed)
        """
        incident = self.incident_for(worker, day)
        if incident is not None:
            return DayClassification(SuppressionKind.INCIDENT, incident, incident.type)

        holiday = self.holiday_for(day)
        if holiday is not None:
            return DayClassification(SuppressionKind.HOLIDAY, label=holiday.name)

        closure = self.closure_for(day)
        if closure is not None:
            return DayClassification(SuppressionKind.CLOSURE, label=closure.name)

        return DayClassification()
