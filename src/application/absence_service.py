"""
Absence Service Module

Batch detection of unexcused absences over a trailing window of closed days,
plus the review action on incidents.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from domain.entities import Incident, IncidentKind, IncidentStatus
from domain.leave_classifier import LeaveClassifier
from domain.phase_policy import PhaseConfig
from domain.schedule_resolver import ScheduleResolver
from application.stats_service import iter_days
from infrastructure.attendance_store import AttendanceStore
from infrastructure.logger import get_logger

logger = get_logger("AbsenceService")

ABSENCE_LABEL = "FALTA"
ABSENCE_DESCRIPTION = "Falta de asistencia detectada automáticamente"


@dataclass
class AbsenceResult:
    """Outcome of an absence detection run."""
    count: int = 0

    def to_dict(self) -> dict:
        return {"count": self.count}


class AbsenceDetector:
    """
    Materializes unexcused-absence incidents.

    Window: max(today - lookback_days, pilot start) .. yesterday. A day is an
    absence when the worker existed, no incident covers it, it is neither a
    holiday nor a closure, the worker has slots that day and no clock event.
    Idempotent: a day already covered by any incident is skipped.
    """

    def __init__(
        self,
        store: AttendanceStore,
        now: Optional[Callable[[], datetime]] = None,
        lookback_days: int = 30
    ):
        self.store = store
        self._now = now or datetime.now
        self.lookback_days = lookback_days
        self.resolver = ScheduleResolver()

    def detection_window(self, today: date, pilot_start: Optional[date]) -> tuple:
        """Get the (start, end) window to scan; start > end means nothing to do."""
        start = today - timedelta(days=self.lookback_days)
        if pilot_start is not None and pilot_start > start:
            start = pilot_start
        return start, today - timedelta(days=1)

    def check_and_generate_absences(self) -> AbsenceResult:
        """
        Scan the window and create one incident per detected absence.

        Returns:
            AbsenceResult with the number of incidents created
        """
        today = self._now().date()
        config = PhaseConfig.from_mapping(self.store.system_config())
        start, end = self.detection_window(today, config.pilot_start)
        if start > end:
            return AbsenceResult()

        workers = self.store.list_workers()
        classifier = LeaveClassifier(
            incidents=self.store.list_incidents(start, end),
            holidays=self.store.list_holidays(start, end),
            closures=self.store.list_closures(start, end),
        )
        clocked_days = {
            (e.worker_id, e.timestamp.date())
            for e in self.store.list_clock_events(start, end)
        }

        logger.debug(f"Buscando faltas entre {start.isoformat()} y {end.isoformat()}")

        created = 0
        for worker in workers:
            for day in iter_days(start, end):
                if day < worker.created_at.date():
                    continue
                if classifier.classify(worker, day).suppressed:
                    continue
                if not self.resolver.is_scheduled(worker, day):
                    continue
                if (worker.id, day) in clocked_days:
                    continue

                self.store.add_incident(
                    worker_id=worker.id,
                    type=ABSENCE_LABEL,
                    start_date=day,
                    end_date=day,
                    status=IncidentStatus.GENERATED,
                    description=ABSENCE_DESCRIPTION,
                    kind=IncidentKind.ABSENCE,
                )
                created += 1
                logger.debug(f"Falta generada: {worker.name} {day.isoformat()}")

        if created:
            logger.info(f"Generadas {created} faltas automáticas")
        return AbsenceResult(count=created)

    def update_incident_type(self, incident_id: str, new_type: str) -> Incident:
        """
        Relabel an incident, re-derive its kind and mark it reviewed.

        Raises:
            KeyError: If no incident has that id
        """
        incident = self.store.get_incident(incident_id)
        if incident is None:
            raise KeyError(incident_id)
        updated = replace(incident, type=new_type, kind=None, status=IncidentStatus.REVIEWED)
        self.store.update_incident(updated)
        logger.info(f"Incidencia {incident_id} reclasificada como '{new_type}'")
        return updated
