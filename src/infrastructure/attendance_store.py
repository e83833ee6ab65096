"""
Attendance Store Module

SQLAlchemy-backed store for workers, schedules, clock events, incidents,
holidays, company closures and the system key/value configuration.
Every write commits its own transaction, so several processes can share
one SQLite file without overwriting each other's records.
"""

import re
import uuid
from contextlib import contextmanager
from datetime import date, datetime, time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from domain.entities import (
    ClockEvent, ClockMethod, CompanyClosure, Direction, Holiday, Incident,
    IncidentKind, IncidentStatus, Schedule, Slot, Worker
)
from domain.errors import DuplicateIdentifierError, StorageError
from domain.schedule_resolver import validate_slots
from infrastructure.database import (
    ClockEventRow, ClosureRow, HolidayRow, IncidentRow, ScheduleRow,
    SlotRow, SystemConfigRow, WorkerRow, init_database
)
from infrastructure.logger import get_logger

logger = get_logger("AttendanceStore")

# "UNIQUE constraint failed: workers.pin"
_UNIQUE_FAILED = re.compile(r"UNIQUE constraint failed: workers\.(\w+)")


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _day_end(day: date) -> datetime:
    return datetime.combine(day, time.max)


class AttendanceStore:
    """
    Attendance records persisted through SQLAlchemy.

    Without a data path the store uses an in-memory SQLite database, which
    is what the tests use.
    """

    def __init__(self, data_path: Optional[Path] = None):
        self.data_path = Path(data_path) if data_path else None
        try:
            self._session_factory = init_database(self.data_path)
        except (OSError, SQLAlchemyError) as e:
            raise StorageError(f"No se pudo abrir el almacén {self.data_path}: {e}") from e

    @contextmanager
    def _session(self):
        """Session committing on success and rolling back on any error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Error del almacén {self.data_path or ':memory:'}: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def load(self) -> "AttendanceStore":
        """Log the store contents; records are read from the database on demand."""
        with self._session() as session:
            logger.debug(
                f"Almacén abierto: {session.query(WorkerRow).count()} trabajadores, "
                f"{session.query(ClockEventRow).count()} fichajes, "
                f"{session.query(IncidentRow).count()} incidencias"
            )
        return self

    # ==========================================================================
    # Row mapping
    # ==========================================================================
    @staticmethod
    def _schedule_from_row(row: ScheduleRow) -> Schedule:
        return Schedule(
            day_of_week=row.day_of_week,
            slots=[Slot(s.start_time, s.end_time) for s in row.slots],
            worker_id=row.worker_id,
        )

    def _worker_from_row(self, row: WorkerRow) -> Worker:
        worker = Worker(
            id=row.id,
            name=row.name,
            created_at=row.created_at,
            email=row.email,
            pin=row.pin,
            nfc_tag_id=row.nfc_tag_id,
            qr_token=row.qr_token,
        )
        for schedule_row in row.schedules:
            worker.schedules[schedule_row.day_of_week] = self._schedule_from_row(schedule_row)
        return worker

    @staticmethod
    def _event_from_row(row: ClockEventRow) -> ClockEvent:
        return ClockEvent(
            id=str(row.id),
            worker_id=row.worker_id,
            direction=row.direction,
            method=row.method,
            timestamp=row.timestamp,
            location=row.location,
            photo_url=row.photo_url,
        )

    @staticmethod
    def _incident_from_row(row: IncidentRow) -> Incident:
        return Incident(
            id=row.id,
            worker_id=row.worker_id,
            type=row.type,
            start_date=row.start_date,
            end_date=row.end_date,
            status=row.status,
            description=row.description,
            kind=row.kind,
        )

    @staticmethod
    def _duplicate_from(error: IntegrityError, worker: Worker) -> DuplicateIdentifierError:
        match = _UNIQUE_FAILED.search(str(error.orig))
        field_name = match.group(1) if match else "id"
        return DuplicateIdentifierError(field_name, getattr(worker, field_name, worker.id))

    # ==========================================================================
    # Reads
    # ==========================================================================
    def list_workers(self, worker_id: Optional[str] = None) -> List[Worker]:
        """All workers, or the single worker with the given id."""
        with self._session() as session:
            query = session.query(WorkerRow)
            if worker_id is not None and worker_id != "all":
                query = query.filter(WorkerRow.id == worker_id)
            return [self._worker_from_row(row) for row in query.order_by(WorkerRow.name).all()]

    def list_clock_events(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        worker_id: Optional[str] = None
    ) -> List[ClockEvent]:
        """Clock events in [start, end] (calendar days), in timestamp then insertion order."""
        with self._session() as session:
            query = session.query(ClockEventRow)
            if worker_id is not None:
                query = query.filter(ClockEventRow.worker_id == worker_id)
            if start is not None:
                query = query.filter(ClockEventRow.timestamp >= _day_start(start))
            if end is not None:
                query = query.filter(ClockEventRow.timestamp <= _day_end(end))
            rows = query.order_by(ClockEventRow.timestamp, ClockEventRow.id).all()
            return [self._event_from_row(row) for row in rows]

    def last_clock_event(self, worker_id: str) -> Optional[ClockEvent]:
        with self._session() as session:
            row = (
                session.query(ClockEventRow)
                .filter(ClockEventRow.worker_id == worker_id)
                .order_by(ClockEventRow.timestamp.desc(), ClockEventRow.id.desc())
                .first()
            )
            return self._event_from_row(row) if row else None

    def list_incidents(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        worker_id: Optional[str] = None
    ) -> List[Incident]:
        """Incidents overlapping [start, end]; an incident without end date covers its start day."""
        with self._session() as session:
            query = session.query(IncidentRow)
            if worker_id is not None:
                query = query.filter(IncidentRow.worker_id == worker_id)
            if end is not None:
                query = query.filter(IncidentRow.start_date <= end)
            rows = query.order_by(IncidentRow.start_date).all()
            return [
                self._incident_from_row(row) for row in rows
                if start is None or (row.end_date or row.start_date) >= start
            ]

    def get_incident(self, incident_id: str) -> Optional[Incident]:
        with self._session() as session:
            row = session.get(IncidentRow, incident_id)
            return self._incident_from_row(row) if row else None

    def list_holidays(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Holiday]:
        with self._session() as session:
            query = session.query(HolidayRow)
            if start is not None:
                query = query.filter(HolidayRow.date >= start)
            if end is not None:
                query = query.filter(HolidayRow.date <= end)
            return [Holiday(date=row.date, name=row.name) for row in query.order_by(HolidayRow.date)]

    def list_closures(self, start: Optional[date] = None, end: Optional[date] = None) -> List[CompanyClosure]:
        with self._session() as session:
            query = session.query(ClosureRow)
            if end is not None:
                query = query.filter(ClosureRow.start_date <= end)
            if start is not None:
                query = query.filter(ClosureRow.end_date >= start)
            return [
                CompanyClosure(row.start_date, row.end_date, row.name, row.description)
                for row in query.order_by(ClosureRow.start_date)
            ]

    def system_config(self) -> Dict[str, str]:
        with self._session() as session:
            return {row.key: row.value for row in session.query(SystemConfigRow)}

    # ==========================================================================
    # Writes
    # ==========================================================================
    def add_worker(self, worker: Worker) -> Worker:
        """
        Add a worker.

        Raises:
            DuplicateIdentifierError: If the id or a PIN/NFC/QR tag is taken
        """
        try:
            with self._session() as session:
                session.add(WorkerRow(
                    id=worker.id,
                    name=worker.name,
                    email=worker.email,
                    pin=worker.pin,
                    nfc_tag_id=worker.nfc_tag_id,
                    qr_token=worker.qr_token,
                    created_at=worker.created_at,
                ))
        except IntegrityError as e:
            raise self._duplicate_from(e, worker) from e
        logger.info(f"Trabajador creado: {worker.name} ({worker.id})")
        return worker

    def update_worker(self, worker: Worker) -> Worker:
        """
        Replace an existing worker's identity fields, keeping its schedules.

        Raises:
            KeyError: If the worker does not exist
            DuplicateIdentifierError: If a PIN/NFC/QR tag belongs to another worker
        """
        try:
            with self._session() as session:
                row = session.get(WorkerRow, worker.id)
                if row is None:
                    raise KeyError(worker.id)
                row.name = worker.name
                row.email = worker.email
                row.pin = worker.pin
                row.nfc_tag_id = worker.nfc_tag_id
                row.qr_token = worker.qr_token
                session.flush()
                updated = self._worker_from_row(row)
        except IntegrityError as e:
            raise self._duplicate_from(e, worker) from e
        return updated

    def set_schedule(
        self,
        worker_id: Optional[str],
        day_of_week: int,
        slots: Iterable[Slot],
        strict: bool = False
    ) -> Schedule:
        """
        Replace the schedule of an owner (None = global template) for a day.

        Args:
            worker_id: Owner id or None for the global template
            day_of_week: 0=Sunday .. 6=Saturday
            slots: New slots
            strict: Reject malformed times and slots ending before they start

        Raises:
            ValueError: If day_of_week is out of range
            KeyError: If the worker does not exist
            InvalidSlotError: In strict mode, for a malformed or negative-duration slot
        """
        if not 0 <= day_of_week <= 6:
            raise ValueError(f"Día de la semana fuera de rango: {day_of_week}")
        slots = list(slots)
        if strict:
            validate_slots(slots)

        with self._session() as session:
            if worker_id is not None and session.get(WorkerRow, worker_id) is None:
                raise KeyError(worker_id)
            owner = ScheduleRow.worker_id.is_(None) if worker_id is None \
                else ScheduleRow.worker_id == worker_id
            existing = session.query(ScheduleRow).filter(
                owner, ScheduleRow.day_of_week == day_of_week
            ).first()
            if existing is not None:
                session.delete(existing)
                session.flush()
            session.add(ScheduleRow(
                worker_id=worker_id,
                day_of_week=day_of_week,
                slots=[
                    SlotRow(position=i, start_time=s.start_time, end_time=s.end_time)
                    for i, s in enumerate(slots)
                ],
            ))
        return Schedule(day_of_week=day_of_week, slots=slots, worker_id=worker_id)

    def apply_global_template(self, worker_id: Optional[str] = None) -> int:
        """
        Replace the whole week of one worker (or every worker) with the global template.

        Returns:
            Number of workers updated
        """
        with self._session() as session:
            template = (
                session.query(ScheduleRow)
                .filter(ScheduleRow.worker_id.is_(None))
                .all()
            )
            query = session.query(WorkerRow)
            if worker_id is not None and worker_id != "all":
                query = query.filter(WorkerRow.id == worker_id)
            targets = query.all()
            for row in targets:
                # Old rows must be gone before the (worker, day) constraint is checked
                row.schedules = []
                session.flush()
                row.schedules = [
                    ScheduleRow(
                        day_of_week=schedule.day_of_week,
                        slots=[
                            SlotRow(position=s.position, start_time=s.start_time, end_time=s.end_time)
                            for s in schedule.slots
                        ],
                    )
                    for schedule in template
                ]
            count = len(targets)
        logger.info(f"Plantilla global aplicada a {count} trabajadores")
        return count

    def add_clock_event(
        self,
        worker_id: str,
        direction: Direction,
        method: ClockMethod,
        timestamp: datetime,
        location: Optional[str] = None,
        photo_url: Optional[str] = None
    ) -> ClockEvent:
        """Append an immutable clock event (a single INSERT)."""
        with self._session() as session:
            row = ClockEventRow(
                worker_id=worker_id,
                direction=direction,
                method=method,
                timestamp=timestamp,
                location=location,
                photo_url=photo_url,
            )
            session.add(row)
            session.flush()
            event = self._event_from_row(row)
        return event

    def add_incident(
        self,
        worker_id: str,
        type: str,
        start_date: date,
        end_date: Optional[date] = None,
        status: IncidentStatus = IncidentStatus.PENDING,
        description: Optional[str] = None,
        kind: Optional[IncidentKind] = None
    ) -> Incident:
        incident = Incident(
            id=uuid.uuid4().hex,
            worker_id=worker_id,
            type=type,
            start_date=start_date,
            end_date=end_date,
            status=status,
            description=description,
            kind=kind,
        )
        with self._session() as session:
            session.add(IncidentRow(
                id=incident.id,
                worker_id=incident.worker_id,
                type=incident.type,
                kind=incident.kind,
                start_date=incident.start_date,
                end_date=incident.end_date,
                status=incident.status,
                description=incident.description,
            ))
        return incident

    def update_incident(self, incident: Incident) -> Incident:
        """Replace a stored incident with the same id."""
        with self._session() as session:
            row = session.get(IncidentRow, incident.id)
            if row is None:
                raise KeyError(incident.id)
            row.type = incident.type
            row.kind = incident.kind
            row.start_date = incident.start_date
            row.end_date = incident.end_date
            row.status = incident.status
            row.description = incident.description
        return incident

    def add_holiday(self, day: date, name: str) -> Holiday:
        with self._session() as session:
            session.add(HolidayRow(date=day, name=name))
        return Holiday(date=day, name=name)

    def add_closure(
        self,
        start_date: date,
        end_date: date,
        name: str,
        description: Optional[str] = None
    ) -> CompanyClosure:
        with self._session() as session:
            session.add(ClosureRow(
                start_date=start_date, end_date=end_date, name=name, description=description
            ))
        return CompanyClosure(start_date, end_date, name, description)

    def set_config_value(self, key: str, value: str) -> None:
        with self._session() as session:
            session.merge(SystemConfigRow(key=key, value=value))
