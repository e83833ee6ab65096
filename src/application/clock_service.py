"""
Clock Service Module

Kiosk-facing clock-in action: resolves the worker, blocks closures, derives
the direction from the worker's last event and appends the new event.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Union

from domain.clock_pairing import next_direction
from domain.entities import ClockEvent, ClockMethod, Direction
from domain.errors import CompanyClosedError, InvalidPinError, WorkerNotFoundError
from domain.leave_classifier import LeaveClassifier
from domain.worker_roster import find_by_identifier
from infrastructure.attendance_store import AttendanceStore
from infrastructure.logger import get_logger

logger = get_logger("ClockService")

MIN_PIN_LENGTH = 4


@dataclass
class ClockResult:
    """Result of a successful clock action."""
    worker_id: str
    worker_name: str
    direction: Direction
    timestamp: datetime
    event: ClockEvent


class ClockService:
    """Registers clock events for the kiosk."""

    def __init__(
        self,
        store: AttendanceStore,
        now: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self._now = now or datetime.now

    def clock_in(
        self,
        identifier: str,
        method: Union[ClockMethod, str] = ClockMethod.PIN,
        location: Optional[str] = None,
        photo_url: Optional[str] = None
    ) -> ClockResult:
        """
        Register the next clock event for the worker matching an identifier.

        Args:
            identifier: Worker id, NFC tag, PIN or QR token
            method: How the worker identified
            location: Optional free-text location
            photo_url: Optional photo reference

        Returns:
            ClockResult with the persisted event

        Raises:
            InvalidPinError: PIN method with fewer than 4 digits
            CompanyClosedError: Today falls inside a company closure
            WorkerNotFoundError: No worker matches the identifier
        """
        method = ClockMethod(method)
        if method == ClockMethod.PIN:
            if not identifier or len(identifier) < MIN_PIN_LENGTH or not identifier.isdigit():
                raise InvalidPinError("PIN inválido. Debe tener al menos 4 dígitos.")

        now = self._now()
        today = now.date()
        classifier = LeaveClassifier(closures=self.store.list_closures(today, today))
        closure = classifier.closure_for(today)
        if closure is not None:
            logger.info(f"Fichaje rechazado por cierre de empresa: {closure.name}")
            raise CompanyClosedError(closure.name, closure.start_date, closure.end_date)

        worker = find_by_identifier(self.store.list_workers(), identifier)
        if worker is None:
            logger.warning(f"Fichaje rechazado, identificador desconocido (método {method.value})")
            raise WorkerNotFoundError(identifier)

        direction = next_direction(self.store.last_clock_event(worker.id))
        event = self.store.add_clock_event(
            worker_id=worker.id,
            direction=direction,
            method=method,
            timestamp=now,
            location=location,
            photo_url=photo_url,
        )
        logger.info(f"{worker.name} fichó {direction.value} vía {method.value}")

        return ClockResult(
            worker_id=worker.id,
            worker_name=worker.name,
            direction=direction,
            timestamp=now,
            event=event,
        )

    def current_direction(self, worker_id: str) -> Direction:
        """Direction the worker's next clock event will take."""
        return next_direction(self.store.last_clock_event(worker_id))

    def active_workers(self) -> int:
        """Number of workers whose latest event is IN."""
        count = 0
        for worker in self.store.list_workers():
            last = self.store.last_clock_event(worker.id)
            if last is not None and last.direction == Direction.IN:
                count += 1
        return count
