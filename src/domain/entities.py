"""
Domain Entities Module

Core domain entities using dataclasses for the time-attendance system.
These entities represent the core business concepts independent of storage.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


# Spanish day names indexed by day-of-week (0=Sunday)
DAY_NAMES = ['domingo', 'lunes', 'martes', 'miércoles', 'jueves', 'viernes', 'sábado']


class Direction(Enum):
    """Direction of a clock event."""
    IN = "IN"
    OUT = "OUT"


class ClockMethod(Enum):
    """How the worker identified at the kiosk."""
    WEB = "WEB"
    NFC = "NFC"
    FINGERPRINT = "FINGERPRINT"
    PIN = "PIN"
    QR = "QR"
    MANUAL = "MANUAL"


class IncidentKind(Enum):
    """Closed classification of leave/absence incidents."""
    VACATION = "vacation"
    SICK = "sick"
    ABSENCE = "absence"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: str) -> "IncidentKind":
        """
        Classify a free-text incident label (case-insensitive substring match).

        Args:
            label: Free-text type such as "Vacaciones" or "Baja médica"

        Returns:
            The matching IncidentKind, OTHER when nothing matches
        """
        text = (label or "").lower()
        if "vacaci" in text:
            return cls.VACATION
        if "baja" in text or "enfermedad" in text or "accidente" in text:
            return cls.SICK
        if "falta" in text or "ausencia" in text:
            return cls.ABSENCE
        return cls.OTHER


class IncidentStatus(Enum):
    """Lifecycle of an incident record."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    GENERATED = "GENERATED"  # created by the absence detector
    REVIEWED = "REVIEWED"


class DayStatus(Enum):
    """Classified status of a reconciled day, in display priority order."""
    INCIDENT = "incident"
    HOLIDAY = "holiday"
    OFF = "off"
    MISSING = "missing"
    EXTRA = "extra"
    OK = "ok"


# ==============================================================================
# Stored records
# ==============================================================================
@dataclass
class Slot:
    """A single expected work interval within a day ("HH:MM" wall-clock)."""
    start_time: str
    end_time: str


@dataclass
class Schedule:
    """
    Expected slots for one day of the week.

    Attributes:
        day_of_week: 0=Sunday .. 6=Saturday
        slots: Ordered slots (zero, one or a split shift)
        worker_id: Owner, or None for the global template
    """
    day_of_week: int
    slots: List[Slot] = field(default_factory=list)
    worker_id: Optional[str] = None


@dataclass
class Worker:
    """
    Represents a worker.

    Attributes:
        id: Unique identifier
        name: Display name
        created_at: Days before this timestamp are never reconciled
        email: Optional email
        pin: Optional keypad PIN (unique)
        nfc_tag_id: Optional NFC tag (unique)
        qr_token: Optional barcode/QR token (unique)
        schedules: Weekly schedule keyed by day-of-week
    """
    id: str
    name: str
    created_at: datetime
    email: Optional[str] = None
    pin: Optional[str] = None
    nfc_tag_id: Optional[str] = None
    qr_token: Optional[str] = None
    schedules: Dict[int, Schedule] = field(default_factory=dict)

    def schedule_for(self, day_of_week: int) -> Optional[Schedule]:
        """Get the schedule for a day of the week, if any."""
        return self.schedules.get(day_of_week)


@dataclass(frozen=True)
class ClockEvent:
    """Immutable clock-in/clock-out fact."""
    id: str
    worker_id: str
    direction: Direction
    method: ClockMethod
    timestamp: datetime
    location: Optional[str] = None
    photo_url: Optional[str] = None


@dataclass
class Incident:
    """
    Leave/absence record.

    The kind is fixed at construction: pass it explicitly or let it be
    derived once from the free-text label.
    """
    id: str
    worker_id: str
    type: str
    start_date: date
    end_date: Optional[date] = None
    status: IncidentStatus = IncidentStatus.PENDING
    description: Optional[str] = None
    kind: Optional[IncidentKind] = None

    def __post_init__(self):
        if self.kind is None:
            self.kind = IncidentKind.from_label(self.type)

    def covers(self, day: date) -> bool:
        """Check whether the incident overlaps a calendar day (no end = single day)."""
        end = self.end_date if self.end_date is not None else self.start_date
        return self.start_date <= day and end >= day


@dataclass
class Holiday:
    """National/regional holiday."""
    date: date
    name: str


@dataclass
class CompanyClosure:
    """Company-wide closure, inclusive on both ends."""
    start_date: date
    end_date: date
    name: str
    description: Optional[str] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


# ==============================================================================
# Derived records (never persisted)
# ==============================================================================
@dataclass
class WorkInterval:
    """A worked IN->OUT interval formatted as "HH:MM"."""
    start: str
    end: str

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass
class DailyRecord:
    """
    One classified day for one worker.

    Attributes:
        date: The calendar day
        day_name: Spanish weekday name
        worked_minutes: Minutes from paired IN/OUT events
        expected_minutes: Minutes from the schedule (0 when suppressed)
        status: Display status
        intervals: Worked intervals
        incident_type: Label of the covering incident, if any
        incident_kind: Kind of the covering incident, if any
        holiday_name: Name of the suppressing holiday or closure, if any
        is_production: Whether the day accrues into the balance
    """
    date: date
    day_name: str
    worked_minutes: int
    expected_minutes: int
    status: DayStatus
    intervals: List[WorkInterval] = field(default_factory=list)
    incident_type: Optional[str] = None
    incident_kind: Optional[IncidentKind] = None
    holiday_name: Optional[str] = None
    is_production: bool = True

    @property
    def balance_minutes(self) -> int:
        """Theoretical balance for the day, regardless of phase."""
        return self.worked_minutes - self.expected_minutes

    def to_dict(self) -> dict:
        data = {
            "date": self.date.isoformat(),
            "dayName": self.day_name,
            "workedMinutes": self.worked_minutes,
            "expectedMinutes": self.expected_minutes,
            "balanceMinutes": self.balance_minutes,
            "status": self.status.value,
            "intervals": [i.to_dict() for i in self.intervals],
        }
        if self.incident_type is not None:
            data["incidentType"] = self.incident_type
        return data


@dataclass
class IncidentCounts:
    """Tally of incident-covered days by kind."""
    vacation: int = 0
    sick: int = 0
    absence: int = 0
    other: int = 0

    def add(self, kind: IncidentKind, amount: int = 1) -> None:
        setattr(self, kind.value, getattr(self, kind.value) + amount)

    def merge(self, other: "IncidentCounts") -> None:
        for kind in IncidentKind:
            self.add(kind, getattr(other, kind.value))

    @property
    def total(self) -> int:
        return self.vacation + self.sick + self.absence + self.other

    def to_dict(self) -> dict:
        return {
            "vacation": self.vacation,
            "sick": self.sick,
            "absence": self.absence,
            "other": self.other,
        }


@dataclass
class UserStat:
    """Per-worker aggregate over a range."""
    user_id: str
    user_name: str
    worked_minutes: int = 0
    expected_minutes: int = 0
    expected_to_date_minutes: int = 0
    balance_minutes: int = 0
    incidents: IncidentCounts = field(default_factory=IncidentCounts)
    daily_breakdown: List[DailyRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "workedMinutes": self.worked_minutes,
            "expectedMinutes": self.expected_minutes,
            "expectedToDateMinutes": self.expected_to_date_minutes,
            "balanceMinutes": self.balance_minutes,
            "incidents": self.incidents.to_dict(),
            "dailyBreakdown": [d.to_dict() for d in self.daily_breakdown],
        }


@dataclass
class DashboardStats:
    """Range-wide aggregate across all in-scope workers."""
    total_users: int = 0
    total_worked_minutes: int = 0
    total_expected_minutes: int = 0
    total_expected_to_date_minutes: int = 0
    balance_minutes: int = 0
    incident_counts: IncidentCounts = field(default_factory=IncidentCounts)
    user_stats: List[UserStat] = field(default_factory=list)

    def add_user(self, stat: UserStat) -> None:
        """Roll a worker's totals into the company-wide totals."""
        self.total_worked_minutes += stat.worked_minutes
        self.total_expected_minutes += stat.expected_minutes
        self.total_expected_to_date_minutes += stat.expected_to_date_minutes
        self.balance_minutes += stat.balance_minutes
        self.incident_counts.merge(stat.incidents)
        self.user_stats.append(stat)

    def to_dict(self) -> dict:
        return {
            "totalUsers": self.total_users,
            "totalWorkedMinutes": self.total_worked_minutes,
            "totalExpectedMinutes": self.total_expected_minutes,
            "totalExpectedToDateMinutes": self.total_expected_to_date_minutes,
            "balanceMinutes": self.balance_minutes,
            "incidentCounts": self.incident_counts.to_dict(),
            "userStats": [u.to_dict() for u in self.user_stats],
        }
