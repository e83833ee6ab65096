"""
Unit tests for daily reconciliation and status derivation.
"""

from datetime import date, datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import (
    ClockEvent, ClockMethod, CompanyClosure, DayStatus, Direction, Holiday,
    Incident, IncidentKind, Schedule, Slot, Worker
)
from domain.leave_classifier import DayClassification, LeaveClassifier, SuppressionKind
from domain.phase_policy import PhaseConfig, PhasePolicy
from domain.reconciliation import DailyReconciler, derive_status

MONDAY = date(2024, 3, 4)
SATURDAY = date(2024, 3, 9)


def _worker(created_at=datetime(2024, 1, 1)):
    worker = Worker(id="w1", name="Ana", created_at=created_at)
    for dow in range(1, 6):
        worker.schedules[dow] = Schedule(dow, [Slot("08:00", "17:00")], "w1")
    return worker


def _events(day, *times):
    events = []
    for index, (hour, minute) in enumerate(times):
        events.append(ClockEvent(
            id=str(index),
            worker_id="w1",
            direction=Direction.IN if index % 2 == 0 else Direction.OUT,
            method=ClockMethod.PIN,
            timestamp=datetime(day.year, day.month, day.day, hour, minute),
        ))
    return events


def _reconciler(classifier=None, config=None):
    return DailyReconciler(classifier or LeaveClassifier(), PhasePolicy(config or PhaseConfig()))


class TestDeriveStatus:
    """Priority: incident > holiday > off > missing > extra > ok."""

    def test_incident_beats_everything(self):
        """Test incident status priority."""
        classification = DayClassification(SuppressionKind.INCIDENT, label="Vacaciones")
        assert derive_status(classification, 0, 300) == DayStatus.INCIDENT

    def test_closure_shows_as_holiday(self):
        """Test that a closure day shows as holiday."""
        classification = DayClassification(SuppressionKind.CLOSURE, label="Cierre")
        assert derive_status(classification, 0, 0) == DayStatus.HOLIDAY

    def test_off(self):
        """Test off status on an unscheduled day."""
        assert derive_status(DayClassification(), 0, 0) == DayStatus.OFF

    def test_missing_extra_ok(self):
        """Test missing, extra and ok by worked minutes."""
        assert derive_status(DayClassification(), 480, 479) == DayStatus.MISSING
        assert derive_status(DayClassification(), 480, 481) == DayStatus.EXTRA
        assert derive_status(DayClassification(), 480, 480) == DayStatus.OK

    def test_worked_on_unscheduled_day_is_extra(self):
        """Test work on an unscheduled day."""
        assert derive_status(DayClassification(), 0, 60) == DayStatus.EXTRA


class TestDailyReconciler:
    """Tests for DailyReconciler.reconcile."""

    def test_round_trip_ok(self):
        """Test an on-time day."""
        record = _reconciler().reconcile(_worker(), MONDAY, _events(MONDAY, (8, 0), (17, 0)))

        assert record.status == DayStatus.OK
        assert record.worked_minutes == 540
        assert record.expected_minutes == 540
        assert record.balance_minutes == 0
        assert record.day_name == "lunes"
        assert record.is_production

    def test_missing_day(self):
        """Test a short day."""
        record = _reconciler().reconcile(_worker(), MONDAY, _events(MONDAY, (9, 0), (17, 0)))

        assert record.status == DayStatus.MISSING
        assert record.balance_minutes == -60

    def test_no_events_on_scheduled_day(self):
        """Test a scheduled day without events."""
        record = _reconciler().reconcile(_worker(), MONDAY, [])

        assert record.status == DayStatus.MISSING
        assert record.worked_minutes == 0
        assert record.expected_minutes == 540

    def test_weekend_off(self):
        """Test a weekend without schedule."""
        record = _reconciler().reconcile(_worker(), SATURDAY, [])

        assert record.status == DayStatus.OFF
        assert record.expected_minutes == 0
        assert record.worked_minutes == 0
        assert record.day_name == "sábado"

    def test_incident_suppresses_expected_but_keeps_worked(self):
        """Test that an incident zeroes expected time but keeps worked time."""
        classifier = LeaveClassifier(incidents=[Incident("i1", "w1", "Vacaciones", MONDAY)])
        record = _reconciler(classifier).reconcile(
            _worker(), MONDAY, _events(MONDAY, (8, 0), (10, 0))
        )

        assert record.status == DayStatus.INCIDENT
        assert record.expected_minutes == 0
        assert record.worked_minutes == 120
        assert record.incident_type == "Vacaciones"
        assert record.incident_kind == IncidentKind.VACATION
        assert record.holiday_name is None

    def test_holiday_suppresses_expected(self):
        """Test holiday suppression."""
        classifier = LeaveClassifier(holidays=[Holiday(MONDAY, "Fiesta local")])
        record = _reconciler(classifier).reconcile(_worker(), MONDAY, [])

        assert record.status == DayStatus.HOLIDAY
        assert record.expected_minutes == 0
        assert record.holiday_name == "Fiesta local"
        assert record.incident_type is None

    def test_closure_suppresses_expected(self):
        """Test closure suppression."""
        classifier = LeaveClassifier(
            closures=[CompanyClosure(MONDAY, date(2024, 3, 8), "Inventario")]
        )
        record = _reconciler(classifier).reconcile(_worker(), MONDAY, [])

        assert record.status == DayStatus.HOLIDAY
        assert record.expected_minutes == 0
        assert record.holiday_name == "Inventario"

    def test_day_before_creation_is_skipped(self):
        """Test that days before the worker existed are skipped."""
        worker = _worker(created_at=datetime(2024, 3, 5, 12, 0))

        assert _reconciler().reconcile(worker, MONDAY, []) is None
        assert _reconciler().reconcile(worker, date(2024, 3, 5), []) is not None

    def test_pilot_day_flagged(self):
        """Test the pilot flag on the record."""
        config = PhaseConfig(pilot_start=date(2024, 3, 1), production_start=date(2024, 3, 10))
        record = _reconciler(config=config).reconcile(_worker(), MONDAY, [])

        assert not record.is_production

    def test_to_dict_includes_incident_type_only_when_set(self):
        """Test the optional incidentType key."""
        plain = _reconciler().reconcile(_worker(), MONDAY, []).to_dict()
        assert "incidentType" not in plain
        assert plain["dayName"] == "lunes"
        assert plain["status"] == "missing"

        classifier = LeaveClassifier(incidents=[Incident("i1", "w1", "Baja", MONDAY)])
        data = _reconciler(classifier).reconcile(_worker(), MONDAY, []).to_dict()
        assert data["incidentType"] == "Baja"
