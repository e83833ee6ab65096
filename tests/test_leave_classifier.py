"""
Unit tests for LeaveClassifier and incident kind classification.
"""

from datetime import date, datetime
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import CompanyClosure, Holiday, Incident, IncidentKind, Worker
from domain.leave_classifier import LeaveClassifier, SuppressionKind

ANA = Worker(id="w1", name="Ana", created_at=datetime(2024, 1, 1))
LUIS = Worker(id="w2", name="Luis", created_at=datetime(2024, 1, 1))


class TestIncidentKind:
    """Free-text labels map onto the closed kind set once."""

    def test_vacation(self):
        """Test vacation labels."""
        assert IncidentKind.from_label("Vacaciones") == IncidentKind.VACATION
        assert IncidentKind.from_label("VACACIONES verano") == IncidentKind.VACATION

    def test_sick(self):
        """Test sick leave labels."""
        assert IncidentKind.from_label("Baja médica") == IncidentKind.SICK
        assert IncidentKind.from_label("Enfermedad") == IncidentKind.SICK
        assert IncidentKind.from_label("Accidente laboral") == IncidentKind.SICK

    def test_absence(self):
        """Test absence labels."""
        assert IncidentKind.from_label("FALTA") == IncidentKind.ABSENCE
        assert IncidentKind.from_label("Ausencia injustificada") == IncidentKind.ABSENCE

    def test_other(self):
        """Test labels that match no kind."""
        assert IncidentKind.from_label("Asuntos propios") == IncidentKind.OTHER
        assert IncidentKind.from_label("") == IncidentKind.OTHER

    def test_kind_fixed_at_construction(self):
        """Test that the kind does not follow later label edits."""
        incident = Incident("i1", "w1", "Vacaciones", date(2024, 3, 4))
        assert incident.kind == IncidentKind.VACATION

        explicit = Incident("i2", "w1", "Vacaciones", date(2024, 3, 4), kind=IncidentKind.OTHER)
        assert explicit.kind == IncidentKind.OTHER


class TestIncidentCoverage:

    def test_missing_end_covers_single_day(self):
        """Test that an incident without end date covers one day."""
        incident = Incident("i1", "w1", "Médico", date(2024, 3, 5))
        assert incident.covers(date(2024, 3, 5))
        assert not incident.covers(date(2024, 3, 6))
        assert not incident.covers(date(2024, 3, 4))

    def test_range_is_inclusive(self):
        """Test inclusive incident ranges."""
        incident = Incident("i1", "w1", "Vacaciones", date(2024, 3, 4), date(2024, 3, 8))
        assert incident.covers(date(2024, 3, 4))
        assert incident.covers(date(2024, 3, 8))
        assert not incident.covers(date(2024, 3, 9))


class TestLeaveClassifier:
    """Tests for LeaveClassifier.classify."""

    def test_unsuppressed_day(self):
        """Test a normal working day."""
        classification = LeaveClassifier().classify(ANA, date(2024, 3, 4))
        assert classification.kind == SuppressionKind.NONE
        assert not classification.suppressed
        assert classification.incident_kind is None

    def test_incident_wins_over_holiday_and_closure(self):
        """Test incident priority."""
        day = date(2024, 3, 19)
        classifier = LeaveClassifier(
            incidents=[Incident("i1", "w1", "Baja", day)],
            holidays=[Holiday(day, "San José")],
            closures=[CompanyClosure(day, day, "Inventario")],
        )
        classification = classifier.classify(ANA, day)

        assert classification.kind == SuppressionKind.INCIDENT
        assert classification.label == "Baja"
        assert classification.incident_kind == IncidentKind.SICK

    def test_holiday_wins_over_closure(self):
        """Test holiday priority over closure."""
        day = date(2024, 3, 19)
        classifier = LeaveClassifier(
            holidays=[Holiday(day, "San José")],
            closures=[CompanyClosure(day, day, "Inventario")],
        )
        classification = classifier.classify(ANA, day)

        assert classification.kind == SuppressionKind.HOLIDAY
        assert classification.label == "San José"

    def test_closure(self):
        """Test closure suppression."""
        classifier = LeaveClassifier(
            closures=[CompanyClosure(date(2024, 8, 5), date(2024, 8, 18), "Cierre de agosto")]
        )
        classification = classifier.classify(ANA, date(2024, 8, 12))

        assert classification.kind == SuppressionKind.CLOSURE
        assert classification.label == "Cierre de agosto"
        assert classifier.closure_for(date(2024, 8, 19)) is None

    def test_incident_only_applies_to_its_worker(self):
        """Test that incidents are per worker."""
        day = date(2024, 3, 5)
        classifier = LeaveClassifier(incidents=[Incident("i1", "w1", "Vacaciones", day)])

        assert classifier.classify(ANA, day).suppressed
        assert not classifier.classify(LUIS, day).suppressed

    def test_holiday_applies_to_everyone(self):
        """Test that holidays apply to every worker."""
        day = date(2024, 1, 6)
        classifier = LeaveClassifier(holidays=[Holiday(day, "Reyes")])

        assert classifier.classify(ANA, day).kind == SuppressionKind.HOLIDAY
        assert classifier.classify(LUIS, day).kind == SuppressionKind.HOLIDAY
