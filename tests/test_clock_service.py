"""
Tests for the kiosk clock-in service.
"""

import pytest
from datetime import date
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.clock_service import ClockService
from domain.entities import ClockMethod, Direction
from domain.errors import CompanyClosedError, InvalidPinError, WorkerNotFoundError


class TestClockIn:
    """Tests for ClockService.clock_in."""

    def test_toggles_direction(self, store, now, make_worker):
        """Test IN/OUT alternation on repeated clock-ins."""
        ana = make_worker("Ana", pin="1234")
        service = ClockService(store, now=now)

        first = service.clock_in("1234")
        second = service.clock_in("1234")
        third = service.clock_in("1234")

        assert first.direction == Direction.IN
        assert second.direction == Direction.OUT
        assert third.direction == Direction.IN
        assert first.worker_name == "Ana"
        assert len(store.list_clock_events(worker_id=ana.id)) == 3

    def test_nfc_tag(self, store, now, make_worker):
        """Test identification by NFC tag."""
        make_worker("Ana", nfc_tag_id="04:A2:19:7F")

        result = ClockService(store, now=now).clock_in("04:A2:19:7F", method=ClockMethod.NFC)

        assert result.event.method == ClockMethod.NFC
        assert result.direction == Direction.IN

    def test_method_as_string(self, store, now, make_worker):
        """Test a method given as text and a location."""
        make_worker("Ana", qr_token="qr-ana")

        result = ClockService(store, now=now).clock_in("qr-ana", method="QR", location="Almacén")

        assert result.event.method == ClockMethod.QR
        assert result.event.location == "Almacén"

    def test_unknown_identifier(self, store, now, make_worker):
        """Test an identifier that matches nobody."""
        make_worker("Ana", pin="1234")

        with pytest.raises(WorkerNotFoundError):
            ClockService(store, now=now).clock_in("9999")
        assert store.list_clock_events() == []

    @pytest.mark.parametrize("pin", ["", "12", "123", "12a4"])
    def test_invalid_pin(self, store, now, pin):
        """Test PIN format validation."""
        with pytest.raises(InvalidPinError):
            ClockService(store, now=now).clock_in(pin, method=ClockMethod.PIN)

    def test_closure_blocks_clock_in(self, store, now, make_worker):
        """Test that clock-ins are refused during a closure."""
        make_worker("Ana", pin="1234")
        store.add_closure(date(2024, 3, 18), date(2024, 3, 22), "Semana Santa")

        with pytest.raises(CompanyClosedError) as exc_info:
            ClockService(store, now=now).clock_in("1234")

        assert exc_info.value.closure_name == "Semana Santa"
        assert store.list_clock_events() == []

    def test_closure_checked_before_lookup(self, store, now):
        """Test that the closure check happens before the worker lookup."""
        store.add_closure(date(2024, 3, 20), date(2024, 3, 20), "Inventario")

        with pytest.raises(CompanyClosedError):
            ClockService(store, now=now).clock_in("0000")


class TestClockState:

    def test_current_direction_and_active_workers(self, store, now, make_worker):
        """Test the next direction and the count of workers clocked in."""
        ana = make_worker("Ana", pin="1111")
        luis = make_worker("Luis", pin="2222")
        service = ClockService(store, now=now)

        assert service.current_direction(ana.id) == Direction.IN
        service.clock_in("1111")
        service.clock_in("2222")
        service.clock_in("2222")

        assert service.current_direction(ana.id) == Direction.OUT
        assert service.current_direction(luis.id) == Direction.IN
        assert service.active_workers() == 1
