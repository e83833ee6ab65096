"""
Errors Module

Exception taxonomy shared by the domain, application and storage layers.
"""

from datetime import date
from typing import Optional


# ==============================================================================
# Base
# ==============================================================================
class AttendanceError(Exception):
    """Base exception for attendance-related errors."""
    pass


# ==============================================================================
# Not found / validation
# ==============================================================================
class WorkerNotFoundError(AttendanceError):
    """Raised when an identifier (id, PIN, NFC tag, QR token) matches no worker."""

    def __init__(self, identifier: str, message: Optional[str] = None):
        self.identifier = identifier
        self.message = message or f"Trabajador no encontrado: '{identifier}'"
        super().__init__(self.message)


class InvalidDateRangeError(AttendanceError):
    """Raised when a statistics range starts after it ends."""

    def __init__(self, date_from: date, date_to: date):
        self.date_from = date_from
        self.date_to = date_to
        super().__init__(
            f"Rango de fechas inválido: {date_from.isoformat()} > {date_to.isoformat()}"
        )


class InvalidPinError(AttendanceError):
    """Raised when a PIN is not at least four digits."""
    pass


class DuplicateIdentifierError(AttendanceError):
    """Raised when a PIN, NFC tag or QR token is already assigned to another worker."""

    def __init__(self, field_name: str, value: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"El valor '{value}' de {field_name} ya está asignado a otro trabajador")


class InvalidSlotError(AttendanceError):
    """Raised by strict schedule writes when a slot ends before it starts."""
    pass


# ==============================================================================
# Boundary / storage
# ==============================================================================
class CompanyClosedError(AttendanceError):
    """Raised when a clock-in is attempted during a company closure."""

    def __init__(self, closure_name: str, start_date: date, end_date: date):
        self.closure_name = closure_name
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"La empresa está cerrada: {closure_name} "
            f"({start_date.strftime('%d/%m')} - {end_date.strftime('%d/%m')})"
        )


class StorageError(AttendanceError):
    """Raised when the persistent store cannot be read or written."""
    pass
