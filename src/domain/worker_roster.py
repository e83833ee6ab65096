"""
Worker Roster Module

Handles importing workers from CSV files and resolving kiosk identifiers.
"""

import csv
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .entities import Worker


def find_by_identifier(workers: Iterable[Worker], identifier: str) -> Optional[Worker]:
    """
    Find the worker matching an id, NFC tag, PIN or QR token.

    Returns:
        The first matching worker, or None
    """
    if not identifier:
        return None
    for worker in workers:
        if identifier in (worker.id, worker.nfc_tag_id, worker.pin, worker.qr_token):
            return worker
    return None


@dataclass
class RosterRow:
    """One worker row read from a roster CSV."""
    name: str
    id: Optional[str] = None
    email: Optional[str] = None
    pin: Optional[str] = None
    nfc_tag_id: Optional[str] = None
    qr_token: Optional[str] = None


@dataclass
class ImportResult:
    """Outcome of a roster import."""
    success: int = 0
    failure: int = 0
    errors: List[str] = field(default_factory=list)


class WorkerRoster:
    """
    Reads worker rosters from CSV.

    The CSV should have a Name column and optionally Id, Email, PIN, NFC, QR.
    Spanish headers (Nombre, Correo) are accepted.
    """

    COLUMN_ALIASES: Dict[str, List[str]] = {
        "id": ["id", "ID"],
        "name": ["name", "Name", "nombre", "Nombre"],
        "email": ["email", "Email", "correo", "Correo"],
        "pin": ["pin", "PIN", "Pin"],
        "nfc_tag_id": ["nfc_tag_id", "nfc", "NFC"],
        "qr_token": ["qr_token", "qr", "QR"],
    }

    @classmethod
    def _value(cls, row: Dict[str, str], field_name: str) -> Optional[str]:
        for alias in cls.COLUMN_ALIASES[field_name]:
            value = row.get(alias)
            if value is not None and value.strip():
                return value.strip()
        return None

    def read_csv(self, csv_path: Path) -> List[RosterRow]:
        """
        Read roster rows from a CSV file.

        Args:
            csv_path: Path to the CSV file

        Returns:
            Rows with a non-empty name (empty list if the file does not exist)
        """
        if not csv_path.exists():
            return []

        rows: List[RosterRow] = []
        with open(csv_path, 'r', encoding='utf-8-sig') as f:
            reader = csv.DictReader(f)
            for row in reader:
                name = self._value(row, "name")
                if not name:
                    continue
                rows.append(RosterRow(
                    name=name,
                    id=self._value(row, "id"),
                    email=self._value(row, "email"),
                    pin=self._value(row, "pin"),
                    nfc_tag_id=self._value(row, "nfc_tag_id"),
                    qr_token=self._value(row, "qr_token"),
                ))
        return rows

    @staticmethod
    def match_existing(row: RosterRow, workers: Iterable[Worker]) -> Optional[Worker]:
        """Match a row to an existing worker by id, then by email."""
        workers = list(workers)
        if row.id:
            for worker in workers:
                if worker.id == row.id:
                    return worker
        if row.email:
            for worker in workers:
                if worker.email and worker.email.lower() == row.email.lower():
                    return worker
        return None

    @staticmethod
    def to_worker(row: RosterRow, created_at: datetime) -> Worker:
        """Build a new Worker from a roster row."""
        return Worker(
            id=row.id or uuid.uuid4().hex,
            name=row.name,
            created_at=created_at,
            email=row.email,
            pin=row.pin,
            nfc_tag_id=row.nfc_tag_id,
            qr_token=row.qr_token,
        )
