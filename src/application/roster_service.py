"""
Roster Service Module

Imports a worker roster CSV into the store, upserting by id then email.
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from domain.errors import AttendanceError
from domain.worker_roster import ImportResult, WorkerRoster
from infrastructure.attendance_store import AttendanceStore
from infrastructure.logger import get_logger

logger = get_logger("RosterService")


def import_roster(
    store: AttendanceStore,
    csv_path: Path,
    now: Optional[Callable[[], datetime]] = None
) -> ImportResult:
    """
    Import workers from a roster CSV.

    Rows that collide with another worker's PIN/NFC/QR are counted as
    failures and the import continues.

    Returns:
        ImportResult with success/failure counts
    """
    now = now or datetime.now
    roster = WorkerRoster()
    result = ImportResult()

    for row in roster.read_csv(csv_path):
        existing = roster.match_existing(row, store.list_workers())
        try:
            if existing is not None:
                store.update_worker(replace(
                    existing,
                    name=row.name,
                    email=row.email,
                    pin=row.pin,
                    nfc_tag_id=row.nfc_tag_id,
                    qr_token=row.qr_token,
                ))
            else:
                store.add_worker(roster.to_worker(row, now()))
            result.success += 1
        except AttendanceError as e:
            logger.warning(f"No se pudo importar a {row.name}: {e}")
            result.failure += 1
            result.errors.append(f"{row.name}: {e}")

    logger.info(f"Importados {result.success} trabajadores. Fallidos: {result.failure}")
    return result
