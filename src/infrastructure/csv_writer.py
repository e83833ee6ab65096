"""
CSV Writer Module

Writes the KPI and detailed daily CSV exports (UTF-8 with BOM so that
spreadsheet applications detect the encoding).
"""

import csv
from pathlib import Path
from typing import List

from domain.entities import DayStatus, UserStat

# Minutes of a standard working day, used to weight absences in the score
ABSENCE_PENALTY_MINUTES = 480

KPI_HEADER = [
    "Trabajador", "Horas Trabajadas", "Horas Esperadas", "Balance Minutos",
    "Cumplimiento %", "Incidencias Total", "Faltas", "MVP Score",
]
DETAIL_HEADER = ["Trabajador", "ID", "Fecha", "Dia", "Entrada / Salida", "Total Trabajado"]
SIGNATURE_FOOTER = "Firma del Trabajador: ____________________________________"


def format_duration(minutes: int) -> str:
    """Format minutes as "<h>h <m>m", with a leading "-" when negative."""
    sign = "-" if minutes < 0 else ""
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours}h {mins}m"


def compliance_percent(stat: UserStat) -> str:
    """Worked over expected, one decimal, "0.0" when nothing was expected."""
    if stat.expected_minutes > 0:
        return f"{stat.worked_minutes / stat.expected_minutes * 100:.1f}"
    return "0.0"


def kpi_score(stat: UserStat) -> int:
    """Balance minus a full working day per unexcused absence."""
    return stat.balance_minutes - stat.incidents.absence * ABSENCE_PENALTY_MINUTES


class CsvWriter:
    """Writes statistics exports as CSV."""

    def write_kpi(self, user_stats: List[UserStat], output_path: Path) -> Path:
        """One row per worker with totals, compliance and score."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8-sig', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(KPI_HEADER)
            for stat in user_stats:
                writer.writerow([
                    stat.user_name,
                    format_duration(stat.worked_minutes),
                    format_duration(stat.expected_minutes),
                    stat.balance_minutes,
                    f"{compliance_percent(stat)}%",
                    stat.incidents.total,
                    stat.incidents.absence,
                    kpi_score(stat),
                ])
        return output_path

    def write_detail(self, user_stats: List[UserStat], output_path: Path) -> Path:
        """One row per worker per reconciled day, followed by a signature line."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8-sig', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(DETAIL_HEADER)
            for stat in user_stats:
                for record in stat.daily_breakdown:
                    intervals = " | ".join(f"{i.start}-{i.end}" for i in record.intervals)
                    if not intervals and record.status not in (DayStatus.OK, DayStatus.MISSING):
                        intervals = record.status.value
                    writer.writerow([
                        stat.user_name,
                        stat.user_id,
                        record.date.isoformat(),
                        record.day_name,
                        intervals,
                        format_duration(record.worked_minutes),
                    ])
            f.write("\n\n\n" + SIGNATURE_FOOTER + "\n")
        return output_path
