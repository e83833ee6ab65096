"""
Excel Writer Module

Generates formatted Excel attendance reports with styling.
Applies a fill color per day status.
"""

from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config.config_manager import StatusColors
from domain.entities import DAY_NAMES, DailyRecord, DashboardStats, DayStatus
from domain.schedule_resolver import day_of_week
from infrastructure.csv_writer import format_duration


class ExcelWriter:
    """
    Generates formatted Excel statistics reports.

    Output format:
    - "Resumen" sheet: one row per worker with totals and incident counts,
      followed by a company-wide totals row
    - "Detalle" sheet: one row per worker, one column per day; each cell
      shows worked time (or the status) and is filled by status color
    """

    COLORS = {
        'green': PatternFill(start_color='90EE90', end_color='90EE90', fill_type='solid'),
        'red': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'yellow': PatternFill(start_color='FFD700', end_color='FFD700', fill_type='solid'),
        'orange': PatternFill(start_color='FFA500', end_color='FFA500', fill_type='solid'),
        'blue': PatternFill(start_color='6B8CFF', end_color='6B8CFF', fill_type='solid'),
        'purple': PatternFill(start_color='DDA0DD', end_color='DDA0DD', fill_type='solid'),
        'pink': PatternFill(start_color='FFB6C1', end_color='FFB6C1', fill_type='solid'),
        'gray': PatternFill(start_color='D3D3D3', end_color='D3D3D3', fill_type='solid'),
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
    }

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    SUMMARY_HEADERS = [
        "Trabajador", "Trabajado", "Esperado", "Esperado a la fecha", "Balance",
        "Vacaciones", "Bajas", "Faltas", "Otras",
    ]

    def __init__(self, status_colors: StatusColors = None):
        self.status_colors = status_colors or StatusColors()
        self.wb: Optional[Workbook] = None

    def _get_fill(self, color_value: str) -> Optional[PatternFill]:
        """Get PatternFill from a color name (None for 'none' or unknown)."""
        if not color_value or color_value in ('none', 'transparent'):
            return None
        return self.COLORS.get(color_value)

    def _status_color(self, status: DayStatus) -> str:
        return getattr(self.status_colors, f"{status.value}_color")

    def _write_header_cell(self, ws, row: int, col: int, value: str, rotate: bool = False):
        cell = ws.cell(row, col, value)
        cell.font = Font(bold=True, color='FFFFFF', size=9 if rotate else 11)
        cell.fill = self.COLORS['header']
        cell.alignment = Alignment(horizontal='center', vertical='center',
                                   text_rotation=90 if rotate else 0)
        cell.border = self.BORDER
        return cell

    def create_report(
        self,
        stats: DashboardStats,
        start: date,
        end: date,
        output_path: Path
    ) -> Path:
        """
        Create the statistics workbook.

        Args:
            stats: Aggregated statistics (user_stats already sorted)
            start: First day of the reported range
            end: Last day of the reported range
            output_path: Path to save the Excel file

        Returns:
            Path to the created file
        """
        self.wb = Workbook()

        # Remove default sheet
        self.wb.remove(self.wb.active)

        self._write_summary_sheet(self.wb.create_sheet("Resumen"), stats)
        self._write_detail_sheet(self.wb.create_sheet("Detalle"), stats, start, end)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        return output_path

    def _write_summary_sheet(self, ws, stats: DashboardStats):
        """Write one row per worker plus a totals row."""
        for col, title in enumerate(self.SUMMARY_HEADERS, start=1):
            self._write_header_cell(ws, 1, col, title)

        row = 2
        for stat in stats.user_stats:
            values = [
                stat.user_name,
                format_duration(stat.worked_minutes),
                format_duration(stat.expected_minutes),
                format_duration(stat.expected_to_date_minutes),
                format_duration(stat.balance_minutes),
                stat.incidents.vacation,
                stat.incidents.sick,
                stat.incidents.absence,
                stat.incidents.other,
            ]
            for col, value in enumerate(values, start=1):
                cell = ws.cell(row, col, value)
                cell.border = self.BORDER
                cell.alignment = Alignment(horizontal='left' if col == 1 else 'center')
            # Balance in debt is highlighted
            if stat.balance_minutes < 0:
                ws.cell(row, 5).fill = self.COLORS['red']
            row += 1

        totals = [
            "TOTAL",
            format_duration(stats.total_worked_minutes),
            format_duration(stats.total_expected_minutes),
            format_duration(stats.total_expected_to_date_minutes),
            format_duration(stats.balance_minutes),
            stats.incident_counts.vacation,
            stats.incident_counts.sick,
            stats.incident_counts.absence,
            stats.incident_counts.other,
        ]
        for col, value in enumerate(totals, start=1):
            cell = ws.cell(row, col, value)
            cell.font = Font(bold=True)
            cell.border = self.BORDER
            cell.alignment = Alignment(horizontal='left' if col == 1 else 'center')

        ws.column_dimensions['A'].width = 24
        for col in range(2, len(self.SUMMARY_HEADERS) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 14

    def _write_detail_sheet(self, ws, stats: DashboardStats, start: date, end: date):
        """Write the day-by-day grid."""
        days: List[date] = []
        day = start
        while day <= end:
            days.append(day)
            day = date.fromordinal(day.toordinal() + 1)

        day_to_col = {d: col + 2 for col, d in enumerate(days)}

        self._write_header_cell(ws, 1, 1, "Trabajador")
        for d in days:
            label = f"{d.day:02d}/{d.month:02d} ({DAY_NAMES[day_of_week(d)][:3]})"
            self._write_header_cell(ws, 1, day_to_col[d], label, rotate=True)

        row = 2
        for stat in stats.user_stats:
            name_cell = ws.cell(row, 1, stat.user_name)
            name_cell.font = Font(bold=True)
            name_cell.border = self.BORDER

            records: Dict[date, DailyRecord] = {r.date: r for r in stat.daily_breakdown}
            for d in days:
                cell = ws.cell(row, day_to_col[d])
                cell.border = self.BORDER
                cell.alignment = Alignment(horizontal='center')
                record = records.get(d)
                if record is None:
                    # Before the worker existed
                    continue
                cell.value = self._cell_text(record)
                fill = self._get_fill(self._status_color(record.status))
                if fill:
                    cell.fill = fill
            row += 1

        ws.column_dimensions['A'].width = 24
        for col in range(2, len(days) + 2):
            ws.column_dimensions[get_column_letter(col)].width = 9
        ws.row_dimensions[1].height = 60

    @staticmethod
    def _cell_text(record: DailyRecord) -> str:
        if record.status == DayStatus.INCIDENT:
            return record.incident_type or record.status.value
        if record.status == DayStatus.HOLIDAY:
            return record.holiday_name or record.status.value
        if record.status == DayStatus.OFF:
            return ""
        return format_duration(record.worked_minutes)
