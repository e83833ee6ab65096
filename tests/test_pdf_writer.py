"""
Unit tests for PdfWriter font discovery and layout helpers.
"""

import pytest
from unittest.mock import patch
from pathlib import Path
from datetime import date
import tempfile

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config.config_manager import StatusColors
from domain.entities import DailyRecord, DashboardStats, DayStatus, UserStat, WorkInterval
from infrastructure.pdf_writer import (
    FALLBACK_FONT, AttendancePdf, PdfWriter, find_unicode_font
)


class TestFindUnicodeFont:
    """Tests for font discovery."""

    def test_custom_path_wins(self):
        """Test that an existing custom font is used."""
        with tempfile.TemporaryDirectory() as tmpdir:
            font = Path(tmpdir) / "custom.ttf"
            font.write_bytes(b"")
            assert find_unicode_font(str(font)) == font

    def test_missing_custom_path_falls_through(self):
        """Test a missing custom font with no system fonts."""
        with patch("infrastructure.pdf_writer._get_platform_fonts", return_value=[]):
            assert find_unicode_font("/no/such/font.ttf") is None

    def test_no_font_uses_helvetica(self):
        """Test the Helvetica fallback."""
        with patch("infrastructure.pdf_writer.find_unicode_font", return_value=None):
            pdf = AttendancePdf(title="Informe")
        assert pdf.font_family_name == FALLBACK_FONT


class TestPdfWriterHelpers:

    def setup_method(self):
        self.writer = PdfWriter(status_colors=StatusColors(off_color="none"))

    def test_status_colors(self):
        """Test RGB lookup per status, including 'none'."""
        assert self.writer._status_rgb(DayStatus.OK) == PdfWriter.COLORS['green']
        assert self.writer._status_rgb(DayStatus.MISSING) == PdfWriter.COLORS['red']
        assert self.writer._status_rgb(DayStatus.OFF) is None

    def test_detail_values_for_holiday(self):
        """Test detail cells for a holiday."""
        record = DailyRecord(
            date=date(2024, 3, 19), day_name="martes", worked_minutes=0,
            expected_minutes=0, status=DayStatus.HOLIDAY, holiday_name="San José"
        )
        values = self.writer._detail_values(record)

        assert values[0] == "19/03/2024"
        assert values[2] == ""
        assert values[-1] == "San José"

    def test_detail_values_for_worked_day(self):
        """Test detail cells for a day with overtime."""
        record = DailyRecord(
            date=date(2024, 3, 4), day_name="lunes", worked_minutes=500,
            expected_minutes=480, status=DayStatus.EXTRA,
            intervals=[WorkInterval("08:00", "16:20")]
        )
        values = self.writer._detail_values(record)

        assert values[2] == "08:00-16:20"
        assert values[5] == "0h 20m"
        assert values[-1] == "Horas extra"


class TestCreateReport:

    @pytest.mark.parametrize("user_count", [0, 3])
    def test_writes_file(self, user_count):
        """Test report creation with and without workers."""
        stats = DashboardStats()
        for index in range(user_count):
            stats.add_user(UserStat(user_id=f"w{index}", user_name=f"Trabajador {index}"))

        with patch("infrastructure.pdf_writer.find_unicode_font", return_value=None):
            with tempfile.TemporaryDirectory() as tmpdir:
                output_path = Path(tmpdir) / "sub" / "report.pdf"
                PdfWriter().create_report(stats, date(2024, 3, 1), date(2024, 3, 31), output_path)

                assert output_path.exists()
                assert output_path.stat().st_size > 0

    def test_long_breakdown_paginates(self):
        """Test a month-long table across pages."""
        stat = UserStat(user_id="w1", user_name="Ana")
        for day in range(1, 32):
            stat.daily_breakdown.append(DailyRecord(
                date=date(2024, 3, day), day_name="lunes", worked_minutes=480,
                expected_minutes=480, status=DayStatus.OK,
                intervals=[WorkInterval("08:00", "16:00")]
            ))
        stats = DashboardStats()
        stats.add_user(stat)

        with patch("infrastructure.pdf_writer.find_unicode_font", return_value=None):
            with tempfile.TemporaryDirectory() as tmpdir:
                output_path = Path(tmpdir) / "report.pdf"
                PdfWriter().create_report(stats, date(2024, 3, 1), date(2024, 3, 31), output_path)
                assert output_path.read_bytes()[:4] == b"%PDF"
