"""
PDF Writer Module

Generates formatted PDF attendance reports using fpdf2.
Mirrors the Excel report: a company summary table followed by one
daily detail table per worker, color coded by day status.
"""

import sys
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF

from config.config_manager import StatusColors
from domain.entities import DailyRecord, DashboardStats, DayStatus, UserStat
from infrastructure.csv_writer import SIGNATURE_FOOTER, format_duration
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")


# ==============================================================================
# Font Configuration
# ==============================================================================
WINDOWS_FONT_PATHS: List[Path] = [
    Path("C:/Windows/Fonts/arial.ttf"),
    Path("C:/Windows/Fonts/segoeui.ttf"),
    Path("C:/Windows/Fonts/calibri.ttf"),
]

MACOS_FONT_PATHS: List[Path] = [
    Path("/Library/Fonts/Arial Unicode.ttf"),
    Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
    Path("/System/Library/Fonts/Helvetica.ttc"),
]

LINUX_FONT_PATHS: List[Path] = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf"),
    Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
]

FALLBACK_FONT = "Helvetica"


def find_unicode_font(custom_font_path: Optional[str] = None) -> Optional[Path]:
    """
    Search for a TrueType font with accented Latin glyphs.

    The custom path wins when it exists, then the platform list is tried.
    """
    if custom_font_path:
        custom_path = Path(custom_font_path)
        if custom_path.exists():
            logger.info(f"Usando fuente personalizada: {custom_path}")
            return custom_path
        else:
            logger.warning(f"La ruta de fuente personalizada no existe: {custom_path}")

    for font_path in _get_platform_fonts():
        if font_path.exists():
            logger.debug(f"Fuente del sistema encontrada: {font_path}")
            return font_path

    return None


def _get_platform_fonts() -> List[Path]:
    """Get the font search list for the current platform."""
    if sys.platform == 'win32':
        return WINDOWS_FONT_PATHS
    elif sys.platform == 'darwin':
        return MACOS_FONT_PATHS
    else:
        return LINUX_FONT_PATHS


# ==============================================================================
# AttendancePdf Class (A4 Landscape)
# ==============================================================================
class AttendancePdf(FPDF):
    """
    Custom FPDF class for A4 landscape statistics reports.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", custom_font_path: Optional[str] = None):
        # A4 Landscape: 297mm x 210mm
        super().__init__(orientation='L', unit='mm', format='A4')
        self.title_text = title
        self._setup_font(custom_font_path)

    def _setup_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load a TrueType font if available, otherwise keep Helvetica."""
        font_path = find_unicode_font(custom_font_path)

        if font_path:
            try:
                self.add_font("ReportFont", "", str(font_path))
                self._font_family = "ReportFont"
                self._font_loaded = True
                logger.info(f"Fuente cargada: {font_path.name}")
            except Exception as e:
                logger.warning(f"No se pudo cargar la fuente {font_path}: {e}")
                self._font_family = FALLBACK_FONT
                self._font_loaded = False
        else:
            logger.debug("Sin fuente TrueType, se usa Helvetica")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    def header(self) -> None:
        """Draw page header with centered title."""
        self.set_font(self._font_family, '', 14)
        self.set_text_color(0, 0, 0)
        self.cell(0, 10, self.title_text, align='C', new_x='LMARGIN', new_y='NEXT')
        self.ln(2)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.set_text_color(0, 0, 0)
        self.cell(0, 10, f'Página {self.page_no()}/{{nb}}', align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates PDF statistics reports that replicate the Excel content.

    Features:
    - Company summary table on the first page
    - One block per worker with totals and the day-by-day breakdown
    - Status cell colored according to StatusColors
    """

    # RGB Color definitions (matching ExcelWriter)
    COLORS: Dict[str, Tuple[int, int, int]] = {
        'green': (144, 238, 144),
        'red': (255, 107, 107),
        'yellow': (255, 215, 0),
        'orange': (255, 165, 0),
        'blue': (107, 140, 255),
        'purple': (221, 160, 221),
        'pink': (255, 182, 193),
        'gray': (211, 211, 211),
        'header': (68, 114, 196),
        'white': (255, 255, 255),
    }

    STATUS_LABELS: Dict[DayStatus, str] = {
        DayStatus.OK: "Correcto",
        DayStatus.MISSING: "Faltan horas",
        DayStatus.EXTRA: "Horas extra",
        DayStatus.INCIDENT: "Incidencia",
        DayStatus.HOLIDAY: "Festivo",
        DayStatus.OFF: "Libre",
    }

    # Layout constants (mm) for A4 Landscape
    PAGE_HEIGHT = 210
    BOTTOM_LIMIT = PAGE_HEIGHT - 18
    ROW_HEIGHT = 6

    SUMMARY_COLUMNS: List[Tuple[str, float]] = [
        ("Trabajador", 60), ("Trabajado", 28), ("Esperado", 28),
        ("A la fecha", 28), ("Balance", 28), ("Vacaciones", 22),
        ("Bajas", 18), ("Faltas", 18), ("Otras", 18),
    ]

    DETAIL_COLUMNS: List[Tuple[str, float]] = [
        ("Fecha", 26), ("Día", 24), ("Entrada / Salida", 92),
        ("Trabajado", 26), ("Esperado", 26), ("Balance", 26), ("Estado", 44),
    ]

    THIN_LINE = 0.2

    def __init__(
        self,
        status_colors: Optional[StatusColors] = None,
        custom_font_path: Optional[str] = None
    ):
        self._status_colors = status_colors or StatusColors()
        self._custom_font_path = custom_font_path

    def _get_rgb(self, color_value: str) -> Optional[Tuple[int, int, int]]:
        """Get RGB tuple from a color name."""
        if not color_value or color_value in ('none', 'transparent'):
            return None
        return self.COLORS.get(color_value)

    def _status_rgb(self, status: DayStatus) -> Optional[Tuple[int, int, int]]:
        return self._get_rgb(getattr(self._status_colors, f"{status.value}_color"))

    def create_report(
        self,
        stats: DashboardStats,
        start: date,
        end: date,
        output_path: Path
    ) -> Path:
        """
        Create the PDF report.

        Args:
            stats: Aggregated statistics (user_stats already sorted)
            start: First day of the reported range
            end: Last day of the reported range
            output_path: Path to save the PDF

        Returns:
            Path to the created file
        """
        title = f"Informe de asistencia {start.strftime('%d/%m/%Y')} - {end.strftime('%d/%m/%Y')}"
        pdf = AttendancePdf(title=title, custom_font_path=self._custom_font_path)
        pdf.alias_nb_pages()
        pdf.set_auto_page_break(auto=False)
        pdf.set_line_width(self.THIN_LINE)

        pdf.add_page()
        self._draw_summary(pdf, stats)

        for stat in stats.user_stats:
            pdf.add_page()
            self._draw_worker(pdf, stat)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"Informe PDF guardado: {output_path}")
        return output_path

    # ==========================================================================
    # Drawing helpers
    # ==========================================================================
    def _draw_header_row(self, pdf: AttendancePdf, columns: List[Tuple[str, float]]) -> None:
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(255, 255, 255)
        for title, width in columns:
            pdf.cell(width, self.ROW_HEIGHT + 1, title, border=1, align='C', fill=True)
        pdf.ln(self.ROW_HEIGHT + 1)
        pdf.set_text_color(0, 0, 0)

    def _draw_row(
        self,
        pdf: AttendancePdf,
        columns: List[Tuple[str, float]],
        values: List[str],
        fills: Optional[Dict[int, Tuple[int, int, int]]] = None
    ) -> None:
        fills = fills or {}
        pdf.set_font(pdf.font_family_name, '', 8)
        for index, ((_, width), value) in enumerate(zip(columns, values)):
            fill = fills.get(index)
            if fill:
                pdf.set_fill_color(*fill)
            align = 'L' if index == 0 else 'C'
            pdf.cell(width, self.ROW_HEIGHT, value, border=1, align=align, fill=bool(fill))
        pdf.ln(self.ROW_HEIGHT)

    def _ensure_space(
        self,
        pdf: AttendancePdf,
        columns: List[Tuple[str, float]],
        height: float
    ) -> None:
        """Break the page and repeat the header row when the next row would overflow."""
        if pdf.get_y() + height > self.BOTTOM_LIMIT:
            pdf.add_page()
            self._draw_header_row(pdf, columns)

    def _draw_summary(self, pdf: AttendancePdf, stats: DashboardStats) -> None:
        pdf.set_font(pdf.font_family_name, '', 12)
        pdf.cell(0, 8, f"Resumen ({stats.total_users} trabajadores)", new_x='LMARGIN', new_y='NEXT')
        self._draw_header_row(pdf, self.SUMMARY_COLUMNS)

        for stat in stats.user_stats:
            self._ensure_space(pdf, self.SUMMARY_COLUMNS, self.ROW_HEIGHT)
            fills = {4: self.COLORS['red']} if stat.balance_minutes < 0 else None
            self._draw_row(pdf, self.SUMMARY_COLUMNS, self._summary_values(stat), fills)

        self._ensure_space(pdf, self.SUMMARY_COLUMNS, self.ROW_HEIGHT)
        self._draw_row(pdf, self.SUMMARY_COLUMNS, [
            "TOTAL",
            format_duration(stats.total_worked_minutes),
            format_duration(stats.total_expected_minutes),
            format_duration(stats.total_expected_to_date_minutes),
            format_duration(stats.balance_minutes),
            str(stats.incident_counts.vacation),
            str(stats.incident_counts.sick),
            str(stats.incident_counts.absence),
            str(stats.incident_counts.other),
        ], {i: self.COLORS['gray'] for i in range(len(self.SUMMARY_COLUMNS))})

    @staticmethod
    def _summary_values(stat: UserStat) -> List[str]:
        return [
            stat.user_name,
            format_duration(stat.worked_minutes),
            format_duration(stat.expected_minutes),
            format_duration(stat.expected_to_date_minutes),
            format_duration(stat.balance_minutes),
            str(stat.incidents.vacation),
            str(stat.incidents.sick),
            str(stat.incidents.absence),
            str(stat.incidents.other),
        ]

    def _draw_worker(self, pdf: AttendancePdf, stat: UserStat) -> None:
        pdf.set_font(pdf.font_family_name, '', 12)
        pdf.cell(0, 8, stat.user_name, new_x='LMARGIN', new_y='NEXT')
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.cell(
            0, 6,
            f"Trabajado: {format_duration(stat.worked_minutes)}   "
            f"Esperado: {format_duration(stat.expected_minutes)}   "
            f"Balance: {format_duration(stat.balance_minutes)}   "
            f"Incidencias: {stat.incidents.total}",
            new_x='LMARGIN', new_y='NEXT'
        )
        pdf.ln(2)

        self._draw_header_row(pdf, self.DETAIL_COLUMNS)
        for record in stat.daily_breakdown:
            self._ensure_space(pdf, self.DETAIL_COLUMNS, self.ROW_HEIGHT)
            fill = self._status_rgb(record.status)
            fills = {len(self.DETAIL_COLUMNS) - 1: fill} if fill else None
            self._draw_row(pdf, self.DETAIL_COLUMNS, self._detail_values(record), fills)

        if pdf.get_y() + 20 > self.BOTTOM_LIMIT:
            pdf.add_page()
        pdf.ln(12)
        pdf.set_font(pdf.font_family_name, '', 9)
        pdf.cell(0, 6, SIGNATURE_FOOTER, new_x='LMARGIN', new_y='NEXT')

    def _detail_values(self, record: DailyRecord) -> List[str]:
        intervals = " | ".join(f"{i.start}-{i.end}" for i in record.intervals)
        status = self.STATUS_LABELS[record.status]
        if record.status == DayStatus.INCIDENT and record.incident_type:
            status = record.incident_type
        elif record.status == DayStatus.HOLIDAY and record.holiday_name:
            status = record.holiday_name
        return [
            record.date.strftime('%d/%m/%Y'),
            record.day_name,
            intervals,
            format_duration(record.worked_minutes),
            format_duration(record.expected_minutes),
            format_duration(record.balance_minutes),
            status,
        ]


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, start: date, end: date) -> str:
    """Format filename pattern with {start}, {end} and {date} placeholders."""
    return pattern.format(
        start=start.isoformat(),
        end=end.isoformat(),
        date=end.isoformat()
    )
