"""
Report Service Module

Application layer service that orchestrates the statistics exports.
Computes the statistics once and hands them to the CSV, Excel and PDF writers.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from config.config_manager import AppConfig, StatusColors
from domain.entities import DashboardStats
from domain.sorting import sort_user_stats
from application.stats_service import AttendanceStatsService
from infrastructure.logger import get_logger

logger = get_logger("ReportService")


@dataclass
class ExportParams:
    """
    Parameters for an export run.

    Decouples the service from AppConfig; use build_params_from_config()
    to fill it from the persisted configuration.
    """
    date_from: date
    date_to: date
    export_dir: Path
    worker_id: str = "all"

    # Output settings
    sort_by: str = "name"
    status_colors: Optional[StatusColors] = None
    kpi_csv_pattern: str = "export-kpi-{date}.csv"
    detail_csv_pattern: str = "export-detail-{date}.csv"
    xlsx_pattern: str = "asistencia_{start}_{end}.xlsx"

    # PDF generation
    generate_pdf: bool = True
    pdf_pattern: str = "asistencia_{start}_{end}.pdf"
    custom_font_path: Optional[str] = None


@dataclass
class ExportResult:
    """Result of an export run."""
    success: bool
    kpi_path: Path
    detail_path: Path
    xlsx_path: Path
    pdf_path: Optional[Path] = None
    user_count: int = 0
    error_message: str = ""


class AttendanceReportService:
    """
    Application service for exporting attendance statistics.

    This service:
    - Computes DashboardStats once per export
    - Sorts workers according to the output settings
    - Writes KPI CSV, detail CSV, Excel workbook and (optionally) PDF
    """

    def __init__(self, stats_service: AttendanceStatsService):
        self.stats_service = stats_service

    def export(self, params: ExportParams) -> ExportResult:
        """
        Run the export.

        Args:
            params: ExportParams with range, scope and output settings

        Returns:
            ExportResult with the written paths

        Raises:
            InvalidDateRangeError: If date_from is after date_to
            PermissionError: If files cannot be written
        """
        from infrastructure.csv_writer import CsvWriter
        from infrastructure.excel_writer import ExcelWriter
        from infrastructure.pdf_writer import format_filename

        stats = self.stats_service.get_dashboard_stats(
            params.date_from, params.date_to, params.worker_id
        )
        stats.user_stats = sort_user_stats(stats.user_stats, params.sort_by)

        export_dir = Path(params.export_dir)
        export_dir.mkdir(parents=True, exist_ok=True)

        def target(pattern: str) -> Path:
            return export_dir / format_filename(pattern, params.date_from, params.date_to)

        csv_writer = CsvWriter()
        kpi_path = csv_writer.write_kpi(stats.user_stats, target(params.kpi_csv_pattern))
        detail_path = csv_writer.write_detail(stats.user_stats, target(params.detail_csv_pattern))
        logger.info(f"CSV exportados: {kpi_path.name}, {detail_path.name}")

        xlsx_path = ExcelWriter(params.status_colors).create_report(
            stats, params.date_from, params.date_to, target(params.xlsx_pattern)
        )
        logger.info(f"Excel exportado: {xlsx_path}")

        result = ExportResult(
            success=True,
            kpi_path=kpi_path,
            detail_path=detail_path,
            xlsx_path=xlsx_path,
            user_count=len(stats.user_stats),
        )

        if params.generate_pdf:
            try:
                result.pdf_path = self._generate_pdf(params, stats, target(params.pdf_pattern))
            except Exception as e:
                # A failed PDF does not invalidate the other exports
                logger.error(f"Error al generar el PDF: {e}")
                result.error_message = f"PDF no generado: {e}"

        return result

    def _generate_pdf(self, params: ExportParams, stats: DashboardStats, pdf_path: Path) -> Path:
        from infrastructure.pdf_writer import PdfWriter

        pdf_writer = PdfWriter(
            status_colors=params.status_colors,
            custom_font_path=params.custom_font_path
        )
        logger.info(f"Escribiendo PDF: {pdf_path}")
        return pdf_writer.create_report(stats, params.date_from, params.date_to, pdf_path)

    @staticmethod
    def build_params_from_config(
        config: AppConfig,
        date_from: date,
        date_to: date,
        worker_id: str = "all",
        export_dir: Optional[Path] = None,
        generate_pdf: Optional[bool] = None
    ) -> ExportParams:
        """
        Build ExportParams from AppConfig.

        Args:
            config: Application configuration
            date_from: First day of the range
            date_to: Last day of the range
            worker_id: "all" or a worker id
            export_dir: Overrides config.paths.export_dir
            generate_pdf: Overrides config.output_settings.generate_pdf

        Returns:
            ExportParams ready for export()
        """
        output = config.output_settings
        return ExportParams(
            date_from=date_from,
            date_to=date_to,
            worker_id=worker_id,
            export_dir=Path(export_dir or config.paths.export_dir),
            sort_by=output.sort_by,
            status_colors=config.status_colors,
            kpi_csv_pattern=output.kpi_csv_pattern,
            detail_csv_pattern=output.detail_csv_pattern,
            xlsx_pattern=output.xlsx_pattern,
            generate_pdf=output.generate_pdf if generate_pdf is None else generate_pdf,
            pdf_pattern=output.pdf_pattern,
            custom_font_path=config.paths.custom_font_path or None,
        )
