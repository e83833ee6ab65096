"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between dataclasses and JSON persistence.

The phase-in dates (PILOT_START_DATE / PRODUCTION_START_DATE) are not part of
this file: they live in the data store's system configuration.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")


@dataclass
class StatusColors:
    """Fill colors for each day status in exported reports.

    Color values: 'red', 'orange', 'yellow', 'green', 'blue', 'purple', 'pink', 'gray', 'none'
    """
    ok_color: str = "green"
    missing_color: str = "red"
    extra_color: str = "blue"
    incident_color: str = "orange"
    holiday_color: str = "purple"
    off_color: str = "gray"


@dataclass
class Paths:
    """File paths configuration."""
    data_file: str = "timeclock.db"
    export_dir: str = "exports"
    roster_csv: str = ""
    custom_font_path: str = ""  # Custom TTF font for PDF generation


@dataclass
class AbsenceSettings:
    """Absence auto-detection settings."""
    lookback_days: int = 30


@dataclass
class OutputSettings:
    """Output settings for exported reports."""
    kpi_csv_pattern: str = "export-kpi-{date}.csv"
    detail_csv_pattern: str = "export-detail-{date}.csv"
    xlsx_pattern: str = "asistencia_{start}_{end}.xlsx"
    pdf_pattern: str = "asistencia_{start}_{end}.pdf"
    generate_pdf: bool = True

    # Orden de trabajadores: "name" o "balance"
    sort_by: str = "name"


@dataclass
class AppConfig:
    """Main application configuration container."""
    paths: Paths = field(default_factory=Paths)
    absences: AbsenceSettings = field(default_factory=AbsenceSettings)
    status_colors: StatusColors = field(default_factory=StatusColors)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"No se pudo leer la configuración, se usan valores por defecto: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "paths": {
                "data_file": config.paths.data_file,
                "export_dir": config.paths.export_dir,
                "roster_csv": config.paths.roster_csv,
                "custom_font_path": config.paths.custom_font_path
            },
            "absences": {
                "lookback_days": config.absences.lookback_days
            },
            "status_colors": {
                "ok_color": config.status_colors.ok_color,
                "missing_color": config.status_colors.missing_color,
                "extra_color": config.status_colors.extra_color,
                "incident_color": config.status_colors.incident_color,
                "holiday_color": config.status_colors.holiday_color,
                "off_color": config.status_colors.off_color
            },
            "output_settings": {
                "kpi_csv_pattern": config.output_settings.kpi_csv_pattern,
                "detail_csv_pattern": config.output_settings.detail_csv_pattern,
                "xlsx_pattern": config.output_settings.xlsx_pattern,
                "pdf_pattern": config.output_settings.pdf_pattern,
                "generate_pdf": config.output_settings.generate_pdf,
                "sort_by": config.output_settings.sort_by
            }
        }

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        paths_data = data.get("paths", {})
        absences_data = data.get("absences", {})
        colors_data = data.get("status_colors", {})
        output_data = data.get("output_settings", {})

        paths = Paths(
            data_file=paths_data.get("data_file", "timeclock.db"),
            export_dir=paths_data.get("export_dir", "exports"),
            roster_csv=paths_data.get("roster_csv", ""),
            custom_font_path=paths_data.get("custom_font_path", "")
        )

        absences = AbsenceSettings(
            lookback_days=int(absences_data.get("lookback_days", 30))
        )

        status_colors = StatusColors(
            ok_color=colors_data.get("ok_color", "green"),
            missing_color=colors_data.get("missing_color", "red"),
            extra_color=colors_data.get("extra_color", "blue"),
            incident_color=colors_data.get("incident_color", "orange"),
            holiday_color=colors_data.get("holiday_color", "purple"),
            off_color=colors_data.get("off_color", "gray")
        )

        output_settings = OutputSettings(
            kpi_csv_pattern=output_data.get("kpi_csv_pattern", "export-kpi-{date}.csv"),
            detail_csv_pattern=output_data.get("detail_csv_pattern", "export-detail-{date}.csv"),
            xlsx_pattern=output_data.get("xlsx_pattern", "asistencia_{start}_{end}.xlsx"),
            pdf_pattern=output_data.get("pdf_pattern", "asistencia_{start}_{end}.pdf"),
            generate_pdf=output_data.get("generate_pdf", True),
            sort_by=output_data.get("sort_by", "name")
        )

        return AppConfig(
            paths=paths,
            absences=absences,
            status_colors=status_colors,
            output_settings=output_settings
        )
