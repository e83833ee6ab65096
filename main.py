"""
Time Clock Attendance

Command line entry point: statistics, absence detection, kiosk clock-in,
roster import and report exports over the SQLite attendance database.
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from config.config_manager import ConfigManager
from domain.entities import ClockMethod
from domain.errors import AttendanceError
from domain.sorting import sort_user_stats
from application.absence_service import AbsenceDetector
from application.clock_service import ClockService
from application.report_service import AttendanceReportService
from application.roster_service import import_roster
from application.stats_service import AttendanceStatsService
from infrastructure.csv_writer import format_duration
from infrastructure.attendance_store import AttendanceStore
from infrastructure.logger import get_logger

logger = get_logger("Main")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Fecha no válida (AAAA-MM-DD): {value}")


def _default_range(args) -> tuple:
    """Current month up to today when no range is given."""
    today = date.today()
    date_from = args.date_from or today.replace(day=1)
    date_to = args.date_to or today
    return date_from, date_to


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timeclock",
        description="Control horario: estadísticas, faltas, fichajes y exportaciones"
    )
    parser.add_argument("--config", type=Path, default=None, help="Ruta del config.json")
    parser.add_argument("--data", type=Path, default=None, help="Ruta de la base de datos SQLite")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_range(sub):
        sub.add_argument("--from", dest="date_from", type=_parse_date, default=None)
        sub.add_argument("--to", dest="date_to", type=_parse_date, default=None)
        sub.add_argument("--worker", default="all", help="Id del trabajador o 'all'")

    stats = subparsers.add_parser("stats", help="Estadísticas del periodo")
    add_range(stats)
    stats.add_argument("--json", action="store_true", help="Salida JSON completa")

    subparsers.add_parser("absences", help="Detectar faltas de asistencia")

    clock = subparsers.add_parser("clock", help="Registrar un fichaje")
    clock.add_argument("identifier", help="PIN, etiqueta NFC, token QR o id")
    clock.add_argument(
        "--method", default=ClockMethod.PIN.value,
        choices=[m.value for m in ClockMethod]
    )
    clock.add_argument("--location", default=None)

    export = subparsers.add_parser("export", help="Exportar CSV, Excel y PDF")
    add_range(export)
    export.add_argument("--out", type=Path, default=None, help="Directorio de salida")
    export.add_argument("--no-pdf", action="store_true")

    roster = subparsers.add_parser("import-roster", help="Importar trabajadores desde CSV")
    roster.add_argument("csv_path", type=Path, nargs="?", default=None)

    return parser


def run(argv=None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    config_manager = ConfigManager(args.config) if args.config else ConfigManager()
    config = config_manager.load()
    if not config_manager.config_path.exists():
        config_manager.save()
        logger.info(f"Configuración por defecto creada en {config_manager.config_path}")
    data_path = args.data or Path(config.paths.data_file)

    try:
        store = AttendanceStore(data_path).load()

        if args.command == "stats":
            date_from, date_to = _default_range(args)
            stats = AttendanceStatsService(store).get_dashboard_stats(date_from, date_to, args.worker)
            stats.user_stats = sort_user_stats(stats.user_stats, config.output_settings.sort_by)
            if args.json:
                print(json.dumps(stats.to_dict(), indent=2, ensure_ascii=False))
            else:
                for stat in stats.user_stats:
                    print(
                        f"{stat.user_name}: trabajado {format_duration(stat.worked_minutes)}, "
                        f"esperado {format_duration(stat.expected_minutes)}, "
                        f"balance {format_duration(stat.balance_minutes)}"
                    )
                print(f"Balance total: {format_duration(stats.balance_minutes)}")

        elif args.command == "absences":
            result = AbsenceDetector(
                store, lookback_days=config.absences.lookback_days
            ).check_and_generate_absences()
            print(f"Faltas generadas: {result.count}")

        elif args.command == "clock":
            result = ClockService(store).clock_in(
                args.identifier, method=args.method, location=args.location
            )
            print(f"{result.worker_name}: {result.direction.value} {result.timestamp:%H:%M}")

        elif args.command == "export":
            date_from, date_to = _default_range(args)
            service = AttendanceReportService(AttendanceStatsService(store))
            params = service.build_params_from_config(
                config, date_from, date_to,
                worker_id=args.worker,
                export_dir=args.out,
                generate_pdf=False if args.no_pdf else None
            )
            result = service.export(params)
            for path in (result.kpi_path, result.detail_path, result.xlsx_path, result.pdf_path):
                if path:
                    print(path)
            if result.error_message:
                print(result.error_message, file=sys.stderr)

        elif args.command == "import-roster":
            csv_path = args.csv_path or (Path(config.paths.roster_csv) if config.paths.roster_csv else None)
            if csv_path is None:
                print("Indique el CSV de trabajadores", file=sys.stderr)
                return 2
            result = import_roster(store, csv_path)
            print(f"Importados: {result.success}. Fallidos: {result.failure}")
            for error in result.errors:
                print(f"  {error}", file=sys.stderr)

    except AttendanceError as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return 1

    return 0


def main():
    """Application entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
