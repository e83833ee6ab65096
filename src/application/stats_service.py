"""
Statistics Service Module

Application layer service that reconciles every in-scope worker over a date
range and aggregates the results into dashboard statistics.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from domain.entities import ClockEvent, DashboardStats, UserStat, Worker
from domain.errors import InvalidDateRangeError
from domain.leave_classifier import LeaveClassifier
from domain.phase_policy import PhaseConfig, PhasePolicy
from domain.reconciliation import DailyReconciler
from infrastructure.attendance_store import AttendanceStore
from infrastructure.logger import get_logger

logger = get_logger("StatsService")


def iter_days(start: date, end: date):
    """Yield each calendar day in [start, end]."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def group_events_by_day(events: List[ClockEvent]) -> Dict[Tuple[str, date], List[ClockEvent]]:
    """Group already-sorted events by (worker_id, calendar day)."""
    grouped: Dict[Tuple[str, date], List[ClockEvent]] = {}
    for event in events:
        grouped.setdefault((event.worker_id, event.timestamp.date()), []).append(event)
    return grouped


class AttendanceStatsService:
    """
    Aggregator over the daily reconciliation engine.

    This service:
    - Resolves one PhaseConfig snapshot and reads each collection once per call
    - Reconciles every (worker, day) in [effective start, range end]
    - Accrues balances only for production days
    """

    def __init__(
        self,
        store: AttendanceStore,
        now: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self._now = now or datetime.now

    def get_dashboard_stats(
        self,
        date_from: date,
        date_to: date,
        worker_id: Optional[str] = "all"
    ) -> DashboardStats:
        """
        Compute statistics for a date range.

        Args:
            date_from: First day of the range
            date_to: Last day of the range (inclusive)
            worker_id: "all" (or None) for every worker, otherwise one worker id

        Returns:
            DashboardStats with per-worker daily breakdowns

        Raises:
            InvalidDateRangeError: If date_from is after date_to
        """
        if isinstance(date_from, datetime):
            date_from = date_from.date()
        if isinstance(date_to, datetime):
            date_to = date_to.date()
        if date_from > date_to:
            raise InvalidDateRangeError(date_from, date_to)

        today = self._now().date()
        policy = PhasePolicy(PhaseConfig.from_mapping(self.store.system_config()))
        start = policy.effective_start(date_from, today)

        if start > date_to:
            logger.info(
                f"Inicio efectivo {start.isoformat()} posterior al fin {date_to.isoformat()}: "
                f"estadísticas vacías"
            )
            return DashboardStats()

        scope = None if worker_id in (None, "all") else worker_id
        workers = self.store.list_workers(scope)
        events = group_events_by_day(self.store.list_clock_events(start, date_to, scope))
        classifier = LeaveClassifier(
            incidents=self.store.list_incidents(start, date_to, scope),
            holidays=self.store.list_holidays(start, date_to),
            closures=self.store.list_closures(start, date_to),
        )
        reconciler = DailyReconciler(classifier, policy)

        logger.info(
            f"Calculando estadísticas {start.isoformat()} - {date_to.isoformat()} "
            f"para {len(workers)} trabajadores"
        )

        stats = DashboardStats(total_users=len(workers))
        for worker in workers:
            stats.add_user(self._worker_stat(worker, start, date_to, today, events, reconciler))

        logger.info(
            f"Estadísticas: trabajado {stats.total_worked_minutes} min, "
            f"esperado {stats.total_expected_minutes} min, balance {stats.balance_minutes} min"
        )
        return stats

    def _worker_stat(
        self,
        worker: Worker,
        start: date,
        end: date,
        today: date,
        events: Dict[Tuple[str, date], List[ClockEvent]],
        reconciler: DailyReconciler
    ) -> UserStat:
        """Reconcile one worker over the range and sum the totals."""
        stat = UserStat(user_id=worker.id, user_name=worker.name)

        for day in iter_days(start, end):
            record = reconciler.reconcile(worker, day, events.get((worker.id, day), []))
            if record is None:
                continue

            stat.worked_minutes += record.worked_minutes
            stat.expected_minutes += record.expected_minutes
            if day <= today:
                stat.expected_to_date_minutes += record.expected_minutes
            if record.incident_kind is not None:
                stat.incidents.add(record.incident_kind)
            if record.is_production:
                stat.balance_minutes += record.balance_minutes

            stat.daily_breakdown.append(record)

        return stat
