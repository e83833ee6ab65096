"""
Phase-In Policy Module

Decides which days accrue into the running balance ("production") and which
are only informational ("pilot"), from an immutable snapshot of the
system configuration.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Mapping, Optional

from infrastructure.logger import get_logger

logger = get_logger("PhasePolicy")

PILOT_START_KEY = "PILOT_START_DATE"
PRODUCTION_START_KEY = "PRODUCTION_START_DATE"


class Phase(Enum):
    """Accounting phase of a day."""
    PILOT = "pilot"
    PRODUCTION = "production"


def parse_config_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a config date string ("YYYY-MM-DD" or an ISO date-time).

    Returns:
        The calendar date, or None when empty or unparsable
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.warning(f"Fecha de configuración no válida ignorada: {value!r}")
        return None


@dataclass(frozen=True)
class PhaseConfig:
    """Snapshot of the phase-in settings, resolved once per invocation."""
    pilot_start: Optional[date] = None
    production_start: Optional[date] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "PhaseConfig":
        """Build the snapshot from the SystemConfig key/value map."""
        return cls(
            pilot_start=parse_config_date(values.get(PILOT_START_KEY)),
            production_start=parse_config_date(values.get(PRODUCTION_START_KEY)),
        )


class PhasePolicy:
    """
    Applies a PhaseConfig to date ranges and days.

    Rules:
    - Production active (on/before today): iteration starts at production start
    - Production in the future: iteration starts at pilot start, or at the
      production start when no pilot date exists
    - Only pilot: iteration starts at pilot start, every day is pilot
    - Neither: no clamping, every day is production
    """

    def __init__(self, config: PhaseConfig):
        self.config = config

    def effective_start(self, range_start: date, today: date) -> date:
        """
        Clamp the requested range start to the configured phase-in dates.

        Args:
            range_start: Requested first day
            today: Current calendar day

        Returns:
            The first day to iterate
        """
        prod = self.config.production_start
        pilot = self.config.pilot_start
        start = range_start

        if prod is not None:
            if prod <= today:
                start = max(start, prod)
            elif pilot is not None:
                start = max(start, pilot)
            else:
                start = max(start, prod)
        elif pilot is not None:
            start = max(start, pilot)

        return start

    def phase(self, day: date) -> Phase:
        """Phase of a single day."""
        prod = self.config.production_start
        if prod is not None:
            return Phase.PILOT if day < prod else Phase.PRODUCTION
        if self.config.pilot_start is not None:
            return Phase.PILOT
        return Phase.PRODUCTION

    def is_production(self, day: date) -> bool:
        return self.phase(day) == Phase.PRODUCTION
