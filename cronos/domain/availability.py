"""
Availability resolution: the effective working hours of a professional on a date.

Precedence is strict and first match wins:

1. A date exception for the date. Inactive means no work at all; active
   means its own intervals (or the fallback window) and its own breaks.
2. The weekly rule for the weekday, if present and active.

Exceptions are total overrides. Hours or breaks from the weekly rule never
leak into a day decided by an exception.
"""

import logging
from datetime import date

from .intervals import TimeInterval, day_of_week, parse_time
from .models import DaySource, Professional, ResolvedDay

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_WINDOW = TimeInterval(start=parse_time("09:00"), end=parse_time("18:00"))


class AvailabilityResolver:
    """
    Resolves a professional's working intervals and breaks for a single date.

    Pure and stateless apart from the configured fallback window used by
    active exceptions that carry no hours of their own.
    """

    def __init__(self, fallback_window: TimeInterval = DEFAULT_FALLBACK_WINDOW):
        self.fallback_window = fallback_window

    def resolve(self, professional: Professional, day: date) -> ResolvedDay | None:
        """
        Resolve the effective working day.

        Args:
            professional: Professional whose rules and exceptions are used
            day: Tenant-local calendar date

        Returns:
            ResolvedDay, or None if the professional does not work that day
        """
        exception = professional.exception_for(day)

        if exception is not None:
            logger.debug(
                "Exception on %s decides availability of %s (active=%s)",
                day, professional.id, exception.active
            )
            if not exception.active:
                return None
            return ResolvedDay(
                source=DaySource.EXCEPTION,
                intervals=exception.intervals or (self.fallback_window,),
                breaks=exception.breaks,
            )

        rule = professional.rule_for(day_of_week(day))
        if rule is None or not rule.active:
            return None

        return ResolvedDay(
            source=DaySource.WEEKLY_RULE,
            intervals=rule.intervals,
            breaks=rule.breaks,
        )

    def is_work_day(self, professional: Professional, day: date) -> bool:
        """Check whether the professional works at all on the date."""
        return self.resolve(professional, day) is not None
