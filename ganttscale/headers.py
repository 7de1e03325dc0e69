from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum

from .calendar_units import ONE_DAY, CalendarUnit, as_date, days_between
from .constants import DEFAULT_WEEK_START, MIN_EFFECTIVE_DAY_WIDTH
from .i18n import DateLabelFormatter, TranslationTable
from .zoom import HeaderPattern

logger = logging.getLogger(__name__)


class HeaderTier(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class HeaderPeriod:
    start: date
    end: date
    width: float
    x_offset: float
    label: str
    tier: HeaderTier

    @property
    def right(self) -> float:
        return self.x_offset + self.width

    @property
    def days(self) -> int:
        return days_between(self.start, self.end) + 1

    def contains_x(self, x: float) -> bool:
        return self.x_offset < x < self.right


@dataclass(frozen=True)
class HeaderLayout:
    primary: tuple[HeaderPeriod, ...]
    secondary: tuple[HeaderPeriod, ...]
    collapsed: bool
    day_width: float
    total_width: float
    pattern: HeaderPattern | None = None
    start: date | None = None
    end: date | None = None

    @classmethod
    def empty(cls, pattern: HeaderPattern | None = None, day_width: float = 0.0) -> HeaderLayout:
        return cls(
            primary=(),
            secondary=(),
            collapsed=False,
            day_width=day_width,
            total_width=0.0,
            pattern=pattern,
        )

    def is_empty(self) -> bool:
        return not self.primary and not self.secondary

    def periods(self, tier: HeaderTier) -> tuple[HeaderPeriod, ...]:
        return self.primary if tier is HeaderTier.PRIMARY else self.secondary

    def min_label_width(self, tier: HeaderTier) -> float:
        if self.pattern is None:
            return 0.0
        if tier is HeaderTier.PRIMARY:
            return self.pattern.min_primary_width
        return self.pattern.min_secondary_width

    def shows_label(self, period: HeaderPeriod) -> bool:
        """Cells narrower than their tier minimum are drawn without text."""
        return period.width >= self.min_label_width(period.tier)


class HeaderPeriodGenerator:
    def __init__(
        self,
        formatter: DateLabelFormatter | None = None,
        week_start: int = DEFAULT_WEEK_START,
        min_day_width: float = MIN_EFFECTIVE_DAY_WIDTH,
    ) -> None:
        self.formatter = formatter or DateLabelFormatter(TranslationTable())
        self.week_start = week_start
        self.min_day_width = min_day_width

    def generate(
        self,
        start: date,
        end: date,
        day_width: float,
        pattern: HeaderPattern,
    ) -> HeaderLayout:
        start = as_date(start)
        end = as_date(end)
        if end < start:
            logger.debug("Empty header range %s..%s", start, end)
            return HeaderLayout.empty(pattern, day_width)
        day_width = self._safe_day_width(day_width)
        span_days = days_between(start, end) + 1
        collapsed = self.should_collapse(pattern, day_width, span_days)

        primary: tuple[HeaderPeriod, ...] = ()
        if pattern.show_primary and not collapsed:
            primary = self.generate_tier(
                start, end, day_width, pattern.primary_unit, pattern.primary_format, HeaderTier.PRIMARY
            )
        secondary = self.generate_tier(
            start, end, day_width, pattern.secondary_unit, pattern.secondary_format, HeaderTier.SECONDARY
        )
        logger.debug(
            "Generated %d primary / %d secondary periods for %s (%s..%s, %.3fpx/day, collapsed=%s)",
            len(primary),
            len(secondary),
            pattern.name,
            start,
            end,
            day_width,
            collapsed,
        )
        return HeaderLayout(
            primary=primary,
            secondary=secondary,
            collapsed=collapsed,
            day_width=day_width,
            total_width=span_days * day_width,
            pattern=pattern,
            start=start,
            end=end,
        )

    def generate_tier(
        self,
        start: date,
        end: date,
        day_width: float,
        unit: CalendarUnit,
        format_key: str,
        tier: HeaderTier,
    ) -> tuple[HeaderPeriod, ...]:
        start = as_date(start)
        end = as_date(end)
        if end < start:
            return ()
        day_width = self._safe_day_width(day_width)
        strategy = unit.strategy(self.week_start)
        periods: list[HeaderPeriod] = []
        # Offsets come from the running sum, never from per-period date math.
        running = 0.0
        current = strategy.period_start(start)
        while current is not None and current <= end:
            following = strategy.next_start(current)
            if following is None:
                logger.warning(
                    "No %s period follows %s, clipping at %s", unit.value, current, date.max
                )
                last = date.max
            else:
                last = following - ONE_DAY
            visible_days = days_between(max(current, start), min(last, end)) + 1
            width = visible_days * day_width
            periods.append(
                HeaderPeriod(
                    start=current,
                    end=last,
                    width=width,
                    x_offset=running,
                    label=self.formatter.format(current, format_key),
                    tier=tier,
                )
            )
            running += width
            current = following
        return tuple(periods)

    def should_collapse(self, pattern: HeaderPattern, day_width: float, span_days: int) -> bool:
        if span_days <= 0:
            return False
        total_width = span_days * day_width
        estimated_units = span_days / pattern.primary_unit.strategy(self.week_start).nominal_days
        # total_width / estimated_units reduces to nominal_days * day_width; the
        # reduced form keeps the comparison exact at the threshold.
        average_width = pattern.primary_unit.strategy(self.week_start).nominal_days * day_width
        logger.debug(
            "Primary %s: %.2f units over %.1fpx, average %.2fpx (min %.2fpx)",
            pattern.primary_unit.value,
            estimated_units,
            total_width,
            average_width,
            pattern.min_primary_width,
        )
        return average_width < pattern.min_primary_width

    def _safe_day_width(self, day_width: float) -> float:
        if day_width is None or not math.isfinite(day_width) or day_width <= 0:
            logger.warning(
                "Degenerate day width %r, clamping to %.3f", day_width, self.min_day_width
            )
            return self.min_day_width
        return float(day_width)
