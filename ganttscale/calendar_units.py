from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from enum import Enum
from functools import lru_cache
from typing import Iterator

from .constants import DEFAULT_WEEK_START

ONE_DAY = timedelta(days=1)


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    return (end - start).days


def shift_days(value: date, days: int) -> date:
    """Move by whole days, clipped to date.min..date.max."""
    try:
        return value + timedelta(days=days)
    except OverflowError:
        return date.max if days > 0 else date.min


def add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(value: date, years: int) -> date:
    year = value.year + years
    day = min(value.day, calendar.monthrange(year, value.month)[1])
    return date(year, value.month, day)


def quarter_of(value: date) -> int:
    return (value.month - 1) // 3 + 1


class UnitStrategy:
    name = ""
    nominal_days = 1.0

    def period_start(self, value: date) -> date:
        raise NotImplementedError

    def increment(self, value: date) -> date:
        raise NotImplementedError

    def next_start(self, value: date) -> date | None:
        """Start of the following period, or None when it lies past date.max."""
        try:
            return self.increment(value)
        except (OverflowError, ValueError):
            return None

    def period_end(self, value: date) -> date:
        following = self.next_start(self.period_start(value))
        return date.max if following is None else following - ONE_DAY

    def periods(self, start: date, end: date) -> Iterator[tuple[date, date | None]]:
        current = self.period_start(start)
        while current is not None and current <= end:
            following = self.next_start(current)
            yield current, following
            current = following

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class DayUnit(UnitStrategy):
    name = "day"
    nominal_days = 1.0

    def period_start(self, value: date) -> date:
        return value

    def increment(self, value: date) -> date:
        return value + ONE_DAY


class WeekUnit(UnitStrategy):
    name = "week"
    nominal_days = 7.0

    def __init__(self, week_start: int = DEFAULT_WEEK_START) -> None:
        if not 0 <= week_start <= 6:
            raise ValueError(f"week_start must be 0..6, got {week_start}")
        self.week_start = week_start

    def period_start(self, value: date) -> date:
        offset = (value.weekday() - self.week_start) % 7
        return shift_days(value, -offset)

    def increment(self, value: date) -> date:
        return value + timedelta(days=7 - (value.weekday() - self.week_start) % 7)

    def __repr__(self) -> str:
        return f"<WeekUnit week_start={self.week_start}>"


class MonthUnit(UnitStrategy):
    name = "month"
    nominal_days = 30.0

    def period_start(self, value: date) -> date:
        return value.replace(day=1)

    def increment(self, value: date) -> date:
        return add_months(value, 1)


class QuarterUnit(UnitStrategy):
    name = "quarter"
    nominal_days = 90.0

    def period_start(self, value: date) -> date:
        first_month = (quarter_of(value) - 1) * 3 + 1
        return date(value.year, first_month, 1)

    def increment(self, value: date) -> date:
        return add_months(value, 3)


class YearUnit(UnitStrategy):
    name = "year"
    nominal_days = 365.0

    def period_start(self, value: date) -> date:
        return date(value.year, 1, 1)

    def increment(self, value: date) -> date:
        return add_years(value, 1)


class DecadeUnit(UnitStrategy):
    name = "decade"
    nominal_days = 3650.0

    def period_start(self, value: date) -> date:
        # Year 0 does not exist, so the first decade is clipped to years 1-9
        return date(max(1, (value.year // 10) * 10), 1, 1)

    def increment(self, value: date) -> date:
        if value.year < 10:
            return add_years(value, 10 - value.year)
        return add_years(value, 10)


class CalendarUnit(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    DECADE = "decade"

    def strategy(self, week_start: int = DEFAULT_WEEK_START) -> UnitStrategy:
        return _strategy_for(self, week_start)

    @property
    def nominal_days(self) -> float:
        return self.strategy().nominal_days

    def period_start(self, value: date) -> date:
        return self.strategy().period_start(as_date(value))

    def increment(self, value: date) -> date:
        return self.strategy().increment(as_date(value))

    @classmethod
    def parse(cls, value: str | CalendarUnit) -> CalendarUnit:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown calendar unit: {value!r}") from None


_STRATEGY_TYPES: dict[CalendarUnit, type[UnitStrategy]] = {
    CalendarUnit.DAY: DayUnit,
    CalendarUnit.MONTH: MonthUnit,
    CalendarUnit.QUARTER: QuarterUnit,
    CalendarUnit.YEAR: YearUnit,
    CalendarUnit.DECADE: DecadeUnit,
}


@lru_cache(maxsize=None)
def _strategy_for(unit: CalendarUnit, week_start: int) -> UnitStrategy:
    if unit is CalendarUnit.WEEK:
        return WeekUnit(week_start)
    return _STRATEGY_TYPES[unit]()


def align_range(
    start: date,
    end: date,
    unit: CalendarUnit,
    week_start: int = DEFAULT_WEEK_START,
) -> tuple[date, date]:
    strategy = unit.strategy(week_start)
    start = as_date(start)
    end = as_date(end)
    if end < start:
        return start, end
    return strategy.period_start(start), strategy.period_end(end)
