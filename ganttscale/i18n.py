from __future__ import annotations

import logging
from datetime import date
from types import MappingProxyType
from typing import Mapping, Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from .calendar_units import as_date, quarter_of
from .constants import DEFAULT_CULTURE

logger = logging.getLogger(__name__)


class FormatResolver(Protocol):
    def resolve(self, key: str) -> str: ...


_EN_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
_EN_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
_ZH_WEEKDAYS = ("一", "二", "三", "四", "五", "六", "日")


def _calendar_names(months, months_short, weekdays, weekdays_short) -> dict[str, str]:
    names: dict[str, str] = {}
    for index, (full, short) in enumerate(zip(months, months_short), start=1):
        names[f"calendar.month.{index}"] = full
        names[f"calendar.month-short.{index}"] = short
    for index, (full, short) in enumerate(zip(weekdays, weekdays_short)):
        names[f"calendar.weekday.{index}"] = full
        names[f"calendar.weekday-short.{index}"] = short
    return names


DEFAULT_TRANSLATIONS: dict[str, dict[str, str]] = {
    "en-US": {
        "date.short-format": "{month:02d}/{day:02d}/{year}",
        "date.day-number": "{day}",
        "date.weekday-short": "{weekday_abbr}",
        "date.week-range": "{month_abbr} {day}, {year}",
        "date.week-start-day": "{day} {month_abbr}",
        "date.week-number": "W{week:02d}",
        "date.month-year": "{month_abbr} {year}",
        "date.month-short": "{month_abbr}",
        "date.quarter-year": "Q{quarter} {year}",
        "date.quarter-short": "Q{quarter}",
        "date.quarter-minimal": "{quarter}",
        "date.year": "{year}",
        "date.year-short": "{year2:02d}",
        "date.year-minimal": "{year1}",
        "date.decade": "{decade_start}-{decade_end}",
        "date.decade-short": "{decade2:02d}s",
        **_calendar_names(
            _EN_MONTHS,
            tuple(name[:3] for name in _EN_MONTHS),
            _EN_WEEKDAYS,
            tuple(name[:3] for name in _EN_WEEKDAYS),
        ),
    },
    "zh-CN": {
        "date.short-format": "{year}/{month:02d}/{day:02d}",
        "date.weekday-short": "{weekday_abbr}",
        "date.week-range": "{year}年{month}月{day}日",
        "date.week-start-day": "{month}月{day}日",
        "date.week-number": "第{week}周",
        "date.month-year": "{year}年{month}月",
        "date.month-short": "{month_abbr}",
        "date.quarter-year": "{year}年第{quarter}季度",
        "date.quarter-short": "第{quarter}季度",
        "date.year": "{year}年",
        "date.decade": "{decade_start}-{decade_end}年",
        "date.decade-short": "{decade2:02d}年代",
        **_calendar_names(
            tuple(f"{index}月" for index in range(1, 13)),
            tuple(f"{index}月" for index in range(1, 13)),
            tuple(f"星期{name}" for name in _ZH_WEEKDAYS),
            tuple(f"周{name}" for name in _ZH_WEEKDAYS),
        ),
    },
}


class TranslationTable(QObject):
    culture_changed = pyqtSignal(str)

    def __init__(
        self,
        translations: Mapping[str, Mapping[str, str]] | None = None,
        culture: str = DEFAULT_CULTURE,
        fallback_culture: str = DEFAULT_CULTURE,
    ) -> None:
        super().__init__()
        source = DEFAULT_TRANSLATIONS if translations is None else translations
        self._tables = MappingProxyType(
            {name: MappingProxyType(dict(table)) for name, table in source.items()}
        )
        self.fallback_culture = fallback_culture
        self._culture = culture if culture in self._tables else fallback_culture

    @property
    def culture(self) -> str:
        return self._culture

    def cultures(self) -> tuple[str, ...]:
        return tuple(self._tables)

    def set_culture(self, culture: str | None) -> None:
        culture = culture or self.fallback_culture
        if culture not in self._tables:
            logger.warning("Unknown culture %r, keeping %r", culture, self._culture)
            return
        if culture == self._culture:
            return
        self._culture = culture
        self.culture_changed.emit(culture)

    def resolve(self, key: str) -> str:
        if not key:
            return ""
        current = self._tables.get(self._culture, {})
        if key in current:
            return current[key]
        fallback = self._tables.get(self.fallback_culture, {})
        if key in fallback:
            return fallback[key]
        logger.debug("No translation for %r in %r", key, self._culture)
        return key

    def has_translation(self, key: str) -> bool:
        return any(key in table for table in self._tables.values())


class _DateFields(dict):
    def __init__(self, value: date, resolver: FormatResolver) -> None:
        decade_start = (value.year // 10) * 10
        super().__init__(
            year=value.year,
            year2=value.year % 100,
            year1=value.year % 10,
            month=value.month,
            month2=f"{value.month:02d}",
            day=value.day,
            day2=f"{value.day:02d}",
            quarter=quarter_of(value),
            week=value.isocalendar()[1],
            decade_start=decade_start,
            decade_end=decade_start + 9,
            decade2=decade_start % 100,
        )
        self._value = value
        self._resolver = resolver

    def __missing__(self, key: str) -> str:
        value = self._value
        if key == "month_name":
            return self._resolver.resolve(f"calendar.month.{value.month}")
        if key == "month_abbr":
            return self._resolver.resolve(f"calendar.month-short.{value.month}")
        if key == "weekday_name":
            return self._resolver.resolve(f"calendar.weekday.{value.weekday()}")
        if key == "weekday_abbr":
            return self._resolver.resolve(f"calendar.weekday-short.{value.weekday()}")
        raise KeyError(key)


class DateLabelFormatter:
    def __init__(self, resolver: FormatResolver) -> None:
        self.resolver = resolver

    def format(self, value: date, key: str) -> str:
        value = as_date(value)
        pattern = self.resolver.resolve(key)
        try:
            return pattern.format_map(_DateFields(value, self.resolver))
        except (KeyError, IndexError, ValueError) as exc:
            logger.warning("Bad date pattern %r for key %r: %s", pattern, key, exc)
            return value.isoformat()
