from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from PyQt6.QtCore import QObject, pyqtSignal

from .calendar_units import CalendarUnit
from .constants import (
    DEFAULT_ZOOM_FACTOR,
    DEFAULT_ZOOM_LEVEL,
    DEFAULT_ZOOM_STEP,
    MIN_EFFECTIVE_DAY_WIDTH,
    MIN_TASK_WIDTH,
    ZOOM_FACTOR_EPSILON,
)
from .errors import ZoomConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderPattern:
    primary_unit: CalendarUnit
    primary_format: str
    secondary_unit: CalendarUnit
    secondary_format: str
    min_primary_width: float = 0.0
    min_secondary_width: float = 0.0
    show_primary: bool = True

    @property
    def name(self) -> str:
        return f"{self.primary_unit.value}-{self.secondary_unit.value}"


@dataclass(frozen=True)
class ZoomLevelConfig:
    id: str
    base_day_width: float
    pattern: HeaderPattern
    min_factor: float = 0.5
    max_factor: float = 3.0
    description: str = ""

    def clamp_factor(self, factor: float) -> float:
        if factor is None or not math.isfinite(factor):
            factor = DEFAULT_ZOOM_FACTOR
        return max(self.min_factor, min(self.max_factor, factor))


def _pattern(
    primary: CalendarUnit,
    primary_format: str,
    secondary: CalendarUnit,
    secondary_format: str,
    min_primary: float,
    min_secondary: float,
    show_primary: bool = True,
) -> HeaderPattern:
    return HeaderPattern(
        primary_unit=primary,
        primary_format=primary_format,
        secondary_unit=secondary,
        secondary_format=secondary_format,
        min_primary_width=min_primary,
        min_secondary_width=min_secondary,
        show_primary=show_primary,
    )


_WEEK_DAY = _pattern(
    CalendarUnit.WEEK, "date.week-range", CalendarUnit.DAY, "date.weekday-short", 120, 30
)
_WEEK_DAY_NUMBERS = _pattern(
    CalendarUnit.WEEK, "date.week-range", CalendarUnit.DAY, "date.day-number", 120, 30
)
_WEEK_DAY_COMPACT = _pattern(
    CalendarUnit.WEEK, "date.week-start-day", CalendarUnit.DAY, "date.day-number", 80, 20
)
_MONTH_DAY = _pattern(
    CalendarUnit.MONTH, "date.month-year", CalendarUnit.DAY, "date.day-number", 90, 20
)
_MONTH_WEEK = _pattern(
    CalendarUnit.MONTH, "date.month-year", CalendarUnit.WEEK, "date.week-start-day", 90, 40
)
_QUARTER_MONTH = _pattern(
    CalendarUnit.QUARTER, "date.quarter-year", CalendarUnit.MONTH, "date.month-short", 90, 30
)
_YEAR_QUARTER = _pattern(
    CalendarUnit.YEAR, "date.year", CalendarUnit.QUARTER, "date.quarter-short", 60, 20
)
_YEAR_QUARTER_MINIMAL = _pattern(
    CalendarUnit.YEAR, "date.year", CalendarUnit.QUARTER, "date.quarter-minimal", 60, 10
)
_DECADE_YEAR = _pattern(
    CalendarUnit.DECADE, "date.decade", CalendarUnit.YEAR, "date.year-short", 80, 20
)

# Ordered finest to coarsest; zooming in walks towards the front.
DEFAULT_ZOOM_LEVELS: tuple[ZoomLevelConfig, ...] = (
    ZoomLevelConfig("week-day", 60.0, _WEEK_DAY, description="Daily sprint planning with weekly context"),
    ZoomLevelConfig("week-day-medium", 45.0, _WEEK_DAY_NUMBERS, description="Medium weekly view with daily granularity"),
    ZoomLevelConfig("week-day-low", 35.0, _WEEK_DAY_COMPACT, description="Compact weekly view with daily tracking"),
    ZoomLevelConfig("month-day", 25.0, _MONTH_DAY, description="Monthly view with daily columns"),
    ZoomLevelConfig("month-week", 20.0, _MONTH_WEEK, description="Monthly overview with weekly breakdown"),
    ZoomLevelConfig("month-week-low", 16.0, _MONTH_WEEK, description="Compact monthly view with weekly periods"),
    ZoomLevelConfig("quarter-month", 12.0, _QUARTER_MONTH, description="Quarterly overview with monthly breakdown"),
    ZoomLevelConfig("quarter-month-low", 10.0, _QUARTER_MONTH, description="Compact quarterly view with monthly markers"),
    ZoomLevelConfig("year-quarter", 8.0, _YEAR_QUARTER, description="Annual overview with quarterly breakdown"),
    ZoomLevelConfig("year-quarter-medium", 6.5, _YEAR_QUARTER, description="Medium annual view with quarterly periods"),
    ZoomLevelConfig("year-quarter-low", 5.0, _YEAR_QUARTER_MINIMAL, description="Multi-year planning with quarterly markers"),
    ZoomLevelConfig("year-quarter-min", 3.0, _YEAR_QUARTER_MINIMAL, description="Long-term strategic view at minimum day width"),
    ZoomLevelConfig("decade-year", 3.0, _DECADE_YEAR, min_factor=1.0, max_factor=1.0, description="Portfolio and decade planning"),
)


class ZoomLevelRegistry(QObject):
    unknown_level = pyqtSignal(str, str)

    def __init__(
        self,
        levels: Iterable[ZoomLevelConfig] = DEFAULT_ZOOM_LEVELS,
        default_level: str = DEFAULT_ZOOM_LEVEL,
        min_day_width: float = MIN_EFFECTIVE_DAY_WIDTH,
    ) -> None:
        super().__init__()
        ordered = tuple(levels)
        configs: dict[str, ZoomLevelConfig] = {}
        for config in ordered:
            _validate_level(config)
            if config.id in configs:
                raise ZoomConfigError(f"duplicate zoom level id '{config.id}'")
            configs[config.id] = config
        if not configs:
            raise ZoomConfigError("at least one zoom level is required")
        if default_level not in configs:
            raise ZoomConfigError(f"default zoom level '{default_level}' is not defined")
        if not math.isfinite(min_day_width) or min_day_width <= 0:
            raise ZoomConfigError(f"min_day_width must be positive, got {min_day_width}")
        self._order = tuple(config.id for config in ordered)
        self._configs: Mapping[str, ZoomLevelConfig] = MappingProxyType(configs)
        self.default_level = default_level
        self.min_day_width = float(min_day_width)

    @property
    def levels(self) -> Mapping[str, ZoomLevelConfig]:
        return self._configs

    def level_ids(self) -> tuple[str, ...]:
        return self._order

    def has_level(self, level_id: str) -> bool:
        return level_id in self._configs

    def default_config(self) -> ZoomLevelConfig:
        return self._configs[self.default_level]

    def get_config(self, level_id: str) -> ZoomLevelConfig:
        config = self._configs.get(level_id)
        if config is not None:
            return config
        logger.warning(
            "Unknown zoom level %r, falling back to default %r", level_id, self.default_level
        )
        self.unknown_level.emit(str(level_id), self.default_level)
        return self._configs[self.default_level]

    def clamp_factor(self, level_id: str, factor: float) -> float:
        return self.get_config(level_id).clamp_factor(factor)

    def effective_day_width(self, level_id: str, factor: float = DEFAULT_ZOOM_FACTOR) -> float:
        config = self.get_config(level_id)
        width = config.base_day_width * config.clamp_factor(factor)
        if not math.isfinite(width) or width < self.min_day_width:
            logger.debug(
                "Day width %.3f for %r below floor, using %.3f", width, config.id, self.min_day_width
            )
            return self.min_day_width
        return width

    def next_finer(self, level_id: str) -> str:
        index = self._index_of(level_id)
        return self._order[max(0, index - 1)]

    def next_coarser(self, level_id: str) -> str:
        index = self._index_of(level_id)
        return self._order[min(len(self._order) - 1, index + 1)]

    def can_zoom_out(
        self, level_id: str, factor: float, step: float = DEFAULT_ZOOM_STEP
    ) -> bool:
        current = self.effective_day_width(level_id, factor)
        proposed = self.effective_day_width(level_id, factor - step)
        return abs(current - proposed) > ZOOM_FACTOR_EPSILON

    def is_at_minimum_day_width(self, level_id: str, factor: float) -> bool:
        return abs(self.effective_day_width(level_id, factor) - self.min_day_width) < ZOOM_FACTOR_EPSILON

    def is_task_visible(self, duration_days: float, level_id: str, factor: float) -> bool:
        return duration_days * self.effective_day_width(level_id, factor) >= MIN_TASK_WIDTH

    def _index_of(self, level_id: str) -> int:
        if level_id not in self._configs:
            level_id = self.get_config(level_id).id
        return self._order.index(level_id)


def _validate_level(config: ZoomLevelConfig) -> None:
    if not config.id:
        raise ZoomConfigError("zoom level id must be a non-empty string")
    if not math.isfinite(config.base_day_width) or config.base_day_width <= 0:
        raise ZoomConfigError(
            f"base_day_width must be positive, got {config.base_day_width}", config.id
        )
    if not (0 < config.min_factor <= config.max_factor):
        raise ZoomConfigError(
            f"expected 0 < min_factor <= max_factor, got {config.min_factor}..{config.max_factor}",
            config.id,
        )
