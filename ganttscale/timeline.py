from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from .calendar_units import as_date, days_between, shift_days
from .constants import (
    EMPTY_RANGE_DAYS_AFTER,
    EMPTY_RANGE_DAYS_BEFORE,
    MIN_EFFECTIVE_DAY_WIDTH,
    MIN_TASK_WIDTH,
    TASK_BAR_HEIGHT,
    TASK_VERTICAL_MARGIN,
    TIMELINE_PADDING_DAYS,
)
from .rows import RowMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskBar:
    task_id: str
    x: float
    width: float
    top: float
    height: float
    overflow: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width


class TimelineScale:
    def __init__(self, start: date, end: date, day_width: float) -> None:
        start = as_date(start)
        end = as_date(end)
        if end < start:
            start, end = end, start
        if day_width is None or not math.isfinite(day_width) or day_width <= 0:
            logger.warning("Degenerate day width %r, clamping to %.3f", day_width, MIN_EFFECTIVE_DAY_WIDTH)
            day_width = MIN_EFFECTIVE_DAY_WIDTH
        self.start = start
        self.end = end
        self.day_width = float(day_width)

    @property
    def span_days(self) -> int:
        return days_between(self.start, self.end) + 1

    @property
    def total_width(self) -> float:
        return self.span_days * self.day_width

    def date_to_x(self, value: date) -> float:
        return days_between(self.start, as_date(value)) * self.day_width

    def x_to_date(self, x: float) -> date:
        days = int(math.floor(x / self.day_width))
        days = max(0, min(self.span_days - 1, days))
        return shift_days(self.start, days)

    def contains(self, value: date) -> bool:
        return self.start <= as_date(value) <= self.end

    def task_bar(self, task, row: RowMetrics) -> TaskBar | None:
        if not row.visible:
            return None
        x = self.date_to_x(task.start)
        width = (days_between(as_date(task.start), as_date(task.end)) + 1) * self.day_width
        height = min(TASK_BAR_HEIGHT, max(0.0, row.height - 2 * TASK_VERTICAL_MARGIN))
        top = row.center - height / 2.0
        return TaskBar(
            task_id=task.id,
            x=x,
            width=width,
            top=top,
            height=height,
            overflow=width < MIN_TASK_WIDTH,
        )


def timeline_range(
    tasks: Iterable,
    padding_days: int = TIMELINE_PADDING_DAYS,
    today: date | None = None,
) -> tuple[date, date]:
    tasks = list(tasks)
    if not tasks:
        today = today or date.today()
        return (
            shift_days(today, -EMPTY_RANGE_DAYS_BEFORE),
            shift_days(today, EMPTY_RANGE_DAYS_AFTER),
        )
    padding = max(0, padding_days)
    start = min(as_date(task.start) for task in tasks)
    end = max(as_date(task.end) for task in tasks)
    return shift_days(start, -padding), shift_days(end, padding)
