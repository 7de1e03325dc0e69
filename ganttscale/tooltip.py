from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Sequence

from .constants import TOOLTIP_HIDDEN_THRESHOLD, TOOLTIP_LEFT_ARROW, TOOLTIP_RIGHT_ARROW
from .headers import HeaderLayout, HeaderPeriod

logger = logging.getLogger(__name__)

_OFFSET_TOLERANCE = 1e-6


@dataclass(frozen=True)
class TooltipRequest:
    scroll_offset: float
    viewport_width: float
    hidden_threshold: float = TOOLTIP_HIDDEN_THRESHOLD
    left_arrow: str = TOOLTIP_LEFT_ARROW
    right_arrow: str = TOOLTIP_RIGHT_ARROW
    use_primary: bool = False
    total_width: float | None = None


@dataclass(frozen=True)
class TooltipResult:
    left: str = ""
    right: str = ""

    @property
    def has_left(self) -> bool:
        return bool(self.left)

    @property
    def has_right(self) -> bool:
        return bool(self.right)

    def is_empty(self) -> bool:
        return not self.left and not self.right


class ViewportTooltipCalculator:
    def calculate(self, periods: Sequence[HeaderPeriod], request: TooltipRequest) -> TooltipResult:
        if not periods:
            return TooltipResult()
        if not _periods_are_consistent(periods):
            logger.debug("Inconsistent header periods, no tooltips")
            return TooltipResult()
        total_width = request.total_width
        if total_width is None:
            total_width = periods[-1].right
        scroll = request.scroll_offset
        viewport = request.viewport_width
        threshold = request.hidden_threshold
        if not all(_is_finite(value) for value in (scroll, viewport, threshold, total_width)):
            logger.debug("Non-finite tooltip request %r", request)
            return TooltipResult()
        if viewport < 0 or scroll > total_width:
            logger.debug("Scroll %.1f / viewport %.1f outside %.1fpx timeline", scroll, viewport, total_width)
            return TooltipResult()

        left = ""
        if scroll > 0:
            period = _period_at(periods, scroll)
            if period is not None:
                hidden = scroll - period.x_offset
                visible = period.right - scroll
                if _should_show(period, hidden, visible, threshold):
                    left = f"{request.left_arrow}{period.label}"

        right = ""
        edge = scroll + viewport
        if edge < total_width:
            period = _period_at(periods, edge)
            if period is not None:
                visible = edge - period.x_offset
                hidden = period.right - edge
                if _should_show(period, hidden, visible, threshold):
                    right = f"{period.label}{request.right_arrow}"

        return TooltipResult(left=left, right=right)

    def calculate_for_layout(self, layout: HeaderLayout, request: TooltipRequest) -> TooltipResult:
        periods: Sequence[HeaderPeriod] = layout.secondary
        if request.use_primary and layout.primary and not layout.collapsed:
            periods = layout.primary
        if request.total_width is None and layout.total_width > 0:
            request = replace(request, total_width=layout.total_width)
        return self.calculate(periods, request)


def _is_finite(value: object) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def _period_at(periods: Sequence[HeaderPeriod], edge: float) -> HeaderPeriod | None:
    for period in periods:
        if period.contains_x(edge):
            return period
    return None


def _should_show(period: HeaderPeriod, hidden: float, visible: float, threshold: float) -> bool:
    return hidden > period.width * threshold and visible > 0


def _periods_are_consistent(periods: Sequence[HeaderPeriod]) -> bool:
    previous = None
    for period in periods:
        if not (_is_finite(period.x_offset) and _is_finite(period.width)):
            return False
        if period.width < 0 or period.end < period.start:
            return False
        if previous is not None:
            if period.x_offset < previous.right - _OFFSET_TOLERANCE:
                return False
            if period.start <= previous.end:
                return False
        previous = period
    return True
