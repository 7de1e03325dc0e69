from __future__ import annotations

import logging
from datetime import date

from PyQt6.QtCore import QObject, pyqtSignal

from .calendar_units import as_date
from .config import Settings
from .constants import DEFAULT_ZOOM_FACTOR, DEFAULT_ZOOM_STEP, ZOOM_FACTOR_EPSILON
from .headers import HeaderLayout, HeaderPeriodGenerator
from .i18n import DateLabelFormatter, TranslationTable
from .model import TaskTree
from .rows import RowAlignmentTracker
from .timeline import TaskBar, TimelineScale, timeline_range
from .tooltip import TooltipRequest, TooltipResult, ViewportTooltipCalculator
from .zoom import ZoomLevelRegistry

logger = logging.getLogger(__name__)


class GanttController(QObject):
    zoom_changed = pyqtSignal(str, float)
    headers_changed = pyqtSignal(object)

    def __init__(
        self,
        registry: ZoomLevelRegistry | None = None,
        tracker: RowAlignmentTracker | None = None,
        translations: TranslationTable | None = None,
        generator: HeaderPeriodGenerator | None = None,
        tooltip_calculator: ViewportTooltipCalculator | None = None,
    ) -> None:
        super().__init__()
        self.registry = registry or ZoomLevelRegistry()
        self.tracker = tracker or RowAlignmentTracker()
        self.translations = translations or TranslationTable()
        self.generator = generator or HeaderPeriodGenerator(
            DateLabelFormatter(self.translations), min_day_width=self.registry.min_day_width
        )
        self.tooltip_calculator = tooltip_calculator or ViewportTooltipCalculator()
        self.tree: TaskTree | None = None
        self.zoom_level = self.registry.default_level
        self.zoom_factor = DEFAULT_ZOOM_FACTOR
        self.start, self.end = timeline_range([])
        self._layout = HeaderLayout.empty()
        self.translations.culture_changed.connect(self._on_culture_changed)
        self._regenerate()

    @classmethod
    def from_settings(cls, settings: Settings) -> GanttController:
        registry = settings.build_registry()
        translations = TranslationTable(culture=settings.culture)
        generator = HeaderPeriodGenerator(
            DateLabelFormatter(translations),
            week_start=settings.week_start,
            min_day_width=settings.min_day_width,
        )
        tracker = RowAlignmentTracker(settings.header_height, settings.row_height)
        return cls(registry, tracker, translations, generator)

    @property
    def header_layout(self) -> HeaderLayout:
        return self._layout

    def set_tree(self, tree: TaskTree, fit: bool = True) -> None:
        self.tree = tree
        self.tracker.track(tree)
        if fit:
            self.fit_to_tasks()

    def fit_to_tasks(self, today: date | None = None) -> None:
        tasks = self.tree.tasks if self.tree is not None else []
        self.set_range(*timeline_range(tasks, today=today))

    def set_range(self, start: date, end: date) -> None:
        start = as_date(start)
        end = as_date(end)
        if start == self.start and end == self.end:
            return
        self.start = start
        self.end = end
        self._regenerate()

    def set_zoom_level(self, level_id: str) -> None:
        config = self.registry.get_config(level_id)
        factor = config.clamp_factor(self.zoom_factor)
        if config.id == self.zoom_level and factor == self.zoom_factor:
            return
        self.zoom_level = config.id
        self.zoom_factor = factor
        self._emit_zoom()

    def set_zoom_factor(self, factor: float) -> None:
        factor = self.registry.clamp_factor(self.zoom_level, factor)
        if abs(factor - self.zoom_factor) < ZOOM_FACTOR_EPSILON:
            return
        self.zoom_factor = factor
        self._emit_zoom()

    def zoom_in(self) -> None:
        self._step_level(self.registry.next_finer(self.zoom_level))

    def zoom_out(self) -> None:
        self._step_level(self.registry.next_coarser(self.zoom_level))

    def can_zoom_out(self, step: float = DEFAULT_ZOOM_STEP) -> bool:
        if self.registry.next_coarser(self.zoom_level) != self.zoom_level:
            return True
        return self.registry.can_zoom_out(self.zoom_level, self.zoom_factor, step)

    def reset_zoom(self) -> None:
        self._step_level(self.registry.default_level)

    def day_width(self) -> float:
        return self.registry.effective_day_width(self.zoom_level, self.zoom_factor)

    def scale(self) -> TimelineScale:
        return TimelineScale(self.start, self.end, self._layout.day_width or self.day_width())

    def tooltips(
        self,
        scroll: float,
        viewport_width: float,
        use_primary: bool = False,
    ) -> TooltipResult:
        request = TooltipRequest(
            scroll_offset=scroll,
            viewport_width=viewport_width,
            use_primary=use_primary,
        )
        return self.tooltip_calculator.calculate_for_layout(self._layout, request)

    def task_bars(self) -> list[TaskBar]:
        if self.tree is None:
            return []
        scale = self.scale()
        bars: list[TaskBar] = []
        for task in self.tree.ordered_tasks():
            row = self.tracker.row_for_entity(task.id)
            if row is None:
                continue
            bar = scale.task_bar(task, row)
            if bar is not None:
                bars.append(bar)
        return bars

    def _step_level(self, level_id: str) -> None:
        if level_id == self.zoom_level and self.zoom_factor == DEFAULT_ZOOM_FACTOR:
            return
        config = self.registry.get_config(level_id)
        self.zoom_level = config.id
        self.zoom_factor = config.clamp_factor(DEFAULT_ZOOM_FACTOR)
        self._emit_zoom()

    def _emit_zoom(self) -> None:
        logger.debug("Zoom %s x%.2f (%.3fpx/day)", self.zoom_level, self.zoom_factor, self.day_width())
        self.zoom_changed.emit(self.zoom_level, self.zoom_factor)
        self._regenerate()

    def _on_culture_changed(self, culture: str) -> None:
        logger.debug("Culture changed to %s, relabelling headers", culture)
        self._regenerate()

    def _regenerate(self) -> None:
        config = self.registry.get_config(self.zoom_level)
        self._layout = self.generator.generate(self.start, self.end, self.day_width(), config.pattern)
        self.headers_changed.emit(self._layout)
