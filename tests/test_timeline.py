import logging
from datetime import date

import pytest

from ganttscale.model import GanttTask
from ganttscale.rows import RowMetrics
from ganttscale.timeline import TimelineScale, timeline_range


@pytest.fixture
def scale():
    return TimelineScale(date(2025, 1, 1), date(2025, 1, 31), 25.0)


def _row(visible=True):
    return RowMetrics(index=0, height=32, top=40, visible=visible, expanded=True, entity_id="t")


class TestTimelineScale:
    def test_dimensions(self, scale):
        assert scale.span_days == 31
        assert scale.total_width == 775.0

    def test_date_to_x(self, scale):
        assert scale.date_to_x(date(2025, 1, 1)) == 0.0
        assert scale.date_to_x(date(2025, 1, 3)) == 50.0

    def test_x_to_date(self, scale):
        assert scale.x_to_date(74.9) == date(2025, 1, 3)
        assert scale.x_to_date(-10) == date(2025, 1, 1)
        assert scale.x_to_date(10_000) == date(2025, 1, 31)

    def test_contains(self, scale):
        assert scale.contains(date(2025, 1, 31))
        assert not scale.contains(date(2025, 2, 1))

    def test_degenerate_width(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ganttscale.timeline"):
            scale = TimelineScale(date(2025, 1, 1), date(2025, 1, 2), 0)
        assert scale.day_width == 3.0
        assert caplog.records


class TestTaskBars:
    def test_bar_geometry(self, scale):
        task = GanttTask("t", "T", date(2025, 1, 2), date(2025, 1, 4))
        bar = scale.task_bar(task, _row())
        assert (bar.x, bar.width) == (25.0, 75.0)
        assert (bar.top, bar.height) == (46.0, 20.0)
        assert bar.right == 100.0
        assert not bar.overflow

    def test_narrow_bar_overflows(self):
        scale = TimelineScale(date(2025, 1, 1), date(2025, 12, 31), 3.0)
        bar = scale.task_bar(GanttTask("t", "T", date(2025, 3, 1), date(2025, 3, 1)), _row())
        assert bar.width == 3.0
        assert bar.overflow

    def test_hidden_row_has_no_bar(self, scale):
        task = GanttTask("t", "T", date(2025, 1, 2), date(2025, 1, 4))
        assert scale.task_bar(task, _row(visible=False)) is None


class TestTimelineRange:
    def test_padding(self, hierarchy):
        assert timeline_range(hierarchy) == (date(2024, 12, 30), date(2025, 2, 28))

    def test_custom_padding(self, hierarchy):
        assert timeline_range(hierarchy, padding_days=0) == (date(2025, 1, 6), date(2025, 2, 21))

    def test_no_tasks(self):
        assert timeline_range([], today=date(2025, 6, 1)) == (date(2025, 5, 2), date(2025, 8, 30))

    def test_padding_stops_at_calendar_limits(self):
        tasks = [
            GanttTask("first", "First", date(1, 1, 3), date(1, 1, 9)),
            GanttTask("last", "Last", date(9999, 12, 20), date(9999, 12, 28)),
        ]
        assert timeline_range(tasks) == (date.min, date.max)
