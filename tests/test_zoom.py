import logging
import math

import pytest

from ganttscale.calendar_units import CalendarUnit
from ganttscale.errors import ZoomConfigError
from ganttscale.zoom import DEFAULT_ZOOM_LEVELS, HeaderPattern, ZoomLevelConfig, ZoomLevelRegistry

PATTERN = HeaderPattern(CalendarUnit.MONTH, "date.month-year", CalendarUnit.DAY, "date.day-number")


class TestDefaultLevels:
    def test_order_is_finest_first(self, registry):
        ids = registry.level_ids()
        assert len(ids) == 13
        assert ids[0] == "week-day"
        assert ids[-1] == "decade-year"
        widths = [level.base_day_width for level in DEFAULT_ZOOM_LEVELS]
        assert widths == sorted(widths, reverse=True)

    def test_every_level_respects_floor(self, registry):
        for level_id in registry.level_ids():
            assert registry.effective_day_width(level_id) >= 3.0

    def test_known_level(self, registry):
        config = registry.get_config("month-day")
        assert config.base_day_width == 25.0
        assert config.pattern.primary_unit is CalendarUnit.MONTH
        assert config.pattern.secondary_unit is CalendarUnit.DAY

    def test_levels_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.levels["extra"] = registry.default_config()


class TestFallback:
    def test_unknown_level_returns_default(self, registry, caplog):
        with caplog.at_level(logging.WARNING, logger="ganttscale.zoom"):
            config = registry.get_config("no-such-level")
        assert config.id == "quarter-month"
        assert "no-such-level" in caplog.text

    def test_unknown_level_signal(self, registry, qtbot):
        with qtbot.waitSignal(registry.unknown_level) as blocker:
            registry.get_config("bogus")
        assert blocker.args == ["bogus", "quarter-month"]

    def test_known_level_is_silent(self, registry, qtbot):
        with qtbot.assertNotEmitted(registry.unknown_level):
            registry.get_config("week-day")


class TestDayWidth:
    def test_factor_scales_base_width(self, registry):
        assert registry.effective_day_width("month-day") == 25.0
        assert registry.effective_day_width("month-day", 2.0) == 50.0

    def test_factor_is_clamped(self, registry):
        assert registry.effective_day_width("month-day", 10.0) == 75.0
        assert registry.clamp_factor("month-day", 0.1) == 0.5
        assert registry.clamp_factor("month-day", math.nan) == 1.0

    def test_floor_applies(self, registry):
        assert registry.effective_day_width("year-quarter-min", 0.5) == 3.0
        assert registry.is_at_minimum_day_width("year-quarter-min", 1.0)
        assert not registry.is_at_minimum_day_width("month-day", 1.0)

    def test_can_zoom_out(self, registry):
        assert registry.can_zoom_out("month-day", 1.0)
        assert not registry.can_zoom_out("year-quarter-min", 1.0)

    def test_task_visibility(self, registry):
        assert registry.is_task_visible(1, "week-day", 1.0)
        assert not registry.is_task_visible(1, "year-quarter-min", 1.0)
        assert registry.is_task_visible(4, "year-quarter-min", 1.0)


class TestNavigation:
    def test_neighbours(self, registry):
        assert registry.next_coarser("month-day") == "month-week"
        assert registry.next_finer("month-day") == "week-day-low"

    def test_ends_clamp(self, registry):
        assert registry.next_finer("week-day") == "week-day"
        assert registry.next_coarser("decade-year") == "decade-year"


class TestValidation:
    def test_duplicate_ids(self):
        level = ZoomLevelConfig("a", 10.0, PATTERN)
        with pytest.raises(ZoomConfigError):
            ZoomLevelRegistry([level, level], default_level="a")

    def test_unknown_default(self):
        with pytest.raises(ZoomConfigError):
            ZoomLevelRegistry([ZoomLevelConfig("a", 10.0, PATTERN)], default_level="b")

    def test_empty_levels(self):
        with pytest.raises(ZoomConfigError):
            ZoomLevelRegistry([], default_level="a")

    def test_bad_base_width(self):
        with pytest.raises(ZoomConfigError, match="bad"):
            ZoomLevelRegistry([ZoomLevelConfig("bad", 0.0, PATTERN)], default_level="bad")

    def test_inverted_factors(self):
        level = ZoomLevelConfig("a", 10.0, PATTERN, min_factor=2.0, max_factor=1.0)
        with pytest.raises(ZoomConfigError):
            ZoomLevelRegistry([level], default_level="a")

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            ZoomLevelRegistry([ZoomLevelConfig("a", 10.0, PATTERN)], default_level="a", min_day_width=0)

    def test_pattern_name(self):
        assert PATTERN.name == "month-day"
