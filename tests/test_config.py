import json

import pytest

from ganttscale.calendar_units import CalendarUnit
from ganttscale.config import Settings, load_settings, save_settings, settings_from_dict
from ganttscale.errors import ZoomConfigError
from ganttscale.zoom import DEFAULT_ZOOM_LEVELS


def _level(level_id, width, primary="month", secondary="day"):
    return {
        "id": level_id,
        "base_day_width": width,
        "description": f"{level_id} view",
        "pattern": {
            "primary_unit": primary,
            "primary_format": "date.month-year",
            "secondary_unit": secondary,
            "secondary_format": "date.day-number",
            "min_primary_width": 90,
        },
    }


@pytest.fixture
def config_data():
    return {
        "default_level": "coarse",
        "min_day_width": 2.0,
        "header_height": 48,
        "row_height": 28,
        "levels": [_level("fine", 30), _level("coarse", 10, "quarter", "month")],
    }


def test_load_settings(tmp_path, config_data):
    path = tmp_path / "zoom.json"
    path.write_text(json.dumps(config_data), encoding="utf-8")

    settings, registry = load_settings(path)

    assert settings.header_height == 48
    assert settings.row_height == 28
    assert registry.level_ids() == ("fine", "coarse")
    assert registry.default_level == "coarse"
    assert registry.min_day_width == 2.0
    coarse = registry.get_config("coarse")
    assert coarse.pattern.primary_unit is CalendarUnit.QUARTER
    assert coarse.min_factor == 0.5
    assert coarse.description == "coarse view"


def test_missing_levels_use_defaults():
    settings = settings_from_dict({"row_height": 24})
    assert settings.levels == DEFAULT_ZOOM_LEVELS
    assert settings.row_height == 24


def test_saved_settings_load_back(tmp_path, config_data):
    path = tmp_path / "zoom.json"
    original = settings_from_dict(config_data)
    save_settings(path, original)
    loaded, _ = load_settings(path)
    assert loaded == original


def test_missing_file(tmp_path):
    path = tmp_path / "absent.json"
    with pytest.raises(ZoomConfigError) as excinfo:
        load_settings(path)
    assert excinfo.value.path == str(path)


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{levels: ", encoding="utf-8")
    with pytest.raises(ZoomConfigError, match="invalid JSON"):
        load_settings(path)


@pytest.mark.parametrize(
    "mutate, where",
    [
        (lambda data: data["levels"][1]["pattern"].update(primary_unit="fortnight"), "levels[1].pattern.primary_unit"),
        (lambda data: data["levels"][0].update(base_day_width=-1), "levels[0].base_day_width"),
        (lambda data: data["levels"][0].pop("id"), "levels[0].id"),
        (lambda data: data["levels"][0].pop("pattern"), "levels[0]"),
        (lambda data: data.update(levels=[]), "levels"),
        (lambda data: data.update(min_day_width="wide"), "min_day_width"),
        (lambda data: data.update(week_start=9), "week_start"),
        (lambda data: data["levels"][0]["pattern"].update(show_primary="false"), "levels[0].pattern.show_primary"),
        (lambda data: data["levels"][0]["pattern"].update(show_primary=0), "levels[0].pattern.show_primary"),
    ],
)
def test_malformed_values_name_their_path(config_data, mutate, where):
    mutate(config_data)
    with pytest.raises(ZoomConfigError) as excinfo:
        settings_from_dict(config_data)
    assert excinfo.value.path == where


def test_unknown_default_level(config_data):
    config_data["default_level"] = "missing"
    with pytest.raises(ValueError):
        settings_from_dict(config_data)


def test_not_an_object():
    with pytest.raises(ZoomConfigError):
        settings_from_dict(["levels"])


def test_default_settings_build_registry():
    registry = Settings().build_registry()
    assert registry.default_level == "quarter-month"
