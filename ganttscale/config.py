from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

from .calendar_units import CalendarUnit
from .constants import (
    DEFAULT_CULTURE,
    DEFAULT_ROW_HEIGHT,
    DEFAULT_WEEK_START,
    DEFAULT_ZOOM_LEVEL,
    HEADER_HEIGHT,
    MIN_EFFECTIVE_DAY_WIDTH,
)
from .errors import ZoomConfigError
from .zoom import DEFAULT_ZOOM_LEVELS, HeaderPattern, ZoomLevelConfig, ZoomLevelRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    default_level: str = DEFAULT_ZOOM_LEVEL
    min_day_width: float = MIN_EFFECTIVE_DAY_WIDTH
    header_height: float = HEADER_HEIGHT
    row_height: float = DEFAULT_ROW_HEIGHT
    week_start: int = DEFAULT_WEEK_START
    culture: str = DEFAULT_CULTURE
    levels: tuple[ZoomLevelConfig, ...] = field(default=DEFAULT_ZOOM_LEVELS)

    def build_registry(self) -> ZoomLevelRegistry:
        return ZoomLevelRegistry(self.levels, self.default_level, self.min_day_width)

    def to_dict(self) -> dict:
        return {
            "default_level": self.default_level,
            "min_day_width": self.min_day_width,
            "header_height": self.header_height,
            "row_height": self.row_height,
            "week_start": self.week_start,
            "culture": self.culture,
            "levels": [_level_to_dict(level) for level in self.levels],
        }


def load_settings(path: str | Path) -> tuple[Settings, ZoomLevelRegistry]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ZoomConfigError(f"cannot read config: {exc}", str(path)) from exc
    except json.JSONDecodeError as exc:
        raise ZoomConfigError(f"invalid JSON: {exc}", str(path)) from exc
    settings = settings_from_dict(data)
    logger.debug("Loaded %d zoom levels from %s", len(settings.levels), path)
    return settings, settings.build_registry()


def save_settings(path: str | Path, settings: Settings) -> None:
    path = Path(path)
    path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")


def settings_from_dict(data: dict) -> Settings:
    if not isinstance(data, dict):
        raise ZoomConfigError("expected a JSON object", "$")
    levels = DEFAULT_ZOOM_LEVELS
    if "levels" in data:
        raw_levels = data["levels"]
        if not isinstance(raw_levels, list) or not raw_levels:
            raise ZoomConfigError("expected a non-empty list", "levels")
        levels = tuple(_level_from_dict(item, f"levels[{index}]") for index, item in enumerate(raw_levels))
    week_start = _number(data, "week_start", DEFAULT_WEEK_START, "week_start")
    if week_start != int(week_start) or not 0 <= week_start <= 6:
        raise ZoomConfigError(f"expected an integer 0..6, got {week_start}", "week_start")
    settings = Settings(
        default_level=_string(data, "default_level", DEFAULT_ZOOM_LEVEL, "default_level"),
        min_day_width=_positive(data, "min_day_width", MIN_EFFECTIVE_DAY_WIDTH, "min_day_width"),
        header_height=_positive(data, "header_height", HEADER_HEIGHT, "header_height"),
        row_height=_positive(data, "row_height", DEFAULT_ROW_HEIGHT, "row_height"),
        week_start=int(week_start),
        culture=_string(data, "culture", DEFAULT_CULTURE, "culture"),
        levels=levels,
    )
    # Registry construction checks ids and the default level.
    settings.build_registry()
    return settings


def _level_from_dict(data: object, path: str) -> ZoomLevelConfig:
    if not isinstance(data, dict):
        raise ZoomConfigError("expected an object", path)
    if "pattern" not in data:
        raise ZoomConfigError("missing 'pattern'", path)
    config = ZoomLevelConfig(
        id=_string(data, "id", None, f"{path}.id"),
        base_day_width=_positive(data, "base_day_width", None, f"{path}.base_day_width"),
        pattern=_pattern_from_dict(data["pattern"], f"{path}.pattern"),
        min_factor=_positive(data, "min_factor", 0.5, f"{path}.min_factor"),
        max_factor=_positive(data, "max_factor", 3.0, f"{path}.max_factor"),
        description=_string(data, "description", "", f"{path}.description"),
    )
    if config.min_factor > config.max_factor:
        raise ZoomConfigError(
            f"min_factor {config.min_factor} exceeds max_factor {config.max_factor}", path
        )
    return config


def _pattern_from_dict(data: object, path: str) -> HeaderPattern:
    if not isinstance(data, dict):
        raise ZoomConfigError("expected an object", path)
    return HeaderPattern(
        primary_unit=_unit(data, "primary_unit", f"{path}.primary_unit"),
        primary_format=_string(data, "primary_format", None, f"{path}.primary_format"),
        secondary_unit=_unit(data, "secondary_unit", f"{path}.secondary_unit"),
        secondary_format=_string(data, "secondary_format", None, f"{path}.secondary_format"),
        min_primary_width=_number(data, "min_primary_width", 0.0, f"{path}.min_primary_width"),
        min_secondary_width=_number(data, "min_secondary_width", 0.0, f"{path}.min_secondary_width"),
        show_primary=_boolean(data, "show_primary", True, f"{path}.show_primary"),
    )


def _level_to_dict(level: ZoomLevelConfig) -> dict:
    pattern = level.pattern
    return {
        "id": level.id,
        "base_day_width": level.base_day_width,
        "min_factor": level.min_factor,
        "max_factor": level.max_factor,
        "description": level.description,
        "pattern": {
            "primary_unit": pattern.primary_unit.value,
            "primary_format": pattern.primary_format,
            "secondary_unit": pattern.secondary_unit.value,
            "secondary_format": pattern.secondary_format,
            "min_primary_width": pattern.min_primary_width,
            "min_secondary_width": pattern.min_secondary_width,
            "show_primary": pattern.show_primary,
        },
    }


def _unit(data: dict, key: str, path: str) -> CalendarUnit:
    if key not in data:
        raise ZoomConfigError(f"missing '{key}'", path)
    try:
        return CalendarUnit.parse(data[key])
    except ValueError as exc:
        raise ZoomConfigError(str(exc), path) from exc


def _string(data: dict, key: str, default: str | None, path: str) -> str:
    if key not in data:
        if default is None:
            raise ZoomConfigError(f"missing '{key}'", path)
        return default
    value = data[key]
    if not isinstance(value, str) or (default is None and not value):
        raise ZoomConfigError(f"expected a non-empty string, got {value!r}", path)
    return value


def _number(data: dict, key: str, default: float | None, path: str) -> float:
    if key not in data:
        if default is None:
            raise ZoomConfigError(f"missing '{key}'", path)
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ZoomConfigError(f"expected a finite number, got {value!r}", path)
    if value < 0:
        raise ZoomConfigError(f"expected a non-negative number, got {value!r}", path)
    return value


def _boolean(data: dict, key: str, default: bool, path: str) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ZoomConfigError(f"expected true or false, got {value!r}", path)
    return value


def _positive(data: dict, key: str, default: float | None, path: str) -> float:
    value = _number(data, key, default, path)
    if value <= 0:
        raise ZoomConfigError(f"expected a positive number, got {value!r}", path)
    return float(value)
