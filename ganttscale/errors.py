from __future__ import annotations


class GanttScaleError(Exception):
    pass


class ZoomConfigError(GanttScaleError, ValueError):
    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
