import os
from datetime import date

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from ganttscale.headers import HeaderPeriodGenerator  # noqa: E402
from ganttscale.model import GanttTask, TaskTree  # noqa: E402
from ganttscale.zoom import ZoomLevelRegistry  # noqa: E402


@pytest.fixture
def registry():
    return ZoomLevelRegistry()


@pytest.fixture
def generator():
    return HeaderPeriodGenerator()


@pytest.fixture
def hierarchy():
    """Five rows: A > (A1, A2 > A2a), B."""
    return [
        GanttTask("a", "Design", date(2025, 1, 6), date(2025, 1, 24)),
        GanttTask("a1", "Wireframes", date(2025, 1, 6), date(2025, 1, 10), parent_id="a"),
        GanttTask("a2", "Review", date(2025, 1, 13), date(2025, 1, 24), parent_id="a"),
        GanttTask("a2a", "Sign-off", date(2025, 1, 24), date(2025, 1, 24), parent_id="a2"),
        GanttTask("b", "Build", date(2025, 1, 27), date(2025, 2, 21)),
    ]


@pytest.fixture
def tree(hierarchy):
    return TaskTree(hierarchy)
