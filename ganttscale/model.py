from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
import uuid

from PyQt6.QtCore import QObject, pyqtSignal


def new_id() -> str:
    return uuid.uuid4().hex


def _parse_date(value: object) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


@dataclass
class GanttTask:
    id: str
    name: str
    start: date
    end: date
    parent_id: str | None = None
    expanded: bool = True
    progress: int = 0

    @property
    def duration_days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "parent_id": self.parent_id,
            "expanded": self.expanded,
            "progress": self.progress,
        }

    @staticmethod
    def from_dict(data: dict) -> "GanttTask":
        start = _parse_date(data["start"])
        end = _parse_date(data.get("end", start))
        if end < start:
            raise ValueError(f"Task {data.get('id')!r} ends before it starts")
        try:
            progress = int(data.get("progress", 0))
        except (TypeError, ValueError):
            progress = 0
        return GanttTask(
            id=str(data.get("id") or new_id()),
            name=str(data.get("name", "")),
            start=start,
            end=end,
            parent_id=data.get("parent_id"),
            expanded=bool(data.get("expanded", True)),
            progress=max(0, min(100, progress)),
        )


class TaskTree(QObject):
    rows_changed = pyqtSignal()
    expanded_changed = pyqtSignal(str, bool)

    def __init__(self, tasks: list[GanttTask] | None = None) -> None:
        super().__init__()
        self.tasks: list[GanttTask] = list(tasks or [])

    def set_tasks(self, tasks: list[GanttTask]) -> None:
        self.tasks = list(tasks)
        self.rows_changed.emit()

    def add_task(
        self,
        name: str,
        start: date,
        end: date,
        parent_id: str | None = None,
    ) -> GanttTask | None:
        if parent_id is not None and self.get_task(parent_id) is None:
            return None
        task = GanttTask(id=new_id(), name=name, start=start, end=end, parent_id=parent_id)
        self.insert_task(task)
        return task

    def insert_task(self, task: GanttTask, index: int | None = None) -> None:
        if index is None:
            self.tasks.append(task)
        else:
            self.tasks.insert(index, task)
        self.rows_changed.emit()

    def update_task(self, task_id: str, new_task: GanttTask) -> None:
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                self.tasks[index] = new_task
                self.rows_changed.emit()
                return

    def remove_task(self, task_id: str) -> list[GanttTask]:
        doomed = {task_id} | {task.id for task in self.descendants(task_id)}
        removed = [task for task in self.tasks if task.id in doomed]
        if not removed:
            return []
        self.tasks = [task for task in self.tasks if task.id not in doomed]
        self.rows_changed.emit()
        return removed

    def move_task(self, task_id: str, new_index: int) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        siblings = self.children(task.parent_id)
        new_index = max(0, min(new_index, len(siblings) - 1))
        old_index = siblings.index(task)
        if new_index == old_index:
            return False
        anchor = siblings[new_index]
        self.tasks.remove(task)
        position = self.tasks.index(anchor)
        if new_index > old_index:
            position += 1
        self.tasks.insert(position, task)
        self.rows_changed.emit()
        return True

    def set_expanded(self, task_id: str, expanded: bool) -> None:
        for index, task in enumerate(self.tasks):
            if task.id != task_id:
                continue
            if task.expanded == expanded:
                return
            self.tasks[index] = replace(task, expanded=expanded)
            self.expanded_changed.emit(task_id, expanded)
            return

    def toggle_expanded(self, task_id: str) -> None:
        task = self.get_task(task_id)
        if task is None:
            return
        self.set_expanded(task_id, not task.expanded)

    def get_task(self, task_id: str) -> GanttTask | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def children(self, parent_id: str | None) -> list[GanttTask]:
        return [task for task in self.tasks if task.parent_id == parent_id]

    def has_children(self, task_id: str) -> bool:
        return any(task.parent_id == task_id for task in self.tasks)

    def descendants(self, task_id: str) -> list[GanttTask]:
        found: list[GanttTask] = []
        seen = {task_id}
        pending = [task_id]
        while pending:
            current = pending.pop()
            for task in self.children(current):
                if task.id in seen:
                    continue
                seen.add(task.id)
                found.append(task)
                pending.append(task.id)
        return found

    def ordered_tasks(self) -> list[GanttTask]:
        known = {task.id for task in self.tasks}
        by_parent: dict[str | None, list[GanttTask]] = {}
        for task in self.tasks:
            parent = task.parent_id if task.parent_id in known else None
            by_parent.setdefault(parent, []).append(task)
        ordered: list[GanttTask] = []
        stack = list(reversed(by_parent.get(None, [])))
        while stack:
            task = stack.pop()
            ordered.append(task)
            stack.extend(reversed(by_parent.get(task.id, [])))
        return ordered

    def index_of(self, task_id: str) -> int | None:
        for index, task in enumerate(self.ordered_tasks()):
            if task.id == task_id:
                return index
        return None

    def expanded_state(self) -> dict[int, bool]:
        return {index: task.expanded for index, task in enumerate(self.ordered_tasks())}

    def to_dict(self) -> dict:
        return {"tasks": [task.to_dict() for task in self.tasks]}

    @staticmethod
    def from_dict(data: dict) -> "TaskTree":
        return TaskTree([GanttTask.from_dict(item) for item in data.get("tasks", [])])
