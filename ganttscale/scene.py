from __future__ import annotations

from PyQt6.QtCore import QRectF
from PyQt6.QtWidgets import QGraphicsScene

from .constants import LABEL_WIDTH
from .controller import GanttController
from .items import TaskListItem, TimelineItem
from .model import TaskTree


class GanttScene(QGraphicsScene):
    def __init__(
        self,
        controller: GanttController,
        tree: TaskTree | None = None,
        label_width: float = LABEL_WIDTH,
    ) -> None:
        super().__init__()
        self.controller = controller
        self.label_width = float(label_width)
        if tree is not None and controller.tree is not tree:
            controller.set_tree(tree)

        self.task_list_item = TaskListItem(controller.tracker, controller.tree, self.label_width)
        self.addItem(self.task_list_item)
        self.timeline_item = TimelineItem(controller)
        self.timeline_item.setPos(self.label_width, 0)
        self.addItem(self.timeline_item)

        controller.tracker.positions_changed.connect(self._update_scene_rect)
        controller.headers_changed.connect(self._update_scene_rect)
        self._update_scene_rect()

    def set_tree(self, tree: TaskTree) -> None:
        self.controller.set_tree(tree)
        self.task_list_item.tree = tree
        self.task_list_item.update()

    def set_label_width(self, width: float) -> None:
        width = float(width)
        if width <= 0 or abs(width - self.label_width) < 0.5:
            return
        self.label_width = width
        self.task_list_item.set_width(width)
        self.timeline_item.setPos(width, 0)
        self._update_scene_rect()

    def timeline_x(self, scene_x: float) -> float:
        return scene_x - self.label_width

    def _update_scene_rect(self, *_args) -> None:
        width = self.label_width + self.controller.header_layout.total_width
        height = self.controller.tracker.content_bottom
        self.setSceneRect(QRectF(0, 0, width, height))
