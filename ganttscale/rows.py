from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping

from PyQt6.QtCore import QObject, pyqtSignal

from .constants import DEFAULT_ROW_HEIGHT, HEADER_HEIGHT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowMetrics:
    index: int
    height: float
    top: float
    visible: bool
    expanded: bool
    entity_id: Any
    depth: int = 0
    parent_index: int | None = None
    has_children: bool = False

    @property
    def extent(self) -> float:
        return self.height if self.visible else 0.0

    @property
    def bottom(self) -> float:
        return self.top + self.extent

    @property
    def center(self) -> float:
        return self.top + (self.extent / 2.0)


class RowAlignmentTracker(QObject):
    positions_changed = pyqtSignal(dict)

    def __init__(
        self,
        header_height: float = HEADER_HEIGHT,
        default_row_height: float = DEFAULT_ROW_HEIGHT,
    ) -> None:
        super().__init__()
        self.header_height = float(header_height)
        self.default_row_height = float(default_row_height)
        self._rows: list[RowMetrics] = []
        self._entities: list[Any] = []
        self._expanded_state: dict[int, bool] | None = None
        self._index_by_entity: dict[Any, int] = {}
        self._visible_indices: list[int] = []
        self._visible_bottoms: list[float] = []
        self._tree = None

    def calculate_positions(
        self,
        entities: Iterable[Any],
        expanded_state: Mapping[int, bool] | None = None,
    ) -> dict[int, RowMetrics]:
        self._entities = list(entities)
        self._expanded_state = dict(expanded_state) if expanded_state is not None else None
        rows: list[RowMetrics] = []
        open_rows: list[bool] = []
        index_by_entity: dict[Any, int] = {}
        top = self.header_height
        for index, entity in enumerate(self._entities):
            entity_id = getattr(entity, "id", index)
            parent_id = getattr(entity, "parent_id", None)
            parent_index = index_by_entity.get(parent_id) if parent_id is not None else None
            if parent_id is not None and parent_index is None:
                logger.debug("Row %d: parent %r not above it, treating as root", index, parent_id)
            expanded = self._expanded_for(index, entity)
            visible = parent_index is None or open_rows[parent_index]
            depth = 0 if parent_index is None else rows[parent_index].depth + 1
            height = self._height_for(entity)
            rows.append(
                RowMetrics(
                    index=index,
                    height=height,
                    top=top,
                    visible=visible,
                    expanded=expanded,
                    entity_id=entity_id,
                    depth=depth,
                    parent_index=parent_index,
                )
            )
            open_rows.append(visible and expanded)
            index_by_entity.setdefault(entity_id, index)
            if visible:
                top += height

        parents = {row.parent_index for row in rows if row.parent_index is not None}
        self._rows = [replace(row, has_children=True) if row.index in parents else row for row in rows]
        self._index_by_entity = index_by_entity
        self._rebuild_lookup()
        logger.debug("Calculated %d rows, content height %.1f", len(self._rows), self.total_height)
        self._notify()
        return self.snapshot()

    def handle_toggle(self, parent_index: int, expanded: bool) -> None:
        if not 0 <= parent_index < len(self._rows):
            logger.debug("Ignoring toggle of unknown row %r", parent_index)
            return
        rows = self._rows
        if self._expanded_state is None:
            self._expanded_state = {row.index: row.expanded for row in rows}
        self._expanded_state[parent_index] = expanded
        parent = replace(rows[parent_index], expanded=expanded)
        rows[parent_index] = parent
        # Rows at or above parent_index keep their offsets.
        self._reflow_from(parent_index + 1, parent.bottom)
        self._rebuild_lookup()
        self._notify()

    def set_row_height(self, index: int, height: float) -> None:
        if not 0 <= index < len(self._rows) or height <= 0:
            return
        row = self._rows[index]
        if row.height == height:
            return
        self._rows[index] = replace(row, height=float(height))
        self._reflow_from(index + 1, self._rows[index].bottom)
        self._rebuild_lookup()
        self._notify()

    def set_header_height(self, height: float) -> None:
        if height == self.header_height:
            return
        self.header_height = float(height)
        self._recalculate()

    def set_default_row_height(self, height: float) -> None:
        if height <= 0 or height == self.default_row_height:
            return
        self.default_row_height = float(height)
        self._recalculate()

    def row_at(self, y: float) -> RowMetrics | None:
        if not self._visible_bottoms:
            return None
        position = bisect_right(self._visible_bottoms, y)
        if position >= len(self._visible_indices):
            return None
        row = self._rows[self._visible_indices[position]]
        if row.top <= y < row.bottom:
            return row
        return None

    def rows_in_range(self, y_min: float, y_max: float) -> list[RowMetrics]:
        if not self._visible_bottoms:
            return []
        start = bisect_left(self._visible_bottoms, y_min)
        end = bisect_right(self._visible_bottoms, y_max)
        end = min(len(self._visible_indices), end + 1)
        return [
            self._rows[index]
            for index in self._visible_indices[start:end]
            if self._rows[index].top <= y_max
        ]

    def row_by_index(self, index: int) -> RowMetrics | None:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def row_for_entity(self, entity_id: Any) -> RowMetrics | None:
        index = self._index_by_entity.get(entity_id)
        if index is None:
            return None
        return self._rows[index]

    def snapshot(self) -> dict[int, RowMetrics]:
        return {row.index: row for row in self._rows}

    def visible_rows(self) -> list[RowMetrics]:
        return [self._rows[index] for index in self._visible_indices]

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def total_height(self) -> float:
        return sum(row.extent for row in self._rows)

    @property
    def content_bottom(self) -> float:
        return self.header_height + self.total_height

    def sync(self) -> None:
        self._notify()

    def clear(self) -> None:
        self._rows = []
        self._entities = []
        self._expanded_state = None
        self._index_by_entity = {}
        self._rebuild_lookup()
        self._notify()

    def track(self, tree) -> None:
        if self._tree is not None:
            self._tree.rows_changed.disconnect(self._on_rows_changed)
            self._tree.expanded_changed.disconnect(self._on_expanded_changed)
        self._tree = tree
        tree.rows_changed.connect(self._on_rows_changed)
        tree.expanded_changed.connect(self._on_expanded_changed)
        self._on_rows_changed()

    def _on_rows_changed(self) -> None:
        if self._tree is None:
            return
        self.calculate_positions(self._tree.ordered_tasks())

    def _on_expanded_changed(self, entity_id: str, expanded: bool) -> None:
        row = self.row_for_entity(entity_id)
        if row is None:
            self._on_rows_changed()
            return
        self.handle_toggle(row.index, expanded)

    def _recalculate(self) -> None:
        if not self._entities:
            return
        self.calculate_positions(self._entities, self._expanded_state)

    def _reflow_from(self, start_index: int, top: float) -> None:
        rows = self._rows
        for index in range(start_index, len(rows)):
            row = rows[index]
            parent_index = row.parent_index
            visible = parent_index is None or (rows[parent_index].visible and rows[parent_index].expanded)
            if row.top != top or row.visible != visible:
                rows[index] = replace(row, top=top, visible=visible)
            if visible:
                top += row.height

    def _expanded_for(self, index: int, entity: Any) -> bool:
        if self._expanded_state is not None and index in self._expanded_state:
            return bool(self._expanded_state[index])
        return bool(getattr(entity, "expanded", True))

    def _height_for(self, entity: Any) -> float:
        height = getattr(entity, "row_height", None)
        if isinstance(height, (int, float)) and height > 0:
            return float(height)
        return self.default_row_height

    def _rebuild_lookup(self) -> None:
        self._visible_indices = [row.index for row in self._rows if row.visible]
        self._visible_bottoms = [self._rows[index].bottom for index in self._visible_indices]

    def _notify(self) -> None:
        self.positions_changed.emit(self.snapshot())
