from __future__ import annotations

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QColor, QPainter, QPen
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsObject

from .constants import (
    HEADER_PRIMARY_HEIGHT,
    HEADER_SECONDARY_HEIGHT,
    INDENT_STEP,
    LABEL_WIDTH,
    OVERFLOW_INDICATOR_WIDTH,
)
from .headers import HeaderLayout, HeaderTier
from .rows import RowMetrics

GRID_COLOR = QColor(220, 220, 220)
TEXT_COLOR = QColor(60, 60, 60)
HEADER_FILL = QColor(248, 248, 248)
BACKGROUND_FILL = QColor(252, 252, 252)
BAR_FILL = QColor(74, 144, 226)
OVERFLOW_FILL = QColor(200, 120, 60)


class TaskListItem(QGraphicsObject):
    def __init__(self, tracker, tree=None, width: float = LABEL_WIDTH) -> None:
        super().__init__()
        self.tracker = tracker
        self.tree = tree
        self.label_width = float(width)
        self.rows: dict[int, RowMetrics] = {}
        self._rect = QRectF()
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemUsesExtendedStyleOption)
        self.setZValue(10)
        tracker.positions_changed.connect(self._on_positions_changed)
        self._on_positions_changed(tracker.snapshot())

    def boundingRect(self) -> QRectF:
        return QRectF(self._rect)

    def set_width(self, width: float) -> None:
        if width <= 0 or width == self.label_width:
            return
        self.label_width = float(width)
        self._sync_rect()
        self.update()

    def _on_positions_changed(self, rows: dict) -> None:
        self.rows = dict(rows)
        self._sync_rect()
        self.update()

    def _sync_rect(self) -> None:
        bottom = self.tracker.header_height
        for row in self.rows.values():
            bottom = max(bottom, row.bottom)
        rect = QRectF(0, 0, self.label_width, bottom)
        if rect != self._rect:
            self.prepareGeometryChange()
            self._rect = rect

    def _label_for(self, row: RowMetrics) -> str:
        if self.tree is None:
            return str(row.entity_id)
        task = self.tree.get_task(row.entity_id)
        return task.name if task is not None else str(row.entity_id)

    def paint(self, painter: QPainter, option, widget=None) -> None:
        rect = option.exposedRect if option else self.boundingRect()
        painter.fillRect(rect, BACKGROUND_FILL)
        header_rect = QRectF(0, 0, self.label_width, self.tracker.header_height)
        painter.fillRect(header_rect, HEADER_FILL)

        grid_pen = QPen(GRID_COLOR)
        grid_pen.setWidth(1)
        text_pen = QPen(TEXT_COLOR)
        visible = [row for row in self.rows.values() if row.visible]
        for position, row in enumerate(sorted(visible, key=lambda item: item.top)):
            if row.bottom < rect.top() or row.top > rect.bottom():
                continue
            row_rect = QRectF(0, row.top, self.label_width, row.height)
            if position % 2:
                painter.fillRect(row_rect, QColor(246, 246, 246))
            painter.setPen(grid_pen)
            painter.drawLine(0, int(row.bottom), int(self.label_width), int(row.bottom))

            indent = 4 + row.depth * INDENT_STEP
            if row.has_children:
                marker = "▾" if row.expanded else "▸"
                painter.setPen(text_pen)
                painter.drawText(
                    QRectF(indent, row.top, INDENT_STEP, row.height),
                    Qt.AlignmentFlag.AlignVCenter,
                    marker,
                )
            label_left = indent + INDENT_STEP
            label_rect = QRectF(label_left, row.top, self.label_width - label_left - 4, row.height)
            painter.setPen(text_pen)
            painter.drawText(label_rect, Qt.AlignmentFlag.AlignVCenter, self._label_for(row))

        painter.setPen(grid_pen)
        painter.drawLine(int(self.label_width), int(rect.top()), int(self.label_width), int(rect.bottom()))

    def mousePressEvent(self, event) -> None:
        row = self.tracker.row_at(event.pos().y())
        if row is None or not row.has_children or self.tree is None:
            super().mousePressEvent(event)
            return
        indent = 4 + row.depth * INDENT_STEP
        if indent <= event.pos().x() < indent + INDENT_STEP:
            self.tree.toggle_expanded(row.entity_id)
            event.accept()
            return
        super().mousePressEvent(event)


class TimelineItem(QGraphicsObject):
    def __init__(self, controller) -> None:
        super().__init__()
        self.controller = controller
        self.rows: dict[int, RowMetrics] = {}
        self.header_layout: HeaderLayout = controller.header_layout
        self._rect = QRectF()
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemUsesExtendedStyleOption)
        controller.tracker.positions_changed.connect(self._on_positions_changed)
        controller.headers_changed.connect(self._on_headers_changed)
        self._on_positions_changed(controller.tracker.snapshot())

    def boundingRect(self) -> QRectF:
        return QRectF(self._rect)

    def _on_positions_changed(self, rows: dict) -> None:
        self.rows = dict(rows)
        self._sync_rect()
        self.update()

    def _on_headers_changed(self, layout: HeaderLayout) -> None:
        self.header_layout = layout
        self._sync_rect()
        self.update()

    def _sync_rect(self) -> None:
        bottom = self.controller.tracker.header_height
        for row in self.rows.values():
            bottom = max(bottom, row.bottom)
        rect = QRectF(0, 0, self.header_layout.total_width, bottom)
        if rect != self._rect:
            self.prepareGeometryChange()
            self._rect = rect

    def paint(self, painter: QPainter, option, widget=None) -> None:
        rect = option.exposedRect if option else self.boundingRect()
        layout = self.header_layout
        header_height = self.controller.tracker.header_height
        painter.fillRect(rect, BACKGROUND_FILL)
        painter.fillRect(QRectF(rect.left(), 0, rect.width(), header_height), HEADER_FILL)

        grid_pen = QPen(GRID_COLOR)
        grid_pen.setWidth(1)

        # Vertical lines follow the secondary tier
        painter.setPen(grid_pen)
        for period in layout.secondary:
            if period.right < rect.left() or period.x_offset > rect.right():
                continue
            x = period.right
            painter.drawLine(int(x), int(HEADER_PRIMARY_HEIGHT), int(x), int(rect.bottom()))

        painter.drawLine(int(rect.left()), int(header_height), int(rect.right()), int(header_height))
        for row in self.rows.values():
            if not row.visible or row.bottom < rect.top() or row.top > rect.bottom():
                continue
            painter.drawLine(int(rect.left()), int(row.bottom), int(rect.right()), int(row.bottom))

        secondary_top = float(HEADER_PRIMARY_HEIGHT)
        secondary_height = float(HEADER_SECONDARY_HEIGHT)
        if layout.collapsed or not layout.primary:
            # Secondary tier takes the whole header band
            secondary_top = 0.0
            secondary_height = header_height
        self._paint_tier(painter, rect, layout, HeaderTier.PRIMARY, 0.0, HEADER_PRIMARY_HEIGHT)
        self._paint_tier(painter, rect, layout, HeaderTier.SECONDARY, secondary_top, secondary_height)

        for bar in self.controller.task_bars():
            bar_rect = QRectF(bar.x, bar.top, bar.width, bar.height)
            if not bar_rect.intersects(rect):
                continue
            if bar.overflow:
                indicator = QRectF(bar.x, bar.top, max(bar.width, OVERFLOW_INDICATOR_WIDTH), bar.height)
                painter.fillRect(indicator, OVERFLOW_FILL)
                painter.setPen(QPen(QColor(255, 255, 255)))
                painter.drawText(indicator, Qt.AlignmentFlag.AlignCenter, "...")
            else:
                painter.fillRect(bar_rect, BAR_FILL)

    def _paint_tier(
        self,
        painter: QPainter,
        rect: QRectF,
        layout: HeaderLayout,
        tier: HeaderTier,
        top: float,
        height: float,
    ) -> None:
        font = painter.font()
        font.setBold(tier is HeaderTier.PRIMARY)
        painter.setFont(font)
        for index, period in enumerate(layout.periods(tier)):
            period_rect = QRectF(period.x_offset, top, period.width, height)
            visible = period_rect.intersected(rect)
            if visible.isEmpty():
                continue
            fill = QColor(252, 252, 252) if index % 2 == 0 else QColor(246, 246, 246)
            painter.fillRect(period_rect, fill)
            painter.setPen(QPen(GRID_COLOR))
            painter.drawLine(int(period.x_offset), int(top), int(period.x_offset), int(top + height))
            if not layout.shows_label(period):
                continue
            painter.setPen(QPen(TEXT_COLOR))
            painter.drawText(
                QRectF(visible.left() + 2, top, max(0.0, visible.width() - 4), height),
                Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignHCenter,
                period.label,
            )
