"""Plain-text editor that paints overlay markers and raises refresh triggers."""

from __future__ import annotations

from PySide6 import QtCore, QtGui, QtWidgets

from luahint.config import EditorSettings
from luahint.core.documents import Document, TriggerEvent
from luahint.core.events import EventBus
from luahint.hints.overlay import OVERLAY_CHANGED, Annotation, OverlayChange, OverlayStore, RenderMode

HINT_ALPHA = 170


def hint_rect(mode: RenderMode, anchor: QtCore.QRect, width: int, height: int) -> QtCore.QRect:
    """Area of a hint next to the caret rectangle ``anchor``.

    Before-anchor hints end one pixel left of the anchor, after-anchor hints
    start on it. Both are top-aligned with the line.
    """

    if mode is RenderMode.INLINE_BEFORE:
        left = anchor.left() - width - 1
    else:
        left = anchor.left()
    return QtCore.QRect(max(0, left), anchor.top(), width, height)


class HintEditor(QtWidgets.QPlainTextEdit):
    """Editor bound to one :class:`Document`.

    Emits ``TextChanged`` on edits, ``CursorHold`` once the cursor rests for
    ``idle_ms`` and ``InsertLeave`` when focus leaves the widget.
    """

    def __init__(
        self,
        document: Document,
        overlay: OverlayStore,
        events: EventBus,
        settings: EditorSettings,
        parent: QtWidgets.QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.doc = document
        self.overlay = overlay
        self.events = events
        self.settings = settings

        font = QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.SystemFont.FixedFont)
        font.setPointSize(settings.font_size)
        self.setFont(font)
        self.setLineWrapMode(QtWidgets.QPlainTextEdit.LineWrapMode.NoWrap)
        self.setPlainText(document.text)

        self._idle_timer = QtCore.QTimer(self)
        self._idle_timer.setSingleShot(True)
        self._idle_timer.setInterval(settings.idle_ms)
        self._idle_timer.timeout.connect(self._on_idle)

        self.textChanged.connect(self._on_text_changed)
        self.cursorPositionChanged.connect(self._idle_timer.start)
        self._overlay_registration = self.events.register(OVERLAY_CHANGED, self._on_overlay_changed)

    def release(self) -> None:
        self._idle_timer.stop()
        self._overlay_registration.cancel()

    def emit_trigger(self, name: str) -> None:
        self.events.emit(name, TriggerEvent(name=name, document=self.doc))

    def _on_text_changed(self) -> None:
        self.doc.text = self.toPlainText()
        self.emit_trigger("TextChanged")
        self._idle_timer.start()

    def _on_idle(self) -> None:
        self.emit_trigger("CursorHoldI" if self.hasFocus() else "CursorHold")

    def _on_overlay_changed(self, change: OverlayChange) -> None:
        if change.document is self.doc:
            self.viewport().update()

    def focusOutEvent(self, event: QtGui.QFocusEvent) -> None:  # noqa: N802
        self.emit_trigger("InsertLeave")
        super().focusOutEvent(event)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # noqa: N802
        super().paintEvent(event)
        marks = self.overlay.marks(self.doc)
        if not marks:
            return
        painter = QtGui.QPainter(self.viewport())
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        hint_font = QtGui.QFont(self.font())
        hint_font.setPointSizeF(max(6.0, self.font().pointSizeF() * 0.8))
        hint_font.setItalic(True)
        painter.setFont(hint_font)
        metrics = QtGui.QFontMetrics(hint_font)
        for mark in marks:
            self._paint_mark(painter, metrics, mark, event.rect())
        painter.end()

    def _paint_mark(
        self,
        painter: QtGui.QPainter,
        metrics: QtGui.QFontMetrics,
        mark: Annotation,
        clip: QtCore.QRect,
    ) -> None:
        block = self.document().findBlockByNumber(mark.line)
        if not block.isValid() or not block.isVisible():
            return
        cursor = QtGui.QTextCursor(block)
        cursor.setPosition(block.position() + min(mark.column, max(0, block.length() - 1)))
        rect = self.cursorRect(cursor)
        if not rect.intersects(clip):
            return

        if mark.render_mode is RenderMode.INLINE_BEFORE:
            color = QtGui.QColor(self.settings.parameter_color)
        else:
            color = QtGui.QColor(self.settings.type_color)
        color.setAlpha(HINT_ALPHA)
        area = hint_rect(mark.render_mode, rect, metrics.horizontalAdvance(mark.text), metrics.height())
        # Text only: the code under a hint stays visible.
        painter.setPen(color)
        painter.drawText(area, QtCore.Qt.AlignmentFlag.AlignLeft | QtCore.Qt.AlignmentFlag.AlignTop, mark.text)
