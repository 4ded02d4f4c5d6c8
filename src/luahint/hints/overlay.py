"""Namespaced storage for rendered inline hint markers."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from luahint.core.documents import Document
from luahint.core.events import EventBus

OVERLAY_CHANGED = "overlay.changed"


class RenderMode(enum.Enum):
    INLINE_BEFORE = "inline-before"
    INLINE_AFTER = "inline-after"


@dataclass(frozen=True, slots=True)
class Annotation:
    id: int
    text: str
    line: int
    column: int
    render_mode: RenderMode


@dataclass(frozen=True, slots=True)
class OverlayChange:
    namespace: str
    document: Document


class OverlayStore:
    """Owns one marker namespace per document.

    Markers are keyed by id inside a namespace, so setting an id that already
    exists replaces the previous marker. ``apply`` replaces the whole batch.
    """

    def __init__(self, namespace: str, events: EventBus | None = None) -> None:
        self.namespace = namespace
        self.events = events
        self._marks: dict[int, dict[int, Annotation]] = {}

    def apply(self, document: Document, batch: Iterable[Annotation]) -> None:
        marks: dict[int, Annotation] = {}
        for annotation in batch:
            marks[annotation.id] = annotation
        # Replace, never accumulate: markers of the previous batch are dropped.
        if marks:
            self._marks[document.id] = marks
        else:
            self._marks.pop(document.id, None)
        self._notify(document)

    def clear(self, document: Document) -> None:
        if self._marks.pop(document.id, None) is None:
            return
        self._notify(document)

    def marks(self, document: Document) -> list[Annotation]:
        return sorted(self._marks.get(document.id, {}).values(), key=lambda mark: mark.id)

    def count(self, document: Document) -> int:
        return len(self._marks.get(document.id, ()))

    def _notify(self, document: Document) -> None:
        if self.events is not None:
            self.events.emit(OVERLAY_CHANGED, OverlayChange(self.namespace, document))
