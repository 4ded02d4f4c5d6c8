"""Inlay hint requests and their translation into overlay annotations."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from luahint.core.documents import Document
from luahint.hints.overlay import Annotation, OverlayStore, RenderMode
from luahint.lsp.types import Hint, HintKind, Position, Range, inlay_hint_params, parse_hint
from luahint.services.connections import ConnectionManager

INLAY_HINT = "textDocument/inlayHint"

IgnoredHook = Callable[[str, Document, Any], None]


def document_range(document: Document) -> Range:
    return Range(
        start=Position(0, 0),
        end=Position(document.line_count - 1, document.last_line_length()),
    )


def to_annotation(mark_id: int, hint: Hint) -> Annotation:
    """Render one hint.

    Service positions are 1-based; overlay anchors are 0-based.
    """

    if hint.kind == HintKind.PARAMETER:
        text, mode = f": {hint.label}", RenderMode.INLINE_BEFORE
    else:
        text, mode = f"{hint.label}: ", RenderMode.INLINE_AFTER
    return Annotation(
        id=mark_id,
        text=text,
        line=max(0, hint.position.line - 1),
        column=max(0, hint.position.character - 1),
        render_mode=mode,
    )


class HintFetcher:
    """Requests hints for a document and hands the rendered batch to the overlay.

    Every failure stops here. ``on_ignored`` receives ``(reason, document,
    detail)`` for each dropped request or response and defaults to nothing.
    """

    def __init__(
        self,
        connections: ConnectionManager,
        overlay: OverlayStore,
        on_ignored: IgnoredHook | None = None,
    ) -> None:
        self.connections = connections
        self.overlay = overlay
        self.on_ignored = on_ignored

    def fetch(self, client_id: int | None, document: Document) -> None:
        client = self.connections.get(client_id)
        if client is None:
            self._ignore("no-connection", document, client_id)
            return

        params = inlay_hint_params(document.uri, document_range(document))

        def handler(error: Any, result: Any) -> None:
            self.handle_response(document, error, result)

        client.request(INLAY_HINT, params, handler)

    def handle_response(self, document: Document, error: Any, result: Any) -> None:
        if error is not None:
            self._ignore("error", document, error)
            return
        if not result:
            self._ignore("empty", document, result)
            return

        # No generation check: a late response still replaces the overlay.
        try:
            hints = [parse_hint(raw) for raw in result if isinstance(raw, dict)]
        except (TypeError, ValueError, AttributeError) as exc:
            self._ignore("malformed", document, exc)
            return
        batch = [to_annotation(index, hint) for index, hint in enumerate(hints, start=1)]
        self.overlay.apply(document, batch)

    def _ignore(self, reason: str, document: Document, detail: Any) -> None:
        if self.on_ignored is not None:
            self.on_ignored(reason, document, detail)
