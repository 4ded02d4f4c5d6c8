"""Open document records shared by the editor, triggers and connections."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from pathlib import Path

from luahint.services.language_id import language_id_for_path

_next_document_id = itertools.count(1)


@dataclass(slots=True, eq=False)
class Document:
    id: int
    uri: str
    filetype: str
    text: str = ""
    path: Path | None = None

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1

    def last_line_length(self) -> int:
        return len(self.text.rsplit("\n", 1)[-1])


@dataclass(slots=True)
class TriggerEvent:
    """Payload delivered to trigger callbacks."""

    name: str
    document: Document
    data: dict = field(default_factory=dict)


def open_document(path: Path | str, text: str | None = None) -> Document:
    source = Path(path).expanduser().resolve()
    if text is None:
        text = source.read_text(encoding="utf-8") if source.exists() else ""
    return Document(
        id=next(_next_document_id),
        uri=source.as_uri(),
        filetype=language_id_for_path(source),
        text=text,
        path=source,
    )


def scratch_document(text: str = "", filetype: str = "plaintext") -> Document:
    doc_id = next(_next_document_id)
    return Document(id=doc_id, uri=f"untitled:Untitled-{doc_id}", filetype=filetype, text=text)
