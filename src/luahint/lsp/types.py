"""Small LSP dataclasses/helpers for positions and inlay hints."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Position:
    line: int
    character: int

    def to_lsp(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    def to_lsp(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_lsp(), "end": self.end.to_lsp()}


class HintKind(enum.IntEnum):
    OTHER = 0
    PARAMETER = 1
    TYPE = 2

    @classmethod
    def from_wire(cls, value: Any) -> HintKind:
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.OTHER


@dataclass(frozen=True)
class Hint:
    position: Position
    label: str
    kind: HintKind


def _label_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        # InlayHintLabelPart[]
        return "".join(
            str(part.get("value") or "") if isinstance(part, dict) else str(part) for part in raw
        )
    return str(raw or "")


def parse_hint(raw: dict[str, Any]) -> Hint:
    position = raw.get("position") or {}
    return Hint(
        position=Position(
            line=int(position.get("line", 0)),
            character=int(position.get("character", 0)),
        ),
        label=_label_text(raw.get("label")),
        kind=HintKind.from_wire(raw.get("kind")),
    )


def inlay_hint_params(uri: str, range_: Range) -> dict[str, Any]:
    return {"textDocument": {"uri": uri}, "range": range_.to_lsp()}
