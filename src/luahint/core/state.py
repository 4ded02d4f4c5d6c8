"""Runtime state containers."""

from __future__ import annotations

from dataclasses import dataclass, field

from luahint.config import HintConfig
from luahint.core.documents import Document
from luahint.core.events import Registration


@dataclass(slots=True)
class SessionState:
    enabled: bool = True
    config: HintConfig = field(default_factory=HintConfig)
    trigger_registration: Registration | None = None
    document_triggers: dict[int, Registration] = field(default_factory=dict)
    bound_documents: dict[int, Document] = field(default_factory=dict)
    active_document: Document | None = None
