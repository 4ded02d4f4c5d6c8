"""Enable/disable state machine that gates hint refreshes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from luahint.config import HintConfig, normalize
from luahint.core.documents import Document, TriggerEvent
from luahint.core.events import EventBus
from luahint.core.state import SessionState
from luahint.hints.fetcher import HintFetcher
from luahint.hints.overlay import OverlayStore
from luahint.logging import get_logger
from luahint.services.connections import DOCUMENT_CLOSED, ConnectionManager

FILETYPE = "FileType"


class Session:
    """Owns the enabled flag, the active config and the trigger bindings.

    ``setup`` may be called any number of times; each call replaces the
    previous bindings and re-binds the documents that are already open. Refreshes check the flag when the trigger fires, so
    responses to requests already in flight still reach the overlay after
    ``hide``.
    """

    def __init__(
        self,
        events: EventBus,
        connections: ConnectionManager,
        fetcher: HintFetcher,
        overlay: OverlayStore,
        state: SessionState | None = None,
    ) -> None:
        self.events = events
        self.connections = connections
        self.fetcher = fetcher
        self.overlay = overlay
        self.state = state or SessionState()
        self.logger = get_logger("session")
        self.events.subscribe(DOCUMENT_CLOSED, self._on_document_closed)

    @property
    def enabled(self) -> bool:
        return self.state.enabled

    @property
    def config(self) -> HintConfig:
        return self.state.config

    def show(self) -> None:
        self.state.enabled = True

    def hide(self) -> None:
        self.state.enabled = False
        self._clear_active()

    def toggle(self) -> None:
        self.state.enabled = not self.state.enabled
        if not self.state.enabled:
            self._clear_active()

    def focus(self, document: Document | None) -> None:
        self.state.active_document = document

    def setup(self, raw_options: Mapping[str, Any] | HintConfig | None = None) -> None:
        config = normalize(raw_options)
        self.state.config = config
        self.state.enabled = config.enabled_at_startup

        rebind = list(self.state.bound_documents.values())
        active = self.state.active_document
        if self.state.trigger_registration is not None:
            self.logger.debug("Replacing existing trigger binding")
            self.teardown()

        def on_filetype(event: TriggerEvent) -> None:
            if event.document.filetype == config.filetype:
                self._activate(config, event.document)

        self.state.trigger_registration = self.events.register(FILETYPE, on_filetype)
        for document in rebind:
            if document.filetype == config.filetype:
                self._activate(config, document)
        if rebind:
            self.state.active_document = active
        self.logger.info(
            "Hints {} for {} files, refreshing on {}",
            "enabled" if config.enabled_at_startup else "disabled",
            config.filetype,
            ", ".join(config.update),
        )

    def teardown(self) -> None:
        if self.state.trigger_registration is not None:
            self.state.trigger_registration.cancel()
            self.state.trigger_registration = None
        for registration in self.state.document_triggers.values():
            registration.cancel()
        self.state.document_triggers.clear()
        self.state.bound_documents.clear()

    def active_registrations(self) -> int:
        registration = self.state.trigger_registration
        return 1 if registration is not None and registration.active else 0

    def _activate(self, config: HintConfig, document: Document) -> None:
        root_dir = config.root_dir()
        client_id = self.connections.start(config.server.name, config.server.cmd, root_dir)
        self.connections.attach(client_id, document)
        self.state.active_document = document

        previous = self.state.document_triggers.pop(document.id, None)
        if previous is not None:
            previous.cancel()

        def refresh(event: TriggerEvent) -> None:
            self.state.active_document = event.document
            if self.state.enabled:
                self.fetcher.fetch(client_id, event.document)

        self.state.document_triggers[document.id] = self.events.register(
            config.update, refresh, document_id=document.id
        )
        self.state.bound_documents[document.id] = document
        self.logger.debug("Document {} bound to client {}", document.uri, client_id)

    def _clear_active(self) -> None:
        if self.state.active_document is not None:
            self.overlay.clear(self.state.active_document)

    def _on_document_closed(self, event: TriggerEvent) -> None:
        registration = self.state.document_triggers.pop(event.document.id, None)
        self.state.bound_documents.pop(event.document.id, None)
        if registration is not None:
            registration.cancel()
        self.overlay.clear(event.document)
        if self.state.active_document is event.document:
            self.state.active_document = None
