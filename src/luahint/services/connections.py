"""Language-server connections shared by the documents of a project root."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from functools import partial
from dataclasses import dataclass
from typing import Any, Protocol

from luahint.core.documents import Document, TriggerEvent
from luahint.core.events import EventBus, Registration
from luahint.logging import get_logger

TEXT_CHANGED = "TextChanged"
DOCUMENT_CLOSED = "DocumentClosed"
SERVER_STATUS = "server.status"


class HintClient(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def is_running(self) -> bool: ...

    def request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        handler: Callable[[Any, Any], None] | None = None,
    ) -> int: ...

    def did_open(self, *, uri: str, language_id: str, text: str) -> int: ...

    def did_change(self, *, uri: str, text: str) -> int: ...

    def did_close(self, *, uri: str) -> None: ...


ClientFactory = Callable[[str, list[str], str], HintClient]


def _qprocess_client(name: str, cmd: list[str], root_dir: str) -> HintClient:
    from luahint.lsp.client import LspClient

    return LspClient(name, cmd, root_dir)


@dataclass(slots=True, frozen=True)
class ServerStatus:
    name: str
    message: str


@dataclass(slots=True)
class DocumentConnection:
    client_id: int
    document: Document
    sync: Registration


class ConnectionManager:
    """Starts language servers and keeps attached documents in sync.

    One client serves every document of the same server name and root
    directory, as long as its process is alive.
    """

    def __init__(self, events: EventBus, client_factory: ClientFactory | None = None) -> None:
        self.events = events
        self.logger = get_logger("connections")
        self._factory = client_factory or _qprocess_client
        self._ids = itertools.count(1)
        self._clients: dict[int, HintClient] = {}
        self._by_root: dict[tuple[str, str], int] = {}
        self._documents: dict[int, DocumentConnection] = {}
        self.events.subscribe(DOCUMENT_CLOSED, self._on_document_closed)

    def start(self, name: str, cmd: list[str], root_dir: str) -> int | None:
        key = (name, str(root_dir))
        existing = self._by_root.get(key)
        if existing is not None:
            if self.get(existing) is not None:
                return existing
            self._discard(existing)

        try:
            client = self._factory(name, list(cmd), str(root_dir))
            status = getattr(client, "status_message", None)
            if status is not None:
                status.connect(partial(self._forward_status, name))
            client.start()
        except (OSError, ValueError) as exc:
            self.logger.warning("Could not start language server {}: {}", name, exc)
            return None

        client_id = next(self._ids)
        self._clients[client_id] = client
        self._by_root[key] = client_id
        self.logger.debug("Client {} started for {}", client_id, root_dir)
        return client_id

    def client_count(self) -> int:
        return len(self._clients)

    def get(self, client_id: int | None) -> HintClient | None:
        if client_id is None:
            return None
        client = self._clients.get(client_id)
        if client is None or not client.is_running():
            return None
        return client

    def attach(self, client_id: int | None, document: Document) -> DocumentConnection | None:
        client = self.get(client_id)
        if client is None:
            return None

        self.detach(document)
        client.did_open(uri=document.uri, language_id=document.filetype, text=document.text)

        def sync(event: TriggerEvent) -> None:
            current = self.get(client_id)
            if current is not None:
                current.did_change(uri=event.document.uri, text=event.document.text)

        registration = self.events.register(TEXT_CHANGED, sync, document_id=document.id)
        connection = DocumentConnection(client_id=client_id, document=document, sync=registration)
        self._documents[document.id] = connection
        self.logger.debug("Attached {} to client {}", document.uri, client_id)
        return connection

    def connection_for(self, document: Document) -> DocumentConnection | None:
        return self._documents.get(document.id)

    def detach(self, document: Document) -> None:
        connection = self._documents.pop(document.id, None)
        if connection is None:
            return
        connection.sync.cancel()
        client = self.get(connection.client_id)
        if client is not None:
            client.did_close(uri=document.uri)

    def stop_all(self) -> None:
        for connection in list(self._documents.values()):
            self.detach(connection.document)
        for client in self._clients.values():
            client.stop()
        self._clients.clear()
        self._by_root.clear()
        self.logger.info("All language servers stopped")

    def _on_document_closed(self, event: TriggerEvent) -> None:
        self.detach(event.document)

    def _discard(self, client_id: int) -> None:
        client = self._clients.pop(client_id, None)
        if client is None:
            return
        client.stop()
        delete_later = getattr(client, "deleteLater", None)
        if callable(delete_later):
            delete_later()
        self.logger.debug("Client {} exited and was dropped", client_id)

    def _forward_status(self, name: str, message: str) -> None:
        self.events.emit(SERVER_STATUS, ServerStatus(name=name, message=message))
