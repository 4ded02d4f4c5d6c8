from __future__ import annotations

from typing import Any

import pytest

from luahint.config import LuahintSettings
from luahint.core.app import LuahintContext, build_context
from luahint.core.documents import Document, TriggerEvent, scratch_document


class FakeSignal:
    def __init__(self) -> None:
        self.slots: list[Any] = []

    def connect(self, slot) -> None:
        self.slots.append(slot)

    def emit(self, *args: Any) -> None:
        for slot in list(self.slots):
            slot(*args)


class FakeClient:
    """In-memory stand-in for a language-server client."""

    def __init__(self, name: str, cmd: list[str], root_dir: str) -> None:
        self.name = name
        self.cmd = cmd
        self.root_dir = root_dir
        self.running = False
        self.requests: list[tuple[str, dict[str, Any], Any]] = []
        self.opened: list[str] = []
        self.changes: list[tuple[str, str]] = []
        self.closed: list[str] = []
        self.stops = 0
        self.status_message = FakeSignal()

    def start(self) -> None:
        if self.cmd == ["missing-server"]:
            raise OSError("no such file")
        self.running = True

    def stop(self) -> None:
        self.stops += 1
        self.running = False

    def is_running(self) -> bool:
        return self.running

    def request(self, method, params=None, handler=None) -> int:
        self.requests.append((method, params or {}, handler))
        return len(self.requests)

    def did_open(self, *, uri: str, language_id: str, text: str) -> int:
        self.opened.append(uri)
        return 1

    def did_change(self, *, uri: str, text: str) -> int:
        self.changes.append((uri, text))
        return len(self.changes) + 1

    def did_close(self, *, uri: str) -> None:
        self.closed.append(uri)

    def respond(self, index: int = -1, error: Any = None, result: Any = None) -> None:
        _method, _params, handler = self.requests[index]
        handler(error, result)


class ClientFactory:
    def __init__(self) -> None:
        self.clients: list[FakeClient] = []

    def __call__(self, name: str, cmd: list[str], root_dir: str) -> FakeClient:
        client = FakeClient(name, cmd, root_dir)
        self.clients.append(client)
        return client

    @property
    def last(self) -> FakeClient:
        return self.clients[-1]


@pytest.fixture
def factory() -> ClientFactory:
    return ClientFactory()


@pytest.fixture
def ignored() -> list[tuple[str, Document, Any]]:
    return []


@pytest.fixture
def ctx(factory, ignored, tmp_path, monkeypatch) -> LuahintContext:
    monkeypatch.setenv("LUAHINT_HOME", str(tmp_path / "home"))
    return build_context(
        LuahintSettings(),
        client_factory=factory,
        on_ignored=lambda reason, doc, detail: ignored.append((reason, doc, detail)),
    )


@pytest.fixture
def lua_doc() -> Document:
    return scratch_document("local function f(a, b) end\nf(1, 2)\n", filetype="lua")


def fire(ctx: LuahintContext, name: str, document: Document) -> None:
    ctx.events.emit(name, TriggerEvent(name=name, document=document))


def hint(line: int, character: int, label: str, kind: int = 1) -> dict[str, Any]:
    return {"position": {"line": line, "character": character}, "label": label, "kind": kind}
