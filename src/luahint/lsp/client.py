"""Async LSP client over stdio using QProcess."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from PySide6 import QtCore

from luahint.logging import get_logger
from luahint.lsp.json_rpc import FrameReader, encode_frame

ResponseHandler = Callable[[Any, Any], None]

METHOD_NOT_FOUND = -32601


@dataclass(slots=True)
class _PendingRequest:
    method: str
    handler: ResponseHandler | None


class LspClient(QtCore.QObject):
    """JSON-RPC client with request correlation and full-text document sync.

    Responses are delivered to ``handler(error, result)`` on the Qt thread,
    at most once per request. Messages sent before the ``initialize``
    handshake completes are queued and flushed once the server is ready.
    """

    started = QtCore.Signal()
    stopped = QtCore.Signal()
    ready = QtCore.Signal()
    notification_received = QtCore.Signal(str, object)
    status_message = QtCore.Signal(str)

    def __init__(
        self,
        name: str,
        cmd: list[str],
        root_dir: str,
        parent: QtCore.QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.name = name
        self.cmd = list(cmd)
        self.root_dir = str(root_dir)
        self.logger = get_logger(f"lsp.{name}")

        self._proc = QtCore.QProcess(self)
        self._proc.readyReadStandardOutput.connect(self._on_stdout_ready)
        self._proc.readyReadStandardError.connect(self._on_stderr_ready)
        self._proc.started.connect(self._on_process_started)
        self._proc.finished.connect(self._on_process_finished)
        self._proc.errorOccurred.connect(self._on_process_error)

        self._reader = FrameReader()
        self._next_request_id = 1
        self._pending: dict[int, _PendingRequest] = {}
        self._queued_messages: list[dict[str, Any]] = []
        self._doc_versions: dict[str, int] = {}

        self._running = False
        self._ready = False
        self._shutting_down = False
        self._shutdown_timer = QtCore.QTimer(self)
        self._shutdown_timer.setSingleShot(True)
        self._shutdown_timer.timeout.connect(self._force_terminate_if_running)
        self.server_capabilities: dict[str, Any] = {}

    @property
    def root_uri(self) -> str:
        return Path(os.path.abspath(self.root_dir)).as_uri()

    def is_running(self) -> bool:
        return self._proc.state() != QtCore.QProcess.ProcessState.NotRunning

    def is_ready(self) -> bool:
        return self._ready and self._running

    def start(self) -> None:
        if not self.cmd:
            raise ValueError(f"no command configured for language server {self.name!r}")
        self._proc.setProgram(self.cmd[0])
        self._proc.setArguments(self.cmd[1:])
        if os.path.isdir(self.root_dir):
            self._proc.setWorkingDirectory(self.root_dir)
        self.logger.info("Starting {} in {}", " ".join(self.cmd), self.root_dir)
        self._proc.start()

    def stop(self) -> None:
        state = self._proc.state()
        if state == QtCore.QProcess.ProcessState.NotRunning:
            self._reset()
            return

        self._shutting_down = True
        if state == QtCore.QProcess.ProcessState.Starting:
            self._force_terminate_if_running()
            return

        if self.is_ready():
            self.request("shutdown", {}, lambda _err, _res: self._send_exit())
            self._shutdown_timer.start(1200)
            return

        self._send_exit()
        self._force_terminate_if_running()

    def request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        handler: ResponseHandler | None = None,
    ) -> int:
        request_id = self._next_request_id
        self._next_request_id += 1
        self._pending[request_id] = _PendingRequest(method=method, handler=handler)
        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": params if isinstance(params, dict) else {},
        }
        self._send_or_queue(payload, requires_ready=method != "initialize")
        return request_id

    def notify(self, method: str, params: dict[str, Any] | None = None, *, requires_ready: bool = True) -> None:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params if isinstance(params, dict) else {},
        }
        self._send_or_queue(payload, requires_ready=requires_ready)

    def did_open(self, *, uri: str, language_id: str, text: str) -> int:
        if uri in self._doc_versions:
            return self.did_change(uri=uri, text=text)
        self._doc_versions[uri] = 1
        self.notify(
            "textDocument/didOpen",
            {"textDocument": {"uri": uri, "languageId": language_id, "version": 1, "text": text}},
        )
        return 1

    def did_change(self, *, uri: str, text: str) -> int:
        if uri not in self._doc_versions:
            return 0
        version = self._doc_versions[uri] + 1
        self._doc_versions[uri] = version
        self.notify(
            "textDocument/didChange",
            {
                "textDocument": {"uri": uri, "version": version},
                "contentChanges": [{"text": text}],
            },
        )
        return version

    def did_close(self, *, uri: str) -> None:
        if self._doc_versions.pop(uri, None) is not None:
            self.notify("textDocument/didClose", {"textDocument": {"uri": uri}})

    def _send_or_queue(self, payload: dict[str, Any], *, requires_ready: bool) -> None:
        if not self.is_running():
            return
        if requires_ready and not self.is_ready():
            self._queued_messages.append(payload)
            return
        self._send_now(payload)

    def _send_now(self, payload: dict[str, Any]) -> None:
        if not self.is_running():
            return
        written = int(self._proc.write(encode_frame(payload)))
        if written < 0 and not self._shutting_down:
            self.status_message.emit(f"LSP write failed: {self._proc.errorString()}")
            return
        self.logger.trace("--> {}", payload.get("method") or payload.get("id"))

    def _flush_queued_messages(self) -> None:
        queued = list(self._queued_messages)
        self._queued_messages.clear()
        for payload in queued:
            self._send_now(payload)

    def _send_exit(self) -> None:
        if self.is_running():
            self.notify("exit", {}, requires_ready=False)

    def _force_terminate_if_running(self) -> None:
        if not self.is_running():
            return
        self._proc.terminate()
        if not self._proc.waitForFinished(500):
            self._proc.kill()

    def _reset(self) -> None:
        self._running = False
        self._ready = False
        self._pending.clear()
        self._queued_messages.clear()
        self._doc_versions.clear()
        self._reader.reset()
        self.server_capabilities = {}

    def _on_process_started(self) -> None:
        self._running = True
        self.started.emit()
        root_uri = self.root_uri
        self.request(
            "initialize",
            {
                "processId": os.getpid(),
                "clientInfo": {"name": "luahint"},
                "rootUri": root_uri,
                "workspaceFolders": [{"uri": root_uri, "name": Path(self.root_dir).name or "workspace"}],
                "capabilities": {
                    "textDocument": {
                        "synchronization": {"didSave": False, "willSave": False},
                        "inlayHint": {"dynamicRegistration": False},
                    },
                    "workspace": {"workspaceFolders": True},
                },
            },
            self._on_initialize_response,
        )

    def _on_initialize_response(self, error: Any, result: Any) -> None:
        if error is not None:
            self._ready = False
            self.logger.warning("Initialize failed: {}", error)
            self.status_message.emit(f"LSP initialize failed: {error}")
            return
        caps = result.get("capabilities") if isinstance(result, dict) else None
        self.server_capabilities = caps if isinstance(caps, dict) else {}
        self._ready = True
        self.notify("initialized", {}, requires_ready=False)
        self.logger.info("Language server {} ready", self.name)
        self.ready.emit()
        self._flush_queued_messages()

    def _on_process_finished(self, exit_code: int, _exit_status: QtCore.QProcess.ExitStatus) -> None:
        self._shutdown_timer.stop()
        was_running = self._running
        self._reset()
        self._shutting_down = False
        if was_running:
            self.logger.info("Language server {} exited with code {}", self.name, exit_code)
            self.stopped.emit()

    def _on_process_error(self, error: QtCore.QProcess.ProcessError) -> None:
        if self._shutting_down and error in {
            QtCore.QProcess.ProcessError.Crashed,
            QtCore.QProcess.ProcessError.ReadError,
            QtCore.QProcess.ProcessError.WriteError,
        }:
            return
        self.logger.warning("Language server {} error: {}", self.name, self._proc.errorString())
        self.status_message.emit(f"LSP process error: {self._proc.errorString()}")

    def _on_stdout_ready(self) -> None:
        raw = bytes(self._proc.readAllStandardOutput())
        for message in self._reader.feed(raw):
            self._handle_message(message)

    def _on_stderr_ready(self) -> None:
        text = bytes(self._proc.readAllStandardError()).decode("utf-8", errors="replace").strip()
        if text:
            self.logger.debug("stderr: {}", text)

    def _handle_message(self, message: dict[str, Any]) -> None:
        if "id" in message and "method" not in message:
            self._handle_response(message)
            return

        method = str(message.get("method") or "")
        if not method:
            return

        if "id" in message:
            self._send_now(
                {
                    "jsonrpc": "2.0",
                    "id": message.get("id"),
                    "error": {"code": METHOD_NOT_FOUND, "message": f"Method not supported: {method}"},
                }
            )
            return

        params = message.get("params")
        if method in {"window/logMessage", "window/showMessage"} and isinstance(params, dict):
            text = str(params.get("message") or "").strip()
            if text:
                self.status_message.emit(text)
        self.notification_received.emit(method, params)

    def _handle_response(self, message: dict[str, Any]) -> None:
        try:
            request_id = int(message.get("id"))
        except (TypeError, ValueError):
            return
        pending = self._pending.pop(request_id, None)
        if pending is None or pending.handler is None:
            return
        pending.handler(message.get("error"), message.get("result"))
