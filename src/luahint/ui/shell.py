"""Main PySide shell."""
from __future__ import annotations

from pathlib import Path

from PySide6 import QtCore, QtGui, QtWidgets

from luahint.core.app import LuahintContext
from luahint.core.documents import Document, TriggerEvent, open_document, scratch_document
from luahint.core.session import FILETYPE
from luahint.logging import get_logger
from luahint.services.connections import DOCUMENT_CLOSED, SERVER_STATUS, ServerStatus
from luahint.ui.editor import HintEditor


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, ctx: LuahintContext) -> None:
        super().__init__()
        self.ctx = ctx
        self.settings = ctx.settings
        self.logger = get_logger("ui")
        self._editors: list[HintEditor] = []

        self._setup_window()
        self._build_layout()
        self._build_actions()
        self._wire_events()
        self._refresh_status()

    def _setup_window(self) -> None:
        self.setWindowTitle(self.settings.app_name)
        self.resize(960, 680)

    def _build_layout(self) -> None:
        self.tabs = QtWidgets.QTabWidget(self)
        self.tabs.setTabsClosable(True)
        self.tabs.setDocumentMode(True)
        self.tabs.tabCloseRequested.connect(self._close_tab)
        self.tabs.currentChanged.connect(self._on_tab_changed)
        self.setCentralWidget(self.tabs)

        self.status_label = QtWidgets.QLabel(self)
        self.statusBar().addPermanentWidget(self.status_label)

    def _build_actions(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        self._add_action(file_menu, "&New", QtGui.QKeySequence.StandardKey.New, self._new_scratch)
        self._add_action(file_menu, "&Open…", QtGui.QKeySequence.StandardKey.Open, self._open_dialog)
        self._add_action(file_menu, "&Close Tab", QtGui.QKeySequence.StandardKey.Close, self._close_current)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Quit", QtGui.QKeySequence.StandardKey.Quit, self.close)

        hints_menu = self.menuBar().addMenu("&Hints")
        self._add_action(hints_menu, "&Show", "Ctrl+Alt+S", self._show_hints)
        self._add_action(hints_menu, "&Hide", "Ctrl+Alt+D", self._hide_hints)
        self._add_action(hints_menu, "&Toggle", "Ctrl+Alt+H", self._toggle_hints)
        self._add_action(hints_menu, "&Refresh", "F5", self._refresh_current)

    def _wire_events(self) -> None:
        self._status_registration = self.ctx.events.register(SERVER_STATUS, self._on_server_status)

    def _on_server_status(self, status: ServerStatus) -> None:
        self.logger.info("{}: {}", status.name, status.message)
        self.statusBar().showMessage(f"{status.name}: {status.message}", 6000)

    def _add_action(self, menu: QtWidgets.QMenu, text: str, shortcut, slot) -> QtGui.QAction:
        action = QtGui.QAction(text, self)
        action.setShortcut(QtGui.QKeySequence(shortcut))
        action.triggered.connect(slot)
        menu.addAction(action)
        return action

    def open_paths(self, paths: list[Path]) -> None:
        for path in paths:
            try:
                document = open_document(path)
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.error("Cannot open {}: {}", path, exc)
                self.statusBar().showMessage(f"Cannot open {path}: {exc}", 4000)
                continue
            self._add_document(document)

    def _add_document(self, document: Document) -> None:
        editor = HintEditor(document, self.ctx.overlay, self.ctx.events, self.settings.editor, self)
        self._editors.append(editor)
        title = document.path.name if document.path else document.uri
        index = self.tabs.addTab(editor, title)
        self.tabs.setCurrentIndex(index)
        self.ctx.session.focus(document)
        self.ctx.events.emit(FILETYPE, TriggerEvent(name=FILETYPE, document=document))
        editor.setFocus()

    def _current_editor(self) -> HintEditor | None:
        widget = self.tabs.currentWidget()
        return widget if isinstance(widget, HintEditor) else None

    def _new_scratch(self) -> None:
        self._add_document(scratch_document(filetype=self.settings.hints.filetype))

    def _open_dialog(self) -> None:
        files, _ = QtWidgets.QFileDialog.getOpenFileNames(
            self, "Open files", str(Path.cwd()), "Lua files (*.lua);;All files (*)"
        )
        self.open_paths([Path(item) for item in files])

    def _close_current(self) -> None:
        self._close_tab(self.tabs.currentIndex())

    def _close_tab(self, index: int) -> None:
        editor = self.tabs.widget(index)
        if not isinstance(editor, HintEditor):
            return
        self.tabs.removeTab(index)
        editor.release()
        self._editors.remove(editor)
        self.ctx.events.emit(DOCUMENT_CLOSED, TriggerEvent(name=DOCUMENT_CLOSED, document=editor.doc))
        editor.deleteLater()

    def _on_tab_changed(self, _index: int) -> None:
        editor = self._current_editor()
        self.ctx.session.focus(editor.doc if editor else None)

    def _show_hints(self) -> None:
        self.ctx.session.show()
        self._refresh_status()

    def _hide_hints(self) -> None:
        self.ctx.session.hide()
        self._refresh_status()

    def _toggle_hints(self) -> None:
        self.ctx.session.toggle()
        self._refresh_status()

    def _refresh_current(self) -> None:
        editor = self._current_editor()
        if editor is not None:
            editor.emit_trigger("CursorHold")

    def _refresh_status(self) -> None:
        state = "on" if self.ctx.session.enabled else "off"
        self.status_label.setText(f"hints: {state}")

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # noqa: N802
        for editor in list(self._editors):
            editor.release()
        self._status_registration.cancel()
        self.ctx.stop()
        super().closeEvent(event)


def apply_palette(app: QtWidgets.QApplication) -> None:
    app.setStyle("Fusion")
    app.setAttribute(QtCore.Qt.ApplicationAttribute.AA_DontShowIconsInMenus, True)
