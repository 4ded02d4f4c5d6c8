"""luahint application composition root."""

from __future__ import annotations

from dataclasses import dataclass

from luahint.config import LuahintSettings
from luahint.core.events import EventBus
from luahint.core.session import Session
from luahint.hints.fetcher import HintFetcher, IgnoredHook
from luahint.hints.overlay import OverlayStore
from luahint.logging import get_logger
from luahint.services.connections import ClientFactory, ConnectionManager


@dataclass(slots=True)
class LuahintContext:
    settings: LuahintSettings
    events: EventBus
    overlay: OverlayStore
    connections: ConnectionManager
    fetcher: HintFetcher
    session: Session

    def start(self) -> None:
        self.session.setup(self.settings.hints)

    def stop(self) -> None:
        self.session.teardown()
        self.connections.stop_all()


def build_context(
    settings: LuahintSettings,
    *,
    client_factory: ClientFactory | None = None,
    on_ignored: IgnoredHook | None = None,
) -> LuahintContext:
    events = EventBus()
    overlay = OverlayStore(settings.app_name, events)
    connections = ConnectionManager(events, client_factory)
    fetcher = HintFetcher(connections, overlay, on_ignored=on_ignored)
    session = Session(events, connections, fetcher, overlay)

    logger = get_logger("bootstrap")
    logger.info("luahint context ready")

    return LuahintContext(
        settings=settings,
        events=events,
        overlay=overlay,
        connections=connections,
        fetcher=fetcher,
        session=session,
    )
