import asyncio
import logging
import os
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from chronos.feeds.base import BaseNewsFeed
from chronos.notifier.x_publisher import BasePublisher
from chronos.storage.logger import AuditLog
from chronos.storage.models import AppConfig, ControllerSnapshot, Coordinates, NewsItem, NewsTopic
from chronos.storage.repository import NewsHistory
from chronos.utils.tz_utils import format_countdown

GATEWAY_DISRUPTION_MESSAGE = "AI Gateway disruption. Retrying next cycle..."
LINK_DELAY_SECONDS = float(os.getenv("X_LINK_DELAY_SECONDS", "2"))

LocationProvider = Callable[[], Awaitable[Optional[Coordinates]]]
Listener = Callable[[ControllerSnapshot], None]

logger = logging.getLogger(__name__)


class CycleState(str, Enum):
    idle = "idle"
    fetching = "fetching"
    syndicating = "syndicating"  # sub-estado de fetching
    cooldown = "cooldown"


class UpdateCycleController:
    """
    Controla o ciclo de atualização: countdown -> fetch -> checagem de novidade ->
    sindicação opcional -> histórico/log -> countdown rearmado.

    Roda em um único event loop; o guard de estado (checado antes do primeiro
    await) garante no máximo um fetch em andamento.
    """

    def __init__(
        self,
        feed: BaseNewsFeed,
        publisher: BasePublisher,
        config: Optional[AppConfig] = None,
        location_provider: Optional[LocationProvider] = None,
        history: Optional[NewsHistory] = None,
        audit: Optional[AuditLog] = None,
        link_delay_seconds: float = LINK_DELAY_SECONDS,
    ):
        self.feed = feed
        self.publisher = publisher
        self.config = config if config is not None else AppConfig()
        self.history = history if history is not None else NewsHistory()
        self.audit = audit if audit is not None else AuditLog()
        self.link_delay_seconds = link_delay_seconds
        self._location_provider = location_provider
        self.location: Optional[Coordinates] = None
        self.state = CycleState.idle
        self.error: Optional[str] = None
        self.countdown = self.config.interval_seconds
        self._listeners: List[Listener] = []
        self._pending_link: Optional[object] = None

    @property
    def is_loading(self) -> bool:
        return self.state in (CycleState.fetching, CycleState.syndicating)

    # ---------- Observadores ----------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("snapshot listener failed")

    def snapshot(self) -> ControllerSnapshot:
        return ControllerSnapshot(
            state=self.state.value,
            history=[n.model_copy(deep=True) for n in self.history.all()],
            config=self.config.model_copy(),
            logs=self.audit.entries(),
            is_loading=self.is_loading,
            error=self.error,
            countdown_seconds=self.countdown,
            countdown_display=format_countdown(self.countdown),
            location_acquired=self.location is not None,
        )

    # ---------- Ciclo ----------
    def _location_hint(self) -> Optional[Coordinates]:
        if self.config.local_mode and self.location is not None:
            return self.location
        return None

    def _rearm(self) -> None:
        self.state = CycleState.cooldown
        self.countdown = self.config.interval_seconds
        self.state = CycleState.idle
        self._notify()

    async def tick(self, seconds: int = 1) -> bool:
        """Avança o countdown; ao chegar em zero roda o ciclo automático."""
        if self.is_loading:
            return False
        self.countdown = max(0, self.countdown - seconds)
        if self.countdown > 0:
            return False
        return await self.trigger_update()

    async def trigger_update(self) -> bool:
        """Roda um ciclo completo. Retorna False (no-op) se já houver um em andamento."""
        if self.is_loading:
            logger.debug("update already in flight, trigger ignored")
            return False

        self.state = CycleState.fetching
        self.error = None
        topic = self.config.topic.value
        self.audit.add(f"Scanning news grid: {topic}")
        self._notify()

        try:
            item = await self.feed.fetch(topic, self._location_hint())
        except Exception as e:
            logger.warning("content provider failed for '%s': %s", topic, e)
            self.audit.add("Interference detected in AI gateway.")
            self.error = GATEWAY_DISRUPTION_MESSAGE
        else:
            await self._accept(item)
        finally:
            self._rearm()
        return True

    async def _accept(self, item: NewsItem) -> None:
        if self.history.is_duplicate(item):
            self.audit.add("Signal static. Duplicate headline suppressed.")
            return

        if self.config.auto_post_to_x:
            if self.config.is_x_connected:
                self.state = CycleState.syndicating
                self._notify()
                self.audit.add("Autonomous syndication protocol triggered...")
                if await self._publish(item):
                    item.mark_posted()
                    self.audit.add("Broadcast complete. Syndicated to X.")
            else:
                self.audit.add("Syndication blocked: X account not linked.")

        self.history.add(item)
        self.audit.add(f"Intelligence synchronized: {item.sentiment.value.upper()}")

    async def _publish(self, item: NewsItem) -> bool:
        try:
            ok = await self.publisher.publish(item)
        except Exception as e:
            logger.warning("publisher failed for item %s: %s", item.id, e)
            ok = False
        if not ok:
            self.audit.add("Syndication failed. Item kept unposted.")
        return bool(ok)

    # ---------- Publicação manual ----------
    async def post_item(self, item_id: str) -> bool:
        item = self.history.get(item_id)
        if item is None:
            raise KeyError(item_id)
        if not self.config.is_x_connected:
            self.audit.add("Manual uplink refused: X account not linked.")
            self._notify()
            return False

        self.audit.add("Establishing manual uplink...")
        if not await self._publish(item):
            self._notify()
            return False
        self.history.mark_posted(item.id)
        self.audit.add("Manual transmission successful.")
        self._notify()
        return True

    # ---------- Conta X (autorização simulada) ----------
    async def link_account(self) -> None:
        if self.config.is_x_connected or self._pending_link is not None:
            return
        token = self._pending_link = object()
        self.audit.add("Negotiating X authorization...")
        await asyncio.sleep(self.link_delay_seconds)
        if self._pending_link is not token:
            # unlink chegou durante a espera
            self.audit.add("X authorization cancelled.")
            self._notify()
            return
        self._pending_link = None
        self.config.is_x_connected = True
        self.audit.add("X account linked.")
        self._notify()

    def unlink_account(self) -> None:
        self._pending_link = None
        self.config.is_x_connected = False
        self.audit.add("X account unlinked.")
        self._notify()

    # ---------- Configuração ----------
    def set_topic(self, topic: Union[NewsTopic, str]) -> None:
        self.config.topic = topic
        self._notify()

    def set_interval(self, minutes: int) -> None:
        self.config.update_interval_minutes = minutes
        # timer reinicia com o novo intervalo
        self.countdown = self.config.interval_seconds
        self._notify()

    def toggle_local_mode(self) -> bool:
        if self.location is None:
            return False
        self.config.local_mode = not self.config.local_mode
        self._notify()
        return True

    def toggle_auto_post(self) -> bool:
        self.config.auto_post_to_x = not self.config.auto_post_to_x
        self._notify()
        return self.config.auto_post_to_x

    async def acquire_location(self) -> Optional[Coordinates]:
        if self._location_provider is not None:
            try:
                self.location = await self._location_provider()
            except Exception as e:
                logger.info("location lookup failed: %s", e)
                self.location = None
        if self.location is None:
            self.audit.add("Location services bypassed.")
        self._notify()
        return self.location
