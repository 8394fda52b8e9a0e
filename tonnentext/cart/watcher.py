"""
Cart change subscription.

Combines the store's change signal, a fixed-interval timer and explicit
refreshes ("drawer opened", "tab became visible") into one subscription.
Every trigger causes at least one fresh ``snapshot()`` read, delivered to
all listeners. The remote cart has no push channel, so the timer is what
picks up changes made in another tab.
"""
import asyncio
import contextlib
from typing import Callable, List, Optional

from tonnentext.errors import CartError
from tonnentext.logging import get_logger
from .models import CartSnapshot
from .service import CartStore, Listener, notify_listeners

logger = get_logger(__name__)


class CartWatcher:
    """Polls ``CartStore.snapshot()`` on change, on timer and on demand."""

    def __init__(self, store: CartStore, interval: Optional[float] = None):
        self.store = store
        self.interval = interval if interval is not None else store.client.settings.poll_interval
        self.last_error: Optional[Exception] = None
        self._listeners: List[Listener] = []
        self._wakeup = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot consumer. Returns a function removing it again."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _on_change(self, _snapshot: CartSnapshot) -> None:
        self._wakeup.set()

    def refresh(self) -> None:
        """Request a fresh read as soon as possible."""
        self._wakeup.set()

    async def poll_once(self) -> Optional[CartSnapshot]:
        """Read the cart once and deliver it. Failures are logged, not raised."""
        try:
            snapshot = await self.store.snapshot()
        except CartError as e:
            self.last_error = e
            logger.warning("Cart poll failed: %s", e)
            return None
        self.last_error = None
        await notify_listeners(self._listeners, snapshot)
        return snapshot

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception as e:
                # The loop outlives any single failed read
                self.last_error = e
                logger.exception("Unexpected cart poll failure")
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            # A signal raised while polling is still pending here, so it triggers the next read
            self._wakeup.clear()

    def start(self) -> None:
        if self.running:
            return
        self._unsubscribe = self.store.subscribe(self._on_change)
        self._task = asyncio.create_task(self._run())
        logger.debug("Cart watcher started (interval %.1fs)", self.interval)

    async def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def __aenter__(self) -> "CartWatcher":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()
