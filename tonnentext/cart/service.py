"""
Cart store: reconciles the local cart snapshot with the remote storefront cart.

The remote cart is the only source of truth. Every successful query or
mutation response replaces the local snapshot wholesale; nothing is merged.

Concurrency model (single event loop, no threads):
- ``ensure_session`` is serialized by a lock, so concurrent callers share
  one validate-or-create sequence and never create two carts.
- Each remote call takes a monotonic sequence number when it is issued.
  A response older than the last applied one is ignored, so a slow,
  superseded request can no longer overwrite a newer snapshot.
- No retries: every failure is reported once to the caller.
"""
import asyncio
import inspect
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from tonnentext.config import get_settings
from tonnentext.errors import (
    ConfigurationError,
    ERROR_CART_CREATE_FAILED,
    ERROR_CART_EMPTY,
    ERROR_CART_VALIDATION_FAILED,
    ERROR_MUTATION_FAILED,
    ERROR_VARIANT_NOT_CONFIGURED,
    MutationError,
    NotFoundError,
    SessionError,
    StorefrontError,
    StorefrontUserError,
)
from tonnentext.labels.constants import PRICE_PER_UNIT
from tonnentext.labels.models import LabelConfiguration, validate_quantity
from tonnentext.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from tonnentext.money import to_decimal
from tonnentext.storefront import RemoteCart, StorefrontClient
from .models import CartSnapshot
from .storage import MemorySessionStorage, SessionStorage, build_session_storage

logger = get_logger(__name__)

Listener = Callable[[CartSnapshot], Any]


class CartState(str, Enum):
    """
    Session lifecycle.

    Flow:
        uninitialized -> validating -> ready <-> mutating
        ready -> uninitialized (remote reports the cart as not found)
    """
    UNINITIALIZED = "uninitialized"
    VALIDATING = "validating"
    READY = "ready"
    MUTATING = "mutating"


async def notify_listeners(listeners: Sequence[Listener], snapshot: CartSnapshot) -> None:
    """Call sync or async listeners; a failing listener does not stop the others."""
    for listener in list(listeners):
        try:
            result = listener(snapshot)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Cart listener %r failed", listener)


class CartStore:
    """
    Single canonical cart for one client.

    All consumers (badge counter, drawer, totals) read through ``snapshot()``.
    """

    def __init__(
        self,
        client: StorefrontClient,
        storage: Optional[SessionStorage] = None,
        *,
        variant_id: Optional[str] = None,
        unit_price: Decimal = PRICE_PER_UNIT,
    ):
        self.client = client
        self.storage = storage or MemorySessionStorage()
        self.variant_id = variant_id if variant_id is not None else client.settings.label_variant_id
        self.unit_price = to_decimal(unit_price)

        self._cart_id: Optional[str] = None
        self._state = CartState.UNINITIALIZED
        self._snapshot: Optional[CartSnapshot] = None
        self._session_lock = asyncio.Lock()
        self._listeners: List[Listener] = []
        self._in_flight = 0
        self._issued_seq = 0
        self._applied_seq = 0

    # ==================== READ-ONLY STATE ====================

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def cart_id(self) -> Optional[str]:
        return self._cart_id

    @property
    def current(self) -> Optional[CartSnapshot]:
        """Last applied snapshot (a cache, may be stale)."""
        return self._snapshot

    # ==================== OBSERVERS ====================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new snapshot after every
        successful local mutation. Returns an unsubscribe function.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== PERSISTENCE (best-effort) ====================

    async def _load_handle(self) -> Optional[str]:
        try:
            return await self.storage.get()
        except Exception as e:
            logger.warning("Failed to read cart session handle, using in-memory handle: %s", e)
            return self._cart_id

    async def _persist_handle(self, cart_id: str) -> None:
        try:
            await self.storage.set(cart_id)
        except Exception as e:
            logger.warning("Failed to persist cart session handle: %s", e)

    async def _forget_handle(self, cart_id: str) -> None:
        try:
            # Another client may already have replaced it
            if await self.storage.get() == cart_id:
                await self.storage.delete()
        except Exception as e:
            logger.warning("Failed to clear cart session handle: %s", e)

    # ==================== SNAPSHOT APPLICATION ====================

    def _next_seq(self) -> int:
        self._issued_seq += 1
        return self._issued_seq

    def _apply(self, cart: RemoteCart, seq: int) -> CartSnapshot:
        """Replace the snapshot with ``cart`` unless a newer response already landed."""
        if cart.id != self._cart_id or seq < self._applied_seq:
            logger.debug(
                "Ignoring stale cart response #%d for %s (applied #%d)",
                seq, sanitize_id_for_logging(cart.id), self._applied_seq,
            )
            return self._snapshot if self._snapshot is not None else CartSnapshot.from_remote(cart, self.unit_price)
        self._applied_seq = seq
        self._snapshot = CartSnapshot.from_remote(cart, self.unit_price)
        return self._snapshot

    def _invalidate(self, cart_id: str) -> None:
        if self._cart_id == cart_id:
            logger.info("Cart %s no longer exists remotely", sanitize_id_for_logging(cart_id))
            self._cart_id = None
            self._snapshot = None
            self._state = CartState.UNINITIALIZED

    # ==================== SESSION ====================

    async def ensure_session(self) -> str:
        """
        Return a valid cart handle, creating a remote cart if needed.

        Safe to call concurrently and repeatedly.

        Raises:
            ConfigurationError: Storefront not configured
            SessionError: Validation or creation failed
        """
        async with self._session_lock:
            stored = await self._load_handle()
            candidate = stored or self._cart_id

            if candidate and candidate == self._cart_id and self._state in (CartState.READY, CartState.MUTATING):
                return candidate

            self._state = CartState.VALIDATING
            failure = ERROR_CART_VALIDATION_FAILED
            try:
                if candidate:
                    seq = self._next_seq()
                    cart = await self.client.query_cart(candidate)
                    if cart is not None:
                        self._cart_id = candidate
                        self._state = CartState.READY
                        if stored != candidate:
                            await self._persist_handle(candidate)
                        self._apply(cart, seq)
                        return candidate

                    self._invalidate(candidate)
                    self._cart_id = None
                    await self._forget_handle(candidate)

                failure = ERROR_CART_CREATE_FAILED
                seq = self._next_seq()
                cart = await self.client.create_cart()
            except ConfigurationError:
                self._state = CartState.UNINITIALIZED
                raise
            except StorefrontError as e:
                self._state = CartState.UNINITIALIZED
                logger.error("%s: %s", failure, e)
                raise SessionError(f"{failure}: {e}") from e

            self._cart_id = cart.id
            self._state = CartState.READY
            await self._persist_handle(cart.id)
            self._apply(cart, seq)
            return cart.id

    # ==================== READ ====================

    async def snapshot(self) -> CartSnapshot:
        """
        Query the remote cart and return the derived snapshot.

        If the remote no longer knows the session, a new session is created
        and its (empty) snapshot returned.
        """
        for _ in range(2):
            cart_id = await self.ensure_session()
            seq = self._next_seq()
            try:
                cart = await self.client.query_cart(cart_id)
            except ConfigurationError:
                raise
            except StorefrontError as e:
                logger.error("Failed to query cart %s: %s", sanitize_id_for_logging(cart_id), e)
                raise SessionError(f"{ERROR_CART_VALIDATION_FAILED}: {e}") from e

            if cart is None:
                self._invalidate(cart_id)
                await self._forget_handle(cart_id)
                continue
            return self._apply(cart, seq)

        raise SessionError(ERROR_CART_VALIDATION_FAILED)

    async def checkout_url(self) -> str:
        """Checkout URL of the current cart. An empty cart cannot be checked out."""
        snapshot = await self.snapshot()
        if snapshot.is_empty:
            raise MutationError(ERROR_CART_EMPTY, operation="checkout")
        if not snapshot.checkout_url:
            raise SessionError(f"{ERROR_CART_VALIDATION_FAILED}: no checkout URL")
        return snapshot.checkout_url

    # ==================== MUTATIONS ====================

    async def _drop_if_gone(self, cart_id: str) -> None:
        """After a failed mutation, reset the session if the remote cart no longer exists."""
        try:
            cart = await self.client.query_cart(cart_id)
        except (ConfigurationError, StorefrontError) as e:
            logger.warning("Could not re-check cart %s: %s", sanitize_id_for_logging(cart_id), e)
            return
        if cart is None:
            self._invalidate(cart_id)
            await self._forget_handle(cart_id)

    async def _mutate(
        self,
        operation: str,
        call: Callable[[str], Awaitable[RemoteCart]],
    ) -> CartSnapshot:
        cart_id = await self.ensure_session()
        seq = self._next_seq()
        self._in_flight += 1
        self._state = CartState.MUTATING
        try:
            cart = await call(cart_id)
        except ConfigurationError:
            raise
        except StorefrontUserError as e:
            remote_message = str(e)
            logger.warning("Cart %s rejected: %s", operation, sanitize_string_for_logging(remote_message, 200))
            await self._drop_if_gone(cart_id)
            raise MutationError(
                remote_message, operation=operation, remote_message=remote_message, is_user_error=True
            ) from e
        except StorefrontError as e:
            logger.error("Cart %s failed: %s", operation, e)
            await self._drop_if_gone(cart_id)
            raise MutationError(ERROR_MUTATION_FAILED, operation=operation) from e
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and self._state == CartState.MUTATING:
                self._state = CartState.READY

        snapshot = self._apply(cart, seq)
        await notify_listeners(self._listeners, snapshot)
        return snapshot

    async def _require_line(self, line_id: Optional[str]) -> None:
        if not line_id:
            raise NotFoundError(line_id)
        if self._snapshot is None and not (self._cart_id or await self._load_handle()):
            # No session yet, so no line can exist; do not create a cart to say so
            raise NotFoundError(line_id)
        snapshot = self._snapshot if self._snapshot is not None else await self.snapshot()
        item = snapshot.find(line_id)
        if item is None or not item.is_addressable:
            raise NotFoundError(line_id)

    async def add(self, config: LabelConfiguration) -> CartSnapshot:
        """
        Add one configured label line.

        Raises:
            ConfigurationError: Storefront or label variant not configured
            MutationError: The remote rejected or failed the mutation
        """
        if not self.variant_id:
            raise ConfigurationError(ERROR_VARIANT_NOT_CONFIGURED)
        validate_quantity(config.quantity)

        snapshot = await self._mutate(
            "add",
            lambda cart_id: self.client.add_line(
                cart_id, self.variant_id, config.quantity, config.to_attributes()
            ),
        )
        logger.info(
            "Added %dx %s to cart %s",
            config.quantity, sanitize_string_for_logging(config.text), sanitize_id_for_logging(self._cart_id),
        )
        return snapshot

    async def remove(self, line_id: Optional[str]) -> CartSnapshot:
        """
        Remove one line by its remote handle.

        Raises:
            NotFoundError: No line with this handle in the snapshot (nothing is sent)
        """
        await self._require_line(line_id)
        return await self._mutate("remove", lambda cart_id: self.client.remove_lines(cart_id, [line_id]))

    async def update_quantity(self, line_id: Optional[str], quantity: int) -> CartSnapshot:
        """
        Set a line's quantity. 0 is rejected; removal is explicit via ``remove``.

        Raises:
            ValueError: Quantity outside 1..99
            NotFoundError: No line with this handle in the snapshot
        """
        validate_quantity(quantity)
        await self._require_line(line_id)
        return await self._mutate(
            "update", lambda cart_id: self.client.update_line(cart_id, line_id, quantity)
        )

    async def clear(self) -> CartSnapshot:
        """Remove every line in one batched mutation. An empty cart is a successful no-op."""
        snapshot = await self.snapshot()
        line_ids = snapshot.line_ids
        if not line_ids:
            return snapshot
        return await self._mutate("clear", lambda cart_id: self.client.remove_lines(cart_id, line_ids))


# Singleton instance
_cart_store: Optional[CartStore] = None


def get_cart_store() -> CartStore:
    """
    Get CartStore singleton wired from environment settings.

    Raises:
        ConfigurationError: Naming every missing required variable
    """
    global _cart_store
    if _cart_store is None:
        settings = get_settings().validate()
        _cart_store = CartStore(StorefrontClient(settings), build_session_storage(settings))
    return _cart_store
