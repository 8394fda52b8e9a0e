"""Cart package: read model, session storage, store and change watcher."""
from .models import CartItem, CartSnapshot
from .service import CartState, CartStore, get_cart_store
from .storage import (
    FileSessionStorage,
    MemorySessionStorage,
    RedisSessionStorage,
    SessionStorage,
    build_session_storage,
)
from .watcher import CartWatcher

__all__ = [
    "CartItem",
    "CartSnapshot",
    "CartState",
    "CartStore",
    "CartWatcher",
    "FileSessionStorage",
    "MemorySessionStorage",
    "RedisSessionStorage",
    "SessionStorage",
    "build_session_storage",
    "get_cart_store",
]
