"""Cart session storage.

Carts live in the Django cache under ``cart:<session key>`` and expire after
``CART_TTL_SECONDS``. Writes are last-writer-wins per key.
"""

from typing import Optional, Protocol

from django.conf import settings
from django.core.cache import caches

from .domain import Cart

KEY_PREFIX = "cart:"


class CartStore(Protocol):
    def get(self, key: str) -> Optional[Cart]: ...

    def put(self, key: str, cart: Cart, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...


class CacheCartStore:
    """``CartStore`` backed by a configured Django cache alias."""

    def __init__(self, alias: Optional[str] = None):
        self.alias = alias or getattr(settings, "CART_CACHE_ALIAS", "default")

    @property
    def cache(self):
        return caches[self.alias]

    def _key(self, key: str) -> str:
        return f"{KEY_PREFIX}{key}"

    def get(self, key: str) -> Optional[Cart]:
        cart = self.cache.get(self._key(key))
        if cart is not None and not isinstance(cart, Cart):
            # Stale payload from an older layout
            self.cache.delete(self._key(key))
            return None
        return cart

    def put(self, key: str, cart: Cart, ttl: int) -> None:
        self.cache.set(self._key(key), cart, timeout=ttl)

    def delete(self, key: str) -> None:
        self.cache.delete(self._key(key))


def cart_ttl() -> int:
    return int(getattr(settings, "CART_TTL_SECONDS", 7200))
