from __future__ import annotations

import threading

from services.storefront.app.services.cart import Cart
from services.storefront.app.services.submissions import SubmissionTracker


class InMemoryStore:
    """Single owner of per-client storefront state that is not persisted."""

    def __init__(self) -> None:
        self._carts: dict[str, Cart] = {}
        self._lock = threading.Lock()
        self.submissions = SubmissionTracker()

    def cart(self, client_id: str) -> Cart:
        with self._lock:
            cart = self._carts.get(client_id)
            if cart is None:
                cart = self._carts[client_id] = Cart()
            return cart


store = InMemoryStore()


def get_store() -> InMemoryStore:
    return store
