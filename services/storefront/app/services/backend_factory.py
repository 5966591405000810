from __future__ import annotations

import os

from services.storefront.app.constants import DEFAULT_API_BASE
from services.storefront.app.services.backend_base import StorefrontBackend
from services.storefront.app.services.backend_mock import MockStorefrontBackend

_BACKEND: StorefrontBackend | None = None
_BACKEND_KEY: tuple[str, str] | None = None


def get_backend() -> StorefrontBackend:
    """Select the shop backend based on env vars.

    Defaults to the mock backend so tests and local dev are deterministic unless
    explicitly configured otherwise. The instance is cached per (mode, api base) since
    the mock keeps users and orders in memory.
    """

    global _BACKEND, _BACKEND_KEY

    mode = os.getenv("STOREFRONT_BACKEND", "mock").strip().lower()
    api_base = os.getenv("STOREFRONT_API_BASE", DEFAULT_API_BASE)
    key = (mode, api_base)

    if _BACKEND is not None and _BACKEND_KEY == key:
        return _BACKEND

    if mode == "mock":
        backend: StorefrontBackend = MockStorefrontBackend()
    elif mode == "http":
        from services.storefront.app.services.backend_http import HttpStorefrontBackend

        backend = HttpStorefrontBackend(api_base)
    else:
        raise ValueError(f"Unknown STOREFRONT_BACKEND={mode!r}. Expected mock or http.")

    _BACKEND, _BACKEND_KEY = backend, key
    return backend
