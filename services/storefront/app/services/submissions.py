from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable

from services.storefront.app.constants import RATE_LIMIT_WINDOW_SECONDS


class SubmissionTracker:
    """Per-client checkout gate.

    Tracks which clients have a purchase in flight and which are cooling down after a
    rate-limit answer. Both only disable the checkout control; nothing is retried.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._cooldown_until: dict[str, float] = {}

    def begin(self, client_id: str) -> bool:
        with self._lock:
            if client_id in self._in_flight:
                return False
            self._in_flight.add(client_id)
            return True

    def end(self, client_id: str) -> None:
        with self._lock:
            self._in_flight.discard(client_id)

    def in_progress(self, client_id: str) -> bool:
        with self._lock:
            return client_id in self._in_flight

    def start_cooldown(self, client_id: str, seconds: int | None) -> int:
        if seconds is None:
            seconds = RATE_LIMIT_WINDOW_SECONDS
        with self._lock:
            self._cooldown_until[client_id] = self._clock() + seconds
        return seconds

    def cooldown_remaining(self, client_id: str) -> int:
        with self._lock:
            until = self._cooldown_until.get(client_id)
            if until is None:
                return 0
            remaining = until - self._clock()
            if remaining <= 0:
                del self._cooldown_until[client_id]
                return 0
        return math.ceil(remaining)
