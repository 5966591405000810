from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal

from services.storefront.app.constants import MAX_QUANTITY, MIN_QUANTITY

_CENTS = Decimal("0.01")

LineKey = tuple[str, str]


class CartLineNotFoundError(KeyError):
    def __init__(self, key: LineKey) -> None:
        super().__init__(f"No cart line for product={key[0]!r} options={key[1]!r}")
        self.key = key


def clamp_quantity(quantity: int) -> int:
    return max(MIN_QUANTITY, min(MAX_QUANTITY, int(quantity)))


def to_decimal(value: Decimal | str | int | float) -> Decimal:
    # str() keeps 19.995 as 19.995 instead of its binary expansion.
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half up. Used for every displayed amount."""
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return str(round_money(value))


def options_signature(options: Mapping[str, str] | None) -> str:
    """Stable signature of selected product options, e.g. ``size=1lb;flavor=salt``."""
    if not options:
        return ""
    return ";".join(f"{name}={options[name]}" for name in sorted(options))


def line_key(product_id: str, options: Mapping[str, str] | str | None = None) -> LineKey:
    if isinstance(options, str):
        return (product_id, options)
    return (product_id, options_signature(options))


@dataclass(frozen=True, slots=True)
class CartLine:
    product_id: str
    title: str
    unit_price: Decimal
    quantity: int
    options_signature: str = ""

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.options_signature)

    @property
    def subtotal(self) -> Decimal:
        return round_money(self.unit_price * self.quantity)


class Cart:
    """A client's cart snapshot.

    Lines are unique per (product_id, options signature) and keep insertion order.
    Quantities never leave [1, 99]; removing a line is only possible via ``remove``.
    Safe to share between request threads.
    """

    def __init__(self) -> None:
        self._lines: dict[LineKey, CartLine] = {}
        self._lock = threading.Lock()

    def add_item(
        self,
        product_id: str,
        title: str,
        unit_price: Decimal | str | int | float,
        quantity: int = 1,
        options: Mapping[str, str] | None = None,
    ) -> CartLine:
        key = line_key(product_id, options)
        price = to_decimal(unit_price)
        with self._lock:
            existing = self._lines.get(key)
            if existing is not None:
                line = replace(existing, quantity=clamp_quantity(existing.quantity + quantity))
            else:
                line = CartLine(
                    product_id=product_id,
                    title=title,
                    unit_price=price,
                    quantity=clamp_quantity(quantity),
                    options_signature=key[1],
                )
            self._lines[key] = line
            return line

    def increment(self, key: LineKey) -> CartLine:
        return self._adjust(key, lambda quantity: quantity + 1)

    def decrement(self, key: LineKey) -> CartLine:
        return self._adjust(key, lambda quantity: quantity - 1)

    def update_quantity(self, key: LineKey, quantity: int) -> CartLine:
        return self._adjust(key, lambda _: quantity)

    def remove(self, key: LineKey) -> bool:
        with self._lock:
            return self._lines.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def lines(self) -> list[CartLine]:
        with self._lock:
            return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines())

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines()), Decimal("0.00"))

    def _adjust(self, key: LineKey, new_quantity: Callable[[int], int]) -> CartLine:
        with self._lock:
            line = self._lines.get(key)
            if line is None:
                raise CartLineNotFoundError(key)
            updated = replace(line, quantity=clamp_quantity(new_quantity(line.quantity)))
            self._lines[key] = updated
            return updated
