from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from services.storefront.app.services.cart import Cart, CartLine, format_money


class CartItemAdd(BaseModel):
    client_id: str
    product_id: str
    title: str
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)
    options: dict[str, str] = Field(default_factory=dict)


class CartLineRef(BaseModel):
    client_id: str
    product_id: str
    options: dict[str, str] = Field(default_factory=dict)


class CartQuantityUpdate(CartLineRef):
    quantity: int


class CartLineOut(BaseModel):
    key: str
    product_id: str
    title: str
    options_signature: str
    unit_price: str
    quantity: int
    subtotal: str


class CartView(BaseModel):
    client_id: str
    lines: list[CartLineOut] = Field(default_factory=list)
    count: int = 0
    total: str = "0.00"


def line_out(line: CartLine) -> CartLineOut:
    key = line.product_id if not line.options_signature else f"{line.product_id}|{line.options_signature}"
    return CartLineOut(
        key=key,
        product_id=line.product_id,
        title=line.title,
        options_signature=line.options_signature,
        unit_price=format_money(line.unit_price),
        quantity=line.quantity,
        subtotal=format_money(line.subtotal),
    )


def cart_view(client_id: str, cart: Cart) -> CartView:
    return CartView(
        client_id=client_id,
        lines=[line_out(line) for line in cart.lines()],
        count=cart.count,
        total=format_money(cart.total),
    )
