from __future__ import annotations

from typing import Any

from packages.shared.schemas.notice_v1 import CheckoutOutcomeV1, NoticeV1
from packages.shared.schemas.order_v1 import OrderV1
from pydantic import BaseModel, ConfigDict, Field

from services.storefront.app.models.cart import CartView


class PurchaseItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    quantity: int = Field(..., ge=1, le=99)


class PurchaseRequest(BaseModel):
    """Body of POST /orders/purchase: product ids and quantities only."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[PurchaseItem] = Field(..., min_length=1)
    shipping_address: dict[str, Any] | None = Field(default=None, alias="shippingAddress")
    save_address: bool | None = Field(default=None, alias="saveAddress")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CheckoutRequest(BaseModel):
    client_id: str
    shipping_address: dict[str, Any] | None = None
    save_address: bool | None = None
    # Where the user should land after logging in, if the session is missing.
    return_to: str = "/cart"


class CheckoutResponse(BaseModel):
    outcome: CheckoutOutcomeV1
    notice: NoticeV1
    order: OrderV1 | None = None
    retry_after_seconds: int | None = None
    redirect_to: str | None = None
    cart: CartView


class CheckoutStatus(BaseModel):
    in_progress: bool
    cooldown_remaining_seconds: int
    can_submit: bool
