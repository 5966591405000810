"""Shared order schema (v1).

Mirrors the order payloads returned by the shop backend. The backend is the pricing
authority, so these are read-only views for the storefront.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OrderItemV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_id: str = Field(..., alias="productId")
    slug: str | None = None
    title: str = ""
    price: float = 0.0
    quantity: int = 1


class OrderV1(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    total: float
    status: str
    created_at: str | None = Field(default=None, alias="createdAt")
    shipping_address: dict[str, Any] | None = Field(default=None, alias="shippingAddress")
    items: list[OrderItemV1] = Field(default_factory=list)
