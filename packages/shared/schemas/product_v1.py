"""Shared catalog schemas (v1)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProductOptionValueV1(BaseModel):
    id: str
    label: str


class ProductOptionV1(BaseModel):
    id: str
    name: str
    values: list[ProductOptionValueV1] = Field(default_factory=list)


class ProductV1(BaseModel):
    # The backend may add presentation fields (details, specs); pass them through.
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    slug: str
    title: str
    subtitle: str | None = None
    price: float
    original_price: float | None = Field(default=None, alias="originalPrice")
    rating: float = 0.0
    rating_count: int = Field(default=0, alias="ratingCount")
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    options: list[ProductOptionV1] = Field(default_factory=list)
    description: str = ""
    badges: list[str] = Field(default_factory=list)


class CategoryV1(BaseModel):
    key: str
    title: str
    subtitle: str | None = None
