from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from packages.shared.schemas.product_v1 import CategoryV1, ProductV1

from services.storefront.app.routers.deps import storefront_backend
from services.storefront.app.routers.errors import raise_backend_http_error
from services.storefront.app.services.backend_base import StorefrontBackend

router = APIRouter()


@router.get("/v1/products", response_model=list[ProductV1])
def list_products(
    limit: int | None = Query(default=None, ge=1),
    backend: StorefrontBackend = Depends(storefront_backend),
) -> list[ProductV1]:
    try:
        return backend.list_products(limit)
    except Exception as e:
        raise_backend_http_error(e)


@router.get("/v1/products/featured", response_model=list[ProductV1])
def featured_products(backend: StorefrontBackend = Depends(storefront_backend)) -> list[ProductV1]:
    try:
        return backend.featured_products()
    except Exception as e:
        raise_backend_http_error(e)


@router.get("/v1/products/categories", response_model=list[CategoryV1])
def categories(backend: StorefrontBackend = Depends(storefront_backend)) -> list[CategoryV1]:
    try:
        return backend.categories()
    except Exception as e:
        raise_backend_http_error(e)


@router.get("/v1/products/search", response_model=list[ProductV1])
def search_products(
    q: str = "",
    backend: StorefrontBackend = Depends(storefront_backend),
) -> list[ProductV1]:
    term = q.strip().lower()
    if not term:
        return []

    try:
        return backend.search_products(term)
    except Exception as e:
        raise_backend_http_error(e)


@router.get("/v1/products/{slug}", response_model=ProductV1)
def get_product(slug: str, backend: StorefrontBackend = Depends(storefront_backend)) -> ProductV1:
    try:
        return backend.get_product(slug)
    except Exception as e:
        raise_backend_http_error(e)
