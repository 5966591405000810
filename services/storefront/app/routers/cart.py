from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from services.storefront.app.models.cart import (
    CartItemAdd,
    CartLineRef,
    CartQuantityUpdate,
    CartView,
    cart_view,
)
from services.storefront.app.services.cart import CartLineNotFoundError, line_key
from services.storefront.app.services.store import InMemoryStore, get_store

router = APIRouter()


@router.get("/v1/cart", response_model=CartView)
def get_cart(client_id: str, state: InMemoryStore = Depends(get_store)) -> CartView:
    return cart_view(client_id, state.cart(client_id))


@router.post("/v1/cart/items", response_model=CartView)
def add_item(payload: CartItemAdd, state: InMemoryStore = Depends(get_store)) -> CartView:
    cart = state.cart(payload.client_id)
    cart.add_item(
        payload.product_id,
        payload.title,
        payload.unit_price,
        quantity=payload.quantity,
        options=payload.options,
    )
    return cart_view(payload.client_id, cart)


@router.post("/v1/cart/items/increment", response_model=CartView)
def increment_item(payload: CartLineRef, state: InMemoryStore = Depends(get_store)) -> CartView:
    cart = state.cart(payload.client_id)
    try:
        cart.increment(line_key(payload.product_id, payload.options))
    except CartLineNotFoundError as e:
        raise HTTPException(status_code=404, detail="Cart line not found") from e
    return cart_view(payload.client_id, cart)


@router.post("/v1/cart/items/decrement", response_model=CartView)
def decrement_item(payload: CartLineRef, state: InMemoryStore = Depends(get_store)) -> CartView:
    cart = state.cart(payload.client_id)
    try:
        cart.decrement(line_key(payload.product_id, payload.options))
    except CartLineNotFoundError as e:
        raise HTTPException(status_code=404, detail="Cart line not found") from e
    return cart_view(payload.client_id, cart)


@router.post("/v1/cart/items/quantity", response_model=CartView)
def update_quantity(
    payload: CartQuantityUpdate, state: InMemoryStore = Depends(get_store)
) -> CartView:
    cart = state.cart(payload.client_id)
    try:
        cart.update_quantity(line_key(payload.product_id, payload.options), payload.quantity)
    except CartLineNotFoundError as e:
        raise HTTPException(status_code=404, detail="Cart line not found") from e
    return cart_view(payload.client_id, cart)


@router.post("/v1/cart/items/remove", response_model=CartView)
def remove_item(payload: CartLineRef, state: InMemoryStore = Depends(get_store)) -> CartView:
    cart = state.cart(payload.client_id)
    if not cart.remove(line_key(payload.product_id, payload.options)):
        raise HTTPException(status_code=404, detail="Cart line not found")
    return cart_view(payload.client_id, cart)


@router.delete("/v1/cart", response_model=CartView)
def clear_cart(client_id: str, state: InMemoryStore = Depends(get_store)) -> CartView:
    cart = state.cart(client_id)
    cart.clear()
    return cart_view(client_id, cart)
