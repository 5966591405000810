"""Bob's Corn storefront service entrypoint."""

from fastapi import FastAPI

from services.storefront.app.core.logging import setup_logging
from services.storefront.app.db.init_db import init_db
from services.storefront.app.routers.auth import router as auth_router
from services.storefront.app.routers.cart import router as cart_router
from services.storefront.app.routers.catalog import router as catalog_router
from services.storefront.app.routers.checkout import router as checkout_router
from services.storefront.app.routers.orders import router as orders_router

app = FastAPI(title="Bob's Corn Storefront")

app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(auth_router)
app.include_router(checkout_router)
app.include_router(orders_router)


@app.on_event("startup")
def _startup() -> None:
    setup_logging()
    init_db()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
