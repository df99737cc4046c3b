"""Application factory for the Hardware Inventory service.

``create_app`` wires configuration, the inventory store, middlewares, error
handlers and routers together. The store is built and loaded from storage once
here, then shared by every request through ``app.state.store``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    InventoryError,
    http_exception_handler,
    inventory_error_handler,
    validation_exception_handler,
)
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware
from .services.inventory import InventoryStore
from .services.storage import KeyValueStorage, build_storage


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    # Drain queued writes before the process exits.
    app.state.store.close()


def create_app(storage: KeyValueStorage | None = None) -> FastAPI:
    """Build the FastAPI app; ``storage`` overrides the configured backend."""

    app = FastAPI(title=settings.APP_NAME, lifespan=_lifespan)
    app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")

    store = InventoryStore(
        storage if storage is not None else build_storage(settings),
        storage_key=settings.STORAGE_KEY,
    )
    store.load()
    app.state.store = store

    # Added last runs first: the request id is in place before anything logs.
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InventoryError, inventory_error_handler)

    from .routers import api_hardware as api_hardware_router
    from .routers import ui as ui_router

    app.include_router(ui_router.router)
    app.include_router(api_hardware_router.router)

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    return app


__all__ = ["create_app"]
