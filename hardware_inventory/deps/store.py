from __future__ import annotations

from fastapi import Request

from ..services.inventory import InventoryStore


def get_store(request: Request) -> InventoryStore:
    """FastAPI dependency handing routes the store owned by the application."""

    return request.app.state.store
