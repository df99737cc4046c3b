"""JSON API over the inventory store.

The routes are ``async def`` on purpose: they all run on the event loop thread,
which makes it the single writer of the store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps.store import get_store
from ..schemas.hardware import CostLock, HardwareDraft, HardwareGroupOut, HardwareItem
from ..services.inventory import InventoryStore

router = APIRouter(prefix="/api/v1/hardware", tags=["hardware"])


@router.get("", response_model=list[HardwareGroupOut])
async def api_list(q: str = "", store: InventoryStore = Depends(get_store)):
    return store.search(q)


@router.get("/cost-lock", response_model=CostLock)
async def api_cost_lock(
    name: str = "",
    brand: str = "",
    model: str = "",
    store: InventoryStore = Depends(get_store),
):
    return store.cost_lock(name, brand, model)


@router.post("", response_model=HardwareItem, status_code=201)
async def api_create(payload: HardwareDraft, store: InventoryStore = Depends(get_store)):
    return store.add(payload)


@router.get("/{item_id}", response_model=HardwareItem)
async def api_get(item_id: str, store: InventoryStore = Depends(get_store)):
    return store.get(item_id)


@router.put("/{item_id}", response_model=HardwareItem)
async def api_update(item_id: str, payload: HardwareDraft, store: InventoryStore = Depends(get_store)):
    return store.update(item_id, payload)


@router.delete("/{item_id}")
async def api_delete(item_id: str, store: InventoryStore = Depends(get_store)):
    store.delete(item_id)
    return {"status": "deleted"}
