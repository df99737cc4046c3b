"""The single inventory screen: search, list, and the add/edit form.

The page is a plain rendering of the store. Saving posts the form back; a
refused save re-renders the form with the user's input and the message, and
nothing is stored.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.errors import InventoryValidationError, ItemNotFoundError
from ..core.jinja import get_templates
from ..deps.store import get_store
from ..schemas.hardware import HardwareDraft, HardwareItem
from ..services.inventory import InventoryStore

templates = get_templates()

router = APIRouter()


@dataclass
class FormState:
    """Everything the modal form needs to render itself."""

    item_id: Optional[str] = None
    name: str = ""
    brand: str = ""
    model: str = ""
    serial_number: str = ""
    details: str = ""
    monthly_cost: float = 0
    cost_locked: bool = False
    error: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.item_id is not None

    @property
    def action(self) -> str:
        if self.item_id is None:
            return "/ui/hardware"
        return f"/ui/hardware/{self.item_id}"


def _parse_cost(raw: str) -> float:
    """Lenient number parsing for the cost box; anything unreadable counts as 0."""

    try:
        value = float((raw or "").strip())
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _lock_form(state: FormState, store: InventoryStore) -> FormState:
    lock = store.cost_lock(state.name, state.brand, state.model)
    state.cost_locked = lock.locked
    if lock.locked:
        state.monthly_cost = lock.monthly_cost
    return state


def _form_for_item(item: HardwareItem, store: InventoryStore) -> FormState:
    state = FormState(
        item_id=item.id,
        name=item.name,
        brand=item.brand,
        model=item.model,
        serial_number=item.serial_number,
        details=item.details or "",
        monthly_cost=item.monthly_cost,
    )
    return _lock_form(state, store)


def _draft_from_form(
    name: str, brand: str, model: str, serial_number: str, monthly_cost: str, details: str
) -> HardwareDraft:
    return HardwareDraft(
        name=name,
        brand=brand,
        model=model,
        serial_number=serial_number,
        details=details,
        monthly_cost=_parse_cost(monthly_cost),
    )


def _render_page(
    request: Request,
    store: InventoryStore,
    *,
    query: str = "",
    form: FormState | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    context = {
        "query": query,
        "groups": store.search(query),
        "form": form,
    }
    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


def _refused(
    request: Request,
    store: InventoryStore,
    exc: InventoryValidationError,
    *,
    item_id: str | None,
    name: str,
    brand: str,
    model: str,
    serial_number: str,
    monthly_cost: str,
    details: str,
) -> HTMLResponse:
    state = FormState(
        item_id=item_id,
        name=name,
        brand=brand,
        model=model,
        serial_number=serial_number,
        details=details,
        monthly_cost=_parse_cost(monthly_cost),
        error=exc.message,
    )
    return _render_page(request, store, form=_lock_form(state, store), status_code=422)


@router.get("/", response_class=HTMLResponse)
async def index_page(
    request: Request,
    q: str = "",
    edit: Optional[str] = None,
    new: bool = False,
    store: InventoryStore = Depends(get_store),
):
    form = None
    if edit:
        try:
            form = _form_for_item(store.get(edit), store)
        except ItemNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Hardware item not found") from exc
    elif new:
        form = FormState()
    return _render_page(request, store, query=q, form=form)


@router.get("/ui/groups", response_class=HTMLResponse)
async def groups_partial(request: Request, q: str = "", store: InventoryStore = Depends(get_store)):
    return templates.TemplateResponse(request, "_groups.html", {"query": q, "groups": store.search(q)})


@router.post("/ui/hardware", response_class=HTMLResponse)
async def ui_create_hardware(
    request: Request,
    name: str = Form(""),
    brand: str = Form(""),
    model: str = Form(""),
    serial_number: str = Form(""),
    monthly_cost: str = Form(""),
    details: str = Form(""),
    store: InventoryStore = Depends(get_store),
):
    draft = _draft_from_form(name, brand, model, serial_number, monthly_cost, details)
    try:
        store.add(draft)
    except InventoryValidationError as exc:
        return _refused(
            request, store, exc,
            item_id=None, name=name, brand=brand, model=model,
            serial_number=serial_number, monthly_cost=monthly_cost, details=details,
        )
    return RedirectResponse(url="/", status_code=303)


@router.post("/ui/hardware/{item_id}", response_class=HTMLResponse)
async def ui_update_hardware(
    request: Request,
    item_id: str,
    name: str = Form(""),
    brand: str = Form(""),
    model: str = Form(""),
    serial_number: str = Form(""),
    monthly_cost: str = Form(""),
    details: str = Form(""),
    store: InventoryStore = Depends(get_store),
):
    draft = _draft_from_form(name, brand, model, serial_number, monthly_cost, details)
    try:
        store.update(item_id, draft)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Hardware item not found") from exc
    except InventoryValidationError as exc:
        return _refused(
            request, store, exc,
            item_id=item_id, name=name, brand=brand, model=model,
            serial_number=serial_number, monthly_cost=monthly_cost, details=details,
        )
    return RedirectResponse(url="/", status_code=303)


@router.post("/ui/hardware/{item_id}/delete", response_class=HTMLResponse)
async def ui_delete_hardware(item_id: str, q: str = Form(""), store: InventoryStore = Depends(get_store)):
    try:
        store.delete(item_id)
    except ItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Hardware item not found") from exc
    url = "/"
    if q:
        url = f"/?q={quote_plus(q)}"
    return RedirectResponse(url=url, status_code=303)
