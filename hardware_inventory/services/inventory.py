"""The inventory store: grouped hardware items plus a persistence mirror.

Items are grouped under ``name|brand|model``. Within a group every item shares
one monthly cost; the first item's cost wins and later saves into the group
inherit it. Serial numbers are unique across the whole store, and a group that
loses its last item is removed.

Every mutation is applied to the in-memory mapping first, then the whole
mapping is serialized and handed to a single background writer. Writes run in
the order they were queued, so an older blob never lands after a newer one. A
failed write is logged and otherwise ignored: the in-memory state stays
authoritative for the rest of the session.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterator

from pydantic import TypeAdapter

from ..core.errors import InventoryValidationError, ItemNotFoundError
from ..schemas.hardware import CostLock, HardwareDraft, HardwareGroupOut, HardwareItem
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"
DUPLICATE_SERIAL_MESSAGE = "Serial number must be unique!"

# (attribute, label shown to the user, wire name)
REQUIRED_FIELDS = (
    ("name", "Name", "name"),
    ("brand", "Brand", "brand"),
    ("model", "Model", "model"),
    ("serial_number", "Serial number", "serialNumber"),
)
KEY_FIELDS = REQUIRED_FIELDS[:3]
SEARCH_FIELDS = ("name", "brand", "model", "serial_number", "details")

HardwareGroups = dict[str, list[HardwareItem]]
_GROUPS_ADAPTER = TypeAdapter(HardwareGroups)


def group_key(name: str, brand: str, model: str) -> str:
    return KEY_SEPARATOR.join((name, brand, model))


def _matches(item: HardwareItem, needle: str) -> bool:
    for field in SEARCH_FIELDS:
        value = getattr(item, field)
        if value and needle in value.lower():
            return True
    return False


def _group_view(key: str, items: list[HardwareItem]) -> HardwareGroupOut:
    first = items[0]
    return HardwareGroupOut(
        key=key,
        name=first.name,
        brand=first.brand,
        model=first.model,
        monthly_cost=first.monthly_cost,
        stock=len(items),
        items=list(items),
    )


class InventoryStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        storage_key: str = "hardware",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._clock = clock
        self._groups: HardwareGroups = {}
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inventory-writer")
        self._pending: Future | None = None

    # ---- persistence -----------------------------------------------------

    def load(self) -> None:
        """Read the persisted blob once; unreadable data leaves the store empty."""

        try:
            blob = self._storage.get(self._storage_key)
            groups = _GROUPS_ADAPTER.validate_json(blob) if blob else {}
        except Exception:
            logger.exception(
                "inventory.load_failed",
                extra={"extra_data": {"storage_key": self._storage_key}},
            )
            return
        self._groups = {key: items for key, items in groups.items() if items}
        logger.info(
            "inventory.loaded",
            extra={"extra_data": {"groups": len(self._groups), "items": self.item_count}},
        )

    def dumps(self) -> str:
        return _GROUPS_ADAPTER.dump_json(self._groups, by_alias=True).decode("utf-8")

    def _persist(self) -> None:
        blob = self.dumps()
        self._pending = self._writer.submit(self._write, blob)

    def _write(self, blob: str) -> None:
        try:
            self._storage.set(self._storage_key, blob)
        except Exception:
            logger.exception(
                "inventory.persist_failed",
                extra={"extra_data": {"storage_key": self._storage_key, "bytes": len(blob)}},
            )

    def flush(self) -> None:
        """Block until every queued write has reached the storage."""

        pending = self._pending
        if pending is not None:
            pending.result()

    def close(self) -> None:
        self._writer.shutdown(wait=True)

    # ---- queries ---------------------------------------------------------

    @property
    def item_count(self) -> int:
        return sum(len(items) for items in self._groups.values())

    def snapshot(self) -> HardwareGroups:
        return {key: list(items) for key, items in self._groups.items()}

    def _iter_items(self) -> Iterator[HardwareItem]:
        for items in self._groups.values():
            yield from items

    def _locate(self, item_id: str) -> str | None:
        for key, items in self._groups.items():
            if any(item.id == item_id for item in items):
                return key
        return None

    def get(self, item_id: str) -> HardwareItem:
        for item in self._iter_items():
            if item.id == item_id:
                return item
        raise ItemNotFoundError(item_id)

    def search(self, query: str = "") -> list[HardwareGroupOut]:
        """Groups reduced to the items matching ``query``, case-insensitively.

        The query is matched as a plain substring of name, brand, model, serial
        number and details. Groups left without matches are dropped; an empty
        query returns everything.
        """

        needle = (query or "").lower()
        results = []
        for key, items in self._groups.items():
            matches = [item for item in items if not needle or _matches(item, needle)]
            if matches:
                results.append(_group_view(key, matches))
        return results

    def groups(self) -> list[HardwareGroupOut]:
        return self.search("")

    def cost_lock(self, name: str, brand: str, model: str) -> CostLock:
        """Work out whether the cost field must follow an existing group.

        Called whenever name, brand or model change while composing an item.
        """

        key = group_key((name or "").strip(), (brand or "").strip(), (model or "").strip())
        existing = self._groups.get(key)
        if existing:
            return CostLock(locked=True, monthly_cost=existing[0].monthly_cost)
        return CostLock(locked=False)

    # ---- mutations -------------------------------------------------------

    def add(self, draft: HardwareDraft) -> HardwareItem:
        return self._save(draft, item_id=None)

    def update(self, item_id: str, draft: HardwareDraft) -> HardwareItem:
        if self._locate(item_id) is None:
            raise ItemNotFoundError(item_id)
        return self._save(draft, item_id=item_id)

    def delete(self, item_id: str) -> HardwareItem:
        key = self._locate(item_id)
        if key is None:
            raise ItemNotFoundError(item_id)
        removed = self._remove(key, item_id)
        self._persist()
        logger.info(
            "inventory.item_deleted",
            extra={"extra_data": {"item_id": item_id, "group": key, "group_removed": key not in self._groups}},
        )
        return removed

    def _validate(self, draft: HardwareDraft, item_id: str | None) -> None:
        missing = [(label, wire) for attr, label, wire in REQUIRED_FIELDS if not getattr(draft, attr)]
        if missing:
            labels = ", ".join(label for label, _ in missing)
            raise InventoryValidationError(
                f"Please fill in the required fields: {labels}",
                details={"fields": [wire for _, wire in missing]},
            )
        separated = [(label, wire) for attr, label, wire in KEY_FIELDS if KEY_SEPARATOR in getattr(draft, attr)]
        if separated:
            labels = ", ".join(label for label, _ in separated)
            raise InventoryValidationError(
                f'{labels} may not contain "{KEY_SEPARATOR}"',
                details={"fields": [wire for _, wire in separated]},
            )
        for item in self._iter_items():
            if item.serial_number == draft.serial_number and item.id != item_id:
                raise InventoryValidationError(
                    DUPLICATE_SERIAL_MESSAGE,
                    details={"fields": ["serialNumber"], "conflictsWith": item.id},
                )

    def _save(self, draft: HardwareDraft, item_id: str | None) -> HardwareItem:
        self._validate(draft, item_id)

        new_key = group_key(draft.name, draft.brand, draft.model)
        existing = self._groups.get(new_key, [])
        # An existing group's cost always wins, even over an edit of its only member.
        monthly_cost = existing[0].monthly_cost if existing else draft.monthly_cost

        if item_id is None:
            item_id = self._new_id()
        else:
            old_key = self._locate(item_id)
            if old_key is not None and old_key != new_key:
                self._remove(old_key, item_id)

        item = HardwareItem(
            id=item_id,
            name=draft.name,
            brand=draft.brand,
            model=draft.model,
            serial_number=draft.serial_number,
            details=draft.details,
            monthly_cost=monthly_cost,
        )
        members = [member for member in self._groups.get(new_key, []) if member.id != item_id]
        members.append(item)
        self._groups[new_key] = members
        self._persist()

        logger.info(
            "inventory.item_saved",
            extra={"extra_data": {"item_id": item_id, "group": new_key, "stock": len(members)}},
        )
        return item

    def _remove(self, key: str, item_id: str) -> HardwareItem:
        items = self._groups[key]
        removed = next(item for item in items if item.id == item_id)
        remaining = [item for item in items if item.id != item_id]
        if remaining:
            self._groups[key] = remaining
        else:
            del self._groups[key]
        return removed

    def _new_id(self) -> str:
        # Millisecond timestamp; bumped when two saves land in the same tick.
        candidate = int(self._clock() * 1000)
        taken = {item.id for item in self._iter_items()}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)
