"""Tests for the HTML screen: list, live-search partial, and the modal form."""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("STORAGE_BACKEND", "memory")

from hardware_inventory import create_app
from hardware_inventory.schemas.hardware import HardwareDraft
from hardware_inventory.services.storage import MemoryStorage


@pytest.fixture()
def app():
    return create_app(storage=MemoryStorage())


@pytest.fixture()
def store(app):
    return app.state.store


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


def _form(**overrides):
    data = {
        "name": "Laptop",
        "brand": "Dell",
        "model": "X1",
        "serial_number": "S1",
        "monthly_cost": "50",
        "details": "",
    }
    data.update(overrides)
    return data


def test_empty_screen(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "Hardware Inventory" in r.text
    assert "No hardware recorded yet." in r.text
    assert "hardware-form" not in r.text
    assert r.headers["Cache-Control"] == "no-store"


def test_add_via_form_then_list(client, store):
    r = client.post("/ui/hardware", data=_form(details="Desk 4"), follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/"

    page = client.get("/").text
    assert "Laptop - Dell - X1" in page
    assert "Stock: 1" in page
    assert "$50.00/month" in page
    assert "Desk 4" in page
    assert store.item_count == 1


def test_unreadable_cost_counts_as_zero(client, store):
    client.post("/ui/hardware", data=_form(monthly_cost="abc"), follow_redirects=False)
    assert store.groups()[0].monthly_cost == 0


def test_new_form_is_unlocked(client):
    page = client.get("/", params={"new": 1}).text
    assert "New Hardware" in page
    assert 'action="/ui/hardware"' in page
    assert "readonly" not in page


def test_edit_form_shows_cost_locked_to_group(client, store):
    item = store.add(HardwareDraft(name="Laptop", brand="Dell", model="X1", serial_number="S1", monthly_cost=50))
    page = client.get("/", params={"edit": item.id}).text
    assert "Edit Hardware" in page
    assert f'action="/ui/hardware/{item.id}"' in page
    assert 'value="50"' in page
    assert "readonly" in page


def test_edit_unknown_item_is_404(client):
    assert client.get("/", params={"edit": "missing"}).status_code == 404


def test_duplicate_serial_rerenders_form_with_message(client, store):
    client.post("/ui/hardware", data=_form())
    r = client.post("/ui/hardware", data=_form(name="Phone", serial_number="S1"), follow_redirects=False)
    assert r.status_code == 422
    assert "Serial number must be unique!" in r.text
    assert 'value="Phone"' in r.text
    assert store.item_count == 1


def test_blank_required_field_rerenders_form(client, store):
    r = client.post("/ui/hardware", data=_form(brand=" "), follow_redirects=False)
    assert r.status_code == 422
    assert "Please fill in the required fields: Brand" in r.text
    assert store.item_count == 0


def test_update_via_form_moves_group(client, store):
    item = store.add(HardwareDraft(name="Laptop", brand="Dell", model="X1", serial_number="S1", monthly_cost=50))
    r = client.post(f"/ui/hardware/{item.id}", data=_form(model="X2", monthly_cost="60"), follow_redirects=False)
    assert r.status_code == 303
    assert [g.key for g in store.groups()] == ["Laptop|Dell|X2"]
    assert store.get(item.id).monthly_cost == 60


def test_delete_via_form_keeps_search(client, store):
    item = store.add(HardwareDraft(name="Laptop", brand="Dell", model="X1", serial_number="S1", monthly_cost=50))
    r = client.post(f"/ui/hardware/{item.id}/delete", data={"q": "dell x"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/?q=dell+x"
    assert store.item_count == 0


def test_groups_partial_filters(client, store):
    store.add(HardwareDraft(name="Laptop", brand="Dell", model="X1", serial_number="S1", monthly_cost=50))
    store.add(HardwareDraft(name="Phone", brand="Apple", model="15", serial_number="P1", monthly_cost=30))

    r = client.get("/ui/groups", params={"q": "apple"})
    assert "Phone - Apple - 15" in r.text
    assert "Laptop - Dell - X1" not in r.text

    r = client.get("/ui/groups", params={"q": "zzz"})
    assert 'No hardware matches "zzz".' in r.text


def test_static_assets_are_served(client):
    assert client.get("/static/app.js").status_code == 200
    assert client.get("/static/app.css").status_code == 200
