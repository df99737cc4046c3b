import json
import sys
from pathlib import Path

import pytest
import requests

ROOT = Path(__file__).resolve().parents[1]
SCRIPTS = ROOT / "scripts"
if str(SCRIPTS) not in sys.path:
    sys.path.insert(0, str(SCRIPTS))

import hardware_item_add


class _Response:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class _Session:
    def __init__(self, lock, created):
        self.lock = lock
        self.created = created
        self.posted = []

    def get(self, url, **kwargs):
        assert url.endswith("/hardware/cost-lock")
        return self.lock

    def post(self, url, json=None, **kwargs):
        self.posted.append(json)
        return self.created


@pytest.fixture()
def fake_session(monkeypatch):
    def install(lock, created):
        session = _Session(lock, created)
        monkeypatch.setattr(hardware_item_add.requests, "Session", lambda: session)
        return session

    return install


def test_creates_item_and_prints_record(fake_session, capsys):
    record = {"id": "1", "name": "Laptop", "brand": "Dell", "model": "X1",
              "serialNumber": "S1", "details": None, "monthlyCost": 50.0}
    session = fake_session(_Response(200, {"locked": False, "monthlyCost": None}), _Response(201, record))

    code = hardware_item_add.main(["Laptop", "Dell", "X1", "S1", "--cost", "50"])

    assert code == 0
    assert session.posted[0]["serialNumber"] == "S1"
    assert session.posted[0]["monthlyCost"] == 50.0
    out = json.loads(capsys.readouterr().out)
    assert out == {"status": "created", "record": record}


def test_reports_locked_cost(fake_session, capsys):
    fake_session(
        _Response(200, {"locked": True, "monthlyCost": 50.0}),
        _Response(201, {"id": "2", "monthlyCost": 50.0}),
    )
    assert hardware_item_add.main(["Laptop", "Dell", "X1", "S2", "--cost", "999"]) == 0
    assert "monthly cost locked to 50.0" in capsys.readouterr().err


def test_refused_save_exits_1(fake_session, capsys):
    fake_session(
        _Response(200, {"locked": False}),
        _Response(422, {"code": "validation_error", "message": "Serial number must be unique!"}),
    )
    assert hardware_item_add.main(["Laptop", "Dell", "X1", "S1"]) == 1
    assert "Serial number must be unique!" in capsys.readouterr().err


def test_network_error_exits_2(monkeypatch, capsys):
    class _Down:
        def get(self, *args, **kwargs):
            raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(hardware_item_add.requests, "Session", lambda: _Down())
    assert hardware_item_add.main(["Laptop", "Dell", "X1", "S1"]) == 2
    assert "NETWORK_ERROR" in capsys.readouterr().err
