import pytest
from fastapi.testclient import TestClient

from conftest import BankTransport
from qrisconnect.main import app
from qrisconnect.providers import registry
from qrisconnect.providers.bni.adapter import BniAdapter
from qrisconnect.providers.bni.schemas import BniCredentials

CREDENTIALS = BniCredentials(host="https://bni.test", hmac_key="k", merchant_id="M1", terminal_id="T1")
TOKEN = {"access_token": "tok", "expires_in": "899"}


def _install_bni(monkeypatch, routes):
    transport = BankTransport(routes)
    monkeypatch.setitem(registry._registry, "BNI", BniAdapter(credentials=CREDENTIALS, transport=transport))
    return transport


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_generate_and_status(client, monkeypatch):
    _install_bni(monkeypatch, {
        "/auth/get-token": TOKEN,
        "/qr/generate-qr": {"code": "00", "message": "success", "bill_number": "C000011957"},
        "/check-status/inquiry": {"payment_status": "00", "payment_description": "Payment Success"},
    })

    resp = client.post(
        "/qr/bni/generate",
        json={"request_id": "r1", "amount": "5000", "qr_expired": "2024-01-01T10:00:00"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["provider"] == "BNI"
    assert data["successful"] is True
    assert data["reference_number"] == "C000011957"
    assert data["provider_response_data"]["bill_number"] == "C000011957"

    resp = client.post("/qr/BNI/status", json={"request_id": "r2", "bill_number": data["reference_number"]})
    assert resp.status_code == 200
    assert resp.json()["paid"] is True


def test_unknown_provider(client):
    resp = client.post("/qr/mandiri/generate", json={})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Unknown provider mandiri"


def test_invalid_request_body(client, monkeypatch):
    transport = _install_bni(monkeypatch, {})

    resp = client.post("/qr/bni/generate", json={"request_id": "r1", "amount": "abc", "qr_expired": "x"})

    assert resp.status_code == 422
    assert transport.requests == []


def test_authentication_failure_is_bad_gateway(client, monkeypatch):
    _install_bni(monkeypatch, {"/auth/get-token": {"code": "401", "error": "invalid_client"}})

    resp = client.post("/qr/bni/status", json={"request_id": "r1", "bill_number": "C1"})

    assert resp.status_code == 502
    assert resp.json()["detail"] == "BNI(401) - invalid_client"
