import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from conftest import CountingCache, FakeProvider

INVALID_LENGTH = "invalid currency code, must be 3 characters long following ISO 4217"


@pytest.fixture
def client(settings, provider):
    app = create_app(settings_override=settings, cache=CountingCache(), provider=provider)
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.parametrize("amount", ["100.00", "100,00"])
def test_convert(client, amount):
    resp = client.get("/convert", params={"from": "USD", "to": "EUR", "amount": amount})
    assert resp.status_code == 200
    body = resp.json()
    assert body["from"] == "USD"
    assert body["to"] == "EUR"
    assert body["amount"] == 100.0
    assert body["result"] == pytest.approx(85.0)


def test_convert_lowercase_codes_are_normalized(client):
    resp = client.get("/convert", params={"from": "usd", "to": "brl", "amount": "2"})
    assert resp.status_code == 200
    assert resp.json()["from"] == "USD"
    assert resp.json()["result"] == pytest.approx(10.0)


@pytest.mark.parametrize(
    "params,message",
    [
        ({"from": "USD", "to": "EUR", "amount": "-100.00"}, "amount must be non-negative"),
        ({"from": "USD", "to": "EUR", "amount": "invalid"}, "invalid amount"),
        ({"to": "EUR", "amount": "1"}, "invalid currency code"),
        ({"from": "USDD", "to": "EUR", "amount": "1"}, INVALID_LENGTH),
    ],
)
def test_convert_validation_fails_before_any_lookup(client, provider, params, message):
    resp = client.get("/convert", params=params)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}
    assert provider.calls == 0


def test_convert_unknown_currency(client):
    resp = client.get("/convert", params={"from": "USD", "to": "XYZ", "amount": "1"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "currency XYZ not found"}


def test_convert_provider_down(settings):
    app = create_app(settings_override=settings, provider=FakeProvider(error="boom"))
    resp = TestClient(app).get("/convert", params={"from": "USD", "to": "EUR", "amount": "1"})
    assert resp.status_code == 502
    assert resp.json()["error"].startswith("rate provider unavailable")


def test_convert_overflow_is_bad_request(settings):
    # default static provider table: BTC 0.000016, JPY 110.0
    client = TestClient(create_app(settings_override=settings, cache=CountingCache()))
    resp = client.get("/convert", params={"from": "BTC", "to": "JPY", "amount": "1e305"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "converted amount is out of range"}


def test_first_resolution_is_persisted(client):
    client.get("/rates/EUR")
    listed = client.get("/currency").json()
    assert [c["code"] for c in listed] == ["EUR"]
    assert listed[0]["rate"] == 0.85


@pytest.mark.parametrize(
    "payload,rate",
    [({"code": "GBP", "rate_to_usd": 0.73}, 0.73), ({"code": "gbp", "rate": "0,73"}, 0.73)],
)
def test_add_currency(client, payload, rate):
    resp = client.post("/currency", json=payload)
    assert resp.status_code == 201
    assert resp.json() == {"message": "currency added successfully"}
    assert client.get("/rates/GBP").json() == {"code": "GBP", "rate": rate}


@pytest.mark.parametrize(
    "payload,message",
    [
        ({"code": "USD", "rate_to_usd": -1.0}, "rate must be positive"),
        ({"code": "USD", "rate_to_usd": "invalid"}, "invalid rate"),
        ({"rate_to_usd": 1.0}, "invalid currency code"),
        ({"code": "USDD", "rate_to_usd": 1.0}, INVALID_LENGTH),
        ({"code": "ßab", "rate_to_usd": 1.0}, INVALID_LENGTH),
    ],
)
def test_add_currency_validation(client, payload, message):
    resp = client.post("/currency", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}


def test_add_duplicate_conflicts(client):
    assert client.post("/currency", json={"code": "GBP", "rate": 0.73}).status_code == 201
    resp = client.post("/currency", json={"code": "GBP", "rate": 9.0})
    assert resp.status_code == 409
    assert resp.json() == {"error": "currency GBP already exists"}
    assert client.get("/rates/GBP").json()["rate"] == 0.73


def test_update_currency_records_actor(client):
    client.post("/currency", json={"code": "GBP", "rate": 0.73})
    resp = client.put("/currency/GBP", json={"rate": "0,8"}, headers={"X-Actor-Id": "admin-42"})
    assert resp.status_code == 200
    assert resp.json() == {"message": "currency updated successfully"}
    listed = client.get("/currency").json()
    assert listed[0]["rate"] == 0.8
    assert listed[0]["updated_by"] == "admin-42"
    assert client.get("/rates/GBP").json()["rate"] == 0.8


def test_update_missing_currency(client):
    resp = client.put("/currency/GBP", json={"rate": 1.0})
    assert resp.status_code == 404
    assert resp.json() == {"error": "currency GBP not found"}


def test_remove_currency(client):
    client.post("/currency", json={"code": "GBP", "rate": 0.73})
    resp = client.delete("/currency/GBP")
    assert resp.status_code == 200
    assert resp.json() == {"message": "currency removed successfully"}
    assert client.get("/currency").json() == []


def test_remove_invalid_and_missing(client):
    resp = client.delete("/currency/RR")
    assert resp.status_code == 400
    assert resp.json() == {"error": INVALID_LENGTH}
    resp = client.delete("/currency/GBP")
    assert resp.status_code == 404


def test_refresh_rates(client, provider):
    client.post("/currency", json={"code": "EUR", "rate": 0.5})
    resp = client.post("/rates/refresh")
    assert resp.status_code == 200
    assert resp.json() == {"refreshed": 1}
    assert client.get("/rates/EUR").json()["rate"] == 0.85


def test_admin_key_guards_mutations(settings, provider):
    settings.admin_api_key = "s3cret"
    client = TestClient(create_app(settings_override=settings, provider=provider))

    resp = client.post("/currency", json={"code": "GBP", "rate": 0.73})
    assert resp.status_code == 401
    assert resp.json() == {"error": "unauthorized"}

    resp = client.post("/currency", json={"code": "GBP", "rate": 0.73}, headers={"X-API-Key": "s3cret"})
    assert resp.status_code == 201
    # reads stay open
    assert client.get("/convert", params={"from": "GBP", "to": "USD", "amount": "1"}).status_code == 200


def test_unknown_route_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert "error" in resp.json()


def test_malformed_body_is_bad_request(client):
    resp = client.post("/currency", json={"code": ["USD"], "rate": 1})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("invalid request")
