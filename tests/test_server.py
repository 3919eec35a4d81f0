import pytest

from address_validator.core.config import Settings
from address_validator.core.history import JsonHistoryStore
from address_validator.core.validation import AddressValidationService
from address_validator.jobs import server
from conftest import FakeProvider, make_response


@pytest.fixture
def provider():
    return FakeProvider(make_response(0.95))


@pytest.fixture
def store(tmp_path):
    return JsonHistoryStore(tmp_path / "history.json", max_history_size=3)


@pytest.fixture
def client(monkeypatch, provider, store, tmp_path):
    settings = Settings(azure_maps_api_key="key", history_file_path=str(store.path), max_history_size=3)
    monkeypatch.setattr(server, "get_settings", lambda: settings)
    monkeypatch.setattr(server, "get_service", lambda: AddressValidationService(provider))
    monkeypatch.setattr(server, "get_store", lambda: store)
    return server.app.test_client()


ADDRESS = {"address_line1": "123 Main St", "postal_code": "12345", "city": "Seattle", "country": "USA"}


def test_health_endpoint(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_validate_structured_address(client, provider):
    response = client.post("/validate", json=ADDRESS)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["original_query"] == "123 Main St, 12345, Seattle, USA"
    assert data["validation_result"]["is_valid"] is True
    assert data["validation_result"]["confidence_percentage"] == 95
    assert provider.queries == ["123 Main St, 12345, Seattle, USA"]


def test_validate_rejects_bad_payloads(client, provider):
    assert client.post("/validate", json={}).status_code == 400
    assert client.post("/validate", json={"address_line1": "x"}).status_code == 400
    assert client.post("/validate", json={"query": "  "}).status_code == 400
    assert provider.queries == []


def test_history_listing_and_lookup(client):
    created = client.post("/validate", json={"query": "1 Main St Springfield"}).get_json()["data"]

    listing = client.get("/history?limit=5").get_json()["data"]
    assert [item["id"] for item in listing] == [created["id"]]

    assert client.get(f"/history/{created['id']}").get_json()["data"] == created
    assert client.get("/history/unknown").status_code == 404
    assert client.get("/history?limit=abc").status_code == 400


def test_revalidate_from_history(client, provider):
    created = client.post("/validate", json=ADDRESS).get_json()["data"]

    response = client.post(f"/history/{created['id']}/revalidate")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["id"] != created["id"]
    assert data["original_address_input"] == created["original_address_input"]
    assert len(provider.queries) == 2
    assert client.post("/history/unknown/revalidate").status_code == 404


def test_clear_history(client):
    assert client.delete("/history").get_json()["data"]["cleared"] is False
    client.post("/validate", json={"query": "somewhere"})
    assert client.delete("/history").get_json()["data"]["cleared"] is True
    assert client.get("/history").get_json()["data"] == []


def test_history_is_capped(client):
    for index in range(5):
        client.post("/validate", json={"query": f"query {index}"})
    listing = client.get("/history").get_json()["data"]
    assert [item["original_query"] for item in listing] == ["query 4", "query 3", "query 2"]


def test_corrupt_history_returns_500(client, store):
    store.path.write_text("not json", encoding="utf-8")
    response = client.get("/history")
    assert response.status_code == 500
    assert "error" in response.get_json()


def test_undecodable_history_returns_500(client, store):
    store.path.write_bytes(b"[\xff\xfe garbage]")
    response = client.get("/history")
    assert response.status_code == 500
    assert "not valid UTF-8" in response.get_json()["error"]


def test_validate_rejects_non_text_optional_lines(client, provider):
    response = client.post("/validate", json={**ADDRESS, "address_line2": 5})
    assert response.status_code == 400
    assert "address_line2" in response.get_json()["error"]
    assert provider.queries == []
