from __future__ import annotations

import pytest
import requests

from esg_tracker import config, store as store_module
from esg_tracker.errors import MissingTenantError, StoreError
from esg_tracker.store import InMemoryStore, RestStore, get_store


# ---------------------------------------------------------------------------
# InMemoryStore
# ---------------------------------------------------------------------------
def test_create_assigns_id_and_timestamp(client_row, tenant_id) -> None:
    assert client_row["id"]
    assert client_row["created_at"]
    assert client_row["user_id"] == tenant_id


def test_create_requires_tenant_and_required_columns(store) -> None:
    with pytest.raises(StoreError) as excinfo:
        store.create("clients", {"name": "Acme", "industry": "x", "esg_risk_level": "Low", "email": "a@x"})
    assert excinfo.value.status_code == 400

    with pytest.raises(StoreError):
        store.create("clients", {"name": "Acme", "user_id": "t"})


def test_create_rejects_references_across_tenants(store, client_row) -> None:
    with pytest.raises(StoreError) as excinfo:
        store.create("projects", {
            "name": "P", "client_id": client_row["id"], "status": "Planning",
            "deadline": "2026-01-01", "user_id": "tenant-b",
        })
    assert excinfo.value.status_code == 409


def test_listing_is_tenant_scoped(store, client_row, project_row, tenant_id) -> None:
    store.create("clients", {
        "name": "Other", "industry": "Retail", "esg_risk_level": "Low",
        "email": "o@x.io", "user_id": "tenant-b",
    })
    assert [c["name"] for c in store.list_clients(tenant_id)] == ["Acme Metals"]
    assert [c["name"] for c in store.list_clients("tenant-b")] == ["Other"]
    assert store.list_projects("tenant-b") == []
    with pytest.raises(MissingTenantError):
        store.list_kpis(" ")


def test_kpis_nest_project_and_client_newest_first(store, project_row, tenant_id) -> None:
    for date in ("2024-01-01", "2024-03-01", "2024-02-01"):
        store.create("kpis", {
            "metric_name": "CO2", "value": 1.0, "unit": "t",
            "project_id": project_row["id"], "date": date, "user_id": tenant_id,
        })
    kpis = store.list_kpis(tenant_id)
    assert [k["date"] for k in kpis] == ["2024-03-01", "2024-02-01", "2024-01-01"]
    assert kpis[0]["project"]["name"] == "Water recycling"
    assert kpis[0]["project"]["client"]["name"] == "Acme Metals"


def test_listed_rows_are_copies(store, client_row, tenant_id) -> None:
    store.list_clients(tenant_id)[0]["name"] = "changed"
    assert store.list_clients(tenant_id)[0]["name"] == "Acme Metals"


# ---------------------------------------------------------------------------
# RestStore
# ---------------------------------------------------------------------------
class FakeResponse:
    def __init__(self, status_code: int, body=None, text: str = ""):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


def test_rest_create_posts_with_representation(monkeypatch) -> None:
    captured = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        captured.update(url=url, json=json, headers=headers, timeout=timeout)
        return FakeResponse(201, [dict(json[0], id="c1")])

    monkeypatch.setattr(requests, "post", fake_post)
    rest = RestStore("https://db.example/", "key-123", timeout_s=5)
    row = rest.create("clients", {"name": "Acme", "user_id": "t"})

    assert row == {"name": "Acme", "user_id": "t", "id": "c1"}
    assert captured["url"] == "https://db.example/rest/v1/clients"
    assert captured["json"] == [{"name": "Acme", "user_id": "t"}]
    assert captured["headers"]["Prefer"] == "return=representation"
    assert captured["headers"]["Authorization"] == "Bearer key-123"
    assert captured["timeout"] == 5.0


def test_rest_list_filters_by_tenant(monkeypatch) -> None:
    captured = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        captured.update(url=url, params=params)
        return FakeResponse(200, [{"id": "k1"}])

    monkeypatch.setattr(requests, "get", fake_get)
    rows = RestStore("https://db.example", "key").list_kpis("tenant-a")

    assert rows == [{"id": "k1"}]
    assert captured["url"] == "https://db.example/rest/v1/kpis"
    assert captured["params"]["user_id"] == "eq.tenant-a"
    assert captured["params"]["order"] == "date.desc"
    assert captured["params"]["select"].startswith("*,project:projects(")


def test_rest_error_body_becomes_store_error(monkeypatch) -> None:
    monkeypatch.setattr(
        requests, "post",
        lambda *a, **kw: FakeResponse(409, {"message": "insert violates foreign key constraint"}),
    )
    with pytest.raises(StoreError) as excinfo:
        RestStore("https://db.example", "key").create("kpis", {"user_id": "t"})
    assert excinfo.value.status_code == 409
    assert "foreign key" in str(excinfo.value)


def test_rest_network_failure_becomes_store_error(monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", boom)
    with pytest.raises(StoreError) as excinfo:
        RestStore("https://db.example", "key").list_clients("t")
    assert excinfo.value.status_code is None


def test_get_store_picks_backend_from_config(monkeypatch) -> None:
    monkeypatch.setattr(config, "STORE_URL", "")
    assert isinstance(get_store(), InMemoryStore)

    monkeypatch.setattr(config, "STORE_URL", "https://db.example")
    assert isinstance(store_module.get_store(), RestStore)


def test_rest_create_non_json_success_body_becomes_store_error(monkeypatch) -> None:
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(201, None, text="<html>"))
    with pytest.raises(StoreError) as excinfo:
        RestStore("https://db.example", "key").create("clients", {"user_id": "t"})
    assert excinfo.value.status_code == 201
    assert "non-JSON" in str(excinfo.value)
