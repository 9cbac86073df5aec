"""
Record store access.

The app talks to a hosted, PostgREST-style store keyed by tenant. Everything
outside this module sees only the RecordStore interface:

    create(entity_kind, payload) -> created row
    list_clients / list_projects / list_kpis(tenant_id) -> rows

InMemoryStore mirrors the hosted store's behaviour (ids, timestamps,
required columns, same-tenant references, ordering, nested selects) so the
demo app, the smoke pipeline and the tests run without a network.
"""

import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

import requests

from . import config
from .config import FIELD_CATALOG, REFERENCE_FIELDS, TABLE_NAMES, TENANT_FIELD
from .errors import StoreError, require_tenant

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def create(self, entity_kind: str, payload: dict[str, Any]) -> dict: ...

    def list_clients(self, tenant_id: str) -> list[dict]: ...

    def list_projects(self, tenant_id: str) -> list[dict]: ...

    def list_kpis(self, tenant_id: str) -> list[dict]: ...


def _check_kind(entity_kind: str) -> None:
    if entity_kind not in TABLE_NAMES:
        raise ValueError(f"Unknown entity kind '{entity_kind}'")


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------
class InMemoryStore:
    """Dict-backed store with the hosted store's constraints."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, dict]] = {kind: {} for kind in TABLE_NAMES}

    def create(self, entity_kind: str, payload: dict[str, Any]) -> dict:
        _check_kind(entity_kind)
        tenant_id = payload.get(TENANT_FIELD)
        if not tenant_id:
            raise StoreError(f"null value in column '{TENANT_FIELD}'", status_code=400)

        for spec in FIELD_CATALOG[entity_kind]:
            value = payload.get(spec["db_field"])
            if spec["required"] and (value is None or value == ""):
                raise StoreError(
                    f"null value in column '{spec['db_field']}' violates not-null constraint",
                    status_code=400,
                )

        if entity_kind in REFERENCE_FIELDS:
            ref_field, ref_kind = REFERENCE_FIELDS[entity_kind]
            parent = self._tables[ref_kind].get(str(payload[ref_field]))
            if parent is None or parent[TENANT_FIELD] != tenant_id:
                raise StoreError(
                    f"insert violates foreign key constraint on '{ref_field}'",
                    status_code=409,
                )

        row = dict(payload)
        row["id"] = str(uuid.uuid4())
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        self._tables[entity_kind][row["id"]] = row
        return dict(row)

    def _rows(self, entity_kind: str, tenant_id: str) -> list[dict]:
        tenant_id = require_tenant(tenant_id)
        return [
            copy.deepcopy(row)
            for row in self._tables[entity_kind].values()
            if row[TENANT_FIELD] == tenant_id
        ]

    def list_clients(self, tenant_id: str) -> list[dict]:
        rows = self._rows("clients", tenant_id)
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    def list_projects(self, tenant_id: str) -> list[dict]:
        rows = self._rows("projects", tenant_id)
        for row in rows:
            client = self._tables["clients"].get(row["client_id"])
            row["client"] = dict(client) if client else None
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return rows

    def list_kpis(self, tenant_id: str) -> list[dict]:
        projects = {p["id"]: p for p in self.list_projects(tenant_id)}
        rows = self._rows("kpis", tenant_id)
        for row in rows:
            row["project"] = projects.get(row["project_id"])
        rows.sort(key=lambda r: str(r["date"]), reverse=True)
        return rows

    def count(self, entity_kind: str) -> int:
        return len(self._tables[entity_kind])


# ---------------------------------------------------------------------------
# Hosted store over HTTP
# ---------------------------------------------------------------------------
_SELECTS = {
    "clients": "*",
    "projects": "*,client:clients(*)",
    "kpis": "*,project:projects(*,client:clients(*))",
}

_ORDERS = {
    "clients": "created_at.desc",
    "projects": "created_at.desc",
    "kpis": "date.desc",
}


class RestStore:
    """Client for a PostgREST endpoint (``<url>/rest/v1/<table>``)."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_s: float = config.STORE_TIMEOUT_S,
    ) -> None:
        if not base_url:
            raise ValueError("RestStore needs a base URL")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_s = float(timeout_s)

    def _url(self, entity_kind: str) -> str:
        _check_kind(entity_kind)
        return f"{self.base_url}/rest/v1/{TABLE_NAMES[entity_kind]}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _raise_for_status(resp) -> None:
        if resp.status_code // 100 == 2:
            return
        # Pull the message out of a JSON error body when there is one
        msg = resp.text
        try:
            payload = resp.json() or {}
            msg = payload.get("message") or payload.get("error") or msg
        except ValueError:
            pass
        raise StoreError(str(msg)[:500], status_code=int(resp.status_code))

    @staticmethod
    def _json(resp):
        try:
            return resp.json()
        except ValueError as exc:
            raise StoreError(
                f"Store returned a non-JSON body: {exc}", status_code=int(resp.status_code)
            ) from exc

    def create(self, entity_kind: str, payload: dict[str, Any]) -> dict:
        headers = self._headers()
        headers["Prefer"] = "return=representation"
        try:
            resp = requests.post(
                self._url(entity_kind),
                json=[payload],
                headers=headers,
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise StoreError(f"Request to store failed: {exc}") from exc
        self._raise_for_status(resp)
        body = self._json(resp)
        if isinstance(body, list):
            if not body:
                raise StoreError("Store returned no row for insert", status_code=resp.status_code)
            return body[0]
        return body

    def _list(self, entity_kind: str, tenant_id: str) -> list[dict]:
        tenant_id = require_tenant(tenant_id)
        params = {
            "select": _SELECTS[entity_kind],
            TENANT_FIELD: f"eq.{tenant_id}",
            "order": _ORDERS[entity_kind],
        }
        try:
            resp = requests.get(
                self._url(entity_kind),
                params=params,
                headers=self._headers(),
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise StoreError(f"Request to store failed: {exc}") from exc
        self._raise_for_status(resp)
        rows = self._json(resp) or []
        logger.info("Fetched %d %s for tenant", len(rows), entity_kind)
        return rows

    def list_clients(self, tenant_id: str) -> list[dict]:
        return self._list("clients", tenant_id)

    def list_projects(self, tenant_id: str) -> list[dict]:
        return self._list("projects", tenant_id)

    def list_kpis(self, tenant_id: str) -> list[dict]:
        return self._list("kpis", tenant_id)


def get_store() -> RecordStore:
    """Hosted store when ESG_STORE_URL is set, otherwise an empty in-memory one."""
    if config.STORE_URL:
        logger.info("Using hosted record store at %s", config.STORE_URL)
        return RestStore(config.STORE_URL, config.STORE_API_KEY)
    logger.warning("ESG_STORE_URL not set, using an in-memory store")
    return InMemoryStore()
