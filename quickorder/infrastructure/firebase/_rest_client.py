"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Every write goes through documents:commit so preconditions (create only if
absent, update only if present) and server timestamps are applied atomically.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from quickorder.application.interfaces.document_store import (
    DocumentExistsError,
    DocumentNotFoundError,
)
from quickorder.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_fields,
    document_id,
    encode_fields,
    split_server_timestamps,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
_PAGE_SIZE = 300

RawDocument = tuple[str, dict[str, Any]]


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
    params: dict | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 on GET returns None.

    Raises:
        DocumentExistsError: 409 (create precondition failed).
        DocumentNotFoundError: 404 on a write (update precondition failed).
        httpx.HTTPStatusError: any other non-success status.
    """
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers, params=params)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        if method == "GET":
            return None
        raise DocumentNotFoundError(_error_message(resp))
    if resp.status_code == 409:
        raise DocumentExistsError(_error_message(resp))
    if resp.status_code not in (200, 204):
        resp.raise_for_status()
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json().get("error", {}).get("message", resp.text)
    except ValueError:
        return resp.text


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._database = f"projects/{project_id}/databases/(default)"
        self._prefix = f"{self._database}/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    @property
    def project_id(self) -> str:
        return self._project_id

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def document_name(self, collection: str, doc_id: str) -> str:
        return f"{self._prefix}/{collection}/{doc_id}"

    async def get_document(self, collection: str, doc_id: str) -> RawDocument | None:
        out = await _request_async(
            self._http,
            f"{_BASE}/{self.document_name(collection, doc_id)}",
            access_token=await self.get_token(),
        )
        if not out:
            return None
        return document_id(out.get("name", "")) or doc_id, decode_fields(out.get("fields"))

    async def list_documents(self, collection: str) -> list[RawDocument]:
        """Every document in the collection, following nextPageToken."""
        docs: list[RawDocument] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": _PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            out = await _request_async(
                self._http,
                f"{_BASE}/{self._prefix}/{collection}",
                access_token=await self.get_token(),
                params=params,
            )
            if not out:
                return docs
            for doc in out.get("documents", []):
                docs.append((document_id(doc.get("name", "")), decode_fields(doc.get("fields"))))
            page_token = out.get("nextPageToken")
            if not page_token:
                return docs

    async def run_query(self, collection: str, field_name: str, value: Any) -> list[RawDocument]:
        """Equality query via runQuery."""
        structured: dict[str, Any] = {
            "from": [{"collectionId": collection}],
            "where": {
                "fieldFilter": {
                    "field": {"fieldPath": field_name},
                    "op": "EQUAL",
                    "value": _encode_value(value),
                }
            },
        }
        resp = await _request_async(
            self._http,
            f"{_BASE}/{self._prefix}:runQuery",
            method="POST",
            body={"structuredQuery": structured},
            access_token=await self.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        docs: list[RawDocument] = []
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            docs.append((document_id(doc.get("name", "")), decode_fields(doc.get("fields"))))
        return docs

    def write(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        mask: bool = False,
        exists: bool | None = None,
    ) -> dict[str, Any]:
        """Build one commit write.

        mask=True limits the write to the given top-level fields (partial
        update / merge). exists sets the currentDocument precondition.
        SERVER_TIMESTAMP values become REQUEST_TIME transforms.
        """
        plain, server_fields = split_server_timestamps(data)
        write: dict[str, Any] = {
            "update": {
                "name": self.document_name(collection, doc_id),
                "fields": encode_fields(plain),
            }
        }
        if mask:
            write["updateMask"] = {"fieldPaths": sorted(plain)}
        if server_fields:
            write["updateTransforms"] = [
                {"fieldPath": key, "setToServerValue": "REQUEST_TIME"}
                for key in server_fields
            ]
        if exists is not None:
            write["currentDocument"] = {"exists": exists}
        return write

    def delete_write(self, collection: str, doc_id: str) -> dict[str, Any]:
        return {"delete": self.document_name(collection, doc_id)}

    async def commit(self, writes: list[dict[str, Any]]) -> dict[str, Any]:
        """Apply writes atomically."""
        return await _request_async(
            self._http,
            f"{_BASE}/{self._database}/documents:commit",
            method="POST",
            body={"writes": writes},
            access_token=await self.get_token(),
        )
