"""Document Store Client: path-addressed JSON REST resources over httpx.

Resources live at {base_url}/{path}.json. A collection GET returns an
object keyed by generated id (or null when empty); POST returns
{"name": <new id>}; PATCH merges top-level keys; DELETE removes.

Invariants:
    - Every transport/HTTP failure is raised as DocumentStoreError
    - list_documents always returns a list of dicts, each with an "id" key
    - Non-object children of a collection are skipped (never raise)
    - No retries: a failed call surfaces immediately
    - A doc_id that is not a single key segment is refused before any request
"""

import logging

import httpx

from samaj_diary.core.domain_types import is_record_key
from samaj_diary.core.errors import DocumentStoreError

logger = logging.getLogger(__name__)


def _check_key(doc_id: str, operation: str, collection: str) -> None:
    if not is_record_key(doc_id):
        raise DocumentStoreError(
            f"invalid document key {doc_id!r}", operation, collection,
        )


class DocumentStoreClient:
    """Async client for the remote document store."""

    def __init__(
        self,
        base_url: str,
        auth_token: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.auth_token = auth_token
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def list_documents(self, collection: str) -> list[dict]:
        data = await self._request("GET", collection, operation="list")
        if not isinstance(data, dict):
            return []
        return [
            {**value, "id": doc_id}
            for doc_id, value in data.items()
            if isinstance(value, dict)
        ]

    async def create_document(self, collection: str, data: dict) -> str:
        result = await self._request(
            "POST", collection, json=data, operation="create",
        )
        if not isinstance(result, dict) or "name" not in result:
            raise DocumentStoreError(
                "response missing generated id", "create", collection,
            )
        return result["name"]

    async def update_document(
        self, collection: str, doc_id: str, data: dict,
    ) -> None:
        _check_key(doc_id, "update", collection)
        await self._request(
            "PATCH", f"{collection}/{doc_id}", json=data,
            operation="update", collection=collection,
        )

    async def delete_document(self, collection: str, doc_id: str) -> None:
        _check_key(doc_id, "delete", collection)
        await self._request(
            "DELETE", f"{collection}/{doc_id}",
            operation="delete", collection=collection,
        )

    async def get_document(self, path: str) -> dict | None:
        data = await self._request("GET", path, operation="get")
        return data if isinstance(data, dict) else None

    async def patch_document(self, path: str, data: dict) -> None:
        await self._request("PATCH", path, json=data, operation="patch")

    async def health_check(self) -> bool:
        """Shallow read of the root; used by the readiness probe."""
        try:
            response = await self.client.get(
                "/.json", params=self._params({"shallow": "true"}),
            )
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"Document store health check failed: {e}")
            return False

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict | None = None,
        collection: str | None = None,
    ):
        collection = collection or path.split("/", 1)[0]
        try:
            response = await self.client.request(
                method, f"/{path}.json", json=json, params=self._params(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Document store {method} /{path} returned {e.response.status_code}",
                extra={"collection": collection, "operation": operation},
            )
            raise DocumentStoreError(
                f"HTTP {e.response.status_code}", operation, collection,
            )
        except httpx.HTTPError as e:
            logger.error(
                f"Document store {method} /{path} failed: {e}",
                extra={"collection": collection, "operation": operation},
            )
            raise DocumentStoreError(
                type(e).__name__, operation, collection,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise DocumentStoreError("invalid JSON body", operation, collection)

    def _params(self, extra: dict | None = None) -> dict:
        params = dict(extra or {})
        if self.auth_token:
            params["auth"] = self.auth_token
        return params
