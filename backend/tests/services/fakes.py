"""In-memory fakes for the document store, OTP gateway and text generator.

Invariants:
    - FakeDocumentStore mirrors the REST store's shapes: generated ids,
      PATCH merges top-level keys, missing paths read as None
    - FakeOtpGateway records every dispatched code so tests can "read the phone"
    - FakeTextGenerator sequences scripted replies and counts calls
"""

import itertools
from datetime import datetime, timezone

from samaj_diary.core.errors import DocumentStoreError, LanguageModelError
from samaj_diary.core.repository_protocols import GeneratedText

# 2026-03-14 23:00 UTC is already 2026-03-15 in Asia/Kolkata
FIXED_NOW = datetime(2026, 3, 14, 23, 0, tzinfo=timezone.utc)


class FakeDocumentStore:
    """Dict-backed DocumentStore. Set `fail` to make every call raise."""

    def __init__(self):
        self.data: dict[str, dict] = {}
        self.fail = False
        self.healthy = True
        self._ids = itertools.count(1)

    def _check(self, operation: str, collection: str | None = None) -> None:
        if self.fail:
            raise DocumentStoreError("store offline", operation, collection)

    def seed(self, collection: str, doc_id: str, data: dict) -> str:
        self.data.setdefault(collection, {})[doc_id] = dict(data)
        return doc_id

    async def list_documents(self, collection: str) -> list[dict]:
        self._check("list", collection)
        return [
            {**value, "id": doc_id}
            for doc_id, value in self.data.get(collection, {}).items()
        ]

    async def create_document(self, collection: str, data: dict) -> str:
        self._check("create", collection)
        doc_id = f"-N{next(self._ids):04d}"
        self.data.setdefault(collection, {})[doc_id] = dict(data)
        return doc_id

    async def update_document(self, collection: str, doc_id: str, data: dict) -> None:
        self._check("update", collection)
        self.data.setdefault(collection, {}).setdefault(doc_id, {}).update(data)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        self._check("delete", collection)
        self.data.get(collection, {}).pop(doc_id, None)

    async def get_document(self, path: str) -> dict | None:
        collection, _, doc_id = path.partition("/")
        self._check("get", collection)
        doc = self.data.get(collection, {})
        if doc_id:
            doc = doc.get(doc_id)
        return dict(doc) if doc else None

    async def patch_document(self, path: str, data: dict) -> None:
        collection, _, doc_id = path.partition("/")
        self._check("patch", collection)
        self.data.setdefault(collection, {}).setdefault(doc_id, {}).update(data)

    async def health_check(self) -> bool:
        return self.healthy


class FakeOtpGateway:
    def __init__(self, accept: bool = True):
        self.accept = accept
        self.sent: list[tuple[str, str]] = []

    async def send_otp(self, mobile: str, code: str) -> bool:
        self.sent.append((mobile, code))
        return self.accept

    def last_code(self) -> str:
        return self.sent[-1][1]


class FakeTextGenerator:
    """Replies are str, GeneratedText or an exception instance, used in order."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls: list[dict] = []

    async def generate_text(
        self, prompt: str, *, max_tokens: int = 500, web_search: bool = False,
    ) -> GeneratedText:
        self.calls.append(
            {"prompt": prompt, "max_tokens": max_tokens, "web_search": web_search},
        )
        if not self.replies:
            raise LanguageModelError("no scripted reply", "client_error")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return GeneratedText(text=reply)
        return reply
