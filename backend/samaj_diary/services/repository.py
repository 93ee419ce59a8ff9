"""Directory Repository: typed record operations over the document store.

Invariants:
    - Records leave this module as models (Village, Member, Bulletin), never raw dicts
    - Malformed stored documents are skipped with a warning, never raised
    - Store failures propagate as DocumentStoreError; callers decide how to degrade
    - Ids that are not single store keys read as ResourceNotFoundError without a store call
"""

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from samaj_diary.core.daily_content import CachedText
from samaj_diary.core.directory import sort_villages
from samaj_diary.core.domain_types import (
    DAILY_CONTENT_PATH, Collection, ContentKind, is_record_key,
)
from samaj_diary.core.errors import ResourceNotFoundError
from samaj_diary.core.repository_protocols import DocumentStore
from samaj_diary.models import Bulletin, Member, Village

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _parse_all(
    model: type[RecordT], docs: list[dict], collection: Collection,
) -> list[RecordT]:
    records = []
    for doc in docs:
        try:
            records.append(model.model_validate(doc))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed {collection.value} document {doc.get('id')}: "
                f"{e.error_count()} errors",
                extra={"collection": collection.value},
            )
    return records


def _require_key(resource_type: str, doc_id: str) -> None:
    if not is_record_key(doc_id):
        raise ResourceNotFoundError(resource_type, doc_id)


class DirectoryRepository:
    """Villages, members, bulletins and the daily-content config document."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # ─── Villages ────────────────────────────────────────────────

    async def list_villages(self) -> list[Village]:
        docs = await self.store.list_documents(Collection.VILLAGES.value)
        return sort_villages(_parse_all(Village, docs, Collection.VILLAGES))

    async def add_village(self, name: str) -> Village:
        village_id = await self.store.create_document(
            Collection.VILLAGES.value, {"name": name},
        )
        return Village(id=village_id, name=name)

    async def delete_village(self, village_id: str) -> None:
        _require_key("Village", village_id)
        await self.store.delete_document(Collection.VILLAGES.value, village_id)

    # ─── Members ─────────────────────────────────────────────────

    async def list_members(self) -> list[Member]:
        docs = await self.store.list_documents(Collection.MEMBERS.value)
        return _parse_all(Member, docs, Collection.MEMBERS)

    async def get_member(self, member_id: str) -> Member:
        _require_key("Member", member_id)
        doc = await self.store.get_document(
            f"{Collection.MEMBERS.value}/{member_id}",
        )
        if not doc:
            raise ResourceNotFoundError("Member", member_id)
        return Member.model_validate({**doc, "id": member_id})

    async def add_member(self, document: dict) -> Member:
        member_id = await self.store.create_document(
            Collection.MEMBERS.value, document,
        )
        return Member.model_validate({**document, "id": member_id})

    async def update_member(self, member_id: str, fields: dict) -> None:
        _require_key("Member", member_id)
        await self.store.update_document(
            Collection.MEMBERS.value, member_id, fields,
        )

    async def delete_member(self, member_id: str) -> None:
        _require_key("Member", member_id)
        await self.store.delete_document(Collection.MEMBERS.value, member_id)

    # ─── Bulletins ───────────────────────────────────────────────

    async def list_bulletins(self) -> list[Bulletin]:
        docs = await self.store.list_documents(Collection.BULLETIN.value)
        bulletins = _parse_all(Bulletin, docs, Collection.BULLETIN)
        return sorted(bulletins, key=lambda b: b.created_at, reverse=True)

    async def add_bulletin(self, content: str, active: bool, created_at: int) -> Bulletin:
        document = {"content": content, "active": active, "createdAt": created_at}
        bulletin_id = await self.store.create_document(
            Collection.BULLETIN.value, document,
        )
        return Bulletin.model_validate({**document, "id": bulletin_id})

    async def update_bulletin(self, bulletin_id: str, fields: dict) -> None:
        _require_key("Bulletin", bulletin_id)
        await self.store.update_document(
            Collection.BULLETIN.value, bulletin_id, fields,
        )

    async def delete_bulletin(self, bulletin_id: str) -> None:
        _require_key("Bulletin", bulletin_id)
        await self.store.delete_document(Collection.BULLETIN.value, bulletin_id)

    async def clear_bulletins(self) -> int:
        """Delete every bulletin one by one. Returns how many were removed."""
        docs = await self.store.list_documents(Collection.BULLETIN.value)
        for doc in docs:
            await self.store.delete_document(Collection.BULLETIN.value, doc["id"])
        return len(docs)

    # ─── Daily content ───────────────────────────────────────────

    async def get_daily_content(self) -> dict[ContentKind, CachedText]:
        doc = await self.store.get_document(DAILY_CONTENT_PATH) or {}
        entries = {}
        for kind in ContentKind:
            entry = CachedText.from_document(doc.get(kind.value))
            if entry is not None:
                entries[kind] = entry
        return entries

    async def save_daily_content(self, kind: ContentKind, entry: CachedText) -> None:
        await self.store.patch_document(
            DAILY_CONTENT_PATH, {kind.value: entry.to_document()},
        )
