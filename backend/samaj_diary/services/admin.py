"""Admin Service: CRUD over villages, members and bulletins, plus CSV import and export.

Invariants:
    - Member writes keep mobile unique across the directory (application-level scan)
    - villageName is re-denormalized whenever villageId changes
    - Bulk import never aborts on a bad row or a single failed write
    - Export of an empty directory raises NothingToExportError
"""

import logging

from samaj_diary.core.bulk_import import plan_import
from samaj_diary.core.directory import find_village, mobile_conflict, sort_members
from samaj_diary.core.errors import (
    DocumentStoreError,
    MissingFieldsError,
    MobileAlreadyRegisteredError,
    NothingToExportError,
    ResourceNotFoundError,
)
from samaj_diary.core.member_export import build_member_sheet
from samaj_diary.core.validation import require_mobile
from samaj_diary.models import Bulletin, Member, Village
from samaj_diary.models.member import now_ms
from samaj_diary.services.repository import DirectoryRepository

logger = logging.getLogger(__name__)


def _require(**fields: str | None) -> None:
    missing = [k for k, v in fields.items() if not (v or "").strip()]
    if missing:
        raise MissingFieldsError(missing)


class AdminService:
    def __init__(self, repository: DirectoryRepository):
        self.repository = repository

    # ─── Villages ────────────────────────────────────────────────

    async def add_village(self, name: str) -> Village:
        _require(name=name)
        village = await self.repository.add_village(name.strip())
        logger.info(f"Village {village.id} added", extra={"collection": "villages"})
        return village

    async def delete_village(self, village_id: str) -> None:
        if find_village(await self.repository.list_villages(), village_id) is None:
            raise ResourceNotFoundError("Village", village_id)
        await self.repository.delete_village(village_id)

    # ─── Members ─────────────────────────────────────────────────

    async def list_members(self) -> list[Member]:
        return sort_members(await self.repository.list_members())

    async def add_member(
        self, name: str, father_name: str, mobile: str, village_id: str,
    ) -> Member:
        _require(name=name, mobile=mobile, village_id=village_id)
        mobile = require_mobile(mobile)
        village = await self._village_or_404(village_id)
        if mobile_conflict(await self.repository.list_members(), mobile):
            raise MobileAlreadyRegisteredError(mobile)
        return await self.repository.add_member({
            "name": name.strip(),
            "fatherName": (father_name or "").strip(),
            "mobile": mobile,
            "villageId": village.id,
            "villageName": village.name,
            "updatedAt": now_ms(),
        })

    async def update_member(self, member_id: str, changes: dict) -> Member:
        """Patch any of name / father_name / mobile / village_id."""
        member = await self.repository.get_member(member_id)
        patch: dict = {}
        if changes.get("name") is not None:
            _require(name=changes["name"])
            patch["name"] = changes["name"].strip()
        if changes.get("father_name") is not None:
            patch["fatherName"] = changes["father_name"].strip()
        if changes.get("mobile") is not None:
            mobile = require_mobile(changes["mobile"])
            if mobile_conflict(await self.repository.list_members(), mobile, member_id):
                raise MobileAlreadyRegisteredError(mobile, for_update=True)
            patch["mobile"] = mobile
        if changes.get("village_id") is not None:
            village = await self._village_or_404(changes["village_id"])
            patch["villageId"] = village.id
            patch["villageName"] = village.name
        if not patch:
            return member
        patch["updatedAt"] = now_ms()
        await self.repository.update_member(member_id, patch)
        return Member.model_validate({**member.to_document(), **patch, "id": member_id})

    async def delete_member(self, member_id: str) -> None:
        await self.repository.get_member(member_id)
        await self.repository.delete_member(member_id)
        logger.info(f"Member {member_id} deleted", extra={"collection": "members"})

    # ─── Bulletins ───────────────────────────────────────────────

    async def publish_bulletin(self, content: str, active: bool) -> Bulletin:
        _require(content=content)
        return await self.repository.add_bulletin(content.strip(), active, now_ms())

    async def set_bulletin_active(self, bulletin_id: str, active: bool) -> Bulletin:
        bulletin = await self._bulletin_or_404(bulletin_id)
        await self.repository.update_bulletin(bulletin_id, {"active": active})
        return bulletin.model_copy(update={"active": active})

    async def delete_bulletin(self, bulletin_id: str) -> None:
        await self._bulletin_or_404(bulletin_id)
        await self.repository.delete_bulletin(bulletin_id)

    async def clear_bulletins(self) -> int:
        return await self.repository.clear_bulletins()

    # ─── Bulk import / export ────────────────────────────────────

    async def import_members(self, csv_text: str) -> dict:
        villages = await self.repository.list_villages()
        members = await self.repository.list_members()
        plan = plan_import(csv_text, villages, members)

        imported = 0
        failed: list[int] = []
        for draft in plan.drafts:
            try:
                await self.repository.add_member(draft.to_document(now_ms()))
                imported += 1
            except DocumentStoreError as e:
                logger.error(f"Import row {draft.line_number} failed: {e.message}")
                failed.append(draft.line_number)

        logger.info(
            "Bulk import finished",
            extra={
                "imported": imported,
                "skipped": len(plan.skipped),
                "failed": len(failed),
            },
        )
        return {
            "imported": imported,
            "skipped": [
                {"line": s.line_number, "reason": s.reason} for s in plan.skipped
            ],
            "failed_lines": failed,
        }

    async def export_members(self) -> str:
        members = await self.list_members()
        if not members:
            raise NothingToExportError()
        return build_member_sheet(members)

    # ─── Helpers ─────────────────────────────────────────────────

    async def _village_or_404(self, village_id: str) -> Village:
        village = find_village(await self.repository.list_villages(), village_id)
        if village is None:
            raise ResourceNotFoundError("Village", village_id)
        return village

    async def _bulletin_or_404(self, bulletin_id: str) -> Bulletin:
        bulletins = await self.repository.list_bulletins()
        bulletin = next((b for b in bulletins if b.id == bulletin_id), None)
        if bulletin is None:
            raise ResourceNotFoundError("Bulletin", bulletin_id)
        return bulletin
