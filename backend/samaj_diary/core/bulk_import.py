"""CSV Bulk Import: turn admin-uploaded text into member drafts.

Line format: name, father/husband name, mobile, village name

Invariants:
    - A row is planned only with a non-empty name, a valid mobile and a
      village whose name matches an existing village case-insensitively
    - A mobile already in the directory, or seen earlier in the file, is skipped
    - Bad rows are reported with their 1-based line number; they never abort the plan
    - Blank lines are ignored silently
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from samaj_diary.core.directory import find_village_by_name
from samaj_diary.core.validation import is_valid_mobile, normalize_mobile
from samaj_diary.models import Member, Village


@dataclass
class MemberDraft:
    line_number: int
    name: str
    father_name: str
    mobile: str
    village_id: str
    village_name: str

    def to_document(self, updated_at: int) -> dict:
        return {
            "name": self.name,
            "fatherName": self.father_name,
            "mobile": self.mobile,
            "villageId": self.village_id,
            "villageName": self.village_name,
            "updatedAt": updated_at,
        }


@dataclass
class SkippedRow:
    line_number: int
    reason: str


@dataclass
class ImportPlan:
    drafts: list[MemberDraft] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)


def plan_import(
    text: str, villages: Iterable[Village], members: Iterable[Member],
) -> ImportPlan:
    villages = list(villages)
    taken = {m.mobile for m in members if m.mobile}
    plan = ImportPlan()

    for line_number, raw_line in enumerate(text.lstrip("\ufeff").splitlines(), 1):
        line = raw_line.strip()
        if not line:
            continue
        parts = [p.strip() for p in line.split(",")]
        parts += [""] * (4 - len(parts))
        name, father, raw_mobile, village_name = parts[:4]

        if not name or not raw_mobile:
            plan.skipped.append(SkippedRow(line_number, "missing_name_or_mobile"))
            continue
        mobile = normalize_mobile(raw_mobile)
        if not is_valid_mobile(mobile):
            plan.skipped.append(SkippedRow(line_number, "invalid_mobile"))
            continue
        village = find_village_by_name(villages, village_name)
        if village is None:
            plan.skipped.append(SkippedRow(line_number, "unknown_village"))
            continue
        if mobile in taken:
            plan.skipped.append(SkippedRow(line_number, "duplicate_mobile"))
            continue

        taken.add(mobile)
        plan.drafts.append(MemberDraft(
            line_number=line_number,
            name=name,
            father_name=father,
            mobile=mobile,
            village_id=village.id,
            village_name=village.name,
        ))
    return plan
