"""Directory Queries: pure lookups over fetched villages, members and bulletins.

Invariants:
    - Functions never mutate their inputs; they return new lists
    - Village matching falls back to the denormalized villageName when ids drift
    - filter_members with no village and a blank query returns []
    - active_bulletin is the active record with the newest createdAt, or None if that one is blank
"""

from collections.abc import Iterable

from samaj_diary.models import Bulletin, Member, Village


def _name_key(text: str) -> str:
    return (text or "").strip().casefold()


def sort_villages(villages: Iterable[Village]) -> list[Village]:
    return sorted(villages, key=lambda v: _name_key(v.name))


def sort_members(members: Iterable[Member]) -> list[Member]:
    return sorted(members, key=lambda m: _name_key(m.name))


def find_village(villages: Iterable[Village], village_id: str) -> Village | None:
    return next((v for v in villages if v.id == village_id), None)


def find_village_by_name(villages: Iterable[Village], name: str) -> Village | None:
    """Case-insensitive, whitespace-trimmed name match."""
    target = _name_key(name)
    if not target:
        return None
    return next((v for v in villages if _name_key(v.name) == target), None)


def find_member(members: Iterable[Member], member_id: str) -> Member | None:
    return next((m for m in members if m.id == member_id), None)


def find_member_by_mobile(members: Iterable[Member], mobile: str) -> Member | None:
    return next((m for m in members if m.mobile == mobile), None)


def mobile_conflict(
    members: Iterable[Member], mobile: str, exclude_member_id: str | None = None,
) -> Member | None:
    """Return the member that already holds `mobile`, ignoring `exclude_member_id`.

    Registration passes no exclusion (any holder is a conflict); the update
    flow excludes the member whose number is being changed.
    """
    for m in members:
        if m.mobile == mobile and m.id != exclude_member_id:
            return m
    return None


def member_belongs_to_village(member: Member, village: Village) -> bool:
    if member.village_id == village.id:
        return True
    target = _name_key(village.name)
    return bool(target) and _name_key(member.village_name) == target


def _matches_query(member: Member, query: str) -> bool:
    q = query.casefold()
    return (
        q in member.name.casefold()
        or q in member.mobile
        or q in member.village_name.casefold()
        or q in member.father_name.casefold()
    )


def filter_members(
    members: Iterable[Member],
    villages: Iterable[Village],
    village_id: str | None = None,
    query: str | None = None,
) -> list[Member]:
    """Village filter, then free-text search, sorted by name."""
    query = (query or "").strip()
    village_id = village_id if village_id and village_id != "all" else None
    if village_id is None and not query:
        return []

    result = list(members)
    if village_id is not None:
        village = find_village(villages, village_id)
        if village is None:
            result = [m for m in result if m.village_id == village_id]
        else:
            result = [m for m in result if member_belongs_to_village(m, village)]
    if query:
        result = [m for m in result if _matches_query(m, query)]
    return sort_members(result)


def members_of_village(members: Iterable[Member], village_id: str) -> list[Member]:
    """Strict id match, used by the update flow's member picker."""
    return sort_members(m for m in members if m.village_id == village_id)


def active_bulletin(bulletins: Iterable[Bulletin]) -> Bulletin | None:
    """Newest active record; hidden (None) when its content is blank."""
    candidates = [b for b in bulletins if b.active]
    if not candidates:
        return None
    newest = max(candidates, key=lambda b: (b.created_at, b.id))
    return newest if newest.content.strip() else None


def village_member_counts(
    members: Iterable[Member], villages: Iterable[Village],
) -> dict[str, int]:
    """Member count per village id (drift-tolerant matching)."""
    members = list(members)
    return {
        v.id: sum(1 for m in members if member_belongs_to_village(m, v))
        for v in villages
    }
