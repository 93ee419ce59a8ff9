"""Persisted Records: pydantic shapes of the documents kept in the remote store.

Invariants:
    - Field aliases match the stored camelCase keys (fatherName, villageId, ...)
    - Records tolerate missing keys: stored data may predate a field
    - Store payloads become records through model_validate() in the services layer
"""

from samaj_diary.models.bulletin import Bulletin
from samaj_diary.models.member import Member
from samaj_diary.models.village import Village

__all__ = ["Bulletin", "Member", "Village"]
