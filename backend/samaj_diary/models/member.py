"""Member record: one registered person in the directory.

Invariants:
    - mobile is the application-level uniqueness key (no store constraint)
    - villageName is denormalized from the village at write time and may drift
    - updatedAt is epoch milliseconds
    - null / numeric legacy values are coerced to strings on read
"""

import time

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_ms() -> int:
    return int(time.time() * 1000)


class Member(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    father_name: str = Field("", alias="fatherName")
    mobile: str = ""
    village_id: str = Field("", alias="villageId")
    village_name: str = Field("", alias="villageName")
    updated_at: int = Field(0, alias="updatedAt")

    @field_validator(
        "name", "father_name", "mobile", "village_id", "village_name",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return ""
        if isinstance(v, (int, float)):
            return str(int(v))
        return v

    @field_validator("updated_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v):
        return 0 if v is None else v

    def to_document(self) -> dict:
        """Store payload (camelCase, without id)."""
        return self.model_dump(by_alias=True, exclude={"id"})
