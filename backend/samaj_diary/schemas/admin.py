"""Admin Schemas: login, record writes, bulletin publishing, AI tools."""

from pydantic import BaseModel, Field, field_validator


class _Stripped(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class AdminLogin(_Stripped):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=200)


class AdminToken(BaseModel):
    token: str
    expires_at: str


class VillageCreate(_Stripped):
    name: str = Field(min_length=1, max_length=200)


class MemberCreate(_Stripped):
    name: str = Field("", max_length=200)
    father_name: str = Field("", max_length=200)
    mobile: str = Field("", max_length=20)
    village_id: str = Field("", max_length=200)


class MemberUpdate(_Stripped):
    name: str | None = Field(None, max_length=200)
    father_name: str | None = Field(None, max_length=200)
    mobile: str | None = Field(None, max_length=20)
    village_id: str | None = Field(None, max_length=200)


class BulletinCreate(BaseModel):
    content: str = Field(max_length=5000)
    active: bool = True


class BulletinUpdate(BaseModel):
    active: bool


class NameCleanupRequest(BaseModel):
    text: str = Field(min_length=1, max_length=20_000)
