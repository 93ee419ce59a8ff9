"""Bulletin record: a community notice. Visibility is driven by `active`."""

from pydantic import BaseModel, ConfigDict, Field


class Bulletin(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    content: str = ""
    active: bool = False
    created_at: int = Field(0, alias="createdAt")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})
