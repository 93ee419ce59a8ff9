"""Village record: id + display name. Created and deleted by the admin only."""

from pydantic import BaseModel, ConfigDict


class Village(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
