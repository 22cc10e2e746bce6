from datetime import datetime
from pydantic import BaseModel, Field


class VersionCreate(BaseModel):
    # omit fields to snapshot the form's live fields
    title: str | None = Field(default=None, max_length=255)
    fields: list[dict] | None = None
    category_id: str | None = None
    change_description: str | None = Field(default=None, max_length=2000)


class VersionOut(BaseModel):
    id: str
    form_id: str
    version_number: int
    title: str
    category_id: str | None
    fields: list[dict]
    is_published: bool
    published_at: datetime | None
    created_by: str | None
    change_description: str | None
    created_at: datetime


class DraftSave(BaseModel):
    form_id: str | None = None
    title: str = Field(default="", max_length=255)
    fields: list[dict] = Field(default_factory=list)
    category_id: str | None = None
    is_auto_save: bool = False


class DraftOut(BaseModel):
    id: str
    form_id: str | None
    title: str
    category_id: str | None
    fields: list[dict]
    is_auto_save: bool
    last_saved_at: datetime
    created_at: datetime


class DraftPublishOut(BaseModel):
    form_id: str
    version: VersionOut


