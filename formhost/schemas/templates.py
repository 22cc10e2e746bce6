from datetime import datetime
from pydantic import BaseModel, Field


class TemplateCreate(BaseModel):
    name: str = ""
    description: str | None = Field(default="", max_length=2000)
    fields: list[dict] = Field(default_factory=list)
    category_id: str | None = None


class TemplateUpdate(BaseModel):
    name: str | None = None
    description: str | None = Field(default=None, max_length=2000)
    fields: list[dict] | None = None
    category_id: str | None = None
    is_active: bool | None = None


class CategoryBrief(BaseModel):
    id: str
    name: str
    color: str


class TemplateOut(BaseModel):
    id: str
    name: str
    description: str
    category_id: str | None
    category: CategoryBrief | None
    fields: list[dict]
    is_active: bool
    created_by: str | None
    created_at: datetime
    updated_at: datetime


class NameCheckOut(BaseModel):
    unique: bool
