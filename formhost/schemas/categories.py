from datetime import datetime
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = ""
    description: str | None = Field(default="", max_length=2000)
    color: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = None
    description: str | None = Field(default=None, max_length=2000)
    color: str | None = None
    is_active: bool | None = None


class CategoryOut(BaseModel):
    id: str
    name: str
    description: str
    color: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
