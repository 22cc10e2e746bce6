from datetime import datetime
from pydantic import BaseModel, Field


class FormSave(BaseModel):
    # fields stay loose: the sanitizer accepts options as a list or a string
    id: str | None = None
    title: str = ""
    fields: list[dict] = Field(default_factory=list)
    category: str | None = None
    category_id: str | None = None


class FormUpdate(BaseModel):
    """Omitted keys are left unchanged; see formhost.core.unset.from_model."""
    title: str | None = None
    fields: list[dict] | None = None
    category: str | None = None
    category_id: str | None = None


class FormFromTemplate(BaseModel):
    title: str = ""
    category: str | None = None


class FormFieldOut(BaseModel):
    id: str
    type: str
    label: str
    name: str
    placeholder: str
    required: bool
    doNotStore: bool
    options: str
    content: str | None = None
    position: int


class FormOut(BaseModel):
    id: str
    title: str
    category: str
    category_id: str | None
    created_by: str | None
    current_version_number: int
    is_published: bool
    published_at: datetime | None
    last_published_version_id: str | None
    created_at: datetime
    updated_at: datetime


class FormWithFieldsOut(FormOut):
    fields: list[FormFieldOut]


class TitleCheckOut(BaseModel):
    unique: bool
