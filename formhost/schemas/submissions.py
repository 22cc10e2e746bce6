from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field


class SubmissionCreate(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)
    storeConsent: bool = False


class SubmissionAck(BaseModel):
    ok: bool = True
    stored: bool
    submission_id: str | None = None


class SubmissionOut(BaseModel):
    id: str
    form_id: str
    payload: dict
    created_at: datetime


class HostedFieldOut(BaseModel):
    """A field as the public page renders it: options already split."""
    name: str
    type: str
    label: str
    required: bool
    placeholder: str
    options: list[str]
    content: str | None = None


class HostedFormOut(BaseModel):
    id: str
    title: str
    fields: list[HostedFieldOut]
