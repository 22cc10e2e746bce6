from __future__ import annotations

import logging
import re
from datetime import date, datetime, time

from sqlalchemy.orm import Session

from formhost.core.errors import FieldValidationError, NotFoundError
from formhost.core.field_validation import split_options
from formhost.core.ids import row_id
from formhost.db.transaction import commit_or_raise
from formhost.models.form import Form
from formhost.models.form_field import FormField
from formhost.models.form_submission import FormSubmission

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)

# Layout blocks that never carry a value
NON_INPUT_TYPES = frozenset({"richText"})


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _check_value(field: FormField, value) -> list[dict]:
    """Type / rule checks for one non-blank value. Returns error dicts."""
    key = field.name
    ftype = field.type

    if ftype == "checkboxes":
        picked = value if isinstance(value, (list, tuple)) else split_options(value)
        allowed = set(split_options(field.options))
        if allowed and any(str(p) not in allowed for p in picked):
            return [{"field": key, "code": "choice", "message": "Must be one of allowed choices"}]
        return []

    if isinstance(value, (list, tuple, dict)):
        return [{"field": key, "code": "type", "message": "Must be a single value"}]

    s = str(value).strip()

    if ftype in ("dropdown", "multipleChoice"):
        allowed = split_options(field.options)
        if allowed and s not in allowed:
            return [{"field": key, "code": "choice", "message": "Must be one of allowed choices"}]

    elif ftype == "number":
        try:
            float(s)
        except ValueError:
            return [{"field": key, "code": "type", "message": "Must be a number"}]

    elif ftype == "email":
        if not _EMAIL_RE.match(s):
            return [{"field": key, "code": "type", "message": "Must be a valid email address"}]

    elif ftype == "url":
        if not _URL_RE.match(s):
            return [{"field": key, "code": "type", "message": "Must be a valid URL"}]

    elif ftype == "phone":
        digits = re.sub(r"\D", "", s)
        if len(digits) < 10 or len(digits) > 15:
            return [{"field": key, "code": "type", "message": "Must be a valid phone number"}]

    elif ftype == "date":
        try:
            date.fromisoformat(s)
        except ValueError:
            return [{"field": key, "code": "type", "message": "Must be ISO date YYYY-MM-DD"}]

    elif ftype == "time":
        try:
            time.fromisoformat(s)
        except ValueError:
            return [{"field": key, "code": "type", "message": "Must be a time HH:MM"}]

    elif ftype == "datetime":
        try:
            datetime.fromisoformat(s)
        except ValueError:
            return [{"field": key, "code": "type", "message": "Must be an ISO datetime"}]

    return []


def validate_submission(fields: list[FormField], data: dict) -> list[dict]:
    """
    Required + per-type checks for every field of the form. Keys that are
    not fields of the form are ignored.
    """
    errors: list[dict] = []
    for field in fields:
        if field.type in NON_INPUT_TYPES:
            continue
        value = data.get(field.name)
        if _is_blank(value):
            if field.required:
                errors.append({"field": field.name, "code": "required", "message": "Required"})
            continue
        errors.extend(_check_value(field, value))
    return errors


def prefix_from_title(title: str) -> str:
    return re.sub(r"[^A-Z0-9]+", "_", (title or "FORM").upper()).strip("_")


def safe_key(key) -> str:
    return re.sub(r"[^a-zA-Z0-9_]", "_", str(key or ""))


def redact_payload(form: Form, data: dict) -> dict:
    """Copy of data without do-not-store fields, keys namespaced by form title."""
    by_name = {f.name: f for f in form.fields}
    prefix = prefix_from_title(form.title)
    reduced = {}
    for k, v in data.items():
        field = by_name.get(k)
        if field is not None and field.do_not_store:
            continue
        reduced[f"{prefix}_{safe_key(k)}"] = v
    return reduced


def submit(db: Session, form_id: str, data: dict, *, store_consent: bool = False) -> FormSubmission | None:
    form = db.get(Form, form_id)
    if form is None:
        raise NotFoundError("Form")

    errors = validate_submission(list(form.fields), data or {})
    if errors:
        raise FieldValidationError(errors, message="Submission validation failed")

    if not store_consent:
        return None

    submission = FormSubmission(
        id=row_id(),
        form_id=form.id,
        payload=redact_payload(form, data or {}),
        created_at=datetime.utcnow(),
    )
    db.add(submission)
    commit_or_raise(db)

    logger.info("Stored submission %s for form %s", submission.id, form.id)
    return submission


def list_submissions(db: Session, form_id: str, *, limit: int = 100, offset: int = 0) -> tuple[list[FormSubmission], int]:
    q = db.query(FormSubmission).filter(FormSubmission.form_id == form_id)
    total = q.count()
    rows = q.order_by(FormSubmission.created_at.desc()).offset(offset).limit(limit).all()
    return rows, total
