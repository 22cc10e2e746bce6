"""
Form persistence.

A form owns its fields outright: every save that carries a field list
deletes the form's existing rows and inserts the new list with
position = list index, all inside the same transaction as the form row.
There is no per-field patching; version snapshots keep the history.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from formhost.core.audit import log_event
from formhost.core.errors import ConflictError, InvalidInput, NotFoundError
from formhost.core.field_validation import (
    DEFAULT_CATEGORY,
    validate_category,
    validate_fields_or_raise,
    validate_title,
)
from formhost.core.ids import FormId, generate_unique_id, row_id
from formhost.core.uniqueness import FORM_CONFLICTS, FORM_TITLE_TAKEN, is_title_taken, normalize_title, title_key
from formhost.core.unset import UNSET
from formhost.db.transaction import commit_or_raise, flush_or_raise
from formhost.models.category import Category
from formhost.models.form import Form
from formhost.models.form_field import FormField
from formhost.models.template import Template
from formhost.models.user import User

logger = logging.getLogger(__name__)


def build_field_rows(form_id: str, clean_fields: list[dict], reuse_ids=frozenset()) -> list[FormField]:
    """
    Turn a sanitized field list into FormField rows ordered by list index.
    A client-supplied id is kept only if it belonged to this form before
    the replace, and only for its first occurrence; anything else gets a
    fresh id.
    """
    rows = []
    used: set[str] = set()
    for idx, f in enumerate(clean_fields):
        fid = f.get("id")
        if not (isinstance(fid, str) and fid in reuse_ids and fid not in used):
            fid = row_id()
        used.add(fid)
        rows.append(
            FormField(
                id=fid,
                form_id=form_id,
                type=f["type"],
                label=f["label"],
                name=f["name"].strip(),
                placeholder=f.get("placeholder") or "",
                required=bool(f.get("required")),
                do_not_store=bool(f.get("doNotStore")),
                options=f.get("options") or "",
                content=f.get("content"),
                position=idx,
            )
        )
    return rows


def replace_fields(db: Session, form: Form, clean_fields: list[dict]) -> list[FormField]:
    """Wholesale replace; the delete is flushed first so reused names don't trip uq(form_id, name)."""
    prior_ids = {f.id for f in form.fields}
    form.fields.clear()
    flush_or_raise(db, conflicts=FORM_CONFLICTS)

    rows = build_field_rows(form.id, clean_fields, prior_ids)
    form.fields.extend(rows)
    flush_or_raise(db, conflicts=FORM_CONFLICTS)
    return rows


def _require_category(db: Session, category_id: str | None) -> None:
    if category_id and db.get(Category, category_id) is None:
        raise InvalidInput("Invalid category ID")


def _actor_id(actor: User | None) -> uuid.UUID | None:
    return actor.id if actor else None


def create_form_with_fields(
    db: Session,
    *,
    title: str,
    fields: list[dict],
    category: str = DEFAULT_CATEGORY,
    category_id: str | None = None,
    created_by: uuid.UUID | None = None,
) -> tuple[Form, list[FormField]]:
    """Insert the form row and all its fields in one transaction."""
    title = normalize_title(title)
    if is_title_taken(db, title):
        raise ConflictError(FORM_TITLE_TAKEN)

    form_id = generate_unique_id(db, Form, FormId)
    now = datetime.utcnow()
    form = Form(
        id=str(form_id),
        title=title,
        title_key=title_key(title),
        category=category or DEFAULT_CATEGORY,
        category_id=category_id or None,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    form.fields = build_field_rows(form.id, fields)
    db.add(form)
    commit_or_raise(db, conflicts=FORM_CONFLICTS)

    logger.info("Created form %s with %d fields", form.id, len(form.fields))
    return form, list(form.fields)


def update_form_with_fields(
    db: Session,
    form_id: str,
    *,
    title=UNSET,
    fields=UNSET,
    category=UNSET,
    category_id=UNSET,
) -> Form | None:
    """
    Apply any combination of title / fields / category changes atomically.

    UNSET leaves an attribute alone. For category_id, None or "" clears it;
    an empty category falls back to the default. Returns None when the form
    does not exist.
    """
    form = db.get(Form, form_id)
    if form is None:
        return None

    if title is not UNSET:
        title = normalize_title(title)
        if is_title_taken(db, title, exclude_id=form.id):
            raise ConflictError(FORM_TITLE_TAKEN)
        form.title = title
        form.title_key = title_key(title)

    if category is not UNSET:
        form.category = category or DEFAULT_CATEGORY

    if category_id is not UNSET:
        form.category_id = category_id or None

    if fields is not UNSET:
        replace_fields(db, form, fields)

    form.updated_at = datetime.utcnow()
    commit_or_raise(db, conflicts=FORM_CONFLICTS)

    logger.info("Updated form %s", form.id)
    return form


def create_or_update_form(
    db: Session,
    *,
    form_id: str | None = None,
    title,
    fields,
    category=None,
    category_id=None,
    actor: User | None = None,
) -> Form:
    """
    The save action of the builder: validate everything first, then either
    create a new form or replace an existing one's title and fields.
    """
    title = validate_title(title)
    clean = validate_fields_or_raise(fields)
    category = validate_category(category) if category else None
    _require_category(db, category_id)

    if not form_id:
        form, rows = create_form_with_fields(
            db,
            title=title,
            fields=clean,
            category=category or DEFAULT_CATEGORY,
            category_id=category_id,
            created_by=_actor_id(actor),
        )
        log_event(
            db=db,
            actor=actor,
            action="FORM_CREATED",
            entity_type="form",
            entity_id=form.id,
            metadata={"title": form.title, "field_count": len(rows)},
        )
        return form

    if not FormId.is_valid(form_id):
        raise NotFoundError("Form")

    form = update_form_with_fields(
        db,
        form_id,
        title=title,
        fields=clean,
        category=category if category else UNSET,
        category_id=category_id if category_id is not None else UNSET,
    )
    if form is None:
        raise NotFoundError("Form")

    log_event(
        db=db,
        actor=actor,
        action="FORM_UPDATED",
        entity_type="form",
        entity_id=form.id,
        metadata={"title": form.title, "field_count": len(clean)},
    )
    return form


def update_form(
    db: Session,
    form_id: str,
    *,
    title=UNSET,
    fields=UNSET,
    category=UNSET,
    category_id=UNSET,
    actor: User | None = None,
) -> Form:
    """Partial update; only supplied attributes are validated and written."""
    if title is not UNSET:
        title = validate_title(title)
    if fields is not UNSET:
        if fields is None:
            raise InvalidInput("fields must be an array")
        fields = validate_fields_or_raise(fields)
    if category is not UNSET:
        category = validate_category(category)
    if category_id is not UNSET:
        _require_category(db, category_id)

    form = update_form_with_fields(
        db, form_id, title=title, fields=fields, category=category, category_id=category_id
    )
    if form is None:
        raise NotFoundError("Form")

    changed = [k for k, v in (("title", title), ("fields", fields), ("category", category), ("category_id", category_id)) if v is not UNSET]
    log_event(
        db=db,
        actor=actor,
        action="FORM_UPDATED",
        entity_type="form",
        entity_id=form.id,
        metadata={"changed": changed},
    )
    return form


def get_form(db: Session, form_id: str) -> Form | None:
    return db.get(Form, form_id)


def get_form_or_404(db: Session, form_id: str) -> Form:
    form = db.get(Form, form_id)
    if not form:
        raise NotFoundError("Form")
    return form


def form_fields(form: Form) -> list[FormField]:
    return sorted(form.fields, key=lambda f: f.position)


def list_forms(
    db: Session,
    *,
    search: str | None = None,
    category: str | None = None,
    category_id: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Form], int]:
    query = db.query(Form)

    if search:
        query = query.filter(Form.title_key.contains(title_key(search), autoescape=True))
    if category:
        query = query.filter(Form.category == category)
    if category_id:
        query = query.filter(Form.category_id == category_id)

    total = query.count()
    rows = query.order_by(Form.updated_at.desc(), Form.id).offset(offset).limit(limit).all()
    return rows, total


def delete_form(db: Session, form_id: str, *, actor: User | None = None) -> bool:
    """Delete a form with its fields, versions, drafts and stored submissions."""
    form = db.get(Form, form_id)
    if form is None:
        return False

    title = form.title
    db.delete(form)
    commit_or_raise(db)

    logger.info("Deleted form %s", form_id)
    log_event(
        db=db,
        actor=actor,
        action="FORM_DELETED",
        entity_type="form",
        entity_id=form_id,
        metadata={"title": title},
    )
    return True


def count_forms_in_category(db: Session, category_id: str) -> int:
    return db.query(func.count(Form.id)).filter(Form.category_id == category_id).scalar() or 0


def create_form_from_template(
    db: Session,
    template_id: str,
    *,
    title,
    category=None,
    actor: User | None = None,
) -> Form:
    """Seed a new form with a copy of a template's fields; the template is not linked afterwards."""
    template = db.get(Template, template_id)
    if template is None:
        raise NotFoundError("Template")

    copied = [{k: v for k, v in f.items() if k != "id"} for f in (template.fields or [])]
    return create_or_update_form(
        db,
        title=title,
        fields=copied,
        category=category,
        category_id=template.category_id,
        actor=actor,
    )
