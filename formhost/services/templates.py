"""
Templates: reusable field sets, independent of any form.

Same validation and naming rules as forms, but the field list is stored as
one JSON array on the template row and a template has no versions.
"""
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from formhost.core.audit import log_event
from formhost.core.errors import ConflictError, InvalidInput, NotFoundError
from formhost.core.field_validation import validate_fields_or_raise, validate_title
from formhost.core.ids import TemplateId, generate_unique_id
from formhost.core.uniqueness import (
    TEMPLATE_CONFLICTS,
    TEMPLATE_NAME_TAKEN,
    is_template_name_taken,
    normalize_title,
    title_key,
)
from formhost.core.unset import UNSET
from formhost.db.transaction import commit_or_raise
from formhost.models.category import Category
from formhost.models.template import Template
from formhost.models.user import User

logger = logging.getLogger(__name__)


def _require_category(db: Session, category_id: str | None) -> None:
    if category_id and db.get(Category, category_id) is None:
        raise InvalidInput("Invalid category ID")


def _audit_fields(clean: list[dict]) -> list[dict]:
    return [{"type": f.get("type"), "label": f.get("label"), "required": bool(f.get("required"))} for f in clean]


def create_template(
    db: Session,
    *,
    name,
    description: str | None = "",
    fields=None,
    category_id: str | None = None,
    actor: User | None = None,
) -> Template:
    name = normalize_title(validate_title(name, "Template name"))
    clean = validate_fields_or_raise(fields)
    _require_category(db, category_id)

    if is_template_name_taken(db, name):
        raise ConflictError(TEMPLATE_NAME_TAKEN)

    now = datetime.utcnow()
    template = Template(
        id=str(generate_unique_id(db, Template, TemplateId)),
        name=name,
        name_key=title_key(name),
        description=(description or "").strip(),
        category_id=category_id or None,
        fields=clean,
        is_active=True,
        created_by=actor.id if actor else None,
        created_at=now,
        updated_at=now,
    )
    db.add(template)
    commit_or_raise(db, conflicts=TEMPLATE_CONFLICTS)

    logger.info("Created template %s", template.id)
    log_event(
        db=db,
        actor=actor,
        action="TEMPLATE_CREATED",
        entity_type="template",
        entity_id=template.id,
        metadata={"name": template.name, "fields": _audit_fields(clean)},
    )
    return template


def update_template(
    db: Session,
    template_id: str,
    *,
    name=UNSET,
    description=UNSET,
    fields=UNSET,
    category_id=UNSET,
    is_active=UNSET,
    actor: User | None = None,
) -> Template | None:
    """
    Patch only the supplied attributes; a supplied field list replaces the
    stored array as-is. Returns None when the template does not exist.
    """
    template = db.get(Template, template_id)
    if template is None:
        return None

    if name is not UNSET:
        name = normalize_title(validate_title(name, "Template name"))
        if is_template_name_taken(db, name, exclude_id=template.id):
            raise ConflictError(TEMPLATE_NAME_TAKEN)
        template.name = name
        template.name_key = title_key(name)

    if description is not UNSET:
        template.description = (description or "").strip()

    if fields is not UNSET:
        template.fields = validate_fields_or_raise(fields)

    if category_id is not UNSET:
        _require_category(db, category_id)
        template.category_id = category_id or None

    if is_active is not UNSET and is_active is not None:
        template.is_active = bool(is_active)

    template.updated_at = datetime.utcnow()
    commit_or_raise(db, conflicts=TEMPLATE_CONFLICTS)

    log_event(
        db=db,
        actor=actor,
        action="TEMPLATE_UPDATED",
        entity_type="template",
        entity_id=template.id,
        metadata={"name": template.name},
    )
    return template


def get_template(db: Session, template_id: str) -> Template | None:
    return db.get(Template, template_id)


def list_templates(db: Session, *, active_only: bool = False) -> list[Template]:
    q = db.query(Template)
    if active_only:
        return q.filter(Template.is_active.is_(True)).order_by(Template.name.asc()).all()
    return q.order_by(Template.updated_at.desc(), Template.id).all()


def delete_template(db: Session, template_id: str, *, actor: User | None = None) -> bool:
    template = db.get(Template, template_id)
    if template is None:
        return False

    name = template.name
    db.delete(template)
    commit_or_raise(db)

    log_event(
        db=db,
        actor=actor,
        action="TEMPLATE_DELETED",
        entity_type="template",
        entity_id=template_id,
        metadata={"name": name},
    )
    return True


def get_template_or_404(db: Session, template_id: str) -> Template:
    template = db.get(Template, template_id)
    if template is None:
        raise NotFoundError("Template")
    return template
