from __future__ import annotations

import logging
import re
from datetime import datetime

from sqlalchemy.orm import Session

from formhost.core.audit import log_event
from formhost.core.errors import ConflictError, InvalidInput, NotFoundError
from formhost.core.ids import CategoryId, generate_unique_id
from formhost.core.uniqueness import CATEGORY_CONFLICTS, CATEGORY_NAME_TAKEN, is_category_name_taken
from formhost.core.unset import UNSET
from formhost.db.transaction import commit_or_raise
from formhost.models.category import DEFAULT_COLOR, Category
from formhost.models.user import User
from formhost.services.forms import count_forms_in_category

logger = logging.getLogger(__name__)

COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _clean_name(name) -> str:
    name = str(name or "").strip()
    if not name:
        raise InvalidInput("Category name is required")
    if len(name) > 255:
        raise InvalidInput("Category name is too long")
    return name


def _clean_color(color) -> str:
    if not color:
        return DEFAULT_COLOR
    if not COLOR_RE.match(str(color)):
        raise InvalidInput("Invalid color format")
    return str(color)


def create_category(
    db: Session,
    *,
    name,
    description: str | None = "",
    color: str | None = None,
    actor: User | None = None,
) -> Category:
    name = _clean_name(name)
    color = _clean_color(color)
    if is_category_name_taken(db, name):
        raise ConflictError(CATEGORY_NAME_TAKEN)

    now = datetime.utcnow()
    category = Category(
        id=str(generate_unique_id(db, Category, CategoryId)),
        name=name,
        description=(description or "").strip(),
        color=color,
        created_at=now,
        updated_at=now,
    )
    db.add(category)
    commit_or_raise(db, conflicts=CATEGORY_CONFLICTS)

    log_event(
        db=db,
        actor=actor,
        action="CATEGORY_CREATED",
        entity_type="category",
        entity_id=category.id,
        metadata={"name": category.name, "color": category.color},
    )
    return category


def update_category(
    db: Session,
    category_id: str,
    *,
    name=UNSET,
    description=UNSET,
    color=UNSET,
    is_active=UNSET,
    actor: User | None = None,
) -> Category:
    category = get_category(db, category_id)

    if name is not UNSET:
        name = _clean_name(name)
        if is_category_name_taken(db, name, exclude_id=category.id):
            raise ConflictError(CATEGORY_NAME_TAKEN)
        category.name = name
    if description is not UNSET:
        category.description = (description or "").strip()
    if color is not UNSET:
        category.color = _clean_color(color)
    if is_active is not UNSET and is_active is not None:
        category.is_active = bool(is_active)

    category.updated_at = datetime.utcnow()
    commit_or_raise(db, conflicts=CATEGORY_CONFLICTS)

    log_event(
        db=db,
        actor=actor,
        action="CATEGORY_UPDATED",
        entity_type="category",
        entity_id=category.id,
        metadata={"name": category.name},
    )
    return category


def get_category(db: Session, category_id: str) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category")
    return category


def list_categories(db: Session, *, active_only: bool = False) -> list[Category]:
    q = db.query(Category)
    if active_only:
        q = q.filter(Category.is_active.is_(True))
    return q.order_by(Category.name.asc()).all()


def delete_category(db: Session, category_id: str, *, actor: User | None = None) -> None:
    category = get_category(db, category_id)

    in_use = count_forms_in_category(db, category_id)
    if in_use:
        raise ConflictError(f"Category is used by {in_use} form(s) and cannot be deleted")

    name = category.name
    db.delete(category)
    commit_or_raise(db)

    log_event(
        db=db,
        actor=actor,
        action="CATEGORY_DELETED",
        entity_type="category",
        entity_id=category_id,
        metadata={"name": name},
    )
