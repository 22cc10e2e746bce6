"""
Uniqueness pre-checks.

These give fast feedback (live title checks in the builder, early 409s);
they are not the guarantee. The unique constraints on forms.title_key and
templates.name_key are, and their violations are reported with the same
messages via commit_or_raise.
"""
from __future__ import annotations

import unicodedata

from sqlalchemy.orm import Session

from formhost.models.category import Category
from formhost.models.form import Form
from formhost.models.form_field import FormField
from formhost.models.template import Template

FORM_TITLE_TAKEN = "Form title already exists. Choose another."
TEMPLATE_NAME_TAKEN = "Template name already exists. Choose another."
CATEGORY_NAME_TAKEN = "Category name already exists"
FIELD_NAME_TAKEN = "Field names must be unique within a form."

FORM_CONFLICTS = {
    "title_key": FORM_TITLE_TAKEN,
    "form_id_name": FIELD_NAME_TAKEN,
    "form_fields.name": FIELD_NAME_TAKEN,
}
TEMPLATE_CONFLICTS = {"name_key": TEMPLATE_NAME_TAKEN}
CATEGORY_CONFLICTS = {"categories.name": CATEGORY_NAME_TAKEN, "categories_name": CATEGORY_NAME_TAKEN}


def normalize_title(title) -> str:
    return unicodedata.normalize("NFKC", str(title or "")).strip()


def title_key(title) -> str:
    return normalize_title(title).casefold()


def is_title_taken(db: Session, title, exclude_id: str | None = None) -> bool:
    q = db.query(Form.id).filter(Form.title_key == title_key(title))
    if exclude_id:
        q = q.filter(Form.id != str(exclude_id))
    return q.first() is not None


def is_template_name_taken(db: Session, name, exclude_id: str | None = None) -> bool:
    q = db.query(Template.id).filter(Template.name_key == title_key(name))
    if exclude_id:
        q = q.filter(Template.id != str(exclude_id))
    return q.first() is not None


def is_field_name_taken(db: Session, form_id: str, name, exclude_field_id: str | None = None) -> bool:
    q = db.query(FormField.id).filter(
        FormField.form_id == form_id,
        FormField.name == str(name or "").strip(),
    )
    if exclude_field_id:
        q = q.filter(FormField.id != exclude_field_id)
    return q.first() is not None


def is_category_name_taken(db: Session, name, exclude_id: str | None = None) -> bool:
    q = db.query(Category.id).filter(Category.name == str(name or "").strip())
    if exclude_id:
        q = q.filter(Category.id != exclude_id)
    return q.first() is not None
