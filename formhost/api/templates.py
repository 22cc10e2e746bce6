from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formhost.core.errors import NotFoundError
from formhost.core.rbac import EDITORS, READERS, require_roles
from formhost.core.uniqueness import is_template_name_taken
from formhost.core.unset import from_model
from formhost.db.session import get_db
from formhost.models.template import Template
from formhost.models.user import User
from formhost.schemas.templates import CategoryBrief, NameCheckOut, TemplateCreate, TemplateOut, TemplateUpdate
from formhost.services import templates as templates_service

router = APIRouter(prefix="/templates", tags=["templates"])


def template_out(t: Template) -> TemplateOut:
    return TemplateOut(
        id=t.id,
        name=t.name,
        description=t.description or "",
        category_id=t.category_id,
        category=(
            CategoryBrief(id=t.category.id, name=t.category.name, color=t.category.color)
            if t.category else None
        ),
        fields=list(t.fields or []),
        is_active=t.is_active,
        created_by=str(t.created_by) if t.created_by else None,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


@router.post("", response_model=TemplateOut)
def create_template(
    payload: TemplateCreate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    template = templates_service.create_template(
        db,
        name=payload.name,
        description=payload.description,
        fields=payload.fields,
        category_id=payload.category_id,
        actor=current_user,
    )
    return template_out(template)


@router.get("", response_model=list[TemplateOut])
def list_templates(
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return [template_out(t) for t in templates_service.list_templates(db, active_only=active_only)]


@router.get("/check-name", response_model=NameCheckOut)
def check_template_name_unique(
    name: str = Query(default=""),
    exclude_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    if not name.strip():
        return NameCheckOut(unique=False)
    return NameCheckOut(unique=not is_template_name_taken(db, name, exclude_id))


@router.get("/{template_id}", response_model=TemplateOut)
def read_template(
    template_id: str,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return template_out(templates_service.get_template_or_404(db, template_id))


@router.put("/{template_id}", response_model=TemplateOut)
def update_template(
    template_id: str,
    payload: TemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    changes = from_model(payload, "name", "description", "fields", "category_id", "is_active")
    template = templates_service.update_template(db, template_id, **changes, actor=current_user)
    if template is None:
        raise NotFoundError("Template")
    return template_out(template)


@router.delete("/{template_id}")
def delete_template(
    template_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    if not templates_service.delete_template(db, template_id, actor=current_user):
        raise NotFoundError("Template")
    return {"ok": True}
