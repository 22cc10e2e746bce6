from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formhost.core.errors import NotFoundError
from formhost.core.rbac import EDITORS, READERS, require_roles
from formhost.core.uniqueness import is_title_taken
from formhost.core.unset import from_model
from formhost.db.session import get_db
from formhost.models.form import Form
from formhost.models.form_field import FormField
from formhost.models.user import User
from formhost.schemas.forms import (
    FormFieldOut,
    FormFromTemplate,
    FormSave,
    FormUpdate,
    FormWithFieldsOut,
    TitleCheckOut,
)
from formhost.schemas.pagination import PaginatedResponse, PaginationMeta
from formhost.schemas.submissions import SubmissionOut
from formhost.services import forms as forms_service
from formhost.services.submissions import list_submissions

router = APIRouter(prefix="/forms", tags=["forms"])


def field_out(f: FormField) -> FormFieldOut:
    return FormFieldOut(
        id=f.id,
        type=f.type,
        label=f.label,
        name=f.name,
        placeholder=f.placeholder,
        required=f.required,
        doNotStore=f.do_not_store,
        options=f.options,
        content=f.content,
        position=f.position,
    )


def _form_summary(form: Form) -> dict:
    return dict(
        id=form.id,
        title=form.title,
        category=form.category,
        category_id=form.category_id,
        created_by=str(form.created_by) if form.created_by else None,
        current_version_number=form.current_version_number,
        is_published=form.is_published,
        published_at=form.published_at,
        last_published_version_id=form.last_published_version_id,
        created_at=form.created_at,
        updated_at=form.updated_at,
    )


def form_out(form: Form) -> FormWithFieldsOut:
    fields = forms_service.form_fields(form)
    return FormWithFieldsOut(**_form_summary(form), fields=[field_out(f) for f in fields])


@router.post("", response_model=FormWithFieldsOut)
def save_form(
    payload: FormSave,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    """Create a form (no id) or replace an existing form's title and fields."""
    form = forms_service.create_or_update_form(
        db,
        form_id=payload.id,
        title=payload.title,
        fields=payload.fields,
        category=payload.category,
        category_id=payload.category_id,
        actor=current_user,
    )
    return form_out(form)


@router.get("")
def list_forms(
    search: str | None = Query(default=None, description="Search by title"),
    category: str | None = Query(default=None, description="Filter by category (survey, quiz, ...)"),
    category_id: str | None = Query(default=None, description="Filter by category id"),
    limit: int = Query(default=100, ge=1, le=500, description="Maximum number of results"),
    offset: int = Query(default=0, ge=0, description="Number of results to skip"),
    include_pagination: bool = Query(default=False, description="Include pagination metadata"),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    rows, total = forms_service.list_forms(
        db, search=search, category=category, category_id=category_id, limit=limit, offset=offset
    )
    items = [form_out(r) for r in rows]

    if include_pagination:
        return PaginatedResponse[FormWithFieldsOut](
            items=items,
            pagination=PaginationMeta.for_page(total=total, limit=limit, offset=offset, returned=len(items)),
        )
    return items


@router.get("/check-title", response_model=TitleCheckOut)
def check_title_unique(
    title: str = Query(default=""),
    exclude_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    if not title.strip():
        return TitleCheckOut(unique=False)
    return TitleCheckOut(unique=not is_title_taken(db, title, exclude_id))


@router.post("/from-template/{template_id}", response_model=FormWithFieldsOut)
def create_form_from_template(
    template_id: str,
    payload: FormFromTemplate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    form = forms_service.create_form_from_template(
        db, template_id, title=payload.title, category=payload.category, actor=current_user
    )
    return form_out(form)


@router.get("/{form_id}", response_model=FormWithFieldsOut)
def read_form(
    form_id: str,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return form_out(forms_service.get_form_or_404(db, form_id))


@router.put("/{form_id}", response_model=FormWithFieldsOut)
def update_form(
    form_id: str,
    payload: FormUpdate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    changes = from_model(payload, "title", "fields", "category", "category_id")
    form = forms_service.update_form(db, form_id, **changes, actor=current_user)
    return form_out(form)


@router.delete("/{form_id}")
def delete_form(
    form_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    if not forms_service.delete_form(db, form_id, actor=current_user):
        raise NotFoundError("Form")
    return {"ok": True}


@router.get("/{form_id}/submissions", response_model=PaginatedResponse[SubmissionOut])
def list_form_submissions(
    form_id: str,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    forms_service.get_form_or_404(db, form_id)
    rows, total = list_submissions(db, form_id, limit=limit, offset=offset)
    items = [
        SubmissionOut(id=s.id, form_id=s.form_id, payload=s.payload, created_at=s.created_at)
        for s in rows
    ]
    return PaginatedResponse[SubmissionOut](
        items=items,
        pagination=PaginationMeta.for_page(total=total, limit=limit, offset=offset, returned=len(items)),
    )
