from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formhost.api.versions import version_out
from formhost.core.rbac import EDITORS, require_roles
from formhost.db.session import get_db
from formhost.models.form_draft import FormDraft
from formhost.models.user import User
from formhost.schemas.versions import DraftOut, DraftPublishOut, DraftSave
from formhost.services import versioning

router = APIRouter(prefix="/drafts", tags=["drafts"])


def draft_out(d: FormDraft) -> DraftOut:
    return DraftOut(
        id=d.id,
        form_id=d.form_id,
        title=d.title,
        category_id=d.category_id,
        fields=list(d.fields_data or []),
        is_auto_save=d.is_auto_save,
        last_saved_at=d.last_saved_at,
        created_at=d.created_at,
    )


@router.get("", response_model=list[DraftOut])
def list_my_drafts(
    include_auto_save: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    return [draft_out(d) for d in versioning.list_drafts(db, current_user, include_auto_save)]


@router.post("", response_model=DraftOut)
def save_draft(
    payload: DraftSave,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    draft = versioning.save_draft(
        db,
        form_id=payload.form_id,
        author=current_user,
        title=payload.title,
        fields=payload.fields,
        category_id=payload.category_id,
        is_auto_save=payload.is_auto_save,
    )
    return draft_out(draft)


@router.get("/{draft_id}", response_model=DraftOut)
def read_draft(
    draft_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    return draft_out(versioning.get_draft(db, draft_id, current_user))


@router.delete("/{draft_id}")
def delete_draft(
    draft_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    versioning.delete_draft(db, draft_id, current_user)
    return {"ok": True}


@router.post("/{draft_id}/publish", response_model=DraftPublishOut)
def publish_draft(
    draft_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    form, version = versioning.publish_draft_as_form(db, draft_id, current_user)
    return DraftPublishOut(form_id=form.id, version=version_out(version))
