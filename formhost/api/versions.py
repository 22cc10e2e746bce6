from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from formhost.core.errors import NotFoundError
from formhost.core.field_validation import validate_fields_or_raise
from formhost.core.rbac import EDITORS, READERS, require_roles
from formhost.db.session import get_db
from formhost.models.form_version import FormVersion
from formhost.models.user import User
from formhost.schemas.versions import VersionCreate, VersionOut
from formhost.services import versioning

router = APIRouter(prefix="/forms/{form_id}/versions", tags=["versions"])


def version_out(v: FormVersion) -> VersionOut:
    return VersionOut(
        id=v.id,
        form_id=v.form_id,
        version_number=v.version_number,
        title=v.title,
        category_id=v.category_id,
        fields=list(v.fields_data or []),
        is_published=v.is_published,
        published_at=v.published_at,
        created_by=str(v.created_by) if v.created_by else None,
        change_description=v.change_description,
        created_at=v.created_at,
    )


@router.get("", response_model=list[VersionOut])
def list_versions(
    form_id: str,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return [version_out(v) for v in versioning.list_versions(db, form_id)]


@router.post("", response_model=VersionOut)
def create_version(
    form_id: str,
    payload: VersionCreate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    fields = validate_fields_or_raise(payload.fields) if payload.fields is not None else None
    version = versioning.create_version(
        db,
        form_id,
        title=payload.title,
        fields=fields,
        category_id=payload.category_id,
        author=current_user,
        change_description=payload.change_description,
    )
    return version_out(version)


@router.get("/published", response_model=VersionOut)
def get_published_version(
    form_id: str,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    version = versioning.get_published_version(db, form_id)
    if version is None:
        raise NotFoundError("Published version")
    return version_out(version)


@router.get("/{version_id}", response_model=VersionOut)
def get_version(
    form_id: str,
    version_id: str,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return version_out(versioning.get_version(db, form_id, version_id))


@router.post("/{version_id}/publish", response_model=VersionOut)
def publish_version(
    form_id: str,
    version_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    return version_out(versioning.publish_version(db, form_id, version_id, current_user))


@router.post("/{version_id}/rollback", response_model=VersionOut)
def rollback_to_version(
    form_id: str,
    version_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles(*EDITORS)),
):
    return version_out(versioning.rollback_to_version(db, form_id, version_id, current_user))
