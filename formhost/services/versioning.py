"""
Versions and drafts.

Versions are immutable, numbered snapshots of a form (title, category,
fields). At most one version per form is published; publishing copies the
snapshot back into the live form_fields rows. Rollback never edits history:
it snapshots the old content as a new version and publishes that.

Drafts are a mutable scratch copy per (form, author), or per author for a
form that does not exist yet. Saving overwrites the one row in place.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from formhost.core.audit import log_event
from formhost.core.config import settings
from formhost.core.errors import ConflictError, NotFoundError
from formhost.core.field_validation import DEFAULT_CATEGORY, validate_fields_or_raise, validate_title
from formhost.core.ids import FormId, generate_unique_id, row_id
from formhost.core.uniqueness import FORM_CONFLICTS, FORM_TITLE_TAKEN, is_title_taken, normalize_title, title_key
from formhost.db.transaction import commit_or_raise, flush_or_raise
from formhost.models.form import Form
from formhost.models.form_draft import FormDraft
from formhost.models.form_version import FormVersion
from formhost.models.user import User
from formhost.services.forms import build_field_rows, replace_fields

logger = logging.getLogger(__name__)


def _actor_id(actor: User | None):
    return actor.id if actor else None


def _next_version_number(db: Session, form: Form) -> int:
    # max() guards against a drifted counter; the counter guards against
    # reusing the number of a version that was deleted out-of-band
    current_max = (
        db.query(func.max(FormVersion.version_number))
        .filter(FormVersion.form_id == form.id)
        .scalar()
    ) or 0
    return max(current_max, form.current_version_number or 0) + 1


def _snapshot_fields(form: Form) -> list[dict]:
    return [f.to_dict() for f in form.fields]


def _create_version(
    db: Session,
    form: Form,
    *,
    title: str | None,
    fields: list[dict] | None,
    category_id,
    author: User | None,
    change_description: str | None,
) -> FormVersion:
    number = _next_version_number(db, form)
    version = FormVersion(
        id=row_id(),
        form_id=form.id,
        version_number=number,
        title=normalize_title(title) if title else form.title,
        category_id=category_id,
        fields_data=fields if fields is not None else _snapshot_fields(form),
        is_published=False,
        created_by=_actor_id(author),
        change_description=change_description,
        created_at=datetime.utcnow(),
    )
    db.add(version)
    form.current_version_number = number
    flush_or_raise(db, conflicts=FORM_CONFLICTS)
    return version


def _publish_version(db: Session, form: Form, version: FormVersion) -> FormVersion:
    now = datetime.utcnow()

    (
        db.query(FormVersion)
        .filter(
            FormVersion.form_id == form.id,
            FormVersion.is_published.is_(True),
            FormVersion.id != version.id,
        )
        .update({"is_published": False, "published_at": None}, synchronize_session="fetch")
    )

    version.is_published = True
    version.published_at = now

    form.is_published = True
    form.published_at = now
    form.last_published_version_id = version.id
    form.updated_at = now

    replace_fields(db, form, list(version.fields_data or []))
    return version


def _load_form(db: Session, form_id: str, *, lock: bool = False) -> Form:
    # lock=True takes a row lock on the form so writers to one form's
    # versions and drafts run one at a time
    form = db.get(Form, form_id, with_for_update=lock)
    if form is None:
        raise NotFoundError("Form")
    return form


def _load_version(db: Session, form_id: str, version_id: str) -> FormVersion:
    version = (
        db.query(FormVersion)
        .filter(FormVersion.id == version_id, FormVersion.form_id == form_id)
        .one_or_none()
    )
    if version is None:
        raise NotFoundError("Version")
    return version


def create_version(
    db: Session,
    form_id: str,
    *,
    title: str | None = None,
    fields: list[dict] | None = None,
    category_id: str | None = None,
    author: User | None = None,
    change_description: str | None = None,
) -> FormVersion:
    """
    Snapshot a form. fields=None snapshots the live field rows. Live rows
    are never touched here.
    """
    form = _load_form(db, form_id, lock=True)
    if category_id is None:
        category_id = form.category_id
    version = _create_version(
        db,
        form,
        title=title,
        fields=fields,
        category_id=category_id,
        author=author,
        change_description=change_description,
    )
    commit_or_raise(db, conflicts=FORM_CONFLICTS)

    logger.info("Created version %d of form %s", version.version_number, form.id)
    log_event(
        db=db,
        actor=author,
        action="FORM_VERSION_CREATED",
        entity_type="form",
        entity_id=form.id,
        metadata={"version_number": version.version_number, "version_id": version.id},
    )
    return version


def publish_version(db: Session, form_id: str, version_id: str, author: User | None = None) -> FormVersion:
    form = _load_form(db, form_id, lock=True)
    version = _load_version(db, form_id, version_id)

    _publish_version(db, form, version)
    commit_or_raise(db, conflicts=FORM_CONFLICTS)

    logger.info("Published version %d of form %s", version.version_number, form.id)
    log_event(
        db=db,
        actor=author,
        action="FORM_VERSION_PUBLISHED",
        entity_type="form",
        entity_id=form.id,
        metadata={"version_number": version.version_number, "version_id": version.id},
    )
    return version


def rollback_to_version(db: Session, form_id: str, version_id: str, author: User | None = None) -> FormVersion:
    """Re-publish old content as a brand-new version (one transaction)."""
    form = _load_form(db, form_id, lock=True)
    target = _load_version(db, form_id, version_id)

    version = _create_version(
        db,
        form,
        title=target.title,
        fields=list(target.fields_data or []),
        category_id=target.category_id,
        author=author,
        change_description=f"Rollback to version {target.version_number}",
    )
    _publish_version(db, form, version)
    commit_or_raise(db, conflicts=FORM_CONFLICTS)

    logger.info("Rolled form %s back to version %d as version %d", form.id, target.version_number, version.version_number)
    log_event(
        db=db,
        actor=author,
        action="FORM_VERSION_ROLLED_BACK",
        entity_type="form",
        entity_id=form.id,
        metadata={"from_version": target.version_number, "version_number": version.version_number},
    )
    return version


def list_versions(db: Session, form_id: str) -> list[FormVersion]:
    _load_form(db, form_id)
    return (
        db.query(FormVersion)
        .filter(FormVersion.form_id == form_id)
        .order_by(FormVersion.version_number.desc())
        .all()
    )


def get_version(db: Session, form_id: str, version_id: str) -> FormVersion:
    return _load_version(db, form_id, version_id)


def get_published_version(db: Session, form_id: str) -> FormVersion | None:
    return (
        db.query(FormVersion)
        .filter(FormVersion.form_id == form_id, FormVersion.is_published.is_(True))
        .one_or_none()
    )


# ---------------------- Drafts ----------------------

DRAFT_CONFLICTS = {"draft_key": "Draft already exists"}


def draft_key(form_id: str | None, author_id) -> str:
    return f"{form_id or ''}:{author_id.hex if author_id else ''}"


def _find_draft(db: Session, key: str) -> FormDraft | None:
    return db.query(FormDraft).filter(FormDraft.draft_key == key).one_or_none()


def save_draft(
    db: Session,
    *,
    form_id: str | None,
    author: User | None,
    title: str = "",
    fields: list[dict] | None = None,
    category_id: str | None = None,
    is_auto_save: bool = False,
) -> FormDraft:
    """
    Upsert the single draft for (form_id, author). Drafts hold work in
    progress, so fields are stored as sent and validated on publish.

    A concurrent first save for the same key loses on uq_form_drafts_draft_key;
    it is retried once as an update of the row that won.
    """
    if form_id:
        _load_form(db, form_id)

    author_id = _actor_id(author)
    key = draft_key(form_id, author_id)

    for attempt in range(2):
        now = datetime.utcnow()
        draft = _find_draft(db, key)
        if draft is None:
            draft = FormDraft(
                id=row_id(),
                form_id=form_id or None,
                draft_key=key,
                created_by=author_id,
                created_at=now,
            )
            db.add(draft)

        draft.title = normalize_title(title)
        draft.category_id = category_id or None
        draft.fields_data = list(fields or [])
        draft.is_auto_save = bool(is_auto_save)
        draft.last_saved_at = now

        try:
            commit_or_raise(db, conflicts=DRAFT_CONFLICTS)
        except ConflictError:
            if attempt:
                raise
            logger.info("Draft %s was created concurrently, saving as update", key)
            continue
        break

    logger.debug("Saved draft %s (auto=%s)", draft.id, draft.is_auto_save)
    return draft


def list_drafts(db: Session, author: User | None, include_auto_save: bool = False) -> list[FormDraft]:
    author_id = _actor_id(author)
    q = db.query(FormDraft)
    q = q.filter(FormDraft.created_by == author_id) if author_id else q.filter(FormDraft.created_by.is_(None))
    if not include_auto_save:
        q = q.filter(FormDraft.is_auto_save.is_(False))
    return q.order_by(FormDraft.last_saved_at.desc()).all()


def get_draft(db: Session, draft_id: str, author: User | None) -> FormDraft:
    author_id = _actor_id(author)
    draft = db.get(FormDraft, draft_id)
    if draft is None or draft.created_by != author_id:
        raise NotFoundError("Draft")
    return draft


def delete_draft(db: Session, draft_id: str, author: User | None) -> None:
    draft = get_draft(db, draft_id, author)
    db.delete(draft)
    commit_or_raise(db)


def publish_draft_as_form(db: Session, draft_id: str, author: User | None) -> tuple[Form, FormVersion]:
    """
    Turn a draft into a real form: form row, version 1 (already published)
    and live fields are created together and the draft is removed.
    """
    draft = get_draft(db, draft_id, author)

    title = validate_title(draft.title)
    clean = validate_fields_or_raise(draft.fields_data)
    if is_title_taken(db, title):
        raise ConflictError(FORM_TITLE_TAKEN)

    now = datetime.utcnow()
    form_id = generate_unique_id(db, Form, FormId)
    form = Form(
        id=str(form_id),
        title=normalize_title(title),
        title_key=title_key(title),
        category=DEFAULT_CATEGORY,
        category_id=draft.category_id,
        created_by=_actor_id(author),
        current_version_number=1,
        is_published=True,
        published_at=now,
        created_at=now,
        updated_at=now,
    )
    form.fields = build_field_rows(form.id, clean)
    db.add(form)
    flush_or_raise(db, conflicts=FORM_CONFLICTS)

    version = FormVersion(
        id=row_id(),
        form_id=form.id,
        version_number=1,
        title=form.title,
        category_id=form.category_id,
        fields_data=[f.to_dict() for f in form.fields],
        is_published=True,
        published_at=now,
        created_by=_actor_id(author),
        change_description="Initial version from draft",
        created_at=now,
    )
    db.add(version)
    form.last_published_version_id = version.id

    db.delete(draft)
    commit_or_raise(db, conflicts=FORM_CONFLICTS)

    logger.info("Published draft %s as form %s", draft_id, form.id)
    log_event(
        db=db,
        actor=author,
        action="FORM_CREATED",
        entity_type="form",
        entity_id=form.id,
        metadata={"title": form.title, "from_draft": draft_id, "field_count": len(clean)},
    )
    return form, version


def cleanup_old_drafts(db: Session, days_old: int | None = None) -> int:
    """Delete drafts not saved within days_old days. Safe to re-run."""
    if days_old is None:
        days_old = settings.DRAFT_RETENTION_DAYS
    cutoff = datetime.utcnow() - timedelta(days=days_old)

    deleted = (
        db.query(FormDraft)
        .filter(FormDraft.last_saved_at < cutoff)
        .delete(synchronize_session=False)
    )
    commit_or_raise(db)

    logger.info("Draft cleanup removed %d drafts older than %d days", deleted, days_old)
    return deleted
