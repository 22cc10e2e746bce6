from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from formhost.core.field_validation import split_options
from formhost.db.session import get_db
from formhost.schemas.submissions import HostedFieldOut, HostedFormOut, SubmissionAck, SubmissionCreate
from formhost.services import submissions as submissions_service
from formhost.services.forms import form_fields, get_form_or_404

router = APIRouter(prefix="/public/forms", tags=["public"])


@router.get("/{form_id}", response_model=HostedFormOut)
def hosted_form(form_id: str, db: Session = Depends(get_db)):
    """Definition for the public submission page; no auth."""
    form = get_form_or_404(db, form_id)
    fields = form_fields(form)
    return HostedFormOut(
        id=form.id,
        title=form.title or "Form",
        fields=[
            HostedFieldOut(
                name=f.name,
                type=f.type,
                label=f.label,
                required=f.required,
                placeholder=f.placeholder,
                options=split_options(f.options),
                content=f.content,
            )
            for f in fields
        ],
    )


@router.post("/{form_id}/submissions", response_model=SubmissionAck)
def public_submit(form_id: str, payload: SubmissionCreate, db: Session = Depends(get_db)):
    submission = submissions_service.submit(db, form_id, payload.data, store_consent=payload.storeConsent)
    return SubmissionAck(stored=submission is not None, submission_id=submission.id if submission else None)
