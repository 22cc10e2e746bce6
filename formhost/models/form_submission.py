from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formhost.db.base import Base, JSONType


class FormSubmission(Base):
    """Optional stored copy of a submission, kept only with the submitter's consent."""

    __tablename__ = "form_submissions"
    __table_args__ = (
        Index("ix_form_submissions_form_id", "form_id"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    form_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )

    payload: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    form = relationship("Form", back_populates="submissions")
