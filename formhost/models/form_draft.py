import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formhost.db.base import Base, JSONType


class FormDraft(Base):
    __tablename__ = "form_drafts"
    __table_args__ = (
        UniqueConstraint("draft_key", name="uq_form_drafts_draft_key"),
        Index("ix_form_drafts_form_author", "form_id", "created_by"),
        Index("ix_form_drafts_author_saved", "created_by", "last_saved_at"),
        Index("ix_form_drafts_last_saved", "last_saved_at"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    # NULL while authoring a form that does not exist yet
    form_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=True,
    )

    # "<form_id>:<author hex>", either side empty; one draft per key
    draft_key: Mapped[str] = mapped_column(String(120), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    category_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    fields_data: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )

    last_saved_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    is_auto_save: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    form = relationship("Form", back_populates="drafts")
