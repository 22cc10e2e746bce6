import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formhost.db.base import Base


class Form(Base):
    __tablename__ = "forms"
    __table_args__ = (
        # title_key = casefold(NFKC(trim(title))); backstop for the pre-check
        UniqueConstraint("title_key", name="uq_forms_title_key"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    title_key: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[str] = mapped_column(String(32), nullable=False, default="survey")
    category_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
    )

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    current_version_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # denormalized pointer; no FK to avoid a forms <-> form_versions cycle
    last_published_version_id: Mapped[str | None] = mapped_column(String(40), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    fields = relationship(
        "FormField",
        back_populates="form",
        cascade="all, delete-orphan",
        order_by="FormField.position",
        lazy="selectin",
    )
    versions = relationship("FormVersion", back_populates="form", cascade="all, delete-orphan")
    drafts = relationship("FormDraft", back_populates="form", cascade="all, delete-orphan")
    submissions = relationship("FormSubmission", back_populates="form", cascade="all, delete-orphan")
