from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formhost.core.field_validation import FIELD_TYPES
from formhost.db.base import Base


class FormField(Base):
    __tablename__ = "form_fields"
    __table_args__ = (
        UniqueConstraint("form_id", "name", name="uq_form_fields_form_id_name"),
        CheckConstraint(
            "type IN (" + ",".join(f"'{t}'" for t in sorted(FIELD_TYPES)) + ")",
            name="ck_form_fields_type",
        ),
        Index("ix_form_fields_form_id", "form_id"),
    )

    id: Mapped[str] = mapped_column(String(40), primary_key=True)

    form_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )

    type: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="")

    placeholder: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # excluded from any stored submission copy
    do_not_store: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # comma-separated; empty unless type is an option type
    options: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # body for richText blocks
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    form = relationship("Form", back_populates="fields")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "name": self.name,
            "placeholder": self.placeholder,
            "required": self.required,
            "doNotStore": self.do_not_store,
            "options": self.options,
            "content": self.content,
        }
