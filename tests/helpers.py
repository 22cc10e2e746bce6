from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from formhost.models.category import Category
from formhost.models.form import Form
from formhost.models.rbac import Role, UserRole
from formhost.models.user import User
from formhost.services.categories import create_category as _create_category
from formhost.services.forms import create_or_update_form


def ensure_role(db, name: str) -> Role:
    r = db.query(Role).filter(Role.name == name).one_or_none()
    if r:
        return r
    r = Role(name=name)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def create_user(db, email: str, full_name="User") -> User:
    u = User(email=email, full_name=full_name, is_active=True)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def grant_role(db, user: User, role_name: str):
    role = ensure_role(db, role_name)
    exists = db.query(UserRole).filter(UserRole.user_id == user.id, UserRole.role_id == role.id).one_or_none()
    if not exists:
        db.add(UserRole(user_id=user.id, role_id=role.id))
        db.commit()


def field(name: str, ftype: str = "singleLine", **extra) -> dict:
    """Minimal valid field payload."""
    f = {"type": ftype, "label": name.replace("_", " ").title(), "name": name}
    if ftype in ("dropdown", "multipleChoice", "checkboxes") and "options" not in extra:
        f["options"] = "Red, Green, Blue"
    f.update(extra)
    return f


def create_form(
    db: Session,
    *,
    title: str = "Test Form",
    fields: list[dict] | None = None,
    category_id: str | None = None,
    actor: User | None = None,
) -> Form:
    return create_or_update_form(
        db,
        title=title,
        fields=fields if fields is not None else [field("full_name"), field("email", "email")],
        category_id=category_id,
        actor=actor,
    )


def create_category(db: Session, name: str = "Events", color: str = "#112233") -> Category:
    return _create_category(db, name=name, description="", color=color)


def age_draft(db: Session, draft, days: int):
    draft.last_saved_at = datetime.utcnow() - timedelta(days=days)
    db.commit()
