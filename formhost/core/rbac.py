from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from formhost.core.security import get_current_user
from formhost.db.session import get_db
from formhost.models.user import User
from formhost.models.rbac import Role, UserRole

EDITORS = ("ADMIN", "EDITOR")
READERS = ("ADMIN", "EDITOR", "VIEWER")


def get_user_role_names(db: Session, user: User) -> set[str]:
    rows = (
        db.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user.id)
        .all()
    )
    return {r[0] for r in rows}


def require_roles(*required: str):
    """
    Usage:
      Depends(require_roles("ADMIN"))
      Depends(require_roles(*EDITORS))  # any-of

    Resolves to None when auth is disabled.
    """
    required_set = set(required)

    def _dep(
        db: Session = Depends(get_db),
        user: User | None = Depends(get_current_user),
    ) -> User | None:
        if user is None:
            return None
        role_names = get_user_role_names(db, user)
        if not (role_names & required_set):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden. Requires one of: {sorted(required_set)}",
            )
        return user

    return _dep
