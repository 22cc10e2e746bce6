from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from formhost.core.config import settings
from formhost.db.session import get_db
from formhost.models.user import User


def get_current_user(
    x_user_email: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User | None:
    """
    DEV AUTH: pass X-User-Email header to simulate logged-in user.
    Example: X-User-Email: admin@local.test

    With AUTH_ENABLED off every request is anonymous (None).
    """
    if not settings.AUTH_ENABLED:
        return None

    if not x_user_email:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Email header (dev auth)",
        )

    user = db.query(User).filter(User.email == x_user_email).one_or_none()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid or inactive user")
    return user
