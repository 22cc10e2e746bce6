import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from formhost.models.audit_event import AuditEvent
from formhost.models.user import User

logger = logging.getLogger(__name__)


def log_event(
    *,
    db: Session,
    actor: User | None,
    action: str,
    entity_type: str,
    entity_id,
    metadata: dict[str, Any] | None = None,
):
    """
    Record an audit event. Called after the mutation has committed; a
    failure here is logged and swallowed so it never undoes the mutation.
    """
    event = AuditEvent(
        actor_user_id=actor.id if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        event_metadata=metadata,
    )
    db.add(event)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Audit log failed for %s %s %s", action, entity_type, entity_id, exc_info=True)
