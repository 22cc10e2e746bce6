import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from formhost.core.errors import ConflictError, TransactionFailure

logger = logging.getLogger(__name__)

UNIQUE_CONFLICT = "Uniqueness constraint failed."


def commit_or_raise(db: Session, *, conflicts: dict[str, str] | None = None) -> None:
    """
    Commit the unit of work or roll it back entirely.

    conflicts maps a constraint/column marker (e.g. "title_key") to the
    user-facing message raised when that constraint is violated, so the
    constraint path reports exactly what the pre-check would have.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise error_from_integrity_error(e, conflicts) from e
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Transaction failed, rolled back")
        raise TransactionFailure()


def flush_or_raise(db: Session, *, conflicts: dict[str, str] | None = None) -> None:
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise error_from_integrity_error(e, conflicts) from e
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Flush failed, rolled back")
        raise TransactionFailure()


def error_from_integrity_error(e: IntegrityError, conflicts: dict[str, str] | None):
    raw = str(e.orig) if e.orig is not None else str(e)
    for marker, message in (conflicts or {}).items():
        if marker in raw:
            return ConflictError(message)

    lowered = raw.lower()
    if "unique" in lowered or "duplicate key" in lowered:
        return ConflictError(UNIQUE_CONFLICT)

    # FK / NOT NULL / CHECK violations are not user conflicts
    logger.error("Integrity error, rolled back: %s", raw)
    return TransactionFailure()
