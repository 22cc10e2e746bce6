"""Reap stale drafts. Run from cron, e.g. daily:

    python scripts/cleanup_drafts.py --days 30
"""
import argparse
import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from formhost.core.config import settings
from formhost.core.logging import configure_logging
from formhost.db.session import SessionLocal
from formhost.services.versioning import cleanup_old_drafts

logger = logging.getLogger("formhost.scripts.cleanup_drafts")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Delete drafts older than N days")
    parser.add_argument("--days", type=int, default=settings.DRAFT_RETENTION_DAYS)
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)
    db = SessionLocal()
    try:
        deleted = cleanup_old_drafts(db, args.days)
        print(f"Cleanup completed. Deleted {deleted} old drafts.")
        return 0
    except Exception:
        logger.exception("Draft cleanup failed")
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
