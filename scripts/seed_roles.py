"""Create the ADMIN / EDITOR / VIEWER roles, optionally granting one user ADMIN.

    python scripts/seed_roles.py --admin admin@local.test
"""
import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import formhost.models  # noqa: F401
from formhost.db.session import SessionLocal
from formhost.models.rbac import Role, UserRole
from formhost.models.user import User

ROLE_NAMES = ["ADMIN", "EDITOR", "VIEWER"]


def seed(db, admin_email: str | None = None) -> list[str]:
    existing = {r.name: r for r in db.query(Role).all()}
    added = [name for name in ROLE_NAMES if name not in existing]
    for name in added:
        existing[name] = Role(name=name)
        db.add(existing[name])
    db.flush()

    if admin_email:
        user = db.query(User).filter(User.email == admin_email).one_or_none()
        if user is None:
            user = User(email=admin_email, full_name=admin_email.split("@")[0])
            db.add(user)
            db.flush()
        admin = existing["ADMIN"]
        granted = (
            db.query(UserRole)
            .filter(UserRole.user_id == user.id, UserRole.role_id == admin.id)
            .one_or_none()
        )
        if granted is None:
            db.add(UserRole(user_id=user.id, role_id=admin.id))

    db.commit()
    return added


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed RBAC roles")
    parser.add_argument("--admin", help="email of a user to grant ADMIN (created if missing)")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        added = seed(db, args.admin)
        print("Roles seeded:", added or "none (already present)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
