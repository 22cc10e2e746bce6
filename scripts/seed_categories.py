import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

import formhost.models  # noqa: F401
from formhost.db.session import SessionLocal
from formhost.models.category import Category
from formhost.services.categories import create_category

DEFAULT_CATEGORIES = [
    ("Survey", "Questionnaires and polls", "#0d6efd"),
    ("Quiz", "Scored question sets", "#6f42c1"),
    ("Feedback", "Product and service feedback", "#198754"),
    ("Registration", "Sign-ups and event registration", "#fd7e14"),
    ("Contact", "Contact and enquiry forms", "#20c997"),
]


def main():
    db = SessionLocal()
    try:
        existing = {c.name for c in db.query(Category).all()}
        added = []
        for name, description, color in DEFAULT_CATEGORIES:
            if name in existing:
                continue
            create_category(db, name=name, description=description, color=color)
            added.append(name)
        print("Categories seeded:", added or "none (already present)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
