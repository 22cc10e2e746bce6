from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formhost.core.rbac import READERS, require_roles
from formhost.core.unset import from_model
from formhost.db.session import get_db
from formhost.models.category import Category
from formhost.models.user import User
from formhost.schemas.categories import CategoryCreate, CategoryOut, CategoryUpdate
from formhost.services import categories as categories_service

router = APIRouter(prefix="/categories", tags=["categories"])


def category_out(c: Category) -> CategoryOut:
    return CategoryOut(
        id=c.id,
        name=c.name,
        description=c.description or "",
        color=c.color,
        is_active=c.is_active,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


@router.get("", response_model=list[CategoryOut])
def list_categories(
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return [category_out(c) for c in categories_service.list_categories(db, active_only=active_only)]


@router.get("/{category_id}", response_model=CategoryOut)
def read_category(
    category_id: str,
    db: Session = Depends(get_db),
    _: User | None = Depends(require_roles(*READERS)),
):
    return category_out(categories_service.get_category(db, category_id))


@router.post("", response_model=CategoryOut)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles("ADMIN")),
):
    category = categories_service.create_category(
        db,
        name=payload.name,
        description=payload.description,
        color=payload.color,
        actor=current_user,
    )
    return category_out(category)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles("ADMIN")),
):
    changes = from_model(payload, "name", "description", "color", "is_active")
    return category_out(categories_service.update_category(db, category_id, **changes, actor=current_user))


@router.delete("/{category_id}")
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(require_roles("ADMIN")),
):
    categories_service.delete_category(db, category_id, actor=current_user)
    return {"ok": True}
