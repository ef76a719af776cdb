"""Public category tree."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from medora.api.deps import get_db
from medora.models.catalog import Category
from medora.models.medicine import Medicine
from medora.schemas.catalog import CategoryList, CategoryResponse
from medora.schemas.refs import CategoryRef

router = APIRouter()


def medicine_counts(db: Session) -> dict:
    rows = (
        db.query(Medicine.category_id, func.count(Medicine.id))
        .group_by(Medicine.category_id)
        .all()
    )
    return {category_id: count for category_id, count in rows}


@router.get("", response_model=CategoryList)
def list_categories(
    parent_id: Optional[str] = Query(None, alias="parentId", description="Parent id, or 'null' for roots"),
    include_children: bool = Query(False, alias="includeChildren"),
    include_medicine_count: bool = Query(False, alias="includeMedicineCount"),
    db: Session = Depends(get_db),
):
    """Categories ordered by name, optionally filtered to one parent."""
    q = db.query(Category)
    if parent_id == "null":
        q = q.filter(Category.parent_id.is_(None))
    elif parent_id:
        try:
            q = q.filter(Category.parent_id == int(parent_id))
        except ValueError:
            return CategoryList(categories=[])

    categories = q.order_by(Category.name).all()
    counts = medicine_counts(db) if include_medicine_count else {}

    results = []
    for category in categories:
        item = CategoryResponse.model_validate(
            {
                "id": category.id,
                "name": category.name,
                "slug": category.slug,
                "description": category.description,
                "image": category.image,
                "parent_id": category.parent_id,
                "created_at": category.created_at,
                "updated_at": category.updated_at,
            }
        )
        if include_children:
            item.children = [
                CategoryRef.model_validate(child)
                for child in sorted(category.children, key=lambda c: c.name)
            ]
        if include_medicine_count:
            item.medicine_count = counts.get(category.id, 0)
        results.append(item)
    return CategoryList(categories=results)
