"""Catalog helpers: slugs, SKUs, medicine search and rating aggregates."""
import re
import secrets
import string
import time
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Query, Session

from medora.core.exceptions import BusinessError
from medora.models.catalog import Brand, Category
from medora.models.medicine import Medicine
from medora.models.order import OrderItem
from medora.models.review import Review
from medora.schemas.medicine import MedicineResponse

SKU_ALPHABET = string.digits + string.ascii_uppercase

SORT_COLUMNS = {
    "name": Medicine.name,
    "price": Medicine.price,
    "createdAt": Medicine.created_at,
}


def slugify(name: str) -> str:
    """Lowercase, collapse every non-alphanumeric run to one hyphen, trim hyphens.

    >>> slugify("Napa 500mg Tablet")
    'napa-500mg-tablet'
    >>> slugify("  Cold & Flu! ")
    'cold-flu'
    """
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def generate_sku() -> str:
    """MED-<epoch millis>-<9 random base-36 chars>."""
    suffix = "".join(secrets.choice(SKU_ALPHABET) for _ in range(9))
    return f"MED-{int(time.time() * 1000)}-{suffix}"


def order_item_count_subquery():
    return (
        select(func.count(OrderItem.id))
        .where(OrderItem.medicine_id == Medicine.id)
        .correlate(Medicine)
        .scalar_subquery()
    )


def search_medicines(
    db: Session,
    query: Optional[str] = None,
    category: Optional[str] = None,
    brand: Optional[str] = None,
    prescription_required: Optional[bool] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    featured: Optional[bool] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "asc",
) -> Query:
    """Storefront query over active medicines. Free text is ORed over name, generic name and description."""
    q = db.query(Medicine).filter(Medicine.active.is_(True))

    if query:
        pattern = f"%{query}%"
        q = q.filter(or_(
            Medicine.name.ilike(pattern),
            Medicine.generic_name.ilike(pattern),
            Medicine.description.ilike(pattern),
        ))
    if category:
        q = q.join(Category, Medicine.category_id == Category.id).filter(Category.slug == category)
    if brand:
        q = q.join(Brand, Medicine.brand_id == Brand.id).filter(Brand.slug == brand)
    if prescription_required is not None:
        q = q.filter(Medicine.prescription_required.is_(prescription_required))
    if featured is not None:
        q = q.filter(Medicine.featured.is_(featured))
    if min_price is not None:
        q = q.filter(Medicine.price >= min_price)
    if max_price is not None:
        q = q.filter(Medicine.price <= max_price)

    if sort_by == "popularity":
        column = order_item_count_subquery()
    elif sort_by in SORT_COLUMNS:
        column = SORT_COLUMNS[sort_by]
    else:
        return q.order_by(Medicine.created_at.desc(), Medicine.id.desc())

    direction = column.desc() if sort_order == "desc" else column.asc()
    return q.order_by(direction, Medicine.id.asc())


def average_rating(db: Session, medicine_id: int) -> float:
    avg = db.query(func.avg(Review.rating)).filter(Review.medicine_id == medicine_id).scalar()
    return float(avg) if avg is not None else 0.0


def review_count(db: Session, medicine_id: int) -> int:
    return db.query(func.count(Review.id)).filter(Review.medicine_id == medicine_id).scalar() or 0


def with_ratings(db: Session, medicines: List[Medicine]) -> List[MedicineResponse]:
    """Attach averageRating / reviewCount. One aggregate query per medicine; fine at catalog sizes we run."""
    results = []
    for medicine in medicines:
        item = MedicineResponse.model_validate(medicine)
        item.average_rating = average_rating(db, medicine.id)
        item.review_count = review_count(db, medicine.id)
        results.append(item)
    return results


def require_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise BusinessError.bad_request("Category does not exist")
    return category


def require_brand(db: Session, brand_id: int) -> Brand:
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise BusinessError.bad_request("Brand does not exist")
    return brand
