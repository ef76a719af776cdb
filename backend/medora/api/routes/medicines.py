"""Storefront medicines: search, detail by slug, reviews."""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.audit import AuditLog
from medora.core.config import settings
from medora.core.exceptions import BusinessError
from medora.core.permissions import STAFF_ROLES, require_auth, require_role
from medora.core.security import TokenPayload
from medora.models.enums import OrderStatus
from medora.models.medicine import Medicine
from medora.models.order import Order, OrderItem
from medora.models.review import Review
from medora.schemas.medicine import (
    MedicineCreate,
    MedicineDetail,
    MedicineList,
    MedicineResponse,
    ReviewCreate,
    ReviewList,
    ReviewResponse,
)
from medora.services import catalog_service
from medora.services.pagination import paginate

router = APIRouter()

LATEST_REVIEWS = 10


def _get_by_slug(db: Session, slug: str) -> Medicine:
    medicine = db.query(Medicine).filter(Medicine.slug == slug).first()
    if not medicine:
        raise BusinessError.not_found("Medicine")
    return medicine


@router.get("", response_model=MedicineList)
def list_medicines(
    query: Optional[str] = Query(None),
    category: Optional[str] = Query(None, description="Category slug"),
    brand: Optional[str] = Query(None, description="Brand slug"),
    prescription_required: Optional[bool] = Query(None, alias="prescriptionRequired"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    featured: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort_by: Optional[Literal["name", "price", "createdAt", "popularity"]] = Query(None, alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    db: Session = Depends(get_db),
):
    """
    Search active medicines.

    Free text matches name, generic name or description (case-insensitive).
    Without sortBy the newest medicines come first.
    """
    q = catalog_service.search_medicines(
        db,
        query=query,
        category=category,
        brand=brand,
        prescription_required=prescription_required,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    medicines, pagination = paginate(q, page, limit)
    return MedicineList(medicines=catalog_service.with_ratings(db, medicines), pagination=pagination)


@router.post("", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
def create_medicine(
    data: MedicineCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Create a fully described catalog entry (ADMIN / PHARMACIST)."""
    actor = require_role(claims, STAFF_ROLES)

    if db.query(Medicine).filter(Medicine.slug == data.slug).first():
        raise BusinessError.bad_request("Medicine with this slug already exists")
    if db.query(Medicine).filter(Medicine.sku == data.sku).first():
        raise BusinessError.bad_request("Medicine with this SKU already exists")
    catalog_service.require_category(db, data.category_id)
    if data.brand_id is not None:
        catalog_service.require_brand(db, data.brand_id)

    fields = data.model_dump(exclude_none=True)
    medicine = Medicine(**fields)
    db.add(medicine)
    db.commit()
    db.refresh(medicine)

    AuditLog.log_action("create", "medicine", medicine.id, actor, changes={"slug": medicine.slug})
    return medicine


@router.get("/{slug}", response_model=MedicineDetail)
def get_medicine(slug: str, db: Session = Depends(get_db)):
    medicine = _get_by_slug(db, slug)
    reviews = (
        db.query(Review)
        .filter(Review.medicine_id == medicine.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(LATEST_REVIEWS)
        .all()
    )
    base = MedicineResponse.model_validate(medicine).model_dump()
    base["average_rating"] = catalog_service.average_rating(db, medicine.id)
    base["review_count"] = catalog_service.review_count(db, medicine.id)
    return MedicineDetail(**base, reviews=[ReviewResponse.model_validate(r) for r in reviews])


@router.get("/{slug}/reviews", response_model=ReviewList)
def list_reviews(slug: str, db: Session = Depends(get_db)):
    medicine = _get_by_slug(db, slug)
    reviews = (
        db.query(Review)
        .filter(Review.medicine_id == medicine.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )
    return ReviewList(reviews=reviews)


@router.post("/{slug}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(
    slug: str,
    data: ReviewCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Review a medicine. Marked verified when the reviewer has received it in a delivered order."""
    user = require_auth(claims)
    medicine = _get_by_slug(db, slug)

    delivered = (
        db.query(OrderItem.id)
        .join(Order, OrderItem.order_id == Order.id)
        .filter(
            Order.user_id == user.user_id,
            Order.status == OrderStatus.DELIVERED,
            OrderItem.medicine_id == medicine.id,
        )
        .first()
    )
    review = Review(
        user_id=user.user_id,
        medicine_id=medicine.id,
        rating=data.rating,
        comment=data.comment,
        verified=delivered is not None,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review
