"""Back-office catalog management: medicines, categories, brands.

ADMIN and PHARMACIST can read, create and edit; deletes are ADMIN only and
are refused while anything still depends on the row.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from medora.api.deps import authenticate, get_db
from medora.core.audit import AuditLog
from medora.core.config import settings
from medora.core.exceptions import BusinessError
from medora.core.permissions import ADMIN_ONLY, STAFF_ROLES, require_role
from medora.core.security import TokenPayload
from medora.models.catalog import Brand, Category
from medora.models.medicine import Medicine
from medora.models.order import OrderItem
from medora.schemas.catalog import (
    BrandCreate,
    BrandList,
    BrandResponse,
    BrandUpdate,
    CategoryCreate,
    CategoryList,
    CategoryResponse,
    CategoryUpdate,
)
from medora.schemas.common import MessageResponse
from medora.schemas.medicine import AdminMedicineCreate, MedicineList, MedicineResponse, MedicineUpdate
from medora.services import catalog_service
from medora.services.pagination import paginate

router = APIRouter()


# ==============================================================================
# MEDICINES
# ==============================================================================

def _get_medicine(db: Session, medicine_id: int) -> Medicine:
    medicine = db.query(Medicine).filter(Medicine.id == medicine_id).first()
    if not medicine:
        raise BusinessError.not_found("Medicine")
    return medicine


def _order_item_count(db: Session, medicine_id: int) -> int:
    return db.query(func.count(OrderItem.id)).filter(OrderItem.medicine_id == medicine_id).scalar() or 0


def _with_order_count(db: Session, medicine: Medicine) -> MedicineResponse:
    item = MedicineResponse.model_validate(medicine)
    item.order_item_count = _order_item_count(db, medicine.id)
    return item


@router.get("/medicines", response_model=MedicineList)
def admin_list_medicines(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """All medicines, inactive included. Search covers name, generic name and SKU."""
    require_role(claims, STAFF_ROLES)

    q = db.query(Medicine)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(
            Medicine.name.ilike(pattern),
            Medicine.generic_name.ilike(pattern),
            Medicine.sku.ilike(pattern),
        ))
    if category_id is not None:
        q = q.filter(Medicine.category_id == category_id)
    if active is not None:
        q = q.filter(Medicine.active.is_(active))

    medicines, pagination = paginate(q.order_by(Medicine.created_at.desc(), Medicine.id.desc()), page, limit)
    return MedicineList(
        medicines=[_with_order_count(db, m) for m in medicines],
        pagination=pagination,
    )


@router.post("/medicines", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
def admin_create_medicine(
    data: AdminMedicineCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Slug comes from the name; SKU is generated when not supplied."""
    actor = require_role(claims, STAFF_ROLES)
    catalog_service.require_category(db, data.category_id)
    if data.brand_id is not None:
        catalog_service.require_brand(db, data.brand_id)

    slug = catalog_service.slugify(data.name)
    if db.query(Medicine).filter(Medicine.slug == slug).first():
        raise BusinessError.conflict("Medicine with this name already exists")

    sku = data.sku or catalog_service.generate_sku()
    if db.query(Medicine).filter(Medicine.sku == sku).first():
        raise BusinessError.conflict("Medicine with this SKU already exists")

    fields = data.model_dump(exclude={"sku"})
    medicine = Medicine(**fields, slug=slug, sku=sku)
    db.add(medicine)
    db.commit()
    db.refresh(medicine)

    AuditLog.log_action("create", "medicine", medicine.id, actor, changes={"slug": slug, "sku": sku})
    return _with_order_count(db, medicine)


@router.get("/medicines/{medicine_id}", response_model=MedicineResponse)
def admin_get_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)
    return _with_order_count(db, _get_medicine(db, medicine_id))


@router.put("/medicines/{medicine_id}", response_model=MedicineResponse)
def admin_update_medicine(
    medicine_id: int,
    data: MedicineUpdate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    """Partial update. Renaming re-derives the slug."""
    actor = require_role(claims, STAFF_ROLES)
    medicine = _get_medicine(db, medicine_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("category_id") is not None:
        catalog_service.require_category(db, updates["category_id"])
    if updates.get("brand_id") is not None:
        catalog_service.require_brand(db, updates["brand_id"])

    if updates.get("name"):
        slug = catalog_service.slugify(updates["name"])
        clash = db.query(Medicine).filter(Medicine.slug == slug, Medicine.id != medicine.id).first()
        if clash:
            raise BusinessError.conflict("Medicine with this name already exists")
        updates["slug"] = slug

    for field, value in updates.items():
        setattr(medicine, field, value)
    db.commit()
    db.refresh(medicine)

    AuditLog.log_action("update", "medicine", medicine.id, actor, changes=updates)
    return _with_order_count(db, medicine)


@router.delete("/medicines/{medicine_id}", response_model=MessageResponse)
def admin_delete_medicine(
    medicine_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    medicine = _get_medicine(db, medicine_id)

    if _order_item_count(db, medicine.id) > 0:
        raise BusinessError.bad_request(
            "Cannot delete medicine with existing orders. Consider deactivating instead."
        )

    db.delete(medicine)
    db.commit()

    AuditLog.log_action("delete", "medicine", medicine_id, actor)
    return MessageResponse(message="Medicine deleted successfully")


# ==============================================================================
# CATEGORIES
# ==============================================================================

def _get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise BusinessError.not_found("Category")
    return category


def _medicine_count(db: Session, column, value: int) -> int:
    return db.query(func.count(Medicine.id)).filter(column == value).scalar() or 0


def _category_response(db: Session, category: Category) -> CategoryResponse:
    item = CategoryResponse.model_validate(category)
    item.medicine_count = _medicine_count(db, Medicine.category_id, category.id)
    return item


def _check_category_unique(db: Session, name: str, slug: str, exclude_id: Optional[int] = None):
    q = db.query(Category).filter(or_(Category.name == name, Category.slug == slug))
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise BusinessError.conflict("Category with this name or slug already exists")


@router.get("/categories", response_model=CategoryList)
def admin_list_categories(
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)
    categories = db.query(Category).order_by(Category.name).all()
    return CategoryList(categories=[_category_response(db, c) for c in categories])


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def admin_create_category(
    data: CategoryCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    slug = catalog_service.slugify(data.name)
    _check_category_unique(db, data.name, slug)
    if data.parent_id is not None and not db.query(Category).filter(Category.id == data.parent_id).first():
        raise BusinessError.bad_request("Parent category does not exist")

    category = Category(**data.model_dump(), slug=slug)
    db.add(category)
    db.commit()
    db.refresh(category)

    AuditLog.log_action("create", "category", category.id, actor, changes={"slug": slug})
    return _category_response(db, category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def admin_update_category(
    category_id: int,
    data: CategoryUpdate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    category = _get_category(db, category_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("name"):
        updates["slug"] = catalog_service.slugify(updates["name"])
        _check_category_unique(db, updates["name"], updates["slug"], exclude_id=category.id)
    if updates.get("parent_id") is not None:
        if updates["parent_id"] == category.id:
            raise BusinessError.bad_request("Category cannot be its own parent")
        _get_category(db, updates["parent_id"])

    for field, value in updates.items():
        setattr(category, field, value)
    db.commit()
    db.refresh(category)

    AuditLog.log_action("update", "category", category.id, actor, changes=updates)
    return _category_response(db, category)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
def admin_delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    category = _get_category(db, category_id)

    if _medicine_count(db, Medicine.category_id, category.id) > 0:
        raise BusinessError.bad_request("Cannot delete category with medicines")
    if db.query(Category).filter(Category.parent_id == category.id).first():
        raise BusinessError.bad_request("Cannot delete category with subcategories")

    db.delete(category)
    db.commit()

    AuditLog.log_action("delete", "category", category_id, actor)
    return MessageResponse(message="Category deleted successfully")


# ==============================================================================
# BRANDS
# ==============================================================================

def _get_brand(db: Session, brand_id: int) -> Brand:
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise BusinessError.not_found("Brand")
    return brand


def _brand_response(db: Session, brand: Brand) -> BrandResponse:
    item = BrandResponse.model_validate(brand)
    item.medicine_count = _medicine_count(db, Medicine.brand_id, brand.id)
    return item


def _check_brand_unique(db: Session, name: str, slug: str, exclude_id: Optional[int] = None):
    q = db.query(Brand).filter(or_(Brand.name == name, Brand.slug == slug))
    if exclude_id is not None:
        q = q.filter(Brand.id != exclude_id)
    if q.first():
        raise BusinessError.conflict("Brand with this name or slug already exists")


@router.get("/brands", response_model=BrandList)
def admin_list_brands(
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    require_role(claims, STAFF_ROLES)
    brands = db.query(Brand).order_by(Brand.name).all()
    return BrandList(brands=[_brand_response(db, b) for b in brands])


@router.post("/brands", response_model=BrandResponse, status_code=status.HTTP_201_CREATED)
def admin_create_brand(
    data: BrandCreate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    slug = catalog_service.slugify(data.name)
    _check_brand_unique(db, data.name, slug)

    brand = Brand(**data.model_dump(), slug=slug)
    db.add(brand)
    db.commit()
    db.refresh(brand)

    AuditLog.log_action("create", "brand", brand.id, actor, changes={"slug": slug})
    return _brand_response(db, brand)


@router.put("/brands/{brand_id}", response_model=BrandResponse)
def admin_update_brand(
    brand_id: int,
    data: BrandUpdate,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    brand = _get_brand(db, brand_id)
    updates = data.model_dump(exclude_unset=True)

    if updates.get("name"):
        updates["slug"] = catalog_service.slugify(updates["name"])
        _check_brand_unique(db, updates["name"], updates["slug"], exclude_id=brand.id)

    for field, value in updates.items():
        setattr(brand, field, value)
    db.commit()
    db.refresh(brand)

    AuditLog.log_action("update", "brand", brand.id, actor, changes=updates)
    return _brand_response(db, brand)


@router.delete("/brands/{brand_id}", response_model=MessageResponse)
def admin_delete_brand(
    brand_id: int,
    db: Session = Depends(get_db),
    claims: Optional[TokenPayload] = Depends(authenticate),
):
    actor = require_role(claims, ADMIN_ONLY)
    brand = _get_brand(db, brand_id)

    if _medicine_count(db, Medicine.brand_id, brand.id) > 0:
        raise BusinessError.bad_request("Cannot delete brand with medicines")

    db.delete(brand)
    db.commit()

    AuditLog.log_action("delete", "brand", brand_id, actor)
    return MessageResponse(message="Brand deleted successfully")
