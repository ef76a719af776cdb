from datetime import datetime
from typing import List, Optional

from pydantic import Field, conint, field_validator

from medora.schemas.common import CamelModel, Pagination, reject_null
from medora.schemas.refs import BrandRef, CategoryRef, ReviewerRef


class MedicineCreate(CamelModel):
    """Full catalog entry, every descriptive field required."""
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    generic_name: str = Field(min_length=1)
    description: str = Field(min_length=10)
    dosage: str = Field(min_length=1)
    form: str = Field(min_length=1)
    strength: str = Field(min_length=1)
    pack_size: str = Field(min_length=1)
    manufacturer: str = Field(min_length=1)
    price: float = Field(gt=0)
    discount_price: Optional[float] = Field(default=None, gt=0)
    stock: int = Field(ge=0)
    prescription_required: bool
    featured: Optional[bool] = None
    active: Optional[bool] = None
    category_id: int
    brand_id: Optional[int] = None
    images: List[str] = Field(min_length=1)
    uses: str = Field(min_length=10)
    side_effects: str = Field(min_length=10)
    warnings: str = Field(min_length=10)
    interactions: Optional[str] = None
    contraindications: Optional[str] = None
    sku: str = Field(min_length=1)
    barcode: Optional[str] = None


class AdminMedicineCreate(CamelModel):
    """Back-office form: slug is derived from the name, SKU generated when blank."""
    name: str = Field(min_length=1)
    generic_name: str = Field(min_length=1)
    description: str = ""
    dosage: Optional[str] = None
    form: Optional[str] = None
    strength: Optional[str] = None
    pack_size: Optional[str] = None
    manufacturer: Optional[str] = None
    price: float = Field(gt=0)
    discount_price: Optional[float] = Field(default=None, gt=0)
    stock: int = Field(default=0, ge=0)
    prescription_required: bool = False
    featured: bool = False
    active: bool = True
    category_id: int
    brand_id: Optional[int] = None
    images: List[str] = []
    uses: str = ""
    side_effects: str = ""
    warnings: str = ""
    interactions: str = ""
    contraindications: str = ""
    sku: Optional[str] = None
    barcode: Optional[str] = None


class MedicineUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    generic_name: Optional[str] = None
    description: Optional[str] = None
    dosage: Optional[str] = None
    form: Optional[str] = None
    strength: Optional[str] = None
    pack_size: Optional[str] = None
    manufacturer: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    discount_price: Optional[float] = Field(default=None, gt=0)
    stock: Optional[int] = Field(default=None, ge=0)
    prescription_required: Optional[bool] = None
    featured: Optional[bool] = None
    active: Optional[bool] = None
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    images: Optional[List[str]] = None
    uses: Optional[str] = None
    side_effects: Optional[str] = None
    warnings: Optional[str] = None
    interactions: Optional[str] = None
    contraindications: Optional[str] = None
    barcode: Optional[str] = None

    @field_validator(
        "name", "generic_name", "description", "price", "stock", "category_id", "images",
        "prescription_required", "featured", "active",
    )
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class MedicineResponse(CamelModel):
    id: int
    name: str
    slug: str
    generic_name: str
    description: str = ""
    dosage: Optional[str] = None
    form: Optional[str] = None
    strength: Optional[str] = None
    pack_size: Optional[str] = None
    manufacturer: Optional[str] = None
    price: float
    discount_price: Optional[float] = None
    stock: int
    prescription_required: bool = False
    featured: bool = False
    active: bool = True
    category_id: int
    brand_id: Optional[int] = None
    images: List[str] = []
    uses: Optional[str] = None
    side_effects: Optional[str] = None
    warnings: Optional[str] = None
    interactions: Optional[str] = None
    contraindications: Optional[str] = None
    sku: str
    barcode: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategoryRef] = None
    brand: Optional[BrandRef] = None
    average_rating: Optional[float] = None
    review_count: Optional[int] = None
    order_item_count: Optional[int] = None


class MedicineList(CamelModel):
    medicines: List[MedicineResponse]
    pagination: Pagination


class ReviewCreate(CamelModel):
    rating: conint(ge=1, le=5)
    comment: Optional[str] = None


class ReviewResponse(CamelModel):
    id: int
    user_id: int
    medicine_id: int
    rating: int
    comment: Optional[str] = None
    verified: bool = False
    created_at: Optional[datetime] = None
    user: Optional[ReviewerRef] = None


class ReviewList(CamelModel):
    reviews: List[ReviewResponse]


class MedicineDetail(MedicineResponse):
    reviews: List[ReviewResponse] = []
