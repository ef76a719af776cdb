"""Small nested shapes embedded in larger responses (the "select" projections)."""
from datetime import datetime
from typing import List, Optional

from medora.models.enums import OrderStatus, PrescriptionStatus
from medora.schemas.common import CamelModel


class UserRef(CamelModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    image: Optional[str] = None


class ReviewerRef(CamelModel):
    id: int
    name: str
    image: Optional[str] = None


class CategoryRef(CamelModel):
    id: int
    name: str
    slug: str


class BrandRef(CamelModel):
    id: int
    name: str
    slug: str
    logo: Optional[str] = None


class MedicineRef(CamelModel):
    id: int
    name: str
    generic_name: str
    images: List[str] = []
    sku: Optional[str] = None
    stock: Optional[int] = None


class PrescriptionRef(CamelModel):
    id: int
    image: str
    status: PrescriptionStatus


class OrderSummary(CamelModel):
    id: int
    order_number: str
    status: OrderStatus
    total: float
    created_at: Optional[datetime] = None
