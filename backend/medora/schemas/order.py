from datetime import datetime
from typing import List, Optional

from pydantic import Field

from medora.models.enums import OrderStatus, PaymentStatus
from medora.schemas.common import CamelModel, Pagination
from medora.schemas.refs import MedicineRef, PrescriptionRef, UserRef
from medora.schemas.user import PHONE_PATTERN


class OrderItemCreate(CamelModel):
    medicine_id: int
    quantity: int = Field(gt=0)
    price: Optional[float] = Field(default=None, ge=0)


class OrderCreate(CamelModel):
    """Checkout payload. Money fields are computed by the client and stored as sent."""
    items: List[OrderItemCreate] = Field(min_length=1)
    delivery_address: str = Field(min_length=10)
    delivery_city: str = Field(min_length=1)
    delivery_state: str = Field(min_length=1)
    delivery_zip_code: str = Field(min_length=4)
    delivery_phone: str = Field(pattern=PHONE_PATTERN)
    prescription_id: Optional[int] = None
    notes: Optional[str] = None
    payment_method: str = "cash"
    subtotal: Optional[float] = Field(default=None, ge=0)
    tax: float = Field(default=0.0, ge=0)
    delivery_fee: float = Field(default=0.0, ge=0)
    discount: float = Field(default=0.0, ge=0)
    total: float = Field(ge=0)


class OrderStatusUpdate(CamelModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    notes: Optional[str] = None


class OrderItemResponse(CamelModel):
    id: int
    medicine_id: int
    quantity: int
    price: float
    discount: float = 0.0
    total: float
    medicine: Optional[MedicineRef] = None


class OrderResponse(CamelModel):
    id: int
    order_number: str
    user_id: int
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    subtotal: float
    tax: float
    delivery_fee: float
    discount: float
    total: float
    delivery_address: str
    delivery_city: str
    delivery_state: str
    delivery_zip_code: str
    delivery_phone: str
    prescription_id: Optional[int] = None
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemResponse] = []
    user: Optional[UserRef] = None
    prescription: Optional[PrescriptionRef] = None


class OrderCreated(CamelModel):
    order_id: int
    order: OrderResponse


class OrderList(CamelModel):
    orders: List[OrderResponse]
    pagination: Pagination
