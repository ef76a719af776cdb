from datetime import datetime
from typing import List, Optional

from pydantic import Field

from medora.models.enums import PrescriptionStatus
from medora.schemas.common import CamelModel, Pagination
from medora.schemas.refs import OrderSummary, UserRef
from medora.schemas.user import PHONE_PATTERN


class PrescriptionCreate(CamelModel):
    image: str = Field(min_length=1)  # URL or data:image/...;base64,...
    patient_name: Optional[str] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    notes: Optional[str] = None


class PrescriptionReview(CamelModel):
    status: Optional[PrescriptionStatus] = None
    admin_notes: Optional[str] = None


class PrescriptionResponse(CamelModel):
    id: int
    user_id: int
    image: str
    patient_name: Optional[str] = None
    phone: Optional[str] = None
    status: PrescriptionStatus
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserRef] = None
    orders: Optional[List[OrderSummary]] = None


class PrescriptionList(CamelModel):
    prescriptions: List[PrescriptionResponse]
    pagination: Optional[Pagination] = None
