import re
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from medora.core.config import settings
from medora.models.enums import PrescriptionStatus, Role
from medora.schemas.common import CamelModel, Pagination, reject_null
from medora.schemas.refs import OrderSummary

PHONE_PATTERN = r"^[0-9]{10,15}$"


def _check_password_strength(v: str) -> str:
    if len(v) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must contain at least one number")
    return v


class UserCreate(CamelModel):
    name: str = Field(min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    password: str

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password_strength(v)

    @model_validator(mode="after")
    def email_or_phone(self):
        if not self.email and not self.phone:
            raise ValueError("Either email or phone is required")
        return self


class UserLogin(CamelModel):
    email_or_phone: str = Field(min_length=1)
    password: str = Field(min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    image: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return reject_null(v)


class ChangePassword(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        return _check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserResponse(CamelModel):
    id: int
    email: Optional[str] = None
    phone: Optional[str] = None
    name: str
    role: Role
    image: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    email_verified: bool = False
    phone_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserEnvelope(CamelModel):
    user: UserResponse


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    refresh_token: str


class AccessTokenResponse(CamelModel):
    access_token: str


# ---------------------------------------------------------------------------
# Admin user management
# ---------------------------------------------------------------------------

class AdminUserListItem(UserResponse):
    order_count: int = 0
    review_count: int = 0
    prescription_count: int = 0


class AdminUserList(CamelModel):
    users: List[AdminUserListItem]
    pagination: Pagination


class AdminUserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2)
    role: Optional[Role] = None
    email_verified: Optional[bool] = None
    phone_verified: Optional[bool] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    @field_validator("name", "role", "email_verified", "phone_verified")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class UserPrescriptionSummary(CamelModel):
    id: int
    status: PrescriptionStatus
    created_at: Optional[datetime] = None


class UserReviewSummary(CamelModel):
    id: int
    rating: int
    comment: Optional[str] = None
    medicine_id: int
    medicine_name: Optional[str] = None
    created_at: Optional[datetime] = None


class AdminUserDetail(UserResponse):
    orders: List[OrderSummary] = []
    prescriptions: List[UserPrescriptionSummary] = []
    reviews: List[UserReviewSummary] = []
