from sqlalchemy import Boolean, Column, DateTime, Enum as SAEnum, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from medora.db.base import Base
from medora.models.enums import Role


class User(Base):
    """
    Storefront account. Either email or phone identifies the user at login.

    Deletion is only allowed while the user owns no orders; refresh tokens,
    prescriptions and reviews go with the user.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(32), unique=True, nullable=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(SAEnum(Role), nullable=False, default=Role.CUSTOMER)
    email_verified = Column(Boolean, default=False)
    phone_verified = Column(Boolean, default=False)
    image = Column(Text, nullable=True)
    address = Column(String(512), nullable=True)
    city = Column(String(128), nullable=True)
    state = Column(String(128), nullable=True)
    zip_code = Column(String(32), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    orders = relationship("Order", back_populates="user")
    prescriptions = relationship(
        "Prescription",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="Prescription.user_id",
    )
    reviews = relationship("Review", back_populates="user", cascade="all, delete-orphan")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User id={self.id} role={self.role}>"
