from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from medora.db.base import Base


class Medicine(Base):
    """
    Catalog medicine.

    COMPLIANCE NOTE:
    - prescription_required: shown to the customer; prescriptions are uploaded and
      reviewed separately and may be attached to the order
    - Once ordered, a medicine cannot be hard-deleted; set active=False instead
    """
    __tablename__ = "medicines"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    generic_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    dosage = Column(String(128), nullable=True)
    form = Column(String(128), nullable=True)
    strength = Column(String(128), nullable=True)
    pack_size = Column(String(128), nullable=True)
    manufacturer = Column(String(255), nullable=True)
    price = Column(Float, nullable=False)
    discount_price = Column(Float, nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    prescription_required = Column(Boolean, default=False)
    featured = Column(Boolean, default=False)
    active = Column(Boolean, default=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)
    images = Column(JSON, nullable=False, default=list)
    uses = Column(Text, default="")
    side_effects = Column(Text, default="")
    warnings = Column(Text, default="")
    interactions = Column(Text, default="")
    contraindications = Column(Text, default="")
    sku = Column(String(64), unique=True, nullable=False)
    barcode = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="medicines")
    brand = relationship("Brand", back_populates="medicines")
    reviews = relationship("Review", back_populates="medicine", cascade="all, delete-orphan")
    order_items = relationship("OrderItem", back_populates="medicine")

    @property
    def effective_price(self) -> float:
        return self.price if self.discount_price is None else self.discount_price
